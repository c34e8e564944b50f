"""
Claude AI integration for food package analysis.

This service provides three AI capabilities:
1. Front-of-package identification (name, type, health claim)
2. Back-of-package ingredient and nutrient extraction
3. Health analysis correlating ingredients with the user's profile and cached web data

Requests are not retried automatically: a failed analysis is reported to the
user, who may run it again.
"""

import base64
import logging
from pathlib import Path
from typing import Optional

import anthropic
import httpx
from anthropic import AsyncAnthropic

from food_analyzer.config import settings
from food_analyzer.exceptions import RateLimitError, RequestError, ServiceUnavailableError
from food_analyzer.schemas import HealthProfile
from food_analyzer.services.prompts import (
    FOOD_IDENTIFICATION_SYSTEM_PROMPT,
    FOOD_IDENTIFICATION_USER_PROMPT,
    HEALTH_ANALYSIS_SYSTEM_PROMPT,
    INGREDIENT_EXTRACTION_SYSTEM_PROMPT,
    INGREDIENT_EXTRACTION_USER_PROMPT,
    build_health_analysis_message,
)

logger = logging.getLogger(__name__)


class ClaudeService:
    """Centralized Claude API integration for all AI features."""

    def __init__(self, api_key: Optional[str] = None, client: Optional[AsyncAnthropic] = None):
        timeout = httpx.Timeout(
            timeout=settings.anthropic_timeout,
            connect=settings.anthropic_connect_timeout,
        )
        self.client = client or AsyncAnthropic(
            api_key=api_key if api_key is not None else settings.anthropic_api_key,
            timeout=timeout,
            max_retries=0,
        )
        self.model = settings.analysis_model

    async def _complete(self, system: str, content, max_tokens: int) -> str:
        """
        Single completion request at temperature 0, returning the joined text blocks.

        Raises:
            ServiceUnavailableError: AI service temporarily down
            RateLimitError: Too many requests
            RequestError: The request was rejected
            ValueError: The response contained no text
        """
        try:
            response = await self.client.messages.create(
                model=self.model,
                max_tokens=max_tokens,
                temperature=0.0,
                system=system,
                messages=[{"role": "user", "content": content}],
            )
        except anthropic.APIConnectionError as e:
            raise ServiceUnavailableError("AI service temporarily unavailable") from e
        except anthropic.RateLimitError as e:
            raise RateLimitError(
                "Too many requests, please try again in 1 minute"
            ) from e
        except anthropic.APIStatusError as e:
            logger.error("AI API error (%s): %s", e.status_code, e.message)
            if e.status_code >= 500:
                raise ServiceUnavailableError("AI service error") from e
            raise RequestError(f"Request error: {e.message}") from e

        text = "".join(block.text for block in response.content if hasattr(block, "text"))
        if not text.strip():
            raise ValueError("No text content in AI response")
        return text.strip()

    # =========================================================================
    # PACKAGE IMAGES
    # =========================================================================

    async def identify_food_product(self, image_path: str) -> str:
        """
        Identify the product on the front of the package.

        Returns:
            Free text with the product name, product type and any health claim
        """
        content = [
            self._image_block(image_path),
            {"type": "text", "text": FOOD_IDENTIFICATION_USER_PROMPT},
        ]
        return await self._complete(
            FOOD_IDENTIFICATION_SYSTEM_PROMPT, content, settings.identify_max_tokens
        )

    async def extract_ingredients(self, image_path: str) -> str:
        """
        Extract ingredients and nutrients from the back of the package.

        Returns:
            Free text listing the ingredients and nutrients
        """
        content = [
            self._image_block(image_path),
            {"type": "text", "text": INGREDIENT_EXTRACTION_USER_PROMPT},
        ]
        return await self._complete(
            INGREDIENT_EXTRACTION_SYSTEM_PROMPT, content, settings.ingredients_max_tokens
        )

    # =========================================================================
    # HEALTH ANALYSIS
    # =========================================================================

    async def analyze_health(
        self,
        profile: HealthProfile,
        food_name: str,
        food_ingredients: str,
        enrichment_corpus: str = "",
    ) -> str:
        """
        Correlate the product's ingredients with the user's profile.

        One request carrying both extracted texts, the full profile and the
        cached web corpus. The answer covers claim/ingredient discrepancies,
        benefits, drawbacks, per-source citations, a reference list and a
        consult-a-professional caution.

        Args:
            profile: Saved health profile
            food_name: Front-of-package identification text
            food_ingredients: Back-of-package ingredient text
            enrichment_corpus: Cached web data for the user's conditions

        Returns:
            Free-form analysis text
        """
        message = build_health_analysis_message(
            profile, food_name, food_ingredients, enrichment_corpus
        )
        return await self._complete(
            HEALTH_ANALYSIS_SYSTEM_PROMPT,
            [{"type": "text", "text": message}],
            settings.health_analysis_max_tokens,
        )

    async def check_api_key(self) -> bool:
        """Minimal request to confirm the API key is accepted."""
        try:
            await self.client.messages.create(
                model=self.model,
                max_tokens=5,
                messages=[{"role": "user", "content": "Hello"}],
            )
            return True
        except anthropic.AuthenticationError:
            return False
        except anthropic.RateLimitError:
            # Throttled, but the key itself was accepted
            return True
        except anthropic.APIConnectionError as e:
            raise ServiceUnavailableError("AI service temporarily unavailable") from e
        except anthropic.APIStatusError as e:
            if e.status_code >= 500:
                raise ServiceUnavailableError("AI service error") from e
            raise RequestError(f"Request error: {e.message}") from e

    # =========================================================================
    # HELPER METHODS
    # =========================================================================

    def _image_block(self, image_path: str) -> dict:
        return {
            "type": "image",
            "source": {
                "type": "base64",
                "media_type": self._get_media_type(image_path),
                "data": self._load_image_base64(image_path),
            },
        }

    def _load_image_base64(self, image_path: str) -> str:
        """Load image file and encode as base64."""
        with open(image_path, "rb") as f:
            return base64.standard_b64encode(f.read()).decode("utf-8")

    def _get_media_type(self, image_path: str) -> str:
        """Determine media type from file extension."""
        suffix = Path(image_path).suffix.lower()
        media_types = {
            ".jpg": "image/jpeg",
            ".jpeg": "image/jpeg",
            ".png": "image/png",
            ".gif": "image/gif",
            ".webp": "image/webp",
        }
        return media_types.get(suffix, "image/jpeg")
