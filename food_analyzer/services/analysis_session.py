"""
In-memory state for one food analysis session.

The session owns the loaded profile, the two package photos and the latest
result. Front and back photos are analysed concurrently and joined before the
health analysis, which needs both texts. ``reset()`` bumps the session epoch so
that a run still in flight discards its result instead of overwriting the
cleared state.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from food_analyzer.exceptions import InputValidationError
from food_analyzer.schemas import AnalysisResult, AnalysisSection, HealthProfile
from food_analyzer.services.ai_service import ClaudeService
from food_analyzer.services.analysis_formatter import parse_sections
from food_analyzer.services.credentials_service import ApiKeys
from food_analyzer.services.profile_repository import ProfileRepository

logger = logging.getLogger(__name__)


@dataclass
class AnalysisSession:
    repository: ProfileRepository
    claude_service: ClaudeService
    api_keys: ApiKeys = field(default_factory=ApiKeys)

    user_id: Optional[str] = None
    profile: Optional[HealthProfile] = None
    front_image: Optional[str] = None
    back_image: Optional[str] = None
    result: Optional[AnalysisResult] = None
    is_analyzing: bool = False
    epoch: int = 0

    def load_profile(self, user_id: str) -> Optional[HealthProfile]:
        """Load a saved profile into the session; None if not found."""
        self.user_id = user_id
        self.profile = self.repository.load(user_id)
        return self.profile

    def set_images(self, front_image: Optional[str], back_image: Optional[str]) -> None:
        self.front_image = front_image
        self.back_image = back_image

    def reset(self) -> None:
        """Clear photos and results; in-flight runs will be discarded."""
        self.epoch += 1
        self.front_image = None
        self.back_image = None
        self.result = None
        self.is_analyzing = False

    def _validate(self) -> None:
        if not self.front_image or not self.back_image:
            raise InputValidationError("Please provide both front and back photos of the food packet")
        for image in (self.front_image, self.back_image):
            if not Path(image).is_file():
                raise InputValidationError(f"Photo not found: {image}")
        if not self.api_keys.configured:
            raise InputValidationError("Please configure your API keys first")
        if self.profile is None:
            raise InputValidationError("Please save or load your profile before analyzing food")

    def _load_corpus(self) -> str:
        record = self.repository.load_enrichment(self.profile.user_id)
        if record is None:
            logger.info("No web data found for %s, proceeding without it", self.profile.user_id)
            return ""
        return record.total_content

    async def _extract_package_text(self, front_image: str, back_image: str) -> tuple[str, str]:
        """Identify the product and extract its ingredients concurrently."""
        try:
            async with asyncio.TaskGroup() as group:
                name_task = group.create_task(self.claude_service.identify_food_product(front_image))
                ingredient_task = group.create_task(self.claude_service.extract_ingredients(back_image))
        except ExceptionGroup as group_error:
            # Report the first backend failure rather than the group wrapper
            raise group_error.exceptions[0] from group_error
        return name_task.result(), ingredient_task.result()

    async def run(self) -> Optional[AnalysisResult]:
        """
        Analyse the current photos against the loaded profile.

        Returns:
            The AnalysisResult, or None if the session was reset meanwhile
            (a failure from a reset run is dropped as well)

        Raises:
            InputValidationError: Missing photos, keys or profile (no call made)
            TransportError: The AI service failed
        """
        self._validate()

        epoch = self.epoch
        profile = self.profile
        front_image, back_image = self.front_image, self.back_image
        corpus = self._load_corpus()

        self.is_analyzing = True
        try:
            food_name, food_ingredients = await self._extract_package_text(front_image, back_image)
            health_analysis = await self.claude_service.analyze_health(
                profile, food_name, food_ingredients, corpus
            )
        except Exception:
            if epoch != self.epoch:
                logger.info("Session was reset during analysis, discarding error")
                return None
            raise
        finally:
            if epoch == self.epoch:
                self.is_analyzing = False

        if epoch != self.epoch:
            logger.info("Session was reset during analysis, discarding result")
            return None

        self.result = AnalysisResult(
            food_name=food_name,
            food_ingredients=food_ingredients,
            health_analysis=health_analysis,
        )
        return self.result

    def sections(self) -> dict[str, list[AnalysisSection]]:
        """Parsed sections for each block of the current result."""
        if self.result is None:
            return {}
        return {
            "Product Information": parse_sections(self.result.food_name),
            "Ingredients": parse_sections(self.result.food_ingredients),
            "Health Analysis": parse_sections(self.result.health_analysis),
        }
