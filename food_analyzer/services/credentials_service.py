"""API key storage, key validation and first-run initialisation."""

import asyncio
import logging
from dataclasses import dataclass
from typing import Optional

from food_analyzer.config import settings
from food_analyzer.exceptions import InputValidationError, TransportError
from food_analyzer.services.ai_service import ClaudeService
from food_analyzer.services.kv_store import KeyValueStore
from food_analyzer.services.search_service import SerpApiClient

logger = logging.getLogger(__name__)

FIRST_RUN_KEY = "app_first_run"
ANTHROPIC_KEY = "api_key_anthropic"
SERPAPI_KEY = "api_key_serpapi"


@dataclass
class ApiKeys:
    anthropic: str = ""
    serpapi: str = ""

    @property
    def configured(self) -> bool:
        return bool(self.anthropic and self.serpapi)


class CredentialsService:
    """Keys saved in the local store take precedence over settings/environment."""

    def __init__(self, store: KeyValueStore):
        self.store = store

    def initialize_first_run(self) -> bool:
        """
        Clear any leftover data the first time the app runs on this store.

        Returns True if this was the first run.
        """
        if self.store.get(FIRST_RUN_KEY) is not None:
            return False

        logger.info("First run detected, clearing local store")
        self.store.clear()
        self.store.set(FIRST_RUN_KEY, "false")
        return True

    def save_api_keys(self, anthropic_key: str, serpapi_key: str) -> ApiKeys:
        if not anthropic_key or not serpapi_key:
            raise InputValidationError("Both API keys are required")
        self.store.set(ANTHROPIC_KEY, anthropic_key.strip())
        self.store.set(SERPAPI_KEY, serpapi_key.strip())
        return ApiKeys(anthropic=anthropic_key.strip(), serpapi=serpapi_key.strip())

    def load_api_keys(self) -> ApiKeys:
        return ApiKeys(
            anthropic=self.store.get(ANTHROPIC_KEY) or settings.anthropic_api_key,
            serpapi=self.store.get(SERPAPI_KEY) or settings.serpapi_api_key,
        )

    def api_keys_configured(self) -> bool:
        return self.load_api_keys().configured


def verify_api_keys(
    keys: ApiKeys,
    claude_service: Optional[ClaudeService] = None,
    search_client: Optional[SerpApiClient] = None,
) -> tuple[bool, str]:
    """
    Probe both backends with the given keys.

    Returns:
        (valid, message) tuple
    """
    claude_service = claude_service or ClaudeService(api_key=keys.anthropic)
    search_client = search_client or SerpApiClient(api_key=keys.serpapi)

    try:
        if not asyncio.run(claude_service.check_api_key()):
            return False, "API key validation failed: Anthropic API key was rejected"
    except TransportError as e:
        return False, f"API key validation failed: Anthropic API error: {e}"

    try:
        search_client.search("test", 1)
    except TransportError as e:
        return False, f"API key validation failed: {e}"

    return True, "Both API keys are valid!"
