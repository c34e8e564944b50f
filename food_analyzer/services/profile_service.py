"""Business logic for saving, loading and deleting health profiles."""

import logging
import re
from dataclasses import dataclass
from datetime import date
from typing import Literal, Optional

from food_analyzer.exceptions import InputValidationError, ProfileExistsError, StorageError
from food_analyzer.schemas import EnrichmentRecord, HealthProfile, utcnow
from food_analyzer.services.change_detector import has_any_profile_change, needs_enrichment
from food_analyzer.services.enrichment_service import EnrichmentService
from food_analyzer.services.profile_repository import ProfileRepository

logger = logging.getLogger(__name__)

HEALTH_INPUT_RE = re.compile(r"^[a-zA-Z0-9\s,.-]*$")


@dataclass
class SaveOutcome:
    """Result of a profile save."""

    profile: HealthProfile
    status: Literal["created", "updated", "unchanged"]
    enriched: bool = False
    enrichment: Optional[EnrichmentRecord] = None


def validate_profile(profile: HealthProfile) -> None:
    """
    Reject drafts that must never reach storage or the search backend.

    Raises:
        InputValidationError: Missing user id or malformed field
    """
    if not profile.user_id or not profile.user_id.strip():
        raise InputValidationError("Please enter a user ID")

    for label, value in (
        ("Food allergy", profile.food_allergy),
        ("Existing disease", profile.existing_disease),
        ("Other health condition", profile.other_health_condition),
    ):
        if not HEALTH_INPUT_RE.match(value or ""):
            raise InputValidationError(
                f"{label} may only contain letters, numbers, spaces, commas, periods and hyphens"
            )

    if profile.weight <= 0:
        raise InputValidationError("Weight must be a positive number")
    if profile.height <= 0:
        raise InputValidationError("Height must be a positive number")
    if profile.date_of_birth > date.today():
        raise InputValidationError("Date of birth cannot be in the future")


class ProfileService:
    """Service for profile-related operations."""

    def __init__(self, repository: ProfileRepository, enrichment_service: EnrichmentService):
        self.repository = repository
        self.enrichment_service = enrichment_service

    def save_profile(self, draft: HealthProfile, editing: bool = False) -> SaveOutcome:
        """
        Save a profile and refresh its web enrichment when the conditions changed.

        Args:
            draft: Profile as entered by the user
            editing: True when updating an existing profile

        Returns:
            SaveOutcome describing what happened

        Raises:
            InputValidationError: Draft failed validation (nothing was written)
            ProfileExistsError: Creating a profile whose user id is taken
            StorageError: The profile could not be written
        """
        validate_profile(draft)

        previous = self.repository.load(draft.user_id)

        if not editing and self.repository.exists(draft.user_id):
            raise ProfileExistsError(
                "A profile with this user ID already exists. "
                "Please use a different user ID or edit the existing profile."
            )

        if editing and previous is not None and not has_any_profile_change(previous, draft):
            logger.info("No changes detected for profile %s", draft.user_id)
            return SaveOutcome(profile=previous, status="unchanged")

        profile = draft.model_copy(update={"last_updated": utcnow()})
        if not self.repository.save(profile.user_id, profile):
            raise StorageError("Failed to save profile. Please try again.")

        outcome = SaveOutcome(profile=profile, status="updated" if previous else "created")

        if needs_enrichment(previous, profile):
            logger.info("Condition lists changed for %s, refreshing web data", profile.user_id)
            outcome.enrichment = self.enrichment_service.enrich(
                profile.condition_lists(), user_id=profile.user_id
            )
            outcome.enriched = True

        return outcome

    def load_profile(self, user_id: str) -> Optional[HealthProfile]:
        if not user_id or not user_id.strip():
            raise InputValidationError("Please enter a user ID")
        return self.repository.load(user_id)

    def list_profiles(self) -> list[HealthProfile]:
        return self.repository.list_all()

    def delete_profile(self, user_id: str) -> bool:
        return self.repository.delete(user_id)
