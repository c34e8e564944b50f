"""
Best-effort persistence of health profiles and their cached web enrichment.

Profiles live under ``profile_<userId>`` and enrichment records under
``search_<userId>``. Storage and decoding failures are logged and converted to
None / False / empty results; nothing here raises to the caller.
"""

import json
import logging
from datetime import date, datetime
from typing import Optional

from pydantic import ValidationError

from food_analyzer.exceptions import StorageError
from food_analyzer.schemas import EnrichmentRecord, HealthProfile
from food_analyzer.services.kv_store import KeyValueStore

logger = logging.getLogger(__name__)

PROFILE_PREFIX = "profile_"
SEARCH_PREFIX = "search_"

_WEIGHT_SUFFIXES = {"kg": "KG", "lbs": "lbs", "lb": "lbs"}
_HEIGHT_SUFFIXES = {"cm": "cm", "inch": "inch", "in": "inch", "ft": "inch"}


def profile_key(user_id: str) -> str:
    return f"{PROFILE_PREFIX}{user_id}"


def search_key(user_id: str) -> str:
    return f"{SEARCH_PREFIX}{user_id}"


def _measurement_value(stored) -> float:
    """Parse the numeric part of a stored display string like "70 kg"."""
    if isinstance(stored, (int, float)):
        return float(stored)
    try:
        return float(str(stored).split()[0])
    except (ValueError, IndexError):
        digits = "".join(c for c in str(stored) if c.isdigit() or c == ".")
        return float(digits)


def profile_to_record(profile: HealthProfile) -> dict:
    return {
        "userID": profile.user_id,
        "dateOfBirth": profile.date_of_birth.isoformat(),
        "age": profile.age,
        "gender": profile.gender.value,
        "weight": profile.weight_display,
        "weightUnit": profile.weight_unit.value,
        "height": profile.height_display,
        "heightUnit": profile.height_unit.value,
        "foodAllergy": profile.food_allergy,
        "existingDisease": profile.existing_disease,
        "otherHealthCondition": profile.other_health_condition,
        "lastUpdated": profile.last_updated.isoformat(),
    }


def _stored_unit(record: dict, unit_key: str, display_key: str, suffixes: dict, default: str) -> str:
    """Unit from the record, else from the display string's suffix ("150 lbs")."""
    if record.get(unit_key):
        return record[unit_key]
    parts = str(record.get(display_key, "")).split()
    if len(parts) > 1:
        return suffixes.get(parts[-1].lower(), default)
    return default


def profile_from_record(record: dict) -> HealthProfile:
    # Older records stored a full ISO datetime for the date of birth
    dob = record["dateOfBirth"]
    if "T" in dob:
        dob = datetime.fromisoformat(dob.replace("Z", "+00:00")).date().isoformat()

    return HealthProfile(
        user_id=record["userID"],
        date_of_birth=date.fromisoformat(dob),
        gender=record["gender"],
        weight=_measurement_value(record["weight"]),
        weight_unit=_stored_unit(record, "weightUnit", "weight", _WEIGHT_SUFFIXES, "KG"),
        height=_measurement_value(record["height"]),
        height_unit=_stored_unit(record, "heightUnit", "height", _HEIGHT_SUFFIXES, "cm"),
        food_allergy=record.get("foodAllergy") or "",
        existing_disease=record.get("existingDisease") or "",
        other_health_condition=record.get("otherHealthCondition") or "",
        last_updated=record["lastUpdated"],
    )


class ProfileRepository:
    """CRUD over health profiles keyed by user id."""

    def __init__(self, store: KeyValueStore):
        self.store = store

    def save(self, user_id: str, profile: HealthProfile) -> bool:
        try:
            self.store.set(profile_key(user_id), json.dumps(profile_to_record(profile)))
            return True
        except StorageError as e:
            logger.error("Error saving profile %s: %s", user_id, e)
            return False

    def load(self, user_id: str) -> Optional[HealthProfile]:
        try:
            raw = self.store.get(profile_key(user_id))
        except StorageError as e:
            logger.error("Error loading profile %s: %s", user_id, e)
            return None

        if raw is None:
            return None

        try:
            return profile_from_record(json.loads(raw))
        except (ValueError, KeyError, TypeError, ValidationError) as e:
            logger.error("Stored profile %s is unreadable: %s", user_id, e)
            return None

    def exists(self, user_id: str) -> bool:
        try:
            return self.store.get(profile_key(user_id)) is not None
        except StorageError as e:
            logger.error("Error checking if profile %s exists: %s", user_id, e)
            return False

    def list_all_ids(self) -> list[str]:
        try:
            keys = self.store.list_keys()
        except StorageError as e:
            logger.error("Error listing profile ids: %s", e)
            return []
        return [key[len(PROFILE_PREFIX):] for key in keys if key.startswith(PROFILE_PREFIX)]

    def list_all(self) -> list[HealthProfile]:
        """Every readable profile; unreadable records are skipped."""
        profiles = []
        for user_id in self.list_all_ids():
            profile = self.load(user_id)
            if profile is not None:
                profiles.append(profile)
        return profiles

    def delete(self, user_id: str) -> bool:
        """Delete a profile and its cached enrichment. False if it never existed."""
        try:
            deleted = self.store.delete(profile_key(user_id))
            if deleted:
                self.store.delete(search_key(user_id))
            return deleted
        except StorageError as e:
            logger.error("Error deleting profile %s: %s", user_id, e)
            return False

    # =========================================================================
    # ENRICHMENT CACHE (search_<userId>)
    # =========================================================================

    def save_enrichment(self, user_id: str, record: EnrichmentRecord) -> bool:
        try:
            self.store.set(search_key(user_id), record.model_dump_json(by_alias=True))
            return True
        except StorageError as e:
            logger.error("Error saving search results for %s: %s", user_id, e)
            return False

    def load_enrichment(self, user_id: str) -> Optional[EnrichmentRecord]:
        try:
            raw = self.store.get(search_key(user_id))
        except StorageError as e:
            logger.error("Error loading search results for %s: %s", user_id, e)
            return None

        if raw is None:
            return None

        try:
            return EnrichmentRecord.model_validate_json(raw)
        except ValidationError as e:
            logger.error("Stored search results for %s are unreadable: %s", user_id, e)
            return None
