"""
Decide whether a profile edit needs fresh web enrichment or any write at all.

These are two different questions with two different comparators:
- needs_enrichment: only the condition lists pick which web pages are relevant
- has_any_profile_change: any field the user can edit, used to skip a no-op save
"""

from typing import Optional

from food_analyzer.schemas import HealthProfile

CONDITION_FIELDS = ("food_allergy", "existing_disease", "other_health_condition")


def _conditions_differ(previous: HealthProfile, draft: HealthProfile) -> bool:
    return any(
        (getattr(previous, name) or "").strip() != (getattr(draft, name) or "").strip()
        for name in CONDITION_FIELDS
    )


def needs_enrichment(previous: Optional[HealthProfile], draft: HealthProfile) -> bool:
    """True on first save or when any condition list differs after trimming."""
    if previous is None:
        return True
    return _conditions_differ(previous, draft)


def has_any_profile_change(previous: Optional[HealthProfile], draft: HealthProfile) -> bool:
    """True on first save or when any editable field differs."""
    if previous is None:
        return True
    return (
        previous.date_of_birth != draft.date_of_birth
        or previous.gender != draft.gender
        or float(previous.weight) != float(draft.weight)
        or previous.weight_unit != draft.weight_unit
        or float(previous.height) != float(draft.height)
        or previous.height_unit != draft.height_unit
        or _conditions_differ(previous, draft)
    )
