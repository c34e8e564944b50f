"""
Pydantic models for the health profile, cached web enrichment and analysis output.

HealthProfile and EnrichmentRecord are persisted as JSON in the key-value store;
the remaining models are transient and only live for one analysis session.
"""

from datetime import date, datetime, timezone
from enum import Enum
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def calculate_age(birth_date: date, today: Optional[date] = None) -> int:
    """Whole years between birth_date and today, birthday-aware."""
    today = today or date.today()
    age = today.year - birth_date.year
    if (today.month, today.day) < (birth_date.month, birth_date.day):
        age -= 1
    return age


def format_measurement(value: float, unit_label: str) -> str:
    """Combine a numeric value and its unit into a display string ("70 kg")."""
    text = str(value)
    if text.endswith(".0"):
        text = text[:-2]
    return f"{text} {unit_label}"


# --- Health profile ---


class Gender(str, Enum):
    MALE = "Male"
    FEMALE = "Female"
    OTHER = "Other"


class WeightUnit(str, Enum):
    KG = "KG"
    LBS = "lbs"


class HeightUnit(str, Enum):
    CM = "cm"
    INCH = "inch"


WEIGHT_LABELS = {WeightUnit.KG: "kg", WeightUnit.LBS: "lbs"}
HEIGHT_LABELS = {HeightUnit.CM: "cm", HeightUnit.INCH: "inch"}


class HealthProfile(BaseModel):
    user_id: str
    date_of_birth: date
    gender: Gender = Gender.MALE
    weight: float
    weight_unit: WeightUnit = WeightUnit.KG
    height: float
    height_unit: HeightUnit = HeightUnit.CM
    food_allergy: str = ""
    existing_disease: str = ""
    other_health_condition: str = ""
    last_updated: datetime = Field(default_factory=utcnow)

    @property
    def age(self) -> int:
        return calculate_age(self.date_of_birth)

    @property
    def weight_display(self) -> str:
        return format_measurement(self.weight, WEIGHT_LABELS[self.weight_unit])

    @property
    def height_display(self) -> str:
        return format_measurement(self.height, HEIGHT_LABELS[self.height_unit])

    def condition_lists(self) -> "ConditionLists":
        return ConditionLists(
            allergy=self.food_allergy,
            disease=self.existing_disease,
            other=self.other_health_condition,
        )

    def summary(self) -> str:
        """Human-readable summary shown after a profile is created or loaded."""
        return (
            f"User ID: {self.user_id}\n"
            f"Age: {self.age} years\n"
            f"Gender: {self.gender.value}\n"
            f"Weight: {self.weight_display}\n"
            f"Height: {self.height_display}\n"
            f"\n"
            f"Food Allergies: {self.food_allergy or 'None'}\n"
            f"Existing Diseases: {self.existing_disease or 'None'}\n"
            f"Other Health Conditions: {self.other_health_condition or 'None'}"
        )


class ConditionLists(BaseModel):
    """The three comma-separated condition fields that drive web enrichment."""

    allergy: str = ""
    disease: str = ""
    other: str = ""


# --- Web enrichment (search_<userId>) ---


ConditionCategory = Literal["disease", "condition", "allergy"]


class WebResult(BaseModel):
    url: str
    title: str = "No title available"
    description: str = "No description available"
    content: str = ""


class ConditionSearchResult(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    condition: str
    category: ConditionCategory = Field(alias="type")
    results: list[WebResult] = Field(default_factory=list)
    status: Literal["success", "error"] = "success"


class EnrichmentRecord(BaseModel):
    success: bool = True
    total_content: str = ""
    search_results: list[ConditionSearchResult] = Field(default_factory=list)
    total_conditions: int = 0
    successful_searches: int = 0
    timestamp: datetime = Field(default_factory=utcnow)


# --- Analysis output (transient) ---


class AnalysisResult(BaseModel):
    food_name: str
    food_ingredients: str
    health_analysis: str


class AnalysisSection(BaseModel):
    title: str
    content: list[str] = Field(default_factory=list)


class TextFragment(BaseModel):
    kind: Literal["text", "link"]
    content: str
    url: Optional[str] = None
