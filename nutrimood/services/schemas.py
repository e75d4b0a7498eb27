"""
Pydantic models for the records the engine consumes and the values it derives.

Input records (MealLog, SymptomLog) mirror what the log store hands out.
Everything else is recomputed on each query and never persisted.
"""

import re
from datetime import datetime
from enum import Enum
from typing import Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator


_LEADING_NUMBER = re.compile(r"^\s*(-?\d+(?:\.\d+)?)")


def _parse_amount(value):
    """Accept 20, 20.5, "20", "20g" or "300kcal"; blanks become 0."""
    if value is None or value == "":
        return 0
    if isinstance(value, str):
        match = _LEADING_NUMBER.match(value)
        return float(match.group(1)) if match else 0
    return value


# --- Mood and symptom vocabularies ---


class MoodLabel(str, Enum):
    VERY_BAD = "Very Bad"
    BAD = "Bad"
    NEUTRAL = "Neutral"
    GOOD = "Good"
    FEEL_OK = "Feel OK"

    @property
    def is_positive(self) -> bool:
        return self in (MoodLabel.GOOD, MoodLabel.FEEL_OK)

    @property
    def is_negative(self) -> bool:
        return self in (MoodLabel.VERY_BAD, MoodLabel.BAD)

    @classmethod
    def parse(cls, value) -> "MoodLabel":
        """Resolve a label case- and space-insensitively ("VeryBad", "feel ok")."""
        if isinstance(value, cls):
            return value
        key = str(value).replace(" ", "").replace("_", "").lower()
        for label in cls:
            if label.value.replace(" ", "").lower() == key:
                return label
        raise ValueError(f"Unknown mood label: {value!r}")


class SymptomType(str, Enum):
    BLOATING = "bloating"
    HEADACHE = "headache"
    ENERGY_CRASH = "energyCrash"
    ENERGIZED = "energized"
    TIRED = "tired"
    HEARTBURN = "heartburn"
    NAUSEA = "nausea"
    DIGESTIVE = "digestive"

    @property
    def display_name(self) -> str:
        return SYMPTOM_TYPE_NAMES[self]


SYMPTOM_TYPE_NAMES = {
    SymptomType.BLOATING: "Bloating",
    SymptomType.HEADACHE: "Headache",
    SymptomType.ENERGY_CRASH: "Energy Crash",
    SymptomType.ENERGIZED: "Energized",
    SymptomType.TIRED: "Tired",
    SymptomType.HEARTBURN: "Heartburn",
    SymptomType.NAUSEA: "Nausea",
    SymptomType.DIGESTIVE: "Digestive Issues",
}


# --- Log records ---


class MealLog(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: Union[int, str]
    timestamp: datetime
    food_name: Optional[str] = None
    calories: int = 0
    protein_grams: float = 0.0
    carbs_grams: float = 0.0
    fats_grams: float = 0.0
    mood: Optional[MoodLabel] = None

    @field_validator("calories", mode="before")
    @classmethod
    def _coerce_calories(cls, value):
        try:
            return int(_parse_amount(value))
        except (TypeError, ValueError) as e:
            raise ValueError(f"calories must be numeric, got {value!r}") from e

    @field_validator("protein_grams", "carbs_grams", "fats_grams", mode="before")
    @classmethod
    def _coerce_macros(cls, value):
        return _parse_amount(value)

    @field_validator("mood", mode="before")
    @classmethod
    def _coerce_mood(cls, value):
        if value is None or value == "":
            return None
        return MoodLabel.parse(value)

    @property
    def is_well_formed(self) -> bool:
        return bool(self.food_name and self.food_name.strip())


class SymptomLog(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: Union[int, str]
    timestamp: datetime
    symptom_type: str
    intensity: int = Field(default=3, ge=1, le=5)
    hours_after_meal: float = Field(default=0.0, ge=0)
    linked_meal_id: Optional[Union[int, str]] = None
    notes: str = ""

    @field_validator("symptom_type", mode="before")
    @classmethod
    def _coerce_symptom_type(cls, value):
        if isinstance(value, SymptomType):
            return value.value
        return value


# --- Statistics ---


class WeeklySummary(BaseModel):
    total_calories: int = 0
    avg_daily_calories: int = 0
    mood_counts: dict[MoodLabel, int] = {}
    total_entries: int = 0


class NutrientTrend(BaseModel):
    avg_calories: float
    avg_protein: float
    avg_carbs: float
    avg_fats: float
    count: int


class EngagementStats(BaseModel):
    total_logs: int = 0
    total_moods: int = 0
    unique_moods: int = 0
    unique_foods: int = 0
    current_streak: int = 0
    good_mood_streak: int = 0


# --- Correlations ---


class FoodCorrelation(BaseModel):
    food_name: str
    occurrences: int
    negative_count: int
    positive_count: int
    neutral_count: int
    negative_ratio: float
    positive_ratio: float


class SensitivityReport(BaseModel):
    triggers: list[FoodCorrelation] = []
    safe: list[FoodCorrelation] = []


class SymptomFoodCorrelation(BaseModel):
    food_name: str
    occurrences: int
    avg_intensity: float
    avg_delay_hours: float


# --- Temporal patterns ---


class TemporalBucket(BaseModel):
    key: Union[int, str]
    total: int
    negative_count: int
    positive_count: int
    negative_ratio: float


class DayPattern(BaseModel):
    day: str
    negative_ratio: float


# --- Deficiencies ---


class DeficiencyFinding(BaseModel):
    nutrient: str
    observed_avg: float
    target: float
    severity: Literal["low", "medium", "high"]


# --- Trigger matching ---


class TriggerVerdict(BaseModel):
    item_name: str
    status: Literal["safe", "caution", "avoid"]
    matched_terms: set[str] = set()
    confidence: float = Field(ge=0, le=1)
    reason: str = ""


class MenuItemVerdict(BaseModel):
    name: str
    raw_text: str
    verdict: TriggerVerdict


# --- Insights ---


class Insight(BaseModel):
    kind: Literal["warning", "suggestion", "pattern"]
    title: str
    message: str
    actionable: bool
    actions: list[str] = []


class MoodPrediction(BaseModel):
    prediction: Literal["good", "neutral", "bad", "unknown"]
    confidence: int = Field(ge=0, le=100)
    sample_size: int = 0
    message: str = ""
