"""
Factory functions for creating test data.

``meal_log`` / ``symptom_log`` build in-memory records for the analyzers;
``create_meal`` / ``create_symptom`` persist rows through the session.
Persisted timestamps are stored as UTC, the way LogStore writes them.
Use db.flush() to get IDs without committing (for transaction rollback).
"""

import itertools
from datetime import datetime, timedelta
from typing import List, Optional, Sequence

from sqlalchemy.orm import Session

from nutrimood.models import Meal, Symptom
from nutrimood.services.local_time import to_utc
from nutrimood.services.schemas import MealLog, MoodLabel, SymptomLog


# Monday, noon (naive timestamps are read as local wall-clock time)
REFERENCE_NOW = datetime(2026, 3, 16, 12, 0)

_ids = itertools.count(1)


# =============================================================================
# In-memory Records
# =============================================================================


def meal_log(
    food_name: Optional[str] = "Oatmeal",
    mood: Optional[MoodLabel] = None,
    timestamp: Optional[datetime] = None,
    **overrides,
) -> MealLog:
    """
    Build a MealLog with sensible defaults.

    Args:
        food_name: Food name (None or blank makes a malformed record)
        mood: Mood after the meal
        timestamp: Meal time (defaults to REFERENCE_NOW)
        **overrides: Additional fields to override

    Returns:
        MealLog record
    """
    defaults = {
        "id": next(_ids),
        "timestamp": timestamp or REFERENCE_NOW,
        "food_name": food_name,
        "calories": 500,
        "protein_grams": 30,
        "carbs_grams": 50,
        "fats_grams": 15,
        "mood": mood,
    }
    defaults.update(overrides)
    return MealLog(**defaults)


def meals_with_moods(
    food_name: str,
    moods: Sequence[Optional[MoodLabel]],
    start: Optional[datetime] = None,
    **overrides,
) -> List[MealLog]:
    """One meal per mood, an hour apart starting at ``start``."""
    start = start or REFERENCE_NOW
    return [
        meal_log(food_name, mood, timestamp=start + timedelta(hours=i), **overrides)
        for i, mood in enumerate(moods)
    ]


def symptom_log(
    symptom_type: str = "bloating",
    linked_meal_id=None,
    intensity: int = 3,
    hours_after_meal: float = 1.0,
    **overrides,
) -> SymptomLog:
    defaults = {
        "id": next(_ids),
        "timestamp": REFERENCE_NOW,
        "symptom_type": symptom_type,
        "intensity": intensity,
        "hours_after_meal": hours_after_meal,
        "linked_meal_id": linked_meal_id,
    }
    defaults.update(overrides)
    return SymptomLog(**defaults)


# =============================================================================
# Persisted Rows
# =============================================================================


def create_meal(
    db: Session,
    food_name: Optional[str] = "Oatmeal",
    mood: Optional[str] = None,
    timestamp: Optional[datetime] = None,
    **overrides,
) -> Meal:
    """Create a meal row with sensible defaults."""
    defaults = {
        "food_name": food_name,
        "calories": 500,
        "protein_grams": 30.0,
        "carbs_grams": 50.0,
        "fats_grams": 15.0,
        "mood": mood,
        "timestamp": to_utc(timestamp or REFERENCE_NOW),
    }
    defaults.update(overrides)

    meal = Meal(**defaults)
    db.add(meal)
    db.flush()
    return meal


def create_symptom(
    db: Session,
    symptom_type: str = "bloating",
    linked_meal: Optional[Meal] = None,
    timestamp: Optional[datetime] = None,
    **overrides,
) -> Symptom:
    """Create a symptom row, optionally linked to a meal."""
    defaults = {
        "symptom_type": symptom_type,
        "intensity": 3,
        "hours_after_meal": 1.0,
        "linked_meal_id": linked_meal.id if linked_meal else None,
        "timestamp": to_utc(timestamp or REFERENCE_NOW),
    }
    defaults.update(overrides)

    symptom = Symptom(**defaults)
    db.add(symptom)
    db.flush()
    return symptom
