"""Persistence of meal and symptom logs, and snapshots for the analyzers."""

import logging
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Iterable, List, Optional, Tuple

from pydantic import ValidationError
from sqlalchemy.orm import Session

from nutrimood.config import require_positive
from nutrimood.models import Meal, Symptom
from nutrimood.services.local_time import to_utc
from nutrimood.services.schemas import MealLog, MoodLabel, SymptomLog


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LogSnapshot:
    """Point-in-time copy of the logs; analyzers never see live rows."""

    meals: Tuple[MealLog, ...] = field(default_factory=tuple)
    symptoms: Tuple[SymptomLog, ...] = field(default_factory=tuple)


def _as_utc(ts: Optional[datetime]) -> Optional[datetime]:
    # Writes go through to_utc, so naive values coming back from SQLite are UTC
    if ts is not None and ts.tzinfo is None:
        return ts.replace(tzinfo=timezone.utc)
    return ts


def meal_to_log(meal: Meal) -> MealLog:
    return MealLog(
        id=meal.id,
        timestamp=_as_utc(meal.timestamp),
        food_name=meal.food_name,
        calories=meal.calories or 0,
        protein_grams=meal.protein_grams or 0.0,
        carbs_grams=meal.carbs_grams or 0.0,
        fats_grams=meal.fats_grams or 0.0,
        mood=meal.mood,
    )


def symptom_to_log(symptom: Symptom) -> SymptomLog:
    return SymptomLog(
        id=symptom.id,
        timestamp=_as_utc(symptom.timestamp),
        symptom_type=symptom.symptom_type,
        intensity=symptom.intensity,
        hours_after_meal=symptom.hours_after_meal or 0.0,
        linked_meal_id=symptom.linked_meal_id,
        notes=symptom.notes or "",
    )


def coerce_meal_logs(records: Iterable[Dict[str, Any]]) -> List[MealLog]:
    """
    Validate raw meal records, dropping the ones that cannot be parsed.

    Records that parse but lack a food name are kept; analyzers skip them.
    """
    logs = []
    skipped = []
    for idx, record in enumerate(records):
        try:
            logs.append(MealLog.model_validate(record))
        except ValidationError as e:
            skipped.append((idx, e.error_count()))

    if skipped:
        logger.warning("Skipped %d invalid meal record(s)", len(skipped))
        for idx, errors in skipped:
            logger.warning("  - Record %d: %d validation error(s)", idx, errors)
    return logs


def coerce_symptom_logs(records: Iterable[Dict[str, Any]]) -> List[SymptomLog]:
    """Validate raw symptom records, dropping the ones that cannot be parsed."""
    logs = []
    skipped = []
    for idx, record in enumerate(records):
        try:
            logs.append(SymptomLog.model_validate(record))
        except ValidationError as e:
            skipped.append((idx, e.error_count()))

    if skipped:
        logger.warning("Skipped %d invalid symptom record(s)", len(skipped))
        for idx, errors in skipped:
            logger.warning("  - Record %d: %d validation error(s)", idx, errors)
    return logs


class LogStore:
    """Repository for meal and symptom logs backed by a SQLAlchemy session."""

    def __init__(self, db: Session):
        self.db = db

    def add_meal(
        self,
        food_name: Optional[str],
        calories: int = 0,
        protein_grams: float = 0.0,
        carbs_grams: float = 0.0,
        fats_grams: float = 0.0,
        mood: Optional[str] = None,
        timestamp: Optional[datetime] = None,
    ) -> Meal:
        """
        Log a confirmed meal.

        Args:
            food_name: Dish name as confirmed by the user
            calories: Estimated kcal
            protein_grams: Estimated protein
            carbs_grams: Estimated carbohydrates
            fats_grams: Estimated fat
            mood: Optional MoodLabel value
            timestamp: Meal time (defaults to now)

        Returns:
            Created Meal row
        """
        meal = Meal(
            food_name=food_name,
            calories=calories,
            protein_grams=protein_grams,
            carbs_grams=carbs_grams,
            fats_grams=fats_grams,
            mood=MoodLabel.parse(mood).value if mood else None,
            timestamp=to_utc(timestamp) if timestamp else datetime.now(timezone.utc),
        )
        self.db.add(meal)
        self.db.commit()
        self.db.refresh(meal)
        logger.info("Logged meal %s (%s)", meal.id, food_name)
        return meal

    def get_meal(self, meal_id: int) -> Optional[Meal]:
        return self.db.query(Meal).filter(Meal.id == meal_id).first()

    def attach_mood(self, meal_id: int, mood: str) -> Optional[Meal]:
        """Record how the user felt after a meal; returns None if the meal is gone."""
        meal = self.get_meal(meal_id)
        if meal is None:
            return None

        meal.mood = MoodLabel.parse(mood).value
        self.db.commit()
        self.db.refresh(meal)
        return meal

    def delete_meal(self, meal_id: int) -> bool:
        """Delete a meal. Linked symptoms are left in place."""
        meal = self.get_meal(meal_id)
        if meal is None:
            return False

        self.db.delete(meal)
        self.db.commit()
        logger.info("Deleted meal %s", meal_id)
        return True

    def add_symptom(
        self,
        symptom_type: str,
        intensity: int = 3,
        hours_after_meal: float = 0.0,
        linked_meal_id: Optional[int] = None,
        notes: str = "",
        timestamp: Optional[datetime] = None,
    ) -> Symptom:
        """Log a symptom, optionally linked to the meal suspected of causing it."""
        symptom = Symptom(
            symptom_type=symptom_type,
            intensity=intensity,
            hours_after_meal=hours_after_meal,
            linked_meal_id=linked_meal_id,
            notes=notes,
            timestamp=to_utc(timestamp) if timestamp else datetime.now(timezone.utc),
        )
        self.db.add(symptom)
        self.db.commit()
        self.db.refresh(symptom)
        logger.info("Logged symptom %s (%s)", symptom.id, symptom_type)
        return symptom

    def get_symptoms_for_meal(self, meal_id: int) -> List[Symptom]:
        return (
            self.db.query(Symptom)
            .filter(Symptom.linked_meal_id == meal_id)
            .order_by(Symptom.timestamp.desc())
            .all()
        )

    def delete_symptom(self, symptom_id: int) -> bool:
        symptom = self.db.query(Symptom).filter(Symptom.id == symptom_id).first()
        if symptom is None:
            return False

        self.db.delete(symptom)
        self.db.commit()
        return True

    def symptom_timeline(
        self, days: int = 7, now: Optional[datetime] = None
    ) -> List[Symptom]:
        """Symptoms logged in the trailing ``days`` days, newest first."""
        require_positive("days", days)
        end = to_utc(now) if now else datetime.now(timezone.utc)
        start = end - timedelta(days=days)

        return (
            self.db.query(Symptom)
            .filter(Symptom.timestamp >= start)
            .order_by(Symptom.timestamp.desc(), Symptom.id.desc())
            .all()
        )

    def snapshot(self, since: Optional[datetime] = None) -> LogSnapshot:
        """
        Copy all logs (optionally from ``since`` onward) into immutable records.

        Rows that fail validation are logged and left out of the snapshot.
        """
        meal_query = self.db.query(Meal)
        symptom_query = self.db.query(Symptom)
        if since is not None:
            since = to_utc(since)
            meal_query = meal_query.filter(Meal.timestamp >= since)
            symptom_query = symptom_query.filter(Symptom.timestamp >= since)

        meals = []
        for meal in meal_query.order_by(Meal.timestamp.asc(), Meal.id.asc()):
            try:
                meals.append(meal_to_log(meal))
            except ValidationError:
                logger.warning("Meal %s failed validation, leaving it out", meal.id)

        symptoms = []
        for symptom in symptom_query.order_by(Symptom.timestamp.asc(), Symptom.id.asc()):
            try:
                symptoms.append(symptom_to_log(symptom))
            except ValidationError:
                logger.warning("Symptom %s failed validation, leaving it out", symptom.id)

        return LogSnapshot(meals=tuple(meals), symptoms=tuple(symptoms))
