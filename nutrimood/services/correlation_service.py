"""Food-mood and food-symptom correlation analysis."""

import logging
from typing import Dict, List, Set

from nutrimood.config import require_positive, settings
from nutrimood.services.schemas import (
    FoodCorrelation,
    MealLog,
    SensitivityReport,
    SymptomFoodCorrelation,
    SymptomLog,
)


logger = logging.getLogger(__name__)


def _food_correlation(food_name: str, counts: Dict[str, int]) -> FoodCorrelation:
    occurrences = counts["occurrences"]
    return FoodCorrelation(
        food_name=food_name,
        occurrences=occurrences,
        negative_count=counts["negative"],
        positive_count=counts["positive"],
        neutral_count=counts["neutral"],
        negative_ratio=counts["negative"] / occurrences if occurrences else 0.0,
        positive_ratio=counts["positive"] / occurrences if occurrences else 0.0,
    )


class CorrelationAnalyzer:
    """Classifies foods as triggers or safe, and links symptoms back to foods."""

    # Thresholds (loaded from central config)
    MIN_OCCURRENCES = settings.sensitivity_min_occurrences
    TRIGGER_NEGATIVE_RATIO = settings.trigger_negative_ratio
    SAFE_POSITIVE_RATIO = settings.safe_positive_ratio
    MENU_TRIGGER_MIN_OCCURRENCES = settings.menu_trigger_min_occurrences

    def food_mood_counts(self, meal_logs: List[MealLog]) -> Dict[str, FoodCorrelation]:
        """
        Tally mood outcomes per food name in a single pass.

        Returns a dict in first-seen order. Logs without a food name or mood
        carry no outcome and are skipped.
        """
        counts: Dict[str, Dict[str, int]] = {}
        skipped = 0

        for log in meal_logs:
            if not log.is_well_formed or log.mood is None:
                skipped += 1
                continue

            food = counts.setdefault(
                log.food_name,
                {"occurrences": 0, "negative": 0, "positive": 0, "neutral": 0},
            )
            food["occurrences"] += 1
            if log.mood.is_negative:
                food["negative"] += 1
            elif log.mood.is_positive:
                food["positive"] += 1
            else:
                food["neutral"] += 1

        if skipped:
            logger.debug("Skipped %d meal logs without food name or mood", skipped)

        return {name: _food_correlation(name, data) for name, data in counts.items()}

    def sensitivity_report(self, meal_logs: List[MealLog]) -> SensitivityReport:
        """
        Split foods into triggers and safe foods.

        A trigger needs at least MIN_OCCURRENCES logs and a negative ratio
        above TRIGGER_NEGATIVE_RATIO; a safe food the same count and a
        positive ratio above SAFE_POSITIVE_RATIO. Both lists are sorted by
        occurrences, most frequent first, with ties kept in first-seen order.
        """
        correlations = self.food_mood_counts(meal_logs).values()

        triggers = [
            c
            for c in correlations
            if c.occurrences >= self.MIN_OCCURRENCES
            and c.negative_ratio > self.TRIGGER_NEGATIVE_RATIO
        ]
        safe = [
            c
            for c in correlations
            if c.occurrences >= self.MIN_OCCURRENCES
            and c.positive_ratio > self.SAFE_POSITIVE_RATIO
        ]

        triggers.sort(key=lambda c: c.occurrences, reverse=True)
        safe.sort(key=lambda c: c.occurrences, reverse=True)

        return SensitivityReport(triggers=triggers, safe=safe)

    def symptom_correlations(
        self, symptom_logs: List[SymptomLog], meal_logs: List[MealLog]
    ) -> Dict[str, List[SymptomFoodCorrelation]]:
        """
        Group linked symptoms by type and food.

        Symptoms without a linked meal, or whose meal no longer exists or has
        no name, are skipped. Intensity and delay are kept as running means.

        Returns:
            Dict of symptom type -> correlations sorted by occurrences descending.
        """
        meals_by_id = {log.id: log for log in meal_logs}
        grouped: Dict[str, Dict[str, Dict[str, float]]] = {}

        for symptom in symptom_logs:
            if symptom.linked_meal_id is None:
                continue

            meal = meals_by_id.get(symptom.linked_meal_id)
            if meal is None or not meal.is_well_formed:
                logger.debug(
                    "Symptom %s links to missing meal %s, skipping",
                    symptom.id,
                    symptom.linked_meal_id,
                )
                continue

            foods = grouped.setdefault(symptom.symptom_type, {})
            data = foods.setdefault(
                meal.food_name, {"count": 0, "avg_intensity": 0.0, "avg_delay": 0.0}
            )
            data["count"] += 1
            n = data["count"]
            data["avg_intensity"] = (
                data["avg_intensity"] * (n - 1) + symptom.intensity
            ) / n
            data["avg_delay"] = (
                data["avg_delay"] * (n - 1) + symptom.hours_after_meal
            ) / n

        correlations = {}
        for symptom_type, foods in grouped.items():
            rows = [
                SymptomFoodCorrelation(
                    food_name=food_name,
                    occurrences=data["count"],
                    avg_intensity=data["avg_intensity"],
                    avg_delay_hours=data["avg_delay"],
                )
                for food_name, data in foods.items()
            ]
            rows.sort(key=lambda r: r.occurrences, reverse=True)
            correlations[symptom_type] = rows

        return correlations

    def menu_trigger_foods(
        self,
        symptom_logs: List[SymptomLog],
        meal_logs: List[MealLog],
        min_occurrences: int = None,
    ) -> Set[str]:
        """
        Lower-cased foods linked to any one symptom at least ``min_occurrences`` times.

        Deliberately looser than the sensitivity report: it feeds the
        avoid/caution verdicts shown when logging meals or scanning menus.
        """
        if min_occurrences is None:
            min_occurrences = self.MENU_TRIGGER_MIN_OCCURRENCES
        require_positive("min_occurrences", min_occurrences)

        trigger_foods = set()
        for rows in self.symptom_correlations(symptom_logs, meal_logs).values():
            for row in rows:
                if row.occurrences >= min_occurrences:
                    trigger_foods.add(row.food_name.lower())
        return trigger_foods


correlation_analyzer = CorrelationAnalyzer()
