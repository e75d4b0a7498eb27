"""Combines the analyzers into ranked insights and per-food mood predictions."""

import logging
from typing import List, Optional

from nutrimood.config import settings
from nutrimood.services.correlation_service import (
    CorrelationAnalyzer,
    correlation_analyzer,
)
from nutrimood.services.deficiency_service import DeficiencyDetector, deficiency_detector
from nutrimood.services.schemas import Insight, MealLog, MoodPrediction, SymptomLog
from nutrimood.services.statistics_service import round_half_up
from nutrimood.services.temporal_service import (
    TemporalPatternDetector,
    temporal_pattern_detector,
)


logger = logging.getLogger(__name__)

GOOD_PREDICTION_PERCENT = 70
BAD_PREDICTION_PERCENT = 30

# Offline substitutions keyed by a substring of the problem food
COMMON_SUBSTITUTIONS = {
    "dairy": ["Almond milk", "Oat milk", "Coconut yogurt"],
    "bread": ["Rice cakes", "Gluten-free bread", "Lettuce wraps"],
    "pasta": ["Zucchini noodles", "Rice noodles", "Quinoa"],
    "sugar": ["Honey", "Maple syrup", "Stevia"],
}
FALLBACK_SUBSTITUTIONS = ["Consult a nutritionist", "Try elimination diet", "Keep tracking"]


class InsightComposer:
    """Entry point for "what should the user know right now"."""

    MIN_MEAL_LOGS = settings.insights_min_meal_logs
    SYMPTOM_WARNING_MIN_OCCURRENCES = settings.menu_trigger_min_occurrences

    def __init__(
        self,
        correlations: Optional[CorrelationAnalyzer] = None,
        temporal: Optional[TemporalPatternDetector] = None,
        deficiencies: Optional[DeficiencyDetector] = None,
    ):
        self.correlations = correlations or correlation_analyzer
        self.temporal = temporal or temporal_pattern_detector
        self.deficiencies = deficiencies or deficiency_detector

    def compose_insights(
        self, meal_logs: List[MealLog], symptom_logs: List[SymptomLog]
    ) -> List[Insight]:
        """
        Build the ranked insight list.

        Order is fixed: trigger food, safe food, worst weekday, first
        deficiency, then the most frequent symptom-linked food. Each source
        contributes at most one insight. Fewer than MIN_MEAL_LOGS meals
        yields an empty list; the caller shows its own "keep logging" hint.
        """
        if len(meal_logs) < self.MIN_MEAL_LOGS:
            logger.debug(
                "Only %d meal logs, need %d for insights",
                len(meal_logs),
                self.MIN_MEAL_LOGS,
            )
            return []

        insights = []

        report = self.correlations.sensitivity_report(meal_logs)
        if report.triggers:
            trigger = report.triggers[0]
            insights.append(
                Insight(
                    kind="warning",
                    title="Trigger Food Detected",
                    message=(
                        f'You\'ve logged "{trigger.food_name}" {trigger.occurrences} times, '
                        f"and {round_half_up(trigger.negative_ratio * 100)}% of the time "
                        "you felt bad after. Consider trying alternatives!"
                    ),
                    actionable=True,
                    actions=["Find alternatives", "Learn more"],
                )
            )

        if report.safe:
            safe = report.safe[0]
            insights.append(
                Insight(
                    kind="suggestion",
                    title="Safe Food Found",
                    message=(
                        f'"{safe.food_name}" makes you feel good '
                        f"{round_half_up(safe.positive_ratio * 100)}% of the time! "
                        "Add it to your meal plan."
                    ),
                    actionable=True,
                    actions=["Add to plan"],
                )
            )

        worst_days = self.temporal.worst_days(meal_logs)
        if worst_days:
            insights.append(
                Insight(
                    kind="pattern",
                    title="Weekly Pattern",
                    message=(
                        f"Your mood tends to be lower on {worst_days[0].day}s. "
                        "Try a protein-rich breakfast to boost energy!"
                    ),
                    actionable=False,
                )
            )

        deficiencies = self.deficiencies.detect_deficiencies(meal_logs)
        if deficiencies:
            deficiency = deficiencies[0]
            unit = "g " if deficiency.nutrient == "Protein" else " "
            insights.append(
                Insight(
                    kind="warning",
                    title=f"Low {deficiency.nutrient}",
                    message=(
                        f"You're averaging {round_half_up(deficiency.observed_avg)}{unit}"
                        f"{deficiency.nutrient.lower()} per meal "
                        f"(target: {round_half_up(deficiency.target)})."
                    ),
                    actionable=True,
                    actions=["See recommendations"],
                )
            )

        symptom_insight = self._symptom_insight(symptom_logs, meal_logs)
        if symptom_insight:
            insights.append(symptom_insight)

        return insights

    def _symptom_insight(
        self, symptom_logs: List[SymptomLog], meal_logs: List[MealLog]
    ) -> Optional[Insight]:
        best_type, best = None, None
        for symptom_type, rows in self.correlations.symptom_correlations(
            symptom_logs, meal_logs
        ).items():
            top = rows[0]
            if top.occurrences < self.SYMPTOM_WARNING_MIN_OCCURRENCES:
                continue
            if best is None or top.occurrences > best.occurrences:
                best_type, best = symptom_type, top

        if best is None:
            return None

        return Insight(
            kind="warning",
            title="Symptom Link Found",
            message=(
                f'"{best.food_name}" was followed by {best_type} {best.occurrences} times, '
                f"about {best.avg_delay_hours:.1f} hours after eating "
                f"(average intensity {best.avg_intensity:.1f}/5)."
            ),
            actionable=True,
            actions=["Find alternatives"],
        )

    def predict_mood(self, food_name: str, meal_logs: List[MealLog]) -> MoodPrediction:
        """
        Predict how a planned food will make the user feel.

        Looks at every logged meal whose name contains ``food_name``
        (case-insensitive). Neutral moods are left out of the ratio.
        """
        query = (food_name or "").strip().lower()
        similar = [
            log
            for log in meal_logs
            if query and log.is_well_formed and query in log.food_name.lower()
        ]

        if not similar:
            return MoodPrediction(
                prediction="unknown",
                confidence=0,
                sample_size=0,
                message=f'No data for "{food_name}" yet. Try it and see how you feel!',
            )

        good = sum(1 for log in similar if log.mood is not None and log.mood.is_positive)
        bad = sum(1 for log in similar if log.mood is not None and log.mood.is_negative)
        total = good + bad

        if total == 0:
            return MoodPrediction(
                prediction="neutral",
                confidence=0,
                sample_size=0,
                message=f'Your logs of "{food_name}" have no clear good or bad moods yet.',
            )

        good_percentage = good / total * 100
        if good_percentage > GOOD_PREDICTION_PERCENT:
            prediction = "good"
        elif good_percentage < BAD_PREDICTION_PERCENT:
            prediction = "bad"
        else:
            prediction = "neutral"

        confidence = round_half_up(good_percentage)
        return MoodPrediction(
            prediction=prediction,
            confidence=confidence,
            sample_size=total,
            message=(
                f"Based on {total} previous logs, you feel good after "
                f'"{food_name}" {confidence}% of the time.'
            ),
        )

    def suggest_substitutions(self, food_name: str) -> List[str]:
        """Offline alternatives for a food the user reacts badly to."""
        lowered = (food_name or "").lower()
        for key, substitutions in COMMON_SUBSTITUTIONS.items():
            if key in lowered:
                return list(substitutions)
        return list(FALLBACK_SUBSTITUTIONS)


insight_composer = InsightComposer()
