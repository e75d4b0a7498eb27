"""Nutrient shortfall detection over the most recent meal entries."""

import logging
from typing import List

from nutrimood.config import require_positive, settings
from nutrimood.services.local_time import to_local_naive
from nutrimood.services.schemas import DeficiencyFinding, MealLog


logger = logging.getLogger(__name__)


class DeficiencyDetector:
    """
    Flags low protein and calorie intake.

    The window is a count of entries, not of days: averages are per logged
    meal over the last ``window`` well-formed logs.
    """

    WINDOW_ENTRIES = settings.deficiency_window_entries
    PROTEIN_FLOOR = settings.protein_floor_grams
    PROTEIN_TARGET = settings.protein_target_grams
    CALORIE_FLOOR = settings.calorie_floor
    CALORIE_TARGET = settings.calorie_target

    def recent_entries(self, meal_logs: List[MealLog], window: int) -> List[MealLog]:
        ordered = sorted(
            (log for log in meal_logs if log.is_well_formed),
            key=lambda log: to_local_naive(log.timestamp),
        )
        return ordered[-window:]

    def detect_deficiencies(
        self, meal_logs: List[MealLog], window: int = None
    ) -> List[DeficiencyFinding]:
        """Return protein then calorie findings; empty when there is nothing to average."""
        window = require_positive(
            "window", self.WINDOW_ENTRIES if window is None else window
        )

        recent = self.recent_entries(meal_logs, window)
        if not recent:
            return []

        avg_protein = sum(log.protein_grams for log in recent) / len(recent)
        avg_calories = sum(log.calories for log in recent) / len(recent)

        findings = []
        if avg_protein < self.PROTEIN_FLOOR:
            findings.append(
                DeficiencyFinding(
                    nutrient="Protein",
                    observed_avg=avg_protein,
                    target=self.PROTEIN_TARGET,
                    severity="high",
                )
            )
        if avg_calories < self.CALORIE_FLOOR:
            findings.append(
                DeficiencyFinding(
                    nutrient="Calories",
                    observed_avg=avg_calories,
                    target=self.CALORIE_TARGET,
                    severity="medium",
                )
            )

        if findings:
            logger.debug(
                "Deficiencies over last %d entries: %s",
                len(recent),
                ", ".join(f.nutrient for f in findings),
            )
        return findings


deficiency_detector = DeficiencyDetector()
