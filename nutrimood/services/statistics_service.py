"""Windowed aggregates over meal logs: weekly totals, per-mood nutrients and streaks."""

import logging
from collections import defaultdict
from datetime import date, datetime, timedelta
from decimal import Decimal, ROUND_HALF_UP
from typing import Dict, Iterable, List, Optional, Set

from nutrimood.config import settings
from nutrimood.services.local_time import local_now, local_today, to_local_naive
from nutrimood.services.schemas import (
    EngagementStats,
    MealLog,
    MoodLabel,
    NutrientTrend,
    WeeklySummary,
)


logger = logging.getLogger(__name__)

WEEK_DAYS = 7


def round_half_up(value: float) -> int:
    """Round .5 away from zero, as the mobile client displays totals."""
    return int(Decimal(str(value)).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def _logged_days(logs: Iterable[MealLog]) -> Set[date]:
    return {
        to_local_naive(log.timestamp).date() for log in logs if log.is_well_formed
    }


class StatisticsAggregator:
    """Aggregates that other analyzers and the goal tracker build on."""

    STREAK_HORIZON_DAYS = settings.streak_horizon_days

    def weekly_summary(
        self, logs: List[MealLog], now: Optional[datetime] = None
    ) -> WeeklySummary:
        """
        Summarize the trailing 7 days ending at ``now``.

        The daily average always divides by 7, even if the user only logged
        on some of those days.
        """
        cutoff = local_now(now) - timedelta(days=WEEK_DAYS)
        weekly_logs = [
            log
            for log in logs
            if log.is_well_formed and to_local_naive(log.timestamp) >= cutoff
        ]

        total_calories = sum(log.calories for log in weekly_logs)

        mood_counts: Dict[MoodLabel, int] = {}
        for log in weekly_logs:
            if log.mood is not None:
                mood_counts[log.mood] = mood_counts.get(log.mood, 0) + 1

        return WeeklySummary(
            total_calories=total_calories,
            avg_daily_calories=(
                round_half_up(total_calories / WEEK_DAYS) if weekly_logs else 0
            ),
            mood_counts=mood_counts,
            total_entries=len(weekly_logs),
        )

    def nutrient_trends_by_mood(
        self, logs: List[MealLog]
    ) -> Dict[MoodLabel, NutrientTrend]:
        """Average macros per mood label; moods with no logs are omitted."""
        sums = defaultdict(
            lambda: {"calories": 0.0, "protein": 0.0, "carbs": 0.0, "fats": 0.0, "count": 0}
        )

        for log in logs:
            if not log.is_well_formed or log.mood is None:
                continue
            bucket = sums[log.mood]
            bucket["calories"] += log.calories
            bucket["protein"] += log.protein_grams
            bucket["carbs"] += log.carbs_grams
            bucket["fats"] += log.fats_grams
            bucket["count"] += 1

        trends = {}
        for mood in MoodLabel:
            data = sums.get(mood)
            if not data or data["count"] == 0:
                continue
            count = data["count"]
            trends[mood] = NutrientTrend(
                avg_calories=data["calories"] / count,
                avg_protein=data["protein"] / count,
                avg_carbs=data["carbs"] / count,
                avg_fats=data["fats"] / count,
                count=count,
            )
        return trends

    def current_streak(
        self, logs: List[MealLog], today: Optional[date] = None
    ) -> int:
        """
        Count consecutive logged calendar days ending today or yesterday.

        Several logs on one day count once. The backward walk is capped at
        STREAK_HORIZON_DAYS.
        """
        days = _logged_days(logs)
        if not days:
            return 0

        today = local_today(today)
        if today in days:
            day = today
        elif today - timedelta(days=1) in days:
            day = today - timedelta(days=1)
        else:
            return 0

        streak = 0
        while day in days and streak < self.STREAK_HORIZON_DAYS:
            streak += 1
            day -= timedelta(days=1)
        return streak

    def good_mood_streak(self, logs: List[MealLog]) -> int:
        """
        Count consecutive most-recent days on which every recorded mood was positive.

        Only days with at least one mood count; a calendar gap ends the run.
        """
        moods_by_day: Dict[date, List[MoodLabel]] = defaultdict(list)
        for log in logs:
            if log.is_well_formed and log.mood is not None:
                moods_by_day[to_local_naive(log.timestamp).date()].append(log.mood)

        streak = 0
        previous: Optional[date] = None
        for day in sorted(moods_by_day, reverse=True):
            if previous is not None and previous - day != timedelta(days=1):
                break
            if not all(mood.is_positive for mood in moods_by_day[day]):
                break
            streak += 1
            previous = day
            if streak >= self.STREAK_HORIZON_DAYS:
                break
        return streak

    def engagement_stats(
        self, logs: List[MealLog], today: Optional[date] = None
    ) -> EngagementStats:
        """Counts read by the goal and achievement tracker."""
        well_formed = [log for log in logs if log.is_well_formed]
        moods = [log.mood for log in well_formed if log.mood is not None]

        stats = EngagementStats(
            total_logs=len(well_formed),
            total_moods=len(moods),
            unique_moods=len(set(moods)),
            unique_foods=len({log.food_name.strip().lower() for log in well_formed}),
            current_streak=self.current_streak(well_formed, today),
            good_mood_streak=self.good_mood_streak(well_formed),
        )
        logger.debug(
            "Engagement stats: %d logs, %d unique foods, streak %d",
            stats.total_logs,
            stats.unique_foods,
            stats.current_streak,
        )
        return stats


statistics_aggregator = StatisticsAggregator()
