"""Day-of-week and hour-of-day mood patterns."""

import logging
from typing import Callable, Dict, List, Union

from nutrimood.config import require_positive, settings
from nutrimood.services.local_time import to_local_naive
from nutrimood.services.schemas import DayPattern, MealLog, TemporalBucket


logger = logging.getLogger(__name__)

WEEKDAY_NAMES = [
    "Monday",
    "Tuesday",
    "Wednesday",
    "Thursday",
    "Friday",
    "Saturday",
    "Sunday",
]


def _bucket_moods(
    meal_logs: List[MealLog], key_for: Callable[[MealLog], Union[int, str]]
) -> Dict[Union[int, str], TemporalBucket]:
    """Bucket mood-bearing logs by ``key_for``, keeping first-seen order."""
    tallies: Dict[Union[int, str], Dict[str, int]] = {}
    for log in meal_logs:
        if log.mood is None or not log.is_well_formed:
            continue
        tally = tallies.setdefault(
            key_for(log), {"total": 0, "negative": 0, "positive": 0}
        )
        tally["total"] += 1
        if log.mood.is_negative:
            tally["negative"] += 1
        elif log.mood.is_positive:
            tally["positive"] += 1

    return {
        key: TemporalBucket(
            key=key,
            total=tally["total"],
            negative_count=tally["negative"],
            positive_count=tally["positive"],
            negative_ratio=tally["negative"] / tally["total"],
        )
        for key, tally in tallies.items()
    }


def _weekday(log: MealLog) -> str:
    return WEEKDAY_NAMES[to_local_naive(log.timestamp).weekday()]


def _hour(log: MealLog) -> int:
    return to_local_naive(log.timestamp).hour


class TemporalPatternDetector:
    """Finds when in the week or day the user tends to feel worse."""

    MIN_SAMPLES = settings.worst_day_min_samples
    TOP_N = settings.worst_day_top_n

    def weekday_pattern(self, meal_logs: List[MealLog]) -> List[TemporalBucket]:
        """Mood buckets per weekday, Monday first; days without moods are absent."""
        buckets = _bucket_moods(meal_logs, _weekday)
        return [buckets[day] for day in WEEKDAY_NAMES if day in buckets]

    def worst_days(
        self, meal_logs: List[MealLog], min_samples: int = None, top_n: int = None
    ) -> List[DayPattern]:
        """
        Weekdays ranked by share of negative moods.

        Only days with at least ``min_samples`` mood logs qualify. Ties keep
        the order in which the days first appear in the logs.
        """
        min_samples = require_positive(
            "min_samples", self.MIN_SAMPLES if min_samples is None else min_samples
        )
        top_n = require_positive("top_n", self.TOP_N if top_n is None else top_n)

        qualifying = [
            bucket
            for bucket in _bucket_moods(meal_logs, _weekday).values()
            if bucket.total >= min_samples
        ]
        qualifying.sort(key=lambda b: b.negative_ratio, reverse=True)

        return [
            DayPattern(day=bucket.key, negative_ratio=bucket.negative_ratio)
            for bucket in qualifying[:top_n]
        ]

    def hourly_pattern(
        self, meal_logs: List[MealLog], min_samples: int = 1
    ) -> List[TemporalBucket]:
        """Mood buckets per hour of day (0-23), ascending, for hours with enough data."""
        require_positive("min_samples", min_samples)
        buckets = _bucket_moods(meal_logs, _hour)
        return [
            buckets[hour]
            for hour in sorted(buckets)
            if buckets[hour].total >= min_samples
        ]


temporal_pattern_detector = TemporalPatternDetector()
