"""Helpers for bucketing timestamps by the user's local calendar."""

from datetime import date, datetime, timezone
from typing import Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from nutrimood.config import ConfigurationError, settings


def local_zone() -> ZoneInfo:
    try:
        return ZoneInfo(settings.local_timezone)
    except ZoneInfoNotFoundError as e:
        raise ConfigurationError(
            f"Invalid timezone '{settings.local_timezone}'. Use IANA timezone identifiers."
        ) from e


def to_local_naive(ts: datetime) -> datetime:
    """
    Convert a timestamp to naive local wall-clock time.

    Aware timestamps are shifted into the configured zone; naive ones are
    taken to be local already. Dropping tzinfo afterwards keeps comparisons
    between mixed inputs well-defined.
    """
    if ts.tzinfo is None:
        return ts
    return ts.astimezone(local_zone()).replace(tzinfo=None)


def to_utc(ts: datetime) -> datetime:
    """Resolve a timestamp to an aware UTC instant; naive values are local wall-clock time."""
    if ts.tzinfo is None:
        ts = ts.replace(tzinfo=local_zone())
    return ts.astimezone(timezone.utc)


def local_now(now: Optional[datetime] = None) -> datetime:
    if now is None:
        now = datetime.now(timezone.utc)
    return to_local_naive(now)


def local_today(today: Optional[date] = None) -> date:
    if isinstance(today, datetime):
        return to_local_naive(today).date()
    if today is not None:
        return today
    return local_now().date()
