"""
Run-window time helpers.

A run window is one calendar day in the scheduler's time zone. Two triggers
fall in the same window when their local dates match, regardless of how far
apart they are in UTC.
"""

from datetime import date, datetime, timezone
from typing import Optional
from zoneinfo import ZoneInfo


def utc_now() -> datetime:
    """Current wall-clock time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


def ensure_aware(ts: datetime) -> datetime:
    """
    Treat naive datetimes as UTC.

    Args:
        ts: Datetime that may be naive

    Returns:
        Timezone-aware datetime
    """
    if ts.tzinfo is None:
        return ts.replace(tzinfo=timezone.utc)
    return ts


def run_date(ts: Optional[datetime] = None, tz_name: str = "UTC") -> date:
    """
    Calendar day of a timestamp in the run window's time zone.

    Args:
        ts: Timestamp, defaults to now
        tz_name: IANA time zone name of the scheduler

    Returns:
        Local calendar date used as the idempotency key
    """
    if ts is None:
        ts = utc_now()
    return ensure_aware(ts).astimezone(ZoneInfo(tz_name)).date()


def same_run_window(first: datetime, second: datetime, tz_name: str = "UTC") -> bool:
    """Check whether two timestamps fall on the same local calendar day."""
    return run_date(first, tz_name) == run_date(second, tz_name)


def format_timestamp(ts: Optional[datetime]) -> Optional[str]:
    """Format a timestamp as ISO8601 for logs and CLI output."""
    if ts is None:
        return None
    return ensure_aware(ts).isoformat()
