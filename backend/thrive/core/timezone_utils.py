"""
Timezone utilities for the booking backend.

All scheduling math is done in UTC. SQLite hands back naive datetimes, so
values read from the database go through ensure_utc() before comparison.
"""

from datetime import datetime, timezone
from typing import Optional


def utc_now() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


def ensure_utc(value: Optional[datetime]) -> Optional[datetime]:
    """
    Normalize a datetime to aware UTC.

    Naive values are assumed to already be UTC.
    """
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def month_string(value: datetime) -> str:
    """Format the UTC year/month of a datetime as ``YYYY-MM``."""
    value = ensure_utc(value)
    return f"{value.year}-{value.month:02d}"


def month_bounds(year: int, month: int) -> tuple[datetime, datetime]:
    """Return the [start, end) UTC instants of a calendar month."""
    start = datetime(year, month, 1, tzinfo=timezone.utc)
    if month == 12:
        end = datetime(year + 1, 1, 1, tzinfo=timezone.utc)
    else:
        end = datetime(year, month + 1, 1, tzinfo=timezone.utc)
    return start, end
