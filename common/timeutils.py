"""
Time utilities. All timestamps in the services are timezone-aware UTC.
"""

from __future__ import annotations

from datetime import datetime, timezone


def utc_now() -> datetime:
    """Return current UTC time as timezone-aware datetime."""
    return datetime.now(timezone.utc)


def as_utc(dt: datetime) -> datetime:
    """
    Attach UTC to a naive datetime; convert an aware one to UTC.

    >>> from datetime import datetime
    >>> as_utc(datetime(2024, 2, 15, 10, 30)).tzinfo is timezone.utc
    True
    """
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)
