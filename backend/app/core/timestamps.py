# app/core/timestamps.py
"""
Server-side clock and the canonical timestamp format used in responses.
"""
import datetime as dt
from typing import Optional


def utc_now() -> dt.datetime:
    """
    Get current UTC datetime with timezone information.
    """
    return dt.datetime.now(dt.timezone.utc)


def as_utc(value: dt.datetime) -> dt.datetime:
    """Naive values are stored as UTC by the ORM, so they are read back as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=dt.timezone.utc)
    return value.astimezone(dt.timezone.utc)


def isoformat_utc(value: Optional[dt.datetime]) -> Optional[str]:
    """
    Render a timestamp as ISO-8601 in UTC with a trailing "Z"
    (e.g. 2024-05-01T09:30:00.000000Z). None stays None.
    """
    if value is None:
        return None
    return as_utc(value).isoformat(timespec="microseconds").replace("+00:00", "Z")
