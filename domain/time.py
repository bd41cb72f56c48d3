"""
Domain time utilities (pure).

Centralized timestamp validation and calendar helpers.

Behavior and error messages must remain consistent across the domain model.
"""

from __future__ import annotations

from datetime import date, datetime, timedelta, timezone
from typing import Optional


def require_utc_timestamp(name: str, value: datetime) -> None:
    """
    Enforces the requirement that timestamps are UTC.

    Invariants:
    - Timestamps must be timezone-aware.
    - Timestamps must have UTC offset 0.
    """

    if value.tzinfo is None or value.utcoffset() is None:
        raise ValueError(f"{name} must be timezone-aware (UTC)")
    if value.utcoffset() != timedelta(0):
        raise ValueError(f"{name} must be a UTC timestamp (offset 0)")


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def start_of_day_utc(day: date) -> datetime:
    """Midnight UTC of a calendar date (the instant a date-only deadline refers to)."""

    return datetime(day.year, day.month, day.day, tzinfo=timezone.utc)


def month_anchor(year: int, month: int) -> datetime:
    """
    Timestamp used when a value is backdated to a month.

    Entries recorded for "March 2025" are stamped 2025-03-01 12:00 UTC so that
    they fall inside the month regardless of the viewer's offset.
    """

    if not 1 <= month <= 12:
        raise ValueError("month must be between 1 and 12")
    return datetime(year, month, 1, 12, 0, 0, tzinfo=timezone.utc)


def month_start(year: int, month: int) -> datetime:
    if not 1 <= month <= 12:
        raise ValueError("month must be between 1 and 12")
    return datetime(year, month, 1, tzinfo=timezone.utc)


def parse_utc_datetime(value: object) -> datetime:
    """
    Parse a Supabase timestamp into a timezone-aware UTC datetime.

    Supabase commonly returns ISO-8601 strings, sometimes with a trailing 'Z'.
    """

    if isinstance(value, datetime):
        dt = value
    elif isinstance(value, str):
        # Python's fromisoformat doesn't consistently accept 'Z' across versions.
        dt = datetime.fromisoformat(value.replace("Z", "+00:00"))
    else:
        raise TypeError(f"Unsupported timestamp type: {type(value)!r}")

    # Naive timestamps from the backend are interpreted as UTC.
    if dt.tzinfo is None or dt.utcoffset() is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def parse_optional_date(value: object) -> Optional[date]:
    """Parse a `date` column (YYYY-MM-DD); empty values become None."""

    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        return date.fromisoformat(value[:10])
    raise TypeError(f"Unsupported date type: {type(value)!r}")


def to_iso_utc(dt: datetime, *, name: str) -> str:
    """Serialize a UTC datetime to ISO-8601 (timezone-aware, offset 0)."""

    require_utc_timestamp(name, dt)
    return dt.astimezone(timezone.utc).isoformat()
