"""Timestamp helpers.

All engine timestamps are timezone-aware UTC datetimes. Calendar days
(for streaks) are UTC dates. Serialized timestamps use the
``YYYY-MM-DDTHH:MM:SS.mmmZ`` form so backups written in it round-trip.
"""
from datetime import UTC, date, datetime
from typing import Optional, Union


def utcnow() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(UTC)


def ensure_utc(value: datetime) -> datetime:
    """Treat naive datetimes as UTC and convert aware ones to UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


def parse_timestamp(value: Union[str, datetime, None]) -> Optional[datetime]:
    """Parse an ISO-8601 string (or pass through a datetime).

    Raises ValueError for strings that are not ISO-8601.
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return ensure_utc(value)
    if not isinstance(value, str):
        raise ValueError(f"Unsupported timestamp value: {value!r}")
    return ensure_utc(datetime.fromisoformat(value))


def format_timestamp(value: Optional[datetime]) -> Optional[str]:
    if value is None:
        return None
    value = ensure_utc(value)
    return value.strftime("%Y-%m-%dT%H:%M:%S.") + f"{value.microsecond // 1000:03d}Z"


def calendar_day(value: datetime) -> date:
    """UTC calendar date of a timestamp."""
    return ensure_utc(value).date()


def resolve_now(now: Optional[datetime] = None) -> datetime:
    """Caller-supplied time as aware UTC, or the current time."""
    return utcnow() if now is None else ensure_utc(now)
