"""
Utility functions for the API.
"""
import logging
from datetime import datetime, timezone
from typing import Any, Optional

# Set up logging
logger = logging.getLogger(__name__)


def utcnow() -> datetime:
    """Current instant as a timezone-aware UTC datetime."""
    return datetime.now(timezone.utc)


def ensure_utc(value: datetime) -> datetime:
    """Treat naive datetimes (as pymongo returns them by default) as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def parse_datetime(value: Any) -> Optional[datetime]:
    """
    Coerce a stored timestamp into an aware UTC datetime

    Args:
        value: datetime, ISO-8601 string (a trailing 'Z' is accepted) or None

    Returns:
        Aware datetime, or None when the value is missing

    Raises:
        ValueError: value is present but not a recognisable timestamp
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        return ensure_utc(value)
    if isinstance(value, str):
        text = value.strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        return ensure_utc(datetime.fromisoformat(text))
    raise ValueError(f"Unsupported timestamp value: {value!r}")


def isoformat_utc(value: datetime) -> str:
    """ISO-8601 with millisecond precision and a 'Z' suffix, e.g. 2025-04-10T12:00:00.000Z"""
    value = ensure_utc(value)
    return value.strftime("%Y-%m-%dT%H:%M:%S.") + f"{value.microsecond // 1000:03d}Z"


def day_suffix(day: int) -> str:
    """Ordinal suffix for a day of the month (1st, 2nd, 3rd, 11th, 22nd...)."""
    if 3 < day < 21:
        return "th"
    return {1: "st", 2: "nd", 3: "rd"}.get(day % 10, "th")


def pluralize(count: int, word: str) -> str:
    return f"{count} {word}{'' if count == 1 else 's'}"
