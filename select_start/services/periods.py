"""
Challenge period resolution and the display strings that go with it.
"""
from datetime import datetime, timedelta, timezone
from typing import Tuple, Union

from select_start.utils.helpers import day_suffix, ensure_utc, pluralize

ENDED_MESSAGE = "Challenge has ended"


def current_period(reference: datetime) -> Tuple[datetime, datetime]:
    """
    Calendar month containing the reference instant

    Returns:
        (start, end) where start is the first instant of the month and end is
        the first instant of the following month (exclusive)
    """
    reference = ensure_utc(reference)
    start = datetime(reference.year, reference.month, 1, tzinfo=timezone.utc)
    if reference.month == 12:
        end = datetime(reference.year + 1, 1, 1, tzinfo=timezone.utc)
    else:
        end = datetime(reference.year, reference.month + 1, 1, tzinfo=timezone.utc)
    return start, end


def year_window(year: int) -> Tuple[datetime, datetime]:
    return (
        datetime(year, 1, 1, tzinfo=timezone.utc),
        datetime(year + 1, 1, 1, tzinfo=timezone.utc),
    )


def period_key(instant: datetime) -> str:
    """Key used by the bot to tag progress records, e.g. '2025-04-01'."""
    return ensure_utc(instant).date().isoformat()


def in_year(key: str, year: Union[int, str]) -> bool:
    return key.startswith(str(year))


def month_year_label(instant: datetime) -> str:
    return ensure_utc(instant).strftime("%B %Y")


def end_of_period_display(end: datetime) -> str:
    """Last day of a period ending at `end`, e.g. 'April 30th, 2025 at 11:59 PM'."""
    last_day = ensure_utc(end) - timedelta(days=1)
    return (
        f"{last_day.strftime('%B')} {last_day.day}{day_suffix(last_day.day)}, "
        f"{last_day.year} at 11:59 PM"
    )


def time_remaining(end: datetime, now: datetime) -> str:
    """Whole days and hours until `end`; the day part is dropped under 24 hours."""
    remaining = ensure_utc(end) - ensure_utc(now)
    if remaining <= timedelta(0):
        return ENDED_MESSAGE

    days = remaining.days
    hours = remaining.seconds // 3600
    if days == 0:
        return pluralize(hours, "hour")
    return f"{pluralize(days, 'day')} and {pluralize(hours, 'hour')}"
