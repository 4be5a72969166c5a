"""Local calendar-day helpers shared by the engine, monitor and adapters.

Day keys are always rendered ``YYYY-MM-DD`` with ASCII digits from the
Gregorian date, never through locale-aware formatting, so the monitor and
the engine agree on "today" regardless of region or calendar settings.
"""

from __future__ import annotations

from datetime import date, datetime, time, timedelta, tzinfo
from typing import Callable

NowFn = Callable[[], datetime]


def local_now_fn(tz: tzinfo | None = None) -> NowFn:
    """Return a clock producing aware datetimes in ``tz`` (system zone if None)."""
    if tz is None:
        return lambda: datetime.now().astimezone()
    return lambda: datetime.now(tz)


def day_key(day: date | datetime) -> str:
    if isinstance(day, datetime):
        day = day.date()
    return f"{day.year:04d}-{day.month:02d}-{day.day:02d}"


def local_day(instant: datetime, tz: tzinfo | None = None) -> date:
    """Calendar day of ``instant`` in ``tz`` (system zone if None)."""
    return instant.astimezone(tz).date()


def start_of_day(instant: datetime) -> datetime:
    """Local midnight of the day containing an aware ``instant``."""
    return datetime.combine(instant.date(), time.min, tzinfo=instant.tzinfo)


def days_before(instant: datetime, days: int) -> datetime:
    """Local midnight ``days`` calendar days before ``instant``'s day."""
    return start_of_day(instant) - timedelta(days=days)
