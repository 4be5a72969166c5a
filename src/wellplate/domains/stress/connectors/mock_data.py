"""Mock signal generators for development and testing.

Mock data represents an ordinary day for a healthy adult: a moderate step
count, one night of staged sleep ending each morning. Factor scores derived
from it should land mid-range rather than at either extreme.
"""

from __future__ import annotations

from datetime import date, datetime, time, timedelta, tzinfo

from wellplate.domains.stress.connectors import MetricKind
from wellplate.domains.stress.domain_logic.stress_models import SleepStage, SleepStageInterval

# Daily totals
MOCK_DAILY_VALUES: dict[MetricKind, float] = {
    MetricKind.STEPS: 7_245.0,
    MetricKind.ACTIVE_ENERGY: 410.0,
}

# (stage, minutes) from 23:15 onward; 7.5h asleep, 1.3h deep
_MOCK_NIGHT: list[tuple[SleepStage, int]] = [
    (SleepStage.CORE, 40),
    (SleepStage.DEEP, 45),
    (SleepStage.CORE, 60),
    (SleepStage.REM, 30),
    (SleepStage.DEEP, 33),
    (SleepStage.CORE, 90),
    (SleepStage.REM, 40),
    (SleepStage.CORE, 72),
    (SleepStage.REM, 40),
]


def get_mock_daily_value(metric: MetricKind) -> float:
    """Return the mock per-day value for a metric."""
    return MOCK_DAILY_VALUES[metric]


def get_mock_night(wake_day: date, tz: tzinfo | None = None) -> list[SleepStageInterval]:
    """Return one night of staged sleep that ends on the morning of ``wake_day``."""
    cursor = datetime.combine(wake_day - timedelta(days=1), time(23, 15), tzinfo=tz).astimezone(tz)
    intervals = []
    for stage, minutes in _MOCK_NIGHT:
        end = cursor + timedelta(minutes=minutes)
        intervals.append(SleepStageInterval(start=cursor, end=end, stage=stage))
        cursor = end
    return intervals
