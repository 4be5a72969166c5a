"""Concrete SignalProvider implementations."""

from __future__ import annotations

from datetime import datetime, time, timedelta, tzinfo

from wellplate.domains.stress.connectors import DateRange, MetricKind
from wellplate.domains.stress.connectors.mock_data import get_mock_daily_value, get_mock_night
from wellplate.domains.stress.domain_logic.calendar_days import local_day
from wellplate.domains.stress.domain_logic.stress_models import RawSample, SleepStageInterval


class MockSignalProvider:
    """Uses mock data generators. Always available and authorized."""

    def __init__(self, tz: tzinfo | None = None) -> None:
        self._tz = tz

    async def fetch_cumulative(
        self, metric: MetricKind, date_range: DateRange
    ) -> list[RawSample]:
        value = get_mock_daily_value(metric)
        samples = []
        day = local_day(date_range.start, self._tz)
        last_day = local_day(date_range.end, self._tz)
        while day <= last_day:
            day_start = datetime.combine(day, time.min, tzinfo=self._tz).astimezone(self._tz)
            if day_start < date_range.end:
                samples.append(RawSample(timestamp=day_start, value=value))
            day += timedelta(days=1)
        return samples

    async def fetch_sleep_intervals(self, date_range: DateRange) -> list[SleepStageInterval]:
        intervals = []
        day = local_day(date_range.start, self._tz)
        last_day = local_day(date_range.end, self._tz) + timedelta(days=1)
        while day <= last_day:
            intervals.extend(
                s for s in get_mock_night(day, self._tz)
                if date_range.contains(s.start) and s.end <= date_range.end
            )
            day += timedelta(days=1)
        return intervals

    def is_authorized(self) -> bool:
        return True

    async def request_authorization(self) -> bool:
        return True

    @property
    def data_source(self) -> str:
        return "mock"
