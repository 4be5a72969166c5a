"""Sensor connectors — abstraction layer for activity and sleep signal retrieval."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Protocol, runtime_checkable

from wellplate.domains.stress.domain_logic.stress_models import RawSample, SleepStageInterval


class SensorUnavailableError(Exception):
    """A sensor read could not be completed.

    Covers both authorization denial and transport/parse failures; callers
    treat every cause the same way, as an absent signal.
    """


class MetricKind(str, Enum):
    """Cumulative metrics; samples within a day are summed."""

    STEPS = "steps"
    ACTIVE_ENERGY = "active_energy"


@dataclass(frozen=True)
class DateRange:
    """Half-open query window ``[start, end)`` of aware datetimes."""

    start: datetime
    end: datetime

    def __post_init__(self) -> None:
        if self.start > self.end:
            raise ValueError(f"DateRange start {self.start} is after end {self.end}")

    def contains(self, instant: datetime) -> bool:
        return self.start <= instant < self.end


@runtime_checkable
class SignalProvider(Protocol):
    """Abstract interface for the external sensor-read capability.

    The engine calls these methods without knowing whether data comes from
    an Apple Health export, a live device bridge, or mock generators.
    """

    async def fetch_cumulative(
        self, metric: MetricKind, date_range: DateRange
    ) -> list[RawSample]:
        """One sample per local calendar day in the range, ascending.

        Raises:
            SensorUnavailableError: On authorization denial or read failure.
        """
        ...

    async def fetch_sleep_intervals(self, date_range: DateRange) -> list[SleepStageInterval]:
        """Asleep intervals starting within the range, ascending by start.

        Raises:
            SensorUnavailableError: On authorization denial or read failure.
        """
        ...

    def is_authorized(self) -> bool:
        """Whether the user has granted read access."""
        ...

    async def request_authorization(self) -> bool:
        """Ask for read access; return the resulting authorization state."""
        ...

    @property
    def data_source(self) -> str:
        """Label for the active data source: 'apple_health' or 'mock'."""
        ...
