"""Apple Health signal provider — reads from exported Health data XML.

Users export via iOS Health app → Share → Export Health Data → produces
export.xml. This provider parses that XML to implement SignalProvider.
Holding a readable export counts as having granted read access.
"""

from __future__ import annotations

import logging
from datetime import tzinfo
from pathlib import Path

from wellplate.domains.stress.connectors import DateRange, MetricKind, SensorUnavailableError
from wellplate.domains.stress.connectors.apple_health_parser import (
    AppleHealthParseError,
    ParsedExport,
    daily_samples,
    parse_apple_health_export,
)
from wellplate.domains.stress.domain_logic.stress_models import RawSample, SleepStageInterval

logger = logging.getLogger(__name__)


class AppleHealthSignalProvider:
    """SignalProvider backed by an Apple Health XML export.

    Usage::

        provider = AppleHealthSignalProvider("/path/to/export.xml")
        if provider.is_authorized():
            steps = await provider.fetch_cumulative(MetricKind.STEPS, today)
    """

    def __init__(self, export_path: str, tz: tzinfo | None = None) -> None:
        self._export_path = export_path
        self._tz = tz
        self._parsed: ParsedExport | None = None

    async def fetch_cumulative(
        self, metric: MetricKind, date_range: DateRange
    ) -> list[RawSample]:
        parsed = self._load()
        return daily_samples(parsed.quantities.get(metric, []), date_range, self._tz)

    async def fetch_sleep_intervals(self, date_range: DateRange) -> list[SleepStageInterval]:
        parsed = self._load()
        return [s for s in parsed.sleep if date_range.contains(s.start)]

    def is_authorized(self) -> bool:
        """Check if the export file exists."""
        return bool(self._export_path) and Path(self._export_path).exists()

    async def request_authorization(self) -> bool:
        # Access is granted by placing an export on disk; re-check and drop stale cache.
        self._parsed = None
        return self.is_authorized()

    @property
    def data_source(self) -> str:
        return "apple_health"

    def _load(self) -> ParsedExport:
        """Parse the export once and cache it."""
        if not self.is_authorized():
            raise SensorUnavailableError("Apple Health export not available")
        if self._parsed is None:
            try:
                self._parsed = parse_apple_health_export(self._export_path)
            except AppleHealthParseError as exc:
                logger.warning("Failed to parse Apple Health export: %s", exc)
                raise SensorUnavailableError(str(exc)) from exc
        return self._parsed
