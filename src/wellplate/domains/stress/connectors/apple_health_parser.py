"""Apple Health XML export parser.

Parses the ``export.xml`` file produced by Apple Health (iOS → Share → Export
Health Data). Supports incremental parsing of large files via iterparse.

HealthKit type mappings:
- HKQuantityTypeIdentifierStepCount → MetricKind.STEPS
- HKQuantityTypeIdentifierActiveEnergyBurned → MetricKind.ACTIVE_ENERGY (kcal)
- HKCategoryTypeIdentifierSleepAnalysis → SleepStageInterval (asleep stages only)
"""

from __future__ import annotations

import logging
import xml.etree.ElementTree as ET
from collections import defaultdict
from dataclasses import dataclass, field
from datetime import date, datetime, time, tzinfo
from pathlib import Path

from wellplate.domains.stress.connectors import DateRange, MetricKind
from wellplate.domains.stress.domain_logic.calendar_days import local_day
from wellplate.domains.stress.domain_logic.stress_models import (
    RawSample,
    SleepStage,
    SleepStageInterval,
)

logger = logging.getLogger(__name__)

_QUANTITY_TYPES: dict[str, MetricKind] = {
    "HKQuantityTypeIdentifierStepCount": MetricKind.STEPS,
    "HKQuantityTypeIdentifierActiveEnergyBurned": MetricKind.ACTIVE_ENERGY,
}

_SLEEP = "HKCategoryTypeIdentifierSleepAnalysis"

# InBed and Awake values are not sleep and are skipped
_SLEEP_STAGES: dict[str, SleepStage] = {
    "HKCategoryValueSleepAnalysisAsleepCore": SleepStage.CORE,
    "HKCategoryValueSleepAnalysisAsleepREM": SleepStage.REM,
    "HKCategoryValueSleepAnalysisAsleepDeep": SleepStage.DEEP,
    "HKCategoryValueSleepAnalysisAsleepUnspecified": SleepStage.UNSPECIFIED,
    "HKCategoryValueSleepAnalysisAsleep": SleepStage.UNSPECIFIED,
}

# Unit conversions to the canonical unit of each metric
_UNIT_FACTORS: dict[str, float] = {
    "kJ": 1 / 4.184,
}


class AppleHealthParseError(Exception):
    """Raised when parsing Apple Health export XML fails."""


@dataclass
class QuantityRecord:
    start: datetime
    value: float


@dataclass
class ParsedExport:
    """Records of interest from one export, grouped by kind."""

    quantities: dict[MetricKind, list[QuantityRecord]] = field(
        default_factory=lambda: defaultdict(list)
    )
    sleep: list[SleepStageInterval] = field(default_factory=list)


def _parse_date(date_str: str) -> datetime:
    """Parse Apple Health date format: '2025-12-01 08:30:00 -0500'."""
    try:
        return datetime.strptime(date_str, "%Y-%m-%d %H:%M:%S %z")
    except ValueError:
        # Fallback for ISO format
        return datetime.fromisoformat(date_str)


def parse_apple_health_export(export_path: str | Path) -> ParsedExport:
    """Parse an Apple Health export.xml into quantity and sleep records.

    Args:
        export_path: Path to the Apple Health export.xml file.

    Returns:
        A ``ParsedExport`` with quantity records per metric (sorted by
        start) and asleep intervals (sorted by start).

    Raises:
        AppleHealthParseError: If the file is missing or not valid XML.
    """
    path = Path(export_path)
    if not path.exists():
        raise AppleHealthParseError(f"Export file not found: {path}")

    parsed = ParsedExport()
    skipped = 0

    try:
        for _event, elem in ET.iterparse(str(path), events=("end",)):
            if elem.tag != "Record":
                continue

            rec_type = elem.get("type", "")
            try:
                if rec_type in _QUANTITY_TYPES:
                    start_str = elem.get("startDate", "")
                    value_str = elem.get("value", "")
                    if start_str and value_str:
                        factor = _UNIT_FACTORS.get(elem.get("unit", ""), 1.0)
                        parsed.quantities[_QUANTITY_TYPES[rec_type]].append(QuantityRecord(
                            start=_parse_date(start_str),
                            value=float(value_str) * factor,
                        ))

                elif rec_type == _SLEEP:
                    stage = _SLEEP_STAGES.get(elem.get("value", ""))
                    start_str = elem.get("startDate", "")
                    end_str = elem.get("endDate", "")
                    if stage is not None and start_str and end_str:
                        start_dt = _parse_date(start_str)
                        end_dt = _parse_date(end_str)
                        if end_dt > start_dt:
                            parsed.sleep.append(SleepStageInterval(start_dt, end_dt, stage))
            except (ValueError, TypeError):
                skipped += 1

            elem.clear()

    except ET.ParseError as exc:
        raise AppleHealthParseError(f"Invalid XML: {exc}") from exc

    for records in parsed.quantities.values():
        records.sort(key=lambda r: r.start)
    parsed.sleep.sort(key=lambda s: s.start)

    logger.info(
        "Parsed Apple Health export: %d metric types, %d sleep intervals, %d skipped records",
        len(parsed.quantities), len(parsed.sleep), skipped,
    )
    return parsed


def daily_samples(
    records: list[QuantityRecord],
    date_range: DateRange,
    tz: tzinfo | None = None,
) -> list[RawSample]:
    """Sum records starting inside ``date_range`` into one sample per local day.

    Days without any record produce no sample.
    """
    by_day: dict[date, float] = defaultdict(float)
    for record in records:
        if date_range.contains(record.start):
            by_day[local_day(record.start, tz)] += record.value

    samples = []
    for day in sorted(by_day):
        day_start = datetime.combine(day, time.min, tzinfo=tz).astimezone(tz)
        samples.append(RawSample(timestamp=day_start, value=by_day[day]))
    return samples
