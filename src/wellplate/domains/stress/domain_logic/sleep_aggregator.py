"""Group sleep-stage intervals into per-day summaries keyed by wake-up day.

An interval belongs to the calendar day containing its end instant, so an
overnight session from 23:00 to 07:00 counts entirely toward the morning it
ended on.
"""

from __future__ import annotations

from collections import defaultdict
from datetime import date, tzinfo
from typing import Iterable

from wellplate.domains.stress.domain_logic.calendar_days import local_day
from wellplate.domains.stress.domain_logic.stress_models import (
    DailySleepSummary,
    SleepStage,
    SleepStageInterval,
)


def summarize_sleep_by_wake_day(
    intervals: Iterable[SleepStageInterval],
    tz: tzinfo | None = None,
) -> list[DailySleepSummary]:
    """Bucket intervals by the local day of their end and total each stage.

    Args:
        intervals: Disjoint asleep intervals, in any order.
        tz: Zone defining calendar days (system local zone if None).

    Returns:
        One summary per day with at least one interval ending in it, sorted
        ascending by day.
    """
    buckets: dict[date, dict[SleepStage, float]] = defaultdict(lambda: defaultdict(float))
    for interval in intervals:
        wake_day = local_day(interval.end, tz)
        buckets[wake_day][interval.stage] += interval.duration_hours

    summaries = []
    for day in sorted(buckets):
        stages = buckets[day]
        summaries.append(DailySleepSummary(
            day=day,
            total_hours=sum(stages.values()),
            core_hours=stages[SleepStage.CORE],
            rem_hours=stages[SleepStage.REM],
            deep_hours=stages[SleepStage.DEEP],
        ))
    return summaries


def summary_for_day(
    summaries: Iterable[DailySleepSummary], day: date
) -> DailySleepSummary | None:
    """Return the summary attributed to ``day``, if any."""
    for summary in summaries:
        if summary.day == day:
            return summary
    return None
