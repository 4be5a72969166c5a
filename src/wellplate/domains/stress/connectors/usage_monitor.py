"""Usage monitor — the isolated process that records hourly usage thresholds.

The host OS observes device-wide usage and calls back into the monitor when
a scheduled daily interval starts and each time an hourly threshold
(1h ... 12h) is crossed. The monitor's only output is the shared
``UsageThresholdRecord``, which it ratchets upward within a day and resets
at local midnight. The engine reads that record through
``UsageMonitorBridge`` and never writes it.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from datetime import time

from wellplate.core.storage.keyed_store import KeyedStore
from wellplate.domains.stress.domain_logic.calendar_days import NowFn, day_key, local_now_fn
from wellplate.domains.stress.domain_logic.stress_models import UsageThresholdRecord

logger = logging.getLogger(__name__)

# Shared store keys
THRESHOLD_RECORD_KEY = "usage_threshold_record"
MANUAL_USAGE_KEY_PREFIX = "manual_usage_hours:"

ACTIVITY_NAME = "daily_screen_time"
THRESHOLD_HOURS = range(1, 13)

_EVENT_NAME_RE = re.compile(r"^threshold_(\d+)h?$")


def threshold_event_name(hours: int) -> str:
    return f"threshold_{hours}h"


def parse_threshold_event(event_name: str) -> float | None:
    """Extract the hour value from ``threshold_Xh``.

    Returns None when the name does not parse or names an hour outside the
    monitoring schedule.
    """
    match = _EVENT_NAME_RE.match(event_name.strip())
    if match is None:
        return None
    hours = int(match.group(1))
    if hours not in THRESHOLD_HOURS:
        return None
    return float(hours)


@dataclass(frozen=True)
class MonitoringSchedule:
    """Daily repeating interval with one event per hourly threshold."""

    activity: str = ACTIVITY_NAME
    interval_start: time = time(0, 0)
    interval_end: time = time(23, 59)
    repeats: bool = True
    events: dict[str, int] = field(
        default_factory=lambda: {threshold_event_name(h): h for h in THRESHOLD_HOURS}
    )

    def to_dict(self) -> dict:
        return {
            "activity": self.activity,
            "interval_start": self.interval_start.strftime("%H:%M"),
            "interval_end": self.interval_end.strftime("%H:%M"),
            "repeats": self.repeats,
            "events": self.events,
        }


class UsageMonitor:
    """Maintains the shared threshold record in response to OS callbacks.

    Usage::

        monitor = UsageMonitor(store)
        monitor.interval_did_start()               # local midnight
        monitor.event_did_reach_threshold("threshold_2h")
    """

    def __init__(self, store: KeyedStore, now_fn: NowFn | None = None) -> None:
        self._store = store
        self._now = now_fn or local_now_fn()

    @staticmethod
    def monitoring_schedule() -> MonitoringSchedule:
        return MonitoringSchedule()

    def _today(self) -> str:
        return day_key(self._now())

    def current_record(self) -> UsageThresholdRecord | None:
        """The stored record, or None if absent or malformed."""
        raw = self._store.get(THRESHOLD_RECORD_KEY)
        if raw is None:
            return None
        try:
            return UsageThresholdRecord.from_dict(raw)
        except (KeyError, TypeError, ValueError):
            logger.warning("Ignoring malformed usage threshold record")
            return None

    def interval_did_start(self) -> UsageThresholdRecord:
        """Reset the record to zero for the new local day."""
        record = UsageThresholdRecord(day=self._today(), max_hours_crossed_today=0.0)
        self._store.put(THRESHOLD_RECORD_KEY, record.to_dict())
        logger.info("Usage monitoring interval started for %s", record.day)
        return record

    def event_did_reach_threshold(self, event_name: str) -> UsageThresholdRecord | None:
        """Ratchet the record up to the crossed threshold.

        The stored value is replaced only when the new threshold is strictly
        greater. A record left over from an earlier day counts as zero, so
        the first event of a day always lands even if the interval-start
        callback was missed.

        Returns:
            The record after the event, or None if the event name is not a
            threshold event.
        """
        hours = parse_threshold_event(event_name)
        if hours is None:
            logger.warning("Ignoring unrecognized usage event %r", event_name)
            return None

        today = self._today()
        current = self.current_record()
        stored = (
            current.max_hours_crossed_today
            if current is not None and current.day == today
            else 0.0
        )

        if hours > stored:
            record = UsageThresholdRecord(day=today, max_hours_crossed_today=hours)
            self._store.put(THRESHOLD_RECORD_KEY, record.to_dict())
            logger.info("Usage threshold %sh reached on %s", hours, today)
            return record

        logger.debug("Usage threshold %sh not above stored %sh; record unchanged", hours, stored)
        return UsageThresholdRecord(day=today, max_hours_crossed_today=stored)

    def interval_did_end(self) -> None:
        """The record stays readable until the next interval starts."""
