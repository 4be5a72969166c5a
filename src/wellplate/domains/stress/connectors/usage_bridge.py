"""Usage monitor bridge — the engine's read path for device-usage hours.

Priority order: auto-detected (monitor record for today) > manual entry for
today > none. The monitor record is only trusted when its day key matches
today's; anything else is treated as absent, never as an error.
"""

from __future__ import annotations

import logging
import math
from datetime import date

from wellplate.core.storage.keyed_store import KeyedStore
from wellplate.domains.stress.connectors.usage_monitor import (
    MANUAL_USAGE_KEY_PREFIX,
    THRESHOLD_RECORD_KEY,
)
from wellplate.domains.stress.domain_logic.calendar_days import NowFn, day_key, local_now_fn
from wellplate.domains.stress.domain_logic.stress_models import (
    ResolvedUsage,
    UsageSource,
    UsageThresholdRecord,
)

logger = logging.getLogger(__name__)

MAX_MANUAL_HOURS = 24.0


def manual_usage_key(day: date | str) -> str:
    key = day if isinstance(day, str) else day_key(day)
    return f"{MANUAL_USAGE_KEY_PREFIX}{key}"


class UsageMonitorBridge:
    """Resolves today's usage hours from the shared keyed store.

    Usage::

        bridge = UsageMonitorBridge(store)
        resolved = bridge.resolve()   # ResolvedUsage(hours=3.0, source=AUTO)
    """

    def __init__(self, store: KeyedStore, now_fn: NowFn | None = None) -> None:
        self._store = store
        self._now = now_fn or local_now_fn()

    def today_key(self) -> str:
        return day_key(self._now())

    def read_auto_detected_hours(self) -> float | None:
        """Monitor hours for today, or None when absent, stale, or malformed."""
        raw = self._store.get(THRESHOLD_RECORD_KEY)
        if raw is None:
            return None
        try:
            record = UsageThresholdRecord.from_dict(raw)
        except (KeyError, TypeError, ValueError):
            logger.warning("Ignoring malformed usage threshold record")
            return None

        today = self.today_key()
        if record.day != today:
            logger.info("Usage threshold record is stale (%s != %s)", record.day, today)
            return None
        return record.max_hours_crossed_today

    def read_manual_hours(self, day: date | str | None = None) -> float | None:
        """Manually saved hours for ``day`` (today by default).

        Presence is decided by key, so a saved ``0.0`` is returned as 0.0.
        """
        key = manual_usage_key(day if day is not None else self.today_key())
        if not self._store.contains(key):
            return None
        value = self._store.get(key)
        try:
            return float(value)
        except (TypeError, ValueError):
            logger.warning("Ignoring malformed manual usage value under %s", key)
            return None

    def save_manual_hours(self, hours: float) -> float:
        """Persist ``hours`` under today's key and return the stored value.

        Only today's key is written; earlier days are never modified.

        Raises:
            ValueError: If hours is not a finite value in [0, 24].
        """
        hours = float(hours)
        if not math.isfinite(hours) or hours < 0 or hours > MAX_MANUAL_HOURS:
            raise ValueError(f"Usage hours must be between 0 and {MAX_MANUAL_HOURS:g}")
        self._store.put(manual_usage_key(self.today_key()), hours)
        logger.info("Manual usage saved for %s", self.today_key())
        return hours

    def resolve(self) -> ResolvedUsage:
        auto_hours = self.read_auto_detected_hours()
        if auto_hours is not None:
            return ResolvedUsage(hours=auto_hours, source=UsageSource.AUTO)

        manual_hours = self.read_manual_hours()
        if manual_hours is not None:
            return ResolvedUsage(hours=manual_hours, source=UsageSource.MANUAL)

        return ResolvedUsage(hours=None, source=UsageSource.NONE)
