"""Stress engine — one recompute pass over the four life-signal factors.

Each pass fetches today's activity and last night's sleep concurrently from
the SignalProvider, sums today's food log, resolves device usage through the
UsageMonitorBridge, scores each factor and composes the total. Any signal
that cannot be obtained degrades to its neutral score; nothing short of a
missing authorization grant stops the pass.
"""

from __future__ import annotations

import asyncio
import logging
import sqlite3
from datetime import datetime

from wellplate.core.storage.database import DatabaseError
from wellplate.core.storage.food_log import FoodLogRepository
from wellplate.domains.stress.connectors import (
    DateRange,
    MetricKind,
    SensorUnavailableError,
    SignalProvider,
)
from wellplate.domains.stress.connectors.usage_bridge import UsageMonitorBridge
from wellplate.domains.stress.domain_logic.activity_trends import summarize_activity_history
from wellplate.domains.stress.domain_logic.calendar_days import (
    NowFn,
    days_before,
    local_now_fn,
    start_of_day,
)
from wellplate.domains.stress.domain_logic.factor_scorers import (
    build_diet_factor,
    build_exercise_factor,
    build_sleep_factor,
    build_usage_factor,
)
from wellplate.domains.stress.domain_logic.nutrition_aggregator import aggregate_daily_nutrition
from wellplate.domains.stress.domain_logic.score_composer import (
    compose_wellness_score,
    top_stressors,
)
from wellplate.domains.stress.domain_logic.sleep_aggregator import (
    summarize_sleep_by_wake_day,
    summary_for_day,
)
from wellplate.domains.stress.domain_logic.sleep_trends import MONTH_DAYS, summarize_sleep_history
from wellplate.domains.stress.domain_logic.stress_models import (
    FACTOR_DIET,
    FACTOR_EXERCISE,
    FACTOR_SLEEP,
    FACTOR_USAGE,
    DailySleepSummary,
    FactorScore,
    NutritionDailyTotals,
    RawSample,
    ResolvedUsage,
    StressReport,
    UsageSource,
)

logger = logging.getLogger(__name__)

STATUS_OK = "ok"
STATUS_NEEDS_PERMISSION = "needs_permission"


class StressEngine:
    """Computes the daily stress report.

    Usage::

        engine = StressEngine(provider, UsageMonitorBridge(store), food_log=repo)
        report = await engine.recompute()
        report = engine.set_manual_usage(3.5)
    """

    def __init__(
        self,
        signal_provider: SignalProvider,
        usage_bridge: UsageMonitorBridge,
        food_log: FoodLogRepository | None = None,
        now_fn: NowFn | None = None,
    ) -> None:
        self._provider = signal_provider
        self._usage = usage_bridge
        self._food_log = food_log
        self._now = now_fn or local_now_fn()
        self._last_report: StressReport | None = None

    @property
    def last_report(self) -> StressReport | None:
        return self._last_report

    @property
    def data_source(self) -> str:
        return self._provider.data_source

    # ------------------------------------------------------------------
    # Recompute
    # ------------------------------------------------------------------

    async def recompute(self) -> StressReport:
        """Run one full scoring pass.

        Returns a ``needs_permission`` report with all-neutral factors when
        the sensor provider has not been authorized.
        """
        now = self._now()

        if not self._provider.is_authorized():
            logger.info("Sensor access not authorized; skipping scoring")
            report = self._needs_permission_report(now)
            self._last_report = report
            return report

        steps, energy, sleep = await asyncio.gather(
            self._fetch_today_total(MetricKind.STEPS, now),
            self._fetch_today_total(MetricKind.ACTIVE_ENERGY, now),
            self._fetch_last_night(now),
        )

        exercise_factor = build_exercise_factor(steps, energy)
        sleep_factor = build_sleep_factor(sleep)
        diet_factor = build_diet_factor(self._read_nutrition(now))
        usage = self._usage.resolve()
        usage_factor = build_usage_factor(usage)

        report = self._compose(
            now,
            exercise_factor=exercise_factor,
            sleep_factor=sleep_factor,
            diet_factor=diet_factor,
            usage_factor=usage_factor,
            usage=usage,
        )
        self._last_report = report
        logger.info("Stress score recomputed: %.1f (%s)", report.total_score, report.level.value)
        return report

    def set_manual_usage(self, hours: float) -> StressReport:
        """Persist today's manual usage and rescore usage and the total.

        The other three factors are reused from the previous pass (neutral
        if there has been none); no sensor reads are made.

        Raises:
            ValueError: If hours is outside [0, 24].
        """
        self._usage.save_manual_hours(hours)
        now = self._now()
        usage = self._usage.resolve()

        previous = self._last_report
        if previous is None or previous.status != STATUS_OK:
            exercise_factor = FactorScore.neutral(FACTOR_EXERCISE)
            sleep_factor = FactorScore.neutral(FACTOR_SLEEP)
            diet_factor = FactorScore.neutral(FACTOR_DIET)
        else:
            exercise_factor = previous.exercise_factor
            sleep_factor = previous.sleep_factor
            diet_factor = previous.diet_factor

        report = self._compose(
            now,
            exercise_factor=exercise_factor,
            sleep_factor=sleep_factor,
            diet_factor=diet_factor,
            usage_factor=build_usage_factor(usage),
            usage=usage,
        )
        self._last_report = report
        return report

    async def request_authorization(self) -> StressReport:
        """Ask the provider for access, then recompute."""
        granted = await self._provider.request_authorization()
        logger.info("Sensor authorization %s", "granted" if granted else "not granted")
        return await self.recompute()

    async def sleep_history(self) -> dict:
        """Sleep statistics over the last 30 wake days."""
        now = self._now()
        if not self._provider.is_authorized():
            return {"status": STATUS_NEEDS_PERMISSION}
        date_range = DateRange(start=days_before(now, MONTH_DAYS), end=now)
        try:
            intervals = await self._provider.fetch_sleep_intervals(date_range)
        except SensorUnavailableError as exc:
            logger.warning("Sleep history unavailable: %s", exc)
            intervals = []
        summaries = summarize_sleep_by_wake_day(intervals, now.tzinfo)
        return summarize_sleep_history(summaries, now.date())

    async def activity_history(self) -> dict:
        """Active energy and step statistics over the last 30 days."""
        now = self._now()
        if not self._provider.is_authorized():
            return {"status": STATUS_NEEDS_PERMISSION}
        date_range = DateRange(start=days_before(now, MONTH_DAYS), end=now)
        energy, steps = await asyncio.gather(
            self._fetch_history(MetricKind.ACTIVE_ENERGY, date_range),
            self._fetch_history(MetricKind.STEPS, date_range),
        )
        return summarize_activity_history(energy, steps, now.date(), now.tzinfo)

    # ------------------------------------------------------------------
    # Signal reads; every failure becomes absent
    # ------------------------------------------------------------------

    async def _fetch_today_total(self, metric: MetricKind, now: datetime) -> float | None:
        date_range = DateRange(start=start_of_day(now), end=now)
        try:
            samples = await self._provider.fetch_cumulative(metric, date_range)
        except SensorUnavailableError as exc:
            logger.warning("%s unavailable: %s", metric.value, exc)
            return None
        if not samples:
            return None
        return sum(s.value for s in samples)

    async def _fetch_history(self, metric: MetricKind, date_range: DateRange) -> list[RawSample]:
        try:
            return await self._provider.fetch_cumulative(metric, date_range)
        except SensorUnavailableError as exc:
            logger.warning("%s history unavailable: %s", metric.value, exc)
            return []

    async def _fetch_last_night(self, now: datetime) -> DailySleepSummary | None:
        # Yesterday 00:00 onward covers any night that ends this morning
        date_range = DateRange(start=days_before(now, 1), end=now)
        try:
            intervals = await self._provider.fetch_sleep_intervals(date_range)
        except SensorUnavailableError as exc:
            logger.warning("Sleep unavailable: %s", exc)
            return None
        summaries = summarize_sleep_by_wake_day(intervals, now.tzinfo)
        return summary_for_day(summaries, now.date())

    def _read_nutrition(self, now: datetime) -> NutritionDailyTotals | None:
        if self._food_log is None:
            return None
        today = now.date()
        try:
            entries = self._food_log.query_macros_for_day(today)
        except (sqlite3.Error, DatabaseError) as exc:
            logger.warning("Food log unreadable: %s", exc)
            return None
        return aggregate_daily_nutrition(entries, today)

    # ------------------------------------------------------------------
    # Composition
    # ------------------------------------------------------------------

    def _compose(
        self,
        now: datetime,
        *,
        exercise_factor: FactorScore,
        sleep_factor: FactorScore,
        diet_factor: FactorScore,
        usage_factor: FactorScore,
        usage: ResolvedUsage,
        status: str = STATUS_OK,
    ) -> StressReport:
        factors = [exercise_factor, sleep_factor, diet_factor, usage_factor]
        wellness = compose_wellness_score(factors)
        return StressReport(
            status=status,
            exercise_factor=exercise_factor,
            sleep_factor=sleep_factor,
            diet_factor=diet_factor,
            usage_factor=usage_factor,
            total_score=wellness.total,
            level=wellness.level,
            top_stressors=top_stressors(factors),
            usage_source=usage.source,
            usage_hours=usage.hours,
            computed_at=now.isoformat(),
        )

    def _needs_permission_report(self, now: datetime) -> StressReport:
        return self._compose(
            now,
            exercise_factor=FactorScore.neutral(FACTOR_EXERCISE),
            sleep_factor=FactorScore.neutral(FACTOR_SLEEP),
            diet_factor=FactorScore.neutral(FACTOR_DIET),
            usage_factor=FactorScore.neutral(FACTOR_USAGE),
            usage=ResolvedUsage(hours=None, source=UsageSource.NONE),
            status=STATUS_NEEDS_PERMISSION,
        )
