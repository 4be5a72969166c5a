"""Activity history statistics over per-day step and active-energy samples.

Samples come from ``SignalProvider.fetch_cumulative``, one per local day,
timestamped at that day's midnight.
"""

from __future__ import annotations

import statistics
from datetime import date, timedelta, tzinfo
from typing import Any, Iterable

from wellplate.domains.stress.domain_logic.calendar_days import day_key, local_day
from wellplate.domains.stress.domain_logic.sleep_trends import MONTH_DAYS, WEEK_DAYS
from wellplate.domains.stress.domain_logic.stress_models import RawSample

ACTIVE_ENERGY_GOAL_KCAL = 500.0


def _daily_values(
    samples: Iterable[RawSample], today: date, tz: tzinfo | None
) -> dict[date, float]:
    """Per-day totals inside the 30-day window ending today."""
    first = today - timedelta(days=MONTH_DAYS - 1)
    by_day: dict[date, float] = {}
    for sample in samples:
        day = local_day(sample.timestamp, tz)
        if first <= day <= today:
            by_day[day] = by_day.get(day, 0.0) + sample.value
    return by_day


def summarize_metric_history(
    samples: Iterable[RawSample],
    today: date,
    tz: tzinfo | None = None,
) -> dict[str, Any]:
    """Today's value, weekly average and best day, and 30-day min/max/average.

    Days without a sample are left out of every statistic rather than
    counted as zero.
    """
    by_day = _daily_values(samples, today, tz)
    if not by_day:
        return {"today": None, "week_average": None, "best_day": None, "month": None, "days_recorded": 0}

    week_start = today - timedelta(days=WEEK_DAYS - 1)
    week = {d: v for d, v in by_day.items() if d >= week_start}
    month_values = list(by_day.values())

    best_day = None
    if week:
        best = max(sorted(week), key=lambda d: week[d])
        best_day = {"day": day_key(best), "value": round(week[best], 2)}

    return {
        "today": round(by_day[today], 2) if today in by_day else None,
        "week_average": round(statistics.mean(week.values()), 2) if week else None,
        "best_day": best_day,
        "month": {
            "min": round(min(month_values), 2),
            "max": round(max(month_values), 2),
            "average": round(statistics.mean(month_values), 2),
        },
        "days_recorded": len(by_day),
    }


def summarize_activity_history(
    energy_samples: Iterable[RawSample],
    step_samples: Iterable[RawSample],
    today: date,
    tz: tzinfo | None = None,
) -> dict[str, Any]:
    """Compute activity statistics for active energy and steps.

    Args:
        energy_samples: Daily active-energy totals (kcal), any order.
        step_samples: Daily step totals, any order.
        today: The current local calendar day.
        tz: Zone the sample timestamps are bucketed in.

    Returns:
        Dict with: energy_goal_kcal, goal_progress (today's energy against
        the goal, capped at 1), active_energy and steps (see
        ``summarize_metric_history``). ``status`` is ``no_data`` when
        neither metric has a sample in the 30-day window.
    """
    energy = summarize_metric_history(energy_samples, today, tz)
    steps = summarize_metric_history(step_samples, today, tz)

    status = "ok" if energy["days_recorded"] or steps["days_recorded"] else "no_data"
    goal_progress = None
    if energy["today"] is not None:
        goal_progress = round(min(energy["today"] / ACTIVE_ENERGY_GOAL_KCAL, 1.0), 3)

    return {
        "status": status,
        "energy_goal_kcal": ACTIVE_ENERGY_GOAL_KCAL,
        "goal_progress": goal_progress,
        "active_energy": energy,
        "steps": steps,
    }
