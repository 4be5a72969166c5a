"""Sleep history statistics over wake-day summaries.

Summaries come from ``summarize_sleep_by_wake_day`` and are keyed by the day
the sleeper woke up, so "last night" is the summary for today.
"""

from __future__ import annotations

import statistics
from datetime import date, timedelta
from enum import Enum
from typing import Any, Iterable

from wellplate.domains.stress.domain_logic.stress_models import DailySleepSummary

SLEEP_GOAL_HOURS = 8.0
WEEK_DAYS = 7
MONTH_DAYS = 30


class SleepQuality(str, Enum):
    POOR = "Poor"
    FAIR = "Fair"
    GOOD = "Good"
    EXCELLENT = "Excellent"


def classify_sleep_quality(hours: float) -> SleepQuality:
    if hours < 5:
        return SleepQuality.POOR
    if hours < 6.5:
        return SleepQuality.FAIR
    if hours < 8:
        return SleepQuality.GOOD
    return SleepQuality.EXCELLENT


def _window(summaries: list[DailySleepSummary], today: date, days: int) -> list[DailySleepSummary]:
    first = today - timedelta(days=days - 1)
    return [s for s in summaries if first <= s.day <= today]


def summarize_sleep_history(
    summaries: Iterable[DailySleepSummary],
    today: date,
) -> dict[str, Any]:
    """Compute last-night, weekly and monthly sleep statistics.

    Args:
        summaries: Per-wake-day summaries, any order.
        today: The current local calendar day.

    Returns:
        Dict with: last_night, quality, goal_hours, goal_progress,
        week_average_hours, best_night (last 7 days), month (min/max/average), nights_recorded.
        ``status`` is ``no_data`` when no summary falls in the 30-day window.
    """
    ordered = sorted(summaries, key=lambda s: s.day)
    month = _window(ordered, today, MONTH_DAYS)

    if not month:
        return {"status": "no_data", "nights_recorded": 0, "goal_hours": SLEEP_GOAL_HOURS}

    week = _window(month, today, WEEK_DAYS)
    last_night = next((s for s in month if s.day == today), None)
    month_hours = [s.total_hours for s in month]
    best = max(week, key=lambda s: s.total_hours) if week else None

    result: dict[str, Any] = {
        "status": "ok",
        "goal_hours": SLEEP_GOAL_HOURS,
        "last_night": last_night.to_dict() if last_night else None,
        "quality": None,
        "goal_progress": None,
        "week_average_hours": (
            round(statistics.mean(s.total_hours for s in week), 2) if week else None
        ),
        "best_night": best.to_dict() if best else None,
        "month": {
            "min_hours": round(min(month_hours), 2),
            "max_hours": round(max(month_hours), 2),
            "average_hours": round(statistics.mean(month_hours), 2),
        },
        "nights_recorded": len(month),
    }

    if last_night is not None:
        result["quality"] = classify_sleep_quality(last_night.total_hours).value
        result["goal_progress"] = round(min(last_night.total_hours / SLEEP_GOAL_HOURS, 1.0), 3)

    return result
