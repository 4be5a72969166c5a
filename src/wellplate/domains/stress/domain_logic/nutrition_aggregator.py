"""Sum a day's food log entries into nutrition totals."""

from __future__ import annotations

from datetime import date
from typing import Iterable

from wellplate.core.storage.models import FoodLogEntry
from wellplate.domains.stress.domain_logic.calendar_days import day_key
from wellplate.domains.stress.domain_logic.stress_models import NutritionDailyTotals


def aggregate_daily_nutrition(
    entries: Iterable[FoodLogEntry], day: date
) -> NutritionDailyTotals:
    """Total macros for entries whose day equals ``day`` exactly.

    The log store already filters by day; entries for any other day are
    skipped here too so a store that over-returns (e.g. "on or after")
    cannot leak tomorrow's entries into today's totals. An empty result is
    a valid no-data state, reported with ``entry_count == 0``.
    """
    key = day_key(day)
    protein = carbs = fat = fiber = 0.0
    calories = 0
    count = 0
    for entry in entries:
        if entry.day != key:
            continue
        protein += entry.protein
        carbs += entry.carbs
        fat += entry.fat
        fiber += entry.fiber
        calories += entry.calories
        count += 1

    return NutritionDailyTotals(
        day=day,
        protein=protein,
        carbs=carbs,
        fat=fat,
        fiber=fiber,
        calories=calories,
        entry_count=count,
    )
