"""Compose factor scores into a total, a severity level and top stressors."""

from __future__ import annotations

from typing import Sequence

from wellplate.domains.stress.domain_logic.stress_models import (
    TOP_STRESSOR_COUNT,
    FactorScore,
    StressLevel,
    WellnessScore,
)

# Exclusive upper bound of each band; anything at or above the last bound is VERY_HIGH
LEVEL_BANDS: list[tuple[float, StressLevel]] = [
    (21.0, StressLevel.EXCELLENT),
    (41.0, StressLevel.GOOD),
    (61.0, StressLevel.MODERATE),
    (81.0, StressLevel.HIGH),
]


def classify_level(total: float) -> StressLevel:
    """Map a 0-100 total to its band: [0,21), [21,41), [41,61), [61,81), [81,100]."""
    for upper, level in LEVEL_BANDS:
        if total < upper:
            return level
    return StressLevel.VERY_HIGH


def compose_wellness_score(factors: Sequence[FactorScore]) -> WellnessScore:
    total = sum(f.score for f in factors)
    return WellnessScore(total=total, level=classify_level(total))


def top_stressors(
    factors: Sequence[FactorScore], limit: int = TOP_STRESSOR_COUNT
) -> list[FactorScore]:
    """Highest-scoring factors first; ties keep their input order."""
    return sorted(factors, key=lambda f: f.score, reverse=True)[:limit]
