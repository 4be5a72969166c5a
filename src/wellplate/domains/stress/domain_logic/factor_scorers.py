"""Deterministic factor scoring: aggregated domain inputs -> stress sub-scores.

Each ``compute_*`` function returns a score in [0, 25], where higher means
more stress-contributing. A factor whose inputs are entirely absent scores
exactly ``NEUTRAL_SCORE``. A present zero (0 steps, 0 hours of usage) is a
known fact and goes through the real formula.

The ``build_*`` functions wrap a score with the status/detail text shown on
the factor card.
"""

from __future__ import annotations

from wellplate.domains.stress.domain_logic.piecewise import PiecewiseLinear, Segment, clamp
from wellplate.domains.stress.domain_logic.stress_models import (
    FACTOR_DIET,
    FACTOR_EXERCISE,
    FACTOR_MAX_SCORE,
    FACTOR_SLEEP,
    FACTOR_USAGE,
    NEUTRAL_SCORE,
    DailySleepSummary,
    FactorScore,
    NutritionDailyTotals,
    ResolvedUsage,
    UsageSource,
)

# ---------------------------------------------------------------------------
# Targets and curves
# ---------------------------------------------------------------------------

STEPS_TARGET = 10_000.0
ACTIVE_ENERGY_TARGET_KCAL = 600.0

PROTEIN_TARGET_G = 60.0
FIBER_TARGET_G = 25.0
FAT_LIMIT_G = 65.0
CARBS_LIMIT_G = 225.0

DEEP_SLEEP_TARGET_RATIO = 0.18
MAX_DEEP_SLEEP_PENALTY = 5.0

# Base sleep score (0-20) by total hours; 7-9h is the healthy sweet spot
SLEEP_BASE_CURVE = PiecewiseLinear(
    [
        Segment(4, 5, 20, 18),
        Segment(5, 6, 18, 12),
        Segment(6, 7, 12, 5),
        Segment(7, 9, 5, 0),
        Segment(9, 10, 0, 4),
    ],
    below=20,
    above=6,
)

USAGE_CURVE = PiecewiseLinear(
    [
        Segment(1, 2, 2, 6),
        Segment(2, 4, 6, 14),
        Segment(4, 6, 14, 20),
        Segment(6, 8, 20, 24),
    ],
    below=2,
    above=25,
)


def _bounded(score: float) -> float:
    return clamp(score, 0.0, FACTOR_MAX_SCORE)


def _detail_for_score(score: float, low: str, mid: str, high: str) -> str:
    if score < 8:
        return low
    if score < 16:
        return mid
    return high


# ---------------------------------------------------------------------------
# Factor 1: Exercise
# ---------------------------------------------------------------------------

def compute_exercise_score(steps: float | None, energy: float | None) -> float:
    """Score today's activity from step count and active energy.

    Each present signal scores ``25 * (1 - progress toward its target)``;
    two present signals are averaged.
    """
    scores: list[float] = []
    if steps is not None:
        scores.append(FACTOR_MAX_SCORE * (1.0 - clamp(steps / STEPS_TARGET)))
    if energy is not None:
        scores.append(FACTOR_MAX_SCORE * (1.0 - clamp(energy / ACTIVE_ENERGY_TARGET_KCAL)))

    if not scores:
        return NEUTRAL_SCORE
    return _bounded(sum(scores) / len(scores))


def build_exercise_factor(steps: float | None, energy: float | None) -> FactorScore:
    score = compute_exercise_score(steps, energy)
    steps_str = f"{int(steps):,} steps" if steps is not None else None
    energy_str = f"{int(energy)} kcal" if energy is not None else None

    if steps_str and energy_str:
        status = f"{steps_str} · {energy_str}"
    else:
        status = steps_str or energy_str or "No data"

    if steps is None and energy is None:
        detail = "Using neutral estimate"
    else:
        detail = _detail_for_score(
            score, "Great activity level!", "Moderate activity today", "Try to move more today"
        )
    return FactorScore(title=FACTOR_EXERCISE, score=score, status_text=status, detail_text=detail)


# ---------------------------------------------------------------------------
# Factor 2: Sleep
# ---------------------------------------------------------------------------

def compute_deep_sleep_penalty(summary: DailySleepSummary) -> float:
    """0-5 penalty, zero once deep sleep reaches 18% of total sleep."""
    if summary.total_hours <= 0:
        return MAX_DEEP_SLEEP_PENALTY / 2
    deep_ratio = summary.deep_hours / summary.total_hours
    shortfall = (DEEP_SLEEP_TARGET_RATIO - deep_ratio) / DEEP_SLEEP_TARGET_RATIO
    return clamp(shortfall) * MAX_DEEP_SLEEP_PENALTY


def compute_sleep_score(summary: DailySleepSummary | None) -> float:
    """Score the wake-up day's sleep: base curve by hours plus deep-sleep penalty."""
    if summary is None:
        return NEUTRAL_SCORE
    base = SLEEP_BASE_CURVE(summary.total_hours)
    return _bounded(min(FACTOR_MAX_SCORE, base + compute_deep_sleep_penalty(summary)))


def build_sleep_factor(summary: DailySleepSummary | None) -> FactorScore:
    if summary is None:
        return FactorScore.neutral(FACTOR_SLEEP)
    score = compute_sleep_score(summary)
    return FactorScore(
        title=FACTOR_SLEEP,
        score=score,
        status_text=f"{summary.total_hours:.1f}h total · {summary.deep_hours:.1f}h deep",
        detail_text=_detail_for_score(
            score, "Well rested!", "Decent sleep", "Try to sleep more tonight"
        ),
    )


# ---------------------------------------------------------------------------
# Factor 3: Diet
# ---------------------------------------------------------------------------

def compute_diet_score(totals: NutritionDailyTotals | None) -> float:
    """Score today's macro balance.

    Protein and fiber progress raise the balance; fat and carbs toward their
    daily limits lower it. The net balance is shifted by 0.5 so a day with
    nothing notable in either direction lands mid-range.
    """
    if totals is None or not totals.has_logs:
        return NEUTRAL_SCORE

    protein_ratio = clamp(totals.protein / PROTEIN_TARGET_G)
    fiber_ratio = clamp(totals.fiber / FIBER_TARGET_G)
    balanced = 0.55 * protein_ratio + 0.45 * fiber_ratio

    fat_ratio = clamp(totals.fat / FAT_LIMIT_G)
    carb_ratio = clamp(totals.carbs / CARBS_LIMIT_G)
    excess = 0.45 * fat_ratio + 0.55 * carb_ratio

    net_balance = clamp(balanced - 0.6 * excess + 0.5)
    return _bounded(FACTOR_MAX_SCORE * (1.0 - net_balance))


def build_diet_factor(totals: NutritionDailyTotals | None) -> FactorScore:
    score = compute_diet_score(totals)
    if totals is None or not totals.has_logs:
        return FactorScore(
            title=FACTOR_DIET,
            score=score,
            status_text="No food logged",
            detail_text="Log meals for an accurate score",
        )
    return FactorScore(
        title=FACTOR_DIET,
        score=score,
        status_text=f"{int(totals.protein)}g protein · {int(totals.fiber)}g fiber",
        detail_text=_detail_for_score(
            score, "Balanced diet today!", "Fair nutritional balance", "Consider healthier choices"
        ),
    )


# ---------------------------------------------------------------------------
# Factor 4: Device usage
# ---------------------------------------------------------------------------

def compute_usage_score(hours: float | None) -> float:
    if hours is None:
        return NEUTRAL_SCORE
    return _bounded(USAGE_CURVE(hours))


def build_usage_factor(usage: ResolvedUsage) -> FactorScore:
    score = compute_usage_score(usage.hours)

    if usage.source is UsageSource.AUTO:
        status = f"{usage.hours or 0:.0f}h auto-detected"
    elif usage.source is UsageSource.MANUAL:
        status = f"{usage.hours or 0:.1f} hours today"
    else:
        status = "Tap to enter"

    if usage.hours is None:
        detail = "No entry for today"
    else:
        detail = _detail_for_score(
            score, "Low screen time", "Moderate screen usage", "Consider reducing screen time"
        )
    return FactorScore(title=FACTOR_USAGE, score=score, status_text=status, detail_text=detail)
