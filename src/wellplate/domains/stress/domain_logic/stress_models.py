"""Stress engine models and domain constants."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum


# ---------------------------------------------------------------------------
# Domain constants
# ---------------------------------------------------------------------------

FACTOR_MAX_SCORE = 25.0

# Missing data neither rewards nor penalizes: midpoint of the factor range
NEUTRAL_SCORE = 12.5

TOP_STRESSOR_COUNT = 2

FACTOR_EXERCISE = "Exercise"
FACTOR_SLEEP = "Sleep"
FACTOR_DIET = "Diet"
FACTOR_USAGE = "Screen Time"


# ---------------------------------------------------------------------------
# Sensor-side types
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class RawSample:
    """One per-day cumulative sensor value."""

    timestamp: datetime
    value: float


class SleepStage(str, Enum):
    """Asleep stage reported for a sleep interval."""

    CORE = "core"
    REM = "rem"
    DEEP = "deep"
    UNSPECIFIED = "unspecified"


@dataclass(frozen=True)
class SleepStageInterval:
    """A contiguous asleep interval in a single stage."""

    start: datetime
    end: datetime
    stage: SleepStage

    @property
    def duration_hours(self) -> float:
        return (self.end - self.start).total_seconds() / 3600


@dataclass(frozen=True)
class DailySleepSummary:
    """Sleep totals attributed to the calendar day the sleeper woke up on.

    ``total_hours`` also includes unspecified-stage time, so it can exceed
    ``core + rem + deep`` when the feed reports unstaged sleep.
    """

    day: date
    total_hours: float
    core_hours: float = 0.0
    rem_hours: float = 0.0
    deep_hours: float = 0.0

    def to_dict(self) -> dict:
        return {
            "day": self.day.isoformat(),
            "total_hours": round(self.total_hours, 2),
            "core_hours": round(self.core_hours, 2),
            "rem_hours": round(self.rem_hours, 2),
            "deep_hours": round(self.deep_hours, 2),
        }


# ---------------------------------------------------------------------------
# Nutrition
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class NutritionDailyTotals:
    """Sum of all food log entries for one calendar day."""

    day: date
    protein: float = 0.0
    carbs: float = 0.0
    fat: float = 0.0
    fiber: float = 0.0
    calories: int = 0       # display only, not a scoring input
    entry_count: int = 0

    @property
    def has_logs(self) -> bool:
        return self.entry_count > 0


# ---------------------------------------------------------------------------
# Device usage
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class UsageThresholdRecord:
    """Highest hourly usage threshold crossed on ``day`` (``YYYY-MM-DD``)."""

    day: str
    max_hours_crossed_today: float = 0.0

    def to_dict(self) -> dict:
        return {"day": self.day, "max_hours_crossed_today": self.max_hours_crossed_today}

    @classmethod
    def from_dict(cls, data: dict) -> UsageThresholdRecord:
        """Build from a stored dict; raises KeyError/TypeError/ValueError if malformed."""
        return cls(
            day=str(data["day"]),
            max_hours_crossed_today=float(data["max_hours_crossed_today"]),
        )


class UsageSource(str, Enum):
    AUTO = "auto"        # usage monitor threshold record for today
    MANUAL = "manual"    # value the user saved for today
    NONE = "none"


@dataclass(frozen=True)
class ResolvedUsage:
    """Usage hours chosen for scoring and where they came from."""

    hours: float | None
    source: UsageSource = UsageSource.NONE


# ---------------------------------------------------------------------------
# Scores
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class FactorScore:
    """One factor's contribution to the stress score, with display text."""

    title: str
    score: float
    status_text: str
    detail_text: str
    max_score: float = FACTOR_MAX_SCORE

    @property
    def progress(self) -> float:
        return self.score / self.max_score

    @classmethod
    def neutral(cls, title: str) -> FactorScore:
        """Factor used when no data is available."""
        return cls(
            title=title,
            score=NEUTRAL_SCORE,
            status_text="No data",
            detail_text="Using neutral estimate",
        )

    def to_dict(self) -> dict:
        return {
            "title": self.title,
            "score": round(self.score, 2),
            "max": self.max_score,
            "status_text": self.status_text,
            "detail_text": self.detail_text,
        }


class StressLevel(str, Enum):
    """Discrete severity band for a total score."""

    EXCELLENT = "Excellent"
    GOOD = "Good"
    MODERATE = "Moderate"
    HIGH = "High"
    VERY_HIGH = "Very High"

    @property
    def encouragement_text(self) -> str:
        return _ENCOURAGEMENT[self]


_ENCOURAGEMENT = {
    StressLevel.EXCELLENT: "You're doing great today!",
    StressLevel.GOOD: "Keep up the good work!",
    StressLevel.MODERATE: "Not bad, room to improve.",
    StressLevel.HIGH: "Take a break, you deserve it.",
    StressLevel.VERY_HIGH: "Time to recharge, prioritize self-care.",
}


@dataclass(frozen=True)
class WellnessScore:
    total: float
    level: StressLevel


@dataclass
class StressReport:
    """Engine output for one recompute pass."""

    status: str                               # 'ok' | 'needs_permission'
    exercise_factor: FactorScore
    sleep_factor: FactorScore
    diet_factor: FactorScore
    usage_factor: FactorScore
    total_score: float
    level: StressLevel
    top_stressors: list[FactorScore] = field(default_factory=list)
    usage_source: UsageSource = UsageSource.NONE
    usage_hours: float | None = None
    computed_at: str = ""

    @property
    def factors(self) -> list[FactorScore]:
        return [self.exercise_factor, self.sleep_factor, self.diet_factor, self.usage_factor]

    def to_dict(self) -> dict:
        return {
            "status": self.status,
            "total_score": round(self.total_score, 2),
            "level": self.level.value,
            "encouragement": self.level.encouragement_text,
            "factors": {
                "exercise": self.exercise_factor.to_dict(),
                "sleep": self.sleep_factor.to_dict(),
                "diet": self.diet_factor.to_dict(),
                "usage": self.usage_factor.to_dict(),
            },
            "top_stressors": [f.title for f in self.top_stressors],
            "usage_source": self.usage_source.value,
            "usage_hours": self.usage_hours,
            "computed_at": self.computed_at,
        }
