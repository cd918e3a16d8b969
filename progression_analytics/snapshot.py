"""
Progression Analytics — Derived value types

Everything here is recomputed on every engine call and compared by value,
so two computations over the same input produce equal snapshots.
"""
import math
from dataclasses import dataclass
from datetime import date, datetime
from enum import Enum
from typing import Optional

from progression_analytics.config import E1RM_REP_RANGE, TREND_EPSILON
from progression_analytics.models import Outcome


def rounded_percent(count: float, total: float) -> int:
    """Percentage rounded half-up; 0 when there is nothing to divide by."""
    if total <= 0:
        return 0
    return int(math.floor(count / total * 100 + 0.5))


def brzycki_e1rm(weight: float, reps: int) -> Optional[float]:
    """Brzycki estimate, or None outside the supported rep range."""
    lo, hi = E1RM_REP_RANGE
    if weight is None or weight <= 0 or reps is None or not lo <= reps <= hi:
        return None
    denominator = 37.0 - reps
    if denominator <= 0:
        return None
    return weight * 36.0 / denominator


def format_weight(weight: float) -> str:
    if float(weight).is_integer():
        return str(int(weight))
    return f"{weight:.1f}"


# ═════════════════════════════════════════════════════════════════════
# STRENGTH
# ═════════════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class StrengthTopSet:
    weight: float
    reps: int

    @property
    def estimated_one_rep_max(self) -> float:
        e1rm = brzycki_e1rm(self.weight, self.reps)
        return self.weight if e1rm is None else e1rm

    @property
    def formatted(self) -> str:
        return f"{format_weight(self.weight)}x{self.reps}"


class TrendDirection(str, Enum):
    UP = "up"
    DOWN = "down"
    FLAT = "flat"


@dataclass(frozen=True)
class LiftTrend:
    exercise_name: str
    latest_date: datetime
    latest_top_set: StrengthTopSet
    previous_top_set: Optional[StrengthTopSet]
    session_count: int

    @property
    def direction(self) -> TrendDirection:
        prev = self.previous_top_set
        if prev is None:
            return TrendDirection.FLAT
        latest = self.latest_top_set
        if latest.weight > prev.weight + TREND_EPSILON:
            return TrendDirection.UP
        if latest.weight < prev.weight - TREND_EPSILON:
            return TrendDirection.DOWN
        if latest.estimated_one_rep_max > prev.estimated_one_rep_max + TREND_EPSILON:
            return TrendDirection.UP
        if latest.estimated_one_rep_max < prev.estimated_one_rep_max - TREND_EPSILON:
            return TrendDirection.DOWN
        return TrendDirection.FLAT

    @property
    def delta_weight(self) -> Optional[float]:
        if self.previous_top_set is None:
            return None
        return self.latest_top_set.weight - self.previous_top_set.weight


@dataclass(frozen=True)
class E1RMProgressPoint:
    date: date
    estimated_one_rep_max: float
    top_set: StrengthTopSet


@dataclass(frozen=True)
class E1RMExerciseProgress:
    exercise_name: str
    points: tuple

    @property
    def latest_date(self) -> Optional[date]:
        return self.points[-1].date if self.points else None


@dataclass(frozen=True)
class PersonalRecordEvent:
    exercise_name: str
    date: datetime
    previous_best: float
    new_best: float
    top_set: StrengthTopSet

    @property
    def improvement(self) -> float:
        return self.new_best - self.previous_best

    @property
    def summary(self) -> str:
        return f"{self.top_set.formatted} {self.exercise_name} PR"


# ═════════════════════════════════════════════════════════════════════
# VOLUME & CARDIO
# ═════════════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class WeeklyVolumePoint:
    week_start: date
    total_volume: float
    session_count: int


@dataclass(frozen=True)
class MuscleGroupVolume:
    muscle_group: str
    total_volume: float
    session_count: int
    percentage_of_total: float


@dataclass(frozen=True)
class CardioSummary:
    total_duration: int
    total_distance: Optional[float]
    session_count: int
    avg_duration_per_session: int


EMPTY_CARDIO_SUMMARY = CardioSummary(
    total_duration=0, total_distance=None, session_count=0, avg_duration_per_session=0,
)


@dataclass(frozen=True)
class WeeklyCardioPoint:
    week_start: date
    total_duration: int


# ═════════════════════════════════════════════════════════════════════
# PROGRESSION DECISIONS
# ═════════════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class DecisionRecord:
    date: datetime
    exercise_name: str
    decision_path: str
    expected: Outcome
    actual: Optional[Outcome]
    confidence: float

    @property
    def is_comparable(self) -> bool:
        return self.actual is not None

    @property
    def is_accepted(self) -> bool:
        return self.actual is not None and self.actual == self.expected


@dataclass(frozen=True)
class ProgressionBreakdown:
    progress_count: int = 0
    stay_count: int = 0
    regress_count: int = 0

    @property
    def total(self) -> int:
        return self.progress_count + self.stay_count + self.regress_count

    def percentage(self, outcome: Outcome) -> int:
        count = {
            Outcome.PROGRESS: self.progress_count,
            Outcome.STAY: self.stay_count,
            Outcome.REGRESS: self.regress_count,
        }[Outcome(outcome)]
        return rounded_percent(count, self.total)


@dataclass(frozen=True)
class ProgressionEngineHealth:
    total_decisions: int = 0
    accepted_count: int = 0
    overridden_count: int = 0
    regress_count: int = 0

    @property
    def acceptance_rate(self) -> int:
        return rounded_percent(self.accepted_count, self.total_decisions)

    @property
    def override_rate(self) -> int:
        return rounded_percent(self.overridden_count, self.total_decisions)

    @property
    def regress_rate(self) -> int:
        return rounded_percent(self.regress_count, self.total_decisions)


@dataclass(frozen=True)
class DecisionProfileHealth:
    name: str
    total_decisions: int
    accepted_count: int
    regress_count: int

    @property
    def acceptance_rate(self) -> int:
        return rounded_percent(self.accepted_count, self.total_decisions)

    @property
    def regress_rate(self) -> int:
        return rounded_percent(self.regress_count, self.total_decisions)


class AlertType(str, Enum):
    LOW_ACCEPTANCE = "lowAcceptance"
    HIGH_REGRESS = "highRegress"
    HIGH_OVERRIDE = "highOverride"


ALERT_SEVERITY_RANK = {
    AlertType.LOW_ACCEPTANCE: 0,
    AlertType.HIGH_REGRESS: 1,
    AlertType.HIGH_OVERRIDE: 2,
}


@dataclass(frozen=True)
class ProgressionAlert:
    title: str
    message: str
    type: AlertType

    @property
    def id(self) -> str:
        return f"{self.type.value}-{self.title}"


@dataclass(frozen=True)
class DryRunProfileResult:
    name: str
    progress_count: int
    stay_count: int
    regress_count: int
    agreement_count: int
    comparable_count: int

    @property
    def agreement_rate(self) -> int:
        return rounded_percent(self.agreement_count, self.comparable_count)


# ═════════════════════════════════════════════════════════════════════
# SNAPSHOT
# ═════════════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class AnalyticsSnapshot:
    analyzed_session_count: int = 0
    current_streak: int = 0
    workouts_this_week: int = 0
    weekly_volume_trend: tuple = ()
    lift_trends: tuple = ()
    exercise_progress: tuple = ()
    progression_breakdown: ProgressionBreakdown = ProgressionBreakdown()
    engine_health: ProgressionEngineHealth = ProgressionEngineHealth()
    decision_profile_health: tuple = ()
    progression_alerts: tuple = ()
    dry_run_profiles: tuple = ()
    dry_run_input_count: int = 0
    recent_prs: tuple = ()
    muscle_group_volume: tuple = ()
    cardio_summary: CardioSummary = EMPTY_CARDIO_SUMMARY
    weekly_cardio_trend: tuple = ()

    def e1rm_points(self, exercise_name: str) -> tuple:
        for progress in self.exercise_progress:
            if progress.exercise_name == exercise_name:
                return progress.points
        return ()
