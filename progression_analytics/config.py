"""
Progression Analytics — Configuration

Default windowing parameters, thresholds and dry-run policies.
Windowing defaults can be overridden through environment variables;
thresholds and policies travel inside an AnalyticsConfig passed to the engine.
"""
import os
from dataclasses import dataclass


def _env_int(name: str, default: int) -> int:
    raw = os.environ.get(name, "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from None


# ── Windowing defaults ───────────────────────────────────────────────
DEFAULT_WEEKLY_VOLUME_WEEKS = _env_int("ANALYTICS_WEEKLY_VOLUME_WEEKS", 10)
DEFAULT_DECISION_WINDOW_DAYS = _env_int("ANALYTICS_DECISION_WINDOW_DAYS", 28)
DEFAULT_LIFT_TREND_LIMIT = 3
DEFAULT_RECENT_SESSION_LIMIT = _env_int("ANALYTICS_RECENT_SESSION_LIMIT", 12)
DEFAULT_RECENT_PR_LIMIT = _env_int("ANALYTICS_RECENT_PR_LIMIT", 5)

# 0 = Monday ... 6 = Sunday (datetime.weekday convention)
FIRST_WEEKDAY = _env_int("ANALYTICS_FIRST_WEEKDAY", 0) % 7

# ── Strength estimation ──────────────────────────────────────────────
E1RM_REP_RANGE = (1, 12)  # inclusive
ONE_REP_MAX_PR_TOLERANCE = 0.1
WEIGHT_EPSILON = 0.0001
TREND_EPSILON = 0.001

# ── Decision classification ──────────────────────────────────────────
OUTCOME_EPSILON = 0.0001
DEFAULT_CONFIDENCE = 0.56
UNLABELED_PATH = "Unlabeled"
READINESS_GATE_PATH = "Readiness Gate"

# Ordered: first substring match wins.
DECISION_PATH_RULES = (
    ("DOUBLE_PROGRESSION_GATE", "Double Progression Gate"),
    ("READINESS_GATE", READINESS_GATE_PATH),
    ("WEIGHTED_", "Weighted Model"),
    ("BASELINE", "Baseline Rule"),
    ("MANUAL_OVERRIDE", "Manual Carryover"),
)

# ── Alerts ───────────────────────────────────────────────────────────
MIN_DECISIONS_FOR_ALERTS = 4
LOW_ACCEPTANCE_THRESHOLD = 0.45
HIGH_REGRESS_THRESHOLD = 0.40
HIGH_OVERRIDE_THRESHOLD = 0.60

OTHER_MUSCLE_GROUP = "Other"


@dataclass(frozen=True)
class DryRunProfileConfig:
    name: str
    confidence_threshold: float


DRY_RUN_PROFILES = (
    DryRunProfileConfig(name="Conservative", confidence_threshold=0.78),
    DryRunProfileConfig(name="Balanced", confidence_threshold=0.58),
    DryRunProfileConfig(name="Aggressive", confidence_threshold=0.42),
)


@dataclass(frozen=True)
class AnalyticsConfig:
    """Immutable thresholds and policies consumed by the engine.

    Swap in an alternate instance to evaluate different policy sets
    without touching module-level defaults.
    """

    pr_tolerance: float = ONE_REP_MAX_PR_TOLERANCE
    default_confidence: float = DEFAULT_CONFIDENCE
    decision_path_rules: tuple = DECISION_PATH_RULES
    min_decisions_for_alerts: int = MIN_DECISIONS_FOR_ALERTS
    low_acceptance_threshold: float = LOW_ACCEPTANCE_THRESHOLD
    high_regress_threshold: float = HIGH_REGRESS_THRESHOLD
    high_override_threshold: float = HIGH_OVERRIDE_THRESHOLD
    dry_run_profiles: tuple = DRY_RUN_PROFILES
    first_weekday: int = FIRST_WEEKDAY


DEFAULT_CONFIG = AnalyticsConfig()


# ═════════════════════════════════════════════════════════════════════
# TIME RANGE PRESETS — dashboard range selector
# ═════════════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class TimeRange:
    key: str
    decision_window_days: int
    weekly_volume_weeks: int


TIME_RANGES = {
    "28d": TimeRange(key="28d", decision_window_days=28, weekly_volume_weeks=5),
    "90d": TimeRange(key="90d", decision_window_days=90, weekly_volume_weeks=13),
    "All": TimeRange(key="All", decision_window_days=0, weekly_volume_weeks=26),
}
DEFAULT_TIME_RANGE = "28d"


def get_time_range(key: str) -> TimeRange:
    """Resolve a preset by key. Raises ValueError for unknown keys."""
    try:
        return TIME_RANGES[key]
    except KeyError:
        raise ValueError(
            f"Unknown time range {key!r} (expected one of {', '.join(TIME_RANGES)})"
        ) from None
