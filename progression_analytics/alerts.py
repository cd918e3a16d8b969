"""
Progression Analytics — Progression alerts

Flags exercises whose logged decisions keep disagreeing with the engine.
"""
from progression_analytics.config import DEFAULT_CONFIG
from progression_analytics.decisions import comparable
from progression_analytics.models import Outcome
from progression_analytics.snapshot import (
    ALERT_SEVERITY_RANK,
    AlertType,
    ProgressionAlert,
    rounded_percent,
)


def progression_alerts(records, config=DEFAULT_CONFIG) -> list:
    """
    Group comparable decisions by exercise and check each group against
    the acceptance, regress and override thresholds. A group can raise
    several alerts; groups under the minimum sample size raise none.
    """
    by_exercise = {}
    for r in comparable(records):
        by_exercise.setdefault(r.exercise_name, []).append(r)

    alerts = []
    for name, entries in by_exercise.items():
        n = len(entries)
        if n < config.min_decisions_for_alerts:
            continue

        accepted = sum(1 for r in entries if r.is_accepted)
        regressed = sum(1 for r in entries if r.actual == Outcome.REGRESS)
        acceptance_rate = accepted / n
        regress_rate = regressed / n
        override_rate = 1 - acceptance_rate

        if acceptance_rate < config.low_acceptance_threshold:
            alerts.append(ProgressionAlert(
                title=f"{name}: Low acceptance",
                message=(
                    f"Only {rounded_percent(accepted, n)}% of suggestions are accepted "
                    f"({n} decisions). Consider a more conservative profile."
                ),
                type=AlertType.LOW_ACCEPTANCE,
            ))

        if regress_rate > config.high_regress_threshold:
            alerts.append(ProgressionAlert(
                title=f"{name}: High regressions",
                message=(
                    f"Regress selected {rounded_percent(regressed, n)}% of the time. "
                    "Tighten progression caps or raise readiness gates."
                ),
                type=AlertType.HIGH_REGRESS,
            ))

        if override_rate > config.high_override_threshold:
            alerts.append(ProgressionAlert(
                title=f"{name}: Frequent overrides",
                message=(
                    f"Overrides are {rounded_percent(n - accepted, n)}%. "
                    "The current decision profile may be too aggressive."
                ),
                type=AlertType.HIGH_OVERRIDE,
            ))

    alerts.sort(key=lambda a: (ALERT_SEVERITY_RANK[a.type], a.title))
    return alerts
