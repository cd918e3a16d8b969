"""
Progression Analytics — Decision classification

Rebuilds, for every logged exercise that carried a progression suggestion,
what the engine expected and which rule family produced it, then compares
it against what was actually chosen.
"""
from progression_analytics.config import (
    DECISION_PATH_RULES,
    DEFAULT_CONFIDENCE,
    OUTCOME_EPSILON,
    UNLABELED_PATH,
)
from progression_analytics.models import Outcome
from progression_analytics.normalize import in_window, sessions_desc
from progression_analytics.snapshot import (
    DecisionProfileHealth,
    DecisionRecord,
    ProgressionBreakdown,
    ProgressionEngineHealth,
)


def expected_outcome(suggestion) -> Outcome:
    """Applied outcome wins; otherwise the sign of suggested - base."""
    if suggestion.applied_outcome is not None:
        return Outcome(suggestion.applied_outcome)
    if suggestion.suggested_value > suggestion.base_value + OUTCOME_EPSILON:
        return Outcome.PROGRESS
    if suggestion.suggested_value < suggestion.base_value - OUTCOME_EPSILON:
        return Outcome.REGRESS
    return Outcome.STAY


def decision_path(decision_code, rules=DECISION_PATH_RULES) -> str:
    """First rule whose marker appears in the code; "Unlabeled" otherwise."""
    if not decision_code:
        return UNLABELED_PATH
    for marker, label in rules:
        if marker in decision_code:
            return label
    return UNLABELED_PATH


def decision_records(
    sessions,
    cutoff=None,
    rules=DECISION_PATH_RULES,
    default_confidence: float = DEFAULT_CONFIDENCE,
) -> list:
    """One record per suggested exercise in the window, newest session first."""
    records = []
    for session in sessions_desc(sessions):
        if not in_window(session, cutoff):
            continue
        for ex in session.active_exercises():
            suggestion = ex.progression_suggestion
            if suggestion is None:
                continue
            confidence = suggestion.confidence
            records.append(DecisionRecord(
                date=session.date,
                exercise_name=ex.exercise_name,
                decision_path=decision_path(suggestion.decision_code, rules),
                expected=expected_outcome(suggestion),
                actual=ex.progression_recommendation,
                confidence=default_confidence if confidence is None else confidence,
            ))
    return records


def progression_breakdown(sessions, cutoff=None) -> ProgressionBreakdown:
    """Tally logged recommendations, with or without a suggestion behind them."""
    counts = {Outcome.PROGRESS: 0, Outcome.STAY: 0, Outcome.REGRESS: 0}
    for session in sessions:
        if not in_window(session, cutoff):
            continue
        for ex in session.active_exercises():
            if ex.progression_recommendation is not None:
                counts[Outcome(ex.progression_recommendation)] += 1
    return ProgressionBreakdown(
        progress_count=counts[Outcome.PROGRESS],
        stay_count=counts[Outcome.STAY],
        regress_count=counts[Outcome.REGRESS],
    )


def comparable(records) -> list:
    return [r for r in records if r.is_comparable]


def engine_health(records) -> ProgressionEngineHealth:
    records = comparable(records)
    if not records:
        return ProgressionEngineHealth()
    accepted = sum(1 for r in records if r.is_accepted)
    return ProgressionEngineHealth(
        total_decisions=len(records),
        accepted_count=accepted,
        overridden_count=len(records) - accepted,
        regress_count=sum(1 for r in records if r.actual == Outcome.REGRESS),
    )


def decision_profile_health(records) -> list:
    """Per decision path, busiest path first, then by name."""
    grouped = {}
    for r in comparable(records):
        grouped.setdefault(r.decision_path, []).append(r)

    profiles = [
        DecisionProfileHealth(
            name=name,
            total_decisions=len(entries),
            accepted_count=sum(1 for r in entries if r.is_accepted),
            regress_count=sum(1 for r in entries if r.actual == Outcome.REGRESS),
        )
        for name, entries in grouped.items()
    ]
    profiles.sort(key=lambda p: (-p.total_decisions, p.name))
    return profiles
