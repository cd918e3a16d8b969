"""
Progression Analytics — Dry-run policy simulator

Replays recent decisions against alternative confidence thresholds.
Read-only: nothing here feeds back into live progression state.
"""
from progression_analytics.config import (
    DEFAULT_CONFIG,
    DEFAULT_RECENT_SESSION_LIMIT,
    READINESS_GATE_PATH,
)
from progression_analytics.decisions import decision_records
from progression_analytics.models import Outcome
from progression_analytics.normalize import sessions_desc
from progression_analytics.snapshot import DryRunProfileResult


def predicted_outcome(record, confidence_threshold: float) -> Outcome:
    # Readiness gate always holds the load.
    if record.decision_path == READINESS_GATE_PATH:
        return Outcome.STAY
    if record.expected == Outcome.STAY:
        return Outcome.STAY
    if record.confidence >= confidence_threshold:
        return record.expected
    return Outcome.STAY


def simulate_profile(records, profile) -> DryRunProfileResult:
    counts = {Outcome.PROGRESS: 0, Outcome.STAY: 0, Outcome.REGRESS: 0}
    agreement = 0
    comparable = 0
    for record in records:
        predicted = predicted_outcome(record, profile.confidence_threshold)
        counts[predicted] += 1
        if record.actual is not None:
            comparable += 1
            if record.actual == predicted:
                agreement += 1
    return DryRunProfileResult(
        name=profile.name,
        progress_count=counts[Outcome.PROGRESS],
        stay_count=counts[Outcome.STAY],
        regress_count=counts[Outcome.REGRESS],
        agreement_count=agreement,
        comparable_count=comparable,
    )


def dry_run_records(sessions, recent_session_limit: int = DEFAULT_RECENT_SESSION_LIMIT,
                    config=DEFAULT_CONFIG) -> list:
    """Decision records of the most recent sessions, no date cutoff."""
    recent = sessions_desc(sessions)[:max(1, recent_session_limit)]
    return decision_records(
        recent,
        cutoff=None,
        rules=config.decision_path_rules,
        default_confidence=config.default_confidence,
    )


def dry_run_profiles(sessions, recent_session_limit: int = DEFAULT_RECENT_SESSION_LIMIT,
                     config=DEFAULT_CONFIG) -> tuple:
    """Returns (results per configured profile, number of replayed records)."""
    records = dry_run_records(sessions, recent_session_limit, config)
    results = [simulate_profile(records, profile) for profile in config.dry_run_profiles]
    return results, len(records)
