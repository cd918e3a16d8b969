"""
Progression Analytics — Dashboard engine

compute_dashboard() runs every stage over the same session list and returns
one immutable AnalyticsSnapshot. AnalyticsCache sits at the call boundary and
reuses the last snapshot while the content fingerprint is unchanged.
"""
import hashlib
import threading
from datetime import datetime

from progression_analytics.alerts import progression_alerts
from progression_analytics.config import (
    DEFAULT_CONFIG,
    DEFAULT_DECISION_WINDOW_DAYS,
    DEFAULT_LIFT_TREND_LIMIT,
    DEFAULT_RECENT_PR_LIMIT,
    DEFAULT_RECENT_SESSION_LIMIT,
    DEFAULT_WEEKLY_VOLUME_WEEKS,
    get_time_range,
)
from progression_analytics.decisions import (
    comparable,
    decision_profile_health,
    decision_records,
    engine_health,
    progression_breakdown,
)
from progression_analytics.dry_run import dry_run_profiles
from progression_analytics.normalize import decision_cutoff, resolve_reference_date
from progression_analytics.snapshot import AnalyticsSnapshot
from progression_analytics.strength import (
    detect_personal_records,
    e1rm_progress_by_exercise,
    lift_trends,
)
from progression_analytics.volume import (
    cardio_summary,
    current_streak,
    muscle_group_volume,
    weekly_cardio_trend,
    weekly_volume_trend,
    workouts_this_week,
)


class ComputationCancelled(Exception):
    """Raised when the caller's cancel event fires mid-computation."""


def _checkpoint(cancel_event):
    if cancel_event is not None and cancel_event.is_set():
        raise ComputationCancelled("analytics computation cancelled")


def compute_dashboard(
    sessions,
    reference_date=None,
    weekly_volume_weeks: int = DEFAULT_WEEKLY_VOLUME_WEEKS,
    decision_window_days: int = DEFAULT_DECISION_WINDOW_DAYS,
    lift_trend_limit: int = DEFAULT_LIFT_TREND_LIMIT,
    recent_session_limit: int = DEFAULT_RECENT_SESSION_LIMIT,
    recent_pr_limit: int = DEFAULT_RECENT_PR_LIMIT,
    config=DEFAULT_CONFIG,
    cancel_event=None,
) -> AnalyticsSnapshot:
    """
    Full dashboard snapshot for a session history.

    Pure: same sessions + parameters + reference date → equal snapshot.
    The snapshot is only assembled after every stage finished, so a
    cancelled call never yields partial output.
    """
    sessions = list(sessions)
    reference = resolve_reference_date(reference_date)
    cutoff = decision_cutoff(reference, decision_window_days)
    weekday = config.first_weekday

    _checkpoint(cancel_event)
    volume_trend = weekly_volume_trend(sessions, weekly_volume_weeks, reference, weekday)
    cardio_trend = weekly_cardio_trend(sessions, weekly_volume_weeks, reference, weekday)
    streak = current_streak(sessions, reference)
    this_week = workouts_this_week(sessions, reference, weekday)
    muscles = muscle_group_volume(sessions, cutoff)
    cardio = cardio_summary(sessions, cutoff)

    _checkpoint(cancel_event)
    trends = lift_trends(sessions, lift_trend_limit)
    progress = e1rm_progress_by_exercise(sessions)
    prs = detect_personal_records(sessions, recent_pr_limit, config.pr_tolerance)

    _checkpoint(cancel_event)
    records = decision_records(
        sessions,
        cutoff=cutoff,
        rules=config.decision_path_rules,
        default_confidence=config.default_confidence,
    )
    breakdown = progression_breakdown(sessions, cutoff)
    health = engine_health(records)
    profiles = decision_profile_health(records)
    alerts = progression_alerts(comparable(records), config)

    _checkpoint(cancel_event)
    dry_run_results, dry_run_count = dry_run_profiles(sessions, recent_session_limit, config)

    _checkpoint(cancel_event)
    return AnalyticsSnapshot(
        analyzed_session_count=len(sessions),
        current_streak=streak,
        workouts_this_week=this_week,
        weekly_volume_trend=tuple(volume_trend),
        lift_trends=tuple(trends),
        exercise_progress=tuple(progress),
        progression_breakdown=breakdown,
        engine_health=health,
        decision_profile_health=tuple(profiles),
        progression_alerts=tuple(alerts),
        dry_run_profiles=tuple(dry_run_results),
        dry_run_input_count=dry_run_count,
        recent_prs=tuple(prs),
        muscle_group_volume=tuple(muscles),
        cardio_summary=cardio,
        weekly_cardio_trend=tuple(cardio_trend),
    )


def compute_for_range(sessions, range_key: str, reference_date=None, config=DEFAULT_CONFIG,
                      cancel_event=None) -> AnalyticsSnapshot:
    """Dashboard for one of the 28d / 90d / All presets."""
    time_range = get_time_range(range_key)
    return compute_dashboard(
        sessions,
        reference_date=reference_date,
        weekly_volume_weeks=time_range.weekly_volume_weeks,
        decision_window_days=time_range.decision_window_days,
        config=config,
        cancel_event=cancel_event,
    )


# ═════════════════════════════════════════════════════════════════════
# FINGERPRINT & MEMO CACHE
# ═════════════════════════════════════════════════════════════════════

def _quantize(value):
    """Hundredths, so float noise does not change the fingerprint."""
    if value is None:
        return None
    return int(round(value * 100))


def _enum_value(value):
    return getattr(value, "value", value)


def _fingerprint_parts(sessions):
    yield len(sessions)
    for session in sessions:
        yield ("session", session.id, session.date.isoformat())
        for module in session.modules:
            if module.skipped:
                continue
            yield ("module", module.id)
            for ex in module.exercises:
                yield (
                    "exercise", ex.id, ex.exercise_name, _enum_value(ex.exercise_type),
                    tuple(ex.primary_muscles), _enum_value(ex.progression_recommendation),
                )
                suggestion = ex.progression_suggestion
                if suggestion is None:
                    yield "<no_suggestion>"
                else:
                    yield (
                        "suggestion",
                        _quantize(suggestion.base_value),
                        _quantize(suggestion.suggested_value),
                        _enum_value(suggestion.applied_outcome),
                        _quantize(suggestion.confidence),
                        suggestion.decision_code,
                    )
                for group in ex.set_groups:
                    yield ("group", group.id)
                    for s in group.sets:
                        yield (
                            "set", s.id, s.completed, _quantize(s.weight), s.reps,
                            s.duration, _quantize(s.distance),
                        )


def session_fingerprint(sessions) -> str:
    """Content hash of everything the engine reads from the sessions."""
    digest = hashlib.sha256()
    for part in _fingerprint_parts(list(sessions)):
        digest.update(repr(part).encode("utf-8"))
        digest.update(b"\x1f")
    return digest.hexdigest()


class AnalyticsCache:
    """
    Single-slot memo: keeps the last snapshot and the key it was built from.

    The lock only guards the (key, snapshot) pair and the in-flight table;
    computation runs outside it, so callers for different inputs do not
    block each other. A caller whose key is already being computed waits
    for that computation instead of starting its own.
    """

    def __init__(self, config=DEFAULT_CONFIG):
        self.config = config
        self._lock = threading.Lock()
        self._key = None
        self._snapshot = None
        self._in_flight = {}
        self.computations = 0

    def _cache_key(self, sessions, reference: datetime, params: dict) -> str:
        digest = hashlib.sha256(session_fingerprint(sessions).encode("utf-8"))
        digest.update(reference.isoformat().encode("utf-8"))
        digest.update(repr(sorted(params.items())).encode("utf-8"))
        digest.update(repr(self.config).encode("utf-8"))
        return digest.hexdigest()

    def get_or_compute(self, sessions, reference_date=None, cancel_event=None, **params) -> AnalyticsSnapshot:
        """
        Return the cached snapshot when nothing changed, else recompute.

        Without an explicit reference date "now" is truncated to the minute,
        so repeated loads within the same minute share one snapshot.
        """
        sessions = list(sessions)
        if reference_date is None:
            reference = datetime.now().replace(second=0, microsecond=0)
        else:
            reference = resolve_reference_date(reference_date)
        key = self._cache_key(sessions, reference, params)

        while True:
            with self._lock:
                if self._key == key and self._snapshot is not None:
                    return self._snapshot
                pending = self._in_flight.get(key)
                if pending is None:
                    done = threading.Event()
                    self._in_flight[key] = done
                    break
            # Re-check once the other computation finishes; it may have been cancelled.
            pending.wait()

        try:
            snapshot = compute_dashboard(
                sessions,
                reference_date=reference,
                config=self.config,
                cancel_event=cancel_event,
                **params,
            )
            with self._lock:
                self._key = key
                self._snapshot = snapshot
                self.computations += 1
        finally:
            with self._lock:
                self._in_flight.pop(key, None)
            done.set()
        return snapshot

    def invalidate(self):
        with self._lock:
            self._key = None
            self._snapshot = None
