"""
Progression Analytics — Strength tracking

- Top set per exercise instance and most-trained lift trends
- Brzycki e1RM series (best qualifying set per exercise per day)
- Chronological personal-record detection
"""
from progression_analytics.config import (
    DEFAULT_LIFT_TREND_LIMIT,
    DEFAULT_RECENT_PR_LIMIT,
    E1RM_REP_RANGE,
    ONE_REP_MAX_PR_TOLERANCE,
    WEIGHT_EPSILON,
)
from progression_analytics.normalize import day_of, sessions_asc, sessions_desc
from progression_analytics.snapshot import (
    E1RMExerciseProgress,
    E1RMProgressPoint,
    LiftTrend,
    PersonalRecordEvent,
    StrengthTopSet,
)


# ═════════════════════════════════════════════════════════════════════
# 1. SET-LEVEL METRICS
# ═════════════════════════════════════════════════════════════════════

def is_better_top_set(lhs: StrengthTopSet, rhs: StrengthTopSet) -> bool:
    """Higher e1RM, then heavier, then fewer reps."""
    if lhs.estimated_one_rep_max != rhs.estimated_one_rep_max:
        return lhs.estimated_one_rep_max > rhs.estimated_one_rep_max
    if lhs.weight != rhs.weight:
        return lhs.weight > rhs.weight
    return lhs.reps < rhs.reps


def is_better_point(lhs: E1RMProgressPoint, rhs: E1RMProgressPoint) -> bool:
    if lhs.estimated_one_rep_max != rhs.estimated_one_rep_max:
        return lhs.estimated_one_rep_max > rhs.estimated_one_rep_max
    return is_better_top_set(lhs.top_set, rhs.top_set)


def analyze_strength_sets(exercise) -> tuple:
    """
    Single pass over an exercise's completed sets.

    Returns (volume, top_set, top_brzycki_set):
    - volume: sum of weight * reps where both are positive
    - top_set: heaviest set, ties broken by more reps (None if nothing weighted)
    - top_brzycki_set: best set inside the e1RM rep range (None if none qualifies)
    """
    lo, hi = E1RM_REP_RANGE
    volume = 0.0
    top_weight, top_reps, top_set = None, None, None
    top_brzycki = None

    for s in exercise.completed_sets():
        weight = s.weight
        if weight is None or weight <= 0:
            continue
        reps = s.reps or 0
        if reps > 0:
            volume += weight * reps

        candidate = StrengthTopSet(weight=float(weight), reps=max(1, reps))

        if top_set is None or (
            weight > top_weight + WEIGHT_EPSILON
            or (abs(weight - top_weight) <= WEIGHT_EPSILON and reps > top_reps)
        ):
            top_weight, top_reps, top_set = weight, reps, candidate

        if lo <= reps <= hi:
            if top_brzycki is None or is_better_top_set(candidate, top_brzycki):
                top_brzycki = candidate

    return volume, top_set, top_brzycki


def strength_volume(session) -> float:
    return sum(analyze_strength_sets(ex)[0] for ex in session.strength_exercises())


# ═════════════════════════════════════════════════════════════════════
# 2. LIFT TRENDS — most trained lifts
# ═════════════════════════════════════════════════════════════════════

def lift_trends(sessions, limit: int = DEFAULT_LIFT_TREND_LIMIT) -> list:
    """
    Rank exercises by how many sessions produced a top set.

    Ties: most recent latest_date first, then exercise name.
    """
    if limit <= 0:
        return []

    history = {}
    for session in sessions_desc(sessions):
        for ex in session.strength_exercises():
            top_set = analyze_strength_sets(ex)[1]
            if top_set is None:
                continue
            history.setdefault(ex.exercise_name, []).append((session.date, top_set))

    trends = [
        LiftTrend(
            exercise_name=name,
            latest_date=entries[0][0],
            latest_top_set=entries[0][1],
            previous_top_set=entries[1][1] if len(entries) > 1 else None,
            session_count=len(entries),
        )
        for name, entries in history.items()
    ]
    trends.sort(key=lambda t: t.exercise_name)
    trends.sort(key=lambda t: (t.session_count, t.latest_date), reverse=True)
    return trends[:limit]


# ═════════════════════════════════════════════════════════════════════
# 3. e1RM PROGRESS — Brzycki, best per exercise per day
# ═════════════════════════════════════════════════════════════════════

def e1rm_progress_by_exercise(sessions) -> list:
    """
    One point per exercise per calendar day, points ascending by date.
    Exercises ordered by latest point (newest first), then name.
    """
    points_by_exercise = {}
    for session in sessions_asc(sessions):
        day = day_of(session.date)
        for ex in session.strength_exercises():
            top_set = analyze_strength_sets(ex)[2]
            if top_set is None:
                continue
            candidate = E1RMProgressPoint(
                date=day,
                estimated_one_rep_max=top_set.estimated_one_rep_max,
                top_set=top_set,
            )
            by_day = points_by_exercise.setdefault(ex.exercise_name, {})
            existing = by_day.get(day)
            if existing is None or is_better_point(candidate, existing):
                by_day[day] = candidate

    progress = [
        E1RMExerciseProgress(
            exercise_name=name,
            points=tuple(sorted(by_day.values(), key=lambda p: p.date)),
        )
        for name, by_day in points_by_exercise.items()
        if by_day
    ]
    progress.sort(key=lambda p: p.exercise_name)
    progress.sort(key=lambda p: p.latest_date, reverse=True)
    return progress


def e1rm_progress(exercise_name: str, sessions) -> tuple:
    for progress in e1rm_progress_by_exercise(sessions):
        if progress.exercise_name == exercise_name:
            return progress.points
    return ()


# ═════════════════════════════════════════════════════════════════════
# 4. PR DETECTION
# ═════════════════════════════════════════════════════════════════════

def detect_personal_records(
    sessions,
    limit: int = DEFAULT_RECENT_PR_LIMIT,
    tolerance: float = ONE_REP_MAX_PR_TOLERANCE,
) -> list:
    """
    Walk sessions oldest first and flag e1RM jumps over the running best.

    The first qualifying set of an exercise only seeds the running best.
    The running best never decreases. Events are returned newest first.
    """
    if limit <= 0:
        return []

    best_by_exercise = {}
    events = []
    for session in sessions_asc(sessions):
        for ex in session.strength_exercises():
            top_set = analyze_strength_sets(ex)[2]
            if top_set is None:
                continue
            name = ex.exercise_name
            value = top_set.estimated_one_rep_max
            best = best_by_exercise.get(name)
            if best is None:
                best_by_exercise[name] = value
                continue
            if value > best + tolerance:
                events.append(PersonalRecordEvent(
                    exercise_name=name,
                    date=session.date,
                    previous_best=best,
                    new_best=value,
                    top_set=top_set,
                ))
            best_by_exercise[name] = max(best, value)

    events.sort(key=lambda e: e.date, reverse=True)
    return events[:limit]
