"""
Progression Analytics — Volume, consistency & cardio

Weekly tonnage buckets, training streak, muscle-group split and cardio totals.
"""
from datetime import timedelta

import pandas as pd

from progression_analytics.config import (
    DEFAULT_WEEKLY_VOLUME_WEEKS,
    FIRST_WEEKDAY,
    OTHER_MUSCLE_GROUP,
)
from progression_analytics.normalize import (
    day_of,
    in_window,
    resolve_reference_date,
    week_start,
    week_starts,
)
from progression_analytics.snapshot import (
    EMPTY_CARDIO_SUMMARY,
    CardioSummary,
    MuscleGroupVolume,
    WeeklyCardioPoint,
    WeeklyVolumePoint,
)
from progression_analytics.strength import analyze_strength_sets, strength_volume


# ═════════════════════════════════════════════════════════════════════
# 1. WEEKLY VOLUME
# ═════════════════════════════════════════════════════════════════════

def _bucket_by_week(rows: list, starts: list, value_col: str) -> pd.DataFrame:
    """
    rows: [{"session_id", "week_start", value_col}] → one row per week start.
    Weeks without rows are filled with zeros; weeks outside `starts` are dropped.
    """
    valid = set(starts)
    rows = [r for r in rows if r["week_start"] in valid]
    empty = pd.DataFrame({"total": [0.0] * len(starts), "sessions": [0] * len(starts)}, index=starts)
    if not rows:
        return empty
    frame = pd.DataFrame(rows)
    weekly = (
        frame.groupby("week_start")
        .agg(total=(value_col, "sum"), sessions=("session_id", "count"))
        .reindex(starts, fill_value=0)
    )
    return weekly


def weekly_volume_trend(
    sessions,
    weeks: int = DEFAULT_WEEKLY_VOLUME_WEEKS,
    reference_date=None,
    first_weekday: int = FIRST_WEEKDAY,
) -> list:
    """
    Strength tonnage per calendar week, oldest week first.

    Always returns exactly `weeks` points (zero-filled). Every session in a
    requested week counts toward session_count, even with zero tonnage.
    """
    starts = week_starts(resolve_reference_date(reference_date), weeks, first_weekday)
    if not starts:
        return []

    rows = [
        {
            "session_id": session.id,
            "week_start": week_start(session.date, first_weekday),
            "volume": strength_volume(session),
        }
        for session in sessions
    ]
    weekly = _bucket_by_week(rows, starts, "volume")
    return [
        WeeklyVolumePoint(
            week_start=start,
            total_volume=float(weekly.loc[start, "total"]),
            session_count=int(weekly.loc[start, "sessions"]),
        )
        for start in starts
    ]


# ═════════════════════════════════════════════════════════════════════
# 2. CONSISTENCY — streak & current week
# ═════════════════════════════════════════════════════════════════════

def current_streak(sessions, reference_date=None) -> int:
    """
    Consecutive training days ending today, or yesterday when today
    has no session yet.
    """
    workout_days = {day_of(s.date) for s in sessions}
    if not workout_days:
        return 0

    check = day_of(resolve_reference_date(reference_date))
    if check not in workout_days:
        check -= timedelta(days=1)
        if check not in workout_days:
            return 0

    streak = 0
    while check in workout_days:
        streak += 1
        check -= timedelta(days=1)
    return streak


def workouts_this_week(sessions, reference_date=None, first_weekday: int = FIRST_WEEKDAY) -> int:
    current = week_start(resolve_reference_date(reference_date), first_weekday)
    return sum(1 for s in sessions if week_start(s.date, first_weekday) == current)


# ═════════════════════════════════════════════════════════════════════
# 3. MUSCLE GROUP SPLIT
# ═════════════════════════════════════════════════════════════════════

def muscle_group_volume(sessions, cutoff=None) -> list:
    """
    Strength tonnage split evenly across each exercise's primary muscles.
    Exercises without muscles are credited to "Other".
    """
    rows = []
    for session in sessions:
        if not in_window(session, cutoff):
            continue
        for ex in session.strength_exercises():
            volume = analyze_strength_sets(ex)[0]
            if volume <= 0:
                continue
            groups = list(dict.fromkeys(ex.primary_muscles)) or [OTHER_MUSCLE_GROUP]
            share = volume / len(groups)
            for group in groups:
                rows.append({"session_id": session.id, "muscle_group": group, "volume": share})

    if not rows:
        return []

    frame = pd.DataFrame(rows)
    mg = (
        frame.groupby("muscle_group")
        .agg(total_volume=("volume", "sum"), sessions=("session_id", "nunique"))
        .reset_index()
    )
    grand_total = mg["total_volume"].sum()
    if grand_total <= 0:
        return []
    mg["pct_volume"] = (mg["total_volume"] / grand_total * 100).round(1)
    mg = mg.sort_values(["total_volume", "muscle_group"], ascending=[False, True])

    return [
        MuscleGroupVolume(
            muscle_group=row.muscle_group,
            total_volume=float(row.total_volume),
            session_count=int(row.sessions),
            percentage_of_total=float(row.pct_volume),
        )
        for row in mg.itertuples(index=False)
    ]


# ═════════════════════════════════════════════════════════════════════
# 4. CARDIO
# ═════════════════════════════════════════════════════════════════════

def _cardio_totals(session) -> tuple:
    """(duration_seconds, distance, logged_distance) for one session."""
    duration, distance, has_distance = 0, 0.0, False
    for ex in session.active_exercises():
        if not ex.is_cardio:
            continue
        for s in ex.completed_sets():
            if s.duration is not None and s.duration > 0:
                duration += int(s.duration)
            if s.distance is not None and s.distance > 0:
                distance += float(s.distance)
                has_distance = True
    return duration, distance, has_distance


def cardio_summary(sessions, cutoff=None) -> CardioSummary:
    total_duration, total_distance = 0, 0.0
    any_distance = False
    session_count = 0
    for session in sessions:
        if not in_window(session, cutoff):
            continue
        duration, distance, has_distance = _cardio_totals(session)
        if duration <= 0 and not has_distance:
            continue
        session_count += 1
        total_duration += duration
        total_distance += distance
        any_distance = any_distance or has_distance

    if session_count == 0:
        return EMPTY_CARDIO_SUMMARY
    return CardioSummary(
        total_duration=total_duration,
        total_distance=total_distance if any_distance else None,
        session_count=session_count,
        avg_duration_per_session=total_duration // session_count,
    )


def weekly_cardio_trend(
    sessions,
    weeks: int = DEFAULT_WEEKLY_VOLUME_WEEKS,
    reference_date=None,
    first_weekday: int = FIRST_WEEKDAY,
) -> list:
    starts = week_starts(resolve_reference_date(reference_date), weeks, first_weekday)
    if not starts:
        return []

    rows = [
        {
            "session_id": session.id,
            "week_start": week_start(session.date, first_weekday),
            "duration": _cardio_totals(session)[0],
        }
        for session in sessions
    ]
    weekly = _bucket_by_week(rows, starts, "duration")
    return [
        WeeklyCardioPoint(week_start=start, total_duration=int(weekly.loc[start, "total"]))
        for start in starts
    ]
