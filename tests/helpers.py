"""Builders for minimal session histories used across the test modules."""
from datetime import datetime, timedelta

from progression_analytics.models import (
    CompletedModule,
    ExerciseType,
    Outcome,
    ProgressionSuggestion,
    Session,
    SessionExercise,
    SetData,
    SetGroup,
)

# Wednesday; its Monday-based week starts 2026-10-12
REF = datetime(2026, 10, 14, 18, 0)


def _days_ago(n: int, hour: int = 18) -> datetime:
    return (REF - timedelta(days=n)).replace(hour=hour)


def _make_sets(weight_reps: list, completed: bool = True) -> tuple:
    """[(weight, reps), ...] → one SetGroup of SetData."""
    return (
        SetGroup(
            id="g1",
            sets=tuple(
                SetData(id=f"s{i}", completed=completed, weight=w, reps=r)
                for i, (w, r) in enumerate(weight_reps)
            ),
        ),
    )


def _make_suggestion(base=100.0, suggested=105.0, code=None, confidence=None, applied=None):
    return ProgressionSuggestion(
        base_value=base,
        suggested_value=suggested,
        confidence=confidence,
        decision_code=code,
        applied_outcome=applied,
    )


def _make_exercise(
    name: str = "Bench Press",
    sets: list = ((100.0, 5),),
    exercise_type: ExerciseType = ExerciseType.STRENGTH,
    suggestion=None,
    actual: Outcome = None,
    muscles: tuple = (),
    completed: bool = True,
) -> SessionExercise:
    return SessionExercise(
        id=f"ex-{name}",
        exercise_name=name,
        exercise_type=exercise_type,
        set_groups=_make_sets(list(sets), completed=completed),
        primary_muscles=tuple(muscles),
        progression_suggestion=suggestion,
        progression_recommendation=actual,
    )


def _make_cardio(name: str = "Rowing", duration: int = 600, distance: float = None) -> SessionExercise:
    return SessionExercise(
        id=f"ex-{name}",
        exercise_name=name,
        exercise_type=ExerciseType.CARDIO,
        set_groups=(SetGroup(id="c1", sets=(SetData(id="c1s", completed=True, duration=duration,
                                                     distance=distance),)),),
    )


def _make_session(session_id: str, date: datetime, exercises: list, skipped: bool = False) -> Session:
    return Session(
        id=session_id,
        date=date,
        modules=(CompletedModule(id=f"m-{session_id}", name="Main", skipped=skipped,
                                 exercises=tuple(exercises)),),
    )


def _make_decision_history(name: str, outcomes: list, expected_suggested: float = 105.0,
                           start_days_ago: int = 1, code: str = "BASELINE_V2",
                           confidence: float = 0.8) -> list:
    """One session per outcome, one day apart, all suggesting the same change."""
    return [
        _make_session(
            f"{name}-{i}",
            _days_ago(start_days_ago + i),
            [_make_exercise(
                name,
                suggestion=_make_suggestion(100.0, expected_suggested, code=code, confidence=confidence),
                actual=outcome,
            )],
        )
        for i, outcome in enumerate(outcomes)
    ]
