"""
Progression Analytics — Record loader

Converts plain session dicts (decoded JSON exports, snake_case or camelCase)
into the immutable input model, and flattens sessions to a per-set DataFrame.
"""
import json
from datetime import datetime, timezone

import pandas as pd

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
from progression_analytics.snapshot import brzycki_e1rm

_MISSING = object()


def _pick(record: dict, *keys, default=None):
    for key in keys:
        value = record.get(key, _MISSING)
        if value is not _MISSING:
            return value
    return default


def parse_datetime(value) -> datetime:
    """ISO-8601 string or datetime → naive datetime (aware values become UTC)."""
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, str) and value:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    else:
        raise ValueError(f"Invalid session date: {value!r}")
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
    return parsed


def _outcome(value):
    if value is None or value == "":
        return None
    try:
        return Outcome(value)
    except ValueError:
        raise ValueError(f"Unknown progression outcome: {value!r}") from None


def _exercise_type(value) -> ExerciseType:
    try:
        return ExerciseType(value or ExerciseType.STRENGTH.value)
    except ValueError:
        raise ValueError(f"Unknown exercise type: {value!r}") from None


def _number(value, cast, field: str):
    if value is None or value == "":
        return None
    try:
        return cast(value)
    except (TypeError, ValueError):
        raise ValueError(f"Invalid {field}: {value!r}") from None


def _suggestion(record):
    if not record:
        return None
    return ProgressionSuggestion(
        base_value=_number(_pick(record, "base_value", "baseValue"), float, "suggestion base value") or 0.0,
        suggested_value=_number(
            _pick(record, "suggested_value", "suggestedValue"), float, "suggested value"
        ) or 0.0,
        confidence=_number(_pick(record, "confidence"), float, "suggestion confidence"),
        decision_code=_pick(record, "decision_code", "decisionCode"),
        applied_outcome=_outcome(_pick(record, "applied_outcome", "appliedOutcome")),
    )


def _set(record: dict) -> SetData:
    return SetData(
        id=str(_pick(record, "id", default="")),
        completed=bool(_pick(record, "completed", default=False)),
        weight=_number(_pick(record, "weight"), float, "set field 'weight'"),
        reps=_number(_pick(record, "reps"), int, "set field 'reps'"),
        duration=_number(_pick(record, "duration"), int, "set field 'duration'"),
        distance=_number(_pick(record, "distance"), float, "set field 'distance'"),
    )


def _exercise(record: dict) -> SessionExercise:
    groups = _pick(record, "set_groups", "completedSetGroups", default=[]) or []
    return SessionExercise(
        id=str(_pick(record, "id", default="")),
        exercise_name=_pick(record, "exercise_name", "exerciseName", default=""),
        exercise_type=_exercise_type(_pick(record, "exercise_type", "exerciseType")),
        primary_muscles=tuple(_pick(record, "primary_muscles", "primaryMuscles", default=[]) or []),
        set_groups=tuple(
            SetGroup(id=str(g.get("id", "")), sets=tuple(_set(s) for s in g.get("sets", []) or []))
            for g in groups
        ),
        progression_suggestion=_suggestion(_pick(record, "progression_suggestion", "progressionSuggestion")),
        progression_recommendation=_outcome(
            _pick(record, "progression_recommendation", "progressionRecommendation")
        ),
    )


def session_from_record(record: dict) -> Session:
    session_id = record.get("id")
    if session_id is None or session_id == "":
        raise ValueError("Session record is missing 'id'")
    if "date" not in record:
        raise ValueError(f"Session {session_id} is missing 'date'")

    modules = _pick(record, "modules", "completedModules", default=[]) or []
    return Session(
        id=str(session_id),
        date=parse_datetime(record["date"]),
        modules=tuple(
            CompletedModule(
                id=str(m.get("id", "")),
                name=_pick(m, "name", "moduleName", default="") or "",
                skipped=bool(m.get("skipped", False)),
                exercises=tuple(
                    _exercise(ex) for ex in _pick(m, "exercises", "completedExercises", default=[]) or []
                ),
            )
            for m in modules
        ),
    )


def sessions_from_records(records) -> list:
    return [session_from_record(r) for r in records]


def load_sessions(path: str) -> list:
    """Read a JSON file holding a list of sessions (or {"sessions": [...]})."""
    with open(path, encoding="utf-8") as fh:
        data = json.load(fh)
    if isinstance(data, dict):
        data = data.get("sessions", [])
    return sessions_from_records(data)


def sessions_to_dataframe(sessions) -> pd.DataFrame:
    """
    Flatten sessions to one row per logged set.
    Skipped modules are kept and flagged so callers can filter them.
    """
    rows = []
    for session in sessions:
        for module in session.modules:
            for ex in module.exercises:
                for group in ex.set_groups:
                    for s in group.sets:
                        weight = s.weight or 0
                        reps = s.reps or 0
                        counts = s.completed and weight > 0 and reps > 0
                        rows.append({
                            "date": pd.Timestamp(session.date),
                            "session_id": session.id,
                            "module": module.name,
                            "skipped": module.skipped,
                            "exercise": ex.exercise_name,
                            "exercise_type": ex.exercise_type.value,
                            "set_group_id": group.id,
                            "set_id": s.id,
                            "completed": s.completed,
                            "weight": weight,
                            "reps": reps,
                            "duration": s.duration or 0,
                            "distance": s.distance or 0,
                            "volume_kg": weight * reps if counts else 0,
                            "e1rm": round(brzycki_e1rm(weight, reps) or 0, 1) if s.completed else 0,
                        })

    df = pd.DataFrame(rows)
    if not df.empty:
        df = df.sort_values(["date", "session_id"], kind="stable").reset_index(drop=True)
    return df
