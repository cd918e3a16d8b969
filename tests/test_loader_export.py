"""
Tests for record loading, the per-set DataFrame, snapshot export and the report runner.
Run: pytest tests/ -v
"""
import json
from datetime import datetime

import pandas as pd
import pytest

from tests.helpers import REF, _make_exercise, _make_session


def _camel_record(session_id="s1", date="2026-10-14T18:00:00Z"):
    return {
        "id": session_id,
        "date": date,
        "completedModules": [{
            "id": "m1",
            "moduleName": "Lower",
            "skipped": False,
            "completedExercises": [{
                "id": "e1",
                "exerciseName": "Squat",
                "exerciseType": "strength",
                "primaryMuscles": ["Quads", "Glutes"],
                "completedSetGroups": [{
                    "id": "g1",
                    "sets": [
                        {"id": "a", "completed": True, "weight": 140, "reps": 5},
                        {"id": "b", "completed": False, "weight": 150, "reps": 5},
                    ],
                }],
                "progressionSuggestion": {
                    "baseValue": 140, "suggestedValue": 145,
                    "decisionCode": "WEIGHTED_V2", "confidence": 0.7,
                },
                "progressionRecommendation": "progress",
            }],
        }],
    }


# ═══════════════════════════════════════════════════════════════════════
# LOADER
# ═══════════════════════════════════════════════════════════════════════

class TestLoader:

    def test_camel_case_record(self):
        from progression_analytics.loader import session_from_record
        from progression_analytics.models import ExerciseType, Outcome
        session = session_from_record(_camel_record())
        assert session.date == datetime(2026, 10, 14, 18, 0)
        assert session.date.tzinfo is None
        module = session.modules[0]
        assert module.name == "Lower"
        ex = module.exercises[0]
        assert ex.exercise_type == ExerciseType.STRENGTH
        assert ex.primary_muscles == ("Quads", "Glutes")
        assert len(list(ex.completed_sets())) == 1
        assert ex.progression_suggestion.decision_code == "WEIGHTED_V2"
        assert ex.progression_suggestion.applied_outcome is None
        assert ex.progression_recommendation == Outcome.PROGRESS

    def test_snake_case_record(self):
        from progression_analytics.loader import session_from_record
        session = session_from_record({
            "id": "s2",
            "date": "2026-10-14T08:00:00+02:00",
            "modules": [{"id": "m", "name": "Run", "exercises": [{
                "exercise_name": "Rowing", "exercise_type": "cardio",
                "set_groups": [{"id": "g", "sets": [{"completed": True, "duration": 600}]}],
            }]}],
        })
        assert session.date == datetime(2026, 10, 14, 6, 0)
        assert session.modules[0].exercises[0].is_cardio

    def test_missing_id(self):
        from progression_analytics.loader import session_from_record
        record = _camel_record()
        del record["id"]
        with pytest.raises(ValueError, match="missing 'id'"):
            session_from_record(record)

    def test_missing_date(self):
        from progression_analytics.loader import session_from_record
        record = _camel_record()
        del record["date"]
        with pytest.raises(ValueError, match="missing 'date'"):
            session_from_record(record)

    def test_unknown_outcome(self):
        from progression_analytics.loader import session_from_record
        record = _camel_record()
        record["completedModules"][0]["completedExercises"][0]["progressionRecommendation"] = "deload"
        with pytest.raises(ValueError, match="Unknown progression outcome"):
            session_from_record(record)

    def test_unknown_exercise_type(self):
        from progression_analytics.loader import session_from_record
        record = _camel_record()
        record["completedModules"][0]["completedExercises"][0]["exerciseType"] = "yoga"
        with pytest.raises(ValueError, match="Unknown exercise type"):
            session_from_record(record)

    def test_numeric_strings_are_coerced(self):
        from progression_analytics.engine import compute_dashboard
        from progression_analytics.loader import session_from_record
        record = _camel_record()
        sets = record["completedModules"][0]["completedExercises"][0]["completedSetGroups"][0]["sets"]
        sets[0].update(weight="140", reps="5")
        session = session_from_record(record)
        s = session.modules[0].exercises[0].set_groups[0].sets[0]
        assert (s.weight, s.reps) == (140.0, 5)
        snap = compute_dashboard([session], reference_date=REF)
        assert snap.weekly_volume_trend[-1].total_volume == 700

    def test_non_numeric_weight(self):
        from progression_analytics.loader import session_from_record
        record = _camel_record()
        sets = record["completedModules"][0]["completedExercises"][0]["completedSetGroups"][0]["sets"]
        sets[0]["weight"] = "heavy"
        with pytest.raises(ValueError, match="Invalid set field 'weight'"):
            session_from_record(record)

    def test_non_numeric_confidence(self):
        from progression_analytics.loader import session_from_record
        record = _camel_record()
        record["completedModules"][0]["completedExercises"][0]["progressionSuggestion"]["confidence"] = "high"
        with pytest.raises(ValueError, match="Invalid suggestion confidence"):
            session_from_record(record)

    def test_load_sessions_file(self, tmp_path):
        from progression_analytics.loader import load_sessions
        path = tmp_path / "sessions.json"
        path.write_text(json.dumps({"sessions": [_camel_record("a"), _camel_record("b")]}))
        sessions = load_sessions(str(path))
        assert [s.id for s in sessions] == ["a", "b"]


class TestSessionsDataFrame:

    def test_one_row_per_set(self):
        from progression_analytics.loader import session_from_record, sessions_to_dataframe
        df = sessions_to_dataframe([session_from_record(_camel_record())])
        assert len(df) == 2
        assert list(df["volume_kg"]) == [700, 0]
        assert df.loc[0, "e1rm"] == 157.5
        assert df.loc[1, "e1rm"] == 0
        assert df.loc[0, "module"] == "Lower"

    def test_empty(self):
        from progression_analytics.loader import sessions_to_dataframe
        assert sessions_to_dataframe([]).empty


# ═══════════════════════════════════════════════════════════════════════
# EXPORT
# ═══════════════════════════════════════════════════════════════════════

class TestExport:

    def _snapshot(self):
        from progression_analytics.engine import compute_dashboard
        sessions = [
            _make_session("a", datetime(2026, 10, 6, 18), [_make_exercise("Squat", [(100, 5)])]),
            _make_session("b", REF, [_make_exercise("Squat", [(110, 5)])]),
        ]
        return compute_dashboard(sessions, reference_date=REF, weekly_volume_weeks=3)

    def test_all_sections(self):
        from progression_analytics.export import snapshot_frames
        frames = snapshot_frames(self._snapshot())
        assert set(frames) == {
            "summary", "weekly_volume", "lift_trends", "e1rm", "personal_records",
            "decision_profiles", "alerts", "dry_run", "muscle_groups", "weekly_cardio",
        }
        assert all(isinstance(f, pd.DataFrame) for f in frames.values())

    def test_weekly_volume_delta(self):
        from progression_analytics.export import weekly_volume_frame
        df = weekly_volume_frame(self._snapshot())
        assert list(df["total_volume"]) == [0, 500, 550]
        assert df["vol_delta_pct"].iloc[2] == 10.0
        assert pd.isna(df["vol_delta_pct"].iloc[1])

    def test_running_max(self):
        from progression_analytics.export import e1rm_frame
        df = e1rm_frame(self._snapshot())
        assert list(df["running_max_e1rm"]) == [112.5, 123.8]

    def test_empty_snapshot(self):
        from progression_analytics.export import snapshot_frames
        from progression_analytics.snapshot import AnalyticsSnapshot
        frames = snapshot_frames(AnalyticsSnapshot())
        assert frames["weekly_volume"].empty
        assert frames["e1rm"].empty
        assert frames["dry_run"].empty
        assert len(frames["summary"]) == 1


class TestReport:

    def test_run_report_exports(self, tmp_path, capsys):
        from progression_analytics.report import run_report
        path = tmp_path / "sessions.json"
        path.write_text(json.dumps([_camel_record()]))
        out_dir = tmp_path / "out"
        snap = run_report(str(path), "90d", reference_date=REF, export_dir=str(out_dir))
        assert snap.analyzed_session_count == 1
        assert (out_dir / "weekly_volume.csv").exists()
        assert "Progression Dashboard (90d)" in capsys.readouterr().out

    def test_unknown_range(self, tmp_path):
        from progression_analytics.report import run_report
        with pytest.raises(ValueError):
            run_report(str(tmp_path / "missing.json"), "7d")

    def test_invalid_record_fails_as_value_error(self, tmp_path):
        from progression_analytics.report import run_report
        record = _camel_record()
        sets = record["completedModules"][0]["completedExercises"][0]["completedSetGroups"][0]["sets"]
        sets[0]["weight"] = "heavy"
        path = tmp_path / "sessions.json"
        path.write_text(json.dumps([record]))
        with pytest.raises(ValueError, match="Invalid set field"):
            run_report(str(path), "28d", reference_date=REF)
