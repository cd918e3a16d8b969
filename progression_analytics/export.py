"""
Progression Analytics — Snapshot export

Turns an AnalyticsSnapshot into pandas DataFrames for CSV export or charting.
"""
import numpy as np
import pandas as pd


def _rate_column(numerator: pd.Series, denominator: pd.Series) -> pd.Series:
    if numerator.empty:
        return pd.Series(dtype=int)
    safe = denominator.where(denominator > 0, 1)
    return pd.Series(
        np.where(denominator > 0, np.floor(numerator / safe * 100 + 0.5), 0).astype(int),
        index=numerator.index,
    )


def weekly_volume_frame(snapshot) -> pd.DataFrame:
    df = pd.DataFrame(
        [
            {"week_start": pd.Timestamp(p.week_start), "total_volume": p.total_volume,
             "sessions": p.session_count}
            for p in snapshot.weekly_volume_trend
        ],
        columns=["week_start", "total_volume", "sessions"],
    )
    if df.empty:
        df["vol_delta_pct"] = pd.Series(dtype=float)
        return df
    delta = df["total_volume"].astype(float).pct_change(fill_method=None) * 100
    df["vol_delta_pct"] = delta.replace([np.inf, -np.inf], np.nan).round(1)
    return df


def lift_trends_frame(snapshot) -> pd.DataFrame:
    return pd.DataFrame(
        [
            {
                "exercise": t.exercise_name,
                "latest_date": pd.Timestamp(t.latest_date),
                "top_set": t.latest_top_set.formatted,
                "previous_top_set": t.previous_top_set.formatted if t.previous_top_set else None,
                "delta_weight": t.delta_weight,
                "direction": t.direction.value,
                "sessions": t.session_count,
            }
            for t in snapshot.lift_trends
        ],
        columns=["exercise", "latest_date", "top_set", "previous_top_set", "delta_weight",
                 "direction", "sessions"],
    )


def e1rm_frame(snapshot) -> pd.DataFrame:
    """Long format: one row per exercise per day, with the running best."""
    df = pd.DataFrame(
        [
            {
                "exercise": progress.exercise_name,
                "date": pd.Timestamp(point.date),
                "e1rm": round(point.estimated_one_rep_max, 1),
                "top_set": point.top_set.formatted,
            }
            for progress in snapshot.exercise_progress
            for point in progress.points
        ],
        columns=["exercise", "date", "e1rm", "top_set"],
    )
    if not df.empty:
        df["running_max_e1rm"] = df.groupby("exercise")["e1rm"].cummax()
    else:
        df["running_max_e1rm"] = pd.Series(dtype=float)
    return df


def personal_records_frame(snapshot) -> pd.DataFrame:
    return pd.DataFrame(
        [
            {
                "exercise": pr.exercise_name,
                "date": pd.Timestamp(pr.date),
                "previous_best": round(pr.previous_best, 1),
                "new_best": round(pr.new_best, 1),
                "improvement": round(pr.improvement, 1),
                "top_set": pr.top_set.formatted,
            }
            for pr in snapshot.recent_prs
        ],
        columns=["exercise", "date", "previous_best", "new_best", "improvement", "top_set"],
    )


def decision_profiles_frame(snapshot) -> pd.DataFrame:
    df = pd.DataFrame(
        [
            {"decision_path": p.name, "decisions": p.total_decisions,
             "accepted": p.accepted_count, "regress": p.regress_count}
            for p in snapshot.decision_profile_health
        ],
        columns=["decision_path", "decisions", "accepted", "regress"],
    )
    df["acceptance_pct"] = _rate_column(df["accepted"], df["decisions"])
    df["regress_pct"] = _rate_column(df["regress"], df["decisions"])
    return df


def alerts_frame(snapshot) -> pd.DataFrame:
    return pd.DataFrame(
        [{"type": a.type.value, "title": a.title, "message": a.message}
         for a in snapshot.progression_alerts],
        columns=["type", "title", "message"],
    )


def dry_run_frame(snapshot) -> pd.DataFrame:
    df = pd.DataFrame(
        [
            {"profile": r.name, "progress": r.progress_count, "stay": r.stay_count,
             "regress": r.regress_count, "agreement": r.agreement_count,
             "comparable": r.comparable_count}
            for r in snapshot.dry_run_profiles
        ],
        columns=["profile", "progress", "stay", "regress", "agreement", "comparable"],
    )
    df["agreement_pct"] = _rate_column(df["agreement"], df["comparable"])
    return df


def muscle_groups_frame(snapshot) -> pd.DataFrame:
    return pd.DataFrame(
        [
            {"muscle_group": m.muscle_group, "total_volume": m.total_volume,
             "sessions": m.session_count, "pct_volume": m.percentage_of_total}
            for m in snapshot.muscle_group_volume
        ],
        columns=["muscle_group", "total_volume", "sessions", "pct_volume"],
    )


def weekly_cardio_frame(snapshot) -> pd.DataFrame:
    return pd.DataFrame(
        [{"week_start": pd.Timestamp(p.week_start), "total_duration": p.total_duration}
         for p in snapshot.weekly_cardio_trend],
        columns=["week_start", "total_duration"],
    )


def summary_frame(snapshot) -> pd.DataFrame:
    health = snapshot.engine_health
    breakdown = snapshot.progression_breakdown
    cardio = snapshot.cardio_summary
    return pd.DataFrame([{
        "sessions_analyzed": snapshot.analyzed_session_count,
        "current_streak": snapshot.current_streak,
        "workouts_this_week": snapshot.workouts_this_week,
        "progress": breakdown.progress_count,
        "stay": breakdown.stay_count,
        "regress": breakdown.regress_count,
        "decisions": health.total_decisions,
        "acceptance_pct": health.acceptance_rate,
        "override_pct": health.override_rate,
        "regress_pct": health.regress_rate,
        "dry_run_inputs": snapshot.dry_run_input_count,
        "cardio_sessions": cardio.session_count,
        "cardio_duration": cardio.total_duration,
    }])


def snapshot_frames(snapshot) -> dict:
    """Every snapshot section as a DataFrame, keyed by section name."""
    return {
        "summary": summary_frame(snapshot),
        "weekly_volume": weekly_volume_frame(snapshot),
        "lift_trends": lift_trends_frame(snapshot),
        "e1rm": e1rm_frame(snapshot),
        "personal_records": personal_records_frame(snapshot),
        "decision_profiles": decision_profiles_frame(snapshot),
        "alerts": alerts_frame(snapshot),
        "dry_run": dry_run_frame(snapshot),
        "muscle_groups": muscle_groups_frame(snapshot),
        "weekly_cardio": weekly_cardio_frame(snapshot),
    }
