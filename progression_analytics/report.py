"""
Progression Analytics — Dashboard report
Run manually: python -m progression_analytics.report sessions.json [--range 28d|90d|All]
              [--reference-date 2026-10-18] [--export out_dir]
"""
import os
import sys
from datetime import datetime

from progression_analytics.config import DEFAULT_TIME_RANGE, get_time_range
from progression_analytics.engine import compute_for_range
from progression_analytics.export import snapshot_frames
from progression_analytics.loader import load_sessions, parse_datetime


def _arg_value(argv: list, flag: str, default=None):
    if flag in argv:
        idx = argv.index(flag)
        if idx + 1 < len(argv):
            return argv[idx + 1]
    return default


def export_snapshot(snapshot, out_dir: str) -> list:
    """Write every snapshot section to <out_dir>/<section>.csv."""
    os.makedirs(out_dir, exist_ok=True)
    written = []
    for name, frame in snapshot_frames(snapshot).items():
        path = os.path.join(out_dir, f"{name}.csv")
        frame.to_csv(path, index=False)
        written.append(path)
    return written


def print_report(snapshot, range_key: str) -> None:
    health = snapshot.engine_health
    breakdown = snapshot.progression_breakdown

    print(f"\n{'='*50}")
    print(f"📊 Progression Dashboard ({range_key}):")
    print(f"   Sessions analyzed: {snapshot.analyzed_session_count}")
    print(f"   Current streak: {snapshot.current_streak} days")
    print(f"   Workouts this week: {snapshot.workouts_this_week}")

    print("\n📦 Weekly volume:")
    for point in snapshot.weekly_volume_trend:
        print(f"   {point.week_start.isoformat()} | {point.total_volume:,.0f} kg | {point.session_count} sessions")

    if snapshot.lift_trends:
        print("\n🏋️ Most trained lifts:")
        for trend in snapshot.lift_trends:
            arrow = {"up": "📈", "down": "📉", "flat": "➡️"}[trend.direction.value]
            print(f"   {arrow} {trend.exercise_name}: {trend.latest_top_set.formatted} ({trend.session_count} sessions)")

    if snapshot.recent_prs:
        print("\n🏆 Recent PRs:")
        for pr in snapshot.recent_prs:
            print(f"   {pr.date.date()} {pr.summary} (e1RM {pr.previous_best:.1f} → {pr.new_best:.1f})")

    print("\n🧭 Progression decisions:")
    print(f"   Logged: {breakdown.progress_count} progress / {breakdown.stay_count} stay / {breakdown.regress_count} regress")
    if health.total_decisions:
        print(f"   Acceptance {health.acceptance_rate}% | Overrides {health.override_rate}% | Regress {health.regress_rate}%")
        for profile in snapshot.decision_profile_health:
            print(f"   • {profile.name}: {profile.total_decisions} decisions, {profile.acceptance_rate}% accepted")
    else:
        print("   No comparable decisions in window.")

    if snapshot.progression_alerts:
        print("\n⚠️  Alerts:")
        for alert in snapshot.progression_alerts:
            print(f"   {alert.title} — {alert.message}")

    print(f"\n🧪 Dry run ({snapshot.dry_run_input_count} decisions replayed):")
    for result in snapshot.dry_run_profiles:
        print(f"   {result.name}: {result.progress_count}↑ {result.stay_count}= {result.regress_count}↓"
              f" | agreement {result.agreement_rate}% ({result.agreement_count}/{result.comparable_count})")


def run_report(path: str, range_key: str = DEFAULT_TIME_RANGE, reference_date=None,
               export_dir: str = None):
    print("🔄 Progression report — Starting...")
    print(f"   {datetime.now().isoformat()}")

    get_time_range(range_key)

    print(f"\n📥 Loading sessions from {path}...")
    sessions = load_sessions(path)
    print(f"   Found {len(sessions)} sessions")

    snapshot = compute_for_range(sessions, range_key, reference_date=reference_date)
    print_report(snapshot, range_key)

    if export_dir:
        written = export_snapshot(snapshot, export_dir)
        print(f"\n💾 Exported {len(written)} tables → {export_dir}/")

    return snapshot


if __name__ == "__main__":
    args = sys.argv[1:]
    if not args or args[0].startswith("--"):
        print(__doc__.strip())
        sys.exit(2)

    range_key = _arg_value(args, "--range", DEFAULT_TIME_RANGE)
    ref = _arg_value(args, "--reference-date")
    try:
        run_report(
            args[0],
            range_key=range_key,
            reference_date=parse_datetime(ref) if ref else None,
            export_dir=_arg_value(args, "--export"),
        )
    except (OSError, ValueError) as e:
        print(f"\n❌ Report FAILED: {e}")
        sys.exit(1)
