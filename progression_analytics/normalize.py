"""
Progression Analytics — Input normalizer

Ordering, reference dates, decision cutoffs and calendar-week buckets.
"""
from datetime import date, datetime, timedelta, timezone
from typing import Optional

from progression_analytics.config import FIRST_WEEKDAY


def resolve_reference_date(reference_date=None) -> datetime:
    """Default to "now"; plain dates are promoted to midnight, aware values become naive UTC."""
    if reference_date is None:
        return datetime.now()
    if not isinstance(reference_date, datetime):
        return datetime.combine(reference_date, datetime.min.time())
    if reference_date.tzinfo is not None:
        return reference_date.astimezone(timezone.utc).replace(tzinfo=None)
    return reference_date


def sessions_desc(sessions) -> list:
    """Sessions newest first. Stable, so equal dates keep input order."""
    return sorted(sessions, key=lambda s: s.date, reverse=True)


def sessions_asc(sessions) -> list:
    return list(reversed(sessions_desc(sessions)))


def decision_cutoff(reference_date: datetime, window_days: int) -> Optional[datetime]:
    """Oldest session date inside the decision window; None means unbounded."""
    if window_days <= 0:
        return None
    return reference_date - timedelta(days=window_days)


def in_window(session, cutoff: Optional[datetime]) -> bool:
    return cutoff is None or session.date >= cutoff


def day_of(moment) -> date:
    return moment.date() if isinstance(moment, datetime) else moment


def week_start(moment, first_weekday: int = FIRST_WEEKDAY) -> date:
    """Start of the calendar week containing `moment`."""
    day = day_of(moment)
    offset = (day.weekday() - first_weekday) % 7
    return day - timedelta(days=offset)


def week_starts(reference_date, weeks: int, first_weekday: int = FIRST_WEEKDAY) -> list:
    """`weeks` consecutive week starts ending at the reference week, oldest first."""
    if weeks <= 0:
        return []
    current = week_start(reference_date, first_weekday)
    return [current - timedelta(weeks=offset) for offset in range(weeks - 1, -1, -1)]
