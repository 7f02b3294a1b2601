"""Per-user progress summary: counts, completion rate and activity streak."""

from datetime import date, datetime, timedelta, timezone
from typing import Any, Iterable
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncConnection

from .enums import ProgressStatus
from .progress import get_user_progress_records
from .queries.units import count_exercise_units


def _utc_day(moment: datetime) -> date:
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return moment.astimezone(timezone.utc).date()


def compute_streak(activity: Iterable[datetime], now: datetime | None = None) -> int:
    """Count consecutive UTC calendar days with at least one activity.

    The streak is anchored at the most recent activity and is 0 when that
    activity is more than one calendar day before `now`. Several activities
    on the same day count once.
    """
    days = sorted({_utc_day(moment) for moment in activity}, reverse=True)
    if not days:
        return 0

    today = _utc_day(now or datetime.now(timezone.utc))
    if (today - days[0]).days > 1:
        return 0

    streak = 1
    expected = days[0] - timedelta(days=1)
    for day in days[1:]:
        if day != expected:
            break
        streak += 1
        expected -= timedelta(days=1)
    return streak


def build_progress_summary(
    records: list[dict[str, Any]],
    total_units: int,
    now: datetime | None = None,
) -> dict[str, Any]:
    """Aggregate a user's progress records.

    Args:
        records: The user's progress records (any order)
        total_units: Number of exercise units in the catalog

    Returns:
        Dict with completed, inProgress, totalUnits, completionRate,
        streak and lastActivity
    """
    completed = sum(1 for r in records if r["status"] == ProgressStatus.completed)
    in_progress = sum(1 for r in records if r["status"] == ProgressStatus.in_progress)

    completion_rate = round(completed / total_units * 100, 2) if total_units else 0.0

    activity = [r["updated_at"] for r in records if r.get("updated_at")]
    last_activity = max(activity) if activity else None

    return {
        "completed": completed,
        "inProgress": in_progress,
        "totalUnits": total_units,
        "completionRate": completion_rate,
        "streak": compute_streak(activity, now=now),
        "lastActivity": last_activity.isoformat() if last_activity else None,
    }


async def get_progress_summary(conn: AsyncConnection, user_id: UUID) -> dict[str, Any]:
    """Load a user's progress and summarize it."""
    total_units = await count_exercise_units(conn)
    records = await get_user_progress_records(conn, user_id)
    return build_progress_summary(records, total_units)
