"""Progress ledger.

One row per (user, unit), written with INSERT ... ON CONFLICT on the
(user_id, unit_id) unique constraint so concurrent requests can never create
duplicates. The last writer wins on everything except `completed_at`, which
is set once on first completion and kept from then on.
"""

from datetime import datetime, timezone
from typing import Any
from uuid import UUID

from sqlalchemy import case, func, select
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.ext.asyncio import AsyncConnection

from .enums import ProgressStatus
from .tables import progress_records, units

CONFLICT_TARGET = ["user_id", "unit_id"]


async def mark_unit_complete(
    conn: AsyncConnection,
    *,
    user_id: UUID,
    unit_id: UUID,
) -> dict:
    """Mark a unit complete for a user, creating the record if needed.

    Re-completing keeps the original completed_at so completion analytics
    don't churn; updated_at is bumped on every call.

    Returns the progress record.
    """
    now = datetime.now(timezone.utc)
    stmt = pg_insert(progress_records).values(
        user_id=user_id,
        unit_id=unit_id,
        status=ProgressStatus.completed,
        completed_at=now,
        updated_at=now,
    )
    stmt = stmt.on_conflict_do_update(
        index_elements=CONFLICT_TARGET,
        set_={
            "status": ProgressStatus.completed,
            "completed_at": func.coalesce(
                progress_records.c.completed_at, stmt.excluded.completed_at
            ),
            "updated_at": stmt.excluded.updated_at,
        },
    ).returning(progress_records)

    result = await conn.execute(stmt)
    row = result.fetchone()
    # No explicit commit - let the caller's transaction context handle it
    return dict(row._mapping)


async def record_attempt(
    conn: AsyncConnection,
    *,
    user_id: UUID,
    unit_id: UUID,
    code: str | None,
) -> dict:
    """Store the latest code snapshot for a unit.

    Moves the record to in_progress unless it is already completed;
    completion is never regressed by a later attempt.
    """
    now = datetime.now(timezone.utc)
    stmt = pg_insert(progress_records).values(
        user_id=user_id,
        unit_id=unit_id,
        status=ProgressStatus.in_progress,
        code=code,
        updated_at=now,
    )
    stmt = stmt.on_conflict_do_update(
        index_elements=CONFLICT_TARGET,
        set_={
            "status": case(
                (
                    progress_records.c.status == ProgressStatus.completed,
                    progress_records.c.status,
                ),
                else_=stmt.excluded.status,
            ),
            "code": stmt.excluded.code,
            "updated_at": stmt.excluded.updated_at,
        },
    ).returning(progress_records)

    result = await conn.execute(stmt)
    row = result.fetchone()
    return dict(row._mapping)


async def get_user_progress_records(
    conn: AsyncConnection, user_id: UUID
) -> list[dict[str, Any]]:
    """Get all of a user's progress records, most recently updated first."""
    result = await conn.execute(
        select(progress_records)
        .where(progress_records.c.user_id == user_id)
        .order_by(progress_records.c.updated_at.desc())
    )
    return [dict(row) for row in result.mappings()]


async def get_completed_unit_ids(
    conn: AsyncConnection,
    user_id: UUID,
    unit_ids: list[UUID] | None = None,
) -> set[UUID]:
    """Get the ids of units the user has completed.

    When `unit_ids` is given, only those units are considered.
    """
    query = select(progress_records.c.unit_id).where(
        (progress_records.c.user_id == user_id)
        & (progress_records.c.status == ProgressStatus.completed)
    )
    if unit_ids is not None:
        if not unit_ids:
            return set()
        query = query.where(progress_records.c.unit_id.in_(unit_ids))

    result = await conn.execute(query)
    return {row.unit_id for row in result}


async def get_recent_units(
    conn: AsyncConnection, user_id: UUID, limit: int = 5
) -> list[dict[str, Any]]:
    """Get the units a user touched most recently, with their progress.

    Records whose unit has been deleted are dropped by the join.
    """
    result = await conn.execute(
        select(
            units,
            progress_records.c.id.label("progress_id"),
            progress_records.c.status,
            progress_records.c.code,
            progress_records.c.completed_at,
            progress_records.c.updated_at.label("progress_updated_at"),
        )
        .select_from(
            progress_records.join(units, units.c.unit_id == progress_records.c.unit_id)
        )
        .where(progress_records.c.user_id == user_id)
        .order_by(progress_records.c.updated_at.desc())
        .limit(limit)
    )

    recent = []
    for row in result.mappings():
        unit = {key: row[key] for key in units.c.keys()}
        unit["progress"] = {
            "id": row["progress_id"],
            "status": row["status"],
            "code": row["code"],
            "completed_at": row["completed_at"],
            "updated_at": row["progress_updated_at"],
        }
        recent.append(unit)
    return recent
