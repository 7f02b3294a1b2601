"""Queries for courses and the ordering of their modules."""

import logging
from datetime import datetime, timezone
from typing import Any
from uuid import UUID

from sqlalchemy import and_, select, update
from sqlalchemy.ext.asyncio import AsyncConnection

from ..tables import courses, units

logger = logging.getLogger(__name__)


class CourseNotFoundError(Exception):
    """Raised when a course cannot be found."""

    pass


async def load_course(conn: AsyncConnection, course_id: UUID) -> dict[str, Any]:
    """Load a course by id. Raises CourseNotFoundError if it doesn't exist."""
    result = await conn.execute(select(courses).where(courses.c.course_id == course_id))
    row = result.mappings().first()
    if row is None:
        raise CourseNotFoundError(f"Course not found: {course_id}")
    return dict(row)


async def get_course_module_ids(conn: AsyncConnection, course_id: UUID) -> list[UUID]:
    """Get the ids of a course's modules in position order."""
    result = await conn.execute(
        select(units.c.unit_id)
        .where(units.c.course_id == course_id)
        .order_by(units.c.position, units.c.created_at)
    )
    return [row.unit_id for row in result]


async def reorder_course_modules(
    conn: AsyncConnection,
    course_id: UUID,
    positions: list[tuple[UUID, int]],
) -> list[dict[str, Any]]:
    """Set new positions for a course's modules.

    Args:
        positions: (unit_id, position) pairs. Units that don't belong to the
            course are left untouched.

    Returns:
        The course's modules in their new order.
    """
    now = datetime.now(timezone.utc)
    for unit_id, position in positions:
        await conn.execute(
            update(units)
            .where(and_(units.c.unit_id == unit_id, units.c.course_id == course_id))
            .values(position=position, updated_at=now)
        )
    logger.info("Reordered %d modules in course %s", len(positions), course_id)

    result = await conn.execute(
        select(units)
        .where(units.c.course_id == course_id)
        .order_by(units.c.position, units.c.created_at)
    )
    return [dict(row) for row in result.mappings()]
