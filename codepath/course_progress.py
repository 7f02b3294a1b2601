"""Course completion percentage from the progress ledger."""

import math
from typing import Any
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncConnection

from .progress import get_completed_unit_ids
from .queries.courses import get_course_module_ids, load_course


class CourseHasNoModulesError(Exception):
    """Raised when progress is requested for a course with no modules."""

    pass


def _round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


def compute_course_progress(
    module_ids: list[UUID], completed_ids: set[UUID]
) -> dict[str, Any]:
    """Build the course progress payload.

    Only completions of the course's own modules count.

    Raises:
        CourseHasNoModulesError: if module_ids is empty
    """
    if not module_ids:
        raise CourseHasNoModulesError("No modules found")

    done = [mid for mid in module_ids if mid in completed_ids]
    total = len(module_ids)
    return {
        "totalModules": total,
        "completedModules": len(done),
        "progressPercentage": _round_half_up(len(done) / total * 100),
        "completedModuleIds": [str(mid) for mid in done],
    }


async def get_course_progress(
    conn: AsyncConnection, user_id: UUID, course_id: UUID
) -> dict[str, Any]:
    """Get a user's progress through a course.

    Raises:
        CourseNotFoundError: if the course doesn't exist
        CourseHasNoModulesError: if the course has no modules
    """
    await load_course(conn, course_id)
    module_ids = await get_course_module_ids(conn, course_id)
    if not module_ids:
        raise CourseHasNoModulesError(f"No modules found for course {course_id}")

    completed_ids = await get_completed_unit_ids(conn, user_id, module_ids)
    return compute_course_progress(module_ids, completed_ids)
