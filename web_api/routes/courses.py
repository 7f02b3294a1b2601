# web_api/routes/courses.py
"""Course API routes."""

import logging
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel

from codepath.course_progress import CourseHasNoModulesError, get_course_progress
from codepath.database import get_connection, get_transaction
from codepath.queries.courses import (
    CourseNotFoundError,
    load_course,
    reorder_course_modules,
)
from web_api.auth import CurrentUser, get_current_user, require_admin

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/courses", tags=["courses"])


class CourseProgressResponse(BaseModel):
    totalModules: int
    completedModules: int
    progressPercentage: int
    completedModuleIds: list[str]


class ModulePosition(BaseModel):
    id: UUID
    order: int


class ReorderRequest(BaseModel):
    modules: list[ModulePosition]


async def _course_progress(user: CurrentUser, course_id: UUID) -> CourseProgressResponse:
    async with get_connection() as conn:
        try:
            progress = await get_course_progress(conn, user.user_id, course_id)
        except CourseNotFoundError:
            raise HTTPException(status_code=404, detail="Course not found")
        except CourseHasNoModulesError:
            raise HTTPException(status_code=404, detail="No modules found")
    return CourseProgressResponse(**progress)


@router.get("/{course_id}/progress", response_model=CourseProgressResponse)
async def get_course_progress_endpoint(
    course_id: UUID,
    user: CurrentUser = Depends(get_current_user),
):
    """Get the current user's completion percentage for a course.

    Returns 404 when the course doesn't exist or has no modules.
    """
    return await _course_progress(user, course_id)


@router.post("/{course_id}/start", response_model=CourseProgressResponse)
async def start_course(
    course_id: UUID,
    user: CurrentUser = Depends(get_current_user),
):
    """Start (or resume) a course: returns where the user currently stands."""
    return await _course_progress(user, course_id)


@router.put("/{course_id}/modules/reorder")
async def reorder_modules(
    course_id: UUID,
    body: ReorderRequest,
    user: CurrentUser = Depends(get_current_user),
):
    """Set new module positions for a course (admin only).

    Returns the course's modules in their new order.
    """
    require_admin(user)

    async with get_transaction() as conn:
        try:
            await load_course(conn, course_id)
        except CourseNotFoundError:
            raise HTTPException(status_code=404, detail="Course not found")

        logger.info(
            "User %s reordering %d modules in course %s",
            user.user_id,
            len(body.modules),
            course_id,
        )
        return await reorder_course_modules(
            conn, course_id, [(m.id, m.order) for m in body.modules]
        )
