"""
Per-user progress routes.

Endpoints:
- GET /api/users/{user_id}/progress - Progress summary with streak
- GET /api/users/{user_id}/recommended-units - Recommended exercises
- GET /api/users/{user_id}/recent-units - Recently worked-on units

All endpoints only serve the requester's own data.
"""

from typing import Any
from uuid import UUID

from fastapi import APIRouter, Depends, Query

from codepath.database import get_connection
from codepath.progress import get_recent_units
from codepath.recommendations import DEFAULT_LIMIT, recommend_units
from codepath.summary import get_progress_summary
from web_api.auth import CurrentUser, get_current_user, require_self

router = APIRouter(prefix="/api/users", tags=["users"])


@router.get("/{user_id}/progress")
async def get_user_progress_summary(
    user_id: UUID,
    user: CurrentUser = Depends(get_current_user),
) -> dict[str, Any]:
    """Get completed / in-progress counts, completion rate and streak."""
    require_self(user, user_id)

    async with get_connection() as conn:
        return await get_progress_summary(conn, user_id)


@router.get("/{user_id}/recommended-units")
async def get_recommended_units(
    user_id: UUID,
    limit: int = Query(DEFAULT_LIMIT, ge=1, le=50),
    user: CurrentUser = Depends(get_current_user),
) -> list[dict[str, Any]]:
    """Get exercises ranked by overlap with technologies the user has mastered."""
    require_self(user, user_id)

    async with get_connection() as conn:
        return await recommend_units(conn, user_id, limit=limit)


@router.get("/{user_id}/recent-units")
async def get_recent_user_units(
    user_id: UUID,
    limit: int = Query(5, ge=1, le=50),
    user: CurrentUser = Depends(get_current_user),
) -> list[dict[str, Any]]:
    """Get the units the user worked on most recently, with their progress."""
    require_self(user, user_id)

    async with get_connection() as conn:
        return await get_recent_units(conn, user_id, limit=limit)
