"""Progress tracking API routes.

Endpoints:
- POST /api/units/{unit_id}/complete - Mark a unit as complete
- POST /api/units/{unit_id}/attempt - Save the latest code snapshot
"""

from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel

from codepath.database import get_transaction
from codepath.progress import mark_unit_complete, record_attempt
from codepath.queries.units import UnitNotFoundError, load_unit
from web_api.auth import CurrentUser, get_current_user

router = APIRouter(prefix="/api/units", tags=["progress"])


class MarkCompleteResponse(BaseModel):
    success: bool
    completed_at: str | None = None


class AttemptRequest(BaseModel):
    code: str | None = None


class AttemptResponse(BaseModel):
    status: str
    updated_at: str | None


@router.post("/{unit_id}/complete", response_model=MarkCompleteResponse)
async def complete_unit(
    unit_id: UUID,
    user: CurrentUser = Depends(get_current_user),
):
    """Mark a unit as complete for the current user.

    Idempotent: completing an already-completed unit keeps the original
    completion timestamp.
    """
    async with get_transaction() as conn:
        try:
            await load_unit(conn, unit_id)
        except UnitNotFoundError:
            raise HTTPException(404, "Unit not found")

        progress = await mark_unit_complete(conn, user_id=user.user_id, unit_id=unit_id)

    return MarkCompleteResponse(
        success=True,
        completed_at=(
            progress["completed_at"].isoformat()
            if progress.get("completed_at")
            else None
        ),
    )


@router.post("/{unit_id}/attempt", response_model=AttemptResponse)
async def save_attempt(
    unit_id: UUID,
    body: AttemptRequest,
    user: CurrentUser = Depends(get_current_user),
):
    """Record that the user is working on a unit, with their current code."""
    async with get_transaction() as conn:
        try:
            await load_unit(conn, unit_id)
        except UnitNotFoundError:
            raise HTTPException(404, "Unit not found")

        progress = await record_attempt(
            conn, user_id=user.user_id, unit_id=unit_id, code=body.code
        )

    status = progress["status"]
    return AttemptResponse(
        status=status.value if hasattr(status, "value") else status,
        updated_at=(
            progress["updated_at"].isoformat() if progress.get("updated_at") else None
        ),
    )
