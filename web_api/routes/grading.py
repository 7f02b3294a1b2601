"""Exercise grading API routes.

Endpoints:
- POST /api/units/{unit_id}/grade - Run a submission against the unit's tests

Grading is read-only with respect to progress: recording completion is a
separate call to POST /api/units/{unit_id}/complete.
"""

import logging
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel

from codepath.database import get_connection
from codepath.grading import all_passed, run_tests
from codepath.queries.units import UnitNotFoundError, get_test_specs, load_unit
from web_api.auth import CurrentUser, get_current_user
from web_api.rate_limit import grading_limiter

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/units", tags=["grading"])


class GradeRequest(BaseModel):
    code: str


class SubmissionResultResponse(BaseModel):
    passed: bool
    message: str
    error: str | None = None


class GradeResponse(BaseModel):
    results: list[SubmissionResultResponse]
    allPassed: bool


@router.post("/{unit_id}/grade", response_model=GradeResponse)
async def grade_submission(
    unit_id: UUID,
    body: GradeRequest,
    user: CurrentUser = Depends(get_current_user),
):
    """Grade a code submission.

    Always returns one result per test spec, in the unit's test order, even
    when some tests crash or time out.
    """
    grading_limiter.check(str(user.user_id))

    async with get_connection() as conn:
        try:
            await load_unit(conn, unit_id)
        except UnitNotFoundError:
            raise HTTPException(404, "Unit not found")
        tests = await get_test_specs(conn, unit_id)

    results = await run_tests(body.code, tests)
    logger.info(
        "User %s graded unit %s: %d/%d passed",
        user.user_id,
        unit_id,
        sum(1 for r in results if r.passed),
        len(results),
    )

    return GradeResponse(
        results=[SubmissionResultResponse(**r.to_dict()) for r in results],
        allPassed=all_passed(results),
    )
