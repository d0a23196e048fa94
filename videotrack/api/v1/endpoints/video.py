"""
Video Attempt Routes

Resume lookup and attempt submission for the player page, plus the
activity settings and attempt history it displays.
"""

from typing import Annotated, List

from fastapi import APIRouter, Depends, Form, Query
from sqlalchemy.ext.asyncio import AsyncSession

from videotrack.api.deps import get_current_user_id
from videotrack.core.database import get_db
from videotrack.models.enums import ResponseStatus, SubmitOutcome
from videotrack.schemas.attempt import (
    ActivityResponse,
    AttemptResponse,
    AttemptSubmission,
    ResumeResponse,
    SubmitResponse,
)
from videotrack.services import attempt_service
from videotrack.services.completion_engine import CompletionEngine, get_completion_engine


router = APIRouter(prefix="/video", tags=["Video"])


@router.get(
    "/attempt",
    response_model=ResumeResponse,
    summary="Get resume point",
)
async def get_resume_point(
    cmid: Annotated[int, Query(gt=0, description="Video activity ID")],
    user_id: Annotated[int, Depends(get_current_user_id)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> ResumeResponse:
    """
    Get where the viewer left off.

    Returns the watched time of the latest unfinished attempt, or
    `{"status": "notfound", "time_watched": 0}` when there is none.
    """
    activity = await attempt_service.get_activity(cmid, db)
    time_watched = await attempt_service.get_resume_point(activity.id, user_id, db)

    if time_watched is None:
        return ResumeResponse(status=ResponseStatus.NOTFOUND, time_watched=0)

    return ResumeResponse(status=ResponseStatus.SUCCESS, time_watched=float(time_watched))


@router.post(
    "/attempt",
    response_model=SubmitResponse,
    summary="Submit a watch attempt",
)
async def submit_attempt(
    data: Annotated[AttemptSubmission, Form()],
    user_id: Annotated[int, Depends(get_current_user_id)],
    db: Annotated[AsyncSession, Depends(get_db)],
    engine: Annotated[CompletionEngine, Depends(get_completion_engine)],
) -> SubmitResponse:
    """
    Record one watch session.

    **Form fields:** `cmid`, `time_watched` (decimal seconds),
    `completed` (0/1).

    Once the viewer has a completed attempt for the activity nothing more
    is stored and the response status is `skipped`.
    """
    outcome = await attempt_service.submit_attempt(
        user_id=user_id,
        submission=data,
        db=db,
        engine=engine,
    )

    if outcome == SubmitOutcome.SKIPPED:
        return SubmitResponse(
            status=ResponseStatus.SKIPPED,
            message="A completed attempt already exists",
        )

    return SubmitResponse(status=ResponseStatus.SUCCESS)


@router.get(
    "/attempt/history",
    response_model=List[AttemptResponse],
    summary="List own attempts",
)
async def list_attempts(
    cmid: Annotated[int, Query(gt=0, description="Video activity ID")],
    user_id: Annotated[int, Depends(get_current_user_id)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> List[AttemptResponse]:
    """Get the viewer's attempts for an activity, newest first."""
    activity = await attempt_service.get_activity(cmid, db)
    attempts = await attempt_service.list_attempts(activity.id, user_id, db)

    return [AttemptResponse.model_validate(attempt) for attempt in attempts]


@router.get(
    "/{cmid}",
    response_model=ActivityResponse,
    summary="Get video activity settings",
)
async def get_activity(
    cmid: int,
    user_id: Annotated[int, Depends(get_current_user_id)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> ActivityResponse:
    """
    Get the settings the player page binds the playback guard with.
    """
    activity = await attempt_service.get_activity(cmid, db)

    return ActivityResponse.model_validate(activity)
