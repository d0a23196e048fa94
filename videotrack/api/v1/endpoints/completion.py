"""
Completion Routes

Capability the external completion engine queries for this activity's
video-completion rule.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from videotrack.core.database import get_db
from videotrack.schemas.attempt import CompletionStateResponse
from videotrack.services import attempt_service
from videotrack.services.completion_service import VideoCompletionRule


router = APIRouter(prefix="/completion", tags=["Completion"])


@router.get(
    "/{cmid}/state",
    response_model=CompletionStateResponse,
    summary="Get custom completion state",
)
async def get_custom_completion_state(
    cmid: int,
    rule_name: Annotated[str, Query(min_length=1)],
    user_id: Annotated[int, Query(gt=0)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> CompletionStateResponse:
    """
    Get the state of a completion rule for a user.

    Unknown rule names report `INCOMPLETE`.
    """
    activity = await attempt_service.get_activity(cmid, db)
    rule = VideoCompletionRule(activity.id, db)
    state = await rule.get_custom_completion_state(rule_name, user_id)

    return CompletionStateResponse(
        cmid=activity.id,
        user_id=user_id,
        rule_name=rule_name,
        state=state,
    )
