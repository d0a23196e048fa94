"""
Attempt Service

Read and write paths for video attempts: activity lookup, the resume
point query, attempt recording and the per-user attempt history.
"""

import logging
import time
from decimal import ROUND_HALF_UP, Decimal
from typing import Optional

from fastapi import HTTPException, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from videotrack.models.enums import SubmitOutcome
from videotrack.models.video_activity import VideoActivity
from videotrack.models.video_attempt import VideoAttempt
from videotrack.schemas.attempt import AttemptSubmission
from videotrack.services import completion_service
from videotrack.services.completion_engine import CompletionEngine


logger = logging.getLogger(__name__)

SECONDS_QUANTUM = Decimal("0.01")


def current_timestamp() -> int:
    """Server clock in epoch seconds."""
    return int(time.time())


async def get_activity(
    activity_id: int,
    db: AsyncSession,
) -> VideoActivity:
    """
    Get a video activity by ID.

    Args:
        activity_id: Video activity (course module) ID.
        db: Database session.

    Returns:
        VideoActivity object.

    Raises:
        HTTPException: 404 if the activity does not exist.
    """
    result = await db.execute(
        select(VideoActivity).where(VideoActivity.id == activity_id)
    )
    activity = result.scalar_one_or_none()

    if not activity:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Video activity with ID {activity_id} not found",
        )

    return activity


async def get_resume_point(
    activity_id: int,
    user_id: int,
    db: AsyncSession,
) -> Optional[Decimal]:
    """
    Get the watched time of the latest unfinished attempt.

    Read-only. Users without attempts get None, not an error.

    Args:
        activity_id: Video activity ID.
        user_id: Viewer ID.
        db: Database session.

    Returns:
        Watched seconds of the most recent incomplete attempt, or None.
    """
    result = await db.execute(
        select(VideoAttempt.watched_seconds)
        .where(
            VideoAttempt.activity_id == activity_id,
            VideoAttempt.user_id == user_id,
            VideoAttempt.completed.is_(False),
        )
        .order_by(VideoAttempt.recorded_at.desc(), VideoAttempt.id.desc())
        .limit(1)
    )
    return result.scalar_one_or_none()


async def submit_attempt(
    user_id: int,
    submission: AttemptSubmission,
    db: AsyncSession,
    engine: CompletionEngine,
) -> SubmitOutcome:
    """
    Record one watch session.

    Nothing is written once a completed attempt exists for the pair.
    Repeated incomplete submissions are all kept; only the latest is ever
    read back for resuming. A completed attempt is reported to the
    completion engine before this returns.

    Two concurrent sessions can both pass the completed-attempt check and
    store two completed rows; evaluation only tests existence, so the
    result is the same.

    Args:
        user_id: Viewer ID.
        submission: Validated cmid, time_watched and completed flag.
        db: Database session.
        engine: Completion engine to report to.

    Returns:
        SubmitOutcome.ACK when stored, SubmitOutcome.SKIPPED otherwise.

    Raises:
        HTTPException: 404 if the activity does not exist.
    """
    activity = await get_activity(submission.cmid, db)

    if await completion_service.has_completed_attempt(activity.id, user_id, db):
        logger.info(
            f"Skipping attempt for activity {activity.id}, user {user_id}: already completed"
        )
        return SubmitOutcome.SKIPPED

    attempt = VideoAttempt(
        activity_id=activity.id,
        user_id=user_id,
        watched_seconds=submission.time_watched.quantize(SECONDS_QUANTUM, rounding=ROUND_HALF_UP),
        completed=bool(submission.completed),
        recorded_at=current_timestamp(),
    )
    db.add(attempt)
    await db.commit()

    logger.debug(
        f"Recorded attempt {attempt.id} for activity {activity.id}, user {user_id} "
        f"({attempt.watched_seconds}s, completed={attempt.completed})"
    )

    if attempt.completed:
        await completion_service.on_attempt_completed(activity.id, user_id, db, engine)

    return SubmitOutcome.ACK


async def list_attempts(
    activity_id: int,
    user_id: int,
    db: AsyncSession,
) -> list[VideoAttempt]:
    """
    Get all attempts of a user for an activity, newest first.

    Args:
        activity_id: Video activity ID.
        user_id: Viewer ID.
        db: Database session.

    Returns:
        List of VideoAttempt objects.
    """
    result = await db.execute(
        select(VideoAttempt)
        .where(
            VideoAttempt.activity_id == activity_id,
            VideoAttempt.user_id == user_id,
        )
        .order_by(VideoAttempt.recorded_at.desc(), VideoAttempt.id.desc())
    )
    return list(result.scalars().all())
