"""
Completion Service

Derives the completion state of a (activity, user) pair from the stored
attempts. There is no persisted state of its own: COMPLETE iff at least
one completed attempt exists. With an append-only attempt table the
INCOMPLETE -> COMPLETE transition can never be undone.
"""

import logging
from dataclasses import dataclass
from typing import Protocol

from sqlalchemy import exists, select
from sqlalchemy.ext.asyncio import AsyncSession

from videotrack.core.config import settings
from videotrack.models.enums import CompletionState
from videotrack.models.video_attempt import VideoAttempt
from videotrack.services.completion_engine import CompletionEngine


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CompletionContext:
    """What the completion engine asks about."""
    activity_id: int
    user_id: int


class CompletionRule(Protocol):
    """Narrow interface the external completion engine calls into."""

    async def evaluate(self, ctx: CompletionContext) -> CompletionState:
        ...


async def has_completed_attempt(
    activity_id: int,
    user_id: int,
    db: AsyncSession,
) -> bool:
    """
    Check whether a completed attempt exists for the pair.

    Args:
        activity_id: Video activity ID.
        user_id: Viewer ID.
        db: Database session.

    Returns:
        True if at least one completed attempt is stored.
    """
    result = await db.execute(
        select(
            exists().where(
                VideoAttempt.activity_id == activity_id,
                VideoAttempt.user_id == user_id,
                VideoAttempt.completed.is_(True),
            )
        )
    )
    return bool(result.scalar())


async def evaluate(
    activity_id: int,
    user_id: int,
    db: AsyncSession,
) -> CompletionState:
    """Derive the completion state for the pair."""
    if await has_completed_attempt(activity_id, user_id, db):
        return CompletionState.COMPLETE
    return CompletionState.INCOMPLETE


async def on_attempt_completed(
    activity_id: int,
    user_id: int,
    db: AsyncSession,
    engine: CompletionEngine,
) -> CompletionState:
    """
    Re-evaluate after a completed attempt and push the result to the engine.

    Args:
        activity_id: Video activity ID.
        user_id: Viewer ID.
        db: Database session.
        engine: Completion engine to report to.

    Returns:
        The state that was reported.
    """
    state = await evaluate(activity_id, user_id, db)
    logger.info(f"Reporting {state.value} for activity {activity_id}, user {user_id}")
    await engine.update_state(activity_id, user_id, state)
    return state


class VideoCompletionRule:
    """
    The video-completion rule of one activity.

    The engine identifies rules by name; anything other than this rule's
    name evaluates to INCOMPLETE instead of raising.
    """

    def __init__(self, activity_id: int, db: AsyncSession, rule_name: str | None = None):
        self.activity_id = activity_id
        self.db = db
        self.rule_name = rule_name or settings.COMPLETION_RULE_NAME

    async def evaluate(self, ctx: CompletionContext) -> CompletionState:
        return await evaluate(ctx.activity_id, ctx.user_id, self.db)

    async def get_custom_completion_state(self, rule_name: str, user_id: int) -> CompletionState:
        if rule_name != self.rule_name:
            logger.debug(f"Unknown completion rule {rule_name!r} for activity {self.activity_id}")
            return CompletionState.INCOMPLETE
        return await self.evaluate(CompletionContext(self.activity_id, user_id))
