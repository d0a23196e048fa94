"""
Completion Engine Client

Outbound side of the completion integration: the evaluator pushes the
derived state of a (activity, user) pair to the external engine. The
call is one-directional; nothing is read back.
"""

import logging
from typing import Optional, Protocol

import httpx

from videotrack.core.config import settings
from videotrack.core.http_client import post_with_retry
from videotrack.models.enums import CompletionState


logger = logging.getLogger(__name__)


class CompletionEngine(Protocol):
    """State-update capability of the external completion engine."""

    async def update_state(
        self,
        activity_id: int,
        user_id: int,
        state: CompletionState,
    ) -> None:
        ...


class HttpCompletionEngine:
    """
    Reports state updates to the engine over HTTP.

    With no URL configured the update is only logged, which is the
    normal mode for local development.
    """

    def __init__(self, url: Optional[str] = None, rule_name: Optional[str] = None):
        self.url = url if url is not None else settings.COMPLETION_ENGINE_URL
        self.rule_name = rule_name or settings.COMPLETION_RULE_NAME

    async def update_state(
        self,
        activity_id: int,
        user_id: int,
        state: CompletionState,
    ) -> None:
        if not self.url:
            logger.info(
                f"Completion state for activity {activity_id}, user {user_id}: {state.value} "
                "(no engine URL configured)"
            )
            return

        payload = {
            "cmid": activity_id,
            "user_id": user_id,
            "rule_name": self.rule_name,
            "state": state.value,
        }
        try:
            response = await post_with_retry(self.url, json=payload)
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            logger.error(f"Failed to report completion for activity {activity_id}, user {user_id}: {e}")
            return

        if response.status_code >= 400:
            logger.error(
                f"Completion engine rejected update for activity {activity_id}, "
                f"user {user_id}: HTTP {response.status_code}"
            )


def get_completion_engine() -> CompletionEngine:
    """Dependency providing the configured completion engine client."""
    return HttpCompletionEngine()
