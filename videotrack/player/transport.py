"""
Player Transport

HTTP calls the player page makes against the attempt endpoint:
- Resume lookup on load (retried, it is a read)
- Attempt submission, fire-and-forget from the guard's event handlers

A submission that never arrives is lost; there is no retry and no local
queue. Its outcome is still returned as a SubmitResult so delivery can
be layered on later without touching the guard.
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Optional, Protocol, Set

import httpx

from videotrack.core.http_client import get_http_client, request_with_retry
from videotrack.models.enums import ResponseStatus, SubmitOutcome
from videotrack.player.config import player_settings


logger = logging.getLogger(__name__)

ATTEMPT_PATH = "/video/attempt"


@dataclass(frozen=True)
class SubmitResult:
    """Outcome of one attempt submission."""
    outcome: SubmitOutcome
    error: Optional[str] = None

    @property
    def delivered(self) -> bool:
        return self.outcome != SubmitOutcome.TRANSPORT_FAILURE


class AttemptSender(Protocol):
    """Non-blocking submission used by the playback guard."""

    def send(self, cmid: int, watched_seconds: float, completed: bool) -> None:
        ...


class HttpAttemptTransport:
    """
    Talks to the attempt endpoint with a bearer token.

    Args:
        token: Viewer's access token.
        base_url: API root, defaults to API_BASE_URL.
        client: httpx client, defaults to the shared one.
    """

    def __init__(
        self,
        token: str,
        base_url: Optional[str] = None,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self.base_url = (base_url or player_settings.API_BASE_URL).rstrip("/")
        self._token = token
        self._client = client
        self._pending: Set[asyncio.Task] = set()

    @property
    def client(self) -> httpx.AsyncClient:
        return self._client or get_http_client()

    @property
    def url(self) -> str:
        return f"{self.base_url}{ATTEMPT_PATH}"

    @property
    def headers(self) -> dict:
        return {"Authorization": f"Bearer {self._token}"}

    async def fetch_resume_point(self, cmid: int) -> Optional[float]:
        """
        Get the resume point for an activity.

        Returns:
            Seconds to resume from, or None when nothing is stored.

        Raises:
            httpx.HTTPError: On transport errors or an error status.
            ValueError: When the body is not JSON or the time is not a number.
        """
        response = await request_with_retry(
            "GET",
            self.url,
            client=self.client,
            params={"cmid": cmid},
            headers=self.headers,
        )
        response.raise_for_status()

        data = response.json()
        if not isinstance(data, dict) or data.get("status") != ResponseStatus.SUCCESS.value:
            return None
        return float(data.get("time_watched", 0))

    async def submit(self, cmid: int, watched_seconds: float, completed: bool) -> SubmitResult:
        """
        Post one attempt. Never raises; failures come back as TRANSPORT_FAILURE.
        """
        form = {
            "cmid": str(cmid),
            "time_watched": f"{watched_seconds:.2f}",
            "completed": "1" if completed else "0",
        }
        try:
            response = await self.client.post(self.url, data=form, headers=self.headers)
        except httpx.HTTPError as e:
            logger.warning(f"Attempt for activity {cmid} not delivered: {e}")
            return SubmitResult(SubmitOutcome.TRANSPORT_FAILURE, str(e))

        if response.status_code >= 400:
            logger.warning(f"Attempt for activity {cmid} rejected: HTTP {response.status_code}")
            return SubmitResult(SubmitOutcome.TRANSPORT_FAILURE, f"HTTP {response.status_code}")

        try:
            body = response.json()
        except ValueError:
            body = None

        if isinstance(body, dict) and body.get("status") == ResponseStatus.SKIPPED.value:
            return SubmitResult(SubmitOutcome.SKIPPED)
        return SubmitResult(SubmitOutcome.ACK)

    def send(self, cmid: int, watched_seconds: float, completed: bool) -> None:
        """Schedule a submission on the running loop and return immediately."""
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            logger.warning(f"No running event loop, attempt for activity {cmid} dropped")
            return

        task = loop.create_task(self.submit(cmid, watched_seconds, completed))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)

    async def drain(self) -> list[SubmitResult]:
        """Wait for submissions still in flight."""
        if not self._pending:
            return []
        return list(await asyncio.gather(*self._pending))
