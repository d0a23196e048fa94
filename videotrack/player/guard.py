"""
Playback Guard

Controller bound to one video element of an activity page. It keeps
viewers from seeking past the furthest point they have watched, resumes
from the last unfinished attempt, and sends at most one attempt per
play session.

Handlers run on the page's event loop and never wait on the network.
"""

import logging
import math
from typing import Callable, Optional, Protocol

import httpx

from videotrack.player.config import player_settings
from videotrack.player.session import PlaybackSession
from videotrack.player.transport import AttemptSender, HttpAttemptTransport


logger = logging.getLogger(__name__)

_UNSET = object()


class VideoElement(Protocol):
    """The parts of a media element the guard reads and drives."""

    current_time: float
    duration: float
    seeking: bool
    ended: bool

    def add_event_listener(self, event: str, handler: Callable[[], None]) -> None:
        ...


class PageLifecycle(Protocol):
    """Page-level events (unload)."""

    def add_event_listener(self, event: str, handler: Callable[[], None]) -> None:
        ...


class PlaybackGuard:
    """
    Seek restriction, resume and attempt submission for one video.

    Use PlaybackGuard.attach() to bind to a page; the constructor does
    not register any listeners.
    """

    def __init__(
        self,
        video: VideoElement,
        cmid: int,
        sender: AttemptSender,
        restrict_seeking: bool = True,
        tolerance: Optional[float] = None,
    ):
        self.video = video
        self.cmid = cmid
        self.sender = sender
        self.restrict_seeking = restrict_seeking
        self.tolerance = player_settings.SEEK_TOLERANCE_SECONDS if tolerance is None else tolerance
        self.session = PlaybackSession()

        self._playable = False
        self._initialized = False
        self._resume_point = _UNSET

    @classmethod
    def attach(
        cls,
        video: Optional[VideoElement],
        cmid: int,
        sender: AttemptSender,
        page: Optional[PageLifecycle] = None,
        restrict_seeking: bool = True,
        tolerance: Optional[float] = None,
    ) -> Optional["PlaybackGuard"]:
        """
        Create a guard and register its listeners.

        Returns:
            The guard, or None when the page has no video element.
        """
        if video is None:
            logger.warning(f"No video element for activity {cmid}, playback guard not attached")
            return None

        guard = cls(video, cmid, sender, restrict_seeking=restrict_seeking, tolerance=tolerance)
        video.add_event_listener("canplay", guard._handle_can_play)
        video.add_event_listener("timeupdate", guard._handle_time_update)
        video.add_event_listener("seeking", guard._handle_seeking)
        video.add_event_listener("ended", guard.on_video_ended)
        video.add_event_listener("play", guard.on_play_resumed)
        if page is not None:
            page.add_event_listener("beforeunload", guard.on_session_end)
        return guard

    @property
    def high_water_mark(self) -> float:
        return self.session.high_water_mark

    # ============== Resume ==============

    def apply_resume_point(self, resume_point: Optional[float]) -> None:
        """
        Hand over the fetched resume point.

        Applied right away when the video is already playable, otherwise
        on the first canplay event.
        """
        self._resume_point = resume_point
        if self._playable:
            self.initialize(resume_point)

    def initialize(self, resume_point: Optional[float]) -> None:
        """Seek to the resume point. Only the first call has any effect."""
        if self._initialized:
            return
        self._initialized = True

        if resume_point is not None and resume_point > 0:
            # The mark goes first so the seek below is not clamped
            self.session.advance(resume_point)
            self.video.current_time = resume_point
            logger.debug(f"Resumed activity {self.cmid} at {resume_point}s")

    def _handle_can_play(self) -> None:
        self._playable = True
        if self._resume_point is not _UNSET:
            self.initialize(self._resume_point)

    # ============== Playback ==============

    def on_time_update(self, current_time: float, seeking: bool) -> None:
        if not seeking:
            self.session.advance(current_time)

    def on_seek_attempt(self, target_time: float, restriction_enabled: Optional[bool] = None) -> float:
        """
        Clamp a forward seek past the high-water mark.

        Backward seeks are always allowed.

        Returns:
            The resulting playback position.
        """
        if restriction_enabled is None:
            restriction_enabled = self.restrict_seeking

        ceiling = self.session.high_water_mark
        if restriction_enabled and target_time > ceiling + self.tolerance:
            self.video.current_time = ceiling
            return ceiling
        return target_time

    def _handle_time_update(self) -> None:
        self.on_time_update(self.video.current_time, self.video.seeking)

    def _handle_seeking(self) -> None:
        self.on_seek_attempt(self.video.current_time)

    # ============== Submission ==============

    def on_video_ended(self) -> bool:
        """Send a completed attempt. Returns whether anything was sent."""
        if not self.session.claim_submission():
            return False

        duration = self.video.duration
        if duration is None or not math.isfinite(duration):
            duration = self.session.high_water_mark
        self.session.advance(duration)

        self.sender.send(self.cmid, duration, True)
        return True

    def on_session_end(self) -> bool:
        """Send the progress so far when the page goes away mid-video."""
        if self.video.ended or self.session.high_water_mark <= 0:
            return False
        if not self.session.claim_submission():
            return False

        self.sender.send(self.cmid, self.session.high_water_mark, False)
        return True

    def on_play_resumed(self) -> None:
        self.session.start_new()


async def bootstrap_guard(
    video: Optional[VideoElement],
    cmid: int,
    transport: HttpAttemptTransport,
    page: Optional[PageLifecycle] = None,
    restrict_seeking: bool = True,
) -> Optional[PlaybackGuard]:
    """
    Attach a guard and feed it the stored resume point.

    Listeners are registered before the resume lookup so playback events
    arriving while it is in flight are still handled. A failed lookup
    starts playback from the beginning, as does an unreadable answer.
    """
    guard = PlaybackGuard.attach(
        video,
        cmid,
        transport,
        page=page,
        restrict_seeking=restrict_seeking,
    )
    if guard is None:
        return None

    try:
        resume_point = await transport.fetch_resume_point(cmid)
    except (httpx.HTTPError, ValueError, TypeError) as e:
        logger.warning(f"Resume lookup for activity {cmid} failed: {e}")
        resume_point = None

    guard.apply_resume_point(resume_point)
    return guard
