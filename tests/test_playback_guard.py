"""
Playback Guard Unit Tests

Tests for seek restriction, resume and once-per-session submission.
"""

import math
from collections import defaultdict
from unittest.mock import AsyncMock, MagicMock

import httpx
import pytest

from videotrack.player.guard import PlaybackGuard, bootstrap_guard
from videotrack.player.session import PlaybackSession


class FakeVideo:
    """Media element stand-in that records listeners and lets tests fire events."""

    def __init__(self, duration: float = 120.0):
        self.current_time = 0.0
        self.duration = duration
        self.seeking = False
        self.ended = False
        self.listeners = defaultdict(list)

    def add_event_listener(self, event, handler):
        self.listeners[event].append(handler)

    def fire(self, event):
        for handler in self.listeners[event]:
            handler()

    def play_to(self, position: float):
        self.current_time = position
        self.fire("timeupdate")

    def seek(self, target: float):
        self.current_time = target
        self.seeking = True
        self.fire("seeking")
        self.seeking = False

    def finish(self):
        self.current_time = self.duration
        self.ended = True
        self.fire("ended")


class FakePage:
    def __init__(self):
        self.listeners = defaultdict(list)

    def add_event_listener(self, event, handler):
        self.listeners[event].append(handler)

    def unload(self):
        for handler in self.listeners["beforeunload"]:
            handler()


class RecordingSender:
    def __init__(self):
        self.sent = []

    def send(self, cmid, watched_seconds, completed):
        self.sent.append((cmid, watched_seconds, completed))


@pytest.fixture
def video() -> FakeVideo:
    return FakeVideo()


@pytest.fixture
def page() -> FakePage:
    return FakePage()


@pytest.fixture
def sender() -> RecordingSender:
    return RecordingSender()


@pytest.fixture
def guard(video, page, sender) -> PlaybackGuard:
    return PlaybackGuard.attach(video, 7, sender, page=page, tolerance=0.01)


class TestPlaybackSession:
    """Tests for the per-guard session state."""

    def test_advance_never_decreases(self):
        """Verify the high-water mark ignores earlier positions."""
        session = PlaybackSession()

        session.advance(10.0)
        session.advance(4.0)

        assert session.high_water_mark == 10.0

    def test_claim_submission_once(self):
        """Verify the submission slot can only be taken once per session."""
        session = PlaybackSession()

        assert session.claim_submission() is True
        assert session.claim_submission() is False

        session.start_new()

        assert session.claim_submission() is True


class TestAttach:
    """Tests for binding the guard to a page."""

    def test_missing_video_attaches_nothing(self, page, sender):
        """Verify no guard and no listeners without a video element."""
        guard = PlaybackGuard.attach(None, 7, sender, page=page)

        assert guard is None
        assert dict(page.listeners) == {}

    def test_registers_listeners(self, guard, video, page):
        """Verify the media and unload events are wired up."""
        for event in ("canplay", "timeupdate", "seeking", "ended", "play"):
            assert len(video.listeners[event]) == 1
        assert len(page.listeners["beforeunload"]) == 1


class TestResume:
    """Tests for applying the stored resume point."""

    def test_resume_waits_for_first_playable_frame(self, guard, video):
        """Verify the seek is deferred until canplay."""
        guard.apply_resume_point(42.5)

        assert video.current_time == 0.0

        video.fire("canplay")

        assert video.current_time == 42.5
        assert guard.high_water_mark == 42.5

    def test_resume_after_canplay_applies_immediately(self, guard, video):
        """Verify a late resume point is applied at once."""
        video.fire("canplay")
        guard.apply_resume_point(42.5)

        assert video.current_time == 42.5

    def test_resume_applies_only_once(self, guard, video):
        """Verify later canplay events do not seek again."""
        guard.apply_resume_point(42.5)
        video.fire("canplay")

        video.current_time = 10.0
        video.fire("canplay")
        guard.initialize(80.0)

        assert video.current_time == 10.0
        assert guard.high_water_mark == 42.5

    def test_no_resume_point_means_no_seek(self, guard, video):
        """Verify nothing happens without a stored attempt."""
        guard.apply_resume_point(None)
        video.fire("canplay")

        assert video.current_time == 0.0
        assert guard.high_water_mark == 0.0

    def test_resumed_position_is_not_clamped(self, guard, video):
        """Verify seeking to the resume point passes the restriction."""
        guard.apply_resume_point(42.5)
        video.fire("canplay")
        video.seek(video.current_time)

        assert video.current_time == 42.5


class TestHighWaterMark:
    """Tests for tracking the furthest point watched."""

    def test_monotonic_during_playback(self, guard, video):
        """Verify the mark follows playback and never drops."""
        marks = []
        for position in (1.0, 2.5, 2.0, 7.25, 7.0, 9.0):
            video.play_to(position)
            marks.append(guard.high_water_mark)

        assert marks == sorted(marks)
        assert guard.high_water_mark == 9.0

    def test_ignores_updates_while_seeking(self, guard):
        """Verify time updates during a seek do not move the mark."""
        guard.on_time_update(5.0, seeking=False)
        guard.on_time_update(90.0, seeking=True)

        assert guard.high_water_mark == 5.0


class TestSeekRestriction:
    """Tests for clamping forward seeks."""

    def test_forward_seek_is_clamped(self, guard, video):
        """Verify seeking past the mark snaps back to it."""
        video.play_to(20.0)
        video.seek(60.0)

        assert video.current_time == 20.0

    def test_backward_seek_is_allowed(self, guard, video):
        """Verify rewinding is never restricted."""
        video.play_to(20.0)
        video.seek(5.0)

        assert video.current_time == 5.0
        assert guard.high_water_mark == 20.0

    def test_seek_within_tolerance_is_allowed(self, guard, video):
        """Verify timer jitter just past the mark is not clamped."""
        video.play_to(20.0)
        video.seek(20.005)

        assert video.current_time == 20.005

    def test_unrestricted_seek_passes(self, guard):
        """Verify any seek succeeds when restriction is off."""
        guard.on_time_update(3.0, seeking=False)

        assert guard.on_seek_attempt(100.0, restriction_enabled=False) == 100.0

    def test_restriction_disabled_on_guard(self, video, sender):
        """Verify activities without restriction let seeks through."""
        guard = PlaybackGuard.attach(video, 7, sender, restrict_seeking=False)

        video.seek(90.0)

        assert video.current_time == 90.0
        assert guard.high_water_mark == 0.0

    def test_position_never_exceeds_mark(self, guard):
        """Verify the clamp holds across a mixed sequence of seeks."""
        targets = [5.0, 0.5, 12.0, 3.0, 3.0105, 40.0, 2.0, 7.5]
        guard.on_time_update(3.0, seeking=False)

        for target in targets:
            position = guard.on_seek_attempt(target, restriction_enabled=True)
            assert position <= guard.high_water_mark + guard.tolerance


class TestSubmission:
    """Tests for at-most-one attempt per play session."""

    def test_ended_submits_completed_attempt(self, guard, video, sender):
        """Verify the end of the video sends duration and completed."""
        video.play_to(119.9)
        video.finish()

        assert sender.sent == [(7, 120.0, True)]

    def test_repeated_triggers_send_once(self, guard, video, page, sender):
        """Verify ended and unload together send a single attempt."""
        video.play_to(30.0)
        video.finish()
        video.fire("ended")
        page.unload()
        page.unload()

        assert len(sender.sent) == 1

    def test_unload_submits_high_water_mark(self, guard, video, page, sender):
        """Verify leaving mid-video sends the progress so far."""
        video.play_to(33.3)
        video.seek(10.0)
        page.unload()
        page.unload()

        assert sender.sent == [(7, 33.3, False)]

    def test_unload_without_progress_sends_nothing(self, guard, page, sender):
        """Verify an unplayed video does not create an attempt."""
        page.unload()

        assert sender.sent == []

    def test_unload_after_end_sends_nothing(self, guard, video, page, sender):
        """Verify an ended video does not also send a partial attempt."""
        video.play_to(50.0)
        video.ended = True
        page.unload()

        assert sender.sent == []

    def test_play_starts_new_session(self, guard, video, page, sender):
        """Verify a replay can submit again."""
        video.play_to(60.0)
        video.finish()

        video.ended = False
        video.fire("play")
        video.play_to(90.0)
        page.unload()

        assert sender.sent == [(7, 120.0, True), (7, 120.0, False)]

    def test_unknown_duration_uses_high_water_mark(self, page, sender):
        """Verify a stream without a finite duration reports the mark."""
        video = FakeVideo(duration=math.inf)
        PlaybackGuard.attach(video, 7, sender, page=page)

        video.play_to(75.0)
        video.ended = True
        video.fire("ended")

        assert sender.sent == [(7, 75.0, True)]


class TestBootstrap:
    """Tests for attaching a guard and loading the resume point."""

    @pytest.mark.asyncio
    async def test_bootstrap_applies_fetched_resume_point(self, video, page):
        """Verify the fetched point is used on the first playable frame."""
        transport = MagicMock()
        transport.fetch_resume_point = AsyncMock(return_value=42.5)

        guard = await bootstrap_guard(video, 7, transport, page=page)
        video.fire("canplay")

        transport.fetch_resume_point.assert_awaited_once_with(7)
        assert video.current_time == 42.5
        assert guard.high_water_mark == 42.5

    @pytest.mark.asyncio
    async def test_bootstrap_survives_failed_lookup(self, video):
        """Verify a failed lookup starts from the beginning."""
        transport = MagicMock()
        transport.fetch_resume_point = AsyncMock(side_effect=httpx.ConnectError("offline"))

        guard = await bootstrap_guard(video, 7, transport)
        video.fire("canplay")

        assert guard is not None
        assert video.current_time == 0.0

    @pytest.mark.asyncio
    async def test_bootstrap_survives_unreadable_body(self, video):
        """Verify a non-JSON answer starts from the beginning."""
        transport = MagicMock()
        transport.fetch_resume_point = AsyncMock(side_effect=ValueError("Expecting value"))

        guard = await bootstrap_guard(video, 7, transport)
        video.fire("canplay")

        assert guard is not None
        assert video.current_time == 0.0
        assert guard.high_water_mark == 0.0

    @pytest.mark.asyncio
    async def test_bootstrap_survives_non_numeric_time(self, video):
        """Verify a non-numeric stored time starts from the beginning."""
        transport = MagicMock()
        transport.fetch_resume_point = AsyncMock(side_effect=TypeError("float() argument must be a number"))

        guard = await bootstrap_guard(video, 7, transport)

        assert guard is not None
        guard.on_seek_attempt(30.0)
        assert video.current_time == 0.0

    @pytest.mark.asyncio
    async def test_bootstrap_without_video(self):
        """Verify no lookup happens when there is no video element."""
        transport = MagicMock()
        transport.fetch_resume_point = AsyncMock()

        guard = await bootstrap_guard(None, 7, transport)

        assert guard is None
        transport.fetch_resume_point.assert_not_awaited()
