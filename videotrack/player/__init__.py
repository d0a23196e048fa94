"""
Videotrack - Player Module

Client-side playback guard and its HTTP transport.
"""

from videotrack.player.guard import PlaybackGuard, bootstrap_guard
from videotrack.player.session import PlaybackSession
from videotrack.player.transport import HttpAttemptTransport, SubmitResult

__all__ = [
    "PlaybackGuard",
    "PlaybackSession",
    "HttpAttemptTransport",
    "SubmitResult",
    "bootstrap_guard",
]
