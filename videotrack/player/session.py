"""
Playback Session State

Per-guard state for one play session: the furthest point watched and
whether this session has already sent its attempt.
"""

from dataclasses import dataclass


@dataclass
class PlaybackSession:
    """
    State owned by one PlaybackGuard.

    Attributes:
        high_water_mark: Furthest position reached, in seconds. Never decreases.
        submitted: Whether an attempt was already sent in this session.
    """
    high_water_mark: float = 0.0
    submitted: bool = False

    def advance(self, position: float) -> float:
        """Raise the high-water mark to position if it is further along."""
        if position > self.high_water_mark:
            self.high_water_mark = position
        return self.high_water_mark

    def claim_submission(self) -> bool:
        """
        Take this session's single submission slot.

        Returns:
            True the first time, False once already claimed.
        """
        if self.submitted:
            return False
        self.submitted = True
        return True

    def start_new(self) -> None:
        """Begin a new play session; the high-water mark carries over."""
        self.submitted = False
