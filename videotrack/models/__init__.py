"""
Videotrack - Models Module

This module exports all SQLAlchemy models for the application.
Import Base for Alembic migrations.
"""

from videotrack.core.database import Base

# Enums
from videotrack.models.enums import (
    CompletionState,
    ResponseStatus,
    SubmitOutcome,
)

# Models
from videotrack.models.video_activity import VideoActivity
from videotrack.models.video_attempt import VideoAttempt

__all__ = [
    # Base
    "Base",
    # Enums
    "CompletionState",
    "ResponseStatus",
    "SubmitOutcome",
    # Models
    "VideoActivity",
    "VideoAttempt",
]
