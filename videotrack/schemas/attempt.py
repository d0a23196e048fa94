"""
Attempt Schemas

Pydantic models for the resume/submit endpoint and the attempt history.
"""

from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, Field

from videotrack.models.enums import CompletionState, ResponseStatus


class AttemptSubmission(BaseModel):
    """Validated attempt submission (form fields cmid, time_watched, completed)."""

    cmid: int = Field(..., gt=0, description="Video activity (course module) ID")
    time_watched: Decimal = Field(
        ...,
        ge=0,
        lt=Decimal("99999999.995"),
        description="Furthest point reached, in seconds",
    )
    completed: int = Field(..., ge=0, le=1, description="1 if the video reached its end, else 0")


class ResumeResponse(BaseModel):
    """Schema for the resume lookup."""

    status: ResponseStatus
    time_watched: float = 0


class SubmitResponse(BaseModel):
    """Schema for the attempt submission result."""

    status: ResponseStatus
    message: Optional[str] = None


class AttemptResponse(BaseModel):
    """Schema for one stored attempt."""

    id: int
    activity_id: int
    watched_seconds: float
    completed: bool
    recorded_at: int

    model_config = {"from_attributes": True}


class ActivityResponse(BaseModel):
    """Schema for the player-facing activity settings."""

    id: int
    name: str
    video_url: str
    restrict_seeking: bool

    model_config = {"from_attributes": True}


class CompletionStateResponse(BaseModel):
    """Schema for the completion capability endpoint."""

    cmid: int
    user_id: int
    rule_name: str
    state: CompletionState
