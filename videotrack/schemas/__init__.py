"""
Videotrack - Schemas Module

Pydantic models for request/response validation.
"""

from videotrack.schemas.attempt import (
    ActivityResponse,
    AttemptResponse,
    AttemptSubmission,
    CompletionStateResponse,
    ResumeResponse,
    SubmitResponse,
)

__all__ = [
    "ActivityResponse",
    "AttemptResponse",
    "AttemptSubmission",
    "CompletionStateResponse",
    "ResumeResponse",
    "SubmitResponse",
]
