"""
Videotrack - Services Module

Business logic layer.
"""

from videotrack.services import attempt_service
from videotrack.services import completion_engine
from videotrack.services import completion_service

__all__ = [
    "attempt_service",
    "completion_engine",
    "completion_service",
]
