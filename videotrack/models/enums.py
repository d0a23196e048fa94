"""
Enums

Python Enums shared by the models, schemas and player.
"""

import enum


class CompletionState(str, enum.Enum):
    """Completion state reported to the completion engine."""
    INCOMPLETE = "INCOMPLETE"
    COMPLETE = "COMPLETE"


class ResponseStatus(str, enum.Enum):
    """Status field of the attempt endpoint responses."""
    SUCCESS = "success"
    NOTFOUND = "notfound"
    SKIPPED = "skipped"


class SubmitOutcome(str, enum.Enum):
    """Result of one attempt submission."""
    ACK = "ACK"
    SKIPPED = "SKIPPED"
    TRANSPORT_FAILURE = "TRANSPORT_FAILURE"
