"""
Video Attempt Model

One row per submitted watch session. Rows are append-only: they are
inserted by the attempt recorder and never updated or deleted here.
"""

from decimal import Decimal
from typing import TYPE_CHECKING

from sqlalchemy import Boolean, ForeignKey, Index, Integer, Numeric
from sqlalchemy.orm import Mapped, mapped_column, relationship

from videotrack.core.database import Base

if TYPE_CHECKING:
    from videotrack.models.video_activity import VideoActivity


class VideoAttempt(Base):
    """
    Video attempt model.

    Attributes:
        id: Surrogate primary key.
        activity_id: Foreign key to video_activities table.
        user_id: Viewer id (external).
        watched_seconds: Furthest contiguous point reached in the session.
        completed: True iff the session reached the video's natural end.
        recorded_at: Server epoch seconds at insertion.
    """

    __tablename__ = "video_attempts"
    __table_args__ = (
        Index(
            "ix_video_attempts_latest",
            "activity_id",
            "user_id",
            "completed",
            "recorded_at",
        ),
    )

    id: Mapped[int] = mapped_column(
        Integer,
        primary_key=True,
        autoincrement=True,
    )
    activity_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("video_activities.id", ondelete="CASCADE"),
        nullable=False,
    )
    user_id: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
    )
    watched_seconds: Mapped[Decimal] = mapped_column(
        Numeric(10, 2),
        default=Decimal("0"),
        nullable=False,
    )
    completed: Mapped[bool] = mapped_column(
        Boolean,
        default=False,
        nullable=False,
    )
    recorded_at: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
    )

    # Relationships
    activity: Mapped["VideoActivity"] = relationship(
        "VideoActivity",
        back_populates="attempts",
    )

    def __repr__(self) -> str:
        return (
            f"<VideoAttempt(id={self.id}, user_id={self.user_id}, "
            f"watched={self.watched_seconds}, completed={self.completed})>"
        )
