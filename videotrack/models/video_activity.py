"""
Video Activity Model

A learning-activity page with one embedded video.
"""

from datetime import datetime
from typing import TYPE_CHECKING, Optional

from sqlalchemy import Boolean, DateTime, Integer, String, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from videotrack.core.database import Base

if TYPE_CHECKING:
    from videotrack.models.video_attempt import VideoAttempt


class VideoActivity(Base):
    """
    Video activity model.

    The primary key is the course-module id (``cmid``) clients address
    the attempt endpoint with.

    Attributes:
        id: Integer primary key (cmid).
        course_id: Owning course id (external).
        name: Display name.
        video_url: Source of the embedded video.
        restrict_seeking: Whether forward seeks past the furthest watched
            point are clamped.
        created_at: Creation timestamp.
    """

    __tablename__ = "video_activities"

    id: Mapped[int] = mapped_column(
        Integer,
        primary_key=True,
        autoincrement=True,
    )
    course_id: Mapped[Optional[int]] = mapped_column(
        Integer,
        nullable=True,
    )
    name: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
    )
    video_url: Mapped[str] = mapped_column(
        String(1024),
        nullable=False,
    )
    restrict_seeking: Mapped[bool] = mapped_column(
        Boolean,
        default=True,
        nullable=False,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
    )

    # Relationships
    attempts: Mapped[list["VideoAttempt"]] = relationship(
        "VideoAttempt",
        back_populates="activity",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    def __repr__(self) -> str:
        return f"<VideoActivity(id={self.id}, name={self.name!r})>"
