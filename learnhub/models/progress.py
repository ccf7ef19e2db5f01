"""
Progress Models

Per-user-per-course progress with one entry per lecture.
"""

import uuid
from datetime import datetime
from typing import Optional

from sqlalchemy import Boolean, DateTime, ForeignKey, Integer, UniqueConstraint, Uuid, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from learnhub.core.database import Base


class Progress(Base):
    """
    Course progress for one enrolled user.

    total_lectures is fixed when the record is created. completed_lectures,
    overall_progress, is_completed and completed_at are derived and only
    written by progress_service.

    version_id is SQLAlchemy's optimistic concurrency counter: an UPDATE from
    a stale read matches no row and raises StaleDataError.
    """

    __tablename__ = "progress"

    __table_args__ = (
        UniqueConstraint("user_id", "course_id", name="uq_progress_user_course"),
    )

    id: Mapped[int] = mapped_column(
        Integer,
        primary_key=True,
        autoincrement=True,
    )
    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
    )
    course_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("courses.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    total_lectures: Mapped[int] = mapped_column(
        Integer,
        default=0,
        nullable=False,
    )
    completed_lectures: Mapped[int] = mapped_column(
        Integer,
        default=0,
        nullable=False,
    )
    overall_progress: Mapped[int] = mapped_column(
        Integer,
        default=0,
        nullable=False,
    )
    is_completed: Mapped[bool] = mapped_column(
        Boolean,
        default=False,
        nullable=False,
    )
    completed_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )
    last_accessed_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
    )
    version_id: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
    )

    # Relationships
    lecture_progress: Mapped[list["LectureProgress"]] = relationship(
        "LectureProgress",
        back_populates="progress",
        lazy="selectin",
        order_by="LectureProgress.id",
        cascade="all, delete-orphan",
    )

    __mapper_args__ = {"version_id_col": version_id}

    def __repr__(self) -> str:
        return f"<Progress(id={self.id}, overall={self.overall_progress})>"


class LectureProgress(Base):
    """
    Completion state of one lecture inside a Progress record.

    lecture_id is a snapshot of the course's lectures at enrollment time; it
    has no foreign key, so later lecture edits leave it alone.
    """

    __tablename__ = "lecture_progress"

    __table_args__ = (
        UniqueConstraint("progress_id", "lecture_id", name="uq_lecture_progress"),
    )

    id: Mapped[int] = mapped_column(
        Integer,
        primary_key=True,
        autoincrement=True,
    )
    progress_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("progress.id", ondelete="CASCADE"),
        nullable=False,
    )
    lecture_id: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
    )
    completed: Mapped[bool] = mapped_column(
        Boolean,
        default=False,
        nullable=False,
    )
    watched_duration: Mapped[int] = mapped_column(
        Integer,
        default=0,
        nullable=False,
    )
    quiz_score: Mapped[Optional[int]] = mapped_column(
        Integer,
        nullable=True,
    )
    last_watched_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )

    # Relationships
    progress: Mapped["Progress"] = relationship(
        "Progress",
        back_populates="lecture_progress",
    )

    def __repr__(self) -> str:
        return f"<LectureProgress(lecture_id={self.lecture_id}, completed={self.completed})>"
