"""
Enrollment Model

The enrollment ledger: one row per (user, course).
"""

import uuid
from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import DateTime, ForeignKey, Integer, UniqueConstraint, Uuid, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from learnhub.core.database import Base

if TYPE_CHECKING:
    from learnhub.models.user import User
    from learnhub.models.course import Course


class Enrollment(Base):
    """
    Enrollment model representing a user taking a course.

    This table is the single source of truth for enrollment. The unique
    constraint makes the ledger append an atomic "insert if absent".

    Attributes:
        id: Integer primary key.
        user_id: Foreign key to users table.
        course_id: Foreign key to courses table.
        created_at: Enrollment timestamp.
    """

    __tablename__ = "enrollments"

    __table_args__ = (
        UniqueConstraint("user_id", "course_id", name="uq_enrollment_user_course"),
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
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
    )

    # Relationships
    user: Mapped["User"] = relationship(
        "User",
        back_populates="enrollments",
    )
    course: Mapped["Course"] = relationship(
        "Course",
        lazy="selectin",
    )

    def __repr__(self) -> str:
        return f"<Enrollment(id={self.id}, user_id={self.user_id}, course_id={self.course_id})>"
