"""
Lecture Model

Individual lecture within a course.
"""

from typing import TYPE_CHECKING, Optional

from sqlalchemy import Boolean, ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from learnhub.core.database import Base

if TYPE_CHECKING:
    from learnhub.models.course import Course


class Lecture(Base):
    """
    Lecture model. Identity is scoped to the parent course.

    Attributes:
        id: Integer primary key.
        course_id: Foreign key to courses table.
        duration: Length in seconds.
        order: Position within the course.
        is_free: Preview lecture visible to non-enrolled users.
    """

    __tablename__ = "lectures"

    id: Mapped[int] = mapped_column(
        Integer,
        primary_key=True,
        autoincrement=True,
    )
    course_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("courses.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    title: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
    )
    description: Mapped[Optional[str]] = mapped_column(
        Text,
        nullable=True,
    )
    video_url: Mapped[Optional[str]] = mapped_column(
        String(500),
        nullable=True,
    )
    duration: Mapped[int] = mapped_column(
        Integer,
        default=0,
        nullable=False,
    )
    order: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
    )
    is_free: Mapped[bool] = mapped_column(
        Boolean,
        default=False,
        nullable=False,
    )

    # Relationships
    course: Mapped["Course"] = relationship(
        "Course",
        back_populates="lectures",
    )

    def __repr__(self) -> str:
        return f"<Lecture(id={self.id}, course_id={self.course_id}, order={self.order})>"
