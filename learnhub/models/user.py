"""
User Model

Core user entity with role management.
"""

import uuid
from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import Boolean, Column, DateTime, Enum, ForeignKey, Integer, String, Table, Uuid, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from learnhub.core.database import Base
from learnhub.models.enums import UserRole, enum_values

if TYPE_CHECKING:
    from learnhub.models.course import Course
    from learnhub.models.enrollment import Enrollment


wishlist_items = Table(
    "wishlist_items",
    Base.metadata,
    Column("user_id", Uuid, ForeignKey("users.id", ondelete="CASCADE"), primary_key=True),
    Column("course_id", Integer, ForeignKey("courses.id", ondelete="CASCADE"), primary_key=True),
)


class User(Base):
    """
    User model representing students, instructors, and admins.

    Enrolled courses are not stored on the user: they are read from the
    enrollments ledger.

    Attributes:
        id: UUID primary key for public-facing identification.
        name: Display name.
        email: Unique email address, indexed for fast lookups.
        role: User role (student, instructor, admin).
        is_active: Deactivated accounts are rejected at authentication.
        created_at: Account creation timestamp.
    """

    __tablename__ = "users"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid.uuid4,
    )
    name: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
    )
    email: Mapped[str] = mapped_column(
        String(255),
        unique=True,
        index=True,
        nullable=False,
    )
    role: Mapped[UserRole] = mapped_column(
        Enum(UserRole, name="user_role", create_constraint=True, values_callable=enum_values),
        default=UserRole.STUDENT,
        nullable=False,
    )
    is_active: Mapped[bool] = mapped_column(
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
    enrollments: Mapped[list["Enrollment"]] = relationship(
        "Enrollment",
        back_populates="user",
        lazy="selectin",
    )
    wishlist: Mapped[list["Course"]] = relationship(
        "Course",
        secondary=wishlist_items,
        lazy="selectin",
    )

    @property
    def enrolled_course_ids(self) -> list[int]:
        """Courses the user is enrolled in, projected from the ledger."""
        return [enrollment.course_id for enrollment in self.enrollments]

    def __repr__(self) -> str:
        return f"<User(id={self.id}, email={self.email}, role={self.role})>"
