"""
Course Model

Catalog entry with ordered lectures and derived aggregate fields.
"""

import uuid
from datetime import datetime
from decimal import Decimal
from typing import TYPE_CHECKING, Optional

from sqlalchemy import Boolean, DateTime, Enum, Float, ForeignKey, Integer, Numeric, String, Text, Uuid, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from learnhub.core.database import Base
from learnhub.models.enums import CourseLevel, CourseStatus, enum_values

if TYPE_CHECKING:
    from learnhub.models.user import User
    from learnhub.models.lecture import Lecture


class Course(Base):
    """
    Course model.

    enrollment_count, average_rating, total_ratings and total_duration are
    derived fields. They are written only by learnhub.services.aggregate_service.

    Attributes:
        id: Integer primary key.
        instructor_id: Owning instructor.
        price: List price; 0 means free.
        discount_price: Optional price charged instead of price.
        status: draft, published or archived.
        is_approved: Set by an admin.
        deleted_at: Soft deletion marker; deleted courses are invisible.
    """

    __tablename__ = "courses"

    id: Mapped[int] = mapped_column(
        Integer,
        primary_key=True,
        autoincrement=True,
    )
    instructor_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    title: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
    )
    subtitle: Mapped[Optional[str]] = mapped_column(
        String(255),
        nullable=True,
    )
    description: Mapped[str] = mapped_column(
        Text,
        nullable=False,
    )
    category: Mapped[str] = mapped_column(
        String(100),
        nullable=False,
    )
    level: Mapped[CourseLevel] = mapped_column(
        Enum(CourseLevel, name="course_level", create_constraint=True, values_callable=enum_values),
        default=CourseLevel.BEGINNER,
        nullable=False,
    )
    language: Mapped[str] = mapped_column(
        String(50),
        default="English",
        nullable=False,
    )
    thumbnail: Mapped[Optional[str]] = mapped_column(
        String(500),
        nullable=True,
    )
    price: Mapped[Decimal] = mapped_column(
        Numeric(10, 2),
        default=Decimal("0"),
        nullable=False,
    )
    discount_price: Mapped[Optional[Decimal]] = mapped_column(
        Numeric(10, 2),
        nullable=True,
    )
    status: Mapped[CourseStatus] = mapped_column(
        Enum(CourseStatus, name="course_status", create_constraint=True, values_callable=enum_values),
        default=CourseStatus.DRAFT,
        nullable=False,
    )
    is_approved: Mapped[bool] = mapped_column(
        Boolean,
        default=False,
        nullable=False,
    )
    approved_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )
    deleted_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
    )

    # Derived fields
    enrollment_count: Mapped[int] = mapped_column(
        Integer,
        default=0,
        nullable=False,
    )
    average_rating: Mapped[float] = mapped_column(
        Float,
        default=0.0,
        nullable=False,
    )
    total_ratings: Mapped[int] = mapped_column(
        Integer,
        default=0,
        nullable=False,
    )
    total_duration: Mapped[int] = mapped_column(
        Integer,
        default=0,
        nullable=False,
    )

    # Relationships
    instructor: Mapped["User"] = relationship(
        "User",
        foreign_keys=[instructor_id],
        lazy="selectin",
    )
    lectures: Mapped[list["Lecture"]] = relationship(
        "Lecture",
        back_populates="course",
        lazy="selectin",
        order_by="Lecture.order",
        cascade="all, delete-orphan",
    )

    @property
    def is_free(self) -> bool:
        return self.effective_price <= 0

    @property
    def effective_price(self) -> Decimal:
        """Amount charged for a purchase."""
        if self.discount_price is not None:
            return self.discount_price
        return self.price

    def __repr__(self) -> str:
        return f"<Course(id={self.id}, title={self.title[:30]}...)>"
