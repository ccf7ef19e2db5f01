"""
Payment Model

One record per purchase attempt.
"""

import uuid
from datetime import datetime
from decimal import Decimal
from typing import TYPE_CHECKING, Optional

from sqlalchemy import DateTime, Enum, ForeignKey, Index, Integer, Numeric, String, Uuid, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from learnhub.core.database import Base
from learnhub.models.enums import PaymentMethod, PaymentStatus, enum_values

if TYPE_CHECKING:
    from learnhub.models.course import Course


TERMINAL_STATUSES = frozenset({PaymentStatus.FAILED, PaymentStatus.REFUNDED})


class Payment(Base):
    """
    Payment model.

    Status transitions are pending -> completed | failed and
    completed -> refunded. They are applied by payment_service with
    conditional updates on the prior status.

    Attributes:
        id: Integer primary key.
        amount: Amount charged.
        external_reference: Gateway payment-intent id.
        transaction_id: Settled transaction id.
        refund_reason: Set when refunded.
    """

    __tablename__ = "payments"

    __table_args__ = (
        Index("ix_payments_user_course_status", "user_id", "course_id", "status"),
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
    amount: Mapped[Decimal] = mapped_column(
        Numeric(10, 2),
        nullable=False,
    )
    currency: Mapped[str] = mapped_column(
        String(10),
        default="usd",
        nullable=False,
    )
    status: Mapped[PaymentStatus] = mapped_column(
        Enum(PaymentStatus, name="payment_status", create_constraint=True, values_callable=enum_values),
        default=PaymentStatus.PENDING,
        nullable=False,
    )
    payment_method: Mapped[PaymentMethod] = mapped_column(
        Enum(PaymentMethod, name="payment_method", create_constraint=True, values_callable=enum_values),
        default=PaymentMethod.STRIPE,
        nullable=False,
    )
    transaction_id: Mapped[Optional[str]] = mapped_column(
        String(255),
        nullable=True,
    )
    external_reference: Mapped[Optional[str]] = mapped_column(
        String(255),
        nullable=True,
    )
    refund_reason: Mapped[Optional[str]] = mapped_column(
        String(500),
        nullable=True,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )

    # Relationships
    course: Mapped["Course"] = relationship(
        "Course",
        lazy="selectin",
    )

    @property
    def is_terminal(self) -> bool:
        return self.status in TERMINAL_STATUSES

    def __repr__(self) -> str:
        return f"<Payment(id={self.id}, status={self.status})>"
