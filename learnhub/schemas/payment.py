"""
Payment Schemas

Pydantic models for the purchase flow.
"""

from datetime import datetime
from typing import List, Optional
import uuid

from pydantic import BaseModel, Field

from learnhub.models.enums import PaymentMethod, PaymentStatus


class CourseIdRequest(BaseModel):
    """Request body naming a course (create-intent, enroll-free, mock-purchase)."""

    course_id: int = Field(..., description="Course to purchase")


class ConfirmPaymentRequest(BaseModel):
    """Schema for confirming a pending payment."""

    payment_id: int
    external_reference: Optional[str] = Field(
        default=None,
        description="Gateway payment-intent id; defaults to the stored one",
    )


class PaymentIntentResponse(BaseModel):
    """Client handle for out-of-band payment confirmation."""

    payment_id: int
    client_secret: str
    is_dummy: bool = False


class PaymentCourse(BaseModel):
    """Course info embedded in payment responses."""

    id: int
    title: str
    thumbnail: Optional[str] = None
    price: float

    model_config = {"from_attributes": True}


class PaymentResponse(BaseModel):
    """Schema for payment response."""

    id: int
    user_id: uuid.UUID
    course_id: int
    amount: float
    currency: str
    status: PaymentStatus
    payment_method: PaymentMethod
    transaction_id: Optional[str] = None
    external_reference: Optional[str] = None
    refund_reason: Optional[str] = None
    created_at: datetime
    updated_at: datetime
    course: Optional[PaymentCourse] = None

    model_config = {"from_attributes": True}


class PaymentListResponse(BaseModel):
    """Schema for the user's payment history."""

    payments: List[PaymentResponse]
