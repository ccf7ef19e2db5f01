"""
Payment Routes

Endpoints for the purchase flow and payment history.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from learnhub.api.deps import get_current_active_user
from learnhub.core.database import get_db
from learnhub.models.user import User
from learnhub.schemas.payment import (
    ConfirmPaymentRequest,
    CourseIdRequest,
    PaymentIntentResponse,
    PaymentListResponse,
    PaymentResponse,
)
from learnhub.services import payment_service


router = APIRouter(prefix="/payments", tags=["Payments"])


@router.post(
    "/create-intent",
    response_model=PaymentIntentResponse,
    summary="Start a purchase of a paid course",
)
async def create_intent(
    request: CourseIdRequest,
    current_user: Annotated[User, Depends(get_current_active_user)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> PaymentIntentResponse:
    """
    Create a pending payment and a gateway payment intent.

    The returned client secret is used by the client to complete payment
    with the gateway, after which it calls /payments/confirm.
    """
    payment, intent = await payment_service.create_intent(
        user=current_user,
        course_id=request.course_id,
        db=db,
    )
    return PaymentIntentResponse(
        payment_id=payment.id,
        client_secret=intent.client_secret,
        is_dummy=intent.is_dummy,
    )


@router.post(
    "/confirm",
    response_model=PaymentResponse,
    summary="Confirm a pending payment",
)
async def confirm_payment(
    request: ConfirmPaymentRequest,
    current_user: Annotated[User, Depends(get_current_active_user)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> PaymentResponse:
    """
    Verify a payment with the gateway.

    Returns the payment as completed or failed. Confirming a completed
    payment again returns it unchanged.
    """
    return await payment_service.confirm(
        user=current_user,
        payment_id=request.payment_id,
        db=db,
        external_reference=request.external_reference,
    )


@router.post(
    "/enroll-free",
    response_model=PaymentResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Record a free course acquisition",
)
async def enroll_free(
    request: CourseIdRequest,
    current_user: Annotated[User, Depends(get_current_active_user)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> PaymentResponse:
    return await payment_service.enroll_free(
        user=current_user,
        course_id=request.course_id,
        db=db,
    )


@router.post(
    "/mock-purchase",
    response_model=PaymentResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Purchase and enroll without a gateway (demo mode)",
)
async def mock_purchase(
    request: CourseIdRequest,
    current_user: Annotated[User, Depends(get_current_active_user)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> PaymentResponse:
    return await payment_service.mock_purchase(
        user=current_user,
        course_id=request.course_id,
        db=db,
    )


@router.get(
    "/my-payments",
    response_model=PaymentListResponse,
    summary="List my payments",
)
async def list_my_payments(
    current_user: Annotated[User, Depends(get_current_active_user)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> PaymentListResponse:
    payments = await payment_service.list_user_payments(user=current_user, db=db)
    return PaymentListResponse(payments=payments)


@router.get(
    "/{payment_id}",
    response_model=PaymentResponse,
    summary="Get a payment",
)
async def get_payment(
    payment_id: int,
    current_user: Annotated[User, Depends(get_current_active_user)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> PaymentResponse:
    return await payment_service.get_payment(
        user=current_user,
        payment_id=payment_id,
        db=db,
    )
