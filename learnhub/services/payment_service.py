"""
Payment Service

Payment record lifecycle: pending -> completed | failed, completed -> refunded.

Every transition is a conditional UPDATE on the prior status, so two
requests racing on the same payment cannot both apply a transition.
"""

import logging
import uuid
from decimal import Decimal
from typing import List, Optional

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from learnhub.core.config import settings
from learnhub.core.exceptions import (
    AlreadyEnrolledError,
    ConflictError,
    FreeCourseError,
    MockPaymentsDisabledError,
    NotFoundError,
    PaidCourseError,
    PaymentStateError,
    UnauthorizedError,
)
from learnhub.models.enums import PaymentMethod, PaymentStatus, UserRole
from learnhub.models.payment import Payment
from learnhub.models.user import User
from learnhub.services import enrollment_service
from learnhub.services.course_service import get_course_by_id
from learnhub.services.payment_gateway import PaymentIntent, get_payment_gateway


logger = logging.getLogger(__name__)


def _new_transaction_id(prefix: str) -> str:
    return f"{prefix}_{uuid.uuid4().hex}"


async def _load_payment(payment_id: int, db: AsyncSession) -> Optional[Payment]:
    result = await db.execute(
        select(Payment)
        .where(Payment.id == payment_id)
        .execution_options(populate_existing=True)
    )
    return result.scalar_one_or_none()


async def get_payment(
    user: User,
    payment_id: int,
    db: AsyncSession,
) -> Payment:
    """
    Get a payment visible to the user.

    Raises:
        NotFoundError: Payment does not exist.
        UnauthorizedError: Payment belongs to someone else and the user is
            not an admin.
    """
    payment = await _load_payment(payment_id, db)

    if not payment:
        raise NotFoundError("Payment not found")

    if payment.user_id != user.id and user.role != UserRole.ADMIN:
        raise UnauthorizedError()

    return payment


async def list_user_payments(
    user: User,
    db: AsyncSession,
) -> List[Payment]:
    """Get the user's payment history, newest first."""
    result = await db.execute(
        select(Payment)
        .where(Payment.user_id == user.id)
        .order_by(Payment.created_at.desc(), Payment.id.desc())
        .execution_options(populate_existing=True)
    )
    return list(result.scalars().all())


async def create_intent(
    user: User,
    course_id: int,
    db: AsyncSession,
) -> tuple[Payment, PaymentIntent]:
    """
    Start a purchase of a paid course.

    Creates a pending Payment for the effective price and asks the gateway
    for a payment intent, whose id is stored as external_reference. The
    client confirms out of band and then calls confirm().

    Args:
        user: Purchasing user.
        course_id: Course ID.
        db: Database session.

    Returns:
        Tuple of (payment, intent).

    Raises:
        NotFoundError: Course does not exist.
        AlreadyEnrolledError: User is already enrolled.
        FreeCourseError: Course costs nothing.
        PaymentGatewayError: Gateway could not create the intent.
    """
    course = await get_course_by_id(course_id, db)

    if await enrollment_service.is_enrolled(user.id, course.id, db):
        raise AlreadyEnrolledError()

    if course.is_free:
        raise FreeCourseError()

    payment = Payment(
        user_id=user.id,
        course_id=course.id,
        amount=course.effective_price,
        currency=settings.PAYMENT_CURRENCY,
        status=PaymentStatus.PENDING,
        payment_method=PaymentMethod.STRIPE,
    )
    db.add(payment)
    await db.flush()

    gateway = get_payment_gateway()
    try:
        intent = await gateway.create_intent(
            payment.id,
            payment.amount,
            payment.currency,
            metadata={"courseId": course.id, "userId": user.id},
        )
    except Exception:
        await db.rollback()
        raise

    payment.external_reference = intent.reference
    await db.commit()

    logger.info(f"Payment {payment.id} pending for user {user.id} course {course.id}")
    return await _load_payment(payment.id, db), intent


async def confirm(
    user: User,
    payment_id: int,
    db: AsyncSession,
    external_reference: Optional[str] = None,
) -> Payment:
    """
    Confirm a pending payment against the gateway.

    Idempotent: an already completed payment is returned unchanged. A
    payment whose gateway check fails moves to failed and is returned with
    that status. Confirming does not enroll; the client calls enroll next.

    Args:
        user: Payment owner.
        payment_id: Payment ID.
        db: Database session.
        external_reference: Gateway reference; defaults to the one stored
            by create_intent. Any other reference fails the payment.

    Returns:
        The payment in its resulting status.

    Raises:
        NotFoundError: Payment does not exist.
        UnauthorizedError: Payment belongs to another user.
        PaymentStateError: Payment is failed or refunded.
        PaymentGatewayError: Gateway unreachable; the payment stays pending.
        ConflictError: A concurrent request moved the payment to a
            non-completed status.
    """
    payment = await _load_payment(payment_id, db)

    if not payment:
        raise NotFoundError("Payment not found")

    if payment.user_id != user.id:
        raise UnauthorizedError()

    if payment.status == PaymentStatus.COMPLETED:
        return payment

    if payment.is_terminal:
        raise PaymentStateError(f"Payment is already {payment.status.value}")

    reference = external_reference or payment.external_reference
    verified = False
    if (
        payment.external_reference is not None
        and reference != payment.external_reference
    ):
        logger.warning(
            f"Payment {payment.id} confirmed with reference {reference}, "
            f"issued {payment.external_reference}"
        )
    elif reference:
        verified = await get_payment_gateway().verify(
            reference, payment.id, payment.amount
        )

    new_status = PaymentStatus.COMPLETED if verified else PaymentStatus.FAILED
    result = await db.execute(
        update(Payment)
        .where(
            Payment.id == payment.id,
            Payment.status == PaymentStatus.PENDING,
        )
        .values(
            status=new_status,
            external_reference=payment.external_reference or reference,
            transaction_id=reference if verified else None,
        )
        .execution_options(synchronize_session=False)
    )

    if result.rowcount == 0:
        await db.rollback()
        current = await _load_payment(payment_id, db)
        if current is not None and current.status == PaymentStatus.COMPLETED:
            return current
        raise ConflictError()

    await db.commit()

    if verified:
        logger.info(f"Payment {payment.id} completed for user {user.id}")
    else:
        logger.warning(f"Payment {payment.id} failed verification for reference {reference}")

    return await _load_payment(payment.id, db)


async def enroll_free(
    user: User,
    course_id: int,
    db: AsyncSession,
) -> Payment:
    """
    Record the zero-amount completed payment for a free course.

    Only the payment precondition is recorded; the client then calls enroll.

    Raises:
        NotFoundError: Course does not exist.
        PaidCourseError: Course has a price.
        AlreadyEnrolledError: User is already enrolled.
    """
    course = await get_course_by_id(course_id, db)

    if not course.is_free:
        raise PaidCourseError()

    if await enrollment_service.is_enrolled(user.id, course.id, db):
        raise AlreadyEnrolledError()

    payment = Payment(
        user_id=user.id,
        course_id=course.id,
        amount=Decimal("0"),
        currency=settings.PAYMENT_CURRENCY,
        status=PaymentStatus.COMPLETED,
        payment_method=PaymentMethod.FREE,
        transaction_id=_new_transaction_id("free"),
    )
    db.add(payment)
    await db.commit()

    logger.info(f"Free payment {payment.id} recorded for user {user.id} course {course.id}")
    return await _load_payment(payment.id, db)


async def mock_purchase(
    user: User,
    course_id: int,
    db: AsyncSession,
) -> Payment:
    """
    Demo purchase: completed mock payment plus enrollment in one transaction.

    Only available while no real gateway is configured.

    Raises:
        MockPaymentsDisabledError: A real gateway is configured.
        NotFoundError: Course does not exist.
        CourseNotAvailableError: Course is not published.
        AlreadyEnrolledError: User is already enrolled.
    """
    if not settings.payments_are_mocked:
        raise MockPaymentsDisabledError()

    course = await get_course_by_id(course_id, db)
    await enrollment_service.ensure_enrollable(user, course, db)

    payment = Payment(
        user_id=user.id,
        course_id=course.id,
        amount=course.effective_price,
        currency=settings.PAYMENT_CURRENCY,
        status=PaymentStatus.COMPLETED,
        payment_method=PaymentMethod.MOCK,
        transaction_id=_new_transaction_id("mock"),
    )
    db.add(payment)

    await enrollment_service.write_enrollment(user, course, db)
    await enrollment_service.commit_enrollment(user, course, db)

    logger.info(f"Mock purchase {payment.id} by user {user.id} for course {course.id}")
    return await _load_payment(payment.id, db)


async def refund_course_payments(
    course_id: int,
    reason: str,
    db: AsyncSession,
) -> int:
    """
    Move every completed payment for a course to refunded.

    Runs inside the caller's transaction. Enrollments are not touched.

    Args:
        course_id: Course ID.
        reason: Non-empty refund reason stored on each payment.
        db: Database session.

    Returns:
        Number of payments refunded.
    """
    if not reason:
        raise ValueError("Refund reason must not be empty")

    result = await db.execute(
        update(Payment)
        .where(
            Payment.course_id == course_id,
            Payment.status == PaymentStatus.COMPLETED,
        )
        .values(status=PaymentStatus.REFUNDED, refund_reason=reason)
        .execution_options(synchronize_session=False)
    )

    logger.info(f"Refunded {result.rowcount} payments for course {course_id}: {reason}")
    return result.rowcount
