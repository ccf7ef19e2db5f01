"""
Enrollment Service

The enrollment ledger: who is enrolled in which course, and the enroll
operation that keeps the ledger, the course enrollment count and the
progress record consistent.
"""

import logging
import uuid

from sqlalchemy import exists, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from learnhub.core.exceptions import (
    AlreadyEnrolledError,
    CourseNotAvailableError,
    PaymentRequiredError,
)
from learnhub.models.course import Course
from learnhub.models.enrollment import Enrollment
from learnhub.models.enums import CourseStatus, PaymentStatus
from learnhub.models.payment import Payment
from learnhub.models.user import User
from learnhub.services import aggregate_service, notification_service, progress_service
from learnhub.services.course_service import get_course_by_id


logger = logging.getLogger(__name__)


async def is_enrolled(
    user_id: uuid.UUID,
    course_id: int,
    db: AsyncSession,
) -> bool:
    """Check the ledger for (user, course)."""
    result = await db.execute(
        select(
            exists().where(
                Enrollment.user_id == user_id,
                Enrollment.course_id == course_id,
            )
        )
    )
    return bool(result.scalar())


async def has_completed_payment(
    user_id: uuid.UUID,
    course_id: int,
    db: AsyncSession,
) -> bool:
    """Check whether a completed payment exists for (user, course)."""
    result = await db.execute(
        select(
            exists().where(
                Payment.user_id == user_id,
                Payment.course_id == course_id,
                Payment.status == PaymentStatus.COMPLETED,
            )
        )
    )
    return bool(result.scalar())


async def get_user_enrollments(
    user: User,
    db: AsyncSession,
) -> list[Enrollment]:
    """
    Get all enrollments for a user with their course data, newest first.

    Courses deleted by an admin keep their ledger rows but are left out here.
    """
    result = await db.execute(
        select(Enrollment)
        .join(Enrollment.course)
        .where(
            Enrollment.user_id == user.id,
            Course.deleted_at.is_(None),
        )
        .order_by(Enrollment.created_at.desc(), Enrollment.id.desc())
    )
    return list(result.scalars().all())


async def write_enrollment(
    user: User,
    course: Course,
    db: AsyncSession,
) -> Enrollment:
    """
    Stage the enrollment effect in the current transaction and flush it.

    Creates the Progress record, increments enrollment_count atomically and
    appends the ledger row last. Nothing is visible to other requests until
    the caller commits. A racing duplicate enrollment trips the unique
    constraints at flush time; the transaction is rolled back and reported
    as AlreadyEnrolledError.

    Args:
        user: Enrolling user.
        course: Course with its lectures loaded.
        db: Database session.

    Returns:
        The flushed Enrollment.

    Raises:
        AlreadyEnrolledError: Another request enrolled the user first.
    """
    user_id, course_id = user.id, course.id

    progress_service.create_progress(user, course_id, course.lectures, db)
    await aggregate_service.increment_enrollment_count(course_id, db)

    enrollment = Enrollment(user_id=user_id, course_id=course_id)
    db.add(enrollment)

    try:
        await db.flush()
    except IntegrityError:
        await db.rollback()
        logger.info(f"Duplicate enrollment for user {user_id} in course {course_id} rejected")
        raise AlreadyEnrolledError()

    return enrollment


async def commit_enrollment(
    user: User,
    course: Course,
    db: AsyncSession,
) -> Enrollment:
    """Commit a staged enrollment, then emit the notification."""
    try:
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise AlreadyEnrolledError()

    await db.refresh(course)
    logger.info(f"User {user.id} enrolled in course {course.id}")

    await notification_service.notify_enrollment(user.id, course.id)

    return await _get_enrollment(user.id, course.id, db)


async def _get_enrollment(
    user_id: uuid.UUID,
    course_id: int,
    db: AsyncSession,
) -> Enrollment:
    result = await db.execute(
        select(Enrollment).where(
            Enrollment.user_id == user_id,
            Enrollment.course_id == course_id,
        )
        .execution_options(populate_existing=True)
    )
    return result.scalar_one()


async def ensure_enrollable(
    user: User,
    course: Course,
    db: AsyncSession,
) -> None:
    """
    Shared enrollment preconditions except the payment check.

    Raises:
        CourseNotAvailableError: Course is not published.
        AlreadyEnrolledError: User is already in the ledger.
    """
    if course.status != CourseStatus.PUBLISHED:
        raise CourseNotAvailableError()

    if await is_enrolled(user.id, course.id, db):
        raise AlreadyEnrolledError()


async def enroll(
    user: User,
    course_id: int,
    db: AsyncSession,
) -> Enrollment:
    """
    Enroll a user in a published course.

    Flow:
    1. Course must exist and be published.
    2. User must not already be enrolled.
    3. Paid courses require a completed payment.
    4. Progress, enrollment_count and ledger row are written in one
       transaction.
    5. An enrollment notification is emitted after commit.

    Args:
        user: Current user.
        course_id: Course ID.
        db: Database session.

    Returns:
        The new Enrollment.

    Raises:
        NotFoundError: Course does not exist.
        CourseNotAvailableError: Course is not published.
        AlreadyEnrolledError: User is already enrolled.
        PaymentRequiredError: Paid course without a completed payment.
    """
    course = await get_course_by_id(course_id, db)

    await ensure_enrollable(user, course, db)

    if not course.is_free and not await has_completed_payment(user.id, course.id, db):
        raise PaymentRequiredError()

    await write_enrollment(user, course, db)
    return await commit_enrollment(user, course, db)
