"""
Admin Service

Course moderation: approval, and deletion by an admin or the owning
instructor.
"""

import logging
from datetime import datetime, timezone

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from learnhub.models.course import Course
from learnhub.models.enums import CourseStatus
from learnhub.models.review import Review, review_helpful_votes
from learnhub.models.user import User
from learnhub.services import aggregate_service, payment_service
from learnhub.services.course_service import ensure_course_owner, get_course_by_id


logger = logging.getLogger(__name__)

COURSE_DELETED_REASON = "Course deleted by admin"
COURSE_WITHDRAWN_REASON = "Course deleted by instructor"


async def set_course_approval(
    course_id: int,
    is_approved: bool,
    db: AsyncSession,
) -> Course:
    """Approve or reject a course."""
    course = await get_course_by_id(course_id, db)

    course.is_approved = is_approved
    course.approved_at = datetime.now(timezone.utc) if is_approved else None
    await db.commit()

    logger.info(f"Course {course_id} {'approved' if is_approved else 'rejected'}")
    return await get_course_by_id(course_id, db)


async def _soft_delete(course: Course, reason: str, db: AsyncSession) -> int:
    course_id = course.id

    course.deleted_at = datetime.now(timezone.utc)
    course.status = CourseStatus.ARCHIVED

    review_ids = select(Review.id).where(Review.course_id == course_id)
    await db.execute(
        delete(review_helpful_votes).where(review_helpful_votes.c.review_id.in_(review_ids))
    )
    await db.execute(delete(Review).where(Review.course_id == course_id))
    await db.flush()
    await aggregate_service.recompute_rating(course_id, db)
    refunded = await payment_service.refund_course_payments(course_id, reason, db)

    await db.commit()
    return refunded


async def delete_course(
    course_id: int,
    db: AsyncSession,
) -> int:
    """
    Delete a course on behalf of an admin.

    The course is soft-deleted and archived so enrollment ledger rows and
    payment history stay intact. In one transaction its reviews and their
    helpful marks are removed, the rating aggregate is recomputed and every
    completed payment is refunded.

    Args:
        course_id: Course ID.
        db: Database session.

    Returns:
        Number of payments refunded.

    Raises:
        NotFoundError: Course does not exist or was already deleted.
    """
    course = await get_course_by_id(course_id, db)
    refunded = await _soft_delete(course, COURSE_DELETED_REASON, db)

    logger.info(f"Course {course_id} deleted by admin, {refunded} payments refunded")
    return refunded


async def delete_own_course(
    course_id: int,
    user: User,
    db: AsyncSession,
) -> int:
    """
    Delete a course on behalf of its instructor (or an admin).

    Same effects as delete_course, with an instructor refund reason.

    Raises:
        NotFoundError: Course does not exist or was already deleted.
        UnauthorizedError: User is not the owner or an admin.
    """
    course = await get_course_by_id(course_id, db)
    ensure_course_owner(course, user)
    user_id = user.id

    refunded = await _soft_delete(course, COURSE_WITHDRAWN_REASON, db)

    logger.info(f"Course {course_id} deleted by user {user_id}, {refunded} payments refunded")
    return refunded
