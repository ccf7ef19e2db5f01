"""
Review Service

Course reviews. Every write is followed by a rating recompute for the
course, so average_rating and total_ratings always reflect the stored
reviews once the recompute has committed.
"""

import logging
from typing import List, Optional, Tuple

from sqlalchemy import delete, func, insert, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from learnhub.core.concurrency import run_with_retry
from learnhub.core.exceptions import NotFoundError, ReviewNotAllowedError, UnauthorizedError
from learnhub.models.enums import UserRole
from learnhub.models.review import Review, review_helpful_votes
from learnhub.models.user import User
from learnhub.services import aggregate_service, enrollment_service
from learnhub.services.course_service import get_course_by_id


logger = logging.getLogger(__name__)


async def get_course_reviews(
    course_id: int,
    db: AsyncSession,
    page: int = 1,
    size: int = 10,
) -> Tuple[List[Review], int]:
    """
    Get paginated reviews for a course, newest first.

    Returns:
        Tuple of (reviews, total_count).
    """
    count_result = await db.execute(
        select(func.count(Review.id)).where(Review.course_id == course_id)
    )
    total = count_result.scalar() or 0

    result = await db.execute(
        select(Review)
        .where(Review.course_id == course_id)
        .order_by(Review.created_at.desc(), Review.id.desc())
        .offset((page - 1) * size)
        .limit(size)
        .execution_options(populate_existing=True)
    )
    return list(result.scalars().all()), total


async def _get_review(review_id: int, db: AsyncSession) -> Review:
    result = await db.execute(
        select(Review)
        .where(Review.id == review_id)
        .execution_options(populate_existing=True)
    )
    review = result.scalar_one_or_none()

    if not review:
        raise NotFoundError("Review not found")

    return review


async def create_or_update_review(
    user: User,
    course_id: int,
    rating: int,
    comment: str,
    db: AsyncSession,
) -> Tuple[Review, bool]:
    """
    Create the user's review of a course, or overwrite the existing one.

    Args:
        user: Reviewing user; must be enrolled.
        course_id: Course ID.
        rating: 1 to 5.
        comment: Review text.
        db: Database session.

    Returns:
        Tuple of (review, created).

    Raises:
        NotFoundError: Course does not exist.
        ReviewNotAllowedError: User is not enrolled in the course.
    """
    course = await get_course_by_id(course_id, db)

    user_id, course_id = user.id, course.id

    if not await enrollment_service.is_enrolled(user_id, course_id, db):
        raise ReviewNotAllowedError()

    async def attempt() -> Tuple[int, bool]:
        result = await db.execute(
            select(Review).where(
                Review.user_id == user_id,
                Review.course_id == course_id,
            )
        )
        review = result.scalar_one_or_none()
        created = review is None

        if created:
            review = Review(user_id=user_id, course_id=course_id)
            db.add(review)

        review.rating = rating
        review.comment = comment
        await db.commit()
        return review.id, created

    # A concurrent first review trips the unique constraint; the retry
    # then finds it and updates it instead.
    review_id, created = await run_with_retry(
        attempt,
        db,
        attempts=2,
        retry_on=(IntegrityError,),
        label=f"create_or_update_review(course={course_id})",
    )

    logger.info(
        f"Review {review_id} {'created' if created else 'updated'} "
        f"by user {user_id} for course {course_id}"
    )

    await aggregate_service.refresh_course_rating(course_id, db)
    return await _get_review(review_id, db), created


async def update_review(
    user: User,
    review_id: int,
    db: AsyncSession,
    rating: Optional[int] = None,
    comment: Optional[str] = None,
) -> Review:
    """
    Update the user's own review.

    Raises:
        NotFoundError: Review does not exist.
        UnauthorizedError: Review belongs to another user.
    """
    review = await _get_review(review_id, db)

    if review.user_id != user.id:
        raise UnauthorizedError("Not authorized to update this review")

    if rating is not None:
        review.rating = rating
    if comment:
        review.comment = comment

    await db.commit()

    await aggregate_service.refresh_course_rating(review.course_id, db)
    return await _get_review(review_id, db)


async def delete_review(
    user: User,
    review_id: int,
    db: AsyncSession,
) -> None:
    """
    Delete a review as its author or as an admin.

    Raises:
        NotFoundError: Review does not exist.
        UnauthorizedError: Caller is neither the author nor an admin.
    """
    review = await _get_review(review_id, db)

    if review.user_id != user.id and user.role != UserRole.ADMIN:
        raise UnauthorizedError("Not authorized to delete this review")

    course_id = review.course_id
    await db.execute(
        delete(review_helpful_votes).where(review_helpful_votes.c.review_id == review_id)
    )
    await db.delete(review)
    await db.commit()

    logger.info(f"Review {review_id} deleted by user {user.id}")

    await aggregate_service.refresh_course_rating(course_id, db)


async def toggle_helpful(
    user: User,
    review_id: int,
    db: AsyncSession,
) -> Tuple[Review, bool]:
    """
    Mark a review as helpful for the user, or remove the user's mark.

    Returns:
        Tuple of (review, marked); marked is False when the call removed
        an existing mark.

    Raises:
        NotFoundError: Review does not exist.
    """
    await _get_review(review_id, db)
    user_id = user.id

    async def attempt() -> bool:
        removed = await db.execute(
            delete(review_helpful_votes).where(
                review_helpful_votes.c.review_id == review_id,
                review_helpful_votes.c.user_id == user_id,
            )
        )
        marked = removed.rowcount == 0
        if marked:
            await db.execute(
                insert(review_helpful_votes).values(review_id=review_id, user_id=user_id)
            )
        await db.commit()
        return marked

    # Two concurrent first marks collide on the primary key; the retry
    # then sees the winner's row and removes it.
    marked = await run_with_retry(
        attempt,
        db,
        attempts=2,
        retry_on=(IntegrityError,),
        label=f"toggle_helpful(review={review_id})",
    )

    logger.info(f"User {user_id} {'marked' if marked else 'unmarked'} review {review_id} helpful")
    return await _get_review(review_id, db), marked
