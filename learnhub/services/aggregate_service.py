"""
Course Aggregate Service

Sole writer of a course's derived fields: enrollment_count, average_rating,
total_ratings and total_duration.

Rating and duration are recomputed from the underlying rows every time, never
adjusted by deltas, so re-running them is always safe.
"""

import logging
from decimal import Decimal, ROUND_HALF_UP
from typing import Optional

from sqlalchemy import func, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from learnhub.core.concurrency import run_with_retry
from learnhub.core.config import settings
from learnhub.core.exceptions import ConflictError
from learnhub.models.course import Course
from learnhub.models.lecture import Lecture
from learnhub.models.review import Review


logger = logging.getLogger(__name__)


def compute_average_rating(count: int, total: Optional[int]) -> float:
    """
    Mean rating rounded half-up to one decimal; 0 with no reviews.

    Example: ratings [5, 4, 4] -> 4.3
    """
    if not count:
        return 0.0
    mean = Decimal(total or 0) / Decimal(count)
    return float(mean.quantize(Decimal("0.1"), rounding=ROUND_HALF_UP))


async def _lock_course(course_id: int, db: AsyncSession) -> None:
    # Serializes recomputes for one course; SQLite ignores FOR UPDATE.
    await db.execute(
        select(Course.id).where(Course.id == course_id).with_for_update()
    )


async def recompute_rating(course_id: int, db: AsyncSession) -> float:
    """
    Recompute average_rating and total_ratings from the current reviews.

    Runs inside the caller's transaction; the caller commits.

    Args:
        course_id: Course ID.
        db: Database session.

    Returns:
        The new average rating.
    """
    await _lock_course(course_id, db)

    result = await db.execute(
        select(func.count(Review.id), func.sum(Review.rating))
        .where(Review.course_id == course_id)
    )
    count, total = result.one()
    average = compute_average_rating(count, total)

    await db.execute(
        update(Course)
        .where(Course.id == course_id)
        .values(average_rating=average, total_ratings=count)
    )

    return average


async def refresh_course_rating(course_id: int, db: AsyncSession) -> bool:
    """
    Recompute a course's rating in its own transaction, with retries.

    Called after a review write has been committed. A failure here never
    fails the review write: it is logged, and the next review write (or an
    explicit re-run) converges the fields again.

    Args:
        course_id: Course ID.
        db: Database session.

    Returns:
        True if the recompute was committed.
    """
    async def attempt() -> None:
        await recompute_rating(course_id, db)
        await db.commit()

    try:
        await run_with_retry(
            attempt,
            db,
            attempts=settings.AGGREGATE_RETRY_ATTEMPTS,
            retry_on=(SQLAlchemyError,),
            label=f"recompute_rating(course={course_id})",
        )
    except ConflictError:
        logger.error(f"Rating for course {course_id} is stale until the next recompute")
        return False

    return True


async def recompute_total_duration(course_id: int, db: AsyncSession) -> int:
    """
    Set total_duration to the sum of the course's lecture durations.

    Must run in the same transaction as the lecture mutation; the caller
    flushes the mutation first and commits afterwards.

    Returns:
        The new total duration in seconds.
    """
    await _lock_course(course_id, db)

    result = await db.execute(
        select(func.coalesce(func.sum(Lecture.duration), 0))
        .where(Lecture.course_id == course_id)
    )
    total = int(result.scalar() or 0)

    await db.execute(
        update(Course)
        .where(Course.id == course_id)
        .values(total_duration=total)
    )

    return total


async def increment_enrollment_count(course_id: int, db: AsyncSession) -> None:
    """Atomically add one to enrollment_count (no read-modify-write)."""
    await db.execute(
        update(Course)
        .where(Course.id == course_id)
        .values(enrollment_count=Course.enrollment_count + 1)
    )
