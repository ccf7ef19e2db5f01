"""
User Service

The current user's enrolled courses and wishlist.
"""

import logging
from typing import List, Optional, Tuple

from sqlalchemy import delete, exists, insert, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from learnhub.core.exceptions import AlreadyInWishlistError
from learnhub.models.course import Course
from learnhub.models.enrollment import Enrollment
from learnhub.models.progress import Progress
from learnhub.models.user import User, wishlist_items
from learnhub.services import enrollment_service
from learnhub.services.course_service import get_course_by_id


logger = logging.getLogger(__name__)


async def get_enrolled_courses(
    user: User,
    db: AsyncSession,
) -> List[Tuple[Enrollment, Optional[Progress]]]:
    """
    Get the user's enrollments paired with their progress records.

    Returns:
        List of (enrollment, progress) tuples, newest enrollment first.
    """
    enrollments = await enrollment_service.get_user_enrollments(user, db)
    if not enrollments:
        return []

    result = await db.execute(
        select(Progress).where(
            Progress.user_id == user.id,
            Progress.course_id.in_([e.course_id for e in enrollments]),
        )
    )
    progress_by_course = {p.course_id: p for p in result.scalars().all()}

    return [(e, progress_by_course.get(e.course_id)) for e in enrollments]


async def get_wishlist(
    user: User,
    db: AsyncSession,
) -> List[Course]:
    """Courses on the user's wishlist, excluding deleted ones."""
    result = await db.execute(
        select(Course)
        .join(wishlist_items, wishlist_items.c.course_id == Course.id)
        .where(
            wishlist_items.c.user_id == user.id,
            Course.deleted_at.is_(None),
        )
        .order_by(Course.id.desc())
    )
    return list(result.scalars().all())


async def add_to_wishlist(
    user: User,
    course_id: int,
    db: AsyncSession,
) -> List[Course]:
    """
    Add a course to the wishlist.

    Raises:
        NotFoundError: Course does not exist.
        AlreadyInWishlistError: Course is already on the wishlist.
    """
    course = await get_course_by_id(course_id, db)

    already = await db.execute(
        select(
            exists().where(
                wishlist_items.c.user_id == user.id,
                wishlist_items.c.course_id == course.id,
            )
        )
    )
    if already.scalar():
        raise AlreadyInWishlistError()

    try:
        await db.execute(
            insert(wishlist_items).values(user_id=user.id, course_id=course.id)
        )
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise AlreadyInWishlistError()

    return await get_wishlist(user, db)


async def remove_from_wishlist(
    user: User,
    course_id: int,
    db: AsyncSession,
) -> List[Course]:
    """Remove a course from the wishlist; removing an absent course is a no-op."""
    await db.execute(
        delete(wishlist_items).where(
            wishlist_items.c.user_id == user.id,
            wishlist_items.c.course_id == course_id,
        )
    )
    await db.commit()

    return await get_wishlist(user, db)
