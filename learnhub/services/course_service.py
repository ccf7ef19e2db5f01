"""
Course Service

Business logic for the course catalog and lecture management.
"""

import logging
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from learnhub.core.exceptions import InvalidCourseDataError, NotFoundError, UnauthorizedError
from learnhub.models.course import Course
from learnhub.models.enums import CourseStatus, UserRole
from learnhub.models.lecture import Lecture
from learnhub.models.user import User
from learnhub.services import aggregate_service


logger = logging.getLogger(__name__)

# Fields an instructor may change through update_course.
# Derived fields are written only by aggregate_service.
EDITABLE_FIELDS = frozenset({
    "title",
    "subtitle",
    "description",
    "category",
    "level",
    "language",
    "thumbnail",
    "price",
    "discount_price",
})

EDITABLE_LECTURE_FIELDS = frozenset({
    "title",
    "description",
    "video_url",
    "duration",
    "order",
    "is_free",
})

# NOT NULL columns among the editable fields
REQUIRED_FIELDS = frozenset({"title", "description", "category", "level", "language", "price"})
REQUIRED_LECTURE_FIELDS = frozenset({"title", "duration", "order", "is_free"})


def validate_pricing(price: Decimal, discount_price: Optional[Decimal]) -> None:
    """
    Raise InvalidCourseDataError unless 0 < discount_price < price.

    A course without a discount_price is always valid.
    """
    if discount_price is None:
        return
    if not Decimal("0") < discount_price < price:
        raise InvalidCourseDataError("discount_price must be greater than 0 and less than price")


def _editable_values(
    data: Dict[str, Any],
    editable: frozenset,
    required: frozenset,
) -> Dict[str, Any]:
    fields = {key: value for key, value in data.items() if key in editable}
    nulls = sorted(key for key in required if key in fields and fields[key] is None)
    if nulls:
        raise InvalidCourseDataError(f"Fields cannot be null: {', '.join(nulls)}")
    return fields


def ensure_course_owner(course: Course, user: User) -> None:
    """
    Raise UnauthorizedError unless the user owns the course or is an admin.
    """
    if user.role == UserRole.ADMIN:
        return
    if course.instructor_id != user.id:
        raise UnauthorizedError("You can only manage your own courses")


async def get_course_by_id(
    course_id: int,
    db: AsyncSession,
) -> Course:
    """
    Get a specific course by ID, with its lectures.

    Args:
        course_id: Course ID.
        db: Database session.

    Returns:
        Course object.

    Raises:
        NotFoundError: If the course does not exist or was deleted.
    """
    result = await db.execute(
        select(Course).where(
            Course.id == course_id,
            Course.deleted_at.is_(None),
        )
        .execution_options(populate_existing=True)
    )
    course = result.scalar_one_or_none()

    if not course:
        raise NotFoundError("Course not found")

    return course


async def get_published_courses(
    db: AsyncSession,
    page: int = 1,
    size: int = 10,
    search: Optional[str] = None,
    category: Optional[str] = None,
) -> Tuple[List[Course], int]:
    """
    Get paginated list of published courses.

    Args:
        db: Database session.
        page: Page number (1-indexed).
        size: Items per page.
        search: Optional search term for title or instructor name.
        category: Optional exact category filter.

    Returns:
        Tuple of (courses, total_count).
    """
    base_query = select(Course).where(
        Course.status == CourseStatus.PUBLISHED,
        Course.deleted_at.is_(None),
    )

    if search:
        search_term = f"%{search.lower()}%"
        base_query = base_query.join(Course.instructor).where(
            (func.lower(Course.title).like(search_term)) |
            (func.lower(User.name).like(search_term))
        )

    if category:
        base_query = base_query.where(Course.category == category)

    count_query = select(func.count()).select_from(base_query.subquery())
    count_result = await db.execute(count_query)
    total = count_result.scalar() or 0

    offset = (page - 1) * size
    result = await db.execute(
        base_query
        .order_by(Course.id.desc())
        .offset(offset)
        .limit(size)
    )
    courses = list(result.scalars().all())

    return courses, total


async def get_instructor_courses(
    user: User,
    db: AsyncSession,
) -> List[Course]:
    """Get all non-deleted courses owned by an instructor, newest first."""
    result = await db.execute(
        select(Course)
        .where(
            Course.instructor_id == user.id,
            Course.deleted_at.is_(None),
        )
        .order_by(Course.id.desc())
    )
    return list(result.scalars().all())


async def create_course(
    data: Dict[str, Any],
    user: User,
    db: AsyncSession,
) -> Course:
    """
    Create a draft course owned by the user, with optional initial lectures.

    Args:
        data: Validated course fields; may contain a "lectures" list.
        user: Instructor creating the course.
        db: Database session.

    Returns:
        The created Course.
    """
    lectures = data.pop("lectures", None) or []
    fields = _editable_values(data, EDITABLE_FIELDS, REQUIRED_FIELDS)
    validate_pricing(fields.get("price", Decimal("0")), fields.get("discount_price"))

    course = Course(
        instructor_id=user.id,
        status=CourseStatus.DRAFT,
        enrollment_count=0,
        average_rating=0.0,
        total_ratings=0,
        total_duration=0,
        **fields,
    )
    db.add(course)
    await db.flush()

    for position, lecture_data in enumerate(lectures, start=1):
        lecture_fields = {
            key: value for key, value in lecture_data.items()
            if key in EDITABLE_LECTURE_FIELDS
        }
        if lecture_fields.get("order") is None:
            lecture_fields["order"] = position
        db.add(Lecture(course_id=course.id, **lecture_fields))

    await db.flush()
    await aggregate_service.recompute_total_duration(course.id, db)
    await db.commit()

    logger.info(f"Instructor {user.id} created course {course.id}")
    return await _reload(course.id, db)


async def update_course(
    course_id: int,
    data: Dict[str, Any],
    user: User,
    db: AsyncSession,
) -> Course:
    """
    Update the editable fields of a course.

    Unknown or derived fields in ``data`` are ignored.

    Raises:
        NotFoundError: Course does not exist.
        InvalidCourseDataError: A required field is null or the resulting
            pricing is invalid.
        UnauthorizedError: User is not the owner or an admin.
    """
    course = await get_course_by_id(course_id, db)
    ensure_course_owner(course, user)

    fields = _editable_values(data, EDITABLE_FIELDS, REQUIRED_FIELDS)
    validate_pricing(
        fields.get("price", course.price),
        fields.get("discount_price", course.discount_price),
    )

    for key, value in fields.items():
        setattr(course, key, value)

    await db.commit()
    return await _reload(course.id, db)


async def set_course_status(
    course_id: int,
    new_status: CourseStatus,
    user: User,
    db: AsyncSession,
) -> Course:
    """
    Move a course between draft, published and archived.

    Publishing approves the course if it is not approved yet.

    Raises:
        NotFoundError: Course does not exist.
        UnauthorizedError: User is not the owner or an admin.
    """
    course = await get_course_by_id(course_id, db)
    ensure_course_owner(course, user)

    course.status = new_status
    if new_status == CourseStatus.PUBLISHED and not course.is_approved:
        course.is_approved = True
        course.approved_at = datetime.now(timezone.utc)
    await db.commit()

    logger.info(f"Course {course_id} status set to {new_status.value}")
    return await _reload(course.id, db)


async def add_lecture(
    course_id: int,
    data: Dict[str, Any],
    user: User,
    db: AsyncSession,
) -> Course:
    """
    Append a lecture to a course and recompute total_duration.

    Existing Progress records are not touched: their total_lectures stays
    as it was at enrollment time.
    """
    course = await get_course_by_id(course_id, db)
    ensure_course_owner(course, user)

    fields = {key: value for key, value in data.items() if key in EDITABLE_LECTURE_FIELDS}
    if fields.get("order") is None:
        fields["order"] = max((lecture.order for lecture in course.lectures), default=0) + 1

    db.add(Lecture(course_id=course.id, **fields))
    await db.flush()
    await aggregate_service.recompute_total_duration(course.id, db)
    await db.commit()

    return await _reload(course.id, db)


async def update_lecture(
    course_id: int,
    lecture_id: int,
    data: Dict[str, Any],
    user: User,
    db: AsyncSession,
) -> Course:
    """
    Update a lecture in place and recompute total_duration.

    Raises:
        NotFoundError: Course or lecture does not exist.
        UnauthorizedError: User is not the owner or an admin.
    """
    course = await get_course_by_id(course_id, db)
    ensure_course_owner(course, user)
    lecture = _find_lecture(course, lecture_id)

    for key, value in _editable_values(
        data, EDITABLE_LECTURE_FIELDS, REQUIRED_LECTURE_FIELDS
    ).items():
        setattr(lecture, key, value)

    await db.flush()
    await aggregate_service.recompute_total_duration(course.id, db)
    await db.commit()

    return await _reload(course.id, db)


async def delete_lecture(
    course_id: int,
    lecture_id: int,
    user: User,
    db: AsyncSession,
) -> Course:
    """
    Remove a lecture and recompute total_duration.

    Progress entries that reference the lecture are kept as history.
    """
    course = await get_course_by_id(course_id, db)
    ensure_course_owner(course, user)
    lecture = _find_lecture(course, lecture_id)

    course.lectures.remove(lecture)
    await db.flush()
    await aggregate_service.recompute_total_duration(course.id, db)
    await db.commit()

    return await _reload(course.id, db)


def _find_lecture(course: Course, lecture_id: int) -> Lecture:
    for lecture in course.lectures:
        if lecture.id == lecture_id:
            return lecture
    raise NotFoundError("Lecture not found")


async def _reload(course_id: int, db: AsyncSession) -> Course:
    # Fresh copy so aggregate updates issued as SQL are visible
    result = await db.execute(
        select(Course)
        .where(Course.id == course_id)
        .execution_options(populate_existing=True)
    )
    return result.scalar_one()
