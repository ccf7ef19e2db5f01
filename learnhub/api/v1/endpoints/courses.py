"""
Course Routes

Endpoints for the course catalog, lecture management, enrollment and
lecture progress.
"""

from typing import Annotated, Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from learnhub.api.deps import (
    get_current_active_user,
    get_current_user_optional,
    require_roles,
)
from learnhub.core.database import get_db
from learnhub.models.enums import UserRole
from learnhub.models.user import User
from learnhub.schemas.course import (
    CourseCreate,
    CourseDeleteResponse,
    CourseListResponse,
    CourseResponse,
    CourseStatusUpdate,
    CourseSummary,
    CourseUpdate,
    LectureCreate,
    LectureUpdate,
)
from learnhub.schemas.progress import (
    EnrollmentResponse,
    LectureProgressUpdate,
    ProgressResponse,
)
from learnhub.services import admin_service, course_service, enrollment_service, progress_service


router = APIRouter(prefix="/courses", tags=["Courses"])

InstructorUser = Annotated[User, Depends(require_roles(UserRole.INSTRUCTOR, UserRole.ADMIN))]


@router.get(
    "/",
    response_model=CourseListResponse,
    summary="List all published courses",
)
async def list_courses(
    db: Annotated[AsyncSession, Depends(get_db)],
    page: int = Query(1, ge=1, description="Page number"),
    size: int = Query(10, ge=1, le=100, description="Items per page"),
    search: Optional[str] = Query(None, description="Search by title or instructor name"),
    category: Optional[str] = Query(None, description="Filter by category"),
) -> CourseListResponse:
    """
    Get a paginated list of all published courses.

    This endpoint is public (no authentication required).
    """
    courses, total = await course_service.get_published_courses(
        db=db,
        page=page,
        size=size,
        search=search,
        category=category,
    )

    pages = (total + size - 1) // size  # Ceiling division

    return CourseListResponse(
        items=courses,
        total=total,
        page=page,
        size=size,
        pages=pages,
    )


@router.get(
    "/instructor/my-courses",
    response_model=list[CourseSummary],
    summary="List courses owned by the current instructor",
)
async def list_my_courses(
    current_user: InstructorUser,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> list[CourseSummary]:
    return await course_service.get_instructor_courses(user=current_user, db=db)


@router.get(
    "/{course_id}",
    response_model=CourseResponse,
    summary="Get course details",
)
async def get_course(
    course_id: int,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[Optional[User], Depends(get_current_user_optional)],
) -> CourseResponse:
    """
    Get detailed information about a specific course.

    Public. Video URLs of non-preview lectures are only returned to enrolled
    users, the course owner and admins.
    """
    course = await course_service.get_course_by_id(course_id=course_id, db=db)
    response = CourseResponse.model_validate(course)

    can_watch = False
    if current_user is not None:
        can_watch = (
            current_user.role == UserRole.ADMIN
            or course.instructor_id == current_user.id
            or await enrollment_service.is_enrolled(current_user.id, course.id, db)
        )

    if not can_watch:
        response.lectures = [
            lecture if lecture.is_free else lecture.model_copy(update={"video_url": None})
            for lecture in response.lectures
        ]

    return response


@router.post(
    "/",
    response_model=CourseResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a new course",
)
async def create_course(
    course_data: CourseCreate,
    current_user: InstructorUser,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> CourseResponse:
    """
    Create a draft course owned by the caller.

    **Requirements:**
    - User must have INSTRUCTOR or ADMIN role
    """
    return await course_service.create_course(
        data=course_data.model_dump(),
        user=current_user,
        db=db,
    )


@router.patch(
    "/{course_id}",
    response_model=CourseResponse,
    summary="Update a course",
)
async def update_course(
    course_id: int,
    course_data: CourseUpdate,
    current_user: InstructorUser,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> CourseResponse:
    return await course_service.update_course(
        course_id=course_id,
        data=course_data.model_dump(exclude_unset=True),
        user=current_user,
        db=db,
    )


@router.delete(
    "/{course_id}",
    response_model=CourseDeleteResponse,
    summary="Delete my course",
)
async def delete_course(
    course_id: int,
    current_user: InstructorUser,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> CourseDeleteResponse:
    """
    Delete a course owned by the caller.

    Same effects as the admin deletion: reviews are removed and every
    completed payment is refunded.
    """
    refunded = await admin_service.delete_own_course(
        course_id=course_id,
        user=current_user,
        db=db,
    )
    return CourseDeleteResponse(
        message="Course deleted successfully",
        refunded_payments=refunded,
    )


@router.post(
    "/{course_id}/status",
    response_model=CourseResponse,
    summary="Publish, unpublish or archive a course",
)
async def set_course_status(
    course_id: int,
    status_data: CourseStatusUpdate,
    current_user: InstructorUser,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> CourseResponse:
    return await course_service.set_course_status(
        course_id=course_id,
        new_status=status_data.status,
        user=current_user,
        db=db,
    )


@router.post(
    "/{course_id}/lectures",
    response_model=CourseResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Add a lecture",
)
async def add_lecture(
    course_id: int,
    lecture_data: LectureCreate,
    current_user: InstructorUser,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> CourseResponse:
    return await course_service.add_lecture(
        course_id=course_id,
        data=lecture_data.model_dump(),
        user=current_user,
        db=db,
    )


@router.patch(
    "/{course_id}/lectures/{lecture_id}",
    response_model=CourseResponse,
    summary="Update a lecture",
)
async def update_lecture(
    course_id: int,
    lecture_id: int,
    lecture_data: LectureUpdate,
    current_user: InstructorUser,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> CourseResponse:
    return await course_service.update_lecture(
        course_id=course_id,
        lecture_id=lecture_id,
        data=lecture_data.model_dump(exclude_unset=True),
        user=current_user,
        db=db,
    )


@router.delete(
    "/{course_id}/lectures/{lecture_id}",
    response_model=CourseResponse,
    summary="Delete a lecture",
)
async def delete_lecture(
    course_id: int,
    lecture_id: int,
    current_user: InstructorUser,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> CourseResponse:
    return await course_service.delete_lecture(
        course_id=course_id,
        lecture_id=lecture_id,
        user=current_user,
        db=db,
    )


@router.post(
    "/{course_id}/enroll",
    response_model=EnrollmentResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Enroll in a course",
)
async def enroll_in_course(
    course_id: int,
    current_user: Annotated[User, Depends(get_current_active_user)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> EnrollmentResponse:
    """
    Enroll the current user in a published course.

    **Flow:**
    1. Course must be published
    2. User must not already be enrolled
    3. Paid courses require a completed payment (see /payments)
    4. A progress record is created with every lecture uncompleted
    """
    return await enrollment_service.enroll(
        user=current_user,
        course_id=course_id,
        db=db,
    )


@router.get(
    "/{course_id}/progress",
    response_model=ProgressResponse,
    summary="Get my progress in a course",
)
async def get_course_progress(
    course_id: int,
    current_user: Annotated[User, Depends(get_current_active_user)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> ProgressResponse:
    return await progress_service.get_progress(
        user=current_user,
        course_id=course_id,
        db=db,
    )


@router.post(
    "/{course_id}/lectures/{lecture_id}/progress",
    response_model=ProgressResponse,
    summary="Update lecture progress",
)
async def update_lecture_progress(
    course_id: int,
    lecture_id: int,
    progress_data: LectureProgressUpdate,
    current_user: Annotated[User, Depends(get_current_active_user)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> ProgressResponse:
    """
    Record progress for one lecture.

    Only the provided fields change. The course-level completion fields are
    recomputed on every call; repeating the same update is harmless.
    """
    return await progress_service.record_lecture_progress(
        user=current_user,
        course_id=course_id,
        lecture_id=lecture_id,
        db=db,
        completed=progress_data.completed,
        watched_duration=progress_data.watched_duration,
        quiz_score=progress_data.quiz_score,
    )
