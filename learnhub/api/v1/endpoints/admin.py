"""
Admin Routes

Course moderation endpoints. All routes require the ADMIN role.
"""

from typing import Annotated

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from learnhub.api.deps import require_roles
from learnhub.core.database import get_db
from learnhub.models.enums import UserRole
from learnhub.models.user import User
from learnhub.schemas.course import CourseApproval, CourseDeleteResponse, CourseResponse
from learnhub.services import admin_service


router = APIRouter(prefix="/admin", tags=["Admin"])

AdminUser = Annotated[User, Depends(require_roles(UserRole.ADMIN))]


@router.post(
    "/courses/{course_id}/approve",
    response_model=CourseResponse,
    summary="Approve or reject a course",
)
async def approve_course(
    course_id: int,
    approval: CourseApproval,
    current_user: AdminUser,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> CourseResponse:
    return await admin_service.set_course_approval(
        course_id=course_id,
        is_approved=approval.is_approved,
        db=db,
    )


@router.delete(
    "/courses/{course_id}",
    response_model=CourseDeleteResponse,
    summary="Delete a course",
)
async def delete_course(
    course_id: int,
    current_user: AdminUser,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> CourseDeleteResponse:
    """
    Delete a course.

    Reviews are removed and every completed payment is refunded.
    Enrollments are kept; the course disappears from the catalog.
    """
    refunded = await admin_service.delete_course(course_id=course_id, db=db)
    return CourseDeleteResponse(
        message="Course deleted successfully",
        refunded_payments=refunded,
    )
