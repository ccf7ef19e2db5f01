"""
User Routes

Endpoints for the current user's profile, enrolled courses and wishlist.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from learnhub.api.deps import get_current_active_user
from learnhub.core.database import get_db
from learnhub.models.user import User
from learnhub.schemas.user import EnrolledCourseResponse, UserResponse, WishlistResponse
from learnhub.services import user_service


router = APIRouter(prefix="/users", tags=["Users"])


@router.get(
    "/me",
    response_model=UserResponse,
    summary="Get current user profile",
)
async def get_me(
    current_user: Annotated[User, Depends(get_current_active_user)],
) -> User:
    """
    Get the currently logged-in user's profile.

    enrolled_course_ids is read from the enrollment ledger.
    """
    return current_user


@router.get(
    "/me/courses",
    response_model=list[EnrolledCourseResponse],
    summary="List my enrolled courses with progress",
)
async def get_my_courses(
    current_user: Annotated[User, Depends(get_current_active_user)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> list[EnrolledCourseResponse]:
    entries = await user_service.get_enrolled_courses(user=current_user, db=db)
    return [
        EnrolledCourseResponse.model_validate(
            {
                "course": enrollment.course,
                "enrolled_at": enrollment.created_at,
                "progress": progress,
            },
            from_attributes=True,
        )
        for enrollment, progress in entries
    ]


@router.get(
    "/me/wishlist",
    response_model=WishlistResponse,
    summary="Get my wishlist",
)
async def get_my_wishlist(
    current_user: Annotated[User, Depends(get_current_active_user)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> WishlistResponse:
    courses = await user_service.get_wishlist(user=current_user, db=db)
    return WishlistResponse(courses=courses)


@router.post(
    "/me/wishlist/{course_id}",
    response_model=WishlistResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Add a course to my wishlist",
)
async def add_to_wishlist(
    course_id: int,
    current_user: Annotated[User, Depends(get_current_active_user)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> WishlistResponse:
    courses = await user_service.add_to_wishlist(user=current_user, course_id=course_id, db=db)
    return WishlistResponse(courses=courses)


@router.delete(
    "/me/wishlist/{course_id}",
    response_model=WishlistResponse,
    summary="Remove a course from my wishlist",
)
async def remove_from_wishlist(
    course_id: int,
    current_user: Annotated[User, Depends(get_current_active_user)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> WishlistResponse:
    courses = await user_service.remove_from_wishlist(user=current_user, course_id=course_id, db=db)
    return WishlistResponse(courses=courses)
