"""
Review Routes

Endpoints for course reviews.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from learnhub.api.deps import get_current_active_user
from learnhub.core.database import get_db
from learnhub.models.user import User
from learnhub.schemas.review import (
    ReviewCreate,
    ReviewHelpfulResponse,
    ReviewListResponse,
    ReviewResponse,
    ReviewUpdate,
)
from learnhub.services import review_service


router = APIRouter(prefix="/reviews", tags=["Reviews"])


@router.get(
    "/course/{course_id}",
    response_model=ReviewListResponse,
    summary="List reviews for a course",
)
async def list_course_reviews(
    course_id: int,
    db: Annotated[AsyncSession, Depends(get_db)],
    page: int = Query(1, ge=1, description="Page number"),
    size: int = Query(10, ge=1, le=100, description="Items per page"),
) -> ReviewListResponse:
    reviews, total = await review_service.get_course_reviews(
        course_id=course_id,
        db=db,
        page=page,
        size=size,
    )
    return ReviewListResponse(
        items=reviews,
        total=total,
        page=page,
        size=size,
        pages=(total + size - 1) // size,
    )


@router.post(
    "/",
    response_model=ReviewResponse,
    summary="Create or update my review of a course",
)
async def submit_review(
    review_data: ReviewCreate,
    response: Response,
    current_user: Annotated[User, Depends(get_current_active_user)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> ReviewResponse:
    """
    Create the caller's review, or overwrite it if one exists.

    **Requirements:**
    - User must be enrolled in the course

    Responds 201 when a review was created and 200 when it was updated.
    """
    review, created = await review_service.create_or_update_review(
        user=current_user,
        course_id=review_data.course_id,
        rating=review_data.rating,
        comment=review_data.comment,
        db=db,
    )
    if created:
        response.status_code = status.HTTP_201_CREATED
    return review


@router.patch(
    "/{review_id}",
    response_model=ReviewResponse,
    summary="Update my review",
)
async def update_review(
    review_id: int,
    review_data: ReviewUpdate,
    current_user: Annotated[User, Depends(get_current_active_user)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> ReviewResponse:
    return await review_service.update_review(
        user=current_user,
        review_id=review_id,
        db=db,
        rating=review_data.rating,
        comment=review_data.comment,
    )


@router.delete(
    "/{review_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete a review",
)
async def delete_review(
    review_id: int,
    current_user: Annotated[User, Depends(get_current_active_user)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> None:
    """Delete a review as its author or as an admin."""
    await review_service.delete_review(
        user=current_user,
        review_id=review_id,
        db=db,
    )


@router.post(
    "/{review_id}/helpful",
    response_model=ReviewHelpfulResponse,
    summary="Toggle my helpful mark on a review",
)
async def toggle_review_helpful(
    review_id: int,
    current_user: Annotated[User, Depends(get_current_active_user)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> ReviewHelpfulResponse:
    review, marked = await review_service.toggle_helpful(
        user=current_user,
        review_id=review_id,
        db=db,
    )
    return ReviewHelpfulResponse(
        review_id=review.id,
        helpful_count=review.helpful_count,
        marked=marked,
    )
