"""
Review Schemas

Pydantic models for review request/response validation.
"""

from datetime import datetime
from typing import List, Optional
import uuid

from pydantic import BaseModel, Field


class ReviewCreate(BaseModel):
    """Schema for creating or replacing the caller's review of a course."""

    course_id: int
    rating: int = Field(..., ge=1, le=5, description="Rating from 1 to 5")
    comment: str = Field(..., min_length=1, max_length=1000)


class ReviewUpdate(BaseModel):
    """Schema for editing a review."""

    rating: Optional[int] = Field(default=None, ge=1, le=5)
    comment: Optional[str] = Field(default=None, min_length=1, max_length=1000)


class ReviewAuthor(BaseModel):
    id: uuid.UUID
    name: str

    model_config = {"from_attributes": True}


class ReviewResponse(BaseModel):
    """Schema for review response."""

    id: int
    course_id: int
    user_id: uuid.UUID
    user: Optional[ReviewAuthor] = None
    rating: int
    comment: str
    helpful_count: int = 0
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class ReviewHelpfulResponse(BaseModel):
    """Schema for the result of toggling a helpful mark."""

    review_id: int
    helpful_count: int
    marked: bool


class ReviewListResponse(BaseModel):
    """Schema for paginated review list."""

    items: List[ReviewResponse]
    total: int
    page: int
    size: int
    pages: int
