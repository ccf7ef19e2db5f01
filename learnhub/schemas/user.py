"""
User Schemas

Pydantic models for user response validation.
"""

import uuid
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel

from learnhub.models.enums import UserRole
from learnhub.schemas.course import CourseSummary
from learnhub.schemas.progress import ProgressSummary


class UserResponse(BaseModel):
    """Schema for user response."""

    id: uuid.UUID
    name: str
    email: str
    role: UserRole
    is_active: bool
    created_at: datetime
    enrolled_course_ids: List[int] = []

    model_config = {"from_attributes": True}


class EnrolledCourseResponse(BaseModel):
    """An enrolled course with the user's progress in it."""

    course: CourseSummary
    enrolled_at: datetime
    progress: Optional[ProgressSummary] = None


class WishlistResponse(BaseModel):
    """Schema for the user's wishlist."""

    courses: List[CourseSummary]
