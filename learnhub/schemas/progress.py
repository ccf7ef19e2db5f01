"""
Progress Schemas

Pydantic models for lecture progress tracking and enrollment.
"""

from datetime import datetime
from typing import List, Optional
import uuid

from pydantic import BaseModel, Field


class LectureProgressUpdate(BaseModel):
    """Schema for updating one lecture's progress. Only provided fields change."""

    completed: Optional[bool] = Field(default=None, description="Mark the lecture complete or not")
    watched_duration: Optional[int] = Field(default=None, ge=0, description="Seconds watched")
    quiz_score: Optional[int] = Field(default=None, ge=0, le=100, description="Latest quiz score")


class LectureProgressResponse(BaseModel):
    """Schema for a single lecture's progress entry."""

    lecture_id: int
    completed: bool
    watched_duration: int
    quiz_score: Optional[int] = None
    last_watched_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class ProgressSummary(BaseModel):
    """Course-level progress fields."""

    course_id: int
    total_lectures: int
    completed_lectures: int
    overall_progress: int
    is_completed: bool
    completed_at: Optional[datetime] = None
    last_accessed_at: datetime

    model_config = {"from_attributes": True}


class ProgressResponse(ProgressSummary):
    """Schema for progress response with per-lecture entries."""

    lecture_progress: List[LectureProgressResponse] = []


class EnrollmentResponse(BaseModel):
    """Schema for enrollment response."""

    id: int
    user_id: uuid.UUID
    course_id: int
    created_at: datetime

    model_config = {"from_attributes": True}
