"""
Course Schemas

Pydantic models for course and lecture request/response validation.
"""

from datetime import datetime
from decimal import Decimal
from typing import List, Optional
import uuid

from pydantic import BaseModel, Field

from learnhub.models.enums import CourseLevel, CourseStatus


# ============== Lecture Schemas ==============

class LectureCreate(BaseModel):
    """Schema for adding a lecture to a course."""

    title: str = Field(..., min_length=1, max_length=255, description="Lecture title")
    description: Optional[str] = None
    video_url: Optional[str] = Field(default=None, max_length=500)
    duration: int = Field(default=0, ge=0, description="Lecture duration in seconds")
    order: Optional[int] = Field(default=None, ge=1, description="Position; appended when omitted")
    is_free: bool = Field(default=False, description="Preview lecture visible to everyone")


class LectureUpdate(BaseModel):
    """Schema for updating a lecture. Only provided fields change."""

    title: Optional[str] = Field(default=None, min_length=1, max_length=255)
    description: Optional[str] = None
    video_url: Optional[str] = Field(default=None, max_length=500)
    duration: Optional[int] = Field(default=None, ge=0)
    order: Optional[int] = Field(default=None, ge=1)
    is_free: Optional[bool] = None


class LectureResponse(BaseModel):
    """Schema for lecture response."""

    id: int
    title: str
    description: Optional[str] = None
    video_url: Optional[str] = None
    duration: int
    order: int
    is_free: bool

    model_config = {"from_attributes": True}


# ============== Course Schemas ==============

class CourseCreate(BaseModel):
    """Schema for creating a new course."""

    title: str = Field(..., min_length=1, max_length=255)
    subtitle: Optional[str] = Field(default=None, max_length=255)
    description: str = Field(..., min_length=1)
    category: str = Field(..., min_length=1, max_length=100)
    level: CourseLevel = CourseLevel.BEGINNER
    language: str = Field(default="English", max_length=50)
    thumbnail: Optional[str] = Field(default=None, max_length=500)
    price: Decimal = Field(default=Decimal("0"), ge=0, description="0 means free")
    discount_price: Optional[Decimal] = Field(default=None, ge=0)
    lectures: List[LectureCreate] = []


class CourseUpdate(BaseModel):
    """
    Schema for updating a course.

    Derived fields (enrollment_count, average_rating, total_ratings,
    total_duration) are not accepted here.
    """

    title: Optional[str] = Field(default=None, min_length=1, max_length=255)
    subtitle: Optional[str] = Field(default=None, max_length=255)
    description: Optional[str] = Field(default=None, min_length=1)
    category: Optional[str] = Field(default=None, min_length=1, max_length=100)
    level: Optional[CourseLevel] = None
    language: Optional[str] = Field(default=None, max_length=50)
    thumbnail: Optional[str] = Field(default=None, max_length=500)
    price: Optional[Decimal] = Field(default=None, ge=0)
    discount_price: Optional[Decimal] = Field(default=None, ge=0)


class CourseStatusUpdate(BaseModel):
    """Schema for publishing, unpublishing or archiving a course."""

    status: CourseStatus


class CourseApproval(BaseModel):
    """Schema for the admin approval decision."""

    is_approved: bool = True


class InstructorSummary(BaseModel):
    """Public instructor info embedded in course responses."""

    id: uuid.UUID
    name: str

    model_config = {"from_attributes": True}


class CourseSummary(BaseModel):
    """Schema for a course in list responses (no lectures)."""

    id: int
    instructor_id: uuid.UUID
    instructor: Optional[InstructorSummary] = None
    title: str
    subtitle: Optional[str] = None
    category: str
    level: CourseLevel
    language: str
    thumbnail: Optional[str] = None
    price: float
    discount_price: Optional[float] = None
    status: CourseStatus
    is_approved: bool
    enrollment_count: int
    average_rating: float
    total_ratings: int
    total_duration: int

    model_config = {"from_attributes": True}


class CourseResponse(CourseSummary):
    """Schema for course detail response with nested lectures."""

    description: str
    approved_at: Optional[datetime] = None
    created_at: datetime
    lectures: List[LectureResponse] = []


class CourseListResponse(BaseModel):
    """Schema for paginated course list."""

    items: List[CourseSummary]
    total: int
    page: int
    size: int
    pages: int


class CourseDeleteResponse(BaseModel):
    """Schema for the course deletion result."""

    message: str
    refunded_payments: int
