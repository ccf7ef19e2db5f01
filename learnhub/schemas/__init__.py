"""
LearnHub Backend - Schemas Module

Pydantic models for request/response validation.
"""

from learnhub.schemas.course import (
    LectureCreate,
    LectureUpdate,
    LectureResponse,
    CourseCreate,
    CourseUpdate,
    CourseStatusUpdate,
    CourseApproval,
    InstructorSummary,
    CourseSummary,
    CourseResponse,
    CourseListResponse,
    CourseDeleteResponse,
)
from learnhub.schemas.payment import (
    CourseIdRequest,
    ConfirmPaymentRequest,
    PaymentIntentResponse,
    PaymentCourse,
    PaymentResponse,
    PaymentListResponse,
)
from learnhub.schemas.progress import (
    LectureProgressUpdate,
    LectureProgressResponse,
    ProgressSummary,
    ProgressResponse,
    EnrollmentResponse,
)
from learnhub.schemas.review import (
    ReviewCreate,
    ReviewUpdate,
    ReviewAuthor,
    ReviewResponse,
    ReviewListResponse,
    ReviewHelpfulResponse,
)
from learnhub.schemas.user import UserResponse, EnrolledCourseResponse, WishlistResponse

__all__ = [
    # Course
    "LectureCreate",
    "LectureUpdate",
    "LectureResponse",
    "CourseCreate",
    "CourseUpdate",
    "CourseStatusUpdate",
    "CourseApproval",
    "InstructorSummary",
    "CourseSummary",
    "CourseResponse",
    "CourseListResponse",
    "CourseDeleteResponse",
    # Payment
    "CourseIdRequest",
    "ConfirmPaymentRequest",
    "PaymentIntentResponse",
    "PaymentCourse",
    "PaymentResponse",
    "PaymentListResponse",
    # Progress
    "LectureProgressUpdate",
    "LectureProgressResponse",
    "ProgressSummary",
    "ProgressResponse",
    "EnrollmentResponse",
    # Review
    "ReviewCreate",
    "ReviewUpdate",
    "ReviewAuthor",
    "ReviewResponse",
    "ReviewListResponse",
    "ReviewHelpfulResponse",
    # User
    "UserResponse",
    "EnrolledCourseResponse",
    "WishlistResponse",
]
