"""
LearnHub Backend - Models Module

This module exports all SQLAlchemy models for the application.
Import Base for Alembic migrations.
"""

from learnhub.core.database import Base

# Enums
from learnhub.models.enums import (
    UserRole,
    CourseStatus,
    CourseLevel,
    PaymentStatus,
    PaymentMethod,
)

# Models
from learnhub.models.user import User, wishlist_items
from learnhub.models.course import Course
from learnhub.models.lecture import Lecture
from learnhub.models.enrollment import Enrollment
from learnhub.models.payment import Payment
from learnhub.models.progress import Progress, LectureProgress
from learnhub.models.review import Review, review_helpful_votes

__all__ = [
    # Base
    "Base",
    # Enums
    "UserRole",
    "CourseStatus",
    "CourseLevel",
    "PaymentStatus",
    "PaymentMethod",
    # Models
    "User",
    "wishlist_items",
    "Course",
    "Lecture",
    "Enrollment",
    "Payment",
    "Progress",
    "LectureProgress",
    "Review",
    "review_helpful_votes",
]
