"""
Database Enums

Python Enums stored by their lowercase values.
"""

import enum


class UserRole(str, enum.Enum):
    """User role enumeration."""
    STUDENT = "student"
    INSTRUCTOR = "instructor"
    ADMIN = "admin"


class CourseStatus(str, enum.Enum):
    """Course publication status."""
    DRAFT = "draft"
    PUBLISHED = "published"
    ARCHIVED = "archived"


class CourseLevel(str, enum.Enum):
    """Course difficulty level."""
    BEGINNER = "beginner"
    INTERMEDIATE = "intermediate"
    ADVANCED = "advanced"
    ALL_LEVELS = "all levels"


class PaymentStatus(str, enum.Enum):
    """
    Payment lifecycle status.

    pending -> completed | failed, completed -> refunded.
    """
    PENDING = "pending"
    COMPLETED = "completed"
    FAILED = "failed"
    REFUNDED = "refunded"


class PaymentMethod(str, enum.Enum):
    """How a payment was settled."""
    STRIPE = "stripe"
    FREE = "free"
    MOCK = "mock"


def enum_values(enum_cls: type[enum.Enum]) -> list[str]:
    """values_callable for SQLAlchemy Enum columns."""
    return [member.value for member in enum_cls]
