"""
LearnHub Backend - Services Module

Business logic layer.
"""

from learnhub.services import aggregate_service
from learnhub.services import notification_service
from learnhub.services import progress_service
from learnhub.services import course_service
from learnhub.services import enrollment_service
from learnhub.services import payment_gateway
from learnhub.services import payment_service
from learnhub.services import review_service
from learnhub.services import user_service
from learnhub.services import admin_service

__all__ = [
    "aggregate_service",
    "notification_service",
    "progress_service",
    "course_service",
    "enrollment_service",
    "payment_gateway",
    "payment_service",
    "review_service",
    "user_service",
    "admin_service",
]
