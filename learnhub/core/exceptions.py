"""
Service Errors

Structured failures raised by the service layer.

Every error is an HTTPException, so FastAPI renders it directly as
``{"detail": {"code": ..., "message": ...}}`` while services and tests can
still match on the concrete class.
"""

from typing import Optional

from fastapi import HTTPException, status


class ServiceError(HTTPException):
    """Base class for all service-layer failures."""

    http_status: int = status.HTTP_400_BAD_REQUEST
    code: str = "service_error"
    default_message: str = "Request could not be processed"

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(
            status_code=self.http_status,
            detail={"code": self.code, "message": self.message},
        )


class NotFoundError(ServiceError):
    http_status = status.HTTP_404_NOT_FOUND
    code = "not_found"
    default_message = "Resource not found"


class AlreadyEnrolledError(ServiceError):
    code = "already_enrolled"
    default_message = "Already enrolled in this course"


class PaymentRequiredError(ServiceError):
    http_status = status.HTTP_402_PAYMENT_REQUIRED
    code = "payment_required"
    default_message = "Payment required for this course"


class FreeCourseError(ServiceError):
    code = "free_course"
    default_message = "This course is free"


class PaidCourseError(ServiceError):
    code = "paid_course"
    default_message = "This course requires payment"


class CourseNotAvailableError(ServiceError):
    code = "course_not_available"
    default_message = "Course is not available for enrollment"


class NotEnrolledError(ServiceError):
    http_status = status.HTTP_403_FORBIDDEN
    code = "not_enrolled"
    default_message = "Not enrolled in this course"


class LectureNotFoundError(ServiceError):
    http_status = status.HTTP_404_NOT_FOUND
    code = "lecture_not_found"
    default_message = "Lecture not found in progress"


class UnauthorizedError(ServiceError):
    """Ownership check failed."""

    http_status = status.HTTP_403_FORBIDDEN
    code = "unauthorized"
    default_message = "Unauthorized"


class ConflictError(ServiceError):
    """Concurrent-update retries were exhausted."""

    http_status = status.HTTP_409_CONFLICT
    code = "conflict"
    default_message = "Concurrent update conflict, please retry"


class PaymentStateError(ServiceError):
    http_status = status.HTTP_409_CONFLICT
    code = "invalid_payment_state"
    default_message = "Payment cannot transition from its current status"


class PaymentGatewayError(ServiceError):
    http_status = status.HTTP_502_BAD_GATEWAY
    code = "payment_gateway_error"
    default_message = "Payment gateway request failed"


class MockPaymentsDisabledError(ServiceError):
    http_status = status.HTTP_403_FORBIDDEN
    code = "mock_payments_disabled"
    default_message = "Mock purchases are disabled when a payment gateway is configured"


class AlreadyInWishlistError(ServiceError):
    code = "already_in_wishlist"
    default_message = "Course already in wishlist"


class ReviewNotAllowedError(ServiceError):
    http_status = status.HTTP_403_FORBIDDEN
    code = "review_not_allowed"
    default_message = "You must be enrolled to review this course"


class InvalidCourseDataError(ServiceError):
    http_status = 422
    code = "invalid_course_data"
    default_message = "Invalid course data"
