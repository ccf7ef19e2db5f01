"""
API v1 Router

Aggregates all v1 endpoint routers.
"""

from fastapi import APIRouter

from learnhub.api.v1.endpoints import admin, courses, payments, reviews, users

router = APIRouter()

# Include user routes
router.include_router(users.router)

# Include course routes
router.include_router(courses.router)

# Include payment routes
router.include_router(payments.router)

# Include review routes
router.include_router(reviews.router)

# Include admin routes
router.include_router(admin.router)
