"""
Course Aggregate Unit Tests

Tests for rating, duration and enrollment-count maintenance.
"""

import pytest
from sqlalchemy.exc import OperationalError

from learnhub.models import Lecture, Review, UserRole
from learnhub.services import aggregate_service


class TestComputeAverageRating:
    """Tests for the rating rounding rule."""

    def test_rounds_to_one_decimal(self):
        # [5, 4, 4] -> 4.333...
        assert aggregate_service.compute_average_rating(3, 13) == 4.3

    def test_rounds_half_up(self):
        # [5, 4, 4, 4] -> 4.25
        assert aggregate_service.compute_average_rating(4, 17) == 4.3
        # [5, 4] -> 4.5
        assert aggregate_service.compute_average_rating(2, 9) == 4.5

    def test_no_reviews_is_zero(self):
        assert aggregate_service.compute_average_rating(0, None) == 0.0


class TestRecompute:
    """Tests for recomputation against a real database."""

    @pytest.mark.asyncio
    async def test_recompute_rating_from_reviews(self, db_session, make_user, make_course):
        instructor = await make_user(role=UserRole.INSTRUCTOR)
        course = await make_course(instructor)
        for rating in (5, 4, 4):
            reviewer = await make_user()
            db_session.add(Review(user_id=reviewer.id, course_id=course.id, rating=rating, comment="ok"))
        await db_session.commit()

        average = await aggregate_service.recompute_rating(course.id, db_session)
        await db_session.commit()
        await db_session.refresh(course)

        assert average == 4.3
        assert course.average_rating == 4.3
        assert course.total_ratings == 3

    @pytest.mark.asyncio
    async def test_recompute_rating_without_reviews_resets(self, db_session, make_user, make_course):
        instructor = await make_user(role=UserRole.INSTRUCTOR)
        course = await make_course(instructor)
        course.average_rating = 3.0
        course.total_ratings = 7
        await db_session.commit()

        await aggregate_service.recompute_rating(course.id, db_session)
        await db_session.commit()
        await db_session.refresh(course)

        assert course.average_rating == 0.0
        assert course.total_ratings == 0

    @pytest.mark.asyncio
    async def test_recompute_total_duration(self, db_session, make_user, make_course):
        instructor = await make_user(role=UserRole.INSTRUCTOR)
        course = await make_course(instructor, lectures=[600, 300])
        db_session.add(Lecture(course_id=course.id, title="Extra", duration=120, order=3))
        await db_session.flush()

        total = await aggregate_service.recompute_total_duration(course.id, db_session)
        await db_session.commit()
        await db_session.refresh(course)

        assert total == 1020
        assert course.total_duration == 1020

    @pytest.mark.asyncio
    async def test_increment_enrollment_count_is_cumulative(self, db_session, make_user, make_course):
        instructor = await make_user(role=UserRole.INSTRUCTOR)
        course = await make_course(instructor)

        await aggregate_service.increment_enrollment_count(course.id, db_session)
        await aggregate_service.increment_enrollment_count(course.id, db_session)
        await db_session.commit()
        await db_session.refresh(course)

        assert course.enrollment_count == 2


class TestRefreshCourseRating:
    """Tests for the non-fatal rating refresh."""

    @pytest.mark.asyncio
    async def test_refresh_commits(self, db_session, make_user, make_course):
        instructor = await make_user(role=UserRole.INSTRUCTOR)
        course = await make_course(instructor)
        reviewer = await make_user()
        db_session.add(Review(user_id=reviewer.id, course_id=course.id, rating=2, comment="meh"))
        await db_session.commit()

        assert await aggregate_service.refresh_course_rating(course.id, db_session) is True

        await db_session.refresh(course)
        assert course.average_rating == 2.0
        assert course.total_ratings == 1

    @pytest.mark.asyncio
    async def test_refresh_gives_up_without_raising(self, mock_async_session, fast_retries):
        mock_async_session.execute.side_effect = OperationalError("SELECT", {}, Exception("locked"))

        result = await aggregate_service.refresh_course_rating(1, mock_async_session)

        assert result is False
        assert mock_async_session.rollback.await_count == 3
