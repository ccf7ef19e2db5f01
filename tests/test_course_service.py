"""
Course Unit Tests

Tests for catalog queries, course editing and lecture management.
"""

from decimal import Decimal

import pytest

from learnhub.core.exceptions import InvalidCourseDataError, NotFoundError, UnauthorizedError
from learnhub.models import CourseStatus, UserRole
from learnhub.services import course_service


def _course_data(**overrides) -> dict:
    data = {
        "title": "Async Python",
        "description": "Event loops and friends",
        "category": "Programming",
        "price": Decimal("0"),
    }
    data.update(overrides)
    return data


class TestCreateCourse:
    """Tests for course creation."""

    @pytest.mark.asyncio
    async def test_create_with_lectures_sets_total_duration(self, db_session, make_user):
        instructor = await make_user(role=UserRole.INSTRUCTOR)

        course = await course_service.create_course(
            _course_data(lectures=[
                {"title": "Intro", "duration": 600, "is_free": True},
                {"title": "Tasks", "duration": 300},
            ]),
            instructor,
            db_session,
        )

        assert course.status == CourseStatus.DRAFT
        assert course.instructor_id == instructor.id
        assert course.total_duration == 900
        assert [lecture.order for lecture in course.lectures] == [1, 2]

    @pytest.mark.asyncio
    async def test_derived_fields_are_ignored(self, db_session, make_user):
        instructor = await make_user(role=UserRole.INSTRUCTOR)

        course = await course_service.create_course(
            _course_data(enrollment_count=500, average_rating=5.0, total_duration=99999),
            instructor,
            db_session,
        )

        assert course.enrollment_count == 0
        assert course.average_rating == 0.0
        assert course.total_duration == 0


class TestUpdateCourse:
    """Tests for editing courses."""

    @pytest.mark.asyncio
    async def test_owner_updates_editable_fields_only(self, db_session, make_user, make_course):
        instructor = await make_user(role=UserRole.INSTRUCTOR)
        course = await make_course(instructor)

        updated = await course_service.update_course(
            course.id,
            {"title": "Python Deep Dive", "total_ratings": 42, "enrollment_count": 7},
            instructor,
            db_session,
        )

        assert updated.title == "Python Deep Dive"
        assert updated.total_ratings == 0
        assert updated.enrollment_count == 0

    @pytest.mark.asyncio
    async def test_non_owner_rejected(self, db_session, make_user, make_course):
        instructor = await make_user(role=UserRole.INSTRUCTOR)
        other = await make_user(role=UserRole.INSTRUCTOR)
        course = await make_course(instructor)

        with pytest.raises(UnauthorizedError):
            await course_service.update_course(course.id, {"title": "Mine now"}, other, db_session)

    @pytest.mark.asyncio
    async def test_admin_may_edit(self, db_session, make_user, make_course):
        instructor = await make_user(role=UserRole.INSTRUCTOR)
        admin = await make_user(role=UserRole.ADMIN)
        course = await make_course(instructor)

        updated = await course_service.update_course(course.id, {"category": "Data"}, admin, db_session)

        assert updated.category == "Data"

    @pytest.mark.asyncio
    async def test_set_status(self, db_session, make_user, make_course):
        instructor = await make_user(role=UserRole.INSTRUCTOR)
        course = await make_course(instructor, status=CourseStatus.DRAFT)

        published = await course_service.set_course_status(
            course.id, CourseStatus.PUBLISHED, instructor, db_session
        )

        assert published.status == CourseStatus.PUBLISHED

    @pytest.mark.asyncio
    async def test_publishing_approves_course(self, db_session, make_user, make_course):
        instructor = await make_user(role=UserRole.INSTRUCTOR)
        course = await make_course(instructor, status=CourseStatus.DRAFT)
        assert course.is_approved is False

        archived = await course_service.set_course_status(
            course.id, CourseStatus.ARCHIVED, instructor, db_session
        )
        assert archived.is_approved is False

        published = await course_service.set_course_status(
            course.id, CourseStatus.PUBLISHED, instructor, db_session
        )
        assert published.is_approved is True
        assert published.approved_at is not None

    @pytest.mark.asyncio
    async def test_null_for_required_field_rejected(self, db_session, make_user, make_course):
        instructor = await make_user(role=UserRole.INSTRUCTOR)
        course = await make_course(instructor, price="49")

        with pytest.raises(InvalidCourseDataError):
            await course_service.update_course(
                course.id, {"price": None, "title": "Renamed"}, instructor, db_session
            )

        reloaded = await course_service.get_course_by_id(course.id, db_session)
        assert reloaded.price == Decimal("49")
        assert reloaded.title == "Python Fundamentals"

    @pytest.mark.asyncio
    async def test_optional_field_may_be_cleared(self, db_session, make_user, make_course):
        instructor = await make_user(role=UserRole.INSTRUCTOR)
        course = await make_course(instructor, price="49", discount_price="29")

        updated = await course_service.update_course(
            course.id, {"discount_price": None, "subtitle": None}, instructor, db_session
        )

        assert updated.discount_price is None
        assert updated.effective_price == Decimal("49")


class TestPricing:
    """Tests for discount_price validation."""

    @pytest.mark.parametrize(
        "price,discount_price",
        [
            ("499", "0"),
            ("499", "499"),
            ("499", "599"),
            ("0", "10"),
        ],
    )
    def test_invalid_discounts(self, price, discount_price):
        with pytest.raises(InvalidCourseDataError):
            course_service.validate_pricing(Decimal(price), Decimal(discount_price))

    def test_valid_discounts(self):
        course_service.validate_pricing(Decimal("499"), Decimal("299"))
        course_service.validate_pricing(Decimal("0"), None)

    @pytest.mark.asyncio
    async def test_create_rejects_zero_discount(self, db_session, make_user):
        instructor = await make_user(role=UserRole.INSTRUCTOR)

        with pytest.raises(InvalidCourseDataError):
            await course_service.create_course(
                _course_data(price=Decimal("499"), discount_price=Decimal("0")),
                instructor,
                db_session,
            )

    @pytest.mark.asyncio
    async def test_update_checks_merged_prices(self, db_session, make_user, make_course):
        instructor = await make_user(role=UserRole.INSTRUCTOR)
        course = await make_course(instructor, price="499", discount_price="299")

        with pytest.raises(InvalidCourseDataError):
            await course_service.update_course(
                course.id, {"price": Decimal("199")}, instructor, db_session
            )


class TestLectures:
    """Tests for lecture mutations and total_duration."""

    @pytest.mark.asyncio
    async def test_add_lecture(self, db_session, make_user, make_course):
        instructor = await make_user(role=UserRole.INSTRUCTOR)
        course = await make_course(instructor, lectures=[600, 300])

        course = await course_service.add_lecture(
            course.id, {"title": "Bonus", "duration": 120}, instructor, db_session
        )

        assert course.total_duration == 1020
        assert len(course.lectures) == 3
        assert course.lectures[-1].order == 3

    @pytest.mark.asyncio
    async def test_update_lecture_duration(self, db_session, make_user, make_course):
        instructor = await make_user(role=UserRole.INSTRUCTOR)
        course = await make_course(instructor, lectures=[600, 300])
        lecture_id = course.lectures[1].id

        course = await course_service.update_lecture(
            course.id, lecture_id, {"duration": 900}, instructor, db_session
        )

        assert course.total_duration == 1500

    @pytest.mark.asyncio
    async def test_delete_lecture(self, db_session, make_user, make_course):
        instructor = await make_user(role=UserRole.INSTRUCTOR)
        course = await make_course(instructor, lectures=[600, 300])
        lecture_id = course.lectures[0].id

        course = await course_service.delete_lecture(course.id, lecture_id, instructor, db_session)

        assert course.total_duration == 300
        assert lecture_id not in [lecture.id for lecture in course.lectures]
        assert len(course.lectures) == 1

    @pytest.mark.asyncio
    async def test_null_lecture_duration_rejected(self, db_session, make_user, make_course):
        instructor = await make_user(role=UserRole.INSTRUCTOR)
        course = await make_course(instructor, lectures=[600, 300])
        lecture_id = course.lectures[1].id

        with pytest.raises(InvalidCourseDataError):
            await course_service.update_lecture(
                course.id, lecture_id, {"duration": None}, instructor, db_session
            )

    @pytest.mark.asyncio
    async def test_unknown_lecture(self, db_session, make_user, make_course):
        instructor = await make_user(role=UserRole.INSTRUCTOR)
        course = await make_course(instructor)

        with pytest.raises(NotFoundError):
            await course_service.delete_lecture(course.id, 999, instructor, db_session)

    @pytest.mark.asyncio
    async def test_non_owner_cannot_add_lecture(self, db_session, make_user, make_course):
        instructor = await make_user(role=UserRole.INSTRUCTOR)
        student = await make_user()
        course = await make_course(instructor)

        with pytest.raises(UnauthorizedError):
            await course_service.add_lecture(course.id, {"title": "x"}, student, db_session)


class TestCatalog:
    """Tests for catalog listing."""

    @pytest.mark.asyncio
    async def test_lists_published_only(self, db_session, make_user, make_course):
        instructor = await make_user(role=UserRole.INSTRUCTOR)
        published = await make_course(instructor, title="Published")
        await make_course(instructor, title="Draft", status=CourseStatus.DRAFT)

        courses, total = await course_service.get_published_courses(db_session)

        assert total == 1
        assert [c.id for c in courses] == [published.id]

    @pytest.mark.asyncio
    async def test_search_by_title_or_instructor(self, db_session, make_user, make_course):
        ada = await make_user(role=UserRole.INSTRUCTOR, name="Ada Lovelace")
        alan = await make_user(role=UserRole.INSTRUCTOR, name="Alan Turing")
        engines = await make_course(ada, title="Analytical Engines")
        machines = await make_course(alan, title="Computable Numbers")

        by_title, _ = await course_service.get_published_courses(db_session, search="engines")
        by_name, _ = await course_service.get_published_courses(db_session, search="turing")

        assert [c.id for c in by_title] == [engines.id]
        assert [c.id for c in by_name] == [machines.id]

    @pytest.mark.asyncio
    async def test_pagination_and_category(self, db_session, make_user, make_course):
        instructor = await make_user(role=UserRole.INSTRUCTOR)
        for i in range(3):
            await make_course(instructor, title=f"Course {i}")

        page, total = await course_service.get_published_courses(db_session, page=2, size=2)
        assert total == 3
        assert len(page) == 1

        none, total = await course_service.get_published_courses(db_session, category="Cooking")
        assert none == []
        assert total == 0

    @pytest.mark.asyncio
    async def test_instructor_courses_include_drafts(self, db_session, make_user, make_course):
        instructor = await make_user(role=UserRole.INSTRUCTOR)
        await make_course(instructor, status=CourseStatus.DRAFT)
        await make_course(instructor)

        courses = await course_service.get_instructor_courses(instructor, db_session)

        assert len(courses) == 2
