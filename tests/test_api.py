"""
API Tests

Exercise the HTTP surface end to end against the in-memory database.
"""

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from learnhub.core.database import get_db
from learnhub.core.security import create_access_token
from learnhub.main import app
from learnhub.models import UserRole


def auth(user) -> dict:
    return {"Authorization": f"Bearer {create_access_token(str(user.id))}"}


@pytest_asyncio.fixture
async def client(db_session):
    async def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


class TestPublicEndpoints:

    @pytest.mark.asyncio
    async def test_health(self, client):
        response = await client.get("/health")

        assert response.status_code == 200
        assert response.json()["status"] == "healthy"

    @pytest.mark.asyncio
    async def test_catalog_lists_published_courses(self, client, make_user, make_course):
        instructor = await make_user(role=UserRole.INSTRUCTOR, name="Grace Hopper")
        await make_course(instructor, title="Compilers")

        response = await client.get("/api/v1/courses/", params={"search": "hopper"})

        assert response.status_code == 200
        body = response.json()
        assert body["total"] == 1
        assert body["items"][0]["title"] == "Compilers"
        assert body["items"][0]["instructor"]["name"] == "Grace Hopper"

    @pytest.mark.asyncio
    async def test_detail_hides_locked_videos(
        self, client, db_session, make_user, make_course, no_notifications
    ):
        instructor = await make_user(role=UserRole.INSTRUCTOR)
        student = await make_user()
        course = await make_course(instructor)
        for lecture in course.lectures:
            lecture.video_url = f"https://videos.test/{lecture.order}.mp4"
        await db_session.commit()

        anonymous = (await client.get(f"/api/v1/courses/{course.id}")).json()
        assert anonymous["lectures"][0]["video_url"] == "https://videos.test/1.mp4"
        assert anonymous["lectures"][1]["video_url"] is None

        await client.post(f"/api/v1/courses/{course.id}/enroll", headers=auth(student))
        enrolled = (await client.get(f"/api/v1/courses/{course.id}", headers=auth(student))).json()
        assert enrolled["lectures"][1]["video_url"] == "https://videos.test/2.mp4"

    @pytest.mark.asyncio
    async def test_unknown_course(self, client):
        response = await client.get("/api/v1/courses/999")

        assert response.status_code == 404
        assert response.json()["detail"]["code"] == "not_found"


class TestAuthAndRoles:

    @pytest.mark.asyncio
    async def test_missing_token(self, client):
        response = await client.get("/api/v1/users/me")

        assert response.status_code == 401

    @pytest.mark.asyncio
    async def test_inactive_user(self, client, make_user):
        user = await make_user(is_active=False)

        response = await client.get("/api/v1/users/me", headers=auth(user))

        assert response.status_code == 403

    @pytest.mark.asyncio
    async def test_student_cannot_create_course(self, client, make_user):
        student = await make_user()

        response = await client.post(
            "/api/v1/courses/",
            json={"title": "Nope", "description": "x", "category": "x"},
            headers=auth(student),
        )

        assert response.status_code == 403

    @pytest.mark.asyncio
    async def test_instructor_creates_course(self, client, make_user):
        instructor = await make_user(role=UserRole.INSTRUCTOR)

        response = await client.post(
            "/api/v1/courses/",
            json={
                "title": "Data Pipelines",
                "description": "Batch and streaming",
                "category": "Data",
                "price": "19.99",
                "lectures": [{"title": "Intro", "duration": 420}],
            },
            headers=auth(instructor),
        )

        assert response.status_code == 201
        body = response.json()
        assert body["status"] == "draft"
        assert body["total_duration"] == 420
        assert body["price"] == 19.99


class TestEnrollmentFlow:

    @pytest.mark.asyncio
    async def test_free_course_enroll_and_progress(
        self, client, make_user, make_course, no_notifications
    ):
        instructor = await make_user(role=UserRole.INSTRUCTOR)
        student = await make_user()
        course = await make_course(instructor, lectures=[60, 60, 60, 60])
        lecture_ids = [lecture.id for lecture in course.lectures]

        response = await client.post(f"/api/v1/courses/{course.id}/enroll", headers=auth(student))
        assert response.status_code == 201

        again = await client.post(f"/api/v1/courses/{course.id}/enroll", headers=auth(student))
        assert again.status_code == 400
        assert again.json()["detail"]["code"] == "already_enrolled"

        for lecture_id in (lecture_ids[0], lecture_ids[2]):
            response = await client.post(
                f"/api/v1/courses/{course.id}/lectures/{lecture_id}/progress",
                json={"completed": True},
                headers=auth(student),
            )
        assert response.status_code == 200
        assert response.json()["overall_progress"] == 50
        assert response.json()["is_completed"] is False

        me = (await client.get("/api/v1/users/me", headers=auth(student))).json()
        assert me["enrolled_course_ids"] == [course.id]

    @pytest.mark.asyncio
    async def test_paid_course_purchase(self, client, make_user, make_course, no_notifications):
        instructor = await make_user(role=UserRole.INSTRUCTOR)
        student = await make_user()
        course = await make_course(instructor, price="499")

        blocked = await client.post(f"/api/v1/courses/{course.id}/enroll", headers=auth(student))
        assert blocked.status_code == 402

        intent = await client.post(
            "/api/v1/payments/create-intent",
            json={"course_id": course.id},
            headers=auth(student),
        )
        assert intent.status_code == 200
        assert intent.json()["is_dummy"] is True

        confirmed = await client.post(
            "/api/v1/payments/confirm",
            json={"payment_id": intent.json()["payment_id"]},
            headers=auth(student),
        )
        assert confirmed.status_code == 200
        assert confirmed.json()["status"] == "completed"

        enrolled = await client.post(f"/api/v1/courses/{course.id}/enroll", headers=auth(student))
        assert enrolled.status_code == 201

        detail = (await client.get(f"/api/v1/courses/{course.id}")).json()
        assert detail["enrollment_count"] == 1

    @pytest.mark.asyncio
    async def test_progress_requires_enrollment(self, client, make_user, make_course):
        instructor = await make_user(role=UserRole.INSTRUCTOR)
        student = await make_user()
        course = await make_course(instructor)

        response = await client.get(f"/api/v1/courses/{course.id}/progress", headers=auth(student))

        assert response.status_code == 403
        assert response.json()["detail"]["code"] == "not_enrolled"


class TestReviewsAndAdmin:

    @pytest.mark.asyncio
    async def test_review_create_then_update(self, client, make_user, make_course, no_notifications):
        instructor = await make_user(role=UserRole.INSTRUCTOR)
        student = await make_user()
        course = await make_course(instructor)
        await client.post(f"/api/v1/courses/{course.id}/enroll", headers=auth(student))

        created = await client.post(
            "/api/v1/reviews/",
            json={"course_id": course.id, "rating": 4, "comment": "Solid"},
            headers=auth(student),
        )
        updated = await client.post(
            "/api/v1/reviews/",
            json={"course_id": course.id, "rating": 5, "comment": "Even better"},
            headers=auth(student),
        )

        assert created.status_code == 201
        assert updated.status_code == 200
        assert updated.json()["id"] == created.json()["id"]

        detail = (await client.get(f"/api/v1/courses/{course.id}")).json()
        assert detail["average_rating"] == 5.0
        assert detail["total_ratings"] == 1

    @pytest.mark.asyncio
    async def test_admin_delete_course(self, client, make_user, make_course, no_notifications):
        instructor = await make_user(role=UserRole.INSTRUCTOR)
        admin = await make_user(role=UserRole.ADMIN)
        student = await make_user()
        course = await make_course(instructor, price="25")
        await client.post(
            "/api/v1/payments/mock-purchase",
            json={"course_id": course.id},
            headers=auth(student),
        )

        forbidden = await client.delete(f"/api/v1/admin/courses/{course.id}", headers=auth(student))
        assert forbidden.status_code == 403

        response = await client.delete(f"/api/v1/admin/courses/{course.id}", headers=auth(admin))
        assert response.status_code == 200
        assert response.json()["refunded_payments"] == 1

        gone = await client.get(f"/api/v1/courses/{course.id}")
        assert gone.status_code == 404

        payments = (await client.get("/api/v1/payments/my-payments", headers=auth(student))).json()
        assert payments["payments"][0]["status"] == "refunded"


class TestCourseEditing:

    @pytest.mark.asyncio
    async def test_null_price_is_rejected(self, client, make_user, make_course):
        instructor = await make_user(role=UserRole.INSTRUCTOR)
        course = await make_course(instructor, price="30")

        response = await client.patch(
            f"/api/v1/courses/{course.id}",
            json={"price": None},
            headers=auth(instructor),
        )

        assert response.status_code == 422
        assert response.json()["detail"]["code"] == "invalid_course_data"

    @pytest.mark.asyncio
    async def test_publish_approves(self, client, make_user, make_course):
        instructor = await make_user(role=UserRole.INSTRUCTOR)
        course = await make_course(instructor)

        response = await client.post(
            f"/api/v1/courses/{course.id}/status",
            json={"status": "published"},
            headers=auth(instructor),
        )

        assert response.status_code == 200
        assert response.json()["is_approved"] is True

    @pytest.mark.asyncio
    async def test_instructor_deletes_own_course(
        self, client, make_user, make_course, no_notifications
    ):
        instructor = await make_user(role=UserRole.INSTRUCTOR)
        other = await make_user(role=UserRole.INSTRUCTOR)
        student = await make_user()
        course = await make_course(instructor, price="25")
        await client.post(
            "/api/v1/payments/mock-purchase",
            json={"course_id": course.id},
            headers=auth(student),
        )

        forbidden = await client.delete(f"/api/v1/courses/{course.id}", headers=auth(other))
        assert forbidden.status_code == 403

        response = await client.delete(f"/api/v1/courses/{course.id}", headers=auth(instructor))
        assert response.status_code == 200
        assert response.json()["refunded_payments"] == 1

        gone = await client.get(f"/api/v1/courses/{course.id}")
        assert gone.status_code == 404


class TestHelpfulMarks:

    @pytest.mark.asyncio
    async def test_toggle_helpful(self, client, make_user, make_course, no_notifications):
        instructor = await make_user(role=UserRole.INSTRUCTOR)
        author = await make_user()
        reader = await make_user()
        course = await make_course(instructor)
        await client.post(f"/api/v1/courses/{course.id}/enroll", headers=auth(author))
        review = (await client.post(
            "/api/v1/reviews/",
            json={"course_id": course.id, "rating": 5, "comment": "Superb"},
            headers=auth(author),
        )).json()
        assert review["helpful_count"] == 0

        marked = await client.post(f"/api/v1/reviews/{review['id']}/helpful", headers=auth(reader))
        assert marked.status_code == 200
        assert marked.json() == {"review_id": review["id"], "helpful_count": 1, "marked": True}

        unmarked = await client.post(f"/api/v1/reviews/{review['id']}/helpful", headers=auth(reader))
        assert unmarked.json()["helpful_count"] == 0
        assert unmarked.json()["marked"] is False

        listed = (await client.get(f"/api/v1/reviews/course/{course.id}")).json()
        assert listed["items"][0]["helpful_count"] == 0

    @pytest.mark.asyncio
    async def test_requires_token(self, client):
        response = await client.post("/api/v1/reviews/1/helpful")

        assert response.status_code == 401
