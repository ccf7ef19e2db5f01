"""
Pytest Configuration and Fixtures

Provides reusable async fixtures for testing the LearnHub Backend.
"""

import os

# Settings are read at import time
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ["STRIPE_SECRET_KEY"] = ""
os.environ.pop("NOTIFICATION_WEBHOOK_URL", None)

from decimal import Decimal
from typing import AsyncGenerator, Optional
from unittest.mock import AsyncMock, MagicMock

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from learnhub.core.database import Base
from learnhub.models import Course, CourseStatus, Lecture, User, UserRole


# ==================== Database Fixtures ====================

@pytest.fixture
def mock_async_session() -> AsyncMock:
    """
    Create a mock async database session.

    Returns:
        AsyncMock configured to behave like AsyncSession.
    """
    session = AsyncMock(spec=AsyncSession)
    session.commit = AsyncMock()
    session.rollback = AsyncMock()
    session.close = AsyncMock()
    session.flush = AsyncMock()
    session.refresh = AsyncMock()
    session.execute = AsyncMock()
    session.scalar = AsyncMock()
    session.scalars = AsyncMock()
    session.add = MagicMock()
    return session


@pytest_asyncio.fixture
async def db_engine():
    """In-memory SQLite engine with all tables created."""
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture
def session_maker(db_engine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(
        bind=db_engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


@pytest_asyncio.fixture
async def db_session(session_maker) -> AsyncGenerator[AsyncSession, None]:
    """A real AsyncSession bound to the in-memory database."""
    async with session_maker() as session:
        yield session


# ==================== Factories ====================

@pytest.fixture
def make_user(db_session):
    """
    Factory fixture that persists a user.

    Usage:
        student = await make_user()
        admin = await make_user(role=UserRole.ADMIN)
    """
    counter = {"n": 0}

    async def _make_user(
        role: UserRole = UserRole.STUDENT,
        name: Optional[str] = None,
        is_active: bool = True,
    ) -> User:
        counter["n"] += 1
        user = User(
            name=name or f"User {counter['n']}",
            email=f"user{counter['n']}@example.com",
            role=role,
            is_active=is_active,
        )
        db_session.add(user)
        await db_session.commit()
        await db_session.refresh(user)
        return user

    return _make_user


@pytest.fixture
def make_course(db_session):
    """
    Factory fixture that persists a course with lectures.

    Usage:
        course = await make_course(instructor, price="499", lectures=[600, 300])
    """
    async def _make_course(
        instructor: User,
        price: str = "0",
        discount_price: Optional[str] = None,
        lectures: Optional[list[int]] = None,
        status: CourseStatus = CourseStatus.PUBLISHED,
        title: str = "Python Fundamentals",
    ) -> Course:
        durations = lectures if lectures is not None else [600, 300]
        course = Course(
            instructor_id=instructor.id,
            title=title,
            description="Learn Python from scratch",
            category="Programming",
            price=Decimal(price),
            discount_price=Decimal(discount_price) if discount_price is not None else None,
            status=status,
            enrollment_count=0,
            average_rating=0.0,
            total_ratings=0,
            total_duration=sum(durations),
            lectures=[
                Lecture(title=f"Lecture {i}", duration=duration, order=i, is_free=(i == 1))
                for i, duration in enumerate(durations, start=1)
            ],
        )
        db_session.add(course)
        await db_session.commit()
        await db_session.refresh(course)
        return course

    return _make_course


@pytest.fixture
def no_notifications(monkeypatch):
    """Replace the notification sink with an AsyncMock."""
    notify = AsyncMock(return_value=True)
    monkeypatch.setattr("learnhub.services.notification_service.notify_enrollment", notify)
    return notify


@pytest.fixture
def fast_retries(monkeypatch):
    """Remove backoff sleeps from retry loops."""
    monkeypatch.setattr("learnhub.core.concurrency.RETRY_BACKOFF_BASE", 0)
    monkeypatch.setattr("learnhub.core.http_client.RETRY_BACKOFF_BASE", 0)


# ==================== HTTP Client Fixtures ====================

@pytest.fixture
def mock_httpx_response():
    """
    Factory fixture to create mock httpx responses.

    Usage:
        response = mock_httpx_response(status_code=200, json_data={"key": "value"})
    """
    def _create_response(status_code: int = 200, json_data: dict = None, text: str = ""):
        response = MagicMock()
        response.status_code = status_code
        response.json.return_value = json_data or {}
        response.text = text
        return response
    return _create_response
