"""
Progress Service

Business logic for per-lecture progress tracking and the derived course
completion fields.
"""

import logging
import uuid
from datetime import datetime, timezone
from typing import Optional, Sequence

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from learnhub.core.concurrency import run_with_retry
from learnhub.core.config import settings
from learnhub.core.exceptions import LectureNotFoundError, NotEnrolledError
from learnhub.models.lecture import Lecture
from learnhub.models.progress import LectureProgress, Progress
from learnhub.models.user import User


logger = logging.getLogger(__name__)


def compute_overall_progress(completed: int, total: int) -> int:
    """
    Percentage of completed lectures, rounded half-up to an integer.

    A course without lectures stays at 0.
    """
    if total <= 0:
        return 0
    # Integer form of floor(100 * completed / total + 0.5)
    return (200 * completed + total) // (2 * total)


def apply_derived_fields(progress: Progress, now: datetime) -> None:
    """
    Recompute completed_lectures, overall_progress and the completion flag.

    The only writer of those fields. Completion is one-way: once
    is_completed is set, completed_at keeps its first value even if a
    lecture is later marked incomplete.
    """
    completed = sum(1 for entry in progress.lecture_progress if entry.completed)
    progress.completed_lectures = completed
    progress.overall_progress = compute_overall_progress(completed, progress.total_lectures)

    if progress.overall_progress >= 100 and not progress.is_completed:
        progress.is_completed = True
        progress.completed_at = now
        logger.info(
            f"User {progress.user_id} completed course {progress.course_id}"
        )


def create_progress(
    user: User,
    course_id: int,
    lectures: Sequence[Lecture],
    db: AsyncSession,
) -> Progress:
    """
    Add a fresh Progress record for a new enrollment to the session.

    One uncompleted entry per current lecture; total_lectures is fixed here.
    The caller flushes and commits as part of the enrollment transaction.

    Args:
        user: Enrolling user.
        course_id: Course ID.
        lectures: The course's lectures at enrollment time.
        db: Database session.

    Returns:
        The pending Progress object.
    """
    progress = Progress(
        user_id=user.id,
        course_id=course_id,
        total_lectures=len(lectures),
        completed_lectures=0,
        overall_progress=0,
        is_completed=False,
        last_accessed_at=datetime.now(timezone.utc),
        lecture_progress=[
            LectureProgress(
                lecture_id=lecture.id,
                completed=False,
                watched_duration=0,
            )
            for lecture in lectures
        ],
    )
    db.add(progress)
    return progress


async def _load_progress(
    user_id: uuid.UUID,
    course_id: int,
    db: AsyncSession,
) -> Optional[Progress]:
    result = await db.execute(
        select(Progress)
        .where(
            Progress.user_id == user_id,
            Progress.course_id == course_id,
        )
        .execution_options(populate_existing=True)
    )
    return result.scalar_one_or_none()


async def get_progress(
    user: User,
    course_id: int,
    db: AsyncSession,
) -> Progress:
    """
    Get the user's progress for a course.

    Raises:
        NotEnrolledError: If the user has no progress record for the course.
    """
    progress = await _load_progress(user.id, course_id, db)

    if not progress:
        raise NotEnrolledError()

    return progress


async def record_lecture_progress(
    user: User,
    course_id: int,
    lecture_id: int,
    db: AsyncSession,
    completed: Optional[bool] = None,
    watched_duration: Optional[int] = None,
    quiz_score: Optional[int] = None,
) -> Progress:
    """
    Update one lecture's progress and recompute the course-level fields.

    Only the provided fields are changed. The whole read-modify-write is
    retried when another request updated the same Progress record in
    between (optimistic versioning), so concurrent updates to different
    lectures are never lost.

    Args:
        user: Current user.
        course_id: Course ID.
        lecture_id: Lecture ID.
        db: Database session.
        completed: New completion flag.
        watched_duration: Seconds watched.
        quiz_score: Latest quiz score.

    Returns:
        The updated Progress object.

    Raises:
        NotEnrolledError: No progress record for (user, course).
        LectureNotFoundError: Lecture was not part of the course at enrollment.
        ConflictError: Retries exhausted.
    """
    # The session is rolled back between attempts, which expires `user`
    user_id = user.id

    async def attempt() -> Progress:
        progress = await _load_progress(user_id, course_id, db)
        if not progress:
            raise NotEnrolledError()

        entry = next(
            (lp for lp in progress.lecture_progress if lp.lecture_id == lecture_id),
            None,
        )
        if entry is None:
            raise LectureNotFoundError()

        now = datetime.now(timezone.utc)

        if completed is not None:
            entry.completed = completed
        if watched_duration is not None:
            entry.watched_duration = watched_duration
        if quiz_score is not None:
            entry.quiz_score = quiz_score
        entry.last_watched_at = now

        apply_derived_fields(progress, now)
        progress.last_accessed_at = now

        await db.commit()
        return progress

    return await run_with_retry(
        attempt,
        db,
        attempts=settings.MAX_CONFLICT_RETRIES,
        label=f"record_lecture_progress(course={course_id}, lecture={lecture_id})",
    )
