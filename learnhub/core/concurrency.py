"""
Optimistic Concurrency Helpers

Re-runs a read-modify-write unit of work when the database reports that a
concurrent writer got there first.
"""

import asyncio
import logging
from typing import Awaitable, Callable, Optional, Tuple, Type, TypeVar

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm.exc import StaleDataError

from learnhub.core.exceptions import ConflictError


logger = logging.getLogger(__name__)

T = TypeVar("T")

# Retry configuration
RETRY_BACKOFF_BASE = 0.05  # seconds


async def run_with_retry(
    operation: Callable[[], Awaitable[T]],
    db: AsyncSession,
    attempts: int,
    retry_on: Tuple[Type[BaseException], ...] = (StaleDataError,),
    label: str = "operation",
) -> T:
    """
    Run ``operation`` and retry it from scratch on a conflicting write.

    The operation must re-read everything it depends on, since the session is
    rolled back between attempts.

    Args:
        operation: Zero-argument coroutine factory doing one full attempt.
        db: Session the operation writes through.
        attempts: Maximum number of attempts (at least 1).
        retry_on: Exception types that signal a retryable conflict.
        label: Name used in log messages.

    Returns:
        Whatever the successful attempt returned.

    Raises:
        ConflictError: If every attempt hit a conflict.
    """
    attempts = max(1, attempts)
    last_error: Optional[BaseException] = None

    for attempt in range(1, attempts + 1):
        try:
            return await operation()
        except retry_on as e:
            last_error = e
            await db.rollback()
            if attempt < attempts:
                wait_time = RETRY_BACKOFF_BASE * (2 ** (attempt - 1))
                logger.warning(
                    f"{label}: conflicting write on attempt {attempt}/{attempts}, "
                    f"retrying in {wait_time}s: {e}"
                )
                await asyncio.sleep(wait_time)

    logger.error(f"{label}: giving up after {attempts} attempts: {last_error}")
    raise ConflictError() from last_error
