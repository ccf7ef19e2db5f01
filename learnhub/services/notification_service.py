"""
Notification Service

Fire-and-forget event sink for enrollment notifications.

Events are always logged. When NOTIFICATION_WEBHOOK_URL is configured they
are also POSTed there. Delivery problems are logged and never propagate to
the caller.
"""

import logging
import uuid
from datetime import datetime, timezone
from typing import Any, Dict

import httpx

from learnhub.core.config import settings
from learnhub.core.http_client import post_with_retry


logger = logging.getLogger(__name__)


def build_event(event_type: str, **payload: Any) -> Dict[str, Any]:
    """Build the JSON-serializable event envelope."""
    return {
        "type": event_type,
        "emitted_at": datetime.now(timezone.utc).isoformat(),
        **{key: str(value) for key, value in payload.items()},
    }


async def publish_event(event: Dict[str, Any]) -> bool:
    """
    Publish an event to the configured sink.

    Args:
        event: Event envelope from build_event.

    Returns:
        True if the event was delivered (or no webhook is configured).
    """
    logger.info(f"Notification event: {event}")

    if not settings.NOTIFICATION_WEBHOOK_URL:
        return True

    try:
        response = await post_with_retry(
            settings.NOTIFICATION_WEBHOOK_URL,
            json=event,
            max_retries=1,
        )
    except httpx.HTTPError as e:
        logger.warning(f"Failed to deliver {event['type']} notification: {e}")
        return False

    if response.status_code >= 400:
        logger.warning(
            f"Notification webhook rejected {event['type']} event: "
            f"{response.status_code}"
        )
        return False

    return True


async def notify_enrollment(user_id: uuid.UUID, course_id: int) -> bool:
    """Emit the 'enroll' notification for a new enrollment."""
    try:
        return await publish_event(
            build_event("enroll", user_id=user_id, course_id=course_id)
        )
    except Exception:
        logger.exception(f"Unexpected error emitting enroll event for course {course_id}")
        return False
