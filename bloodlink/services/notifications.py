"""
In-app notifications

Only creation and the read flag live here; delivery (email, push) is handled
by external collaborators that read these records.
"""
import logging
from datetime import datetime
from typing import Dict, List, Optional

from bloodlink.core.errors import NotFoundError
from bloodlink.database.schemas import Notification
from bloodlink.database.storage import Repository

logger = logging.getLogger(__name__)

REFERRAL_CREATED = "referral_created"
REFERRAL_COMPLETED = "referral_completed"
REFERRAL_SCHEDULED = "referral_scheduled"


def add_notification(repository: Repository, user_id: str, message: str,
                     type: Optional[str] = None, metadata: Optional[Dict[str, str]] = None,
                     now: Optional[datetime] = None) -> Notification:
    notification = repository.notifications.create({
        "user_id": user_id,
        "message": message,
        "read": False,
        "type": type,
        "metadata": metadata or {},
        "created_at": now,
    })
    logger.debug("Notification %s added for user %s (%s)", notification.id, user_id, type)
    return notification


def get_notifications(repository: Repository, user_id: str, unread_only: bool = False) -> List[Notification]:
    """
    Notifications of a user, newest first
    """
    notifications = repository.notifications.filter(user_id=user_id)
    if unread_only:
        notifications = [n for n in notifications if not n.read]
    notifications.sort(key=lambda n: n.created_at, reverse=True)
    return notifications


def unread_count(repository: Repository, user_id: str) -> int:
    return len(get_notifications(repository, user_id, unread_only=True))


def mark_notification_as_read(repository: Repository, user_id: str, notification_id: str) -> Notification:
    """
    Flip the read flag; a notification owned by another user counts as not found
    """
    notification = repository.notifications.find(notification_id)
    if notification is None or notification.user_id != user_id:
        raise NotFoundError("Notification", notification_id)
    if notification.read:
        return notification
    return repository.notifications.update(notification_id, {"read": True}, expected_version=notification.version)
