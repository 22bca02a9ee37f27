"""
Service for in-app notifications (reactions, replies, follows).
"""
from typing import List, Optional

from i18n.translations import get_message
from models.enums import NotificationType
from models.models import ActionResult, Notification
from repositories.notifications_repo import NotificationsRepository
from utils.errors import format_db_error
from utils.logger import get_logger
from utils.page_cache import revalidate_path

logger = get_logger(__name__)


class NotificationService:
    """Creates and reads notifications. Actors are never notified about themselves."""

    def __init__(self, notifications_repo: NotificationsRepository):
        self.notifications_repo = notifications_repo

    def create_notification(
        self,
        recipient_id: str,
        actor_id: str,
        notification_type: NotificationType,
        post_id: Optional[str] = None,
        reaction_emoji: Optional[str] = None,
    ) -> ActionResult:
        if str(recipient_id) == str(actor_id):
            return ActionResult.ok(created=False)

        try:
            notification = self.notifications_repo.create_notification(
                user_id=recipient_id,
                actor_id=actor_id,
                notification_type=notification_type.value,
                post_id=post_id,
                reaction_emoji=reaction_emoji,
            )
        except Exception as e:
            logger.error(f"Error creating {notification_type.value} notification for user {recipient_id}: {e}")
            return ActionResult.fail(format_db_error(e))

        logger.debug(f"Notified user {recipient_id} of {notification_type.value} by {actor_id}")
        return ActionResult.ok(created=True, notification_id=notification.id)

    def get_notifications(self, user_id: str, limit: int = 50) -> List[Notification]:
        return self.notifications_repo.list_notifications(user_id, limit=limit)

    def get_unread_count(self, user_id: Optional[str]) -> int:
        if not user_id:
            return 0
        return self.notifications_repo.count_unread(user_id)

    def mark_as_read(self, user_id: Optional[str], notification_id: str) -> ActionResult:
        if not user_id:
            return ActionResult.fail(get_message("login_required"))
        try:
            updated = self.notifications_repo.mark_as_read(user_id, notification_id)
        except Exception as e:
            logger.error(f"Error marking notification {notification_id} as read: {e}")
            return ActionResult.fail(get_message("notification_update_failed"))

        self._revalidate()
        return ActionResult.ok(updated=updated)

    def mark_all_as_read(self, user_id: Optional[str]) -> ActionResult:
        if not user_id:
            return ActionResult.fail(get_message("login_required"))
        try:
            count = self.notifications_repo.mark_all_as_read(user_id)
        except Exception as e:
            logger.error(f"Error marking all notifications as read for user {user_id}: {e}")
            return ActionResult.fail(get_message("notification_update_failed"))

        self._revalidate()
        return ActionResult.ok(updated=count)

    @staticmethod
    def _revalidate() -> None:
        revalidate_path("/notifications")
        revalidate_path("/home")
