"""
Repository for in-app notifications.
"""
import uuid
from typing import List, Optional

from sqlalchemy import text
from sqlalchemy.orm import Session

from db.database import get_db_session, utc_now_iso
from models.models import Notification
from repositories.profiles_repo import profile_from_row


def insert_notification(
    session: Session,
    user_id: str,
    actor_id: str,
    notification_type: str,
    post_id: Optional[str] = None,
    reaction_emoji: Optional[str] = None,
) -> Notification:
    """Insert an unread notification using the caller's session (and transaction)."""
    notification_id = str(uuid.uuid4())
    now = utc_now_iso()
    session.execute(
        text("""
            INSERT INTO notifications(
                id, user_id, actor_id, post_id, type, reaction_emoji,
                is_read, created_at_utc
            ) VALUES (
                :id, :user_id, :actor_id, :post_id, :type, :reaction_emoji,
                0, :created_at_utc
            );
        """),
        {
            "id": notification_id,
            "user_id": str(user_id),
            "actor_id": str(actor_id),
            "post_id": post_id,
            "type": notification_type,
            "reaction_emoji": reaction_emoji,
            "created_at_utc": now,
        },
    )
    return Notification(
        id=notification_id,
        user_id=str(user_id),
        actor_id=str(actor_id),
        type=notification_type,
        post_id=post_id,
        reaction_emoji=reaction_emoji,
        is_read=False,
        created_at=now,
    )


class NotificationsRepository:
    """Notifications are append-only apart from the is_read flag."""

    def create_notification(
        self,
        user_id: str,
        actor_id: str,
        notification_type: str,
        post_id: Optional[str] = None,
        reaction_emoji: Optional[str] = None,
    ) -> Notification:
        with get_db_session() as session:
            return insert_notification(session, user_id, actor_id, notification_type, post_id, reaction_emoji)

    def list_notifications(self, user_id: str, limit: int = 50) -> List[Notification]:
        """Newest first, with the actor's public profile and the post's content."""
        with get_db_session() as session:
            rows = session.execute(
                text("""
                    SELECT
                        n.id, n.user_id, n.actor_id, n.post_id, n.type,
                        n.reaction_emoji, n.is_read, n.created_at_utc,
                        a.id AS actor_profile_id, a.username AS actor_profile_username,
                        a.display_name AS actor_profile_display_name,
                        a.avatar_url AS actor_profile_avatar_url,
                        p.content AS post_content
                    FROM notifications n
                    LEFT JOIN profiles a ON a.id = n.actor_id
                    LEFT JOIN posts p ON p.id = n.post_id
                    WHERE n.user_id = :user_id
                    ORDER BY n.created_at_utc DESC
                    LIMIT :limit;
                """),
                {"user_id": str(user_id), "limit": int(limit)},
            ).mappings().fetchall()

        notifications = []
        for row in rows:
            post_excerpt = None
            if row["post_id"] is not None and row["post_content"] is not None:
                post_excerpt = {"id": str(row["post_id"]), "content": row["post_content"]}
            notifications.append(
                Notification(
                    id=str(row["id"]),
                    user_id=str(row["user_id"]),
                    actor_id=str(row["actor_id"]),
                    type=row["type"],
                    post_id=row["post_id"],
                    reaction_emoji=row["reaction_emoji"],
                    is_read=bool(row["is_read"]),
                    created_at=row["created_at_utc"],
                    actor=profile_from_row(row, prefix="actor_profile_"),
                    post_excerpt=post_excerpt,
                )
            )
        return notifications

    def count_unread(self, user_id: str) -> int:
        with get_db_session() as session:
            count = session.execute(
                text("SELECT COUNT(*) FROM notifications WHERE user_id = :user_id AND is_read = 0;"),
                {"user_id": str(user_id)},
            ).scalar()
            return int(count or 0)

    def mark_as_read(self, user_id: str, notification_id: str) -> bool:
        """Mark one of the user's own notifications read. Other users' rows never match."""
        with get_db_session() as session:
            result = session.execute(
                text("""
                    UPDATE notifications SET is_read = 1
                    WHERE id = :id AND user_id = :user_id;
                """),
                {"id": notification_id, "user_id": str(user_id)},
            )
            return result.rowcount > 0

    def mark_all_as_read(self, user_id: str) -> int:
        with get_db_session() as session:
            result = session.execute(
                text("UPDATE notifications SET is_read = 1 WHERE user_id = :user_id AND is_read = 0;"),
                {"user_id": str(user_id)},
            )
            return result.rowcount or 0
