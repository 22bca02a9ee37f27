"""
Repository for post reactions. A user holds at most one reaction per post.
"""
import uuid
from dataclasses import dataclass
from typing import Dict, List, Optional

from sqlalchemy import bindparam, text
from sqlalchemy.orm import Session

from db.database import get_db_session, utc_now_iso
from models.enums import NotificationType
from models.models import Reaction
from repositories.notifications_repo import insert_notification
from utils.logger import get_logger

logger = get_logger(__name__)


class ReactionToggleError(Exception):
    """A toggle step failed; the whole toggle was rolled back."""

    def __init__(self, step: str, cause: Exception):
        super().__init__(f"reaction {step} failed: {cause}")
        self.step = step  # "check", "add", "change" or "delete"
        self.cause = cause


@dataclass
class ReactionToggle:
    action: str  # "added", "removed" or "changed"
    reaction: Optional[Reaction] = None
    notification_id: Optional[str] = None


def _row_to_reaction(row) -> Reaction:
    return Reaction(
        id=str(row["id"]),
        post_id=str(row["post_id"]),
        user_id=str(row["user_id"]),
        emoji=row["emoji"],
        created_at=row["created_at_utc"],
    )


def _select_user_reaction(session: Session, post_id: str, user_id: str) -> Optional[Reaction]:
    row = session.execute(
        text("""
            SELECT id, post_id, user_id, emoji, created_at_utc
            FROM reactions
            WHERE post_id = :post_id AND user_id = :user_id
            LIMIT 1;
        """),
        {"post_id": post_id, "user_id": str(user_id)},
    ).mappings().fetchone()
    return _row_to_reaction(row) if row else None


def _insert_reaction(session: Session, post_id: str, user_id: str, emoji: str) -> Reaction:
    reaction = Reaction(
        id=str(uuid.uuid4()),
        post_id=post_id,
        user_id=str(user_id),
        emoji=emoji,
        created_at=utc_now_iso(),
    )
    session.execute(
        text("""
            INSERT INTO reactions(id, post_id, user_id, emoji, created_at_utc)
            VALUES (:id, :post_id, :user_id, :emoji, :created_at_utc);
        """),
        {
            "id": reaction.id,
            "post_id": reaction.post_id,
            "user_id": reaction.user_id,
            "emoji": reaction.emoji,
            "created_at_utc": reaction.created_at,
        },
    )
    return reaction


def _update_reaction(session: Session, reaction_id: str, emoji: str) -> bool:
    result = session.execute(
        text("""
            UPDATE reactions
            SET emoji = :emoji, created_at_utc = :created_at_utc
            WHERE id = :id;
        """),
        {"emoji": emoji, "created_at_utc": utc_now_iso(), "id": reaction_id},
    )
    return result.rowcount > 0


def _delete_reaction(session: Session, reaction_id: str) -> bool:
    result = session.execute(
        text("DELETE FROM reactions WHERE id = :id;"),
        {"id": reaction_id},
    )
    return result.rowcount > 0


class ReactionsRepository:
    """Repository for post reactions."""

    def toggle_reaction(self, post_id: str, user_id: str, emoji: str) -> ReactionToggle:
        """
        Add, remove or switch the user's reaction and notify the post author,
        all in one transaction.

        Same emoji removes the reaction; another emoji updates the existing
        row. After an add or change the author (unless it is the user) gets a
        reaction notification. The notification insert runs in a savepoint:
        if it fails the reaction still commits.

        Raises:
            ReactionToggleError: a reaction step failed; nothing was written.
        """
        with get_db_session() as session:
            try:
                existing = _select_user_reaction(session, post_id, user_id)
            except Exception as e:
                raise ReactionToggleError("check", e) from e

            if existing is None:
                try:
                    toggle = ReactionToggle("added", _insert_reaction(session, post_id, user_id, emoji))
                except Exception as e:
                    raise ReactionToggleError("add", e) from e
            elif existing.emoji == emoji:
                try:
                    _delete_reaction(session, existing.id)
                except Exception as e:
                    raise ReactionToggleError("delete", e) from e
                return ReactionToggle("removed")
            else:
                try:
                    _update_reaction(session, existing.id, emoji)
                except Exception as e:
                    raise ReactionToggleError("change", e) from e
                existing.emoji = emoji
                toggle = ReactionToggle("changed", existing)

            toggle.notification_id = self._notify_author(session, post_id, user_id, emoji)
            return toggle

    @staticmethod
    def _notify_author(session: Session, post_id: str, user_id: str, emoji: str) -> Optional[str]:
        try:
            with session.begin_nested():
                row = session.execute(
                    text("SELECT user_id FROM posts WHERE id = :id LIMIT 1;"),
                    {"id": post_id},
                ).fetchone()
                if not row or str(row[0]) == str(user_id):
                    return None
                notification = insert_notification(
                    session,
                    user_id=str(row[0]),
                    actor_id=user_id,
                    notification_type=NotificationType.REACTION.value,
                    post_id=post_id,
                    reaction_emoji=emoji,
                )
                return notification.id
        except Exception as e:
            logger.warning(f"Reaction notification for post {post_id} failed: {e}")
            return None

    def list_reactions(self, post_id: str) -> List[Reaction]:
        return self.list_reactions_for_posts([post_id]).get(post_id, [])

    def list_reactions_for_posts(self, post_ids: List[str]) -> Dict[str, List[Reaction]]:
        """Reactions grouped by post id, oldest first within each post."""
        ids = [p for p in post_ids if p]
        if not ids:
            return {}
        stmt = text("""
            SELECT id, post_id, user_id, emoji, created_at_utc
            FROM reactions
            WHERE post_id IN :post_ids
            ORDER BY created_at_utc ASC;
        """).bindparams(bindparam("post_ids", expanding=True))
        with get_db_session() as session:
            rows = session.execute(stmt, {"post_ids": ids}).mappings().fetchall()

        grouped: Dict[str, List[Reaction]] = {}
        for row in rows:
            reaction = _row_to_reaction(row)
            grouped.setdefault(reaction.post_id, []).append(reaction)
        return grouped
