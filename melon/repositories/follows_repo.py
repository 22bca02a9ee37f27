import uuid
from typing import List, Set

from sqlalchemy import bindparam, text

from db.database import get_db_session, utc_now_iso
from models.models import Follow
from repositories.profiles_repo import profile_from_row


class FollowsRepository:
    """Repository for managing user follow relationships."""

    def follow(self, follower_id: str, following_id: str) -> bool:
        """
        Create a follow edge.
        Returns True if the edge was created, False if it already exists.
        """
        follower = str(follower_id)
        following = str(following_id)

        if follower == following:
            raise ValueError("Cannot follow yourself")

        with get_db_session() as session:
            existing = session.execute(
                text("""
                    SELECT 1 FROM follows
                    WHERE follower_id = :follower_id AND following_id = :following_id
                    LIMIT 1;
                """),
                {"follower_id": follower, "following_id": following},
            ).fetchone()
            if existing:
                return False

            session.execute(
                text("""
                    INSERT INTO follows(id, follower_id, following_id, created_at_utc)
                    VALUES (:id, :follower_id, :following_id, :created_at_utc);
                """),
                {
                    "id": str(uuid.uuid4()),
                    "follower_id": follower,
                    "following_id": following,
                    "created_at_utc": utc_now_iso(),
                },
            )
            return True

    def unfollow(self, follower_id: str, following_id: str) -> bool:
        """Delete the follow edge. Returns False if there was none."""
        with get_db_session() as session:
            result = session.execute(
                text("""
                    DELETE FROM follows
                    WHERE follower_id = :follower_id AND following_id = :following_id;
                """),
                {"follower_id": str(follower_id), "following_id": str(following_id)},
            )
            return result.rowcount > 0

    def is_following(self, follower_id: str, following_id: str) -> bool:
        with get_db_session() as session:
            row = session.execute(
                text("""
                    SELECT 1 FROM follows
                    WHERE follower_id = :follower_id AND following_id = :following_id
                    LIMIT 1;
                """),
                {"follower_id": str(follower_id), "following_id": str(following_id)},
            ).fetchone()
            return bool(row)

    def get_followers(self, user_id: str) -> List[Follow]:
        """Edges pointing at the user, with the follower's profile, newest first."""
        with get_db_session() as session:
            rows = session.execute(
                text("""
                    SELECT f.id AS follow_id, f.follower_id, f.following_id, f.created_at_utc AS followed_at,
                           p.id, p.username, p.display_name, p.bio, p.avatar_url
                    FROM follows f
                    JOIN profiles p ON p.id = f.follower_id
                    WHERE f.following_id = :user_id
                    ORDER BY f.created_at_utc DESC;
                """),
                {"user_id": str(user_id)},
            ).mappings().fetchall()
        return [self._row_to_follow(r) for r in rows]

    def get_following(self, user_id: str) -> List[Follow]:
        """Edges from the user, with the followed user's profile, newest first."""
        with get_db_session() as session:
            rows = session.execute(
                text("""
                    SELECT f.id AS follow_id, f.follower_id, f.following_id, f.created_at_utc AS followed_at,
                           p.id, p.username, p.display_name, p.bio, p.avatar_url
                    FROM follows f
                    JOIN profiles p ON p.id = f.following_id
                    WHERE f.follower_id = :user_id
                    ORDER BY f.created_at_utc DESC;
                """),
                {"user_id": str(user_id)},
            ).mappings().fetchall()
        return [self._row_to_follow(r) for r in rows]

    def get_following_ids(self, user_id: str, among: List[str]) -> Set[str]:
        """Subset of ``among`` that the user follows."""
        ids = [str(i) for i in among if i]
        if not ids:
            return set()
        stmt = text("""
            SELECT following_id FROM follows
            WHERE follower_id = :user_id AND following_id IN :ids;
        """).bindparams(bindparam("ids", expanding=True))
        with get_db_session() as session:
            rows = session.execute(stmt, {"user_id": str(user_id), "ids": ids}).fetchall()
        return {str(r[0]) for r in rows}

    def get_follower_ids(self, user_id: str, among: List[str]) -> Set[str]:
        """Subset of ``among`` that follows the user."""
        ids = [str(i) for i in among if i]
        if not ids:
            return set()
        stmt = text("""
            SELECT follower_id FROM follows
            WHERE following_id = :user_id AND follower_id IN :ids;
        """).bindparams(bindparam("ids", expanding=True))
        with get_db_session() as session:
            rows = session.execute(stmt, {"user_id": str(user_id), "ids": ids}).fetchall()
        return {str(r[0]) for r in rows}

    def get_follower_count(self, user_id: str) -> int:
        with get_db_session() as session:
            count = session.execute(
                text("SELECT COUNT(*) FROM follows WHERE following_id = :user_id;"),
                {"user_id": str(user_id)},
            ).scalar()
            return int(count or 0)

    def get_following_count(self, user_id: str) -> int:
        with get_db_session() as session:
            count = session.execute(
                text("SELECT COUNT(*) FROM follows WHERE follower_id = :user_id;"),
                {"user_id": str(user_id)},
            ).scalar()
            return int(count or 0)

    @staticmethod
    def _row_to_follow(row) -> Follow:
        return Follow(
            id=str(row["follow_id"]),
            follower_id=str(row["follower_id"]),
            following_id=str(row["following_id"]),
            created_at=row["followed_at"],
            profile=profile_from_row(row),
        )
