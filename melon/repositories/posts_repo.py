"""
Repository for posts and replies.

Feeds only ever list top-level posts (parent_post_id IS NULL); replies are
reached through their parent.
"""
import uuid
from typing import Any, List, Mapping, Optional

from sqlalchemy import text

from db.database import dump_json_list, get_db_session, json_list, utc_now_iso
from models.models import Post
from repositories.profiles_repo import profile_from_row

# Post columns plus the author's public profile, aliased with an author_ prefix.
_SELECT_POSTS = """
    SELECT
        p.id, p.user_id, p.content, p.tags_json, p.image_urls_json,
        p.parent_post_id, p.created_at_utc,
        a.id AS author_id, a.username AS author_username,
        a.display_name AS author_display_name, a.avatar_url AS author_avatar_url
    FROM posts p
    LEFT JOIN profiles a ON a.id = p.user_id
"""

DEFAULT_FEED_LIMIT = 50


def post_from_row(row: Mapping[str, Any]) -> Post:
    return Post(
        id=str(row["id"]),
        user_id=str(row["user_id"]),
        content=row["content"],
        tags=json_list(row["tags_json"]),
        image_urls=json_list(row["image_urls_json"]),
        parent_post_id=row["parent_post_id"],
        created_at=row["created_at_utc"],
        author=profile_from_row(row, prefix="author_"),
    )


def _escape_like(value: str) -> str:
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


class PostsRepository:
    """Repository for posts, replies and feed queries."""

    def create_post(
        self,
        user_id: str,
        content: str,
        tags: List[str],
        parent_post_id: Optional[str] = None,
        image_urls: Optional[List[str]] = None,
        post_id: Optional[str] = None,
    ) -> Post:
        """Insert a post (or a reply when ``parent_post_id`` is set). Returns it without author."""
        post_id = post_id or str(uuid.uuid4())
        now = utc_now_iso()
        with get_db_session() as session:
            session.execute(
                text("""
                    INSERT INTO posts(
                        id, user_id, content, tags_json, image_urls_json,
                        parent_post_id, created_at_utc
                    ) VALUES (
                        :id, :user_id, :content, :tags_json, :image_urls_json,
                        :parent_post_id, :created_at_utc
                    );
                """),
                {
                    "id": post_id,
                    "user_id": str(user_id),
                    "content": content,
                    "tags_json": dump_json_list(tags),
                    "image_urls_json": dump_json_list(image_urls),
                    "parent_post_id": parent_post_id,
                    "created_at_utc": now,
                },
            )
        return Post(
            id=post_id,
            user_id=str(user_id),
            content=content,
            tags=list(tags),
            image_urls=list(image_urls or []),
            parent_post_id=parent_post_id,
            created_at=now,
        )

    def get_post(self, post_id: str) -> Optional[Post]:
        with get_db_session() as session:
            row = session.execute(
                text(_SELECT_POSTS + " WHERE p.id = :id LIMIT 1;"),
                {"id": post_id},
            ).mappings().fetchone()
        return post_from_row(row) if row else None

    def list_posts(self, limit: int = DEFAULT_FEED_LIMIT) -> List[Post]:
        """All top-level posts, newest first."""
        with get_db_session() as session:
            rows = session.execute(
                text(_SELECT_POSTS + """
                    WHERE p.parent_post_id IS NULL
                    ORDER BY p.created_at_utc DESC
                    LIMIT :limit;
                """),
                {"limit": int(limit)},
            ).mappings().fetchall()
        return [post_from_row(r) for r in rows]

    def list_home_feed(self, user_id: str, limit: int = DEFAULT_FEED_LIMIT) -> List[Post]:
        """Top-level posts by the user and everyone they follow, newest first."""
        with get_db_session() as session:
            rows = session.execute(
                text(_SELECT_POSTS + """
                    WHERE p.parent_post_id IS NULL
                      AND (
                        p.user_id = :user_id
                        OR p.user_id IN (
                            SELECT following_id FROM follows WHERE follower_id = :user_id
                        )
                      )
                    ORDER BY p.created_at_utc DESC
                    LIMIT :limit;
                """),
                {"user_id": str(user_id), "limit": int(limit)},
            ).mappings().fetchall()
        return [post_from_row(r) for r in rows]

    def list_posts_by_user(self, user_id: str, limit: int = DEFAULT_FEED_LIMIT) -> List[Post]:
        with get_db_session() as session:
            rows = session.execute(
                text(_SELECT_POSTS + """
                    WHERE p.parent_post_id IS NULL AND p.user_id = :user_id
                    ORDER BY p.created_at_utc DESC
                    LIMIT :limit;
                """),
                {"user_id": str(user_id), "limit": int(limit)},
            ).mappings().fetchall()
        return [post_from_row(r) for r in rows]

    def list_posts_by_tag(self, tag: str, limit: int = DEFAULT_FEED_LIMIT) -> List[Post]:
        """Top-level posts carrying ``tag`` (already normalised)."""
        # Match the quoted JSON element; LIKE metacharacters in the tag are escaped.
        pattern = "%" + _escape_like(dump_json_list([tag])[1:-1]) + "%"
        with get_db_session() as session:
            rows = session.execute(
                text(_SELECT_POSTS + """
                    WHERE p.parent_post_id IS NULL AND p.tags_json LIKE :pattern ESCAPE '\\'
                    ORDER BY p.created_at_utc DESC
                    LIMIT :limit;
                """),
                {"pattern": pattern, "limit": int(limit)},
            ).mappings().fetchall()
        posts = [post_from_row(r) for r in rows]
        return [p for p in posts if tag in p.tags]

    def list_replies(self, parent_post_id: str) -> List[Post]:
        """Direct replies, oldest first."""
        with get_db_session() as session:
            rows = session.execute(
                text(_SELECT_POSTS + """
                    WHERE p.parent_post_id = :parent_post_id
                    ORDER BY p.created_at_utc ASC;
                """),
                {"parent_post_id": parent_post_id},
            ).mappings().fetchall()
        return [post_from_row(r) for r in rows]

    def update_image_urls(self, post_id: str, image_urls: List[str]) -> bool:
        with get_db_session() as session:
            result = session.execute(
                text("UPDATE posts SET image_urls_json = :image_urls_json WHERE id = :id;"),
                {"image_urls_json": dump_json_list(image_urls), "id": post_id},
            )
            return result.rowcount > 0

    def delete_post(self, post_id: str, user_id: Optional[str] = None) -> bool:
        """
        Delete a post. When ``user_id`` is given only that author's row matches.

        Replies are left in place (orphaned); reactions cascade and
        notifications have their post_id cleared by the foreign key.
        """
        with get_db_session() as session:
            if user_id is None:
                result = session.execute(
                    text("DELETE FROM posts WHERE id = :id;"),
                    {"id": post_id},
                )
            else:
                result = session.execute(
                    text("DELETE FROM posts WHERE id = :id AND user_id = :user_id;"),
                    {"id": post_id, "user_id": str(user_id)},
                )
            return result.rowcount > 0
