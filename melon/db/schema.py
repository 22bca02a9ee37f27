"""
Table definitions shared by the Alembic migration and local/test bootstrapping.

List-valued columns (tags, image URLs, interests) are JSON text so the same
schema runs on PostgreSQL and SQLite.
"""
from typing import Optional

from sqlalchemy import (
    CheckConstraint,
    Column,
    ForeignKey,
    Index,
    Integer,
    MetaData,
    Table,
    Text,
    UniqueConstraint,
)
from sqlalchemy.engine import Engine

from db.database import get_engine

metadata = MetaData()

accounts = Table(
    "accounts",
    metadata,
    Column("id", Text, primary_key=True),
    Column("email", Text, nullable=False, unique=True),
    Column("password_hash", Text, nullable=False),
    Column("created_at_utc", Text, nullable=False),
)

auth_sessions = Table(
    "auth_sessions",
    metadata,
    Column("session_token", Text, primary_key=True),
    Column("user_id", Text, ForeignKey("accounts.id", ondelete="CASCADE"), nullable=False),
    Column("created_at_utc", Text, nullable=False),
    Column("expires_at_utc", Text, nullable=False),
    Index("ix_auth_sessions_user", "user_id"),
)

profiles = Table(
    "profiles",
    metadata,
    Column("id", Text, ForeignKey("accounts.id", ondelete="CASCADE"), primary_key=True),
    Column("username", Text, nullable=False, unique=True),
    Column("display_name", Text, nullable=True),
    Column("bio", Text, nullable=True),
    Column("avatar_url", Text, nullable=True),
    Column("interests_json", Text, nullable=False, server_default="[]"),
    Column("onboarding_completed", Integer, nullable=False, server_default="0"),
    Column("created_at_utc", Text, nullable=False),
    Column("updated_at_utc", Text, nullable=False),
)

# parent_post_id has no foreign key: deleting a post leaves its replies orphaned.
posts = Table(
    "posts",
    metadata,
    Column("id", Text, primary_key=True),
    Column("user_id", Text, ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False),
    Column("content", Text, nullable=False),
    Column("tags_json", Text, nullable=False, server_default="[]"),
    Column("image_urls_json", Text, nullable=False, server_default="[]"),
    Column("parent_post_id", Text, nullable=True),
    Column("created_at_utc", Text, nullable=False),
    Index("ix_posts_parent", "parent_post_id"),
    Index("ix_posts_user_created", "user_id", "created_at_utc"),
    Index("ix_posts_created", "created_at_utc"),
)

reactions = Table(
    "reactions",
    metadata,
    Column("id", Text, primary_key=True),
    Column("post_id", Text, ForeignKey("posts.id", ondelete="CASCADE"), nullable=False),
    Column("user_id", Text, ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False),
    Column("emoji", Text, nullable=False),
    Column("created_at_utc", Text, nullable=False),
    UniqueConstraint("post_id", "user_id", name="uq_reactions_post_user"),
)

follows = Table(
    "follows",
    metadata,
    Column("id", Text, primary_key=True),
    Column("follower_id", Text, ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False),
    Column("following_id", Text, ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False),
    Column("created_at_utc", Text, nullable=False),
    UniqueConstraint("follower_id", "following_id", name="uq_follows_pair"),
    CheckConstraint("follower_id <> following_id", name="ck_follows_not_self"),
    Index("ix_follows_following", "following_id"),
)

notifications = Table(
    "notifications",
    metadata,
    Column("id", Text, primary_key=True),
    Column("user_id", Text, ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False),
    Column("actor_id", Text, ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False),
    Column("post_id", Text, ForeignKey("posts.id", ondelete="SET NULL"), nullable=True),
    Column("type", Text, nullable=False),
    Column("reaction_emoji", Text, nullable=True),
    Column("is_read", Integer, nullable=False, server_default="0"),
    Column("created_at_utc", Text, nullable=False),
    CheckConstraint("type IN ('reaction', 'reply', 'follow')", name="ck_notifications_type"),
    Index("ix_notifications_user_created", "user_id", "created_at_utc"),
)


def ensure_schema(engine: Optional[Engine] = None) -> None:
    """Create any missing tables. Production databases are migrated with Alembic instead."""
    metadata.create_all(engine or get_engine())
