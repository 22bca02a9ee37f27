"""
Repository for user profiles.
"""
from typing import Any, List, Mapping, Optional

from sqlalchemy import text

from db.database import dump_json_list, get_db_session, json_list, utc_now_iso
from models.models import Profile

PROFILE_COLUMNS = """
    id, username, display_name, bio, avatar_url, interests_json,
    onboarding_completed, created_at_utc, updated_at_utc
"""


def profile_from_row(row: Mapping[str, Any], prefix: str = "") -> Optional[Profile]:
    """
    Build a Profile from a result row.

    ``prefix`` selects aliased columns from joined queries (e.g. ``author_``).
    Joined rows only carry the public columns; the rest default.
    """
    profile_id = row.get(f"{prefix}id")
    if profile_id is None:
        return None
    return Profile(
        id=str(profile_id),
        username=row.get(f"{prefix}username") or "",
        display_name=row.get(f"{prefix}display_name"),
        bio=row.get(f"{prefix}bio"),
        avatar_url=row.get(f"{prefix}avatar_url"),
        interests=json_list(row.get(f"{prefix}interests_json")),
        onboarding_completed=bool(row.get(f"{prefix}onboarding_completed") or 0),
        created_at=row.get(f"{prefix}created_at_utc"),
        updated_at=row.get(f"{prefix}updated_at_utc"),
    )


class ProfilesRepository:
    """Profiles share their id with the owning account."""

    def get_profile(self, user_id: str) -> Optional[Profile]:
        with get_db_session() as session:
            row = session.execute(
                text(f"SELECT {PROFILE_COLUMNS} FROM profiles WHERE id = :id LIMIT 1;"),
                {"id": str(user_id)},
            ).mappings().fetchone()
        return profile_from_row(row) if row else None

    def get_profile_by_username(self, username: str) -> Optional[Profile]:
        with get_db_session() as session:
            row = session.execute(
                text(f"SELECT {PROFILE_COLUMNS} FROM profiles WHERE username = :username LIMIT 1;"),
                {"username": username},
            ).mappings().fetchone()
        return profile_from_row(row) if row else None

    def profile_exists(self, user_id: str) -> bool:
        with get_db_session() as session:
            row = session.execute(
                text("SELECT 1 FROM profiles WHERE id = :id LIMIT 1;"),
                {"id": str(user_id)},
            ).fetchone()
            return bool(row)

    def is_username_taken(self, username: str, exclude_user_id: Optional[str] = None) -> bool:
        """True when another profile (not ``exclude_user_id``) holds the username."""
        with get_db_session() as session:
            row = session.execute(
                text("""
                    SELECT id FROM profiles
                    WHERE username = :username
                    LIMIT 1;
                """),
                {"username": username},
            ).fetchone()
        if not row:
            return False
        return exclude_user_id is None or str(row[0]) != str(exclude_user_id)

    def upsert_profile(
        self,
        user_id: str,
        username: str,
        display_name: Optional[str],
        bio: Optional[str],
        interests: List[str],
        onboarding_completed: bool = True,
    ) -> None:
        """Create the profile row or overwrite its onboarding fields."""
        now = utc_now_iso()
        with get_db_session() as session:
            session.execute(
                text("""
                    INSERT INTO profiles(
                        id, username, display_name, bio, interests_json,
                        onboarding_completed, created_at_utc, updated_at_utc
                    ) VALUES (
                        :id, :username, :display_name, :bio, :interests_json,
                        :onboarding_completed, :created_at_utc, :updated_at_utc
                    )
                    ON CONFLICT (id) DO UPDATE SET
                        username = EXCLUDED.username,
                        display_name = EXCLUDED.display_name,
                        bio = EXCLUDED.bio,
                        interests_json = EXCLUDED.interests_json,
                        onboarding_completed = EXCLUDED.onboarding_completed,
                        updated_at_utc = EXCLUDED.updated_at_utc;
                """),
                {
                    "id": str(user_id),
                    "username": username,
                    "display_name": display_name,
                    "bio": bio,
                    "interests_json": dump_json_list(interests),
                    "onboarding_completed": 1 if onboarding_completed else 0,
                    "created_at_utc": now,
                    "updated_at_utc": now,
                },
            )

    def update_profile(
        self,
        user_id: str,
        display_name: Optional[str],
        bio: Optional[str],
        interests: List[str],
    ) -> bool:
        with get_db_session() as session:
            result = session.execute(
                text("""
                    UPDATE profiles
                    SET display_name = :display_name,
                        bio = :bio,
                        interests_json = :interests_json,
                        updated_at_utc = :updated_at_utc
                    WHERE id = :id;
                """),
                {
                    "display_name": display_name,
                    "bio": bio,
                    "interests_json": dump_json_list(interests),
                    "updated_at_utc": utc_now_iso(),
                    "id": str(user_id),
                },
            )
            return result.rowcount > 0

    def set_avatar_url(self, user_id: str, avatar_url: Optional[str]) -> bool:
        with get_db_session() as session:
            result = session.execute(
                text("""
                    UPDATE profiles
                    SET avatar_url = :avatar_url, updated_at_utc = :updated_at_utc
                    WHERE id = :id;
                """),
                {"avatar_url": avatar_url, "updated_at_utc": utc_now_iso(), "id": str(user_id)},
            )
            return result.rowcount > 0
