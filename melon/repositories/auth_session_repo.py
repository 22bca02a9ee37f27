"""
Repository for managing authentication sessions.
Sessions are persisted so they survive restarts and are shared across workers.
"""

import secrets
from datetime import datetime, timedelta, timezone
from typing import Optional

from sqlalchemy import text

from db.database import dt_from_utc_iso, dt_to_utc_iso, get_db_session
from models.models import AuthSession
from utils.logger import get_logger

logger = get_logger(__name__)


class AuthSessionRepository:
    """Database-backed repository for authentication sessions."""

    def create_session(self, user_id: str, expires_in_days: int = 7) -> AuthSession:
        """
        Create a new authentication session.

        Args:
            user_id: Account id
            expires_in_days: Number of days until expiration (default: 7)

        Returns:
            Created AuthSession
        """
        session_token = secrets.token_urlsafe(32)
        now = datetime.now(timezone.utc)
        expires_at = now + timedelta(days=expires_in_days)

        with get_db_session() as session:
            session.execute(
                text("""
                    INSERT INTO auth_sessions(session_token, user_id, created_at_utc, expires_at_utc)
                    VALUES (:session_token, :user_id, :created_at_utc, :expires_at_utc);
                """),
                {
                    "session_token": session_token,
                    "user_id": str(user_id),
                    "created_at_utc": dt_to_utc_iso(now),
                    "expires_at_utc": dt_to_utc_iso(expires_at),
                },
            )

        logger.debug(f"Created auth session for user {user_id}, expires at {expires_at}")
        return AuthSession(
            session_token=session_token,
            user_id=str(user_id),
            created_at=now,
            expires_at=expires_at,
        )

    def get_session(self, session_token: str) -> Optional[AuthSession]:
        """
        Get a session by token.

        Returns None if the session is missing or expired. Expired sessions are deleted.
        """
        if not session_token:
            return None

        with get_db_session() as session:
            row = session.execute(
                text("""
                    SELECT session_token, user_id, created_at_utc, expires_at_utc
                    FROM auth_sessions
                    WHERE session_token = :session_token
                    LIMIT 1;
                """),
                {"session_token": session_token},
            ).mappings().fetchone()

        if not row:
            return None

        auth_session = AuthSession(
            session_token=row["session_token"],
            user_id=str(row["user_id"]),
            created_at=dt_from_utc_iso(row["created_at_utc"]),
            expires_at=dt_from_utc_iso(row["expires_at_utc"]),
        )

        if auth_session.expires_at is None or auth_session.expires_at <= datetime.now(timezone.utc):
            logger.debug(f"Session {session_token[:8]}... expired, removing")
            self.delete_session(session_token)
            return None

        return auth_session

    def refresh_session(self, session_token: str, expires_in_days: int = 7) -> Optional[AuthSession]:
        """Slide the expiry of a live session forward. Returns None for unknown or expired tokens."""
        auth_session = self.get_session(session_token)
        if auth_session is None:
            return None

        expires_at = datetime.now(timezone.utc) + timedelta(days=expires_in_days)
        with get_db_session() as session:
            session.execute(
                text("""
                    UPDATE auth_sessions
                    SET expires_at_utc = :expires_at_utc
                    WHERE session_token = :session_token;
                """),
                {"expires_at_utc": dt_to_utc_iso(expires_at), "session_token": session_token},
            )
        auth_session.expires_at = expires_at
        return auth_session

    def delete_session(self, session_token: str) -> bool:
        """Delete a session (logout)."""
        with get_db_session() as session:
            result = session.execute(
                text("DELETE FROM auth_sessions WHERE session_token = :session_token;"),
                {"session_token": session_token},
            )
            deleted = result.rowcount > 0
        if deleted:
            logger.debug(f"Deleted session {session_token[:8]}...")
        return deleted

    def cleanup_expired_sessions(self) -> int:
        """Remove all expired sessions. Returns number of sessions removed."""
        with get_db_session() as session:
            result = session.execute(
                text("DELETE FROM auth_sessions WHERE expires_at_utc <= :now;"),
                {"now": dt_to_utc_iso(datetime.now(timezone.utc))},
            )
            count = result.rowcount or 0
        if count:
            logger.info(f"Cleaned up {count} expired sessions")
        return count
