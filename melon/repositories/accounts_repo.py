"""
Repository for email/password accounts.
"""
import uuid
from typing import Optional

from sqlalchemy import text

from db.database import get_db_session, utc_now_iso
from models.models import Account


class AccountsRepository:
    """Accounts keyed by a uuid that the profile row shares."""

    def create_account(self, email: str, password_hash: str) -> Account:
        """Insert an account. Raises IntegrityError when the email is taken."""
        account_id = str(uuid.uuid4())
        now = utc_now_iso()
        with get_db_session() as session:
            session.execute(
                text("""
                    INSERT INTO accounts(id, email, password_hash, created_at_utc)
                    VALUES (:id, :email, :password_hash, :created_at_utc);
                """),
                {
                    "id": account_id,
                    "email": email,
                    "password_hash": password_hash,
                    "created_at_utc": now,
                },
            )
        return Account(id=account_id, email=email, password_hash=password_hash, created_at=now)

    def get_by_email(self, email: str) -> Optional[Account]:
        with get_db_session() as session:
            row = session.execute(
                text("""
                    SELECT id, email, password_hash, created_at_utc
                    FROM accounts
                    WHERE email = :email
                    LIMIT 1;
                """),
                {"email": email},
            ).mappings().fetchone()
        return self._row_to_account(row) if row else None

    def get_by_id(self, account_id: str) -> Optional[Account]:
        with get_db_session() as session:
            row = session.execute(
                text("""
                    SELECT id, email, password_hash, created_at_utc
                    FROM accounts
                    WHERE id = :id
                    LIMIT 1;
                """),
                {"id": account_id},
            ).mappings().fetchone()
        return self._row_to_account(row) if row else None

    def update_password_hash(self, account_id: str, password_hash: str) -> bool:
        """Store a re-hashed password (argon2 parameter upgrades)."""
        with get_db_session() as session:
            result = session.execute(
                text("UPDATE accounts SET password_hash = :password_hash WHERE id = :id;"),
                {"password_hash": password_hash, "id": account_id},
            )
            return result.rowcount > 0

    @staticmethod
    def _row_to_account(row) -> Account:
        return Account(
            id=str(row["id"]),
            email=row["email"],
            password_hash=row["password_hash"],
            created_at=row["created_at_utc"],
        )
