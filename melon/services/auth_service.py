"""
Email/password accounts and login sessions.
"""
from typing import Optional

from argon2 import PasswordHasher
from argon2.exceptions import InvalidHashError, VerificationError
from pydantic import ValidationError
from sqlalchemy.exc import IntegrityError

from i18n.translations import get_message
from models.models import ActionResult, AuthSession
from models.validations import LoginInput, SignupInput, first_error_message
from repositories.accounts_repo import AccountsRepository
from repositories.auth_session_repo import AuthSessionRepository
from utils.logger import get_logger

logger = get_logger(__name__)

DEFAULT_SESSION_TTL_DAYS = 7


class AuthService:
    """Signup, login and session lookup. Passwords are stored as Argon2 hashes."""

    def __init__(
        self,
        accounts_repo: AccountsRepository,
        sessions_repo: AuthSessionRepository,
        session_ttl_days: int = DEFAULT_SESSION_TTL_DAYS,
    ):
        self.accounts_repo = accounts_repo
        self.sessions_repo = sessions_repo
        self.session_ttl_days = session_ttl_days
        self._hasher = PasswordHasher()

    def signup(self, email: str, password: str, confirm_password: str) -> ActionResult:
        try:
            data = SignupInput(email=email, password=password, confirm_password=confirm_password)
        except ValidationError as e:
            return ActionResult.fail(first_error_message(e))

        if self.accounts_repo.get_by_email(data.email) is not None:
            return ActionResult.fail(get_message("email_already_registered"))

        try:
            account = self.accounts_repo.create_account(data.email, self._hasher.hash(data.password))
        except IntegrityError:
            return ActionResult.fail(get_message("email_already_registered"))
        except Exception as e:
            logger.error(f"Error creating account: {e}")
            return ActionResult.fail(get_message("signup_failed"))

        session = self.sessions_repo.create_session(account.id, expires_in_days=self.session_ttl_days)
        logger.info(f"Created account {account.id}")
        return self._session_result(session)

    def login(self, email: str, password: str) -> ActionResult:
        try:
            data = LoginInput(email=email, password=password)
        except ValidationError as e:
            return ActionResult.fail(first_error_message(e))

        account = self.accounts_repo.get_by_email(data.email)
        if account is None:
            return ActionResult.fail(get_message("invalid_credentials"))

        try:
            self._hasher.verify(account.password_hash, data.password)
        except (VerificationError, InvalidHashError):
            return ActionResult.fail(get_message("invalid_credentials"))

        if self._hasher.check_needs_rehash(account.password_hash):
            self.accounts_repo.update_password_hash(account.id, self._hasher.hash(data.password))

        self.sessions_repo.cleanup_expired_sessions()
        session = self.sessions_repo.create_session(account.id, expires_in_days=self.session_ttl_days)
        logger.info(f"Account {account.id} logged in")
        return self._session_result(session)

    def logout(self, session_token: Optional[str]) -> ActionResult:
        if session_token:
            self.sessions_repo.delete_session(session_token)
        return ActionResult.ok()

    def get_user_id(self, session_token: Optional[str]) -> Optional[str]:
        """Account id behind a live session token, or None."""
        if not session_token:
            return None
        session = self.sessions_repo.get_session(session_token)
        return session.user_id if session else None

    def refresh_session(self, session_token: Optional[str]) -> Optional[AuthSession]:
        if not session_token:
            return None
        return self.sessions_repo.refresh_session(session_token, expires_in_days=self.session_ttl_days)

    @staticmethod
    def _session_result(session: AuthSession) -> ActionResult:
        return ActionResult.ok(
            user_id=session.user_id,
            session_token=session.session_token,
            expires_at=session.expires_at,
        )
