"""
Error types and user-facing error formatting.

Database failures are mapped to short localised messages; the raw
exception is logged by the caller, never shown to the user.
"""
from typing import Any, Optional

from sqlalchemy.exc import IntegrityError, OperationalError

from i18n.translations import get_message


class MelonError(Exception):
    """Base class for application errors carrying a user-facing message."""

    def __init__(self, message: str, code: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.code = code


class StorageError(MelonError):
    pass


# PostgreSQL SQLSTATE codes
_PG_UNIQUE_VIOLATION = "23505"
_PG_FOREIGN_KEY_VIOLATION = "23503"
_PG_NOT_NULL_VIOLATION = "23502"
_PG_INSUFFICIENT_PRIVILEGE = "42501"

_NETWORK_KEYWORDS = ("network", "fetch", "connection", "timeout")


def _sqlstate(error: BaseException) -> Optional[str]:
    orig = getattr(error, "orig", None)
    for attr in ("sqlstate", "pgcode"):
        code = getattr(orig, attr, None)
        if code:
            return str(code)
    return None


def format_db_error(error: Optional[BaseException]) -> str:
    """Map a database exception to a localised message."""
    if error is None:
        return get_message("unknown_error")

    code = _sqlstate(error)
    if code == _PG_UNIQUE_VIOLATION:
        return get_message("db_unique_violation")
    if code == _PG_FOREIGN_KEY_VIOLATION:
        return get_message("db_fk_violation")
    if code == _PG_NOT_NULL_VIOLATION:
        return get_message("db_not_null_violation")
    if code == _PG_INSUFFICIENT_PRIVILEGE:
        return get_message("db_insufficient_privilege")

    if isinstance(error, IntegrityError):
        # SQLite reports constraint kinds only in the message text
        text = str(error.orig if error.orig is not None else error).lower()
        if "unique" in text:
            return get_message("db_unique_violation")
        if "foreign key" in text:
            return get_message("db_fk_violation")
        if "not null" in text:
            return get_message("db_not_null_violation")
        return get_message("db_error")

    if isinstance(error, OperationalError) and is_network_error(error):
        return get_message("network_error")

    return get_message("db_error")


def is_network_error(error: Any) -> bool:
    if error is None:
        return False
    message = str(error).lower()
    return any(keyword in message for keyword in _NETWORK_KEYWORDS)

