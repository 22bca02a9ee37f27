"""
Input schemas for user actions.

Validators raise ``ValueError`` with localised messages; ``first_error_message``
turns a pydantic ``ValidationError`` back into the single message the UI shows.
"""
import re
from typing import List, Optional

from pydantic import BaseModel, ValidationError, field_validator, model_validator

from i18n.translations import get_message
from utils.tags import normalize_tags

POST_MAX_LENGTH = 500
USERNAME_MIN_LENGTH = 3
USERNAME_MAX_LENGTH = 20
DISPLAY_NAME_MAX_LENGTH = 50
BIO_MAX_LENGTH = 200
INTERESTS_MIN = 1
INTERESTS_MAX = 5
PASSWORD_MIN_LENGTH = 6

_USERNAME_RE = re.compile(r"^[a-zA-Z0-9_]+$")
_EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")


def first_error_message(exc: ValidationError) -> str:
    """Return the message of the first failing field, without pydantic's prefix."""
    errors = exc.errors()
    if not errors:
        return get_message("generic_error")
    first = errors[0]
    ctx = first.get("ctx") or {}
    if "error" in ctx:
        return str(ctx["error"])
    return first.get("msg", get_message("generic_error"))


def _validate_content(value: str) -> str:
    value = (value or "").strip()
    if not value:
        raise ValueError(get_message("post_content_required"))
    if len(value) > POST_MAX_LENGTH:
        raise ValueError(get_message("post_content_too_long", max=POST_MAX_LENGTH))
    return value


class LoginInput(BaseModel):
    email: str
    password: str

    @field_validator("email")
    @classmethod
    def check_email(cls, v: str) -> str:
        v = (v or "").strip()
        if not _EMAIL_RE.match(v):
            raise ValueError(get_message("invalid_email"))
        return v.lower()

    @field_validator("password")
    @classmethod
    def check_password(cls, v: str) -> str:
        if len(v or "") < PASSWORD_MIN_LENGTH:
            raise ValueError(get_message("password_too_short", min=PASSWORD_MIN_LENGTH))
        return v


class SignupInput(LoginInput):
    confirm_password: str

    @model_validator(mode="after")
    def check_passwords_match(self) -> "SignupInput":
        if self.password != self.confirm_password:
            raise ValueError(get_message("password_mismatch"))
        return self


class ProfileUpdateInput(BaseModel):
    display_name: Optional[str] = None
    bio: Optional[str] = None
    interests: List[str]

    @field_validator("display_name")
    @classmethod
    def check_display_name(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return None
        v = v.strip()
        if len(v) > DISPLAY_NAME_MAX_LENGTH:
            raise ValueError(get_message("display_name_too_long", max=DISPLAY_NAME_MAX_LENGTH))
        return v or None

    @field_validator("bio")
    @classmethod
    def check_bio(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return None
        v = v.strip()
        if len(v) > BIO_MAX_LENGTH:
            raise ValueError(get_message("bio_too_long", max=BIO_MAX_LENGTH))
        return v or None

    @field_validator("interests")
    @classmethod
    def check_interests(cls, v: List[str]) -> List[str]:
        cleaned = []
        for item in v or []:
            item = (item or "").strip()
            if item and item not in cleaned:
                cleaned.append(item)
        if len(cleaned) < INTERESTS_MIN:
            raise ValueError(get_message("interests_required", min=INTERESTS_MIN))
        if len(cleaned) > INTERESTS_MAX:
            raise ValueError(get_message("interests_too_many", max=INTERESTS_MAX))
        return cleaned


class OnboardingInput(ProfileUpdateInput):
    username: str

    @field_validator("username")
    @classmethod
    def check_username(cls, v: str) -> str:
        v = (v or "").strip()
        if len(v) < USERNAME_MIN_LENGTH:
            raise ValueError(get_message("username_too_short", min=USERNAME_MIN_LENGTH))
        if len(v) > USERNAME_MAX_LENGTH:
            raise ValueError(get_message("username_too_long", max=USERNAME_MAX_LENGTH))
        if not _USERNAME_RE.match(v):
            raise ValueError(get_message("username_invalid_chars"))
        return v


class PostInput(BaseModel):
    content: str
    tags: List[str]

    @field_validator("content")
    @classmethod
    def check_content(cls, v: str) -> str:
        return _validate_content(v)

    @field_validator("tags")
    @classmethod
    def check_tags(cls, v: List[str]) -> List[str]:
        tags = normalize_tags(v)
        if not tags:
            raise ValueError(get_message("post_tag_required"))
        return tags


class ReplyInput(BaseModel):
    content: str

    @field_validator("content")
    @classmethod
    def check_content(cls, v: str) -> str:
        return _validate_content(v)
