import pytest
from pydantic import ValidationError

from i18n.translations import get_message
from models.validations import (
    LoginInput,
    OnboardingInput,
    PostInput,
    ProfileUpdateInput,
    ReplyInput,
    SignupInput,
    first_error_message,
)


def _message(model, **kwargs):
    with pytest.raises(ValidationError) as exc_info:
        model(**kwargs)
    return first_error_message(exc_info.value)


@pytest.mark.unit
def test_post_input_trims_and_normalizes_tags():
    data = PostInput(content="  hello  ", tags=["Chat", "chat", "Work In Progress"])
    assert data.content == "hello"
    assert data.tags == ["chat", "work-in-progress"]


@pytest.mark.unit
def test_post_input_content_bounds():
    assert _message(PostInput, content="   ", tags=["chat"]) == get_message("post_content_required")
    assert _message(PostInput, content="x" * 501, tags=["chat"]) == get_message("post_content_too_long", max=500)
    assert PostInput(content="x" * 500, tags=["chat"]).content == "x" * 500


@pytest.mark.unit
def test_post_input_requires_a_tag():
    assert _message(PostInput, content="hi", tags=[]) == get_message("post_tag_required")
    assert _message(PostInput, content="hi", tags=["  "]) == get_message("post_tag_required")


@pytest.mark.unit
def test_reply_input_uses_post_content_rules():
    assert ReplyInput(content=" ok ").content == "ok"
    assert _message(ReplyInput, content="") == get_message("post_content_required")


@pytest.mark.unit
def test_signup_and_login_inputs():
    assert LoginInput(email=" Alice@Example.com ", password="secret1").email == "alice@example.com"
    assert _message(LoginInput, email="not-an-email", password="secret1") == get_message("invalid_email")
    assert _message(LoginInput, email="a@b.co", password="12345") == get_message("password_too_short", min=6)
    assert _message(
        SignupInput, email="a@b.co", password="secret1", confirm_password="secret2"
    ) == get_message("password_mismatch")


@pytest.mark.unit
def test_onboarding_username_rules():
    base = {"interests": ["art"]}
    assert _message(OnboardingInput, username="ab", **base) == get_message("username_too_short", min=3)
    assert _message(OnboardingInput, username="a" * 21, **base) == get_message("username_too_long", max=20)
    assert _message(OnboardingInput, username="bad name!", **base) == get_message("username_invalid_chars")
    assert OnboardingInput(username="melon_fan_1", **base).username == "melon_fan_1"


@pytest.mark.unit
def test_profile_field_limits():
    assert _message(ProfileUpdateInput, display_name="x" * 51, interests=["art"]) == get_message(
        "display_name_too_long", max=50
    )
    assert _message(ProfileUpdateInput, bio="x" * 201, interests=["art"]) == get_message("bio_too_long", max=200)
    assert _message(ProfileUpdateInput, interests=[]) == get_message("interests_required", min=1)
    assert _message(ProfileUpdateInput, interests=["a", "b", "c", "d", "e", "f"]) == get_message(
        "interests_too_many", max=5
    )
    data = ProfileUpdateInput(display_name="  ", bio="", interests=["art", "art", "music"])
    assert data.display_name is None
    assert data.bio is None
    assert data.interests == ["art", "music"]
