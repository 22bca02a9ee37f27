import os

import pytest

from i18n.translations import get_message
from models.models import UploadedImage


@pytest.mark.integration
def test_onboarding_creates_profile(services, make_user):
    user_id = make_user("placeholder", onboarded=False)
    assert services.profiles.needs_onboarding(user_id) is True

    result = services.profiles.complete_onboarding(user_id, "melon_fan", " Melon ", "", ["illustration", "music"])

    assert result.success and result.data["username"] == "melon_fan"
    profile = services.profiles.get_profile(user_id)
    assert profile.display_name == "Melon"
    assert profile.bio is None
    assert profile.interests == ["illustration", "music"]
    assert services.profiles.needs_onboarding(user_id) is False
    assert services.profiles.get_profile_by_username("melon_fan").id == user_id


@pytest.mark.integration
def test_onboarding_rejects_taken_and_invalid_usernames(services, make_user):
    make_user("alice")
    newcomer = make_user("newcomer", onboarded=False)

    assert services.profiles.complete_onboarding(newcomer, "alice", None, None, ["art"]).error == get_message(
        "username_taken"
    )
    assert services.profiles.complete_onboarding(newcomer, "a!", None, None, ["art"]).error == get_message(
        "username_too_short", min=3
    )
    assert services.profiles.complete_onboarding(newcomer, "valid_name", None, None, []).error == get_message(
        "interests_required", min=1
    )
    assert services.profiles.complete_onboarding(None, "valid_name", None, None, ["art"]).error == get_message(
        "login_required"
    )


@pytest.mark.integration
def test_username_availability(services, make_user):
    alice = make_user("alice")
    bob = make_user("bob")

    assert services.profiles.check_username_availability("alice") is False
    assert services.profiles.check_username_availability("alice", current_user_id=alice) is True
    assert services.profiles.check_username_availability("alice", current_user_id=bob) is False
    assert services.profiles.check_username_availability("free_name") is True
    assert services.profiles.check_username_availability("  ") is False


@pytest.mark.integration
def test_update_profile(services, make_user):
    alice = make_user("alice", display_name="Alice")

    assert services.profiles.update_profile(alice, "Alice B", "hello", ["music"]).success
    profile = services.profiles.get_profile(alice)
    assert (profile.display_name, profile.bio, profile.interests) == ("Alice B", "hello", ["music"])

    assert services.profiles.update_profile(alice, None, "x" * 201, ["music"]).error == get_message(
        "bio_too_long", max=200
    )
    assert services.profiles.update_profile("nobody", None, None, ["music"]).error == get_message(
        "profile_not_found"
    )


@pytest.mark.integration
def test_avatar_replace_and_remove(services, make_user, storage, png_bytes):
    alice = make_user("alice")

    first = services.profiles.update_avatar(alice, UploadedImage("me.png", "image/png", png_bytes()))
    assert first.success
    first_path = os.path.join(storage.bucket_dir, storage.path_from_public_url(first.data["avatar_url"]))
    assert storage.path_from_public_url(first.data["avatar_url"]).startswith(f"avatars/{alice}/")
    assert os.path.exists(first_path)

    second = services.profiles.update_avatar(alice, UploadedImage("me2.png", "image/png", png_bytes()))
    assert second.success
    assert not os.path.exists(first_path)
    assert services.profiles.get_profile(alice).avatar_url == second.data["avatar_url"]

    assert services.profiles.remove_avatar(alice).success
    assert services.profiles.get_profile(alice).avatar_url is None


@pytest.mark.integration
def test_avatar_rejects_gif(services, make_user):
    alice = make_user("alice")

    result = services.profiles.update_avatar(alice, UploadedImage("a.gif", "image/gif", b"GIF89a"))

    assert result.error == get_message("image_invalid_type_avatar")
