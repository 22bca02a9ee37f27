import pytest

from i18n.translations import get_message
from models.enums import NotificationType


@pytest.mark.integration
def test_signup_then_login(services):
    signup = services.auth.signup("New@Example.com", "secret1", "secret1")
    assert signup.success
    assert services.auth.get_user_id(signup.data["session_token"]) == signup.data["user_id"]

    login = services.auth.login("new@example.com", "secret1")
    assert login.success
    assert login.data["user_id"] == signup.data["user_id"]
    assert login.data["session_token"] != signup.data["session_token"]


@pytest.mark.integration
def test_signup_and_login_failures(services):
    services.auth.signup("a@example.com", "secret1", "secret1")

    assert services.auth.signup("a@example.com", "secret1", "secret1").error == get_message(
        "email_already_registered"
    )
    assert services.auth.signup("b@example.com", "secret1", "secret2").error == get_message("password_mismatch")
    assert services.auth.login("a@example.com", "wrong-pass").error == get_message("invalid_credentials")
    assert services.auth.login("nobody@example.com", "secret1").error == get_message("invalid_credentials")


@pytest.mark.integration
def test_logout_ends_session(services):
    token = services.auth.signup("a@example.com", "secret1", "secret1").data["session_token"]

    assert services.auth.refresh_session(token) is not None
    assert services.auth.logout(token).success
    assert services.auth.get_user_id(token) is None
    assert services.auth.get_user_id(None) is None


@pytest.mark.integration
def test_notifications_skip_self_and_track_read_state(services, make_user):
    alice = make_user("alice")
    bob = make_user("bob")

    skipped = services.notifications.create_notification(alice, alice, NotificationType.FOLLOW)
    assert skipped.success and skipped.data["created"] is False

    created = services.notifications.create_notification(alice, bob, NotificationType.FOLLOW)
    services.notifications.create_notification(alice, bob, NotificationType.FOLLOW)
    assert created.data["created"] is True
    assert services.notifications.get_unread_count(alice) == 2
    assert services.notifications.get_unread_count(None) == 0

    assert services.notifications.mark_as_read(alice, created.data["notification_id"]).data["updated"] is True
    assert services.notifications.get_unread_count(alice) == 1
    assert services.notifications.mark_all_as_read(alice).data["updated"] == 1
    assert services.notifications.get_unread_count(alice) == 0

    assert services.notifications.mark_all_as_read(None).error == get_message("login_required")
