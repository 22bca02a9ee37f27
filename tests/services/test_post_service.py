import os

import pytest

from i18n.translations import get_message
from models.models import UploadedImage
from repositories.notifications_repo import NotificationsRepository
from repositories.posts_repo import PostsRepository
from repositories.reactions_repo import ReactionsRepository
from services.image_service import ImageService
from services.notification_service import NotificationService
from services.post_service import PostService
from services.reaction_service import ReactionService
from services.storage_service import StorageService
from utils.errors import StorageError
from utils.page_cache import get_page_cache


class _BrokenStorage(StorageService):
    def upload(self, path, data):
        raise StorageError(get_message("image_upload_failed", reason="disk full"))

    def remove(self, paths):
        raise StorageError(get_message("image_delete_failed", reason="disk full"))


def _post_service(storage):
    notifications = NotificationService(NotificationsRepository())
    reactions = ReactionService(ReactionsRepository())
    return PostService(PostsRepository(), reactions, notifications, storage, ImageService())


@pytest.mark.integration
def test_create_post_validates_input(services, make_user):
    alice = make_user("alice")

    assert services.posts.create_post(None, "hi", ["chat"]).error == get_message("login_required")
    assert services.posts.create_post(alice, "  ", ["chat"]).error == get_message("post_content_required")
    assert services.posts.create_post(alice, "x" * 501, ["chat"]).error == get_message(
        "post_content_too_long", max=500
    )
    assert services.posts.create_post(alice, "hi", []).error == get_message("post_tag_required")
    assert services.posts.get_posts() == []


@pytest.mark.integration
def test_create_post_with_images(services, make_user, storage, png_bytes):
    alice = make_user("alice")
    images = [UploadedImage(f"{i}.png", "image/png", png_bytes()) for i in range(2)]

    result = services.posts.create_post(alice, "  look  ", ["Illustration"], images)

    assert result.success
    post = services.posts.get_post_by_id(result.data["post_id"])
    assert post.content == "look"
    assert post.tags == ["illustration"]
    assert len(post.image_urls) == 2
    for url in post.image_urls:
        path = storage.path_from_public_url(url)
        assert path.startswith(f"posts/{post.id}/")
        assert os.path.exists(os.path.join(storage.bucket_dir, path))


@pytest.mark.integration
def test_create_post_image_limits(services, make_user, png_bytes):
    alice = make_user("alice")
    five = [UploadedImage(f"{i}.png", "image/png", png_bytes()) for i in range(5)]
    bmp = [UploadedImage("a.bmp", "image/bmp", b"BM...")]

    assert services.posts.create_post(alice, "hi", ["chat"], five).error == get_message(
        "post_too_many_images", max=4
    )
    assert services.posts.create_post(alice, "hi", ["chat"], bmp).error == get_message("image_invalid_type")
    assert services.posts.get_posts() == []


@pytest.mark.integration
def test_failed_upload_discards_the_post(db, make_user, tmp_path, png_bytes):
    alice = make_user("alice")
    service = _post_service(_BrokenStorage(str(tmp_path), "http://testserver"))

    result = service.create_post(alice, "hi", ["chat"], [UploadedImage("a.png", "image/png", png_bytes())])

    assert result.success is False
    assert result.error == get_message("image_upload_failed", reason="disk full")
    assert service.get_posts() == []


@pytest.mark.integration
def test_create_post_revalidates_feeds(services, make_user):
    alice = make_user("alice")
    cache = get_page_cache()
    cache.set("/home", (alice, 50), {"stale": True})

    assert services.posts.create_post(alice, "hi", ["chat"]).success
    assert cache.get("/home", (alice, 50)) is None


@pytest.mark.integration
def test_reply_inherits_tags_and_notifies_parent_author(services, make_user):
    alice = make_user("alice")
    bob = make_user("bob")
    parent_id = services.posts.create_post(alice, "question?", ["question", "chat"]).data["post_id"]

    result = services.posts.create_reply(bob, parent_id, "answer")

    assert result.success
    reply = services.posts.get_post_by_id(result.data["post_id"])
    assert reply.parent_post_id == parent_id
    assert reply.tags == ["question", "chat"]
    [notification] = services.notifications.get_notifications(alice)
    assert notification.type == "reply"
    assert notification.post_id == parent_id
    assert notification.actor_id == bob

    # Replies never show up in the top-level feeds
    assert [p.id for p in services.posts.get_posts()] == [parent_id]


@pytest.mark.integration
def test_reply_edge_cases(services, make_user):
    alice = make_user("alice")
    parent_id = services.posts.create_post(alice, "hi", ["chat"]).data["post_id"]

    assert services.posts.create_reply(alice, "missing", "x").error == get_message("post_not_found")
    assert services.posts.create_reply(alice, parent_id, " ").error == get_message("post_content_required")
    assert services.posts.create_reply(None, parent_id, "x").error == get_message("login_required")

    assert services.posts.create_reply(alice, parent_id, "self reply").success
    assert services.notifications.get_notifications(alice) == []


@pytest.mark.integration
def test_delete_post_only_by_author(services, make_user, storage, png_bytes):
    alice = make_user("alice")
    bob = make_user("bob")
    images = [UploadedImage("a.png", "image/png", png_bytes())]
    post_id = services.posts.create_post(alice, "mine", ["chat"], images).data["post_id"]
    [url] = services.posts.get_post_by_id(post_id).image_urls

    assert services.posts.delete_post(bob, post_id).error == get_message("post_delete_forbidden")
    assert services.posts.delete_post(alice, "missing").error == get_message("post_delete_forbidden")

    assert services.posts.delete_post(alice, post_id).success
    assert services.posts.get_post_by_id(post_id) is None
    assert not os.path.exists(os.path.join(storage.bucket_dir, storage.path_from_public_url(url)))


@pytest.mark.integration
def test_delete_post_survives_storage_failure(db, make_user, tmp_path):
    alice = make_user("alice")
    post = PostsRepository().create_post(
        alice, "pics", ["chat"], image_urls=["http://testserver/media/images/posts/x/a.png"]
    )
    service = _post_service(_BrokenStorage(str(tmp_path), "http://testserver"))

    assert service.delete_post(alice, post.id).success
    assert service.get_post_by_id(post.id) is None


@pytest.mark.integration
def test_build_thread_caps_nesting_depth(services, make_user):
    alice = make_user("alice")
    bob = make_user("bob")
    root_id = services.posts.create_post(alice, "root", ["chat"]).data["post_id"]
    level1 = services.posts.create_reply(bob, root_id, "level 1").data["post_id"]
    level2 = services.posts.create_reply(alice, level1, "level 2").data["post_id"]
    services.posts.create_reply(bob, level2, "level 3")
    services.reactions.toggle_reaction(bob, root_id, "👏")

    root = services.posts.build_thread(services.posts.get_post_by_id(root_id), viewer_id=bob)

    assert root.depth == 0
    assert root.can_reply is True
    assert root.can_delete is False
    assert root.can_react is True
    assert [(r.emoji, r.count, r.user_reacted) for r in root.reactions] == [("👏", 1, True)]

    [child] = root.replies
    assert child.post.id == level1
    assert child.can_delete is True
    assert child.can_react is False

    [grandchild] = child.replies
    assert grandchild.post.id == level2
    assert grandchild.depth == 2
    assert grandchild.can_reply is False
    assert grandchild.replies == []


@pytest.mark.integration
def test_reply_page_starts_at_its_depth_in_the_thread(services, make_user):
    alice = make_user("alice")
    bob = make_user("bob")
    root_id = services.posts.create_post(alice, "root", ["chat"]).data["post_id"]
    level1 = services.posts.create_reply(bob, root_id, "level 1").data["post_id"]
    level2 = services.posts.create_reply(alice, level1, "level 2").data["post_id"]
    services.posts.create_reply(bob, level2, "level 3")

    middle = services.posts.build_thread(services.posts.get_post_by_id(level1), viewer_id=bob)
    deepest = services.posts.build_thread(services.posts.get_post_by_id(level2), viewer_id=bob)

    assert middle.depth == 1 and middle.can_reply is True
    assert [r.depth for r in middle.replies] == [2]
    assert deepest.depth == 2
    assert deepest.can_reply is False
    assert deepest.replies == []


@pytest.mark.integration
def test_orphaned_reply_keeps_its_depth(services, make_user):
    alice = make_user("alice")
    bob = make_user("bob")
    root_id = services.posts.create_post(alice, "root", ["chat"]).data["post_id"]
    level1 = services.posts.create_reply(bob, root_id, "level 1").data["post_id"]
    level2 = services.posts.create_reply(alice, level1, "level 2").data["post_id"]
    assert services.posts.delete_post(bob, level1).success

    assert services.posts.get_thread_depth(services.posts.get_post_by_id(level2)) == 1


@pytest.mark.integration
def test_build_threads_for_anonymous_viewer(services, make_user):
    alice = make_user("alice")
    services.posts.create_post(alice, "one", ["chat"])
    services.posts.create_post(alice, "two", ["chat"])

    threads = services.posts.build_threads(services.posts.get_posts(), viewer_id=None)

    assert [t.post.content for t in threads] == ["two", "one"]
    assert not any(t.can_reply or t.can_delete or t.can_react for t in threads)


@pytest.mark.integration
def test_feeds_by_tag_and_home(services, make_user):
    alice = make_user("alice")
    bob = make_user("bob")
    services.posts.create_post(alice, "drawing", ["illustration"])
    bob_post = services.posts.create_post(bob, "wip", ["progress"]).data["post_id"]

    assert [p.content for p in services.posts.get_posts_by_tag(" Illustration ")] == ["drawing"]
    assert [p.content for p in services.posts.get_home_feed(alice)] == ["drawing"]

    services.follows.follow_user(alice, bob)
    assert [p.id for p in services.posts.get_home_feed(alice)][0] == bob_post
    assert [p.content for p in services.posts.get_posts_by_user(bob)] == ["wip"]
