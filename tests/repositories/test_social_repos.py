import pytest
from sqlalchemy.exc import IntegrityError

import repositories.reactions_repo as reactions_repo
from db.database import get_db_session
from repositories.follows_repo import FollowsRepository
from repositories.notifications_repo import NotificationsRepository
from repositories.posts_repo import PostsRepository
from repositories.reactions_repo import ReactionsRepository


@pytest.mark.repo
def test_follows_repo_basic_operations(make_user):
    """Follow/unfollow return whether anything changed."""
    alice = make_user("alice")
    bob = make_user("bob")
    repo = FollowsRepository()

    assert repo.follow(alice, bob) is True
    assert repo.is_following(alice, bob) is True
    assert repo.is_following(bob, alice) is False
    assert repo.follow(alice, bob) is False  # Already following

    assert repo.unfollow(alice, bob) is True
    assert repo.is_following(alice, bob) is False
    assert repo.unfollow(alice, bob) is False  # Not following

    with pytest.raises(ValueError, match="Cannot follow yourself"):
        repo.follow(alice, alice)


@pytest.mark.repo
def test_follows_repo_lists_and_counts(make_user):
    alice = make_user("alice")
    bob = make_user("bob")
    carol = make_user("carol")
    repo = FollowsRepository()

    repo.follow(bob, alice)
    repo.follow(carol, alice)
    repo.follow(alice, carol)

    followers = repo.get_followers(alice)
    assert [f.profile.username for f in followers] == ["carol", "bob"]
    assert [f.profile.username for f in repo.get_following(alice)] == ["carol"]

    assert repo.get_follower_count(alice) == 2
    assert repo.get_following_count(alice) == 1
    assert repo.get_following_ids(alice, [bob, carol]) == {carol}
    assert repo.get_follower_ids(alice, [bob, carol]) == {bob, carol}
    assert repo.get_following_ids(alice, []) == set()


@pytest.mark.repo
def test_reactions_repo_one_per_user_per_post(make_user):
    alice = make_user("alice")
    bob = make_user("bob")
    post = PostsRepository().create_post(alice, "hi", ["chat"])
    repo = ReactionsRepository()

    added = repo.toggle_reaction(post.id, bob, "👏")
    assert added.action == "added"
    assert repo.list_reactions(post.id)[0].emoji == "👏"

    with pytest.raises(IntegrityError):
        with get_db_session() as session:
            reactions_repo._insert_reaction(session, post.id, bob, "💖")

    changed = repo.toggle_reaction(post.id, bob, "💖")
    assert changed.action == "changed"
    [updated] = repo.list_reactions(post.id)
    assert updated.id == added.reaction.id
    assert updated.emoji == "💖"

    assert repo.toggle_reaction(post.id, bob, "💖").action == "removed"
    assert repo.list_reactions(post.id) == []


@pytest.mark.repo
def test_reactions_repo_groups_by_post(make_user):
    alice = make_user("alice")
    bob = make_user("bob")
    posts = PostsRepository()
    p1 = posts.create_post(alice, "one", ["chat"])
    p2 = posts.create_post(alice, "two", ["chat"])
    p3 = posts.create_post(alice, "three", ["chat"])
    repo = ReactionsRepository()

    repo.toggle_reaction(p1.id, alice, "🤣")
    repo.toggle_reaction(p1.id, bob, "👏")
    repo.toggle_reaction(p2.id, bob, "💖")

    grouped = repo.list_reactions_for_posts([p1.id, p2.id, p3.id])
    assert [r.emoji for r in grouped[p1.id]] == ["🤣", "👏"]
    assert [r.emoji for r in grouped[p2.id]] == ["💖"]
    assert p3.id not in grouped
    assert repo.list_reactions_for_posts([]) == {}


@pytest.mark.repo
def test_notifications_repo_read_state(make_user):
    alice = make_user("alice")
    bob = make_user("bob", display_name="Bob")
    post = PostsRepository().create_post(alice, "hello there", ["chat"])
    repo = NotificationsRepository()

    first = repo.create_notification(alice, bob, "reaction", post.id, "👏")
    repo.create_notification(alice, bob, "follow")

    listed = repo.list_notifications(alice)
    assert [n.type for n in listed] == ["follow", "reaction"]
    assert listed[0].post_excerpt is None
    assert listed[1].post_excerpt == {"id": post.id, "content": "hello there"}
    assert listed[1].actor.name == "Bob"
    assert repo.count_unread(alice) == 2

    # Only the recipient can mark a notification read
    assert repo.mark_as_read(bob, first.id) is False
    assert repo.mark_as_read(alice, first.id) is True
    assert repo.count_unread(alice) == 1

    assert repo.mark_all_as_read(alice) == 1
    assert repo.count_unread(alice) == 0
    assert repo.mark_all_as_read(alice) == 0
