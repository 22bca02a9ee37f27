import pytest

from models.models import Reaction
from services.reaction_service import aggregate_reactions


def _r(user_id, emoji, post_id="p1"):
    return Reaction(id=f"{user_id}-{emoji}", post_id=post_id, user_id=user_id, emoji=emoji)


@pytest.mark.unit
def test_aggregate_groups_by_emoji_and_sorts_by_count():
    reactions = [_r("a", "💖"), _r("b", "👏"), _r("c", "👏"), _r("d", "🤣"), _r("e", "👏")]

    counts = aggregate_reactions(reactions, current_user_id="b")

    assert [(c.emoji, c.count) for c in counts][0] == ("👏", 3)
    assert {c.emoji: c.count for c in counts} == {"👏": 3, "💖": 1, "🤣": 1}
    assert [c.emoji for c in counts if c.user_reacted] == ["👏"]


@pytest.mark.unit
def test_aggregate_ties_keep_first_seen_order():
    reactions = [_r("a", "🤣"), _r("b", "💖")]

    counts = aggregate_reactions(reactions, current_user_id=None)

    assert [c.emoji for c in counts] == ["🤣", "💖"]
    assert not any(c.user_reacted for c in counts)


@pytest.mark.unit
def test_aggregate_empty():
    assert aggregate_reactions([], current_user_id="a") == []
