"""
Emoji reactions on posts.

Each user holds at most one reaction per post. Toggling the same emoji
removes it; toggling a different emoji switches the existing row.
"""
from typing import Dict, List, Optional

from i18n.translations import get_message
from models.enums import PRESET_EMOJIS
from models.models import ActionResult, Reaction, ReactionCount
from repositories.reactions_repo import ReactionToggleError, ReactionsRepository
from utils.logger import get_logger
from utils.page_cache import revalidate_path

logger = get_logger(__name__)


def aggregate_reactions(reactions: List[Reaction], current_user_id: Optional[str]) -> List[ReactionCount]:
    """Group by emoji, most used first. Ties keep first-seen order."""
    counts: Dict[str, ReactionCount] = {}
    for reaction in reactions:
        entry = counts.get(reaction.emoji)
        if entry is None:
            entry = ReactionCount(emoji=reaction.emoji, count=0, user_reacted=False)
            counts[reaction.emoji] = entry
        entry.count += 1
        if current_user_id is not None and reaction.user_id == str(current_user_id):
            entry.user_reacted = True
    return sorted(counts.values(), key=lambda c: c.count, reverse=True)


class ReactionService:
    def __init__(self, reactions_repo: ReactionsRepository):
        self.reactions_repo = reactions_repo

    def toggle_reaction(self, user_id: Optional[str], post_id: str, emoji: str) -> ActionResult:
        """
        Add, remove or switch the caller's reaction on a post.

        The reaction write and the author notification commit together; a
        failed notification does not undo the reaction. Returns
        ``ActionResult.ok(action=...)`` where action is one of "added",
        "removed" or "changed".
        """
        if not user_id:
            return ActionResult.fail(get_message("login_required"))
        if emoji not in PRESET_EMOJIS:
            return ActionResult.fail(get_message("invalid_emoji"))

        try:
            toggle = self.reactions_repo.toggle_reaction(post_id, user_id, emoji)
        except ReactionToggleError as e:
            logger.error(f"Error toggling reaction {emoji} by user {user_id} on post {post_id}: {e}")
            return ActionResult.fail(get_message(f"reaction_{e.step}_failed"))
        except Exception as e:
            logger.exception(f"Unexpected error toggling reaction on post {post_id}: {e}")
            return ActionResult.fail(get_message("reaction_failed"))

        revalidate_path("/home")
        revalidate_path("/everyone")
        revalidate_path(f"/posts/{post_id}")
        return ActionResult.ok(action=toggle.action)

    def get_reactions(self, post_id: str) -> List[Reaction]:
        return self.reactions_repo.list_reactions(post_id)

    def get_reactions_for_posts(self, post_ids: List[str]) -> Dict[str, List[Reaction]]:
        return self.reactions_repo.list_reactions_for_posts(post_ids)
