"""
Service for follow relationships between users.
"""
from typing import Any, Dict, List, Optional

from sqlalchemy.exc import IntegrityError

from i18n.translations import get_message
from models.enums import NotificationType
from models.models import ActionResult, Follow, FollowStats, FollowStatus
from repositories.follows_repo import FollowsRepository
from repositories.profiles_repo import ProfilesRepository
from services.notification_service import NotificationService
from utils.logger import get_logger
from utils.page_cache import revalidate_path

logger = get_logger(__name__)

CONNECTION_TABS = ("followers", "following")


class FollowService:
    """Follow, unfollow and relationship lookups. Mutual status is always derived."""

    def __init__(
        self,
        follows_repo: FollowsRepository,
        profiles_repo: ProfilesRepository,
        notification_service: NotificationService,
    ):
        self.follows_repo = follows_repo
        self.profiles_repo = profiles_repo
        self.notification_service = notification_service

    def follow_user(self, user_id: Optional[str], target_id: str) -> ActionResult:
        if not user_id:
            return ActionResult.fail(get_message("login_required"))
        if str(user_id) == str(target_id):
            return ActionResult.fail(get_message("cannot_follow_self"))

        try:
            if not self.profiles_repo.profile_exists(target_id):
                return ActionResult.fail(get_message("follow_target_not_found"))
            created = self.follows_repo.follow(user_id, target_id)
        except IntegrityError as e:
            # A concurrent follow inserted the same edge first
            logger.info(f"Duplicate follow of user {target_id} by {user_id}: {e}")
            return ActionResult.ok(already_following=True)
        except Exception as e:
            logger.error(f"Error following user {target_id} by {user_id}: {e}")
            return ActionResult.fail(get_message("follow_failed"))

        if created:
            logger.info(f"User {user_id} followed {target_id}")
            result = self.notification_service.create_notification(
                recipient_id=target_id,
                actor_id=user_id,
                notification_type=NotificationType.FOLLOW,
            )
            if not result.success:
                logger.warning(f"Follow notification for user {target_id} failed: {result.error}")
            revalidate_path("/home")

        return ActionResult.ok(already_following=not created)

    def unfollow_user(self, user_id: Optional[str], target_id: str) -> ActionResult:
        if not user_id:
            return ActionResult.fail(get_message("login_required"))
        try:
            removed = self.follows_repo.unfollow(user_id, target_id)
        except Exception as e:
            logger.error(f"Error unfollowing user {target_id} by {user_id}: {e}")
            return ActionResult.fail(get_message("unfollow_failed"))

        if removed:
            logger.info(f"User {user_id} unfollowed {target_id}")
            revalidate_path("/home")
        return ActionResult.ok(was_following=removed)

    def get_follow_status(self, user_id: Optional[str], target_id: str) -> FollowStatus:
        if not user_id or str(user_id) == str(target_id):
            return FollowStatus()
        return FollowStatus(
            is_following=self.follows_repo.is_following(user_id, target_id),
            is_followed_by=self.follows_repo.is_following(target_id, user_id),
        )

    def get_follow_stats(self, user_id: str) -> FollowStats:
        return FollowStats(
            followers_count=self.follows_repo.get_follower_count(user_id),
            following_count=self.follows_repo.get_following_count(user_id),
        )

    def get_followers(self, user_id: str) -> List[Follow]:
        return self.follows_repo.get_followers(user_id)

    def get_following(self, user_id: str) -> List[Follow]:
        return self.follows_repo.get_following(user_id)

    def get_connections(self, user_id: str, tab: str, viewer_id: Optional[str]) -> List[Dict[str, Any]]:
        """
        Followers or following of ``user_id``, each annotated with the viewer's
        relationship to that profile.
        """
        if tab not in CONNECTION_TABS:
            raise ValueError(f"Unknown connections tab: {tab}")

        edges = self.get_followers(user_id) if tab == "followers" else self.get_following(user_id)
        other_ids = [e.profile.id for e in edges if e.profile is not None]

        viewer_follows = set()
        follows_viewer = set()
        if viewer_id:
            viewer_follows = self.follows_repo.get_following_ids(viewer_id, other_ids)
            follows_viewer = self.follows_repo.get_follower_ids(viewer_id, other_ids)

        connections = []
        for edge in edges:
            if edge.profile is None:
                continue
            pid = edge.profile.id
            is_self = viewer_id is not None and pid == str(viewer_id)
            connections.append({
                "profile": edge.profile,
                "followed_at": edge.created_at,
                "is_self": is_self,
                "follow_status": FollowStatus(
                    is_following=pid in viewer_follows and not is_self,
                    is_followed_by=pid in follows_viewer and not is_self,
                ),
            })
        return connections
