"""
Pydantic models for API requests and responses.
"""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, model_validator

from models.models import ActionResult
from utils.time_utils import format_relative_time


def action_payload(result: ActionResult) -> Dict[str, Any]:
    """Flatten an ActionResult into the {"success", "error", ...} mutation response."""
    payload: Dict[str, Any] = {"success": result.success, "error": result.error}
    payload.update(result.data)
    return payload


class _FromAttributes(BaseModel):
    model_config = ConfigDict(from_attributes=True)


class _TimestampedResponse(_FromAttributes):
    """Adds a display label such as "5m ago" for ``created_at``."""
    created_at: Optional[str] = None
    created_at_label: Optional[str] = None

    @model_validator(mode="after")
    def fill_created_at_label(self):
        if self.created_at_label is None:
            self.created_at_label = format_relative_time(self.created_at)
        return self


# ---------------------------------------------------------------------------
# Requests
# ---------------------------------------------------------------------------

class SignupRequest(BaseModel):
    email: str
    password: str
    confirm_password: str


class LoginRequest(BaseModel):
    email: str
    password: str


class OnboardingRequest(BaseModel):
    username: str
    display_name: Optional[str] = None
    bio: Optional[str] = None
    interests: List[str] = []


class ProfileUpdateRequest(BaseModel):
    display_name: Optional[str] = None
    bio: Optional[str] = None
    interests: List[str] = []


class ReplyRequest(BaseModel):
    content: str


class ReactionRequest(BaseModel):
    emoji: str


# ---------------------------------------------------------------------------
# Responses
# ---------------------------------------------------------------------------

class AuthorResponse(_FromAttributes):
    """Public subset of a profile shown next to posts and notifications."""
    id: str
    username: str
    display_name: Optional[str] = None
    avatar_url: Optional[str] = None


class ProfileResponse(AuthorResponse):
    bio: Optional[str] = None
    interests: List[str] = []
    onboarding_completed: bool = False
    created_at: Optional[str] = None


class PostResponse(_TimestampedResponse):
    id: str
    user_id: str
    content: str
    tags: List[str] = []
    image_urls: List[str] = []
    parent_post_id: Optional[str] = None
    author: Optional[AuthorResponse] = None


class ReactionCountResponse(_FromAttributes):
    emoji: str
    count: int
    user_reacted: bool


class ThreadNodeResponse(_FromAttributes):
    post: PostResponse
    depth: int
    can_reply: bool
    can_delete: bool
    can_react: bool
    reactions: List[ReactionCountResponse] = []
    replies: List["ThreadNodeResponse"] = []


class FeedResponse(BaseModel):
    posts: List[ThreadNodeResponse]


class PostPageResponse(BaseModel):
    thread: ThreadNodeResponse
    available_emojis: List[str]


class FollowStatusResponse(_FromAttributes):
    is_following: bool
    is_followed_by: bool
    is_mutual: bool
    label: str


class FollowStatsResponse(_FromAttributes):
    followers_count: int
    following_count: int


class ProfilePageResponse(BaseModel):
    profile: ProfileResponse
    posts: List[ThreadNodeResponse]
    follow_status: FollowStatusResponse
    follow_stats: FollowStatsResponse
    is_own_profile: bool
    relationship: str


class ConnectionResponse(BaseModel):
    profile: ProfileResponse
    followed_at: Optional[str] = None
    is_self: bool
    follow_status: FollowStatusResponse


class ConnectionsResponse(BaseModel):
    profile: ProfileResponse
    tab: str
    follow_stats: FollowStatsResponse
    connections: List[ConnectionResponse]


class PostExcerptResponse(BaseModel):
    id: str
    content: str


class NotificationResponse(_TimestampedResponse):
    id: str
    type: str
    post_id: Optional[str] = None
    reaction_emoji: Optional[str] = None
    is_read: bool
    actor: Optional[AuthorResponse] = None
    post_excerpt: Optional[PostExcerptResponse] = None


class NotificationsResponse(BaseModel):
    notifications: List[NotificationResponse]
    unread_count: int


class TagPageResponse(BaseModel):
    tag: str
    label: str
    count: int
    posts: List[ThreadNodeResponse]
