from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional


@dataclass
class Account:
    id: str
    email: str
    password_hash: str
    created_at: Optional[str] = None


@dataclass
class AuthSession:
    session_token: str
    user_id: str
    created_at: datetime
    expires_at: datetime


@dataclass
class Profile:
    id: str
    username: str
    display_name: Optional[str] = None
    bio: Optional[str] = None
    avatar_url: Optional[str] = None
    interests: List[str] = field(default_factory=list)
    onboarding_completed: bool = False
    created_at: Optional[str] = None
    updated_at: Optional[str] = None

    @property
    def name(self) -> str:
        return self.display_name or self.username


@dataclass
class Post:
    id: str
    user_id: str
    content: str
    tags: List[str] = field(default_factory=list)
    image_urls: List[str] = field(default_factory=list)
    parent_post_id: Optional[str] = None
    created_at: Optional[str] = None
    author: Optional[Profile] = None  # joined on read

    @property
    def is_reply(self) -> bool:
        return self.parent_post_id is not None


@dataclass
class Reaction:
    id: str
    post_id: str
    user_id: str
    emoji: str
    created_at: Optional[str] = None


@dataclass
class ReactionCount:
    emoji: str
    count: int
    user_reacted: bool


@dataclass
class Follow:
    id: str
    follower_id: str
    following_id: str
    created_at: Optional[str] = None
    profile: Optional[Profile] = None  # the "other side" of the edge, joined on read


@dataclass
class FollowStatus:
    is_following: bool = False      # viewer follows target
    is_followed_by: bool = False    # target follows viewer

    @property
    def is_mutual(self) -> bool:
        return self.is_following and self.is_followed_by

    @property
    def label(self) -> str:
        if self.is_mutual:
            return "mutual"
        if self.is_following:
            return "following"
        if self.is_followed_by:
            return "followed_by"
        return "none"


@dataclass
class FollowStats:
    followers_count: int = 0
    following_count: int = 0


@dataclass
class Notification:
    id: str
    user_id: str
    actor_id: str
    type: str
    post_id: Optional[str] = None
    reaction_emoji: Optional[str] = None
    is_read: bool = False
    created_at: Optional[str] = None
    actor: Optional[Profile] = None
    post_excerpt: Optional[Dict[str, str]] = None


@dataclass
class ThreadNode:
    """A post positioned in a reply thread, with what the viewer may do to it."""
    post: Post
    depth: int
    can_reply: bool
    can_delete: bool
    can_react: bool
    reactions: List[ReactionCount] = field(default_factory=list)
    replies: List["ThreadNode"] = field(default_factory=list)


@dataclass
class UploadedImage:
    """Raw upload as received from a multipart form."""
    filename: str
    content_type: str
    data: bytes

    @property
    def size(self) -> int:
        return len(self.data)


@dataclass
class ActionResult:
    """Outcome of a user action, mirroring what the UI shows."""
    success: bool
    error: Optional[str] = None
    data: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def ok(cls, **data: Any) -> "ActionResult":
        return cls(success=True, data=data)

    @classmethod
    def fail(cls, error: str) -> "ActionResult":
        return cls(success=False, error=error)
