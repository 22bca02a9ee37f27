"""
Shared dependencies for FastAPI routes.
"""

from typing import Optional

from fastapi import Header, HTTPException, Request

from repositories.follows_repo import FollowsRepository
from repositories.notifications_repo import NotificationsRepository
from repositories.posts_repo import PostsRepository
from repositories.profiles_repo import ProfilesRepository
from repositories.reactions_repo import ReactionsRepository
from services.auth_service import AuthService
from services.follow_service import FollowService
from services.image_service import ImageService
from services.notification_service import NotificationService
from services.post_service import PostService
from services.profile_service import ProfileService
from services.reaction_service import ReactionService
from services.storage_service import StorageService
from utils.logger import get_logger

logger = get_logger(__name__)


def get_session_token(request: Request, authorization: Optional[str] = None) -> Optional[str]:
    """Session token from ``Authorization: Bearer`` or, failing that, the session cookie."""
    if authorization and authorization.startswith("Bearer "):
        return authorization[7:].strip() or None
    return request.cookies.get(request.app.state.session_cookie_name)


async def get_current_user(
    request: Request,
    authorization: Optional[str] = Header(None),
) -> str:
    """
    Resolve the logged-in account id.
    Supports both:
    1. Session token header (API clients): Authorization: Bearer <session_token>
    2. Session cookie (browser)
    """
    session_token = get_session_token(request, authorization)
    if not session_token:
        raise HTTPException(status_code=401, detail="Not authenticated")

    user_id = request.app.state.auth_service.get_user_id(session_token)
    if not user_id:
        raise HTTPException(status_code=401, detail="Invalid or expired session")

    return user_id


async def get_current_user_optional(
    request: Request,
    authorization: Optional[str] = Header(None),
) -> Optional[str]:
    """Optional version of get_current_user that returns None if not authenticated."""
    try:
        return await get_current_user(request, authorization)
    except HTTPException:
        return None


def get_storage(request: Request) -> StorageService:
    return StorageService(
        root_dir=request.app.state.root_dir,
        public_base_url=request.app.state.public_base_url,
    )


def get_notification_service(request: Request) -> NotificationService:
    return NotificationService(NotificationsRepository())


def get_reaction_service(request: Request) -> ReactionService:
    return ReactionService(ReactionsRepository())


def get_post_service(request: Request) -> PostService:
    return PostService(
        posts_repo=PostsRepository(),
        reaction_service=get_reaction_service(request),
        notification_service=get_notification_service(request),
        storage=get_storage(request),
        image_service=ImageService(),
    )


def get_follow_service(request: Request) -> FollowService:
    return FollowService(FollowsRepository(), ProfilesRepository(), get_notification_service(request))


def get_profile_service(request: Request) -> ProfileService:
    return ProfileService(ProfilesRepository(), get_storage(request), ImageService())


def get_auth_service(request: Request) -> AuthService:
    return request.app.state.auth_service


def set_session_cookie(response, cookie_name: str, token: str, ttl_days: int) -> None:
    response.set_cookie(
        key=cookie_name,
        value=token,
        max_age=ttl_days * 24 * 60 * 60,
        httponly=True,
        samesite="lax",
        path="/",
    )
