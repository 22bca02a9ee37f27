"""
Onboarding, profile pages, profile editing and avatars.
"""

from typing import Optional

from fastapi import APIRouter, Depends, File, HTTPException, Query, UploadFile

from models.models import UploadedImage
from services.follow_service import CONNECTION_TABS, FollowService
from services.post_service import PostService
from services.profile_service import ProfileService
from utils.logger import get_logger
from ..dependencies import (
    get_current_user,
    get_current_user_optional,
    get_follow_service,
    get_post_service,
    get_profile_service,
)
from ..schemas import (
    ConnectionResponse,
    ConnectionsResponse,
    FollowStatsResponse,
    FollowStatusResponse,
    OnboardingRequest,
    ProfilePageResponse,
    ProfileResponse,
    ProfileUpdateRequest,
    ThreadNodeResponse,
    action_payload,
)

router = APIRouter(prefix="/api", tags=["profiles"])
logger = get_logger(__name__)


@router.post("/onboarding")
async def complete_onboarding(
    onboarding_request: OnboardingRequest,
    user_id: Optional[str] = Depends(get_current_user_optional),
    profile_service: ProfileService = Depends(get_profile_service),
):
    try:
        result = profile_service.complete_onboarding(
            user_id,
            username=onboarding_request.username,
            display_name=onboarding_request.display_name,
            bio=onboarding_request.bio,
            interests=onboarding_request.interests,
        )
        return {**action_payload(result), "next": "/home" if result.success else None}
    except Exception as e:
        logger.exception(f"Error completing onboarding for user {user_id}: {e}")
        raise HTTPException(status_code=500, detail=f"Failed to complete onboarding: {str(e)}")


@router.get("/onboarding/username-available")
async def check_username_available(
    username: str = Query(...),
    user_id: Optional[str] = Depends(get_current_user_optional),
    profile_service: ProfileService = Depends(get_profile_service),
):
    try:
        return {
            "username": username,
            "available": profile_service.check_username_availability(username, user_id),
        }
    except Exception as e:
        logger.exception(f"Error checking username {username!r}: {e}")
        raise HTTPException(status_code=500, detail=f"Failed to check username: {str(e)}")


@router.get("/profile", response_model=ProfileResponse)
async def get_own_profile(
    user_id: str = Depends(get_current_user),
    profile_service: ProfileService = Depends(get_profile_service),
):
    """Profile being edited on the profile settings page."""
    try:
        profile = profile_service.get_profile(user_id)
        if not profile:
            raise HTTPException(status_code=404, detail="Profile not found")
        return ProfileResponse.model_validate(profile)
    except HTTPException:
        raise
    except Exception as e:
        logger.exception(f"Error getting profile for user {user_id}: {e}")
        raise HTTPException(status_code=500, detail=f"Failed to get profile: {str(e)}")


@router.patch("/profile")
async def update_profile(
    update_request: ProfileUpdateRequest,
    user_id: str = Depends(get_current_user),
    profile_service: ProfileService = Depends(get_profile_service),
):
    try:
        result = profile_service.update_profile(
            user_id,
            display_name=update_request.display_name,
            bio=update_request.bio,
            interests=update_request.interests,
        )
        return action_payload(result)
    except Exception as e:
        logger.exception(f"Error updating profile for user {user_id}: {e}")
        raise HTTPException(status_code=500, detail=f"Failed to update profile: {str(e)}")


@router.post("/profile/avatar")
async def upload_avatar(
    avatar: UploadFile = File(...),
    user_id: str = Depends(get_current_user),
    profile_service: ProfileService = Depends(get_profile_service),
):
    try:
        upload = UploadedImage(
            filename=avatar.filename or "",
            content_type=avatar.content_type or "",
            data=await avatar.read(),
        )
        result = profile_service.update_avatar(user_id, upload)
        return action_payload(result)
    except Exception as e:
        logger.exception(f"Error updating avatar for user {user_id}: {e}")
        raise HTTPException(status_code=500, detail=f"Failed to update avatar: {str(e)}")


@router.delete("/profile/avatar")
async def delete_avatar(
    user_id: str = Depends(get_current_user),
    profile_service: ProfileService = Depends(get_profile_service),
):
    try:
        return action_payload(profile_service.remove_avatar(user_id))
    except Exception as e:
        logger.exception(f"Error removing avatar for user {user_id}: {e}")
        raise HTTPException(status_code=500, detail=f"Failed to remove avatar: {str(e)}")


@router.get("/profile/{username}", response_model=ProfilePageResponse)
async def get_profile_page(
    username: str,
    viewer_id: Optional[str] = Depends(get_current_user_optional),
    profile_service: ProfileService = Depends(get_profile_service),
    post_service: PostService = Depends(get_post_service),
    follow_service: FollowService = Depends(get_follow_service),
):
    """A user's profile with their top-level posts and the viewer's relationship to them."""
    try:
        profile = profile_service.get_profile_by_username(username)
        if not profile:
            raise HTTPException(status_code=404, detail="Profile not found")

        posts = post_service.get_posts_by_user(profile.id)
        threads = post_service.build_threads(posts, viewer_id)
        status = follow_service.get_follow_status(viewer_id, profile.id)
        is_own_profile = viewer_id is not None and viewer_id == profile.id

        return ProfilePageResponse(
            profile=ProfileResponse.model_validate(profile),
            posts=[ThreadNodeResponse.model_validate(t) for t in threads],
            follow_status=FollowStatusResponse.model_validate(status),
            follow_stats=FollowStatsResponse.model_validate(follow_service.get_follow_stats(profile.id)),
            is_own_profile=is_own_profile,
            relationship="self" if is_own_profile else status.label,
        )
    except HTTPException:
        raise
    except Exception as e:
        logger.exception(f"Error getting profile page for {username!r}: {e}")
        raise HTTPException(status_code=500, detail=f"Failed to get profile: {str(e)}")


@router.get("/profile/{username}/connections", response_model=ConnectionsResponse)
async def get_connections(
    username: str,
    tab: str = Query("followers"),
    viewer_id: Optional[str] = Depends(get_current_user_optional),
    profile_service: ProfileService = Depends(get_profile_service),
    follow_service: FollowService = Depends(get_follow_service),
):
    """Followers or following list of a profile."""
    try:
        if tab not in CONNECTION_TABS:
            raise HTTPException(status_code=400, detail=f"tab must be one of {', '.join(CONNECTION_TABS)}")

        profile = profile_service.get_profile_by_username(username)
        if not profile:
            raise HTTPException(status_code=404, detail="Profile not found")

        connections = follow_service.get_connections(profile.id, tab, viewer_id)
        return ConnectionsResponse(
            profile=ProfileResponse.model_validate(profile),
            tab=tab,
            follow_stats=FollowStatsResponse.model_validate(follow_service.get_follow_stats(profile.id)),
            connections=[
                ConnectionResponse(
                    profile=ProfileResponse.model_validate(c["profile"]),
                    followed_at=c["followed_at"],
                    is_self=c["is_self"],
                    follow_status=FollowStatusResponse.model_validate(c["follow_status"]),
                )
                for c in connections
            ],
        )
    except HTTPException:
        raise
    except Exception as e:
        logger.exception(f"Error getting {tab} of {username!r}: {e}")
        raise HTTPException(status_code=500, detail=f"Failed to get connections: {str(e)}")
