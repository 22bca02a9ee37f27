"""
Follow / unfollow endpoints.
"""

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException

from services.follow_service import FollowService
from utils.logger import get_logger
from ..dependencies import get_current_user_optional, get_follow_service
from ..schemas import FollowStatsResponse, FollowStatusResponse, action_payload

router = APIRouter(prefix="/api/users", tags=["follows"])
logger = get_logger(__name__)


@router.post("/{target_user_id}/follow")
async def follow_user(
    target_user_id: str,
    user_id: Optional[str] = Depends(get_current_user_optional),
    follow_service: FollowService = Depends(get_follow_service),
):
    try:
        return action_payload(follow_service.follow_user(user_id, target_user_id))
    except Exception as e:
        logger.exception(f"Error following user {target_user_id}: {e}")
        raise HTTPException(status_code=500, detail=f"Failed to follow user: {str(e)}")


@router.delete("/{target_user_id}/follow")
async def unfollow_user(
    target_user_id: str,
    user_id: Optional[str] = Depends(get_current_user_optional),
    follow_service: FollowService = Depends(get_follow_service),
):
    try:
        return action_payload(follow_service.unfollow_user(user_id, target_user_id))
    except Exception as e:
        logger.exception(f"Error unfollowing user {target_user_id}: {e}")
        raise HTTPException(status_code=500, detail=f"Failed to unfollow user: {str(e)}")


@router.get("/{target_user_id}/follow-status")
async def get_follow_status(
    target_user_id: str,
    user_id: Optional[str] = Depends(get_current_user_optional),
    follow_service: FollowService = Depends(get_follow_service),
):
    """Viewer's relationship to the target plus the target's counts. Anonymous viewers get all-false."""
    try:
        status = follow_service.get_follow_status(user_id, target_user_id)
        stats = follow_service.get_follow_stats(target_user_id)
        return {
            "follow_status": FollowStatusResponse.model_validate(status),
            "follow_stats": FollowStatsResponse.model_validate(stats),
        }
    except Exception as e:
        logger.exception(f"Error getting follow status for {target_user_id}: {e}")
        raise HTTPException(status_code=500, detail=f"Failed to get follow status: {str(e)}")
