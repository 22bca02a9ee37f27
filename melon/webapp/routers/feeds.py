"""
Feed pages: home, everyone and tag listings.
"""

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from services.post_service import PostService
from services.profile_service import ProfileService
from utils.logger import get_logger
from utils.page_cache import get_page_cache
from utils.tags import normalize_tag, tag_label
from ..dependencies import get_current_user, get_current_user_optional, get_post_service, get_profile_service
from ..schemas import FeedResponse, TagPageResponse, ThreadNodeResponse

router = APIRouter(prefix="/api", tags=["feeds"])
logger = get_logger(__name__)


def _feed_response(threads) -> dict:
    # Cache entries hold thread nodes; time labels are rendered per response.
    return FeedResponse(posts=[ThreadNodeResponse.model_validate(t) for t in threads]).model_dump()


@router.get("/home")
async def get_home(
    limit: int = Query(50, ge=1, le=200),
    user_id: str = Depends(get_current_user),
    profile_service: ProfileService = Depends(get_profile_service),
    post_service: PostService = Depends(get_post_service),
):
    """Own posts and posts of followed users. Requires a completed profile."""
    try:
        if profile_service.needs_onboarding(user_id):
            raise HTTPException(status_code=409, detail="onboarding_required")

        threads = get_page_cache().get_or_build(
            "/home",
            (user_id, limit),
            lambda: post_service.build_threads(post_service.get_home_feed(user_id, limit=limit), user_id),
        )
        return _feed_response(threads)
    except HTTPException:
        raise
    except Exception as e:
        logger.exception(f"Error getting home feed for user {user_id}: {e}")
        raise HTTPException(status_code=500, detail=f"Failed to get home feed: {str(e)}")


@router.get("/everyone")
async def get_everyone(
    limit: int = Query(50, ge=1, le=200),
    viewer_id: Optional[str] = Depends(get_current_user_optional),
    post_service: PostService = Depends(get_post_service),
):
    """Every top-level post, newest first."""
    try:
        threads = get_page_cache().get_or_build(
            "/everyone",
            (viewer_id, limit),
            lambda: post_service.build_threads(post_service.get_posts(limit=limit), viewer_id),
        )
        return _feed_response(threads)
    except Exception as e:
        logger.exception(f"Error getting everyone feed: {e}")
        raise HTTPException(status_code=500, detail=f"Failed to get feed: {str(e)}")


@router.get("/tags/{slug}", response_model=TagPageResponse)
async def get_tag_page(
    slug: str,
    viewer_id: Optional[str] = Depends(get_current_user_optional),
    post_service: PostService = Depends(get_post_service),
):
    try:
        tag = normalize_tag(slug)
        if not tag:
            raise HTTPException(status_code=404, detail="Tag not found")
        posts = post_service.get_posts_by_tag(tag)
        threads = post_service.build_threads(posts, viewer_id)
        return TagPageResponse(
            tag=tag,
            label=tag_label(tag),
            count=len(posts),
            posts=[ThreadNodeResponse.model_validate(t) for t in threads],
        )
    except HTTPException:
        raise
    except Exception as e:
        logger.exception(f"Error getting tag page {slug!r}: {e}")
        raise HTTPException(status_code=500, detail=f"Failed to get tag: {str(e)}")
