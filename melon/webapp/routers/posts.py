"""
Post endpoints: create, reply, delete, react and the single-post page.
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, File, Form, HTTPException, UploadFile

from models.enums import PRESET_EMOJIS
from models.models import UploadedImage
from services.post_service import PostService
from services.reaction_service import ReactionService
from utils.logger import get_logger
from ..dependencies import get_current_user_optional, get_post_service, get_reaction_service
from ..schemas import PostPageResponse, ReactionRequest, ReplyRequest, ThreadNodeResponse, action_payload

router = APIRouter(prefix="/api", tags=["posts"])
logger = get_logger(__name__)


@router.post("/posts")
async def create_post(
    content: str = Form(""),
    tags: List[str] = Form([]),
    images: List[UploadFile] = File([]),
    user_id: Optional[str] = Depends(get_current_user_optional),
    post_service: PostService = Depends(get_post_service),
):
    """Create a top-level post from a multipart form (content, tags, up to 4 images)."""
    try:
        uploads = [
            UploadedImage(
                filename=image.filename or "",
                content_type=image.content_type or "",
                data=await image.read(),
            )
            for image in images
        ]
        result = post_service.create_post(user_id, content, tags, uploads)
        return action_payload(result)
    except Exception as e:
        logger.exception(f"Error creating post for user {user_id}: {e}")
        raise HTTPException(status_code=500, detail=f"Failed to create post: {str(e)}")


@router.get("/posts/{post_id}", response_model=PostPageResponse)
async def get_post_page(
    post_id: str,
    viewer_id: Optional[str] = Depends(get_current_user_optional),
    post_service: PostService = Depends(get_post_service),
):
    try:
        post = post_service.get_post_by_id(post_id)
        if not post:
            raise HTTPException(status_code=404, detail="Post not found")
        thread = post_service.build_thread(post, viewer_id)
        return PostPageResponse(
            thread=ThreadNodeResponse.model_validate(thread),
            available_emojis=PRESET_EMOJIS,
        )
    except HTTPException:
        raise
    except Exception as e:
        logger.exception(f"Error getting post {post_id}: {e}")
        raise HTTPException(status_code=500, detail=f"Failed to get post: {str(e)}")


@router.post("/posts/{post_id}/replies")
async def create_reply(
    post_id: str,
    reply_request: ReplyRequest,
    user_id: Optional[str] = Depends(get_current_user_optional),
    post_service: PostService = Depends(get_post_service),
):
    try:
        result = post_service.create_reply(user_id, post_id, reply_request.content)
        return action_payload(result)
    except Exception as e:
        logger.exception(f"Error replying to post {post_id}: {e}")
        raise HTTPException(status_code=500, detail=f"Failed to create reply: {str(e)}")


@router.delete("/posts/{post_id}")
async def delete_post(
    post_id: str,
    user_id: Optional[str] = Depends(get_current_user_optional),
    post_service: PostService = Depends(get_post_service),
):
    try:
        result = post_service.delete_post(user_id, post_id)
        return action_payload(result)
    except Exception as e:
        logger.exception(f"Error deleting post {post_id}: {e}")
        raise HTTPException(status_code=500, detail=f"Failed to delete post: {str(e)}")


@router.post("/posts/{post_id}/reactions")
async def toggle_reaction(
    post_id: str,
    reaction_request: ReactionRequest,
    user_id: Optional[str] = Depends(get_current_user_optional),
    reaction_service: ReactionService = Depends(get_reaction_service),
):
    """Toggle the caller's reaction. Same emoji removes it, another emoji switches it."""
    try:
        result = reaction_service.toggle_reaction(user_id, post_id, reaction_request.emoji)
        return action_payload(result)
    except Exception as e:
        logger.exception(f"Error toggling reaction on post {post_id}: {e}")
        raise HTTPException(status_code=500, detail=f"Failed to toggle reaction: {str(e)}")
