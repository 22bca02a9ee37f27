"""
Notification endpoints.
"""

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from services.notification_service import NotificationService
from utils.logger import get_logger
from ..dependencies import get_current_user, get_current_user_optional, get_notification_service
from ..schemas import NotificationResponse, NotificationsResponse, action_payload

router = APIRouter(prefix="/api/notifications", tags=["notifications"])
logger = get_logger(__name__)


@router.get("", response_model=NotificationsResponse)
async def list_notifications(
    limit: int = Query(50, ge=1, le=200),
    user_id: str = Depends(get_current_user),
    notification_service: NotificationService = Depends(get_notification_service),
):
    try:
        notifications = notification_service.get_notifications(user_id, limit=limit)
        return NotificationsResponse(
            notifications=[NotificationResponse.model_validate(n) for n in notifications],
            unread_count=notification_service.get_unread_count(user_id),
        )
    except Exception as e:
        logger.exception(f"Error listing notifications for user {user_id}: {e}")
        raise HTTPException(status_code=500, detail=f"Failed to get notifications: {str(e)}")


@router.get("/unread-count")
async def get_unread_count(
    user_id: Optional[str] = Depends(get_current_user_optional),
    notification_service: NotificationService = Depends(get_notification_service),
):
    """Badge count for the header. Zero when logged out."""
    try:
        return {"unread_count": notification_service.get_unread_count(user_id)}
    except Exception as e:
        logger.exception(f"Error counting notifications for user {user_id}: {e}")
        raise HTTPException(status_code=500, detail=f"Failed to count notifications: {str(e)}")


@router.post("/read-all")
async def mark_all_as_read(
    user_id: Optional[str] = Depends(get_current_user_optional),
    notification_service: NotificationService = Depends(get_notification_service),
):
    try:
        return action_payload(notification_service.mark_all_as_read(user_id))
    except Exception as e:
        logger.exception(f"Error marking notifications read for user {user_id}: {e}")
        raise HTTPException(status_code=500, detail=f"Failed to update notifications: {str(e)}")


@router.post("/{notification_id}/read")
async def mark_as_read(
    notification_id: str,
    user_id: Optional[str] = Depends(get_current_user_optional),
    notification_service: NotificationService = Depends(get_notification_service),
):
    try:
        return action_payload(notification_service.mark_as_read(user_id, notification_id))
    except Exception as e:
        logger.exception(f"Error marking notification {notification_id} read: {e}")
        raise HTTPException(status_code=500, detail=f"Failed to update notification: {str(e)}")
