"""
Notification HTTP routes.
"""
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session
from typing import List

from streakmate.database import get_db
from streakmate.auth import verify_api_key, get_current_user_id
from streakmate.schemas import NotificationResponse
from streakmate.services.notification_service import NotificationService
from streakmate.exceptions import NotificationNotFoundException

router = APIRouter(prefix="/api/notifications", tags=["notifications"], dependencies=[Depends(verify_api_key)])


@router.get("", response_model=List[NotificationResponse])
async def get_notifications(
    unread_only: bool = False,
    user_id: int = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    return NotificationService(db).list_for_user(user_id, unread_only)


@router.put("/{notification_id}/read", response_model=NotificationResponse)
async def mark_notification_read(
    notification_id: int,
    user_id: int = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    try:
        return NotificationService(db).mark_read(user_id, notification_id)
    except NotificationNotFoundException as e:
        raise HTTPException(status_code=404, detail=str(e))
