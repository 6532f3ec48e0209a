from typing import List

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel

from app.api.dependencies import get_notification_service
from app.services.storage.notifications import Notification, NotificationService

router = APIRouter()


class NotificationCreate(BaseModel):
    title: str
    message: str
    type: str = "info"


@router.get("", response_model=List[Notification])
async def list_notifications(service: NotificationService = Depends(get_notification_service)):
    return service.list_notifications()


@router.post("", response_model=Notification, status_code=status.HTTP_201_CREATED)
async def create_notification(
    body: NotificationCreate,
    service: NotificationService = Depends(get_notification_service),
):
    return service.add_notification(body.title, body.message, body.type)


@router.put("/{notification_id}/read", response_model=Notification)
async def mark_notification_read(
    notification_id: str,
    service: NotificationService = Depends(get_notification_service),
):
    note = service.mark_read(notification_id)
    if note is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Notification not found")
    return note
