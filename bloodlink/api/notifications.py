"""
Notification inbox endpoints
"""
from typing import List

from fastapi import APIRouter, Depends, Request

from bloodlink.database.schemas import Notification
from bloodlink.database.storage import Repository
from bloodlink.api.utils import get_repository, get_user_id
from bloodlink.services.notifications import get_notifications, mark_notification_as_read, unread_count

router = APIRouter()


@router.get("/notifications", response_model=List[Notification])
async def list_notifications(request: Request, unread_only: bool = False,
                             repository: Repository = Depends(get_repository)):
    return get_notifications(repository, get_user_id(request), unread_only=unread_only)


@router.get("/notifications/unread-count")
async def get_unread_count(request: Request, repository: Repository = Depends(get_repository)):
    return {"unread": unread_count(repository, get_user_id(request))}


@router.post("/notifications/{notification_id}/read", response_model=Notification)
async def read_notification(notification_id: str, request: Request,
                            repository: Repository = Depends(get_repository)):
    return mark_notification_as_read(repository, get_user_id(request), notification_id)
