# app/api/notifications.py

from fastapi import APIRouter, Depends

from app.api.dependencies import get_current_user_id, get_notification_interactor
from app.infrastructure import schemas
from app.interactors.notification_interactor import NotificationInteractor

router = APIRouter()


@router.get("/", response_model=schemas.PendingNotifications)
async def read_pending_notifications(
    notification_interactor: NotificationInteractor = Depends(get_notification_interactor),
    current_user_id: str = Depends(get_current_user_id),
):
    return await notification_interactor.load_pending_notifications(current_user_id)
