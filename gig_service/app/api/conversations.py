# app/api/conversations.py
from functools import partial

from fastapi import APIRouter, Depends, Query, status

from app.api.dependencies import (
    get_conversation_interactor,
    get_current_user_id,
    get_event_handlers,
    get_subscription_service,
)
from app.domain.entities import PartyKind
from app.domain.errors import NotFoundError
from app.infrastructure import schemas
from app.infrastructure.event_handlers import EventHandlers
from app.infrastructure.subscriptions import SubscriptionService
from app.interactors.conversation_interactor import ConversationInteractor

router = APIRouter()


@router.post("/", response_model=schemas.Conversation)
async def get_or_create_conversation(
    conversation: schemas.ConversationCreate,
    conversation_interactor: ConversationInteractor = Depends(get_conversation_interactor),
    current_user_id: str = Depends(get_current_user_id),
):
    return await conversation_interactor.get_or_create_conversation(
        conversation, current_user_id
    )


@router.get("/", response_model=list[schemas.Conversation])
async def read_conversations(
    kind: PartyKind = Query(..., description="Which side of the conversations to list"),
    conversation_interactor: ConversationInteractor = Depends(get_conversation_interactor),
    current_user_id: str = Depends(get_current_user_id),
):
    return await conversation_interactor.list_conversations(current_user_id, kind)


@router.get("/unread_count", response_model=schemas.TotalUnread)
async def read_unread_count(
    kind: PartyKind = Query(...),
    conversation_interactor: ConversationInteractor = Depends(get_conversation_interactor),
    current_user_id: str = Depends(get_current_user_id),
):
    return await conversation_interactor.total_unread(current_user_id, kind)


@router.post("/unread_count/live", response_model=schemas.TotalUnread)
async def open_unread_feed(
    kind: PartyKind = Query(...),
    subscriptions: SubscriptionService = Depends(get_subscription_service),
    event_handlers: EventHandlers = Depends(get_event_handlers),
    current_user_id: str = Depends(get_current_user_id),
):
    """Publish the total to user:{id}:unread_total now and after every change."""
    feed = await subscriptions.open_unread_feed(
        current_user_id,
        kind,
        partial(event_handlers.publish_unread_total, current_user_id, kind),
    )
    return schemas.TotalUnread(total=feed.last_value)


@router.delete("/unread_count/live", status_code=status.HTTP_204_NO_CONTENT)
async def close_unread_feed(
    kind: PartyKind = Query(...),
    subscriptions: SubscriptionService = Depends(get_subscription_service),
    current_user_id: str = Depends(get_current_user_id),
):
    if not subscriptions.close_unread_feed(current_user_id, kind):
        raise NotFoundError("Unread feed", f"{kind.value}:{current_user_id}")


@router.get("/{conversation_id}/messages", response_model=list[schemas.Message])
async def read_messages(
    conversation_id: str,
    limit: int = Query(50, ge=1, le=500),
    conversation_interactor: ConversationInteractor = Depends(get_conversation_interactor),
    current_user_id: str = Depends(get_current_user_id),
):
    return await conversation_interactor.list_messages(
        conversation_id, current_user_id, limit
    )


@router.post("/{conversation_id}/messages", response_model=schemas.Message)
async def send_message(
    conversation_id: str,
    message: schemas.MessageCreate,
    conversation_interactor: ConversationInteractor = Depends(get_conversation_interactor),
    current_user_id: str = Depends(get_current_user_id),
):
    return await conversation_interactor.send_message(
        conversation_id, current_user_id, message
    )


@router.post("/{conversation_id}/read", response_model=schemas.Conversation)
async def mark_read(
    conversation_id: str,
    conversation_interactor: ConversationInteractor = Depends(get_conversation_interactor),
    current_user_id: str = Depends(get_current_user_id),
):
    return await conversation_interactor.mark_read(conversation_id, current_user_id)
