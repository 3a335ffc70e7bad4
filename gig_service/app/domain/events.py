# app/domain/events.py
from datetime import datetime

from pydantic import BaseModel


class Event(BaseModel):
    pass


class MessageCreated(Event):
    message_id: str
    conversation_id: str
    gig_id: str
    sender_id: str
    sender_name: str
    sender_kind: str
    recipient_id: str
    body: str
    kind: str
    timestamp: datetime


class MessagesRead(Event):
    conversation_id: str
    reader_id: str
    message_ids: list[str]


class ConversationChanged(Event):
    """Any insert or update of a conversation document."""

    conversation_id: str
    gig_id: str
    venue_manager_id: str
    artist_id: str
    unread_venue_manager: int
    unread_artist: int
    is_active: bool


class InvitationEvent(Event):
    invitation_id: str
    band_id: str
    band_name: str
    invited_user_id: str
    role: str


class InvitationSent(InvitationEvent):
    invited_by: str
    expires_at: datetime


class InvitationAccepted(InvitationEvent):
    pass


class InvitationDeclined(InvitationEvent):
    pass
