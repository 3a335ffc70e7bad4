# app/infrastructure/event_handlers.py
import logging
from typing import Any

from redis.exceptions import RedisError

from app.domain.entities import PartyKind
from app.domain.events import (
    ConversationChanged,
    InvitationAccepted,
    InvitationDeclined,
    InvitationEvent,
    InvitationSent,
    MessageCreated,
    MessagesRead,
)
from app.infrastructure.redis_client import RedisClient


class EventHandlers:
    """Fans domain events out to Redis channels for out-of-process clients."""

    def __init__(self, redis_client: RedisClient, logger: logging.Logger | None = None):
        self.redis_client = redis_client
        self.logger = logger or logging.getLogger(__name__)

    async def _publish(self, channel: str, payload: dict[str, Any]) -> None:
        # the database already holds the change; a lost notification is not an error
        try:
            await self.redis_client.publish_json(channel, payload)
        except (RedisError, RuntimeError) as e:
            self.logger.error(f"Failed to publish to {channel}: {e!s}")

    async def publish_message_created(self, event: MessageCreated):
        message_data = event.model_dump(mode="json")
        message_data["id"] = message_data.pop("message_id")
        await self._publish(f"conversation:{event.conversation_id}", message_data)

    async def publish_messages_read(self, event: MessagesRead):
        await self._publish(
            f"conversation:{event.conversation_id}:read",
            {"reader_id": event.reader_id, "message_ids": event.message_ids},
        )

    async def publish_conversation_changed(self, event: ConversationChanged):
        base = {
            "conversation_id": event.conversation_id,
            "gig_id": event.gig_id,
            "is_active": event.is_active,
        }
        await self._publish(
            f"user:{event.venue_manager_id}:conversations",
            {**base, "unread_count": event.unread_venue_manager},
        )
        await self._publish(
            f"user:{event.artist_id}:conversations",
            {**base, "unread_count": event.unread_artist},
        )

    async def publish_invitation_event(self, event: InvitationEvent, kind: str):
        payload = event.model_dump(mode="json")
        payload["type"] = kind
        await self._publish(f"user:{event.invited_user_id}:notifications", payload)

    async def publish_invitation_sent(self, event: InvitationSent):
        await self.publish_invitation_event(event, "invitation_sent")

    async def publish_invitation_accepted(self, event: InvitationAccepted):
        await self.publish_invitation_event(event, "invitation_accepted")

    async def publish_invitation_declined(self, event: InvitationDeclined):
        await self.publish_invitation_event(event, "invitation_declined")

    async def publish_unread_total(self, user_id: str, kind: PartyKind, total: int):
        await self._publish(
            f"user:{user_id}:unread_total", {"kind": kind.value, "total": total}
        )
