# app/interactors/conversation_interactor.py
import logging
from datetime import UTC, datetime

from app.domain.entities import MessageKind, PartyKind
from app.domain.errors import InvalidStateError, NotFoundError, PermissionDeniedError
from app.domain.events import ConversationChanged, MessageCreated, MessagesRead
from app.domain.rules import display_name
from app.gateways.gig_gateway import GigGateway
from app.gateways.interfaces import IConversationGateway, IMessageGateway
from app.gateways.user_gateway import UserGateway
from app.infrastructure import models, schemas
from app.infrastructure.event_dispatcher import EventDispatcher
from app.infrastructure.uow import UoWModel

DEFAULT_MESSAGE_LIMIT = 50
PREVIEW_LENGTH = 100


def conversation_changed(conversation: UoWModel) -> ConversationChanged:
    return ConversationChanged(
        conversation_id=conversation.id,
        gig_id=conversation.gig_id,
        venue_manager_id=conversation.venue_manager_id,
        artist_id=conversation.artist_id,
        unread_venue_manager=conversation.unread_venue_manager,
        unread_artist=conversation.unread_artist,
        is_active=conversation.is_active,
    )


class ConversationInteractor:
    def __init__(
        self,
        conversation_gateway: IConversationGateway,
        message_gateway: IMessageGateway,
        gig_gateway: GigGateway,
        user_gateway: UserGateway,
        event_dispatcher: EventDispatcher | None = None,
        logger: logging.Logger | None = None,
    ):
        self.conversation_gateway = conversation_gateway
        self.message_gateway = message_gateway
        self.gig_gateway = gig_gateway
        self.user_gateway = user_gateway
        self.event_dispatcher = event_dispatcher
        self.logger = logger or logging.getLogger(__name__)

    async def _dispatch(self, event) -> None:
        if self.event_dispatcher is not None:
            await self.event_dispatcher.dispatch(event)

    async def _name_of(self, user_id: str) -> str | None:
        user = await self.user_gateway.get_user(user_id)
        if user is None:
            return None
        return display_name(user.username, user.first_name, user.last_name)

    async def _get_for_party(self, conversation_id: str, user_id: str):
        conversation = await self.conversation_gateway.get_conversation(conversation_id)
        if conversation is None:
            raise NotFoundError("Conversation", conversation_id)
        party = schemas.Conversation.model_validate(conversation).party_of(user_id)
        if party is None:
            raise PermissionDeniedError("Not a party to this conversation")
        return conversation, party

    async def get_or_create_conversation(
        self, conversation: schemas.ConversationCreate, actor_id: str
    ) -> schemas.Conversation:
        gig = await self.gig_gateway.get_gig(conversation.gig_id)
        if gig is None:
            raise NotFoundError("Gig", conversation.gig_id)
        venue_manager_id = gig.created_by
        if actor_id not in (venue_manager_id, conversation.artist_id):
            raise PermissionDeniedError(
                "Only the venue manager or the artist can open this conversation"
            )

        existing = await self.conversation_gateway.find_active(
            conversation.gig_id, conversation.artist_id
        )
        if existing:
            return schemas.Conversation.model_validate(existing[0])

        artist_name = conversation.artist_name or await self._name_of(
            conversation.artist_id
        )
        if artist_name is None:
            raise NotFoundError("User", conversation.artist_id)
        venue_manager_name = await self._name_of(venue_manager_id) or gig.venue_name

        await self.conversation_gateway.create_conversation(
            gig_id=gig.id,
            gig_title=gig.title,
            venue_manager_id=venue_manager_id,
            venue_manager_name=venue_manager_name,
            artist_id=conversation.artist_id,
            artist_name=artist_name,
            artist_kind=conversation.artist_kind.value,
        )
        # a concurrent caller may have inserted too; everyone converges on the oldest
        survivor = await self.conversation_gateway.reconcile_duplicates(
            gig.id, conversation.artist_id
        )
        self.logger.info(
            f"Conversation {survivor.id} ready for gig {gig.id} and artist {conversation.artist_id}"
        )
        await self._dispatch(conversation_changed(survivor))
        return schemas.Conversation.model_validate(survivor)

    async def send_message(
        self,
        conversation_id: str,
        sender_id: str,
        message: schemas.MessageCreate,
        kind: MessageKind = MessageKind.TEXT,
    ) -> schemas.Message:
        conversation, party = await self._get_for_party(conversation_id, sender_id)
        if message.sender_kind is not None and message.sender_kind is not party:
            raise PermissionDeniedError(
                f"Sender is not the {message.sender_kind.value} of this conversation"
            )
        if not conversation.is_active:
            raise InvalidStateError(f"Conversation {conversation_id} is no longer active")

        if message.message_id is not None:
            stored = await self.message_gateway.get_message(message.message_id)
            if stored is not None:
                if stored.conversation_id != conversation_id or stored.sender_id != sender_id:
                    raise InvalidStateError(f"Message id {message.message_id} already used")
                return schemas.Message.model_validate(stored)

        if party is PartyKind.VENUE_MANAGER:
            sender_name, recipient_id = conversation.venue_manager_name, conversation.artist_id
            recipient_name = conversation.artist_name
        else:
            sender_name, recipient_id = conversation.artist_name, conversation.venue_manager_id
            recipient_name = conversation.venue_manager_name

        now = datetime.now(UTC)
        # the message row and the counter increment land in one commit
        try:
            created = await self.message_gateway.create_message(
                message_id=message.message_id or models.new_id(),
                conversation_id=conversation_id,
                gig_id=conversation.gig_id,
                sender_id=sender_id,
                sender_name=sender_name,
                sender_kind=party.value,
                recipient_id=recipient_id,
                recipient_name=recipient_name,
                body=message.body,
                kind=kind.value,
                timestamp=now,
            )
            updated = await self.conversation_gateway.record_message(
                conversation_id,
                sender_id=sender_id,
                recipient_kind=party.counterpart,
                preview=message.body[:PREVIEW_LENGTH],
                timestamp=now,
            )
        except Exception:
            await self.message_gateway.discard()
            raise

        result = schemas.Message.model_validate(created)
        await self._dispatch(
            MessageCreated(
                message_id=result.id,
                conversation_id=conversation_id,
                gig_id=result.gig_id,
                sender_id=sender_id,
                sender_name=sender_name,
                sender_kind=party.value,
                recipient_id=recipient_id,
                body=result.body,
                kind=result.kind.value,
                timestamp=result.timestamp,
            )
        )
        await self._dispatch(conversation_changed(updated))
        return result

    async def mark_read(self, conversation_id: str, reader_id: str) -> schemas.Conversation:
        conversation, party = await self._get_for_party(conversation_id, reader_id)
        message_ids = await self.message_gateway.mark_read(conversation_id, reader_id)
        updated = await self.conversation_gateway.reset_unread(conversation_id, party)
        if message_ids:
            await self._dispatch(
                MessagesRead(
                    conversation_id=conversation_id,
                    reader_id=reader_id,
                    message_ids=message_ids,
                )
            )
        await self._dispatch(conversation_changed(updated))
        return schemas.Conversation.model_validate(updated)

    async def list_messages(
        self, conversation_id: str, reader_id: str, limit: int | None = DEFAULT_MESSAGE_LIMIT
    ) -> list[schemas.Message]:
        await self._get_for_party(conversation_id, reader_id)
        messages = await self.message_gateway.get_all(conversation_id, limit)
        return [schemas.Message.model_validate(message) for message in messages]

    async def list_conversations(
        self, user_id: str, kind: PartyKind
    ) -> list[schemas.Conversation]:
        conversations = await self.conversation_gateway.list_for_user(user_id, kind)
        return [schemas.Conversation.model_validate(c) for c in conversations]

    async def total_unread(self, user_id: str, kind: PartyKind) -> schemas.TotalUnread:
        total = await self.conversation_gateway.total_unread(user_id, kind)
        return schemas.TotalUnread(total=total)
