# app/gateways/conversation_gateway.py
from datetime import UTC, datetime

from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from app.domain.entities import PartyKind
from app.domain.rules import as_utc
from app.gateways.base import SessionGateway
from app.gateways.interfaces import IConversationGateway
from app.infrastructure import models
from app.infrastructure.data_mappers import ConversationMapper
from app.infrastructure.uow import UnitOfWork, UoWModel


def unread_column(kind: PartyKind):
    if kind is PartyKind.VENUE_MANAGER:
        return models.Conversation.unread_venue_manager
    return models.Conversation.unread_artist


def party_column(kind: PartyKind):
    if kind is PartyKind.VENUE_MANAGER:
        return models.Conversation.venue_manager_id
    return models.Conversation.artist_id


class ConversationGateway(SessionGateway, IConversationGateway):
    def __init__(self, session: AsyncSession, uow: UnitOfWork):
        super().__init__(session, uow)
        uow.mappers[models.Conversation] = ConversationMapper(session)

    async def get_conversation(self, conversation_id: str) -> UoWModel | None:
        stmt = (
            select(models.Conversation)
            .filter(models.Conversation.id == conversation_id)
            .execution_options(populate_existing=True)
        )
        return await self.fetch_one(stmt)

    async def find_active(self, gig_id: str, artist_id: str) -> list[UoWModel]:
        stmt = (
            select(models.Conversation)
            .filter(
                models.Conversation.gig_id == gig_id,
                models.Conversation.artist_id == artist_id,
                models.Conversation.is_active.is_(True),
            )
            .order_by(models.Conversation.created_at, models.Conversation.id)
            .execution_options(populate_existing=True)
        )
        return await self.fetch_all(stmt)

    async def create_conversation(
        self,
        gig_id: str,
        gig_title: str,
        venue_manager_id: str,
        venue_manager_name: str,
        artist_id: str,
        artist_name: str,
        artist_kind: str,
    ) -> UoWModel:
        now = datetime.now(UTC)
        db_conversation = models.Conversation(
            id=models.new_id(),
            gig_id=gig_id,
            gig_title=gig_title,
            venue_manager_id=venue_manager_id,
            venue_manager_name=venue_manager_name,
            artist_id=artist_id,
            artist_name=artist_name,
            artist_kind=artist_kind,
            unread_venue_manager=0,
            unread_artist=0,
            is_active=True,
            created_at=now,
            updated_at=now,
        )
        uow_conversation = self.uow.register_new(db_conversation)
        await self.uow.commit()
        return uow_conversation

    async def reconcile_duplicates(self, gig_id: str, artist_id: str) -> UoWModel | None:
        """
        Collapse concurrent duplicates of a (gig, artist) thread into the oldest.

        Messages are re-pointed at the survivor and unread counters folded in;
        the extra conversations are deactivated rather than deleted.
        """
        active = await self.find_active(gig_id, artist_id)
        if not active:
            return None
        survivor, duplicates = active[0], active[1:]
        if not duplicates:
            return survivor

        now = datetime.now(UTC)
        for duplicate in duplicates:
            await self.execute(
                update(models.Message)
                .where(models.Message.conversation_id == duplicate.id)
                .values(conversation_id=survivor.id)
            )
            survivor.unread_venue_manager += duplicate.unread_venue_manager
            survivor.unread_artist += duplicate.unread_artist
            if duplicate.last_message_timestamp is not None and (
                survivor.last_message_timestamp is None
                or as_utc(duplicate.last_message_timestamp)
                > as_utc(survivor.last_message_timestamp)
            ):
                survivor.last_message = duplicate.last_message
                survivor.last_message_timestamp = duplicate.last_message_timestamp
                survivor.last_message_sender_id = duplicate.last_message_sender_id
            duplicate.is_active = False
            duplicate.updated_at = now
        survivor.updated_at = now
        await self.uow.commit()
        return survivor

    async def list_for_user(self, user_id: str, kind: PartyKind) -> list[UoWModel]:
        stmt = (
            select(models.Conversation)
            .filter(
                party_column(kind) == user_id,
                models.Conversation.is_active.is_(True),
            )
            .order_by(models.Conversation.updated_at.desc())
            .execution_options(populate_existing=True)
        )
        return await self.fetch_all(stmt)

    async def total_unread(self, user_id: str, kind: PartyKind) -> int:
        stmt = select(func.coalesce(func.sum(unread_column(kind)), 0)).filter(
            party_column(kind) == user_id,
            models.Conversation.is_active.is_(True),
        )
        result = await self.execute(stmt)
        return int(result.scalar_one())

    async def record_message(
        self,
        conversation_id: str,
        sender_id: str,
        recipient_kind: PartyKind,
        preview: str,
        timestamp: datetime,
    ) -> UoWModel | None:
        counter = unread_column(recipient_kind)
        # single-statement increment, the sender's own counter is untouched
        stmt = (
            update(models.Conversation)
            .where(models.Conversation.id == conversation_id)
            .values(
                {
                    counter.key: counter + 1,
                    "last_message": preview,
                    "last_message_timestamp": timestamp,
                    "last_message_sender_id": sender_id,
                    "updated_at": timestamp,
                }
            )
        )
        await self.execute(stmt)
        await self.uow.commit()
        return await self.get_conversation(conversation_id)

    async def reset_unread(self, conversation_id: str, kind: PartyKind) -> UoWModel | None:
        counter = unread_column(kind)
        stmt = (
            update(models.Conversation)
            .where(models.Conversation.id == conversation_id)
            .values({counter.key: 0, "updated_at": datetime.now(UTC)})
        )
        await self.execute(stmt)
        await self.uow.commit()
        return await self.get_conversation(conversation_id)
