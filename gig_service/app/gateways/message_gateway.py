# app/gateways/message_gateway.py
from datetime import datetime

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from app.gateways.base import SessionGateway
from app.gateways.interfaces import IMessageGateway
from app.infrastructure import models
from app.infrastructure.data_mappers import MessageMapper
from app.infrastructure.uow import UnitOfWork, UoWModel


class MessageGateway(SessionGateway, IMessageGateway):
    def __init__(self, session: AsyncSession, uow: UnitOfWork):
        super().__init__(session, uow)
        uow.mappers[models.Message] = MessageMapper(session)

    async def get_message(self, message_id: str) -> UoWModel | None:
        stmt = select(models.Message).filter(models.Message.id == message_id)
        return await self.fetch_one(stmt)

    async def create_message(
        self,
        message_id: str,
        conversation_id: str,
        gig_id: str,
        sender_id: str,
        sender_name: str,
        sender_kind: str,
        recipient_id: str,
        recipient_name: str,
        body: str,
        kind: str,
        timestamp: datetime,
    ) -> UoWModel:
        """
        Stage a message; it is written by the next commit, which is the
        conversation update for the same send.
        """
        db_message = models.Message(
            id=message_id,
            conversation_id=conversation_id,
            gig_id=gig_id,
            sender_id=sender_id,
            sender_name=sender_name,
            sender_kind=sender_kind,
            recipient_id=recipient_id,
            recipient_name=recipient_name,
            body=body,
            kind=kind,
            is_read=False,
            timestamp=timestamp,
        )
        return self.uow.register_new(db_message)

    async def get_all(
        self, conversation_id: str, limit: int | None = None
    ) -> list[UoWModel]:
        stmt = (
            select(models.Message)
            .filter(models.Message.conversation_id == conversation_id)
            .order_by(models.Message.timestamp.asc())
            .execution_options(populate_existing=True)
        )
        if limit:
            # newest `limit` messages, still returned oldest first
            newest = stmt.order_by(None).order_by(models.Message.timestamp.desc()).limit(limit)
            messages = await self.fetch_all(newest)
            return list(reversed(messages))
        return await self.fetch_all(stmt)

    async def mark_read(self, conversation_id: str, recipient_id: str) -> list[str]:
        """Flip unread messages addressed to the recipient; returns the flipped ids."""
        stmt = select(models.Message.id).filter(
            models.Message.conversation_id == conversation_id,
            models.Message.recipient_id == recipient_id,
            models.Message.is_read.is_(False),
        )
        result = await self.execute(stmt)
        message_ids = list(result.scalars().all())
        if message_ids:
            await self.execute(
                update(models.Message)
                .where(models.Message.id.in_(message_ids))
                .values(is_read=True)
            )
        await self.uow.commit()
        return message_ids
