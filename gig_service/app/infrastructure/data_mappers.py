# app/infrastructure/data_mappers.py

from typing import Generic, Protocol, TypeVar

from sqlalchemy.ext.asyncio import AsyncSession

from app.infrastructure import models

ModelT_contra = TypeVar("ModelT_contra", contravariant=True)
ModelT = TypeVar("ModelT")


class DataMapper(Protocol[ModelT_contra]):
    async def insert(self, model: ModelT_contra):
        raise NotImplementedError

    async def update(self, model: ModelT_contra):
        raise NotImplementedError


class SessionMapper(Generic[ModelT]):
    """Writes one document type through the bound session; flushes so ids exist."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def insert(self, model: ModelT):
        self.session.add(model)
        await self.session.flush()

    async def update(self, model: ModelT):
        self.session.add(model)
        await self.session.flush()


class UserMapper(SessionMapper[models.User]):
    pass


class GigMapper(SessionMapper[models.Gig]):
    pass


class GigApplicationMapper(SessionMapper[models.GigApplication]):
    pass


class ConversationMapper(SessionMapper[models.Conversation]):
    pass


class MessageMapper(SessionMapper[models.Message]):
    pass


class BandMapper(SessionMapper[models.Band]):
    pass


class BandMemberMapper(SessionMapper[models.BandMember]):
    pass


class BandInvitationMapper(SessionMapper[models.BandInvitation]):
    pass


class BandApplicationMapper(SessionMapper[models.BandApplication]):
    pass
