# app/gateways/base.py
from sqlalchemy.ext.asyncio import AsyncSession

from app.infrastructure.database import transient_errors
from app.infrastructure.uow import UnitOfWork, UoWModel


class SessionGateway:
    def __init__(self, session: AsyncSession, uow: UnitOfWork):
        self.session = session
        self.uow = uow

    async def discard(self) -> None:
        """Drop staged documents and end the open transaction."""
        self.uow.rollback()
        await self.session.rollback()

    async def execute(self, stmt):
        async with transient_errors(type(self).__name__):
            return await self.session.execute(stmt)

    async def fetch_one(self, stmt) -> UoWModel | None:
        result = await self.execute(stmt)
        model = result.scalar_one_or_none()
        return UoWModel(model, self.uow) if model else None

    async def fetch_all(self, stmt) -> list[UoWModel]:
        result = await self.execute(stmt)
        return [UoWModel(model, self.uow) for model in result.scalars().all()]
