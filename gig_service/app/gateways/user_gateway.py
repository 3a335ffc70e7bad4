# app/gateways/user_gateway.py
from datetime import UTC, datetime

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.gateways.base import SessionGateway
from app.infrastructure import models, schemas
from app.infrastructure.data_mappers import UserMapper
from app.infrastructure.uow import UnitOfWork, UoWModel


class UserGateway(SessionGateway):
    def __init__(self, session: AsyncSession, uow: UnitOfWork):
        super().__init__(session, uow)
        uow.mappers[models.User] = UserMapper(session)

    async def get_user(self, user_id: str) -> UoWModel | None:
        stmt = (
            select(models.User)
            .filter(models.User.id == user_id)
            .execution_options(populate_existing=True)
        )
        return await self.fetch_one(stmt)

    async def upsert_profile(
        self, user_id: str, profile: schemas.UserProfileUpdate
    ) -> UoWModel:
        user = await self.get_user(user_id)
        data = profile.model_dump()
        data["role"] = profile.role.value
        if user is None:
            db_user = models.User(
                id=user_id,
                bands=[],
                band_invitations=[],
                created_at=datetime.now(UTC),
                **data,
            )
            user = self.uow.register_new(db_user)
        else:
            for key, value in data.items():
                setattr(user, key, value)
        await self.uow.commit()
        return user

    async def add_pending_invitation(self, user_id: str, invitation_id: str) -> bool:
        user = await self.get_user(user_id)
        if user is None:
            return False
        if invitation_id not in (user.band_invitations or []):
            # JSON columns only persist on reassignment
            user.band_invitations = [*(user.band_invitations or []), invitation_id]
            await self.uow.commit()
        return True

    async def resolve_invitation(
        self, user_id: str, invitation_id: str, joined_band_id: str | None = None
    ) -> bool:
        """Drop the invitation from the pending list, recording the band if joined."""
        user = await self.get_user(user_id)
        if user is None:
            return False
        pending = list(user.band_invitations or [])
        bands = list(user.bands or [])
        changed = False
        if invitation_id in pending:
            pending.remove(invitation_id)
            user.band_invitations = pending
            changed = True
        if joined_band_id and joined_band_id not in bands:
            user.bands = [*bands, joined_band_id]
            changed = True
        if changed:
            await self.uow.commit()
        return True

    async def add_band(self, user_id: str, band_id: str) -> None:
        user = await self.get_user(user_id)
        if user is not None and band_id not in (user.bands or []):
            user.bands = [*(user.bands or []), band_id]
            await self.uow.commit()
