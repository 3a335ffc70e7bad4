# app/gateways/band_gateway.py
from datetime import UTC, datetime

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.domain.entities import BandMemberRole, InvitationStatus
from app.domain.rules import default_permissions
from app.gateways.base import SessionGateway
from app.gateways.interfaces import IBandGateway
from app.infrastructure import models
from app.infrastructure.data_mappers import (
    BandApplicationMapper,
    BandInvitationMapper,
    BandMapper,
    BandMemberMapper,
)
from app.infrastructure.uow import UnitOfWork, UoWModel


class BandGateway(SessionGateway, IBandGateway):
    def __init__(self, session: AsyncSession, uow: UnitOfWork):
        super().__init__(session, uow)
        uow.mappers[models.Band] = BandMapper(session)
        uow.mappers[models.BandMember] = BandMemberMapper(session)
        uow.mappers[models.BandInvitation] = BandInvitationMapper(session)
        uow.mappers[models.BandApplication] = BandApplicationMapper(session)

    async def get_band(self, band_id: str) -> UoWModel | None:
        stmt = (
            select(models.Band)
            .filter(models.Band.id == band_id)
            .execution_options(populate_existing=True)
        )
        return await self.fetch_one(stmt)

    async def create_band(
        self,
        name: str,
        created_by: str,
        bio: str | None,
        genres: list[str],
        instruments: list[str],
    ) -> UoWModel:
        now = datetime.now(UTC)
        db_band = models.Band(
            id=models.new_id(),
            name=name,
            bio=bio,
            genres=list(genres),
            created_by=created_by,
            is_active=True,
            created_at=now,
            updated_at=now,
        )
        db_band.members = [
            models.BandMember(
                user_id=created_by,
                role=BandMemberRole.LEADER.value,
                instruments=list(instruments),
                permissions=default_permissions(BandMemberRole.LEADER),
                joined_at=now,
                is_active=True,
            )
        ]
        uow_band = self.uow.register_new(db_band)
        await self.uow.commit()
        return uow_band

    async def get_member(self, band_id: str, user_id: str) -> UoWModel | None:
        stmt = (
            select(models.BandMember)
            .filter(
                models.BandMember.band_id == band_id,
                models.BandMember.user_id == user_id,
            )
            .execution_options(populate_existing=True)
        )
        return await self.fetch_one(stmt)

    async def upsert_member(
        self, band_id: str, user_id: str, role: str, instruments: list[str]
    ) -> tuple[UoWModel, bool]:
        """
        Make user_id an active member; returns (member, changed).

        Re-running for an active member changes nothing, so acceptance can be
        retried. The (band, user) unique constraint settles concurrent inserts.
        """
        member = await self.get_member(band_id, user_id)
        if member is not None:
            if member.is_active:
                return member, False
            member.role = role
            member.instruments = list(instruments)
            member.permissions = default_permissions(role)
            member.joined_at = datetime.now(UTC)
            member.is_active = True
            await self.uow.commit()
            return member, True

        db_member = models.BandMember(
            band_id=band_id,
            user_id=user_id,
            role=role,
            instruments=list(instruments),
            permissions=default_permissions(role),
            joined_at=datetime.now(UTC),
            is_active=True,
        )
        uow_member = self.uow.register_new(db_member)
        try:
            await self.uow.commit()
        except IntegrityError:
            await self.discard()
            existing = await self.get_member(band_id, user_id)
            if existing is None:
                raise
            return existing, False
        return uow_member, True

    async def get_invitation(self, invitation_id: str) -> UoWModel | None:
        stmt = (
            select(models.BandInvitation)
            .filter(models.BandInvitation.id == invitation_id)
            .execution_options(populate_existing=True)
        )
        return await self.fetch_one(stmt)

    async def find_pending_invitations(self, band_id: str, user_id: str) -> list[UoWModel]:
        stmt = select(models.BandInvitation).filter(
            models.BandInvitation.band_id == band_id,
            models.BandInvitation.invited_user_id == user_id,
            models.BandInvitation.status == InvitationStatus.PENDING.value,
        )
        return await self.fetch_all(stmt)

    async def pending_invitations_for_user(self, user_id: str) -> list[UoWModel]:
        stmt = (
            select(models.BandInvitation)
            .filter(
                models.BandInvitation.invited_user_id == user_id,
                models.BandInvitation.status == InvitationStatus.PENDING.value,
            )
            .order_by(models.BandInvitation.created_at.desc())
        )
        return await self.fetch_all(stmt)

    async def create_invitation(
        self,
        band_id: str,
        band_name: str,
        invited_user_id: str,
        invited_by: str,
        role: str,
        instruments: list[str],
        message: str | None,
        expires_at: datetime,
    ) -> UoWModel:
        db_invitation = models.BandInvitation(
            id=models.new_id(),
            band_id=band_id,
            band_name=band_name,
            invited_user_id=invited_user_id,
            invited_by=invited_by,
            role=role,
            instruments=list(instruments),
            message=message,
            status=InvitationStatus.PENDING.value,
            created_at=datetime.now(UTC),
            expires_at=expires_at,
        )
        uow_invitation = self.uow.register_new(db_invitation)
        await self.uow.commit()
        return uow_invitation

    async def set_invitation_status(
        self, invitation: UoWModel, status: InvitationStatus
    ) -> UoWModel:
        if invitation.status != status.value:
            invitation.status = status.value
            await self.uow.commit()
        return invitation

    async def find_pending_applications(self, band_id: str, user_id: str) -> list[UoWModel]:
        stmt = select(models.BandApplication).filter(
            models.BandApplication.band_id == band_id,
            models.BandApplication.applicant_user_id == user_id,
            models.BandApplication.status == InvitationStatus.PENDING.value,
        )
        return await self.fetch_all(stmt)

    async def pending_applications_for_user(self, user_id: str) -> list[UoWModel]:
        stmt = (
            select(models.BandApplication)
            .filter(
                models.BandApplication.applicant_user_id == user_id,
                models.BandApplication.status == InvitationStatus.PENDING.value,
            )
            .order_by(models.BandApplication.created_at.desc())
        )
        return await self.fetch_all(stmt)

    async def create_application(
        self,
        band_id: str,
        band_name: str,
        applicant_user_id: str,
        applicant_name: str,
        role: str,
        instruments: list[str],
        message: str | None,
        expires_at: datetime,
    ) -> UoWModel:
        db_application = models.BandApplication(
            id=models.new_id(),
            band_id=band_id,
            band_name=band_name,
            applicant_user_id=applicant_user_id,
            applicant_name=applicant_name,
            role=role,
            instruments=list(instruments),
            message=message,
            status=InvitationStatus.PENDING.value,
            created_at=datetime.now(UTC),
            expires_at=expires_at,
        )
        uow_application = self.uow.register_new(db_application)
        await self.uow.commit()
        return uow_application
