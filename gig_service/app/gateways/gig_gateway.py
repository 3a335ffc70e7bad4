# app/gateways/gig_gateway.py
from datetime import UTC, datetime

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.domain.entities import GigApplicationStatus
from app.gateways.base import SessionGateway
from app.infrastructure import models, schemas
from app.infrastructure.data_mappers import GigApplicationMapper, GigMapper
from app.infrastructure.uow import UnitOfWork, UoWModel


class GigGateway(SessionGateway):
    def __init__(self, session: AsyncSession, uow: UnitOfWork):
        super().__init__(session, uow)
        uow.mappers[models.Gig] = GigMapper(session)
        uow.mappers[models.GigApplication] = GigApplicationMapper(session)

    async def get_gig(self, gig_id: str) -> UoWModel | None:
        stmt = select(models.Gig).filter(models.Gig.id == gig_id)
        return await self.fetch_one(stmt)

    async def create_gig(self, gig: schemas.GigCreate, created_by: str) -> UoWModel:
        now = datetime.now(UTC)
        data = gig.model_dump()
        data["status"] = gig.status.value
        db_gig = models.Gig(
            id=models.new_id(),
            created_by=created_by,
            created_at=now,
            updated_at=now,
            **data,
        )
        uow_gig = self.uow.register_new(db_gig)
        await self.uow.commit()
        return uow_gig

    async def get_application(self, application_id: str) -> UoWModel | None:
        stmt = (
            select(models.GigApplication)
            .filter(models.GigApplication.id == application_id)
            .execution_options(populate_existing=True)
        )
        return await self.fetch_one(stmt)

    async def find_applications(self, gig_id: str, applicant_id: str) -> list[UoWModel]:
        stmt = select(models.GigApplication).filter(
            models.GigApplication.gig_id == gig_id,
            models.GigApplication.applicant_id == applicant_id,
        )
        return await self.fetch_all(stmt)

    async def create_application(
        self,
        gig_id: str,
        applicant_id: str,
        applicant_kind: str,
        applicant_name: str,
        band_id: str | None,
        message: str | None,
    ) -> UoWModel:
        db_application = models.GigApplication(
            id=models.new_id(),
            gig_id=gig_id,
            applicant_id=applicant_id,
            applicant_kind=applicant_kind,
            applicant_name=applicant_name,
            band_id=band_id,
            message=message,
            status=GigApplicationStatus.PENDING.value,
            applied_at=datetime.now(UTC),
        )
        uow_application = self.uow.register_new(db_application)
        await self.uow.commit()
        return uow_application

    async def respond_to_application(
        self,
        application: UoWModel,
        status: GigApplicationStatus,
        response_message: str | None,
    ) -> UoWModel:
        application.status = status.value
        application.responded_at = datetime.now(UTC)
        application.response_message = response_message
        await self.uow.commit()
        return application

    async def accepted_applications(self) -> list[UoWModel]:
        stmt = (
            select(models.GigApplication)
            .filter(models.GigApplication.status == GigApplicationStatus.ACCEPTED.value)
            .order_by(models.GigApplication.applied_at)
        )
        return await self.fetch_all(stmt)

    async def count_applications(self, gig_id: str) -> int:
        stmt = select(func.count(models.GigApplication.id)).filter(
            models.GigApplication.gig_id == gig_id
        )
        result = await self.execute(stmt)
        return int(result.scalar_one())
