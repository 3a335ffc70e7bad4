# app/interactors/gig_interactor.py
import logging
from datetime import UTC, datetime
from typing import Any

from pydantic import ValidationError

from app.domain.entities import (
    ArtistKind,
    BandMemberRole,
    GigApplicationStatus,
    GigStatus,
    MessageKind,
    UserRole,
)
from app.domain.errors import (
    DomainError,
    GigValidationError,
    InvalidStateError,
    NotFoundError,
    PermissionDeniedError,
)
from app.domain.rules import as_utc, display_name
from app.gateways.gig_gateway import GigGateway
from app.gateways.interfaces import IBandGateway
from app.gateways.user_gateway import UserGateway
from app.infrastructure import schemas
from app.interactors.conversation_interactor import ConversationInteractor


class GigInteractor:
    def __init__(
        self,
        gig_gateway: GigGateway,
        band_gateway: IBandGateway,
        user_gateway: UserGateway,
        conversation_interactor: ConversationInteractor,
        logger: logging.Logger | None = None,
    ):
        self.gig_gateway = gig_gateway
        self.band_gateway = band_gateway
        self.user_gateway = user_gateway
        self.conversation_interactor = conversation_interactor
        self.logger = logger or logging.getLogger(__name__)

    async def _get_gig(self, gig_id: str):
        gig = await self.gig_gateway.get_gig(gig_id)
        if gig is None:
            raise NotFoundError("Gig", gig_id)
        return gig

    async def get_gig(self, gig_id: str) -> schemas.Gig:
        return schemas.Gig.model_validate(await self._get_gig(gig_id))

    async def create_gig(self, payload: dict[str, Any], created_by: str) -> schemas.Gig:
        try:
            gig = schemas.GigCreate.model_validate(payload)
        except ValidationError as e:
            raise GigValidationError(
                e.errors(include_url=False, include_context=False, include_input=False)
            ) from e

        user = await self.user_gateway.get_user(created_by)
        if user is None or user.role != UserRole.MANAGER.value:
            raise PermissionDeniedError("Only venue managers can post gigs")

        new_gig = await self.gig_gateway.create_gig(gig, created_by)
        self.logger.info(f"Gig {new_gig.id} posted by {created_by}")
        return schemas.Gig.model_validate(new_gig)

    async def apply_to_gig(
        self, gig_id: str, application: schemas.GigApplicationCreate, applicant_id: str
    ) -> schemas.GigApplication:
        gig = await self._get_gig(gig_id)
        if gig.status != GigStatus.PUBLISHED.value:
            raise InvalidStateError(f"Gig {gig_id} is not open for applications")
        if gig.application_deadline and datetime.now(UTC) > as_utc(gig.application_deadline):
            raise InvalidStateError(f"Applications for gig {gig_id} are closed")

        if application.applicant_kind is ArtistKind.BAND:
            if application.band_id is None:
                raise InvalidStateError("band_id is required for band applications")
            band = await self.band_gateway.get_band(application.band_id)
            if band is None:
                raise NotFoundError("Band", application.band_id)
            leader = next(
                (m for m in band.members if m.role == BandMemberRole.LEADER.value and m.is_active),
                None,
            )
            # bands apply through their leader, who then owns the conversation
            if leader is None or leader.user_id != applicant_id:
                raise PermissionDeniedError("Only the band leader can apply for the band")
            applicant_name = band.name
        else:
            user = await self.user_gateway.get_user(applicant_id)
            if user is None:
                raise NotFoundError("User", applicant_id)
            applicant_name = display_name(user.username, user.first_name, user.last_name)

        existing = await self.gig_gateway.find_applications(gig_id, applicant_id)
        if any(a.status != GigApplicationStatus.REJECTED.value for a in existing):
            raise InvalidStateError("Already applied to this gig")
        if gig.max_applicants is not None:
            if await self.gig_gateway.count_applications(gig_id) >= gig.max_applicants:
                raise InvalidStateError(f"Gig {gig_id} has no open slots")

        created = await self.gig_gateway.create_application(
            gig_id=gig_id,
            applicant_id=applicant_id,
            applicant_kind=application.applicant_kind.value,
            applicant_name=applicant_name,
            band_id=application.band_id,
            message=application.message,
        )
        return schemas.GigApplication.model_validate(created)

    async def respond_to_application(
        self,
        application_id: str,
        actor_id: str,
        response: schemas.GigApplicationResponse,
    ) -> schemas.GigApplication:
        application = await self.gig_gateway.get_application(application_id)
        if application is None:
            raise NotFoundError("Application", application_id)
        gig = await self._get_gig(application.gig_id)
        if gig.created_by != actor_id:
            raise PermissionDeniedError("Only the gig's venue manager can respond")
        if application.status != GigApplicationStatus.PENDING.value:
            raise InvalidStateError(f"Application {application_id} is already {application.status}")

        status = (
            GigApplicationStatus.ACCEPTED if response.accepted else GigApplicationStatus.REJECTED
        )
        application = await self.gig_gateway.respond_to_application(
            application, status, response.response_message
        )
        result = schemas.GigApplication.model_validate(application)

        if response.accepted:
            conversation = await self.conversation_interactor.get_or_create_conversation(
                schemas.ConversationCreate(
                    gig_id=gig.id,
                    artist_id=result.applicant_id,
                    artist_kind=result.applicant_kind,
                    artist_name=result.applicant_name,
                ),
                actor_id,
            )
            body = response.response_message or (
                f"Your application for {gig.title} has been accepted."
            )
            await self.conversation_interactor.send_message(
                conversation.id,
                actor_id,
                schemas.MessageCreate(body=body, message_id=f"accepted-{application_id}"),
                kind=MessageKind.SYSTEM,
            )
        return result

    async def backfill_conversations(self) -> schemas.BackfillReport:
        """Open conversations for accepted applications that predate them."""
        created = skipped = failed = 0
        for application in await self.gig_gateway.accepted_applications():
            existing = await self.conversation_interactor.conversation_gateway.find_active(
                application.gig_id, application.applicant_id
            )
            if existing:
                skipped += 1
                continue
            try:
                gig = await self._get_gig(application.gig_id)
                await self.conversation_interactor.get_or_create_conversation(
                    schemas.ConversationCreate(
                        gig_id=gig.id,
                        artist_id=application.applicant_id,
                        artist_kind=ArtistKind(application.applicant_kind),
                        artist_name=application.applicant_name,
                    ),
                    gig.created_by,
                )
            except DomainError as e:
                failed += 1
                self.logger.error(
                    f"Backfill failed for application {application.id}: {e.message}"
                )
                continue
            created += 1

        self.logger.info(
            f"Conversation backfill finished: {created} created, {skipped} skipped, {failed} failed"
        )
        return schemas.BackfillReport(created=created, skipped=skipped, failed=failed)
