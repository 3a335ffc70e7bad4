# app/interactors/band_interactor.py
import logging
from datetime import UTC, datetime, timedelta

from app.domain.entities import BandPermission, InvitationStatus
from app.domain.errors import InvalidStateError, NotFoundError, PermissionDeniedError
from app.domain.events import InvitationAccepted, InvitationDeclined, InvitationSent
from app.domain.rules import display_name, has_permission, is_expired
from app.gateways.interfaces import IBandGateway
from app.gateways.user_gateway import UserGateway
from app.infrastructure import schemas
from app.infrastructure.event_dispatcher import EventDispatcher


class BandInteractor:
    """
    Band membership through invitations (band to user) and applications
    (user to band).

    Acceptance writes membership first, then the invitation status, then the
    user's pending list. Each step is idempotent, so a failed acceptance can
    be retried as a whole.
    """

    def __init__(
        self,
        band_gateway: IBandGateway,
        user_gateway: UserGateway,
        event_dispatcher: EventDispatcher | None = None,
        invitation_ttl: timedelta = timedelta(days=7),
        application_ttl: timedelta = timedelta(days=14),
        allow_expired_accept: bool = True,
        logger: logging.Logger | None = None,
    ):
        self.band_gateway = band_gateway
        self.user_gateway = user_gateway
        self.event_dispatcher = event_dispatcher
        self.invitation_ttl = invitation_ttl
        self.application_ttl = application_ttl
        self.allow_expired_accept = allow_expired_accept
        self.logger = logger or logging.getLogger(__name__)

    async def _dispatch(self, event) -> None:
        if self.event_dispatcher is not None:
            await self.event_dispatcher.dispatch(event)

    async def _get_band(self, band_id: str):
        band = await self.band_gateway.get_band(band_id)
        if band is None or not band.is_active:
            raise NotFoundError("Band", band_id)
        return band

    async def _get_invitation_for(
        self, invitation_id: str, actor_id: str, outcome: InvitationStatus
    ):
        invitation = await self.band_gateway.get_invitation(invitation_id)
        if invitation is None:
            raise NotFoundError("Invitation", invitation_id)
        if invitation.invited_user_id != actor_id:
            raise PermissionDeniedError("Invitation is addressed to another user")
        if invitation.status == outcome.value:
            # an earlier attempt stored the outcome but not the user's lists
            joined_band_id = (
                invitation.band_id if outcome is InvitationStatus.ACCEPTED else None
            )
            await self.user_gateway.resolve_invitation(
                actor_id, invitation_id, joined_band_id
            )
        if invitation.status != InvitationStatus.PENDING.value:
            raise InvalidStateError(
                f"Invitation {invitation_id} is already {invitation.status}"
            )
        return invitation

    async def get_band(self, band_id: str) -> schemas.Band:
        return schemas.Band.model_validate(await self._get_band(band_id))

    async def create_band(self, band: schemas.BandCreate, created_by: str) -> schemas.Band:
        new_band = await self.band_gateway.create_band(
            name=band.name,
            created_by=created_by,
            bio=band.bio,
            genres=band.genres,
            instruments=band.instruments,
        )
        await self.user_gateway.add_band(created_by, new_band.id)
        self.logger.info(f"Band {new_band.id} created by {created_by}")
        return schemas.Band.model_validate(new_band)

    async def send_invitation(
        self, band_id: str, invitation: schemas.BandInvitationCreate, invited_by: str
    ) -> schemas.BandInvitation:
        band = await self._get_band(band_id)
        if not has_permission(band.members, invited_by, BandPermission.MANAGE_MEMBERS):
            raise PermissionDeniedError("Inviting members requires manage_members")

        invitee = await self.user_gateway.get_user(invitation.invited_user_id)
        if invitee is None:
            raise NotFoundError("User", invitation.invited_user_id)
        if any(m.user_id == invitee.id and m.is_active for m in band.members):
            raise InvalidStateError("User is already a member of this band")
        if await self.band_gateway.find_pending_invitations(band_id, invitee.id):
            raise InvalidStateError("User already has a pending invitation to this band")

        created = await self.band_gateway.create_invitation(
            band_id=band_id,
            band_name=band.name,
            invited_user_id=invitee.id,
            invited_by=invited_by,
            role=invitation.role.value,
            instruments=invitation.instruments,
            message=invitation.message,
            expires_at=datetime.now(UTC) + self.invitation_ttl,
        )
        await self.user_gateway.add_pending_invitation(invitee.id, created.id)

        result = schemas.BandInvitation.model_validate(created)
        await self._dispatch(
            InvitationSent(
                invitation_id=result.id,
                band_id=band_id,
                band_name=band.name,
                invited_user_id=invitee.id,
                role=result.role.value,
                invited_by=invited_by,
                expires_at=result.expires_at,
            )
        )
        return result

    async def accept_invitation(
        self, invitation_id: str, actor_id: str
    ) -> schemas.BandInvitation:
        invitation = await self._get_invitation_for(
            invitation_id, actor_id, InvitationStatus.ACCEPTED
        )
        if not self.allow_expired_accept and is_expired(
            invitation.status, invitation.expires_at
        ):
            raise InvalidStateError(f"Invitation {invitation_id} has expired")

        band_id = invitation.band_id
        member, joined = await self.band_gateway.upsert_member(
            band_id, actor_id, invitation.role, invitation.instruments
        )
        # a lost insert race rolls the session back, so re-read before writing
        invitation = await self.band_gateway.get_invitation(invitation_id)
        await self.band_gateway.set_invitation_status(invitation, InvitationStatus.ACCEPTED)
        await self.user_gateway.resolve_invitation(actor_id, invitation_id, band_id)

        if joined:
            self.logger.info(f"User {actor_id} joined band {band_id} as {member.role}")
        result = schemas.BandInvitation.model_validate(invitation)
        await self._dispatch(
            InvitationAccepted(
                invitation_id=result.id,
                band_id=band_id,
                band_name=result.band_name,
                invited_user_id=actor_id,
                role=result.role.value,
            )
        )
        return result

    async def decline_invitation(
        self, invitation_id: str, actor_id: str
    ) -> schemas.BandInvitation:
        invitation = await self._get_invitation_for(
            invitation_id, actor_id, InvitationStatus.DECLINED
        )
        await self.band_gateway.set_invitation_status(invitation, InvitationStatus.DECLINED)
        await self.user_gateway.resolve_invitation(actor_id, invitation_id)

        result = schemas.BandInvitation.model_validate(invitation)
        await self._dispatch(
            InvitationDeclined(
                invitation_id=result.id,
                band_id=result.band_id,
                band_name=result.band_name,
                invited_user_id=actor_id,
                role=result.role.value,
            )
        )
        return result

    async def apply_to_band(
        self, band_id: str, application: schemas.BandApplicationCreate, applicant_id: str
    ) -> schemas.BandApplication:
        band = await self._get_band(band_id)
        applicant = await self.user_gateway.get_user(applicant_id)
        if applicant is None:
            raise NotFoundError("User", applicant_id)
        if any(m.user_id == applicant_id and m.is_active for m in band.members):
            raise InvalidStateError("Already a member of this band")
        if await self.band_gateway.find_pending_applications(band_id, applicant_id):
            raise InvalidStateError("An application to this band is already pending")

        created = await self.band_gateway.create_application(
            band_id=band_id,
            band_name=band.name,
            applicant_user_id=applicant_id,
            applicant_name=display_name(
                applicant.username, applicant.first_name, applicant.last_name
            ),
            role=application.role.value,
            instruments=application.instruments,
            message=application.message,
            expires_at=datetime.now(UTC) + self.application_ttl,
        )
        return schemas.BandApplication.model_validate(created)
