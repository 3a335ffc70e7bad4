# app/interactors/notification_interactor.py
from app.gateways.interfaces import IBandGateway
from app.infrastructure import schemas


class NotificationInteractor:
    def __init__(self, band_gateway: IBandGateway):
        self.band_gateway = band_gateway

    async def load_pending_notifications(self, user_id: str) -> schemas.PendingNotifications:
        # expired records are still listed, flagged through effective_status
        invitations = await self.band_gateway.pending_invitations_for_user(user_id)
        applications = await self.band_gateway.pending_applications_for_user(user_id)
        return schemas.PendingNotifications(
            invitations=[schemas.BandInvitation.model_validate(i) for i in invitations],
            applications=[schemas.BandApplication.model_validate(a) for a in applications],
        )
