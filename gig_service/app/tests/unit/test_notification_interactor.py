# app/tests/unit/test_notification_interactor.py
from datetime import UTC, datetime, timedelta

import pytest

from app.domain.entities import InvitationStatus
from app.infrastructure import schemas


@pytest.mark.asyncio
async def test_nothing_pending(notification_interactor, musician):
    notifications = await notification_interactor.load_pending_notifications(musician.id)

    assert notifications.total == 0
    assert notifications.invitations == []
    assert notifications.applications == []


@pytest.mark.asyncio
async def test_lists_invitations_and_applications(
    notification_interactor, band_interactor, band, musician, other_musician
):
    invitation = await band_interactor.send_invitation(
        band.id, schemas.BandInvitationCreate(invited_user_id=other_musician.id), musician.id
    )
    other_band = await band_interactor.create_band(
        schemas.BandCreate(name="Late Risers"), musician.id
    )
    application = await band_interactor.apply_to_band(
        other_band.id, schemas.BandApplicationCreate(), other_musician.id
    )

    notifications = await notification_interactor.load_pending_notifications(other_musician.id)

    assert [i.id for i in notifications.invitations] == [invitation.id]
    assert [a.id for a in notifications.applications] == [application.id]
    assert notifications.total == 2


@pytest.mark.asyncio
async def test_expired_invitation_is_still_listed(
    notification_interactor, band_interactor, band_gateway, band, musician, other_musician
):
    invitation = await band_interactor.send_invitation(
        band.id, schemas.BandInvitationCreate(invited_user_id=other_musician.id), musician.id
    )
    stored = await band_gateway.get_invitation(invitation.id)
    stored.expires_at = datetime.now(UTC) - timedelta(minutes=5)
    await band_gateway.uow.commit()

    notifications = await notification_interactor.load_pending_notifications(other_musician.id)

    listed = notifications.invitations[0]
    assert listed.status is InvitationStatus.PENDING
    assert listed.effective_status is InvitationStatus.EXPIRED
    assert listed.is_expired is True


@pytest.mark.asyncio
async def test_resolved_invitations_drop_out(
    notification_interactor, band_interactor, band, musician, other_musician
):
    invitation = await band_interactor.send_invitation(
        band.id, schemas.BandInvitationCreate(invited_user_id=other_musician.id), musician.id
    )
    await band_interactor.accept_invitation(invitation.id, other_musician.id)

    notifications = await notification_interactor.load_pending_notifications(other_musician.id)

    assert notifications.total == 0
