# app/tests/unit/test_band_gateway.py
from datetime import UTC, datetime, timedelta

import pytest

from app.domain.entities import InvitationStatus


@pytest.mark.asyncio
async def test_create_band_makes_creator_leader(band, musician):
    assert len(band.members) == 1
    leader = band.members[0]
    assert leader.user_id == musician.id
    assert leader.role == "leader"
    assert "manage_members" in leader.permissions


@pytest.mark.asyncio
async def test_upsert_member_is_idempotent(band_gateway, band, other_musician):
    member, changed = await band_gateway.upsert_member(
        band.id, other_musician.id, "member", ["bass"]
    )
    again, changed_again = await band_gateway.upsert_member(
        band.id, other_musician.id, "member", ["bass"]
    )

    assert changed is True
    assert changed_again is False
    assert member.id == again.id
    refreshed = await band_gateway.get_band(band.id)
    assert [m.user_id for m in refreshed.members].count(other_musician.id) == 1


@pytest.mark.asyncio
async def test_upsert_member_reactivates_former_member(band_gateway, band, other_musician):
    member, _ = await band_gateway.upsert_member(band.id, other_musician.id, "guest", [])
    member.is_active = False
    await band_gateway.uow.commit()

    rejoined, changed = await band_gateway.upsert_member(
        band.id, other_musician.id, "admin", ["keys"]
    )

    assert changed is True
    assert rejoined.is_active is True
    assert rejoined.role == "admin"
    assert "manage_members" in rejoined.permissions


@pytest.mark.asyncio
async def test_pending_invitation_queries(band_gateway, band, musician, other_musician):
    invitation = await band_gateway.create_invitation(
        band_id=band.id,
        band_name=band.name,
        invited_user_id=other_musician.id,
        invited_by=musician.id,
        role="member",
        instruments=["bass"],
        message="Join us",
        expires_at=datetime.now(UTC) + timedelta(days=7),
    )

    pending = await band_gateway.find_pending_invitations(band.id, other_musician.id)
    assert [i.id for i in pending] == [invitation.id]

    await band_gateway.set_invitation_status(invitation, InvitationStatus.DECLINED)

    assert await band_gateway.find_pending_invitations(band.id, other_musician.id) == []
    assert await band_gateway.pending_invitations_for_user(other_musician.id) == []
    stored = await band_gateway.get_invitation(invitation.id)
    assert stored.status == "declined"


@pytest.mark.asyncio
async def test_pending_applications_for_user(band_gateway, band, other_musician):
    application = await band_gateway.create_application(
        band_id=band.id,
        band_name=band.name,
        applicant_user_id=other_musician.id,
        applicant_name="bassist",
        role="member",
        instruments=["bass"],
        message=None,
        expires_at=datetime.now(UTC) + timedelta(days=14),
    )

    pending = await band_gateway.pending_applications_for_user(other_musician.id)

    assert [a.id for a in pending] == [application.id]
    assert await band_gateway.find_pending_applications(band.id, other_musician.id)
