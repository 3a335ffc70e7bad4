# app/tests/unit/test_models.py
from datetime import UTC, datetime, timedelta

import pytest
from sqlalchemy import inspect

from app.domain.entities import InvitationStatus, PartyKind
from app.infrastructure import models, schemas


def conversation_model(**overrides):
    now = datetime.now(UTC)
    data = dict(
        id="c1",
        gig_id="g1",
        gig_title="Friday Night Jazz",
        venue_manager_id="m1",
        venue_manager_name="Vera Stone",
        artist_id="a1",
        artist_name="Dave Grohl",
        artist_kind="musician",
        unread_venue_manager=2,
        unread_artist=5,
        is_active=True,
        created_at=now,
        updated_at=now,
    )
    data.update(overrides)
    return models.Conversation(**data)


def test_conversation_exposes_unread_count():
    conversation = schemas.Conversation.model_validate(conversation_model())

    dumped = conversation.model_dump()
    assert dumped["unread_count"] == {"venue_manager": 2, "artist": 5}
    assert "unread_artist" not in dumped


def test_conversation_party_of():
    conversation = schemas.Conversation.model_validate(conversation_model())

    assert conversation.party_of("m1") is PartyKind.VENUE_MANAGER
    assert conversation.party_of("a1") is PartyKind.ARTIST
    assert conversation.party_of("x") is None


def test_party_counterpart():
    assert PartyKind.ARTIST.counterpart is PartyKind.VENUE_MANAGER
    assert PartyKind.VENUE_MANAGER.counterpart is PartyKind.ARTIST


def test_invitation_derives_expiry():
    now = datetime.now(UTC)
    invitation = models.BandInvitation(
        id="i1",
        band_id="b1",
        band_name="The Offbeats",
        invited_user_id="u2",
        invited_by="u1",
        role="member",
        instruments=[],
        status="pending",
        created_at=now - timedelta(days=8),
        # naive, as SQLite hands it back
        expires_at=(now - timedelta(days=1)).replace(tzinfo=None),
    )

    record = schemas.BandInvitation.model_validate(invitation)

    assert record.status is InvitationStatus.PENDING
    assert record.effective_status is InvitationStatus.EXPIRED
    assert record.model_dump()["is_expired"] is True


def test_pending_notifications_total():
    assert schemas.PendingNotifications().total == 0


def test_user_profile_display_name():
    profile = schemas.UserProfile(
        id="u1",
        email="v@example.com",
        username="venue_boss",
        first_name="Vera",
        role="manager",
        created_at=datetime.now(UTC),
    )
    assert profile.display_name == "venue_boss"


@pytest.mark.parametrize(
    "model, relationship",
    [
        (models.Conversation, "messages"),
        (models.Message, "conversation"),
        (models.BandMember, "band"),
    ],
)
def test_back_references_refuse_implicit_loads(model, relationship):
    assert inspect(model).relationships[relationship].lazy == "raise"


def test_band_members_load_eagerly():
    assert inspect(models.Band).relationships["members"].lazy == "selectin"
