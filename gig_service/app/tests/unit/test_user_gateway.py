# app/tests/unit/test_user_gateway.py
import pytest

from app.domain.entities import UserRole
from app.infrastructure import schemas


@pytest.mark.asyncio
async def test_upsert_profile_creates_then_updates(user_gateway):
    created = await user_gateway.upsert_profile(
        "uid-1",
        schemas.UserProfileUpdate(
            email="a@example.com", username="alpha", role=UserRole.MUSICIAN
        ),
    )
    assert created.id == "uid-1"
    assert created.bands == []

    updated = await user_gateway.upsert_profile(
        "uid-1",
        schemas.UserProfileUpdate(
            email="a@example.com",
            username="alpha",
            first_name="Al",
            last_name="Pha",
            role=UserRole.MANAGER,
        ),
    )
    assert updated.role == "manager"
    assert updated.first_name == "Al"


@pytest.mark.asyncio
async def test_get_user_missing(user_gateway):
    assert await user_gateway.get_user("nobody") is None
    assert await user_gateway.add_pending_invitation("nobody", "i1") is False


@pytest.mark.asyncio
async def test_pending_invitation_list_round_trip(user_gateway, musician):
    await user_gateway.add_pending_invitation(musician.id, "i1")
    await user_gateway.add_pending_invitation(musician.id, "i1")
    await user_gateway.add_pending_invitation(musician.id, "i2")

    user = await user_gateway.get_user(musician.id)
    assert user.band_invitations == ["i1", "i2"]

    await user_gateway.resolve_invitation(musician.id, "i1", joined_band_id="b1")
    await user_gateway.resolve_invitation(musician.id, "i1", joined_band_id="b1")

    user = await user_gateway.get_user(musician.id)
    assert user.band_invitations == ["i2"]
    assert user.bands == ["b1"]
