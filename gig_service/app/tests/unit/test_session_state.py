# app/tests/unit/test_session_state.py
from datetime import UTC, datetime

import pytest

from app.domain.entities import UserRole
from app.domain.errors import InvalidStateError, PermissionDeniedError
from app.domain.session import SessionState, SessionStatus
from app.infrastructure import schemas


@pytest.fixture
def profile():
    return schemas.UserProfile(
        id="u1",
        email="u1@example.com",
        username="u1",
        role=UserRole.MUSICIAN,
        created_at=datetime.now(UTC),
    )


def test_lifecycle_with_profile(profile):
    state = SessionState()
    assert state.status is SessionStatus.UNINITIALIZED
    assert not state.is_authenticated

    state.begin_loading("u1")
    assert state.status is SessionStatus.LOADING
    state.ready(profile)

    assert state.is_authenticated
    assert not state.needs_profile_setup
    assert state.require_profile() is profile


def test_ready_without_profile_needs_setup():
    state = SessionState()
    state.begin_loading("u1")
    state.ready(None)

    assert state.needs_profile_setup
    assert state.require_user_id() == "u1"
    with pytest.raises(PermissionDeniedError):
        state.require_profile()


def test_invalid_transitions():
    state = SessionState()
    with pytest.raises(InvalidStateError):
        state.ready(None)

    state.begin_loading("u1")
    with pytest.raises(InvalidStateError):
        state.begin_loading("u2")


def test_sign_out_clears_identity(profile):
    state = SessionState()
    state.begin_loading("u1")
    state.ready(profile)
    state.sign_out()

    assert state.status is SessionStatus.SIGNED_OUT
    assert state.user_id is None
    with pytest.raises(PermissionDeniedError):
        state.require_user_id()

    # signing back in starts a fresh load
    state.begin_loading("u1")
    assert state.status is SessionStatus.LOADING
