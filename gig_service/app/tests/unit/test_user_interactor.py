from datetime import UTC, datetime
from unittest.mock import AsyncMock, Mock, patch

import pytest
from app.domain.errors import TransientIOError
from app.domain.session import SessionStatus
from app.gateways.user_gateway import UserGateway
from app.infrastructure import schemas
from app.infrastructure.uow import UoWModel
from app.interactors.user_interactor import UserInteractor


@pytest.fixture
def mock_user_gateway():
    gateway = Mock(spec=UserGateway)
    gateway.get_user = AsyncMock()
    gateway.upsert_profile = AsyncMock()
    return gateway


@pytest.fixture
def user_interactor(mock_user_gateway):
    return UserInteractor(mock_user_gateway, fetch_attempts=3, backoff_seconds=0.5)


@pytest.fixture
def mock_user_model():
    user = Mock()
    user.id = "uid-1"
    user.username = "testuser"
    user.email = "test@example.com"
    user.first_name = None
    user.last_name = None
    user.role = "musician"
    user.bands = []
    user.band_invitations = []
    user.created_at = datetime(2023, 1, 1, tzinfo=UTC)
    return user


@pytest.fixture
def mock_uow_user(mock_user_model):
    return Mock(spec=UoWModel, _model=mock_user_model)


class TestUserInteractor:
    @pytest.mark.asyncio
    async def test_get_profile_found(self, user_interactor, mock_user_gateway, mock_uow_user):
        mock_user_gateway.get_user.return_value = mock_uow_user

        result = await user_interactor.get_profile("uid-1")

        assert isinstance(result, schemas.UserProfile)
        assert result.display_name == "testuser"
        mock_user_gateway.get_user.assert_called_once_with("uid-1")

    @pytest.mark.asyncio
    async def test_get_profile_not_found(self, user_interactor, mock_user_gateway):
        mock_user_gateway.get_user.return_value = None

        assert await user_interactor.get_profile("missing") is None

    @pytest.mark.asyncio
    async def test_load_session_ready_with_profile(
        self, user_interactor, mock_user_gateway, mock_uow_user
    ):
        mock_user_gateway.get_user.return_value = mock_uow_user

        session = await user_interactor.load_session("uid-1")

        assert session.status is SessionStatus.READY
        assert session.profile.id == "uid-1"

    @pytest.mark.asyncio
    async def test_load_session_without_profile(self, user_interactor, mock_user_gateway):
        mock_user_gateway.get_user.return_value = None

        session = await user_interactor.load_session("uid-2")

        assert session.is_authenticated
        assert session.needs_profile_setup

    @pytest.mark.asyncio
    async def test_profile_fetch_retries_with_linear_backoff(
        self, user_interactor, mock_user_gateway, mock_uow_user
    ):
        mock_user_gateway.get_user.side_effect = [
            TransientIOError("timeout"),
            TransientIOError("timeout"),
            mock_uow_user,
        ]

        with patch("app.interactors.user_interactor.asyncio.sleep", new=AsyncMock()) as sleep:
            profile = await user_interactor.fetch_profile_with_retry("uid-1")

        assert profile.id == "uid-1"
        assert [c.args[0] for c in sleep.await_args_list] == [0.5, 1.0]

    @pytest.mark.asyncio
    async def test_profile_fetch_gives_up(self, user_interactor, mock_user_gateway):
        mock_user_gateway.get_user.side_effect = TransientIOError("down")

        with patch("app.interactors.user_interactor.asyncio.sleep", new=AsyncMock()):
            with pytest.raises(TransientIOError):
                await user_interactor.load_session("uid-1")

        assert mock_user_gateway.get_user.await_count == 3

    @pytest.mark.asyncio
    async def test_upsert_profile(self, user_interactor, mock_user_gateway, mock_uow_user):
        mock_user_gateway.upsert_profile.return_value = mock_uow_user
        update = schemas.UserProfileUpdate(
            email="test@example.com", username="testuser", role="musician"
        )

        result = await user_interactor.upsert_profile("uid-1", update)

        assert result.username == "testuser"
        mock_user_gateway.upsert_profile.assert_awaited_once_with("uid-1", update)
