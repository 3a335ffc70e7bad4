# app/tests/conftest.py
import os

# AppConfig requires these; set before any app module reads the environment
os.environ.setdefault("SECRET_KEY", "test_secret_key")
os.environ.setdefault("REDIS_HOST", "localhost")
os.environ.setdefault("REDIS_PORT", "6379")

from datetime import UTC, datetime, timedelta  # noqa: E402

import pytest  # noqa: E402
from fakeredis import aioredis  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy.ext.asyncio import create_async_engine  # noqa: E402

from app.api import dependencies  # noqa: E402
from app.config import AppConfig  # noqa: E402
from app.domain.entities import ArtistKind, GigStatus, UserRole  # noqa: E402
from app.gateways.band_gateway import BandGateway  # noqa: E402
from app.gateways.conversation_gateway import ConversationGateway  # noqa: E402
from app.gateways.gig_gateway import GigGateway  # noqa: E402
from app.gateways.message_gateway import MessageGateway  # noqa: E402
from app.gateways.user_gateway import UserGateway  # noqa: E402
from app.infrastructure import schemas  # noqa: E402
from app.infrastructure.database import create_database  # noqa: E402
from app.infrastructure.event_dispatcher import EventDispatcher  # noqa: E402
from app.infrastructure.security import SecurityService  # noqa: E402
from app.infrastructure.subscriptions import SubscriptionService  # noqa: E402
from app.infrastructure.uow import UnitOfWork  # noqa: E402
from app.interactors.band_interactor import BandInteractor  # noqa: E402
from app.interactors.conversation_interactor import ConversationInteractor  # noqa: E402
from app.interactors.gig_interactor import GigInteractor  # noqa: E402
from app.interactors.notification_interactor import NotificationInteractor  # noqa: E402
from app.main import Application  # noqa: E402


@pytest.fixture(scope="function")
def app_config(tmp_path):
    """
    Test configuration backed by a per-test SQLite file.

    A file rather than :memory: so live subscriptions can re-read committed
    state through their own connections.
    """
    return AppConfig(
        DATABASE_URL=f"sqlite+aiosqlite:///{tmp_path / 'gigs.db'}",
        REDIS_HOST="localhost",
        REDIS_PORT=6379,
        SECRET_KEY="test_secret_key",
        PROJECT_NAME="Test GigFinder API",
        PROJECT_VERSION="1.0.0",
        PROJECT_DESCRIPTION="Test GigFinder API",
        API_V1_STR="/api/v1",
        ALGORITHM="HS256",
        PROFILE_FETCH_BACKOFF_SECONDS=0,
    )


@pytest.fixture(scope="function")
async def mock_redis():
    """Provide a fake Redis client for testing."""
    redis = aioredis.FakeRedis()
    yield redis
    await redis.flushall()
    await redis.aclose()


@pytest.fixture(scope="function")
async def engine(app_config):
    engine = create_async_engine(app_config.DATABASE_URL, echo=False)
    async with engine.begin() as conn:
        from app.infrastructure import models  # noqa: F401

        await conn.run_sync(models.Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture(scope="function")
def database(engine):
    return create_database(engine)


@pytest.fixture(scope="function")
async def db_session(database):
    session = database.SessionLocal()
    yield session
    await session.close()


@pytest.fixture(scope="function")
def uow(db_session):
    """A UnitOfWork bound to the test session, so commits are visible elsewhere."""
    return UnitOfWork(db_session)


@pytest.fixture(scope="function")
def event_dispatcher():
    return EventDispatcher()


@pytest.fixture
def user_gateway(db_session, uow):
    return UserGateway(db_session, uow)


@pytest.fixture
def conversation_gateway(db_session, uow):
    return ConversationGateway(db_session, uow)


@pytest.fixture
def message_gateway(db_session, uow):
    return MessageGateway(db_session, uow)


@pytest.fixture
def band_gateway(db_session, uow):
    return BandGateway(db_session, uow)


@pytest.fixture
def gig_gateway(db_session, uow):
    return GigGateway(db_session, uow)


@pytest.fixture
def conversation_interactor(
    conversation_gateway, message_gateway, gig_gateway, user_gateway, event_dispatcher
):
    return ConversationInteractor(
        conversation_gateway, message_gateway, gig_gateway, user_gateway, event_dispatcher
    )


@pytest.fixture
def make_band_interactor(band_gateway, user_gateway, event_dispatcher):
    def _make(allow_expired_accept: bool = True) -> BandInteractor:
        return BandInteractor(
            band_gateway,
            user_gateway,
            event_dispatcher,
            allow_expired_accept=allow_expired_accept,
        )

    return _make


@pytest.fixture
def band_interactor(make_band_interactor):
    return make_band_interactor()


@pytest.fixture
def notification_interactor(band_gateway):
    return NotificationInteractor(band_gateway)


@pytest.fixture
def gig_interactor(gig_gateway, band_gateway, user_gateway, conversation_interactor):
    return GigInteractor(gig_gateway, band_gateway, user_gateway, conversation_interactor)


@pytest.fixture
async def subscription_service(database, event_dispatcher):
    service = SubscriptionService(database, event_dispatcher)
    yield service
    service.close_all()


async def _create_user(user_gateway, user_id, username, role, first=None, last=None):
    return await user_gateway.upsert_profile(
        user_id,
        schemas.UserProfileUpdate(
            email=f"{username}@example.com",
            username=username,
            first_name=first,
            last_name=last,
            role=role,
        ),
    )


@pytest.fixture
async def manager(user_gateway):
    return await _create_user(
        user_gateway, "manager-uid", "venue_boss", UserRole.MANAGER, "Vera", "Stone"
    )


@pytest.fixture
async def musician(user_gateway):
    return await _create_user(
        user_gateway, "musician-uid", "drummer", UserRole.MUSICIAN, "Dave", "Grohl"
    )


@pytest.fixture
async def other_musician(user_gateway):
    return await _create_user(user_gateway, "other-uid", "bassist", UserRole.MUSICIAN)


@pytest.fixture
async def admin(user_gateway):
    return await _create_user(user_gateway, "admin-uid", "site_admin", UserRole.ADMIN)


@pytest.fixture
async def gig(gig_gateway, manager):
    gig_create = schemas.GigCreate(
        title="Friday Night Jazz",
        description="Three sets, house piano available",
        venue_id="venue-1",
        venue_name="The Blue Room",
        date=datetime.now(UTC) + timedelta(days=30),
        start_time="20:00",
        end_time="23:30",
        genres=["jazz"],
        payment_amount=300,
        payment_currency="EUR",
        status=GigStatus.PUBLISHED,
    )
    return await gig_gateway.create_gig(gig_create, manager.id)


@pytest.fixture
async def conversation(conversation_interactor, gig, musician, manager):
    return await conversation_interactor.get_or_create_conversation(
        schemas.ConversationCreate(
            gig_id=gig.id, artist_id=musician.id, artist_kind=ArtistKind.MUSICIAN
        ),
        manager.id,
    )


@pytest.fixture
async def band(band_gateway, user_gateway, musician):
    new_band = await band_gateway.create_band(
        name="The Offbeats",
        created_by=musician.id,
        bio=None,
        genres=["funk"],
        instruments=["drums"],
    )
    await user_gateway.add_band(musician.id, new_band.id)
    return new_band


@pytest.fixture(scope="function")
async def app(app_config, mock_redis, database):
    """Create the FastAPI app with the test database."""
    application = Application(config=app_config)
    application.database = database
    application.subscriptions.database = database
    application.redis_client.client = mock_redis

    app_instance = application.create_app()
    app_instance.state.database = database

    return app_instance


@pytest.fixture(scope="function")
def override_get_db(db_session):
    """Override the get_session dependency to use the test session."""

    async def _override_get_db():
        yield db_session

    return _override_get_db


@pytest.fixture(scope="function")
async def app_with_db(app, override_get_db):
    app.dependency_overrides[dependencies.get_session] = override_get_db
    yield app
    app.dependency_overrides.clear()


@pytest.fixture(scope="function")
async def client(app_with_db):
    """Provide an HTTP client with the test app."""
    async with AsyncClient(transport=ASGITransport(app=app_with_db), base_url="http://test") as ac:
        yield ac


@pytest.fixture
def auth_header_for(app_config):
    """Bearer headers as the identity provider would issue them."""
    security_service = SecurityService(app_config)

    def _header(user_id: str) -> dict[str, str]:
        token, _ = security_service.create_access_token(user_id)
        return {"Authorization": f"Bearer {token}"}

    return _header


@pytest.fixture
def manager_headers(auth_header_for, manager):
    return auth_header_for(manager.id)


@pytest.fixture
def musician_headers(auth_header_for, musician):
    return auth_header_for(musician.id)
