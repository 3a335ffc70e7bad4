# app/api/dependencies.py
import logging
from datetime import timedelta
from typing import AsyncGenerator

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import AppConfig
from app.domain.session import SessionState
from app.gateways.band_gateway import BandGateway
from app.gateways.conversation_gateway import ConversationGateway
from app.gateways.gig_gateway import GigGateway
from app.gateways.message_gateway import MessageGateway
from app.gateways.user_gateway import UserGateway
from app.infrastructure import schemas
from app.infrastructure.event_dispatcher import EventDispatcher
from app.infrastructure.event_handlers import EventHandlers
from app.infrastructure.security import SecurityService
from app.infrastructure.subscriptions import SubscriptionService
from app.infrastructure.uow import UnitOfWork
from app.interactors.band_interactor import BandInteractor
from app.interactors.conversation_interactor import ConversationInteractor
from app.interactors.gig_interactor import GigInteractor
from app.interactors.notification_interactor import NotificationInteractor
from app.interactors.user_interactor import UserInteractor

# tokens are minted by the identity provider, there is no local login route
bearer_scheme = HTTPBearer(auto_error=False)


def get_config(request: Request) -> AppConfig:
    return request.app.state.config


def get_security_service(request: Request) -> SecurityService:
    return request.app.state.security_service


def get_event_dispatcher(request: Request) -> EventDispatcher:
    return request.app.state.event_dispatcher


def get_subscription_service(request: Request) -> SubscriptionService:
    return request.app.state.subscriptions


def get_event_handlers(request: Request) -> EventHandlers:
    return request.app.state.event_handlers


def get_logger(request: Request) -> logging.Logger:
    return request.app.state.logger


async def get_session(request: Request) -> AsyncGenerator[AsyncSession, None]:
    async with request.app.state.database.session() as session:
        try:
            yield session
            await session.commit()  # Commit the transaction
        except Exception:
            await session.rollback()  # Rollback in case of error
            raise


async def get_uow(session: AsyncSession = Depends(get_session)) -> UnitOfWork:
    return UnitOfWork(session)


async def get_user_gateway(
    session: AsyncSession = Depends(get_session), uow: UnitOfWork = Depends(get_uow)
):
    return UserGateway(session, uow)


async def get_conversation_gateway(
    session: AsyncSession = Depends(get_session), uow: UnitOfWork = Depends(get_uow)
):
    return ConversationGateway(session, uow)


async def get_message_gateway(
    session: AsyncSession = Depends(get_session), uow: UnitOfWork = Depends(get_uow)
):
    return MessageGateway(session, uow)


async def get_band_gateway(
    session: AsyncSession = Depends(get_session), uow: UnitOfWork = Depends(get_uow)
):
    return BandGateway(session, uow)


async def get_gig_gateway(
    session: AsyncSession = Depends(get_session), uow: UnitOfWork = Depends(get_uow)
):
    return GigGateway(session, uow)


async def get_user_interactor(
    config: AppConfig = Depends(get_config),
    user_gateway: UserGateway = Depends(get_user_gateway),
    logger: logging.Logger = Depends(get_logger),
):
    return UserInteractor(
        user_gateway,
        fetch_attempts=config.PROFILE_FETCH_ATTEMPTS,
        backoff_seconds=config.PROFILE_FETCH_BACKOFF_SECONDS,
        logger=logger,
    )


async def get_conversation_interactor(
    conversation_gateway: ConversationGateway = Depends(get_conversation_gateway),
    message_gateway: MessageGateway = Depends(get_message_gateway),
    gig_gateway: GigGateway = Depends(get_gig_gateway),
    user_gateway: UserGateway = Depends(get_user_gateway),
    event_dispatcher: EventDispatcher = Depends(get_event_dispatcher),
    logger: logging.Logger = Depends(get_logger),
):
    return ConversationInteractor(
        conversation_gateway,
        message_gateway,
        gig_gateway,
        user_gateway,
        event_dispatcher,
        logger,
    )


async def get_band_interactor(
    config: AppConfig = Depends(get_config),
    band_gateway: BandGateway = Depends(get_band_gateway),
    user_gateway: UserGateway = Depends(get_user_gateway),
    event_dispatcher: EventDispatcher = Depends(get_event_dispatcher),
    logger: logging.Logger = Depends(get_logger),
):
    return BandInteractor(
        band_gateway,
        user_gateway,
        event_dispatcher,
        invitation_ttl=timedelta(days=config.INVITATION_TTL_DAYS),
        application_ttl=timedelta(days=config.APPLICATION_TTL_DAYS),
        allow_expired_accept=config.ALLOW_EXPIRED_ACCEPT,
        logger=logger,
    )


async def get_notification_interactor(
    band_gateway: BandGateway = Depends(get_band_gateway),
):
    return NotificationInteractor(band_gateway)


async def get_gig_interactor(
    gig_gateway: GigGateway = Depends(get_gig_gateway),
    band_gateway: BandGateway = Depends(get_band_gateway),
    user_gateway: UserGateway = Depends(get_user_gateway),
    conversation_interactor: ConversationInteractor = Depends(get_conversation_interactor),
    logger: logging.Logger = Depends(get_logger),
):
    return GigInteractor(
        gig_gateway, band_gateway, user_gateway, conversation_interactor, logger
    )


async def get_session_state(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    security_service: SecurityService = Depends(get_security_service),
    user_interactor: UserInteractor = Depends(get_user_interactor),
) -> SessionState:
    user_id = (
        security_service.decode_access_token(credentials.credentials)
        if credentials
        else None
    )
    if user_id is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Could not validate credentials",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return await user_interactor.load_session(user_id)


async def get_current_user_id(
    session_state: SessionState = Depends(get_session_state),
) -> str:
    return session_state.require_user_id()


async def get_current_profile(
    session_state: SessionState = Depends(get_session_state),
) -> schemas.UserProfile:
    return session_state.require_profile()
