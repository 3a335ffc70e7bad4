# app/main.py
import logging
import sys
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import create_async_engine

from app.api import bands, conversations, gigs, invitations, notifications, users
from app.config import AppConfig
from app.domain.errors import (
    DomainError,
    GigValidationError,
    InvalidStateError,
    NotFoundError,
    PermissionDeniedError,
    TransientIOError,
)
from app.infrastructure.database import create_database
from app.infrastructure.event_dispatcher import EventDispatcher
from app.infrastructure.event_handlers import EventHandlers
from app.infrastructure.redis_client import RedisClient
from app.infrastructure.security import SecurityService
from app.infrastructure.subscriptions import SubscriptionService

ERROR_STATUS_CODES: dict[type[DomainError], int] = {
    NotFoundError: 404,
    PermissionDeniedError: 403,
    InvalidStateError: 409,
    GigValidationError: 422,
    TransientIOError: 503,
}


def status_code_for(exc: DomainError) -> int:
    for cls in type(exc).__mro__:
        if cls in ERROR_STATUS_CODES:
            return ERROR_STATUS_CODES[cls]
    return 400


class Application:
    def __init__(self, config: AppConfig):
        self.config = config
        self.logger = self.setup_logger()
        engine = create_async_engine(config.DATABASE_URL, echo=False)
        self.database = create_database(engine, logger=self.logger)
        self.redis_client = RedisClient(
            config.REDIS_HOST, config.REDIS_PORT, self.logger
        )
        self.event_dispatcher = EventDispatcher()
        self.security_service = SecurityService(config)
        self.event_handlers = EventHandlers(self.redis_client, self.logger)
        self.subscriptions = SubscriptionService(
            self.database, self.event_dispatcher, self.logger
        )

        # Register event handlers
        self.event_dispatcher.register(
            "MessageCreated", self.event_handlers.publish_message_created
        )
        self.event_dispatcher.register(
            "MessagesRead", self.event_handlers.publish_messages_read
        )
        self.event_dispatcher.register(
            "ConversationChanged", self.event_handlers.publish_conversation_changed
        )
        self.event_dispatcher.register(
            "InvitationSent", self.event_handlers.publish_invitation_sent
        )
        self.event_dispatcher.register(
            "InvitationAccepted", self.event_handlers.publish_invitation_accepted
        )
        self.event_dispatcher.register(
            "InvitationDeclined", self.event_handlers.publish_invitation_declined
        )

    @asynccontextmanager
    async def lifespan(self, app: FastAPI):
        await self.database.connect()
        await self.redis_client.connect()
        yield
        self.subscriptions.close_all()
        await self.database.disconnect()
        await self.redis_client.disconnect()

    def setup_logger(self):
        logger = logging.getLogger("GigAPI")
        logger.setLevel(self.config.LOG_LEVEL.upper())

        if not logger.handlers:
            c_handler = logging.StreamHandler(sys.stdout)
            formatter = logging.Formatter(
                "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
            )
            c_handler.setFormatter(formatter)
            logger.addHandler(c_handler)

        return logger

    def create_app(self) -> FastAPI:
        app = FastAPI(
            title=self.config.PROJECT_NAME,
            version=self.config.PROJECT_VERSION,
            description=self.config.PROJECT_DESCRIPTION,
            openapi_url=f"{self.config.API_V1_STR}/openapi.json",
            lifespan=self.lifespan,
        )

        app.state.config = self.config
        app.state.security_service = self.security_service
        app.state.event_dispatcher = self.event_dispatcher
        app.state.database = self.database
        app.state.subscriptions = self.subscriptions
        app.state.event_handlers = self.event_handlers
        app.state.logger = self.logger

        # Create routers
        prefix = self.config.API_V1_STR
        app.include_router(users.router, prefix=f"{prefix}/users", tags=["users"])
        app.include_router(
            conversations.router,
            prefix=f"{prefix}/conversations",
            tags=["conversations"],
        )
        app.include_router(bands.router, prefix=f"{prefix}/bands", tags=["bands"])
        app.include_router(
            invitations.router, prefix=f"{prefix}/invitations", tags=["invitations"]
        )
        app.include_router(
            notifications.router,
            prefix=f"{prefix}/notifications",
            tags=["notifications"],
        )
        app.include_router(gigs.router, prefix=f"{prefix}/gigs", tags=["gigs"])

        @app.exception_handler(DomainError)
        async def domain_exception_handler(request: Request, exc: DomainError):
            content = {"detail": exc.message}
            if isinstance(exc, GigValidationError):
                content["errors"] = exc.errors
            if isinstance(exc, TransientIOError):
                self.logger.error(f"Transient failure on {request.url.path}: {exc.message}")
            return JSONResponse(status_code=status_code_for(exc), content=content)

        @app.exception_handler(Exception)
        async def global_exception_handler(request: Request, exc: Exception):
            self.logger.exception(f"Unhandled error on {request.url.path}")
            return JSONResponse(
                status_code=500,
                content={"message": f"An unexpected error occurred: {str(exc)}"},
            )

        @app.get("/")
        async def root():
            return {"message": "Welcome to the GigFinder Messaging API"}

        return app


def create():
    config = AppConfig()
    application = Application(config)
    app = application.create_app()
    application.logger.info("Application created and configured")

    return app


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("app.main:create", factory=True, host="127.0.0.1", port=8000)
