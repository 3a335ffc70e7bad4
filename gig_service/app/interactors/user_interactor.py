# app/interactors/user_interactor.py
import asyncio
import logging

from app.domain.errors import TransientIOError
from app.domain.session import SessionState
from app.gateways.user_gateway import UserGateway
from app.infrastructure import schemas
from app.infrastructure.uow import UoWModel


class UserInteractor:
    def __init__(
        self,
        user_gateway: UserGateway,
        fetch_attempts: int = 3,
        backoff_seconds: float = 1.0,
        logger: logging.Logger | None = None,
    ):
        self.user_gateway = user_gateway
        self.fetch_attempts = max(1, fetch_attempts)
        self.backoff_seconds = backoff_seconds
        self.logger = logger or logging.getLogger(__name__)

    async def get_profile(self, user_id: str) -> schemas.UserProfile | None:
        user: UoWModel | None = await self.user_gateway.get_user(user_id)
        return schemas.UserProfile.model_validate(user._model) if user else None

    async def upsert_profile(
        self, user_id: str, profile: schemas.UserProfileUpdate
    ) -> schemas.UserProfile:
        user: UoWModel = await self.user_gateway.upsert_profile(user_id, profile)
        return schemas.UserProfile.model_validate(user._model)

    async def fetch_profile_with_retry(self, user_id: str) -> schemas.UserProfile | None:
        for attempt in range(1, self.fetch_attempts + 1):
            try:
                return await self.get_profile(user_id)
            except TransientIOError as e:
                if attempt == self.fetch_attempts:
                    raise
                delay = self.backoff_seconds * attempt
                self.logger.warning(
                    f"Profile fetch for {user_id} failed (attempt {attempt}): {e.message}; "
                    f"retrying in {delay:.1f}s"
                )
                await asyncio.sleep(delay)
        return None

    async def load_session(self, user_id: str) -> SessionState:
        session = SessionState()
        session.begin_loading(user_id)
        session.ready(await self.fetch_profile_with_retry(user_id))
        return session
