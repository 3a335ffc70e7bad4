# app/infrastructure/database.py
import logging
from contextlib import asynccontextmanager
from typing import Optional, AsyncGenerator

from sqlalchemy.exc import InterfaceError, OperationalError
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker
from sqlalchemy.orm import DeclarativeBase

from app.domain.errors import TransientIOError

# Driver-level failures worth retrying; integrity and programming errors are not.
TRANSIENT_DB_ERRORS = (OperationalError, InterfaceError)


class Base(DeclarativeBase):
    pass


class Database:
    def __init__(
        self,
        engine: AsyncEngine,
        session_factory: Optional[async_sessionmaker[AsyncSession]] = None,
        logger: Optional[logging.Logger] = None,
    ):
        self.engine = engine
        self.SessionLocal = session_factory or async_sessionmaker(
            self.engine, class_=AsyncSession, expire_on_commit=False
        )
        self.logger = logger or logging.getLogger(__name__)

    async def connect(self) -> None:
        async with self.engine.begin() as conn:
            import app.infrastructure.models  # noqa: F401

            await conn.run_sync(Base.metadata.create_all)
        self.logger.info("Database schema ready")

    async def disconnect(self) -> None:
        await self.engine.dispose()
        self.logger.info("Database engine disposed")

    @asynccontextmanager
    async def session(self) -> AsyncGenerator[AsyncSession, None]:
        async with self.SessionLocal() as session:
            yield session

    async def get_session(self) -> AsyncGenerator[AsyncSession, None]:
        async with self.session() as session:
            yield session


@asynccontextmanager
async def transient_errors(operation: str) -> AsyncGenerator[None, None]:
    try:
        yield
    except TRANSIENT_DB_ERRORS as e:
        raise TransientIOError(f"{operation} failed: {e}") from e


# Factory function to create Database instance
def create_database(
    engine: AsyncEngine,
    session_factory: Optional[async_sessionmaker[AsyncSession]] = None,
    logger: Optional[logging.Logger] = None,
) -> Database:
    return Database(engine, session_factory, logger)
