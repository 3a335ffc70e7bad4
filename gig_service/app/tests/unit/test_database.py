# app/tests/unit/test_database.py
import pytest
from sqlalchemy import inspect, text
from sqlalchemy.exc import OperationalError
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine

from app.domain.errors import TransientIOError
from app.infrastructure.database import Database, transient_errors


@pytest.fixture
async def in_memory_db():
    engine = create_async_engine("sqlite+aiosqlite:///:memory:")
    db = Database(engine=engine)
    yield db
    await engine.dispose()


@pytest.mark.asyncio
async def test_database_connect_creates_schema(in_memory_db):
    await in_memory_db.connect()

    async with in_memory_db.engine.connect() as conn:
        tables = await conn.run_sync(lambda sync_conn: inspect(sync_conn).get_table_names())

    assert {"gig_conversations", "gig_messages", "band_invitations"} <= set(tables)


@pytest.mark.asyncio
async def test_database_disconnect(in_memory_db):
    await in_memory_db.connect()

    async with in_memory_db.engine.connect() as conn:
        result = await conn.execute(text("SELECT 1"))
        assert result.scalar() == 1

    await in_memory_db.disconnect()
    assert in_memory_db.engine is not None


@pytest.mark.asyncio
async def test_database_session(in_memory_db):
    async for session in in_memory_db.get_session():
        assert isinstance(session, AsyncSession)


@pytest.mark.asyncio
async def test_transient_errors_translates_operational_errors():
    with pytest.raises(TransientIOError) as exc_info:
        async with transient_errors("select"):
            raise OperationalError("SELECT 1", {}, Exception("disk I/O error"))
    assert exc_info.value.message.startswith("select failed")


@pytest.mark.asyncio
async def test_transient_errors_leaves_other_errors_alone():
    with pytest.raises(ValueError):
        async with transient_errors("select"):
            raise ValueError("boom")
