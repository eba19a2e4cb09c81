"""Shared test fixtures.

Database tests run against ``TEST_DATABASE_URL`` when set (PostgreSQL), else
against a throwaway SQLite file per test. SQLite has no row locks, so its
connections open with ``BEGIN IMMEDIATE``: writers serialize on the database
lock instead, which still exercises the allocator's one-writer-at-a-time path.
"""

import os
from collections.abc import AsyncGenerator

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy import event
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

os.environ.setdefault("ENVIRONMENT", "development")
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("SERIAL_LOCK_TIMEOUT_MS", "5000")

import app.core.dependencies as deps_mod  # noqa: E402
import app.models  # noqa: E402, F401
from app.db.base import Base  # noqa: E402
from app.db.session import engine as app_engine  # noqa: E402
from app.main import app  # noqa: E402

TEST_DATABASE_URL = os.environ.get("TEST_DATABASE_URL")


def _use_sqlite_locking(engine: AsyncEngine) -> None:
    """Take over BEGIN from the driver so SAVEPOINT and write locks behave."""

    @event.listens_for(engine.sync_engine, "connect")
    def _on_connect(dbapi_connection, _connection_record):
        dbapi_connection.isolation_level = None
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    @event.listens_for(engine.sync_engine, "begin")
    def _on_begin(conn):
        conn.exec_driver_sql("BEGIN IMMEDIATE")


@pytest.fixture
async def engine(tmp_path) -> AsyncGenerator[AsyncEngine, None]:
    if TEST_DATABASE_URL:
        test_engine = create_async_engine(TEST_DATABASE_URL, isolation_level="READ COMMITTED")
    else:
        test_engine = create_async_engine(
            f"sqlite+aiosqlite:///{tmp_path / 'numbering.db'}",
            connect_args={"timeout": 30},
        )
        _use_sqlite_locking(test_engine)

    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield test_engine
    if TEST_DATABASE_URL:
        async with test_engine.begin() as conn:
            await conn.run_sync(Base.metadata.drop_all)
    await test_engine.dispose()


@pytest.fixture
def session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def db(
    session_factory: async_sessionmaker[AsyncSession],
) -> AsyncGenerator[AsyncSession, None]:
    """Async DB session with transaction rollback after each test."""
    async with session_factory() as session:
        yield session
        await session.rollback()


@pytest.fixture
async def client(
    session_factory: async_sessionmaker[AsyncSession],
) -> AsyncGenerator[AsyncClient, None]:
    """HTTP test client with get_db pointed at the test database."""

    async def _test_get_db() -> AsyncGenerator[AsyncSession, None]:
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[deps_mod.get_db] = _test_get_db
    try:
        transport = ASGITransport(app=app)
        async with AsyncClient(transport=transport, base_url="http://test") as c:
            yield c
    finally:
        app.dependency_overrides.pop(deps_mod.get_db, None)
        await app_engine.dispose()
