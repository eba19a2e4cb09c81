"""Async engine + session factory shared by the app."""

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from app.core.config import settings

_engine_kwargs: dict = {"echo": settings.DEBUG}
if settings.DATABASE_URL.startswith("postgresql"):
    # Serial allocation relies on row locks, not snapshot isolation.
    _engine_kwargs["isolation_level"] = "READ COMMITTED"

engine = create_async_engine(settings.DATABASE_URL, **_engine_kwargs)

async_session_factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
