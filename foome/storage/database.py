"""Async database engine and session factory."""

from collections.abc import AsyncGenerator
from functools import lru_cache
from typing import Any

from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine
from sqlmodel import SQLModel
from sqlmodel.ext.asyncio.session import AsyncSession

from foome.config.settings import get_settings


@lru_cache
def get_engine() -> AsyncEngine:
    """Return a cached async database engine (singleton per process)."""
    settings = get_settings()
    kwargs: dict[str, Any] = {"echo": settings.debug}
    if not settings.database_url.startswith("sqlite"):
        kwargs.update(pool_size=5, max_overflow=10, pool_pre_ping=True, pool_recycle=3600)
    return create_async_engine(settings.database_url, **kwargs)


async def get_session() -> AsyncGenerator[AsyncSession, None]:
    """Yield an async database session scoped to one request."""
    engine = get_engine()
    async with AsyncSession(engine, expire_on_commit=False) as session:
        yield session


async def init_db(engine: AsyncEngine | None = None) -> None:
    """Create all tables (for dev/testing only; use Alembic in production)."""
    import foome.models.database  # noqa: F401 - registers table metadata

    engine = engine or get_engine()
    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)
