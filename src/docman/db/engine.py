"""Async SQLAlchemy engine and session factory.

Learn: SQLAlchemy 2.0 async mode. create_async_engine for connection pooling,
AsyncSession for per-request database access, dependency injection via FastAPI.

The Database handle is built once by the app factory and kept on
app.state. There is no module-level engine: whoever creates the handle
owns its lifecycle (create_all at startup, dispose at shutdown).
"""

from typing import Any, AsyncIterator

from fastapi import Request
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from docman.config import Settings
from docman.db.models import Base


class Database:
    """Owns the engine and hands out sessions."""

    def __init__(self, url: str, echo: bool = False, **engine_kwargs: Any):
        self.url = url
        self.engine: AsyncEngine = create_async_engine(url, echo=echo, **engine_kwargs)
        # Each request gets its own session.
        self.session_factory = async_sessionmaker(
            self.engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )

    @classmethod
    def from_settings(cls, settings: Settings) -> "Database":
        kwargs: dict[str, Any] = {}
        if not settings.database_url.startswith("sqlite"):
            # Connection pool: min 5, max 20 connections.
            kwargs.update(pool_size=5, max_overflow=15)
        return cls(settings.database_url, echo=settings.debug, **kwargs)

    async def create_all(self) -> None:
        """Create every table that does not exist yet."""
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    async def dispose(self) -> None:
        await self.engine.dispose()


async def get_db(request: Request) -> AsyncIterator[AsyncSession]:
    """FastAPI dependency: yields a session per request, auto-closes."""
    database: Database = request.app.state.db
    async with database.session_factory() as session:
        try:
            yield session
        finally:
            await session.close()
