"""Database session and engine management."""
from __future__ import annotations

from contextlib import asynccontextmanager
from typing import Any, AsyncIterator

from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool

from devterminal.core.config import get_settings

_settings = get_settings()
_is_sqlite = _settings.database_url.startswith("sqlite")

_engine_options: dict[str, Any] = {}
if _is_sqlite:
    # aiosqlite connections are bound to the event loop that opened them
    _engine_options["poolclass"] = NullPool

engine = create_async_engine(_settings.database_url, future=True, echo=False, **_engine_options)
async_session_factory = async_sessionmaker(engine, expire_on_commit=False, class_=AsyncSession)


if _is_sqlite:

    @event.listens_for(engine.sync_engine, "connect")
    def _enable_foreign_keys(dbapi_connection, connection_record) -> None:
        # SQLite ignores REFERENCES clauses unless asked per connection
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


@asynccontextmanager
async def get_session() -> AsyncIterator[AsyncSession]:
    """Provide a transactional scope around a series of operations."""

    async with async_session_factory() as session:
        try:
            yield session
        finally:
            await session.close()
