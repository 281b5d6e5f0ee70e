"""
Database manager.

A single SQLite file holds a handful of leagues and a few thousand fixtures
per season, so the engine is aiosqlite with WAL journaling.
"""
from __future__ import annotations

import os
import sqlite3
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator

from sqlalchemy import event
from sqlalchemy.engine import Engine, Result
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.sql.elements import ClauseElement, TextClause

from reftrends.config import Settings

SQLITE_PRAGMAS = ("PRAGMA journal_mode=WAL", "PRAGMA foreign_keys=ON")


@event.listens_for(Engine, "connect")
def set_sqlite_pragma(dbapi_connection: Any, connection_record: Any):
    # aiosqlite hands over an adapter around the sqlite3 connection
    if not (
        isinstance(dbapi_connection, sqlite3.Connection)
        or "sqlite" in type(dbapi_connection).__module__
    ):
        return
    cursor = dbapi_connection.cursor()
    try:
        for pragma in SQLITE_PRAGMAS:
            cursor.execute(pragma)
    finally:
        cursor.close()


def build_sqlite_url(path: str) -> str:
    return f"sqlite+aiosqlite:///{os.path.abspath(path)}"


def _ensure_statement(query: Any) -> None:
    if isinstance(query, str):
        raise TypeError("Raw SQL strings are disallowed. Use sqlalchemy.text().")
    if not isinstance(query, (TextClause, ClauseElement)):
        raise TypeError("Query must be a SQLAlchemy TextClause or ClauseElement.")


class DBM:
    """Owns the engine for one reftrends database file."""

    def __init__(self, settings: Settings, db_path: str | None = None):
        self.settings = settings
        self.db_path = db_path or settings.database.database_path()
        self.engine: AsyncEngine = create_async_engine(
            build_sqlite_url(self.db_path),
            echo=settings.database.echo,
        )
        self.session_maker: async_sessionmaker[AsyncSession] = async_sessionmaker(
            bind=self.engine,
            expire_on_commit=False,
            autoflush=False,
        )

    @asynccontextmanager
    async def session(self) -> AsyncIterator[AsyncSession]:
        async with self.session_maker() as session:
            yield session

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[AsyncSession]:
        """Session whose work commits on exit and rolls back on error."""
        async with self.session_maker() as session:
            async with session.begin():
                yield session

    async def read(self, query: Any, params: dict | None = None) -> list[Any]:
        """Run a read statement and return the rows as mappings."""
        _ensure_statement(query)
        async with self.session() as session:
            result: Result = await session.execute(query, params or {})
            return list(result.mappings().all())

    async def write(self, query: Any, params: dict | None = None) -> int:
        """Run a parameterised write in a transaction and return the row count."""
        _ensure_statement(query)
        if not params:
            raise ValueError("Parameterized writes are required. Provide a params mapping.")
        async with self.transaction() as session:
            result: Result = await session.execute(query, params)
            return result.rowcount or 0

    async def dispose(self) -> None:
        await self.engine.dispose()
