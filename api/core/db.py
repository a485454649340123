"""
Async database access helpers (raw SQL) using asyncpg.

`Database` owns the connection pool. The app lifespan constructs and
connects it on startup and closes it on shutdown (see `api/main.py`);
routers receive it through the `get_database` dependency. If the store is
down at startup the pool is created on first use instead.

SQL parameter style:
- asyncpg uses positional placeholders: $1, $2, $3, ...
"""

from __future__ import annotations

import asyncio
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

import asyncpg
from fastapi import Request

from .errors import StoreError
from .settings import Settings


def _sanitize_database_url(url: str) -> str:
    parts = urlsplit(url)
    if not parts.query:
        return url

    params = [(k, v) for (k, v) in parse_qsl(parts.query, keep_blank_values=True) if k != "sslmode"]
    query = urlencode(params)
    return urlunsplit((parts.scheme, parts.netloc, parts.path, query, parts.fragment))


def database_url(settings: Settings) -> str:
    url = (settings.database_url or "").strip()
    if not url:
        raise RuntimeError("DATABASE_URL is not set.")
    return _sanitize_database_url(url)


# Failures that mean "the store is unhealthy", as opposed to a constraint
# violation a repository wants to interpret.
_STORE_FAILURES = (
    asyncpg.PostgresError,
    asyncpg.InterfaceError,
    OSError,
    asyncio.TimeoutError,
)


class Database:
    def __init__(
        self,
        dsn: str,
        *,
        min_size: int = 1,
        max_size: int = 10,
        command_timeout: float = 30.0,
        acquire_timeout: float = 10.0,
    ):
        self.dsn = dsn
        self.min_size = min_size
        self.max_size = max_size
        self.command_timeout = command_timeout
        self.acquire_timeout = acquire_timeout
        self._pool: Any = None
        self._connect_lock = asyncio.Lock()

    @classmethod
    def from_settings(cls, settings: Settings) -> Database:
        return cls(
            database_url(settings),
            min_size=settings.db_pool_min_size,
            max_size=settings.db_pool_max_size,
            command_timeout=settings.db_command_timeout_s,
            acquire_timeout=settings.db_acquire_timeout_s,
        )

    @classmethod
    def from_pool(cls, pool: Any, *, acquire_timeout: float = 10.0) -> Database:
        """
        Wrap an already-created pool (tests, scripts).
        """
        database = cls("", acquire_timeout=acquire_timeout)
        database._pool = pool
        return database

    @property
    def connected(self) -> bool:
        return self._pool is not None

    async def connect(self) -> None:
        """
        Create the pool. Safe to call again after a failure; an unreachable
        store raises `StoreError` and leaves the instance unconnected.
        """
        async with self._connect_lock:
            if self._pool is not None:
                return None
            try:
                self._pool = await asyncpg.create_pool(
                    dsn=self.dsn,
                    min_size=self.min_size,
                    max_size=self.max_size,
                    command_timeout=self.command_timeout,
                )
            except _STORE_FAILURES as exc:
                raise StoreError(f"connect failed: {type(exc).__name__}: {exc}") from exc

    async def close(self) -> None:
        if self._pool is None:
            return None
        await self._pool.close()
        self._pool = None

    @property
    def pool(self) -> asyncpg.Pool:
        if self._pool is None:
            raise RuntimeError("DB pool is not initialized. Call connect() on startup.")
        return self._pool

    @asynccontextmanager
    async def connection(self) -> AsyncIterator[asyncpg.Connection]:
        """
        Acquire one connection for the duration of the block.

        Connects first if the pool is not up yet (the store was unreachable
        at startup). The connection goes back to the pool on every exit
        path. Store failures surface as `StoreError`; unique violations pass
        through untouched so callers can report them as conflicts.
        """
        if self._pool is None:
            await self.connect()
        try:
            async with self.pool.acquire(timeout=self.acquire_timeout) as conn:
                yield conn
        except asyncpg.UniqueViolationError:
            raise
        except _STORE_FAILURES as exc:
            raise StoreError(f"{type(exc).__name__}: {exc}") from exc

    async def fetch_one(self, sql: str, *args: Any) -> dict[str, Any] | None:
        """
        Run a query and return a single row as a dict (or None).
        """
        async with self.connection() as conn:
            row = await conn.fetchrow(sql, *args)
        return dict(row) if row is not None else None

    async def fetch_all(self, sql: str, *args: Any) -> list[dict[str, Any]]:
        """
        Run a query and return all rows as a list of dicts.
        """
        async with self.connection() as conn:
            rows = await conn.fetch(sql, *args)
        return [dict(r) for r in rows]

    async def execute(self, sql: str, *args: Any) -> str:
        """
        Run a statement (INSERT/UPDATE/DELETE/DDL) and return its status tag.
        """
        async with self.connection() as conn:
            return await conn.execute(sql, *args)


def get_database(request: Request) -> Database:
    database = getattr(request.app.state, "database", None)
    if database is None:
        raise RuntimeError("Database is not attached to the app. Is the lifespan running?")
    return database
