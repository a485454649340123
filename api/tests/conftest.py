import asyncio
import os
import sys
from collections import defaultdict, deque
from pathlib import Path

import pytest

# Ensure api/ on sys.path so `core`, `blogs`, ... import like they do under uvicorn
_THIS_DIR = Path(__file__).resolve().parent
_API_ROOT = _THIS_DIR.parent
if str(_API_ROOT) not in sys.path:
    sys.path.insert(0, str(_API_ROOT))

from core.db import Database  # noqa: E402
from core.settings import Settings  # noqa: E402

_DEFAULTS = {"fetchrow": None, "fetch": [], "execute": "OK"}


class FakeConnection:
    """asyncpg.Connection look-alike that replays queued results."""

    def __init__(self, pool):
        self._pool = pool

    async def _run(self, method, sql, args):
        self._pool.calls.append((method, sql, args))
        queue = self._pool.results[method]
        result = queue.popleft() if queue else _DEFAULTS[method]
        if isinstance(result, BaseException):
            raise result
        return result

    async def fetchrow(self, sql, *args, **_):
        return await self._run("fetchrow", sql, args)

    async def fetch(self, sql, *args, **_):
        return await self._run("fetch", sql, args)

    async def execute(self, sql, *args, **_):
        return await self._run("execute", sql, args)

    def transaction(self):
        return _FakeTransaction()


class _FakeTransaction:
    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc):
        return False


class _FakeAcquire:
    def __init__(self, pool):
        self._pool = pool

    async def __aenter__(self):
        self._pool.acquired += 1
        return FakeConnection(self._pool)

    async def __aexit__(self, *exc):
        self._pool.released += 1
        return False


class FakePool:
    def __init__(self):
        self.results = defaultdict(deque)
        self.calls = []
        self.acquired = 0
        self.released = 0
        self.closed = False

    def queue(self, method, *results):
        self.results[method].extend(results)
        return self

    def acquire(self, timeout=None):
        return _FakeAcquire(self)

    async def close(self):
        self.closed = True

    def sql(self, method=None):
        return [sql for (m, sql, _) in self.calls if method is None or m == method]


def run(coro):
    return asyncio.run(coro)


@pytest.fixture()
def fake_pool():
    return FakePool()


@pytest.fixture()
def fake_db(fake_pool):
    return Database.from_pool(fake_pool)


@pytest.fixture()
def make_client(fake_db):
    """
    Build a TestClient around the fake pool. The lifespan is not entered,
    so no real connection is attempted.
    """
    from fastapi.testclient import TestClient

    from main import create_app

    def _make(**overrides):
        app = create_app(Settings(database_url="postgresql://unused/unused", **overrides))
        app.state.database = fake_db
        return TestClient(app, raise_server_exceptions=False)

    return _make


@pytest.fixture()
def client(make_client):
    return make_client()


# --- real Postgres (optional) -------------------------------------------------

TEST_DATABASE_URL = os.environ.get("TEST_DATABASE_URL", "").strip()

requires_postgres = pytest.mark.skipif(
    not TEST_DATABASE_URL,
    reason="TEST_DATABASE_URL is not set",
)


async def _reset_tables(database):
    await database.execute("TRUNCATE contacts, blogs RESTART IDENTITY")


def run_with_database(fn):
    """
    Run `fn(database)` against a freshly provisioned, empty test database.
    """
    from core import schema

    async def _main():
        database = Database(TEST_DATABASE_URL, min_size=1, max_size=2)
        await database.connect()
        try:
            await schema.ensure_schema(database, strict=True)
            await _reset_tables(database)
            return await fn(database)
        finally:
            await database.close()

    return asyncio.run(_main())


@pytest.fixture()
def pg_client():
    if not TEST_DATABASE_URL:
        pytest.skip("TEST_DATABASE_URL is not set")

    from fastapi.testclient import TestClient

    from main import create_app

    # Provision and empty the tables from a separate, short-lived pool.
    run_with_database(lambda database: asyncio.sleep(0))

    app = create_app(Settings(database_url=TEST_DATABASE_URL, schema_strict=True))
    with TestClient(app) as client:
        yield client
