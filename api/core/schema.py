"""
Schema provisioning.

Brings the database to the shape the repositories expect. Runs once from
the app lifespan, before requests are served. Everything here is additive:
tables, indexes, triggers and late columns are created when missing and
nothing is ever dropped or renamed.

Concurrent process starts are serialized with a transaction-level advisory
lock, so the probe-then-alter steps below have a single owner.
"""

from __future__ import annotations

import logging

import asyncpg

from .db import Database
from .errors import StoreError

logger = logging.getLogger(__name__)

# Arbitrary constant shared by every process of this service.
SCHEMA_LOCK_KEY = 7_310_224_015

UPDATED_AT_FUNCTION_DDL = """
CREATE OR REPLACE FUNCTION set_updated_at() RETURNS trigger AS $$
BEGIN
  NEW.updated_at = now();
  RETURN NEW;
END;
$$ LANGUAGE plpgsql
"""

CONTACTS_DDL = """
CREATE TABLE IF NOT EXISTS contacts (
  id BIGSERIAL PRIMARY KEY,
  name VARCHAR(255) NOT NULL,
  email VARCHAR(255) NOT NULL,
  message TEXT NOT NULL,
  created_at TIMESTAMPTZ NOT NULL DEFAULT now(),
  updated_at TIMESTAMPTZ NOT NULL DEFAULT now()
);
CREATE INDEX IF NOT EXISTS idx_contacts_created_at ON contacts (created_at)
"""

BLOGS_DDL = """
CREATE TABLE IF NOT EXISTS blogs (
  id BIGSERIAL PRIMARY KEY,
  slug VARCHAR(255) NOT NULL UNIQUE,
  title VARCHAR(500) NOT NULL,
  excerpt TEXT NOT NULL,
  content TEXT NOT NULL,
  cover_image TEXT,
  author_name VARCHAR(255) NOT NULL,
  author_role VARCHAR(255) NOT NULL,
  author_image TEXT,
  category VARCHAR(100) NOT NULL,
  tags JSONB NOT NULL DEFAULT '[]'::jsonb,
  read_time VARCHAR(50) NOT NULL,
  published_at DATE NOT NULL,
  status VARCHAR(16) NOT NULL DEFAULT 'draft'
    CHECK (status IN ('draft', 'published')),
  created_at TIMESTAMPTZ NOT NULL DEFAULT now(),
  updated_at TIMESTAMPTZ NOT NULL DEFAULT now()
);
CREATE INDEX IF NOT EXISTS idx_blogs_slug ON blogs (slug);
CREATE INDEX IF NOT EXISTS idx_blogs_category ON blogs (category);
CREATE INDEX IF NOT EXISTS idx_blogs_status ON blogs (status);
CREATE INDEX IF NOT EXISTS idx_blogs_published_at ON blogs (published_at)
"""

# Columns added after the first release of the blogs table.
BLOG_LATE_COLUMNS: tuple[tuple[str, str], ...] = (
    ("author_image", "TEXT"),
    ("cover_image", "TEXT"),
)


async def _column_exists(conn: asyncpg.Connection, table: str, column: str) -> bool:
    row = await conn.fetchrow(
        """
        SELECT 1 AS ok
        FROM information_schema.columns
        WHERE table_schema = current_schema()
          AND table_name = $1
          AND column_name = $2
        LIMIT 1
        """,
        table,
        column,
    )
    return row is not None


async def _trigger_exists(conn: asyncpg.Connection, table: str, trigger: str) -> bool:
    row = await conn.fetchrow(
        """
        SELECT 1 AS ok
        FROM pg_trigger
        WHERE tgrelid = to_regclass($1)
          AND tgname = $2
          AND NOT tgisinternal
        LIMIT 1
        """,
        table,
        trigger,
    )
    return row is not None


async def _ensure_updated_at_trigger(conn: asyncpg.Connection, table: str) -> None:
    trigger = f"trg_{table}_updated_at"
    if await _trigger_exists(conn, table, trigger):
        return
    await conn.execute(
        f"""
        CREATE TRIGGER {trigger}
        BEFORE UPDATE ON {table}
        FOR EACH ROW EXECUTE FUNCTION set_updated_at()
        """
    )
    logger.info("schema_trigger_created table=%s trigger=%s", table, trigger)


async def _ensure_late_columns(conn: asyncpg.Connection) -> None:
    for column, column_type in BLOG_LATE_COLUMNS:
        if await _column_exists(conn, "blogs", column):
            logger.info("schema_column_present table=blogs column=%s", column)
            continue
        await conn.execute(f"ALTER TABLE blogs ADD COLUMN {column} {column_type}")
        logger.info("schema_column_added table=blogs column=%s", column)


async def _provision(database: Database, *, include_blogs: bool) -> None:
    async with database.connection() as conn:
        async with conn.transaction():
            await conn.execute("SELECT pg_advisory_xact_lock($1)", SCHEMA_LOCK_KEY)
            await conn.execute(UPDATED_AT_FUNCTION_DDL)

            await conn.execute(CONTACTS_DDL)
            await _ensure_updated_at_trigger(conn, "contacts")
            logger.info("schema_table_ready table=contacts")

            if include_blogs:
                await conn.execute(BLOGS_DDL)
                await _ensure_late_columns(conn)
                await _ensure_updated_at_trigger(conn, "blogs")
                logger.info("schema_table_ready table=blogs")


async def ensure_schema(
    database: Database,
    *,
    include_blogs: bool = True,
    strict: bool = False,
) -> bool:
    """
    Create missing tables, indexes, triggers and late columns.

    Returns True when the schema is current. On failure the error is logged
    and False is returned so the process keeps serving; individual requests
    then fail with store errors. Pass `strict=True` to re-raise instead.
    """
    try:
        await _provision(database, include_blogs=include_blogs)
    except (StoreError, asyncpg.PostgresError):
        logger.exception("schema_provisioning_failed include_blogs=%s", include_blogs)
        if strict:
            raise
        return False
    return True
