"""
Blog persistence (raw SQL).

Tags are stored as JSONB. asyncpg hands jsonb back as text unless a codec
is registered, so every row leaving this module goes through
`deserialize_tags`, which accepts either shape.

Slug uniqueness is enforced by the UNIQUE constraint on `blogs.slug`; the
unique-violation error is translated to `Conflict` here.
"""

from __future__ import annotations

import json
from datetime import date
from typing import Any

import asyncpg

from core.db import Database
from core.errors import Conflict, NotFound, StoreError

SLUG_CONFLICT_MESSAGE = "A blog with this slug already exists"
NOT_FOUND_MESSAGE = "Blog not found"

SUMMARY_COLUMNS = """
    id, slug, title, excerpt, cover_image, author_name, author_role, author_image,
    category, tags, read_time, published_at, created_at
"""

FULL_COLUMNS = """
    id, slug, title, excerpt, content, cover_image, author_name, author_role, author_image,
    category, tags, read_time, published_at, status, created_at, updated_at
"""


def serialize_tags(tags: list[str] | None) -> str:
    return json.dumps(list(tags or []), ensure_ascii=False)


def deserialize_tags(value: Any) -> list[str]:
    """
    Normalize a stored tags value into a list of strings.

    Accepts JSON text (the default asyncpg jsonb decoding), an already
    decoded list (drivers or codecs that decode JSON themselves) or None.
    """
    if value is None:
        return []
    if isinstance(value, list):
        return value
    if isinstance(value, (str, bytes, bytearray)):
        try:
            decoded = json.loads(value)
        except ValueError as exc:
            raise StoreError("Stored blog tags are not valid JSON.") from exc
        if decoded is None:
            return []
        if isinstance(decoded, list):
            return decoded
    raise StoreError(f"Stored blog tags have unexpected type {type(value).__name__}.")


def _normalize_row(row: dict[str, Any]) -> dict[str, Any]:
    row["tags"] = deserialize_tags(row.get("tags"))
    return row


async def list_published(database: Database) -> list[dict[str, Any]]:
    rows = await database.fetch_all(
        f"""
        SELECT {SUMMARY_COLUMNS}
        FROM blogs
        WHERE status = 'published'
        ORDER BY published_at DESC, id DESC
        """
    )
    return [_normalize_row(row) for row in rows]


async def get_published_by_slug(database: Database, slug: str) -> dict[str, Any]:
    row = await database.fetch_one(
        f"""
        SELECT {FULL_COLUMNS}
        FROM blogs
        WHERE slug = $1
          AND status = 'published'
        """,
        slug,
    )
    if row is None:
        raise NotFound("Blog post not found")
    return _normalize_row(row)


async def list_all(database: Database) -> list[dict[str, Any]]:
    rows = await database.fetch_all(
        f"""
        SELECT {FULL_COLUMNS}
        FROM blogs
        ORDER BY created_at DESC, id DESC
        """
    )
    return [_normalize_row(row) for row in rows]


def _write_args(blog: dict[str, Any]) -> tuple[Any, ...]:
    published_at: date = blog["published_at"]
    return (
        blog["slug"],
        blog["title"],
        blog["excerpt"],
        blog["content"],
        blog.get("cover_image") or None,
        blog["author_name"],
        blog["author_role"],
        blog.get("author_image") or None,
        blog["category"],
        serialize_tags(blog.get("tags")),
        blog["read_time"],
        published_at,
        blog.get("status") or "draft",
    )


async def insert_blog(database: Database, blog: dict[str, Any]) -> dict[str, Any]:
    try:
        row = await database.fetch_one(
            """
            INSERT INTO blogs (
              slug, title, excerpt, content, cover_image, author_name, author_role, author_image,
              category, tags, read_time, published_at, status
            ) VALUES ($1, $2, $3, $4, $5, $6, $7, $8, $9, $10::jsonb, $11, $12, $13)
            RETURNING id, slug
            """,
            *_write_args(blog),
        )
    except asyncpg.UniqueViolationError as exc:
        raise Conflict(SLUG_CONFLICT_MESSAGE) from exc
    if row is None:
        raise StoreError("Failed to insert blog.")
    return row


async def update_blog(database: Database, blog_id: int, blog: dict[str, Any]) -> None:
    try:
        row = await database.fetch_one(
            """
            UPDATE blogs SET
              slug = $1, title = $2, excerpt = $3, content = $4, cover_image = $5,
              author_name = $6, author_role = $7, author_image = $8, category = $9,
              tags = $10::jsonb, read_time = $11, published_at = $12, status = $13
            WHERE id = $14
            RETURNING id
            """,
            *_write_args(blog),
            blog_id,
        )
    except asyncpg.UniqueViolationError as exc:
        raise Conflict(SLUG_CONFLICT_MESSAGE) from exc
    if row is None:
        raise NotFound(NOT_FOUND_MESSAGE)


async def delete_blog(database: Database, blog_id: int) -> None:
    row = await database.fetch_one(
        """
        DELETE FROM blogs
        WHERE id = $1
        RETURNING id
        """,
        blog_id,
    )
    if row is None:
        raise NotFound(NOT_FOUND_MESSAGE)
