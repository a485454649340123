"""
Blog business rules.

Public reads only ever see published posts; admin reads see every status.
Create and update share one validation path: an update is a full-row
replace, so it must carry the same required fields as a create.
"""

from __future__ import annotations

import logging
from datetime import date, datetime
from typing import Any, Mapping

from core.db import Database
from core.errors import ValidationError
from core.validation import check_max_lengths, check_no_nul, missing_fields

from . import repository

REQUIRED_FIELDS = (
    "slug",
    "title",
    "excerpt",
    "content",
    "author_name",
    "author_role",
    "category",
    "read_time",
    "published_at",
)

OPTIONAL_FIELDS = ("cover_image", "author_image", "tags", "status")

STATUSES = ("draft", "published")
DEFAULT_STATUS = "draft"

# Mirrors the VARCHAR sizes in core/schema.py.
FIELD_LIMITS = {
    "slug": 255,
    "title": 500,
    "author_name": 255,
    "author_role": 255,
    "category": 100,
    "read_time": 50,
}

logger = logging.getLogger(__name__)


def parse_published_at(value: Any) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value

    raw = str(value).strip()
    try:
        return date.fromisoformat(raw)
    except ValueError:
        pass
    try:
        return datetime.fromisoformat(raw.replace("Z", "+00:00")).date()
    except ValueError as exc:
        raise ValidationError("published_at must be a date in YYYY-MM-DD format") from exc


def _validate_tags(tags: Any) -> list[str]:
    if tags is None:
        return []
    if not isinstance(tags, list) or not all(isinstance(tag, str) for tag in tags):
        raise ValidationError("tags must be a list of strings")
    return list(tags)


def validate_blog(fields: Mapping[str, Any]) -> dict[str, Any]:
    """
    Return the row to write, with defaults applied and types normalized.
    """
    if missing_fields(fields, REQUIRED_FIELDS):
        raise ValidationError("All required fields must be provided")

    check_max_lengths(fields, FIELD_LIMITS)
    check_no_nul({name: fields.get(name) for name in REQUIRED_FIELDS + OPTIONAL_FIELDS})

    status = fields.get("status") or DEFAULT_STATUS
    if status not in STATUSES:
        raise ValidationError(f"status must be one of: {', '.join(STATUSES)}")

    blog = {name: fields.get(name) for name in REQUIRED_FIELDS + OPTIONAL_FIELDS}
    blog["slug"] = str(blog["slug"]).strip()
    blog["published_at"] = parse_published_at(fields["published_at"])
    blog["tags"] = _validate_tags(fields.get("tags"))
    blog["status"] = status
    return blog


async def list_published(database: Database) -> list[dict[str, Any]]:
    return await repository.list_published(database)


async def get_published_by_slug(database: Database, slug: str) -> dict[str, Any]:
    return await repository.get_published_by_slug(database, slug)


async def list_all(database: Database) -> list[dict[str, Any]]:
    return await repository.list_all(database)


async def create_blog(database: Database, fields: Mapping[str, Any]) -> dict[str, Any]:
    blog = validate_blog(fields)
    row = await repository.insert_blog(database, blog)
    logger.info("blog_created id=%s slug=%s status=%s", row["id"], row["slug"], blog["status"])
    return {"id": int(row["id"]), "slug": str(row["slug"])}


async def update_blog(database: Database, blog_id: int, fields: Mapping[str, Any]) -> None:
    blog = validate_blog(fields)
    await repository.update_blog(database, blog_id, blog)
    logger.info("blog_updated id=%s slug=%s status=%s", blog_id, blog["slug"], blog["status"])


async def delete_blog(database: Database, blog_id: int) -> None:
    await repository.delete_blog(database, blog_id)
    logger.info("blog_deleted id=%s", blog_id)
