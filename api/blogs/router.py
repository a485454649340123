"""
Blog API endpoints.

`/api/blogs*` is the public, published-only surface. `/api/admin/blogs*`
sees every status and goes through the admin gate.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, status

from auth import dependencies as auth_dependencies
from core.db import Database, get_database
from core.errors import NotFound
from core.responses import ok

from . import repository, schemas, service

router = APIRouter()

# bigint range; ids outside it can never match a row.
MIN_BLOG_ID = -(2**63)
MAX_BLOG_ID = 2**63 - 1


def _parse_blog_id(raw: str) -> int:
    """
    Ids that are not integers, or fall outside bigint, name no row: 404.
    """
    try:
        blog_id = int(raw.strip())
    except ValueError:
        raise NotFound(repository.NOT_FOUND_MESSAGE) from None
    if not MIN_BLOG_ID <= blog_id <= MAX_BLOG_ID:
        raise NotFound(repository.NOT_FOUND_MESSAGE)
    return blog_id


@router.get("/api/blogs")
async def list_published_blogs(
    database: Database = Depends(get_database),
) -> dict:
    rows = await service.list_published(database)
    return ok(rows)


@router.get("/api/blogs/{slug}")
async def get_blog(
    slug: str,
    database: Database = Depends(get_database),
) -> dict:
    row = await service.get_published_by_slug(database, slug)
    return ok(row)


@router.get("/api/admin/blogs")
async def list_all_blogs(
    database: Database = Depends(get_database),
    _: dict = Depends(auth_dependencies.require_admin),
) -> dict:
    rows = await service.list_all(database)
    return ok(rows)


@router.post("/api/admin/blogs", status_code=status.HTTP_201_CREATED)
async def create_blog(
    request: schemas.BlogWriteRequest,
    database: Database = Depends(get_database),
    _: dict = Depends(auth_dependencies.require_admin),
) -> dict:
    created = await service.create_blog(database, request.model_dump())
    return ok(
        schemas.BlogCreatedResponse(**created).model_dump(),
        message="Blog created successfully",
    )


@router.put("/api/admin/blogs/{blog_id}")
async def update_blog(
    request: schemas.BlogWriteRequest,
    blog_id: str,
    database: Database = Depends(get_database),
    _: dict = Depends(auth_dependencies.require_admin),
) -> dict:
    await service.update_blog(database, _parse_blog_id(blog_id), request.model_dump())
    return ok(message="Blog updated successfully")


@router.delete("/api/admin/blogs/{blog_id}")
async def delete_blog(
    blog_id: str,
    database: Database = Depends(get_database),
    _: dict = Depends(auth_dependencies.require_admin),
) -> dict:
    await service.delete_blog(database, _parse_blog_id(blog_id))
    return ok(message="Blog deleted successfully")
