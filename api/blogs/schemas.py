"""
Blog API schemas (request models).

Every field is optional here; `service.validate_blog` decides what is
required so both create and update report missing fields the same way.
"""

from __future__ import annotations

from pydantic import BaseModel


class BlogWriteRequest(BaseModel):
    slug: str | None = None
    title: str | None = None
    excerpt: str | None = None
    content: str | None = None
    cover_image: str | None = None
    author_name: str | None = None
    author_role: str | None = None
    author_image: str | None = None
    category: str | None = None
    tags: list[str] | None = None
    read_time: str | None = None
    published_at: str | None = None
    status: str | None = None


class BlogCreatedResponse(BaseModel):
    id: int
    slug: str
