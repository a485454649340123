"""
Contact API schemas.

Request fields are optional at the schema level on purpose: presence and
format are business rules checked in `service.py`, which answers with the
envelope's 400 instead of FastAPI's default 422 shape.
"""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel


class ContactSubmitRequest(BaseModel):
    name: str | None = None
    email: str | None = None
    message: str | None = None


class ContactResponse(BaseModel):
    id: int
    name: str
    email: str
    message: str
    created_at: datetime
