"""
Contact API endpoints.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, status

from auth import dependencies as auth_dependencies
from core.db import Database, get_database
from core.responses import ok

from . import schemas, service

router = APIRouter()


@router.post("/api/contact", status_code=status.HTTP_201_CREATED)
async def submit_contact(
    request: schemas.ContactSubmitRequest,
    database: Database = Depends(get_database),
) -> dict:
    row = await service.submit_contact(
        database,
        name=request.name,
        email=request.email,
        message=request.message,
    )
    return ok(
        schemas.ContactResponse(**row).model_dump(),
        message="Contact form submitted successfully",
    )


@router.get("/api/contacts")
async def list_contacts(
    database: Database = Depends(get_database),
    _: dict = Depends(auth_dependencies.require_admin),
) -> dict:
    rows = await service.list_contacts(database)
    return ok(rows)
