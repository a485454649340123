"""
Contact business rules.
"""

from __future__ import annotations

import logging
from typing import Any

from core.db import Database
from core.errors import ValidationError
from core.validation import check_max_lengths, check_no_nul, is_valid_email, missing_fields

from . import repository

REQUIRED_FIELDS = ("name", "email", "message")

# Mirrors the VARCHAR sizes in core/schema.py.
FIELD_LIMITS = {"name": 255, "email": 255}

logger = logging.getLogger(__name__)


def validate_submission(*, name: str | None, email: str | None, message: str | None) -> None:
    values = {"name": name, "email": email, "message": message}
    if missing_fields(values, REQUIRED_FIELDS):
        raise ValidationError("Name, email, and message are required fields")

    if not is_valid_email(email or ""):
        raise ValidationError("Please provide a valid email address")

    check_max_lengths(values, FIELD_LIMITS)
    check_no_nul(values)


async def submit_contact(
    database: Database,
    *,
    name: str | None,
    email: str | None,
    message: str | None,
) -> dict[str, Any]:
    validate_submission(name=name, email=email, message=message)

    row = await repository.insert_contact(
        database,
        name=str(name),
        email=str(email),
        message=str(message),
    )
    logger.info("contact_saved id=%s email=%s", row["id"], row["email"])
    return row


async def list_contacts(database: Database) -> list[dict[str, Any]]:
    return await repository.list_contacts(database)
