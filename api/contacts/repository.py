"""
Contact persistence (raw SQL).
"""

from __future__ import annotations

from typing import Any

from core.db import Database
from core.errors import StoreError


async def insert_contact(database: Database, *, name: str, email: str, message: str) -> dict[str, Any]:
    row = await database.fetch_one(
        """
        INSERT INTO contacts (name, email, message)
        VALUES ($1, $2, $3)
        RETURNING id, name, email, message, created_at
        """,
        name,
        email,
        message,
    )
    if row is None:
        raise StoreError("Failed to insert contact.")
    return row


async def list_contacts(database: Database) -> list[dict[str, Any]]:
    return await database.fetch_all(
        """
        SELECT id, name, email, message, created_at, updated_at
        FROM contacts
        ORDER BY created_at DESC, id DESC
        """
    )
