"""
Admin gate for administrative routes.

When `ADMIN_TOKEN` is configured, admin routes require
`Authorization: Bearer <token>`. When it is empty the routes stay open,
which matches how the service has historically been deployed; startup logs
a warning in that case (see `main.py`).
"""

from __future__ import annotations

import secrets

from fastapi import Depends, Header, HTTPException, status

from core.settings import Settings, get_settings


def _extract_bearer_token(authorization: str | None) -> str:
    raw = (authorization or "").strip()
    if not raw:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing Authorization header.",
        )

    parts = raw.split(" ", 1)
    if len(parts) != 2:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid Authorization header format.",
        )

    scheme, token = parts[0].strip().lower(), parts[1].strip()
    if scheme != "bearer" or not token:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authorization must be: Bearer <token>.",
        )
    return token


async def require_admin(
    authorization: str | None = Header(default=None),
    settings: Settings = Depends(get_settings),
) -> dict:
    expected = settings.admin_token
    if not expected:
        return {"role": "admin", "authenticated": False}

    token = _extract_bearer_token(authorization)
    if not secrets.compare_digest(token.encode("utf-8"), expected.encode("utf-8")):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid admin token.",
        )
    return {"role": "admin", "authenticated": True}
