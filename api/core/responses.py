"""
The `{success, message?, data?}` envelope every endpoint answers with.
"""

from __future__ import annotations

from typing import Any

from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse

_MISSING = object()


def ok(data: Any = _MISSING, *, message: str | None = None) -> dict[str, Any]:
    body: dict[str, Any] = {"success": True}
    if message is not None:
        body["message"] = message
    if data is not _MISSING:
        body["data"] = data
    return body


def error_response(status_code: int, message: str, **extra: Any) -> JSONResponse:
    body: dict[str, Any] = {"success": False, "message": message}
    body.update(extra)
    return JSONResponse(status_code=status_code, content=jsonable_encoder(body))
