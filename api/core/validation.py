"""
Small field checks shared by the feature services.
"""

from __future__ import annotations

import re
from typing import Any, Iterable, Mapping

from .errors import ValidationError

# One "@", no whitespace anywhere, at least one "." after the "@".
EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")


def is_blank(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    return False


def missing_fields(values: Mapping[str, Any], required: Iterable[str]) -> list[str]:
    return [name for name in required if is_blank(values.get(name))]


def is_valid_email(email: str) -> bool:
    return bool(EMAIL_RE.fullmatch(email or ""))


def check_max_lengths(values: Mapping[str, Any], limits: Mapping[str, int]) -> None:
    for name, limit in limits.items():
        value = values.get(name)
        if isinstance(value, str) and len(value) > limit:
            raise ValidationError(f"{name} must be at most {limit} characters")


def check_no_nul(values: Mapping[str, Any]) -> None:
    """
    Postgres text and jsonb reject U+0000, so catch it before the write.
    """
    for name, value in values.items():
        items = value if isinstance(value, list) else [value]
        if any(isinstance(item, str) and "\x00" in item for item in items):
            raise ValidationError(f"{name} must not contain NUL characters")
