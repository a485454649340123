"""
Process settings read from environment variables.

Values are read once when the app is built (`main.create_app`). Tests build
their own `Settings` instead of mutating the environment.
"""

from __future__ import annotations

import os
from dataclasses import dataclass

from fastapi import Request

DEFAULT_CORS_ORIGINS = (
    "http://localhost:8080",
    "https://neuvonsoftware.com",
    "https://www.neuvonsoftware.com",
    "https://neuvon-be.vercel.app",
)

DEFAULT_MAX_UPLOAD_BYTES = 5 * 1024 * 1024  # 5 MiB

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off"}


def _env_str(name: str, default: str = "") -> str:
    return os.environ.get(name, default).strip() or default


def _env_int(name: str, default: int) -> int:
    raw = os.environ.get(name, "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _env_float(name: str, default: float) -> float:
    raw = os.environ.get(name, "").strip()
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def _env_bool(name: str, default: bool) -> bool:
    raw = os.environ.get(name, "").strip().lower()
    if raw in _TRUE_VALUES:
        return True
    if raw in _FALSE_VALUES:
        return False
    return default


def _env_list(name: str, default: tuple[str, ...]) -> tuple[str, ...]:
    raw = os.environ.get(name, "").strip()
    if not raw:
        return default
    return tuple(item.strip() for item in raw.split(",") if item.strip())


@dataclass(frozen=True)
class Settings:
    app_name: str = "contact-blog-api"
    database_url: str = ""
    db_pool_min_size: int = 1
    db_pool_max_size: int = 10
    db_command_timeout_s: float = 30.0
    db_acquire_timeout_s: float = 10.0
    cors_origins: tuple[str, ...] = DEFAULT_CORS_ORIGINS
    enable_blog: bool = True
    admin_token: str = ""
    max_upload_bytes: int = DEFAULT_MAX_UPLOAD_BYTES
    schema_strict: bool = False
    log_level: str = "INFO"


def load_settings() -> Settings:
    max_upload_bytes = _env_int("MAX_UPLOAD_BYTES", DEFAULT_MAX_UPLOAD_BYTES)
    if max_upload_bytes <= 0:
        max_upload_bytes = DEFAULT_MAX_UPLOAD_BYTES

    return Settings(
        app_name=_env_str("APP_NAME", "contact-blog-api"),
        database_url=_env_str("DATABASE_URL"),
        db_pool_min_size=max(0, _env_int("DB_POOL_MIN_SIZE", 1)),
        db_pool_max_size=max(1, _env_int("DB_POOL_MAX_SIZE", 10)),
        db_command_timeout_s=_env_float("DB_COMMAND_TIMEOUT_S", 30.0),
        db_acquire_timeout_s=_env_float("DB_ACQUIRE_TIMEOUT_S", 10.0),
        cors_origins=_env_list("CORS_ORIGINS", DEFAULT_CORS_ORIGINS),
        enable_blog=_env_bool("ENABLE_BLOG", True),
        admin_token=_env_str("ADMIN_TOKEN"),
        max_upload_bytes=max_upload_bytes,
        schema_strict=_env_bool("SCHEMA_STRICT", False),
        log_level=_env_str("LOG_LEVEL", "INFO").upper(),
    )


def get_settings(request: Request) -> Settings:
    return request.app.state.settings
