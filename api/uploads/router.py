"""
Image upload endpoint.
"""

from __future__ import annotations

import logging
from dataclasses import asdict

from fastapi import APIRouter, Depends, File, UploadFile

from auth import dependencies as auth_dependencies
from core.responses import ok
from core.settings import Settings, get_settings

from . import service

router = APIRouter()

logger = logging.getLogger(__name__)


@router.post("/api/upload-blog-image")
async def upload_blog_image(
    image: UploadFile | None = File(default=None),
    settings: Settings = Depends(get_settings),
    _: dict = Depends(auth_dependencies.require_admin),
) -> dict:
    result = await service.accept_image(image, max_bytes=settings.max_upload_bytes)
    logger.info(
        "blog_image_accepted name=%s mimetype=%s size=%s",
        result.originalname,
        result.mimetype,
        result.size,
    )
    return ok(asdict(result), message="File uploaded successfully")
