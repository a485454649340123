"""
Blog image intake.

Validates a single uploaded image and returns it inline as a base64 data
URI. Nothing is written to disk or object storage: the caller stores the
returned URL in the blog row (`cover_image` / `author_image`). Swap
`to_data_uri` for an object-storage upload when durable URLs are needed.
"""

from __future__ import annotations

import base64
from dataclasses import dataclass
from pathlib import Path

from fastapi import UploadFile

from core.errors import PayloadTooLarge, ValidationError

ALLOWED_EXTENSIONS = {".jpeg", ".jpg", ".png", ".gif", ".webp"}
ALLOWED_IMAGE_SUBTYPES = {"jpeg", "jpg", "png", "gif", "webp"}

FILE_TYPE_MESSAGE = "Only image files are allowed (JPEG, JPG, PNG, GIF, WebP)!"


@dataclass(frozen=True)
class ImageUpload:
    originalname: str
    mimetype: str
    size: int
    url: str


def _file_ext(filename: str) -> str:
    return Path(filename).suffix.lower()


def _media_type(content_type: str) -> str:
    # "image/png; charset=binary" -> "image/png"
    return content_type.split(";", 1)[0].strip().lower()


def _is_image_mimetype(mimetype: str) -> bool:
    kind, _, subtype = _media_type(mimetype).partition("/")
    return kind == "image" and subtype in ALLOWED_IMAGE_SUBTYPES


def validate_image(file: UploadFile) -> None:
    """
    Both the filename extension and the declared content type must name an
    allowed image format.
    """
    filename = file.filename or ""
    mimetype = (file.content_type or "").strip()
    if _file_ext(filename) not in ALLOWED_EXTENSIONS or not _is_image_mimetype(mimetype):
        raise ValidationError(FILE_TYPE_MESSAGE)


async def read_upload_bytes(file: UploadFile, max_bytes: int) -> bytes:
    """
    Read the upload into memory, enforcing a maximum size.
    """
    chunk_size = 1024 * 1024  # 1 MiB
    buf = bytearray()

    while True:
        chunk = await file.read(chunk_size)
        if not chunk:
            break
        buf.extend(chunk)
        if len(buf) > max_bytes:
            raise PayloadTooLarge(f"File too large. Max is {max_bytes} bytes.")

    return bytes(buf)


def to_data_uri(mimetype: str, data: bytes) -> str:
    return f"data:{mimetype};base64,{base64.b64encode(data).decode('ascii')}"


async def accept_image(file: UploadFile | None, *, max_bytes: int) -> ImageUpload:
    if file is None or not file.filename:
        raise ValidationError("No file uploaded")

    validate_image(file)
    data = await read_upload_bytes(file, max_bytes=max_bytes)
    mimetype = _media_type(file.content_type or "")

    return ImageUpload(
        originalname=file.filename,
        mimetype=mimetype,
        size=len(data),
        url=to_data_uri(mimetype, data),
    )
