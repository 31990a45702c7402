# utils/file_utils.py

import io
import logging
import uuid
from pathlib import Path

from fastapi import HTTPException, UploadFile
from PIL import Image, UnidentifiedImageError

from core.config import UPLOAD_DIR, MAX_UPLOAD_BYTES

logger = logging.getLogger(__name__)

CHUNK_SIZE = 64 * 1024

IMAGE_EXTENSIONS = {"JPEG": ".jpg", "PNG": ".png", "GIF": ".gif", "WEBP": ".webp"}

# Attachments are limited to images and PDFs; anything else could be served back as active content
ATTACHMENT_TYPES = {
    ".jpg": {"image/jpeg"},
    ".jpeg": {"image/jpeg"},
    ".png": {"image/png"},
    ".gif": {"image/gif"},
    ".webp": {"image/webp"},
    ".pdf": {"application/pdf"},
}


def upload_path() -> Path:
    path = Path(UPLOAD_DIR)
    path.mkdir(parents=True, exist_ok=True)
    return path


async def _read_upload(file: UploadFile) -> bytes:
    chunks = []
    size = 0
    while True:
        chunk = await file.read(CHUNK_SIZE)
        if not chunk:
            break
        size += len(chunk)
        if size > MAX_UPLOAD_BYTES:
            raise HTTPException(status_code=413, detail="File too large")
        chunks.append(chunk)
    if size == 0:
        raise HTTPException(status_code=400, detail="Empty file")
    return b"".join(chunks)


def _image_format(data: bytes, filename: str):
    try:
        with Image.open(io.BytesIO(data)) as img:
            img_format = img.format
            img.verify()
    except (UnidentifiedImageError, OSError) as e:
        logger.warning(f"Rejected image upload {filename}: {e}")
        raise HTTPException(status_code=400, detail="Invalid or corrupted image file")

    if img_format not in IMAGE_EXTENSIONS:
        raise HTTPException(status_code=400, detail=f"Unsupported image format: {img_format}")
    return img_format


def _store(data: bytes, prefix: str, extension: str) -> str:
    filename = f"{prefix}-{uuid.uuid4().hex}{extension}"
    (upload_path() / filename).write_bytes(data)
    logger.info(f"Stored {filename} ({len(data)} bytes)")
    return f"/uploads/{filename}"


async def save_image(file: UploadFile, prefix: str) -> str:
    """Validate an uploaded image with Pillow and store it. Returns the public /uploads path."""
    data = await _read_upload(file)
    img_format = _image_format(data, file.filename)
    return _store(data, prefix, IMAGE_EXTENSIONS[img_format])


async def save_attachment(file: UploadFile, prefix: str) -> str:
    """Store a feedback attachment (image or PDF).

    The declared name and content type must both be on the allow-list, and
    the bytes must match. The stored extension comes from the detected
    content, never from the client.
    """
    suffix = Path(file.filename or "").suffix.lower()
    content_type = (file.content_type or "").split(";")[0].strip().lower()
    if suffix not in ATTACHMENT_TYPES or content_type not in ATTACHMENT_TYPES[suffix]:
        logger.warning(f"Rejected attachment {file.filename!r} ({content_type or 'no content type'})")
        raise HTTPException(status_code=415, detail="Unsupported attachment type")

    data = await _read_upload(file)
    if suffix == ".pdf":
        if not data.startswith(b"%PDF-"):
            raise HTTPException(status_code=400, detail="Invalid PDF file")
        return _store(data, prefix, ".pdf")

    img_format = _image_format(data, file.filename)
    return _store(data, prefix, IMAGE_EXTENSIONS[img_format])


def remove_upload(public_path: str) -> bool:
    """Delete a file previously returned by save_image/save_attachment."""
    if not public_path or not public_path.startswith("/uploads/"):
        return False
    name = Path(public_path).name
    target = upload_path() / name
    if not target.is_file():
        return False
    try:
        target.unlink()
    except OSError as e:
        logger.warning(f"Could not remove upload {name}: {e}")
        return False
    logger.info(f"Removed upload {name}")
    return True
