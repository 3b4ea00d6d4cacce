import logging
import secrets
from pathlib import Path
from fastapi import HTTPException, UploadFile, status

from ..config import ALLOWED_UPLOAD_TYPES, MAX_UPLOAD_BYTES, UPLOAD_URL_PREFIX

logger = logging.getLogger(__name__)

CHUNK_SIZE = 64 * 1024


async def save_upload(file: UploadFile, upload_dir: Path) -> str:
    """Store an uploaded image under ``upload_dir`` and return its public URL."""
    extension = ALLOWED_UPLOAD_TYPES.get(file.content_type or "")
    if extension is None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Only PNG, JPEG, GIF, WEBP and SVG images are accepted"
        )

    # The stored extension follows the content type, ".jpeg" is the only alternate spelling
    if extension == ".jpg" and Path(file.filename or "").suffix.lower() == ".jpeg":
        extension = ".jpeg"

    # Read in chunks so an oversized file is rejected before it is fully buffered
    data = bytearray()
    while True:
        chunk = await file.read(CHUNK_SIZE)
        if not chunk:
            break
        data.extend(chunk)
        if len(data) > MAX_UPLOAD_BYTES:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="File is too large. Maximum size: 5MB"
            )

    if not data:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="File is empty")

    upload_dir.mkdir(parents=True, exist_ok=True)
    filename = f"{secrets.token_hex(16)}{extension}"
    (upload_dir / filename).write_bytes(bytes(data))

    logger.info(f"Stored upload {file.filename!r} as {filename} ({len(data)} bytes)")
    return f"{UPLOAD_URL_PREFIX}/{filename}"
