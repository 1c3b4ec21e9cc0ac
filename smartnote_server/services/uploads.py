# Copyright (C) 2024 SmartNote Contributors
# SPDX-License-Identifier: GPL-3.0-or-later

"""Profile picture storage on local disk under settings.upload_path."""

import logging
import re
import secrets
import time
from pathlib import Path

from fastapi import UploadFile

from smartnote_server.config import settings

logger = logging.getLogger(__name__)

ALLOWED_MIME_TYPES = {"image/jpeg", "image/jpg", "image/png", "image/webp", "image/gif"}
ALLOWED_EXTENSIONS = {".jpg", ".jpeg", ".png", ".webp", ".gif"}
MAX_FILENAME_LENGTH = 255


class UploadRejected(Exception):
    """The uploaded file failed validation; message is safe to show the client."""


def profiles_dir() -> Path:
    path = Path(settings.upload_path) / "profiles"
    path.mkdir(parents=True, exist_ok=True)
    return path


def validate_upload(filename: str | None, content_type: str | None) -> str:
    """Check name and type; return the lower-cased extension."""
    if not filename:
        raise UploadRejected("No file uploaded. Please select a profile picture.")
    if len(filename) > MAX_FILENAME_LENGTH:
        raise UploadRejected("Filename too long")
    if ".." in filename or "/" in filename or "\\" in filename:
        raise UploadRejected("Invalid filename")
    if content_type not in ALLOWED_MIME_TYPES:
        raise UploadRejected(
            f"Invalid file type. Allowed types: {', '.join(sorted(ALLOWED_MIME_TYPES))}"
        )
    ext = Path(filename).suffix.lower()
    if ext not in ALLOWED_EXTENSIONS:
        raise UploadRejected(
            f"Invalid file extension. Allowed extensions: {', '.join(sorted(ALLOWED_EXTENSIONS))}"
        )
    return ext


def unique_filename(original: str, user_id: int, ext: str) -> str:
    """userId_cleanName_timestampMs_random.ext"""
    stem = re.sub(r"[^a-zA-Z0-9]", "_", Path(original).stem)
    return f"{user_id}_{stem}_{int(time.time() * 1000)}_{secrets.token_hex(6)}{ext}"


async def save_profile_picture(file: UploadFile, user_id: int) -> str:
    """Validate and write the upload; return its stored path."""
    ext = validate_upload(file.filename, file.content_type)
    content = await file.read(settings.max_upload_bytes + 1)
    if len(content) > settings.max_upload_bytes:
        raise UploadRejected(
            f"File size too large. Maximum size: {settings.max_upload_bytes // (1024 * 1024)}MB"
        )
    if not content:
        raise UploadRejected("Uploaded file is empty")
    dest = profiles_dir() / unique_filename(file.filename, user_id, ext)
    dest.write_bytes(content)
    return str(dest)


def delete_old_profile_picture(old_path: str | None) -> None:
    """Remove a previous picture, but only if it lives inside the upload directory."""
    if not old_path:
        return
    full = Path(old_path).resolve()
    root = Path(settings.upload_path).resolve()
    if not full.is_relative_to(root):
        logger.warning("Refusing to delete file outside uploads directory: %s", full)
        return
    try:
        full.unlink(missing_ok=True)
    except OSError as e:
        logger.warning("Failed to delete old profile picture %s: %s", full, e)
