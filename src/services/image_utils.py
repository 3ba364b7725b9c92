# src/services/image_utils.py
"""Validation and naming helpers for uploaded images."""
from __future__ import annotations

import secrets
import time

from src.app.domain.models import ImageValidation

VALID_IMAGE_TYPES = ("image/jpeg", "image/jpg", "image/png", "image/webp", "image/gif")
DEFAULT_MAX_SIZE_MB = 10


def validate_image_file(
    content_type: str,
    size_bytes: int,
    max_size_mb: int = DEFAULT_MAX_SIZE_MB,
) -> ImageValidation:
    if content_type not in VALID_IMAGE_TYPES:
        return ImageValidation(
            valid=False,
            error="Invalid file type. Please upload a JPEG, PNG, WebP, or GIF image.",
        )

    if size_bytes > max_size_mb * 1024 * 1024:
        return ImageValidation(
            valid=False,
            error=f"File size exceeds {max_size_mb}MB. Please upload a smaller image.",
        )

    return ImageValidation(valid=True)


def get_file_extension(filename: str) -> str:
    """Return the text after the last dot, or "" when there is none (dotfiles included)."""
    dot = filename.rfind(".")
    if dot <= 0:
        return ""
    return filename[dot + 1:]


def generate_unique_filename(original_filename: str) -> str:
    timestamp = int(time.time() * 1000)
    random_part = secrets.token_hex(3)
    extension = get_file_extension(original_filename)
    if not extension:
        return f"{timestamp}_{random_part}"
    return f"{timestamp}_{random_part}.{extension}"
