"""Validation helpers for user-supplied text and inline image data."""

import re
from typing import Optional

from utils.errors import AppError, ErrorKind

MAX_INPUT_CHARS = 10000
MAX_TITLE_CHARS = 100
MIN_PASSWORD_CHARS = 8
# Roughly 6 MB of decoded image data.
MAX_IMAGE_DATA_CHARS = 8_000_000

_EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")


def sanitize_input(value: str) -> str:
    """Trim surrounding whitespace and cap the text at MAX_INPUT_CHARS."""
    return value.strip()[:MAX_INPUT_CHARS]


def validate_email(email: str) -> bool:
    return bool(_EMAIL_RE.match(email))


def validate_password(password: str) -> Optional[str]:
    """Return an error message when the password is unacceptable, else None."""
    if len(password) < MIN_PASSWORD_CHARS:
        return f"Password must be at least {MIN_PASSWORD_CHARS} characters."
    return None


def validate_chat_title(title: str) -> bool:
    return 0 < len(title) <= MAX_TITLE_CHARS


def ensure_image_data(image_data: Optional[str]) -> Optional[str]:
    """Return a usable image data URI, or None when no image was sent.

    Raises:
        AppError(validation): If the value is not a `data:image/...` URI with
            a payload after the comma, or is too large.
    """
    if image_data is None:
        return None
    image_data = image_data.strip()
    if not image_data:
        return None
    if not image_data.startswith("data:image/") or "," not in image_data:
        raise AppError(
            ErrorKind.VALIDATION,
            "image data is not a data URI",
            public_message="Image must be sent as a data:image/... URI.",
        )
    if not image_data.split(",", 1)[1]:
        raise AppError(ErrorKind.VALIDATION, "image data URI has no payload", public_message="Image data is empty.")
    if len(image_data) > MAX_IMAGE_DATA_CHARS:
        raise AppError(ErrorKind.VALIDATION, "image data too large", public_message="Image is too large.")
    return image_data
