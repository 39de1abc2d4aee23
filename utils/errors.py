"""Closed error taxonomy shared by controllers and the reply pipeline."""

from __future__ import annotations

from enum import Enum
from typing import Dict, Optional, Tuple

from fastapi import HTTPException


class ErrorKind(str, Enum):
    """Machine-readable failure kinds surfaced to API callers."""

    VALIDATION = "validation"
    UNAUTHORIZED = "unauthorized"
    FORBIDDEN = "forbidden"
    NOT_FOUND = "not_found"
    CONFLICT = "conflict"
    RATE_LIMIT = "rate_limit"
    CONFIG = "config"
    AUTH = "auth"
    AI_RATE_LIMIT = "ai_rate_limit"
    CREDITS = "credits"
    TIMEOUT = "timeout"
    NETWORK = "network"
    UNKNOWN = "unknown"
    SERVER = "server"


# Statuses follow HTTP meaning, so a few kinds share one (502, 503, 500);
# the message and the `kind` field in the body are unique per kind.
ERROR_RESPONSES: Dict[ErrorKind, Tuple[int, str]] = {
    ErrorKind.VALIDATION: (400, "Missing or invalid input."),
    ErrorKind.UNAUTHORIZED: (401, "Authentication required."),
    ErrorKind.CREDITS: (402, "The AI service has run out of credits."),
    ErrorKind.FORBIDDEN: (403, "You do not have access to this chat."),
    ErrorKind.NOT_FOUND: (404, "Chat not found."),
    ErrorKind.CONFLICT: (409, "Email already registered."),
    ErrorKind.RATE_LIMIT: (429, "Rate limit exceeded. Please slow down."),
    ErrorKind.SERVER: (500, "Internal server error."),
    ErrorKind.UNKNOWN: (500, "Failed to generate reply."),
    ErrorKind.AUTH: (502, "The AI service rejected our credentials."),
    ErrorKind.NETWORK: (502, "Cannot reach the AI service."),
    ErrorKind.AI_RATE_LIMIT: (503, "The AI service is busy. Try again shortly."),
    ErrorKind.CONFIG: (503, "The AI service is not configured."),
    ErrorKind.TIMEOUT: (504, "The AI took too long to respond."),
}


class AppError(Exception):
    """An error already reduced to one `ErrorKind`.

    `detail` is for logs only. `public_message` optionally replaces the stock
    message for kinds where a more specific, pre-written hint helps the caller
    (for example which field failed validation).
    """

    def __init__(
        self,
        kind: ErrorKind,
        detail: str = "",
        *,
        public_message: Optional[str] = None,
    ) -> None:
        super().__init__(detail or kind.value)
        self.kind = kind
        self.detail = detail
        self.public_message = public_message


class GenerationError(AppError):
    """Failure of the language-model call, classified at the adapter."""


def http_error(kind: ErrorKind, message: Optional[str] = None) -> HTTPException:
    """Build the HTTPException for `kind` with its stable status and message."""
    status_code, default_message = ERROR_RESPONSES[kind]
    return HTTPException(
        status_code=status_code,
        detail={"kind": kind.value, "message": message or default_message},
    )


def to_http_error(exc: AppError) -> HTTPException:
    """Translate an AppError into its HTTPException."""
    return http_error(exc.kind, exc.public_message)
