"""Password hashing and session-cookie identity helpers."""

import base64
import hashlib
import hmac
import os
from typing import Optional

from fastapi import Request

from utils.errors import AppError, ErrorKind

SESSION_COOKIE = "auth-token"
SESSION_MAX_AGE = 7 * 24 * 60 * 60
SESSION_USER_KEY = "user_id"

_SCRYPT_N = 2**14
_SCRYPT_R = 8
_SCRYPT_P = 1
_SALT_BYTES = 16


def _scrypt(password: str, salt: bytes) -> bytes:
    return hashlib.scrypt(password.encode("utf-8"), salt=salt, n=_SCRYPT_N, r=_SCRYPT_R, p=_SCRYPT_P)


def hash_password(password: str) -> str:
    """Return `scrypt$<salt>$<digest>` with base64 fields."""
    salt = os.urandom(_SALT_BYTES)
    digest = _scrypt(password, salt)
    return "scrypt${}${}".format(
        base64.b64encode(salt).decode("ascii"),
        base64.b64encode(digest).decode("ascii"),
    )


def verify_password(password: str, stored: str) -> bool:
    try:
        scheme, salt_b64, digest_b64 = stored.split("$")
    except ValueError:
        return False
    if scheme != "scrypt":
        return False
    expected = base64.b64decode(digest_b64)
    return hmac.compare_digest(_scrypt(password, base64.b64decode(salt_b64)), expected)


def login_session(request: Request, user_id: str) -> None:
    request.session.clear()
    request.session[SESSION_USER_KEY] = user_id


def logout_session(request: Request) -> None:
    request.session.clear()


def current_user_id(request: Request) -> Optional[str]:
    """Return the caller's user id from the signed session, if any."""
    user_id = request.session.get(SESSION_USER_KEY)
    return user_id if isinstance(user_id, str) and user_id else None


def require_user_id(request: Request) -> str:
    """Return the caller's user id or raise AppError(unauthorized)."""
    user_id = current_user_id(request)
    if user_id is None:
        raise AppError(ErrorKind.UNAUTHORIZED, "no session")
    return user_id
