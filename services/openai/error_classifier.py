"""Map provider-call failures onto the closed ErrorKind vocabulary."""

from __future__ import annotations

import socket

import httpx
import openai

from utils.deadline import DeadlineExceeded
from utils.errors import ErrorKind, GenerationError

BILLING_ERROR_CODES = frozenset({"insufficient_quota", "billing_hard_limit_reached", "billing_not_active"})
_BILLING_PHRASES = ("credit balance", "exceeded your current quota")


def _is_billing_exhausted(exc: BaseException) -> bool:
    code = getattr(exc, "code", None)
    if isinstance(code, str) and code in BILLING_ERROR_CODES:
        return True
    message = str(getattr(exc, "message", None) or exc).lower()
    return any(phrase in message for phrase in _BILLING_PHRASES)


def classify_provider_error(exc: BaseException) -> ErrorKind:
    """Return exactly one ErrorKind for a failed generation call.

    Checked in order: our own deadline, already-classified errors, provider
    authentication, billing exhaustion, provider throttling, transport
    failures. Anything else is UNKNOWN.
    """
    if isinstance(exc, (DeadlineExceeded, openai.APITimeoutError)):
        return ErrorKind.TIMEOUT
    if isinstance(exc, GenerationError):
        return exc.kind

    status = getattr(exc, "status_code", None)
    if isinstance(exc, openai.AuthenticationError) or status == 401:
        return ErrorKind.AUTH
    # Quota exhaustion arrives as a 429 from the OpenAI API, so it is tested
    # before generic throttling.
    if isinstance(exc, openai.APIStatusError) and _is_billing_exhausted(exc):
        return ErrorKind.CREDITS
    if isinstance(exc, openai.RateLimitError) or status == 429:
        return ErrorKind.AI_RATE_LIMIT
    if isinstance(exc, (openai.APIConnectionError, httpx.ConnectError, socket.gaierror, ConnectionError)):
        return ErrorKind.NETWORK
    return ErrorKind.UNKNOWN
