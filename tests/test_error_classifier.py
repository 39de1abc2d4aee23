import socket

import httpx
import openai
import pytest

from services.openai.error_classifier import classify_provider_error
from utils.deadline import DeadlineExceeded
from utils.errors import ERROR_RESPONSES, ErrorKind, GenerationError

REQUEST = httpx.Request("POST", "https://api.openai.com/v1/responses")


def _status_error(cls, status: int, message: str = "error", body=None):
    return cls(message, response=httpx.Response(status, request=REQUEST), body=body)


@pytest.mark.parametrize(
    "exc, expected",
    [
        (DeadlineExceeded(30), ErrorKind.TIMEOUT),
        (openai.APITimeoutError(request=REQUEST), ErrorKind.TIMEOUT),
        (GenerationError(ErrorKind.CONFIG, "missing key"), ErrorKind.CONFIG),
        (_status_error(openai.AuthenticationError, 401, "Incorrect API key"), ErrorKind.AUTH),
        (_status_error(openai.RateLimitError, 429, "Slow down"), ErrorKind.AI_RATE_LIMIT),
        (
            _status_error(
                openai.RateLimitError,
                429,
                "You exceeded your current quota",
                body={"code": "insufficient_quota", "message": "quota"},
            ),
            ErrorKind.CREDITS,
        ),
        (
            _status_error(openai.BadRequestError, 400, "Your credit balance is too low"),
            ErrorKind.CREDITS,
        ),
        (openai.APIConnectionError(request=REQUEST), ErrorKind.NETWORK),
        (httpx.ConnectError("connection refused"), ErrorKind.NETWORK),
        (socket.gaierror(-2, "Name or service not known"), ErrorKind.NETWORK),
        (ConnectionRefusedError(), ErrorKind.NETWORK),
        (_status_error(openai.InternalServerError, 500, "server exploded"), ErrorKind.UNKNOWN),
        (ValueError("unexpected"), ErrorKind.UNKNOWN),
    ],
)
def test_every_failure_maps_to_one_kind(exc, expected):
    assert classify_provider_error(exc) is expected


def test_classification_is_deterministic():
    exc = _status_error(openai.RateLimitError, 429, "Slow down")
    assert {classify_provider_error(exc) for _ in range(5)} == {ErrorKind.AI_RATE_LIMIT}


def test_every_kind_has_its_own_response_message():
    assert set(ERROR_RESPONSES) == set(ErrorKind)
    messages = [message for _, message in ERROR_RESPONSES.values()]
    assert len(set(messages)) == len(messages)
