import asyncio
from types import SimpleNamespace

import pytest

from dal.chat_dal import ChatDAL
from dal.user_dal import UserDAL
from utils.database_init import AsyncDatabaseInitializer


def text_response(text: str):
    """Shape of a Responses API result carrying one output_text block."""
    return SimpleNamespace(
        output=[
            SimpleNamespace(type="reasoning", content=None),
            SimpleNamespace(type="message", content=[SimpleNamespace(type="output_text", text=text)]),
        ],
        output_text=text,
        usage=SimpleNamespace(input_tokens=12, output_tokens=7),
    )


class _FakeResponses:
    def __init__(self, result=None, error=None, delay: float = 0.0) -> None:
        self.result = result
        self.error = error
        self.delay = delay
        self.calls = []

    async def create(self, **kwargs):
        self.calls.append(kwargs)
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error
        return self.result


class FakeOpenAI:
    """Stands in for AsyncOpenAI; records every responses.create call."""

    def __init__(self, result=None, error=None, delay: float = 0.0) -> None:
        self.responses = _FakeResponses(result=result, error=error, delay=delay)


class StaticSource:
    """News source double returning fixed articles, or raising."""

    def __init__(self, articles=None, error=None) -> None:
        self.articles = list(articles or [])
        self.error = error
        self.queries = []

    async def fetch(self, query):
        self.queries.append(query)
        if self.error is not None:
            raise self.error
        return list(self.articles)


@pytest.fixture()
def fake_openai():
    return FakeOpenAI


@pytest.fixture()
def make_text_response():
    return text_response


@pytest.fixture()
def static_source():
    return StaticSource


@pytest.fixture()
def db(tmp_path):
    return AsyncDatabaseInitializer(tmp_path / "db")


@pytest.fixture()
def seed_chat(db):
    """Create a user owning one chat; returns (user_id, chat_id)."""

    async def _seed(email: str = "owner@example.com", title: str = "Drafts"):
        user = await UserDAL(db).create_user(email, "Owner", "scrypt$x$y")
        chat = await ChatDAL(db).create_chat(user.id, title)
        return user.id, chat.id

    return lambda **kwargs: asyncio.run(_seed(**kwargs))
