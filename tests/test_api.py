import asyncio

import pytest
from fastapi.testclient import TestClient

from controllers import auth_controller
from main import create_app
from utils.errors import GenerationError, ErrorKind


class _FakeGenerator:
    def __init__(self, reply: str = "Count me in!", error=None) -> None:
        self.reply = reply
        self.error = error
        self.requests = []

    async def generate(self, request):
        self.requests.append(request)
        if self.error is not None:
            raise self.error
        return self.reply


class _NoNews:
    async def get_context(self, text):
        return ""


@pytest.fixture()
def client(tmp_path, monkeypatch):
    monkeypatch.setenv("DATABASE_DIR", str(tmp_path / "db"))
    monkeypatch.delenv("OPENAI_API_KEY", raising=False)
    monkeypatch.delenv("NEWSDATA_API_KEY", raising=False)
    with TestClient(create_app()) as test_client:
        test_client.app.state.freshness = _NoNews()
        yield test_client


def _register(client, email="sam@example.com", password="correct horse", name="Sam"):
    return client.post("/api/auth/register", json={"email": email, "password": password, "name": name})


def _kind(response) -> str:
    return response.json()["detail"]["kind"]


def test_health_reports_missing_openai_key(client):
    res = client.get("/health")
    assert res.status_code == 200
    assert res.json() == {"ok": True, "db_initialized": True, "openai_available": False}


def test_register_login_logout_flow(client):
    res = _register(client)
    assert res.status_code == 201
    user = res.json()["user"]
    assert user["email"] == "sam@example.com"
    assert "password_hash" not in user

    assert client.get("/api/auth/me").json()["user"]["id"] == user["id"]

    assert client.post("/api/auth/logout").json() == {"success": True}
    res = client.get("/api/auth/me")
    assert res.status_code == 401
    assert _kind(res) == "unauthorized"

    res = client.post("/api/auth/login", json={"email": "SAM@example.com", "password": "correct horse"})
    assert res.status_code == 200
    assert res.json()["user"]["id"] == user["id"]


@pytest.mark.parametrize(
    "payload, message",
    [
        ({"email": "sam@example.com", "password": "correct horse"}, "Missing required fields."),
        ({"email": "not-an-email", "password": "correct horse", "name": "Sam"}, "Invalid email format."),
        ({"email": "sam@example.com", "password": "short", "name": "Sam"}, "Password must be at least 8 characters."),
    ],
)
def test_register_validation(client, payload, message):
    res = client.post("/api/auth/register", json=payload)
    assert res.status_code == 400
    assert res.json()["detail"] == {"kind": "validation", "message": message}


def test_duplicate_registration_conflicts(client):
    _register(client)
    res = _register(client)
    assert res.status_code == 409
    assert _kind(res) == "conflict"


def test_wrong_password_is_unauthorized(client):
    _register(client)
    client.post("/api/auth/logout")
    res = client.post("/api/auth/login", json={"email": "sam@example.com", "password": "wrong password"})
    assert res.status_code == 401
    assert res.json()["detail"]["message"] == "Invalid credentials."


def test_chats_require_a_session(client):
    res = client.get("/api/chats")
    assert res.status_code == 401
    assert _kind(res) == "unauthorized"


def test_chat_crud_and_ordering(client):
    _register(client)
    first = client.post("/api/chats", json={"title": "  Work  "}).json()["chat"]
    second = client.post("/api/chats", json={"title": "Friends"}).json()["chat"]
    assert first["title"] == "Work"

    listed = client.get("/api/chats").json()["chats"]
    assert [chat["id"] for chat in listed] == [second["id"], first["id"]]

    client.post("/api/messages", json={"chat_id": first["id"], "content": "note to self", "role": "user"})
    listed = client.get("/api/chats").json()["chats"]
    assert [chat["id"] for chat in listed] == [first["id"], second["id"]]
    assert listed[0]["message_count"] == 1

    assert client.get(f"/api/chats/{first['id']}").json()["chat"]["message_count"] == 1
    assert client.delete(f"/api/chats/{first['id']}").json() == {"success": True}
    res = client.get(f"/api/chats/{first['id']}")
    assert res.status_code == 404
    assert _kind(res) == "not_found"
    res = client.get(f"/api/messages/{first['id']}")
    assert res.status_code == 404


@pytest.mark.parametrize("title", ["", "   ", "x" * 101])
def test_invalid_chat_titles(client, title):
    _register(client)
    res = client.post("/api/chats", json={"title": title})
    assert res.status_code == 400
    assert _kind(res) == "validation"


def test_manual_message_rejects_unknown_role(client):
    _register(client)
    chat = client.post("/api/chats", json={"title": "Work"}).json()["chat"]
    res = client.post("/api/messages", json={"chat_id": chat["id"], "content": "hi", "role": "system"})
    assert res.status_code == 400
    assert res.json()["detail"]["message"] == "Invalid role."


def test_other_users_cannot_read_or_delete(client):
    _register(client)
    chat = client.post("/api/chats", json={"title": "Private"}).json()["chat"]
    client.post("/api/auth/logout")
    _register(client, email="eve@example.com", name="Eve")

    for res in (
        client.get(f"/api/chats/{chat['id']}"),
        client.delete(f"/api/chats/{chat['id']}"),
        client.get(f"/api/messages/{chat['id']}"),
        client.post("/api/ai/generate", json={"chat_id": chat["id"], "user_message": "hello"}),
    ):
        assert res.status_code == 403
        assert _kind(res) == "forbidden"


def test_generate_stores_both_turns(client):
    _register(client)
    chat = client.post("/api/chats", json={"title": "Dinner plans"}).json()["chat"]
    generator = _FakeGenerator("Count me in!")
    client.app.state.reply_generator = generator

    res = client.post("/api/ai/generate", json={"chat_id": chat["id"], "user_message": "Dinner on Friday?"})

    assert res.status_code == 200
    message = res.json()["message"]
    assert message["role"] == "assistant"
    assert message["content"] == "Count me in!"
    history = client.get(f"/api/messages/{chat['id']}").json()["messages"]
    assert [(m["role"], m["content"]) for m in history] == [
        ("user", "Dinner on Friday?"),
        ("assistant", "Count me in!"),
    ]


def test_generate_without_openai_key_reports_config(client):
    _register(client)
    chat = client.post("/api/chats", json={"title": "Dinner plans"}).json()["chat"]

    res = client.post("/api/ai/generate", json={"chat_id": chat["id"], "user_message": "hello"})

    assert res.status_code == 503
    assert res.json()["detail"] == {"kind": "config", "message": "The AI service is not configured."}
    history = client.get(f"/api/messages/{chat['id']}").json()["messages"]
    assert [m["role"] for m in history] == ["user"]


def test_generate_failure_message_is_stable(client):
    _register(client)
    chat = client.post("/api/chats", json={"title": "Dinner plans"}).json()["chat"]
    client.app.state.reply_generator = _FakeGenerator(
        error=GenerationError(ErrorKind.AI_RATE_LIMIT, "429 from provider: org-secret-detail")
    )

    res = client.post("/api/ai/generate", json={"chat_id": chat["id"], "user_message": "hello"})

    assert res.status_code == 503
    assert res.json()["detail"] == {"kind": "ai_rate_limit", "message": "The AI service is busy. Try again shortly."}
    assert "org-secret-detail" not in res.text


def test_generate_missing_fields(client):
    _register(client)
    res = client.post("/api/ai/generate", json={"user_message": "hello"})
    assert res.status_code == 400
    assert _kind(res) == "validation"


def test_generate_requires_session(client):
    res = client.post("/api/ai/generate", json={"chat_id": "abc", "user_message": "hello"})
    assert res.status_code == 401


def test_generate_rate_limited(client):
    _register(client)
    chat = client.post("/api/chats", json={"title": "Dinner plans"}).json()["chat"]
    client.app.state.reply_generator = _FakeGenerator()
    limiter = client.app.state.rate_limiter
    limiter.max_requests = 2

    statuses = [
        client.post("/api/ai/generate", json={"chat_id": chat["id"], "user_message": "hello"}).status_code
        for _ in range(3)
    ]

    assert statuses == [200, 200, 429]


def test_password_hashing_runs_off_the_event_loop(client, monkeypatch):
    seen = []

    def _off_loop() -> bool:
        try:
            asyncio.get_running_loop()
        except RuntimeError:
            return True
        return False

    real_hash = auth_controller.hash_password
    real_verify = auth_controller.verify_password

    def hash_password(password):
        seen.append(("hash", _off_loop()))
        return real_hash(password)

    def verify_password(password, stored):
        seen.append(("verify", _off_loop()))
        return real_verify(password, stored)

    monkeypatch.setattr(auth_controller, "hash_password", hash_password)
    monkeypatch.setattr(auth_controller, "verify_password", verify_password)

    assert _register(client).status_code == 201
    res = client.post("/api/auth/login", json={"email": "sam@example.com", "password": "correct horse"})
    assert res.status_code == 200
    assert seen == [("hash", True), ("verify", True)]
