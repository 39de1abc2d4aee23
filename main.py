import inspect
import logging
import os
import secrets
from contextlib import asynccontextmanager

import httpx
from fastapi import FastAPI, Request
from openai import AsyncOpenAI
from starlette.middleware.sessions import SessionMiddleware

from routes.auth_route import router as auth_router
from routes.chat_route import router as chat_router
from routes.message_route import router as message_router
from routes.reply_route import router as reply_router
from services.news.feed_source import FeedSource
from services.news.freshness import FreshnessAugmenter
from services.news.newsdata_source import NewsDataSource
from services.openai.reply_generator import DEFAULT_MODEL, ReplyGenerator
from services.rate_limiter import DEFAULT_MAX_REQUESTS, DEFAULT_WINDOW_SECONDS, FixedWindowRateLimiter
from utils.auth import SESSION_COOKIE, SESSION_MAX_AGE
from utils.database_init import AsyncDatabaseInitializer

from dotenv import load_dotenv

load_dotenv()  # Load environment variables from .env file if present

logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
LOGGER = logging.getLogger(__name__)

NEWS_HTTP_TIMEOUT_SECONDS = 10.0


def _env_number(name: str, default, cast=int):
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return cast(raw)
    except ValueError:
        LOGGER.warning("Ignoring invalid %s=%r; using %s", name, raw, default)
        return default


def _build_openai_client():
    """Return an AsyncOpenAI client, or None when no API key is configured."""
    if not os.getenv("OPENAI_API_KEY"):
        LOGGER.error("OPENAI_API_KEY is not set; reply generation will report a config error")
        return None
    try:
        return AsyncOpenAI()
    except Exception:  # pylint: disable=broad-exception-caught
        LOGGER.exception("Failed to initialize OpenAI Async client")
        return None


async def _close_quietly(client) -> None:
    """Close a client exposing close/aclose, sync or async."""
    if client is None:
        return
    aclose = getattr(client, "aclose", None) or getattr(client, "close", None)
    if aclose is None:
        return
    try:
        if inspect.iscoroutinefunction(aclose):
            await aclose()
        else:
            result = aclose()
            if inspect.isawaitable(result):
                await result
    except Exception:  # pylint: disable=broad-exception-caught
        # Ignore shutdown errors to avoid masking more important issues.
        LOGGER.debug("Error while closing %r", client, exc_info=True)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Lifespan manager to initialize and attach to `app.state`:
      - the SQLite database at DATABASE_DIR/app.db
      - the OpenAI async client and the reply generator built on it
      - the shared httpx client and the freshness augmenter
      - the fixed-window rate limiter for reply generation
    """
    db_initializer = AsyncDatabaseInitializer()
    await db_initializer.ensure_database()
    app.state.db_initializer = db_initializer

    openai_client = _build_openai_client()
    app.state.openai_client = openai_client
    app.state.reply_generator = ReplyGenerator(openai_client, model=os.getenv("OPENAI_MODEL", DEFAULT_MODEL))

    http_client = httpx.AsyncClient(timeout=NEWS_HTTP_TIMEOUT_SECONDS)
    app.state.http_client = http_client
    app.state.freshness = FreshnessAugmenter(
        NewsDataSource(http_client, os.getenv("NEWSDATA_API_KEY")),
        FeedSource(http_client),
    )

    app.state.rate_limiter = FixedWindowRateLimiter(
        max_requests=_env_number("RATE_LIMIT_MAX_REQUESTS", DEFAULT_MAX_REQUESTS),
        window_seconds=_env_number("RATE_LIMIT_WINDOW_SECONDS", DEFAULT_WINDOW_SECONDS, float),
    )

    try:
        yield
    finally:
        await _close_quietly(http_client)
        await _close_quietly(getattr(app.state, "openai_client", None))


def _session_secret() -> str:
    secret = os.getenv("SESSION_SECRET")
    if secret:
        return secret
    LOGGER.warning("SESSION_SECRET is not set; sessions will not survive a restart")
    return secrets.token_hex(32)


def create_app() -> FastAPI:
    """
    Create and configure the FastAPI application instance.
    """
    app = FastAPI(title="ReplyCraft", lifespan=lifespan)

    app.add_middleware(
        SessionMiddleware,
        secret_key=_session_secret(),
        session_cookie=SESSION_COOKIE,
        max_age=SESSION_MAX_AGE,
        same_site="lax",
        https_only=os.getenv("SESSION_HTTPS_ONLY", "").lower() in ("1", "true", "yes"),
    )

    @app.get("/health")
    async def health(request: Request):
        """
        Simple health check that verifies DB initializer and OpenAI client presence.
        """
        has_db = hasattr(request.app.state, "db_initializer")
        has_openai = getattr(request.app.state, "openai_client", None) is not None
        return {"ok": True, "db_initialized": has_db, "openai_available": has_openai}

    app.include_router(auth_router)
    app.include_router(chat_router)
    app.include_router(message_router)
    app.include_router(reply_router)

    return app


app = create_app()
