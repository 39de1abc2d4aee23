"""Structured news search against the NewsData.io API."""

import logging
from typing import Any, Dict, List, Optional

import httpx

from models.generation_models import NewsArticle
from services.news.formatting import parse_timestamp, short_date

LOGGER = logging.getLogger(__name__)

NEWSDATA_URL = "https://newsdata.io/api/1/news"
REQUEST_SIZE = 5
MAX_ARTICLES = 3


class NewsDataSource:
    """Query NewsData.io for articles matching the user's text."""

    def __init__(self, http_client: httpx.AsyncClient, api_key: Optional[str], language: str = "en") -> None:
        self.http_client = http_client
        self.api_key = api_key
        self.language = language

    async def fetch(self, query: str) -> List[NewsArticle]:
        """Return up to three articles; any failure yields an empty list."""
        if not self.api_key:
            LOGGER.warning("NewsData.io API key not configured")
            return []

        params = {"apikey": self.api_key, "q": query, "language": self.language, "size": REQUEST_SIZE}
        try:
            response = await self.http_client.get(NEWSDATA_URL, params=params)
        except httpx.HTTPError as exc:
            LOGGER.error("NewsData.io request failed: %s", exc)
            return []

        if response.status_code >= 400:
            LOGGER.error("NewsData.io API failed: %s", response.status_code)
            return []

        try:
            results = response.json().get("results") or []
        except (ValueError, AttributeError) as exc:
            LOGGER.error("NewsData.io returned an unreadable body: %s", exc)
            return []

        return [self._to_article(item) for item in results[:MAX_ARTICLES] if isinstance(item, dict)]

    @staticmethod
    def _to_article(item: Dict[str, Any]) -> NewsArticle:
        published = parse_timestamp(item.get("pubDate"))
        return NewsArticle(
            title=item.get("title") or "",
            description=item.get("description") or "",
            date=short_date(published) if published else "Recent",
            source=item.get("source_id") or "NewsData",
        )
