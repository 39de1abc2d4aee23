"""Keyword filtering over a fixed set of general-interest RSS feeds."""

import asyncio
import logging
from datetime import datetime
from typing import Any, List, Sequence

import feedparser
import httpx

from models.generation_models import NewsArticle
from services.news.formatting import short_date, strip_markup

LOGGER = logging.getLogger(__name__)

DEFAULT_FEEDS = (
    "http://feeds.bbci.co.uk/news/rss.xml",
    "https://www.theguardian.com/world/rss",
    "https://www.reuters.com/rssFeed/worldNews",
)
MAX_PER_FEED = 2
MAX_TOTAL = 3
DESCRIPTION_CHARS = 200
MIN_WORD_CHARS = 4


def query_words(query: str) -> List[str]:
    """Lowercased words of the query longer than three characters."""
    return [word for word in query.lower().split(" ") if len(word) >= MIN_WORD_CHARS]


def _entry_date(entry: Any) -> str:
    parsed = entry.get("published_parsed") or entry.get("updated_parsed")
    if not parsed:
        return "Recent"
    return short_date(datetime(*parsed[:6]))


class FeedSource:
    """Poll each feed and keep items mentioning any query word."""

    def __init__(self, http_client: httpx.AsyncClient, feeds: Sequence[str] = DEFAULT_FEEDS) -> None:
        self.http_client = http_client
        self.feeds = tuple(feeds)

    async def fetch(self, query: str) -> List[NewsArticle]:
        """Return at most three matching items across all feeds."""
        words = query_words(query)
        if not words:
            return []
        per_feed = await asyncio.gather(*(self._poll(url, words) for url in self.feeds))
        articles = [article for batch in per_feed for article in batch]
        return articles[:MAX_TOTAL]

    async def _poll(self, feed_url: str, words: List[str]) -> List[NewsArticle]:
        try:
            response = await self.http_client.get(feed_url, follow_redirects=True)
            response.raise_for_status()
            parsed = await asyncio.to_thread(feedparser.parse, response.content)
        except Exception as exc:  # pylint: disable=broad-exception-caught
            LOGGER.error("RSS feed error (%s): %s", feed_url, exc)
            return []

        if parsed.get("bozo") and not parsed.get("entries"):
            LOGGER.warning("RSS feed %s could not be parsed: %s", feed_url, parsed.get("bozo_exception"))
            return []

        source_name = parsed.get("feed", {}).get("title") or "RSS Feed"
        matches: List[NewsArticle] = []
        for entry in parsed.get("entries", []):
            title = entry.get("title") or ""
            summary = strip_markup(entry.get("summary") or "")
            haystack = f"{title} {summary}".lower()
            if not any(word in haystack for word in words):
                continue
            matches.append(
                NewsArticle(
                    title=title,
                    description=summary[:DESCRIPTION_CHARS],
                    date=_entry_date(entry),
                    source=source_name,
                )
            )
            if len(matches) >= MAX_PER_FEED:
                break
        return matches
