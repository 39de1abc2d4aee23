"""Current-events context for messages that look time-sensitive.

The augmenter checks the user's message against a fixed keyword list. When
it matches, the NewsData.io search and the RSS feeds are queried together,
their results are concatenated (structured results first) and rendered into
a short block appended to the generator's system instructions. Any failure
degrades to an empty string, which callers treat as "no augmentation".
"""

from __future__ import annotations

import asyncio
import logging
from datetime import date
from typing import Callable, List, Sequence

from models.generation_models import NewsArticle
from services.news.feed_source import FeedSource
from services.news.formatting import long_date
from services.news.newsdata_source import NewsDataSource

LOGGER = logging.getLogger(__name__)

CURRENT_INFO_KEYWORDS = (
    "today", "now", "current", "latest", "recent", "news",
    "happening", "update", "what is", "who is", "where is",
    "when", "this week", "this month", "2026", "2025",
    "stock", "price", "weather", "score", "result",
)


def needs_current_info(text: str, keywords: Sequence[str] = CURRENT_INFO_KEYWORDS) -> bool:
    """True when the message contains any keyword (case-insensitive substring)."""
    lowered = text.lower()
    return any(keyword in lowered for keyword in keywords)


def render_news_block(articles: Sequence[NewsArticle], today: date) -> str:
    """Render the numbered news digest, or "" when there is nothing to show."""
    if not articles:
        return ""

    lines = [
        "",
        "",
        f"--- CURRENT INFORMATION ({long_date(today)}) ---",
        "Latest news relevant to the query:",
        "",
    ]
    for index, article in enumerate(articles, start=1):
        lines.append(f"{index}. {article.title}")
        lines.append(f"   Source: {article.source} | Date: {article.date}")
        if article.description:
            lines.append(f"   {article.description}")
        lines.append("")
    lines.append("--- END CURRENT INFORMATION ---")
    return "\n".join(lines) + "\n\n"


class FreshnessAugmenter:
    """Decide whether to fetch news and turn the results into a text block."""

    def __init__(
        self,
        newsdata: NewsDataSource,
        feeds: FeedSource,
        today: Callable[[], date] = date.today,
    ) -> None:
        self.newsdata = newsdata
        self.feeds = feeds
        self._today = today

    async def get_context(self, user_message: str) -> str:
        """Return the rendered news block for `user_message`, or "".

        Never raises.
        """
        if not needs_current_info(user_message):
            return ""

        LOGGER.info("Fetching news context for: %s", user_message[:120])
        try:
            articles = await self._collect(user_message)
            return render_news_block(articles, self._today())
        except Exception as exc:  # pylint: disable=broad-exception-caught
            LOGGER.error("News context unavailable: %s", exc)
            return ""

    async def _collect(self, user_message: str) -> List[NewsArticle]:
        structured, feed_items = await asyncio.gather(
            self._safe_fetch(self.newsdata.fetch, user_message, "NewsData.io"),
            self._safe_fetch(self.feeds.fetch, user_message, "RSS feeds"),
        )
        return structured + feed_items

    @staticmethod
    async def _safe_fetch(fetch, query: str, label: str) -> List[NewsArticle]:
        try:
            return list(await fetch(query))
        except Exception as exc:  # pylint: disable=broad-exception-caught
            LOGGER.error("%s fetch error: %s", label, exc)
            return []
