"""Date and text helpers shared by the news sources."""

from __future__ import annotations

import re
from datetime import date, datetime
from typing import Optional

_TAG_RE = re.compile(r"<[^>]+>")
_SPACE_RE = re.compile(r"\s+")


def short_date(value: date) -> str:
    """Format as `Oct 5, 2026`."""
    return f"{value:%b} {value.day}, {value.year}"


def long_date(value: date) -> str:
    """Format as `Monday, October 5, 2026`."""
    return f"{value:%A}, {value:%B} {value.day}, {value.year}"


def parse_timestamp(raw: Optional[str]) -> Optional[datetime]:
    """Parse an ISO-like timestamp such as `2026-10-18 14:30:00`."""
    if not raw:
        return None
    try:
        return datetime.fromisoformat(raw.strip().replace("Z", "+00:00"))
    except ValueError:
        return None


def strip_markup(text: str) -> str:
    """Drop HTML tags and collapse whitespace in a feed summary."""
    return _SPACE_RE.sub(" ", _TAG_RE.sub(" ", text)).strip()
