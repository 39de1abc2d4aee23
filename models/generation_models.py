"""Transient structures passed through the reply pipeline."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional


@dataclass(frozen=True)
class ContextTurn:
	"""Projection of a stored turn handed to the generator."""

	role: str
	content: str
	image_data: Optional[str] = None


@dataclass(frozen=True)
class GenerationRequest:
	"""Everything the generator needs for one call, built before sending.

	`freshness` is the rendered news block, or an empty string when no
	augmentation applies. It is never persisted.
	"""

	turns: List[ContextTurn] = field(default_factory=list)
	freshness: str = ""


@dataclass(frozen=True)
class NewsArticle:
	"""One item from either news source, already reduced for rendering."""

	title: str
	description: str
	date: str
	source: str
