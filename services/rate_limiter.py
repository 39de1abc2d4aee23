"""Fixed-window request counter keyed by caller identity."""

from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Callable, Dict

DEFAULT_MAX_REQUESTS = 50
DEFAULT_WINDOW_SECONDS = 60.0


@dataclass
class _Window:
	count: int
	window_start: float


class FixedWindowRateLimiter:
	"""Allow at most `max_requests` per identity in each window.

	The first request seen for an identity opens its window. A window that
	has expired is replaced lazily by the next request from that identity.
	`check` runs without awaiting, so on the event loop the read-modify-write
	is atomic.
	"""

	def __init__(
		self,
		max_requests: int = DEFAULT_MAX_REQUESTS,
		window_seconds: float = DEFAULT_WINDOW_SECONDS,
		clock: Callable[[], float] = time.monotonic,
	) -> None:
		if max_requests < 1:
			raise ValueError("max_requests must be at least 1.")
		if window_seconds <= 0:
			raise ValueError("window_seconds must be positive.")
		self.max_requests = max_requests
		self.window_seconds = window_seconds
		self._clock = clock
		self._windows: Dict[str, _Window] = {}

	def check(self, identity: str) -> bool:
		"""Record a request for `identity`; return False when it must be rejected."""
		now = self._clock()
		window = self._windows.get(identity)

		if window is None or now > window.window_start + self.window_seconds:
			self._windows[identity] = _Window(count=1, window_start=now)
			return True

		if window.count >= self.max_requests:
			return False

		window.count += 1
		return True

	def remaining(self, identity: str) -> int:
		"""Requests left in the identity's current window."""
		window = self._windows.get(identity)
		if window is None or self._clock() > window.window_start + self.window_seconds:
			return self.max_requests
		return max(self.max_requests - window.count, 0)
