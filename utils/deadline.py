"""Race an awaitable against a fixed deadline without cancelling it."""

from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Set, TypeVar

LOGGER = logging.getLogger(__name__)

T = TypeVar("T")

# Abandoned tasks stay referenced until they settle so the loop does not
# garbage-collect them mid-flight.
_ABANDONED: Set[asyncio.Future] = set()


class DeadlineExceeded(Exception):
    """Raised when the raced operation did not settle before the deadline."""

    def __init__(self, seconds: float) -> None:
        super().__init__(f"Operation did not finish within {seconds:g}s")
        self.seconds = seconds


def _settle_abandoned(task: asyncio.Future) -> None:
    _ABANDONED.discard(task)
    if task.cancelled():
        return
    exc = task.exception()
    if exc is not None:
        LOGGER.info("Abandoned call finished after its deadline with %s", type(exc).__name__)
    else:
        LOGGER.info("Abandoned call finished after its deadline; result discarded")


async def race_deadline(awaitable: Awaitable[T], seconds: float) -> T:
    """Return the awaitable's result if it settles within `seconds`.

    Whichever settles first wins. When the deadline wins the underlying task
    keeps running but is never consumed; its outcome is only logged.

    Raises:
        DeadlineExceeded: If the deadline fires first.
        Exception: Whatever the awaitable raised, when it settles in time.
    """
    task = asyncio.ensure_future(awaitable)
    try:
        done, _ = await asyncio.wait({task}, timeout=seconds)
    except asyncio.CancelledError:
        # The caller went away; the call is abandoned the same way.
        _abandon(task)
        raise
    if task in done:
        return task.result()

    _abandon(task)
    raise DeadlineExceeded(seconds)


def _abandon(task: asyncio.Future) -> None:
    _ABANDONED.add(task)
    task.add_done_callback(_settle_abandoned)
