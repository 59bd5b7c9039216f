"""
Time budget for a single sub-test.

``with_deadline`` races an awaitable against a timer.  When the timer wins
the caller is released immediately; the operation is sent a cancellation
request but nothing waits for it to wind down, and whatever it eventually
produces is discarded.
"""
from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, TypeVar

from .errors import DeadlineExceeded

logger = logging.getLogger(__name__)

T = TypeVar("T")


def _discard_outcome(task: asyncio.Future) -> None:
    # Retrieve the late result so asyncio does not report it as unhandled.
    if task.cancelled():
        return
    exc = task.exception()
    if exc is not None:
        logger.debug("Abandoned operation finished with %r", exc)


async def with_deadline(operation: Awaitable[T], seconds: float) -> T:
    """Return the result of *operation*, or raise ``DeadlineExceeded``."""
    task = asyncio.ensure_future(operation)

    try:
        done, _ = await asyncio.wait({task}, timeout=seconds)
    except asyncio.CancelledError:
        task.cancel()
        raise

    if task in done:
        return task.result()

    task.cancel()
    task.add_done_callback(_discard_outcome)
    raise DeadlineExceeded(seconds)
