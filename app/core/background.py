"""Detached fire-and-forget tasks (view counters, download tracking).

Callers never await these; failures are logged here and go no further.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Coroutine
from typing import Any

logger = logging.getLogger(__name__)

# Strong references so pending tasks are not garbage-collected mid-flight.
_pending: set[asyncio.Task[Any]] = set()


def _on_done(task: asyncio.Task[Any]) -> None:
    _pending.discard(task)
    if task.cancelled():
        return
    exc = task.exception()
    if exc is not None:
        logger.warning("Background task %s failed: %s", task.get_name(), exc, exc_info=exc)


def spawn_background(coro: Coroutine[Any, Any, Any], *, name: str) -> asyncio.Task[Any]:
    """Schedule ``coro`` on the running loop without awaiting it."""
    task = asyncio.create_task(coro, name=name)
    _pending.add(task)
    task.add_done_callback(_on_done)
    return task


def pending_count() -> int:
    return len(_pending)


async def drain_background(timeout: float | None = 5.0) -> None:
    """Wait for outstanding background tasks (shutdown, tests)."""
    if not _pending:
        return
    _done, not_done = await asyncio.wait(set(_pending), timeout=timeout)
    for task in not_done:
        task.cancel()
    if not_done:
        logger.warning("Cancelled %d background task(s) still running", len(not_done))
