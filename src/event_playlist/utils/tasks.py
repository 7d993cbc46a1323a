"""Detached background tasks whose failures are logged, never propagated."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Coroutine
from typing import Any

logger = logging.getLogger(__name__)

# The event loop only keeps weak references to tasks.
_background_tasks: set[asyncio.Task[Any]] = set()


def spawn_detached(coro: Coroutine[Any, Any, Any], *, description: str) -> asyncio.Task[Any]:
    """Run ``coro`` in the background.

    The caller never observes the outcome. Exceptions are logged with
    ``description`` so a failed best-effort write or publish stays visible.
    """
    task = asyncio.create_task(coro)
    _background_tasks.add(task)

    def _done(t: asyncio.Task[Any]) -> None:
        _background_tasks.discard(t)
        if t.cancelled():
            return
        exc = t.exception()
        if exc is not None:
            logger.warning("Background task %s failed - ignoring: %r", description, exc)

    task.add_done_callback(_done)
    return task


async def drain_background_tasks() -> None:
    """Wait for every pending detached task; used on shutdown and in tests."""
    while _background_tasks:
        await asyncio.gather(*list(_background_tasks), return_exceptions=True)
