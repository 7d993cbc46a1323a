"""Per-event track-end timers owned by one playback controller."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable

from ...domain.shared.messages import LogTemplates

logger = logging.getLogger(__name__)

TimerCallback = Callable[[str], Awaitable[None]]


class PlaybackTimers:
    """Map from event id to a cancellable scheduled check.

    At most one timer is live per event: :meth:`set` always cancels the
    previous one first. A firing timer removes itself from the map before
    running its callback, so the callback may safely schedule a new timer
    for the same event.
    """

    def __init__(self, on_expired: TimerCallback) -> None:
        self._on_expired = on_expired
        self._timers: dict[str, asyncio.Task[None]] = {}

    def __len__(self) -> int:
        return len(self._timers)

    def __contains__(self, event_id: object) -> bool:
        return event_id in self._timers

    def set(self, event_id: str, timeout_ms: int) -> None:
        self.clear(event_id)
        logger.debug(LogTemplates.TIMER_SET, event_id, timeout_ms)
        self._timers[event_id] = asyncio.create_task(self._fire(event_id, timeout_ms / 1000))

    def clear(self, event_id: str) -> bool:
        task = self._timers.pop(event_id, None)
        if task is None:
            return False
        task.cancel()
        logger.debug(LogTemplates.TIMER_CLEARED, event_id)
        return True

    async def _fire(self, event_id: str, delay_s: float) -> None:
        await asyncio.sleep(delay_s)
        if self._timers.get(event_id) is asyncio.current_task():
            del self._timers[event_id]
        await self._on_expired(event_id)

    async def shutdown(self) -> None:
        """Cancel every pending timer and wait for them to finish."""
        tasks = list(self._timers.values())
        self._timers.clear()
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
