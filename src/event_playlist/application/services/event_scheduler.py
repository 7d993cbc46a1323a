"""Periodic, cluster-wide sweep over all events."""

from __future__ import annotations

import asyncio
import logging
import time
from typing import TYPE_CHECKING

from pydantic import BaseModel

from ...domain.scheduling.entities import LockRecord
from ...domain.shared.constants import LOCK_KEY, ExitCodes, StoreCaches
from ...domain.shared.datetime_utils import utcnow
from ...domain.shared.exceptions import CoordinationError, StoreUnavailableError
from ...domain.shared.messages import LogTemplates
from ...domain.shared.types import NonNegativeInt
from .optimistic_lock import OptimisticLock

if TYPE_CHECKING:
    from ...config.settings import SchedulerSettings
    from ...domain.event.repository import EventRepository
    from ..interfaces.store import Store
    from .playback_controller import PlaybackController
    from .readiness import ReadinessState

logger = logging.getLogger(__name__)


class EventScheduler:
    """Every replica ticks; at most one per poll interval actually sweeps.

    The winner is decided by a compare-and-swap on the lock record's
    timestamp. Losers back off silently until their next tick.
    """

    def __init__(
        self,
        *,
        store: Store,
        event_repository: EventRepository,
        playback_controller: PlaybackController,
        readiness: ReadinessState,
        settings: SchedulerSettings,
    ) -> None:
        self._lock = OptimisticLock(store, StoreCaches.EVENT_LCK)
        self._event_repo = event_repository
        self._playback = playback_controller
        self._readiness = readiness
        self._settings = settings
        self._running = False
        self._task: asyncio.Task | None = None

    def start(self) -> None:
        if self._running:
            logger.warning(LogTemplates.SCHEDULER_ALREADY_RUNNING)
            return

        self._running = True
        self._task = asyncio.create_task(self._run_loop())
        logger.info(LogTemplates.SCHEDULER_STARTED, self._settings.poll_interval_ms)

    async def stop(self) -> None:
        self._running = False

        if self._task is not None:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None

        logger.info(LogTemplates.SCHEDULER_STOPPED)

    async def _run_loop(self) -> None:
        interval_seconds = self._settings.poll_interval_ms / 1000

        while self._running:
            try:
                await self.run_once()
            except StoreUnavailableError as e:
                logger.critical(LogTemplates.SCHEDULER_FATAL, e)
                self._running = False
                self._readiness.fatal(ExitCodes.SWEEP_FAILED, e)
                break
            except Exception as e:
                logger.exception(LogTemplates.SCHEDULER_SWEEP_FAILED, e)

            try:
                await asyncio.sleep(interval_seconds)
            except asyncio.CancelledError:
                break

    async def run_once(self) -> SweepStats | None:
        """One tick: try to win this interval's sweep and run it.

        Returns:
            Sweep statistics if this replica won, None otherwise.

        Raises:
            StoreUnavailableError: The store failed while locking or sweeping.
        """
        now = utcnow()
        interval_ms = self._settings.poll_interval_ms

        entry = await self._lock.read(LOCK_KEY)
        if entry is None:
            logger.info(LogTemplates.SCHEDULER_LOCK_CREATED)
            await self._lock.create(LOCK_KEY, LockRecord(last_check=now).to_wire())
            return None

        record = LockRecord.model_validate(entry.value)
        record.version = entry.version
        self._readiness.last_global_event_check = record.last_check
        if not record.is_due(now, interval_ms):
            logger.debug(LogTemplates.SCHEDULER_TOO_EARLY, record.elapsed_ms(now), interval_ms)
            return None

        try:
            await self._lock.replace(LOCK_KEY, LockRecord(last_check=now).to_wire(), entry.version)
        except CoordinationError:
            logger.debug(LogTemplates.SCHEDULER_LOST_RACE)
            return None

        self._readiness.last_global_event_check = now
        return await self.sweep()

    async def sweep(self) -> SweepStats:
        """Check every stored event once."""
        stats = SweepStats()
        started = time.monotonic()

        async for key, event in self._event_repo.iterate(self._settings.batch_size):
            if key == LOCK_KEY:
                continue
            if event is None:
                logger.warning(LogTemplates.EVENT_STRANGE_ENTRY, key)
                stats.strange_entries += 1
                continue
            await self._playback.check_event(event)
            stats.events_checked += 1

        stats.duration_ms = int((time.monotonic() - started) * 1000)
        logger.debug(LogTemplates.SCHEDULER_SWEEP_DONE, stats.events_checked, stats.duration_ms)
        if stats.duration_ms > self._settings.poll_interval_ms:
            logger.warning(
                LogTemplates.SCHEDULER_SWEEP_SLOW, stats.duration_ms, self._settings.poll_interval_ms
            )
        return stats

    @property
    def is_running(self) -> bool:
        return self._running


class SweepStats(BaseModel):
    events_checked: NonNegativeInt = 0
    strange_entries: NonNegativeInt = 0
    duration_ms: NonNegativeInt = 0
