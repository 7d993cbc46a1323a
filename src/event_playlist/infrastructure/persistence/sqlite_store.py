"""SQLite implementation of the shared key-value store."""

from __future__ import annotations

import asyncio
import json
import logging
from collections.abc import AsyncGenerator, AsyncIterator
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING, Any

import aiosqlite

from event_playlist.application.interfaces.store import JsonDict, Store
from event_playlist.domain.shared.constants import ExitCodes
from event_playlist.domain.shared.exceptions import StoreUnavailableError
from event_playlist.domain.shared.messages import ErrorMessages, LogTemplates
from event_playlist.utils.tasks import spawn_detached

if TYPE_CHECKING:
    from ...application.services.readiness import ReadinessState
    from .database import Database

logger = logging.getLogger(__name__)


class SQLiteStore(Store):
    """Store backed by one ``kv_entries`` table.

    Each row carries an integer version that every write bumps, which gives
    the conditional replace its compare-and-swap semantics across replicas
    sharing the same database file.
    """

    def __init__(self, database: Database, readiness: ReadinessState | None = None) -> None:
        self._db = database
        self._readiness = readiness
        # Newest background write per (cache, key); each one waits for its predecessor.
        self._pending_puts: dict[tuple[str, str], asyncio.Task[Any]] = {}

    @asynccontextmanager
    async def _guard(self) -> AsyncGenerator[None, None]:
        try:
            yield
        except (aiosqlite.Error, OSError) as e:
            logger.critical(LogTemplates.STORE_FATAL, e)
            if self._readiness is not None:
                self._readiness.fatal(ExitCodes.STORE_UNAVAILABLE, e)
            raise StoreUnavailableError(
                ErrorMessages.STORE_UNREACHABLE.format(error=e), cause=e
            ) from e

    async def get(self, cache: str, key: str) -> JsonDict | None:
        async with self._guard():
            entry = await self._db.read_entry(cache, key)
        return None if entry is None else json.loads(entry.value)

    async def put(self, cache: str, key: str, value: JsonDict) -> None:
        raw = json.dumps(value)
        await self._after_pending((cache, key))
        await self._write(cache, key, raw)

    def put_async(self, cache: str, key: str, value: JsonDict) -> None:
        slot = (cache, key)
        task = spawn_detached(
            self._put_logged(slot, json.dumps(value), self._pending_puts.get(slot)),
            description=f"put {cache}/{key}",
        )
        self._pending_puts[slot] = task
        task.add_done_callback(lambda t: self._forget_put(slot, t))

    async def _put_logged(
        self, slot: tuple[str, str], raw: str, previous: asyncio.Task[Any] | None
    ) -> None:
        if previous is not None:
            await asyncio.wait([previous])
        cache, key = slot
        try:
            await self._write(cache, key, raw)
        except StoreUnavailableError as e:
            # _guard has already requested the fatal exit.
            logger.warning(LogTemplates.STORE_PUT_ASYNC_FAILED, cache, key, e)

    def _forget_put(self, slot: tuple[str, str], task: asyncio.Task[Any]) -> None:
        if self._pending_puts.get(slot) is task:
            del self._pending_puts[slot]

    async def _after_pending(self, slot: tuple[str, str]) -> None:
        pending = self._pending_puts.get(slot)
        if pending is not None:
            await asyncio.wait([pending])

    async def _write(self, cache: str, key: str, raw: str) -> None:
        async with self._guard():
            await self._db.upsert_entry(cache, key, raw)

    async def remove(self, cache: str, key: str) -> None:
        await self._after_pending((cache, key))
        async with self._guard():
            await self._db.delete_entry(cache, key)

    async def iterate(self, cache: str, batch_size: int) -> AsyncIterator[tuple[str, JsonDict]]:
        after = ""
        while True:
            async with self._guard():
                page = await self._db.read_page(cache, after, batch_size)
            for key, raw in page:
                yield key, json.loads(raw)
            if len(page) < batch_size:
                return
            after = page[-1][0]

    async def get_with_version(self, cache: str, key: str) -> tuple[JsonDict, int] | None:
        async with self._guard():
            entry = await self._db.read_entry(cache, key)
        if entry is None:
            return None
        return json.loads(entry.value), entry.version

    async def replace_if_version_matches(
        self, cache: str, key: str, value: JsonDict, version: int
    ) -> bool:
        async with self._guard():
            replaced = await self._db.update_entry_if_version(cache, key, json.dumps(value), version)
        if replaced:
            logger.debug(LogTemplates.STORE_CAS_REPLACED, cache, key, version, version + 1)
        else:
            logger.debug(LogTemplates.STORE_CAS_REJECTED, cache, key, version)
        return replaced

    async def put_if_absent(self, cache: str, key: str, value: JsonDict) -> bool:
        async with self._guard():
            return await self._db.insert_entry(cache, key, json.dumps(value))
