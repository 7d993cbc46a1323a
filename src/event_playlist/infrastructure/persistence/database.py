"""SQLite access for the versioned entry table behind the store.

Every logical cache lives in the same ``kv_entries`` table, keyed by
``(cache, key)``. Values are opaque JSON text; the ``version`` column is
bumped by every write so callers can compare-and-swap on it.
"""

from __future__ import annotations

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from pathlib import Path
from typing import TYPE_CHECKING, NamedTuple

import aiosqlite

from event_playlist.domain.shared.constants import DatabaseTables, SQLPragmas
from event_playlist.domain.shared.datetime_utils import utcnow
from event_playlist.domain.shared.messages import LogTemplates

if TYPE_CHECKING:
    from ...config.settings import StoreSettings

logger = logging.getLogger(__name__)

_TABLE = DatabaseTables.KV_ENTRIES
_MEMORY = ":memory:"
_SHARED_MEMORY_URI = "file:event-playlist?mode=memory&cache=shared"

_SCHEMA = f"""
CREATE TABLE IF NOT EXISTS {_TABLE} (
    cache TEXT NOT NULL,
    key TEXT NOT NULL,
    value TEXT NOT NULL,
    version INTEGER NOT NULL DEFAULT 1,
    updated_at TEXT NOT NULL,
    PRIMARY KEY (cache, key)
)
"""


class StoredEntry(NamedTuple):
    value: str
    version: int


def path_from_url(url: str) -> str:
    """``sqlite:///data/x.db`` -> ``data/x.db``; bare paths pass through."""
    return url.removeprefix("sqlite:///")


class Database:
    """Entry-level reads and writes, one short-lived connection per call.

    Replicas on the same host share the database file; WAL mode and the busy
    timeout let their writers queue instead of failing. An in-memory
    database is shared through a URI and pinned open by a keepalive
    connection, which is how the tests run.
    """

    def __init__(self, url: str, settings: StoreSettings | None = None) -> None:
        self._db_path = path_from_url(url)
        self._busy_timeout = settings.busy_timeout_ms if settings else 5000
        self._connection_timeout = settings.connection_timeout_s if settings else 10
        self._keepalive: aiosqlite.Connection | None = None
        self._ready = False

    @property
    def db_path(self) -> str:
        return self._db_path

    @property
    def in_memory(self) -> bool:
        return self._db_path == _MEMORY

    async def initialize(self) -> None:
        """Create the parent directory and the entry table."""
        if self._ready:
            return

        if self.in_memory:
            if self._keepalive is None:
                self._keepalive = await self._open()
        else:
            Path(self._db_path).parent.mkdir(parents=True, exist_ok=True)

        async with self._session() as conn:
            await conn.execute(_SCHEMA)

        self._ready = True
        logger.info(LogTemplates.DATABASE_INITIALIZED, self._db_path)

    async def close(self) -> None:
        if self._keepalive is not None:
            try:
                await self._keepalive.close()
            finally:
                self._keepalive = None
        self._ready = False
        logger.info(LogTemplates.DATABASE_CLOSED)

    async def _open(self) -> aiosqlite.Connection:
        conn = await aiosqlite.connect(
            _SHARED_MEMORY_URI if self.in_memory else self._db_path,
            uri=self.in_memory,
            timeout=self._connection_timeout,
        )
        await conn.execute(SQLPragmas.JOURNAL_MODE_WAL)
        await conn.execute(SQLPragmas.BUSY_TIMEOUT.format(timeout=self._busy_timeout))
        return conn

    @asynccontextmanager
    async def _session(self) -> AsyncGenerator[aiosqlite.Connection, None]:
        """A connection that commits on success and rolls back on error."""
        conn = await self._open()
        try:
            yield conn
            await conn.commit()
        except Exception:
            try:
                await conn.rollback()
            except aiosqlite.Error as rollback_error:
                logger.debug("Rollback after failure also failed: %r", rollback_error)
            raise
        finally:
            await conn.close()

    # ── Reads ────────────────────────────────────────────────────────

    async def read_entry(self, cache: str, key: str) -> StoredEntry | None:
        async with self._session() as conn:
            cursor = await conn.execute(
                f"SELECT value, version FROM {_TABLE} WHERE cache = ? AND key = ?",  # noqa: S608
                (cache, key),
            )
            row = await cursor.fetchone()
        if row is None:
            return None
        return StoredEntry(row[0], int(row[1]))

    async def read_page(self, cache: str, after_key: str, limit: int) -> list[tuple[str, str]]:
        """Up to ``limit`` ``(key, value)`` pairs with keys strictly after ``after_key``."""
        async with self._session() as conn:
            cursor = await conn.execute(
                f"""
                SELECT key, value FROM {_TABLE}
                WHERE cache = ? AND key > ?
                ORDER BY key
                LIMIT ?
                """,  # noqa: S608
                (cache, after_key, limit),
            )
            rows = await cursor.fetchall()
        return [(row[0], row[1]) for row in rows]

    # ── Writes ───────────────────────────────────────────────────────

    async def upsert_entry(self, cache: str, key: str, value: str) -> None:
        async with self._session() as conn:
            await conn.execute(
                f"""
                INSERT INTO {_TABLE} (cache, key, value, version, updated_at)
                VALUES (?, ?, ?, 1, ?)
                ON CONFLICT(cache, key) DO UPDATE SET
                    value = excluded.value,
                    version = {_TABLE}.version + 1,
                    updated_at = excluded.updated_at
                """,  # noqa: S608
                (cache, key, value, utcnow().isoformat()),
            )

    async def update_entry_if_version(
        self, cache: str, key: str, value: str, version: int
    ) -> bool:
        """Write ``value`` only while the stored version is still ``version``."""
        async with self._session() as conn:
            cursor = await conn.execute(
                f"""
                UPDATE {_TABLE}
                SET value = ?, version = version + 1, updated_at = ?
                WHERE cache = ? AND key = ? AND version = ?
                """,  # noqa: S608
                (value, utcnow().isoformat(), cache, key, version),
            )
            return cursor.rowcount == 1

    async def insert_entry(self, cache: str, key: str, value: str) -> bool:
        """Insert a first version; False when the key already exists."""
        async with self._session() as conn:
            cursor = await conn.execute(
                f"""
                INSERT OR IGNORE INTO {_TABLE} (cache, key, value, version, updated_at)
                VALUES (?, ?, ?, 1, ?)
                """,  # noqa: S608
                (cache, key, value, utcnow().isoformat()),
            )
            return cursor.rowcount == 1

    async def delete_entry(self, cache: str, key: str) -> None:
        async with self._session() as conn:
            await conn.execute(
                f"DELETE FROM {_TABLE} WHERE cache = ? AND key = ?",  # noqa: S608
                (cache, key),
            )
