"""
Tests for the SQLite key-value store and the optimistic lock on top of it.

Covers:
- Plain get/put/remove and batched iteration
- Version tokens, conditional replace and put-if-absent
- Single winner among concurrent replace attempts
- Store failures surfacing as StoreUnavailableError / fatal readiness
- Background writes to one key landing in call order
"""

import asyncio
from unittest.mock import AsyncMock

import aiosqlite
import pytest

from event_playlist.application.services.optimistic_lock import OptimisticLock
from event_playlist.application.services.readiness import ReadinessState
from event_playlist.domain.shared.constants import ExitCodes, StoreCaches
from event_playlist.domain.shared.exceptions import CoordinationError, StoreUnavailableError
from event_playlist.infrastructure.persistence.database import StoredEntry, path_from_url
from event_playlist.infrastructure.persistence.sqlite_store import SQLiteStore
from event_playlist.utils.tasks import drain_background_tasks


@pytest.fixture
def memory_store(in_memory_database):
    return SQLiteStore(in_memory_database)


class TestBasicOperations:
    @pytest.mark.asyncio
    async def test_get_missing_returns_none(self, memory_store):
        assert await memory_store.get(StoreCaches.EVENTS, "nope") is None

    @pytest.mark.asyncio
    async def test_put_then_get(self, memory_store):
        await memory_store.put(StoreCaches.EVENTS, "party", {"eventID": "party", "n": 1})

        assert await memory_store.get(StoreCaches.EVENTS, "party") == {"eventID": "party", "n": 1}

    @pytest.mark.asyncio
    async def test_caches_are_separate_key_spaces(self, memory_store):
        await memory_store.put(StoreCaches.EVENTS, "party", {"kind": "event"})
        await memory_store.put(StoreCaches.EVENT_EXT, "party", {"kind": "ext"})

        assert (await memory_store.get(StoreCaches.EVENTS, "party"))["kind"] == "event"
        assert (await memory_store.get(StoreCaches.EVENT_EXT, "party"))["kind"] == "ext"

    @pytest.mark.asyncio
    async def test_put_overwrites_and_bumps_version(self, memory_store):
        await memory_store.put(StoreCaches.EVENTS, "party", {"n": 1})
        await memory_store.put(StoreCaches.EVENTS, "party", {"n": 2})

        value, version = await memory_store.get_with_version(StoreCaches.EVENTS, "party")
        assert value == {"n": 2}
        assert version == 2

    @pytest.mark.asyncio
    async def test_remove(self, memory_store):
        await memory_store.put(StoreCaches.PLAYLISTS, "party:0", {"n": 1})
        await memory_store.remove(StoreCaches.PLAYLISTS, "party:0")

        assert await memory_store.get(StoreCaches.PLAYLISTS, "party:0") is None

    @pytest.mark.asyncio
    async def test_iterate_walks_every_entry_in_batches(self, memory_store):
        for i in range(25):
            await memory_store.put(StoreCaches.EVENTS, f"event-{i:02d}", {"i": i})
        await memory_store.put(StoreCaches.PLAYLISTS, "event-00:0", {"other": True})

        keys = [key async for key, _ in memory_store.iterate(StoreCaches.EVENTS, 10)]

        assert keys == [f"event-{i:02d}" for i in range(25)]

    @pytest.mark.asyncio
    async def test_iterate_empty_cache(self, memory_store):
        assert [kv async for kv in memory_store.iterate(StoreCaches.EVENTS, 10)] == []


class TestConditionalWrites:
    @pytest.mark.asyncio
    async def test_put_if_absent_creates_once(self, memory_store):
        assert await memory_store.put_if_absent(StoreCaches.EVENT_LCK, "-1", {"a": 1}) is True
        assert await memory_store.put_if_absent(StoreCaches.EVENT_LCK, "-1", {"a": 2}) is False

        assert await memory_store.get(StoreCaches.EVENT_LCK, "-1") == {"a": 1}

    @pytest.mark.asyncio
    async def test_replace_with_current_version(self, memory_store):
        await memory_store.put(StoreCaches.EVENT_LCK, "-1", {"a": 1})
        _, version = await memory_store.get_with_version(StoreCaches.EVENT_LCK, "-1")

        assert await memory_store.replace_if_version_matches(
            StoreCaches.EVENT_LCK, "-1", {"a": 2}, version
        )
        assert await memory_store.get(StoreCaches.EVENT_LCK, "-1") == {"a": 2}

    @pytest.mark.asyncio
    async def test_replace_with_stale_version_is_rejected(self, memory_store):
        await memory_store.put(StoreCaches.EVENT_LCK, "-1", {"a": 1})
        _, version = await memory_store.get_with_version(StoreCaches.EVENT_LCK, "-1")
        await memory_store.put(StoreCaches.EVENT_LCK, "-1", {"a": 2})

        assert not await memory_store.replace_if_version_matches(
            StoreCaches.EVENT_LCK, "-1", {"a": 3}, version
        )
        assert await memory_store.get(StoreCaches.EVENT_LCK, "-1") == {"a": 2}

    @pytest.mark.asyncio
    async def test_replace_missing_entry_is_rejected(self, memory_store):
        assert not await memory_store.replace_if_version_matches(
            StoreCaches.EVENT_LCK, "-1", {"a": 1}, 1
        )

    @pytest.mark.asyncio
    async def test_concurrent_replace_has_exactly_one_winner(self, store):
        await store.put(StoreCaches.EVENT_LCK, "-1", {"winner": None})
        _, version = await store.get_with_version(StoreCaches.EVENT_LCK, "-1")

        results = await asyncio.gather(
            *(
                store.replace_if_version_matches(
                    StoreCaches.EVENT_LCK, "-1", {"winner": i}, version
                )
                for i in range(8)
            )
        )

        assert results.count(True) == 1
        winner = results.index(True)
        assert await store.get(StoreCaches.EVENT_LCK, "-1") == {"winner": winner}


class TestOptimisticLock:
    @pytest.mark.asyncio
    async def test_read_missing(self, memory_store):
        lock = OptimisticLock(memory_store, StoreCaches.EVENT_LCK)

        assert await lock.read("-1") is None

    @pytest.mark.asyncio
    async def test_create_read_replace(self, memory_store):
        lock = OptimisticLock(memory_store, StoreCaches.EVENT_LCK)

        assert await lock.create("-1", {"n": 0})
        entry = await lock.read("-1")
        await lock.replace("-1", {"n": 1}, entry.version)

        assert (await lock.read("-1")).value == {"n": 1}

    @pytest.mark.asyncio
    async def test_lost_race_raises_coordination_error(self, memory_store):
        lock = OptimisticLock(memory_store, StoreCaches.EVENT_LCK)
        await lock.create("-1", {"n": 0})
        entry = await lock.read("-1")
        await lock.replace("-1", {"n": 1}, entry.version)

        with pytest.raises(CoordinationError):
            await lock.replace("-1", {"n": 2}, entry.version)


class TestStoreFailures:
    def _broken_store(self, readiness: ReadinessState) -> SQLiteStore:
        db = AsyncMock()
        db.upsert_entry.side_effect = aiosqlite.OperationalError("disk I/O error")
        db.read_entry.side_effect = aiosqlite.OperationalError("disk I/O error")
        return SQLiteStore(db, readiness=readiness)

    @pytest.mark.asyncio
    async def test_read_failure_is_fatal(self):
        readiness = ReadinessState()
        readiness.mark_connected()
        requested = []
        readiness.set_fatal_handler(requested.append)
        store = self._broken_store(readiness)

        with pytest.raises(StoreUnavailableError):
            await store.get(StoreCaches.EVENTS, "party")

        assert readiness.datagrid_client is False
        assert "disk I/O error" in readiness.last_error
        assert requested == [ExitCodes.STORE_UNAVAILABLE]

    @pytest.mark.asyncio
    async def test_async_put_failure_is_fatal(self):
        readiness = ReadinessState()
        requested = []
        readiness.set_fatal_handler(requested.append)
        store = self._broken_store(readiness)

        store.put_async(StoreCaches.PLAYLISTS, "party:0", {"n": 1})
        await drain_background_tasks()

        assert readiness.exit_code == ExitCodes.STORE_UNAVAILABLE
        assert requested == [ExitCodes.STORE_UNAVAILABLE]

    @pytest.mark.asyncio
    async def test_async_put_does_not_raise_to_caller(self, memory_store):
        memory_store.put_async(StoreCaches.PLAYLISTS, "party:0", {"n": 1})
        await drain_background_tasks()

        assert await memory_store.get(StoreCaches.PLAYLISTS, "party:0") == {"n": 1}


class TestBackgroundWriteOrder:
    @pytest.mark.asyncio
    async def test_later_put_wins(self, store, playlist_repository, playlist):
        for _ in range(20):
            playlist.is_playing = True
            playlist_repository.save_in_background(playlist)
            playlist.is_playing = False
            playlist_repository.save_in_background(playlist)
        await drain_background_tasks()

        stored = await playlist_repository.get("party", 0)
        assert stored.is_playing is False

    @pytest.mark.asyncio
    async def test_slow_first_write_does_not_overtake_second(self):
        written = []

        async def upsert(cache, key, raw):
            if '"n": 1' in raw:
                await asyncio.sleep(0.02)
            written.append(raw)

        db = AsyncMock()
        db.upsert_entry.side_effect = upsert
        store = SQLiteStore(db)

        store.put_async(StoreCaches.PLAYLISTS, "party:0", {"n": 1})
        store.put_async(StoreCaches.PLAYLISTS, "party:0", {"n": 2})
        await drain_background_tasks()

        assert written == ['{"n": 1}', '{"n": 2}']

    @pytest.mark.asyncio
    async def test_value_captured_at_call_time(self, memory_store):
        value = {"n": 1}

        memory_store.put_async(StoreCaches.PLAYLISTS, "party:0", value)
        value["n"] = 2
        await drain_background_tasks()

        assert await memory_store.get(StoreCaches.PLAYLISTS, "party:0") == {"n": 1}

    @pytest.mark.asyncio
    async def test_direct_put_waits_for_pending_write(self, memory_store):
        memory_store.put_async(StoreCaches.PLAYLISTS, "party:0", {"n": 1})
        await memory_store.put(StoreCaches.PLAYLISTS, "party:0", {"n": 2})
        await drain_background_tasks()

        assert await memory_store.get(StoreCaches.PLAYLISTS, "party:0") == {"n": 2}

    @pytest.mark.asyncio
    async def test_other_keys_do_not_wait(self):
        started = []
        release = asyncio.Event()

        async def upsert(cache, key, raw):
            started.append(key)
            if key == "party:0":
                await release.wait()

        db = AsyncMock()
        db.upsert_entry.side_effect = upsert
        store = SQLiteStore(db)

        store.put_async(StoreCaches.PLAYLISTS, "party:0", {"n": 1})
        store.put_async(StoreCaches.PLAYLISTS, "party:1", {"n": 1})
        await asyncio.sleep(0.01)

        assert started == ["party:0", "party:1"]
        release.set()
        await drain_background_tasks()


class TestDatabase:
    @pytest.mark.parametrize(
        "url, path",
        [
            ("sqlite:///data/playlist.db", "data/playlist.db"),
            ("sqlite:////var/lib/playlist.db", "/var/lib/playlist.db"),
            (":memory:", ":memory:"),
        ],
    )
    def test_path_from_url(self, url, path):
        assert path_from_url(url) == path

    @pytest.mark.asyncio
    async def test_versions_advance_on_every_write(self, in_memory_database):
        await in_memory_database.upsert_entry("T", "k", '"a"')
        await in_memory_database.upsert_entry("T", "k", '"b"')

        entry = await in_memory_database.read_entry("T", "k")

        assert entry == StoredEntry('"b"', 2)

    @pytest.mark.asyncio
    async def test_stale_version_update_is_rejected(self, in_memory_database):
        assert await in_memory_database.insert_entry("T", "k", "1") is True
        assert await in_memory_database.insert_entry("T", "k", "2") is False

        assert await in_memory_database.update_entry_if_version("T", "k", "3", 1) is True
        assert await in_memory_database.update_entry_if_version("T", "k", "4", 1) is False
        assert (await in_memory_database.read_entry("T", "k")).value == "3"

    @pytest.mark.asyncio
    async def test_pages_are_key_ordered_per_cache(self, in_memory_database):
        for key in ("c", "a", "b"):
            await in_memory_database.upsert_entry("T", key, "{}")
        await in_memory_database.upsert_entry("OTHER", "z", "{}")

        first = await in_memory_database.read_page("T", "", 2)
        rest = await in_memory_database.read_page("T", first[-1][0], 2)

        assert [k for k, _ in first] == ["a", "b"]
        assert [k for k, _ in rest] == ["c"]
