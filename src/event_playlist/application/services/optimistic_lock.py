"""Generic compare-and-swap primitive over the store."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from event_playlist.domain.shared.exceptions import CoordinationError

if TYPE_CHECKING:
    from ..interfaces.store import JsonDict, Store

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Versioned:
    """A value together with the version token it was read at."""

    value: JsonDict
    version: int


class OptimisticLock:
    """Single-winner coordination on one cache of the store.

    Usage::

        entry = await lock.read(key)
        await lock.replace(key, new_value, entry.version)  # CoordinationError if beaten

    A lost race is never retried within the same attempt; the caller backs
    off and tries again on its next tick.
    """

    def __init__(self, store: Store, cache: str) -> None:
        self._store = store
        self._cache = cache

    async def read(self, key: str) -> Versioned | None:
        entry = await self._store.get_with_version(self._cache, key)
        if entry is None:
            return None
        value, version = entry
        return Versioned(value=value, version=version)

    async def create(self, key: str, value: JsonDict) -> bool:
        """Create the record if nobody did yet. Returns True for the creator."""
        return await self._store.put_if_absent(self._cache, key, value)

    async def replace(self, key: str, value: JsonDict, version: int) -> None:
        """Replace the record iff it is still at ``version``.

        Raises:
            CoordinationError: Another caller replaced it first.
        """
        if not await self._store.replace_if_version_matches(self._cache, key, value, version):
            raise CoordinationError(key)
