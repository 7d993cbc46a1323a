"""
Store Interface

Port interface for the shared key-value store every replica reads and
writes. Values are JSON-compatible dictionaries; keys live in named caches
(see :class:`~event_playlist.domain.shared.constants.StoreCaches`).
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import AsyncIterator
from typing import Any

JsonDict = dict[str, Any]


class Store(ABC):
    """Abstract persistent key-value store with compare-and-swap support.

    Every method except :meth:`put_async` raises
    :class:`~event_playlist.domain.shared.exceptions.StoreUnavailableError`
    when the backing store cannot be reached.
    """

    @abstractmethod
    async def get(self, cache: str, key: str) -> JsonDict | None:
        """Read a value.

        Args:
            cache: Logical cache name.
            key: Entry key.

        Returns:
            The stored value, or None if absent.
        """
        ...

    @abstractmethod
    async def put(self, cache: str, key: str, value: JsonDict) -> None:
        """Write a value and wait for the store to acknowledge it."""
        ...

    @abstractmethod
    def put_async(self, cache: str, key: str, value: JsonDict) -> None:
        """Write a value in a detached task.

        Best-effort: failures are logged, never propagated to the caller.
        Writes to the same key land in call order, and the value is
        captured at call time.
        """
        ...

    @abstractmethod
    async def remove(self, cache: str, key: str) -> None:
        ...

    @abstractmethod
    def iterate(self, cache: str, batch_size: int) -> AsyncIterator[tuple[str, JsonDict]]:
        """Lazily walk all entries of a cache.

        Args:
            cache: Logical cache name.
            batch_size: Entries fetched per round trip.

        Returns:
            Async iterator of ``(key, value)`` pairs.
        """
        ...

    @abstractmethod
    async def get_with_version(self, cache: str, key: str) -> tuple[JsonDict, int] | None:
        """Read a value together with its opaque version token.

        Returns:
            ``(value, version)``, or None if absent.
        """
        ...

    @abstractmethod
    async def replace_if_version_matches(
        self, cache: str, key: str, value: JsonDict, version: int
    ) -> bool:
        """Conditionally replace a value.

        Args:
            cache: Logical cache name.
            key: Entry key.
            value: The new value.
            version: The version token read by :meth:`get_with_version`.

        Returns:
            True if the stored version still matched and the value was
            replaced, False if someone else changed it first.
        """
        ...

    @abstractmethod
    async def put_if_absent(self, cache: str, key: str, value: JsonDict) -> bool:
        """Create an entry unless it already exists.

        Returns:
            True if this call created the entry.
        """
        ...
