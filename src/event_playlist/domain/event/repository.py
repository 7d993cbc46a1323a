"""
Event Domain Repository Interfaces

Abstract base classes defining the contracts for data persistence.
Implementations live in the infrastructure layer.
"""

from abc import ABC, abstractmethod
from collections.abc import AsyncIterator

from event_playlist.domain.event.entities import Event, EventExt


class EventRepository(ABC):
    """Abstract repository for events and their extensions."""

    @abstractmethod
    async def get(self, event_id: str) -> Event | None:
        """Retrieve an event by ID.

        Args:
            event_id: The event ID (case-insensitive).

        Returns:
            The event if found, None otherwise.
        """
        ...

    @abstractmethod
    async def save(self, event: Event) -> None:
        """Persist an event, waiting for the store to acknowledge.

        Args:
            event: The event to save.
        """
        ...

    @abstractmethod
    def iterate(self, batch_size: int) -> AsyncIterator[tuple[str, Event | None]]:
        """Lazily walk every stored event.

        Args:
            batch_size: Number of entries fetched from the store per round trip.

        Returns:
            Async iterator of ``(key, event)``; the event is None for entries
            that are not valid event records.
        """
        ...

    @abstractmethod
    async def get_ext(self, event_id: str) -> EventExt:
        """Retrieve the extension of an event.

        Args:
            event_id: The event ID.

        Returns:
            The stored extension, or a freshly defaulted one if none exists yet.
        """
        ...

    @abstractmethod
    async def save_ext(self, event_id: str, ext: EventExt) -> None:
        """Persist the extension of an event.

        Args:
            event_id: The event ID.
            ext: The extension to save.
        """
        ...
