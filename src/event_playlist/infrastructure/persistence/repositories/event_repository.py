"""Store-backed implementation of the event repository."""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from typing import TYPE_CHECKING

from pydantic import ValidationError

from event_playlist.domain.event.entities import Event, EventExt
from event_playlist.domain.event.factories import create_empty_event_ext
from event_playlist.domain.event.repository import EventRepository
from event_playlist.domain.shared.constants import StoreCaches

if TYPE_CHECKING:
    from ....application.interfaces.store import Store

logger = logging.getLogger(__name__)


class StoreEventRepository(EventRepository):
    def __init__(self, store: Store) -> None:
        self._store = store

    async def get(self, event_id: str) -> Event | None:
        data = await self._store.get(StoreCaches.EVENTS, event_id.lower())
        if data is None:
            return None
        return Event.model_validate(data)

    async def save(self, event: Event) -> None:
        await self._store.put(StoreCaches.EVENTS, event.event_id, event.to_wire())

    async def iterate(self, batch_size: int) -> AsyncIterator[tuple[str, Event | None]]:
        async for key, data in self._store.iterate(StoreCaches.EVENTS, batch_size):
            if "playlists" not in data:
                yield key, None
                continue
            try:
                yield key, Event.model_validate(data)
            except ValidationError as e:
                logger.debug("Event %s failed validation: %s", key, e)
                yield key, None

    async def get_ext(self, event_id: str) -> EventExt:
        data = await self._store.get(StoreCaches.EVENT_EXT, event_id)
        if data is None:
            return create_empty_event_ext()
        return EventExt.model_validate(data)

    async def save_ext(self, event_id: str, ext: EventExt) -> None:
        await self._store.put(StoreCaches.EVENT_EXT, event_id, ext.to_wire())
