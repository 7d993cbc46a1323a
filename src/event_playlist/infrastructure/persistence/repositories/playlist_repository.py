"""Store-backed implementation of the playlist repository."""

from __future__ import annotations

from typing import TYPE_CHECKING

from event_playlist.domain.playlist.entities import Playlist, playlist_store_key
from event_playlist.domain.playlist.repository import PlaylistRepository
from event_playlist.domain.shared.constants import StoreCaches

if TYPE_CHECKING:
    from ....application.interfaces.store import Store


class StorePlaylistRepository(PlaylistRepository):
    def __init__(self, store: Store) -> None:
        self._store = store

    async def get(self, event_id: str, playlist_id: int) -> Playlist | None:
        data = await self._store.get(StoreCaches.PLAYLISTS, playlist_store_key(event_id, playlist_id))
        if data is None:
            return None
        return Playlist.model_validate(data)

    async def save(self, playlist: Playlist) -> None:
        await self._store.put(StoreCaches.PLAYLISTS, playlist.store_key, playlist.to_wire())

    def save_in_background(self, playlist: Playlist) -> None:
        self._store.put_async(StoreCaches.PLAYLISTS, playlist.store_key, playlist.to_wire())
