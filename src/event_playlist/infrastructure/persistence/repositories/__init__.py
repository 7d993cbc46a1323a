"""Store-backed repository implementations."""

from event_playlist.infrastructure.persistence.repositories.event_repository import (
    StoreEventRepository,
)
from event_playlist.infrastructure.persistence.repositories.playlist_repository import (
    StorePlaylistRepository,
)

__all__ = [
    "StoreEventRepository",
    "StorePlaylistRepository",
]
