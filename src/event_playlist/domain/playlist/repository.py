"""
Playlist Domain Repository Interfaces

Abstract base classes defining the contracts for data persistence.
Implementations live in the infrastructure layer.
"""

from abc import ABC, abstractmethod

from event_playlist.domain.playlist.entities import Playlist


class PlaylistRepository(ABC):
    """Abstract repository for live playlists keyed by ``eventID:playlistID``."""

    @abstractmethod
    async def get(self, event_id: str, playlist_id: int) -> Playlist | None:
        """Retrieve a playlist.

        Args:
            event_id: The owning event ID.
            playlist_id: The playlist number within the event.

        Returns:
            The playlist if found, None otherwise.
        """
        ...

    @abstractmethod
    async def save(self, playlist: Playlist) -> None:
        """Persist a playlist, waiting for the store to acknowledge.

        Args:
            playlist: The playlist to save.
        """
        ...

    @abstractmethod
    def save_in_background(self, playlist: Playlist) -> None:
        """Persist a playlist without waiting.

        Detached, best-effort: failures are logged by the store and never
        propagate to the caller.

        Args:
            playlist: The playlist to save.
        """
        ...
