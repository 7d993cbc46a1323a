"""
Track Provider Interface

Port interface for the external playback provider: track metadata lookup
and per-account playback commands.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ...domain.event.entities import ProviderAccount
    from ...domain.playlist.entities import Track
    from ...domain.playlist.value_objects import TrackRef


class TrackProvider(ABC):
    """Abstract interface for playback provider services.

    Every method raises
    :class:`~event_playlist.domain.shared.exceptions.ProviderError` on
    failure, with ``failure`` telling device-not-found, forbidden, timeout
    and generic errors apart.
    """

    @abstractmethod
    async def fetch_track_detail(self, event_id: str, ref: TrackRef) -> Track:
        """Get metadata for one track.

        Args:
            event_id: The event the lookup is made for (selects credentials).
            ref: The ``provider:id`` pair.

        Returns:
            A track with progress, feedback counters and ``added_by`` unset.
        """
        ...

    @abstractmethod
    async def fetch_playlist_track_ids(
        self, event_id: str, provider: str, playlist_id: str
    ) -> list[str]:
        """Get the ``provider:id`` keys of every track in a provider playlist.

        Used as the autofill source of an event.
        """
        ...

    @abstractmethod
    async def play(
        self, event_id: str, account: ProviderAccount, ref: TrackRef, offset_ms: int
    ) -> None:
        """Start playing a track on one account's device.

        Args:
            event_id: The event.
            account: The account whose device should play.
            ref: The track to play.
            offset_ms: Start offset within the track.
        """
        ...

    @abstractmethod
    async def pause(self, event_id: str, account: ProviderAccount) -> None:
        ...
