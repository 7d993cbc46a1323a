"""
Track Curator Interface

Port interface for AI-assisted placement of a new track in the queue.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ...domain.event.entities import Event
    from ...domain.playlist.entities import Track


@dataclass(frozen=True)
class CurationResult:
    """Where to insert a track, plus the cluster the model assigned it to."""

    position: int
    cluster_id: int = -1


class TrackCurator(ABC):
    """Abstract interface for AI track placement services."""

    @abstractmethod
    async def suggest_position(
        self, event: Event, new_track: Track, current_list: list[Track]
    ) -> CurationResult:
        """Ask the model where ``new_track`` fits best.

        Args:
            event: The event (its fit weights steer the model).
            new_track: The track being added.
            current_list: The queued tracks.

        Returns:
            The suggested insertion index.

        Raises:
            Any exception on failure; the caller falls back to index 0.
        """
        ...

    @abstractmethod
    def is_available(self) -> bool:
        ...
