"""
Playlist Bounded Context

Tracks, the ordered queue of an event playlist, and the rules that
govern adding, reordering, voting and playback progress.
"""

from event_playlist.domain.playlist.entities import Playlist, Track
from event_playlist.domain.playlist.services import PlaybackDomainService, QueueDomainService
from event_playlist.domain.playlist.value_objects import Feedback, TrackRef

__all__ = [
    "Track",
    "Playlist",
    "TrackRef",
    "Feedback",
    "QueueDomainService",
    "PlaybackDomainService",
]
