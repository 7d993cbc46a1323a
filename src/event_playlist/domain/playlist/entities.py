"""Core domain entities for the playlist bounded context."""

from __future__ import annotations

from datetime import datetime, timedelta
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from event_playlist.domain.playlist.value_objects import FeedbackDelta, TrackRef
from event_playlist.domain.shared.datetime_utils import millis_between, utcnow
from event_playlist.domain.shared.types import (
    DurationMs,
    NonEmptyStr,
    NonNegativeInt,
    ProviderStr,
    UtcDatetimeField,
)


class Track(BaseModel):
    """A queued or playing song.

    Provider metadata the core does not interpret (artwork, genre, year, ...)
    is kept as extra fields and round-trips through the store unchanged.
    """

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    id: NonEmptyStr
    provider: ProviderStr
    name: str = ""
    artist: str = ""
    duration_ms: DurationMs = 0
    progress_ms: DurationMs = 0
    started_at: UtcDatetimeField | None = None
    added_by: str = "?"
    num_likes: NonNegativeInt = Field(default=0, alias="numLikes")
    num_hates: NonNegativeInt = Field(default=0, alias="numHates")

    @property
    def ref(self) -> TrackRef:
        return TrackRef(self.provider, self.id)

    @property
    def key(self) -> str:
        return f"{self.provider}:{self.id}"

    @property
    def remaining_ms(self) -> int:
        return self.duration_ms - self.progress_ms

    @property
    def progress_percentage(self) -> int:
        if self.duration_ms <= 0:
            return 0
        return round(self.progress_ms / self.duration_ms * 100)

    def matches(self, provider: str, track_id: str) -> bool:
        return self.provider == provider and self.id == track_id

    def apply_feedback(self, delta: FeedbackDelta) -> None:
        """Apply counter changes, clamping both counters at zero."""
        self.num_likes = max(0, self.num_likes + delta.likes)
        self.num_hates = max(0, self.num_hates + delta.hates)

    def reset_progress(self) -> None:
        self.progress_ms = 0

    def to_wire(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)


def find_track_position(tracks: list[Track], provider: str, track_id: str) -> int:
    """Return the index of ``provider:track_id`` in ``tracks`` or -1."""
    for i, track in enumerate(tracks):
        if track.matches(provider, track_id):
            return i
    return -1


def is_key_in_tracks(tracks: list[Track], track_key: str) -> bool:
    ref = TrackRef.parse(track_key)
    return find_track_position(tracks, ref.provider, ref.track_id) >= 0


class Playlist(BaseModel):
    """Aggregate root holding one event's live queue and current track."""

    model_config = ConfigDict(populate_by_name=True)

    event_id: NonEmptyStr = Field(alias="eventID")
    playlist_id: NonNegativeInt = Field(default=0, alias="playlistID")
    current_track: Track | None = Field(default=None, alias="currentTrack")
    next_tracks: list[Track] = Field(default_factory=list, alias="nextTracks")
    is_playing: bool = Field(default=True, alias="isPlaying")

    @property
    def store_key(self) -> str:
        return playlist_store_key(self.event_id, self.playlist_id)

    @property
    def queue_length(self) -> int:
        return len(self.next_tracks)

    def position_of(self, provider: str, track_id: str) -> int:
        return find_track_position(self.next_tracks, provider, track_id)

    def find(self, provider: str, track_id: str) -> Track | None:
        pos = self.position_of(provider, track_id)
        return self.next_tracks[pos] if pos >= 0 else None

    def contains_key(self, track_key: str) -> bool:
        return is_key_in_tracks(self.next_tracks, track_key)

    def is_current(self, track_key: str) -> bool:
        return self.current_track is not None and self.current_track.key == track_key

    def pop_next(self) -> Track | None:
        return self.next_tracks.pop(0) if self.next_tracks else None

    def update_current_track_progress(self, now: datetime | None = None) -> None:
        """Recompute ``progress_ms`` of a playing track from its start reference."""
        track = self.current_track
        if not self.is_playing or track is None or track.started_at is None:
            return
        elapsed = millis_between(track.started_at, now or utcnow())
        track.progress_ms = min(max(elapsed, 0), track.duration_ms)

    def eta_for_position(self, pos: int, now: datetime | None = None) -> datetime:
        """Estimated start time of the queued track at ``pos``."""
        millis = 0
        if self.current_track is not None:
            millis += self.current_track.remaining_ms
        millis += sum(t.duration_ms for t in self.next_tracks[:pos])
        return (now or utcnow()) + timedelta(milliseconds=millis)

    def to_wire(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)


def playlist_store_key(event_id: str, playlist_id: int | str) -> str:
    return f"{event_id}:{playlist_id}"
