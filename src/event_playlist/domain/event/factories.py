"""Factories returning fully-defaulted event, event extension and playlist records."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta

from event_playlist.domain.event.entities import Event, EventExt
from event_playlist.domain.playlist.entities import Playlist
from event_playlist.domain.shared.datetime_utils import utcnow


@dataclass(frozen=True)
class EventDefaults:
    """Deployment-wide defaults applied to every new event."""

    event_url: str = "localhost:8080"
    autofill_empty_playlist: bool = True
    is_playing: bool = True
    progress_percentage_required: int = 75
    allow_duplicate_tracks: bool = False
    demo_autoskip_seconds: int = 0
    demo_no_actual_playing: bool = False
    pause_on_play_error: bool = True


def create_empty_event(
    defaults: EventDefaults | None = None, now: datetime | None = None
) -> Event:
    """A new event starting now and ending after its maximum duration."""
    defaults = defaults or EventDefaults()
    event = Event(
        allow_duplicate_tracks=defaults.allow_duplicate_tracks,
        progress_percentage_required_for_effective_playlist=defaults.progress_percentage_required,
        pause_on_play_error=defaults.pause_on_play_error,
        demo_autoskip=defaults.demo_autoskip_seconds,
        demo_no_actual_playing=defaults.demo_no_actual_playing,
        demo_auto_fill_empty_playlist=defaults.autofill_empty_playlist,
    )
    start = now or utcnow()
    event.event_starts_at = start
    event.event_ends_at = start + timedelta(minutes=event.max_duration_in_minutes)
    return event


def create_empty_event_ext() -> EventExt:
    return EventExt()


def create_empty_playlist(
    event_id: str, playlist_id: int, defaults: EventDefaults | None = None
) -> Playlist:
    defaults = defaults or EventDefaults()
    return Playlist(event_id=event_id, playlist_id=playlist_id, is_playing=defaults.is_playing)


def event_url_for(defaults: EventDefaults, event_id: str) -> str:
    return f"{defaults.event_url}/{event_id}"
