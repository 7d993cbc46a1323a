"""HTTP route modules, one router per resource."""

from event_playlist.infrastructure.http.routes import events, health, playlists

__all__ = ["events", "health", "playlists"]
