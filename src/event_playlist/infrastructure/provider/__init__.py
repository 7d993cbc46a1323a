"""Provider infrastructure: HTTP client for the music provider service."""

from event_playlist.infrastructure.provider.http_track_provider import (
    HttpTrackProvider,
    classify_failure,
)

__all__ = ["HttpTrackProvider", "classify_failure"]
