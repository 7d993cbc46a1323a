"""Activity feed infrastructure."""

from event_playlist.infrastructure.activity.http_activity_publisher import HttpActivityPublisher

__all__ = ["HttpActivityPublisher"]
