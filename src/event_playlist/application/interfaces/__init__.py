"""
Application Interfaces (Ports)

Abstract interfaces that define contracts between the application
layer and infrastructure adapters. These are the "ports" in
hexagonal architecture.
"""

from event_playlist.application.interfaces.activity_publisher import ActivityPublisher
from event_playlist.application.interfaces.store import Store
from event_playlist.application.interfaces.track_curator import CurationResult, TrackCurator
from event_playlist.application.interfaces.track_provider import TrackProvider

__all__ = [
    "Store",
    "TrackProvider",
    "ActivityPublisher",
    "TrackCurator",
    "CurationResult",
]
