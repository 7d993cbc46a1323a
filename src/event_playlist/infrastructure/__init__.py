"""Infrastructure layer - external systems integration.

This layer contains implementations for:
- Persistence (SQLite key-value store and repositories)
- Provider (HTTP client for the music provider service)
- Activity (HTTP activity feed publisher)
- AI (OpenAI track curation)
- HTTP (FastAPI application and routes)
"""

from event_playlist.infrastructure.persistence.database import Database
from event_playlist.infrastructure.persistence.sqlite_store import SQLiteStore
from event_playlist.infrastructure.provider.http_track_provider import HttpTrackProvider

__all__ = [
    "Database",
    "SQLiteStore",
    "HttpTrackProvider",
]
