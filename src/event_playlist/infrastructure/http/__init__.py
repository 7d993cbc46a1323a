"""HTTP layer (FastAPI)."""

from event_playlist.infrastructure.http.app import create_app

__all__ = ["create_app"]
