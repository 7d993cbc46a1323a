"""FastAPI dependencies resolving services from the container on ``app.state``."""

from __future__ import annotations

from fastapi import Request

from event_playlist.application.services.event_service import EventApplicationService
from event_playlist.application.services.playlist_service import PlaylistApplicationService
from event_playlist.config.container import Container


def get_container(request: Request) -> Container:
    return request.app.state.container


def get_event_service(request: Request) -> EventApplicationService:
    return get_container(request).event_service


def get_playlist_service(request: Request) -> PlaylistApplicationService:
    return get_container(request).playlist_service
