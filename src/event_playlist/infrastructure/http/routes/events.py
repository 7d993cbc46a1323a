"""Event lifecycle and provider account routes."""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Body, Depends

from event_playlist.application.services.event_service import EventApplicationService
from event_playlist.application.services.playlist_service import PlaylistApplicationService
from event_playlist.domain.event.entities import Event, ProviderAccount
from event_playlist.infrastructure.http.dependencies import (
    get_event_service,
    get_playlist_service,
)

router = APIRouter(prefix="/events", tags=["events"])


def _event_from_body(service: EventApplicationService, body: dict[str, Any]) -> Event:
    """Overlay the request body on a freshly defaulted event."""
    return Event.model_validate({**service.new_event().to_wire(), **body})


@router.post("")
async def create_event(
    body: dict[str, Any] = Body(...),
    service: EventApplicationService = Depends(get_event_service),
) -> dict[str, Any]:
    event = await service.create_event(_event_from_body(service, body))
    return event.to_wire()


@router.get("/{event_id}")
async def get_event(
    event_id: str, service: EventApplicationService = Depends(get_event_service)
) -> dict[str, Any] | None:
    event = await service.get_event(event_id)
    return event.to_wire() if event else None


@router.post("/{event_id}")
async def update_event(
    event_id: str,
    body: dict[str, Any] = Body(...),
    service: EventApplicationService = Depends(get_event_service),
) -> dict[str, Any]:
    event = _event_from_body(service, body)
    if not event.event_id:
        event.event_id = event_id
    event = await service.update_event(event)
    return event.to_wire()


@router.delete("/{event_id}")
async def delete_event(
    event_id: str, service: EventApplicationService = Depends(get_event_service)
) -> dict[str, Any]:
    await service.delete_event(event_id)
    return service.new_event().to_wire()


@router.post("/{event_id}/validate")
async def validate_event(
    event_id: str,
    body: dict[str, Any] = Body(...),
    service: EventApplicationService = Depends(get_event_service),
) -> dict[str, Any]:
    event = await service.validate(_event_from_body(service, body), is_create=True)
    return event.to_wire()


@router.post("/{event_id}/providers")
async def add_provider(
    event_id: str,
    account: ProviderAccount,
    events: EventApplicationService = Depends(get_event_service),
    playlists: PlaylistApplicationService = Depends(get_playlist_service),
) -> dict[str, Any] | None:
    """Register an account; responds with the active playlist so it can join in."""
    event = await events.add_provider(event_id, account)
    playlist = await playlists.get_active_playlist(event)
    return playlist.to_wire() if playlist else None


@router.delete("/{event_id}/providers")
async def remove_provider(
    event_id: str,
    account: ProviderAccount,
    service: EventApplicationService = Depends(get_event_service),
) -> list[dict[str, Any]]:
    event = await service.remove_provider(event_id, account)
    return [p.model_dump(mode="json") for p in event.providers]
