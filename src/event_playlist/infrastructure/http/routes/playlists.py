"""Playlist, queue and playback routes."""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends, Response
from pydantic import BaseModel, field_validator

from event_playlist.application.services.playlist_service import PlaylistApplicationService
from event_playlist.domain.playlist.value_objects import Feedback, TrackRef
from event_playlist.domain.shared.constants import ErrorCodes
from event_playlist.domain.shared.exceptions import PlaylistValidationError
from event_playlist.domain.shared.messages import ErrorMessages
from event_playlist.infrastructure.http.dependencies import get_playlist_service

router = APIRouter(prefix="/events/{event_id}/playlists/{list_id}", tags=["playlists"])


class AddTrackRequest(BaseModel):
    provider: str
    id: str
    user: str = ""


class ReorderRequest(BaseModel):
    provider: str
    id: str
    to: int
    user: str = ""


class FeedbackRequest(BaseModel):
    old: Feedback = Feedback.NONE
    new: Feedback = Feedback.NONE
    user: str = ""

    @field_validator("old", "new", mode="before")
    @classmethod
    def coerce_feedback(cls, v: str | None) -> Feedback:
        return Feedback.coerce(v)


def _parse_track(value: str) -> TrackRef:
    """Split a ``provider:id`` path segment."""
    try:
        return TrackRef.parse(value)
    except ValueError as e:
        raise PlaylistValidationError(
            ErrorMessages.TRACK_NOT_FOUND, code=ErrorCodes.TRACK_NOT_FOUND
        ) from e


# ── reads ──────────────────────────────────────────────────────────────


@router.get("")
async def get_playlist(
    event_id: str,
    list_id: int,
    service: PlaylistApplicationService = Depends(get_playlist_service),
) -> dict[str, Any]:
    playlist = await service.get_playlist(event_id, list_id)
    return playlist.to_wire()


@router.get("/currentTrack")
async def get_current_track(
    event_id: str,
    list_id: int,
    service: PlaylistApplicationService = Depends(get_playlist_service),
) -> dict[str, Any] | None:
    track = await service.get_current_track(event_id, list_id)
    return track.to_wire() if track else None


@router.get("/tracks")
async def get_tracks(
    event_id: str,
    list_id: int,
    service: PlaylistApplicationService = Depends(get_playlist_service),
) -> list[dict[str, Any]]:
    tracks = await service.get_tracks(event_id, list_id)
    return [t.to_wire() for t in tracks]


# ── playback ───────────────────────────────────────────────────────────


@router.get("/play")
async def play(
    event_id: str,
    list_id: int,
    user: str = "?",
    service: PlaylistApplicationService = Depends(get_playlist_service),
) -> dict[str, Any]:
    playlist = await service.play(event_id, list_id, user)
    return playlist.to_wire()


@router.get("/pause")
async def pause(
    event_id: str,
    list_id: int,
    user: str = "?",
    service: PlaylistApplicationService = Depends(get_playlist_service),
) -> dict[str, Any]:
    playlist = await service.pause(event_id, list_id, user)
    return playlist.to_wire()


@router.get("/next")
async def next_track(
    event_id: str,
    list_id: int,
    user: str = "?",
    service: PlaylistApplicationService = Depends(get_playlist_service),
) -> dict[str, Any]:
    playlist = await service.next(event_id, list_id, user)
    return playlist.to_wire()


@router.get("/push")
async def push(
    event_id: str,
    list_id: int,
    service: PlaylistApplicationService = Depends(get_playlist_service),
) -> dict[str, Any]:
    playlist = await service.push(event_id, list_id)
    return playlist.to_wire()


# ── queue ──────────────────────────────────────────────────────────────


@router.post("/tracks")
async def add_track(
    event_id: str,
    list_id: int,
    request: AddTrackRequest,
    service: PlaylistApplicationService = Depends(get_playlist_service),
) -> dict[str, Any]:
    playlist = await service.add_track(
        event_id, list_id, request.provider, request.id, request.user
    )
    return playlist.to_wire()


@router.post("/reorder")
async def reorder(
    event_id: str,
    list_id: int,
    request: ReorderRequest,
    service: PlaylistApplicationService = Depends(get_playlist_service),
) -> dict[str, Any]:
    playlist = await service.move_track(
        event_id, list_id, request.provider, request.id, request.to, request.user
    )
    return playlist.to_wire()


@router.delete("/tracks/{track}")
async def delete_track(
    event_id: str,
    list_id: int,
    track: str,
    user: str = "?",
    service: PlaylistApplicationService = Depends(get_playlist_service),
) -> dict[str, Any]:
    ref = _parse_track(track)
    playlist = await service.delete_track(event_id, list_id, ref.provider, ref.track_id, user)
    return playlist.to_wire()


@router.post("/tracks/{track}/feedback", response_model=None)
async def feedback(
    event_id: str,
    list_id: int,
    track: str,
    request: FeedbackRequest,
    service: PlaylistApplicationService = Depends(get_playlist_service),
) -> dict[str, Any] | Response:
    ref = _parse_track(track)
    playlist = await service.provide_feedback(
        event_id, list_id, ref.provider, ref.track_id, request.old, request.new, request.user
    )
    if playlist is None:
        return Response(status_code=200)
    return playlist.to_wire()
