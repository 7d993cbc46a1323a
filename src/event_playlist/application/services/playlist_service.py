"""Playlist Application Service - request-level orchestration of queue and playback."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from ...domain.event.factories import EventDefaults, create_empty_playlist
from ...domain.playlist.value_objects import Feedback
from ...domain.shared.constants import SYSTEM_USER, ErrorCodes
from ...domain.shared.exceptions import EntityNotFoundError
from ...domain.shared.messages import ErrorMessages, LogTemplates

if TYPE_CHECKING:
    from ...domain.event.entities import Event
    from ...domain.event.repository import EventRepository
    from ...domain.playlist.entities import Playlist, Track
    from ...domain.playlist.repository import PlaylistRepository
    from .playback_controller import PlaybackController
    from .queue_engine import TrackQueueEngine

logger = logging.getLogger(__name__)


class PlaylistApplicationService:
    """Loads an event and one of its playlists, runs a use case, persists.

    Every mutating use case returns the playlist after scheduling a
    best-effort background save; callers broadcast that snapshot.
    """

    def __init__(
        self,
        *,
        event_repository: EventRepository,
        playlist_repository: PlaylistRepository,
        queue_engine: TrackQueueEngine,
        playback_controller: PlaybackController,
        event_defaults: EventDefaults | None = None,
    ) -> None:
        self._event_repo = event_repository
        self._playlist_repo = playlist_repository
        self._engine = queue_engine
        self._playback = playback_controller
        self._defaults = event_defaults or EventDefaults()

    async def _load(self, event_id: str, playlist_id: int) -> tuple[Event, Playlist]:
        event = await self._event_repo.get(event_id)
        if event is None:
            raise EntityNotFoundError(
                "Event",
                event_id,
                ErrorMessages.EVENT_NOT_FOUND.format(event_id=event_id),
                code=ErrorCodes.EVENT_NOT_FOUND,
            )

        playlist = await self._playlist_repo.get(event.event_id, playlist_id)
        if playlist is None:
            if playlist_id not in event.playlists:
                raise EntityNotFoundError(
                    "Playlist",
                    playlist_id,
                    ErrorMessages.PLAYLIST_NOT_FOUND.format(
                        playlist_id=playlist_id, event_id=event.event_id
                    ),
                    code=ErrorCodes.PLAYLIST_NOT_FOUND,
                )
            # Declared but never written yet: playlists are created lazily.
            playlist = create_empty_playlist(event.event_id, playlist_id, self._defaults)
        return event, playlist

    def _persist(self, playlist: Playlist) -> Playlist:
        self._playlist_repo.save_in_background(playlist)
        return playlist

    # ── reads ──────────────────────────────────────────────────────────

    async def get_playlist(self, event_id: str, playlist_id: int) -> Playlist:
        _, playlist = await self._load(event_id, playlist_id)
        playlist.update_current_track_progress()
        return playlist

    async def get_current_track(self, event_id: str, playlist_id: int) -> Track | None:
        playlist = await self.get_playlist(event_id, playlist_id)
        return playlist.current_track

    async def get_tracks(self, event_id: str, playlist_id: int) -> list[Track]:
        playlist = await self.get_playlist(event_id, playlist_id)
        return playlist.next_tracks

    async def get_active_playlist(self, event: Event) -> Playlist | None:
        """The playlist a newly registered provider account should pick up."""
        return await self._playlist_repo.get(event.event_id, event.active_playlist)

    # ── playback ───────────────────────────────────────────────────────

    async def play(self, event_id: str, playlist_id: int, user: str = "?") -> Playlist:
        event, playlist = await self._load(event_id, playlist_id)
        await self._playback.play(event, playlist)
        return self._persist(playlist)

    async def pause(self, event_id: str, playlist_id: int, user: str = "?") -> Playlist:
        event, playlist = await self._load(event_id, playlist_id)
        await self._playback.pause(event, playlist, user)
        return self._persist(playlist)

    async def next(self, event_id: str, playlist_id: int, user: str = "?") -> Playlist:
        event, playlist = await self._load(event_id, playlist_id)
        await self._playback.skip(event, playlist, user)
        return self._persist(playlist)

    async def push(self, event_id: str, playlist_id: int) -> Playlist:
        """Re-save the playlist unchanged so every replica and client sees it."""
        _, playlist = await self._load(event_id, playlist_id)
        return self._persist(playlist)

    # ── queue ──────────────────────────────────────────────────────────

    async def add_track(
        self, event_id: str, playlist_id: int, provider: str, track_id: str, user: str
    ) -> Playlist:
        event, playlist = await self._load(event_id, playlist_id)
        await self._engine.add_track(event, playlist, provider, track_id, user)

        if playlist.current_track is None and playlist.is_playing:
            # The queue was empty: make the new track the current one.
            try:
                await self._playback.skip(event, playlist, SYSTEM_USER)
            except Exception as e:
                logger.warning(LogTemplates.QUEUE_ADD_SKIP_FAILED, e)

        return self._persist(playlist)

    async def move_track(
        self,
        event_id: str,
        playlist_id: int,
        provider: str,
        track_id: str,
        new_pos: int,
        user: str,
    ) -> Playlist:
        event, playlist = await self._load(event_id, playlist_id)
        self._engine.move_track(event.event_id, playlist, provider, track_id, new_pos, user)
        return self._persist(playlist)

    async def delete_track(
        self, event_id: str, playlist_id: int, provider: str, track_id: str, user: str
    ) -> Playlist:
        event, playlist = await self._load(event_id, playlist_id)
        await self._engine.delete_track(event, playlist, provider, track_id, user)
        return self._persist(playlist)

    async def provide_feedback(
        self,
        event_id: str,
        playlist_id: int,
        provider: str,
        track_id: str,
        old: Feedback,
        new: Feedback,
        user: str,
    ) -> Playlist | None:
        """Apply one feedback transition.

        Returns:
            The changed playlist, or None if the track was not found.
        """
        event, playlist = await self._load(event_id, playlist_id)
        outcome = self._engine.provide_feedback(
            event, playlist, provider, track_id, old, new, user
        )
        if outcome.skip_current:
            await self._playback.skip(event, playlist, SYSTEM_USER)
        if not outcome.state_changed:
            return None
        return self._persist(playlist)
