"""Playback Controller - play/pause/skip state machine and track-end timers."""

from __future__ import annotations

import logging
from datetime import timedelta
from typing import TYPE_CHECKING

from ...domain.event.factories import EventDefaults, create_empty_playlist
from ...domain.playlist.services import PlaybackDomainService, QueueDomainService
from ...domain.shared.constants import SYSTEM_USER, ErrorCodes, ExitCodes, PlaybackLimits
from ...domain.shared.datetime_utils import utcnow
from ...domain.shared.events import ActivityType
from ...domain.shared.exceptions import ProviderError, StoreUnavailableError
from ...domain.shared.messages import ActivityMessages, ErrorMessages, LogTemplates
from .playback_timers import PlaybackTimers

if TYPE_CHECKING:
    from ...domain.event.entities import Event, EventExt
    from ...domain.event.repository import EventRepository
    from ...domain.playlist.entities import Playlist, Track
    from ...domain.playlist.repository import PlaylistRepository
    from ..interfaces.activity_publisher import ActivityPublisher
    from .provider_fanout import ProviderFanOut
    from .queue_engine import TrackQueueEngine
    from .readiness import ReadinessState

logger = logging.getLogger(__name__)


class PlaybackController:
    """Drives each playlist through ``Stopped``, ``Playing`` and ``Paused``.

    Owns the per-event track-end timers. When a timer fires the persisted
    event is reloaded and re-checked, so a stale timer racing a user skip
    only ever triggers a harmless re-check.
    """

    def __init__(
        self,
        *,
        event_repository: EventRepository,
        playlist_repository: PlaylistRepository,
        queue_engine: TrackQueueEngine,
        provider_fanout: ProviderFanOut,
        activity_publisher: ActivityPublisher,
        event_defaults: EventDefaults | None = None,
        readiness: ReadinessState | None = None,
    ) -> None:
        self._event_repo = event_repository
        self._playlist_repo = playlist_repository
        self._engine = queue_engine
        self._fanout = provider_fanout
        self._activities = activity_publisher
        self._defaults = event_defaults or EventDefaults()
        self._readiness = readiness
        self._timers = PlaybackTimers(self.on_timer_expired)

    @property
    def timers(self) -> PlaybackTimers:
        return self._timers

    async def shutdown(self) -> None:
        await self._timers.shutdown()

    # ── play / pause ───────────────────────────────────────────────────

    async def play(self, event: Event, playlist: Playlist) -> None:
        """Start or resume the current track on every provider account.

        Without a current track this skips to the first queued one, which
        re-enters play.

        Raises:
            ProviderError: The provider rejected the play command. With
                pause-on-error the playlist is paused and persisted first.
        """
        playlist.is_playing = True
        track = playlist.current_track
        if track is None:
            await self.skip(event, playlist, SYSTEM_USER)
            return

        now = utcnow()
        # Resume: shift the start reference back by the progress made so far.
        track.started_at = now - timedelta(milliseconds=track.progress_ms)
        playlist.update_current_track_progress(now)

        if event.demo_no_actual_playing:
            logger.debug(LogTemplates.PLAYBACK_PLAY_DEMO, event.event_id)
        else:
            try:
                await self._fanout.play_event(event, track.ref, track.progress_ms)
            except ProviderError as e:
                await self._handle_play_error(event, playlist, e)
                raise
            except Exception as e:
                error = ProviderError(
                    ErrorMessages.PLAY_FAILED.format(error=e), code=ErrorCodes.PLAY_FAILED
                )
                await self._handle_play_error(event, playlist, error)
                raise error from e

        self._activities.publish(
            ActivityType.TRACK_PLAY,
            event.event_id,
            {"trackID": track.key, "playlistID": playlist.playlist_id, "track": track.to_wire()},
            ActivityMessages.TRACK_PLAY.format(name=track.name),
        )
        logger.info(
            LogTemplates.PLAYBACK_PLAY,
            event.event_id,
            playlist.playlist_id,
            track.id,
            track.progress_ms,
            track.name,
        )
        self._set_timer(event, track)

    async def _handle_play_error(
        self, event: Event, playlist: Playlist, error: ProviderError
    ) -> None:
        logger.critical(LogTemplates.PLAYBACK_PLAY_FAILED, event.event_id, error.message)
        if event.pause_on_play_error:
            await self.pause(event, playlist, error=error)
            self._playlist_repo.save_in_background(playlist)

    async def pause(
        self,
        event: Event,
        playlist: Playlist,
        user: str = "?",
        error: ProviderError | None = None,
    ) -> None:
        """Freeze progress and stop playback.

        A pause caused by a failed play does not call the provider again and
        publishes no activity.
        """
        logger.info(LogTemplates.PLAYBACK_PAUSE, event.event_id, playlist.playlist_id)
        playlist.update_current_track_progress()
        playlist.is_playing = False
        self._timers.clear(event.event_id)

        if event.demo_no_actual_playing:
            logger.debug(LogTemplates.PLAYBACK_PLAY_DEMO, event.event_id)
        elif error is None:
            try:
                await self._fanout.pause_event(event)
            except ProviderError as e:
                logger.warning(LogTemplates.PLAYBACK_PAUSE_IGNORED, event.event_id, e)

        track = playlist.current_track
        if error is None and track is not None:
            self._activities.publish(
                ActivityType.TRACK_PAUSE,
                event.event_id,
                {"trackID": track.key, "playlistID": playlist.playlist_id, "track": track.to_wire()},
                ActivityMessages.TRACK_PAUSE.format(name=track.name, user=user),
            )

    # ── skip ───────────────────────────────────────────────────────────

    async def skip(self, event: Event, playlist: Playlist, user: str) -> None:
        """Advance to the next playable track.

        Records a sufficiently played current track in the event history,
        hate-skips queued tracks with more hates than likes, tops the queue
        off and, at the end of the queue, silences the provider.
        """
        logger.debug(LogTemplates.PLAYBACK_SKIP, event.event_id, playlist.playlist_id)
        ext: EventExt | None = None

        was_playing = self.is_track_playing(event, playlist)
        current = playlist.current_track
        if playlist.is_playing and current is not None:
            ext = await self._record_history(event, current)

        if current is not None and (not playlist.is_playing or was_playing):
            self._activities.publish(
                ActivityType.TRACK_SKIP,
                event.event_id,
                {"trackID": current.key, "playlistID": playlist.playlist_id, "track": current.to_wire()},
                ActivityMessages.TRACK_SKIP.format(user=user, name=current.name),
            )

        last_track = current
        playlist.current_track = playlist.pop_next()
        if event.enable_track_hate_skip:
            while QueueDomainService.is_hated(playlist.current_track):
                hated = playlist.current_track
                logger.debug(LogTemplates.PLAYBACK_HATE_SKIP, hated.name, event.event_id)
                self._activities.publish(
                    ActivityType.TRACK_SKIP_DUE2HATE,
                    event.event_id,
                    {"track": hated.to_wire()},
                    ActivityMessages.TRACK_SKIP_DUE2HATE.format(system=SYSTEM_USER, name=hated.name),
                )
                playlist.current_track = playlist.pop_next()

        if playlist.current_track is not None:
            playlist.current_track.reset_progress()
            if playlist.is_playing:
                await self.play(event, playlist)
            await self._engine.autofill_if_necessary(event, playlist, ext)
            return

        logger.debug(LogTemplates.PLAYBACK_END_OF_PLAYLIST, event.event_id)
        self._timers.clear(event.event_id)
        refilled = await self._engine.autofill_if_necessary(event, playlist, ext)
        if refilled and playlist.is_playing:
            await self.play(event, playlist)
        elif last_track is not None and not event.demo_no_actual_playing:
            try:
                await self._fanout.pause_event(event)
            except ProviderError as e:
                logger.warning(LogTemplates.PLAYBACK_PAUSE_IGNORED, event.event_id, e)

    async def _record_history(self, event: Event, track: Track) -> EventExt | None:
        if not PlaybackDomainService.qualifies_for_history(event, track):
            logger.debug(
                LogTemplates.PLAYBACK_SKIP_NOT_RECORDED,
                track.progress_percentage,
                event.progress_percentage_required_for_effective_playlist,
            )
            return None
        logger.debug(
            LogTemplates.PLAYBACK_SKIP_RECORDED,
            track.key,
            event.event_id,
            track.progress_percentage,
        )
        ext = await self._event_repo.get_ext(event.event_id)
        ext.effective_playlist.append(track.model_copy(deep=True))
        await self._event_repo.save_ext(event.event_id, ext)
        return ext

    def is_track_playing(self, event: Event, playlist: Playlist) -> bool:
        return PlaybackDomainService.is_track_playing(event, playlist)

    # ── periodic checks ────────────────────────────────────────────────

    async def check_playlist(self, event: Event, playlist: Playlist) -> bool:
        """Autofill, and skip when the playlist should play but nothing does.

        Returns:
            True if the playlist changed (it has then been persisted).
        """
        changed = await self._engine.autofill_if_necessary(event, playlist)

        if playlist.is_playing and not self.is_track_playing(event, playlist):
            await self.skip(event, playlist, SYSTEM_USER)
            changed = True

        if changed:
            self._playlist_repo.save_in_background(playlist)
        return changed

    async def check_event(self, event: Event | None) -> None:
        """Check every declared playlist of ``event``, creating missing ones.

        Failures are logged and swallowed, except an unreachable store.
        """
        if event is None:
            logger.debug(LogTemplates.EVENT_CHECK_IGNORED, None)
            return

        try:
            for playlist_id in event.playlists:
                playlist = await self._playlist_repo.get(event.event_id, playlist_id)
                if playlist is None:
                    playlist = create_empty_playlist(event.event_id, playlist_id, self._defaults)
                await self.check_playlist(event, playlist)
        except StoreUnavailableError:
            raise
        except Exception as e:
            logger.error(LogTemplates.EVENT_CHECK_FAILED, event.event_id, e)

    # ── timers ─────────────────────────────────────────────────────────

    def _set_timer(self, event: Event, track: Track) -> None:
        timeout, adjusted = PlaybackDomainService.timer_timeout_ms(event, track)
        if adjusted:
            logger.warning(
                LogTemplates.TIMER_STRANGE_TIMEOUT, track.remaining_ms, event.event_id, timeout
            )
        self._timers.set(event.event_id, timeout)

    async def on_timer_expired(self, event_id: str) -> None:
        """Reload the event and re-check it; retry shortly if that fails.

        A lost store is not retried: the replica is asked to exit instead.
        """
        logger.debug(LogTemplates.TIMER_EXPIRED, event_id)
        try:
            event = await self._event_repo.get(event_id)
            await self.check_event(event)
        except StoreUnavailableError as e:
            logger.critical(LogTemplates.STORE_FATAL, e)
            if self._readiness is not None:
                self._readiness.fatal(ExitCodes.STORE_UNAVAILABLE, e)
        except Exception as e:
            logger.warning(
                LogTemplates.TIMER_CHECK_FAILED, event_id, PlaybackLimits.RETRY_DELAY_MS, e
            )
            self._timers.set(event_id, PlaybackLimits.RETRY_DELAY_MS)
