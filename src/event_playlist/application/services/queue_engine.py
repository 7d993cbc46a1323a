"""Track Queue Engine - add, move, delete, feedback and autofill over a playlist's queue."""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass
from typing import TYPE_CHECKING

from ...domain.playlist.entities import Track
from ...domain.playlist.services import QueueDomainService
from ...domain.playlist.value_objects import Feedback, TrackRef
from ...domain.shared.constants import (
    EMERGENCY_TRACK_IDS,
    SUPPORTED_PROVIDERS,
    SYSTEM_USER,
    ErrorCodes,
)
from ...domain.shared.datetime_utils import clock_hhmm, wire_timestamp
from ...domain.shared.events import ActivityType
from ...domain.shared.exceptions import PlaylistValidationError, ProviderError
from ...domain.shared.messages import ActivityMessages, ErrorMessages, LogTemplates

if TYPE_CHECKING:
    from collections.abc import Sequence

    from ...domain.event.entities import Event, EventExt
    from ...domain.event.repository import EventRepository
    from ...domain.playlist.entities import Playlist
    from ..interfaces.activity_publisher import ActivityPublisher
    from ..interfaces.track_curator import TrackCurator
    from ..interfaces.track_provider import TrackProvider

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FeedbackOutcome:
    """Result of applying one feedback transition.

    ``state_changed`` tells the caller to persist and broadcast the
    playlist; ``skip_current`` asks it to hate-skip the current track.
    """

    state_changed: bool
    skip_current: bool = False


class TrackQueueEngine:
    """Queue algorithms for one playlist at a time.

    Every method mutates the playlist it is given; persisting it is up to
    the caller.
    """

    def __init__(
        self,
        *,
        track_provider: TrackProvider,
        event_repository: EventRepository,
        activity_publisher: ActivityPublisher,
        track_curator: TrackCurator | None = None,
    ) -> None:
        self._provider = track_provider
        self._event_repo = event_repository
        self._activities = activity_publisher
        self._curator = track_curator

    # ── add ────────────────────────────────────────────────────────────

    async def add_track(
        self, event: Event, playlist: Playlist, provider: str, track_id: str, user: str
    ) -> Track:
        """Validate, fetch and insert a contributed track.

        Raises:
            PlaylistValidationError: Unknown provider (PLYLST-100), queue full
                (PLYLST-115), already queued (PLYLST-110), already played
                while duplicates are disallowed (PLYLST-120) or the track
                detail lookup failed (PLYLST-130).
        """
        if provider not in SUPPORTED_PROVIDERS:
            raise PlaylistValidationError(
                ErrorMessages.UNKNOWN_PROVIDER.format(
                    provider=provider, supported=", ".join(sorted(SUPPORTED_PROVIDERS))
                ),
                code=ErrorCodes.UNKNOWN_PROVIDER,
            )

        if not QueueDomainService.can_enqueue(event, playlist):
            raise PlaylistValidationError(
                ErrorMessages.PLAYLIST_FULL.format(max_tracks=event.max_tracks_in_playlist),
                code=ErrorCodes.PLAYLIST_FULL,
            )

        pos = playlist.position_of(provider, track_id)
        if pos >= 0:
            logger.debug(LogTemplates.QUEUE_ADD_REJECTED_QUEUED, pos)
            eta = clock_hhmm(playlist.eta_for_position(pos))
            raise PlaylistValidationError(
                ErrorMessages.ALREADY_QUEUED.format(position=pos + 1, eta=eta),
                code=ErrorCodes.ALREADY_QUEUED,
            )

        if not event.allow_duplicate_tracks:
            ext = await self._event_repo.get_ext(event.event_id)
            played = ext.played_at(provider, track_id)
            if played is not None:
                logger.debug(LogTemplates.QUEUE_ADD_REJECTED_PLAYED, provider, track_id)
                played_at = wire_timestamp(played.started_at) if played.started_at else "?"
                raise PlaylistValidationError(
                    ErrorMessages.ALREADY_PLAYED.format(played_at=played_at),
                    code=ErrorCodes.ALREADY_PLAYED,
                )

        try:
            track = await self._provider.fetch_track_detail(
                event.event_id, TrackRef(provider, track_id)
            )
        except ProviderError as e:
            raise PlaylistValidationError(
                ErrorMessages.TRACK_DETAIL_FAILED.format(error=e.message),
                code=ErrorCodes.TRACK_DETAIL_FAILED,
            ) from e
        track.added_by = user or "?"

        if event.enable_track_ai and self._curator is not None:
            pos = await self._curated_position(self._curator, event, playlist, track)
        else:
            pos = QueueDomainService.contribution_insert_index(playlist.next_tracks)
        playlist.next_tracks.insert(pos, track)

        logger.info(
            LogTemplates.QUEUE_TRACK_ADDED,
            event.event_id,
            playlist.playlist_id,
            provider,
            track_id,
            pos,
        )
        self._activities.publish(
            ActivityType.TRACK_ADDED,
            event.event_id,
            {
                "userID": user,
                "trackID": track.key,
                "playlistID": playlist.playlist_id,
                "track": track.to_wire(),
            },
            ActivityMessages.TRACK_ADDED.format(user=user, name=track.name),
        )
        return track

    async def _curated_position(
        self, curator: TrackCurator, event: Event, playlist: Playlist, track: Track
    ) -> int:
        track.cluster_id = -1
        try:
            result = await curator.suggest_position(event, track, playlist.next_tracks)
        except Exception as e:
            logger.error(LogTemplates.QUEUE_AI_FAILED, e)
            return 0
        track.cluster_id = result.cluster_id
        return max(0, min(result.position, playlist.queue_length))

    # ── move / delete ──────────────────────────────────────────────────

    def move_track(
        self,
        event_id: str,
        playlist: Playlist,
        provider: str,
        track_id: str,
        new_pos: int,
        user: str,
    ) -> Track:
        """Move a queued track so it lands before the track now at ``new_pos``.

        Raises:
            PlaylistValidationError: The track is not queued (PLYLST-200).
        """
        current_pos = self._locate(playlist, provider, track_id)
        new_pos = QueueDomainService.clamp_move_target(new_pos, playlist.queue_length)

        track = playlist.next_tracks.pop(current_pos)
        playlist.next_tracks.insert(
            QueueDomainService.move_insert_index(current_pos, new_pos), track
        )

        logger.info(
            LogTemplates.QUEUE_TRACK_MOVED,
            event_id,
            playlist.playlist_id,
            provider,
            track_id,
            current_pos,
            new_pos,
        )
        self._activities.publish(
            ActivityType.TRACK_MOVED,
            event_id,
            {
                "userID": user,
                "trackID": track.key,
                "playlistID": playlist.playlist_id,
                "currentPos": current_pos,
                "newPos": new_pos,
                "track": track.to_wire(),
            },
            ActivityMessages.TRACK_MOVED.format(
                user=user, name=track.name, current_pos=current_pos, new_pos=new_pos
            ),
        )
        return track

    async def delete_track(
        self, event: Event, playlist: Playlist, provider: str, track_id: str, user: str
    ) -> Track:
        """Remove a queued track, then top the queue off again.

        Raises:
            PlaylistValidationError: The track is not queued (PLYLST-200).
        """
        current_pos = self._locate(playlist, provider, track_id)
        track = playlist.next_tracks.pop(current_pos)

        logger.info(
            LogTemplates.QUEUE_TRACK_DELETED,
            event.event_id,
            playlist.playlist_id,
            provider,
            track_id,
            current_pos,
        )
        self._activities.publish(
            ActivityType.TRACK_DELETED,
            event.event_id,
            {
                "userID": user,
                "trackID": track.key,
                "playlistID": playlist.playlist_id,
                "currentPos": current_pos,
                "track": track.to_wire(),
            },
            ActivityMessages.TRACK_DELETED.format(
                user=user, name=track.name, current_pos=current_pos
            ),
        )

        await self.autofill_if_necessary(event, playlist)
        return track

    def _locate(self, playlist: Playlist, provider: str, track_id: str) -> int:
        pos = playlist.position_of(provider, track_id)
        if pos < 0:
            raise PlaylistValidationError(
                ErrorMessages.TRACK_NOT_FOUND, code=ErrorCodes.TRACK_NOT_FOUND
            )
        return pos

    # ── feedback ───────────────────────────────────────────────────────

    def provide_feedback(
        self,
        event: Event,
        playlist: Playlist,
        provider: str,
        track_id: str,
        old: Feedback,
        new: Feedback,
        user: str,
    ) -> FeedbackOutcome:
        """Apply a like/hate transition to a queued track or the current track.

        Queued tracks may be auto-moved by their new score. For the current
        track the outcome may request a hate-skip, which the caller performs.
        """
        track = playlist.find(provider, track_id)
        is_queued = track is not None
        if track is None and playlist.current_track is not None:
            if playlist.current_track.matches(provider, track_id):
                track = playlist.current_track

        if track is None:
            logger.info(LogTemplates.QUEUE_FEEDBACK_IGNORED, provider, track_id)
            return FeedbackOutcome(state_changed=False)

        delta = QueueDomainService.feedback_delta(old, new, user, track.name)
        track.apply_feedback(delta)
        logger.debug(
            LogTemplates.QUEUE_FEEDBACK_APPLIED,
            old.value,
            new.value,
            provider,
            track_id,
            track.num_likes,
            track.num_hates,
        )
        self._activities.publish(
            ActivityType.TRACK_FEEDBACK,
            event.event_id,
            {
                "userID": user,
                "trackID": track.key,
                "playlistID": playlist.playlist_id,
                "feedback": {"old": old.value, "new": new.value},
                "track": track.to_wire(),
            },
            delta.message,
        )

        if event.enable_track_auto_move and is_queued:
            self._auto_move(event, playlist, track, delta.positive, delta.negative, user)

        skip_current = False
        if (
            event.enable_current_track_hate_skip
            and not is_queued
            and QueueDomainService.should_hate_skip_current(event, track)
        ):
            logger.info(
                LogTemplates.QUEUE_HARD_SKIP,
                event.event_id,
                event.skip_current_track_hate_percentage,
            )
            skip_current = True

        return FeedbackOutcome(state_changed=True, skip_current=skip_current)

    def _auto_move(
        self,
        event: Event,
        playlist: Playlist,
        track: Track,
        positive: bool,
        negative: bool,
        user: str,
    ) -> None:
        tracks = playlist.next_tracks
        current_pos = playlist.position_of(track.provider, track.id)
        if positive:
            target = QueueDomainService.auto_move_up_target(event, tracks, current_pos)
            template = ActivityMessages.AUTOMOVE_UP
        elif negative:
            target = QueueDomainService.auto_move_down_target(event, tracks, current_pos)
            template = ActivityMessages.AUTOMOVE_DOWN
        else:
            return

        if target == current_pos:
            return

        QueueDomainService.relocate(tracks, current_pos, target)
        logger.debug(LogTemplates.QUEUE_AUTOMOVE, track.provider, track.id, current_pos, target)
        self._activities.publish(
            ActivityType.TRACK_AUTOMOVE,
            event.event_id,
            {
                "userID": user,
                "trackID": track.key,
                "playlistID": playlist.playlist_id,
                "track": track.to_wire(),
                "currentPos": current_pos,
                "newPos": target,
                "feedbackIsPositive": positive,
                "feedbackIsNegative": negative,
                "currentScore": event.feedback_score(track),
            },
            template.format(
                system=SYSTEM_USER, current_pos=current_pos, new_pos=target, name=track.name
            ),
        )

    # ── autofill ───────────────────────────────────────────────────────

    async def autofill_if_necessary(
        self, event: Event, playlist: Playlist, ext: EventExt | None = None
    ) -> bool:
        """Top the queue off with filler tracks when it runs low.

        Args:
            event: The owning event.
            playlist: The playlist to fill.
            ext: The event extension if the caller already loaded it.

        Returns:
            True if at least one track was added.
        """
        slots = QueueDomainService.autofill_slots(event, playlist)
        if slots <= 0:
            return False

        if ext is None and (not event.allow_duplicate_tracks or event.demo_auto_fill_from_playlist):
            ext = await self._event_repo.get_ext(event.event_id)

        pool: Sequence[str]
        if event.demo_auto_fill_from_playlist and ext is not None and ext.background_playlist:
            pool = ext.background_playlist
        else:
            pool = EMERGENCY_TRACK_IDS
        source = "built-in pool" if pool is EMERGENCY_TRACK_IDS else "background playlist"
        logger.debug(LogTemplates.AUTOFILL_SOURCE, event.event_id, source, len(pool))

        added = 0
        for _ in range(slots):
            if playlist.queue_length >= event.max_tracks_in_playlist:
                break
            key = self._draw_candidate(event, playlist, ext, pool)
            if key is None:
                logger.debug(LogTemplates.AUTOFILL_EXHAUSTED, len(pool) * 2, event.event_id)
                break
            track = await self._provider.fetch_track_detail(event.event_id, TrackRef.parse(key))
            track.added_by = SYSTEM_USER
            playlist.next_tracks.append(track)
            added += 1

        if added == 0:
            return False

        logger.info(LogTemplates.AUTOFILL_ADDED, added, event.event_id)
        self._activities.publish(
            ActivityType.PLAYLIST_AUTOFILLED,
            event.event_id,
            {"numTracks": added},
            ActivityMessages.PLAYLIST_AUTOFILLED.format(
                system=SYSTEM_USER, count=added, plural="s" if added > 1 else ""
            ),
        )
        return True

    @staticmethod
    def _draw_candidate(
        event: Event, playlist: Playlist, ext: EventExt | None, pool: Sequence[str]
    ) -> str | None:
        for _ in range(len(pool) * 2):
            key = random.choice(pool)
            if playlist.contains_key(key) or playlist.is_current(key):
                continue
            if not event.allow_duplicate_tracks and ext is not None:
                ref = TrackRef.parse(key)
                if ext.played_at(ref.provider, ref.track_id) is not None:
                    continue
            return key
        return None
