"""
Playlist Domain Services

Domain services containing the queue and playback rules that don't
naturally fit within a single entity or value object. Everything here is
synchronous and free of I/O; the application layer wires it to the store,
the provider and the activity publisher.
"""

from __future__ import annotations

from datetime import datetime

from event_playlist.domain.event.entities import Event
from event_playlist.domain.playlist.entities import Playlist, Track
from event_playlist.domain.playlist.value_objects import Feedback, FeedbackDelta
from event_playlist.domain.shared.constants import SYSTEM_USER, PlaybackLimits
from event_playlist.domain.shared.messages import ActivityMessages


class QueueDomainService:
    """Domain service for queue ordering and feedback rules."""

    @classmethod
    def can_enqueue(cls, event: Event, playlist: Playlist) -> bool:
        """Check if one more track fits into the queue.

        Args:
            event: The owning event.
            playlist: The playlist to check.

        Returns:
            True if the queue is below ``maxTracksInPlaylist``.
        """
        return playlist.queue_length < event.max_tracks_in_playlist

    @classmethod
    def contribution_insert_index(cls, tracks: list[Track]) -> int:
        """Index at which a human contribution is inserted.

        Walking from the tail, the new track goes right behind the last track
        that was not added by autofill, so fresh contributions never wait
        behind filler.

        Args:
            tracks: The queued tracks.

        Returns:
            The insertion index (0 if every queued track is filler).
        """
        pos = len(tracks) - 1
        while pos >= 0 and tracks[pos].added_by == SYSTEM_USER:
            pos -= 1
        return pos + 1

    @classmethod
    def clamp_move_target(cls, new_pos: int, length: int) -> int:
        return max(0, min(new_pos, length))

    @classmethod
    def move_insert_index(cls, current_pos: int, new_pos: int) -> int:
        """Index to re-insert at after removing the track at ``current_pos``.

        ``new_pos`` has "insert before" semantics relative to the queue as it
        was before the removal, hence the decrement when moving forward.
        """
        return new_pos - 1 if current_pos < new_pos else new_pos

    @classmethod
    def feedback_delta(
        cls, old: Feedback, new: Feedback, user: str, name: str
    ) -> FeedbackDelta:
        """Counter changes for one ``old -> new`` feedback transition.

        Args:
            old: The user's previous feedback.
            new: The user's new feedback.
            user: Who gave the feedback (for the activity text).
            name: Track name (for the activity text).

        Returns:
            The delta to apply, flagged positive and/or negative for auto-move.
        """
        likes = hates = 0
        positive = negative = False
        message = ""

        if old == Feedback.HATE and new == Feedback.LIKE:
            positive = True
            hates -= 1
            message = ActivityMessages.FEEDBACK_HATE_TO_LIKE
        if old == Feedback.LIKE and new == Feedback.HATE:
            negative = True
            likes -= 1
            message = ActivityMessages.FEEDBACK_LIKE_TO_HATE

        if old == Feedback.LIKE and new == Feedback.NONE:
            negative = True
            likes -= 1
            message = ActivityMessages.FEEDBACK_UNLIKE
        elif new == Feedback.LIKE:
            positive = True
            likes += 1
            message = ActivityMessages.FEEDBACK_LIKE

        if old == Feedback.HATE and new == Feedback.NONE:
            positive = True
            hates -= 1
            message = ActivityMessages.FEEDBACK_UNHATE
        elif new == Feedback.HATE:
            negative = True
            hates += 1
            message = ActivityMessages.FEEDBACK_HATE

        return FeedbackDelta(
            likes=likes,
            hates=hates,
            positive=positive,
            negative=negative,
            message=message.format(user=user, name=name) if message else "",
        )

    @classmethod
    def auto_move_up_target(cls, event: Event, tracks: list[Track], current_pos: int) -> int:
        """Final index of a track moved up past every lower-scored predecessor."""
        score = event.feedback_score(tracks[current_pos])
        new_pos = current_pos - 1
        while new_pos >= 0 and score > event.feedback_score(tracks[new_pos]):
            new_pos -= 1
        return new_pos + 1

    @classmethod
    def auto_move_down_target(cls, event: Event, tracks: list[Track], current_pos: int) -> int:
        """Final index of a track moved down past every higher-scored successor."""
        score = event.feedback_score(tracks[current_pos])
        new_pos = current_pos + 1
        while new_pos < len(tracks) and score < event.feedback_score(tracks[new_pos]):
            new_pos += 1
        return new_pos - 1

    @classmethod
    def relocate(cls, tracks: list[Track], current_pos: int, target: int) -> None:
        """Move the track at ``current_pos`` so it ends up at index ``target``."""
        track = tracks.pop(current_pos)
        tracks.insert(target, track)

    @classmethod
    def should_hate_skip_current(cls, event: Event, track: Track) -> bool:
        """Quorum and hate ratio check for skipping the current track.

        Args:
            event: The owning event.
            track: The current track.

        Returns:
            True if enough votes were cast and enough of them are hates.
        """
        votes = track.num_likes + track.num_hates
        if votes == 0 or votes < event.skip_current_track_quorum:
            return False
        return track.num_hates / votes >= event.skip_current_track_hate_percentage / 100

    @classmethod
    def is_hated(cls, track: Track | None) -> bool:
        return track is not None and track.num_hates > track.num_likes

    @classmethod
    def autofill_slots(cls, event: Event, playlist: Playlist) -> int:
        """Number of tracks autofill should try to add (0 when disabled)."""
        if not event.demo_auto_fill_empty_playlist:
            return 0
        if event.demo_auto_fill_num_tracks == 0:
            return event.max_tracks_in_playlist if playlist.queue_length == 0 else 0
        needed = event.demo_auto_fill_num_tracks - playlist.queue_length
        return min(needed, event.max_tracks_in_playlist)


class PlaybackDomainService:
    """Domain service for playback timing rules."""

    @classmethod
    def is_track_playing(
        cls, event: Event, playlist: Playlist, now: datetime | None = None
    ) -> bool:
        """Whether the current track is audibly playing right now.

        Refreshes the progress of the current track as a side effect.

        Args:
            event: The owning event (demo autoskip applies).
            playlist: The playlist to inspect.
            now: Reference time, defaults to the current time.

        Returns:
            True while ``0 < progress < duration - slack`` and, with demo
            autoskip, before the autoskip mark.
        """
        if not playlist.is_playing or playlist.current_track is None:
            return False
        playlist.update_current_track_progress(now)
        track = playlist.current_track
        progress = track.progress_ms
        slack = PlaybackLimits.END_OF_TRACK_SLACK_MS
        if progress <= 0:
            return False
        if progress >= track.duration_ms - slack:
            return False
        if event.demo_autoskip > 0 and progress >= event.demo_autoskip * 1000 - slack:
            return False
        return True

    @classmethod
    def timer_timeout_ms(cls, event: Event, track: Track) -> tuple[int, bool]:
        """Milliseconds until the track-end check should fire.

        Returns:
            ``(timeout, adjusted)`` where ``adjusted`` tells whether an
            implausible value was replaced by the fallback delay.
        """
        timeout = track.remaining_ms
        if event.demo_autoskip > 0 and timeout > event.demo_autoskip * 1000:
            timeout = event.demo_autoskip * 1000
        if timeout < 0 or timeout > PlaybackLimits.MAX_TIMEOUT_MS:
            return PlaybackLimits.FALLBACK_TIMEOUT_MS, True
        return timeout, False

    @classmethod
    def qualifies_for_history(cls, event: Event, track: Track) -> bool:
        """Whether a skipped track played long enough to count as played."""
        return (
            track.progress_percentage
            >= event.progress_percentage_required_for_effective_playlist
        )
