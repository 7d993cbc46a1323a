"""Core domain entities for the event bounded context."""

from __future__ import annotations

from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from event_playlist.domain.playlist.entities import Track
from event_playlist.domain.shared.types import (
    NonNegativeInt,
    Percentage,
    PositiveInt,
    UtcDatetimeField,
)


class ProviderAccount(BaseModel):
    """A playback account registered with an event (one of possibly several)."""

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    id: int | str = ""
    type: str = "spotify"
    user: str = ""
    display: str = ""
    play_failures: NonNegativeInt = 0

    def belongs_to(self, owner: str) -> bool:
        if not owner:
            return False
        return self.user == owner or owner in self.display


class Event(BaseModel):
    """Per-event configuration, capacity limits, feature toggles and provider accounts."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="allow")

    event_id: str = Field(
        default="",
        alias="eventID",
        validation_alias=AliasChoices("eventID", "eventId", "event_id"),
    )
    url: str = ""
    name: str = ""
    owner: str = ""

    # Capacity
    max_users: PositiveInt = 100
    max_duration_in_minutes: PositiveInt = 2880
    max_tracks_in_playlist: PositiveInt = 50
    max_contributions_per_user: PositiveInt = 10
    event_starts_at: UtcDatetimeField | None = None
    event_ends_at: UtcDatetimeField | None = None

    # Queue policy
    allow_duplicate_tracks: bool = False
    progress_percentage_required_for_effective_playlist: Percentage = 75
    begin_playback_at_event_start: bool = False
    everybody_is_curator: bool = False
    pause_on_play_error: bool = True

    # Feedback features
    enable_track_liking: bool = True
    enable_track_hating: bool = True
    enable_track_auto_move: bool = True
    enable_track_hate_skip: bool = True
    enable_current_track_hate_skip: bool = True
    enable_track_ai: bool = Field(
        default=False,
        alias="enableTrackAI",
        validation_alias=AliasChoices("enableTrackAI", "enableTrackAi", "enable_track_ai"),
    )
    emoji_track_like: str = "\U0001f970"
    emoji_track_hate: str = "\U0001f92e"

    # Demo / autofill
    demo_autoskip: NonNegativeInt = 0
    demo_no_actual_playing: bool = False
    demo_auto_fill_empty_playlist: bool = True
    demo_auto_fill_from_playlist: str = ""
    demo_auto_fill_num_tracks: NonNegativeInt = 5

    # Providers
    provider_types: list[str] = Field(default_factory=list)
    providers: list[ProviderAccount] = Field(default_factory=list)

    # Playlists
    active_playlist: NonNegativeInt = 0
    playlists: list[NonNegativeInt] = Field(default_factory=lambda: [0])

    # Weights and thresholds
    fit_track_weight_bpm: float = Field(
        default=0.2,
        alias="fitTrackWeightBPM",
        validation_alias=AliasChoices("fitTrackWeightBPM", "fit_track_weight_bpm"),
    )
    fit_track_weight_year: float = 0.3
    fit_track_weight_genre: float = 0.5
    auto_move_weight_like: float = 1
    auto_move_weight_hate: float = -1
    skip_current_track_quorum: NonNegativeInt = 3
    skip_current_track_hate_percentage: Percentage = 66

    def rebuild_provider_types(self) -> None:
        """Recompute the unique provider types, preserving registration order."""
        self.provider_types = list(dict.fromkeys(p.type for p in self.providers))

    def find_provider(self, provider_id: int | str) -> ProviderAccount | None:
        for account in self.providers:
            if str(account.id) == str(provider_id):
                return account
        return None

    def feedback_score(self, track: Track) -> float:
        return (
            self.auto_move_weight_like * track.num_likes
            + self.auto_move_weight_hate * track.num_hates
        )

    def to_wire(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)


class EventExt(BaseModel):
    """Large, rarely broadcast companion of an event."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    effective_playlist: list[Track] = Field(default_factory=list)
    background_playlist: list[str] = Field(default_factory=list)
    background_playlist_id: str = Field(
        default="",
        alias="backgroundPlaylistID",
        validation_alias=AliasChoices("backgroundPlaylistID", "background_playlist_id"),
    )
    event_image: str = ""

    def played_at(self, provider: str, track_id: str) -> Track | None:
        for track in self.effective_playlist:
            if track.matches(provider, track_id):
                return track
        return None

    def to_wire(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)
