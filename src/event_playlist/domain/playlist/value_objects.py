"""Immutable value objects for the playlist bounded context."""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum

from event_playlist.domain.shared.messages import ErrorMessages


@dataclass(frozen=True)
class TrackRef:
    """A ``provider:id`` pair identifying a track at a playback provider."""

    provider: str
    track_id: str

    def __post_init__(self) -> None:
        if not self.provider or not self.track_id:
            raise ValueError(ErrorMessages.TRACK_NOT_FOUND)

    def __str__(self) -> str:
        return f"{self.provider}:{self.track_id}"

    @classmethod
    def parse(cls, value: str) -> TrackRef:
        """Split ``provider:id``; only the first colon separates the parts."""
        provider, _, track_id = value.partition(":")
        return cls(provider, track_id)


class Feedback(StrEnum):
    """A single user's opinion on a track."""

    NONE = ""
    LIKE = "L"
    HATE = "H"

    @classmethod
    def coerce(cls, value: str | None) -> Feedback:
        return cls(value or "")


@dataclass(frozen=True)
class FeedbackDelta:
    """Counter changes caused by one ``old -> new`` feedback transition."""

    likes: int = 0
    hates: int = 0
    positive: bool = False
    negative: bool = False
    message: str = ""
