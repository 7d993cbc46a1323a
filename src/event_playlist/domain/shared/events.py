"""Activity records emitted by the orchestration core.

Activities are fire-and-forget notifications about what happened to an
event (a track was added, playback paused, ...). They are delivered by an
:class:`~event_playlist.application.interfaces.activity_publisher.ActivityPublisher`.
"""

from __future__ import annotations

from enum import StrEnum
from typing import Any
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field

from event_playlist.domain.shared.datetime_utils import utcnow
from event_playlist.domain.shared.types import NonEmptyStr, UtcDatetimeField


class ActivityType(StrEnum):
    TRACK_ADDED = "TRACK_ADDED"
    TRACK_MOVED = "TRACK_MOVED"
    TRACK_DELETED = "TRACK_DELETED"
    TRACK_FEEDBACK = "TRACK_FEEDBACK"
    TRACK_AUTOMOVE = "TRACK_AUTOMOVE"
    TRACK_PLAY = "TRACK_PLAY"
    TRACK_PAUSE = "TRACK_PAUSE"
    TRACK_SKIP = "TRACK_SKIP"
    TRACK_SKIP_DUE2HATE = "TRACK_SKIP_DUE2HATE"
    PLAYLIST_AUTOFILLED = "PLAYLIST_AUTOFILLED"
    EVENT_CREATE = "EVENT_CREATE"
    EVENT_UPDATE = "EVENT_UPDATE"
    EVENT_DELETE = "EVENT_DELETE"
    PROVIDER_ADD = "PROVIDER_ADD"
    PROVIDER_DEL = "PROVIDER_DEL"


class Activity(BaseModel):
    """One published activity record."""

    model_config = ConfigDict(frozen=True)

    activity_id: NonEmptyStr = Field(default_factory=lambda: str(uuid4()))
    occurred_at: UtcDatetimeField = Field(default_factory=utcnow)
    activity: ActivityType
    event_id: str
    payload: dict[str, Any] = Field(default_factory=dict)
    message: str = ""

    def to_wire(self) -> dict[str, Any]:
        return {
            "activity": self.activity.value,
            "eventID": self.event_id,
            "timestamp": self.occurred_at.isoformat(),
            "data": self.payload,
            "display": self.message,
        }
