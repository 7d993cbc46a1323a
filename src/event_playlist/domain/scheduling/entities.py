"""Entities for the distributed sweep."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from event_playlist.domain.shared.constants import LOCK_KEY
from event_playlist.domain.shared.datetime_utils import millis_between, utcnow, wire_timestamp
from event_playlist.domain.shared.types import UtcDatetimeField


class LockRecord(BaseModel):
    """Global token recording when the last sweep started.

    ``version`` is the store's opaque token for the record as read; it is
    never serialised.
    """

    model_config = ConfigDict(populate_by_name=True)

    key: str = Field(default=LOCK_KEY, exclude=True)
    last_check: UtcDatetimeField = Field(default_factory=utcnow, alias="lastCheck")
    version: int | None = Field(default=None, exclude=True)

    def elapsed_ms(self, now: datetime) -> int:
        return millis_between(self.last_check, now)

    def is_due(self, now: datetime, interval_ms: int) -> bool:
        """Whether at least one poll interval has passed since the last sweep."""
        return self.elapsed_ms(now) >= interval_ms

    def to_wire(self) -> dict[str, Any]:
        return {"lastCheck": wire_timestamp(self.last_check)}
