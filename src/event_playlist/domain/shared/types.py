"""Reusable Pydantic Annotated types for domain-wide validation.

Every constrained type used across bounded contexts is defined here once,
so models can simply annotate their fields::

    from event_playlist.domain.shared.types import EventIdStr, NonNegativeInt

    class MyModel(BaseModel):
        event_id: EventIdStr
        num_likes: NonNegativeInt
"""

from __future__ import annotations

from datetime import datetime
from typing import Annotated

from pydantic import BeforeValidator, Field

from event_playlist.domain.shared.datetime_utils import as_utc

# ── Numeric constraints ─────────────────────────────────────────────

NonNegativeInt = Annotated[int, Field(ge=0)]
"""Integer >= 0."""

PositiveInt = Annotated[int, Field(gt=0)]
"""Integer > 0."""

Percentage = Annotated[int, Field(ge=0, le=100)]
"""Whole percentage in [0, 100]."""

DurationMs = Annotated[int, Field(ge=0)]
"""Track duration or progress in milliseconds."""


# ── String constraints ──────────────────────────────────────────────

NonEmptyStr = Annotated[str, Field(min_length=1)]
"""String with at least one character."""

EventIdStr = Annotated[str, Field(min_length=1, max_length=64)]
"""Event identifier as entered by the owner (normalised to lower case)."""

ProviderStr = Annotated[str, Field(min_length=1, max_length=32)]
"""Provider type, e.g. ``spotify``."""


# ── Datetime constraints ────────────────────────────────────────────

def _ensure_utc(v: object) -> object:
    if isinstance(v, datetime | str):
        return as_utc(v)
    return v


UtcDatetimeField = Annotated[datetime, BeforeValidator(_ensure_utc)]
"""Timezone-aware datetime, normalised to UTC on input (ISO strings accepted)."""
