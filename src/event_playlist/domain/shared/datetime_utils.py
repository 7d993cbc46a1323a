"""UTC time helpers shared by the models, the store and the wire format.

Every datetime the service keeps is timezone-aware UTC. On the wire,
timestamps are ISO 8601 with millisecond precision and a trailing ``Z``;
ETA messages show the server's local wall-clock ``HH:MM``.
"""

from __future__ import annotations

from datetime import UTC, datetime

from event_playlist.domain.shared.messages import ErrorMessages


def utcnow() -> datetime:
    return datetime.now(UTC)


def as_utc(value: datetime | str) -> datetime:
    """Parse or normalise ``value`` to an aware UTC datetime.

    Strings may end in ``Z``. Naive datetimes are rejected, since replicas
    in different zones would read them differently.
    """
    if isinstance(value, str):
        if value.endswith("Z"):
            value = value[:-1] + "+00:00"
        value = datetime.fromisoformat(value)
    if value.tzinfo is None:
        raise ValueError(ErrorMessages.TIMEZONE_REQUIRED_UTC_DATETIME)
    return value.astimezone(UTC)


def wire_timestamp(value: datetime) -> str:
    """``2024-05-17T20:15:03.123Z``"""
    return as_utc(value).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def clock_hhmm(value: datetime) -> str:
    return as_utc(value).astimezone().strftime("%H:%M")


def millis_between(start: datetime, end: datetime) -> int:
    """Whole milliseconds elapsed from ``start`` to ``end`` (may be negative)."""
    return int((end - start).total_seconds() * 1000)
