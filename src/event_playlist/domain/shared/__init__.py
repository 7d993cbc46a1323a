"""Shared kernel: types, errors, messages and constants used by every layer."""

from event_playlist.domain.shared.exceptions import (
    CoordinationError,
    DomainError,
    EntityNotFoundError,
    ErrorKind,
    EventValidationError,
    PlaylistValidationError,
    ProviderError,
    ProviderFailure,
    StoreUnavailableError,
)

__all__ = [
    "CoordinationError",
    "DomainError",
    "EntityNotFoundError",
    "ErrorKind",
    "EventValidationError",
    "PlaylistValidationError",
    "ProviderError",
    "ProviderFailure",
    "StoreUnavailableError",
]
