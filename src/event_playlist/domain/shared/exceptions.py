"""Base exception classes for domain-level errors.

Every error raised by the orchestration core belongs to exactly one
:class:`ErrorKind`. The HTTP layer matches on the kind, never on the class.
"""

from __future__ import annotations

from enum import Enum
from typing import Any


class ErrorKind(Enum):
    """Closed taxonomy of failures."""

    VALIDATION = "validation"
    PROVIDER = "provider"
    COORDINATION = "coordination"
    FATAL = "fatal"


class DomainError(Exception):
    """Base exception for all domain-level errors."""

    kind: ErrorKind = ErrorKind.VALIDATION

    def __init__(self, message: str, code: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.code = code or self.__class__.__name__

    def to_body(self) -> dict[str, Any]:
        """Wire representation used for non-2xx responses."""
        return {"code": self.code, "msg": self.message}


class PlaylistValidationError(DomainError):
    """Raised when a queue operation is rejected (capacity, duplicate, not found)."""

    kind = ErrorKind.VALIDATION


class EntityNotFoundError(DomainError):
    """Raised when a requested entity does not exist."""

    kind = ErrorKind.VALIDATION

    def __init__(
        self,
        entity_type: str,
        identifier: str | int,
        message: str | None = None,
        code: str = "ENTITY_NOT_FOUND",
    ) -> None:
        msg = message or f"{entity_type} with id '{identifier}' not found"
        super().__init__(msg, code=code)
        self.entity_type = entity_type
        self.identifier = identifier


class EventValidationError(DomainError):
    """Raised when an event definition fails validation.

    Carries every individual finding as ``{code, msg, att}``.
    """

    kind = ErrorKind.VALIDATION

    def __init__(self, errors: list[dict[str, str]]) -> None:
        first = errors[0] if errors else {"code": "EVENT-000", "msg": "Invalid event"}
        super().__init__(first["msg"], code=first["code"])
        self.errors = errors

    def to_body(self) -> dict[str, Any]:
        body = super().to_body()
        body["errors"] = self.errors
        return body


class ProviderFailure(Enum):
    """Distinguishable reasons a playback provider call failed."""

    DEVICE_NOT_FOUND = "device_not_found"
    FORBIDDEN = "forbidden"
    NO_ACCOUNTS = "no_accounts"
    TIMEOUT = "timeout"
    GENERIC = "generic"


class ProviderError(DomainError):
    """Raised when the external playback provider rejects or fails a call."""

    kind = ErrorKind.PROVIDER

    def __init__(
        self,
        message: str,
        code: str,
        failure: ProviderFailure = ProviderFailure.GENERIC,
        remediation: str | None = None,
        short: str | None = None,
    ) -> None:
        super().__init__(message, code=code)
        self.failure = failure
        self.remediation = remediation
        self.short = short or message

    def to_body(self) -> dict[str, Any]:
        body = super().to_body()
        if self.remediation:
            body["remediation"] = self.remediation
        return body


class CoordinationError(DomainError):
    """Raised when an optimistic compare-and-swap loses the race.

    Always benign: the caller backs off silently.
    """

    kind = ErrorKind.COORDINATION

    def __init__(self, key: str, message: str | None = None) -> None:
        msg = message or f"Concurrent modification detected for key '{key}'"
        super().__init__(msg, code="CONCURRENCY_ERROR")
        self.key = key


class StoreUnavailableError(DomainError):
    """Raised when the persistent store cannot be reached."""

    kind = ErrorKind.FATAL

    def __init__(self, message: str, cause: BaseException | None = None) -> None:
        super().__init__(message, code="STORE_UNAVAILABLE")
        self.cause = cause
