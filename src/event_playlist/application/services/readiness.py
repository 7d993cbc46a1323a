"""Process-wide readiness state reported by the health endpoints."""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import datetime
from typing import Any

from event_playlist.domain.shared.datetime_utils import wire_timestamp

logger = logging.getLogger(__name__)


class ReadinessState:
    """Store connectivity, last error and the fatal-exit request of this replica.

    A fatal store failure does not kill the process on the spot: it records
    the exit code and calls the registered handler, which stops the server
    so ``main`` can return that code to the orchestrator.
    """

    def __init__(self) -> None:
        self.datagrid_client = False
        self.last_error = ""
        self.last_global_event_check: datetime | None = None
        self.exit_code: int | None = None
        self._fatal_handler: Callable[[int], None] | None = None

    @property
    def is_ready(self) -> bool:
        return self.datagrid_client and self.exit_code is None

    def set_fatal_handler(self, handler: Callable[[int], None]) -> None:
        self._fatal_handler = handler

    def mark_connected(self) -> None:
        self.datagrid_client = True

    def mark_failed(self, error: BaseException | str) -> None:
        self.datagrid_client = False
        self.last_error = repr(error) if isinstance(error, BaseException) else error

    def fatal(self, exit_code: int, error: BaseException | str) -> None:
        """Record an unrecoverable failure and request termination.

        The first code wins; later failures while shutting down only update
        ``last_error``.
        """
        self.mark_failed(error)
        if self.exit_code is not None:
            return
        self.exit_code = exit_code
        if self._fatal_handler is not None:
            self._fatal_handler(exit_code)

    def to_wire(self) -> dict[str, Any]:
        body: dict[str, Any] = {
            "datagridClient": self.datagrid_client,
            "lastError": self.last_error,
        }
        if self.last_global_event_check is not None:
            body["lastGlobalEventCheck"] = wire_timestamp(self.last_global_event_check)
        return body
