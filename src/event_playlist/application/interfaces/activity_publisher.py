"""
Activity Publisher Interface

Port interface for emitting activity records to the broadcast service.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any

from event_playlist.domain.shared.events import Activity, ActivityType


class ActivityPublisher(ABC):
    """Abstract fire-and-forget activity sink.

    ``publish`` returns immediately. Delivery happens in a detached task and
    failures are logged by the implementation, never raised to the core.
    """

    def publish(
        self,
        activity: ActivityType,
        event_id: str,
        payload: dict[str, Any],
        message: str,
    ) -> None:
        """Build an :class:`Activity` and hand it to :meth:`emit`.

        Args:
            activity: The activity type.
            event_id: The event the activity belongs to.
            payload: Structured data (track, user, positions, ...).
            message: Human-readable text for display.
        """
        self.emit(
            Activity(activity=activity, event_id=event_id, payload=payload, message=message)
        )

    @abstractmethod
    def emit(self, activity: Activity) -> None:
        """Deliver one activity without blocking the caller."""
        ...
