"""
Domain Layer

Contains pure business logic organized by bounded contexts:
- shared/: Cross-cutting types, errors, messages and activities
- event/: Event configuration and provider accounts
- playlist/: Tracks, queue rules and playback rules
- scheduling/: The sweep lock record
"""

from event_playlist.domain.shared.exceptions import DomainError, ErrorKind

__all__ = [
    "DomainError",
    "ErrorKind",
]
