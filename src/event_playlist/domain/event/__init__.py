"""
Event Bounded Context

An event is a party or session with its own provider accounts, a
background playlist for autofill and a set of playlists.
"""

from event_playlist.domain.event.entities import Event, EventExt, ProviderAccount
from event_playlist.domain.event.factories import EventDefaults, create_empty_event

__all__ = [
    "Event",
    "EventExt",
    "ProviderAccount",
    "EventDefaults",
    "create_empty_event",
]
