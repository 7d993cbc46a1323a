"""
Scheduling Bounded Context

The lock record that elects one sweeper per poll interval.
"""

from event_playlist.domain.scheduling.entities import LockRecord

__all__ = ["LockRecord"]
