"""AI infrastructure.

Only the OpenAI curator is implemented; it is optional and the queue
falls back to top-of-queue insertion without it.
"""

from event_playlist.infrastructure.ai.openai_curator import OpenAITrackCurator

__all__ = ["OpenAITrackCurator"]
