"""OpenAI-based track curator placing new tracks where they fit the queue best."""

from __future__ import annotations

import asyncio
import json
import logging
import random
from typing import TYPE_CHECKING, Any

import httpx
from openai import (
    APIConnectionError,
    APIStatusError,
    APITimeoutError,
    AsyncOpenAI,
    RateLimitError,
)
from pydantic import BaseModel, Field

from event_playlist.application.interfaces.track_curator import CurationResult, TrackCurator
from event_playlist.config.settings import AISettings
from event_playlist.domain.shared.messages import ErrorMessages, LogTemplates

if TYPE_CHECKING:
    from event_playlist.domain.event.entities import Event
    from event_playlist.domain.playlist.entities import Track

logger = logging.getLogger(__name__)

# Track attributes the model gets to see; the rest is noise.
TRACK_FEATURES = ("id", "name", "artist", "year", "genre", "bpm", "danceability", "energy")

TRANSIENT_ERRORS = (
    APITimeoutError,
    APIConnectionError,
    RateLimitError,
    APIStatusError,
    httpx.TimeoutException,
    httpx.ConnectError,
)

SYSTEM_PROMPT = (
    "You are a DJ ordering a live party queue. Respond with STRICT JSON (no markdown). "
    'Schema: {{"position": integer, "cluster_id": integer}}. '
    "position is the 0-based index in the queue where the new track should be "
    "inserted, between 0 and the queue length. Place it next to tracks with a "
    "similar tempo, era and genre, weighing bpm {bpm}, year {year}, genre {genre}. "
    "cluster_id groups similar tracks; use -1 if unsure."
)


class CurationResponse(BaseModel):
    """JSON object the model answers with."""

    position: int = Field(default=0, ge=0)
    cluster_id: int = -1


def _backoff_seconds(attempt: int) -> float:
    return 0.35 * (2 ** (attempt - 1)) + random.random() * 0.2


def _features(track: Track) -> dict[str, Any]:
    data = track.model_dump(mode="json")
    return {k: data[k] for k in TRACK_FEATURES if k in data}


class OpenAITrackCurator(TrackCurator):
    """Asks a chat model for the insertion index of a new track.

    Transient API failures are retried with jittered backoff; anything the
    model answers that cannot be parsed is raised at once. The queue engine
    falls back to index 0 on any error.
    """

    def __init__(self, settings: AISettings | None = None) -> None:
        self._settings = settings or AISettings()
        self._client: AsyncOpenAI | None = None

    def is_available(self) -> bool:
        return bool(self._settings.api_key.get_secret_value())

    def _ensure_client(self) -> AsyncOpenAI:
        if self._client is None:
            key = self._settings.api_key.get_secret_value()
            if not key:
                raise RuntimeError(ErrorMessages.OPENAI_API_KEY_NOT_SET)
            self._client = AsyncOpenAI(
                api_key=key, max_retries=0, timeout=self._settings.timeout_s
            )
            logger.info(
                LogTemplates.AI_CLIENT_INITIALIZED, self._settings.model, self._settings.timeout_s
            )
        return self._client

    async def suggest_position(
        self, event: Event, new_track: Track, current_list: list[Track]
    ) -> CurationResult:
        messages = [
            {
                "role": "system",
                "content": SYSTEM_PROMPT.format(
                    bpm=event.fit_track_weight_bpm,
                    year=event.fit_track_weight_year,
                    genre=event.fit_track_weight_genre,
                ),
            },
            {
                "role": "user",
                "content": json.dumps(
                    {
                        "newTrack": _features(new_track),
                        "currentList": [_features(t) for t in current_list],
                    }
                ),
            },
        ]
        response = CurationResponse.model_validate(await self._complete_json(messages))
        position = min(response.position, len(current_list))

        logger.debug(LogTemplates.AI_POSITION_SUGGESTED, position, new_track.key, len(current_list))
        return CurationResult(position=position, cluster_id=response.cluster_id)

    async def _complete_json(self, messages: list[dict[str, Any]]) -> dict[str, Any]:
        attempts = self._settings.max_attempts
        for attempt in range(1, attempts + 1):
            try:
                return await self._request_completion(messages)
            except ValueError as e:
                # json.JSONDecodeError included; a second try would not help.
                logger.error(LogTemplates.AI_RESPONSE_PARSE_ERROR, e)
                raise
            except TRANSIENT_ERRORS as e:
                logger.warning(
                    LogTemplates.AI_API_ERROR_RETRY, attempt, attempts, e.__class__.__name__
                )
                if attempt == attempts:
                    raise
                await asyncio.sleep(_backoff_seconds(attempt))
        raise AssertionError("unreachable")

    async def _request_completion(self, messages: list[dict[str, Any]]) -> dict[str, Any]:
        completion = await self._ensure_client().chat.completions.create(
            model=self._settings.model,
            messages=messages,  # type: ignore[arg-type]
            max_tokens=self._settings.max_tokens,
            temperature=self._settings.temperature,
            response_format={"type": "json_object"},
        )
        content = completion.choices[0].message.content
        if not content:
            raise ValueError("empty completion")
        return json.loads(content)

    async def close(self) -> None:
        if self._client is not None:
            await self._client.close()
            self._client = None
