"""HTTP client for the playback provider service."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

import httpx
from pydantic import ValidationError

from event_playlist.application.interfaces.track_provider import TrackProvider
from event_playlist.domain.playlist.entities import Track
from event_playlist.domain.shared.constants import ErrorCodes
from event_playlist.domain.shared.exceptions import ProviderError, ProviderFailure
from event_playlist.domain.shared.messages import LogTemplates

if TYPE_CHECKING:
    from event_playlist.config.settings import ProviderSettings
    from event_playlist.domain.event.entities import ProviderAccount
    from event_playlist.domain.playlist.value_objects import TrackRef

logger = logging.getLogger(__name__)


def classify_failure(status_code: int | None, body: str) -> ProviderFailure:
    """Tell device-not-found and forbidden errors apart from everything else."""
    if status_code == 403 or "Forbidden" in body:
        return ProviderFailure.FORBIDDEN
    if status_code == 404 or "Not Found" in body or ErrorCodes.NO_DEVICE in body:
        return ProviderFailure.DEVICE_NOT_FOUND
    return ProviderFailure.GENERIC


class HttpTrackProvider(TrackProvider):
    """Talks to the provider service over REST.

    Routes, relative to ``settings.url``:

    - ``events/{event}/providers/{provider}/tracks/{track}``
    - ``events/{event}/providers/{provider}/playlist/{playlist}``
    - ``events/{event}/providers/{type}/{account}/play/{track}?pos={ms}``
    - ``events/{event}/providers/{type}/{account}/pause``
    """

    def __init__(self, settings: ProviderSettings, client: httpx.AsyncClient | None = None) -> None:
        self._settings = settings
        self._client = client

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is not None:
            return self._client

        base_url = self._settings.url if self._settings.url.endswith("/") else f"{self._settings.url}/"
        self._client = httpx.AsyncClient(base_url=base_url, timeout=self._settings.timeout_s)
        logger.info(LogTemplates.PROVIDER_CLIENT_INITIALIZED, base_url, self._settings.timeout_s)
        return self._client

    async def close(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def _get(self, path: str, params: dict[str, Any] | None = None) -> Any:
        client = self._get_client()
        try:
            response = await client.get(path, params=params)
        except httpx.TimeoutException as e:
            raise ProviderError(
                f"Provider call {path} timed out",
                code=ErrorCodes.PROVIDER_GENERIC,
                failure=ProviderFailure.TIMEOUT,
            ) from e
        except httpx.HTTPError as e:
            raise ProviderError(
                f"Provider call {path} failed: {e}",
                code=ErrorCodes.PROVIDER_GENERIC,
            ) from e

        if response.is_success:
            return response.json() if response.content else None
        raise self._error_from_response(path, response)

    @staticmethod
    def _error_from_response(path: str, response: httpx.Response) -> ProviderError:
        body = response.text
        code = ErrorCodes.PROVIDER_GENERIC
        message = f"Provider call {path} failed with status {response.status_code}: {body}"
        try:
            detail = response.json()
        except ValueError:
            detail = None
        if isinstance(detail, dict) and "code" in detail:
            code = str(detail["code"])
            message = str(detail.get("msg", message))
        return ProviderError(
            message,
            code=code,
            failure=classify_failure(response.status_code, body),
        )

    async def fetch_track_detail(self, event_id: str, ref: TrackRef) -> Track:
        data = await self._get(f"events/{event_id}/providers/{ref.provider}/tracks/{ref.track_id}")
        if not isinstance(data, dict):
            raise ProviderError(
                f"Unexpected track detail for {ref}", code=ErrorCodes.PROVIDER_GENERIC
            )
        data.setdefault("id", ref.track_id)
        data.setdefault("provider", ref.provider)
        try:
            return Track.model_validate(data)
        except ValidationError as e:
            raise ProviderError(
                f"Invalid track detail for {ref}: {e}", code=ErrorCodes.PROVIDER_GENERIC
            ) from e

    async def fetch_playlist_track_ids(
        self, event_id: str, provider: str, playlist_id: str
    ) -> list[str]:
        data = await self._get(f"events/{event_id}/providers/{provider}/playlist/{playlist_id}")
        return [str(key) for key in data or []]

    async def play(
        self, event_id: str, account: ProviderAccount, ref: TrackRef, offset_ms: int
    ) -> None:
        await self._get(
            f"events/{event_id}/providers/{account.type}/{account.id}/play/{ref.track_id}",
            params={"pos": offset_ms},
        )

    async def pause(self, event_id: str, account: ProviderAccount) -> None:
        await self._get(f"events/{event_id}/providers/{account.type}/{account.id}/pause")
