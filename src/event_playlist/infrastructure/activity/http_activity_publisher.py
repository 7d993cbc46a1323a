"""Activity publisher posting to the event activity service."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import httpx

from event_playlist.application.interfaces.activity_publisher import ActivityPublisher
from event_playlist.domain.shared.messages import LogTemplates
from event_playlist.utils.tasks import spawn_detached

if TYPE_CHECKING:
    from event_playlist.config.settings import ActivitySettings
    from event_playlist.domain.shared.events import Activity

logger = logging.getLogger(__name__)


class HttpActivityPublisher(ActivityPublisher):
    """POSTs every activity as JSON in a detached task.

    Without a configured URL activities are only logged.
    """

    def __init__(self, settings: ActivitySettings, client: httpx.AsyncClient | None = None) -> None:
        self._settings = settings
        self._client = client

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self._settings.timeout_s)
        return self._client

    async def close(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    def emit(self, activity: Activity) -> None:
        logger.debug(
            LogTemplates.ACTIVITY_PUBLISHED, activity.activity, activity.event_id, activity.message
        )
        if not self._settings.url:
            return
        spawn_detached(self._post(activity), description=f"publish {activity.activity}")

    async def _post(self, activity: Activity) -> None:
        try:
            response = await self._get_client().post(self._settings.url, json=activity.to_wire())
            response.raise_for_status()
        except httpx.HTTPError as e:
            logger.warning(
                LogTemplates.ACTIVITY_PUBLISH_FAILED, activity.activity, activity.event_id, e
            )
