"""Tests for the fire-and-forget HTTP activity publisher."""

import json

import httpx
import pytest

from event_playlist.config.settings import ActivitySettings
from event_playlist.domain.shared.events import ActivityType
from event_playlist.infrastructure.activity.http_activity_publisher import HttpActivityPublisher
from event_playlist.utils.tasks import drain_background_tasks


class TestHttpActivityPublisher:
    @pytest.mark.asyncio
    async def test_posts_activity(self):
        received = []

        def handler(request: httpx.Request) -> httpx.Response:
            received.append(json.loads(request.content))
            return httpx.Response(204)

        publisher = HttpActivityPublisher(
            ActivitySettings(url="http://activity.test/api/activities"),
            client=httpx.AsyncClient(transport=httpx.MockTransport(handler)),
        )

        publisher.publish(ActivityType.TRACK_ADDED, "party", {"trackID": "spotify:abc"}, "bob added Song")
        await drain_background_tasks()

        (body,) = received
        assert body["activity"] == "TRACK_ADDED"
        assert body["eventID"] == "party"
        assert body["data"] == {"trackID": "spotify:abc"}
        assert body["display"] == "bob added Song"
        await publisher.close()

    @pytest.mark.asyncio
    async def test_failures_are_swallowed(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(503)

        publisher = HttpActivityPublisher(
            ActivitySettings(url="http://activity.test/api/activities"),
            client=httpx.AsyncClient(transport=httpx.MockTransport(handler)),
        )

        publisher.publish(ActivityType.TRACK_PLAY, "party", {}, "")
        await drain_background_tasks()
        await publisher.close()

    @pytest.mark.asyncio
    async def test_without_url_nothing_is_sent(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise AssertionError("no request expected")

        publisher = HttpActivityPublisher(
            ActivitySettings(),
            client=httpx.AsyncClient(transport=httpx.MockTransport(handler)),
        )

        publisher.publish(ActivityType.TRACK_PLAY, "party", {}, "")
        await drain_background_tasks()
        await publisher.close()
