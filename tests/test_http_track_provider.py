"""Tests for the REST client of the playback provider service."""

import httpx
import pytest

from event_playlist.config.settings import ProviderSettings
from event_playlist.domain.event.entities import ProviderAccount
from event_playlist.domain.playlist.value_objects import TrackRef
from event_playlist.domain.shared.constants import ErrorCodes
from event_playlist.domain.shared.exceptions import ProviderError, ProviderFailure
from event_playlist.infrastructure.provider.http_track_provider import (
    HttpTrackProvider,
    classify_failure,
)

ACCOUNT = ProviderAccount(id=3, type="spotify", user="alice", display="alice-phone")


def _provider(handler) -> HttpTrackProvider:
    client = httpx.AsyncClient(
        base_url="http://provider.test/api/provider-spotify/v1/",
        transport=httpx.MockTransport(handler),
    )
    return HttpTrackProvider(ProviderSettings(), client=client)


class TestClassifyFailure:
    @pytest.mark.parametrize(
        "status, body, expected",
        [
            (403, "", ProviderFailure.FORBIDDEN),
            (500, "Forbidden by user settings", ProviderFailure.FORBIDDEN),
            (404, "", ProviderFailure.DEVICE_NOT_FOUND),
            (500, '{"code": "SPTFY-100", "msg": "no device"}', ProviderFailure.DEVICE_NOT_FOUND),
            (502, "Bad Gateway", ProviderFailure.GENERIC),
            (None, "", ProviderFailure.GENERIC),
        ],
    )
    def test_classification(self, status, body, expected):
        assert classify_failure(status, body) == expected


class TestTrackDetail:
    @pytest.mark.asyncio
    async def test_fetch_track_detail(self):
        seen = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request.url.path)
            return httpx.Response(
                200, json={"name": "Song", "artist": "Band", "duration_ms": 180000, "genre": "pop"}
            )

        track = await _provider(handler).fetch_track_detail("party", TrackRef("spotify", "abc"))

        assert seen == ["/api/provider-spotify/v1/events/party/providers/spotify/tracks/abc"]
        assert track.id == "abc"
        assert track.provider == "spotify"
        assert track.duration_ms == 180000
        assert track.model_extra == {"genre": "pop"}

    @pytest.mark.asyncio
    async def test_provider_error_body_is_kept(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(500, json={"code": "SPTY-999", "msg": "quota exceeded"})

        with pytest.raises(ProviderError) as exc_info:
            await _provider(handler).fetch_track_detail("party", TrackRef("spotify", "abc"))

        assert exc_info.value.code == "SPTY-999"
        assert exc_info.value.message == "quota exceeded"

    @pytest.mark.asyncio
    async def test_invalid_detail(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json={"duration_ms": -5})

        with pytest.raises(ProviderError) as exc_info:
            await _provider(handler).fetch_track_detail("party", TrackRef("spotify", "abc"))

        assert exc_info.value.code == ErrorCodes.PROVIDER_GENERIC

    @pytest.mark.asyncio
    async def test_timeout(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ReadTimeout("slow", request=request)

        with pytest.raises(ProviderError) as exc_info:
            await _provider(handler).fetch_track_detail("party", TrackRef("spotify", "abc"))

        assert exc_info.value.failure == ProviderFailure.TIMEOUT


class TestPlaylist:
    @pytest.mark.asyncio
    async def test_fetch_playlist_track_ids(self):
        def handler(request: httpx.Request) -> httpx.Response:
            assert request.url.path.endswith("/events/party/providers/spotify/playlist/bg-1")
            return httpx.Response(200, json=["spotify:a", "spotify:b"])

        ids = await _provider(handler).fetch_playlist_track_ids("party", "spotify", "bg-1")

        assert ids == ["spotify:a", "spotify:b"]


class TestPlayback:
    @pytest.mark.asyncio
    async def test_play_routes_to_account(self):
        seen = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append((request.url.path, dict(request.url.params)))
            return httpx.Response(200)

        await _provider(handler).play("party", ACCOUNT, TrackRef("spotify", "abc"), 42000)

        assert seen == [
            ("/api/provider-spotify/v1/events/party/providers/spotify/3/play/abc", {"pos": "42000"})
        ]

    @pytest.mark.asyncio
    async def test_pause(self):
        seen = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request.url.path)
            return httpx.Response(200)

        await _provider(handler).pause("party", ACCOUNT)

        assert seen == ["/api/provider-spotify/v1/events/party/providers/spotify/3/pause"]

    @pytest.mark.asyncio
    async def test_device_not_found(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(404, text="Not Found")

        with pytest.raises(ProviderError) as exc_info:
            await _provider(handler).play("party", ACCOUNT, TrackRef("spotify", "abc"), 0)

        assert exc_info.value.failure == ProviderFailure.DEVICE_NOT_FOUND


class TestLifecycle:
    @pytest.mark.asyncio
    async def test_close_is_idempotent(self):
        provider = HttpTrackProvider(ProviderSettings())

        await provider.close()
        await provider.close()
