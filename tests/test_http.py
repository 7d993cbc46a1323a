"""
HTTP API tests

Runs the FastAPI app with a real container on a temporary SQLite file and
fake provider / activity adapters. Covers routing, status mapping of the
error taxonomy and the health endpoints.
"""

import pytest
from fastapi.testclient import TestClient

from event_playlist.config.container import Container
from event_playlist.config.settings import Settings
from event_playlist.domain.shared.constants import ErrorCodes
from event_playlist.infrastructure.http.app import create_app

PREFIX = "/api/service-playlist/v1"


@pytest.fixture
def settings(tmp_path):
    return Settings(
        _env_file=None,
        store={"url": f"sqlite:///{tmp_path / 'http.db'}"},
        scheduler={"enabled": False},
        events={"test_event_create": False, "demo_no_actual_playing": True},
    )


@pytest.fixture
def container(settings, track_provider, activities):
    container = Container(settings)
    container._track_provider = track_provider
    container._activity_publisher = activities
    return container


@pytest.fixture
def client(container):
    with TestClient(create_app(container)) as client:
        yield client


@pytest.fixture
def party(client):
    response = client.post(
        f"{PREFIX}/events",
        json={"eventID": "Party", "owner": "alice", "demoAutoFillEmptyPlaylist": False},
    )
    assert response.status_code == 200
    return response.json()


class TestEventRoutes:
    def test_create_event(self, party):
        assert party["eventID"] == "party"
        assert party["url"] == "localhost:8080/party"
        assert party["demoNoActualPlaying"] is True

    def test_get_event(self, client, party):
        response = client.get(f"{PREFIX}/events/PARTY")

        assert response.status_code == 200
        assert response.json()["owner"] == "alice"

    def test_get_unknown_event_is_null(self, client):
        response = client.get(f"{PREFIX}/events/nope")

        assert response.status_code == 200
        assert response.json() is None

    def test_prototype(self, client):
        response = client.get(f"{PREFIX}/events/___prototype___")

        assert response.json()["maxTracksInPlaylist"] == 50

    def test_duplicate_event_is_rejected(self, client, party):
        response = client.post(f"{PREFIX}/events", json={"eventID": "party"})

        assert response.status_code == 406
        body = response.json()
        assert body["code"] == ErrorCodes.EVENT_EXISTS
        assert body["errors"][0]["att"] == "eventID"

    def test_update_event(self, client, party):
        response = client.post(f"{PREFIX}/events/party", json={**party, "name": "Renamed"})

        assert response.status_code == 200
        assert client.get(f"{PREFIX}/events/party").json()["name"] == "Renamed"

    def test_delete_event(self, client, party):
        response = client.delete(f"{PREFIX}/events/party")

        assert response.status_code == 200
        stored = client.get(f"{PREFIX}/events/party").json()
        assert stored is not None
        assert stored["eventEndsAt"] < party["eventEndsAt"]

    def test_add_and_remove_provider(self, client, party):
        account = {"id": 7, "type": "spotify", "user": "alice", "display": "alice-phone"}

        added = client.post(f"{PREFIX}/events/party/providers", json=account)
        assert added.status_code == 200
        assert client.get(f"{PREFIX}/events/party").json()["providerTypes"] == ["spotify"]

        removed = client.request("DELETE", f"{PREFIX}/events/party/providers", json=account)
        assert removed.status_code == 200
        assert removed.json() == []


class TestPlaylistRoutes:
    def test_get_lazily_created_playlist(self, client, party):
        response = client.get(f"{PREFIX}/events/party/playlists/0")

        assert response.status_code == 200
        body = response.json()
        assert body["eventID"] == "party"
        assert body["nextTracks"] == []
        assert body["currentTrack"] is None

    def test_unknown_event(self, client):
        response = client.get(f"{PREFIX}/events/nope/playlists/0")

        assert response.status_code == 406
        assert response.json()["code"] == ErrorCodes.EVENT_NOT_FOUND

    def test_undeclared_playlist(self, client, party):
        response = client.get(f"{PREFIX}/events/party/playlists/3")

        assert response.status_code == 406
        assert response.json()["code"] == ErrorCodes.PLAYLIST_NOT_FOUND

    def test_add_track_to_empty_playlist_becomes_current(self, client, party):
        response = client.post(
            f"{PREFIX}/events/party/playlists/0/tracks",
            json={"provider": "spotify", "id": "abc", "user": "bob"},
        )

        assert response.status_code == 200
        body = response.json()
        assert body["currentTrack"]["id"] == "abc"
        assert body["currentTrack"]["added_by"] == "bob"
        assert body["nextTracks"] == []

    def test_add_track_unknown_provider(self, client, party):
        response = client.post(
            f"{PREFIX}/events/party/playlists/0/tracks",
            json={"provider": "deezer", "id": "abc"},
        )

        assert response.status_code == 406
        assert response.json()["code"] == ErrorCodes.UNKNOWN_PROVIDER

    def test_add_track_detail_failure(self, client, party, track_provider):
        track_provider.missing.add("abc")

        response = client.post(
            f"{PREFIX}/events/party/playlists/0/tracks",
            json={"provider": "spotify", "id": "abc"},
        )

        assert response.status_code == 406
        assert response.json()["code"] == ErrorCodes.TRACK_DETAIL_FAILED

    def test_malformed_reorder(self, client, party):
        response = client.post(
            f"{PREFIX}/events/party/playlists/0/reorder",
            json={"provider": "spotify", "id": "abc"},
        )

        assert response.status_code == 406
        assert response.json()["code"] == ErrorCodes.INVALID_REQUEST

    def test_feedback_on_unknown_track_is_empty(self, client, party):
        response = client.post(
            f"{PREFIX}/events/party/playlists/0/tracks/spotify:ghost/feedback",
            json={"old": None, "new": "L", "user": "bob"},
        )

        assert response.status_code == 200
        assert response.content == b""

    def test_delete_malformed_track_key(self, client, party):
        response = client.delete(f"{PREFIX}/events/party/playlists/0/tracks/nocolon")

        assert response.status_code == 406
        assert response.json()["code"] == ErrorCodes.TRACK_NOT_FOUND

    def test_pause(self, client, party):
        client.post(
            f"{PREFIX}/events/party/playlists/0/tracks",
            json={"provider": "spotify", "id": "abc", "user": "bob"},
        )

        paused = client.get(f"{PREFIX}/events/party/playlists/0/pause", params={"user": "bob"})
        assert paused.status_code == 200
        assert paused.json()["isPlaying"] is False


class TestUnexpectedErrors:
    def test_unexpected_error_response(self, settings, track_provider, activities):
        container = Container(settings)
        container._track_provider = track_provider
        container._activity_publisher = activities
        track_provider.detail_error = RuntimeError("boom")

        with TestClient(create_app(container), raise_server_exceptions=False) as client:
            client.post(f"{PREFIX}/events", json={"eventID": "party"})
            response = client.post(
                f"{PREFIX}/events/party/playlists/0/tracks",
                json={"provider": "spotify", "id": "abc"},
            )

        assert response.status_code == 500
        body = response.json()
        assert body["code"] == ErrorCodes.GENERIC
        assert "boom" in body["msg"]


class TestHealthRoutes:
    def test_ready(self, client):
        response = client.get(f"{PREFIX}/ready")

        assert response.status_code == 200
        assert response.json()["datagridClient"] is True

    def test_health(self, client):
        assert client.get(f"{PREFIX}/health").status_code == 200

    def test_not_ready_after_store_failure(self, client, container):
        container.readiness.mark_failed(RuntimeError("gone"))

        response = client.get(f"{PREFIX}/ready")

        assert response.status_code == 500
        assert "gone" in response.json()["lastError"]

    def test_dump_lists_raw_events(self, client, party):
        response = client.get(f"{PREFIX}/internal/dump")

        assert response.status_code == 200
        assert [e["eventID"] for e in response.json()] == ["party"]
