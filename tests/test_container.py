"""
Unit Tests for Dependency Injection Container

Tests for:
- Lazy initialization (properties create instances on first access)
- Caching (subsequent property access returns same instance)
- The optional AI curator
- Lifecycle methods (initialize, shutdown) and init failures
"""

from unittest.mock import AsyncMock

import pytest

from event_playlist.application.services.event_scheduler import EventScheduler
from event_playlist.application.services.event_service import EventApplicationService
from event_playlist.application.services.playback_controller import PlaybackController
from event_playlist.application.services.playlist_service import PlaylistApplicationService
from event_playlist.config.container import Container, create_container
from event_playlist.config.settings import Settings
from event_playlist.domain.shared.exceptions import StoreUnavailableError
from event_playlist.infrastructure.ai.openai_curator import OpenAITrackCurator
from event_playlist.infrastructure.persistence.sqlite_store import SQLiteStore
from event_playlist.infrastructure.provider.http_track_provider import HttpTrackProvider


@pytest.fixture
def settings(tmp_path):
    return Settings(
        _env_file=None,
        store={"url": f"sqlite:///{tmp_path / 'container.db'}"},
        scheduler={"enabled": False},
        events={"test_event_create": False},
    )


@pytest.fixture
def container(settings):
    return create_container(settings)


class TestLazyProperties:
    def test_create_container(self, settings):
        container = create_container(settings)

        assert isinstance(container, Container)
        assert container.settings is settings
        assert container._store is None

    def test_store_is_cached(self, container):
        store = container.store

        assert isinstance(store, SQLiteStore)
        assert container.store is store

    def test_services_share_dependencies(self, container):
        playlist_service = container.playlist_service
        event_service = container.event_service

        assert isinstance(playlist_service, PlaylistApplicationService)
        assert isinstance(event_service, EventApplicationService)
        assert isinstance(container.playback_controller, PlaybackController)
        assert container.playlist_service is playlist_service
        assert playlist_service._playback is event_service._playback

    def test_track_provider(self, container):
        assert isinstance(container.track_provider, HttpTrackProvider)

    def test_scheduler(self, container):
        assert isinstance(container.event_scheduler, EventScheduler)

    def test_event_defaults_follow_settings(self):
        container = Container(
            Settings(_env_file=None, events={"event_url": "party.example", "is_playing": False})
        )

        defaults = container.event_defaults

        assert defaults.event_url == "party.example"
        assert defaults.is_playing is False


class TestTrackCurator:
    def test_none_without_api_key(self, container):
        assert container.track_curator is None

    def test_available_with_api_key(self):
        container = Container(Settings(_env_file=None, ai={"api_key": "sk-test"}))

        curator = container.track_curator

        assert isinstance(curator, OpenAITrackCurator)
        assert container.track_curator is curator


class TestLifecycle:
    @pytest.mark.asyncio
    async def test_initialize_marks_store_connected(self, container):
        await container.initialize()
        try:
            assert container.readiness.datagrid_client is True
            assert container.readiness.is_ready
        finally:
            await container.shutdown()

    @pytest.mark.asyncio
    async def test_initialize_creates_test_event(self, tmp_path, track_provider, activities):
        container = Container(
            Settings(
                _env_file=None,
                store={"url": f"sqlite:///{tmp_path / 'demo.db'}"},
                scheduler={"enabled": False},
                events={"test_event_id": "Demo", "demo_no_actual_playing": True},
            )
        )
        container._activity_publisher = activities
        container._track_provider = track_provider

        await container.initialize()
        try:
            event = await container.event_repository.get("demo")
            assert event is not None
            assert event.owner == "AutoDJ"
            playlist = await container.playlist_repository.get("demo", 0)
            assert playlist is not None
        finally:
            await container.shutdown()

    @pytest.mark.asyncio
    async def test_initialize_starts_scheduler(self, tmp_path):
        container = Container(
            Settings(
                _env_file=None,
                store={"url": f"sqlite:///{tmp_path / 'sched.db'}"},
                events={"test_event_create": False},
            )
        )

        await container.initialize()
        try:
            assert container.event_scheduler.is_running
        finally:
            await container.shutdown()

        assert not container.event_scheduler.is_running

    @pytest.mark.asyncio
    async def test_unreachable_store(self, tmp_path):
        blocker = tmp_path / "not-a-dir"
        blocker.write_text("")
        container = Container(
            Settings(_env_file=None, store={"url": f"sqlite:///{blocker / 'x.db'}"})
        )

        with pytest.raises(StoreUnavailableError):
            await container.initialize()

        assert container.readiness.datagrid_client is False
        assert container.readiness.last_error

    @pytest.mark.asyncio
    async def test_shutdown_closes_adapters(self, container):
        provider = AsyncMock()
        container._track_provider = provider

        await container.shutdown()

        provider.close.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_shutdown_survives_failing_close(self, container):
        provider = AsyncMock()
        provider.close.side_effect = RuntimeError("already closed")
        container._track_provider = provider

        await container.shutdown()
