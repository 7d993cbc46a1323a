"""Dependency Injection Container

Manages the application's dependency graph, providing lazy initialization
and lifecycle management for the store, adapters, services and the sweep.
Components are created on-demand and cached for reuse throughout the application.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

logger = logging.getLogger(__name__)

if TYPE_CHECKING:
    from ..application.interfaces.activity_publisher import ActivityPublisher
    from ..application.interfaces.store import Store
    from ..application.interfaces.track_curator import TrackCurator
    from ..application.interfaces.track_provider import TrackProvider
    from ..application.services.event_scheduler import EventScheduler
    from ..application.services.event_service import EventApplicationService
    from ..application.services.playback_controller import PlaybackController
    from ..application.services.playlist_service import PlaylistApplicationService
    from ..application.services.provider_fanout import ProviderFanOut
    from ..application.services.queue_engine import TrackQueueEngine
    from ..application.services.readiness import ReadinessState
    from ..domain.event.factories import EventDefaults
    from ..domain.event.repository import EventRepository
    from ..domain.playlist.repository import PlaylistRepository
    from ..infrastructure.persistence.database import Database
    from .settings import Settings


@dataclass
class Container:
    """Dependency injection container.

    This container manages all application dependencies and their lifecycle.
    Components are lazily initialized when first accessed; tests may assign
    the private slots with fakes before first access.
    """

    settings: Settings

    # Process state
    _readiness: ReadinessState | None = None

    # Persistence layer
    _database: Database | None = None
    _store: Store | None = None
    _event_repository: EventRepository | None = None
    _playlist_repository: PlaylistRepository | None = None

    # Infrastructure adapters
    _track_provider: TrackProvider | None = None
    _activity_publisher: ActivityPublisher | None = None
    _track_curator: TrackCurator | None = None

    # Application services
    _queue_engine: TrackQueueEngine | None = None
    _provider_fanout: ProviderFanOut | None = None
    _playback_controller: PlaybackController | None = None
    _playlist_service: PlaylistApplicationService | None = None
    _event_service: EventApplicationService | None = None

    # Background jobs
    _event_scheduler: EventScheduler | None = None

    @property
    def event_defaults(self) -> EventDefaults:
        return self.settings.events.to_defaults()

    @property
    def readiness(self) -> ReadinessState:
        """Get the process-wide readiness state."""
        if self._readiness is None:
            from ..application.services.readiness import ReadinessState

            self._readiness = ReadinessState()
        return self._readiness

    # === Persistence ===

    @property
    def database(self) -> Database:
        """Get the database connection manager."""
        if self._database is None:
            from ..infrastructure.persistence.database import Database

            self._database = Database(self.settings.store.url, settings=self.settings.store)
        return self._database

    @property
    def store(self) -> Store:
        """Get the key/value store."""
        if self._store is None:
            from ..infrastructure.persistence.sqlite_store import SQLiteStore

            self._store = SQLiteStore(self.database, readiness=self.readiness)
        return self._store

    @property
    def event_repository(self) -> EventRepository:
        """Get the event repository."""
        if self._event_repository is None:
            from ..infrastructure.persistence.repositories.event_repository import (
                StoreEventRepository,
            )

            self._event_repository = StoreEventRepository(self.store)
        return self._event_repository

    @property
    def playlist_repository(self) -> PlaylistRepository:
        """Get the playlist repository."""
        if self._playlist_repository is None:
            from ..infrastructure.persistence.repositories.playlist_repository import (
                StorePlaylistRepository,
            )

            self._playlist_repository = StorePlaylistRepository(self.store)
        return self._playlist_repository

    # === Infrastructure Adapters ===

    @property
    def track_provider(self) -> TrackProvider:
        """Get the playback provider client."""
        if self._track_provider is None:
            from ..infrastructure.provider.http_track_provider import HttpTrackProvider

            self._track_provider = HttpTrackProvider(self.settings.provider)
        return self._track_provider

    @property
    def activity_publisher(self) -> ActivityPublisher:
        """Get the activity publisher."""
        if self._activity_publisher is None:
            from ..infrastructure.activity.http_activity_publisher import (
                HttpActivityPublisher,
            )

            self._activity_publisher = HttpActivityPublisher(self.settings.activity)
        return self._activity_publisher

    @property
    def track_curator(self) -> TrackCurator | None:
        """Get the AI track curator, or None without an API key."""
        if self._track_curator is None:
            from ..infrastructure.ai.openai_curator import OpenAITrackCurator

            curator = OpenAITrackCurator(self.settings.ai)
            if not curator.is_available():
                return None
            self._track_curator = curator
        return self._track_curator

    # === Application Services ===

    @property
    def queue_engine(self) -> TrackQueueEngine:
        """Get the track queue engine."""
        if self._queue_engine is None:
            from ..application.services.queue_engine import TrackQueueEngine

            self._queue_engine = TrackQueueEngine(
                track_provider=self.track_provider,
                event_repository=self.event_repository,
                activity_publisher=self.activity_publisher,
                track_curator=self.track_curator,
            )
        return self._queue_engine

    @property
    def provider_fanout(self) -> ProviderFanOut:
        """Get the provider fan-out service."""
        if self._provider_fanout is None:
            from ..application.services.provider_fanout import ProviderFanOut

            self._provider_fanout = ProviderFanOut(
                track_provider=self.track_provider,
                event_repository=self.event_repository,
                settings=self.settings.provider,
            )
        return self._provider_fanout

    @property
    def playback_controller(self) -> PlaybackController:
        """Get the playback controller."""
        if self._playback_controller is None:
            from ..application.services.playback_controller import PlaybackController

            self._playback_controller = PlaybackController(
                event_repository=self.event_repository,
                playlist_repository=self.playlist_repository,
                queue_engine=self.queue_engine,
                provider_fanout=self.provider_fanout,
                activity_publisher=self.activity_publisher,
                event_defaults=self.event_defaults,
                readiness=self.readiness,
            )
        return self._playback_controller

    @property
    def playlist_service(self) -> PlaylistApplicationService:
        """Get the playlist application service."""
        if self._playlist_service is None:
            from ..application.services.playlist_service import PlaylistApplicationService

            self._playlist_service = PlaylistApplicationService(
                event_repository=self.event_repository,
                playlist_repository=self.playlist_repository,
                queue_engine=self.queue_engine,
                playback_controller=self.playback_controller,
                event_defaults=self.event_defaults,
            )
        return self._playlist_service

    @property
    def event_service(self) -> EventApplicationService:
        """Get the event application service."""
        if self._event_service is None:
            from ..application.services.event_service import EventApplicationService

            self._event_service = EventApplicationService(
                event_repository=self.event_repository,
                playlist_repository=self.playlist_repository,
                track_provider=self.track_provider,
                activity_publisher=self.activity_publisher,
                playback_controller=self.playback_controller,
                event_defaults=self.event_defaults,
            )
        return self._event_service

    # === Background Jobs ===

    @property
    def event_scheduler(self) -> EventScheduler:
        """Get the event sweep scheduler."""
        if self._event_scheduler is None:
            from ..application.services.event_scheduler import EventScheduler

            self._event_scheduler = EventScheduler(
                store=self.store,
                event_repository=self.event_repository,
                playback_controller=self.playback_controller,
                readiness=self.readiness,
                settings=self.settings.scheduler,
            )
        return self._event_scheduler

    # === Lifecycle ===

    async def initialize(self) -> None:
        """Open the store, create the demo event and start the sweep.

        Raises:
            StoreUnavailableError: The store could not be opened.
        """
        import aiosqlite

        from ..domain.shared.exceptions import StoreUnavailableError
        from ..domain.shared.messages import ErrorMessages

        try:
            await self.database.initialize()
        except (aiosqlite.Error, OSError) as e:
            self.readiness.mark_failed(e)
            raise StoreUnavailableError(ErrorMessages.STORE_UNREACHABLE.format(error=e), e) from e
        self.readiness.mark_connected()

        if self.settings.events.test_event_create:
            await self.event_service.create_test_event(self.settings.events.test_event_id)

        if self.settings.scheduler.enabled:
            self.event_scheduler.start()

    async def shutdown(self) -> None:
        """Shutdown and cleanup all resources."""
        from ..utils.tasks import drain_background_tasks

        if self._event_scheduler is not None:
            await self._event_scheduler.stop()

        if self._playback_controller is not None:
            await self._playback_controller.shutdown()

        await drain_background_tasks()

        for adapter in (self._track_provider, self._activity_publisher, self._track_curator):
            close = getattr(adapter, "close", None)
            if close is None:
                continue
            try:
                await close()
            except Exception as exc:
                logger.warning("Failed closing %s: %r", type(adapter).__name__, exc)

        if self._database is not None:
            await self._database.close()


def create_container(settings: Settings) -> Container:
    """Create a new dependency injection container."""
    return Container(settings)
