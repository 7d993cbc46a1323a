from __future__ import annotations

from datetime import timedelta

import pytest
import pytest_asyncio

from event_playlist.application.interfaces.activity_publisher import ActivityPublisher
from event_playlist.application.interfaces.track_provider import TrackProvider
from event_playlist.domain.playlist.entities import Track
from event_playlist.domain.shared.constants import ErrorCodes
from event_playlist.domain.shared.datetime_utils import utcnow
from event_playlist.domain.shared.exceptions import ProviderError, ProviderFailure

# ============================================================================
# Fakes
# ============================================================================


def _make_track(
    track_id: str,
    *,
    provider: str = "spotify",
    duration_ms: int = 200_000,
    added_by: str = "alice",
    likes: int = 0,
    hates: int = 0,
    **extra,
) -> Track:
    """Build a track the way the provider would return it, already stamped."""
    return Track(
        id=track_id,
        provider=provider,
        name=f"Song {track_id}",
        artist="Test Artist",
        duration_ms=duration_ms,
        added_by=added_by,
        num_likes=likes,
        num_hates=hates,
        **extra,
    )


def _playing_track(track_id: str, *, played_ms: int, duration_ms: int = 200_000) -> Track:
    """A current track that started ``played_ms`` ago."""
    track = _make_track(track_id, duration_ms=duration_ms)
    track.started_at = utcnow() - timedelta(milliseconds=played_ms)
    track.progress_ms = played_ms
    return track


class FakeTrackProvider(TrackProvider):
    """In-memory provider recording every play and pause command."""

    def __init__(self) -> None:
        self.durations: dict[str, int] = {}
        self.missing: set[str] = set()
        self.failing_accounts: dict[str, ProviderFailure] = {}
        self.playlists: dict[str, list[str]] = {}
        self.detail_error: Exception | None = None
        self.play_calls: list[tuple[str, str, str, int]] = []
        self.pause_calls: list[tuple[str, str]] = []

    async def fetch_track_detail(self, event_id, ref):
        if self.detail_error is not None:
            raise self.detail_error
        if ref.track_id in self.missing:
            raise ProviderError(
                f"Track {ref} not found",
                code=ErrorCodes.PROVIDER_GENERIC,
                failure=ProviderFailure.GENERIC,
            )
        return Track(
            id=ref.track_id,
            provider=ref.provider,
            name=f"Song {ref.track_id}",
            artist="Test Artist",
            duration_ms=self.durations.get(ref.track_id, 200_000),
        )

    async def fetch_playlist_track_ids(self, event_id, provider, playlist_id):
        return list(self.playlists.get(playlist_id, []))

    async def play(self, event_id, account, ref, offset_ms):
        self.play_calls.append((event_id, account.display, ref.track_id, offset_ms))
        failure = self.failing_accounts.get(account.display)
        if failure is not None:
            raise ProviderError(
                f"play failed for {account.display}",
                code=ErrorCodes.PROVIDER_GENERIC,
                failure=failure,
            )

    async def pause(self, event_id, account):
        self.pause_calls.append((event_id, account.display))


class RecordingActivityPublisher(ActivityPublisher):
    """Keeps every emitted activity in memory."""

    def __init__(self) -> None:
        self.activities = []

    def emit(self, activity) -> None:
        self.activities.append(activity)

    def of_type(self, activity_type):
        return [a for a in self.activities if a.activity == activity_type]


# ============================================================================
# Database Fixtures
# ============================================================================


@pytest_asyncio.fixture
async def in_memory_database():
    """Create an in-memory SQLite database for testing."""
    from event_playlist.infrastructure.persistence.database import Database

    db = Database(":memory:")
    await db.initialize()
    yield db
    await db.close()


@pytest_asyncio.fixture
async def file_database(tmp_path):
    """File-backed database; needed wherever connections write concurrently."""
    from event_playlist.infrastructure.persistence.database import Database
    from event_playlist.utils.tasks import drain_background_tasks

    db = Database(f"sqlite:///{tmp_path / 'playlist.db'}")
    await db.initialize()
    yield db
    await drain_background_tasks()
    await db.close()


@pytest.fixture
def readiness():
    from event_playlist.application.services.readiness import ReadinessState

    return ReadinessState()


@pytest.fixture
def store(file_database, readiness):
    from event_playlist.infrastructure.persistence.sqlite_store import SQLiteStore

    return SQLiteStore(file_database, readiness=readiness)


@pytest.fixture
def event_repository(store):
    from event_playlist.infrastructure.persistence.repositories import StoreEventRepository

    return StoreEventRepository(store)


@pytest.fixture
def playlist_repository(store):
    from event_playlist.infrastructure.persistence.repositories import StorePlaylistRepository

    return StorePlaylistRepository(store)


# ============================================================================
# Service Fixtures
# ============================================================================


@pytest.fixture
def track_provider():
    return FakeTrackProvider()


@pytest.fixture
def activities():
    return RecordingActivityPublisher()


@pytest.fixture
def provider_settings():
    from event_playlist.config.settings import ProviderSettings

    return ProviderSettings(retry_min_ms=0, retry_max_ms=0)


@pytest.fixture
def queue_engine(track_provider, event_repository, activities):
    from event_playlist.application.services.queue_engine import TrackQueueEngine

    return TrackQueueEngine(
        track_provider=track_provider,
        event_repository=event_repository,
        activity_publisher=activities,
    )


@pytest.fixture
def provider_fanout(track_provider, event_repository, provider_settings):
    from event_playlist.application.services.provider_fanout import ProviderFanOut

    return ProviderFanOut(
        track_provider=track_provider,
        event_repository=event_repository,
        settings=provider_settings,
    )


@pytest_asyncio.fixture
async def playback_controller(
    event_repository, playlist_repository, queue_engine, provider_fanout, activities, readiness
):
    from event_playlist.application.services.playback_controller import PlaybackController

    controller = PlaybackController(
        event_repository=event_repository,
        playlist_repository=playlist_repository,
        queue_engine=queue_engine,
        provider_fanout=provider_fanout,
        activity_publisher=activities,
        readiness=readiness,
    )
    yield controller
    await controller.shutdown()


# ============================================================================
# Domain Entity Fixtures
# ============================================================================


@pytest.fixture
def event():
    """An event with one account and autofill switched off."""
    from event_playlist.domain.event.entities import Event, ProviderAccount

    event = Event(
        event_id="party",
        owner="alice",
        demo_auto_fill_empty_playlist=False,
        providers=[ProviderAccount(id=0, type="spotify", user="alice", display="alice-phone")],
    )
    event.rebuild_provider_types()
    return event


@pytest.fixture
def playlist():
    from event_playlist.domain.playlist.entities import Playlist

    return Playlist(event_id="party", playlist_id=0)


@pytest.fixture
def make_track():
    return _make_track


@pytest.fixture
def playing_track():
    return _playing_track
