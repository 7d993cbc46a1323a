"""Event Application Service - lifecycle and provider accounts of events."""

from __future__ import annotations

import logging
from datetime import timedelta
from typing import TYPE_CHECKING

from ...domain.event.entities import ProviderAccount
from ...domain.event.factories import (
    EventDefaults,
    create_empty_event,
    create_empty_playlist,
    event_url_for,
)
from ...domain.shared.constants import PROTOTYPE_EVENT_ID, SYSTEM_USER, ErrorCodes
from ...domain.shared.datetime_utils import utcnow
from ...domain.shared.events import ActivityType
from ...domain.shared.exceptions import EntityNotFoundError, EventValidationError
from ...domain.shared.messages import ActivityMessages, ErrorMessages, LogTemplates

if TYPE_CHECKING:
    from ...domain.event.entities import Event
    from ...domain.event.repository import EventRepository
    from ...domain.playlist.repository import PlaylistRepository
    from ..interfaces.activity_publisher import ActivityPublisher
    from ..interfaces.track_provider import TrackProvider
    from .playback_controller import PlaybackController

logger = logging.getLogger(__name__)

TEST_EVENT_LIFETIME = timedelta(days=42 * 365)


class EventApplicationService:
    """Create, read, update and soft-delete events; manage provider accounts.

    Deleting an event only moves its end time to now. The event stays in
    the store until housekeeping outside this service removes it.
    """

    def __init__(
        self,
        *,
        event_repository: EventRepository,
        playlist_repository: PlaylistRepository,
        track_provider: TrackProvider,
        activity_publisher: ActivityPublisher,
        playback_controller: PlaybackController,
        event_defaults: EventDefaults | None = None,
    ) -> None:
        self._event_repo = event_repository
        self._playlist_repo = playlist_repository
        self._provider = track_provider
        self._activities = activity_publisher
        self._playback = playback_controller
        self._defaults = event_defaults or EventDefaults()

    @property
    def defaults(self) -> EventDefaults:
        return self._defaults

    def new_event(self) -> Event:
        return create_empty_event(self._defaults)

    async def get_event(self, event_id: str) -> Event | None:
        """Look up an event; the prototype id yields a fresh default event."""
        event_id = event_id.lower()
        if event_id == PROTOTYPE_EVENT_ID:
            return self.new_event()
        return await self._event_repo.get(event_id)

    async def require_event(self, event_id: str) -> Event:
        event = await self.get_event(event_id)
        if event is None:
            raise EntityNotFoundError(
                "Event",
                event_id,
                ErrorMessages.EVENT_NOT_FOUND.format(event_id=event_id),
                code=ErrorCodes.EVENT_NOT_FOUND,
            )
        return event

    async def validate(self, event: Event, *, is_create: bool) -> Event:
        """Normalise the id and url of ``event``.

        Raises:
            EventValidationError: On create, the id is missing or taken.
        """
        errors: list[dict[str, str]] = []
        event.event_id = event.event_id.lower()

        if not event.event_id:
            errors.append(
                {
                    "code": ErrorCodes.EVENT_ID_REQUIRED,
                    "msg": ErrorMessages.EVENT_ID_REQUIRED,
                    "att": "eventID",
                }
            )
        elif is_create and await self._event_repo.get(event.event_id) is not None:
            errors.append(
                {"code": ErrorCodes.EVENT_EXISTS, "msg": ErrorMessages.EVENT_EXISTS, "att": "eventID"}
            )

        event.url = event_url_for(self._defaults, event.event_id)

        if errors:
            raise EventValidationError(errors)
        return event

    async def create_event(self, event: Event) -> Event:
        event = await self.validate(event, is_create=True)
        await self._event_repo.save(event)

        logger.info(LogTemplates.EVENT_CREATED, event.event_id, event.url)
        self._activities.publish(
            ActivityType.EVENT_CREATE,
            event.event_id,
            {"event": event.to_wire()},
            ActivityMessages.EVENT_CREATE.format(event_id=event.event_id, owner=event.owner),
        )
        return event

    async def update_event(self, event: Event) -> Event:
        """Persist a changed event definition.

        When autofill is enabled and the background playlist id changed, the
        track ids of the new background playlist are fetched from the
        provider and stored in the event extension.
        """
        event = await self.validate(event, is_create=False)

        if event.demo_auto_fill_empty_playlist:
            ext = await self._event_repo.get_ext(event.event_id)
            if event.demo_auto_fill_from_playlist != ext.background_playlist_id:
                ext.background_playlist_id = event.demo_auto_fill_from_playlist
                if event.demo_auto_fill_from_playlist:
                    ext.background_playlist = await self._provider.fetch_playlist_track_ids(
                        event.event_id,
                        event.provider_types[0] if event.provider_types else "spotify",
                        event.demo_auto_fill_from_playlist,
                    )
                else:
                    ext.background_playlist = []
                logger.info(
                    LogTemplates.EVENT_BACKGROUND_PLAYLIST,
                    event.event_id,
                    ext.background_playlist_id,
                    len(ext.background_playlist),
                )
                await self._event_repo.save_ext(event.event_id, ext)

        await self._event_repo.save(event)

        logger.debug(LogTemplates.EVENT_UPDATED, event.event_id)
        self._activities.publish(
            ActivityType.EVENT_UPDATE,
            event.event_id,
            {"event": event.to_wire()},
            ActivityMessages.EVENT_UPDATE.format(event_id=event.event_id, owner=event.owner),
        )
        return event

    async def delete_event(self, event_id: str) -> None:
        """Mark an event as ended; unknown ids are ignored with a warning."""
        event = await self._event_repo.get(event_id)
        if event is None:
            logger.warning(LogTemplates.EVENT_DELETE_IGNORED, event_id)
            return

        event.event_ends_at = utcnow()
        await self._event_repo.save(event)
        logger.info(LogTemplates.EVENT_MARKED_DELETED, event.event_id)

        self._activities.publish(
            ActivityType.EVENT_DELETE,
            event.event_id,
            {"event": event.to_wire()},
            ActivityMessages.EVENT_DELETE.format(event_id=event.event_id, owner=event.owner),
        )

    # ── provider accounts ──────────────────────────────────────────────

    async def add_provider(self, event_id: str, account: ProviderAccount) -> Event:
        """Register a provider account, merging into one with the same id."""
        event = await self.require_event(event_id)

        if not account.id:
            account.id = len(event.providers)

        existing = event.find_provider(account.id)
        if existing is None:
            event.providers.append(account)
        else:
            merged = {**existing.model_dump(), **account.model_dump(exclude_unset=True)}
            index = event.providers.index(existing)
            event.providers[index] = ProviderAccount.model_validate(merged)

        event.rebuild_provider_types()
        await self._event_repo.save(event)

        logger.info(LogTemplates.EVENT_PROVIDER_ADDED, account.id, account.type, event.event_id)
        self._activities.publish(
            ActivityType.PROVIDER_ADD,
            event.event_id,
            {"newProvider": account.model_dump(mode="json")},
            ActivityMessages.PROVIDER_ADD.format(user=account.user, type=account.type),
        )
        return event

    async def remove_provider(self, event_id: str, account: ProviderAccount) -> Event:
        event = await self.require_event(event_id)

        event.providers = [p for p in event.providers if str(p.id) != str(account.id)]
        event.rebuild_provider_types()
        await self._event_repo.save(event)

        logger.info(LogTemplates.EVENT_PROVIDER_REMOVED, account.id, event.event_id)
        self._activities.publish(
            ActivityType.PROVIDER_DEL,
            event.event_id,
            {"provider": account.model_dump(mode="json")},
            ActivityMessages.PROVIDER_DEL.format(user=account.user, type=account.type),
        )
        return event

    # ── startup ────────────────────────────────────────────────────────

    async def create_test_event(self, event_id: str) -> Event:
        """(Re)create the long-lived demo event with an empty playlist and check it once."""
        event = self.new_event()
        event.event_id = event_id.lower()
        event.name = "Demo Event"
        event.owner = SYSTEM_USER
        event.url = event_url_for(self._defaults, event.event_id)
        event.event_ends_at = utcnow() + TEST_EVENT_LIFETIME
        await self._event_repo.save(event)

        playlist = create_empty_playlist(
            event.event_id, event.playlists[event.active_playlist], self._defaults
        )
        await self._playlist_repo.save(playlist)
        logger.info(LogTemplates.TEST_EVENT_CREATED, event.event_id)

        await self._playback.check_event(event)
        return event
