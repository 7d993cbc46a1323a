"""Provider Fan-Out Service - plays and pauses a track on every account of an event."""

from __future__ import annotations

import asyncio
import logging
import random
from dataclasses import dataclass
from typing import TYPE_CHECKING

from ...domain.shared.constants import ErrorCodes
from ...domain.shared.exceptions import ProviderError, ProviderFailure
from ...domain.shared.messages import ErrorMessages, LogTemplates
from ...utils.tasks import spawn_detached

if TYPE_CHECKING:
    from ...config.settings import ProviderSettings
    from ...domain.event.entities import Event, ProviderAccount
    from ...domain.event.repository import EventRepository
    from ...domain.playlist.value_objects import TrackRef
    from ..interfaces.track_provider import TrackProvider

logger = logging.getLogger(__name__)


@dataclass
class AccountPlayResult:
    account: ProviderAccount
    error: ProviderError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


class ProviderFanOut:
    """Issues provider commands for all accounts of an event in parallel.

    Partial failure policy: each account is retried a few times with a
    jittered delay; an account that keeps failing is dropped from the event
    (unless it is the owner's); when enough accounts fail the whole event is
    paused in the background so listeners never hear mixed playback.
    """

    def __init__(
        self,
        *,
        track_provider: TrackProvider,
        event_repository: EventRepository,
        settings: ProviderSettings,
    ) -> None:
        self._provider = track_provider
        self._event_repo = event_repository
        self._settings = settings

    async def play_event(self, event: Event, ref: TrackRef, offset_ms: int) -> None:
        """Play ``ref`` at ``offset_ms`` on every account of ``event``.

        Failure counters and removed accounts are persisted on the event.

        Raises:
            ProviderError: No accounts are registered, the single account
                failed, or the failure ratio reached the escalation threshold.
        """
        accounts = list(event.providers)
        if not accounts:
            raise ProviderError(
                ErrorMessages.NO_ACCOUNTS,
                code=ErrorCodes.NO_ACCOUNTS,
                failure=ProviderFailure.NO_ACCOUNTS,
            )

        results = await asyncio.gather(
            *(self._play_account(event, account, ref, offset_ms) for account in accounts)
        )

        await self._event_repo.save(event)

        if len(results) > 1:
            failed = [r for r in results if not r.ok]
            ratio = len(failed) / len(results)
            if ratio >= self._settings.escalation_failure_ratio:
                logger.warning(LogTemplates.PROVIDER_ESCALATE, ratio * 100, event.event_id)
                spawn_detached(
                    self._pause_after_escalation(event),
                    description=f"pause event {event.event_id} after failed play",
                )
                details = "".join(f"{r.error.short}\n" for r in failed if r.error)
                raise ProviderError(
                    ErrorMessages.MAJORITY_PLAY_FAILED.format(details=details),
                    code=ErrorCodes.MAJORITY_PLAY_FAILED,
                )
        elif results[0].error is not None:
            raise results[0].error

    async def pause_event(self, event: Event) -> None:
        """Pause every account of ``event``; the first failure propagates."""
        await asyncio.gather(
            *(self._provider.pause(event.event_id, account) for account in event.providers)
        )

    async def _pause_after_escalation(self, event: Event) -> None:
        try:
            await self.pause_event(event)
        except ProviderError as e:
            logger.debug(LogTemplates.PROVIDER_PAUSE_AFTER_ESCALATION_FAILED, e)

    async def _play_account(
        self, event: Event, account: ProviderAccount, ref: TrackRef, offset_ms: int
    ) -> AccountPlayResult:
        attempts = self._settings.play_retries + 1
        last_error: ProviderError | None = None

        for attempt in range(1, attempts + 1):
            logger.debug(
                LogTemplates.PROVIDER_PLAY_ATTEMPT, event.event_id, account.display, attempt, attempts
            )
            try:
                await self._provider.play(event.event_id, account, ref, offset_ms)
            except ProviderError as e:
                last_error = e
                if attempt < attempts:
                    await asyncio.sleep(self._retry_delay())
                continue

            logger.info(LogTemplates.PROVIDER_PLAY_OK, event.event_id, account.display)
            account.play_failures = 0
            return AccountPlayResult(account=account)

        account.play_failures += 1
        error = self._account_error(account, last_error)
        logger.info(LogTemplates.PROVIDER_PLAY_ERR, event.event_id, account.display, error.short)

        if account.play_failures >= self._settings.max_play_errors and not account.belongs_to(
            event.owner
        ):
            logger.info(LogTemplates.PROVIDER_ACCOUNT_REMOVED, event.event_id, account.display)
            event.providers = [p for p in event.providers if p is not account]
            event.rebuild_provider_types()

        return AccountPlayResult(account=account, error=error)

    def _retry_delay(self) -> float:
        return random.uniform(self._settings.retry_min_ms, self._settings.retry_max_ms) / 1000

    def _account_error(self, account: ProviderAccount, cause: ProviderError | None) -> ProviderError:
        message = ErrorMessages.ACCOUNT_PLAY_FAILED.format(account=account.display)
        failure = cause.failure if cause else ProviderFailure.GENERIC

        if failure == ProviderFailure.DEVICE_NOT_FOUND:
            return ProviderError(
                message + ErrorMessages.DEVICE_NOT_FOUND_HINT,
                code=ErrorCodes.ACCOUNT_PLAY_FAILED,
                failure=failure,
                remediation=ErrorCodes.DEVICE_NOT_FOUND,
                short=f"{account.display}: device not found",
            )
        if failure == ProviderFailure.FORBIDDEN:
            return ProviderError(
                message + ErrorMessages.FORBIDDEN_HINT,
                code=ErrorCodes.ACCOUNT_PLAY_FAILED,
                failure=failure,
                remediation=ErrorCodes.FORBIDDEN,
                short=f"{account.display}: forbidden",
            )
        return ProviderError(
            f"{message} Initial Error was {cause.message if cause else 'unknown'}",
            code=ErrorCodes.ACCOUNT_PLAY_FAILED,
            failure=failure,
            short=f"{account.display}: {failure.value}",
        )
