"""FastAPI application factory for the playlist service."""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from event_playlist.domain.shared.constants import ErrorCodes, ExitCodes
from event_playlist.domain.shared.exceptions import DomainError, ErrorKind
from event_playlist.domain.shared.messages import ErrorMessages, LogTemplates
from event_playlist.infrastructure.http.routes import events, health, playlists

if TYPE_CHECKING:
    from event_playlist.config.container import Container

logger = logging.getLogger(__name__)

__version__ = "1.0.0"

STATUS_BY_KIND: dict[ErrorKind, int] = {
    ErrorKind.VALIDATION: 406,
    ErrorKind.PROVIDER: 500,
    ErrorKind.COORDINATION: 409,
    ErrorKind.FATAL: 500,
}


def _lifespan(container: Container):
    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        try:
            await container.initialize()
        except Exception as e:
            logger.critical(LogTemplates.APP_INIT_FAILED, e)
            container.readiness.fatal(ExitCodes.INIT_FAILED, e)
            raise
        logger.info(LogTemplates.APP_CONTAINER_INITIALIZED)

        yield

        await container.shutdown()
        logger.info(LogTemplates.APP_SHUTDOWN_COMPLETE)

    return lifespan


async def _domain_error_handler(request: Request, exc: DomainError) -> JSONResponse:
    status = STATUS_BY_KIND[exc.kind]
    if status >= 500:
        logger.warning("%s %s failed: %s", request.method, request.url.path, exc.message)
    else:
        logger.debug("%s %s rejected: %s", request.method, request.url.path, exc.message)
    return JSONResponse(status_code=status, content=exc.to_body())


async def _validation_error_handler(request: Request, exc: Exception) -> JSONResponse:
    return JSONResponse(
        status_code=406,
        content={"code": ErrorCodes.INVALID_REQUEST, "msg": str(exc)},
    )


async def _unexpected_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception(LogTemplates.APP_UNEXPECTED_ERROR, request.method, request.url.path)
    return JSONResponse(
        status_code=500,
        content={"code": ErrorCodes.GENERIC, "msg": ErrorMessages.UNEXPECTED.format(error=exc)},
    )


def create_app(container: Container) -> FastAPI:
    """Build the application around ``container``.

    The lifespan initialises the container (store, demo event, sweep) and
    shuts it down again.
    """
    settings = container.settings
    app = FastAPI(
        title="Event Playlist Service",
        description="Live event music queue orchestration",
        version=__version__,
        lifespan=_lifespan(container),
    )
    app.state.container = container

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )
    if settings.server.compress_result:
        app.add_middleware(GZipMiddleware, minimum_size=1000)

    app.add_exception_handler(DomainError, _domain_error_handler)
    app.add_exception_handler(RequestValidationError, _validation_error_handler)
    app.add_exception_handler(ValidationError, _validation_error_handler)
    app.add_exception_handler(Exception, _unexpected_error_handler)

    prefix = settings.server.api_prefix
    app.include_router(events.router, prefix=prefix)
    app.include_router(playlists.router, prefix=prefix)
    app.include_router(health.router, prefix=prefix)
    return app
