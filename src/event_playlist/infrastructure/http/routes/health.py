"""Readiness, liveness and diagnostic routes."""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from event_playlist.config.container import Container
from event_playlist.domain.shared.constants import StoreCaches
from event_playlist.infrastructure.http.dependencies import get_container

router = APIRouter(tags=["health"])

DUMP_BATCH_SIZE = 10


def _readiness_response(container: Container) -> JSONResponse:
    readiness = container.readiness
    status = 200 if readiness.datagrid_client else 500
    return JSONResponse(status_code=status, content=readiness.to_wire())


@router.get("/ready")
async def ready(container: Container = Depends(get_container)) -> JSONResponse:
    return _readiness_response(container)


@router.get("/health")
async def health(container: Container = Depends(get_container)) -> JSONResponse:
    return _readiness_response(container)


@router.get("/internal/dump")
async def dump(container: Container = Depends(get_container)) -> list[dict[str, Any]]:
    """Every raw event record in the store."""
    return [
        value
        async for _, value in container.store.iterate(StoreCaches.EVENTS, DUMP_BATCH_SIZE)
    ]
