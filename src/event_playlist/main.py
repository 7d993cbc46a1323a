#!/usr/bin/env python3
"""Main entry point for the event playlist service."""

from __future__ import annotations

import json
import logging
import logging.config
import sys
from pathlib import Path

from event_playlist.domain.shared.constants import ExitCodes
from event_playlist.domain.shared.messages import LogTemplates

_LOGGING_CONFIG_PATH = Path(__file__).resolve().parents[2] / "logging_config.json"


def setup_logging(log_level: str = "INFO") -> None:
    resolved_level = getattr(logging, log_level.upper(), logging.INFO)

    try:
        with open(_LOGGING_CONFIG_PATH) as f:
            config = json.load(f)
        logging.config.dictConfig(config)
    except (FileNotFoundError, json.JSONDecodeError, ValueError):
        logging.basicConfig(
            level=resolved_level,
            format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
        logging.warning(
            "Could not load %s, falling back to basic config", _LOGGING_CONFIG_PATH
        )

    logging.getLogger().setLevel(resolved_level)


def main() -> int:
    import uvicorn

    from event_playlist.config.container import create_container
    from event_playlist.config.settings import get_settings
    from event_playlist.infrastructure.http.app import create_app

    settings = get_settings()
    setup_logging(settings.log_level)

    logger = logging.getLogger(__name__)
    logger.info(LogTemplates.APP_STARTING.format(environment=settings.environment))

    container = create_container(settings)
    app = create_app(container)
    server = uvicorn.Server(
        uvicorn.Config(
            app,
            host=settings.server.host,
            port=settings.server.port,
            log_config=None,
            lifespan="on",
        )
    )

    def request_exit(exit_code: int) -> None:
        logger.critical(LogTemplates.APP_FATAL_ERROR, f"terminating with exit code {exit_code}")
        server.should_exit = True

    container.readiness.set_fatal_handler(request_exit)

    try:
        logger.info(LogTemplates.APP_LISTENING, settings.server.host, settings.server.port)
        server.run()
    except KeyboardInterrupt:
        logger.info(LogTemplates.APP_KEYBOARD_INTERRUPT)
        return 0
    except Exception as e:
        logger.exception(LogTemplates.APP_FATAL_ERROR, e)
        return 1

    if container.readiness.exit_code is not None:
        return container.readiness.exit_code
    if not server.started:
        return ExitCodes.INIT_FAILED
    return 0


def cli() -> None:
    """Console script entry point (used by pyproject.toml [project.scripts])."""
    sys.exit(main())


if __name__ == "__main__":
    cli()  # pragma: no cover
