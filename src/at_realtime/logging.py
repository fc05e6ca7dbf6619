"""Structured logging for the realtime client.

Library modules only call :func:`get_logger`. Applications embedding the
client call :func:`setup_logging` once at startup to route those events
through the stdlib root logger.
"""

from __future__ import annotations

import logging
import sys
from collections.abc import Iterator
from contextlib import contextmanager
from typing import TYPE_CHECKING, Any

import structlog

if TYPE_CHECKING:
    from structlog.types import Processor

from at_realtime.config import Settings, get_settings

# Transport libraries that log every request at INFO
QUIET_LOGGERS = ("httpx", "httpcore")


def _renderer_for(settings: Settings) -> tuple[list[Processor], Processor]:
    """Pick the final renderer plus any processors it needs beforehand."""
    if settings.environment == "development":
        return [], structlog.dev.ConsoleRenderer(colors=True)
    return [structlog.processors.format_exc_info], structlog.processors.JSONRenderer()


def setup_logging(settings: Settings | None = None) -> None:
    """Configure structlog and the stdlib root logger.

    Args:
        settings: Settings to read the environment, log level and debug flag
            from. Defaults to the cached process settings.
    """
    settings = settings or get_settings()
    extra_processors, renderer = _renderer_for(settings)

    shared_processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
        *extra_processors,
    ]

    structlog.configure(
        processors=[
            *shared_processors,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            foreign_pre_chain=shared_processors,
            processors=[
                structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                renderer,
            ],
        )
    )

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel(settings.log_level.upper())

    transport_level = logging.DEBUG if settings.debug else logging.WARNING
    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(transport_level)


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    """Get a structured logger instance."""
    return structlog.stdlib.get_logger(name)


@contextmanager
def poll_context(poll_id: str, **fields: Any) -> Iterator[None]:
    """Attach ``poll_id`` (and any extra fields) to every event logged inside the block.

    Tasks created inside the block inherit the binding. On exit the
    previous values are restored, so context bound by the caller survives.
    """
    with structlog.contextvars.bound_contextvars(poll_id=poll_id, **fields):
        yield
