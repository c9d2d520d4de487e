"""Structured logging setup using structlog.

Every alert-stream event is a snake_case name plus keyword fields. Service
entry points bind the organization id with :func:`organization_context`,
so nested fetch/fan-out/history events carry ``org_id`` without threading
it through every call.
"""

from __future__ import annotations

import logging
import sys
from collections.abc import Iterator
from contextlib import contextmanager

import structlog

from meraki_alerts.core.config import get_settings

# Third-party loggers that report every request at INFO
_NOISY_LOGGERS: tuple[str, ...] = ("httpx", "httpcore")


def _renderer(fmt: str) -> structlog.types.Processor:
    if fmt == "console":
        return structlog.dev.ConsoleRenderer()
    return structlog.processors.JSONRenderer()


def setup_logging(level: str | None = None, fmt: str | None = None) -> None:
    """Route structlog through stdlib logging on stderr.

    Args:
        level: Log level override (e.g. "DEBUG"). Uses config if None.
        fmt: Renderer override ("json" or "console"). Uses config if None.
    """
    cfg = get_settings().logging
    log_level = logging.getLevelName((level or cfg.level).upper())
    if not isinstance(log_level, int):
        log_level = logging.INFO

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(structlog.stdlib.ProcessorFormatter(
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            _renderer(fmt or cfg.format),
        ],
    ))

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel(log_level)

    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(log_level, logging.WARNING))


@contextmanager
def organization_context(organization_id: str) -> Iterator[None]:
    """Bind ``org_id`` to every log event emitted inside the block."""
    with structlog.contextvars.bound_contextvars(org_id=organization_id):
        yield
