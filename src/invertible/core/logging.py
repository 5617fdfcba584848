# src/invertible/core/logging.py
"""Logging setup for applications that use invertible.

The library itself only emits debug events (see invertible.inversion)
and never configures logging on import. Call configure_logging() once
at startup to see them.
"""

import logging
import sys
from typing import Any

import structlog
from structlog.stdlib import ProcessorFormatter

from invertible.core.config import LoggingSettings


def configure_logging(settings: LoggingSettings | None = None) -> None:
    """Send structlog and stdlib records through one stdout handler.

    Both kinds of record are rendered by the same ProcessorFormatter, as
    JSON lines when ``settings.json_output`` is set, console text otherwise.
    """
    settings = settings or LoggingSettings()

    pre_chain: list[Any] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
    ]
    renderer: list[Any] = (
        [structlog.processors.format_exc_info, structlog.processors.JSONRenderer()]
        if settings.json_output
        else [structlog.dev.ConsoleRenderer(colors=False)]
    )

    structlog.configure(
        processors=[*pre_chain, ProcessorFormatter.wrap_for_formatter],
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        # Tests reconfigure between cases
        cache_logger_on_first_use=False,
    )

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(
        ProcessorFormatter(
            processors=[ProcessorFormatter.remove_processors_meta, *renderer],
            foreign_pre_chain=pre_chain,
        )
    )

    root = logging.getLogger()
    root.handlers = [handler]
    root.setLevel(settings.level)
