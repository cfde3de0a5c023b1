import logging
import sys
from typing import Any, Optional, TextIO

import structlog
from structlog.types import Processor

from gitsmart.core.config import settings
from gitsmart.infrastructure.logging_processors import (add_service_context,
                                                        set_log_severity)


SERVER_LOGGERS = ("uvicorn", "uvicorn.access", "uvicorn.error")


def _build_renderer(log_format: str) -> Processor:
    if log_format == "json":
        return structlog.processors.JSONRenderer()
    return structlog.dev.ConsoleRenderer(colors=sys.stdout.isatty())


def _route_server_loggers(handler: logging.Handler, level: int) -> None:
    # uvicorn installs its own handlers; send its records through ours instead
    for name in SERVER_LOGGERS:
        server_logger = logging.getLogger(name)
        server_logger.handlers[:] = [handler]
        server_logger.setLevel(level)
        server_logger.propagate = False


def setup_logging(
    log_level: Optional[str] = None,
    log_format: Optional[str] = None,
    stream: Optional[TextIO] = None,
) -> logging.Handler:
    """Send structlog events and stdlib records through one stdout handler.

    Level and format default to the process settings. The installed handler
    is returned so callers can detach it again.
    """
    level = getattr(logging, log_level or settings.log_level)
    chain: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        add_service_context,
        structlog.processors.add_log_level,
        set_log_severity,
        structlog.processors.TimeStamper(fmt="iso"),
    ]

    structlog.configure(
        processors=[*chain, structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    handler = logging.StreamHandler(stream or sys.stdout)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            foreign_pre_chain=chain,
            processors=[
                structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                _build_renderer(log_format or settings.log_format),
            ],
        )
    )

    root = logging.getLogger()
    root.handlers[:] = [handler]
    root.setLevel(level)
    _route_server_loggers(handler, level)
    return handler


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    return structlog.get_logger(name)


def bind_context(**kwargs: Any) -> None:
    structlog.contextvars.bind_contextvars(**kwargs)


def clear_context() -> None:
    structlog.contextvars.clear_contextvars()
