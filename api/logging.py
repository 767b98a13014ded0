"""Structured logging configuration shared by the API and the CLI."""

import logging
import sys
from typing import IO, Any

import structlog

from api.config import get_settings

SERVICE_NAME = "ontologizer"

# Libraries that log every outbound request; one analysis makes dozens
QUIET_LOGGERS = ("httpx", "httpcore", "uvicorn.access")


def _add_service(_logger: Any, _method: str, event_dict: dict[str, Any]) -> dict[str, Any]:
    event_dict.setdefault("service", SERVICE_NAME)
    return event_dict


def setup_logging(stream: IO[str] | None = None) -> None:
    """
    Configure structlog and stdlib logging.

    Args:
        stream: Destination for log lines, stdout by default. The CLI
            passes stderr so its stdout carries only the JSON result.
    """
    settings = get_settings()
    stream = stream or sys.stdout
    log_level = getattr(logging, settings.log_level.upper(), logging.INFO)

    processors: list[Any] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        _add_service,
        structlog.processors.TimeStamper(fmt="iso"),
    ]

    if settings.is_production:
        processors += [
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ]
    else:
        processors += [
            structlog.processors.StackInfoRenderer(),
            structlog.dev.set_exc_info,
            structlog.dev.ConsoleRenderer(
                colors=stream.isatty() and not settings.is_test,
                exception_formatter=structlog.dev.plain_traceback,
            ),
        ]

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=stream),
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(format="%(message)s", stream=stream, level=log_level, force=True)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
