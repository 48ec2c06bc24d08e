"""Structured logging configuration using structlog."""

import logging
import os
import sys
from typing import Any

import structlog

_REQUEST_KEYS = ("request_id", "actor_id", "actor_role")


def _resolve_level(level: str | None) -> int:
    name = (level or os.getenv("LOG_LEVEL", "INFO")).upper()
    return getattr(logging, name, logging.INFO)


def configure_logging(
    level: str | None = None,
    json_format: bool | None = None,
    service_name: str = "newsroom",
) -> None:
    """
    Configure structured logging for the service.

    Args:
        level: Log level name; falls back to LOG_LEVEL (default INFO)
        json_format: JSON lines when True, coloured console output when False;
            falls back to LOG_FORMAT ("json" unless set to "console")
        service_name: Bound on every event as ``service``
    """
    log_level = _resolve_level(level)
    if json_format is None:
        json_format = os.getenv("LOG_FORMAT", "json").lower() == "json"

    logging.basicConfig(format="%(message)s", stream=sys.stdout, level=log_level)

    processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
    ]
    if json_format:
        processors += [
            structlog.processors.dict_tracebacks,
            structlog.processors.JSONRenderer(),
        ]
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=True))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )

    structlog.contextvars.clear_contextvars()
    structlog.contextvars.bind_contextvars(service=service_name)


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    """Get a structured logger instance."""
    return structlog.get_logger(name)


def bind_request_context(request_id: str, **kwargs: Any) -> None:
    """Bind the request id (and any extra keys) to subsequent log events."""
    structlog.contextvars.bind_contextvars(request_id=request_id, **kwargs)


def bind_actor(actor_id: str, actor_role: str | None) -> None:
    """Attach the acting user to the current request's log context."""
    structlog.contextvars.bind_contextvars(actor_id=actor_id, actor_role=actor_role)


def clear_request_context() -> None:
    """Drop request-scoped keys; the service binding survives."""
    structlog.contextvars.unbind_contextvars(*_REQUEST_KEYS)
