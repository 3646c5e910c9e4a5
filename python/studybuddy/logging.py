"""structlog setup for the StudyBuddy API.

Every entry carries the request context bound by RequestIDMiddleware
(request_id, path, method) plus user_id once a handler resolves the acting
user. Entries logged outside a request carry none of these.

Usage:
    from studybuddy.logging import get_logger

    logger = get_logger(__name__)
    logger.info("material_created", material_id=3, user_id=1)
"""

import logging
import sys
from contextvars import ContextVar
from types import MappingProxyType
from typing import Mapping

import structlog

CONTEXT_FIELDS = ("request_id", "user_id", "path", "method")

_EMPTY: Mapping[str, str] = MappingProxyType({})

# Replaced, never mutated, so a copied context cannot leak writes back
_log_context: ContextVar[Mapping[str, str]] = ContextVar("studybuddy_log_context", default=_EMPTY)

QUIET_LOGGERS = ("httpx", "httpcore", "uvicorn.access")


def _bind(**values: str | None) -> None:
    merged = dict(_log_context.get())
    for key, value in values.items():
        if value is None:
            merged.pop(key, None)
        else:
            merged[key] = value
    _log_context.set(MappingProxyType(merged))


def add_request_context(logger: logging.Logger, method_name: str, event_dict: dict) -> dict:
    """structlog processor: copy the bound request context into the entry."""
    for key, value in _log_context.get().items():
        event_dict.setdefault(key, value)
    return event_dict


def configure_logging(json_format: bool = True, level: str = "INFO") -> None:
    """Route structlog and stdlib logging through one stdout handler.

    Args:
        json_format: JSONRenderer when True, ConsoleRenderer otherwise.
        level: Root log level name.
    """
    shared_processors = [
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        add_request_context,
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
    ]

    renderer = (
        structlog.processors.JSONRenderer() if json_format else structlog.dev.ConsoleRenderer()
    )

    structlog.configure(
        processors=[*shared_processors, structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            foreign_pre_chain=shared_processors,
            processors=[structlog.stdlib.ProcessorFormatter.remove_processors_meta, renderer],
        )
    )

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel(level.upper())

    # RequestIDMiddleware writes the access log
    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    return structlog.get_logger(name)


def set_request_context(
    request_id: str | None,
    path: str | None = None,
    method: str | None = None,
) -> None:
    """Start a fresh request context. Drops anything bound earlier."""
    _log_context.set(_EMPTY)
    _bind(request_id=request_id, path=path, method=method)


def set_user_context(user_id: int | None) -> None:
    """Tag the rest of this request's entries with the acting user."""
    _bind(user_id=str(user_id) if user_id is not None else None)


def clear_request_context() -> None:
    _log_context.set(_EMPTY)


def get_request_id() -> str | None:
    """Request ID of the request being handled, None outside a request."""
    return _log_context.get().get("request_id")
