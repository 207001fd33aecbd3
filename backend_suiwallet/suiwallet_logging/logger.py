"""
Structured logging for the history pipeline, RPC client and API.

Every record carries event_type (the first positional argument), level,
logger name and an ISO-8601 UTC timestamp, plus the key/value context the
call site passes (address, digest, page, batch, ...).

LOG_LEVEL (default INFO) and LOG_FORMAT (default json; any other value
selects the console renderer) are read when logging is configured.
Output goes to stderr so CLI JSON on stdout stays machine-readable.

Depends only on stdlib logging and structlog so any module can import it.
"""

from __future__ import annotations

import logging
import os
import sys
from typing import Any

import structlog


def _level_from_name(name: str | None) -> int:
    value = getattr(logging, (name or "INFO").strip().upper(), None)
    return value if isinstance(value, int) else logging.INFO


def _normalize_event(
    logger: Any,
    method_name: str,
    event_dict: dict[str, Any],
) -> dict[str, Any]:
    """structlog 'event' -> event_type; message mirrors it when absent."""
    if "event" in event_dict and "event_type" not in event_dict:
        event_dict["event_type"] = event_dict.pop("event")
    if "message" not in event_dict and "event_type" in event_dict:
        event_dict["message"] = str(event_dict["event_type"])
    return event_dict


def configure_structlog(level: str | None = None, fmt: str | None = None) -> None:
    """
    Configure structlog for the process.

    Args:
        level: Log level name; defaults to LOG_LEVEL.
        fmt: "json", or anything else for console output; defaults to LOG_FORMAT.
    """
    level_value = _level_from_name(level or os.getenv("LOG_LEVEL"))
    output = (fmt or os.getenv("LOG_FORMAT") or "json").strip().lower()

    processors: list[Any] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.TimeStamper(fmt="iso", utc=True, key="timestamp"),
        _normalize_event,
    ]
    if output == "json":
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty()))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(level_value),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=True,
    )


if not structlog.is_configured():
    configure_structlog()


def get_logger(name: str) -> structlog.BoundLogger:
    """
    Structured logger bound to a module name.

        logger = get_logger(__name__)
        logger.info("history_page_built", address=addr, page=2, entries=10)

    JSON output:
        {"event_type": "history_page_built", "address": "...", "page": 2,
         "entries": 10, "level": "info", "logger": "...", "timestamp": "..."}
    """
    return structlog.get_logger(name).bind(logger=name)


def bind_address(address: str) -> structlog.BoundLogger:
    """Logger with address bound to every subsequent call."""
    return get_logger("backend_suiwallet").bind(address=address)
