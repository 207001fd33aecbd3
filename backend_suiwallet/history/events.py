"""
Observability hooks for the history pipeline.

The pipeline reports progress through an injected sink instead of logging
directly, so tests can assert on events without capturing log output.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any

from backend_suiwallet.suiwallet_logging import get_logger

_WARNING_EVENTS = frozenset({
    "history_direction_failed",
    "history_batch_failed",
    "history_record_skipped",
    "history_page_failed",
})


class HistoryEventSink(ABC):
    """Receives named pipeline events with key/value fields."""

    @abstractmethod
    def emit(self, event: str, **fields: Any) -> None:
        ...


class NullEventSink(HistoryEventSink):
    def emit(self, event: str, **fields: Any) -> None:
        return None


class LoggingEventSink(HistoryEventSink):
    """Forward events to structlog; failure events at warning level."""

    def __init__(self, name: str = "backend_suiwallet.history") -> None:
        self._logger = get_logger(name)

    def emit(self, event: str, **fields: Any) -> None:
        if event in _WARNING_EVENTS:
            self._logger.warning(event, **fields)
        else:
            self._logger.info(event, **fields)
