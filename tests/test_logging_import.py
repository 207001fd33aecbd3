"""
Test that suiwallet_logging can be imported without circular import and logger works,
and that the history event sinks forward to it.
"""

from __future__ import annotations

import pytest

from backend_suiwallet.history.events import (
    HistoryEventSink,
    LoggingEventSink,
    NullEventSink,
)


def test_logging_import():
    """Import get_logger from suiwallet_logging and use the logger."""
    from backend_suiwallet.suiwallet_logging import bind_address, get_logger

    logger = get_logger("test")
    assert logger is not None
    assert hasattr(logger, "info")
    assert hasattr(logger, "debug")
    assert hasattr(logger, "warning")
    assert hasattr(logger, "error")
    # Smoke test: call info (should not raise)
    logger.info("test_message", key="value")
    bind_address("0xabc").info("test_bound_message")


def test_logging_event_sink_routes_levels(monkeypatch):
    """Failure events go to warning, progress events to info."""
    calls = []

    class _Recorder:
        def info(self, event, **fields):
            calls.append(("info", event, fields))

        def warning(self, event, **fields):
            calls.append(("warning", event, fields))

    sink = LoggingEventSink()
    monkeypatch.setattr(sink, "_logger", _Recorder())
    sink.emit("history_batch_hydrated", batch=0, hydrated=3)
    sink.emit("history_direction_failed", direction="to", error="boom")

    assert calls == [
        ("info", "history_batch_hydrated", {"batch": 0, "hydrated": 3}),
        ("warning", "history_direction_failed", {"direction": "to", "error": "boom"}),
    ]


def test_null_sink_and_base_sink():
    NullEventSink().emit("anything", x=1)
    with pytest.raises(TypeError):
        HistoryEventSink()
