"""
tests/test_logging.py

Formatter JSON et logger structuré.
"""
import json
import logging

from app.core.logging import (
    MAX_TRACE_ID_LENGTH,
    JSONFormatter,
    StructuredLogger,
    get_trace_id,
    set_trace_id,
)


class ListHandler(logging.Handler):
    def __init__(self):
        super().__init__()
        self.records = []

    def emit(self, record):
        self.records.append(record)


def _capture(name):
    handler = ListHandler()
    log = logging.getLogger(name)
    log.addHandler(handler)
    log.setLevel(logging.DEBUG)
    return handler


def test_bookmark_saved_is_structured():
    handler = _capture("test.bookmarks.saved")
    set_trace_id("trace-01")

    StructuredLogger("test.bookmarks.saved").bookmark_saved("user-1", "deal-1", 42)

    data = json.loads(JSONFormatter().format(handler.records[0]))
    assert data["message"] == "bookmark_saved"
    assert data["level"] == "INFO"
    assert data["user_id"] == "user-1"
    assert data["deal_id"] == "deal-1"
    assert data["trace_id"] == "trace-01"
    assert data["extra"] == {"bookmark_id": 42}


def test_counter_error_carries_error_type():
    handler = _capture("test.bookmarks.counter")

    StructuredLogger("test.bookmarks.counter").counter_error("deal-9", -1, RuntimeError("db gone"))

    data = json.loads(JSONFormatter().format(handler.records[0]))
    assert data["level"] == "ERROR"
    assert data["error_type"] == "RuntimeError"
    assert data["extra"] == {"delta": -1}
    assert "exception" not in data


def test_client_trace_id_is_truncated():
    assert set_trace_id("x" * 500) == "x" * MAX_TRACE_ID_LENGTH
    assert get_trace_id() == "x" * MAX_TRACE_ID_LENGTH


def test_empty_trace_id_is_generated():
    assert len(set_trace_id("")) == 8
