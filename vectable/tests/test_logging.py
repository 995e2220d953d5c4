"""
Structured Logging Tests
"""

from __future__ import annotations

import io
import json
import logging

import pytest

from vectable.collection import CollectionManager
from vectable.observability.logging import (
    JsonFormatter,
    LogLevel,
    current_context,
    log_context,
    setup_logging,
)
from vectable.storage.memory import InMemoryBackend


@pytest.fixture
def json_stream():
    stream = io.StringIO()
    root = logging.getLogger()
    saved_handlers, saved_level = list(root.handlers), root.level
    setup_logging(LogLevel.DEBUG, json_output=True, stream=stream)
    yield stream
    root.handlers[:] = saved_handlers
    root.setLevel(saved_level)


def _records(stream: io.StringIO) -> list[dict]:
    return [json.loads(line) for line in stream.getvalue().splitlines() if line]


class TestJsonFormatter:
    """JSON output shape."""

    def test_fields_and_extras(self, json_stream):
        logging.getLogger("vectable.test").info("hello %s", "world", extra={"id": 7})

        (record,) = _records(json_stream)
        assert record["message"] == "hello world"
        assert record["level"] == "INFO"
        assert record["logger"] == "vectable.test"
        assert record["id"] == 7
        assert "@timestamp" in record

    def test_extra_overrides_context(self, json_stream):
        with log_context(collection="docs", operation="search"):
            logging.getLogger("vectable.test").info("scoped", extra={"operation": "rerank"})

        (record,) = _records(json_stream)
        assert record["collection"] == "docs"
        assert record["operation"] == "rerank"
        assert record["message"] == "scoped"

    def test_exception_captured(self, json_stream):
        try:
            raise ValueError("bad")
        except ValueError:
            logging.getLogger("vectable.test").exception("failed")

        (record,) = _records(json_stream)
        assert "ValueError: bad" in record["exception"]

    def test_plain_formatter(self):
        stream = io.StringIO()
        root = logging.getLogger()
        saved_handlers, saved_level = list(root.handlers), root.level
        try:
            setup_logging("warning", json_output=False, stream=stream)
            logging.getLogger("vectable.test").warning("plain")
            assert not isinstance(root.handlers[0].formatter, JsonFormatter)
            assert "| WARNING  | vectable.test | plain" in stream.getvalue()
        finally:
            root.handlers[:] = saved_handlers
            root.setLevel(saved_level)


class TestLogContext:
    """Request-scoped fields."""

    def test_fields_added_and_restored(self, json_stream):
        logger = logging.getLogger("vectable.test")
        with log_context(collection="docs"):
            with log_context(operation="search"):
                assert current_context() == {"collection": "docs", "operation": "search"}
                logger.info("inner")
            logger.info("outer")
        logger.info("after")

        inner, outer, after = _records(json_stream)
        assert inner["collection"] == "docs" and inner["operation"] == "search"
        assert outer["collection"] == "docs" and "operation" not in outer
        assert "collection" not in after
        assert current_context() == {}

    def test_manager_logs_carry_collection(self, json_stream):
        manager = CollectionManager(InMemoryBackend())
        manager.create("docs", 4).unwrap()

        created = [r for r in _records(json_stream) if r["message"] == "Collection created"]
        assert created[0]["collection"] == "docs"
        assert created[0]["operation"] == "create"
        assert created[0]["dimension"] == 4

    def test_rollback_logged_at_warning(self, json_stream):
        manager = CollectionManager(InMemoryBackend())
        manager.create("docs", 4).unwrap()
        manager.create("docs", 4)

        warnings = [r for r in _records(json_stream) if r["level"] == "WARNING"]
        assert warnings[0]["message"] == "Rolling back create"
