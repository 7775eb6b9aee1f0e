"""
Tests for arcade_ledger.logging_config.

Tests cover:
- JSON formatting of records with context and extra fields
- ContextFilter and LogContext handling of request/sender context
- setup_logging handler installation
"""
from __future__ import annotations

import json
import logging

import pytest

from arcade_ledger.logging_config import (
    ContextFilter,
    LogContext,
    StructuredFormatter,
    generate_request_id,
    request_id_var,
    sender_var,
    setup_logging,
)


def _record(message="hello", **extra):
    record = logging.LogRecord(
        name="arcade_ledger.test",
        level=logging.INFO,
        pathname=__file__,
        lineno=10,
        msg=message,
        args=(),
        exc_info=None,
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


@pytest.fixture
def restore_root_logger():
    root = logging.getLogger()
    handlers = root.handlers[:]
    level = root.level
    yield root
    for handler in root.handlers[:]:
        root.removeHandler(handler)
        handler.close()
    for handler in handlers:
        root.addHandler(handler)
    root.setLevel(level)


class TestStructuredFormatter:
    """Tests for the JSON formatter."""

    def test_basic_fields(self):
        data = json.loads(StructuredFormatter().format(_record()))

        assert data["message"] == "hello"
        assert data["level"] == "INFO"
        assert data["logger"] == "arcade_ledger.test"
        assert "timestamp" in data

    def test_context_fields(self):
        data = json.loads(StructuredFormatter().format(_record(request_id="req_1", sender="alice")))

        assert data["request_id"] == "req_1"
        assert data["sender"] == "alice"

    def test_extra_fields(self):
        data = json.loads(StructuredFormatter().format(_record(achievement_id=7)))

        assert data["achievement_id"] == 7

    def test_empty_context_omitted(self):
        data = json.loads(StructuredFormatter().format(_record(request_id=None, sender=None)))

        assert "request_id" not in data
        assert "sender" not in data


class TestLogContext:
    """Tests for context propagation."""

    def test_filter_reads_context(self):
        record = _record()
        with LogContext(request_id="req_abc", sender="bob"):
            ContextFilter().filter(record)

        assert record.request_id == "req_abc"
        assert record.sender == "bob"

    def test_context_restored(self):
        with LogContext(request_id="outer", sender="alice"):
            with LogContext(sender="bob"):
                assert request_id_var.get() == "outer"
                assert sender_var.get() == "bob"
            assert sender_var.get() == "alice"

        assert request_id_var.get() is None
        assert sender_var.get() is None

    def test_generate_request_id(self):
        request_id = generate_request_id()

        assert request_id.startswith("req_")
        assert request_id != generate_request_id()


class TestSetupLogging:
    """Tests for setup_logging."""

    def test_installs_console_handler(self, restore_root_logger):
        setup_logging(level="debug", json_format=True)

        root = restore_root_logger
        assert root.level == logging.DEBUG
        assert len(root.handlers) == 1
        assert isinstance(root.handlers[0].formatter, StructuredFormatter)

    def test_log_file(self, restore_root_logger, tmp_path):
        log_file = tmp_path / "ledger.log"

        setup_logging(level="INFO", json_format=True, log_file=str(log_file))
        with LogContext(sender="carol"):
            logging.getLogger("arcade_ledger.test").info("minted")
        for handler in restore_root_logger.handlers:
            handler.flush()

        line = json.loads(log_file.read_text().strip().splitlines()[-1])
        assert line["message"] == "minted"
        assert line["sender"] == "carol"

    def test_plain_format(self, restore_root_logger):
        setup_logging(level="WARNING", json_format=False)

        assert not isinstance(restore_root_logger.handlers[0].formatter, StructuredFormatter)
