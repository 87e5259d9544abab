"""Tests for the structured logging configuration."""

from __future__ import annotations

import json
import logging
import sys

import pytest

from pump_trainer.logging_config import (
    JSONFormatter,
    _ContextFilter,
    generate_request_id,
    mint_ctx,
    request_id_ctx,
    setup_logging,
)


def _record(msg="hi", level=logging.INFO, exc_info=None, name="test"):
    return logging.LogRecord(
        name=name, level=level, pathname="", lineno=0,
        msg=msg, args=(), exc_info=exc_info,
    )


@pytest.fixture
def restore_root():
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield root
    root.handlers[:] = handlers
    root.setLevel(level)


class TestGenerateRequestId:

    def test_length(self):
        assert len(generate_request_id()) == 12

    def test_hex_chars(self):
        assert all(c in "0123456789abcdef" for c in generate_request_id())

    def test_unique(self):
        ids = {generate_request_id() for _ in range(100)}
        assert len(ids) == 100  # all unique


class TestContextFilter:

    def test_injects_context(self):
        rid_token = request_id_ctx.set("abc123")
        mint_token = mint_ctx.set("7dmpjtmtkRNu")
        try:
            record = _record()
            _ContextFilter().filter(record)
        finally:
            request_id_ctx.reset(rid_token)
            mint_ctx.reset(mint_token)
        assert record.request_id == "abc123"  # type: ignore[attr-defined]
        assert record.mint == "7dmpjtmtkRNu"  # type: ignore[attr-defined]

    def test_default_dash(self):
        record = _record()
        _ContextFilter().filter(record)
        assert record.mint == "-"  # type: ignore[attr-defined]


class TestJSONFormatter:

    def test_basic_output(self):
        token = request_id_ctx.set("test999")
        try:
            data = json.loads(JSONFormatter().format(
                _record("something happened", logging.WARNING, name="mylogger")
            ))
        finally:
            request_id_ctx.reset(token)
        assert data["level"] == "WARNING"
        assert data["logger"] == "mylogger"
        assert data["msg"] == "something happened"
        assert data["request_id"] == "test999"
        assert data["mint"] == "-"

    def test_exception_included(self):
        try:
            raise ValueError("boom")
        except ValueError:
            record = _record("fail", logging.ERROR, exc_info=sys.exc_info(), name="err")
        data = json.loads(JSONFormatter().format(record))
        assert "ValueError" in data["exception"]


class TestSetupLogging:

    def test_text_format_to_stderr(self, restore_root):
        setup_logging(level="debug", fmt="text")
        assert restore_root.level == logging.DEBUG
        assert len(restore_root.handlers) == 1
        handler = restore_root.handlers[0]
        assert handler.stream is sys.stderr
        assert not isinstance(handler.formatter, JSONFormatter)

    def test_json_format(self, restore_root):
        setup_logging(level="WARNING", fmt="json")
        assert restore_root.level == logging.WARNING
        assert isinstance(restore_root.handlers[0].formatter, JSONFormatter)

    def test_unknown_level_defaults_to_info(self, restore_root):
        setup_logging(level="chatty")
        assert restore_root.level == logging.INFO
