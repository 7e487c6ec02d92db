"""Tests for logging setup, JSONL formatting and redaction helpers."""

from __future__ import annotations

import json
import logging

import httpx
import pytest

from medium_digest.config import LoggingConfig
from medium_digest.errors import NetworkFailure, TransportFailure
from medium_digest.logging_utils import (
    JsonlFormatter,
    log_event,
    log_failure,
    redact_text,
    setup_llm_logger,
    setup_logging,
    truncate_text,
)


@pytest.fixture
def restore_loggers():
    yield
    for name in ("medium_digest", "medium_digest.llm"):
        logger = logging.getLogger(name)
        for handler in logger.handlers:
            handler.close()
        logger.handlers = []
        logger.propagate = True
        logger.setLevel(logging.NOTSET)


def _read_jsonl(path):
    return [json.loads(line) for line in path.read_text(encoding="utf-8").splitlines()]


def test_jsonl_formatter_puts_run_context_first():
    record = logging.LogRecord("medium_digest.test", logging.INFO, __file__, 1, "hello %s", ("x",), None)
    record.chars = 42
    record.response_id = "msg_01"
    record.url = "https://medium.com/p/1"
    record.event = "pipeline_done"

    payload = json.loads(JsonlFormatter().format(record))

    assert list(payload) == [
        "timestamp",
        "level",
        "logger",
        "event",
        "url",
        "response_id",
        "message",
        "chars",
    ]
    assert payload["message"] == "hello x"
    assert payload["level"] == "INFO"
    assert "msg" not in payload
    assert "args" not in payload


def test_setup_logging_writes_jsonl_file(tmp_path, restore_loggers):
    cfg = LoggingConfig(console=False, file=True, format="jsonl", filename="run.jsonl")
    logger = setup_logging(cfg, tmp_path)

    log_event(
        logging.getLogger("medium_digest.pipeline"),
        "Pipeline start",
        event="pipeline_start",
        url="https://medium.com/p/1",
        backend=None,
    )
    for handler in logger.handlers:
        handler.flush()

    (entry,) = _read_jsonl(tmp_path / "run.jsonl")
    assert entry["event"] == "pipeline_start"
    assert entry["url"] == "https://medium.com/p/1"
    assert "backend" not in entry


def test_log_failure_records_stage_and_cause_chain(tmp_path, restore_loggers):
    cfg = LoggingConfig(console=False, file=True, format="jsonl", filename="run.jsonl")
    logger = setup_logging(cfg, tmp_path)
    request = httpx.Request("POST", "https://api.anthropic.com/v1/messages")
    connect = httpx.ConnectError("refused", request=request)
    error = TransportFailure("request failed", cause=NetworkFailure("refused", cause=connect))

    log_failure(logging.getLogger("medium_digest.pipeline"), error, "https://medium.com/p/1")
    for handler in logger.handlers:
        handler.flush()

    (entry,) = _read_jsonl(tmp_path / "run.jsonl")
    assert entry["level"] == "ERROR"
    assert entry["event"] == "pipeline_failed"
    assert entry["stage"] == "summarize"
    assert entry["error_chain"] == ["TransportFailure", "NetworkFailure", "ConnectError"]


def test_setup_llm_logger_is_disabled_by_default(tmp_path):
    assert setup_llm_logger(LoggingConfig(), tmp_path) is None


def test_setup_llm_logger_needs_a_directory(restore_loggers):
    assert setup_llm_logger(LoggingConfig(llm_log_enabled=True), None) is None


def test_log_event_ignores_missing_logger():
    log_event(None, "nothing", event="x")


@pytest.mark.parametrize(
    ("mode", "expected"),
    [
        ("none", "see https://medium.com/p/1 now"),
        ("redact_urls", "see [REDACTED_URL] now"),
        ("redact_content", ""),
    ],
)
def test_redact_text_modes(mode, expected):
    assert redact_text("see https://medium.com/p/1 now", mode) == expected


def test_truncate_text():
    assert truncate_text("short", 10) == "short"
    assert truncate_text("x" * 12, 10) == "x" * 10 + "...(truncated)"
