"""
Logging setup for digest runs.

Console output goes through Rich. An optional run log and a separate LLM
response log are written as JSON lines, one object per event, so a run can be
followed by its ``event`` names (``pipeline_start``, ``content_extracted``,
``pipeline_done``, ``pipeline_failed``, ``llm_summary_response``) and joined
on ``url`` and ``response_id``.
"""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from pathlib import Path
import re
from typing import Any

from rich.logging import RichHandler

from .config import LoggingConfig
from .errors import DigestError


_URL_RE = re.compile(r"https?://\S+")
_ROOT_LOGGER = "medium_digest"

# Emitted right after the base fields, in this order, when a record carries them.
_CONTEXT_FIELDS = ("event", "url", "stage", "response_id")


def setup_logging(cfg: LoggingConfig, log_dir: Path | None) -> logging.Logger:
    logger = logging.getLogger(_ROOT_LOGGER)
    logger.setLevel(_level_from_string(cfg.level))
    logger.handlers = []
    logger.propagate = False

    if cfg.console:
        console_handler = RichHandler(rich_tracebacks=True, show_time=False, show_level=True)
        console_handler.setLevel(_level_from_string(cfg.level))
        console_handler.setFormatter(logging.Formatter("%(message)s"))
        logger.addHandler(console_handler)

    if cfg.file and log_dir is not None:
        log_dir.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_dir / cfg.filename, encoding="utf-8")
        file_handler.setLevel(_level_from_string(cfg.level))
        file_handler.setFormatter(_build_file_formatter(cfg.format))
        logger.addHandler(file_handler)

    return logger


def setup_llm_logger(cfg: LoggingConfig, log_dir: Path | None) -> logging.Logger | None:
    """Return the JSONL logger for backend responses, or None when disabled."""
    if not cfg.llm_log_enabled or log_dir is None:
        return None

    logger = logging.getLogger(f"{_ROOT_LOGGER}.llm")
    logger.setLevel(_level_from_string(cfg.level))
    logger.handlers = []
    logger.propagate = False

    log_dir.mkdir(parents=True, exist_ok=True)
    file_handler = logging.FileHandler(log_dir / cfg.llm_log_file, encoding="utf-8")
    file_handler.setLevel(_level_from_string(cfg.level))
    file_handler.setFormatter(JsonlFormatter())
    logger.addHandler(file_handler)
    return logger


def log_event(
    logger: logging.Logger | None,
    message: str,
    *,
    event: str,
    level: int = logging.INFO,
    **fields: Any,
) -> None:
    """Log a named pipeline event; fields set to None are left out."""
    if logger is None:
        return
    extra = {key: value for key, value in fields.items() if value is not None}
    extra["event"] = event
    logger.log(level, message, extra=extra)


def log_failure(logger: logging.Logger | None, exc: DigestError, url: str | None = None) -> None:
    """Log a failed run with its stage and the type of every wrapped cause."""
    log_event(
        logger,
        f"Pipeline failed at {exc.stage} stage: {exc}",
        event="pipeline_failed",
        level=logging.ERROR,
        url=url,
        stage=exc.stage,
        error_chain=[type(err).__name__ for err in exc.chain()],
    )


def redact_text(text: str, mode: str) -> str:
    if mode == "redact_content":
        return ""
    if mode == "redact_urls":
        return _URL_RE.sub("[REDACTED_URL]", text)
    return text


def truncate_text(text: str, max_chars: int = 20000) -> str:
    if len(text) <= max_chars:
        return text
    return text[:max_chars] + "...(truncated)"


class JsonlFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
        }
        extras = _extract_extras(record)
        for key in _CONTEXT_FIELDS:
            if key in extras:
                payload[key] = extras.pop(key)
        payload["message"] = record.getMessage()
        payload.update(extras)
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=True, default=str)


# Attributes every LogRecord carries; anything else came in through extra=.
_RESERVED = set(logging.LogRecord("", 0, "", 0, "", (), None).__dict__) | {"message", "asctime"}


def _extract_extras(record: logging.LogRecord) -> dict[str, Any]:
    return {key: value for key, value in record.__dict__.items() if key not in _RESERVED}


def _build_file_formatter(fmt: str) -> logging.Formatter:
    if fmt == "jsonl":
        return JsonlFormatter()
    return logging.Formatter("%(asctime)s %(levelname)s %(name)s %(message)s")


def _level_from_string(level: str) -> int:
    return getattr(logging, level.upper(), logging.INFO)
