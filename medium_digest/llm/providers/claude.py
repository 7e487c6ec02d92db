"""Anthropic Messages API backend."""

from __future__ import annotations

import logging
from typing import Any

import httpx

from ...config import LoggingConfig
from ...core.types import BackendCredentials, SummaryRequest, SummaryResponse
from ...errors import DigestError, MissingCredential, ResponseParseFailure
from ...fetch.headers import HeaderValidator, validate_header_value
from ...logging_utils import log_event, redact_text, truncate_text
from ..tracing import record_span_error, set_span_output, start_span
from .http import build_backend_headers, post_json, require_str

logger = logging.getLogger(__name__)

DEFAULT_ENDPOINT = "https://api.anthropic.com/v1/messages"
DEFAULT_MODEL = "claude-3-haiku-20240307"
DEFAULT_SYSTEM_PROMPT = "can you summarize this as bullet point with english lang"
DEFAULT_API_VERSION = "2023-06-01"


class ClaudeBackend:
    """Summarizes article text with a Claude chat-completion model.

    Args:
        credentials: API key and Messages endpoint URL
        model: Model identifier
        system_prompt: Instruction text sent as the system prompt
        max_tokens: Output token ceiling
        api_version: Value of the ``anthropic-version`` header
        header_validator: Callable checking each header value before sending
        trust_env: Whether to respect system proxy settings for API requests
        transport: Optional httpx transport, used to stub the network in tests
        llm_logger: Optional JSONL logger for responses
        log_cfg: Logging config controlling LLM log detail and redaction

    Raises:
        MissingCredential: If no endpoint URL is given
    """

    name = "claude"

    def __init__(
        self,
        credentials: BackendCredentials,
        *,
        model: str = DEFAULT_MODEL,
        system_prompt: str = DEFAULT_SYSTEM_PROMPT,
        max_tokens: int = 1024,
        api_version: str = DEFAULT_API_VERSION,
        header_validator: HeaderValidator = validate_header_value,
        trust_env: bool = True,
        transport: httpx.AsyncBaseTransport | None = None,
        llm_logger: logging.Logger | None = None,
        log_cfg: LoggingConfig | None = None,
    ):
        if not credentials.endpoint_url:
            raise MissingCredential("endpoint_url", "Claude backend needs a Messages API URL")
        self.credentials = credentials
        self.model = model
        self.system_prompt = system_prompt
        self.max_tokens = max_tokens
        self.api_version = api_version
        self.header_validator = header_validator
        self.trust_env = trust_env
        self.transport = transport
        self.llm_logger = llm_logger
        self.log_cfg = log_cfg or LoggingConfig()

    def summary_request(self, content: str) -> SummaryRequest:
        return SummaryRequest(
            content=content,
            model=self.model,
            system_prompt=self.system_prompt,
            max_tokens=self.max_tokens,
        )

    def build_request_body(self, content: str) -> dict[str, Any]:
        req = self.summary_request(content)
        return {
            "model": req.model,
            "system": req.system_prompt,
            "max_tokens": req.max_tokens,
            "messages": [{"role": "user", "content": req.content}],
        }

    def build_headers(self) -> dict[str, str]:
        return build_backend_headers(
            {
                "x-api-key": self.credentials.api_key,
                "anthropic-version": self.api_version,
                "Content-Type": "application/json",
            },
            self.header_validator,
        )

    async def fetch_summary(self, content: str, timeout: float | None = None) -> SummaryResponse:
        headers = self.build_headers()
        payload = self.build_request_body(content)
        with start_span(
            "claude.fetch_summary",
            kind="llm",
            input_value=content,
            attributes={"llm.model": self.model, "llm.provider": self.name},
        ) as span:
            try:
                data = await post_json(
                    self.credentials.endpoint_url,
                    headers,
                    payload,
                    timeout=timeout,
                    trust_env=self.trust_env,
                    transport=self.transport,
                )
                summary = parse_response(data)
            except DigestError as exc:
                record_span_error(span, exc)
                self._log_llm_response("error", str(exc), content)
                raise
            set_span_output(span, summary.text)

        logger.info("Claude summary %s: %d segments from %s", summary.response_id, len(summary.segments), summary.model)
        self._log_llm_response("ok", summary.text, content)
        return summary

    def _log_llm_response(self, status: str, response: str, prompt: str) -> None:
        if self.llm_logger is None:
            return
        redaction = self.log_cfg.llm_log_redaction
        payload = {
            "event": "llm_summary_response",
            "status": status,
            "provider": self.name,
            "model": self.model,
            "raw_response": truncate_text(redact_text(response, redaction)),
        }
        if self.log_cfg.llm_log_detail == "prompt_response":
            payload["raw_prompt"] = truncate_text(redact_text(prompt, redaction))
        log_event(self.llm_logger, "LLM response", **payload)


def parse_response(data: Any) -> SummaryResponse:
    """Parse a Messages API response into a SummaryResponse.

    Content blocks without text (e.g. tool use blocks) are skipped.

    Raises:
        ResponseParseFailure: If required fields are missing or mistyped
    """
    if not isinstance(data, dict):
        raise ResponseParseFailure(f"expected JSON object, got {type(data).__name__}")
    blocks = data.get("content")
    if not isinstance(blocks, list):
        raise ResponseParseFailure("response field 'content' missing or not a list")
    segments = []
    for block in blocks:
        if not isinstance(block, dict):
            raise ResponseParseFailure("content block is not an object")
        text = block.get("text")
        if text is None:
            continue
        if not isinstance(text, str):
            raise ResponseParseFailure("content block 'text' is not a string")
        segments.append(text)
    return SummaryResponse(
        segments=tuple(segments),
        response_id=require_str(data, "id"),
        model=require_str(data, "model"),
    )
