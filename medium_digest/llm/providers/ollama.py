"""Locally hosted model backend speaking Ollama's /api/chat protocol."""

from __future__ import annotations

import logging
from typing import Any

import httpx

from ...core.types import BackendCredentials, SummaryRequest, SummaryResponse
from ...errors import DigestError, MissingCredential, ResponseParseFailure
from ...fetch.headers import HeaderValidator, validate_header_value
from ..tracing import record_span_error, set_span_output, start_span
from .http import build_backend_headers, post_json, require_str

logger = logging.getLogger(__name__)

DEFAULT_ENDPOINT = "http://localhost:11434/api/chat"
DEFAULT_MODEL = "llama3"


class OllamaBackend:
    """Summarizes article text with a model served by a local Ollama instance.

    The API key is optional; when set it is sent as a bearer token, which is
    what reverse proxies in front of Ollama usually expect.
    """

    name = "ollama"

    def __init__(
        self,
        credentials: BackendCredentials,
        *,
        model: str = DEFAULT_MODEL,
        system_prompt: str = "Summarize this article as bullet points in English.",
        max_tokens: int = 1024,
        header_validator: HeaderValidator = validate_header_value,
        trust_env: bool = True,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        if not credentials.endpoint_url:
            raise MissingCredential("endpoint_url", "Ollama backend needs a /api/chat URL")
        self.credentials = credentials
        self.model = model
        self.system_prompt = system_prompt
        self.max_tokens = max_tokens
        self.header_validator = header_validator
        self.trust_env = trust_env
        self.transport = transport

    def build_request_body(self, content: str) -> dict[str, Any]:
        req = SummaryRequest(
            content=content,
            model=self.model,
            system_prompt=self.system_prompt,
            max_tokens=self.max_tokens,
        )
        return {
            "model": req.model,
            "messages": [
                {"role": "system", "content": req.system_prompt},
                {"role": "user", "content": req.content},
            ],
            "stream": False,
            "options": {"num_predict": req.max_tokens},
        }

    def build_headers(self) -> dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self.credentials.api_key:
            headers["Authorization"] = f"Bearer {self.credentials.api_key}"
        return build_backend_headers(headers, self.header_validator)

    async def fetch_summary(self, content: str, timeout: float | None = None) -> SummaryResponse:
        headers = self.build_headers()
        payload = self.build_request_body(content)
        with start_span(
            "ollama.fetch_summary",
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
                raise
            set_span_output(span, summary.text)
        logger.info("Ollama summary from %s: %d chars", summary.model, len(summary.text))
        return summary


def parse_response(data: Any) -> SummaryResponse:
    if not isinstance(data, dict):
        raise ResponseParseFailure(f"expected JSON object, got {type(data).__name__}")
    message = data.get("message")
    if not isinstance(message, dict):
        raise ResponseParseFailure("response field 'message' missing or not an object")
    return SummaryResponse(
        segments=(require_str(message, "content"),),
        response_id=str(data.get("created_at") or ""),
        model=require_str(data, "model"),
    )
