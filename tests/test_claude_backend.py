"""Tests for the Claude summarization backend."""

from __future__ import annotations

import asyncio
import json
import logging

import httpx
import pytest

from medium_digest.config import LoggingConfig
from medium_digest.core.types import BackendCredentials, FetchResult
from medium_digest.errors import (
    HeaderConstructionFailure,
    InvalidHeaderValue,
    MissingCredential,
    NetworkFailure,
    ResponseParseFailure,
    SummaryError,
    TransportFailure,
)
from medium_digest.fetch.extractor import extract_content
from medium_digest.fetch.headers import validate_non_empty_header_value
from medium_digest.llm.providers.base import SummaryBackend
from medium_digest.llm.providers.claude import ClaudeBackend, parse_response

ENDPOINT = "https://api.anthropic.com/v1/messages"
CREDENTIALS = BackendCredentials(api_key="sk-test", endpoint_url=ENDPOINT)

OK_RESPONSE = {
    "id": "msg_01",
    "type": "message",
    "model": "claude-3-haiku-20240307",
    "content": [
        {"type": "text", "text": "- first point"},
        {"type": "text", "text": "- second point"},
    ],
}


def _counting_transport(handler):
    calls: list[httpx.Request] = []

    def wrapped(request: httpx.Request):
        calls.append(request)
        return handler(request)

    return httpx.MockTransport(wrapped), calls


def test_claude_backend_satisfies_summary_backend_protocol():
    assert isinstance(ClaudeBackend(CREDENTIALS), SummaryBackend)


def test_build_request_body_is_pure_and_keeps_content_exact():
    backend = ClaudeBackend(CREDENTIALS, max_tokens=512)
    content = 'Line one\nLine "two" — café 日本語 \\ end'

    first = backend.build_request_body(content)
    second = backend.build_request_body(content)

    assert first == second
    assert json.dumps(first).encode() == json.dumps(second).encode()
    assert first["messages"] == [{"role": "user", "content": content}]
    assert first["model"] == "claude-3-haiku-20240307"
    assert first["max_tokens"] == 512
    assert first["system"] == backend.system_prompt


def test_fetch_summary_posts_payload_and_parses_segments():
    def handler(request: httpx.Request):
        return httpx.Response(200, json=OK_RESPONSE)

    transport, calls = _counting_transport(handler)
    backend = ClaudeBackend(CREDENTIALS, transport=transport)

    summary = asyncio.run(backend.fetch_summary("Hello World"))

    assert len(calls) == 1
    request = calls[0]
    assert request.method == "POST"
    assert str(request.url) == ENDPOINT
    assert request.headers["x-api-key"] == "sk-test"
    assert request.headers["anthropic-version"] == "2023-06-01"
    assert request.headers["content-type"] == "application/json"
    assert json.loads(request.content) == backend.build_request_body("Hello World")
    assert summary.segments == ("- first point", "- second point")
    assert summary.response_id == "msg_01"
    assert summary.model == "claude-3-haiku-20240307"
    assert summary.text == "- first point\n- second point"


def test_empty_api_key_with_strict_validator_fails_before_post():
    transport, calls = _counting_transport(lambda request: httpx.Response(200, json=OK_RESPONSE))
    backend = ClaudeBackend(
        BackendCredentials(api_key="", endpoint_url=ENDPOINT),
        header_validator=validate_non_empty_header_value,
        transport=transport,
    )

    with pytest.raises(HeaderConstructionFailure) as excinfo:
        asyncio.run(backend.fetch_summary("text"))

    assert isinstance(excinfo.value.cause, InvalidHeaderValue)
    assert excinfo.value.cause.header == "x-api-key"
    assert calls == []


def test_api_key_with_newline_fails_header_construction():
    transport, calls = _counting_transport(lambda request: httpx.Response(200, json=OK_RESPONSE))
    backend = ClaudeBackend(
        BackendCredentials(api_key="sk-test\n", endpoint_url=ENDPOINT),
        transport=transport,
    )

    with pytest.raises(HeaderConstructionFailure):
        asyncio.run(backend.fetch_summary("text"))

    assert calls == []


def test_missing_content_array_is_a_parse_failure():
    transport, _ = _counting_transport(
        lambda request: httpx.Response(200, json={"id": "msg_02", "model": "claude-3-haiku-20240307"})
    )
    backend = ClaudeBackend(CREDENTIALS, transport=transport)

    with pytest.raises(ResponseParseFailure, match="content"):
        asyncio.run(backend.fetch_summary("text"))


def test_non_json_response_is_a_parse_failure():
    transport, _ = _counting_transport(lambda request: httpx.Response(200, text="<html>gateway</html>"))
    backend = ClaudeBackend(CREDENTIALS, transport=transport)

    with pytest.raises(ResponseParseFailure) as excinfo:
        asyncio.run(backend.fetch_summary("text"))

    assert isinstance(excinfo.value, SummaryError)


def test_error_status_is_a_transport_failure_with_status_code():
    transport, _ = _counting_transport(
        lambda request: httpx.Response(401, json={"type": "error", "error": {"type": "authentication_error"}})
    )
    backend = ClaudeBackend(CREDENTIALS, transport=transport)

    with pytest.raises(TransportFailure) as excinfo:
        asyncio.run(backend.fetch_summary("text"))

    assert excinfo.value.status_code == 401
    assert isinstance(excinfo.value.cause, httpx.HTTPStatusError)


def test_connection_error_is_wrapped_as_network_then_transport_failure():
    def handler(request: httpx.Request):
        raise httpx.ConnectError("name resolution failed", request=request)

    backend = ClaudeBackend(CREDENTIALS, transport=httpx.MockTransport(handler))

    with pytest.raises(TransportFailure) as excinfo:
        asyncio.run(backend.fetch_summary("text"))

    assert excinfo.value.status_code is None
    assert [type(err) for err in excinfo.value.chain()] == [
        TransportFailure,
        NetworkFailure,
        httpx.ConnectError,
    ]


def test_deadline_aborts_slow_backend():
    async def handler(request: httpx.Request):
        await asyncio.sleep(5)
        return httpx.Response(200, json=OK_RESPONSE)

    backend = ClaudeBackend(CREDENTIALS, transport=httpx.MockTransport(handler))

    with pytest.raises(TransportFailure, match="timed out") as excinfo:
        asyncio.run(backend.fetch_summary("text", timeout=0.05))

    assert isinstance(excinfo.value.cause, NetworkFailure)


def test_cancelling_fetch_summary_aborts_the_post_promptly():
    started = []

    async def handler(request: httpx.Request):
        started.append(request)
        await asyncio.sleep(5)
        return httpx.Response(200, json=OK_RESPONSE)

    backend = ClaudeBackend(CREDENTIALS, transport=httpx.MockTransport(handler))

    async def run():
        task = asyncio.create_task(backend.fetch_summary("text"))
        await asyncio.sleep(0.05)
        task.cancel()
        loop = asyncio.get_running_loop()
        began = loop.time()
        with pytest.raises(asyncio.CancelledError):
            await task
        return loop.time() - began

    elapsed = asyncio.run(run())

    assert len(started) == 1
    assert elapsed < 1


def test_unpaired_surrogate_in_content_is_a_summary_error_not_a_crash():
    transport, calls = _counting_transport(lambda request: httpx.Response(200, json=OK_RESPONSE))
    backend = ClaudeBackend(CREDENTIALS, transport=transport)

    with pytest.raises(TransportFailure) as excinfo:
        asyncio.run(backend.fetch_summary("emoji \ud83d cut"))

    assert isinstance(excinfo.value.cause, UnicodeEncodeError)
    assert calls == []


def test_extracted_surrogate_escape_reaches_the_backend_as_valid_utf8():
    transport, calls = _counting_transport(lambda request: httpx.Response(200, json=OK_RESPONSE))
    backend = ClaudeBackend(CREDENTIALS, transport=transport)
    page = FetchResult(url="https://medium.com/p/1", body=r'{"text":"emoji \ud83d cut"}', status_code="200")

    asyncio.run(backend.fetch_summary(extract_content(page)))

    assert json.loads(calls[0].content)["messages"][0]["content"] == "emoji \ufffd cut"


def test_missing_endpoint_is_a_missing_credential():
    with pytest.raises(MissingCredential) as excinfo:
        ClaudeBackend(BackendCredentials(api_key="sk-test", endpoint_url=""))

    assert excinfo.value.credential == "endpoint_url"


def test_parse_response_skips_blocks_without_text():
    summary = parse_response(
        {
            "id": "msg_03",
            "model": "claude-3-haiku-20240307",
            "content": [{"type": "tool_use", "name": "x"}, {"type": "text", "text": "only"}],
        }
    )

    assert summary.segments == ("only",)


def test_parse_response_requires_id_and_model():
    with pytest.raises(ResponseParseFailure, match="'id'"):
        parse_response({"content": [], "model": "m"})


def test_llm_logger_records_redacted_response(caplog):
    llm_logger = logging.getLogger("tests.claude.llm")
    response = dict(OK_RESPONSE, content=[{"type": "text", "text": "see https://example.com/x"}])
    backend = ClaudeBackend(
        CREDENTIALS,
        transport=httpx.MockTransport(lambda request: httpx.Response(200, json=response)),
        llm_logger=llm_logger,
        log_cfg=LoggingConfig(llm_log_redaction="redact_urls", llm_log_detail="prompt_response"),
    )

    with caplog.at_level(logging.INFO, logger="tests.claude.llm"):
        asyncio.run(backend.fetch_summary("article at https://medium.com/p/1"))

    record = next(r for r in caplog.records if r.name == "tests.claude.llm")
    assert record.event == "llm_summary_response"
    assert record.status == "ok"
    assert record.raw_response == "see [REDACTED_URL]"
    assert record.raw_prompt == "article at [REDACTED_URL]"
