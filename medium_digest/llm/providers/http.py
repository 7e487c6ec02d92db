"""HTTP plumbing shared by the backends: header building and one JSON POST."""

from __future__ import annotations

import asyncio
import json
from typing import Any

import httpx

from ...errors import (
    HeaderConstructionFailure,
    InvalidHeaderValue,
    NetworkFailure,
    ResponseParseFailure,
    TransportFailure,
)
from ...fetch.headers import HeaderValidator


def build_backend_headers(headers: dict[str, str], validator: HeaderValidator) -> dict[str, str]:
    """Validate provider headers, wrapping failures for the summarize stage."""
    built: dict[str, str] = {}
    for name, value in headers.items():
        try:
            built[name] = validator(name, value)
        except InvalidHeaderValue as exc:
            raise HeaderConstructionFailure(f"cannot build {name} header: {exc.reason}", cause=exc) from exc
    return built


async def post_json(
    url: str,
    headers: dict[str, str],
    payload: dict[str, Any],
    *,
    timeout: float | None = None,
    trust_env: bool = True,
    transport: httpx.AsyncBaseTransport | None = None,
) -> Any:
    """POST ``payload`` once and return the decoded JSON response.

    Network errors and deadline expiry surface as a TransportFailure wrapping
    the NetworkFailure that describes the connection problem.

    Raises:
        TransportFailure: On network errors, deadline expiry, an unencodable
            body or non-2xx status
        ResponseParseFailure: If the body is not JSON
    """
    try:
        return await asyncio.wait_for(
            _post_json(url, headers, payload, trust_env=trust_env, transport=transport),
            timeout,
        )
    except asyncio.TimeoutError as exc:
        network = NetworkFailure(f"timed out after {timeout}s waiting for {url}", cause=exc)
        raise TransportFailure(f"request to {url} timed out after {timeout}s", cause=network) from network


async def _post_json(
    url: str,
    headers: dict[str, str],
    payload: dict[str, Any],
    *,
    trust_env: bool,
    transport: httpx.AsyncBaseTransport | None,
) -> Any:
    try:
        body = json.dumps(payload, ensure_ascii=False).encode("utf-8")
    except UnicodeEncodeError as exc:
        raise TransportFailure(f"cannot encode request body for {url}: {exc}", cause=exc) from exc

    try:
        async with httpx.AsyncClient(timeout=None, trust_env=trust_env, transport=transport) as client:
            resp = await client.post(url, content=body, headers=headers)
    except (httpx.HTTPError, httpx.InvalidURL) as exc:
        network = NetworkFailure(f"{type(exc).__name__}: {exc}", cause=exc)
        raise TransportFailure(f"request to {url} failed: {network}", cause=network) from network

    try:
        resp.raise_for_status()
    except httpx.HTTPStatusError as exc:
        raise TransportFailure(
            f"backend rejected request with status {resp.status_code}: {resp.text[:500]}",
            cause=exc,
            status_code=resp.status_code,
        ) from exc

    try:
        return resp.json()
    except ValueError as exc:
        raise ResponseParseFailure(f"backend response is not JSON: {resp.text[:200]!r}", cause=exc) from exc


def require_str(data: dict[str, Any], key: str) -> str:
    value = data.get(key)
    if not isinstance(value, str):
        raise ResponseParseFailure(f"response field {key!r} missing or not a string")
    return value
