"""
Authenticated article fetching.

MediumFetcher owns one httpx.AsyncClient whose default headers carry the
session cookie, the platform Origin and a browser User-Agent. Each call to
fetch() performs exactly one GET and returns the raw body untouched; parsing
is left to the extractor.
"""

from __future__ import annotations

import asyncio
import logging

import httpx

from ..core.types import FetchResult
from ..errors import ClientBuildFailure, NetworkFailure, ResponseReadFailure
from .headers import build_headers

logger = logging.getLogger(__name__)

MEDIUM_ORIGIN = "https://medium.com"
DEFAULT_USER_AGENT = "Mozilla/5.0 (X11; Linux x86_64; rv:124.0) Gecko/20100101 Firefox/124.0"


class MediumFetcher:
    """Fetches Medium pages with a logged-in session.

    Header values are validated before the client is built, so a bad cookie
    fails with InvalidHeaderValue without any network I/O.

    Args:
        session_cookie: Raw ``Cookie`` header value of a logged-in session
        origin: Value of the ``Origin`` header
        user_agent: Value of the ``User-Agent`` header
        trust_env: Whether to respect system proxy settings from environment
        transport: Optional httpx transport, used to stub the network in tests

    Raises:
        InvalidHeaderValue: If any header value is illegal
        ClientBuildFailure: If the HTTP client cannot be constructed
    """

    def __init__(
        self,
        session_cookie: str,
        *,
        origin: str = MEDIUM_ORIGIN,
        user_agent: str = DEFAULT_USER_AGENT,
        trust_env: bool = True,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        headers = build_headers(
            {
                "Cookie": session_cookie,
                "Origin": origin,
                "User-Agent": user_agent,
            }
        )
        try:
            # Deadlines are applied per call in fetch(), not on the client.
            self.client = httpx.AsyncClient(
                headers=headers,
                timeout=None,
                trust_env=trust_env,
                transport=transport,
            )
        except Exception as exc:  # noqa: BLE001
            raise ClientBuildFailure(f"failed to build HTTP client: {exc}", cause=exc) from exc
        self.origin = origin

    async def fetch(self, url: str, timeout: float | None = None) -> FetchResult:
        """Fetch ``url`` once and capture the raw response.

        Args:
            url: Article URL to request
            timeout: Deadline in seconds for the whole call, or None for no deadline

        Returns:
            FetchResult with the body text and status code

        Raises:
            NetworkFailure: On transport errors or when the deadline expires
            ResponseReadFailure: If the body cannot be read or decoded
        """
        logger.debug("GET %s", url)
        try:
            return await asyncio.wait_for(self._fetch(url), timeout)
        except asyncio.TimeoutError as exc:
            raise NetworkFailure(f"timed out after {timeout}s fetching {url}", cause=exc) from exc

    async def _fetch(self, url: str) -> FetchResult:
        try:
            request = self.client.build_request("GET", url)
            response = await self.client.send(request, stream=True)
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            raise NetworkFailure(f"failed to fetch {url}: {type(exc).__name__}: {exc}", cause=exc) from exc

        try:
            await response.aread()
            body = response.text
        except (httpx.HTTPError, UnicodeDecodeError, LookupError) as exc:
            raise ResponseReadFailure(f"failed to read response from {url}: {exc}", cause=exc) from exc
        finally:
            await response.aclose()

        result = FetchResult(
            url=url,
            body=body,
            status_code=str(response.status_code),
            final_url=str(response.url),
        )
        logger.debug("Fetched %s: status=%s chars=%d", url, result.status_code, len(body))
        return result

    async def aclose(self) -> None:
        await self.client.aclose()

    async def __aenter__(self) -> MediumFetcher:
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()
