"""Capability contract for summarization backends."""

from __future__ import annotations

from typing import Any, Protocol, runtime_checkable

from ...core.types import SummaryResponse


@runtime_checkable
class SummaryBackend(Protocol):
    """What the pipeline needs from a summarization backend.

    Backends satisfy this structurally; they do not subclass it. Adding a
    provider means writing a class with these members and registering it in
    the factory, without touching the fetcher or the extractor.
    """

    name: str

    def build_request_body(self, content: str) -> dict[str, Any]:
        """Return the provider JSON payload for ``content``. Must not do I/O."""
        ...

    async def fetch_summary(self, content: str, timeout: float | None = None) -> SummaryResponse:
        """Send ``content`` to the provider and return the parsed summary.

        Raises:
            HeaderConstructionFailure: If a header value is rejected
            TransportFailure: On network errors, deadline expiry or non-2xx status
            ResponseParseFailure: If the response does not match the schema
        """
        ...
