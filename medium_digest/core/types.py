"""
Core data types for the Medium digest pipeline.

This module defines the values flowing between pipeline stages:
- FetchResult: Raw page captured by the fetcher
- SummaryRequest: Provider-independent view of one summarization call
- SummaryResponse: Normalized summary parsed from a backend response
- BackendCredentials: Explicit API key and endpoint for one backend instance

All of them are frozen: a value is built once by the stage that produces it
and never modified afterwards.
"""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True)
class FetchResult:
    """Result of a single authenticated GET.

    Attributes:
        url: The URL that was requested
        body: The raw response body text
        status_code: HTTP status code as a string (e.g. "200")
        final_url: The URL the response came from after redirects
    """
    url: str
    body: str
    status_code: str
    final_url: str = ""

    @property
    def ok(self) -> bool:
        return self.status_code.startswith("2")


@dataclass(frozen=True)
class SummaryRequest:
    """Parameters of one summarization call.

    Attributes:
        content: Article text sent as the user message
        model: Provider model identifier
        system_prompt: Instruction text for the model
        max_tokens: Output token ceiling
    """
    content: str
    model: str
    system_prompt: str
    max_tokens: int


@dataclass(frozen=True)
class SummaryResponse:
    """Normalized summary returned by a backend.

    Attributes:
        segments: Text blocks in the order the provider returned them
        response_id: Provider-assigned identifier of the response
        model: Model name reported by the provider
    """
    segments: tuple[str, ...]
    response_id: str
    model: str

    @property
    def text(self) -> str:
        return "\n".join(self.segments)


@dataclass(frozen=True)
class BackendCredentials:
    """API key and endpoint handed to a backend at construction."""
    api_key: str
    endpoint_url: str = field(default="")

    def __repr__(self) -> str:
        masked = "***" if self.api_key else "''"
        return f"BackendCredentials(api_key={masked}, endpoint_url={self.endpoint_url!r})"
