"""
Core data types shared by every pipeline stage.

This package contains value types that are independent of any specific
fetcher or summarization backend.
"""

from .types import BackendCredentials, FetchResult, SummaryRequest, SummaryResponse

__all__ = [
    "BackendCredentials",
    "FetchResult",
    "SummaryRequest",
    "SummaryResponse",
]
