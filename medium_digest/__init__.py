"""
Medium Digest - LLM summaries of Medium articles.

This package fetches a Medium article with a logged-in session, recovers
the article text from the JSON fragments embedded in the page, and sends it
to a summarization backend (Claude, or a local Ollama model).

Main entry point is the CLI via `medium-digest summarize` command.

Example:
    $ medium-digest summarize https://medium.com/@someone/some-article-123abc
"""

__all__ = [
    "__version__",
    "BackendCredentials",
    "ContentExtractor",
    "DigestError",
    "DigestResult",
    "FetchResult",
    "MediumFetcher",
    "SummaryResponse",
    "run_pipeline",
    "summarize_article",
]
__version__ = "0.1.0"

from .core.types import BackendCredentials, FetchResult, SummaryResponse
from .errors import DigestError
from .fetch.extractor import ContentExtractor
from .fetch.fetcher import MediumFetcher
from .pipeline import DigestResult, run_pipeline, summarize_article
