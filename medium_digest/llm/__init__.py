"""Summarization backends and observability."""

from .providers.base import SummaryBackend
from .providers.claude import ClaudeBackend
from .providers.factory import available_backends, create_backend
from .providers.ollama import OllamaBackend
from .tracing import flush, record_span_error, set_span_output, setup_langfuse, start_span

__all__ = [
    "SummaryBackend",
    "ClaudeBackend",
    "OllamaBackend",
    "create_backend",
    "available_backends",
    "setup_langfuse",
    "flush",
    "start_span",
    "set_span_output",
    "record_span_error",
]
