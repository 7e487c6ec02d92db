"""
Summarization backend implementations.

To add a new backend:
1. Write a class with ``name``, ``build_request_body()`` and ``fetch_summary()``
   (see SummaryBackend in base.py)
2. Register a builder and default endpoint in factory.py
3. Export the class from __init__.py
"""

from .base import SummaryBackend
from .claude import ClaudeBackend
from .factory import available_backends, create_backend
from .ollama import OllamaBackend

__all__ = [
    "SummaryBackend",
    "ClaudeBackend",
    "OllamaBackend",
    "available_backends",
    "create_backend",
]
