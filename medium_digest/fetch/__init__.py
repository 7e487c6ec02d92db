"""
Article fetching and extraction.

This package handles the authenticated GET of an article page and the
pattern-based recovery of its text.
"""

from .extractor import TEXT_FIELD_PATTERN, ContentExtractor, compile_pattern, extract_content
from .fetcher import DEFAULT_USER_AGENT, MEDIUM_ORIGIN, MediumFetcher
from .headers import validate_header_value, validate_non_empty_header_value

__all__ = [
    "MediumFetcher",
    "MEDIUM_ORIGIN",
    "DEFAULT_USER_AGENT",
    "ContentExtractor",
    "TEXT_FIELD_PATTERN",
    "compile_pattern",
    "extract_content",
    "validate_header_value",
    "validate_non_empty_header_value",
]
