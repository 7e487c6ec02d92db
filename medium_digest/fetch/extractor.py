"""
Article text extraction from embedded JSON fragments.

Medium ships the rendered article body as JSON-encoded string fields inside
the server-rendered page. Instead of parsing the DOM, the extractor scans the
raw body for every ``"text": "..."`` pair and stitches the values back
together in source order. This is cheap and needs no HTML parser, but it
depends on the upstream field name and escaping staying stable.
"""

from __future__ import annotations

import json
import logging
import re

from ..core.types import FetchResult
from ..errors import NoContentMatch, PatternCompileFailure

logger = logging.getLogger(__name__)

# Key "text" followed by a JSON string; backslash escapes are kept inside the capture.
TEXT_FIELD_PATTERN = r'"text":\s*"((?:[^"\\]|\\.)*)"'


def compile_pattern(pattern: str) -> re.Pattern[str]:
    """Compile an extraction pattern with exactly one capture group.

    Raises:
        PatternCompileFailure: If the pattern is invalid or has the wrong
            number of capture groups
    """
    try:
        compiled = re.compile(pattern, re.DOTALL)
    except re.error as exc:
        raise PatternCompileFailure(f"invalid extraction pattern {pattern!r}: {exc}", cause=exc) from exc
    if compiled.groups != 1:
        raise PatternCompileFailure(
            f"extraction pattern must have exactly one capture group, got {compiled.groups}"
        )
    return compiled


def unescape_json_string(raw: str) -> str:
    """Decode JSON string escapes in a captured value.

    A capture that is not a valid JSON string body (e.g. a stray backslash
    sequence JSON does not define) is returned as-is. Unpaired surrogate
    escapes such as ``\\ud83d`` become U+FFFD so the text stays encodable.
    """
    if "\\" not in raw:
        return raw
    try:
        decoded = json.loads(f'"{raw}"', strict=False)
    except json.JSONDecodeError:
        logger.debug("Keeping undecodable text field verbatim: %.80s", raw)
        return raw
    return decoded.encode("utf-16", "surrogatepass").decode("utf-16", "replace")


class ContentExtractor:
    """Reassembles article text from every text field in a page body.

    Args:
        pattern: Regular expression with one capture group for the value
        require_match: If True, a body without any match raises NoContentMatch
            instead of yielding an empty string

    Raises:
        PatternCompileFailure: If ``pattern`` cannot be compiled
    """

    def __init__(self, pattern: str = TEXT_FIELD_PATTERN, *, require_match: bool = False):
        self.pattern = compile_pattern(pattern)
        self.require_match = require_match

    def segments(self, result: FetchResult) -> list[str]:
        """Return the unescaped value of every match, in order of appearance."""
        return [unescape_json_string(m.group(1)) for m in self.pattern.finditer(result.body)]

    def extract_content(self, result: FetchResult) -> str:
        """Join all matched values with single spaces.

        Returns:
            The article text, or "" when nothing matched and require_match is off

        Raises:
            NoContentMatch: If nothing matched and require_match is on
        """
        parts = self.segments(result)
        if not parts:
            if self.require_match:
                raise NoContentMatch(f"no text fields found in response from {result.url}")
            logger.warning("No text fields found in response from %s", result.url)
            return ""
        logger.debug("Extracted %d text fields from %s", len(parts), result.url)
        return " ".join(parts)


_DEFAULT_EXTRACTOR = ContentExtractor()


def extract_content(result: FetchResult, require_match: bool = False) -> str:
    """Extract article text using the default text field pattern."""
    if require_match:
        return ContentExtractor(require_match=True).extract_content(result)
    return _DEFAULT_EXTRACTOR.extract_content(result)
