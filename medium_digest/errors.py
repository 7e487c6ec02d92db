"""
Error taxonomy shared by the fetch, extract and summarize stages.

Every failure raised by the core is a DigestError subclass naming the point
where it happened. Errors grouped under FetchError mean the article could not
be retrieved, ExtractError that its content could not be recovered, and
SummaryError that the summarization backend failed. Higher layers wrap the
lower-level exception in ``cause`` (also set as ``__cause__``) so callers can
walk the full chain without knowing implementation details.
"""

from __future__ import annotations


class DigestError(Exception):
    """Base class for all pipeline failures."""

    stage = "core"

    def __init__(self, message: str, cause: BaseException | None = None):
        super().__init__(message)
        self.message = message
        self.cause = cause
        if cause is not None:
            self.__cause__ = cause

    def chain(self) -> list[BaseException]:
        """Return this error followed by every wrapped cause, outermost first."""
        errors: list[BaseException] = [self]
        current = self.cause
        while current is not None and current not in errors:
            errors.append(current)
            current = getattr(current, "cause", None) or current.__cause__
        return errors


class FetchError(DigestError):
    stage = "fetch"


class InvalidHeaderValue(FetchError):
    """A header value contains characters that are illegal on the wire."""

    def __init__(self, header: str, reason: str):
        super().__init__(f"invalid value for header {header!r}: {reason}")
        self.header = header
        self.reason = reason


class ClientBuildFailure(FetchError):
    pass


class NetworkFailure(FetchError):
    pass


class ResponseReadFailure(FetchError):
    pass


class ExtractError(DigestError):
    stage = "extract"


class PatternCompileFailure(ExtractError):
    pass


class NoContentMatch(ExtractError):
    """Raised when no text field was found and a match is required."""


class SummaryError(DigestError):
    stage = "summarize"


class HeaderConstructionFailure(SummaryError):
    pass


class TransportFailure(SummaryError):
    """The summarization request did not complete.

    ``status_code`` is set when the backend answered with a non-2xx status.
    """

    def __init__(
        self,
        message: str,
        cause: BaseException | None = None,
        status_code: int | None = None,
    ):
        super().__init__(message, cause)
        self.status_code = status_code


class ResponseParseFailure(SummaryError):
    pass


class MissingCredential(SummaryError):
    def __init__(self, credential: str, hint: str | None = None):
        message = f"missing credential: {credential}"
        if hint:
            message = f"{message} ({hint})"
        super().__init__(message)
        self.credential = credential


__all__ = [
    "DigestError",
    "FetchError",
    "InvalidHeaderValue",
    "ClientBuildFailure",
    "NetworkFailure",
    "ResponseReadFailure",
    "ExtractError",
    "PatternCompileFailure",
    "NoContentMatch",
    "SummaryError",
    "HeaderConstructionFailure",
    "TransportFailure",
    "ResponseParseFailure",
    "MissingCredential",
]
