"""
Pipeline orchestration for the Medium digest.

This module wires the three stages together:
1. Fetch the article page with the session cookie
2. Extract article text from the embedded JSON text fields
3. Summarize the text with the configured backend

Stage errors propagate unchanged as DigestError subclasses; nothing here
retries or exits the process. Retrying or aborting is the caller's call.
"""

from __future__ import annotations

from dataclasses import dataclass
import logging

import httpx

from .config import AppConfig
from .core.types import BackendCredentials, FetchResult, SummaryResponse
from .errors import DigestError
from .fetch.extractor import ContentExtractor
from .fetch.fetcher import MediumFetcher
from .llm.providers.base import SummaryBackend
from .llm.providers.factory import create_backend
from .llm.tracing import record_span_error, set_span_output, start_span
from .logging_utils import log_event, log_failure

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DigestResult:
    """Everything one pipeline run produced.

    Attributes:
        fetch: The raw page as fetched
        content: Article text recovered by the extractor
        summary: Summary returned by the backend
    """
    fetch: FetchResult
    content: str
    summary: SummaryResponse


async def summarize_article(
    url: str,
    fetcher: MediumFetcher,
    extractor: ContentExtractor,
    backend: SummaryBackend,
    *,
    fetch_timeout: float | None = None,
    summary_timeout: float | None = None,
) -> DigestResult:
    """Fetch ``url``, extract its text and summarize it.

    Args:
        url: Article URL
        fetcher: Fetcher holding the session headers
        extractor: Extractor to recover the article text
        backend: Summarization backend
        fetch_timeout: Deadline in seconds for the GET
        summary_timeout: Deadline in seconds for the backend call

    Returns:
        DigestResult with the intermediate values and the summary

    Raises:
        DigestError: Whichever stage failed, with the underlying cause attached
    """
    with start_span(
        "medium_digest.run",
        kind="chain",
        input_value={"url": url},
        attributes={"backend": backend.name},
    ) as run_span:
        log_event(logger, "Pipeline start", event="pipeline_start", url=url, backend=backend.name)
        try:
            fetched = await fetcher.fetch(url, timeout=fetch_timeout)
            if not fetched.ok:
                logger.warning("GET %s returned status %s", url, fetched.status_code)
            content = extractor.extract_content(fetched)
            log_event(
                logger,
                "Content extracted",
                event="content_extracted",
                url=url,
                status_code=fetched.status_code,
                chars=len(content),
            )
            summary = await backend.fetch_summary(content, timeout=summary_timeout)
        except DigestError as exc:
            record_span_error(run_span, exc)
            log_failure(logger, exc, url)
            raise
        set_span_output(run_span, summary.text)

    log_event(
        logger,
        "Pipeline done",
        event="pipeline_done",
        url=url,
        response_id=summary.response_id,
        model=summary.model,
        segments=len(summary.segments),
    )
    return DigestResult(fetch=fetched, content=content, summary=summary)


def build_components(
    cfg: AppConfig,
    session_cookie: str,
    credentials: BackendCredentials,
    *,
    transport: httpx.AsyncBaseTransport | None = None,
    llm_logger: logging.Logger | None = None,
) -> tuple[MediumFetcher, ContentExtractor, SummaryBackend]:
    """Construct fetcher, extractor and backend from config.

    The extraction pattern is compiled here, once, so a bad pattern fails
    before any network I/O.
    """
    extractor = ContentExtractor(cfg.extract.pattern, require_match=cfg.extract.require_match)
    backend = create_backend(
        cfg.provider,
        credentials,
        transport=transport,
        llm_logger=llm_logger,
        log_cfg=cfg.logging,
    )
    fetcher = MediumFetcher(
        session_cookie,
        origin=cfg.fetch.origin,
        user_agent=cfg.fetch.user_agent,
        trust_env=cfg.fetch.trust_env,
        transport=transport,
    )
    return fetcher, extractor, backend


async def run_pipeline(
    url: str,
    cfg: AppConfig,
    session_cookie: str,
    credentials: BackendCredentials,
    *,
    transport: httpx.AsyncBaseTransport | None = None,
    llm_logger: logging.Logger | None = None,
) -> DigestResult:
    """Build the components from ``cfg`` and summarize one article."""
    fetcher, extractor, backend = build_components(
        cfg,
        session_cookie,
        credentials,
        transport=transport,
        llm_logger=llm_logger,
    )
    async with fetcher:
        return await summarize_article(
            url,
            fetcher,
            extractor,
            backend,
            fetch_timeout=cfg.fetch.timeout_seconds,
            summary_timeout=cfg.provider.timeout_seconds,
        )
