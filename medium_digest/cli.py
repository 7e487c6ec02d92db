"""
Command-line interface for the Medium digest.

Uses Typer to expose the pipeline as ``medium-digest summarize URL``.
Supports loading .env files for the session cookie and API credentials.
"""

from __future__ import annotations

import asyncio
import json
from pathlib import Path

import typer
from dotenv import load_dotenv
from rich.console import Console
from rich.panel import Panel

from .config import get_session_cookie, load_config, resolve_credentials
from .errors import DigestError
from .llm.providers.factory import available_backends
from .llm.tracing import flush, setup_langfuse
from .logging_utils import setup_llm_logger, setup_logging
from .pipeline import run_pipeline

app = typer.Typer(add_completion=False)
console = Console()


@app.callback()
def main() -> None:
    """Summarize Medium articles with an LLM backend."""


@app.command()
def summarize(
    url: str = typer.Argument(..., help="Medium article URL."),
    config: Path | None = typer.Option(None, "--config", "-c", exists=True, readable=True),
    cookie: str | None = typer.Option(
        None,
        "--cookie",
        help="Session cookie header value (or set MEDIUM_COOKIE / .env).",
    ),
    provider: str | None = typer.Option(
        None, "--provider", "-p", help=f"Backend: {', '.join(available_backends())}."
    ),
    model: str | None = typer.Option(None, "--model", help="Override the backend model."),
    prompt: str | None = typer.Option(None, "--prompt", help="Override the system prompt."),
    api_key: str | None = typer.Option(None, "--api-key", help="Override the backend API key."),
    endpoint: str | None = typer.Option(None, "--endpoint", help="Override the backend endpoint URL."),
    require_match: bool | None = typer.Option(
        None,
        "--require-match/--allow-empty",
        help="Fail when the page has no text fields instead of summarizing empty text.",
    ),
    log_level: str | None = typer.Option(None, "--log-level", help="Logging level."),
    log_dir: Path | None = typer.Option(None, "--log-dir", help="Directory for log files."),
    as_json: bool = typer.Option(False, "--json", help="Print the summary as JSON."),
):
    """Fetch a Medium article, extract its text and print a summary.

    Args:
        url: Article URL
        config: Optional path to YAML config file
        cookie: Session cookie, overrides the environment
        provider: Backend name
        model: Model identifier override
        prompt: System prompt override
        api_key: API key override
        endpoint: Endpoint URL override
        require_match: Whether an article without text fields is an error
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR)
        log_dir: Directory for run and LLM logs
        as_json: Print JSON instead of formatted text
    """
    load_dotenv()

    cfg = load_config(str(config) if config else None)

    # Override with CLI options
    if provider:
        cfg.provider.name = provider
    if model:
        cfg.provider.model = model
    if prompt:
        cfg.provider.system_prompt = prompt
    if api_key:
        cfg.provider.api_key = api_key
    if endpoint:
        cfg.provider.endpoint_url = endpoint
    if require_match is not None:
        cfg.extract.require_match = require_match
    if log_level:
        cfg.logging.level = log_level
    if log_dir is not None:
        cfg.logging.file = True

    setup_logging(cfg.logging, log_dir)
    llm_logger = setup_llm_logger(cfg.logging, log_dir)
    setup_langfuse(cfg.langfuse)

    session_cookie = cookie if cookie is not None else get_session_cookie(cfg.fetch)
    if session_cookie is None:
        console.print(f"[red]No session cookie: pass --cookie or set ${cfg.fetch.cookie_env}[/red]")
        raise typer.Exit(code=2)

    try:
        credentials = resolve_credentials(cfg.provider)
        result = asyncio.run(
            run_pipeline(url, cfg, session_cookie, credentials, llm_logger=llm_logger)
        )
    except DigestError as exc:
        _print_error(exc)
        raise typer.Exit(code=1) from exc
    except ValueError as exc:
        console.print(f"[red]{exc}[/red]")
        raise typer.Exit(code=2) from exc
    finally:
        # Flush Langfuse traces before exit
        flush()

    summary = result.summary
    if as_json:
        typer.echo(
            json.dumps(
                {
                    "url": result.fetch.url,
                    "status_code": result.fetch.status_code,
                    "content_chars": len(result.content),
                    "id": summary.response_id,
                    "model": summary.model,
                    "segments": list(summary.segments),
                },
                ensure_ascii=False,
                indent=2,
            )
        )
        return

    console.print(f"size: {len(result.content)}")
    console.print(
        Panel(
            summary.text or "(empty summary)",
            title=summary.model,
            subtitle=summary.response_id,
        )
    )


def _print_error(exc: DigestError) -> None:
    console.print(f"[red]Failed during {exc.stage}:[/red] {exc}")
    for cause in exc.chain()[1:]:
        console.print(f"  caused by {type(cause).__name__}: {cause}")


if __name__ == "__main__":
    app()
