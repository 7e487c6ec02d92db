"""
Configuration management using YAML files and dataclasses.

This module defines all configuration dataclasses and provides loading
from YAML files with defaults. Configuration sections:
- FetchConfig: Article fetching settings
- ExtractConfig: Text field extraction settings
- ProviderConfig: Summarization backend settings
- LoggingConfig: Logging behavior
- LangfuseConfig: Langfuse tracing settings
- AppConfig: Root configuration container

This is the only module that reads credentials from the environment. The
core components receive them as explicit constructor arguments.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
import os
from typing import Any

import yaml

from .core.types import BackendCredentials
from .errors import MissingCredential
from .fetch.extractor import TEXT_FIELD_PATTERN
from .fetch.fetcher import DEFAULT_USER_AGENT, MEDIUM_ORIGIN


@dataclass
class FetchConfig:
    """Configuration for article fetching.

    Attributes:
        origin: Value of the Origin header
        user_agent: HTTP User-Agent header string
        timeout_seconds: Deadline for the article GET, or None for no deadline
        trust_env: Whether to respect system proxy settings
        cookie_env: Environment variable holding the session cookie
    """

    origin: str = MEDIUM_ORIGIN
    user_agent: str = DEFAULT_USER_AGENT
    timeout_seconds: float | None = 20.0
    trust_env: bool = True
    cookie_env: str = "MEDIUM_COOKIE"


@dataclass
class ExtractConfig:
    """Configuration for text extraction.

    Attributes:
        pattern: Regular expression with one capture group for the text value
        require_match: If True, a page without text fields is an error
    """

    pattern: str = TEXT_FIELD_PATTERN
    require_match: bool = False


@dataclass
class ProviderConfig:
    """Configuration for the summarization backend.

    Attributes:
        name: Backend name ("claude" or "ollama")
        model: Model identifier
        system_prompt: Instruction sent with the article text
        max_tokens: Output token ceiling
        api_version: Protocol version header value (claude only)
        api_key: Optional inline API key (overrides env var)
        api_key_env: Environment variable name containing the API key
        endpoint_url: Optional inline endpoint URL (overrides env var)
        endpoint_env: Environment variable name containing the endpoint URL
        timeout_seconds: Deadline for the backend call, or None for no deadline
        trust_env: Whether to respect system proxy settings for API requests
    """

    name: str = "claude"
    model: str = "claude-3-haiku-20240307"
    system_prompt: str = "can you summarize this as bullet point with english lang"
    max_tokens: int = 1024
    api_version: str = "2023-06-01"
    api_key: str | None = None
    api_key_env: str = "CLAUDE_API"
    endpoint_url: str | None = None
    endpoint_env: str = "CLAUDE_URL"
    timeout_seconds: float | None = 60.0
    trust_env: bool = True


@dataclass
class LoggingConfig:
    """Configuration for logging behavior.

    Attributes:
        level: Logging level ("DEBUG", "INFO", "WARNING", "ERROR")
        console: Whether to log to console
        file: Whether to log to file
        format: Log file format ("jsonl" or "plain")
        filename: Name of the main log file
        llm_log_enabled: Whether to enable separate LLM interaction logging
        llm_log_detail: LLM log detail level ("response_only", "prompt_response")
        llm_log_redaction: Redaction mode for LLM logs ("none", "redact_content", "redact_urls")
        llm_log_file: Name of the LLM log file
    """

    level: str = "INFO"
    console: bool = True
    file: bool = False
    format: str = "jsonl"
    filename: str = "run.jsonl"
    llm_log_enabled: bool = False
    llm_log_detail: str = "response_only"
    llm_log_redaction: str = "redact_urls"
    llm_log_file: str = "llm.jsonl"


@dataclass
class LangfuseConfig:
    """Configuration for Langfuse tracing.

    Attributes:
        enabled: Whether to enable Langfuse tracing
        public_key: Langfuse public key (optional)
        secret_key: Langfuse secret key (optional)
        host: Langfuse host URL (optional)
        redaction: Redaction mode for prompt/response payloads
        max_text_chars: Maximum characters for prompt/response payloads
    """

    enabled: bool = False
    public_key: str | None = None
    secret_key: str | None = None
    host: str | None = None
    redaction: str = "redact_urls"
    max_text_chars: int = 20000


@dataclass
class AppConfig:
    """Root configuration container aggregating all config sections."""

    fetch: FetchConfig = field(default_factory=FetchConfig)
    extract: ExtractConfig = field(default_factory=ExtractConfig)
    provider: ProviderConfig = field(default_factory=ProviderConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)
    langfuse: LangfuseConfig = field(default_factory=LangfuseConfig)


_SECTIONS = {
    "fetch": FetchConfig,
    "extract": ExtractConfig,
    "provider": ProviderConfig,
    "logging": LoggingConfig,
    "langfuse": LangfuseConfig,
}


def load_config(path: str | None) -> AppConfig:
    """Load configuration from a YAML file with defaults."""
    if not path:
        return AppConfig()

    with open(path, "r", encoding="utf-8") as f:
        raw = yaml.safe_load(f) or {}

    return _merge_config(AppConfig(), raw)


def _merge_config(base: AppConfig, raw: dict[str, Any]) -> AppConfig:
    """Merge raw YAML config into base AppConfig.

    Unknown sections and unknown keys inside a section are ignored.
    """
    data = asdict(base)
    for key, value in raw.items():
        if key not in data or not isinstance(value, dict):
            continue
        known = data[key]
        known.update({k: v for k, v in value.items() if k in known})
    return AppConfig(**{name: cls(**data[name]) for name, cls in _SECTIONS.items()})


def get_api_key(cfg: ProviderConfig) -> str | None:
    """Get API key from inline config or environment variable."""
    if cfg.api_key:
        return cfg.api_key
    return os.getenv(cfg.api_key_env)


def get_endpoint_url(cfg: ProviderConfig) -> str | None:
    """Get endpoint URL from inline config or environment variable."""
    if cfg.endpoint_url:
        return cfg.endpoint_url
    return os.getenv(cfg.endpoint_env)


def get_session_cookie(cfg: FetchConfig) -> str | None:
    return os.getenv(cfg.cookie_env)


def resolve_credentials(cfg: ProviderConfig) -> BackendCredentials:
    """Build BackendCredentials for the configured provider.

    The endpoint falls back to the provider's public default when neither
    the config nor the environment sets one. Only local backends may run
    without an API key.

    Raises:
        MissingCredential: If a required value cannot be found
    """
    from .llm.providers.factory import default_endpoint, requires_api_key

    api_key = get_api_key(cfg) or ""
    endpoint = get_endpoint_url(cfg) or default_endpoint(cfg.name)
    if not api_key and requires_api_key(cfg.name):
        raise MissingCredential("api_key", f"set provider.api_key or ${cfg.api_key_env}")
    if not endpoint:
        raise MissingCredential("endpoint_url", f"set provider.endpoint_url or ${cfg.endpoint_env}")
    return BackendCredentials(api_key=api_key, endpoint_url=endpoint)
