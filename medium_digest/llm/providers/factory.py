"""Backend factory and registry for hot-swappable summarization providers."""

from __future__ import annotations

import logging

import httpx

from ...config import LoggingConfig, ProviderConfig
from ...core.types import BackendCredentials
from . import claude, ollama
from .base import SummaryBackend


def _build_claude(cfg, credentials, transport, llm_logger, log_cfg) -> SummaryBackend:
    return claude.ClaudeBackend(
        credentials,
        model=cfg.model,
        system_prompt=cfg.system_prompt,
        max_tokens=cfg.max_tokens,
        api_version=cfg.api_version,
        trust_env=cfg.trust_env,
        transport=transport,
        llm_logger=llm_logger,
        log_cfg=log_cfg,
    )


def _build_ollama(cfg, credentials, transport, llm_logger, log_cfg) -> SummaryBackend:
    return ollama.OllamaBackend(
        credentials,
        model=cfg.model,
        system_prompt=cfg.system_prompt,
        max_tokens=cfg.max_tokens,
        trust_env=cfg.trust_env,
        transport=transport,
    )


_BACKEND_REGISTRY = {
    "claude": _build_claude,
    "anthropic": _build_claude,
    "ollama": _build_ollama,
}

_DEFAULT_ENDPOINTS = {
    "claude": claude.DEFAULT_ENDPOINT,
    "anthropic": claude.DEFAULT_ENDPOINT,
    "ollama": ollama.DEFAULT_ENDPOINT,
}

_KEYLESS = {"ollama"}


def _normalize(name: str) -> str:
    return name.lower().strip()


def available_backends() -> list[str]:
    """Return the set of registered backend names."""
    return sorted(_BACKEND_REGISTRY.keys())


def default_endpoint(name: str) -> str | None:
    return _DEFAULT_ENDPOINTS.get(_normalize(name))


def requires_api_key(name: str) -> bool:
    return _normalize(name) not in _KEYLESS


def create_backend(
    provider_cfg: ProviderConfig,
    credentials: BackendCredentials,
    *,
    transport: httpx.AsyncBaseTransport | None = None,
    llm_logger: logging.Logger | None = None,
    log_cfg: LoggingConfig | None = None,
) -> SummaryBackend:
    """Build a backend instance from config and explicit credentials."""
    builder = _BACKEND_REGISTRY.get(_normalize(provider_cfg.name))
    if builder is None:
        supported = ", ".join(available_backends())
        raise ValueError(f"Unsupported backend: {provider_cfg.name}. Supported: {supported}")
    return builder(provider_cfg, credentials, transport, llm_logger, log_cfg)
