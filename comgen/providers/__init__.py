"""Language-model backends and the startup factory that selects one."""

from __future__ import annotations

import logging

from ..config import Config
from ..exceptions import ConfigError
from .anthropic_backend import AnthropicBackend
from .base import BaseBackend, request_timeout_from_env
from .ollama_backend import OllamaBackend
from .openai_backend import OpenAIBackend

__all__ = [
    "AnthropicBackend",
    "BaseBackend",
    "OllamaBackend",
    "OpenAIBackend",
    "create_backend",
]

logger = logging.getLogger(__name__)


def create_backend(config: Config) -> BaseBackend:
    """Return the backend named by ``config.provider``."""
    logger.info("creating provider: %s", config.provider)
    timeout = request_timeout_from_env()
    if config.provider == "openai":
        return OpenAIBackend(
            config.model,
            api_key=config.resolve_api_key(),
            endpoint=config.openai_endpoint,
            timeout=timeout,
        )
    if config.provider == "anthropic":
        return AnthropicBackend(
            config.model,
            api_key=config.resolve_api_key(),
            endpoint=config.anthropic_endpoint,
            timeout=timeout,
        )
    if config.provider == "ollama":
        return OllamaBackend(config.model, base_url=config.ollama_url, timeout=timeout)
    raise ConfigError(f"Unsupported provider: {config.provider}")
