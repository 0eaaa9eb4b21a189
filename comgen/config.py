"""Configuration management for comgen."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from .exceptions import ConfigError

CONFIG_DIR_NAME = ".comgen"
CONFIG_FILE_NAME = "config.yaml"
LOCAL_TEMPLATE_NAME = "comgen.template"
DEFAULT_CONFIG_PATH = f"~/{CONFIG_DIR_NAME}/{CONFIG_FILE_NAME}"

DEFAULT_PROVIDERS = {
    "openai": {
        "model": "gpt-4",
        "endpoint": "https://api.openai.com/v1",
        "api_key_env": "OPENAI_API_KEY",
    },
    "anthropic": {
        "model": "claude-2",
        "endpoint": "https://api.anthropic.com",
        "api_key_env": "ANTHROPIC_API_KEY",
    },
    "ollama": {
        "model": "llama3",
        "endpoint": "http://localhost:11434",
        "api_key_env": "",
    },
}

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PromptTemplate:
    """Commit-message rules appended to the base prompt."""

    allowed_categories: tuple[str, ...] = ()
    body_template: str = ""
    max_length: int = 0
    examples: tuple[str, ...] = ()

    @classmethod
    def from_mapping(cls, data: Any) -> "PromptTemplate":
        """Build from the ``templates`` section of a YAML document."""
        if not isinstance(data, dict):
            raise ConfigError("templates must be a mapping")
        output = data.get("output_format") or {}
        if not isinstance(output, dict):
            raise ConfigError("templates.output_format must be a mapping")
        try:
            max_length = int(output.get("max_length", 0) or 0)
        except (TypeError, ValueError) as exc:
            raise ConfigError(
                "templates.output_format.max_length must be an integer"
            ) from exc
        if max_length < 0:
            raise ConfigError("templates.output_format.max_length must be >= 0")
        return cls(
            allowed_categories=tuple(
                str(c) for c in data.get("commit_types") or ()
            ),
            body_template=str(output.get("template") or ""),
            max_length=max_length,
            examples=tuple(str(e) for e in output.get("examples") or ()),
        )


@dataclass(frozen=True)
class AuditConfig:
    enabled: bool = False
    prompt: str = ""


@dataclass
class Config:
    """Runtime configuration for comgen."""

    provider: str = "openai"
    model: str = DEFAULT_PROVIDERS["openai"]["model"]
    base_prompt: str = ""
    templates: PromptTemplate = field(default_factory=PromptTemplate)
    openai_api_key: str = ""
    anthropic_api_key: str = ""
    ollama_url: str = DEFAULT_PROVIDERS["ollama"]["endpoint"]
    openai_endpoint: str = DEFAULT_PROVIDERS["openai"]["endpoint"]
    anthropic_endpoint: str = DEFAULT_PROVIDERS["anthropic"]["endpoint"]
    audit: AuditConfig = field(default_factory=AuditConfig)

    def resolve_api_key(self, provider: Optional[str] = None) -> str:
        """Return the credential for ``provider``.

        The value from the config file wins; the provider's conventional
        environment variable is consulted when it is empty.
        """
        name = provider or self.provider
        if name == "openai":
            explicit = self.openai_api_key
        elif name == "anthropic":
            explicit = self.anthropic_api_key
        else:
            return ""
        if explicit:
            return explicit
        env_name = DEFAULT_PROVIDERS[name]["api_key_env"]
        return os.environ.get(env_name, "")

    def validate(self) -> None:
        """Raise ConfigError when the selected provider cannot be used."""
        if self.provider not in DEFAULT_PROVIDERS:
            raise ConfigError(f"Unknown provider: {self.provider}")
        if self.provider == "openai" and not self.resolve_api_key():
            raise ConfigError(
                "OpenAI API key is required when using OpenAI provider"
            )
        if self.provider == "anthropic" and not self.resolve_api_key():
            raise ConfigError(
                "Anthropic API key is required when using Anthropic provider"
            )
        if self.provider == "ollama" and not self.ollama_url:
            raise ConfigError("Ollama URL is required when using Ollama provider")

    def load_local_template(self, directory: Optional[Path] = None) -> bool:
        """Replace ``templates`` with a ``comgen.template`` file if present.

        Returns True when a local template was applied.
        """
        path = Path(directory or Path.cwd()) / LOCAL_TEMPLATE_NAME
        if not path.exists():
            return False
        data = _read_yaml(path)
        self.templates = PromptTemplate.from_mapping(data)
        logger.info("Local template loaded from %s", path)
        return True

    def with_overrides(self, overrides: Dict[str, Optional[str]]) -> "Config":
        """Return a copy with non-empty provider/model overrides applied."""
        changes = {k: v for k, v in overrides.items() if v}
        if not changes:
            return self
        if "provider" in changes and "model" not in changes:
            if changes["provider"] != self.provider:
                defaults = DEFAULT_PROVIDERS.get(changes["provider"], {})
                changes["model"] = defaults.get("model", self.model)
        return replace(self, **changes)


def expand_path(config_path: str) -> Path:
    """Expand a leading ``~/`` to the user's home directory."""
    if config_path.startswith(("~/", "~\\")):
        home = os.environ.get("HOME") or os.environ.get("USERPROFILE")
        if not home:
            raise ConfigError("Environment variable not set: HOME")
        return Path(home) / config_path[2:]
    return Path(config_path)


def _read_yaml(path: Path) -> Any:
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigError(f"Failed to read config file {path}: {exc}") from exc
    try:
        return yaml.safe_load(text) or {}
    except yaml.YAMLError as exc:
        raise ConfigError(f"Failed to parse config file {path}: {exc}") from exc


def config_from_mapping(data: Any) -> Config:
    """Build a Config from a parsed YAML document."""
    if not isinstance(data, dict):
        raise ConfigError("Config file must contain a mapping")
    audit_raw = data.get("audit") or {}
    if not isinstance(audit_raw, dict):
        raise ConfigError("audit must be a mapping")
    defaults = Config()
    provider = str(data.get("provider") or defaults.provider)
    model = data.get("model") or DEFAULT_PROVIDERS.get(provider, {}).get(
        "model", defaults.model
    )
    return Config(
        provider=provider,
        model=str(model),
        base_prompt=str(data.get("base_prompt") or ""),
        templates=PromptTemplate.from_mapping(data.get("templates") or {}),
        openai_api_key=str(data.get("openai_api_key") or ""),
        anthropic_api_key=str(data.get("anthropic_api_key") or ""),
        ollama_url=str(data.get("ollama_url") or defaults.ollama_url),
        openai_endpoint=str(data.get("openai_endpoint") or defaults.openai_endpoint),
        anthropic_endpoint=str(
            data.get("anthropic_endpoint") or defaults.anthropic_endpoint
        ),
        audit=AuditConfig(
            enabled=bool(audit_raw.get("enabled", False)),
            prompt=str(audit_raw.get("prompt") or ""),
        ),
    )


def load_config(config_path: str = DEFAULT_CONFIG_PATH) -> Config:
    """Load a config file and apply environment overrides.

    Validation is left to the caller so that command-line overrides can be
    applied first.
    """
    path = expand_path(config_path)
    logger.info("Loading config from: %s", path)
    if not path.exists():
        raise ConfigError(f"Config file not found: {path}")
    config = config_from_mapping(_read_yaml(path))
    config = config.with_overrides(
        {
            "provider": os.environ.get("COMGEN_PROVIDER"),
            "model": os.environ.get("COMGEN_MODEL"),
        }
    )
    return config
