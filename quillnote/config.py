"""Configuration loader — reads config.yaml, validates with Pydantic.

Two sections: service-wide settings (auth, CORS, pagination) and the
``ai`` block describing the upstream chat-completion provider.
Secrets may be left out of the file and supplied through the environment.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field, field_validator, model_validator

logger = logging.getLogger(__name__)


class AIConfig(BaseModel):
    """Upstream chat-completion provider settings."""

    api_key: str | None = None
    model: str = "gpt-4o-mini"
    base_url: str = "https://api.openai.com/v1"
    timeout: float | None = None  # None = rely on the connection lifecycle

    @model_validator(mode="before")
    @classmethod
    def fill_from_env(cls, data: Any) -> Any:
        """Environment values fill only what the file leaves unset."""
        if not isinstance(data, dict):
            return data
        data = dict(data)
        if not data.get("api_key"):
            data["api_key"] = os.environ.get("OPENAI_API_KEY") or None
        if not data.get("model"):
            data.pop("model", None)
            if os.environ.get("OPENAI_MODEL"):
                data["model"] = os.environ["OPENAI_MODEL"]
        return data

    @field_validator("base_url")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        return v.rstrip("/")

    @property
    def completions_url(self) -> str:
        return f"{self.base_url}/chat/completions"


class AppConfig(BaseModel):
    """Top-level service configuration."""

    ai: AIConfig = Field(default_factory=AIConfig)

    # Auth & CORS
    api_key: str | None = None
    allowed_origins: list[str] = ["*"]

    # Note listing
    per_page: int = 12
    max_per_page: int = 100

    @model_validator(mode="after")
    def validate_paging(self) -> AppConfig:
        if self.per_page < 1:
            raise ValueError("per_page must be at least 1")
        if self.max_per_page < self.per_page:
            raise ValueError(
                f"max_per_page ({self.max_per_page}) must be >= per_page ({self.per_page})"
            )
        return self


# ---------------------------------------------------------------------------
# Module-level config cache
# ---------------------------------------------------------------------------

_config: AppConfig | None = None
_config_path: str = "config.yaml"


def load_config(path: str | None = None) -> AppConfig:
    """Read config.yaml from disk, validate, and cache.

    The path defaults to ``$QUILLNOTE_CONFIG`` or ``config.yaml``.
    A missing file yields defaults plus environment overrides.
    """
    global _config, _config_path
    _config_path = path or os.environ.get("QUILLNOTE_CONFIG", "config.yaml")

    config_file = Path(_config_path)
    if config_file.exists():
        raw = yaml.safe_load(config_file.read_text()) or {}
    else:
        logger.warning(
            f"Config file not found: {config_file.resolve()}, using defaults"
        )
        raw = {}
    _config = AppConfig(**raw)

    logger.info(
        f"Loaded config: model={_config.ai.model}, "
        f"ai_key={'set' if _config.ai.api_key else 'missing'}"
    )
    return _config


def get_config() -> AppConfig:
    """Return the config cached by the last load_config() call.

    Env fallbacks were resolved at load time; call reload_config() to pick
    up a rotated OPENAI_API_KEY.
    """
    if _config is None:
        raise RuntimeError("Config not loaded, call load_config() first")
    return _config


def reload_config() -> AppConfig:
    """Re-read the same config path and the environment (the /reload endpoint)."""
    previous_model = _config.ai.model if _config else None
    config = load_config(_config_path)
    if previous_model and previous_model != config.ai.model:
        logger.info(f"Model changed on reload: {previous_model} -> {config.ai.model}")
    return config
