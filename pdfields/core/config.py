"""Run configuration: YAML file parsed into Pydantic models."""

from pathlib import Path
from typing import Any, Literal, Optional

import yaml
from pydantic import BaseModel, Field, ValidationError

from pdfields.core.errors import ConfigError

DEFAULT_BATCH_SIZE = 20


class OpenRouterConfig(BaseModel):
    """OpenRouter chat-completions endpoint settings."""

    model: str = Field(default="google/gemini-2.5-flash", min_length=1)
    base_url: str = "https://openrouter.ai/api/v1"
    api_key_env: str = "OPENROUTER_API_KEY"
    timeout_seconds: float = Field(default=300.0, gt=0)
    connect_timeout: float = Field(default=30.0, gt=0)
    retry_attempts: int = Field(default=3, ge=1)
    retry_delay: float = Field(default=2.0, ge=0)
    retry_backoff: float = Field(default=2.0, ge=1)


class OllamaConfig(BaseModel):
    """Local Ollama vision model settings."""

    model: str = Field(default="qwen2.5vl:7b", min_length=1)
    host: Optional[str] = None
    page_dpi: int = Field(default=150, ge=50, le=600)
    temperature: float = Field(default=0.0, ge=0.0)


class ExtractionConfig(BaseModel):
    """Top-level configuration for an extraction run."""

    backend: Literal["openrouter", "ollama"] = "openrouter"
    batch_size: int = Field(
        default=DEFAULT_BATCH_SIZE, ge=1, description="Fields per extraction request"
    )
    openrouter: OpenRouterConfig = Field(default_factory=OpenRouterConfig)
    ollama: OllamaConfig = Field(default_factory=OllamaConfig)

    def with_overrides(self, **overrides: Any) -> "ExtractionConfig":
        """Return a re-validated copy with top-level values replaced.

        ``None`` values are ignored so unset CLI flags keep the file's value.
        ``model`` applies to whichever backend is selected after the update.
        """
        data = self.model_dump()
        model = overrides.pop("model", None)
        data.update({k: v for k, v in overrides.items() if v is not None})
        if model is not None and data.get("backend") in ("openrouter", "ollama"):
            data[data["backend"]]["model"] = model
        return _validate(data)


def _validate(data: dict) -> ExtractionConfig:
    try:
        return ExtractionConfig.model_validate(data)
    except ValidationError as exc:
        raise ConfigError(f"Invalid configuration: {exc}") from exc


def load_config(path: str | Path | None = None) -> ExtractionConfig:
    """Load a YAML config from disk, or return defaults when no path is given."""
    if path is None:
        return ExtractionConfig()

    path = Path(path)
    try:
        with open(path) as f:
            raw = yaml.safe_load(f)
    except (OSError, yaml.YAMLError) as exc:
        raise ConfigError(f"Cannot read config {path}: {exc}") from exc

    if raw is None:
        raw = {}
    if not isinstance(raw, dict):
        raise ConfigError(f"Config {path} must be a mapping, got {type(raw).__name__}")
    return _validate(raw)
