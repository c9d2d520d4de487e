"""Pydantic settings loaded from YAML configuration."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field, SecretStr

_settings: Settings | None = None

_DEFAULT_CONFIG_PATH = Path("config/settings.yaml")


class MerakiConfig(BaseModel):
    """Meraki Dashboard API configuration."""

    base_url: str = "https://api.meraki.com/api/v1"
    api_key: SecretStr = SecretStr("")
    timeout_secs: float = 10.0


class RateLimitConfig(BaseModel):
    """Client-side request throttle (Meraki allows 10 req/s per organization)."""

    requests_per_sec: float = Field(default=10.0, gt=0)
    burst: int = Field(default=10, ge=1)


class FetchConfig(BaseModel):
    """Alert fetch orchestration configuration."""

    max_concurrency: int = Field(default=5, ge=1)
    default_timespan_secs: int = 7_776_000  # 90 days
    max_chunk_secs: int = 7_776_000
    max_history_chunks: int = Field(default=4, ge=1)


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: str = "INFO"
    format: str = "json"


class Settings(BaseModel):
    """Root settings container."""

    meraki: MerakiConfig = MerakiConfig()
    rate_limit: RateLimitConfig = RateLimitConfig()
    fetch: FetchConfig = FetchConfig()
    logging: LoggingConfig = LoggingConfig()


def load_settings(path: str | Path | None = None) -> Settings:
    """Load settings from a YAML file and cache globally.

    Args:
        path: Path to YAML config. Defaults to config/settings.yaml.

    Returns:
        Parsed Settings instance.
    """
    global _settings  # noqa: PLW0603

    config_path = Path(path) if path else _DEFAULT_CONFIG_PATH

    data: dict[str, Any] = {}
    if config_path.exists():
        with open(config_path) as f:
            raw = yaml.safe_load(f)
            if isinstance(raw, dict):
                data = raw

    _settings = Settings(**data)
    return _settings


def get_settings() -> Settings:
    """Return the cached settings, loading defaults if not yet loaded."""
    global _settings  # noqa: PLW0603
    if _settings is None:
        _settings = load_settings()
    return _settings


def reset_settings() -> None:
    """Reset the cached settings (useful for testing)."""
    global _settings  # noqa: PLW0603
    _settings = None
