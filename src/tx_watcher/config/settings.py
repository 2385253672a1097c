"""Application settings loaded from environment variables and config files.

Configuration is loaded from (highest priority first):
1. Environment variables (prefix: ``TXWATCH_``, nested via ``__``)
2. YAML config file (``config_path`` or ``TXWATCH_CONFIG_PATH`` env var)
3. Defaults defined here
"""

from __future__ import annotations

import enum
from pathlib import Path
from typing import Any, Self

import yaml
from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class LogLevel(enum.StrEnum):
    """Accepted logging levels."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"


# ---------------------------------------------------------------------------
# Sub-config models
# ---------------------------------------------------------------------------


class GatewayConfig(BaseSettings):
    """Transaction gateway connection settings."""

    model_config = SettingsConfigDict(
        env_prefix="TXWATCH_GATEWAY__",
        case_sensitive=False,
    )

    url: str = "http://localhost:3000"
    api_prefix: str = "/api/v2"
    api_key: str = ""
    timeout: float = 30.0

    @property
    def base_url(self) -> str:
        """Gateway URL joined with the API prefix, without trailing slash."""
        prefix = self.api_prefix.strip("/")
        root = self.url.rstrip("/")
        return f"{root}/{prefix}" if prefix else root


class WatcherConfig(BaseSettings):
    """Timing settings for the transaction watcher."""

    model_config = SettingsConfigDict(
        env_prefix="TXWATCH_WATCHER__",
        case_sensitive=False,
    )

    poll_interval: float = Field(default=6.0, gt=0, description="Seconds between status polls")
    max_polls: int = Field(default=150, gt=0, description="Poll attempts before giving up")
    cleanup_delay: float = Field(
        default=60.0,
        ge=0,
        description="Seconds a terminal entry stays readable before removal",
    )
    max_age: float = Field(
        default=3600.0,
        gt=0,
        description="Seconds after registration an entry is considered stale",
    )
    sweep_interval: float = Field(default=300.0, gt=0, description="Staleness sweep period")


# ---------------------------------------------------------------------------
# Top-level config
# ---------------------------------------------------------------------------


def _load_yaml(path: str | Path) -> dict[str, Any]:
    """Load a YAML configuration file and return its contents as a dict.

    Returns an empty dict if the file doesn't exist or is empty.
    """
    p = Path(path)
    if not p.exists():
        return {}
    text = p.read_text(encoding="utf-8")
    data = yaml.safe_load(text)
    return data if isinstance(data, dict) else {}


class AppConfig(BaseSettings):
    """Top-level application configuration.

    Loads settings from environment variables (``TXWATCH_`` prefix),
    an optional YAML file, and built-in defaults.
    """

    model_config = SettingsConfigDict(
        env_prefix="TXWATCH_",
        env_nested_delimiter="__",
        case_sensitive=False,
    )

    debug: bool = False
    log_level: LogLevel = LogLevel.INFO
    config_path: str = ""

    gateway: GatewayConfig = Field(default_factory=GatewayConfig)
    watcher: WatcherConfig = Field(default_factory=WatcherConfig)

    @model_validator(mode="before")
    @classmethod
    def _merge_yaml(cls, values: dict[str, Any]) -> dict[str, Any]:
        """Merge YAML config file contents under the env var overrides."""
        config_path = values.get("config_path", "")
        if not config_path:
            return values
        yaml_data = _load_yaml(config_path)
        # YAML values serve as defaults; env vars (already in *values*) win.
        for key, val in yaml_data.items():
            if key not in values or values[key] is None:
                values[key] = val
            elif isinstance(val, dict) and isinstance(values.get(key), dict):
                values[key] = {**val, **values[key]}
        return values

    @property
    def effective_log_level(self) -> str:
        """``DEBUG`` when debug mode is on, otherwise the configured level."""
        return LogLevel.DEBUG.value if self.debug else self.log_level.value

    @classmethod
    def from_yaml(cls, path: str | Path) -> Self:
        """Construct ``AppConfig`` loading defaults from a YAML file.

        Environment variables still override YAML values.
        """
        return cls(config_path=str(path))
