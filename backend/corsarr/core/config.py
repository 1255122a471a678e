"""Application configuration using Pydantic Settings."""

from __future__ import annotations

import json
import os
from functools import lru_cache
from pathlib import Path
from typing import Any, Literal

from pydantic import Field, field_validator
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
)


# settings.json "indexer" block key -> Settings field
_INDEXER_KEYS = {
    "base_url": "indexer_base_url",
    "timeout": "request_timeout",
    "retries": "request_retries",
    "page_error_policy": "page_error_policy",
}


def _default_data_dir() -> Path:
    if Path("/config").exists():
        # Container environment
        return Path("/config")
    # __file__ is backend/corsarr/core/config.py, so go up to backend/ and add data
    return (Path(__file__).parent.parent.parent / "data").resolve()


def json_config_settings_source(
    settings: BaseSettings | None = None,
) -> dict[str, Any]:  # noqa: ANN001
    """Load settings from settings.json file.

    This source has lowest priority - env vars will override JSON values.

    Supports a nested ``{"indexer": {"base_url": ..., "timeout": ...}}`` block
    next to flat top-level keys.

    Args:
        settings: The Settings class (not instance) being constructed.

    Returns:
        Dictionary with setting keys (lowercase) and values from JSON file.
    """
    data_dir_env = os.environ.get("CORSARR_DATA_DIR", "")
    data_dir = Path(data_dir_env) if data_dir_env else _default_data_dir()
    settings_file = data_dir / "config" / "settings.json"

    if not settings_file.exists():
        return {}

    try:
        with settings_file.open("r") as f:
            data = json.load(f)
    except (OSError, ValueError):
        return {}

    if not isinstance(data, dict):
        return {}

    flattened: dict[str, Any] = {}
    indexer = data.pop("indexer", None)
    if isinstance(indexer, dict):
        for key, field_name in _INDEXER_KEYS.items():
            if key in indexer:
                flattened[field_name] = indexer[key]

    for key, value in data.items():
        flattened.setdefault(key, value)

    # Convert keys to lowercase to match field names
    return {k.lower(): v for k, v in flattened.items()}


class Settings(BaseSettings):
    """Application settings.

    Settings are loaded from:
    1. JSON file (settings.json in config directory) - lowest priority
    2. .env file
    3. Environment variables - highest priority (override JSON/.env)

    All settings are prefixed with CORSARR_ (e.g., CORSARR_INDEXER_BASE_URL=...).

    See: https://docs.pydantic.dev/latest/concepts/pydantic_settings/
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="CORSARR_",
        case_sensitive=False,
        extra="ignore",  # Ignore extra environment variables
    )

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        """Customize settings sources - JSON file first, then env vars.

        Priority (lowest to highest):
        1. JSON file (settings.json)
        2. .env file
        3. Environment variables
        4. Init settings (values passed to Settings()) - highest priority
        """
        # Sources earlier in the tuple take precedence in pydantic-settings
        return (  # type: ignore[return-value]
            init_settings,
            env_settings,
            dotenv_settings,
            json_config_settings_source,
        )

    # Application
    env: Literal["development", "production", "testing"] = Field(
        default="development",
        description="Application environment (development, production, testing)",
    )

    # Host settings
    host_bind_address: str = Field(
        default="127.0.0.1",
        description="Host address to bind the server to",
    )

    host_port: int = Field(
        default=8000,
        ge=1,
        le=65535,
        description="Port number to bind the server to",
    )

    # Logging
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO",
        description="Logging level",
    )

    data_dir: Path = Field(
        default_factory=_default_data_dir,
        description="Base directory for application data (config, logs)",
    )

    # Indexer
    indexer_base_url: str = Field(
        default="https://corsaro.red/",
        description="Site link of the indexer; API endpoints are resolved against it",
    )

    request_timeout: float = Field(
        default=30,
        gt=0,
        description="HTTP request timeout in seconds",
    )

    request_retries: int = Field(
        default=1,
        ge=0,
        description="Connection retries performed by the HTTP transport",
    )

    page_error_policy: Literal["skip", "abort"] = Field(
        default="skip",
        description="On a search page that fails to parse: skip to the next page or stop",
    )

    @field_validator("indexer_base_url")
    @classmethod
    def _normalize_base_url(cls, value: str) -> str:
        value = value.strip()
        if not value.startswith(("http://", "https://")):
            raise ValueError("indexer_base_url must be an http(s) URL")
        return value.rstrip("/") + "/"

    @property
    def config_dir(self) -> Path:
        """Directory for configuration files (settings.json, etc.)."""
        return self.data_dir / "config"

    @property
    def logs_dir(self) -> Path:
        """Directory for log files (if file logging is enabled)."""
        return self.data_dir / "logs"

    @property
    def is_debug(self) -> bool:
        """Check if running in debug/development mode."""
        return self.env == "development"

    @property
    def is_production(self) -> bool:
        """Check if running in production mode."""
        return self.env == "production"

    @property
    def is_testing(self) -> bool:
        """Check if running in testing mode."""
        return self.env == "testing"

    def model_post_init(self, __context: object) -> None:
        """Post-initialization: create data directories if they don't exist."""
        self.data_dir = self.data_dir.resolve()

        self.data_dir.mkdir(parents=True, exist_ok=True)
        self.config_dir.mkdir(parents=True, exist_ok=True)
        self.logs_dir.mkdir(parents=True, exist_ok=True)


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get the cached settings instance.

    Creates and caches the settings instance on first call.
    Subsequent calls return the cached instance.

    Returns:
        Settings instance
    """
    return Settings()


def reload_settings() -> Settings:
    """Reload settings from all sources (JSON, .env, env vars).

    Clears the cache and creates a new Settings instance.

    Returns:
        New Settings instance
    """
    get_settings.cache_clear()
    return get_settings()
