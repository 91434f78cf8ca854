"""Application settings and configuration."""
import os
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from claudiator import __version__
from claudiator.config_store import ConfigStore

LOG_LEVELS = ("debug", "info", "warning", "error", "critical")


class Settings(BaseSettings):
    """Server settings, read from CLAUDIATOR_* environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="CLAUDIATOR_",
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )

    # Auth
    api_key: str = Field(min_length=1)

    # App
    app_name: str = "Claudiator Server"
    app_version: str = __version__
    api_v1_prefix: str = "/api/v1"
    host: str = "0.0.0.0"
    port: int = 3000

    # Database
    database_path: str = "claudiator.db"
    database_echo: bool = False
    db_pool_size: int = Field(default=4, ge=1)
    db_pool_timeout: float = Field(default=10.0, gt=0)
    db_busy_timeout_ms: int = Field(default=5000, ge=0)

    # Retry on busy/locked
    store_retry_attempts: int = Field(default=5, ge=1)
    store_retry_min_wait: float = Field(default=0.05, ge=0)
    store_retry_max_wait: float = Field(default=1.0, ge=0)

    # Logging
    log_level: str = "info"
    log_dir: str = "logs"  # empty disables the rotating file

    @field_validator("api_key")
    @classmethod
    def _api_key_not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("api_key must not be empty")
        return value

    @field_validator("log_level")
    @classmethod
    def _known_log_level(cls, value: str) -> str:
        value = value.strip().lower()
        if value not in LOG_LEVELS:
            raise ValueError(f"log_level must be one of {', '.join(LOG_LEVELS)}")
        return value

    @field_validator("database_path")
    @classmethod
    def _file_database(cls, value: str) -> str:
        if value.strip() in ("", ":memory:"):
            raise ValueError("database_path must name a file")
        return value


# Config file path: CLAUDIATOR_CONFIG_FILE (optional, YAML or JSON; master over env)
_config_store: Optional[ConfigStore] = None


def get_config_store() -> ConfigStore:
    """Return the process-wide config store, loading it on first use."""
    global _config_store
    if _config_store is None:
        _config_store = ConfigStore(Settings, os.environ.get("CLAUDIATOR_CONFIG_FILE"))
        _config_store.load_initial()
    return _config_store


def get_settings() -> Settings:
    """Return current Settings snapshot."""
    return get_config_store().get_settings()
