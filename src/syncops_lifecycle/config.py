"""Configuration management for SyncOps storage lifecycle.

This module handles application configuration using Pydantic settings.
Configuration can be loaded from environment variables or .env files.
"""

from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import Field, ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

from syncops_lifecycle.exceptions import ConfigurationError


class Settings(BaseSettings):
    """Application settings with environment variable support.

    All settings can be overridden via environment variables with
    the SYNCOPS_ prefix (e.g., SYNCOPS_STORE_DB_PATH).
    """

    model_config = SettingsConfigDict(
        env_prefix="SYNCOPS_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Policy store configuration
    store_backend: Literal["memory", "sqlite"] = Field(
        default="sqlite",
        description="Where lifecycle policies and execution logs are kept",
    )
    store_db_path: Path = Field(
        default=Path("syncops_lifecycle.sqlite3"),
        description="Path to the SQLite database used by the sqlite policy store",
    )
    default_organization_id: str = Field(
        default="org-1",
        description="Organization used by the CLI when none is given",
    )
    enforce_priority_rules: bool = Field(
        default=True,
        description=(
            "Reject saves that leave two active policies on the same priority or a "
            "legal hold lock policy outranked by another policy"
        ),
    )

    # Execution configuration
    max_concurrency: int = Field(
        default=8,
        ge=1,
        description="Maximum number of assets processed concurrently during a run",
    )
    max_retries: int = Field(
        default=3,
        ge=0,
        description="Maximum number of retries for transient storage failures",
    )
    retry_delay_seconds: float = Field(
        default=1.0,
        ge=0.0,
        description="Initial delay between retries; doubled after each attempt",
    )

    # Application Configuration
    log_level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)",
    )
    debug: bool = Field(
        default=False,
        description="Enable debug mode",
    )


@lru_cache
def get_settings() -> Settings:
    """Get cached application settings.

    Returns:
        Settings: Application settings instance.

    Raises:
        ConfigurationError: If an environment variable holds an invalid value.
    """
    try:
        return Settings()
    except ValidationError as exc:
        raise ConfigurationError(f"Invalid SYNCOPS_ settings: {exc}") from exc
