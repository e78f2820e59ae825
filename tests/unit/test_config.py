"""Unit tests for configuration module."""

from pathlib import Path

import pytest

from syncops_lifecycle.config import Settings, get_settings
from syncops_lifecycle.exceptions import ConfigurationError


class TestSettings:
    """Test suite for Settings class."""

    def test_default_settings(self) -> None:
        """Test that default settings are properly initialized."""
        settings = Settings()

        assert settings.store_backend == "sqlite"
        assert settings.store_db_path == Path("syncops_lifecycle.sqlite3")
        assert settings.enforce_priority_rules is True
        assert settings.log_level == "INFO"
        assert settings.debug is False
        assert settings.max_retries == 3

    def test_settings_from_env(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test loading settings from environment variables."""
        monkeypatch.setenv("SYNCOPS_STORE_BACKEND", "memory")
        monkeypatch.setenv("SYNCOPS_LOG_LEVEL", "DEBUG")
        monkeypatch.setenv("SYNCOPS_ENFORCE_PRIORITY_RULES", "false")
        monkeypatch.setenv("SYNCOPS_MAX_CONCURRENCY", "4")

        # Clear the cache to ensure fresh settings
        get_settings.cache_clear()

        settings = get_settings()

        assert settings.store_backend == "memory"
        assert settings.log_level == "DEBUG"
        assert settings.enforce_priority_rules is False
        assert settings.max_concurrency == 4

        # Clean up
        get_settings.cache_clear()

    def test_invalid_concurrency_rejected(self) -> None:
        """Test that a non-positive concurrency limit is refused."""
        with pytest.raises(Exception):  # Pydantic ValidationError
            Settings(max_concurrency=0)

    def test_get_settings_returns_cached_instance(self) -> None:
        """Test that get_settings returns the same cached instance."""
        get_settings.cache_clear()

        settings1 = get_settings()
        settings2 = get_settings()

        assert settings1 is settings2

        # Clean up
        get_settings.cache_clear()

    def test_invalid_environment_raises_configuration_error(
        self, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """Test that bad environment values surface as ConfigurationError."""
        monkeypatch.setenv("SYNCOPS_MAX_CONCURRENCY", "0")
        get_settings.cache_clear()

        with pytest.raises(ConfigurationError):
            get_settings()

        get_settings.cache_clear()
