"""
Unit tests for configuration management.
"""

import pytest
from pydantic import ValidationError as PydanticValidationError

from api_token_core.config import (
    AppConfig,
    AuthenticationConfig,
    DatabaseConfig,
    LoggingConfig,
    get_config,
    reset_config,
    set_config,
)

_ENV_VARS = [
    "INIT_ADMIN_API_TOKENS",
    "ENABLE_INIT_API_TOKENS",
    "API_TOKEN_REFRESH_SECONDS",
    "DATABASE_URL",
    "LOG_LEVEL",
    "LOGS_QUEUE_ENABLED",
    "AzureWebJobsStorage",
    "APP_ENV",
    "DEBUG",
]


@pytest.fixture
def clean_env(monkeypatch):
    for name in _ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


class TestAuthenticationConfig:
    """Test AuthenticationConfig."""

    def test_defaults(self, clean_env):
        """Test seeding is enabled but has nothing to seed by default."""
        config = AuthenticationConfig()

        assert config.init_api_tokens == []
        assert config.enable_init_api_tokens is True
        assert config.refresh_interval_seconds == 60
        assert config.bootstrap_enabled is False

    def test_init_tokens_from_env(self, clean_env):
        """Test the env list is comma-separated and trimmed."""
        clean_env.setenv("INIT_ADMIN_API_TOKENS", "*:*:first, *:*:second,")

        config = AuthenticationConfig()

        assert config.init_api_tokens == ["*:*:first", "*:*:second"]
        assert config.bootstrap_enabled is True

    def test_seeding_disabled_from_env(self, clean_env):
        clean_env.setenv("INIT_ADMIN_API_TOKENS", "*:*:first")
        clean_env.setenv("ENABLE_INIT_API_TOKENS", "false")

        assert AuthenticationConfig().bootstrap_enabled is False

    def test_init_tokens_as_string(self, clean_env):
        """Test a comma-separated string is accepted directly."""
        config = AuthenticationConfig(init_api_tokens="*:*:a,*:*:b")

        assert config.init_api_tokens == ["*:*:a", "*:*:b"]

    def test_refresh_interval_from_env(self, clean_env):
        clean_env.setenv("API_TOKEN_REFRESH_SECONDS", "15")

        assert AuthenticationConfig().refresh_interval_seconds == 15.0

    @pytest.mark.parametrize("interval", [0, -1])
    def test_refresh_interval_must_be_positive(self, clean_env, interval):
        with pytest.raises(PydanticValidationError):
            AuthenticationConfig(refresh_interval_seconds=interval)


class TestLoggingConfig:
    """Test LoggingConfig."""

    def test_level_is_normalised(self, clean_env):
        assert LoggingConfig(level="debug").level == "DEBUG"

    def test_invalid_level(self, clean_env):
        with pytest.raises(PydanticValidationError):
            LoggingConfig(level="LOUD")

    def test_queue_settings_from_env(self, clean_env):
        clean_env.setenv("LOGS_QUEUE_ENABLED", "true")
        clean_env.setenv("AzureWebJobsStorage", "UseDevelopmentStorage=true")

        config = LoggingConfig()

        assert config.enable_queue is True
        assert config.queue_connection_string == "UseDevelopmentStorage=true"
        assert config.queue_name == "logs-queue"


class TestDatabaseConfig:
    """Test DatabaseConfig."""

    def test_default_connection_string(self, clean_env):
        assert DatabaseConfig().connection_string.startswith("sqlite+aiosqlite://")

    def test_connection_string_from_env(self, clean_env):
        clean_env.setenv("DATABASE_URL", "postgresql+psycopg://app:hunter2@db/tokens")

        config = DatabaseConfig()

        assert config.connection_string == "postgresql+psycopg://app:hunter2@db/tokens"
        assert "hunter2" not in repr(config)
        assert "postgresql+psycopg" in repr(config)


class TestGlobalConfig:
    """Test the global config accessors."""

    def test_get_config_is_cached(self, clean_env):
        assert get_config() is get_config()

    def test_set_and_reset(self, clean_env):
        config = AppConfig(environment="test")

        set_config(config)
        assert get_config() is config
        assert get_config().environment == "test"

        reset_config()
        assert get_config() is not config

    def test_reads_environment(self, clean_env):
        clean_env.setenv("APP_ENV", "production")
        clean_env.setenv("DEBUG", "true")

        config = AppConfig()

        assert config.environment == "production"
        assert config.debug is True
