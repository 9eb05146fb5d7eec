"""
Centralized configuration management for the API token core.

This module provides a unified configuration system with support for:
- Environment variables
- Bootstrap admin tokens
- Runtime configuration
- Validation using Pydantic
"""

import os
from typing import Any, List, Optional

from pydantic import BaseModel, Field, field_validator

from .constants import EnvironmentVariable, LogLevel, QueueName, Timeouts


def _env_flag(name: str, default: str) -> bool:
    return os.getenv(name, default).lower() == "true"


def _split_token_list(raw: Optional[str]) -> List[str]:
    if not raw:
        return []
    return [part.strip() for part in raw.split(",") if part.strip()]


class DatabaseConfig(BaseModel):
    """Database connection configuration."""

    connection_string: str = Field(
        default_factory=lambda: os.getenv(
            EnvironmentVariable.DATABASE_URL.value, "sqlite+aiosqlite:///./api_tokens.db"
        ),
        description="Database connection string",
    )
    pool_size: int = Field(default=5, description="Connection pool size")
    max_overflow: int = Field(default=10, description="Maximum overflow connections")
    pool_timeout: int = Field(default=30, description="Pool timeout in seconds")
    echo: bool = Field(default=False, description="Echo SQL statements")
    development_mode: bool = Field(default=False, description="Allow destructive schema operations")

    def __repr__(self) -> str:
        """String representation without credentials."""
        scheme = self.connection_string.split("://", 1)[0]
        return f"DatabaseConfig(scheme='{scheme}', pool_size={self.pool_size}, echo={self.echo})"


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: str = Field(
        default_factory=lambda: os.getenv(EnvironmentVariable.LOG_LEVEL.value, LogLevel.INFO.value),
        description="Logging level",
    )
    format: str = Field(
        default="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        description="Log format string",
    )
    enable_queue: bool = Field(
        default_factory=lambda: _env_flag(EnvironmentVariable.LOGS_QUEUE_ENABLED.value, "false"),
        description="Ship structured logs to an Azure Storage queue",
    )
    queue_name: str = Field(default=QueueName.LOGS.value, description="Logs queue name")
    queue_connection_string: str = Field(
        default_factory=lambda: os.getenv(EnvironmentVariable.AZURE_STORAGE_CONNECTION.value, ""),
        description="Azure Storage connection string",
    )

    @field_validator("level")
    def validate_log_level(cls, v: str) -> str:
        """Validate log level is valid."""
        valid_levels = {level.value for level in LogLevel}
        if v.upper() not in valid_levels:
            raise ValueError(f"Invalid log level: {v}. Must be one of {valid_levels}")
        return v.upper()


class AuthenticationConfig(BaseModel):
    """API token authentication configuration."""

    init_api_tokens: List[str] = Field(
        default_factory=lambda: _split_token_list(
            os.getenv(EnvironmentVariable.INIT_ADMIN_API_TOKENS.value)
        ),
        description="Admin token descriptors (project:environment:secret) seeded into an empty store",
    )
    enable_init_api_tokens: bool = Field(
        default_factory=lambda: _env_flag(
            EnvironmentVariable.ENABLE_INIT_API_TOKENS.value, "true"
        ),
        description="Seed init_api_tokens on first boot",
    )
    refresh_interval_seconds: float = Field(
        default_factory=lambda: float(
            os.getenv(
                EnvironmentVariable.API_TOKEN_REFRESH_SECONDS.value,
                str(Timeouts.ACTIVE_TOKEN_REFRESH),
            )
        ),
        description="Seconds between active token cache refreshes",
    )

    @field_validator("init_api_tokens", mode="before")
    def split_init_api_tokens(cls, v: Any) -> Any:
        """Accept a comma-separated string as well as a list."""
        if isinstance(v, str):
            return _split_token_list(v)
        return v

    @field_validator("refresh_interval_seconds")
    def validate_refresh_interval(cls, v: float) -> float:
        """Refresh interval must be positive."""
        if v <= 0:
            raise ValueError(f"Invalid refresh interval: {v}. Must be greater than zero")
        return v

    @property
    def bootstrap_enabled(self) -> bool:
        """Whether first-boot seeding should run at all."""
        return self.enable_init_api_tokens and bool(self.init_api_tokens)


class AppConfig(BaseModel):
    """Main application configuration."""

    environment: str = Field(
        default_factory=lambda: os.getenv(EnvironmentVariable.APP_ENV.value, "development"),
        description="Application environment",
    )
    debug: bool = Field(
        default_factory=lambda: _env_flag(EnvironmentVariable.DEBUG.value, "false"),
        description="Debug mode",
    )

    # Sub-configurations
    database: DatabaseConfig = Field(
        default_factory=DatabaseConfig, description="Database configuration"
    )
    logging: LoggingConfig = Field(
        default_factory=LoggingConfig, description="Logging configuration"
    )
    authentication: AuthenticationConfig = Field(
        default_factory=AuthenticationConfig, description="API token authentication configuration"
    )


# Global configuration instance
_config: Optional[AppConfig] = None


def get_config() -> AppConfig:
    """Get the global configuration instance."""
    global _config
    if _config is None:
        _config = AppConfig()
    return _config


def set_config(config: AppConfig) -> None:
    """Set the global configuration instance."""
    global _config
    _config = config


def reset_config() -> None:
    """Reset the global configuration instance."""
    global _config
    _config = None
