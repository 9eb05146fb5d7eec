"""
Constants and enums for the API token core.

This module centralizes magic strings and constants used throughout
the package to ensure consistency and maintainability.
"""

from enum import Enum
from typing import Final

# Wildcard scope for projects and environments.
ALL: Final[str] = "*"

# Username recorded on tokens created from bootstrap descriptors
BOOTSTRAP_USERNAME: Final[str] = "admin"


class Permission(str, Enum):
    """Permissions granted to a principal derived from an API token."""

    ADMIN = "ADMIN"
    CLIENT = "CLIENT"


class LogLevel(str, Enum):
    """Standard logging levels."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class EnvironmentVariable(str, Enum):
    """Standard environment variable names."""

    AZURE_STORAGE_CONNECTION = "AzureWebJobsStorage"
    DATABASE_URL = "DATABASE_URL"
    APP_ENV = "APP_ENV"
    LOG_LEVEL = "LOG_LEVEL"
    LOGS_QUEUE_ENABLED = "LOGS_QUEUE_ENABLED"
    DEBUG = "DEBUG"
    INIT_ADMIN_API_TOKENS = "INIT_ADMIN_API_TOKENS"
    ENABLE_INIT_API_TOKENS = "ENABLE_INIT_API_TOKENS"
    API_TOKEN_REFRESH_SECONDS = "API_TOKEN_REFRESH_SECONDS"


class QueueName(str, Enum):
    """Standard queue names."""

    LOGS = "logs-queue"


class DbConstraint(str, Enum):
    """Named database constraints on the api_tokens table."""

    PROJECT_FKEY = "api_tokens_project_fkey"
    ENVIRONMENT_FKEY = "api_tokens_environment_fkey"


# PostgreSQL SQLSTATE for foreign key violations
FOREIGN_KEY_VIOLATION: Final[str] = "23503"


class Timeouts:
    """Timeout and interval values in seconds."""

    ACTIVE_TOKEN_REFRESH = 60
    DATABASE_QUERY = 30


class SecretFormat:
    """Shape of generated API token secrets."""

    RANDOM_BYTES = 28  # 56 hex characters, 224 bits
    SCOPE_SEPARATOR = ":"
    SUFFIX_SEPARATOR = "."
