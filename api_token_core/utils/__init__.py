"""Utility modules for the API token core."""

from .api_token_utils import (
    build_secret,
    generate_secret_key,
    parse_init_api_token,
    redact_secret,
    validate_token_scope,
)
from .json_utils import dumps

# Logging utilities
from .logger import (
    AzureQueueHandler,
    ContextAwareLogger,
    CorrelationIdFilter,
    configure_logging,
    get_logger,
)
from .scheduler import AsyncioIntervalScheduler, IntervalScheduler, ScheduledJob

__all__ = [
    # Token helpers
    "build_secret",
    "generate_secret_key",
    "parse_init_api_token",
    "redact_secret",
    "validate_token_scope",
    "dumps",
    # Logging utilities
    "AzureQueueHandler",
    "ContextAwareLogger",
    "CorrelationIdFilter",
    "configure_logging",
    "get_logger",
    # Scheduling
    "AsyncioIntervalScheduler",
    "IntervalScheduler",
    "ScheduledJob",
]
