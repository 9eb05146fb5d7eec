"""
Enums used across the api_token_core package.

This module contains enum definitions that are used by multiple modules
to avoid circular import issues.
"""

import enum


class ApiTokenType(str, enum.Enum):
    """Types of API tokens."""

    ADMIN = "ADMIN"
    CLIENT = "CLIENT"
