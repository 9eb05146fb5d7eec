"""
API token core.

Issues, validates and revokes admin and client API tokens for a
feature-management backend.
"""

from .constants import ALL, Permission
from .enums import ApiTokenType
from .exceptions import ForeignKeyViolationError, RepositoryError, ValidationError
from .schemas import ApiToken, ApiTokenCreate, ApiUser, TokenScope
from .services import ApiTokenService, create_api_token_service

__version__ = "0.1.0"

__all__ = [
    "ALL",
    "ApiToken",
    "ApiTokenCreate",
    "ApiTokenService",
    "ApiTokenType",
    "ApiUser",
    "ForeignKeyViolationError",
    "Permission",
    "RepositoryError",
    "TokenScope",
    "ValidationError",
    "create_api_token_service",
]
