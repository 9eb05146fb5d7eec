"""Token services."""

from .active_token_cache import ActiveTokenCache
from .api_token_service import ApiTokenService, create_api_token_service
from .token_bootstrap import TokenBootstrapper

__all__ = [
    "ActiveTokenCache",
    "ApiTokenService",
    "TokenBootstrapper",
    "create_api_token_service",
]
