"""Token store contract and implementations."""

from .api_token_store import ApiTokenStore
from .sql_api_token_store import SqlApiTokenStore

__all__ = [
    "ApiTokenStore",
    "SqlApiTokenStore",
]
