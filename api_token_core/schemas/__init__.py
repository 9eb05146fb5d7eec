"""Pydantic schemas for the API token core."""

from .api_token_schemas import ApiToken, ApiTokenCreate, ApiUser, TokenScope

__all__ = [
    "ApiToken",
    "ApiTokenCreate",
    "ApiUser",
    "TokenScope",
]
