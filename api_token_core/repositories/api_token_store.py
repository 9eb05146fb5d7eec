"""
Store contract the token service persists through.
"""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import List

from ..schemas.api_token_schemas import ApiToken, ApiTokenCreate


class ApiTokenStore(ABC):
    """
    Durable storage for API tokens.

    Implementations own the canonical token records. ``insert`` must raise
    ``ForeignKeyViolationError`` when the project or environment does not
    exist, naming the violated constraint.
    """

    @abstractmethod
    async def get_all(self) -> List[ApiToken]:
        """Return every token, expired or not."""

    @abstractmethod
    async def get_all_active(self) -> List[ApiToken]:
        """Return tokens that never expire or expire in the future."""

    @abstractmethod
    async def count(self) -> int:
        """Return the total number of tokens."""

    @abstractmethod
    async def insert(self, new_token: ApiTokenCreate) -> ApiToken:
        """Persist a token whose secret is already set and return the stored record."""

    @abstractmethod
    async def set_expiry(self, secret: str, expires_at: datetime) -> ApiToken:
        """Change a token's expiry and return the updated record."""

    @abstractmethod
    async def delete(self, secret: str) -> None:
        """Remove a token. Unknown secrets are ignored."""
