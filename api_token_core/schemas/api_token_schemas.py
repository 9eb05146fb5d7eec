"""
Pydantic schemas for API tokens.

Defines the token records exchanged with token stores, the create request,
the scope record checked before persisting, and the principal derived from
a validated secret.
"""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from ..constants import ALL, Permission
from ..enums import ApiTokenType


class TokenScope(BaseModel):
    """The (type, project, environment) triple that scoping rules apply to."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    type: ApiTokenType
    project: str = Field(min_length=1)
    environment: str = Field(min_length=1)


class ApiTokenCreate(BaseModel):
    """Request to create a token. ``secret`` is only supplied when seeding."""

    model_config = ConfigDict(str_strip_whitespace=True, extra="forbid")

    username: str = Field(min_length=1, description="Principal the token acts for")
    type: ApiTokenType
    project: str = Field(default=ALL, min_length=1, description="Project id or ALL")
    environment: str = Field(default=ALL, min_length=1, description="Environment name or ALL")
    expires_at: Optional[datetime] = Field(default=None, description="None never expires")
    secret: Optional[str] = Field(default=None, min_length=1)

    @property
    def scope(self) -> TokenScope:
        return TokenScope(type=self.type, project=self.project, environment=self.environment)


class ApiToken(BaseModel):
    """A persisted API token."""

    model_config = ConfigDict(from_attributes=True, frozen=True)

    secret: str
    username: str
    type: ApiTokenType
    project: str = ALL
    environment: str = ALL
    created_at: datetime
    expires_at: Optional[datetime] = None


class ApiUser(BaseModel):
    """Principal for a caller authenticated with an API token."""

    model_config = ConfigDict(frozen=True)

    username: str
    permissions: List[Permission]
    project: str
    environment: str
    type: ApiTokenType

    @classmethod
    def from_token(cls, token: ApiToken) -> "ApiUser":
        permissions = [Permission.ADMIN] if token.type == ApiTokenType.ADMIN else [Permission.CLIENT]
        return cls(
            username=token.username,
            permissions=permissions,
            project=token.project,
            environment=token.environment,
            type=token.type,
        )

    def has_permission(self, permission: Permission) -> bool:
        return permission in self.permissions
