"""
Factory Boy factories for generating consistent token test data.

Create requests default to a CLIENT token on project 'default' and
environment 'development', which the shared fake store and the seeded
SQLite database both know about.
"""

import secrets
from datetime import datetime, timezone

import factory

from api_token_core.constants import ALL
from api_token_core.enums import ApiTokenType
from api_token_core.schemas import ApiToken, ApiTokenCreate
from api_token_core.utils.api_token_utils import build_secret

# ==================== CREATE REQUEST FACTORIES ====================


class ClientTokenCreateFactory(factory.Factory):
    """Factory for client token create requests."""

    class Meta:
        model = ApiTokenCreate

    username = factory.Sequence(lambda n: f"client-user-{n}")
    type = ApiTokenType.CLIENT
    project = "default"
    environment = "development"
    expires_at = None
    secret = None


class AdminTokenCreateFactory(ClientTokenCreateFactory):
    """Factory for admin token create requests."""

    username = factory.Sequence(lambda n: f"admin-user-{n}")
    type = ApiTokenType.ADMIN
    project = ALL
    environment = ALL


# ==================== STORED TOKEN FACTORIES ====================


class ApiTokenFactory(factory.Factory):
    """Factory for tokens as a store returns them."""

    class Meta:
        model = ApiToken

    username = factory.Sequence(lambda n: f"user-{n}")
    type = ApiTokenType.CLIENT
    project = "default"
    environment = "development"
    secret = factory.LazyAttribute(
        lambda o: build_secret(o.project, o.environment, secrets.token_hex(28))
    )
    created_at = factory.LazyFunction(lambda: datetime.now(timezone.utc))
    expires_at = None
