"""
Unit tests for first-boot seeding of admin tokens.
"""

import logging

import pytest

from api_token_core.constants import ALL, BOOTSTRAP_USERNAME
from api_token_core.enums import ApiTokenType
from tests.fixtures.factories import ApiTokenFactory


@pytest.fixture
def bootstrapper(token_service):
    return token_service.bootstrapper


class TestSeed:
    """Test TokenBootstrapper.seed."""

    async def test_seed_empty_store(self, bootstrapper, fake_store, token_service):
        """Test each descriptor becomes a cached admin token."""
        created = await bootstrapper.seed(["*:*:abc123"])

        assert created == 1
        token = fake_store.tokens["*:*.abc123"]
        assert token.type == ApiTokenType.ADMIN
        assert token.username == BOOTSTRAP_USERNAME
        assert token.project == ALL
        assert token.environment == ALL
        assert token_service.get_user_for_token("*:*.abc123") is not None

    async def test_second_seed_inserts_nothing(self, bootstrapper, fake_store):
        """Test seeding is a no-op once tokens exist."""
        await bootstrapper.seed(["*:*:abc123"])
        inserts = fake_store.insert_calls

        assert await bootstrapper.seed(["*:*:abc123", "*:*:def456"]) == 0

        assert fake_store.insert_calls == inserts
        assert list(fake_store.tokens) == ["*:*.abc123"]

    async def test_skip_when_store_has_tokens(self, bootstrapper, fake_store):
        """Test any existing token, not just admin ones, blocks seeding."""
        fake_store.put(ApiTokenFactory())

        assert await bootstrapper.seed(["*:*:abc123"]) == 0
        assert fake_store.insert_calls == 0

    async def test_empty_descriptor_list(self, bootstrapper, fake_store):
        assert await bootstrapper.seed([]) == 0
        assert fake_store.tokens == {}

    async def test_malformed_descriptor_aborts_rest(self, bootstrapper, fake_store, caplog):
        """Test the first bad descriptor stops seeding but keeps earlier tokens."""
        with caplog.at_level(logging.ERROR):
            created = await bootstrapper.seed(["*:*:first", "not-a-descriptor", "*:*:third"])

        assert created == 1
        assert list(fake_store.tokens) == ["*:*.first"]
        assert "Unable to create initial Admin API tokens" in caplog.text

    async def test_scoped_descriptor_rejected(self, bootstrapper, fake_store, caplog):
        """Test a descriptor naming one project breaks the admin scope rule."""
        with caplog.at_level(logging.ERROR):
            created = await bootstrapper.seed(["default:production:abc"])

        assert created == 0
        assert fake_store.insert_calls == 0
        assert "Unable to create initial Admin API tokens" in caplog.text

    async def test_store_failure_is_logged_not_raised(self, bootstrapper, fake_store, caplog):
        """Test a failing count is logged and nothing is created."""

        async def failing_count():
            raise ConnectionRefusedError("database unavailable")

        fake_store.count = failing_count

        with caplog.at_level(logging.ERROR):
            assert await bootstrapper.seed(["*:*:abc123"]) == 0

        assert "database unavailable" in caplog.text
