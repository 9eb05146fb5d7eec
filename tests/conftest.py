"""
Test fixtures for the API token core.

This module provides shared test fixtures including database setup,
token stores and a manually driven scheduler.
"""

import pytest

from api_token_core.config import AuthenticationConfig, reset_config
from api_token_core.db import (
    DatabaseManager,
    Environment,
    Project,
    get_development_config,
    import_all_models,
    set_db_manager,
)
from api_token_core.exceptions import clear_correlation_id
from api_token_core.repositories import SqlApiTokenStore
from api_token_core.services import ApiTokenService
from api_token_core.utils.logger import reset_logging
from tests.fixtures.fake_store import FakeApiTokenStore
from tests.fixtures.scheduler import ManualScheduler


@pytest.fixture(autouse=True)
def reset_globals():
    """Start every test without cached config, logger or correlation id."""
    reset_config()
    reset_logging()
    clear_correlation_id()
    yield
    reset_config()
    reset_logging()
    clear_correlation_id()
    set_db_manager(None)


# ==================== DATABASE FIXTURES ====================


@pytest.fixture
async def db_manager() -> DatabaseManager:
    """
    In-memory SQLite database manager with all tables created.

    Tables are dropped and the engine disposed after each test.
    """
    import_all_models()
    manager = DatabaseManager(get_development_config())
    await manager.create_tables()

    yield manager

    await manager.drop_tables()
    await manager.close()


@pytest.fixture
async def seeded_scopes(db_manager: DatabaseManager):
    """Create the 'default' project and two environments tokens can point at."""
    async with db_manager.get_session() as session:
        session.add_all(
            [
                Project(id="default", name="Default"),
                Environment(name="development"),
                Environment(name="production"),
            ]
        )
        await session.commit()


@pytest.fixture
def sql_store(db_manager: DatabaseManager) -> SqlApiTokenStore:
    return SqlApiTokenStore(db_manager.session_factory)


# ==================== SERVICE FIXTURES ====================


@pytest.fixture
def fake_store() -> FakeApiTokenStore:
    """In-memory store that knows project 'default' and two environments."""
    return FakeApiTokenStore(projects={"default"}, environments={"development", "production"})


@pytest.fixture
def scheduler() -> ManualScheduler:
    return ManualScheduler()


@pytest.fixture
def auth_config() -> AuthenticationConfig:
    """Authentication settings with seeding off and a 60 second refresh."""
    return AuthenticationConfig(
        init_api_tokens=[], enable_init_api_tokens=False, refresh_interval_seconds=60
    )


@pytest.fixture
def token_service(fake_store, auth_config, scheduler) -> ApiTokenService:
    """Token service over the fake store; not initialized."""
    service = ApiTokenService(fake_store, config=auth_config, scheduler=scheduler)
    yield service
    service.destroy()
