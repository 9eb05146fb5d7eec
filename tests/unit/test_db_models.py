"""
Unit tests for database models and the async database manager.
"""

from datetime import datetime, timezone

import pytest
from sqlalchemy.exc import IntegrityError

from api_token_core.config import DatabaseConfig
from api_token_core.db import (
    ApiTokenRecord,
    DatabaseManager,
    Project,
    close_db,
    get_db_manager,
    get_development_config,
    initialize_db,
)
from api_token_core.exceptions import ServiceError


class TestDatabaseManager:
    """Test DatabaseManager and the module-level accessors."""

    def test_development_config(self):
        config = get_development_config()

        assert config.connection_string == "sqlite+aiosqlite:///:memory:"
        assert config.development_mode is True

    async def test_is_sqlite(self, db_manager):
        assert db_manager.is_sqlite

    async def test_drop_tables_requires_development_mode(self):
        manager = DatabaseManager(
            DatabaseConfig(connection_string="sqlite+aiosqlite:///:memory:", development_mode=False)
        )
        try:
            with pytest.raises(ServiceError, match="not in development mode"):
                await manager.drop_tables()
        finally:
            await manager.close()

    def test_get_db_manager_before_initialize(self):
        with pytest.raises(ServiceError, match="not initialized"):
            get_db_manager()

    async def test_initialize_and_close(self):
        manager = await initialize_db(get_development_config())

        assert get_db_manager() is manager

        await close_db()

        with pytest.raises(ServiceError):
            get_db_manager()


class TestApiTokenRecord:
    """Test the api_tokens table."""

    async def test_foreign_keys_enforced(self, db_manager):
        """Test SQLite rejects a token pointing at a missing project."""
        async with db_manager.get_session() as session:
            session.add(
                ApiTokenRecord(secret="ghost:dev.x", username="bob", type="CLIENT", project="ghost")
            )
            with pytest.raises(IntegrityError):
                await session.flush()
            await session.rollback()

    async def test_timestamps_are_utc(self, db_manager):
        """Test naive and aware datetimes come back as aware UTC."""
        async with db_manager.get_session() as session:
            session.add(Project(id="default", name="Default"))
            session.add(
                ApiTokenRecord(
                    secret="default:*.x",
                    username="bob",
                    type="CLIENT",
                    project="default",
                    expires_at=datetime(2099, 1, 1, 12, 0),
                )
            )
            await session.commit()

        async with db_manager.get_session() as session:
            record = await session.get(ApiTokenRecord, "default:*.x")

            assert record.expires_at == datetime(2099, 1, 1, 12, 0, tzinfo=timezone.utc)
            assert record.created_at.tzinfo is not None
