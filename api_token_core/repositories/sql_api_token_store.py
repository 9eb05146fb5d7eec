"""
SQLAlchemy-backed API token store.

Each operation runs in its own short-lived async session. Wildcard (ALL)
scopes are stored as NULL, and integrity errors are mapped onto the
repository exceptions the token service understands.
"""

from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Any, List, NoReturn, Optional

from sqlalchemy import delete, func, or_, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from ..constants import ALL, FOREIGN_KEY_VIOLATION, DbConstraint
from ..db.db_api_token_models import ApiTokenRecord
from ..db.db_base import utc_now
from ..db.db_project_models import Environment, Project
from ..enums import ApiTokenType
from ..exceptions import (
    ErrorCode,
    ForeignKeyViolationError,
    RepositoryError,
    ValidationError,
    duplicate,
    not_found,
)
from ..schemas.api_token_schemas import ApiToken, ApiTokenCreate
from ..utils.api_token_utils import redact_secret
from .api_token_store import ApiTokenStore


def _as_utc(value: Optional[datetime]) -> Optional[datetime]:
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def _to_column(scope: str) -> Optional[str]:
    return None if scope == ALL else scope


def _from_column(value: Optional[str]) -> str:
    return ALL if value is None else value


class SqlApiTokenStore(ApiTokenStore):
    """API token store on an async SQLAlchemy session factory."""

    entity_name = "ApiToken"

    def __init__(self, session_factory: async_sessionmaker):
        self.session_factory = session_factory

    @asynccontextmanager
    async def _session_operation(
        self, operation_name: str, new_token: Optional[ApiTokenCreate] = None, **context: Any
    ):
        """
        Run one unit of work: commit on success, rollback and map errors on failure.

        Args:
            operation_name: Name of the operation for error reporting
            new_token: Token being inserted, used to name a missing reference
            **context: Additional context for the error
        """
        async with self.session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception as e:
                await session.rollback()
                await self._handle_db_error(session, e, operation_name, new_token, **context)

    async def _handle_db_error(
        self,
        session: AsyncSession,
        e: Exception,
        operation_name: str,
        new_token: Optional[ApiTokenCreate] = None,
        **context: Any,
    ) -> NoReturn:
        """
        Map database errors onto repository exceptions.

        Errors that are not database errors are re-raised untouched.

        Raises:
            ForeignKeyViolationError: If a referenced project/environment is missing
            RepositoryError: For duplicates and other database failures
        """
        if isinstance(e, RepositoryError):
            raise e

        error_context = {
            "operation_name": operation_name,
            "entity_type": self.entity_name,
            **context,
        }

        if isinstance(e, IntegrityError):
            if self._is_foreign_key_error(e):
                constraint = await self._violated_foreign_key(session, e, new_token)
                raise ForeignKeyViolationError(
                    f"Invalid reference in {self.entity_name}: {str(e.orig)}",
                    constraint=constraint,
                    cause=e,
                    **error_context,
                )

            error_message = str(e.orig).lower()
            if "unique constraint" in error_message or "duplicate" in error_message:
                raise duplicate(resource_type=self.entity_name, cause=e, **error_context)

            raise RepositoryError(
                f"Database constraint violation for {self.entity_name}: {str(e.orig)}",
                error_code=ErrorCode.CONSTRAINT_VIOLATION,
                cause=e,
                **error_context,
            )

        if isinstance(e, SQLAlchemyError):
            raise RepositoryError(
                f"Database error for {self.entity_name}: {str(e)}",
                error_code=ErrorCode.DATABASE_ERROR,
                cause=e,
                **error_context,
            )

        raise e

    @staticmethod
    def _is_foreign_key_error(e: IntegrityError) -> bool:
        sqlstate = getattr(e.orig, "sqlstate", None) or getattr(e.orig, "pgcode", None)
        if sqlstate == FOREIGN_KEY_VIOLATION:
            return True
        return "foreign key constraint" in str(e.orig).lower()

    async def _violated_foreign_key(
        self, session: AsyncSession, e: IntegrityError, new_token: Optional[ApiTokenCreate]
    ) -> Optional[str]:
        # PostgreSQL reports the constraint name directly
        diag = getattr(e.orig, "diag", None)
        constraint = getattr(diag, "constraint_name", None)
        if constraint:
            return constraint

        # SQLite does not, so look for the missing row
        if new_token is None:
            return None
        project = _to_column(new_token.project)
        if project is not None and await session.get(Project, project) is None:
            return DbConstraint.PROJECT_FKEY.value
        environment = _to_column(new_token.environment)
        if environment is not None and await session.get(Environment, environment) is None:
            return DbConstraint.ENVIRONMENT_FKEY.value
        return None

    @staticmethod
    def _to_model(record: ApiTokenRecord) -> ApiToken:
        return ApiToken(
            secret=record.secret,
            username=record.username,
            type=ApiTokenType(record.type),
            project=_from_column(record.project),
            environment=_from_column(record.environment),
            created_at=_as_utc(record.created_at),
            expires_at=_as_utc(record.expires_at),
        )

    async def get_all(self) -> List[ApiToken]:
        async with self._session_operation("get_all") as session:
            result = await session.execute(
                select(ApiTokenRecord).order_by(ApiTokenRecord.created_at)
            )
            records = result.scalars().all()
        return [self._to_model(record) for record in records]

    async def get_all_active(self) -> List[ApiToken]:
        async with self._session_operation("get_all_active") as session:
            result = await session.execute(
                select(ApiTokenRecord)
                .where(
                    or_(
                        ApiTokenRecord.expires_at.is_(None),
                        ApiTokenRecord.expires_at > utc_now(),
                    )
                )
                .order_by(ApiTokenRecord.created_at)
            )
            records = result.scalars().all()
        return [self._to_model(record) for record in records]

    async def count(self) -> int:
        async with self._session_operation("count") as session:
            result = await session.execute(select(func.count()).select_from(ApiTokenRecord))
            return result.scalar_one()

    async def insert(self, new_token: ApiTokenCreate) -> ApiToken:
        if not new_token.secret:
            raise ValidationError("Token secret must be set before insert", field="secret")

        record = ApiTokenRecord(
            secret=new_token.secret,
            username=new_token.username,
            type=new_token.type.value,
            project=_to_column(new_token.project),
            environment=_to_column(new_token.environment),
            created_at=utc_now(),
            expires_at=new_token.expires_at,
        )
        async with self._session_operation(
            "insert", new_token=new_token, token=redact_secret(new_token.secret)
        ) as session:
            session.add(record)
            await session.flush()

        return self._to_model(record)

    async def set_expiry(self, secret: str, expires_at: datetime) -> ApiToken:
        async with self._session_operation("set_expiry", token=redact_secret(secret)) as session:
            record = await session.get(ApiTokenRecord, secret)
            if record is None:
                raise not_found(self.entity_name, token=redact_secret(secret))
            record.expires_at = expires_at
            await session.flush()
        return self._to_model(record)

    async def delete(self, secret: str) -> None:
        async with self._session_operation("delete", token=redact_secret(secret)) as session:
            await session.execute(delete(ApiTokenRecord).where(ApiTokenRecord.secret == secret))
