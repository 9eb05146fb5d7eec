"""
API token service.

Issues, validates and revokes API tokens. Writes go to the token store;
authentication lookups are answered from the in-memory active token cache.
"""

from datetime import datetime
from typing import List, Optional

from ..config import AppConfig, AuthenticationConfig, get_config
from ..constants import DbConstraint
from ..exceptions import ErrorCode, ForeignKeyViolationError, ValidationError
from ..repositories.api_token_store import ApiTokenStore
from ..schemas.api_token_schemas import ApiToken, ApiTokenCreate, ApiUser
from ..utils.api_token_utils import generate_secret_key, redact_secret, validate_token_scope
from ..utils.logger import get_logger
from ..utils.scheduler import IntervalScheduler
from .active_token_cache import ActiveTokenCache
from .token_bootstrap import TokenBootstrapper


class ApiTokenService:
    """
    Service for managing API tokens.

    This service provides:
    - Token creation with scope validation and secret generation
    - Translation of missing project/environment references into validation errors
    - Synchronous principal lookup from the active token cache
    - One-time seeding of admin tokens into an empty store

    Call ``initialize()`` before serving traffic and ``destroy()`` on shutdown.
    Expiry changes and deletes reach the cache on its next refresh, so a
    deleted token can keep authenticating for up to one refresh interval.
    """

    def __init__(
        self,
        store: ApiTokenStore,
        config: Optional[AuthenticationConfig] = None,
        scheduler: Optional[IntervalScheduler] = None,
        logger=None,
    ):
        """
        Initialize service with a token store.

        Args:
            store: Store holding the canonical token records
            config: Authentication settings (default: from the global app config)
            scheduler: Scheduler for cache refreshes (default: asyncio loop)
            logger: Optional logger instance
        """
        self.store = store
        self.config = config or get_config().authentication
        self.logger = logger or get_logger()
        self.cache = ActiveTokenCache(
            store,
            refresh_interval=self.config.refresh_interval_seconds,
            scheduler=scheduler,
            logger=self.logger,
        )
        self.bootstrapper = TokenBootstrapper(store, self.create_api_token, logger=self.logger)
        self._initialized = False

    async def initialize(self) -> int:
        """
        Load the cache, start periodic refreshes and seed init tokens.

        A failed initial load leaves the cache empty until a refresh succeeds.
        Later calls return 0 until destroy() stops the service again.

        Returns:
            Number of seeded admin tokens
        """
        if self._initialized:
            return 0
        self._initialized = True

        await self.cache.refresh_safely()
        self.cache.start()

        seeded = 0
        if self.config.bootstrap_enabled:
            seeded = await self.bootstrapper.seed(self.config.init_api_tokens)

        self.logger.info(
            "API token service ready",
            extra={"cached_tokens": len(self.cache), "seeded_tokens": seeded},
        )
        return seeded

    def destroy(self) -> None:
        """Stop the periodic cache refresh; initialize() may start it again."""
        self.cache.stop()
        self._initialized = False

    async def __aenter__(self) -> "ApiTokenService":
        await self.initialize()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        self.destroy()

    async def get_all_tokens(self) -> List[ApiToken]:
        return await self.store.get_all()

    async def get_all_active_tokens(self) -> List[ApiToken]:
        return await self.store.get_all_active()

    def get_user_for_token(self, secret: str) -> Optional[ApiUser]:
        """
        Resolve a secret to its principal from the cache.

        Args:
            secret: Secret presented by the caller

        Returns:
            ApiUser for a cached active token, otherwise None
        """
        return self.cache.get_user_for_token(secret)

    async def update_expiry(self, secret: str, expires_at: datetime) -> ApiToken:
        token = await self.store.set_expiry(secret, expires_at)
        self.logger.info(
            "API token expiry updated",
            extra={"token": redact_secret(secret), "expires_at": expires_at},
        )
        return token

    async def delete(self, secret: str) -> None:
        await self.store.delete(secret)
        self.logger.info("API token deleted", extra={"token": redact_secret(secret)})

    async def create_api_token(self, new_token: ApiTokenCreate) -> ApiToken:
        """
        Create a token after checking its scope.

        A secret is generated unless the request carries one.

        Args:
            new_token: Token to create

        Returns:
            The stored token

        Raises:
            ValidationError: If the scope is not allowed or the project/environment does not exist
        """
        validate_token_scope(new_token.scope)

        if new_token.secret is None:
            new_token = new_token.model_copy(
                update={"secret": generate_secret_key(new_token.project, new_token.environment)}
            )

        return await self._insert_new_api_token(new_token)

    async def _insert_new_api_token(self, new_token: ApiTokenCreate) -> ApiToken:
        try:
            token = await self.store.insert(new_token)
        except ForeignKeyViolationError as e:
            raise self._missing_reference_error(new_token, e) from e

        self.cache.add(token)
        self.logger.info(
            "API token created",
            extra={
                "token": redact_secret(token.secret),
                "token_type": token.type.value,
                "project": token.project,
                "environment": token.environment,
                "username": token.username,
            },
        )
        return token

    @staticmethod
    def _missing_reference_error(
        new_token: ApiTokenCreate, error: ForeignKeyViolationError
    ) -> ValidationError:
        if error.constraint == DbConstraint.PROJECT_FKEY.value:
            return ValidationError(
                f"Project={new_token.project} does not exist",
                field="project",
                error_code=ErrorCode.CONSTRAINT_VIOLATION,
                cause=error,
            )
        if error.constraint == DbConstraint.ENVIRONMENT_FKEY.value:
            return ValidationError(
                f"Environment={new_token.environment} does not exist",
                field="environment",
                error_code=ErrorCode.CONSTRAINT_VIOLATION,
                cause=error,
            )
        return ValidationError(
            error.message, error_code=ErrorCode.CONSTRAINT_VIOLATION, cause=error
        )


async def create_api_token_service(
    config: Optional[AppConfig] = None,
    store: Optional[ApiTokenStore] = None,
    scheduler: Optional[IntervalScheduler] = None,
) -> ApiTokenService:
    """
    Build an initialized ApiTokenService.

    Args:
        config: Application config (default: global config)
        store: Token store (default: SQL store on the global database manager)
        scheduler: Scheduler for cache refreshes

    Returns:
        A service that has loaded its cache and run first-boot seeding
    """
    config = config or get_config()
    if store is None:
        from ..db.db_config import get_db_manager
        from ..repositories.sql_api_token_store import SqlApiTokenStore

        store = SqlApiTokenStore(get_db_manager().session_factory)

    service = ApiTokenService(store, config.authentication, scheduler=scheduler)
    await service.initialize()
    return service
