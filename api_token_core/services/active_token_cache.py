"""
In-memory snapshot of active API tokens.

Authentication lookups read this snapshot synchronously instead of hitting
the store on every request. The snapshot is replaced wholesale on a fixed
interval; a failed refresh keeps the previous snapshot.
"""

import asyncio
import hmac
from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy.exc import SQLAlchemyError

from ..constants import Timeouts
from ..exceptions import BaseError
from ..repositories.api_token_store import ApiTokenStore
from ..schemas.api_token_schemas import ApiToken, ApiUser
from ..utils.logger import get_logger
from ..utils.scheduler import AsyncioIntervalScheduler, IntervalScheduler, ScheduledJob

# Store failures that keep the stale snapshot without alerting
EXPECTED_REFRESH_ERRORS = (BaseError, SQLAlchemyError, OSError, asyncio.TimeoutError)

REFRESH_JOB_NAME = "active-api-token-refresh"


class ActiveTokenCache:
    """
    Cache of the tokens the store reports as active.

    The token list is only ever replaced by assignment, so a lookup never
    sees a half-built list.
    """

    def __init__(
        self,
        store: ApiTokenStore,
        refresh_interval: float = Timeouts.ACTIVE_TOKEN_REFRESH,
        scheduler: Optional[IntervalScheduler] = None,
        logger=None,
    ):
        """
        Initialize an empty cache.

        Args:
            store: Store to read active tokens from
            refresh_interval: Seconds between periodic refreshes
            scheduler: Scheduler for the periodic refresh (default: asyncio loop)
            logger: Optional logger instance
        """
        self.store = store
        self.refresh_interval = refresh_interval
        self.scheduler = scheduler or AsyncioIntervalScheduler()
        self.logger = logger or get_logger()
        self.last_refreshed_at: Optional[datetime] = None
        self._tokens: List[ApiToken] = []
        self._job: Optional[ScheduledJob] = None
        # Tokens added while a store read was in flight
        self._pending_adds: List[ApiToken] = []
        self._reads_in_flight = 0
        self._reads_started = 0
        self._applied_read = 0

    @property
    def tokens(self) -> List[ApiToken]:
        return list(self._tokens)

    @property
    def running(self) -> bool:
        return self._job is not None

    def __len__(self) -> int:
        return len(self._tokens)

    async def refresh_now(self) -> bool:
        """
        Replace the snapshot with the store's current active tokens.

        Expected store failures are logged and leave the snapshot untouched.
        Anything else propagates. Tokens added while the read was in flight are
        kept, and a read that started before the snapshot already in place is
        discarded.

        Returns:
            True if the snapshot was replaced
        """
        self._reads_started += 1
        read_id = self._reads_started
        mark = len(self._pending_adds)
        self._reads_in_flight += 1
        try:
            tokens = await self.store.get_all_active()
        except EXPECTED_REFRESH_ERRORS as e:
            self.logger.warning(
                "Active token refresh failed, keeping previous snapshot",
                extra={
                    "error": str(e),
                    "error_type": type(e).__name__,
                    "cached_tokens": len(self._tokens),
                    "last_refreshed_at": self.last_refreshed_at,
                },
            )
            return False
        else:
            if read_id < self._applied_read:
                self.logger.debug("Discarding stale active token read", extra={"read_id": read_id})
                return False
            fetched = list(tokens)
            known = {token.secret for token in fetched}
            fetched.extend(t for t in self._pending_adds[mark:] if t.secret not in known)
            self._tokens = fetched
            self._applied_read = read_id
        finally:
            self._reads_in_flight -= 1
            if self._reads_in_flight == 0:
                self._pending_adds = []

        self.last_refreshed_at = datetime.now(timezone.utc)
        self.logger.debug("Active tokens refreshed", extra={"cached_tokens": len(self._tokens)})
        return True

    async def refresh_safely(self) -> bool:
        """Refresh without raising; unexpected errors are logged with traceback."""
        try:
            return await self.refresh_now()
        except Exception as e:
            self.logger.error(
                "Unexpected error refreshing active tokens",
                extra={"error": str(e), "error_type": type(e).__name__},
                exc_info=e,
            )
            return False

    def start(self) -> None:
        """Start the periodic refresh. Calling it again is a no-op."""
        if self._job is not None:
            return
        self._job = self.scheduler.schedule(
            self.refresh_interval, self.refresh_safely, name=REFRESH_JOB_NAME
        )
        self.logger.info(
            "Active token refresh started", extra={"interval_seconds": self.refresh_interval}
        )

    def stop(self) -> None:
        """Cancel the periodic refresh."""
        if self._job is None:
            return
        self._job.cancel()
        self._job = None
        self.logger.info("Active token refresh stopped")

    def add(self, token: ApiToken) -> None:
        """Make a newly created token usable before the next refresh."""
        self._tokens = [*self._tokens, token]
        if self._reads_in_flight:
            self._pending_adds.append(token)

    def find(self, secret: str) -> Optional[ApiToken]:
        """Return the first cached token whose secret matches exactly."""
        candidate = secret.encode("utf-8", errors="surrogatepass")
        for token in self._tokens:
            if hmac.compare_digest(token.secret.encode("utf-8", errors="surrogatepass"), candidate):
                return token
        return None

    def get_user_for_token(self, secret: str) -> Optional[ApiUser]:
        token = self.find(secret)
        if token is None:
            return None
        return ApiUser.from_token(token)
