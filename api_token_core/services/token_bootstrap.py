"""
First-boot seeding of admin API tokens from configuration.
"""

from typing import Awaitable, Callable, Sequence

from ..repositories.api_token_store import ApiTokenStore
from ..schemas.api_token_schemas import ApiToken, ApiTokenCreate
from ..utils.api_token_utils import parse_init_api_token, redact_secret
from ..utils.logger import get_logger


class TokenBootstrapper:
    """
    Creates operator-supplied admin tokens when the store holds no tokens.

    Seeding goes through the service's create call, so every seeded token is
    scope-checked, persisted and cached like any other token.
    """

    def __init__(
        self,
        store: ApiTokenStore,
        create_api_token: Callable[[ApiTokenCreate], Awaitable[ApiToken]],
        logger=None,
    ):
        self.store = store
        self.create_api_token = create_api_token
        self.logger = logger or get_logger()

    async def seed(self, descriptors: Sequence[str]) -> int:
        """
        Seed tokens from ``project:environment:secret`` descriptors.

        Does nothing if the store already has tokens. The first failure stops
        seeding and is logged; tokens created before it are kept.

        Args:
            descriptors: Bootstrap token descriptors

        Returns:
            Number of tokens created
        """
        created = 0
        try:
            token_count = await self.store.count()
            if token_count:
                self.logger.info(
                    "Store already has API tokens, skipping init tokens",
                    extra={"token_count": token_count},
                )
                return 0

            for descriptor in descriptors:
                token = await self.create_api_token(parse_init_api_token(descriptor))
                created += 1
                self.logger.info(
                    "Created init admin API token", extra={"token": redact_secret(token.secret)}
                )
        except Exception as e:
            self.logger.error(
                "Unable to create initial Admin API tokens",
                extra={
                    "created_count": created,
                    "requested_count": len(descriptors),
                    "error": str(e),
                    "error_type": type(e).__name__,
                },
                exc_info=e,
            )
        return created
