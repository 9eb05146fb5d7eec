"""
API token utilities.

Pure helpers for the token service: scoping rules, secret generation and
parsing of bootstrap token descriptors.
"""

import secrets

from ..constants import ALL, BOOTSTRAP_USERNAME, SecretFormat
from ..enums import ApiTokenType
from ..exceptions import ErrorCode, ValidationError
from ..schemas.api_token_schemas import ApiTokenCreate, TokenScope


def validate_token_scope(scope: TokenScope) -> None:
    """
    Check that a token type may be issued for a project/environment.

    Admin tokens are global, so both project and environment must be ALL.
    Client tokens must target exactly one environment.

    Args:
        scope: Token type, project and environment to check

    Raises:
        ValidationError: Naming the violated rule
    """
    if scope.type == ApiTokenType.ADMIN and scope.project != ALL:
        raise ValidationError(
            "Admin token cannot be scoped to single project",
            field="project",
            error_code=ErrorCode.BUSINESS_RULE_VIOLATION,
            project=scope.project,
        )

    if scope.type == ApiTokenType.ADMIN and scope.environment != ALL:
        raise ValidationError(
            "Admin token cannot be scoped to single environment",
            field="environment",
            error_code=ErrorCode.BUSINESS_RULE_VIOLATION,
            environment=scope.environment,
        )

    if scope.type == ApiTokenType.CLIENT and scope.environment == ALL:
        raise ValidationError(
            "Client token cannot be scoped to all environments",
            field="environment",
            error_code=ErrorCode.BUSINESS_RULE_VIOLATION,
            environment=scope.environment,
        )


def build_secret(project: str, environment: str, suffix: str) -> str:
    """Join scope and suffix into the ``project:environment.suffix`` secret format."""
    return (
        f"{project}{SecretFormat.SCOPE_SEPARATOR}{environment}"
        f"{SecretFormat.SUFFIX_SEPARATOR}{suffix}"
    )


def generate_secret_key(project: str, environment: str) -> str:
    """
    Generate a new secret for a token scoped to project/environment.

    The suffix is 28 bytes from the OS CSPRNG, rendered as 56 hex characters.
    """
    return build_secret(project, environment, secrets.token_hex(SecretFormat.RANDOM_BYTES))


def redact_secret(secret: str) -> str:
    """Keep the scope prefix of a secret for logs, drop the random part."""
    prefix, _, _ = secret.partition(SecretFormat.SUFFIX_SEPARATOR)
    return f"{prefix}{SecretFormat.SUFFIX_SEPARATOR}***"


def parse_init_api_token(descriptor: str) -> ApiTokenCreate:
    """
    Parse a bootstrap descriptor of the form ``project:environment:suffix``.

    The resulting request is an ADMIN token owned by ``admin`` whose secret
    reuses the operator-provided suffix. Scope rules are not checked here.

    Raises:
        ValidationError: If the descriptor does not have three non-empty parts
    """
    parts = descriptor.strip().split(SecretFormat.SCOPE_SEPARATOR)
    if len(parts) != 3 or not all(parts):
        raise ValidationError(
            "Init API token must have the form project:environment:secret",
            field="init_api_tokens",
            error_code=ErrorCode.INVALID_FORMAT,
            parts=len(parts),
        )

    project, environment, suffix = parts
    return ApiTokenCreate(
        username=BOOTSTRAP_USERNAME,
        type=ApiTokenType.ADMIN,
        project=project,
        environment=environment,
        secret=build_secret(project, environment, suffix),
    )
