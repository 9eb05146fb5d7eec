"""
Exception hierarchy for the token service.

Every error carries an ErrorCode, an HTTP-style status code and free-form
context, and logs itself when constructed. The active correlation id is
attached to the context automatically.
"""

import uuid
from contextvars import ContextVar
from enum import Enum
from typing import Any, Optional

from .constants import FOREIGN_KEY_VIOLATION

# Correlation id for the current asyncio task
_correlation_id: ContextVar[Optional[str]] = ContextVar("correlation_id", default=None)


class ErrorCode(str, Enum):
    """Standardized error codes for API responses."""

    # System errors (1xxx)
    INTERNAL_ERROR = "1000"
    DATABASE_ERROR = "1001"
    CONFIGURATION_ERROR = "1003"

    # Validation errors (2xxx)
    VALIDATION_FAILED = "2000"
    INVALID_FORMAT = "2001"
    CONSTRAINT_VIOLATION = "2004"

    # Resource errors (3xxx)
    NOT_FOUND = "3000"
    DUPLICATE = "3001"

    # Business logic errors (4xxx)
    BUSINESS_RULE_VIOLATION = "4000"


class BaseError(Exception):
    """Base exception with context, error code and logging on construction."""

    def __init__(
        self,
        message: str,
        error_code: ErrorCode = ErrorCode.INTERNAL_ERROR,
        status_code: int = 500,
        cause: Optional[Exception] = None,
        **context: Any,
    ):
        """
        Initialize the error and log it.

        Args:
            message: Human-readable error message
            error_code: Standardized error code from ErrorCode enum
            status_code: HTTP status code for API responses
            cause: Original exception that caused this error
            **context: Additional context information
        """
        self.message = message
        self.error_code = error_code
        self.status_code = status_code
        self.cause = cause
        self.error_id = str(uuid.uuid4())
        self.context = context

        correlation_id = get_correlation_id()
        if correlation_id:
            self.context["correlation_id"] = correlation_id
        if cause is not None:
            self.context["cause"] = {"type": type(cause).__name__, "message": str(cause)}

        self._log_error()
        super().__init__(message)

    def _log_error(self) -> None:
        """Log at ERROR for 5xx and WARNING for anything lower."""
        # Deferred: utils imports modules that import this one
        from .utils.logger import get_logger

        log_data = {
            "error_id": self.error_id,
            "error_code": self.error_code.value,
            "status_code": self.status_code,
            "context": self.context,
        }

        if self.status_code >= 500:
            get_logger().error(
                f"Error {self.error_code.value}: {self.message}", extra=log_data, exc_info=self.cause
            )
        else:
            get_logger().warning(
                f"Client error {self.error_code.value}: {self.message}", extra=log_data
            )


class RepositoryError(BaseError):
    """Token store errors."""

    def __init__(
        self,
        message: str,
        error_code: ErrorCode = ErrorCode.DATABASE_ERROR,
        status_code: int = 500,
        cause: Optional[Exception] = None,
        **context,
    ):
        super().__init__(message, error_code, status_code, cause, **context)


class ForeignKeyViolationError(RepositoryError):
    """
    Raised by token stores when an insert references a missing row.

    ``constraint`` names the violated constraint (for the api_tokens table
    one of ``DbConstraint``) so callers can say which reference was missing.
    """

    code = FOREIGN_KEY_VIOLATION

    def __init__(
        self,
        message: str,
        constraint: Optional[str] = None,
        cause: Optional[Exception] = None,
        **context,
    ):
        self.constraint = constraint
        super().__init__(
            message,
            error_code=ErrorCode.CONSTRAINT_VIOLATION,
            status_code=409,
            cause=cause,
            constraint=constraint,
            **context,
        )


class ServiceError(BaseError):
    """Service layer errors."""

    def __init__(
        self,
        message: str,
        error_code: ErrorCode = ErrorCode.INTERNAL_ERROR,
        operation: Optional[str] = None,
        cause: Optional[Exception] = None,
        **context,
    ):
        if operation:
            context["operation"] = operation
        super().__init__(message, error_code, 500, cause, **context)


class ValidationError(BaseError):
    """Rejected input: bad scopes, unknown references, malformed descriptors."""

    def __init__(
        self,
        message: str,
        field: Optional[str] = None,
        error_code: ErrorCode = ErrorCode.VALIDATION_FAILED,
        cause: Optional[Exception] = None,
        **context,
    ):
        if field:
            context["field"] = field
        super().__init__(message, error_code, 400, cause, **context)


def _resource_error(
    message: str,
    error_code: ErrorCode,
    status_code: int,
    resource_type: str,
    cause: Optional[Exception],
    identifiers: dict,
) -> RepositoryError:
    if identifiers:
        message += ": " + ", ".join(f"{k}={v}" for k, v in identifiers.items())
    return RepositoryError(
        message,
        error_code=error_code,
        status_code=status_code,
        cause=cause,
        resource_type=resource_type,
        **identifiers,
    )


def not_found(
    resource_type: str, cause: Optional[Exception] = None, **identifiers
) -> RepositoryError:
    """Build a 404 RepositoryError, e.g. ``not_found("ApiToken", token=...)``."""
    return _resource_error(
        f"{resource_type} not found", ErrorCode.NOT_FOUND, 404, resource_type, cause, identifiers
    )


def duplicate(
    resource_type: str, cause: Optional[Exception] = None, **identifiers
) -> RepositoryError:
    """Build a 409 RepositoryError for a resource that already exists."""
    return _resource_error(
        f"Duplicate {resource_type}", ErrorCode.DUPLICATE, 409, resource_type, cause, identifiers
    )


# Correlation ID management
def set_correlation_id(correlation_id: str) -> None:
    _correlation_id.set(correlation_id)


def get_correlation_id() -> Optional[str]:
    return _correlation_id.get()


def clear_correlation_id() -> None:
    _correlation_id.set(None)
