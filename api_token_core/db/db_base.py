"""
Base column types and mixins for the token tables.

Keeps cross-database compatibility (SQLite/PostgreSQL) for timestamps.
"""

from datetime import UTC, datetime

from sqlalchemy import Column, DateTime
from sqlalchemy.types import TypeDecorator


def utc_now():
    """Return current UTC time with timezone info attached."""
    return datetime.now(UTC)


class UTCDateTime(TypeDecorator):
    """
    Timezone-aware UTC datetime for SQLite/PostgreSQL.

    SQLite stores naive values, so aware datetimes are converted to UTC and
    stripped on the way in, and UTC is attached again on the way out.
    """

    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is None:
            return None
        if value.tzinfo is None:
            value = value.replace(tzinfo=UTC)
        value = value.astimezone(UTC)
        if dialect.name == "sqlite":
            return value.replace(tzinfo=None)
        return value

    def process_result_value(self, value, dialect):
        if value is None:
            return None
        if value.tzinfo is None:
            return value.replace(tzinfo=UTC)
        return value.astimezone(UTC)


class CreatedAtMixin:
    """Simple mixin for a created_at timestamp set on insert."""

    created_at = Column(UTCDateTime, default=utc_now, nullable=False)
