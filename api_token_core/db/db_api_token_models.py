"""
API token model.

Just the data structure - no business logic or class methods.
Wildcard (ALL) scopes are stored as NULL so they reference no row.
"""

from sqlalchemy import Column, ForeignKey, Index, String

from ..constants import DbConstraint
from .db_base import CreatedAtMixin, UTCDateTime
from .db_config import Base


class ApiTokenRecord(Base, CreatedAtMixin):
    """Simple API token model - just data, no logic."""

    __tablename__ = "api_tokens"

    secret = Column(String(255), primary_key=True)
    username = Column(String(255), nullable=False)
    type = Column(String(32), nullable=False)

    project = Column(
        String(255),
        ForeignKey("projects.id", name=DbConstraint.PROJECT_FKEY.value, ondelete="CASCADE"),
        nullable=True,
    )
    environment = Column(
        String(100),
        ForeignKey("environments.name", name=DbConstraint.ENVIRONMENT_FKEY.value, ondelete="CASCADE"),
        nullable=True,
    )

    expires_at = Column(UTCDateTime, nullable=True)

    __table_args__ = (Index("ix_api_tokens_expires_at", "expires_at"),)
