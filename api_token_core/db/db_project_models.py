"""
Project and environment models referenced by API tokens.

Just the data structure - owned by the wider backend, tokens only point at them.
"""

from sqlalchemy import Boolean, Column, String

from .db_base import CreatedAtMixin
from .db_config import Base


class Project(Base, CreatedAtMixin):
    """Project a client token may be restricted to."""

    __tablename__ = "projects"

    id = Column(String(255), primary_key=True)
    name = Column(String(255), nullable=False)
    description = Column(String(500), nullable=True)


class Environment(Base, CreatedAtMixin):
    """Environment a client token is restricted to."""

    __tablename__ = "environments"

    name = Column(String(100), primary_key=True)
    enabled = Column(Boolean, nullable=False, default=True)
