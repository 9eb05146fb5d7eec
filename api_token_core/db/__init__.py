"""
SQLAlchemy models and database management for the token store.
"""

from .db_api_token_models import ApiTokenRecord
from .db_base import CreatedAtMixin, UTCDateTime, utc_now
from .db_config import (
    Base,
    DatabaseManager,
    close_db,
    get_db_manager,
    get_development_config,
    import_all_models,
    initialize_db,
    set_db_manager,
)
from .db_project_models import Environment, Project

__all__ = [
    # Base definitions
    "Base",
    "CreatedAtMixin",
    "UTCDateTime",
    "utc_now",
    # Configuration
    "DatabaseManager",
    "close_db",
    "get_db_manager",
    "get_development_config",
    "import_all_models",
    "initialize_db",
    "set_db_manager",
    # Models
    "ApiTokenRecord",
    "Environment",
    "Project",
]
