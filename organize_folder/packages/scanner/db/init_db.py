"""Database bootstrapping utilities."""

from __future__ import annotations

import logging

from organize_folder.packages.scanner.db import session as db_session
from organize_folder.packages.scanner.models.base import Base
from organize_folder.packages.scanner.models.app_state import AppState  # noqa: F401 - ensure table creation
from organize_folder.packages.scanner.models.entry import Entry  # noqa: F401 - ensure table creation

logger = logging.getLogger(__name__)


def init_db() -> None:
    """Create all database tables if they do not exist."""
    try:
        Base.metadata.create_all(bind=db_session.engine)
    except Exception:  # pragma: no cover - initialization failures are logged then re-raised
        logger.exception("Failed to create tables during database initialization")
        raise
