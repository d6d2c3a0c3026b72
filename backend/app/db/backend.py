# backend/app/db/backend.py
"""
Pick the data backend once at startup: SQL when DATABASE_URL is usable,
otherwise the in-memory demo backend.
"""

from __future__ import annotations

import logging

from app.core.config import Settings
from .base import Backend
from .crud import SqlAuth, SqlTables
from .demo import create_demo_backend
from .session import connect
from .storage import LocalStorage

logger = logging.getLogger(__name__)


def create_backend(settings: Settings) -> Backend:
    if not settings.backend_configured:
        logger.warning("Database not configured. Running in demo mode; submissions are kept in memory only.")
        return create_demo_backend()

    db = connect(settings.database_url, echo=settings.db_echo)
    if db is None:
        return create_demo_backend()
    try:
        db.ensure_tables()
    except Exception as e:
        # Fail-open (site still works without DB)
        logger.warning("Could not create tables, falling back to demo mode: %s", e)
        db.dispose()
        return create_demo_backend()

    backend = Backend(
        auth=SqlAuth(db),
        tables=SqlTables(db),
        storage=LocalStorage(settings.uploads_dir),
        demo=False,
    )
    backend._closers.append(db.dispose)
    logger.info("Database backend ready")
    return backend


__all__ = ["create_backend"]
