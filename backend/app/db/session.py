# backend/app/db/session.py
"""
SQLAlchemy session/engine bootstrap.
- Built from Settings.database_url (optional).
- Exposes: Base, Database (engine + sessionmaker), session_scope(), ensure_tables().
- Keeps the app fail-open: if the URL is missing or invalid, `connect()`
  returns None and the caller falls back to the demo backend.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Iterator, Optional

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker
from sqlalchemy.pool import StaticPool

logger = logging.getLogger(__name__)

# --- SQLAlchemy base ---------------------------------------------------------

class Base(DeclarativeBase):
    pass

# --- engine & session --------------------------------------------------------

@dataclass
class Database:
    engine: Engine
    SessionLocal: sessionmaker

    @contextmanager
    def session_scope(self) -> Iterator[Session]:
        """
        Context manager for a DB session.
        Example:
            with db.session_scope() as s:
                s.add(obj)
        """
        session = self.SessionLocal()
        try:
            yield session
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    def ensure_tables(self) -> None:
        """
        Create tables if needed. Import models lazily to avoid circulars.
        Call this once at startup or before first insert.
        """
        from . import models  # noqa: F401
        Base.metadata.create_all(bind=self.engine)

    def dispose(self) -> None:
        self.engine.dispose()


def connect(database_url: str, echo: bool = False) -> Optional[Database]:
    if not database_url:
        logger.info("DATABASE_URL not set; DB layer disabled.")
        return None
    kwargs = {"echo": echo, "pool_pre_ping": True, "future": True}
    if database_url.startswith("sqlite") and ":memory:" in database_url:
        # a single shared connection, otherwise every session sees an empty db
        kwargs.update(connect_args={"check_same_thread": False}, poolclass=StaticPool)
    try:
        engine = create_engine(database_url, **kwargs)
    except Exception as e:
        # Fail-open: site should still run without DB
        logger.warning("Could not initialize engine: %s", e)
        return None
    SessionLocal = sessionmaker(
        bind=engine, class_=Session, autoflush=False, autocommit=False, expire_on_commit=False
    )
    return Database(engine=engine, SessionLocal=SessionLocal)


__all__ = ["Base", "Database", "connect"]
