"""
Database utilities for binding the SQLAlchemy engine and sessions.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Iterator, Optional

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import scoped_session, sessionmaker


logger = logging.getLogger(__name__)

SessionLocal = scoped_session(
    sessionmaker(autocommit=False, autoflush=False, future=True)
)
_engine: Optional[Engine] = None


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record) -> None:
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def configure_engine(database_url: str, echo: bool = False) -> Engine:
    """
    Create the engine for `database_url` and bind the session factory to it.

    Calling this again rebinds sessions to the new engine, which is how the
    app factory points tests at a throwaway database.
    """
    global _engine
    if _engine is not None:
        SessionLocal.remove()
        _engine.dispose()

    _engine = create_engine(database_url, future=True, echo=echo)
    if _engine.dialect.name == "sqlite":
        event.listen(_engine, "connect", _enable_sqlite_foreign_keys)
    SessionLocal.configure(bind=_engine)
    logger.debug("Database engine bound to %s", _engine.url)
    return _engine


def get_engine() -> Engine:
    if _engine is None:
        raise RuntimeError("Database engine is not configured; call create_app() first")
    return _engine


@contextmanager
def session_scope() -> Iterator[scoped_session]:
    """
    Provide a transactional scope around a series of operations.
    """
    session = SessionLocal()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


__all__ = ["SessionLocal", "configure_engine", "get_engine", "session_scope"]
