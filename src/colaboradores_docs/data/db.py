"""Engine and session handling for the collaborator database.

``DB_URL`` selects the database; without it a SQLite file named ``database.db``
at the project root is used. The engine is created lazily on first use and
creates any missing tables at that point.

Every ``get_session()`` block is its own transaction: it commits on normal exit
and rolls back if the block raises.
"""

from __future__ import annotations

import os
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path
from typing import Any

from sqlalchemy import create_engine, event
from sqlalchemy.engine import URL, Engine
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker


class Base(DeclarativeBase):
    """Declarative base shared by the collaborator, document, share-link and user tables."""


_engine: Engine | None = None
_SessionLocal: sessionmaker[Session] | None = None


def get_database_url() -> str:
    env_url = os.getenv("DB_URL")
    if env_url:
        return env_url

    db_path = Path(__file__).resolve().parents[3] / "database.db"
    return URL.create("sqlite", database=str(db_path)).render_as_string(hide_password=False)


def _enable_sqlite_foreign_keys(dbapi_connection: Any, _connection_record: Any) -> None:
    # documentos and shared_links rely on ON DELETE CASCADE.
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def _create_engine(database_url: str) -> Engine:
    if not database_url.startswith("sqlite"):
        return create_engine(database_url, pool_pre_ping=True)

    # Imports run in a worker thread, so connections must not be pinned to one thread.
    engine = create_engine(database_url, connect_args={"check_same_thread": False})
    event.listen(engine, "connect", _enable_sqlite_foreign_keys)
    return engine


def _get_engine() -> Engine:
    global _engine
    if _engine is None:
        _engine = _create_engine(get_database_url())
        _create_tables(_engine)
    return _engine


def _create_tables(engine: Engine) -> None:
    # Registers every mapped class on Base.metadata.
    from colaboradores_docs.data.models import (  # noqa: F401
        colaborador,
        documento,
        shared_link,
        user,
    )

    Base.metadata.create_all(bind=engine)


def _get_session_factory() -> sessionmaker[Session]:
    global _SessionLocal
    if _SessionLocal is None:
        _SessionLocal = sessionmaker(bind=_get_engine(), autoflush=False, expire_on_commit=False)
    return _SessionLocal


def init_db() -> None:
    """Create the engine and any missing tables now instead of on first query."""
    _get_engine()


def reset_engine() -> None:
    """Dispose the cached engine so the next access re-reads ``DB_URL``."""
    global _engine, _SessionLocal
    if _engine is not None:
        _engine.dispose()
    _engine = None
    _SessionLocal = None


@contextmanager
def get_session() -> Iterator[Session]:
    session = _get_session_factory()()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()
