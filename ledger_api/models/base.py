"""
Database engine, session management, and base model.

Every model inherits from Base. Every request gets a session
from get_db(). The engine is built lazily from the configured
DATABASE_URL, so importing the models never opens a connection.
"""

from functools import lru_cache

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker, DeclarativeBase

from ledger_api.config import get_settings


# --- Base Model Class ---
class Base(DeclarativeBase):
    pass


def build_engine(database_url: str) -> Engine:
    """
    Create an engine for the given URL.

    pool_pre_ping=True tests connections before using them, which
    handles a database restart or a stale connection. SQLite needs
    check_same_thread=False because FastAPI may run sync endpoints
    on a worker thread, and foreign keys switched on so that deleting
    a book cascades.
    """
    connect_args = {}
    if database_url.startswith("sqlite"):
        connect_args["check_same_thread"] = False

    engine = create_engine(
        database_url,
        pool_pre_ping=True,
        connect_args=connect_args,
    )

    if engine.dialect.name == "sqlite":
        event.listen(engine, "connect", _enable_sqlite_foreign_keys)

    return engine


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


@lru_cache()
def get_engine() -> Engine:
    return build_engine(get_settings().DATABASE_URL)


@lru_cache()
def get_session_factory() -> sessionmaker:
    """
    autocommit=False: the caller decides when changes are saved,
    so a journal entry and its transactions land together or not
    at all. autoflush=False: SQL is only sent on an explicit flush.
    """
    return sessionmaker(
        bind=get_engine(),
        autocommit=False,
        autoflush=False,
    )


# --- Dependency for FastAPI ---
def get_db():
    """
    Provide a database session for a single request.

    The try/finally guarantees the session is closed even when the
    endpoint raises, so connections are never leaked from the pool.
    """
    db = get_session_factory()()
    try:
        yield db
    finally:
        db.close()
