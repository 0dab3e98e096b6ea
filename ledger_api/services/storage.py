"""
Translation of SQLAlchemy failures into ledger errors.

Reads that fail become DatabaseQueryError, writes become
DatabaseUpdateError, and a dropped connection becomes
DatabaseConnectionError. A failed write rolls the session back
before the error is raised, so a unit of work never leaves half
of its rows behind.
"""

import logging
from contextlib import contextmanager

from sqlalchemy.exc import DBAPIError, SQLAlchemyError
from sqlalchemy.orm import Session

from ledger_api.errors import (
    DatabaseConnectionError,
    DatabaseQueryError,
    DatabaseUpdateError,
    LedgerError,
)

logger = logging.getLogger(__name__)


def _describe(exc: SQLAlchemyError) -> str:
    original = getattr(exc, "orig", None)
    return str(original if original is not None else exc)


def _wrap(exc: SQLAlchemyError, error_cls: type[LedgerError], action: str) -> LedgerError:
    if isinstance(exc, DBAPIError) and exc.connection_invalidated:
        return DatabaseConnectionError(
            f"{action} failed: database connection lost. {_describe(exc)}"
        )
    return error_cls(f"{action} failed. {_describe(exc)}")


@contextmanager
def reading(action: str):
    """Wrap a block of queries."""
    try:
        yield
    except SQLAlchemyError as exc:
        logger.error("%s failed", action, exc_info=True)
        raise _wrap(exc, DatabaseQueryError, action) from exc


@contextmanager
def writing(db: Session, action: str):
    """Wrap a block of writes; roll back on failure."""
    try:
        yield
    except SQLAlchemyError as exc:
        logger.error("%s failed, rolling back", action, exc_info=True)
        db.rollback()
        raise _wrap(exc, DatabaseUpdateError, action) from exc
