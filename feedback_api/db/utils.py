from __future__ import annotations

from contextlib import contextmanager
from typing import Callable, Generator, Optional, TypeVar

from sqlalchemy.orm import Session as DbSession

from .database import Database, get_database

T = TypeVar("T")


@contextmanager
def get_db(database: Optional[Database] = None) -> Generator[DbSession, None, None]:
    """Read-only session; callers commit explicitly if they write."""
    session = (database or get_database()).session()
    try:
        yield session
    finally:
        session.close()


@contextmanager
def transaction_scope(database: Optional[Database] = None) -> Generator[DbSession, None, None]:
    """Session committed on success and rolled back on any error."""
    session = (database or get_database()).session()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


def run_in_transaction(operation: Callable[[DbSession], T], database: Optional[Database] = None) -> T:
    """Run ``operation`` in its own transaction and return its result.

    Anything the caller needs from ORM rows must be read inside ``operation``;
    the session is closed on return.
    """
    with transaction_scope(database) as session:
        return operation(session)


__all__ = ["get_db", "transaction_scope", "run_in_transaction"]
