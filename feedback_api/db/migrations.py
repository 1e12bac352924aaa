from __future__ import annotations

from sqlalchemy import text

from . import models  # noqa: F401  registers tables on Base.metadata
from .base import Base
from .database import Database, get_database


def init_db(database: Database | None = None) -> None:
    db_instance = database or get_database()
    Base.metadata.create_all(bind=db_instance.engine)


def ping(database: Database | None = None) -> None:
    db_instance = database or get_database()
    with db_instance.engine.connect() as connection:
        connection.execute(text("SELECT 1"))


__all__ = ["init_db", "ping"]
