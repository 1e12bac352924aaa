from __future__ import annotations

import logging
from typing import Any, Optional

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker

from ..config import get_settings

logger = logging.getLogger(__name__)


def _connect_args(url: str, connect_timeout: float) -> dict[str, Any]:
    if url.startswith("sqlite"):
        return {"check_same_thread": False, "timeout": 30}
    if url.startswith("postgresql"):
        # Fail fast so an unreachable server surfaces as a retryable connect error.
        return {"connect_timeout": max(1, int(connect_timeout))}
    return {}


class Database:
    def __init__(self, url: Optional[str] = None) -> None:
        settings = get_settings()
        self.url = url or settings.database_url
        self.engine: Engine = create_engine(
            self.url,
            connect_args=_connect_args(self.url, settings.db_connect_timeout),
            pool_pre_ping=True,
            future=True,
        )
        if self.url.startswith("sqlite"):
            event.listen(self.engine, "connect", _enable_sqlite_foreign_keys)
        self.SessionLocal = sessionmaker(
            autocommit=False,
            autoflush=False,
            bind=self.engine,
            future=True,
        )

    def session(self):
        return self.SessionLocal()

    def dispose(self) -> None:
        self.engine.dispose()


def _enable_sqlite_foreign_keys(dbapi_connection, _connection_record) -> None:
    # Response and vote rows cascade with their parent feedback.
    cursor = dbapi_connection.cursor()
    try:
        cursor.execute("PRAGMA foreign_keys=ON;")
    finally:
        cursor.close()


_database: Optional[Database] = None


def get_database() -> Database:
    global _database
    if _database is None:
        _database = Database()
        logger.debug("Database engine created for %s", _database.engine.url.render_as_string(hide_password=True))
    return _database


def reset_database() -> None:
    global _database
    if _database is not None:
        _database.dispose()
    _database = None


__all__ = ["Database", "get_database", "reset_database"]
