# backend/visit_sync/database.py
"""
Database engine, session factory, and metadata shared across the application.
"""

from __future__ import annotations

from datetime import datetime
import logging
from typing import Any, Generator

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker
from sqlalchemy.pool import StaticPool

from .core.config import settings

logger = logging.getLogger(__name__)


class Base(DeclarativeBase):
    """Declarative base for all ORM models."""


def enable_sqlite_savepoints(engine: Engine) -> None:
    """
    Let pysqlite honour SAVEPOINT.

    pysqlite defers BEGIN until the first DML statement, which breaks nested
    transactions. Disable its transaction handling and emit BEGIN ourselves.
    """

    @event.listens_for(engine, "connect")
    def _disable_pysqlite_transactions(dbapi_connection: Any, connection_record: Any) -> None:
        dbapi_connection.isolation_level = None
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    @event.listens_for(engine, "begin")
    def _emit_begin(conn: Any) -> None:
        conn.exec_driver_sql("BEGIN")


def build_engine(database_url: str, *, echo: bool = False) -> Engine:
    """Create an engine for the given URL with dialect-appropriate pooling."""
    if database_url.startswith("sqlite"):
        kwargs: dict[str, Any] = {"connect_args": {"check_same_thread": False}}
        if ":memory:" in database_url:
            kwargs["poolclass"] = StaticPool
        sqlite_engine = create_engine(database_url, echo=echo, **kwargs)
        enable_sqlite_savepoints(sqlite_engine)
        return sqlite_engine

    return create_engine(
        database_url,
        echo=echo,
        pool_size=settings.database_pool_size,
        max_overflow=settings.database_max_overflow,
        pool_timeout=30,
        pool_recycle=3600,
        pool_pre_ping=True,
        connect_args={"application_name": "visit_sync"},
    )


engine: Engine = build_engine(settings.database_url, echo=settings.database_echo)


@event.listens_for(engine, "connect")
def receive_connect(dbapi_connection: Any, connection_record: Any) -> None:
    connection_record.info["connect_time"] = datetime.now()
    logger.debug("Database connection established")


SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine, expire_on_commit=False)


def get_db() -> Generator[Session, None, None]:
    """Get database session with proper cleanup."""
    db = SessionLocal()
    try:
        yield db
        db.commit()
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()


def init_db(bind: Engine | None = None) -> None:
    """Create all tables. Models must be imported so metadata is populated."""
    from . import models  # noqa: F401

    target = bind or engine
    Base.metadata.create_all(target)
    logger.info("Database schema ensured on %s", target.url.render_as_string(hide_password=True))
