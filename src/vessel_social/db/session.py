"""Database session configuration."""

from __future__ import annotations

import logging
from collections.abc import Generator, Iterator
from contextlib import contextmanager

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.exc import DBAPIError, IntegrityError
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker

from vessel_social.core.errors import Conflict, Unavailable
from vessel_social.core.settings import settings

logger = logging.getLogger(__name__)


class Base(DeclarativeBase):
    """Declarative base shared by all ORM models."""


# Ensure model modules are imported so that metadata is populated when create_all runs.
import vessel_social.models  # noqa: E402,F401


def configure_sqlite(engine: Engine) -> None:
    """Let SQLAlchemy own SQLite transactions so SAVEPOINTs behave.

    pysqlite defers BEGIN until the first DML statement, which breaks nested
    transactions. Autocommit mode plus an explicit BEGIN restores them.
    ``BEGIN IMMEDIATE`` takes the write lock up front, so concurrent writers
    queue on the busy timeout instead of deadlocking on a lock upgrade, and a
    later writer reads whatever the earlier one committed.
    """

    @event.listens_for(engine, "connect")
    def _on_connect(dbapi_connection, connection_record) -> None:  # pragma: no cover - driver hook
        dbapi_connection.isolation_level = None
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    @event.listens_for(engine, "begin")
    def _on_begin(conn) -> None:  # pragma: no cover - driver hook
        conn.exec_driver_sql("BEGIN IMMEDIATE")


def build_engine(url: str, **kwargs) -> Engine:
    """Create an engine, applying the SQLite transaction fixes when needed."""
    engine = create_engine(url, **kwargs)
    if engine.dialect.name == "sqlite":
        configure_sqlite(engine)
    return engine


_engine_kwargs: dict[str, object] = {"pool_pre_ping": True, "echo": settings.sql_debug}
if settings.effective_database_url.startswith("sqlite"):
    _engine_kwargs["connect_args"] = {"check_same_thread": False}

engine = build_engine(settings.effective_database_url, **_engine_kwargs)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def get_db() -> Generator[Session, None, None]:
    """Yield a database session for dependency injection."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@contextmanager
def unit_of_work(db: Session, *, on_conflict: Conflict | None = None) -> Iterator[Session]:
    """Commit everything written inside the block once, or nothing at all.

    Integrity violations become ``on_conflict`` (or a generic ``Conflict``);
    any other driver failure becomes ``Unavailable``. Domain errors raised
    inside the block roll the transaction back and propagate unchanged.
    """
    try:
        yield db
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        if on_conflict is not None:
            raise on_conflict from exc
        raise Conflict("Write conflicts with existing data", reason="integrity") from exc
    except DBAPIError as exc:
        db.rollback()
        logger.warning("Data store failure, transaction rolled back: %s", exc)
        raise Unavailable("Data store unavailable") from exc
    except BaseException:
        db.rollback()
        raise

