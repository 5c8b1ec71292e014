"""Database configuration and session management."""

from __future__ import annotations

from collections.abc import Generator, Iterator
from contextlib import contextmanager

import logging

from sqlalchemy import create_engine
from sqlalchemy.exc import (
    DBAPIError,
    IntegrityError,
    SQLAlchemyError,
    TimeoutError as PoolTimeoutError,
)
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker

from notifyhub.config import Settings, get_settings
from notifyhub.domain.errors import StoreUnavailable


class Base(DeclarativeBase):
    """Base class for SQLAlchemy models."""


settings = get_settings()

logger = logging.getLogger(__name__)

# Driver and pool failures. Integrity violations are left to the caller.
_UNAVAILABLE_ERRORS = (DBAPIError, PoolTimeoutError)


def _engine_options(settings: Settings) -> dict[str, object]:
    """Return ``create_engine`` keyword arguments for the configured backend."""

    options: dict[str, object] = {"pool_pre_ping": True}
    if settings.database_url.startswith("sqlite"):
        # Sync routes run in a threadpool; SQLite connections must be shareable.
        options["connect_args"] = {"check_same_thread": False, "timeout": 30}
    return options


engine = create_engine(settings.database_url, **_engine_options(settings))
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def initialize_database() -> None:
    """Ensure all ORM models have corresponding database tables."""

    from notifyhub.infrastructure import models  # noqa: F401  # ensure models are imported

    Base.metadata.create_all(bind=engine, checkfirst=True)


def get_db() -> Generator:
    """Yield a database session and close it afterwards."""

    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@contextmanager
def store_errors(session: Session) -> Iterator[None]:
    """Translate driver failures into :class:`StoreUnavailable`.

    Every SQLAlchemy error rolls the session back before it propagates so the
    session stays usable. ``IntegrityError`` is re-raised unchanged because
    callers such as the send-log claim rely on it.
    """

    try:
        yield
    except IntegrityError:
        _rollback(session)
        raise
    except _UNAVAILABLE_ERRORS as exc:
        logger.warning("Durable store unavailable: %s", exc)
        _rollback(session)
        raise StoreUnavailable("The notification store is unavailable") from exc
    except SQLAlchemyError:
        _rollback(session)
        raise


def _rollback(session: Session) -> None:
    try:
        session.rollback()
    except SQLAlchemyError:  # pragma: no cover - connection already gone
        logger.debug("Rollback failed while the store is unavailable")
