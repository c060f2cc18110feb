import os
from contextlib import contextmanager
from typing import Iterator, Optional

from fastapi import Request
from loguru import logger
from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

from project_tracker.config import settings
from project_tracker.errors import PersistenceError

# Default to a local SQLite database if no DATABASE_URL is provided
BASE_DIR = os.path.dirname(os.path.abspath(__file__))
PROJECT_ROOT = os.path.abspath(os.path.join(BASE_DIR, ".."))
DEFAULT_DB_PATH = os.path.join(PROJECT_ROOT, "project_tracker.db")

# Base class for the models
Base = declarative_base()


def default_database_url() -> str:
    """Return the configured DATABASE_URL, or the SQLite file in the project root."""
    if settings.DATABASE_URL:
        return settings.DATABASE_URL
    return f"sqlite:///{DEFAULT_DB_PATH}"


def _enable_sqlite_foreign_keys(engine: Engine) -> None:
    @event.listens_for(engine, "connect")
    def _set_pragma(dbapi_connection, _connection_record) -> None:  # pragma: no cover - SQLAlchemy callback
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


def _build_engine(database_url: str, echo: bool = False) -> Engine:
    """Create the SQLAlchemy engine for ``database_url``."""
    if not database_url.startswith("sqlite"):
        return create_engine(database_url, echo=echo)

    connect_args = {"check_same_thread": False}
    if database_url in ("sqlite://", "sqlite:///:memory:"):
        # An in-memory database lives as long as its single connection
        engine = create_engine(database_url, echo=echo, connect_args=connect_args, poolclass=StaticPool)
    else:
        engine = create_engine(database_url, echo=echo, connect_args=connect_args)
    _enable_sqlite_foreign_keys(engine)
    return engine


class Database:
    """An explicitly opened database handle.

    Owns the engine and the session factory. Open it with ``open()`` (or use
    it as a context manager) and release it with ``close()``; nothing in the
    package keeps a module-level engine.
    """

    def __init__(self, url: Optional[str] = None, echo: Optional[bool] = None):
        self.url = url or default_database_url()
        self.echo = settings.DATABASE_ECHO if echo is None else echo
        self._engine: Optional[Engine] = None
        self._session_factory: Optional[sessionmaker] = None

    @property
    def is_open(self) -> bool:
        return self._engine is not None

    @property
    def engine(self) -> Engine:
        if self._engine is None:
            raise PersistenceError("Database is not open")
        return self._engine

    def open(self) -> "Database":
        if self._engine is not None:
            return self
        # Register the mapped tables on Base.metadata
        import project_tracker.models  # noqa: F401

        try:
            self._engine = _build_engine(self.url, echo=self.echo)
            Base.metadata.create_all(bind=self._engine)
        except SQLAlchemyError as exc:
            self._engine = None
            logger.exception("Could not open database {}", self.url)
            raise PersistenceError("Could not open database") from exc
        self._session_factory = sessionmaker(autocommit=False, autoflush=False, bind=self._engine)
        logger.info("Opened database {}", self.url)
        return self

    def close(self) -> None:
        if self._engine is None:
            return
        self._engine.dispose()
        self._engine = None
        self._session_factory = None
        logger.info("Closed database {}", self.url)

    def session(self) -> Session:
        if self._session_factory is None:
            raise PersistenceError("Database is not open")
        return self._session_factory()

    @contextmanager
    def session_scope(self) -> Iterator[Session]:
        """Yield a session that is always closed afterwards."""
        db = self.session()
        try:
            yield db
        finally:
            db.close()

    def __enter__(self) -> "Database":
        return self.open()

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()


# Dependency injection helper (FastAPI style); the handle lives on app.state
def get_db(request: Request):
    database: Database = request.app.state.database
    with database.session_scope() as db:
        yield db
