"""
Database configuration and session management for the Catalog API.

The engine and session factory live on an explicitly constructed ``Database``
object that the application opens at startup and closes at shutdown.
"""

import logging
import os
from contextlib import contextmanager
from typing import Iterator, Optional

from fastapi import Request
from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base, sessionmaker, Session
from sqlalchemy.pool import StaticPool

from catalog_api.config import Settings

logger = logging.getLogger(__name__)

# Base class for declarative models
Base = declarative_base()


class Database:
    """Owns the SQLAlchemy engine and session factory for one application."""

    def __init__(self, url: str, echo: bool = False, timeout: int = 10):
        self.url = url
        self.echo = echo
        self.timeout = timeout
        self.engine: Optional[Engine] = None
        self._session_factory: Optional[sessionmaker] = None

    @classmethod
    def from_settings(cls, settings: Settings) -> "Database":
        return cls(
            settings.DATABASE_URL,
            echo=settings.DATABASE_ECHO,
            timeout=settings.DATABASE_TIMEOUT,
        )

    @property
    def is_sqlite(self) -> bool:
        return self.url.startswith("sqlite")

    def _build_engine(self) -> Engine:
        if self.is_sqlite:
            # Create database directory if it doesn't exist
            db_dir = os.path.dirname(self.url.replace("sqlite:///", ""))
            if db_dir and ":memory:" not in self.url and not os.path.exists(db_dir):
                os.makedirs(db_dir, exist_ok=True)

            connect_args = {"check_same_thread": False, "timeout": self.timeout}
            kwargs = {}
            if ":memory:" in self.url or self.url == "sqlite://":
                # One shared connection, otherwise every session sees an empty db
                kwargs["poolclass"] = StaticPool
            engine = create_engine(
                self.url, echo=self.echo, connect_args=connect_args, **kwargs
            )

            @event.listens_for(engine, "connect")
            def set_sqlite_pragma(dbapi_conn, connection_record):
                """Enforce foreign keys so join rows cascade with their owners."""
                cursor = dbapi_conn.cursor()
                cursor.execute("PRAGMA foreign_keys=ON")
                cursor.close()

            return engine

        return create_engine(
            self.url,
            echo=self.echo,
            pool_pre_ping=True,
            pool_timeout=self.timeout,
        )

    def open(self) -> "Database":
        """
        Create the engine and all tables.
        """
        if self.engine is not None:
            return self

        # Import models to ensure they're registered
        from catalog_api.models import user, category, product  # noqa: F401

        self.engine = self._build_engine()
        self._session_factory = sessionmaker(
            autocommit=False, autoflush=False, bind=self.engine
        )
        Base.metadata.create_all(bind=self.engine)
        logger.info("Database ready")
        return self

    def close(self) -> None:
        if self.engine is not None:
            self.engine.dispose()
            logger.info("Database connections closed")
        self.engine = None
        self._session_factory = None

    def session(self) -> Session:
        if self._session_factory is None:
            raise RuntimeError("Database is not open")
        return self._session_factory()

    @contextmanager
    def session_scope(self) -> Iterator[Session]:
        """
        Context manager for database session.
        Use for non-FastAPI contexts.
        """
        db = self.session()
        try:
            yield db
        finally:
            db.close()


def get_db(request: Request) -> Iterator[Session]:
    """
    Dependency for getting database session.
    Use in FastAPI route dependencies.
    """
    db = request.app.state.db.session()
    try:
        yield db
    finally:
        db.close()
