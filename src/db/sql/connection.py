"""
Connection management using SQLAlchemy.

This module provides database engine creation and the
session factory for the SQL backend.
"""

from __future__ import annotations

from typing import Any, Optional

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.orm import sessionmaker, Session
from sqlalchemy.pool import StaticPool

from ..config import get_config


def create_db_engine(
    database_url: Optional[str] = None,
    pool_size: Optional[int] = None,
    max_overflow: Optional[int] = None,
    pool_timeout: Optional[int] = None,
    pool_recycle: Optional[int] = None,
    echo: Optional[bool] = None,
) -> Engine:
    """Create a SQLAlchemy engine.

    All parameters default to values from DatabaseConfig if not provided.
    The pool parameters only apply to server databases such as PostgreSQL;
    an in-memory SQLite database uses a single shared connection so that
    all sessions see the same data.

    Args:
        database_url: SQLAlchemy connection URL.
        pool_size: Number of connections to keep in the pool.
        max_overflow: Maximum overflow connections beyond pool_size.
        pool_timeout: Seconds to wait for a connection from the pool.
        pool_recycle: Seconds after which to recycle connections.
        echo: If True, log all SQL statements.

    Returns:
        SQLAlchemy Engine instance.
    """
    config = get_config()
    url = make_url(config.get_database_url() if database_url is None else database_url)
    echo = echo if echo is not None else config.echo_sql

    if url.get_backend_name() == "sqlite":
        kwargs: dict[str, Any] = {
            "connect_args": {"check_same_thread": False},
        }
        if url.database in (None, "", ":memory:"):
            kwargs["poolclass"] = StaticPool
        engine = create_engine(url, echo=echo, **kwargs)

        # SQLite does not enforce foreign keys unless asked to,
        # on every new connection
        @event.listens_for(engine, "connect")
        def enable_foreign_keys(dbapi_connection: Any, connection_record: Any) -> None:
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()

        return engine

    return create_engine(
        url,
        pool_size=pool_size if pool_size is not None else config.pool_size,
        max_overflow=max_overflow if max_overflow is not None else config.max_overflow,
        pool_timeout=pool_timeout if pool_timeout is not None else config.pool_timeout,
        pool_recycle=pool_recycle if pool_recycle is not None else config.pool_recycle,
        echo=echo,
    )


class DatabaseSession:
    """Owns an engine and the sessionmaker bound to it.

    Usage:
        db_session = DatabaseSession(create_db_engine())
        session = db_session.session_factory()
    """

    def __init__(self, engine: Engine) -> None:
        """Initialize with a SQLAlchemy engine."""
        self._engine = engine
        self._session_factory = sessionmaker(
            bind=engine,
            expire_on_commit=False,  # Don't expire objects after commit
        )

    @property
    def engine(self) -> Engine:
        """Get the underlying SQLAlchemy engine."""
        return self._engine

    @property
    def session_factory(self) -> sessionmaker[Session]:
        """Get the sessionmaker bound to the engine."""
        return self._session_factory

    def close(self) -> None:
        """Close the database engine and all connections."""
        self._engine.dispose()
