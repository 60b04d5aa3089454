"""
SQL Backend implementation.

This module provides the main SqlBackend class that implements
DatabaseBackendProtocol using SQLAlchemy ORM.
"""

from __future__ import annotations

from typing import Optional, TYPE_CHECKING

from sqlalchemy.orm import Session

from .connection import DatabaseSession, create_db_engine
from .models import Base
from .repositories import (
    PuzzleRepository,
    AttemptRepository,
    PlayerRepository,
    storage_operation,
)

if TYPE_CHECKING:
    from ..protocols import (
        PuzzleRepositoryProtocol,
        AttemptRepositoryProtocol,
        PlayerRepositoryProtocol,
    )


class SqlBackend:
    """SQLAlchemy implementation of DatabaseBackendProtocol.

    Usage:
        from db.sql import SqlBackend

        db = SqlBackend(database_url="sqlite:///puzzles.db")
        puzzle = db.puzzles.get_by_id(3)
        db.attempts.insert(3, "alice", True, 42, ["c3", "a1"])
        db.commit()
        db.close()

    A backend created with an existing DatabaseSession (as the session
    manager does for each request) shares that engine and its connection
    pool, and close() releases only the request's session.
    """

    def __init__(
        self,
        database_url: Optional[str] = None,
        db_session: Optional[DatabaseSession] = None,
    ) -> None:
        """Initialize the SQL backend.

        Args:
            database_url: SQLAlchemy connection URL. If not provided, reads from
                          the DATABASE_URL environment variable.
            db_session: Shared engine and session factory. If provided,
                        database_url is ignored.
        """
        self._owns_engine = db_session is None
        if db_session is None:
            db_session = DatabaseSession(create_db_engine(database_url))
        self._db_session = db_session

        # Create the session used by all repositories of this backend
        self._session: Session = db_session.session_factory()

        self._init_repositories()

    def _init_repositories(self) -> None:
        """Initialize repositories with the current session."""
        session = self._session
        self._puzzles = PuzzleRepository(session)
        self._attempts = AttemptRepository(session)
        self._players = PlayerRepository(session)

    @property
    def puzzles(self) -> "PuzzleRepositoryProtocol":
        """Access the Puzzle repository."""
        return self._puzzles

    @property
    def attempts(self) -> "AttemptRepositoryProtocol":
        """Access the Attempt repository."""
        return self._attempts

    @property
    def players(self) -> "PlayerRepositoryProtocol":
        """Access the player rating repository."""
        return self._players

    @storage_operation
    def flush(self) -> None:
        """Flush pending changes to the database without committing."""
        self._session.flush()

    @storage_operation
    def commit(self) -> None:
        """Commit the current transaction, making all changes permanent."""
        self._session.commit()

    def rollback(self) -> None:
        """Roll back the current transaction, discarding all changes."""
        self._session.rollback()

    def close(self) -> None:
        """Close the session and, if this backend owns it, the engine."""
        self._session.close()
        if self._owns_engine:
            self._db_session.close()

    @storage_operation
    def create_tables(self) -> None:
        """Create all tables that don't already exist.

        This is called at application startup. For schema changes,
        use proper migrations.
        """
        Base.metadata.create_all(self._db_session.engine)

    def drop_tables(self) -> None:
        """Drop all database tables.

        WARNING: This deletes all data! Only use for testing.
        """
        Base.metadata.drop_all(self._db_session.engine)
