"""
Per-request database backends for the puzzle server.

The session manager owns the process-wide engine and session factory,
created once at startup. Each HTTP request gets its own SqlBackend,
kept in thread-local storage so that route code can reach it with
get_db() without passing it around.

The unit of work is the request:
- Attempts and other writes are flushed as they happen
- The request's transaction is committed when the request completes
- Any exception escaping the request rolls the transaction back
- The backend and its session are closed on every exit path
"""

from __future__ import annotations

import logging
from typing import Optional, Any, TYPE_CHECKING, Iterator
from contextlib import contextmanager
from threading import local

from .config import get_config

if TYPE_CHECKING:
    from .protocols import DatabaseBackendProtocol
    from .sql import DatabaseSession


# The backend of the request currently handled by this thread
_request_state = local()

_log = logging.getLogger(__name__)


class SessionManager:
    """Hands out one database backend per request, all sharing
    a single engine.

    Usage:
        manager = SessionManager(database_url="sqlite:///puzzles.db")

        with manager.request_context() as db:
            puzzle = db.puzzles.get_by_id(3)
            db.attempts.insert(3, "alice", True, 42, ["c3", "c3<"])
        # Committed here, or rolled back if the block raised
    """

    def __init__(self, database_url: Optional[str] = None) -> None:
        """Create the shared engine for the given URL, or for the
        URL in DatabaseConfig if none is given."""
        from .sql import DatabaseSession, create_db_engine

        self._database_url = database_url or get_config().get_database_url()
        self._db_session: Optional["DatabaseSession"] = DatabaseSession(
            create_db_engine(self._database_url)
        )

    @property
    def database_url(self) -> str:
        return self._database_url

    def get_backend(self) -> "DatabaseBackendProtocol":
        """Return the backend of the current request, creating it
        on first use."""
        from .sql import SqlBackend

        backend: Optional["DatabaseBackendProtocol"] = getattr(
            _request_state, "backend", None
        )
        if backend is None:
            if self._db_session is None:
                raise RuntimeError("Session manager has been disposed")
            backend = SqlBackend(db_session=self._db_session)
            _request_state.backend = backend
        return backend

    def _release_backend(self) -> None:
        """Close the current request's backend, if any, and forget it."""
        backend: Optional["DatabaseBackendProtocol"] = getattr(
            _request_state, "backend", None
        )
        _request_state.backend = None
        if backend is None:
            return
        try:
            backend.close()
        except Exception as e:
            # The request's outcome is already settled at this point
            _log.warning(f"Failed to close database session: {e}")

    def _rollback(self, backend: "DatabaseBackendProtocol") -> None:
        try:
            backend.rollback()
        except Exception as e:
            _log.warning(f"Rollback failed: {e}")

    @contextmanager
    def request_context(self) -> Iterator["DatabaseBackendProtocol"]:
        """Run a block of work as one database transaction.

        Yields the request's backend. The transaction is committed if
        the block completes and rolled back if it raises; a failed
        commit is rolled back and re-raised. The backend is released
        in either case.
        """
        backend = self.get_backend()
        try:
            try:
                yield backend
            except Exception:
                self._rollback(backend)
                raise
            try:
                backend.commit()
            except Exception as e:
                _log.error(f"Commit failed: {e}")
                self._rollback(backend)
                raise
        finally:
            self._release_backend()

    def dispose(self) -> None:
        """Close the shared engine and all pooled connections."""
        if self._db_session is not None:
            self._db_session.close()
            self._db_session = None


# Created by init_session_manager() at startup
_session_manager: Optional[SessionManager] = None


def init_session_manager(database_url: Optional[str] = None) -> SessionManager:
    """Set up the global session manager; main.py calls this once,
    before the first request. Any previous manager is disposed of."""
    global _session_manager
    if _session_manager is not None:
        _session_manager.dispose()
    _session_manager = SessionManager(database_url=database_url)
    _log.info("Database session manager initialized")
    return _session_manager


def get_session_manager() -> SessionManager:
    """Return the global session manager.

    Raises:
        RuntimeError: If init_session_manager() has not been called.
    """
    if _session_manager is None:
        raise RuntimeError(
            "No session manager; init_session_manager() must be called first"
        )
    return _session_manager


def get_db() -> "DatabaseBackendProtocol":
    """Return the database backend of the request being handled.

    Example:
        from db import get_db

        def submit_attempt_api(puzzle_id: int) -> ResponseType:
            get_db().attempts.insert(puzzle_id, username, solved, seconds, moves)
            # Committed when the request completes
    """
    return get_session_manager().get_backend()


def db_wsgi_middleware(wsgi_app: Any) -> Any:
    """Wrap a WSGI application so that each request runs
    inside its own database request context."""
    manager = get_session_manager()

    def middleware(environ: Any, start_response: Any) -> Any:
        with manager.request_context():
            return wsgi_app(environ, start_response)

    return middleware


def request_context() -> Any:
    """Shortcut for get_session_manager().request_context()"""
    return get_session_manager().request_context()
