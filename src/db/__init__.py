"""
Database abstraction layer for the puzzle server.

This package provides a backend-agnostic interface for the puzzle
catalog, the attempt ledger and player ratings. The puzzle engine
only sees the protocols in db.protocols; the SQLAlchemy implementation
lives in db.sql.

Request-Scoped Sessions:
    # In application startup (main.py):
    from db import init_session_manager
    init_session_manager(database_url="sqlite:///puzzles.db")

    # In WSGI/middleware:
    from db import db_wsgi_middleware
    app.wsgi_app = db_wsgi_middleware(app.wsgi_app)

    # In application code:
    from db import get_db
    db = get_db()
    puzzle = db.puzzles.get_by_id(3)
    # Changes committed at request end
"""

from __future__ import annotations

from .errors import StorageError, StorageUnavailable
from .session import (
    SessionManager,
    init_session_manager,
    get_session_manager,
    get_db,
    db_wsgi_middleware,
    request_context,
)


__all__ = [
    "StorageError",
    "StorageUnavailable",
    "SessionManager",
    "init_session_manager",
    "get_session_manager",
    "get_db",
    "db_wsgi_middleware",
    "request_context",
]
