"""
SQL backend implementation using SQLAlchemy ORM.

This package provides the SQLAlchemy implementation of the database
protocol interface. It runs on SQLite and PostgreSQL.
"""

from __future__ import annotations

from .backend import SqlBackend
from .connection import DatabaseSession, create_db_engine

__all__ = ["SqlBackend", "DatabaseSession", "create_db_engine"]
