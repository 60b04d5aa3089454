"""
Where the puzzle server keeps its catalog, attempts and player ratings.

The settings come from the process environment when the session manager
is first created. By default the server uses a SQLite file, puzzles.db,
in the working directory; DATABASE_URL points it at any other database
that SQLAlchemy can reach. The DB_POOL_* variables only matter for
server databases such as PostgreSQL.
"""

from __future__ import annotations

import os
from typing import Optional
from dataclasses import dataclass


# The puzzle database file used when DATABASE_URL is not set
DEFAULT_DATABASE_URL = "sqlite:///puzzles.db"

# In-memory SQLite database used by the test suites
DEFAULT_TEST_DATABASE_URL = "sqlite://"


def _flag(name: str) -> bool:
    return os.environ.get(name, "").lower() in ("1", "true", "yes")


@dataclass
class DatabaseConfig:
    """Storage settings of the puzzle server"""

    # None until DATABASE_URL is set; see get_database_url()
    database_url: Optional[str]

    # Connection pool of a server database
    pool_size: int
    max_overflow: int
    pool_timeout: int
    pool_recycle: int

    # Log every SQL statement, as when tracing a slow rating query
    echo_sql: bool

    @classmethod
    def from_env(cls) -> DatabaseConfig:
        return cls(
            database_url=os.environ.get("DATABASE_URL") or None,
            pool_size=int(os.environ.get("DB_POOL_SIZE", "5")),
            max_overflow=int(os.environ.get("DB_MAX_OVERFLOW", "10")),
            pool_timeout=int(os.environ.get("DB_POOL_TIMEOUT", "30")),
            pool_recycle=int(os.environ.get("DB_POOL_RECYCLE", "1800")),
            echo_sql=_flag("DB_ECHO_SQL"),
        )

    def get_database_url(self, default: str = DEFAULT_DATABASE_URL) -> str:
        """The URL of the puzzle database, falling back to the
        local puzzles.db file"""
        return self.database_url or default


# Read from the environment on first use
_config: Optional[DatabaseConfig] = None


def get_config() -> DatabaseConfig:
    global _config
    if _config is None:
        _config = DatabaseConfig.from_env()
    return _config


def set_config(config: Optional[DatabaseConfig]) -> None:
    """Replace the storage settings, for instance to point a test run
    at a scratch database. Passing None makes the next get_config()
    read the environment again."""
    global _config
    _config = config
