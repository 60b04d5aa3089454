"""
Root pytest configuration.

This conftest.py is discovered by pytest and ensures the src/ directory
is on the Python path for all tests.
"""

from __future__ import annotations

import sys
import os

import pytest

# Add src/ to Python path so tests can import from it
SRC_PATH = os.path.join(os.path.dirname(__file__), "src")
if SRC_PATH not in sys.path:
    sys.path.insert(0, SRC_PATH)

# Tests use an in-memory database unless DATABASE_URL says otherwise
from db.config import DEFAULT_TEST_DATABASE_URL  # noqa: E402

os.environ.setdefault("DATABASE_URL", DEFAULT_TEST_DATABASE_URL)


def pytest_addoption(parser: pytest.Parser) -> None:
    """Add command-line option for the test database."""
    parser.addoption(
        "--database-url",
        action="store",
        default=os.environ["DATABASE_URL"],
        help="SQLAlchemy URL of the database for the repository tests",
    )
