"""
Pytest configuration and fixtures for API end-to-end tests.

This module provides fixtures for testing the puzzle API endpoints with a
Flask test client, a freshly seeded puzzle catalog for each test, and
database verification.

The database is given by DATABASE_URL, which the root conftest.py sets
to an in-memory SQLite database unless it is already set.

Usage:
    # Run all API e2e tests
    pytest tests/api_e2e/ -v

    # Run specific test file
    pytest tests/api_e2e/test_puzzles_api.py -v
"""

from __future__ import annotations

from typing import Any, Dict, Iterator, List, Sequence, TYPE_CHECKING

import pytest
from flask import Flask
from flask.testing import FlaskClient

if TYPE_CHECKING:
    from db.protocols import AttemptInfo


# Number of puzzles in the test catalog; ids run from 1 to CATALOG_SIZE
CATALOG_SIZE = 25


# =============================================================================
# Pytest Configuration
# =============================================================================


def pytest_configure(config: pytest.Config) -> None:
    """Register custom markers for API tests."""
    config.addinivalue_line(
        "markers",
        "api_e2e: end-to-end API test",
    )


# =============================================================================
# Flask App Fixture
# =============================================================================


@pytest.fixture(scope="session")
def app() -> Iterator[Flask]:
    """Create the Flask test app.

    main.py initializes the database session manager and creates the
    tables on import, using DATABASE_URL from the environment.
    """
    from main import app as flask_app

    # Configure for testing
    flask_app.config["TESTING"] = True

    yield flask_app


@pytest.fixture
def client(app: Flask) -> FlaskClient:
    """Flask test client."""
    return app.test_client()


# =============================================================================
# Database Fixtures
# =============================================================================


@pytest.fixture
def catalog(app: Flask) -> List[int]:
    """Reset the tables and fill the catalog with CATALOG_SIZE puzzles.

    Returns the puzzle ids, in ascending order.
    """
    from db import request_context

    ids: List[int] = []
    with request_context() as db:
        db.drop_tables()
        db.create_tables()
    with request_context() as db:
        for i in range(CATALOG_SIZE):
            puzzle = db.puzzles.create(
                size=5,
                komi="0",
                root_tps="2,1,x3/x5/x2,1,x2/x5/x5 1 3",
                defender_start_move="b1",
                solution=["c3", "c3<", "a1", "b2"],
                player_white="white",
                player_black="black",
                playtak_game_id=300000 + i,
            )
            ids.append(puzzle.id)
    return ids


class DatabaseVerifier:
    """Helper for setting up and checking database state around API calls.

    Each method runs in its own database context, committed on exit,
    so it must not be called while a request is being handled.
    """

    def set_rating(self, player_id: str, rating: float) -> None:
        from db import request_context

        with request_context() as db:
            db.players.set_rating(player_id, rating)

    def attempts(self, player_id: str) -> List["AttemptInfo"]:
        from db import request_context

        with request_context() as db:
            return db.attempts.list_for_player(player_id)


@pytest.fixture
def db(catalog: List[int]) -> DatabaseVerifier:
    """Database verifier on top of a freshly seeded catalog."""
    return DatabaseVerifier()


# =============================================================================
# API Helpers
# =============================================================================


@pytest.fixture
def submit_attempt(client: FlaskClient) -> Any:
    """POST an attempt for a puzzle with the test client."""

    def _submit(
        puzzle_id: int,
        username: str,
        solved: bool,
        solve_time_seconds: int = 30,
        solution: Sequence[str] = (),
    ) -> Any:
        payload: Dict[str, Any] = {
            "username": username,
            "solved": solved,
            "solveTimeSeconds": solve_time_seconds,
            "solution": list(solution),
        }
        return client.post(f"/puzzles/{puzzle_id}", json=payload)

    return _submit
