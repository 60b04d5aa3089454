"""
End-to-end tests for the puzzle API.

These tests exercise the full request cycle: the Flask routes, the
request-scoped database session, puzzle selection, attempt recording
and rating derivation.
"""

from __future__ import annotations

from typing import Any, List, TYPE_CHECKING

import pytest

if TYPE_CHECKING:
    from flask.testing import FlaskClient
    from .conftest import DatabaseVerifier


pytestmark = pytest.mark.api_e2e

# The catalog puzzles have three pieces on the board and four solution
# moves, so the target time is drawn from [46, 55.2)
TARGET_TIME_RANGE = range(46, 56)
# Default rating of a puzzle with a four-move solution
DEFAULT_RATING = 1950.0


def next_puzzle(client: "FlaskClient", username: str) -> Any:
    return client.get("/puzzles", query_string={"username": username})


class TestNextPuzzle:
    """GET /puzzles"""

    def test_puzzle_format(self, client: "FlaskClient", db: "DatabaseVerifier") -> None:
        resp = next_puzzle(client, "alice")

        assert resp.status_code == 200
        data = resp.get_json()
        assert data["id"] == 3
        assert data["size"] == 5
        assert data["komi"] == "0"
        assert data["rootTPS"] == "2,1,x3/x5/x2,1,x2/x5/x5 1 3"
        assert data["defenderStartMove"] == "b1"
        assert data["solution"] == ["c3", "c3<", "a1", "b2"]
        assert data["playerWhite"] == "white"
        assert data["playerBlack"] == "black"
        assert data["playtakGameId"] == 300002
        assert data["targetTimeSeconds"] in TARGET_TIME_RANGE

    def test_onboarding_then_random_pool(
        self, client: "FlaskClient", db: "DatabaseVerifier", submit_attempt: Any
    ) -> None:
        assert next_puzzle(client, "alice").get_json()["id"] == 3
        # No progress without an attempt
        assert next_puzzle(client, "alice").get_json()["id"] == 3

        assert submit_attempt(3, "alice", False).status_code == 200
        assert next_puzzle(client, "alice").get_json()["id"] == 15

        assert submit_attempt(15, "alice", True).status_code == 200
        puzzle_id = next_puzzle(client, "alice").get_json()["id"]
        assert puzzle_id < 20
        assert puzzle_id not in (3, 15)

    def test_players_progress_independently(
        self, client: "FlaskClient", db: "DatabaseVerifier", submit_attempt: Any
    ) -> None:
        submit_attempt(3, "alice", True)

        assert next_puzzle(client, "alice").get_json()["id"] == 15
        assert next_puzzle(client, "bob").get_json()["id"] == 3

    def test_exhausted_pool_gives_404(
        self, client: "FlaskClient", db: "DatabaseVerifier", submit_attempt: Any
    ) -> None:
        for puzzle_id in range(1, 20):
            assert submit_attempt(puzzle_id, "alice", False).status_code == 200

        resp = next_puzzle(client, "alice")

        assert resp.status_code == 404
        assert "error" in resp.get_json()

    @pytest.mark.parametrize("username", ["", "  "])
    def test_empty_username_gives_400(
        self, client: "FlaskClient", db: "DatabaseVerifier", username: str
    ) -> None:
        resp = next_puzzle(client, username)

        assert resp.status_code == 400
        assert "error" in resp.get_json()

    def test_missing_username_gives_400(
        self, client: "FlaskClient", db: "DatabaseVerifier"
    ) -> None:
        assert client.get("/puzzles").status_code == 400

    def test_cors_allows_any_origin(
        self, client: "FlaskClient", db: "DatabaseVerifier"
    ) -> None:
        resp = client.get(
            "/puzzles",
            query_string={"username": "alice"},
            headers={"Origin": "https://puzzles.example.org"},
        )

        assert resp.headers.get("Access-Control-Allow-Origin") == "*"


class TestSubmitAttempt:
    """POST /puzzles/<id>"""

    def test_attempt_is_recorded(
        self, db: "DatabaseVerifier", submit_attempt: Any
    ) -> None:
        resp = submit_attempt(7, "alice", True, 42, ["c3", "c3<"])

        assert resp.status_code == 200
        assert resp.data == b""
        attempts = db.attempts("alice")
        assert len(attempts) == 1
        assert attempts[0].puzzle_id == 7
        assert attempts[0].solved is True
        assert attempts[0].solve_time_seconds == 42
        assert attempts[0].solution == ["c3", "c3<"]

    def test_repeated_attempts_are_all_kept(
        self, db: "DatabaseVerifier", submit_attempt: Any
    ) -> None:
        submit_attempt(7, "alice", False, 90)
        submit_attempt(7, "alice", True, 20)

        attempts: List[Any] = db.attempts("alice")

        assert [a.solved for a in attempts] == [False, True]

    def test_form_encoded_attempt(
        self, client: "FlaskClient", db: "DatabaseVerifier"
    ) -> None:
        resp = client.post(
            "/puzzles/8",
            data={
                "username": "bob",
                "solved": "true",
                "solveTimeSeconds": "12",
                "solution[]": ["c3", "a1"],
            },
        )

        assert resp.status_code == 200
        attempts = db.attempts("bob")
        assert attempts[0].solved is True
        assert attempts[0].solve_time_seconds == 12
        assert attempts[0].solution == ["c3", "a1"]

    def test_empty_username_gives_400(
        self, db: "DatabaseVerifier", submit_attempt: Any
    ) -> None:
        assert submit_attempt(7, "", True).status_code == 400

    @pytest.mark.parametrize(
        "payload",
        [
            {"username": "alice", "solved": "yes"},
            {"username": "alice", "solveTimeSeconds": 30},
            {"username": "alice", "solved": True},
            {"username": "alice", "solved": 1, "solveTimeSeconds": 30},
            {"username": "alice", "solved": False, "solveTimeSeconds": "30"},
            {"username": "alice", "solved": False, "solveTimeSeconds": -5},
            {"username": "alice", "solved": False, "solveTimeSeconds": True},
            {"username": "alice", "solved": True, "solveTimeSeconds": 30, "solution": "c3"},
        ],
    )
    def test_malformed_attempt_gives_400(
        self, client: "FlaskClient", db: "DatabaseVerifier", payload: Any
    ) -> None:
        """A malformed attempt is rejected and never becomes a first attempt"""
        resp = client.post("/puzzles/3", json=payload)

        assert resp.status_code == 400
        assert "error" in resp.get_json()
        assert db.attempts("alice") == []
        # The player is still offered the puzzle
        assert next_puzzle(client, "alice").get_json()["id"] == 3

    def test_form_attempt_with_bad_fields_gives_400(
        self, client: "FlaskClient", db: "DatabaseVerifier"
    ) -> None:
        resp = client.post(
            "/puzzles/8",
            data={"username": "bob", "solved": "maybe", "solveTimeSeconds": "12"},
        )

        assert resp.status_code == 400
        assert db.attempts("bob") == []

    def test_unknown_puzzle_gives_404(
        self, db: "DatabaseVerifier", submit_attempt: Any
    ) -> None:
        resp = submit_attempt(9999, "alice", True)

        assert resp.status_code == 404
        assert db.attempts("alice") == []


class TestPuzzleRating:
    """GET /puzzles/<id>/rating"""

    def rating(self, client: "FlaskClient", puzzle_id: int) -> float:
        resp = client.get(f"/puzzles/{puzzle_id}/rating")
        assert resp.status_code == 200
        return float(resp.get_json())

    def test_unattempted_puzzle_has_default_rating(
        self, client: "FlaskClient", db: "DatabaseVerifier"
    ) -> None:
        assert self.rating(client, 5) == DEFAULT_RATING

    def test_failures_raise_and_solves_lower_rating(
        self, client: "FlaskClient", db: "DatabaseVerifier", submit_attempt: Any
    ) -> None:
        db.set_rating("alice", 1800.0)
        db.set_rating("bob", 1800.0)
        submit_attempt(5, "alice", False)
        submit_attempt(6, "bob", True)

        assert self.rating(client, 5) > DEFAULT_RATING
        assert self.rating(client, 6) < DEFAULT_RATING

    def test_only_first_attempt_counts(
        self, client: "FlaskClient", db: "DatabaseVerifier", submit_attempt: Any
    ) -> None:
        db.set_rating("alice", 1800.0)
        submit_attempt(5, "alice", False)
        after_first = self.rating(client, 5)

        submit_attempt(5, "alice", True)
        submit_attempt(5, "alice", True)

        assert self.rating(client, 5) == pytest.approx(after_first)

    def test_excluded_and_unrated_players_do_not_count(
        self, client: "FlaskClient", db: "DatabaseVerifier", submit_attempt: Any
    ) -> None:
        db.set_rating("Morten", 2200.0)
        submit_attempt(5, "Morten", True)
        submit_attempt(5, "Mort2", True)
        submit_attempt(5, "stranger", True)

        assert self.rating(client, 5) == DEFAULT_RATING

    def test_unknown_puzzle_gets_baseline_rating(
        self, client: "FlaskClient", db: "DatabaseVerifier"
    ) -> None:
        assert self.rating(client, 9999) == 1250.0


class TestStorageErrors:
    """Failures of the backing store during a request"""

    @pytest.fixture
    def rollbacks(self, monkeypatch: pytest.MonkeyPatch) -> List[int]:
        """Count the rollbacks of request sessions"""
        from db.sql import SqlBackend

        calls: List[int] = []
        original = SqlBackend.rollback

        def counting_rollback(self: SqlBackend) -> None:
            calls.append(1)
            original(self)

        monkeypatch.setattr(SqlBackend, "rollback", counting_rollback)
        return calls

    def test_unavailable_store_gives_500(
        self,
        client: "FlaskClient",
        db: "DatabaseVerifier",
        rollbacks: List[int],
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        from db import StorageUnavailable
        from db.sql.repositories import AttemptRepository

        def unavailable(self: AttemptRepository, player_id: str) -> Any:
            raise StorageUnavailable("unable to open database file")

        monkeypatch.setattr(AttemptRepository, "first_attempts_by_player", unavailable)

        resp = next_puzzle(client, "alice")

        assert resp.status_code == 500
        assert resp.get_json() == {"error": "Storage error"}
        assert rollbacks

    def test_failed_write_is_rolled_back(
        self,
        client: "FlaskClient",
        db: "DatabaseVerifier",
        submit_attempt: Any,
        rollbacks: List[int],
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        from db import StorageError
        from db.sql.repositories import AttemptRepository

        original = AttemptRepository.insert

        def insert_then_fail(self: AttemptRepository, *args: Any) -> None:
            # The row reaches the session before the failure
            original(self, *args)
            raise StorageError("constraint violated")

        monkeypatch.setattr(AttemptRepository, "insert", insert_then_fail)

        resp = submit_attempt(3, "alice", True)

        assert resp.status_code == 500
        assert resp.get_json() == {"error": "Storage error"}
        assert rollbacks
        assert db.attempts("alice") == []
        assert next_puzzle(client, "alice").get_json()["id"] == 3
