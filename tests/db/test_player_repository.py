"""
Tests for player rating repository operations.

These tests run against any backend implementing the DatabaseBackendProtocol.
Use the --database-url option to select the database.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

if TYPE_CHECKING:
    from db.protocols import DatabaseBackendProtocol


class TestPlayerRating:
    """Test player rating storage."""

    def test_unrated_player(self, backend: "DatabaseBackendProtocol") -> None:
        """A player without a rating row has no rating."""
        assert backend.players.get_rating("nobody") is None

    def test_set_and_get_rating(self, backend: "DatabaseBackendProtocol") -> None:
        backend.players.set_rating("alice", 1650.0)

        assert backend.players.get_rating("alice") == pytest.approx(1650.0)

    def test_set_rating_updates_existing(
        self, backend: "DatabaseBackendProtocol"
    ) -> None:
        """Setting a rating twice keeps only the latest value."""
        backend.players.set_rating("alice", 1650.0)
        backend.players.set_rating("alice", 1720.5)

        assert backend.players.get_rating("alice") == pytest.approx(1720.5)

    def test_empty_player_id_is_rejected(
        self, backend: "DatabaseBackendProtocol"
    ) -> None:
        with pytest.raises(ValueError):
            backend.players.set_rating("", 1500.0)

    def test_rating_survives_commit(self, backend: "DatabaseBackendProtocol") -> None:
        """Committed ratings are visible after the transaction ends."""
        backend.players.set_rating("bob", 1300.0)
        backend.commit()

        assert backend.players.get_rating("bob") == pytest.approx(1300.0)

    def test_rollback_discards_rating(
        self, backend: "DatabaseBackendProtocol"
    ) -> None:
        backend.players.set_rating("carol", 1300.0)
        backend.rollback()

        assert backend.players.get_rating("carol") is None
