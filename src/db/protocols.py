"""
Protocol definitions for database backends.

This module defines the interface contracts that database backends
must implement. Using Protocol classes enables structural subtyping,
so backends don't need to explicitly inherit from these classes, and
the puzzle engine depends only on this narrow contract rather than
on a particular storage engine.
"""

from __future__ import annotations

from typing import (
    Protocol,
    Optional,
    List,
    Any,
    Collection,
    Sequence,
    runtime_checkable,
)
from dataclasses import dataclass
from random import Random


# =============================================================================
# Data Transfer Objects (shared across backends)
# =============================================================================


@dataclass(frozen=True)
class AttemptInfo:
    """A single attempt by a player at a puzzle."""

    puzzle_id: int
    player_id: str
    solved: bool
    solve_time_seconds: int
    solution: List[str]
    # Seconds since the epoch, assigned when the attempt was written
    timestamp: int


@dataclass(frozen=True)
class OutcomeInfo:
    """A player's first attempt at a puzzle, together with
    the player's current rating. This is one sample for the
    puzzle difficulty rating."""

    player_id: str
    solved: bool
    rating: float
    timestamp: int


# =============================================================================
# Entity Protocols
# =============================================================================


@runtime_checkable
class PuzzleEntityProtocol(Protocol):
    """Protocol for Puzzle entities."""

    @property
    def id(self) -> int: ...

    @property
    def size(self) -> int: ...

    @property
    def komi(self) -> str: ...

    @property
    def root_tps(self) -> str: ...

    @property
    def defender_start_move(self) -> str: ...

    @property
    def solution(self) -> List[str]: ...

    @property
    def target_time_seconds(self) -> int: ...

    @property
    def player_white(self) -> str: ...

    @property
    def player_black(self) -> str: ...

    @property
    def playtak_game_id(self) -> int: ...

    @property
    def initial_rating(self) -> Optional[int]: ...

    @property
    def rating(self) -> Optional[int]: ...


# =============================================================================
# Repository Protocols
# =============================================================================


class PuzzleRepositoryProtocol(Protocol):
    """Protocol for Puzzle repository operations."""

    def get_by_id(self, puzzle_id: int) -> Optional[PuzzleEntityProtocol]:
        """Get a puzzle by its id, or None if it doesn't exist."""
        ...

    def create(
        self,
        *,
        size: int,
        komi: str,
        root_tps: str,
        defender_start_move: str,
        solution: Sequence[str],
        player_white: str,
        player_black: str,
        playtak_game_id: int,
        target_time_seconds: int = 60,
    ) -> PuzzleEntityProtocol:
        """Create a new puzzle; the id is assigned by the database."""
        ...

    def unattempted_ids(
        self, player_id: str, id_upper_bound: Optional[int] = None
    ) -> List[int]:
        """Ids of puzzles (below the bound, if given) that the player
        has never attempted, in ascending order."""
        ...

    def random_unattempted(
        self,
        player_id: str,
        id_upper_bound: Optional[int] = None,
        rng: Optional[Random] = None,
    ) -> Optional[PuzzleEntityProtocol]:
        """A uniformly random puzzle that the player has never attempted,
        or None if there is no such puzzle."""
        ...


class AttemptRepositoryProtocol(Protocol):
    """Protocol for Attempt repository operations.
    Attempts are append-only: there is no update or delete."""

    def insert(
        self,
        puzzle_id: int,
        player_id: str,
        solved: bool,
        solve_time_seconds: int,
        solution: Sequence[str],
    ) -> None:
        """Record an attempt, time-stamped at write time."""
        ...

    def first_attempts_by_player(self, player_id: str) -> List[AttemptInfo]:
        """The earliest attempt of the player at each puzzle."""
        ...

    def first_attempts_for_puzzle(
        self, puzzle_id: int, excluded_player_ids: Collection[str] = ()
    ) -> List[OutcomeInfo]:
        """The earliest attempt of each rated player at the puzzle,
        with the player's current rating."""
        ...

    def list_for_player(self, player_id: str) -> List[AttemptInfo]:
        """All attempts of the player, oldest first."""
        ...


class PlayerRepositoryProtocol(Protocol):
    """Protocol for player rating operations."""

    def get_rating(self, player_id: str) -> Optional[float]:
        """The player's current rating, or None if not rated."""
        ...

    def set_rating(self, player_id: str, rating: float) -> None:
        """Create or update the player's rating."""
        ...


# =============================================================================
# Database Backend Protocol
# =============================================================================


class DatabaseBackendProtocol(Protocol):
    """Protocol for the complete database backend.

    This is the main entry point for database operations. Implementations
    provide access to all entity repositories and transaction management.
    """

    @property
    def puzzles(self) -> PuzzleRepositoryProtocol:
        """Access the Puzzle repository."""
        ...

    @property
    def attempts(self) -> AttemptRepositoryProtocol:
        """Access the Attempt repository."""
        ...

    @property
    def players(self) -> PlayerRepositoryProtocol:
        """Access the player rating repository."""
        ...

    def flush(self) -> None:
        """Write pending changes without committing."""
        ...

    def commit(self) -> None:
        """Commit the current transaction."""
        ...

    def rollback(self) -> None:
        """Roll back the current transaction."""
        ...

    def close(self) -> None:
        """Close database connections and clean up resources."""
        ...

    def create_tables(self) -> None:
        """Create all tables that don't already exist."""
        ...

    def drop_tables(self) -> None:
        """Drop all tables."""
        ...


__all__ = [
    "AttemptInfo",
    "OutcomeInfo",
    "PuzzleEntityProtocol",
    "PuzzleRepositoryProtocol",
    "AttemptRepositoryProtocol",
    "PlayerRepositoryProtocol",
    "DatabaseBackendProtocol",
]
