"""
Repository implementations for the SQLAlchemy backend.

These classes implement the repository protocols using SQLAlchemy ORM.
Driver exceptions are translated into the storage exceptions
defined in src/db/errors.py.
"""

from __future__ import annotations

from typing import (
    Optional,
    List,
    Any,
    Callable,
    Collection,
    Sequence,
    TypeVar,
    cast,
)
from functools import wraps
import random

from sqlalchemy import select, and_, func
from sqlalchemy.exc import OperationalError, SQLAlchemyError
from sqlalchemy.orm import Session

from .models import Puzzle, Attempt, Player
from .entities import PuzzleEntity
from ..errors import StorageError, StorageUnavailable
from ..protocols import AttemptInfo, OutcomeInfo
from ..testing import epoch_seconds


F = TypeVar("F", bound=Callable[..., Any])

# Used when no random source is passed in
_default_rng = random.Random()


def storage_operation(func: F) -> F:
    """Decorator translating SQLAlchemy exceptions into storage exceptions"""

    @wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        try:
            return func(*args, **kwargs)
        except OperationalError as e:
            # The database could not be opened or the connection failed
            raise StorageUnavailable(str(e)) from e
        except SQLAlchemyError as e:
            raise StorageError(str(e)) from e

    return cast(F, wrapper)


def _first_attempt_rank() -> Any:
    """Window function numbering each player's attempts at each puzzle,
    earliest first. Timestamp ties are broken by write order."""
    return (
        func.row_number()
        .over(
            partition_by=(Attempt.username, Attempt.puzzle_id),
            order_by=(Attempt.timestamp_seconds.asc(), Attempt.id.asc()),
        )
        .label("rn")
    )


class PuzzleRepository:
    """SQLAlchemy implementation of PuzzleRepositoryProtocol."""

    def __init__(self, session: Session) -> None:
        self._session = session

    @storage_operation
    def get_by_id(self, puzzle_id: int) -> Optional[PuzzleEntity]:
        """Get a puzzle by its id, or None if it doesn't exist."""
        puzzle = self._session.get(Puzzle, puzzle_id)
        return PuzzleEntity(puzzle) if puzzle else None

    @storage_operation
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
    ) -> PuzzleEntity:
        """Create a new puzzle; the id is assigned by the database."""
        if not solution:
            raise ValueError("A puzzle must have a non-empty solution")
        puzzle = Puzzle(
            size=size,
            komi=komi,
            root_tps=root_tps,
            defender_start_move=defender_start_move,
            solution=" ".join(solution),
            player_white=player_white,
            player_black=player_black,
            playtak_game_id=playtak_game_id,
            target_time_seconds=target_time_seconds,
        )
        self._session.add(puzzle)
        self._session.flush()
        return PuzzleEntity(puzzle)

    @storage_operation
    def unattempted_ids(
        self, player_id: str, id_upper_bound: Optional[int] = None
    ) -> List[int]:
        """Ids of puzzles (below the bound, if given) that the player
        has never attempted, in ascending order."""
        stmt = (
            select(Puzzle.id)
            .outerjoin(
                Attempt,
                and_(Attempt.puzzle_id == Puzzle.id, Attempt.username == player_id),
            )
            .where(Attempt.id.is_(None))
        )
        if id_upper_bound is not None:
            stmt = stmt.where(Puzzle.id < id_upper_bound)
        stmt = stmt.order_by(Puzzle.id)
        return list(self._session.execute(stmt).scalars())

    def random_unattempted(
        self,
        player_id: str,
        id_upper_bound: Optional[int] = None,
        rng: Optional[random.Random] = None,
    ) -> Optional[PuzzleEntity]:
        """A uniformly random puzzle that the player has never attempted,
        or None if there is no such puzzle."""
        candidates = self.unattempted_ids(player_id, id_upper_bound)
        if not candidates:
            return None
        return self.get_by_id((rng or _default_rng).choice(candidates))


class AttemptRepository:
    """SQLAlchemy implementation of AttemptRepositoryProtocol."""

    def __init__(self, session: Session) -> None:
        self._session = session

    @storage_operation
    def insert(
        self,
        puzzle_id: int,
        player_id: str,
        solved: bool,
        solve_time_seconds: int,
        solution: Sequence[str],
    ) -> None:
        """Record an attempt, time-stamped at write time."""
        attempt = Attempt(
            puzzle_id=puzzle_id,
            username=player_id,
            solved=solved,
            solve_time_seconds=solve_time_seconds,
            solution=" ".join(solution),
            timestamp_seconds=epoch_seconds(),
        )
        self._session.add(attempt)
        self._session.flush()

    @storage_operation
    def first_attempts_by_player(self, player_id: str) -> List[AttemptInfo]:
        """The earliest attempt of the player at each puzzle."""
        ranked = (
            select(
                Attempt.puzzle_id,
                Attempt.username,
                Attempt.solved,
                Attempt.solve_time_seconds,
                Attempt.solution,
                Attempt.timestamp_seconds,
                _first_attempt_rank(),
            )
            .where(Attempt.username == player_id)
            .subquery()
        )
        stmt = select(ranked).where(ranked.c.rn == 1).order_by(ranked.c.puzzle_id)
        return [
            AttemptInfo(
                puzzle_id=row.puzzle_id,
                player_id=row.username,
                solved=bool(row.solved),
                solve_time_seconds=row.solve_time_seconds,
                solution=row.solution.split(),
                timestamp=row.timestamp_seconds,
            )
            for row in self._session.execute(stmt)
        ]

    @storage_operation
    def first_attempts_for_puzzle(
        self, puzzle_id: int, excluded_player_ids: Collection[str] = ()
    ) -> List[OutcomeInfo]:
        """The earliest attempt of each rated player at the puzzle,
        with the player's current rating. Players without a rating
        are left out."""
        inner = select(
            Attempt.username,
            Attempt.solved,
            Attempt.timestamp_seconds,
            _first_attempt_rank(),
        ).where(Attempt.puzzle_id == puzzle_id)
        if excluded_player_ids:
            inner = inner.where(Attempt.username.not_in(list(excluded_player_ids)))
        ranked = inner.subquery()
        stmt = (
            select(
                ranked.c.username,
                ranked.c.solved,
                ranked.c.timestamp_seconds,
                Player.rating,
            )
            .join(Player, Player.username == ranked.c.username)
            .where(ranked.c.rn == 1)
            .order_by(ranked.c.username)
        )
        return [
            OutcomeInfo(
                player_id=row.username,
                solved=bool(row.solved),
                rating=float(row.rating),
                timestamp=row.timestamp_seconds,
            )
            for row in self._session.execute(stmt)
        ]

    @storage_operation
    def list_for_player(self, player_id: str) -> List[AttemptInfo]:
        """All attempts of the player, oldest first."""
        stmt = (
            select(Attempt)
            .where(Attempt.username == player_id)
            .order_by(Attempt.timestamp_seconds, Attempt.id)
        )
        return [
            AttemptInfo(
                puzzle_id=a.puzzle_id,
                player_id=a.username,
                solved=a.solved,
                solve_time_seconds=a.solve_time_seconds,
                solution=a.solution.split(),
                timestamp=a.timestamp_seconds,
            )
            for a in self._session.execute(stmt).scalars()
        ]


class PlayerRepository:
    """SQLAlchemy implementation of PlayerRepositoryProtocol."""

    def __init__(self, session: Session) -> None:
        self._session = session

    @storage_operation
    def get_rating(self, player_id: str) -> Optional[float]:
        """The player's current rating, or None if not rated."""
        player = self._session.get(Player, player_id)
        return player.rating if player else None

    @storage_operation
    def set_rating(self, player_id: str, rating: float) -> None:
        """Create or update the player's rating."""
        if not player_id:
            raise ValueError("Player id must not be empty")
        player = self._session.get(Player, player_id)
        if player is None:
            player = Player(username=player_id, rating=rating)
            self._session.add(player)
        else:
            player.rating = rating
        self._session.flush()
