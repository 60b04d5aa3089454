"""

    Puzzle difficulty ratings

    Copyright © 2025 Miðeind ehf.

    The Creative Commons Attribution-NonCommercial 4.0
    International Public License (CC-BY-NC 4.0) applies to this software.
    For further information, see https://github.com/mideind/Netskrafl

    This module computes the difficulty rating of a puzzle on the same
    scale as player ratings. The puzzle is treated as a competitor that
    has played one game against each player who attempted it: when
    the player solved the puzzle, the puzzle lost, and when the player
    failed, the puzzle won. A single Glicko-2 rating period over all
    these games, starting from a default rating derived from the
    length of the solution, yields the puzzle's rating.

    Ratings are never stored; they are recomputed from the full
    attempt history whenever they are requested.

"""

from __future__ import annotations

from typing import AbstractSet, Iterable, List, Optional, Sequence

import logging

from config import RATING_EXCLUDED_PLAYERS
from db.protocols import DatabaseBackendProtocol, OutcomeInfo
from glicko import (
    LOSS,
    WIN,
    GameResult,
    Glicko2Config,
    Glicko2Rating,
    glicko2_rating_period,
)
from ledger import first_attempts_for_puzzle


# Rating of a puzzle with a one-move solution, before any attempts
PUZZLE_BASE_RATING = 1250
# Added for each full move pair in the solution
RATING_PER_MOVE_PAIR = 350


def default_puzzle_rating(solution: Sequence[str]) -> float:
    """The rating of a puzzle that nobody has attempted yet.
    Longer forced sequences start out harder."""
    return float(PUZZLE_BASE_RATING + RATING_PER_MOVE_PAIR * (len(solution) // 2))


def puzzle_game_results(outcomes: Iterable[OutcomeInfo]) -> List[GameResult]:
    """Convert attempt outcomes to games from the puzzle's point of view"""
    return [
        # A solved puzzle has been beaten; a failed attempt is a win for the puzzle
        (Glicko2Rating(rating=o.rating), LOSS if o.solved else WIN)
        for o in outcomes
    ]


def compute_puzzle_rating(
    solution: Sequence[str],
    outcomes: Iterable[OutcomeInfo],
    config: Optional[Glicko2Config] = None,
) -> Glicko2Rating:
    """Compute a puzzle's rating from its solution and the
    first-attempt outcomes of the players who tried it"""
    puzzle = Glicko2Rating(rating=default_puzzle_rating(solution))
    return glicko2_rating_period(
        puzzle, puzzle_game_results(outcomes), config or Glicko2Config()
    )


def rating_for_puzzle(
    db: DatabaseBackendProtocol,
    puzzle_id: int,
    excluded_players: Optional[AbstractSet[str]] = None,
) -> Glicko2Rating:
    """Compute the current rating of the puzzle with the given id"""
    outcomes = first_attempts_for_puzzle(
        db,
        puzzle_id,
        RATING_EXCLUDED_PLAYERS if excluded_players is None else excluded_players,
    )
    puzzle = db.puzzles.get_by_id(puzzle_id)
    if puzzle is None:
        # Unknown puzzle: rate it as if it had an empty solution
        logging.warning(
            f"Puzzle {puzzle_id} not found; using the baseline default rating"
        )
        solution: Sequence[str] = []
    else:
        solution = puzzle.solution
    rating = compute_puzzle_rating(solution, outcomes)
    logging.debug(
        f"Puzzle {puzzle_id}: rating {rating.rating:.1f} "
        f"from {len(outcomes)} first attempts"
    )
    return rating
