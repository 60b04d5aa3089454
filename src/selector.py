"""

    Puzzle selection

    Copyright © 2025 Miðeind ehf.

    The Creative Commons Attribution-NonCommercial 4.0
    International Public License (CC-BY-NC 4.0) applies to this software.
    For further information, see https://github.com/mideind/Netskrafl

    This module chooses the next puzzle to show a player. New players
    first get a fixed sequence of onboarding puzzles, one at a time,
    until they have attempted each of them once (solved or not).
    After that, they get a puzzle picked uniformly at random among the
    puzzles in the candidate pool that they have never attempted.

    There is no stored progress: everything is derived from the
    attempt ledger, so asking twice without an intervening attempt
    draws from the same set of eligible puzzles.

"""

from __future__ import annotations

from typing import Any, Optional, Sequence

import logging
from random import Random

from config import ONBOARDING_PUZZLE_IDS, PUZZLE_POOL_CUTOFF
from db.protocols import DatabaseBackendProtocol, PuzzleEntityProtocol
from ledger import first_attempts_by_player


# Sentinel meaning "use the configured value"
_CONFIGURED: Any = object()


def select_puzzle(
    db: DatabaseBackendProtocol,
    player_id: str,
    *,
    onboarding: Optional[Sequence[int]] = None,
    pool_cutoff: Optional[int] = _CONFIGURED,
    rng: Optional[Random] = None,
) -> Optional[PuzzleEntityProtocol]:
    """Return the next puzzle for the player, or None if the
    player has attempted every puzzle in the candidate pool.

    Args:
        onboarding: Puzzle ids to serve first, in order. Defaults
                    to the configured onboarding puzzles; pass an empty
                    sequence to go straight to the random pool.
        pool_cutoff: Only puzzles with a lower id are served at random.
                     None means no cutoff. Defaults to the configured value.
        rng: Random source for the choice among candidates.
    """
    attempted = first_attempts_by_player(db, player_id)

    for puzzle_id in ONBOARDING_PUZZLE_IDS if onboarding is None else onboarding:
        if puzzle_id in attempted:
            continue
        puzzle = db.puzzles.get_by_id(puzzle_id)
        if puzzle is not None:
            return puzzle
        logging.warning(f"Onboarding puzzle {puzzle_id} is missing from the catalog")

    cutoff = PUZZLE_POOL_CUTOFF if pool_cutoff is _CONFIGURED else pool_cutoff
    puzzle = db.puzzles.random_unattempted(player_id, cutoff, rng)
    if puzzle is None:
        logging.info(f"No unattempted puzzles left for player {player_id}")
    return puzzle
