"""

    Attempt ledger reader

    Copyright © 2025 Miðeind ehf.

    The Creative Commons Attribution-NonCommercial 4.0
    International Public License (CC-BY-NC 4.0) applies to this software.
    For further information, see https://github.com/mideind/Netskrafl

    Players may attempt a puzzle any number of times, and all
    attempts are kept, but only the first one (the one with the
    earliest timestamp) counts towards progress and ratings.
    This module is the read path for those first attempts.

"""

from __future__ import annotations

from typing import AbstractSet, Dict, List

from db.protocols import AttemptInfo, DatabaseBackendProtocol, OutcomeInfo


class InvalidInput(ValueError):
    """A request carried an empty player identity or a malformed field"""


def validate_player_id(player_id: str) -> str:
    """Reject empty player ids before any storage access"""
    if not player_id or not player_id.strip():
        raise InvalidInput("Player id must not be empty")
    return player_id


def first_attempts_by_player(
    db: DatabaseBackendProtocol, player_id: str
) -> Dict[int, AttemptInfo]:
    """Return the player's first attempt at each puzzle they have
    tried, keyed by puzzle id"""
    validate_player_id(player_id)
    return {a.puzzle_id: a for a in db.attempts.first_attempts_by_player(player_id)}


def first_attempts_for_puzzle(
    db: DatabaseBackendProtocol,
    puzzle_id: int,
    excluded_players: AbstractSet[str] = frozenset(),
) -> List[OutcomeInfo]:
    """Return each rated player's first attempt at the puzzle, leaving
    out the excluded (test and administrative) players"""
    return db.attempts.first_attempts_for_puzzle(puzzle_id, excluded_players)
