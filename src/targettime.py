"""

    Target time estimation

    Copyright © 2025 Miðeind ehf.

    The Creative Commons Attribution-NonCommercial 4.0
    International Public License (CC-BY-NC 4.0) applies to this software.
    For further information, see https://github.com/mideind/Netskrafl

    The target time is the suggested time budget shown to a player
    for a puzzle. It grows with the number of pieces on the board and
    with the length of the solution, and is jittered by up to 20% on
    every request. It plays no part in scoring.

"""

from __future__ import annotations

from typing import Optional, Sequence

import math
import random


# Base number of seconds per move pair, before adding the piece count
SECONDS_PER_MOVE_PAIR = 20
# The target time is drawn from [low, low * TARGET_TIME_SPREAD)
TARGET_TIME_SPREAD = 1.2
# Piece markers for the two players in a TPS position string
PIECE_MARKERS = frozenset("12")

# Used when no random source is passed in
_default_rng = random.Random()


def piece_count(root_tps: str) -> int:
    """Number of pieces in a TPS position, as used for the target time"""
    return sum(1 for c in root_tps if c in PIECE_MARKERS) // 2


def target_time_floor(root_tps: str, solution: Sequence[str]) -> float:
    """The lower bound of the target time, in seconds"""
    move_pairs = math.ceil(len(solution) / 2)
    return float((SECONDS_PER_MOVE_PAIR + piece_count(root_tps)) * move_pairs)


def estimate_target_time(
    root_tps: str, solution: Sequence[str], rng: Optional[random.Random] = None
) -> int:
    """Return a suggested solving time in whole seconds"""
    low = target_time_floor(root_tps, solution)
    if low <= 0.0:
        return 0
    high = low * TARGET_TIME_SPREAD
    seconds = int((rng or _default_rng).uniform(low, high))
    # uniform() may return the upper end point itself
    return min(seconds, math.ceil(high) - 1)
