"""

    Configuration data

    Copyright (C) 2025 Miðeind ehf.

    The Creative Commons Attribution-NonCommercial 4.0
    International Public License (CC-BY-NC 4.0) applies to this software.
    For further information, see https://github.com/mideind/Netskrafl


    This module reads a number of configuration parameters
    from environment variables.

"""

from __future__ import annotations

from typing import (
    Callable,
    FrozenSet,
    Optional,
    Tuple,
    Union,
)
import os
from werkzeug.wrappers import Response as WerkzeugResponse
from flask.wrappers import Response


# Universal type definitions
ResponseType = Union[
    str, bytes, Response, WerkzeugResponse, Tuple[str, int], Tuple[Response, int]
]
RouteType = Callable[..., ResponseType]


def _int_tuple(s: str) -> Tuple[int, ...]:
    """Parse a comma-separated list of integers"""
    return tuple(int(part) for part in s.split(",") if part.strip())


def _name_set(s: str) -> FrozenSet[str]:
    """Parse a comma-separated list of names"""
    return frozenset(part.strip() for part in s.split(",") if part.strip())


def _optional_bound(s: str) -> Optional[int]:
    """Parse an upper bound, where zero or an empty string means no bound"""
    bound = int(s) if s.strip() else 0
    return bound if bound > 0 else None


# Are we running in a local development environment?
running_local: bool = os.environ.get("SERVER_SOFTWARE", "").startswith("Development")
# Set SERVER_HOST to 127.0.0.1 to only accept local HTTP connections
host: str = os.environ.get("SERVER_HOST", "0.0.0.0")
port: str = os.environ.get("SERVER_PORT", "3000")

# Puzzles that every new player gets first, in this order, before
# entering the random pool. Set to an empty string to disable.
ONBOARDING_PUZZLE_IDS: Tuple[int, ...] = _int_tuple(
    os.environ.get("ONBOARDING_PUZZLES", "3,15")
)

# Only puzzles with an id below this cutoff are served at random.
# Zero means that the whole catalog is served.
PUZZLE_POOL_CUTOFF: Optional[int] = _optional_bound(
    os.environ.get("PUZZLE_POOL_CUTOFF", "20")
)

# Test and administrative accounts whose attempts don't count
# towards puzzle ratings
RATING_EXCLUDED_PLAYERS: FrozenSet[str] = _name_set(
    os.environ.get("RATING_EXCLUDED_PLAYERS", "Morten,Mort2")
)
