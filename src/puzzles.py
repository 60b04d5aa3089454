"""

    Puzzle API

    Copyright © 2025 Miðeind ehf.

    The Creative Commons Attribution-NonCommercial 4.0
    International Public License (CC-BY-NC 4.0) applies to this software.
    For further information, see https://github.com/mideind/Netskrafl


    This module contains the HTTP entry points for serving puzzles,
    recording attempts and reporting puzzle ratings.

"""

from __future__ import annotations

from typing import Any, List, Sequence, TypedDict

import logging
from functools import wraps

from flask import Blueprint, request
from flask.typing import ResponseReturnValue

from config import ResponseType, RouteType
from basics import jsonify, RequestData
from db import get_db, StorageError
from db.protocols import PuzzleEntityProtocol
from ledger import InvalidInput, validate_player_id
from puzzlerating import rating_for_puzzle
from selector import select_puzzle
from targettime import estimate_target_time


class PuzzleDict(TypedDict):
    """A puzzle, as sent to the client"""

    id: int
    size: int
    komi: str
    rootTPS: str  # The starting position in Tak Positional System notation
    defenderStartMove: str
    solution: List[str]
    targetTimeSeconds: int
    playerWhite: str
    playerBlack: str
    playtakGameId: int


_ONLY_GET: Sequence[str] = ["GET"]
_ONLY_POST: Sequence[str] = ["POST"]

# Register the Flask blueprint for the puzzle APIs
puzzles = puzzles_blueprint = Blueprint("puzzles", __name__)


def puzzle_route(route: str, methods: Sequence[str] = _ONLY_GET) -> Any:
    """Decorator for puzzle API routes; checks that the name of the route function ends with '_api'"""

    def decorator(f: RouteType) -> RouteType:

        assert f.__name__.endswith(
            "_api"
        ), f"Name of puzzle API function '{f.__name__}' must end with '_api'"

        @puzzles.route(route, methods=methods)
        @wraps(f)
        def wrapper(*args: Any, **kwargs: Any) -> ResponseReturnValue:
            return f(*args, **kwargs)

        return wrapper

    return decorator


def puzzle_to_dict(puzzle: PuzzleEntityProtocol) -> PuzzleDict:
    """Convert a puzzle entity to the client format, with a freshly
    estimated target time"""
    solution = puzzle.solution
    return PuzzleDict(
        id=puzzle.id,
        size=puzzle.size,
        komi=puzzle.komi,
        rootTPS=puzzle.root_tps,
        defenderStartMove=puzzle.defender_start_move,
        solution=solution,
        targetTimeSeconds=estimate_target_time(puzzle.root_tps, solution),
        playerWhite=puzzle.player_white,
        playerBlack=puzzle.player_black,
        playtakGameId=puzzle.playtak_game_id,
    )


def _required_bool(rq: RequestData, key: str) -> bool:
    """A mandatory boolean: JSON true/false, or 'true'/'false' in a form"""
    val = rq.get(key)
    if isinstance(val, bool):
        return val
    if not rq.using_json and val in ("true", "false"):
        return val == "true"
    raise InvalidInput(f"'{key}' must be true or false")


def _required_seconds(rq: RequestData, key: str) -> int:
    """A mandatory non-negative whole number of seconds"""
    val = rq.get(key)
    if not rq.using_json and isinstance(val, str) and val.isdigit():
        val = int(val)
    # bool is a subclass of int, but true is not a duration
    if isinstance(val, bool) or not isinstance(val, int) or val < 0:
        raise InvalidInput(f"'{key}' must be a non-negative integer")
    return val


def _move_list(rq: RequestData, key: str) -> List[str]:
    """The moves entered by the player; may be empty"""
    if rq.using_json:
        val = rq.get(key, [])
        if not isinstance(val, list) or not all(isinstance(m, str) for m in val):
            raise InvalidInput(f"'{key}' must be a list of moves")
        return list(val)
    return [str(m) for m in rq.get_list(key)]


@puzzles.errorhandler(InvalidInput)
def invalid_input(e: InvalidInput) -> ResponseType:
    return jsonify(error=str(e)), 400


@puzzles.errorhandler(StorageError)
def storage_error(e: StorageError) -> ResponseType:
    """Data access failures are reported to the client, never retried"""
    logging.error(f"Storage error in {request.method} {request.path}: {e}")
    get_db().rollback()
    return jsonify(error="Storage error"), 500


@puzzle_route("/puzzles")
def next_puzzle_api() -> ResponseType:
    """Return the next puzzle for the player given in the username parameter"""
    rq = RequestData(request, use_args=True)
    username = str(rq.get("username", ""))
    puzzle = select_puzzle(get_db(), username)
    if puzzle is None:
        return jsonify(error="No puzzle available"), 404
    return jsonify(puzzle_to_dict(puzzle))


@puzzle_route("/puzzles/<int:puzzle_id>", methods=_ONLY_POST)
def submit_attempt_api(puzzle_id: int) -> ResponseType:
    """Record a player's attempt at a puzzle"""
    rq = RequestData(request)
    username = validate_player_id(str(rq.get("username", "")))
    solved = _required_bool(rq, "solved")
    solve_time_seconds = _required_seconds(rq, "solveTimeSeconds")
    solution = _move_list(rq, "solution")
    db = get_db()
    if db.puzzles.get_by_id(puzzle_id) is None:
        return jsonify(error=f"Puzzle {puzzle_id} not found"), 404
    db.attempts.insert(puzzle_id, username, solved, solve_time_seconds, solution)
    return "", 200


@puzzle_route("/puzzles/<int:puzzle_id>/rating")
def puzzle_rating_api(puzzle_id: int) -> ResponseType:
    """Return the current difficulty rating of a puzzle"""
    rating = rating_for_puzzle(get_db(), puzzle_id)
    return jsonify(rating.rating)
