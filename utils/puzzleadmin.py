"""

    Puzzle Administration Utility

    Copyright © 2025 Miðeind ehf.

    The Creative Commons Attribution-NonCommercial 4.0
    International Public License (CC-BY-NC 4.0) applies to this software.
    For further information, see https://github.com/mideind/Netskrafl

    This utility maintains the puzzle database from the command line:
    it creates the tables, adds puzzles, sets player ratings and
    reports puzzle ratings and player attempt histories.

    The database is given by --database-url, or by the DATABASE_URL
    environment variable, or defaults to the local puzzles.db file.

    Usage:
        python utils/puzzleadmin.py init
        python utils/puzzleadmin.py add-puzzle --size 5 --tps TPS \\
            --defender-start-move "a1" --solution "c3 c3<" \\
            --white alice --black bob --game-id 123456
        python utils/puzzleadmin.py set-rating alice 1650
        python utils/puzzleadmin.py rating 3
        python utils/puzzleadmin.py attempts alice

"""

from __future__ import annotations

from typing import Callable, Dict, Optional

import argparse
import logging
import os
import sys
from datetime import datetime, UTC

# Add the src directory to the Python path for imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "src"))

try:
    from db import StorageError
    from db.protocols import DatabaseBackendProtocol
    from db.sql import SqlBackend
    from puzzlerating import rating_for_puzzle
except ImportError as e:
    print(f"Error importing required modules: {e}")
    print("Make sure you're running this from the project directory")
    print("and that all dependencies are installed.")
    sys.exit(1)


def setup_logging(verbose: bool = False) -> None:
    """Configure logging for the utility"""
    level = logging.DEBUG if verbose else logging.INFO
    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter("%(asctime)s - %(levelname)s - %(message)s"))
    logging.basicConfig(level=level, handlers=[handler], force=True)


def cmd_init(db: DatabaseBackendProtocol, args: argparse.Namespace) -> int:
    db.create_tables()
    logging.info("Tables created")
    return 0


def cmd_add_puzzle(db: DatabaseBackendProtocol, args: argparse.Namespace) -> int:
    solution = args.solution.split()
    if not solution:
        print("Error: the solution must contain at least one move")
        return 1
    puzzle = db.puzzles.create(
        size=args.size,
        komi=args.komi,
        root_tps=args.tps,
        defender_start_move=args.defender_start_move,
        solution=solution,
        player_white=args.white,
        player_black=args.black,
        playtak_game_id=args.game_id,
        target_time_seconds=args.target_time,
    )
    db.commit()
    print(f"Added puzzle {puzzle.id}")
    return 0


def cmd_set_rating(db: DatabaseBackendProtocol, args: argparse.Namespace) -> int:
    previous = db.players.get_rating(args.player)
    db.players.set_rating(args.player, args.rating)
    db.commit()
    if previous is None:
        logging.info(f"Player {args.player} rated at {args.rating}")
    else:
        logging.info(f"Player {args.player} rating changed from {previous} to {args.rating}")
    return 0


def cmd_rating(db: DatabaseBackendProtocol, args: argparse.Namespace) -> int:
    if db.puzzles.get_by_id(args.puzzle_id) is None:
        print(f"Error: puzzle {args.puzzle_id} not found")
        return 1
    rating = rating_for_puzzle(db, args.puzzle_id)
    print(f"Puzzle {args.puzzle_id}")
    print(f"  rating:     {rating.rating:.1f}")
    print(f"  deviation:  {rating.deviation:.1f}")
    print(f"  volatility: {rating.volatility:.6f}")
    return 0


def cmd_attempts(db: DatabaseBackendProtocol, args: argparse.Namespace) -> int:
    attempts = db.attempts.list_for_player(args.player)
    if not attempts:
        print(f"No attempts by {args.player}")
        return 0
    seen: set[int] = set()
    for a in attempts:
        when = datetime.fromtimestamp(a.timestamp, UTC).strftime("%Y-%m-%d %H:%M:%S")
        # The first attempt at each puzzle is the one that counts
        marker = " " if a.puzzle_id in seen else "*"
        seen.add(a.puzzle_id)
        result = "solved" if a.solved else "failed"
        print(
            f"{marker} {when}  puzzle {a.puzzle_id:>5}  {result:<6}  "
            f"{a.solve_time_seconds:>5}s  {' '.join(a.solution)}"
        )
    return 0


COMMANDS: Dict[str, Callable[[DatabaseBackendProtocol, argparse.Namespace], int]] = {
    "init": cmd_init,
    "add-puzzle": cmd_add_puzzle,
    "set-rating": cmd_set_rating,
    "rating": cmd_rating,
    "attempts": cmd_attempts,
}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Maintain the Tak puzzle database")
    parser.add_argument(
        "--database-url",
        type=str,
        help="SQLAlchemy database URL (overrides DATABASE_URL)",
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable verbose logging",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("init", help="Create the database tables")

    add = sub.add_parser("add-puzzle", help="Add a puzzle to the catalog")
    add.add_argument("--size", type=int, required=True, help="Board size")
    add.add_argument("--komi", type=str, default="0", help="Komi")
    add.add_argument("--tps", type=str, required=True, help="Starting position (TPS)")
    add.add_argument(
        "--defender-start-move",
        type=str,
        required=True,
        help="The defender's move leading into the puzzle",
    )
    add.add_argument(
        "--solution",
        type=str,
        required=True,
        help="The solution, as space-separated moves",
    )
    add.add_argument("--white", type=str, required=True, help="White player")
    add.add_argument("--black", type=str, required=True, help="Black player")
    add.add_argument("--game-id", type=int, required=True, help="Playtak game id")
    add.add_argument(
        "--target-time",
        type=int,
        default=60,
        help="Stored target time in seconds",
    )

    rate = sub.add_parser("set-rating", help="Set a player's rating")
    rate.add_argument("player", type=str)
    rate.add_argument("rating", type=float)

    show = sub.add_parser("rating", help="Show a puzzle's current rating")
    show.add_argument("puzzle_id", type=int)

    hist = sub.add_parser("attempts", help="List a player's attempts")
    hist.add_argument("player", type=str)

    return parser


def main(argv: Optional[list[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging(args.verbose)

    db = SqlBackend(database_url=args.database_url)
    try:
        return COMMANDS[args.command](db, args)
    except StorageError as e:
        logging.error(f"Database error: {e}")
        db.rollback()
        return 1
    finally:
        db.close()


if __name__ == "__main__":
    sys.exit(main())
