"""
SQLAlchemy ORM models for the puzzle database.

The schema works on SQLite (the default, file based) as well as
on PostgreSQL. Timestamps are whole seconds since the epoch.
"""

from __future__ import annotations

from typing import Optional

from sqlalchemy import (
    String,
    Text,
    Integer,
    Float,
    Boolean,
    ForeignKey,
    Index,
)
from sqlalchemy.orm import (
    DeclarativeBase,
    Mapped,
    mapped_column,
)

from ..testing import epoch_seconds


class Base(DeclarativeBase):
    """Base class for all SQLAlchemy models."""

    pass


class Puzzle(Base):
    """A puzzle, extracted from a finished game on playtak.com"""

    __tablename__ = "puzzles"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    # Position in Tak Positional System (TPS) notation
    root_tps: Mapped[str] = mapped_column(Text, nullable=False)
    defender_start_move: Mapped[str] = mapped_column(String(32), nullable=False)
    size: Mapped[int] = mapped_column(Integer, nullable=False)
    komi: Mapped[str] = mapped_column(String(8), nullable=False)

    player_white: Mapped[str] = mapped_column(String(128), nullable=False)
    player_black: Mapped[str] = mapped_column(String(128), nullable=False)

    # Whitespace-separated move tokens
    solution: Mapped[str] = mapped_column(Text, nullable=False)

    # Not maintained by the server; ratings are derived on request
    initial_rating: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    rating: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)

    target_time_seconds: Mapped[int] = mapped_column(
        Integer, nullable=False, default=60
    )
    playtak_game_id: Mapped[int] = mapped_column(Integer, nullable=False)

    def __repr__(self) -> str:
        return f"<Puzzle(id={self.id}, size={self.size}, solution={self.solution!r})>"


class Attempt(Base):
    """An attempt by a player at a puzzle. Rows are never updated or deleted."""

    __tablename__ = "puzzle_attempts"

    # Autoincrementing id, reflecting write order
    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    puzzle_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("puzzles.id"), nullable=False
    )
    username: Mapped[str] = mapped_column(String(128), nullable=False)
    solved: Mapped[bool] = mapped_column(Boolean, nullable=False)
    solve_time_seconds: Mapped[int] = mapped_column(Integer, nullable=False)
    # The submitted moves, whitespace-separated
    solution: Mapped[str] = mapped_column(Text, nullable=False)
    timestamp_seconds: Mapped[int] = mapped_column(
        Integer, nullable=False, default=epoch_seconds
    )

    __table_args__ = (
        Index("ix_puzzle_attempts_username_puzzle", "username", "puzzle_id"),
        Index("ix_puzzle_attempts_puzzle_username", "puzzle_id", "username"),
    )

    def __repr__(self) -> str:
        return (
            f"<Attempt(puzzle_id={self.puzzle_id}, username={self.username!r}, "
            f"solved={self.solved})>"
        )


class Player(Base):
    """A player's rating; maintained manually"""

    __tablename__ = "players"

    username: Mapped[str] = mapped_column(String(128), primary_key=True)
    rating: Mapped[float] = mapped_column(Float, nullable=False)

    def __repr__(self) -> str:
        return f"<Player(username={self.username!r}, rating={self.rating})>"
