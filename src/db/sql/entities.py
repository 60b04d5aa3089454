"""
Entity wrappers for SQLAlchemy models.

These classes wrap SQLAlchemy model instances to implement
the entity protocols defined in src/db/protocols.py.
"""

from __future__ import annotations

from typing import Optional, List

from .models import Puzzle as PuzzleModel


class PuzzleEntity:
    """Wrapper around the Puzzle model implementing PuzzleEntityProtocol."""

    __slots__ = ("_model",)

    def __init__(self, model: PuzzleModel) -> None:
        self._model = model

    @property
    def id(self) -> int:
        return self._model.id

    @property
    def size(self) -> int:
        return self._model.size

    @property
    def komi(self) -> str:
        return self._model.komi

    @property
    def root_tps(self) -> str:
        return self._model.root_tps

    @property
    def defender_start_move(self) -> str:
        return self._model.defender_start_move

    @property
    def solution(self) -> List[str]:
        """The solution as a list of move tokens"""
        return self._model.solution.split()

    @property
    def target_time_seconds(self) -> int:
        return self._model.target_time_seconds

    @property
    def player_white(self) -> str:
        return self._model.player_white

    @property
    def player_black(self) -> str:
        return self._model.player_black

    @property
    def playtak_game_id(self) -> int:
        return self._model.playtak_game_id

    @property
    def initial_rating(self) -> Optional[int]:
        return self._model.initial_rating

    @property
    def rating(self) -> Optional[int]:
        return self._model.rating

    def __repr__(self) -> str:
        return f"<PuzzleEntity {self._model.id}>"
