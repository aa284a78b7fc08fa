"""Base AI interface."""

from __future__ import annotations

from abc import ABC, abstractmethod

from engine.board import Board, Move


class BaseAI(ABC):
    """Abstract agent contract: pick a move for whoever is to act."""

    name = "base"

    @abstractmethod
    def choose_move(self, board: Board) -> Move:
        """Choose a legal move for the side to move. The board must not be mutated."""
        raise NotImplementedError

    def __str__(self) -> str:
        return self.name
