"""Uniformly random legal-move agent."""

from __future__ import annotations

import random
from typing import Optional

from ai.base_ai import BaseAI
from ai.move_generator import legal_moves
from engine.board import Board, Move


class RandomAI(BaseAI):
    """Plays any legal move with equal probability."""

    name = "random"

    def __init__(self, seed: Optional[int] = None) -> None:
        self._rng = random.Random(seed)

    def choose_move(self, board: Board) -> Move:
        moves = legal_moves(board)
        if not moves:
            raise RuntimeError("No legal moves available.")
        return self._rng.choice(moves)
