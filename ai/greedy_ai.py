"""One-ply greedy agent that grabs the most material it can."""

from __future__ import annotations

import logging
import random
from typing import List, Optional

from ai.base_ai import BaseAI
from ai.move_generator import legal_moves
from engine.board import Board, Move

LOGGER = logging.getLogger(__name__)


class GreedyAI(BaseAI):
    """Picks the move with the largest immediate score gain.

    Equal gains are broken at random so quiet positions do not replay the
    same move every game.
    """

    name = "greedy"

    def __init__(self, seed: Optional[int] = None) -> None:
        self._rng = random.Random(seed)

    def choose_move(self, board: Board) -> Move:
        moves = legal_moves(board)
        if not moves:
            raise RuntimeError("No legal moves available.")

        mover = board.current_turn
        before = board.score(mover)
        best_gain = None
        best_moves: List[Move] = []
        for move in moves:
            gain = board.successor(move).score(mover) - before
            if best_gain is None or gain > best_gain:
                best_gain = gain
                best_moves = [move]
            elif gain == best_gain:
                best_moves.append(move)

        chosen = self._rng.choice(best_moves)
        LOGGER.debug("Greedy selected %s gaining %d from %d candidates", chosen, best_gain, len(best_moves))
        return chosen
