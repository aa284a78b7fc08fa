"""Legal move enumeration on top of the board's geometry and legality oracle."""

from __future__ import annotations

from typing import List, Optional

from engine.board import Board, Move
from engine.pieces import Colour


def legal_moves(board: Board, colour: Optional[Colour] = None) -> List[Move]:
    """Return every legal move for a player, without duplicates.

    Order follows board iteration order, so a seeded random choice over the
    result is reproducible. An empty list means the player is stuck.
    """
    colour = board.current_turn if colour is None else colour
    moves: List[Move] = []
    for start, _ in board.iter_pieces(colour):
        for end in board.candidate_destinations(start):
            if board.is_legal_move(start, end, colour):
                moves.append(Move(from_pos=start, to_pos=end))
    return list(dict.fromkeys(moves))
