"""Shared pytest fixtures for board and search tests."""

from typing import Callable, Mapping, Tuple

import pytest

from engine.board import Board
from engine.pieces import Colour, Piece, PieceType
from engine.rules import Position

PieceSpec = Tuple[Colour, PieceType]


def P(name: str) -> Position:
    """Shorthand for Position.from_name."""
    return Position.from_name(name)


@pytest.fixture
def make_board() -> Callable[..., Board]:
    """Build a board from ``{"BE1": (Colour.BLUE, PieceType.KING), ...}``."""

    def _make(pieces: Mapping[str, PieceSpec], turn: Colour = Colour.BLUE) -> Board:
        grid = {P(name): Piece(colour, piece_type) for name, (colour, piece_type) in pieces.items()}
        return Board(pieces=grid, current_turn=turn)

    return _make


@pytest.fixture
def single_winning_move_board(make_board: Callable[..., Board]) -> Board:
    """Blue's lone pawn is blocked except for a capture of the green king."""
    return make_board(
        {
            "BA3": (Colour.BLUE, PieceType.PAWN),
            "BA4": (Colour.RED, PieceType.KING),
            "BB4": (Colour.GREEN, PieceType.KING),
        }
    )


@pytest.fixture
def winning_capture_among_moves_board(make_board: Callable[..., Board]) -> Board:
    """Blue has seven legal moves; only the pawn capture of the green king ends the game."""
    return make_board(
        {
            "BA3": (Colour.BLUE, PieceType.PAWN),
            "BE1": (Colour.BLUE, PieceType.KING),
            "BB4": (Colour.GREEN, PieceType.KING),
            "RE1": (Colour.RED, PieceType.KING),
        }
    )
