"""Piece definitions and movement tables for three-player chess."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Tuple


class Colour(str, Enum):
    """Player colour, listed in turn order."""

    BLUE = "blue"
    GREEN = "green"
    RED = "red"

    def next(self) -> "Colour":
        return _NEXT_COLOUR[self]

    def others(self) -> Tuple["Colour", "Colour"]:
        """The other two players, in turn order after this one."""
        following = self.next()
        return following, following.next()


_NEXT_COLOUR: Dict[Colour, Colour] = {
    Colour.BLUE: Colour.GREEN,
    Colour.GREEN: Colour.RED,
    Colour.RED: Colour.BLUE,
}


class Direction(str, Enum):
    """Single-square step relative to the moving piece's section."""

    FORWARD = "forward"
    BACKWARD = "backward"
    LEFT = "left"
    RIGHT = "right"

    def reverse(self) -> "Direction":
        return _REVERSED[self]


_REVERSED: Dict[Direction, Direction] = {
    Direction.FORWARD: Direction.BACKWARD,
    Direction.BACKWARD: Direction.FORWARD,
    Direction.LEFT: Direction.RIGHT,
    Direction.RIGHT: Direction.LEFT,
}


class PieceType(str, Enum):
    """Chess piece types."""

    PAWN = "pawn"
    KNIGHT = "knight"
    BISHOP = "bishop"
    ROOK = "rook"
    QUEEN = "queen"
    KING = "king"


Step = Tuple[Direction, ...]

F, B, L, R = Direction.FORWARD, Direction.BACKWARD, Direction.LEFT, Direction.RIGHT

# Pawn step order matters: single push, double push, then the two captures.
PIECE_STEPS: Dict[PieceType, Tuple[Step, ...]] = {
    PieceType.PAWN: ((F,), (F, F), (F, L), (F, R)),
    PieceType.KNIGHT: (
        (F, F, L),
        (F, F, R),
        (F, L, L),
        (F, R, R),
        (B, B, L),
        (B, B, R),
        (B, L, L),
        (B, R, R),
    ),
    PieceType.BISHOP: ((F, L), (F, R), (B, L), (B, R)),
    PieceType.ROOK: ((F,), (B,), (L,), (R,)),
    PieceType.QUEEN: ((F,), (B,), (L,), (R,), (F, L), (F, R), (B, L), (B, R)),
    PieceType.KING: ((F,), (B,), (L,), (R,), (F, L), (F, R), (B, L), (B, R)),
}

# Number of times a step may be iterated; 8 is enough to cross two sections.
STEP_REPS: Dict[PieceType, int] = {
    PieceType.PAWN: 1,
    PieceType.KNIGHT: 1,
    PieceType.BISHOP: 8,
    PieceType.ROOK: 8,
    PieceType.QUEEN: 8,
    PieceType.KING: 1,
}

PIECE_VALUES: Dict[PieceType, int] = {
    PieceType.PAWN: 1,
    PieceType.KNIGHT: 3,
    PieceType.BISHOP: 3,
    PieceType.ROOK: 5,
    PieceType.QUEEN: 9,
    PieceType.KING: 100,
}

COLOUR_PREFIX: Dict[Colour, str] = {
    Colour.BLUE: "B",
    Colour.GREEN: "G",
    Colour.RED: "R",
}

TYPE_SYMBOL: Dict[PieceType, str] = {
    PieceType.PAWN: "P",
    PieceType.KNIGHT: "N",
    PieceType.BISHOP: "B",
    PieceType.ROOK: "R",
    PieceType.QUEEN: "Q",
    PieceType.KING: "K",
}

BACK_ROW: List[PieceType] = [
    PieceType.ROOK,
    PieceType.KNIGHT,
    PieceType.BISHOP,
    PieceType.QUEEN,
    PieceType.KING,
    PieceType.BISHOP,
    PieceType.KNIGHT,
    PieceType.ROOK,
]


@dataclass(frozen=True)
class Piece:
    """A chess piece owned by one player."""

    colour: Colour
    type: PieceType

    @property
    def value(self) -> int:
        return PIECE_VALUES[self.type]

    @property
    def steps(self) -> Tuple[Step, ...]:
        return PIECE_STEPS[self.type]

    @property
    def step_reps(self) -> int:
        return STEP_REPS[self.type]

    @property
    def symbol(self) -> str:
        return f"{COLOUR_PREFIX[self.colour]}{TYPE_SYMBOL[self.type]}"
