"""Board geometry for three-player chess.

The board is three 4x8 sections, one per colour. Rows are numbered 0-3 from
each player's back rank towards the centre and columns 0-7 from that player's
left. Row 3 of every section touches the centre: stepping forward off row 3
lands on row 3 of a neighbouring section, with the column mirrored. Columns
0-3 border the next colour in turn order and columns 4-7 border the previous
one. Once a step crosses into another section its remaining directions are
reversed, since "forward" there points back at the crossing.
"""

from __future__ import annotations

from typing import Iterable, Iterator, NamedTuple, Optional, Tuple

from engine.pieces import COLOUR_PREFIX, Colour, Direction, Piece, PieceType, Step

SECTION_ROWS = 4
SECTION_COLS = 8
FILES = "ABCDEFGH"

_PREFIX_COLOUR = {prefix: colour for colour, prefix in COLOUR_PREFIX.items()}


class Position(NamedTuple):
    """A square on one colour's section of the board."""

    colour: Colour
    row: int
    column: int

    @property
    def name(self) -> str:
        return f"{COLOUR_PREFIX[self.colour]}{FILES[self.column]}{self.row + 1}"

    @classmethod
    def from_name(cls, name: str) -> "Position":
        """Parse names like ``BE1`` (section, file, rank)."""
        if len(name) != 3:
            raise ValueError(f"Malformed position name: {name!r}")
        prefix, file_char, rank_char = name[0].upper(), name[1].upper(), name[2]
        if prefix not in _PREFIX_COLOUR or file_char not in FILES or not rank_char.isdigit():
            raise ValueError(f"Malformed position name: {name!r}")
        position = cls(_PREFIX_COLOUR[prefix], int(rank_char) - 1, FILES.index(file_char))
        if not in_bounds(position):
            raise ValueError(f"Position off the board: {name!r}")
        return position

    def __str__(self) -> str:
        return self.name


def in_bounds(pos: Position) -> bool:
    """Return whether a position is inside its section."""
    return 0 <= pos.row < SECTION_ROWS and 0 <= pos.column < SECTION_COLS


def iter_positions() -> Iterator[Position]:
    """Yield all 96 squares, section by section."""
    for colour in Colour:
        for row in range(SECTION_ROWS):
            for column in range(SECTION_COLS):
                yield Position(colour, row, column)


def neighbour(pos: Position, direction: Direction) -> Optional[Position]:
    """Return the adjacent square in a direction, or None when off the board."""
    colour, row, column = pos
    if direction is Direction.FORWARD:
        if row < SECTION_ROWS - 1:
            return Position(colour, row + 1, column)
        target = colour.next() if column < SECTION_COLS // 2 else colour.next().next()
        return Position(target, row, SECTION_COLS - 1 - column)
    if direction is Direction.BACKWARD:
        return Position(colour, row - 1, column) if row > 0 else None
    if direction is Direction.LEFT:
        return Position(colour, row, column - 1) if column > 0 else None
    return Position(colour, row, column + 1) if column < SECTION_COLS - 1 else None


def step(piece: Piece, directions: Iterable[Direction], start: Position) -> Optional[Position]:
    """Apply one compound step for a piece, or return None if it leaves the board.

    Pawns outside their home section move towards that section's back rank, so
    their directions are reversed there.
    """
    current = start
    reverse = False
    for direction in directions:
        if reverse or (piece.type is PieceType.PAWN and current.colour is not piece.colour):
            direction = direction.reverse()
        nxt = neighbour(current, direction)
        if nxt is None:
            return None
        if nxt.colour is not current.colour:
            reverse = True
        current = nxt
    return current


def reverse_step(directions: Step) -> Step:
    """Mirror a compound step, used by sliders once they leave their start section."""
    return tuple(direction.reverse() for direction in directions)


def castling_rook_squares(
    colour: Colour, king_target: Position
) -> Optional[Tuple[Position, Position, Tuple[Position, ...]]]:
    """Return (rook_from, rook_to, squares_that_must_be_empty) for a castling king target."""
    if king_target == Position(colour, 0, 6):
        return (
            Position(colour, 0, 7),
            Position(colour, 0, 5),
            (Position(colour, 0, 5), Position(colour, 0, 6)),
        )
    if king_target == Position(colour, 0, 2):
        return (
            Position(colour, 0, 0),
            Position(colour, 0, 3),
            (Position(colour, 0, 1), Position(colour, 0, 2), Position(colour, 0, 3)),
        )
    return None


def king_home(colour: Colour) -> Position:
    return Position(colour, 0, 4)
