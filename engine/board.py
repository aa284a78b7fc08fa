"""Three-player chess board state, legality oracle, and scoring."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, FrozenSet, Iterator, List, Mapping, Optional, Tuple

from engine.pieces import BACK_ROW, Colour, Piece, PieceType, Step
from engine.rules import (
    SECTION_COLS,
    SECTION_ROWS,
    Position,
    castling_rook_squares,
    king_home,
    reverse_step,
    step,
)


@dataclass(frozen=True)
class Move:
    """A piece moving from one square to another."""

    from_pos: Position
    to_pos: Position

    def __str__(self) -> str:
        return f"{self.from_pos.name}-{self.to_pos.name}"


@dataclass(frozen=True)
class MoveResult:
    """Result metadata for an applied move."""

    captured_piece: Optional[Piece]
    promoted: bool
    castled: bool
    winner: Optional[Colour]


class IllegalMoveError(ValueError):
    """Raised when a move is rejected by the rules."""


class Board:
    """Three-player chess board.

    Play ends as soon as a king is taken: the capturing player wins and the
    player who lost the king loses. Each player's score is the value of the
    pieces they have captured.
    """

    def __init__(
        self,
        pieces: Optional[Mapping[Position, Piece]] = None,
        current_turn: Colour = Colour.BLUE,
    ) -> None:
        self.current_turn = current_turn
        self.ply_count = 0
        self.winner: Optional[Colour] = None
        self.loser: Optional[Colour] = None
        self.grid: Dict[Position, Piece] = dict(pieces) if pieces is not None else _standard_setup()
        self._captured: Dict[Colour, List[Piece]] = {colour: [] for colour in Colour}

    def clone(self) -> "Board":
        """Deep copy board state."""
        cloned = Board.__new__(Board)
        cloned.current_turn = self.current_turn
        cloned.ply_count = self.ply_count
        cloned.winner = self.winner
        cloned.loser = self.loser
        cloned.grid = dict(self.grid)
        cloned._captured = {colour: list(pieces) for colour, pieces in self._captured.items()}
        return cloned

    def get_piece(self, pos: Position) -> Optional[Piece]:
        return self.grid.get(pos)

    def iter_pieces(self, colour: Colour) -> Iterator[Tuple[Position, Piece]]:
        """Yield a player's pieces in board order."""
        for pos, piece in list(self.grid.items()):
            if piece.colour is colour:
                yield pos, piece

    def positions(self, colour: Colour) -> FrozenSet[Position]:
        """All squares occupied by a player."""
        return frozenset(pos for pos, piece in self.grid.items() if piece.colour is colour)

    def candidate_destinations(self, start: Position) -> List[Position]:
        """Geometric destinations for the piece on a square, before legality filtering.

        Sliders stop on the first occupied square. Kings on their home square
        also offer both castling targets.
        """
        piece = self.grid.get(start)
        if piece is None:
            return []
        destinations: List[Position] = []
        for directions in piece.steps:
            if piece.step_reps > 1:
                destinations.extend(self._ray(piece, directions, start))
                continue
            end = step(piece, directions, start)
            if end is not None:
                destinations.append(end)
        if piece.type is PieceType.KING and start == king_home(piece.colour):
            destinations.append(Position(piece.colour, 0, 6))
            destinations.append(Position(piece.colour, 0, 2))
        return list(dict.fromkeys(destinations))

    def _ray(self, piece: Piece, directions: Step, start: Position) -> Iterator[Position]:
        current_step = directions
        current = step(piece, current_step, start)
        for _ in range(piece.step_reps):
            if current is None:
                return
            yield current
            if current in self.grid:
                return
            if current.colour is not start.colour:
                current_step = reverse_step(directions)
            current = step(piece, current_step, current)

    def is_legal_move(self, start: Position, end: Position, colour: Optional[Colour] = None) -> bool:
        """Return whether ``colour`` (default: side to move) may move start -> end.

        You may move into or stay in check, and castle across check. There is
        no en passant.
        """
        colour = self.current_turn if colour is None else colour
        mover = self.grid.get(start)
        if mover is None or mover.colour is not colour:
            return False
        target = self.grid.get(end)
        if target is not None and target.colour is mover.colour:
            return False

        if mover.type is PieceType.PAWN:
            return self._is_legal_pawn_move(mover, start, end, target)
        if mover.type is PieceType.KING and self._is_legal_castle(mover, start, end):
            return True
        if mover.step_reps > 1:
            return any(end in self._ray(mover, directions, start) for directions in mover.steps)
        return any(step(mover, directions, start) == end for directions in mover.steps)

    def _is_legal_pawn_move(self, mover: Piece, start: Position, end: Position, target: Optional[Piece]) -> bool:
        for index, directions in enumerate(mover.steps):
            if step(mover, directions, start) != end:
                continue
            if index == 0 and target is None:
                return True
            if (
                index == 1
                and target is None
                and start.colour is mover.colour
                and start.row == 1
                and Position(mover.colour, 2, start.column) not in self.grid
            ):
                return True
            if index > 1 and target is not None:
                return True
        return False

    def _is_legal_castle(self, mover: Piece, start: Position, end: Position) -> bool:
        if start != king_home(mover.colour):
            return False
        castling = castling_rook_squares(mover.colour, end)
        if castling is None:
            return False
        rook_from, _, must_be_empty = castling
        rook = self.grid.get(rook_from)
        if rook is None or rook.type is not PieceType.ROOK or rook.colour is not mover.colour:
            return False
        return all(square not in self.grid for square in must_be_empty)

    def apply_move(self, move: Move) -> MoveResult:
        """Apply a legal move for the side to move and pass the turn."""
        if self.game_over():
            raise IllegalMoveError(f"Game is over, cannot play {move}")
        if not self.is_legal_move(move.from_pos, move.to_pos):
            raise IllegalMoveError(f"Illegal move for {self.current_turn.value}: {move}")

        mover = self.grid.pop(move.from_pos)
        rook_move = self._castling_rook_move(mover, move) if mover.type is PieceType.KING else None
        if rook_move is not None:
            rook_from, rook_to = rook_move
            self.grid[rook_to] = self.grid.pop(rook_from)
        castled = rook_move is not None

        captured = self.grid.get(move.to_pos)
        promoted = (
            mover.type is PieceType.PAWN and move.to_pos.row == 0 and move.to_pos.colour is not mover.colour
        )
        self.grid[move.to_pos] = Piece(mover.colour, PieceType.QUEEN) if promoted else mover

        if captured is not None:
            self._captured[mover.colour].append(captured)
            if captured.type is PieceType.KING:
                self.winner = mover.colour
                self.loser = captured.colour

        self.ply_count += 1
        self.current_turn = self.current_turn.next()
        return MoveResult(captured_piece=captured, promoted=promoted, castled=castled, winner=self.winner)

    @staticmethod
    def _castling_rook_move(mover: Piece, move: Move) -> Optional[Tuple[Position, Position]]:
        # A plain king step from the home square never reaches the castling targets.
        if move.from_pos != king_home(mover.colour):
            return None
        castling = castling_rook_squares(mover.colour, move.to_pos)
        if castling is None:
            return None
        return castling[0], castling[1]

    def successor(self, move: Move) -> "Board":
        """Return the board after a move, leaving this board untouched."""
        child = self.clone()
        child.apply_move(move)
        return child

    def game_over(self) -> bool:
        return self.winner is not None

    def score(self, colour: Colour) -> int:
        """Total value of the pieces a player has captured."""
        return sum(piece.value for piece in self._captured[colour])

    def captured_by(self, colour: Colour) -> List[Piece]:
        return list(self._captured[colour])

    def render_ascii(self) -> str:
        """Return a simple human-readable board, one block per section."""
        lines: List[str] = []
        for colour in Colour:
            lines.append(f"{colour.value:<6} " + " ".join(f"{chr(ord('a') + c):>2}" for c in range(SECTION_COLS)))
            for row in reversed(range(SECTION_ROWS)):
                cells = []
                for column in range(SECTION_COLS):
                    piece = self.grid.get(Position(colour, row, column))
                    cells.append(piece.symbol if piece is not None else "..")
                lines.append(f"{row + 1:>6} " + " ".join(cells))
        return "\n".join(lines)


def _standard_setup() -> Dict[Position, Piece]:
    grid: Dict[Position, Piece] = {}
    for colour in Colour:
        for column, piece_type in enumerate(BACK_ROW):
            grid[Position(colour, 0, column)] = Piece(colour, piece_type)
        for column in range(SECTION_COLS):
            grid[Position(colour, 1, column)] = Piece(colour, PieceType.PAWN)
    return grid
