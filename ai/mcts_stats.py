"""Search statistics for MCTS: state fingerprints and the plays/wins table."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, FrozenSet, Iterator, Optional, Tuple

from engine.board import Board, Move
from engine.pieces import Colour
from engine.rules import Position


@dataclass(frozen=True)
class Fingerprint:
    """Identity of a tree edge: who moved, what they played, and where everything ended up.

    Castling rights and move history are not part of the key, so distinct
    positions with the same piece placement share statistics.
    """

    player: Colour
    own: FrozenSet[Position]
    others: FrozenSet[Position]
    move: Move

    @classmethod
    def after(cls, board: Board, player: Colour, move: Move) -> "Fingerprint":
        """Fingerprint ``board`` as the result of ``player`` playing ``move``."""
        first, second = player.others()
        return cls(
            player=player,
            own=board.positions(player),
            others=board.positions(first) | board.positions(second),
            move=move,
        )


@dataclass
class StatsEntry:
    plays: int = 0
    wins: int = 0

    @property
    def win_rate(self) -> float:
        if self.plays <= 0:
            raise ZeroDivisionError("win rate is undefined before the first play")
        return self.wins / self.plays


class StatisticsStore:
    """Per-search table of fingerprint statistics.

    Entries only come into existence through ``record_new``; updates to a
    fingerprint that was never recorded are ignored. Iteration follows the
    order in which fingerprints were first recorded.
    """

    def __init__(self) -> None:
        self._entries: Dict[Fingerprint, StatsEntry] = {}

    def get(self, fingerprint: Fingerprint) -> Optional[StatsEntry]:
        return self._entries.get(fingerprint)

    def record_new(self, fingerprint: Fingerprint) -> bool:
        """Insert an empty entry if absent. Returns True when a new entry was made."""
        if fingerprint in self._entries:
            return False
        self._entries[fingerprint] = StatsEntry()
        return True

    def increment_plays(self, fingerprint: Fingerprint) -> None:
        entry = self._entries.get(fingerprint)
        if entry is not None:
            entry.plays += 1

    def adjust_wins(self, fingerprint: Fingerprint, delta: int) -> None:
        entry = self._entries.get(fingerprint)
        if entry is not None:
            entry.wins += delta

    def items(self) -> Iterator[Tuple[Fingerprint, StatsEntry]]:
        return iter(list(self._entries.items()))

    def clear(self) -> None:
        self._entries.clear()

    def __contains__(self, fingerprint: object) -> bool:
        return fingerprint in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[Fingerprint]:
        return iter(list(self._entries))
