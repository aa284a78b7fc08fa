"""Time-boxed Monte Carlo Tree Search for three-player chess."""

from __future__ import annotations

import json
import logging
import math
import random
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Mapping, Optional, Sequence, Tuple

import numpy as np

from ai.base_ai import BaseAI
from ai.mcts_stats import Fingerprint, StatisticsStore, StatsEntry
from ai.move_generator import legal_moves
from engine.board import Board, IllegalMoveError, Move
from engine.pieces import Colour

LOGGER = logging.getLogger(__name__)

# Scheduling slack so the search loop does not overshoot its budget.
BUDGET_SLACK_NS = 500_000


@dataclass
class MCTSConfig:
    """Search settings. Defaults match the tournament agent."""

    time_budget_ms: int = 1000
    move_cap: int = 500
    exploration: float = math.sqrt(2)
    follow_ucb1: bool = False
    seed: Optional[int] = None
    debug_top_k: int = 5

    def validate(self) -> None:
        if self.time_budget_ms < 0:
            raise ValueError(f"time_budget_ms must be non-negative, got {self.time_budget_ms}")
        if self.move_cap <= 0:
            raise ValueError(f"move_cap must be positive, got {self.move_cap}")
        if self.exploration < 0:
            raise ValueError(f"exploration must be non-negative, got {self.exploration}")

    @classmethod
    def from_dict(cls, payload: Mapping[str, object]) -> "MCTSConfig":
        seed = payload.get("seed")
        config = cls(
            time_budget_ms=int(payload.get("time_budget_ms", 1000)),
            move_cap=int(payload.get("move_cap", 500)),
            exploration=float(payload.get("exploration", math.sqrt(2))),
            follow_ucb1=bool(payload.get("follow_ucb1", False)),
            seed=None if seed is None else int(seed),
            debug_top_k=int(payload.get("debug_top_k", 5)),
        )
        config.validate()
        return config

    @classmethod
    def from_json(cls, path: str | Path) -> "MCTSConfig":
        payload = json.loads(Path(path).read_text(encoding="utf-8"))
        return cls.from_dict(payload.get("mcts", payload))


@dataclass
class SimulationResult:
    """Outcome of one rollout."""

    winner: Optional[Colour]
    loser: Optional[Colour]
    plies: int
    visited: int
    expanded: Optional[Fingerprint]
    preferred_plies: int


@dataclass
class SearchContext:
    """State owned by a single search invocation.

    The statistics table and random generator are never shared between
    searches, so each decision starts from an empty table.
    """

    config: MCTSConfig
    store: StatisticsStore = field(default_factory=StatisticsStore)
    rng: random.Random = field(default_factory=random.Random)
    simulations: int = 0
    skipped: int = 0


def ucb1_scores(entries: Sequence[StatsEntry], exploration: float) -> np.ndarray:
    """UCB1 score per sibling: win rate plus the exploration bonus.

    Siblings that have never been played score +inf.
    """
    plays = np.array([entry.plays for entry in entries], dtype=np.float64)
    wins = np.array([entry.wins for entry in entries], dtype=np.float64)
    scores = np.full(plays.shape, np.inf)
    played = plays > 0
    if played.any():
        log_total = math.log(plays.sum())
        scores[played] = wins[played] / plays[played] + exploration * np.sqrt(log_total / plays[played])
    return scores


def ucb1_select(entries: Sequence[StatsEntry], exploration: float) -> int:
    """Index of the highest UCB1 score; the first one wins ties."""
    if not entries:
        raise ValueError("UCB1 selection needs at least one candidate")
    return int(np.argmax(ucb1_scores(entries, exploration)))


def attribute_by_score(board: Board) -> Tuple[Optional[Colour], Optional[Colour]]:
    """Winner and loser of an unfinished game by score.

    Only a strictly highest or strictly lowest score earns the role; a tie at
    either end leaves it unassigned.
    """
    scores: Dict[Colour, int] = {colour: board.score(colour) for colour in Colour}
    best = max(scores.values())
    worst = min(scores.values())
    leaders = [colour for colour, score in scores.items() if score == best]
    trailers = [colour for colour, score in scores.items() if score == worst]
    winner = leaders[0] if len(leaders) == 1 else None
    loser = trailers[0] if len(trailers) == 1 else None
    return winner, loser


def _preferred_index(store: StatisticsStore, fingerprints: Sequence[Fingerprint], exploration: float) -> Optional[int]:
    """UCB1 choice among siblings, or None while any sibling is unexpanded."""
    entries: List[StatsEntry] = []
    for fingerprint in fingerprints:
        entry = store.get(fingerprint)
        if entry is None:
            return None
        entries.append(entry)
    return ucb1_select(entries, exploration)


def run_simulation(ctx: SearchContext, root: Board) -> Optional[SimulationResult]:
    """Play one rollout from a private copy of ``root`` and backpropagate it.

    A rollout the rules engine rejects is dropped and counted as skipped.
    """
    try:
        return _simulate(ctx, root.clone())
    except IllegalMoveError as exc:
        ctx.skipped += 1
        LOGGER.debug("Simulation abandoned: %s", exc)
        return None


def _simulate(ctx: SearchContext, board: Board) -> SimulationResult:
    store = ctx.store
    exploration = ctx.config.exploration
    visited: Dict[Fingerprint, None] = {}
    expanded: Optional[Fingerprint] = None
    preferred_plies = 0
    plies = 0

    for _ in range(ctx.config.move_cap):
        player = board.current_turn
        moves = legal_moves(board, player)
        if not moves:
            break

        children = [board.successor(move) for move in moves]
        fingerprints = [Fingerprint.after(child, player, move) for move, child in zip(moves, children)]
        preferred = _preferred_index(store, fingerprints, exploration)
        if preferred is not None:
            preferred_plies += 1

        if ctx.config.follow_ucb1 and preferred is not None:
            index = preferred
        else:
            index = ctx.rng.randrange(len(moves))
        board = children[index]
        fingerprint = fingerprints[index]
        plies += 1

        # At most one new node per simulation.
        if expanded is None and store.record_new(fingerprint):
            expanded = fingerprint
        if fingerprint in store:
            visited[fingerprint] = None

        if board.game_over():
            break

    if board.game_over():
        winner, loser = board.winner, board.loser
    else:
        winner, loser = attribute_by_score(board)

    for fingerprint in visited:
        store.increment_plays(fingerprint)
        if fingerprint.player is winner:
            store.adjust_wins(fingerprint, 1)
        elif fingerprint.player is loser:
            store.adjust_wins(fingerprint, -1)

    return SimulationResult(
        winner=winner,
        loser=loser,
        plies=plies,
        visited=len(visited),
        expanded=expanded,
        preferred_plies=preferred_plies,
    )


def search(ctx: SearchContext, root: Board, time_budget_ms: int) -> int:
    """Run simulations until the budget is spent. Returns the number attempted."""
    start_ns = time.perf_counter_ns()
    while (time.perf_counter_ns() - start_ns + BUDGET_SLACK_NS) // 1_000_000 < time_budget_ms:
        run_simulation(ctx, root)
        ctx.simulations += 1
    return ctx.simulations


def extract_decision(ctx: SearchContext, root: Board) -> Optional[Move]:
    """Best recorded move that is legal at the root, by win rate.

    Ties keep the first fingerprint recorded. Falls back to the first legal
    recorded move, then to a random legal move.
    """
    player = root.current_turn
    best_move: Optional[Move] = None
    best_rate = -math.inf
    first_legal: Optional[Move] = None
    for fingerprint, entry in ctx.store.items():
        move = fingerprint.move
        if not root.is_legal_move(move.from_pos, move.to_pos, player):
            continue
        if first_legal is None:
            first_legal = move
        if entry.plays == 0:
            continue
        if entry.win_rate > best_rate:
            best_rate = entry.win_rate
            best_move = move

    if best_move is not None:
        return best_move
    if first_legal is not None:
        return first_legal
    moves = legal_moves(root, player)
    return ctx.rng.choice(moves) if moves else None


def _log_candidates(ctx: SearchContext, root: Board, chosen: Optional[Move]) -> None:
    """Emit the top-k root candidates when DEBUG is enabled."""
    if not LOGGER.isEnabledFor(logging.DEBUG):
        return
    player = root.current_turn
    ranked = sorted(
        (
            (fingerprint, entry)
            for fingerprint, entry in ctx.store.items()
            if entry.plays > 0 and root.is_legal_move(fingerprint.move.from_pos, fingerprint.move.to_pos, player)
        ),
        key=lambda item: item[1].win_rate,
        reverse=True,
    )
    for idx, (fingerprint, entry) in enumerate(ranked[: max(1, ctx.config.debug_top_k)], start=1):
        LOGGER.debug(
            "Candidate #%d move=%s rate=%.3f wins=%d plays=%d owner=%s chosen=%s",
            idx,
            fingerprint.move,
            entry.win_rate,
            entry.wins,
            entry.plays,
            fingerprint.player.value,
            fingerprint.move == chosen,
        )


def search_move(ctx: SearchContext, root: Board) -> Optional[Move]:
    """Search within the context's budget and return the decision."""
    if not legal_moves(root):
        return None
    search(ctx, root, ctx.config.time_budget_ms)
    chosen = extract_decision(ctx, root)
    LOGGER.info(
        "MCTS %s: %d simulations (%d skipped), %d nodes, chose %s",
        root.current_turn.value,
        ctx.simulations,
        ctx.skipped,
        len(ctx.store),
        chosen,
    )
    _log_candidates(ctx, root, chosen)
    return chosen


def choose_move(
    board: Board,
    time_budget_ms: int,
    move_cap: int,
    exploration: float,
    rng: Optional[random.Random] = None,
    follow_ucb1: bool = False,
) -> Optional[Move]:
    """Pick a move for the side to act, or None when it has no legal moves."""
    config = MCTSConfig(
        time_budget_ms=time_budget_ms,
        move_cap=move_cap,
        exploration=exploration,
        follow_ucb1=follow_ucb1,
    )
    config.validate()
    ctx = SearchContext(config=config, rng=rng if rng is not None else random.Random())
    return search_move(ctx, board)


class MCTSAI(BaseAI):
    """Monte Carlo Tree Search agent."""

    name = "mcts"

    def __init__(self, config: Optional[MCTSConfig] = None) -> None:
        self.config = config or MCTSConfig()
        self.config.validate()
        self._rng = random.Random(self.config.seed)
        self.last_search: Optional[SearchContext] = None

    def choose_move(self, board: Board) -> Move:
        ctx = SearchContext(config=self.config, rng=self._rng)
        self.last_search = ctx
        move = search_move(ctx, board)
        if move is None:
            raise RuntimeError("No legal moves available.")
        return move
