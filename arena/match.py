"""Match runner for three-player games between agents."""

from __future__ import annotations

import logging
import math
import multiprocessing as mp
from dataclasses import dataclass, field
from typing import Dict, List, Mapping, Optional, Sequence

from ai.base_ai import BaseAI
from ai.greedy_ai import GreedyAI
from ai.mcts_ai import MCTSAI, MCTSConfig, attribute_by_score
from ai.move_generator import legal_moves
from ai.random_ai import RandomAI
from engine.board import Board
from engine.pieces import Colour

LOGGER = logging.getLogger(__name__)


@dataclass
class AgentSpec:
    """Serializable agent descriptor for workers."""

    kind: str  # mcts, random or greedy
    time_budget_ms: int = 1000
    move_cap: int = 500
    exploration: float = math.sqrt(2)
    follow_ucb1: bool = False


@dataclass
class MatchConfig:
    """Match settings."""

    max_plies: int = 300
    parallel_workers: int = 1
    base_seed: Optional[int] = None
    log_every: int = 1


@dataclass
class GameRecord:
    """Summary of one finished game."""

    winner: Optional[Colour]
    loser: Optional[Colour]
    plies: int
    king_captured: bool
    scores: Dict[Colour, int]
    moves: List[str] = field(default_factory=list)
    final_board: str = ""


def build_agent(spec: AgentSpec, seed: Optional[int] = None) -> BaseAI:
    if spec.kind == "mcts":
        return MCTSAI(
            MCTSConfig(
                time_budget_ms=spec.time_budget_ms,
                move_cap=spec.move_cap,
                exploration=spec.exploration,
                follow_ucb1=spec.follow_ucb1,
                seed=seed,
            )
        )
    if spec.kind == "random":
        return RandomAI(seed=seed)
    if spec.kind == "greedy":
        return GreedyAI(seed=seed)
    raise ValueError(f"Unsupported AgentSpec kind: {spec.kind}")


def play_game(agents: Mapping[Colour, BaseAI], max_plies: int, board: Optional[Board] = None) -> GameRecord:
    """Play until a king falls, a player is stuck, or ``max_plies`` is reached.

    Games that stop without a king capture are decided on score.
    """
    board = board if board is not None else Board()
    moves: List[str] = []
    while not board.game_over() and board.ply_count < max_plies:
        if not legal_moves(board):
            LOGGER.info("%s has no legal moves, stopping at ply %d", board.current_turn.value, board.ply_count)
            break
        agent = agents[board.current_turn]
        move = agent.choose_move(board)
        result = board.apply_move(move)
        moves.append(str(move))
        if result.captured_piece is not None:
            LOGGER.debug("%s %s captured %s", board.ply_count, move, result.captured_piece.symbol)

    king_captured = board.game_over()
    if king_captured:
        winner, loser = board.winner, board.loser
    else:
        winner, loser = attribute_by_score(board)
    return GameRecord(
        winner=winner,
        loser=loser,
        plies=board.ply_count,
        king_captured=king_captured,
        scores={colour: board.score(colour) for colour in Colour},
        moves=moves,
        final_board=board.render_ascii(),
    )


def _seed_for(base_seed: Optional[int], game_index: int, seat: int) -> Optional[int]:
    return None if base_seed is None else base_seed + game_index * 3 + seat


def _parallel_worker(
    game_index: int,
    specs: Sequence[AgentSpec],
    max_plies: int,
    base_seed: Optional[int],
) -> GameRecord:
    agents = {
        colour: build_agent(spec, seed=_seed_for(base_seed, game_index, seat))
        for seat, (colour, spec) in enumerate(zip(Colour, specs))
    }
    return play_game(agents, max_plies=max_plies)


class MatchRunner:
    """Runs AI-vs-AI-vs-AI games and returns their records."""

    def __init__(self, config: MatchConfig) -> None:
        self.config = config

    def run_games(self, agents: Mapping[Colour, BaseAI], n_games: int) -> List[GameRecord]:
        records: List[GameRecord] = []
        for game_index in range(n_games):
            record = play_game(agents, max_plies=self.config.max_plies)
            records.append(record)
            self._log_record(game_index, n_games, record)
        return records

    def run_games_from_specs(self, specs: Sequence[AgentSpec], n_games: int) -> List[GameRecord]:
        """Build agents from specs (BLUE, GREEN, RED) and play, in parallel if configured."""
        if len(specs) != 3:
            raise ValueError(f"Need one AgentSpec per colour, got {len(specs)}")
        if self.config.parallel_workers <= 1:
            agents = {
                colour: build_agent(spec, seed=_seed_for(self.config.base_seed, 0, seat))
                for seat, (colour, spec) in enumerate(zip(Colour, specs))
            }
            return self.run_games(agents, n_games=n_games)

        args = [(idx, list(specs), self.config.max_plies, self.config.base_seed) for idx in range(n_games)]
        with mp.Pool(processes=self.config.parallel_workers) as pool:
            records = pool.starmap(_parallel_worker, args)
        for idx, record in enumerate(records):
            self._log_record(idx, n_games, record)
        return records

    def _log_record(self, game_index: int, n_games: int, record: GameRecord) -> None:
        if (game_index + 1) % max(1, self.config.log_every) != 0:
            return
        LOGGER.info(
            "Game %d/%d | winner=%s loser=%s king_captured=%s plies=%d",
            game_index + 1,
            n_games,
            record.winner.value if record.winner else None,
            record.loser.value if record.loser else None,
            record.king_captured,
            record.plies,
        )

    @staticmethod
    def summarize(records: Sequence[GameRecord]) -> Dict[str, int]:
        summary = {f"{colour.value}_wins": 0 for colour in Colour}
        summary["undecided"] = 0
        for record in records:
            if record.winner is None:
                summary["undecided"] += 1
            else:
                summary[f"{record.winner.value}_wins"] += 1
        return summary
