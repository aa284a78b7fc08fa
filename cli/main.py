"""CLI entrypoint for running three-player chess games between AIs."""

from __future__ import annotations

import argparse
import logging
from typing import List

from ai.mcts_ai import MCTSConfig
from arena.match import AgentSpec, MatchConfig, MatchRunner
from engine.pieces import Colour

AGENT_KINDS = ["mcts", "random", "greedy"]


def parse_args(argv: List[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Play three-player chess between AI agents.")
    for colour in Colour:
        parser.add_argument(
            f"--{colour.value}",
            type=str,
            default="mcts" if colour is Colour.BLUE else "random",
            choices=AGENT_KINDS,
            help=f"Agent playing {colour.value}",
        )
    parser.add_argument("--games", type=int, default=1, help="Number of games to play")
    parser.add_argument("--max-plies", type=int, default=300, help="Ply limit before deciding on score")
    parser.add_argument("--config", type=str, default=None, help="Path to MCTS config JSON")
    parser.add_argument("--time-budget-ms", type=int, default=None, help="MCTS thinking time per move")
    parser.add_argument("--move-cap", type=int, default=None, help="MCTS rollout depth cap")
    parser.add_argument("--exploration", type=float, default=None, help="UCB1 exploration constant")
    parser.add_argument("--follow-ucb1", action="store_true", help="Steer rollouts by UCB1 once expanded")
    parser.add_argument("--workers", type=int, default=1, help="Parallel game workers")
    parser.add_argument("--seed", type=int, default=None, help="Base seed for agents")
    parser.add_argument("--show-board", action="store_true", help="Print the final board of each game")
    parser.add_argument("--log-level", type=str, default="INFO", help="Python logging level")
    return parser.parse_args(argv)


def _mcts_config(args: argparse.Namespace) -> MCTSConfig:
    config = MCTSConfig.from_json(args.config) if args.config else MCTSConfig()
    if args.time_budget_ms is not None:
        config.time_budget_ms = args.time_budget_ms
    if args.move_cap is not None:
        config.move_cap = args.move_cap
    if args.exploration is not None:
        config.exploration = args.exploration
    if args.follow_ucb1:
        config.follow_ucb1 = True
    config.validate()
    return config


def run_cli(argv: List[str] | None = None) -> None:
    args = parse_args(argv)
    logging.basicConfig(level=getattr(logging, args.log_level.upper(), logging.INFO))
    logger = logging.getLogger("threechess.cli")

    mcts = _mcts_config(args)
    specs = [
        AgentSpec(
            kind=getattr(args, colour.value),
            time_budget_ms=mcts.time_budget_ms,
            move_cap=mcts.move_cap,
            exploration=mcts.exploration,
            follow_ucb1=mcts.follow_ucb1,
        )
        for colour in Colour
    ]
    logger.info("Seats: %s", ", ".join(f"{c.value}={s.kind}" for c, s in zip(Colour, specs)))

    runner = MatchRunner(MatchConfig(max_plies=args.max_plies, parallel_workers=args.workers, base_seed=args.seed))
    records = runner.run_games_from_specs(specs, n_games=args.games)
    if args.show_board:
        for record in records:
            print(record.final_board)
            print()

    summary = MatchRunner.summarize(records)
    print(" | ".join(f"{key}: {value}" for key, value in summary.items()))


if __name__ == "__main__":
    run_cli()
