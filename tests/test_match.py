"""Tests for baseline agents, the match runner, and the CLI."""

import logging

import pytest

from ai.greedy_ai import GreedyAI
from ai.mcts_ai import MCTSAI, MCTSConfig
from ai.move_generator import legal_moves
from ai.random_ai import RandomAI
from arena.match import AgentSpec, GameRecord, MatchConfig, MatchRunner, build_agent, play_game
from cli.main import run_cli
from engine.board import Board, Move
from engine.pieces import Colour, PieceType
from engine.rules import Position

P = Position.from_name


class TestBaselineAgents:
    def test_random_ai_plays_legal_moves(self) -> None:
        board = Board()
        ai = RandomAI(seed=0)
        for _ in range(6):
            move = ai.choose_move(board)
            assert move in legal_moves(board)
            board.apply_move(move)

    def test_greedy_ai_takes_material(self, make_board) -> None:
        board = make_board(
            {
                "BA1": (Colour.BLUE, PieceType.ROOK),
                "BH2": (Colour.BLUE, PieceType.PAWN),
                "BA3": (Colour.GREEN, PieceType.PAWN),
            }
        )
        assert GreedyAI(seed=0).choose_move(board) == Move(P("BA1"), P("BA3"))

    def test_agents_refuse_when_stuck(self, make_board) -> None:
        board = make_board({"GE1": (Colour.GREEN, PieceType.KING)})
        for ai in (RandomAI(seed=0), GreedyAI(seed=0)):
            with pytest.raises(RuntimeError):
                ai.choose_move(board)


class TestBuildAgent:
    def test_known_kinds(self) -> None:
        assert isinstance(build_agent(AgentSpec(kind="random"), seed=1), RandomAI)
        assert isinstance(build_agent(AgentSpec(kind="greedy"), seed=1), GreedyAI)
        agent = build_agent(AgentSpec(kind="mcts", time_budget_ms=25, move_cap=7), seed=1)
        assert isinstance(agent, MCTSAI)
        assert agent.config.move_cap == 7

    def test_default_exploration_matches_search_default(self) -> None:
        assert AgentSpec(kind="mcts").exploration == MCTSConfig().exploration

    def test_unknown_kind_rejected(self) -> None:
        with pytest.raises(ValueError):
            build_agent(AgentSpec(kind="stockfish"))


class TestPlayGame:
    def test_game_respects_ply_limit(self) -> None:
        agents = {colour: RandomAI(seed=idx) for idx, colour in enumerate(Colour)}
        record = play_game(agents, max_plies=30)
        assert record.plies <= 30
        assert len(record.moves) == record.plies
        assert record.king_captured or record.plies == 30

    def test_king_capture_recorded(self, single_winning_move_board: Board) -> None:
        agents = {colour: RandomAI(seed=0) for colour in Colour}
        record = play_game(agents, max_plies=10, board=single_winning_move_board)
        assert record.king_captured
        assert record.winner is Colour.BLUE
        assert record.loser is Colour.GREEN
        assert record.moves == ["BA3-BB4"]

    def test_mcts_seat_plays_a_few_plies(self) -> None:
        agents = {
            Colour.BLUE: build_agent(AgentSpec(kind="mcts", time_budget_ms=20, move_cap=8), seed=0),
            Colour.GREEN: RandomAI(seed=1),
            Colour.RED: RandomAI(seed=2),
        }
        record = play_game(agents, max_plies=4)
        assert record.plies == 4


class TestMatchRunner:
    def test_run_games_from_specs(self) -> None:
        runner = MatchRunner(MatchConfig(max_plies=20, base_seed=5))
        records = runner.run_games_from_specs([AgentSpec(kind="random")] * 3, n_games=2)
        assert len(records) == 2
        assert all(record.plies <= 20 for record in records)
        assert all(record.final_board.startswith("blue") for record in records)

    def test_requires_three_specs(self) -> None:
        with pytest.raises(ValueError):
            MatchRunner(MatchConfig()).run_games_from_specs([AgentSpec(kind="random")] * 2, n_games=1)

    def test_summarize(self) -> None:
        scores = {colour: 0 for colour in Colour}
        records = [
            GameRecord(winner=Colour.BLUE, loser=Colour.RED, plies=10, king_captured=True, scores=scores),
            GameRecord(winner=None, loser=None, plies=300, king_captured=False, scores=scores),
            GameRecord(winner=Colour.BLUE, loser=None, plies=300, king_captured=False, scores=scores),
        ]
        assert MatchRunner.summarize(records) == {
            "blue_wins": 2,
            "green_wins": 0,
            "red_wins": 0,
            "undecided": 1,
        }


class TestCLI:
    def test_runs_random_game(self, capsys) -> None:
        run_cli(["--blue", "random", "--games", "1", "--max-plies", "6", "--log-level", "WARNING"])
        out = capsys.readouterr().out
        assert "blue_wins" in out
        assert "undecided" in out

    def test_show_board_goes_through_runner(self, capsys, caplog) -> None:
        with caplog.at_level(logging.INFO, logger="arena.match"):
            run_cli(["--blue", "random", "--games", "2", "--max-plies", "4", "--seed", "3", "--show-board"])
        out = capsys.readouterr().out
        assert out.count("blue ") == 2
        assert "blue_wins" in out
        assert sum("Game " in message for message in caplog.messages) == 2

    def test_show_board_seeding_matches_runner(self, capsys) -> None:
        run_cli(["--blue", "random", "--games", "1", "--max-plies", "5", "--seed", "11", "--show-board", "--log-level", "WARNING"])
        out = capsys.readouterr().out
        runner = MatchRunner(MatchConfig(max_plies=5, base_seed=11))
        record = runner.run_games_from_specs([AgentSpec(kind="random")] * 3, n_games=1)[0]
        assert record.final_board in out
