"""
Tests for win evaluation.
"""

import pytest

from ..engine_core.board import Position, WorkerRef
from ..engine_core.move import GamePhase, Move
from ..engine_core.move_generator import MoveGenerator
from ..engine_core.win import (
    GameResult,
    WinEvaluator,
    REASON_LAST_PLAYER_STANDING,
    REASON_OPPONENT_IMMOBILIZED,
    REASON_REACHED_LEVEL_3,
)
from .conftest import raise_cells


@pytest.fixture
def evaluator() -> WinEvaluator:
    return WinEvaluator(generator=MoveGenerator())


class TestClimbWin:
    """A move onto level 3 wins."""

    def test_reaching_level_3(self, lone_worker_board, evaluator):
        raise_cells(lone_worker_board, [(2, 3)], 3)
        lone_worker_board.move_worker(WorkerRef("a", 1), Position(2, 3))

        result = evaluator.check_move(lone_worker_board, "a", Move.move(1, (2, 2), (2, 3)))

        assert result == GameResult(winner="a", reason=REASON_REACHED_LEVEL_3)

    def test_level_2_is_not_a_win(self, lone_worker_board, evaluator):
        raise_cells(lone_worker_board, [(2, 3)], 2)
        lone_worker_board.move_worker(WorkerRef("a", 1), Position(2, 3))
        assert evaluator.check_move(lone_worker_board, "a", Move.move(1, (2, 2), (2, 3))) is None

    def test_building_to_level_3_is_not_a_win(self, lone_worker_board, evaluator):
        raise_cells(lone_worker_board, [(2, 3)], 3)
        assert evaluator.check_move(lone_worker_board, "a", Move.build(1, (2, 3))) is None

    def test_check_does_not_mutate(self, lone_worker_board, evaluator):
        raise_cells(lone_worker_board, [(2, 3)], 3)
        lone_worker_board.move_worker(WorkerRef("a", 1), Position(2, 3))
        before = lone_worker_board.to_rows()
        evaluator.check_move(lone_worker_board, "a", Move.move(1, (2, 2), (2, 3)))
        assert lone_worker_board.to_rows() == before


class TestImmobilized:
    """Empty move sets at the start of a phase."""

    def test_blocked_worker(self, board, evaluator):
        board.place_worker(Position(0, 0), WorkerRef("a", 1))
        raise_cells(board, [(1, 0), (0, 1), (1, 1)], 2)
        assert evaluator.is_immobilized(board, GamePhase.MOVE, "a")

    def test_free_worker(self, lone_worker_board, evaluator):
        assert not evaluator.is_immobilized(lone_worker_board, GamePhase.MOVE, "a")

    def test_setup_never_immobilized(self, board, evaluator):
        assert not evaluator.is_immobilized(board, GamePhase.SETUP, "a")

    def test_build_blocked_by_domes(self, board, evaluator):
        board.place_worker(Position(0, 0), WorkerRef("a", 1))
        raise_cells(board, [(1, 0), (0, 1), (1, 1)], 4)
        assert evaluator.is_immobilized(board, GamePhase.BUILD, "a")


class TestAfterElimination:
    """Outcome once a blocked player leaves the rotation."""

    def test_two_player_match(self):
        result = WinEvaluator.after_elimination(["b"], starting_player_count=2)
        assert result == GameResult(winner="b", reason=REASON_OPPONENT_IMMOBILIZED)

    def test_last_player_standing(self):
        result = WinEvaluator.after_elimination(["c"], starting_player_count=4)
        assert result == GameResult(winner="c", reason=REASON_LAST_PLAYER_STANDING)

    def test_play_continues_with_two_left(self):
        assert WinEvaluator.after_elimination(["a", "c"], starting_player_count=3) is None
