"""
Pytest fixtures for engine tests.
"""

import pytest

from ..api.service import APIService
from ..engine_core.board import BoardState, Position, WorkerRef
from ..engine_core.game import GameSession
from ..engine_core.move import Move
from ..session import SessionManager


# Alice: (1,1) #1, (1,3) #2. Bob: (3,3) #1, (3,1) #2.
STANDARD_PLACEMENTS = [(1, 1), (3, 3), (1, 3), (3, 1)]


def play_setup(game: GameSession, placements):
    """Place workers in turn order; returns the last snapshot."""
    snapshot = None
    for pos in placements:
        snapshot = game.apply_move(game.current_player_id, Move.place(Position(*pos)))
    return snapshot


def raise_cells(game_or_board, positions, height):
    """Set cell heights directly, bypassing build rules."""
    board = getattr(game_or_board, "board", game_or_board)
    for x, y in positions:
        board.cells[x][y].height = height


@pytest.fixture
def board() -> BoardState:
    """An empty 5x5 board."""
    return BoardState()


@pytest.fixture
def lone_worker_board(board: BoardState) -> BoardState:
    """Board with a single worker of player "a" at the centre."""
    board.place_worker(Position(2, 2), WorkerRef("a", 1))
    return board


@pytest.fixture
def lobby() -> GameSession:
    """Two-player session with both players joined, not started."""
    game = GameSession("g1", player_count=2)
    game.add_player("alice")
    game.add_player("bob")
    return game


@pytest.fixture
def started(lobby: GameSession) -> GameSession:
    """Two-player session in SETUP."""
    lobby.start()
    return lobby


@pytest.fixture
def in_play(started: GameSession) -> GameSession:
    """Two-player session after setup: alice to move, turn 1."""
    play_setup(started, STANDARD_PLACEMENTS)
    return started


@pytest.fixture
def three_player_lobby() -> GameSession:
    game = GameSession("g3", player_count=3)
    for pid in ("a", "b", "c"):
        game.add_player(pid)
    return game


@pytest.fixture
def manager() -> SessionManager:
    return SessionManager()


@pytest.fixture
def service(manager: SessionManager) -> APIService:
    """Create a fresh API service."""
    return APIService(session_manager=manager)
