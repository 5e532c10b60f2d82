"""
Engine Core - Rules engine for the tower-building board game.

The engine:
1. Holds the board (heights, workers)
2. Generates legal moves per phase
3. Applies moves atomically via GameSession
4. Rotates turns and phases
5. Detects climb wins and immobilized players
"""

from .board import (
    BoardState,
    Cell,
    Position,
    WorkerRef,
    BOARD_SIZE,
    MAX_HEIGHT,
    WIN_HEIGHT,
    WORKERS_PER_PLAYER,
    MIN_PLAYERS,
    MAX_PLAYERS,
)
from .move import GamePhase, Move, MoveKind
from .move_generator import MoveGenerator, legal_moves, is_legal
from .turn import TurnController
from .win import WinEvaluator, GameResult
from .game import GameSession, Player, Snapshot, CellView, PlayerView
from . import errors

__all__ = [
    "BoardState",
    "Cell",
    "Position",
    "WorkerRef",
    "BOARD_SIZE",
    "MAX_HEIGHT",
    "WIN_HEIGHT",
    "WORKERS_PER_PLAYER",
    "MIN_PLAYERS",
    "MAX_PLAYERS",
    "GamePhase",
    "Move",
    "MoveKind",
    "MoveGenerator",
    "legal_moves",
    "is_legal",
    "TurnController",
    "WinEvaluator",
    "GameResult",
    "GameSession",
    "Player",
    "Snapshot",
    "CellView",
    "PlayerView",
    "errors",
]
