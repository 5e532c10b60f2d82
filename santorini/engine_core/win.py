"""
Win Evaluator - Decides whether a match has just ended.

Two conditions:
- Climb win: a worker moved onto a level-3 cell.
- No-moves loss: the player whose phase begins has no legal move.

Both checks are pure predicates; applying their outcome is the session's job.
"""

from __future__ import annotations
from dataclasses import dataclass

from .board import BoardState, WIN_HEIGHT
from .move import GamePhase, Move, MoveKind
from .move_generator import MoveGenerator

REASON_REACHED_LEVEL_3 = "reached_level_3"
REASON_OPPONENT_IMMOBILIZED = "opponent_immobilized"
REASON_LAST_PLAYER_STANDING = "last_player_standing"


@dataclass(frozen=True)
class GameResult:
    """Terminal outcome of a match."""
    winner: str
    reason: str


@dataclass
class WinEvaluator:
    generator: MoveGenerator

    def check_move(self, board: BoardState, player_id: str, move: Move) -> GameResult | None:
        """
        Climb check, run after a MOVE has been applied to board.

        BUILD and PLACE moves never win.
        """
        if move.kind != MoveKind.MOVE:
            return None
        if board.height_at(move.to) == WIN_HEIGHT:
            return GameResult(winner=player_id, reason=REASON_REACHED_LEVEL_3)
        return None

    def is_immobilized(self, board: BoardState, phase: GamePhase, player_id: str) -> bool:
        """True when player_id has nothing to play in phase."""
        if phase not in (GamePhase.MOVE, GamePhase.BUILD):
            return False
        return not self.generator.generate(board, phase, player_id)

    @staticmethod
    def after_elimination(remaining: list[str], starting_player_count: int) -> GameResult | None:
        """
        Outcome once a blocked player has left the rotation.

        The match ends when a single player remains. Two-player matches end
        as an immobilization win; larger ones as last player standing.
        """
        if len(remaining) != 1:
            return None
        reason = (
            REASON_OPPONENT_IMMOBILIZED
            if starting_player_count == 2
            else REASON_LAST_PLAYER_STANDING
        )
        return GameResult(winner=remaining[0], reason=reason)
