"""
Move Generator - Enumerates all legal moves for the acting player.

The move generator is used by:
1. GameSession to validate submitted moves (is this move in legal_moves?)
2. The immobilization check (an empty set at the start of a phase is a loss)
3. Bots and UIs to show available moves

Design: Pure function of (board, phase, player). Never mutates the board.
An empty result is a valid answer, not an error.
"""

from __future__ import annotations
from dataclasses import dataclass

from .board import BoardState, Position, WorkerRef, MAX_HEIGHT, WORKERS_PER_PLAYER
from .move import GamePhase, Move, MoveKind

# Reasons reported with IllegalMoveError
REASON_OUT_OF_BOUNDS = "out_of_bounds"
REASON_OCCUPIED = "occupied"
REASON_DOMED = "domed"
REASON_TOO_HIGH = "too_high"
REASON_NOT_ADJACENT = "not_adjacent"
REASON_UNKNOWN_WORKER = "unknown_worker"
REASON_WORKER_MISMATCH = "worker_mismatch"
REASON_NO_WORKERS_LEFT = "no_workers_left"
REASON_NOT_LEGAL = "not_legal"


@dataclass
class MoveGenerator:
    """
    Generates legal moves for one player in one phase.

    workers_per_player bounds how many placements SETUP offers.
    """
    workers_per_player: int = WORKERS_PER_PLAYER

    def generate(self, board: BoardState, phase: GamePhase, player_id: str) -> list[Move]:
        """
        Generate all legal moves for player_id in phase.

        Returns moves in a stable order (worker id, then row-major target).
        """
        if phase == GamePhase.SETUP:
            return self._generate_place_moves(board, player_id)
        if phase == GamePhase.MOVE:
            return self._generate_worker_moves(board, player_id)
        if phase == GamePhase.BUILD:
            return self._generate_build_moves(board, player_id)
        return []

    def _generate_place_moves(self, board: BoardState, player_id: str) -> list[Move]:
        """One placement per empty cell, while the player still has workers to place."""
        if len(board.workers_of(player_id)) >= self.workers_per_player:
            return []
        return [Move.place(pos) for pos in board.empty_positions()]

    def _generate_worker_moves(self, board: BoardState, player_id: str) -> list[Move]:
        moves = []
        for worker in board.workers_of(player_id):
            origin = board.position_of(worker)
            for target in sorted(board.adjacent(origin)):
                if self._can_step(board, origin, target):
                    moves.append(Move.move(worker.worker_id, origin, target))
        return moves

    def _generate_build_moves(self, board: BoardState, player_id: str) -> list[Move]:
        moves = []
        for worker in board.workers_of(player_id):
            origin = board.position_of(worker)
            for target in sorted(board.adjacent(origin)):
                if self._can_build(board, target):
                    moves.append(Move.build(worker.worker_id, target))
        return moves

    @staticmethod
    def _can_step(board: BoardState, origin: Position, target: Position) -> bool:
        """Climb at most one level; descend any distance; never onto a dome or a worker."""
        if board.is_occupied(target):
            return False
        height = board.height_at(target)
        if height >= MAX_HEIGHT:
            return False
        return height <= board.height_at(origin) + 1

    @staticmethod
    def _can_build(board: BoardState, target: Position) -> bool:
        return not board.is_occupied(target) and board.height_at(target) < MAX_HEIGHT

    def explain_illegal(
        self, board: BoardState, phase: GamePhase, player_id: str, move: Move
    ) -> str:
        """
        Name the first rule a move breaks.

        Only meaningful for a move whose kind matches phase and which is not
        in generate(); returns REASON_NOT_LEGAL when no specific rule applies.
        """
        target = move.target
        if target is None or not board.in_bounds(target):
            return REASON_OUT_OF_BOUNDS

        if move.kind == MoveKind.PLACE:
            if len(board.workers_of(player_id)) >= self.workers_per_player:
                return REASON_NO_WORKERS_LEFT
            if board.is_occupied(target):
                return REASON_OCCUPIED
            return REASON_NOT_LEGAL

        worker = WorkerRef(player_id, move.worker_id)
        if worker not in board.workers:
            return REASON_UNKNOWN_WORKER
        origin = board.position_of(worker)

        if move.kind == MoveKind.MOVE and move.from_pos != origin:
            return REASON_WORKER_MISMATCH
        if target not in board.adjacent(origin):
            return REASON_NOT_ADJACENT
        if board.is_occupied(target):
            return REASON_OCCUPIED
        if board.height_at(target) >= MAX_HEIGHT:
            return REASON_DOMED
        if move.kind == MoveKind.MOVE and board.height_at(target) > board.height_at(origin) + 1:
            return REASON_TOO_HIGH
        return REASON_NOT_LEGAL


def legal_moves(board: BoardState, phase: GamePhase, player_id: str) -> list[Move]:
    """
    Convenience function to get legal moves.

    Creates a MoveGenerator and generates moves.
    """
    generator = MoveGenerator()
    return generator.generate(board, phase, player_id)


def is_legal(board: BoardState, phase: GamePhase, player_id: str, move: Move) -> bool:
    """Check if a specific move is legal."""
    return move in legal_moves(board, phase, player_id)
