"""
API Service - Boundary between transport layers and the engine.

The service:
1. Translates inbound calls (create, join, start, submit) to engine calls
2. Serializes access per session through the SessionManager
3. Returns Snapshot values, never engine internals

This layer is framework-agnostic (used by the FastAPI app and the CLI).
Lobby operations raise EngineError; submit_move returns a MoveResult so a
transport can relay rejections without exception handling.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any
import logging

from ..engine_core.errors import EngineError, IllegalMoveError
from ..engine_core.game import Snapshot
from ..engine_core.move import Move
from ..session import SessionManager

logger = logging.getLogger(__name__)


@dataclass
class MoveResult:
    """
    Result of submitting a move.

    Contains:
    - Whether the move was accepted
    - The snapshot after the move (if accepted)
    - Error code and message (if rejected)
    """
    success: bool
    snapshot: Snapshot | None = None
    error: str | None = None
    error_code: str | None = None
    reason: str | None = None
    http_status: int = 200
    details: dict[str, Any] = field(default_factory=dict)

    # Human-readable description of what happened
    changes: list[str] = field(default_factory=list)

    @classmethod
    def failure(cls, error: EngineError) -> MoveResult:
        """Create a failure result from an engine error."""
        return cls(
            success=False,
            error=error.message,
            error_code=error.code,
            reason=getattr(error, "reason", None),
            http_status=error.http_status,
            details=error.context,
        )

    @classmethod
    def success_with_snapshot(cls, snapshot: Snapshot, changes: list[str] | None = None) -> MoveResult:
        """Create a success result with the new snapshot."""
        return cls(success=True, snapshot=snapshot, changes=changes or [])


@dataclass
class StateView:
    """A snapshot plus the legal moves of the viewing player (empty unless it is their turn)."""
    snapshot: Snapshot
    viewer_id: str | None = None
    legal_moves: list[Move] = field(default_factory=list)


@dataclass
class APIService:
    """
    Inbound contract of the engine.

    Usage:
        service = APIService()
        snapshot = service.create_session(player_count=2)
        service.add_player(snapshot.session_id, "alice")
        service.add_player(snapshot.session_id, "bob")
        service.start(snapshot.session_id)
        result = service.submit_move(snapshot.session_id, "alice", {"kind": "place", ...})
    """
    session_manager: SessionManager = field(default_factory=SessionManager)

    def create_session(self, player_count: int) -> Snapshot:
        session = self.session_manager.create_session(player_count)
        with session.lock:
            return session.game.snapshot()

    def add_player(self, session_id: str, player_id: str) -> Snapshot:
        with self.session_manager.locked(session_id) as game:
            game.add_player(player_id)
            return game.snapshot()

    def remove_player(self, session_id: str, player_id: str) -> Snapshot:
        with self.session_manager.locked(session_id) as game:
            game.player_left(player_id)
            return game.snapshot()

    def set_ready(self, session_id: str, player_id: str, ready: bool = True) -> Snapshot:
        with self.session_manager.locked(session_id) as game:
            game.set_player_ready(player_id, ready)
            return game.snapshot()

    def start(self, session_id: str) -> Snapshot:
        with self.session_manager.locked(session_id) as game:
            return game.start()

    def legal_moves(self, session_id: str, player_id: str) -> list[Move]:
        with self.session_manager.locked(session_id) as game:
            return game.legal_moves(player_id)

    def get_state(self, session_id: str, player_id: str | None = None) -> StateView:
        with self.session_manager.locked(session_id) as game:
            moves = game.legal_moves(player_id) if player_id else []
            return StateView(snapshot=game.snapshot(), viewer_id=player_id, legal_moves=moves)

    def submit_move(self, session_id: str, player_id: str, move: Move | dict[str, Any]) -> MoveResult:
        """
        Validate and apply a move.

        Accepts a Move or its wire dict. Never raises EngineError.
        """
        try:
            if not isinstance(move, Move):
                move = Move.from_dict(move)
            with self.session_manager.locked(session_id) as game:
                already_out = {p.player_id for p in game.players if p.eliminated}
                snapshot = game.apply_move(player_id, move)
        except IllegalMoveError as e:
            logger.warning("Session %s: rejected %s from %s (%s)", session_id, move, player_id, e.reason)
            return MoveResult.failure(e)
        except EngineError as e:
            logger.warning("Session %s: rejected move from %s: %s", session_id, player_id, e)
            return MoveResult.failure(e)

        changes = [f"{player_id}: {move}"]
        changes.extend(f"{pid} eliminated" for pid in snapshot.eliminated if pid not in already_out)
        if snapshot.is_finished:
            changes.append(f"{snapshot.winner} wins ({snapshot.win_reason})")
        return MoveResult.success_with_snapshot(snapshot, changes=changes)

    def history(self, session_id: str) -> list[tuple[str, Move]]:
        with self.session_manager.locked(session_id) as game:
            return list(game.history)

    def end_session(self, session_id: str) -> bool:
        """End a session and release it."""
        return self.session_manager.end_session(session_id)

    def list_sessions(self) -> list[str]:
        """List active session IDs."""
        return self.session_manager.list_active_sessions()
