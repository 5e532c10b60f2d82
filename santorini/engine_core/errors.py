"""
Engine Errors - Typed failures raised by the rules engine.

Every failure is a rejection of one operation. The session stays usable
afterwards (except operations on a finished session, which are rejected
permanently). Nothing here is retried by the engine.

Usage:
    from santorini.engine_core.errors import EngineError, IllegalMoveError

    try:
        session.apply_move(player_id, move)
    except IllegalMoveError as e:
        print(e.reason)
    except EngineError as e:
        print(e.to_dict())
"""

from __future__ import annotations
from typing import Any

__all__ = [
    "EngineError",
    # Lobby
    "LobbyError",
    "GameFullError",
    "DuplicatePlayerError",
    "GameAlreadyStartedError",
    "NotReadyError",
    "PlayerNotFoundError",
    "InvalidPlayerCountError",
    # Registry
    "GameNotFoundError",
    # Turn
    "TurnError",
    "NotCurrentPlayerError",
    "PhaseMismatchError",
    "GameFinishedError",
    # Rules
    "RulesViolationError",
    "IllegalMoveError",
    "MalformedMoveError",
    # Board
    "BoardError",
    "OccupiedError",
    "WorkerAlreadyPlacedError",
    "DomedError",
    "NotFoundError",
    "OutOfBoundsError",
]


class EngineError(Exception):
    """Base exception for all engine errors.

    Attributes:
        code: Machine-readable error code
        message: Human-readable description
        context: Extra detail for callers and logs
        http_status: Status an HTTP adapter should answer with
    """
    code: str = "ENGINE_ERROR"
    http_status: int = 400

    def __init__(self, message: str, context: dict[str, Any] | None = None):
        super().__init__(message)
        self.message = message
        self.context = context or {}

    def __str__(self) -> str:
        if self.context:
            ctx = ", ".join(f"{k}={v}" for k, v in self.context.items())
            return f"[{self.code}] {self.message} ({ctx})"
        return f"[{self.code}] {self.message}"

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "code": self.code,
            "message": self.message,
            "context": self.context,
        }


# =============================================================================
# Lobby Errors
# =============================================================================


class LobbyError(EngineError):
    """Roster and lifecycle errors raised before play begins."""
    code: str = "LOBBY_ERROR"
    http_status: int = 409


class GameFullError(LobbyError):
    code: str = "GAME_FULL"

    def __init__(self, session_id: str, player_count: int):
        super().__init__(
            f"Session {session_id} is full ({player_count}/{player_count})",
            context={"session_id": session_id, "player_count": player_count},
        )


class DuplicatePlayerError(LobbyError):
    code: str = "DUPLICATE_PLAYER"

    def __init__(self, session_id: str, player_id: str):
        super().__init__(
            f"Player {player_id} already joined session {session_id}",
            context={"session_id": session_id, "player_id": player_id},
        )


class GameAlreadyStartedError(LobbyError):
    code: str = "GAME_ALREADY_STARTED"

    def __init__(self, session_id: str, phase: str):
        super().__init__(
            f"Session {session_id} has already started",
            context={"session_id": session_id, "phase": phase},
        )


class NotReadyError(LobbyError):
    code: str = "NOT_READY"

    def __init__(self, session_id: str, joined: int, required: int):
        super().__init__(
            f"Cannot start session {session_id}: need {required} players, have {joined}",
            context={"session_id": session_id, "joined": joined, "required": required},
        )


class PlayerNotFoundError(LobbyError):
    code: str = "PLAYER_NOT_FOUND"
    http_status: int = 404

    def __init__(self, session_id: str, player_id: str):
        super().__init__(
            f"Player {player_id} is not in session {session_id}",
            context={"session_id": session_id, "player_id": player_id},
        )


class InvalidPlayerCountError(LobbyError):
    code: str = "INVALID_PLAYER_COUNT"
    http_status: int = 422

    def __init__(self, player_count: int, minimum: int, maximum: int):
        super().__init__(
            f"Player count must be between {minimum} and {maximum}, got {player_count}",
            context={"player_count": player_count},
        )


class GameNotFoundError(EngineError):
    code: str = "GAME_NOT_FOUND"
    http_status: int = 404

    def __init__(self, session_id: str):
        super().__init__(
            f"Session {session_id} not found",
            context={"session_id": session_id},
        )


# =============================================================================
# Turn Errors
# =============================================================================


class TurnError(EngineError):
    """A move arrived at the wrong time or from the wrong player."""
    code: str = "TURN_ERROR"
    http_status: int = 409


class NotCurrentPlayerError(TurnError):
    code: str = "NOT_CURRENT_PLAYER"
    http_status: int = 403

    def __init__(self, player_id: str, current_player_id: str | None):
        super().__init__(
            f"It is not player {player_id}'s turn",
            context={"player_id": player_id, "current_player_id": current_player_id},
        )


class PhaseMismatchError(TurnError):
    code: str = "PHASE_MISMATCH"

    def __init__(self, move_kind: str, phase: str):
        super().__init__(
            f"A '{move_kind}' move is not accepted during phase {phase}",
            context={"move_kind": move_kind, "phase": phase},
        )


class GameFinishedError(TurnError):
    code: str = "GAME_FINISHED"

    def __init__(self, session_id: str, winner: str | None = None):
        super().__init__(
            f"Session {session_id} is finished",
            context={"session_id": session_id, "winner": winner},
        )


# =============================================================================
# Rules Errors
# =============================================================================


class RulesViolationError(EngineError):
    """A move that the game rules do not allow."""
    code: str = "RULES_VIOLATION"
    http_status: int = 422


class IllegalMoveError(RulesViolationError):
    """Move is not in the legal set.

    Attributes:
        reason: Why the move was rejected (occupied, domed, too_high, ...)
    """
    code: str = "ILLEGAL_MOVE"

    def __init__(self, reason: str, move: Any = None):
        super().__init__(
            f"Illegal move: {reason}",
            context={"reason": reason, "move": move},
        )
        self.reason = reason


class MalformedMoveError(RulesViolationError):
    """Move payload does not match any accepted shape."""
    code: str = "MALFORMED_MOVE"

    def __init__(self, detail: str):
        super().__init__(f"Malformed move: {detail}")


# =============================================================================
# Board Errors
# =============================================================================


class BoardError(EngineError):
    """Board occupancy or building invariant would be broken."""
    code: str = "BOARD_ERROR"
    http_status: int = 409


class OccupiedError(BoardError):
    code: str = "OCCUPIED"

    def __init__(self, position: Any):
        super().__init__(
            f"Cell {position} is occupied",
            context={"position": position},
        )


class WorkerAlreadyPlacedError(BoardError):
    code: str = "WORKER_ALREADY_PLACED"

    def __init__(self, worker: Any, position: Any):
        super().__init__(
            f"Worker {worker} is already on the board at {position}",
            context={"worker": worker, "position": position},
        )


class DomedError(BoardError):
    code: str = "DOMED"

    def __init__(self, position: Any):
        super().__init__(
            f"Cell {position} is domed",
            context={"position": position},
        )


class NotFoundError(BoardError):
    code: str = "WORKER_NOT_FOUND"
    http_status: int = 404

    def __init__(self, worker: Any):
        super().__init__(
            f"Worker {worker} is not on the board",
            context={"worker": worker},
        )


class OutOfBoundsError(BoardError):
    code: str = "OUT_OF_BOUNDS"
    http_status: int = 422

    def __init__(self, position: Any):
        super().__init__(
            f"Position {position} is outside the board",
            context={"position": position},
        )
