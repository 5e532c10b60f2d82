"""
API Module - Transport interface.

Exposes the engine via REST and WebSocket. A client:
1. Creates a match
2. Joins and marks itself ready (or starts a full match)
3. Fetches its legal moves
4. Submits moves and receives snapshots

All state is session-scoped and in memory. No persistent accounts.
"""

from .schemas import (
    # Requests
    CreateSessionRequest,
    JoinRequest,
    ReadyRequest,
    SubmitMoveRequest,
    # Responses
    SnapshotResponse,
    MovesResponse,
    SessionListResponse,
    EndSessionResponse,
    HealthResponse,
    ErrorResponse,
    ErrorCode,
)
from .service import APIService, MoveResult, StateView
from .app import create_app

__all__ = [
    # Requests
    "CreateSessionRequest",
    "JoinRequest",
    "ReadyRequest",
    "SubmitMoveRequest",
    # Responses
    "SnapshotResponse",
    "MovesResponse",
    "SessionListResponse",
    "EndSessionResponse",
    "HealthResponse",
    "ErrorResponse",
    "ErrorCode",
    # Service
    "APIService",
    "MoveResult",
    "StateView",
    "create_app",
]
