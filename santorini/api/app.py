"""
FastAPI Application - HTTP/WebSocket adapter over APIService.

Endpoints:
    POST   /api/v1/sessions                              Create a match
    GET    /api/v1/sessions                              List active matches
    GET    /api/v1/sessions/{id}                         Snapshot (?player_id= adds legal moves)
    DELETE /api/v1/sessions/{id}                         End a match
    POST   /api/v1/sessions/{id}/players                 Join
    DELETE /api/v1/sessions/{id}/players/{pid}           Leave (before start only)
    POST   /api/v1/sessions/{id}/players/{pid}/ready     Set ready flag
    POST   /api/v1/sessions/{id}/start                   Start
    GET    /api/v1/sessions/{id}/moves?player_id=        Legal moves
    POST   /api/v1/sessions/{id}/moves                   Submit a move
    WS     /api/v1/sessions/{id}/ws                      Snapshot push

The adapter owns no rules. Every accepted mutation is pushed to the
session's WebSocket subscribers as a state_update message.
"""

from typing import Annotated, Optional
import json
import logging
import os

from fastapi import FastAPI, Query, WebSocket, WebSocketDisconnect
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .. import __version__
from ..engine_core.errors import EngineError
from ..engine_core.game import Snapshot
from ..engine_core.move import Move
from .service import APIService
from .schemas import (
    CreateSessionRequest,
    EndSessionResponse,
    ErrorCode,
    ErrorResponse,
    HealthResponse,
    JoinRequest,
    MovesResponse,
    ReadyRequest,
    SessionListResponse,
    SnapshotResponse,
    SubmitMoveRequest,
)

# Environment configuration
SANTORINI_ENV = os.getenv("SANTORINI_ENV", "development")
SANTORINI_SESSION_TTL = int(os.getenv("SANTORINI_SESSION_TTL", "3600"))
ALLOWED_ORIGINS = os.getenv("ALLOWED_ORIGINS", "*").split(",")

logger = logging.getLogger(__name__)


def snapshot_response(
    snapshot: Snapshot,
    moves: Optional[list[Move]] = None,
    changes: Optional[list[str]] = None,
) -> SnapshotResponse:
    """Build the wire model for a snapshot."""
    data = snapshot.to_dict()
    data["available_moves"] = [m.to_dict() for m in moves or []]
    data["changes"] = changes or []
    return SnapshotResponse.model_validate(data)


def create_app(service: Optional[APIService] = None) -> FastAPI:
    """
    Create the FastAPI application.

    Args:
        service: Optional APIService instance (creates new if not provided)

    Returns:
        FastAPI application instance
    """
    app = FastAPI(
        title="Santorini Engine API",
        description="Rules engine for a 2-4 player tower-building game on a 5x5 grid.",
        version=__version__,
        docs_url=None if SANTORINI_ENV == "production" else "/api/docs",
        redoc_url=None if SANTORINI_ENV == "production" else "/api/redoc",
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=ALLOWED_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    api_service = service or APIService()
    app.state.service = api_service

    # WebSocket connections per session
    ws_connections: dict[str, list[WebSocket]] = {}

    # =========================================================================
    # Error helpers
    # =========================================================================

    def make_error_response(
        error_code: ErrorCode,
        message: str,
        status_code: int = 400,
        details: Optional[dict] = None,
    ) -> JSONResponse:
        """Create a standardized error response."""
        return JSONResponse(
            status_code=status_code,
            content=ErrorResponse(
                error=message,
                error_code=error_code,
                details=details,
            ).model_dump(mode="json"),
        )

    @app.exception_handler(EngineError)
    async def engine_error_handler(request, exc: EngineError) -> JSONResponse:
        return make_error_response(
            ErrorCode(exc.code),
            exc.message,
            status_code=exc.http_status,
            details=exc.context,
        )

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request, exc: RequestValidationError) -> JSONResponse:
        return make_error_response(
            ErrorCode.VALIDATION_ERROR,
            "Request validation failed",
            status_code=422,
            details={"errors": jsonable_encoder(exc.errors())},
        )

    async def broadcast_to_session(session_id: str, message: dict):
        """Broadcast a message to all WebSocket connections for a session."""
        if session_id not in ws_connections:
            return
        dead_connections = []
        for ws in ws_connections[session_id]:
            try:
                await ws.send_json(message)
            except (RuntimeError, WebSocketDisconnect):
                dead_connections.append(ws)
        for ws in dead_connections:
            ws_connections[session_id].remove(ws)

    async def publish(snapshot: Snapshot):
        await broadcast_to_session(snapshot.session_id, {
            "type": "state_update",
            "payload": snapshot_response(snapshot).model_dump(mode="json", by_alias=True),
        })

    # =========================================================================
    # Session Endpoints
    # =========================================================================

    @app.post(
        "/api/v1/sessions",
        response_model=SnapshotResponse,
        status_code=201,
        responses={422: {"model": ErrorResponse}},
        tags=["Sessions"],
        summary="Create a new match",
    )
    async def create_session(body: CreateSessionRequest) -> SnapshotResponse:
        api_service.session_manager.cleanup_stale_sessions(SANTORINI_SESSION_TTL)
        snapshot = api_service.create_session(body.player_count)
        return snapshot_response(snapshot)

    @app.get(
        "/api/v1/sessions",
        response_model=SessionListResponse,
        tags=["Sessions"],
        summary="List active matches",
    )
    async def list_sessions() -> SessionListResponse:
        sessions = api_service.list_sessions()
        return SessionListResponse(sessions=sessions, count=len(sessions))

    @app.get(
        "/api/v1/sessions/{session_id}",
        response_model=SnapshotResponse,
        responses={404: {"model": ErrorResponse}},
        tags=["Sessions"],
        summary="Get the current snapshot",
    )
    async def get_session(
        session_id: str,
        player_id: Annotated[Optional[str], Query(description="Include this player's legal moves")] = None,
    ) -> SnapshotResponse:
        view = api_service.get_state(session_id, player_id)
        return snapshot_response(view.snapshot, moves=view.legal_moves)

    @app.delete(
        "/api/v1/sessions/{session_id}",
        response_model=EndSessionResponse,
        tags=["Sessions"],
        summary="End a match",
    )
    async def end_session(session_id: str) -> EndSessionResponse:
        success = api_service.end_session(session_id)
        return EndSessionResponse(success=success, session_id=session_id)

    # =========================================================================
    # Lobby Endpoints
    # =========================================================================

    @app.post(
        "/api/v1/sessions/{session_id}/players",
        response_model=SnapshotResponse,
        responses={404: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
        tags=["Lobby"],
        summary="Join a match",
    )
    async def add_player(session_id: str, body: JoinRequest) -> SnapshotResponse:
        snapshot = api_service.add_player(session_id, body.player_id)
        await publish(snapshot)
        return snapshot_response(snapshot)

    @app.delete(
        "/api/v1/sessions/{session_id}/players/{player_id}",
        response_model=SnapshotResponse,
        responses={404: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
        tags=["Lobby"],
        summary="Leave a match before it starts",
    )
    async def remove_player(session_id: str, player_id: str) -> SnapshotResponse:
        snapshot = api_service.remove_player(session_id, player_id)
        await publish(snapshot)
        return snapshot_response(snapshot)

    @app.post(
        "/api/v1/sessions/{session_id}/players/{player_id}/ready",
        response_model=SnapshotResponse,
        responses={404: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
        tags=["Lobby"],
        summary="Set a player's ready flag (auto-starts when all are ready)",
    )
    async def set_ready(session_id: str, player_id: str, body: ReadyRequest) -> SnapshotResponse:
        snapshot = api_service.set_ready(session_id, player_id, body.ready)
        await publish(snapshot)
        return snapshot_response(snapshot)

    @app.post(
        "/api/v1/sessions/{session_id}/start",
        response_model=SnapshotResponse,
        responses={404: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
        tags=["Lobby"],
        summary="Start a full match",
    )
    async def start(session_id: str) -> SnapshotResponse:
        snapshot = api_service.start(session_id)
        await publish(snapshot)
        return snapshot_response(snapshot)

    # =========================================================================
    # Game Loop Endpoints
    # =========================================================================

    @app.get(
        "/api/v1/sessions/{session_id}/moves",
        response_model=MovesResponse,
        responses={404: {"model": ErrorResponse}},
        tags=["Game Loop"],
        summary="Legal moves for a player (empty unless it is their turn)",
    )
    async def get_moves(
        session_id: str,
        player_id: Annotated[str, Query(description="Player asking")],
    ) -> MovesResponse:
        moves = api_service.legal_moves(session_id, player_id)
        return MovesResponse.model_validate({
            "session_id": session_id,
            "player_id": player_id,
            "moves": [m.to_dict() for m in moves],
        })

    @app.post(
        "/api/v1/sessions/{session_id}/moves",
        response_model=SnapshotResponse,
        responses={
            403: {"model": ErrorResponse, "description": "Not your turn"},
            404: {"model": ErrorResponse, "description": "Session not found"},
            409: {"model": ErrorResponse, "description": "Wrong phase or finished"},
            422: {"model": ErrorResponse, "description": "Illegal move"},
        },
        tags=["Game Loop"],
        summary="Submit a move",
    )
    async def submit_move(session_id: str, body: SubmitMoveRequest):
        """
        Submit a move for the current player.

        **Request Body:**
        ```json
        {"player_id": "alice", "move": {"kind": "place", "position": {"x": 2, "y": 2}}}
        ```
        """
        move = body.move.model_dump(by_alias=True)
        result = api_service.submit_move(session_id, body.player_id, move)
        if not result.success:
            details = dict(result.details)
            if result.reason:
                details["reason"] = result.reason
            return make_error_response(
                ErrorCode(result.error_code),
                result.error,
                status_code=result.http_status,
                details=details,
            )

        await publish(result.snapshot)
        return snapshot_response(result.snapshot, changes=result.changes)

    # =========================================================================
    # WebSocket Endpoint
    # =========================================================================

    @app.websocket("/api/v1/sessions/{session_id}/ws")
    async def websocket_endpoint(websocket: WebSocket, session_id: str):
        """
        WebSocket for real-time updates.

        Messages from server:
        - state_update: Snapshot changed
        - error: Session unknown or bad message

        Messages from client:
        - ping: Keep-alive
        """
        await websocket.accept()

        session = api_service.session_manager.get_session(session_id)
        if not session:
            await websocket.send_json({
                "type": "error",
                "payload": {"message": f"Session {session_id} not found"},
            })
            await websocket.close()
            return

        ws_connections.setdefault(session_id, []).append(websocket)
        try:
            view = api_service.get_state(session_id)
            await websocket.send_json({
                "type": "state_update",
                "payload": snapshot_response(view.snapshot).model_dump(mode="json", by_alias=True),
            })

            while True:
                data = await websocket.receive_text()
                try:
                    message = json.loads(data)
                except json.JSONDecodeError:
                    await websocket.send_json({
                        "type": "error",
                        "payload": {"message": "Invalid JSON"},
                    })
                    continue
                if not isinstance(message, dict):
                    await websocket.send_json({
                        "type": "error",
                        "payload": {"message": "Expected a JSON object"},
                    })
                    continue
                if message.get("type") == "ping":
                    await websocket.send_json({"type": "pong"})
        except WebSocketDisconnect:
            logger.debug("WebSocket for session %s disconnected", session_id)
        finally:
            if websocket in ws_connections.get(session_id, []):
                ws_connections[session_id].remove(websocket)

    # =========================================================================
    # Health Check
    # =========================================================================

    @app.get(
        "/health",
        response_model=HealthResponse,
        tags=["System"],
        summary="Health check",
    )
    async def health_check() -> HealthResponse:
        """Health check endpoint for load balancers."""
        return HealthResponse(
            status="healthy",
            service="santorini-engine",
            version=__version__,
        )

    return app


# For running directly: uvicorn santorini.api.app:app
app = create_app()
