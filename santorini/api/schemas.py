"""
Pydantic Schemas for API - Request/response models for OpenAPI.

These models define the exact contract between transport clients and the
engine. The Snapshot model mirrors Snapshot.to_dict() field for field, so a
snapshot can be broadcast verbatim.

Moves use the closed variant shape:
    {"kind": "place", "position": {"x": 0, "y": 0}}
    {"kind": "move", "worker_id": 1, "from": {...}, "to": {...}}
    {"kind": "build", "worker_id": 1, "at": {...}}
"""

from enum import Enum
from typing import Annotated, Any, Literal, Optional, Union
from pydantic import BaseModel, ConfigDict, Field, StrictInt


# =============================================================================
# Enums
# =============================================================================

class PhaseName(str, Enum):
    """Session phases."""
    NOT_STARTED = "not_started"
    SETUP = "setup"
    MOVE = "move"
    BUILD = "build"
    FINISHED = "finished"


class ErrorCode(str, Enum):
    """Structured error codes (one per engine error class)."""
    ENGINE_ERROR = "ENGINE_ERROR"
    LOBBY_ERROR = "LOBBY_ERROR"
    GAME_FULL = "GAME_FULL"
    DUPLICATE_PLAYER = "DUPLICATE_PLAYER"
    GAME_ALREADY_STARTED = "GAME_ALREADY_STARTED"
    NOT_READY = "NOT_READY"
    PLAYER_NOT_FOUND = "PLAYER_NOT_FOUND"
    INVALID_PLAYER_COUNT = "INVALID_PLAYER_COUNT"
    GAME_NOT_FOUND = "GAME_NOT_FOUND"
    TURN_ERROR = "TURN_ERROR"
    NOT_CURRENT_PLAYER = "NOT_CURRENT_PLAYER"
    PHASE_MISMATCH = "PHASE_MISMATCH"
    GAME_FINISHED = "GAME_FINISHED"
    RULES_VIOLATION = "RULES_VIOLATION"
    ILLEGAL_MOVE = "ILLEGAL_MOVE"
    MALFORMED_MOVE = "MALFORMED_MOVE"
    BOARD_ERROR = "BOARD_ERROR"
    OCCUPIED = "OCCUPIED"
    WORKER_ALREADY_PLACED = "WORKER_ALREADY_PLACED"
    DOMED = "DOMED"
    WORKER_NOT_FOUND = "WORKER_NOT_FOUND"
    OUT_OF_BOUNDS = "OUT_OF_BOUNDS"
    VALIDATION_ERROR = "VALIDATION_ERROR"


# =============================================================================
# Moves
# =============================================================================

class PositionModel(BaseModel):
    """A board coordinate."""
    model_config = ConfigDict(extra="forbid")

    x: StrictInt
    y: StrictInt


class PlaceMoveModel(BaseModel):
    model_config = ConfigDict(extra="forbid")

    kind: Literal["place"] = "place"
    position: PositionModel


class WorkerMoveModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="forbid")

    kind: Literal["move"] = "move"
    worker_id: StrictInt
    from_: PositionModel = Field(alias="from")
    to: PositionModel


class BuildMoveModel(BaseModel):
    model_config = ConfigDict(extra="forbid")

    kind: Literal["build"] = "build"
    worker_id: StrictInt
    at: PositionModel


MoveModel = Annotated[
    Union[PlaceMoveModel, WorkerMoveModel, BuildMoveModel],
    Field(discriminator="kind"),
]


# =============================================================================
# Snapshot
# =============================================================================

class OccupantModel(BaseModel):
    player_id: str
    worker_id: StrictInt


class CellModel(BaseModel):
    height: int = Field(ge=0, le=4)
    domed: bool = False
    occupant: Optional[OccupantModel] = None


class WorkerModel(BaseModel):
    worker_id: StrictInt
    position: PositionModel


class PlayerModel(BaseModel):
    player_id: str
    join_index: int
    ready: bool = False
    eliminated: bool = False
    workers: list[WorkerModel] = Field(default_factory=list)


class SnapshotResponse(BaseModel):
    """Complete session state, as handed to every client."""
    session_id: str
    phase: PhaseName
    current_player_id: Optional[str] = None
    turn_number: int = 0
    board: list[list[CellModel]] = Field(description="Cells indexed [x][y]")
    players: list[PlayerModel] = Field(default_factory=list)
    eliminated: list[str] = Field(default_factory=list)
    version: int = 0
    winner: Optional[str] = None
    win_reason: Optional[str] = Field(
        None, description="reached_level_3, opponent_immobilized, last_player_standing"
    )
    last_move: Optional[MoveModel] = None
    available_moves: list[MoveModel] = Field(
        default_factory=list, description="Legal moves of the requesting player, if it is their turn"
    )
    changes: list[str] = Field(default_factory=list)
    api_version: str = "v1"


# =============================================================================
# Request Models
# =============================================================================

class CreateSessionRequest(BaseModel):
    """Request to open a new match."""
    player_count: int = Field(2, ge=2, le=4, description="Number of seats (2-4)")


class JoinRequest(BaseModel):
    """Request to join a match."""
    player_id: str = Field(..., min_length=1)


class ReadyRequest(BaseModel):
    ready: bool = True


class SubmitMoveRequest(BaseModel):
    """Request to play a move."""
    player_id: str = Field(..., min_length=1)
    move: MoveModel


# =============================================================================
# Response Models
# =============================================================================

class ErrorResponse(BaseModel):
    """Standard error response."""
    error: str = Field(..., description="Human-readable error message")
    error_code: ErrorCode = Field(..., description="Machine-readable error code")
    details: Optional[dict[str, Any]] = Field(None, description="Additional error context")
    api_version: str = Field("v1", description="API version")


class MovesResponse(BaseModel):
    session_id: str
    player_id: str
    moves: list[MoveModel] = Field(default_factory=list)


class SessionListResponse(BaseModel):
    """Response listing active sessions."""
    sessions: list[str]
    count: int


class EndSessionResponse(BaseModel):
    """Response after ending a session."""
    success: bool
    session_id: str


class HealthResponse(BaseModel):
    """Health check response."""
    status: str
    service: str
    version: str
