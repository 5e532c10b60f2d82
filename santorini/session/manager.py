"""
Session Manager - Creates, finds, and retires game sessions.

The registry is owned by the hosting process and passed by reference; the
engine keeps no global list of matches.

CONCURRENCY:
- Every operation on a match runs while holding that match's lock, so a
  move is validated against exactly the state it is applied to
- Reads take the same lock and therefore never observe a half-applied move
- Different matches have different locks and never block each other

No persistence - sessions are in-memory only.
"""

from __future__ import annotations
from contextlib import contextmanager
from dataclasses import dataclass, field
from enum import Enum
from typing import Iterator
import logging
import threading
import time
import uuid

from ..engine_core.game import GameSession
from ..engine_core.errors import GameNotFoundError
from ..engine_core.move import GamePhase

logger = logging.getLogger(__name__)


class SessionState(Enum):
    """Registry-level state of a session."""
    WAITING = "waiting"  # Roster open
    ACTIVE = "active"  # Setup or play in progress
    GAME_OVER = "game_over"  # Match finished
    ABANDONED = "abandoned"  # Removed before finishing


@dataclass
class Session:
    """
    A registered match plus its serialization lock.

    The GameSession inside must only be touched while holding lock.
    """
    session_id: str
    game: GameSession
    created_at: float
    lock: threading.RLock = field(default_factory=threading.RLock)

    @property
    def state(self) -> SessionState:
        phase = self.game.phase
        if phase == GamePhase.NOT_STARTED:
            return SessionState.WAITING
        if phase == GamePhase.FINISHED:
            return SessionState.GAME_OVER
        return SessionState.ACTIVE

    def is_active(self) -> bool:
        return self.state != SessionState.GAME_OVER


class SessionManager:
    """
    Registry of matches addressed by opaque id.

    Responsibilities:
    - Create sessions
    - Look them up and hand out serialized access
    - Remove finished or abandoned sessions
    """

    def __init__(self):
        self._sessions: dict[str, Session] = {}
        self._registry_lock = threading.Lock()

    def create_session(self, player_count: int, session_id: str | None = None) -> Session:
        """
        Create a new match waiting for player_count players.

        Raises InvalidPlayerCountError for counts outside 2..4.
        """
        session_id = session_id or str(uuid.uuid4())
        game = GameSession(session_id, player_count)
        session = Session(session_id=session_id, game=game, created_at=time.time())
        with self._registry_lock:
            self._sessions[session_id] = session
        logger.info("Created session %s for %d players", session_id, player_count)
        return session

    def get_session(self, session_id: str) -> Session | None:
        """Get a session by ID."""
        with self._registry_lock:
            return self._sessions.get(session_id)

    def require_session(self, session_id: str) -> Session:
        session = self.get_session(session_id)
        if not session:
            raise GameNotFoundError(session_id)
        return session

    @contextmanager
    def locked(self, session_id: str) -> Iterator[GameSession]:
        """
        Serialized access to one match.

        with manager.locked(session_id) as game:
            game.apply_move(...)
        """
        session = self.require_session(session_id)
        with session.lock:
            yield session.game

    def end_session(self, session_id: str) -> bool:
        """
        Remove a session from the registry.

        Returns False if it did not exist.
        """
        with self._registry_lock:
            session = self._sessions.pop(session_id, None)
        if not session:
            return False
        reason = "completed" if session.state == SessionState.GAME_OVER else "abandoned"
        logger.info("Ended session %s (%s)", session_id, reason)
        return True

    def list_active_sessions(self) -> list[str]:
        """List IDs of sessions that have not finished."""
        with self._registry_lock:
            sessions = list(self._sessions.items())
        return [sid for sid, session in sessions if session.is_active()]

    def list_sessions(self) -> list[str]:
        with self._registry_lock:
            return list(self._sessions)

    def cleanup_stale_sessions(self, max_age_seconds: int = 3600) -> list[str]:
        """
        Remove sessions that finished more than max_age_seconds ago.

        Called periodically to free memory. Returns removed IDs.
        """
        current_time = time.time()
        with self._registry_lock:
            to_remove = [
                sid for sid, session in self._sessions.items()
                if session.game.finished_at is not None
                and current_time - session.game.finished_at > max_age_seconds
            ]
        for session_id in to_remove:
            self.end_session(session_id)
        return to_remove
