"""
Game Session - Composition root for one match.

Owns one BoardState and one TurnController. Every mutation of a match goes
through this class:

    session = GameSession("g1", player_count=2)
    session.add_player("alice")
    session.add_player("bob")
    session.start()
    snapshot = session.apply_move("alice", Move.place(Position(0, 0)))

apply_move validates fully before touching the board, so a rejected move
leaves the session exactly as it was. GameSession is not thread-safe on its
own; the session manager serializes access per match.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any
import logging
import time

from .board import BoardState, Position, WorkerRef, MIN_PLAYERS, MAX_PLAYERS
from .errors import (
    DuplicatePlayerError,
    GameAlreadyStartedError,
    GameFinishedError,
    GameFullError,
    IllegalMoveError,
    InvalidPlayerCountError,
    OutOfBoundsError,
    PlayerNotFoundError,
)
from .move import GamePhase, Move, MoveKind
from .move_generator import MoveGenerator
from .turn import TurnController
from .win import GameResult, WinEvaluator

logger = logging.getLogger(__name__)


@dataclass
class Player:
    """A seat in the match. ready is written by the lobby, read by auto-start."""
    player_id: str
    join_index: int
    ready: bool = False
    eliminated: bool = False


# =============================================================================
# Snapshot
# =============================================================================


@dataclass(frozen=True)
class CellView:
    height: int
    domed: bool
    occupant: WorkerRef | None = None


@dataclass(frozen=True)
class PlayerView:
    player_id: str
    join_index: int
    ready: bool
    eliminated: bool
    workers: tuple[tuple[int, Position], ...] = ()


@dataclass(frozen=True)
class Snapshot:
    """
    Immutable, serializable view of a session.

    This is the only state handed to callers. Two snapshots taken without
    an accepted mutation in between compare equal and serialize identically.
    """
    session_id: str
    phase: GamePhase
    current_player_id: str | None
    turn_number: int
    board: tuple[tuple[CellView, ...], ...]
    players: tuple[PlayerView, ...]
    version: int
    winner: str | None = None
    win_reason: str | None = None
    last_move: Move | None = None

    @property
    def is_finished(self) -> bool:
        return self.phase == GamePhase.FINISHED

    @property
    def eliminated(self) -> tuple[str, ...]:
        return tuple(p.player_id for p in self.players if p.eliminated)

    def _cell(self, pos: Position) -> CellView:
        size = len(self.board)
        if not (0 <= pos.x < size and 0 <= pos.y < size):
            raise OutOfBoundsError(pos)
        return self.board[pos.x][pos.y]

    def height_at(self, pos: Position) -> int:
        return self._cell(pos).height

    def occupant_at(self, pos: Position) -> WorkerRef | None:
        return self._cell(pos).occupant

    def to_dict(self) -> dict[str, Any]:
        return {
            "session_id": self.session_id,
            "phase": self.phase.value,
            "current_player_id": self.current_player_id,
            "turn_number": self.turn_number,
            "board": [
                [
                    {
                        "height": c.height,
                        "domed": c.domed,
                        "occupant": (
                            {"player_id": c.occupant.player_id, "worker_id": c.occupant.worker_id}
                            if c.occupant else None
                        ),
                    }
                    for c in column
                ]
                for column in self.board
            ],
            "players": [
                {
                    "player_id": p.player_id,
                    "join_index": p.join_index,
                    "ready": p.ready,
                    "eliminated": p.eliminated,
                    "workers": [
                        {"worker_id": wid, "position": pos.to_dict()} for wid, pos in p.workers
                    ],
                }
                for p in self.players
            ],
            "eliminated": list(self.eliminated),
            "version": self.version,
            "winner": self.winner,
            "win_reason": self.win_reason,
            "last_move": self.last_move.to_dict() if self.last_move else None,
        }


# =============================================================================
# Session
# =============================================================================


class GameSession:
    """
    One match: roster, board, turn state, and result.

    Lifecycle: NOT_STARTED (roster open) -> SETUP -> MOVE/BUILD ... -> FINISHED.
    FINISHED is reached exactly once and never left.
    """

    def __init__(self, session_id: str, player_count: int):
        if not MIN_PLAYERS <= player_count <= MAX_PLAYERS:
            raise InvalidPlayerCountError(player_count, MIN_PLAYERS, MAX_PLAYERS)
        self.session_id = session_id
        self.player_count = player_count
        self.players: list[Player] = []
        self.board = BoardState()
        self.turns = TurnController(session_id=session_id, required_players=player_count)
        self.generator = MoveGenerator()
        self.evaluator = WinEvaluator(generator=self.generator)
        self.result: GameResult | None = None
        self.history: list[tuple[str, Move]] = []
        self.version = 0
        self.created_at = time.time()
        self.finished_at: float | None = None

    # -------------------------------------------------------------------------
    # Roster
    # -------------------------------------------------------------------------

    @property
    def phase(self) -> GamePhase:
        return self.turns.phase

    @property
    def current_player_id(self) -> str | None:
        return self.turns.current_player_id

    @property
    def is_full(self) -> bool:
        return len(self.players) >= self.player_count

    def get_player(self, player_id: str) -> Player | None:
        for p in self.players:
            if p.player_id == player_id:
                return p
        return None

    def add_player(self, player_id: str) -> Player:
        if self.phase != GamePhase.NOT_STARTED:
            raise GameAlreadyStartedError(self.session_id, self.phase.value)
        if self.get_player(player_id):
            raise DuplicatePlayerError(self.session_id, player_id)
        if self.is_full:
            raise GameFullError(self.session_id, self.player_count)

        player = Player(player_id=player_id, join_index=len(self.players))
        self.players.append(player)
        self.version += 1
        logger.info("Player %s joined session %s (%d/%d)",
                    player_id, self.session_id, len(self.players), self.player_count)
        return player

    def player_left(self, player_id: str) -> None:
        """
        Remove a player from the roster before the match starts.

        Forfeiture after start is decided by the hosting layer, not here.
        """
        if self.phase != GamePhase.NOT_STARTED:
            raise GameAlreadyStartedError(self.session_id, self.phase.value)
        player = self.get_player(player_id)
        if not player:
            raise PlayerNotFoundError(self.session_id, player_id)

        self.players.remove(player)
        for index, p in enumerate(self.players):
            p.join_index = index
        self.version += 1
        logger.info("Player %s left session %s", player_id, self.session_id)

    def set_player_ready(self, player_id: str, ready: bool = True) -> None:
        """Record a ready flag; starts the match once a full roster is all ready."""
        if self.phase != GamePhase.NOT_STARTED:
            raise GameAlreadyStartedError(self.session_id, self.phase.value)
        player = self.get_player(player_id)
        if not player:
            raise PlayerNotFoundError(self.session_id, player_id)

        player.ready = ready
        self.version += 1
        if ready and self.is_full and all(p.ready for p in self.players):
            self.start()

    def start(self) -> Snapshot:
        self.turns.start([p.player_id for p in self.players])
        self.version += 1
        logger.info("Session %s started with players %s",
                    self.session_id, [p.player_id for p in self.players])
        return self.snapshot()

    # -------------------------------------------------------------------------
    # Play
    # -------------------------------------------------------------------------

    def legal_moves(self, player_id: str) -> list[Move]:
        """
        Legal moves for player_id right now.

        Empty for anyone but the current player, and outside play phases.
        """
        if player_id != self.current_player_id:
            return []
        return self.generator.generate(self.board, self.phase, player_id)

    def apply_move(self, player_id: str, move: Move) -> Snapshot:
        """
        Validate and apply one move, then evaluate the result and advance.

        Raises GameFinishedError, PlayerNotFoundError, NotCurrentPlayerError,
        PhaseMismatchError or IllegalMoveError without changing any state.
        """
        if self.turns.is_finished:
            raise GameFinishedError(self.session_id, self.result.winner if self.result else None)
        if not self.get_player(player_id):
            raise PlayerNotFoundError(self.session_id, player_id)
        self.turns.check_turn(player_id, move.kind)

        legal = self.generator.generate(self.board, self.phase, player_id)
        if move not in legal:
            reason = self.generator.explain_illegal(self.board, self.phase, player_id, move)
            raise IllegalMoveError(reason, move.to_dict())

        self._apply_to_board(player_id, move)
        self.history.append((player_id, move))
        self.version += 1
        logger.debug("Session %s: %s played %s", self.session_id, player_id, move)

        result = self.evaluator.check_move(self.board, player_id, move)
        if result:
            self._finish(result)
            return self.snapshot()

        self.turns.advance()
        self._resolve_blocked_players()
        return self.snapshot()

    def _apply_to_board(self, player_id: str, move: Move) -> None:
        if move.kind == MoveKind.PLACE:
            worker_id = len(self.board.workers_of(player_id)) + 1
            self.board.place_worker(move.position, WorkerRef(player_id, worker_id))
        elif move.kind == MoveKind.MOVE:
            self.board.move_worker(WorkerRef(player_id, move.worker_id), move.to)
        else:
            self.board.build(move.at)

    def _resolve_blocked_players(self) -> None:
        """
        Eliminate the current player while they have nothing to play.

        Repeats because the next player in a 3+ match may be blocked too.
        """
        while not self.turns.is_finished:
            player_id = self.current_player_id
            if not self.evaluator.is_immobilized(self.board, self.phase, player_id):
                return

            remaining = [pid for pid in self.turns.order if pid != player_id]
            self.get_player(player_id).eliminated = True
            self.version += 1
            logger.info("Session %s: player %s has no legal %s and is eliminated",
                        self.session_id, player_id, self.phase.value)

            result = self.evaluator.after_elimination(remaining, self.player_count)
            if result:
                self._finish(result)
                return
            self.board.remove_workers(player_id)
            self.turns.eliminate(player_id)

    def _finish(self, result: GameResult) -> None:
        self.result = result
        self.turns.finish()
        self.finished_at = time.time()
        logger.info("Session %s finished: %s wins (%s)",
                    self.session_id, result.winner, result.reason)

    # -------------------------------------------------------------------------
    # Views
    # -------------------------------------------------------------------------

    def snapshot(self) -> Snapshot:
        board = tuple(
            tuple(CellView(c.height, c.is_domed, c.occupant) for c in column)
            for column in self.board.cells
        )
        players = tuple(
            PlayerView(
                player_id=p.player_id,
                join_index=p.join_index,
                ready=p.ready,
                eliminated=p.eliminated,
                workers=tuple(
                    (w.worker_id, self.board.workers[w])
                    for w in self.board.workers_of(p.player_id)
                ),
            )
            for p in self.players
        )
        return Snapshot(
            session_id=self.session_id,
            phase=self.phase,
            current_player_id=self.current_player_id,
            turn_number=self.turns.turn_number,
            board=board,
            players=players,
            version=self.version,
            winner=self.result.winner if self.result else None,
            win_reason=self.result.reason if self.result else None,
            last_move=self.history[-1][1] if self.history else None,
        )
