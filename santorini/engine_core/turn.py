"""
Turn Controller - Phase and player rotation.

NOT_STARTED --start--> SETUP --place--> ... --> MOVE --move--> BUILD --build--> MOVE ...
Any phase --win--> FINISHED (terminal).

Rotation is over a mutable ordered list of active players so that blocked
players can leave it in 3+ player matches.
"""

from __future__ import annotations
from dataclasses import dataclass, field

from .board import WORKERS_PER_PLAYER
from .errors import (
    GameAlreadyStartedError,
    GameFinishedError,
    NotCurrentPlayerError,
    NotReadyError,
    PhaseMismatchError,
)
from .move import GamePhase, MoveKind


@dataclass
class TurnController:
    """
    State machine over phase x current player x turn number.

    turn_number is 0 during setup, becomes 1 when the first MOVE phase
    begins, and increments every time rotation wraps back to the first
    player in the order.
    """
    session_id: str
    required_players: int
    workers_per_player: int = WORKERS_PER_PLAYER

    phase: GamePhase = GamePhase.NOT_STARTED
    order: list[str] = field(default_factory=list)
    current_index: int = 0
    turn_number: int = 0
    placements: int = 0

    @property
    def current_player_id(self) -> str | None:
        if self.phase in (GamePhase.NOT_STARTED, GamePhase.FINISHED) or not self.order:
            return None
        return self.order[self.current_index]

    @property
    def is_finished(self) -> bool:
        return self.phase == GamePhase.FINISHED

    def start(self, player_ids: list[str]) -> None:
        """Fix turn order to join order and enter SETUP."""
        if self.phase != GamePhase.NOT_STARTED:
            raise GameAlreadyStartedError(self.session_id, self.phase.value)
        if len(player_ids) != self.required_players:
            raise NotReadyError(self.session_id, len(player_ids), self.required_players)
        self.order = list(player_ids)
        self.current_index = 0
        self.phase = GamePhase.SETUP

    def check_turn(self, player_id: str, kind: MoveKind) -> None:
        """Reject a move from the wrong player or for the wrong phase."""
        if self.phase == GamePhase.FINISHED:
            raise GameFinishedError(self.session_id)
        if self.phase == GamePhase.NOT_STARTED:
            raise PhaseMismatchError(kind.value, self.phase.value)
        if player_id != self.current_player_id:
            raise NotCurrentPlayerError(player_id, self.current_player_id)
        if kind.phase != self.phase:
            raise PhaseMismatchError(kind.value, self.phase.value)

    def advance(self) -> None:
        """Move to the next (phase, player) after an accepted move."""
        if self.phase == GamePhase.SETUP:
            self.placements += 1
            if self.placements >= len(self.order) * self.workers_per_player:
                self.phase = GamePhase.MOVE
                self.current_index = 0
                self.turn_number = 1
            else:
                self.current_index = (self.current_index + 1) % len(self.order)
        elif self.phase == GamePhase.MOVE:
            # Same player builds
            self.phase = GamePhase.BUILD
        elif self.phase == GamePhase.BUILD:
            self.phase = GamePhase.MOVE
            self._rotate()

    def eliminate(self, player_id: str) -> None:
        """
        Drop a player from the rotation.

        If it was their turn, the next active player begins a MOVE phase.
        """
        index = self.order.index(player_id)
        was_current = index == self.current_index
        self.order.pop(index)
        if not self.order:
            return
        if index < self.current_index:
            self.current_index -= 1
        elif was_current:
            self.phase = GamePhase.MOVE
            if self.current_index >= len(self.order):
                self.current_index = 0
                self.turn_number += 1

    def finish(self) -> None:
        self.phase = GamePhase.FINISHED

    def _rotate(self) -> None:
        self.current_index += 1
        if self.current_index >= len(self.order):
            self.current_index = 0
            self.turn_number += 1
