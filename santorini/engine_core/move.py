"""
Move System - Phases, move kinds, and the Move value.

A Move is a closed variant:
1. place(position)             during SETUP
2. move(worker_id, from, to)   during MOVE
3. build(worker_id, at)        during BUILD

Moves carry no player id; the submitting player is passed alongside.
Moves are immutable and hashable so membership in the legal set is a
plain `in` check.
"""

from __future__ import annotations
from dataclasses import dataclass
from enum import Enum
from typing import Any

from .board import Position, require_int
from .errors import MalformedMoveError


class GamePhase(Enum):
    """Lifecycle phases of a session."""
    NOT_STARTED = "not_started"
    SETUP = "setup"
    MOVE = "move"
    BUILD = "build"
    FINISHED = "finished"


class MoveKind(Enum):
    """Kinds of moves a player can submit."""
    PLACE = "place"
    MOVE = "move"
    BUILD = "build"

    @property
    def phase(self) -> GamePhase:
        """The only phase in which this kind is accepted."""
        return _PHASE_FOR_KIND[self]


_PHASE_FOR_KIND = {
    MoveKind.PLACE: GamePhase.SETUP,
    MoveKind.MOVE: GamePhase.MOVE,
    MoveKind.BUILD: GamePhase.BUILD,
}


@dataclass(frozen=True)
class Move:
    """
    A fully specified move.

    Field usage by kind:
    - PLACE: position
    - MOVE:  worker_id, from_pos, to
    - BUILD: worker_id, at
    """
    kind: MoveKind
    worker_id: int | None = None
    position: Position | None = None
    from_pos: Position | None = None
    to: Position | None = None
    at: Position | None = None

    @classmethod
    def place(cls, position: Position) -> Move:
        """Factory for a worker placement."""
        return cls(kind=MoveKind.PLACE, position=Position(*position))

    @classmethod
    def move(cls, worker_id: int, from_pos: Position, to: Position) -> Move:
        """Factory for a worker move."""
        return cls(
            kind=MoveKind.MOVE,
            worker_id=worker_id,
            from_pos=Position(*from_pos),
            to=Position(*to),
        )

    @classmethod
    def build(cls, worker_id: int, at: Position) -> Move:
        """Factory for a build."""
        return cls(kind=MoveKind.BUILD, worker_id=worker_id, at=Position(*at))

    @property
    def target(self) -> Position:
        """The cell this move acts on."""
        if self.kind == MoveKind.PLACE:
            return self.position
        if self.kind == MoveKind.MOVE:
            return self.to
        return self.at

    def to_dict(self) -> dict[str, Any]:
        if self.kind == MoveKind.PLACE:
            return {"kind": "place", "position": self.position.to_dict()}
        if self.kind == MoveKind.MOVE:
            return {
                "kind": "move",
                "worker_id": self.worker_id,
                "from": self.from_pos.to_dict(),
                "to": self.to.to_dict(),
            }
        return {"kind": "build", "worker_id": self.worker_id, "at": self.at.to_dict()}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Move:
        """
        Parse the wire shape.

        Accepts exactly the three shapes produced by to_dict(); anything
        else raises MalformedMoveError.
        """
        if not isinstance(data, dict):
            raise MalformedMoveError("move must be an object")
        try:
            kind = MoveKind(data.get("kind"))
        except ValueError:
            raise MalformedMoveError(f"unknown kind {data.get('kind')!r}")

        expected = {
            MoveKind.PLACE: {"kind", "position"},
            MoveKind.MOVE: {"kind", "worker_id", "from", "to"},
            MoveKind.BUILD: {"kind", "worker_id", "at"},
        }[kind]
        if set(data) != expected:
            raise MalformedMoveError(
                f"{kind.value} move needs fields {sorted(expected)}, got {sorted(data)}"
            )

        try:
            if kind == MoveKind.PLACE:
                return cls.place(Position.from_dict(data["position"]))
            worker_id = require_int(data["worker_id"], "worker_id")
            if kind == MoveKind.MOVE:
                return cls.move(
                    worker_id,
                    Position.from_dict(data["from"]),
                    Position.from_dict(data["to"]),
                )
            return cls.build(worker_id, Position.from_dict(data["at"]))
        except (KeyError, TypeError, ValueError) as e:
            raise MalformedMoveError(str(e))

    def __str__(self) -> str:
        if self.kind == MoveKind.PLACE:
            return f"place {self.position}"
        if self.kind == MoveKind.MOVE:
            return f"move #{self.worker_id} {self.from_pos}->{self.to}"
        return f"build #{self.worker_id} at {self.at}"
