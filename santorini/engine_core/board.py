"""
Board State - The 5x5 grid of building heights and workers.

Design principles:
- One integer height per cell plus an optional occupant; the history of
  pieces on a cell is never needed
- Worker -> position index kept in lockstep with the grid
- Only occupancy and building invariants are enforced here; adjacency and
  climbing rules belong to the move generator
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Iterator, NamedTuple
from copy import deepcopy

from .errors import (
    DomedError,
    NotFoundError,
    OccupiedError,
    OutOfBoundsError,
    WorkerAlreadyPlacedError,
)

BOARD_SIZE = 5
MAX_HEIGHT = 4  # dome
WIN_HEIGHT = 3
WORKERS_PER_PLAYER = 2
MIN_PLAYERS = 2
MAX_PLAYERS = 4


def require_int(value: object, name: str) -> int:
    """Return value if it is a genuine int (bool excluded), else raise TypeError."""
    if isinstance(value, bool) or not isinstance(value, int):
        raise TypeError(f"{name} must be an integer, got {value!r}")
    return value


class Position(NamedTuple):
    """A grid coordinate. Equality and hash are by value."""
    x: int
    y: int

    def to_dict(self) -> dict[str, int]:
        return {"x": self.x, "y": self.y}

    @classmethod
    def from_dict(cls, data: dict[str, int]) -> Position:
        """Parse {"x": int, "y": int}. Floats, strings and bools are rejected."""
        if not isinstance(data, dict) or set(data) != {"x", "y"}:
            raise ValueError(f"position must be an object with x and y, got {data!r}")
        return cls(require_int(data["x"], "x"), require_int(data["y"], "y"))

    def __str__(self) -> str:
        return f"({self.x},{self.y})"


class WorkerRef(NamedTuple):
    """A worker token: owning player and a stable per-player id (1 or 2)."""
    player_id: str
    worker_id: int

    def __str__(self) -> str:
        return f"{self.player_id}#{self.worker_id}"


@dataclass
class Cell:
    """
    A single board cell.

    height 0-3 are building levels, 4 is a dome (terminal).
    """
    height: int = 0
    occupant: WorkerRef | None = None

    @property
    def is_domed(self) -> bool:
        return self.height >= MAX_HEIGHT

    @property
    def is_empty(self) -> bool:
        return self.occupant is None


@dataclass
class BoardState:
    """
    Grid of cells plus a reverse index from worker to position.

    Invariant: for every worker w, cells[workers[w]].occupant == w, and every
    occupant on the grid is present in the index.
    """
    size: int = BOARD_SIZE
    cells: list[list[Cell]] = field(default_factory=list)
    workers: dict[WorkerRef, Position] = field(default_factory=dict)

    def __post_init__(self):
        if not self.cells:
            self.cells = [[Cell() for _ in range(self.size)] for _ in range(self.size)]

    # -------------------------------------------------------------------------
    # Reads
    # -------------------------------------------------------------------------

    def in_bounds(self, pos: Position) -> bool:
        return 0 <= pos.x < self.size and 0 <= pos.y < self.size

    def cell(self, pos: Position) -> Cell:
        if not self.in_bounds(pos):
            raise OutOfBoundsError(pos)
        return self.cells[pos.x][pos.y]

    def height_at(self, pos: Position) -> int:
        return self.cell(pos).height

    def occupant_at(self, pos: Position) -> WorkerRef | None:
        return self.cell(pos).occupant

    def is_occupied(self, pos: Position) -> bool:
        return self.cell(pos).occupant is not None

    def adjacent(self, pos: Position) -> set[Position]:
        """
        Grid neighbours of pos, clipped at the edges.

        Corner -> 3, edge -> 5, interior -> 8.
        """
        neighbours = set()
        for dx in (-1, 0, 1):
            for dy in (-1, 0, 1):
                if dx == 0 and dy == 0:
                    continue
                candidate = Position(pos.x + dx, pos.y + dy)
                if self.in_bounds(candidate):
                    neighbours.add(candidate)
        return neighbours

    def positions(self) -> Iterator[Position]:
        """All positions in row-major order."""
        for x in range(self.size):
            for y in range(self.size):
                yield Position(x, y)

    def empty_positions(self) -> list[Position]:
        return [p for p in self.positions() if not self.is_occupied(p)]

    def position_of(self, worker: WorkerRef) -> Position:
        if worker not in self.workers:
            raise NotFoundError(worker)
        return self.workers[worker]

    def workers_of(self, player_id: str) -> list[WorkerRef]:
        """Workers owned by a player, ordered by worker id."""
        return sorted(
            (w for w in self.workers if w.player_id == player_id),
            key=lambda w: w.worker_id,
        )

    # -------------------------------------------------------------------------
    # Mutators
    # -------------------------------------------------------------------------

    def place_worker(self, pos: Position, worker: WorkerRef) -> None:
        cell = self.cell(pos)
        if cell.occupant is not None:
            raise OccupiedError(pos)
        if worker in self.workers:
            raise WorkerAlreadyPlacedError(worker, self.workers[worker])
        cell.occupant = worker
        self.workers[worker] = pos

    def move_worker(self, worker: WorkerRef, to: Position) -> None:
        """Relocate a worker. Height and adjacency are not checked here."""
        if worker not in self.workers:
            raise NotFoundError(worker)
        target = self.cell(to)
        if target.occupant is not None:
            raise OccupiedError(to)
        source = self.workers[worker]
        self.cells[source.x][source.y].occupant = None
        target.occupant = worker
        self.workers[worker] = to

    def build(self, pos: Position) -> int:
        """Raise a cell by one level. Returns the new height."""
        cell = self.cell(pos)
        if cell.is_domed:
            raise DomedError(pos)
        if cell.occupant is not None:
            raise OccupiedError(pos)
        cell.height += 1
        return cell.height

    def remove_workers(self, player_id: str) -> list[WorkerRef]:
        """Take every worker of an eliminated player off the board."""
        removed = self.workers_of(player_id)
        for worker in removed:
            pos = self.workers.pop(worker)
            self.cells[pos.x][pos.y].occupant = None
        return removed

    # -------------------------------------------------------------------------
    # Serialization
    # -------------------------------------------------------------------------

    def clone(self) -> BoardState:
        """Deep copy the board."""
        return deepcopy(self)

    def to_rows(self) -> list[list[dict]]:
        """Rows of plain cell dicts, indexed [x][y]."""
        return [
            [
                {
                    "height": cell.height,
                    "domed": cell.is_domed,
                    "occupant": (
                        {"player_id": cell.occupant.player_id, "worker_id": cell.occupant.worker_id}
                        if cell.occupant else None
                    ),
                }
                for cell in column
            ]
            for column in self.cells
        ]

    def render(self) -> str:
        """ASCII picture of the board: height digit, worker marker if any."""
        lines = []
        for y in range(self.size):
            row = []
            for x in range(self.size):
                cell = self.cells[x][y]
                if cell.is_domed:
                    row.append(" ^^ ")
                elif cell.occupant:
                    row.append(f"{cell.height}{cell.occupant.player_id[:2]:<2} ")
                else:
                    row.append(f"{cell.height}   ")
            lines.append("|" + "|".join(row) + "|")
        return "\n".join(lines)
