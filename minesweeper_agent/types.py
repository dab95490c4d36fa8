"""Core value types shared by the solver, the board views and the engine."""

from enum import Enum
from typing import NamedTuple, Optional, Protocol, Sequence


class InconsistentBoardError(RuntimeError):
    """Raised when the visible board admits no legal bomb placement."""


class Position(NamedTuple):
    """A grid cell, ordered column first so tie-breaks are deterministic."""

    col: int
    row: int

    def squared_distance(self, other: "Position") -> int:
        """Return the squared Euclidean distance to another position."""
        return (self.col - other.col) ** 2 + (self.row - other.row) ** 2


class TileKind(Enum):
    COVERED = "covered"
    FLAGGED = "flagged"
    REVEALED_SAFE = "revealed_safe"
    REVEALED_BOMB = "revealed_bomb"
    EXPLODED = "exploded"
    MISFLAGGED = "misflagged"


class TileState(NamedTuple):
    """
    Visible state of one tile.

    `count` is the number of bomb neighbours and is only meaningful for
    REVEALED_SAFE tiles; it is 0 for every other kind.
    """

    kind: TileKind
    count: int = 0

    @classmethod
    def safe(cls, count: int) -> "TileState":
        if not 0 <= count <= 8:
            raise ValueError(f"Revealed count must be in 0..8, got {count}.")
        return cls(TileKind.REVEALED_SAFE, count)

    @property
    def is_covered(self) -> bool:
        return self.kind is TileKind.COVERED

    @property
    def is_flagged(self) -> bool:
        return self.kind is TileKind.FLAGGED

    @property
    def revealed_count(self) -> Optional[int]:
        """The adjacency count for a revealed safe tile, otherwise None."""
        if self.kind is TileKind.REVEALED_SAFE:
            return self.count
        return None


COVERED = TileState(TileKind.COVERED)
FLAGGED = TileState(TileKind.FLAGGED)
REVEALED_BOMB = TileState(TileKind.REVEALED_BOMB)
EXPLODED = TileState(TileKind.EXPLODED)
MISFLAGGED = TileState(TileKind.MISFLAGGED)


class ActionType(Enum):
    UNCOVER = "uncover"
    FLAG = "flag"


class Action(NamedTuple):
    pos: Position
    kind: ActionType

    @classmethod
    def uncover(cls, pos: Position) -> "Action":
        return cls(Position(*pos), ActionType.UNCOVER)

    @classmethod
    def flag(cls, pos: Position) -> "Action":
        return cls(Position(*pos), ActionType.FLAG)


class BoardView(Protocol):
    """
    Read-only view of a Minesweeper board, as consumed by the solver.

    Implementations must not change while a solving call is running.
    """

    width: int
    height: int

    def tile_state(self, pos: Position) -> TileState:
        ...

    def neighbours(self, pos: Position) -> Sequence[Position]:
        ...

    def num_bombs_left(self) -> int:
        ...
