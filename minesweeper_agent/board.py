"""Immutable grid snapshot implementing the board view consumed by the solver."""

from typing import Dict, Iterable, List, Sequence, Tuple

import numpy as np

from .types import (
    COVERED,
    EXPLODED,
    FLAGGED,
    MISFLAGGED,
    REVEALED_BOMB,
    BoardView,
    Position,
    TileKind,
    TileState,
)
from .utils import get_neighborhoods

# Non-negative codes are revealed counts.
_COVERED_CODE = -1
_FLAGGED_CODE = -2
_REVEALED_BOMB_CODE = -3
_EXPLODED_CODE = -4
_MISFLAGGED_CODE = -5

_KIND_TO_CODE: Dict[TileKind, int] = {
    TileKind.COVERED: _COVERED_CODE,
    TileKind.FLAGGED: _FLAGGED_CODE,
    TileKind.REVEALED_BOMB: _REVEALED_BOMB_CODE,
    TileKind.EXPLODED: _EXPLODED_CODE,
    TileKind.MISFLAGGED: _MISFLAGGED_CODE,
}

_CODE_TO_STATE: Dict[int, TileState] = {
    _COVERED_CODE: COVERED,
    _FLAGGED_CODE: FLAGGED,
    _REVEALED_BOMB_CODE: REVEALED_BOMB,
    _EXPLODED_CODE: EXPLODED,
    _MISFLAGGED_CODE: MISFLAGGED,
}

GLYPHS: Dict[str, int] = {
    ".": _COVERED_CODE,
    "F": _FLAGGED_CODE,
    "X": _REVEALED_BOMB_CODE,
    "!": _EXPLODED_CODE,
    "?": _MISFLAGGED_CODE,
    **{str(n): n for n in range(9)},
}
_CODE_TO_GLYPH: Dict[int, str] = {code: glyph for glyph, code in GLYPHS.items()}


def state_glyph(state: TileState) -> str:
    """Return the single-character glyph used for a tile state in text boards."""
    if state.kind is TileKind.REVEALED_SAFE:
        return str(state.count)
    return _CODE_TO_GLYPH[_KIND_TO_CODE[state.kind]]


class GridBoard:
    """
    A frozen Minesweeper board state backed by a numpy code array.

    The array is indexed [row, col]; public methods take Position values.
    """

    def __init__(self, codes: np.ndarray, num_bombs_left: int) -> None:
        """
        Args:
            codes: 2-D integer array of tile codes, shape (height, width).
            num_bombs_left: Bombs not yet flagged (may be negative if the
                player over-flagged).

        Raises:
            ValueError: If the array is not 2-D, is empty or holds unknown codes.
        """
        codes = np.asarray(codes, dtype=np.int8)
        if codes.ndim != 2 or codes.size == 0:
            raise ValueError("Board codes must be a non-empty 2-D array.")
        if ((codes < _MISFLAGGED_CODE) | (codes > 8)).any():
            raise ValueError("Board codes contain unknown tile codes.")

        self._codes = codes.copy()
        self._codes.setflags(write=False)
        self.height: int = int(codes.shape[0])
        self.width: int = int(codes.shape[1])
        self._num_bombs_left = int(num_bombs_left)
        self._neighborhoods = get_neighborhoods(self.width, self.height)

    @classmethod
    def from_rows(cls, rows: Sequence[str], num_bombs_left: int) -> "GridBoard":
        """
        Parse a board from text rows, one character per tile.

        Glyphs: '.' covered, 'F' flagged, '0'-'8' revealed count,
        'X' revealed bomb, '!' exploded bomb, '?' misflagged.
        Whitespace inside a row is ignored, so rows may be written spaced out.

        Raises:
            ValueError: If rows are empty, ragged or contain unknown glyphs.
        """
        parsed: List[List[int]] = []
        for y, line in enumerate(rows):
            cells = [ch for ch in line if not ch.isspace()]
            try:
                parsed.append([GLYPHS[ch] for ch in cells])
            except KeyError as exc:
                raise ValueError(f"Unknown glyph {exc.args[0]!r} in row {y}.") from None

        if not parsed or not parsed[0]:
            raise ValueError("A board needs at least one non-empty row.")
        if any(len(r) != len(parsed[0]) for r in parsed):
            raise ValueError("All board rows must have the same length.")

        return cls(np.array(parsed, dtype=np.int8), num_bombs_left)

    @classmethod
    def from_view(cls, view: BoardView) -> "GridBoard":
        """Freeze any board view into a GridBoard snapshot."""
        codes = np.empty((view.height, view.width), dtype=np.int8)
        for row in range(view.height):
            for col in range(view.width):
                state = view.tile_state(Position(col, row))
                if state.kind is TileKind.REVEALED_SAFE:
                    codes[row, col] = state.count
                else:
                    codes[row, col] = _KIND_TO_CODE[state.kind]
        return cls(codes, view.num_bombs_left())

    def _check(self, pos: Position) -> None:
        if not (0 <= pos[0] < self.width and 0 <= pos[1] < self.height):
            raise ValueError(f"Position {tuple(pos)} is outside the board.")

    def tile_state(self, pos: Position) -> TileState:
        self._check(pos)
        code = int(self._codes[pos[1], pos[0]])
        if code >= 0:
            return TileState(TileKind.REVEALED_SAFE, code)
        return _CODE_TO_STATE[code]

    def neighbours(self, pos: Position) -> Tuple[Position, ...]:
        self._check(pos)
        return self._neighborhoods[Position(*pos)]

    def num_bombs_left(self) -> int:
        return self._num_bombs_left

    def covered_mask(self) -> np.ndarray:
        """Boolean array (height, width), True where the tile is covered."""
        return self._codes == _COVERED_CODE

    def to_rows(self) -> List[str]:
        """Inverse of from_rows."""
        return [
            "".join(_CODE_TO_GLYPH[int(code)] for code in row) for row in self._codes
        ]

    def positions(self) -> Iterable[Position]:
        """All positions in column-major order."""
        for col in range(self.width):
            for row in range(self.height):
                yield Position(col, row)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, GridBoard):
            return NotImplemented
        return (
            self._num_bombs_left == other._num_bombs_left
            and np.array_equal(self._codes, other._codes)
        )

    def __hash__(self) -> int:
        return hash((self._codes.tobytes(), self._codes.shape, self._num_bombs_left))

    def __repr__(self) -> str:
        return (
            f"GridBoard.from_rows({self.to_rows()!r}, "
            f"num_bombs_left={self._num_bombs_left})"
        )
