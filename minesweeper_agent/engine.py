"""Minesweeper game engine with first-click safety, exposing the solver's board view."""

import logging
import random
from collections import deque
from enum import Enum
from typing import Deque, Dict, FrozenSet, Iterable, List, Optional, Set, Tuple

import numpy as np

from .board import GridBoard, state_glyph
from .types import (
    COVERED,
    EXPLODED,
    FLAGGED,
    MISFLAGGED,
    REVEALED_BOMB,
    Action,
    ActionType,
    Position,
    TileState,
)
from .utils import format_grid, get_neighborhoods

logger = logging.getLogger(__name__)

MINES_GENERATION_ALGORITHMS = ("safe_first_action_rule", "safe_neighborhood_rule")


class GameStatus(Enum):
    LOST = -1
    ONGOING = 0
    WON = 1


class Minesweeper:
    """
    A playable Minesweeper board.

    Mines are placed on the first uncover so that the first tile (or its whole
    neighbourhood) is safe. The instance is itself a board view and can be
    handed straight to the solver between moves.
    """

    def __init__(
        self,
        width: int,
        height: int,
        mines_count: int,
        mines_generation_algorithm: str = "safe_neighborhood_rule",
        seed: Optional[int] = None,
    ) -> None:
        """
        Args:
            width: Board width (number of columns), must be > 0.
            height: Board height (number of rows), must be > 0.
            mines_count: Total number of mines, must be >= 0.
            mines_generation_algorithm: Mine placement rule; one of
                {"safe_first_action_rule", "safe_neighborhood_rule"}.
            seed: Seed of the mine placement; None for a random layout.

        Raises:
            ValueError: If dimensions are invalid, the algorithm is unknown or
                the mines can't fit.
        """
        if width <= 0 or height <= 0:
            raise ValueError("Width and height must be positive.")
        if mines_count < 0:
            raise ValueError("mines_count must be non-negative.")
        if mines_generation_algorithm not in MINES_GENERATION_ALGORITHMS:
            raise ValueError(
                'mines_generation_algorithm must be "safe_first_action_rule" '
                'or "safe_neighborhood_rule".'
            )
        if mines_count > width * height - 1:
            raise ValueError("Too many mines: at least one tile must be safe.")

        self.width: int = width
        self.height: int = height
        self.mines_count: int = mines_count
        self.mines_generation_algorithm: str = mines_generation_algorithm

        self._rng = random.Random(seed)
        self._neighborhoods: Dict[Position, Tuple[Position, ...]] = get_neighborhoods(
            width, height
        )

        # All arrays are indexed [row, col].
        self._mines = np.zeros((height, width), dtype=bool)
        self._counts = np.zeros((height, width), dtype=np.int8)
        self._revealed = np.zeros((height, width), dtype=bool)
        self._flagged = np.zeros((height, width), dtype=bool)
        self.mines_placed: bool = False
        self.exploded: Optional[Position] = None
        self.status: GameStatus = GameStatus.ONGOING

    @classmethod
    def from_mine_positions(
        cls, width: int, height: int, mines: Iterable[Position]
    ) -> "Minesweeper":
        """Build a game with a fixed mine layout (no first-click safety)."""
        mines = {Position(*m) for m in mines}
        game = cls(width, height, len(mines), "safe_first_action_rule")
        game._set_mines(mines)
        return game

    def reset(self) -> None:
        """Clear every move but keep the mine layout, to replay the same board."""
        self._revealed[:] = False
        self._flagged[:] = False
        self.exploded = None
        self.status = GameStatus.ONGOING

    # -------------------------------------------------------------------------
    # Board view
    # -------------------------------------------------------------------------

    def _check(self, pos: Position) -> None:
        if not (0 <= pos[0] < self.width and 0 <= pos[1] < self.height):
            raise ValueError(f"Position {tuple(pos)} is outside the board.")

    def tile_state(self, pos: Position) -> TileState:
        self._check(pos)
        col, row = pos
        if self._revealed[row, col]:
            return TileState.safe(int(self._counts[row, col]))

        if self.status is GameStatus.LOST:
            if self.exploded == pos:
                return EXPLODED
            mine = self._mines[row, col]
            flagged = self._flagged[row, col]
            if mine and not flagged:
                return REVEALED_BOMB
            if flagged and not mine:
                return MISFLAGGED

        if self._flagged[row, col]:
            return FLAGGED
        return COVERED

    def neighbours(self, pos: Position) -> Tuple[Position, ...]:
        self._check(pos)
        return self._neighborhoods[Position(*pos)]

    def num_bombs_left(self) -> int:
        return self.mines_count - int(self._flagged.sum())

    def snapshot(self) -> GridBoard:
        """Frozen copy of the visible board."""
        return GridBoard.from_view(self)

    @property
    def mines(self) -> FrozenSet[Position]:
        rows, cols = np.nonzero(self._mines)
        return frozenset(Position(int(c), int(r)) for r, c in zip(rows, cols))

    # -------------------------------------------------------------------------
    # Mine placement
    # -------------------------------------------------------------------------

    def place_mines(self, first: Position) -> None:
        """
        Place mines (one-time), respecting the selected first-move safety rule.

        Raises:
            ValueError: If mines are already placed or can't fit around the
                safe zone.
        """
        if self.mines_placed:
            raise ValueError("Mines are already placed.")

        first = Position(*first)
        safe: Set[Position] = {first}
        if self.mines_generation_algorithm == "safe_neighborhood_rule":
            safe.update(self.neighbours(first))

        eligible: List[Position] = [
            Position(col, row)
            for col in range(self.width)
            for row in range(self.height)
            if Position(col, row) not in safe
        ]
        if self.mines_count > len(eligible):
            raise ValueError(
                f"Cannot place {self.mines_count} mines outside a safe zone "
                f"of {len(safe)} tiles."
            )
        self._set_mines(self._rng.sample(eligible, self.mines_count))

    def _set_mines(self, mines: Iterable[Position]) -> None:
        self._mines[:] = False
        for col, row in mines:
            self._mines[row, col] = True

        # adjacency counts: sum of the 8 shifted copies of the padded mine grid
        padded = np.pad(self._mines.astype(np.int8), 1)
        counts = np.zeros_like(self._counts)
        for dr in (-1, 0, 1):
            for dc in (-1, 0, 1):
                if dr == 0 and dc == 0:
                    continue
                counts += padded[
                    1 + dr : 1 + dr + self.height, 1 + dc : 1 + dc + self.width
                ]
        self._counts = counts
        self.mines_placed = True

    # -------------------------------------------------------------------------
    # Moves
    # -------------------------------------------------------------------------

    def apply_action(self, action: Action) -> GameStatus:
        """
        Play one action and return the resulting game status.

        Flagging toggles the flag on a covered tile. Uncovering a flagged or
        revealed tile does nothing. Moves after the game ended are ignored.

        Raises:
            ValueError: If the position is outside the board.
        """
        pos = Position(*action.pos)
        self._check(pos)
        if self.status is not GameStatus.ONGOING:
            return self.status

        col, row = pos
        if action.kind is ActionType.FLAG:
            if not self._revealed[row, col]:
                self._flagged[row, col] = not self._flagged[row, col]
            return self.status

        if self._revealed[row, col] or self._flagged[row, col]:
            return self.status

        if not self.mines_placed:
            self.place_mines(pos)

        if self._mines[row, col]:
            self.exploded = pos
            self.status = GameStatus.LOST
            logger.debug("Uncovered a mine at %s", pos)
            return self.status

        self.flood_fill(pos)
        safe_tiles = self.width * self.height - self.mines_count
        if int(self._revealed.sum()) == safe_tiles:
            self.status = GameStatus.WON
        return self.status

    def flood_fill(self, start: Position) -> List[Position]:
        """
        Reveal `start` and, through zero tiles, every connected safe tile.

        Flagged tiles are left alone.

        Returns:
            The newly revealed positions in reveal order.
        """
        frontier: Deque[Position] = deque([Position(*start)])
        visited: Set[Position] = {Position(*start)}
        revealed: List[Position] = []

        while frontier:
            pos = frontier.popleft()
            col, row = pos
            if self._revealed[row, col] or self._flagged[row, col]:
                continue

            self._revealed[row, col] = True
            revealed.append(pos)

            if self._counts[row, col] == 0:
                for n in self.neighbours(pos):
                    if n in visited:
                        continue
                    visited.add(n)
                    frontier.append(n)

        return revealed

    # -------------------------------------------------------------------------
    # Display
    # -------------------------------------------------------------------------

    def format_board(self, reveal_all: bool = False, show_coords: bool = True) -> str:
        """
        Render the board as a multi-line string.

        Args:
            reveal_all: If True, show the underlying layout ('M' for mines).
            show_coords: If True, add coordinate labels.
        """

        def cell(col: int, row: int) -> str:
            if reveal_all:
                return "M" if self._mines[row, col] else str(int(self._counts[row, col]))
            return state_glyph(self.tile_state(Position(col, row)))

        cells = [[cell(col, row) for col in range(self.width)] for row in range(self.height)]
        return format_grid(cells, show_coords)
