"""Certain moves: single-tile rules and multi-tile subset-bound inference."""

import logging
from typing import Dict, Iterator, List, Optional, Sequence, Set, Tuple

from .config import SolverConfig
from .types import Action, BoardView, InconsistentBoardError, Position
from .utils import (
    all_positions,
    covered_neighbours,
    deduplicate,
    num_flagged_around,
    numbered_tiles,
)

logger = logging.getLogger(__name__)

# (numbered tile, bombs still required, covered neighbours)
LocalConstraint = Tuple[Position, int, List[Position]]


def local_constraints(board: BoardView) -> List[LocalConstraint]:
    """
    Build the constraint of every revealed numbered tile with covered neighbours.

    Raises:
        InconsistentBoardError: If a tile has more flags around it than its
            count, or needs more bombs than it has covered neighbours.
    """
    constraints: List[LocalConstraint] = []
    for pos, count in numbered_tiles(board):
        covered = covered_neighbours(board, pos)
        if not covered:
            continue
        required = count - num_flagged_around(board, pos)
        if required < 0:
            raise InconsistentBoardError(
                f"Tile {tuple(pos)} shows {count} but has more flagged neighbours."
            )
        if required > len(covered):
            raise InconsistentBoardError(
                f"Tile {tuple(pos)} needs {required} bombs among "
                f"{len(covered)} covered neighbours."
            )
        constraints.append((pos, required, covered))
    return constraints


# -------------------------------------------------------------------------
# Trivial deduction
# -------------------------------------------------------------------------


def get_trivial_actions(
    board: BoardView, config: Optional[SolverConfig] = None
) -> List[Action]:
    """
    Apply the single-tile rules to every revealed numbered tile.

    Also handles two whole-board cases: an untouched board gets the fixed
    opening move, and a board with no bombs left gets every covered tile
    uncovered.
    """
    config = config or SolverConfig()
    positions = list(all_positions(board))

    if all(board.tile_state(pos).is_covered for pos in positions):
        col = min(config.opening_column, board.width - 1)
        return [Action.uncover(Position(col, board.height // 2))]

    if board.num_bombs_left() == 0:
        return [
            Action.uncover(pos) for pos in positions if board.tile_state(pos).is_covered
        ]

    output: List[Action] = []
    for pos, count in numbered_tiles(board):
        num_flagged = num_flagged_around(board, pos)
        covered = covered_neighbours(board, pos)
        # every bomb around is flagged: the rest is safe
        if num_flagged == count:
            output.extend(Action.uncover(n) for n in covered)
        # every covered neighbour is needed as a bomb
        if max(count - num_flagged, 0) == len(covered):
            output.extend(Action.flag(n) for n in covered)
    return deduplicate(output)


# -------------------------------------------------------------------------
# Subset bound engine
# -------------------------------------------------------------------------


def _submasks(mask: int) -> Iterator[int]:
    """Yield every non-empty submask of `mask`, including `mask` itself."""
    sub = mask
    while sub:
        yield sub
        sub = (sub - 1) & mask


def _proper_submasks(mask: int) -> Iterator[int]:
    """Yield every non-empty submask of `mask` except `mask` itself."""
    sub = (mask - 1) & mask
    while sub:
        yield sub
        sub = (sub - 1) & mask


class SubsetBounds:
    """
    Lower and upper bounds on the number of bombs in groups of covered tiles.

    Groups are keyed by a bit-mask over the covered tiles that touch a
    revealed number (bit i is `self.tiles[i]`). Bounds are seeded from every
    numbered tile and refined over `passes` passes; each pass can only
    tighten them.
    """

    def __init__(self, board: BoardView, passes: int = 3) -> None:
        if passes < 1:
            raise ValueError("passes must be at least 1.")

        self.constraints: List[LocalConstraint] = local_constraints(board)

        tiles: Set[Position] = set()
        for _, _, covered in self.constraints:
            tiles.update(covered)
        self.tiles: List[Position] = sorted(tiles)
        self._index: Dict[Position, int] = {p: i for i, p in enumerate(self.tiles)}

        self.min_bombs: Dict[int, int] = {}
        self.max_bombs: Dict[int, int] = {}

        # groups whose recursive bound is up to date with the maps
        self._max_resolved: Set[int] = set()
        self._min_resolved: Set[int] = set()

        for _ in range(passes):
            self._refine()
        self._max_resolved.clear()
        self._min_resolved.clear()

        logger.debug(
            "Subset bounds: %d tiles, %d lower and %d upper bounds after %d passes",
            len(self.tiles),
            len(self.min_bombs),
            len(self.max_bombs),
            passes,
        )

    def mask_of(self, positions: Sequence[Position]) -> int:
        mask = 0
        for pos in positions:
            mask |= 1 << self._index[pos]
        return mask

    def positions_of(self, mask: int) -> List[Position]:
        return [p for i, p in enumerate(self.tiles) if mask >> i & 1]

    def _tighten_max(self, group: int, value: int) -> None:
        current = self.max_bombs.get(group)
        if current is None or value < current:
            self.max_bombs[group] = value

    def _tighten_min(self, group: int, value: int) -> None:
        current = self.min_bombs.get(group)
        if current is None or value > current:
            self.min_bombs[group] = value

    def _refine(self) -> None:
        self._max_resolved.clear()
        self._min_resolved.clear()
        for _, n, covered in self.constraints:
            covered_mask = self.mask_of(covered)
            for group in _submasks(covered_mask):
                rest = covered_mask & ~group
                # at most n bombs in any group around the tile
                if group.bit_count() > n:
                    self._tighten_max(group, n)
                # excluding tiles holding at most k bombs leaves at least n - k
                max_omitted = self.max_in_subset(rest)
                if n > max_omitted:
                    self._tighten_min(group, n - max_omitted)
                # excluding tiles holding at least k bombs leaves at most n - k
                min_omitted = self.min_in_subset(rest)
                if n > min_omitted:
                    self._tighten_max(group, n - min_omitted)

    def max_in_subset(self, group: int) -> int:
        """Tightest known upper bound on bombs in `group`."""
        size = group.bit_count()
        known = self.max_bombs.get(group)
        smallest = size if known is None else known
        # a group of one or two tiles can't be usefully split
        if size <= 2 or group in self._max_resolved:
            return smallest

        for part in _proper_submasks(group):
            part_max = self.max_bombs.get(part)
            if part_max is None:
                continue
            total = part_max + self.max_in_subset(group & ~part)
            if total < smallest:
                smallest = total

        if known is None or smallest < known:
            self.max_bombs[group] = smallest
        self._max_resolved.add(group)
        return smallest

    def min_in_subset(self, group: int) -> int:
        """Tightest known lower bound on bombs in `group`."""
        size = group.bit_count()
        known = self.min_bombs.get(group)
        biggest = 0 if known is None else known
        if size <= 2 or group in self._min_resolved:
            return biggest

        for part in _proper_submasks(group):
            part_min = self.min_bombs.get(part)
            if part_min is None:
                continue
            total = part_min + self.min_in_subset(group & ~part)
            if total > biggest:
                biggest = total

        if known is None or biggest > known:
            self.min_bombs[group] = biggest
        self._min_resolved.add(group)
        return biggest

    def exact_groups(self) -> Iterator[Tuple[int, int]]:
        """Yield (group, bombs) for every group whose bounds have met."""
        for group, low in self.min_bombs.items():
            if self.max_bombs.get(group) == low:
                yield group, low


def get_non_trivial_actions(
    board: BoardView,
    config: Optional[SolverConfig] = None,
    bounds: Optional[SubsetBounds] = None,
) -> List[Action]:
    """
    Derive certain moves by combining the constraints of neighbouring tiles.

    For each numbered tile and each proper group of its covered neighbours:
    if the group can hold so few bombs that the remaining tiles must all be
    bombs, flag them; if the group must hold every required bomb, uncover
    the remaining tiles.
    """
    if bounds is None:
        config = config or SolverConfig()
        bounds = SubsetBounds(board, passes=config.bound_passes)

    output: List[Action] = []
    for _, n, covered in bounds.constraints:
        covered_mask = bounds.mask_of(covered)
        for group in _proper_submasks(covered_mask):
            rest = covered_mask & ~group
            if bounds.max_in_subset(group) + rest.bit_count() == n:
                output.extend(Action.flag(p) for p in bounds.positions_of(rest))
            if bounds.min_in_subset(group) == n:
                output.extend(Action.uncover(p) for p in bounds.positions_of(rest))
    return deduplicate(output)
