"""
Enumeration of every bomb placement on the boundary consistent with the numbers.

Boundary placements are bit-masks (bit i set means boundary[i] is a bomb).
Instead of testing all 2^L masks, the bits are cut into contiguous chunks;
each chunk keeps only the local assignments that could still extend to a
legal one, and chunks are merged pairwise, re-checking only the constraints
that straddle the two halves being merged.
"""

import logging
from collections import deque
from dataclasses import dataclass, field
from typing import Deque, Iterator, List, Optional, Sequence, Tuple

from .boundary import Constraint
from .config import SolverConfig
from .types import InconsistentBoardError

logger = logging.getLogger(__name__)


@dataclass
class _Bin:
    masks: List[int]
    assigned: int


@dataclass
class ScenarioTally:
    """
    Counts of legal boundary scenarios, grouped by number of boundary bombs.

    Attributes:
        boundary_size: Number of boundary tiles (L).
        totals: totals[k] is the number of scenarios with k boundary bombs.
        per_tile: per_tile[i][k] is the number of those scenarios where
            boundary tile i is a bomb.
    """

    boundary_size: int
    totals: List[int] = field(default_factory=list)
    per_tile: List[List[int]] = field(default_factory=list)

    def __post_init__(self) -> None:
        size = self.boundary_size + 1
        if not self.totals:
            self.totals = [0] * size
        if not self.per_tile:
            self.per_tile = [[0] * size for _ in range(self.boundary_size)]

    @property
    def scenario_count(self) -> int:
        return sum(self.totals)

    def bomb_counts(self) -> List[int]:
        """Boundary bomb counts that occur in at least one scenario."""
        return [k for k, count in enumerate(self.totals) if count > 0]

    def add(self, mask: int) -> None:
        k = mask.bit_count()
        self.totals[k] += 1
        while mask:
            low = mask & -mask
            self.per_tile[low.bit_length() - 1][k] += 1
            mask ^= low

    def restrict(self, low: int, high: int) -> None:
        """Drop every scenario whose bomb count is outside [low, high]."""
        for k in range(len(self.totals)):
            if low <= k <= high:
                continue
            self.totals[k] = 0
            for counts in self.per_tile:
                counts[k] = 0


def validate(bombs: int, constraints: Sequence[Constraint], assigned: int) -> bool:
    """
    Check a partial assignment.

    `assigned` marks the bits decided so far. A constraint whose tiles are all
    decided must hold exactly; otherwise it must not be exceeded yet and must
    still be reachable with its undecided tiles.
    """
    for required, subset in constraints:
        in_subset = (bombs & subset).bit_count()
        if assigned & subset == subset:
            if in_subset != required:
                return False
        elif in_subset > required:
            return False
        elif in_subset + (subset & ~assigned).bit_count() < required:
            return False
    return True


def validate_final(bombs: int, constraints: Sequence[Constraint]) -> bool:
    return all((bombs & subset).bit_count() == required for required, subset in constraints)


def chunk_layout(boundary_size: int, num_chunks: int) -> List[Tuple[int, int]]:
    """
    Split `boundary_size` bits into `num_chunks` contiguous (offset, size) chunks.

    Each chunk takes its share of the bits still left, rounded half up.
    """
    layout: List[Tuple[int, int]] = []
    offset = 0
    bits_left = boundary_size
    for chunk in range(num_chunks):
        size = int(bits_left / (num_chunks - chunk) + 0.5)
        layout.append((offset, size))
        offset += size
        bits_left -= size
    return layout


def _enumerate_chunk(
    offset: int, size: int, constraints: Sequence[Constraint]
) -> _Bin:
    chunk_mask = ((1 << size) - 1) << offset
    relevant = [c for c in constraints if c[1] & chunk_mask]

    masks = [0]
    assigned = 0
    for bit in range(offset, offset + size):
        flag = 1 << bit
        assigned |= flag
        # a constraint's status only changes when one of its own bits is set
        touching = [c for c in relevant if c[1] & flag]
        masks = [
            mask
            for base in masks
            for mask in (base, base | flag)
            if validate(mask, touching, assigned)
        ]
    return _Bin(masks, assigned)


def _merge(first: _Bin, second: _Bin, constraints: Sequence[Constraint]) -> _Bin:
    assigned = first.assigned | second.assigned
    straddling = [
        c for c in constraints if c[1] & first.assigned and c[1] & second.assigned
    ]
    masks = [
        m1 | m2
        for m1 in first.masks
        for m2 in second.masks
        if validate(m1 | m2, straddling, assigned)
    ]
    return _Bin(masks, assigned)


def _final_candidates(
    constraints: Sequence[Constraint],
    boundary_size: int,
    config: SolverConfig,
) -> Iterator[int]:
    if any(subset == 0 and required != 0 for required, subset in constraints):
        return

    num_chunks = config.num_chunks(boundary_size)
    bins: Deque[_Bin] = deque(
        _enumerate_chunk(offset, size, constraints)
        for offset, size in chunk_layout(boundary_size, num_chunks)
    )
    logger.debug(
        "Chunk candidates for %d tiles: %s",
        boundary_size,
        [len(b.masks) for b in bins],
    )

    while len(bins) > 2:
        second = bins.pop()
        first = bins.pop()
        bins.appendleft(_merge(first, second, constraints))

    first, second = bins
    straddling = [
        c for c in constraints if c[1] & first.assigned and c[1] & second.assigned
    ]
    for m1 in first.masks:
        for m2 in second.masks:
            bombs = m1 | m2
            if validate_final(bombs, straddling):
                yield bombs


def global_bomb_range(total_left: int, non_boundary: int) -> Tuple[int, int]:
    """
    Range of boundary bomb counts compatible with the global bomb count.

    The boundary can't hold more than every remaining bomb, and whatever it
    doesn't hold must fit on the non-boundary tiles.
    """
    return max(total_left - non_boundary, 0), total_left


def enumerate_scenarios(
    constraints: Sequence[Constraint],
    boundary_size: int,
    config: Optional[SolverConfig] = None,
    bomb_range: Optional[Tuple[int, int]] = None,
) -> List[int]:
    """
    Return every boundary mask satisfying all constraints, in ascending order.

    Args:
        constraints: (bombs required, mask) pairs over the boundary bits.
        boundary_size: Number of boundary tiles (mask width).
        config: Chunking parameters.
        bomb_range: Optional inclusive (low, high) bound on the number of
            bombs in a scenario, see `global_bomb_range`.
    """
    config = config or SolverConfig()
    scenarios = _final_candidates(constraints, boundary_size, config)
    if bomb_range is not None:
        low, high = bomb_range
        scenarios = (m for m in scenarios if low <= m.bit_count() <= high)
    return sorted(scenarios)


def tally_scenarios(
    constraints: Sequence[Constraint],
    boundary_size: int,
    total_left: int,
    non_boundary: int,
    config: Optional[SolverConfig] = None,
) -> ScenarioTally:
    """
    Count the legal scenarios by bomb count without keeping the masks.

    Raises:
        InconsistentBoardError: If no scenario satisfies the constraints and
            the global bomb count.
    """
    config = config or SolverConfig()
    tally = ScenarioTally(boundary_size)
    for bombs in _final_candidates(constraints, boundary_size, config):
        tally.add(bombs)
    tally.restrict(*global_bomb_range(total_left, non_boundary))

    if tally.scenario_count == 0:
        raise InconsistentBoardError(
            f"No legal bomb placement for a boundary of {boundary_size} tiles "
            f"with {total_left} bombs left and {non_boundary} other covered tiles."
        )
    return tally
