"""Covered boundary extraction, spatial ordering and constraint encoding."""

from typing import Dict, Iterable, List, Sequence, Tuple

from .deductions import local_constraints
from .types import BoardView, Position
from .utils import all_covered, has_revealed_neighbour

# (bombs required, bit-mask of boundary tiles)
Constraint = Tuple[int, int]


def split_covered(board: BoardView) -> Tuple[List[Position], List[Position]]:
    """
    Return (all_covered, boundary) in column-major order.

    The boundary is every covered tile touching at least one revealed
    numbered tile.
    """
    covered = all_covered(board)
    boundary = [pos for pos in covered if has_revealed_neighbour(board, pos)]
    return covered, boundary


def _farthest_pair(tiles: Sequence[Position]) -> Tuple[Position, Position]:
    best = (tiles[0], tiles[1])
    best_distance = -1
    for i, tile in enumerate(tiles):
        for other in tiles[i + 1:]:
            pair = (tile, other) if tile <= other else (other, tile)
            distance = tile.squared_distance(other)
            if distance > best_distance or (distance == best_distance and pair < best):
                best, best_distance = pair, distance
    return best


def sensible_ordering(boundary: Sequence[Position]) -> List[Position]:
    """
    Order boundary tiles so that spatially close tiles get adjacent bits.

    Recursive bisection: take the two tiles farthest apart, split the rest by
    which of the two each tile is closer to, order both halves and join them,
    flipping the second half when that puts its nearer end at the seam.
    Constraints are local, so fewer of them straddle a chunk boundary during
    enumeration.
    """
    tiles = sorted(set(boundary))
    if len(tiles) <= 1:
        return tiles

    first, second = _farthest_pair(tiles)
    half1: List[Position] = []
    half2: List[Position] = []
    for tile in tiles:
        if tile.squared_distance(first) <= tile.squared_distance(second):
            half1.append(tile)
        else:
            half2.append(tile)

    ordered1 = sensible_ordering(half1)
    ordered2 = sensible_ordering(half2)

    tail = ordered1[-1]
    if tail.squared_distance(ordered2[0]) > tail.squared_distance(ordered2[-1]):
        ordered2.reverse()
    return ordered1 + ordered2


def positions_to_mask(positions: Iterable[Position], boundary: Sequence[Position]) -> int:
    """Encode a set of boundary positions as a bit-mask (bit i is boundary[i])."""
    index: Dict[Position, int] = {pos: i for i, pos in enumerate(boundary)}
    mask = 0
    for pos in positions:
        try:
            mask |= 1 << index[Position(*pos)]
        except KeyError:
            raise ValueError(f"Position {tuple(pos)} is not on the boundary.") from None
    return mask


def mask_to_positions(mask: int, boundary: Sequence[Position]) -> List[Position]:
    """Decode a bit-mask back to boundary positions, in boundary order."""
    if mask >> len(boundary):
        raise ValueError("Mask has bits beyond the boundary length.")
    return [pos for i, pos in enumerate(boundary) if mask >> i & 1]


def get_boundary_constraints(
    board: BoardView, boundary: Sequence[Position]
) -> List[Constraint]:
    """
    Encode every revealed numbered tile as (bombs required, mask) over `boundary`.

    Raises:
        InconsistentBoardError: If a numbered tile is over-flagged or needs
            more bombs than it has covered neighbours.
    """
    return [
        (required, positions_to_mask(covered, boundary))
        for _, required, covered in local_constraints(board)
    ]
