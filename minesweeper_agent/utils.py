"""Utility functions shared by the Minesweeper agent modules."""

from typing import Dict, Iterable, Iterator, List, Tuple, TypeVar

from .types import BoardView, Position, TileKind

T = TypeVar("T")

# Module-level cache: (width, height) -> {Position: (Position, ...), ...}
_NEIGHBORHOODS_CACHE: Dict[
    Tuple[int, int],
    Dict[Position, Tuple[Position, ...]]
] = {}


def get_neighborhoods(
    width: int, height: int
) -> Dict[Position, Tuple[Position, ...]]:
    """
    Precompute and cache 8-connected neighbours for every tile in a grid.

    Args:
        width: Grid width (number of columns). Must be positive.
        height: Grid height (number of rows). Must be positive.

    Returns:
        Mapping from each Position to a tuple of its neighbours, clipped at
        the grid edges, in column-major order.

    Raises:
        ValueError: If width or height is non-positive.
    """
    if width <= 0 or height <= 0:
        raise ValueError("width and height must be positive.")

    key = (width, height)
    cached = _NEIGHBORHOODS_CACHE.get(key)
    if cached is not None:
        return cached

    neighborhoods: Dict[Position, Tuple[Position, ...]] = {}
    for col in range(width):
        for row in range(height):
            nbrs: List[Position] = []
            for dc in (-1, 0, 1):
                for dr in (-1, 0, 1):
                    if dc == 0 and dr == 0:
                        continue
                    nc, nr = col + dc, row + dr
                    if 0 <= nc < width and 0 <= nr < height:
                        nbrs.append(Position(nc, nr))
            neighborhoods[Position(col, row)] = tuple(nbrs)

    _NEIGHBORHOODS_CACHE[key] = neighborhoods
    return neighborhoods


def deduplicate(items: Iterable[T]) -> List[T]:
    """Drop repeated values, keeping the first occurrence of each."""
    seen = set()
    out: List[T] = []
    for item in items:
        if item in seen:
            continue
        seen.add(item)
        out.append(item)
    return out


# -------------------------------------------------------------------------
# Board view helpers
# -------------------------------------------------------------------------


def all_positions(board: BoardView) -> Iterator[Position]:
    """Yield every position of a board in column-major order."""
    for col in range(board.width):
        for row in range(board.height):
            yield Position(col, row)


def covered_neighbours(board: BoardView, pos: Position) -> List[Position]:
    return [n for n in board.neighbours(pos) if board.tile_state(n).is_covered]


def num_flagged_around(board: BoardView, pos: Position) -> int:
    return sum(1 for n in board.neighbours(pos) if board.tile_state(n).is_flagged)


def has_revealed_neighbour(board: BoardView, pos: Position) -> bool:
    return any(
        board.tile_state(n).kind is TileKind.REVEALED_SAFE
        for n in board.neighbours(pos)
    )


def numbered_tiles(board: BoardView) -> Iterator[Tuple[Position, int]]:
    """Yield (position, count) for every revealed safe tile, column-major."""
    for pos in all_positions(board):
        count = board.tile_state(pos).revealed_count
        if count is not None:
            yield pos, count


def all_covered(board: BoardView) -> List[Position]:
    return [pos for pos in all_positions(board) if board.tile_state(pos).is_covered]


def format_grid(cells: List[List[str]], show_coords: bool = True) -> str:
    """
    Render rows of single-character cells as a text grid.

    Args:
        cells: cells[row][col] glyphs.
        show_coords: If True, add column labels on top and row labels left.
    """
    width = len(cells[0]) if cells else 0
    lines: List[str] = []
    if show_coords:
        lines.append("   " + " ".join(f"{x:2d}" for x in range(width)))
        lines.append("   " + "-" * (3 * width - 1))

    for y, row in enumerate(cells):
        line = " ".join(f" {c}" for c in row)
        lines.append(f"{y:2d} |" + line if show_coords else line)
    return "\n".join(lines)
