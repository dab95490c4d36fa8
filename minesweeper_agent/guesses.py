"""Best-odds guessing when no certain move exists."""

import logging
import time
from dataclasses import dataclass
from fractions import Fraction
from typing import Dict, List, Optional, Sequence, Tuple

from .boundary import get_boundary_constraints, sensible_ordering, split_covered
from .config import SolverConfig
from .deductions import SubsetBounds
from .enumeration import ScenarioTally, tally_scenarios
from .types import Action, BoardView, InconsistentBoardError, Position
from .utils import covered_neighbours

logger = logging.getLogger(__name__)


def case_weight(omitted: int, non_boundary: int, min_omitted: int) -> Fraction:
    """
    Relative likelihood of a scenario leaving `omitted` bombs off the boundary.

    The likelihood is proportional to C(non_boundary, omitted), the number of
    ways to hide those bombs among the non-boundary tiles. Every weight is
    divided by C(non_boundary, min_omitted), which leaves the telescoping
    product prod_{i=min_omitted+1}^{omitted} (non_boundary - i + 1) / i.
    """
    if omitted > non_boundary:
        return Fraction(0)
    if omitted < min_omitted:
        raise ValueError("omitted must not be smaller than min_omitted.")

    weight = Fraction(1)
    for i in range(min_omitted + 1, omitted + 1):
        weight *= Fraction(non_boundary - i + 1, i)
    return weight


@dataclass
class SafetyReport:
    """
    Exact safety probabilities derived from a scenario tally.

    Attributes:
        boundary: Boundary tiles in enumeration (bit) order.
        tile_safety: Probability that each boundary tile is safe.
        non_boundary_safety: Probability that any one non-boundary tile is
            safe, or None when every covered tile is on the boundary.
        total_weight: Sum of scenario weights (relative units).
        scenario_count: Number of legal scenarios.
    """

    boundary: List[Position]
    tile_safety: List[Fraction]
    non_boundary_safety: Optional[Fraction]
    total_weight: Fraction
    scenario_count: int

    def safety_of(self, pos: Position) -> Fraction:
        return self.tile_safety[self.boundary.index(Position(*pos))]

    def best_boundary_tile(self) -> Tuple[Position, Fraction]:
        """Safest boundary tile; ties go to the smallest position."""
        pos, safety = min(
            zip(self.boundary, self.tile_safety), key=lambda t: (-t[1], t[0])
        )
        return pos, safety


def compute_safety(
    tally: ScenarioTally,
    boundary: Sequence[Position],
    total_left: int,
    non_boundary: int,
) -> SafetyReport:
    """
    Weight the tallied scenarios and turn them into per-tile safety.

    Raises:
        InconsistentBoardError: If the tally holds no scenario with weight.
    """
    bomb_counts = tally.bomb_counts()
    if not bomb_counts:
        raise InconsistentBoardError("No legal scenario to weight.")

    min_omitted = total_left - max(bomb_counts)
    weights: Dict[int, Fraction] = {
        k: case_weight(total_left - k, non_boundary, min_omitted) for k in bomb_counts
    }
    total_weight = sum(
        (tally.totals[k] * weights[k] for k in bomb_counts), Fraction(0)
    )
    if total_weight == 0:
        raise InconsistentBoardError("Legal scenarios carry no weight.")

    tile_safety: List[Fraction] = []
    for counts in tally.per_tile:
        unsafe = sum((counts[k] * weights[k] for k in bomb_counts), Fraction(0))
        tile_safety.append(1 - unsafe / total_weight)

    non_boundary_safety: Optional[Fraction] = None
    if non_boundary > 0:
        # expected share of the omitted bombs landing on any one tile
        unsafe = sum(
            (
                tally.totals[k] * weights[k] * Fraction(total_left - k, non_boundary)
                for k in bomb_counts
            ),
            Fraction(0),
        )
        non_boundary_safety = 1 - unsafe / total_weight

    return SafetyReport(
        boundary=list(boundary),
        tile_safety=tile_safety,
        non_boundary_safety=non_boundary_safety,
        total_weight=total_weight,
        scenario_count=tally.scenario_count,
    )


def least_expanding_tile(
    board: BoardView, covered: Sequence[Position], boundary: Sequence[Position]
) -> Position:
    """
    Pick the non-boundary tile that would add the fewest tiles to the boundary.

    Heuristic only: it keeps later enumerations small, it does not change the
    odds of this guess.
    """
    on_boundary = set(boundary)
    candidates = [pos for pos in covered if pos not in on_boundary]
    if not candidates:
        raise ValueError("Every covered tile is on the boundary.")
    return min(
        candidates,
        key=lambda pos: (
            sum(1 for n in covered_neighbours(board, pos) if n not in on_boundary),
            pos,
        ),
    )


def get_bound_density_guess(
    boundary: Sequence[Position], bounds: SubsetBounds
) -> Position:
    """
    Cheap guess for boundaries too large to enumerate.

    Each tile is scored by the highest bomb density among the groups
    containing it whose bombs are known exactly; the lowest score wins. Tiles
    without such a group rank last.
    """
    densities: Dict[Position, Fraction] = {}
    for group, bombs in bounds.exact_groups():
        density = Fraction(bombs, group.bit_count())
        for pos in bounds.positions_of(group):
            if pos not in densities or density > densities[pos]:
                densities[pos] = density

    scored = [pos for pos in boundary if pos in densities]
    if not scored:
        return min(boundary)
    return min(scored, key=lambda pos: (densities[pos], pos))


@dataclass
class Guess:
    """
    Outcome of the guessing stage.

    `phase` is one of "exact_guess", "fallback_guess", "blind_guess" or
    "none" (nothing left to uncover).
    """

    action: Optional[Action]
    phase: str
    boundary_size: int = 0
    non_boundary_size: int = 0
    report: Optional[SafetyReport] = None


def make_guess(
    board: BoardView,
    config: Optional[SolverConfig] = None,
    bounds: Optional[SubsetBounds] = None,
) -> Guess:
    """
    Choose the covered tile most likely to be safe.

    Raises:
        InconsistentBoardError: If the visible numbers admit no placement.
    """
    config = config or SolverConfig()
    covered, boundary = split_covered(board)

    if not covered:
        return Guess(None, "none")

    non_boundary = len(covered) - len(boundary)
    if not boundary:
        # nothing to reason about: any tile is as good as another
        return Guess(Action.uncover(covered[0]), "blind_guess", 0, non_boundary)

    if len(boundary) > config.max_exact_boundary:
        if bounds is None:
            bounds = SubsetBounds(board, passes=config.bound_passes)
        pos = get_bound_density_guess(boundary, bounds)
        logger.debug("Boundary of %d tiles too large, guessing %s", len(boundary), pos)
        return Guess(
            Action.uncover(pos), "fallback_guess", len(boundary), non_boundary
        )

    start = time.perf_counter()
    ordered = sensible_ordering(boundary)
    constraints = get_boundary_constraints(board, ordered)
    total_left = board.num_bombs_left()
    tally = tally_scenarios(constraints, len(ordered), total_left, non_boundary, config)
    report = compute_safety(tally, ordered, total_left, non_boundary)
    logger.debug(
        "Analysing legal scenarios took %.3fs (%d scenario(s) from %d tiles)",
        time.perf_counter() - start,
        report.scenario_count,
        len(ordered),
    )

    best_tile, best_safety = report.best_boundary_tile()
    if report.non_boundary_safety is None or best_safety > report.non_boundary_safety:
        logger.debug("Best odds on boundary: %.1f%% -> %s", 100 * best_safety, best_tile)
        pos = best_tile
    else:
        pos = least_expanding_tile(board, covered, boundary)
        logger.debug(
            "Best odds off boundary: %.1f%% -> %s",
            100 * report.non_boundary_safety,
            pos,
        )
    return Guess(
        Action.uncover(pos), "exact_guess", len(boundary), non_boundary, report
    )
