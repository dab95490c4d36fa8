"""Minesweeper agent: certain moves first, the best guess otherwise."""

import logging
import time
from dataclasses import dataclass
from typing import Callable, List, Optional, Tuple

from .config import SolverConfig
from .deductions import SubsetBounds, get_non_trivial_actions, get_trivial_actions
from .guesses import make_guess
from .types import Action, BoardView
from .utils import all_covered, deduplicate

logger = logging.getLogger(__name__)


@dataclass
class SolverDiagnostics:
    """
    What one `solve` call did.

    Attributes:
        phase: Stage that produced the actions: "opening", "trivial",
            "subset_bounds", "exact_guess", "fallback_guess", "blind_guess"
            or "none".
        boundary_size: Covered tiles touching a revealed number (guesses only).
        non_boundary_size: Remaining covered tiles (guesses only).
        scenario_count: Legal boundary scenarios (exact guesses only).
        best_boundary_safety: Safety of the safest boundary tile.
        non_boundary_safety: Safety of a non-boundary tile.
        stored_bounds: Lower plus upper bounds held by the subset-bound engine.
        elapsed: Wall-clock seconds spent in the call.
    """

    phase: str = "none"
    boundary_size: int = 0
    non_boundary_size: int = 0
    scenario_count: int = 0
    best_boundary_safety: Optional[float] = None
    non_boundary_safety: Optional[float] = None
    stored_bounds: int = 0
    elapsed: float = 0.0


class MinesweeperSolver:
    """
    Stateless Minesweeper agent.

    Each call looks only at the board it is given and returns a list of
    actions, trying in order:
    1. Trivial deduction: single-tile rules (plus the opening move)
    2. Subset bounds: multi-tile inference on bomb-count bounds
    3. Guess: exact scenario weighting, or a bound-density fallback for
       very large boundaries
    """

    def __init__(
        self,
        config: Optional[SolverConfig] = None,
        observer: Optional[Callable[[SolverDiagnostics], None]] = None,
    ) -> None:
        """
        Args:
            config: Solver tunables; defaults to `SolverConfig()`.
            observer: Called with the diagnostics of every `solve` call.
        """
        self.config: SolverConfig = config or SolverConfig()
        self.observer = observer

    def solve(self, board: BoardView) -> List[Action]:
        """
        Return the next actions for `board`, possibly none.

        Raises:
            InconsistentBoardError: If the visible numbers can't be satisfied.
        """
        actions, _ = self.solve_with_diagnostics(board)
        return actions

    def solve_with_diagnostics(
        self, board: BoardView
    ) -> Tuple[List[Action], SolverDiagnostics]:
        start = time.perf_counter()
        actions, diagnostics = self._solve(board)
        diagnostics.elapsed = time.perf_counter() - start

        logger.debug(
            "%s produced %d action(s) in %.3fs",
            diagnostics.phase,
            len(actions),
            diagnostics.elapsed,
        )
        if self.observer is not None:
            self.observer(diagnostics)
        return actions, diagnostics

    def _solve(self, board: BoardView) -> Tuple[List[Action], SolverDiagnostics]:
        diagnostics = SolverDiagnostics()

        # ----- Trivial deduction -----
        actions = get_trivial_actions(board, self.config)
        if actions:
            untouched = len(all_covered(board)) == board.width * board.height
            diagnostics.phase = "opening" if untouched else "trivial"
            return deduplicate(actions), diagnostics

        # ----- Subset bounds -----
        bounds = SubsetBounds(board, passes=self.config.bound_passes)
        diagnostics.stored_bounds = len(bounds.min_bombs) + len(bounds.max_bombs)
        actions = get_non_trivial_actions(board, bounds=bounds)
        if actions:
            diagnostics.phase = "subset_bounds"
            return deduplicate(actions), diagnostics

        # ----- Guess -----
        guess = make_guess(board, self.config, bounds)
        diagnostics.phase = guess.phase
        diagnostics.boundary_size = guess.boundary_size
        diagnostics.non_boundary_size = guess.non_boundary_size
        if guess.report is not None:
            diagnostics.scenario_count = guess.report.scenario_count
            _, best = guess.report.best_boundary_tile()
            diagnostics.best_boundary_safety = float(best)
            if guess.report.non_boundary_safety is not None:
                diagnostics.non_boundary_safety = float(guess.report.non_boundary_safety)

        if guess.action is None:
            return [], diagnostics
        return [guess.action], diagnostics


def solve(board: BoardView, config: Optional[SolverConfig] = None) -> List[Action]:
    """Shorthand for `MinesweeperSolver(config).solve(board)`."""
    return MinesweeperSolver(config).solve(board)
