"""Analysis and benchmarking tools for the Minesweeper agent."""

import logging
from collections import defaultdict
from typing import Dict, List, Optional, Tuple

import matplotlib.pyplot as plt
import numpy as np

from .board import state_glyph
from .config import SolverConfig
from .engine import GameStatus, Minesweeper
from .solver import MinesweeperSolver
from .types import BoardView, Position
from .utils import format_grid

logger = logging.getLogger(__name__)

PHASES = (
    "opening",
    "trivial",
    "subset_bounds",
    "exact_guess",
    "fallback_guess",
    "blind_guess",
)
GUESS_PHASES = ("exact_guess", "fallback_guess", "blind_guess")

DIFFICULTY_LEVELS: Dict[str, Tuple[int, int, int]] = {
    "beginner": (9, 9, 10),
    "intermediate": (16, 16, 40),
    "expert": (30, 16, 99),
}


def format_board_view(board: BoardView, *, show_coords: bool = True) -> str:
    """
    Format any board view as a human-readable grid.

    Args:
        board: Board to display.
        show_coords: If True, include coordinate labels and a header.

    Returns:
        A text grid using the text-board glyphs ('.' covered, 'F' flagged,
        digits for revealed counts, 'X', '!' and '?' after a loss).
    """
    cells = [
        [state_glyph(board.tile_state(Position(col, row))) for col in range(board.width)]
        for row in range(board.height)
    ]
    return format_grid(cells, show_coords)


def run_solver_single_game(
    width: int,
    height: int,
    mines_count: int,
    mines_generation_algorithm: str = "safe_neighborhood_rule",
    *,
    seed: Optional[int] = None,
    config: Optional[SolverConfig] = None,
    show_boards: bool = False,
) -> Dict[str, object]:
    """
    Play one game with the agent until it ends.

    Args:
        width: Board width.
        height: Board height.
        mines_count: Total number of mines on the board.
        mines_generation_algorithm: Mine placement rule
            ("safe_first_action_rule" or "safe_neighborhood_rule").
        seed: Seed of the mine layout.
        config: Solver tunables.
        show_boards: If True, print the final visible board and the layout.

    Returns:
        Metrics of the game:
        - actions_<phase>: actions produced by each solver phase
        - guesses: number of guesses made
        - solver_calls: number of solve calls
        - max_boundary: largest boundary seen when guessing
        - total_scenarios: legal scenarios counted over all exact guesses
        - solve_time: seconds spent inside the solver
        - revealed_tiles: safe tiles revealed when the game ended
        - status: final GameStatus name
    """
    game = Minesweeper(
        width, height, mines_count, mines_generation_algorithm, seed=seed
    )
    solver = MinesweeperSolver(config)

    metrics: Dict[str, float] = {f"actions_{phase}": 0 for phase in PHASES}
    for key in ("guesses", "solver_calls", "max_boundary", "total_scenarios"):
        metrics[key] = 0
    metrics["solve_time"] = 0.0

    while game.status is GameStatus.ONGOING:
        actions, diagnostics = solver.solve_with_diagnostics(game.snapshot())
        if not actions:
            # nothing covered is left but the game did not register a win
            raise RuntimeError("Solver returned no action on an ongoing game.")

        metrics["solver_calls"] += 1
        metrics[f"actions_{diagnostics.phase}"] += len(actions)
        metrics["solve_time"] += diagnostics.elapsed
        if diagnostics.phase in GUESS_PHASES:
            metrics["guesses"] += 1
            metrics["max_boundary"] = max(
                metrics["max_boundary"], diagnostics.boundary_size
            )
            metrics["total_scenarios"] += diagnostics.scenario_count

        for action in actions:
            if game.apply_action(action) is not GameStatus.ONGOING:
                break

    snapshot = game.snapshot()
    metrics["revealed_tiles"] = sum(
        1
        for col in range(width)
        for row in range(height)
        if snapshot.tile_state(Position(col, row)).revealed_count is not None
    )

    if show_boards:
        print("Underlying board (mines visible):")
        print(game.format_board(reveal_all=True))
        print()
        print("Final visible board:")
        print(format_board_view(snapshot))
        print()
        print(f"Finished with status {game.status.name}.")

    out: Dict[str, object] = dict(metrics)
    out["status"] = game.status.name
    return out


def run_solver_many_games(
    width: int,
    height: int,
    mines_count: int,
    runs: int,
    mines_generation_algorithm: str = "safe_neighborhood_rule",
    *,
    seed: Optional[int] = None,
    config: Optional[SolverConfig] = None,
) -> Dict[str, float]:
    """
    Play many games and average their numeric metrics.

    Game `i` uses seed `seed + i` when a seed is given, so a batch is
    reproducible.

    Returns:
        Mean of every numeric metric of `run_solver_single_game`, prefixed
        with "avg_".

    Raises:
        ValueError: If runs is not positive.
    """
    if runs <= 0:
        raise ValueError("runs must be positive.")

    columns: Dict[str, List[float]] = defaultdict(list)
    for i in range(runs):
        game_seed = None if seed is None else seed + i
        result = run_solver_single_game(
            width,
            height,
            mines_count,
            mines_generation_algorithm,
            seed=game_seed,
            config=config,
        )
        for key, value in result.items():
            if isinstance(value, (int, float)) and not isinstance(value, bool):
                columns[key].append(float(value))

    logger.info("Played %d games on %dx%d with %d mines", runs, width, height, mines_count)
    return {f"avg_{key}": float(np.mean(values)) for key, values in columns.items()}


def run_solver_difficulty_analysis(
    runs: int,
    mines_generation_algorithm: str = "safe_neighborhood_rule",
    *,
    seed: Optional[int] = None,
    config: Optional[SolverConfig] = None,
    levels: Optional[Dict[str, Tuple[int, int, int]]] = None,
    show: bool = True,
) -> Dict[str, Dict[str, float]]:
    """
    Run the agent on standard difficulty levels and plot summaries.

    Standard difficulty levels:
        - Beginner: 9x9, 10 mines
        - Intermediate: 16x16, 40 mines
        - Expert: 30x16, 99 mines

    Args:
        runs: Games per level.
        mines_generation_algorithm: Mine placement rule.
        seed: Base seed for every level.
        config: Solver tunables.
        levels: Level name -> (width, height, mines); defaults to the
            standard levels.
        show: If True, display the figures with `plt.show()`; otherwise
            they are left open for the caller.

    Returns:
        Mapping from level name to the averages of `run_solver_many_games`.
    """
    levels = levels or DIFFICULTY_LEVELS

    results: Dict[str, Dict[str, float]] = {}
    for level, (w, h, m) in levels.items():
        results[level] = run_solver_many_games(
            w, h, m, runs, mines_generation_algorithm, seed=seed, config=config
        )

    level_names = list(levels.keys())
    x = np.arange(len(level_names))

    # 1) Actions per phase, stacked
    plt.figure()  # type: ignore[misc]
    bottom = np.zeros(len(level_names))
    for phase in PHASES:
        values = np.array([results[n][f"avg_actions_{phase}"] for n in level_names])
        plt.bar(x, values, bottom=bottom, label=phase)  # type: ignore[misc]
        bottom += values
    plt.xticks(x, level_names)  # type: ignore[misc]
    plt.ylabel("Average actions")  # type: ignore[misc]
    plt.title("Average actions by solver phase (per game)")  # type: ignore[misc]
    plt.legend()  # type: ignore[misc]
    plt.tight_layout()

    # 2) Guesses per game
    plt.figure()  # type: ignore[misc]
    plt.bar(x, [results[n]["avg_guesses"] for n in level_names])  # type: ignore[misc]
    plt.xticks(x, level_names)  # type: ignore[misc]
    plt.ylabel("Average guesses")  # type: ignore[misc]
    plt.title("Average guesses by difficulty level")  # type: ignore[misc]
    plt.tight_layout()

    # 3) Solve time per game
    plt.figure()  # type: ignore[misc]
    plt.bar(x, [results[n]["avg_solve_time"] for n in level_names])  # type: ignore[misc]
    plt.xticks(x, level_names)  # type: ignore[misc]
    plt.ylabel("Average solve time (s)")  # type: ignore[misc]
    plt.title("Average time spent in the solver (per game)")  # type: ignore[misc]
    plt.tight_layout()

    if show:
        plt.show()  # type: ignore[misc]

    return results
