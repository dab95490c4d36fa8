"""
Minesweeper Agent

A stateless Minesweeper solver: given the visible board, it returns the next
actions using, in order:
- Trivial deduction: single-tile rules and the opening move
- Subset bounds: multi-tile inference on bomb-count bounds
- Exact guessing: enumeration and weighting of every legal boundary scenario
- Fallback guessing: bound densities when the boundary is too large
"""

from .types import (
    Action,
    ActionType,
    BoardView,
    InconsistentBoardError,
    Position,
    TileKind,
    TileState,
)
from .board import GridBoard
from .config import SolverConfig
from .deductions import SubsetBounds, get_non_trivial_actions, get_trivial_actions
from .guesses import SafetyReport, make_guess
from .solver import MinesweeperSolver, SolverDiagnostics, solve
from .engine import GameStatus, Minesweeper
from .analysis import (
    format_board_view,
    run_solver_single_game,
    run_solver_many_games,
    run_solver_difficulty_analysis,
)

__version__ = "1.0.0"

__all__ = [
    # Board model
    "Action",
    "ActionType",
    "BoardView",
    "GridBoard",
    "Position",
    "TileKind",
    "TileState",
    "InconsistentBoardError",
    # Solver
    "MinesweeperSolver",
    "SolverConfig",
    "SolverDiagnostics",
    "solve",
    # Solver stages
    "get_trivial_actions",
    "get_non_trivial_actions",
    "SubsetBounds",
    "make_guess",
    "SafetyReport",
    # Game engine
    "Minesweeper",
    "GameStatus",
    # Analysis functions
    "format_board_view",
    "run_solver_single_game",
    "run_solver_many_games",
    "run_solver_difficulty_analysis",
]
