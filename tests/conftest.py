"""Shared fixtures for the Minesweeper agent tests."""

import matplotlib

matplotlib.use("Agg")

import pytest

from minesweeper_agent import GridBoard, MinesweeperSolver


@pytest.fixture
def solver():
    return MinesweeperSolver()


@pytest.fixture
def one_two_one():
    """Classic 1-2-1 pattern: bombs under the two 1s, safe under the 2."""
    return GridBoard.from_rows(
        [
            ".....",
            "11211",
            "00000",
        ],
        num_bombs_left=2,
    )


@pytest.fixture
def two_scenarios():
    """
    Two legal boundary placements with different bomb counts.

    Either (2, 0) alone is a bomb, or both (0, 0) and (4, 0) are; (5, 0) and
    (6, 0) are off the boundary.
    """

    def build(num_bombs_left: int) -> GridBoard:
        return GridBoard.from_rows([".1.1..."], num_bombs_left=num_bombs_left)

    return build
