"""
Quickstart example for the Minesweeper agent.

This script demonstrates basic usage of the solver.
"""

import logging

from minesweeper_agent import (
    GameStatus,
    GridBoard,
    Minesweeper,
    MinesweeperSolver,
    format_board_view,
    run_solver_many_games,
)


def main():
    logging.basicConfig(level=logging.INFO)

    print("=" * 60)
    print("Minesweeper Agent - Quickstart Example")
    print("=" * 60)

    # Example 1: Ask for the next move on a hand-written board
    print("\n1. Next moves on a small board...")
    print("-" * 60)

    board = GridBoard.from_rows(
        [
            ".....",
            "11211",
            "00000",
        ],
        num_bombs_left=2,
    )
    print(format_board_view(board))
    solver = MinesweeperSolver()
    for action in solver.solve(board):
        print(f"{action.kind.name:8s} {tuple(action.pos)}")

    # Example 2: Play a single game
    print("\n2. Playing a single Intermediate game (16x16, 40 mines)...")
    print("-" * 60)

    game = Minesweeper(16, 16, 40, seed=7)
    guesses = 0
    while game.status is GameStatus.ONGOING:
        actions, diagnostics = solver.solve_with_diagnostics(game.snapshot())
        if diagnostics.phase.endswith("guess"):
            guesses += 1
        for action in actions:
            if game.apply_action(action) is not GameStatus.ONGOING:
                break

    print(f"Result: {game.status.name}")
    print(f"Guesses: {guesses}")
    print(format_board_view(game))

    # Example 3: Averages over many games
    print("\n3. Running 20 Expert games...")
    print("-" * 60)

    results = run_solver_many_games(30, 16, 99, runs=20, seed=0)
    print(f"Average guesses per game: {results['avg_guesses']:.1f}")
    print(f"Average largest boundary: {results['avg_max_boundary']:.1f}")
    print(f"Average solve time: {results['avg_solve_time']:.2f}s")

    print("\n" + "=" * 60)
    print("Done!")
    print("=" * 60)


if __name__ == "__main__":
    main()
