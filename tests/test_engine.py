"""Tests for the Minesweeper game engine."""

import pytest

from minesweeper_agent import Action, GameStatus, Minesweeper, Position, TileKind, TileState


class TestConstruction:
    @pytest.mark.parametrize(
        "args",
        [
            (0, 5, 1),
            (5, -1, 1),
            (5, 5, -1),
            (2, 2, 4),
        ],
    )
    def test_rejects_invalid_parameters(self, args):
        with pytest.raises(ValueError):
            Minesweeper(*args)

    def test_rejects_unknown_algorithm(self):
        with pytest.raises(ValueError):
            Minesweeper(5, 5, 3, "anywhere")

    def test_mines_that_cannot_fit_the_safe_zone(self):
        game = Minesweeper(3, 3, 8, "safe_neighborhood_rule", seed=0)
        with pytest.raises(ValueError):
            game.apply_action(Action.uncover(Position(1, 1)))


class TestMinePlacement:
    def test_first_uncover_opens_a_region(self):
        for seed in range(5):
            game = Minesweeper(9, 9, 10, seed=seed)
            game.apply_action(Action.uncover(Position(4, 4)))

            assert len(game.mines) == 10
            assert game.tile_state(Position(4, 4)) == TileState.safe(0)
            assert not set(game.neighbours(Position(4, 4))) & game.mines

    def test_safe_first_action_rule(self):
        game = Minesweeper(3, 3, 8, "safe_first_action_rule", seed=3)
        status = game.apply_action(Action.uncover(Position(0, 0)))

        assert status is GameStatus.WON
        assert Position(0, 0) not in game.mines
        assert game.tile_state(Position(0, 0)) == TileState.safe(3)

    def test_same_seed_same_layout(self):
        a = Minesweeper(16, 16, 40, seed=11)
        b = Minesweeper(16, 16, 40, seed=11)
        for game in (a, b):
            game.apply_action(Action.uncover(Position(2, 8)))
        assert a.mines == b.mines

    def test_counts(self):
        game = Minesweeper.from_mine_positions(3, 3, [Position(0, 0), Position(2, 0)])
        game.apply_action(Action.uncover(Position(1, 0)))
        game.apply_action(Action.uncover(Position(1, 1)))
        assert game.tile_state(Position(1, 0)) == TileState.safe(2)
        assert game.tile_state(Position(1, 1)) == TileState.safe(2)


class TestMoves:
    def test_flood_fill_wins_at_once(self):
        game = Minesweeper.from_mine_positions(3, 3, [Position(0, 0)])
        status = game.apply_action(Action.uncover(Position(2, 2)))

        assert status is GameStatus.WON
        assert game.snapshot().to_rows() == [".10", "110", "000"]

    def test_flood_fill_stops_at_numbers(self):
        game = Minesweeper.from_mine_positions(5, 1, [Position(0, 0)])
        game.apply_action(Action.uncover(Position(4, 0)))
        assert game.snapshot().to_rows() == [".1000"]
        assert game.status is GameStatus.WON

    def test_flag_toggles_and_counts(self):
        game = Minesweeper.from_mine_positions(4, 1, [Position(0, 0)])
        pos = Position(0, 0)

        assert game.apply_action(Action.flag(pos)) is GameStatus.ONGOING
        assert game.tile_state(pos).kind is TileKind.FLAGGED
        assert game.num_bombs_left() == 0

        game.apply_action(Action.flag(pos))
        assert game.tile_state(pos).kind is TileKind.COVERED
        assert game.num_bombs_left() == 1

    def test_uncovering_a_flag_does_nothing(self):
        game = Minesweeper.from_mine_positions(4, 1, [Position(0, 0)])
        game.apply_action(Action.flag(Position(0, 0)))
        assert game.apply_action(Action.uncover(Position(0, 0))) is GameStatus.ONGOING
        assert game.tile_state(Position(0, 0)).kind is TileKind.FLAGGED

    def test_loss_reveals_the_board(self):
        game = Minesweeper.from_mine_positions(5, 1, [Position(0, 0), Position(4, 0)])
        game.apply_action(Action.flag(Position(1, 0)))
        status = game.apply_action(Action.uncover(Position(0, 0)))

        assert status is GameStatus.LOST
        assert game.tile_state(Position(0, 0)).kind is TileKind.EXPLODED
        assert game.tile_state(Position(1, 0)).kind is TileKind.MISFLAGGED
        assert game.tile_state(Position(2, 0)).kind is TileKind.COVERED
        assert game.tile_state(Position(4, 0)).kind is TileKind.REVEALED_BOMB
        assert game.snapshot().to_rows() == ["!?..X"]

    def test_moves_after_the_end_are_ignored(self):
        game = Minesweeper.from_mine_positions(2, 1, [Position(0, 0)])
        game.apply_action(Action.uncover(Position(0, 0)))
        assert game.apply_action(Action.uncover(Position(1, 0))) is GameStatus.LOST
        assert game.tile_state(Position(1, 0)).kind is TileKind.COVERED

    def test_rejects_positions_off_the_board(self):
        game = Minesweeper(4, 4, 2, seed=0)
        with pytest.raises(ValueError):
            game.apply_action(Action.uncover(Position(4, 0)))

    def test_reset_keeps_the_mines(self):
        game = Minesweeper(9, 9, 10, seed=5)
        game.apply_action(Action.uncover(Position(2, 4)))
        mines = game.mines

        game.reset()
        assert game.status is GameStatus.ONGOING
        assert game.mines == mines
        assert game.snapshot().to_rows() == ["." * 9] * 9


def test_format_board():
    game = Minesweeper.from_mine_positions(2, 1, [Position(0, 0)])
    assert game.format_board(show_coords=False) == " .  ."
    assert game.format_board(reveal_all=True, show_coords=False) == " M  1"
    assert "0 |" in game.format_board()
