"""Tests for the certain-move stages: single-tile rules and subset bounds."""

import pytest

from minesweeper_agent import (
    Action,
    GridBoard,
    InconsistentBoardError,
    Position,
    SolverConfig,
    SubsetBounds,
    get_non_trivial_actions,
    get_trivial_actions,
)


class TestTrivialActions:
    def test_opening_move_on_untouched_board(self):
        board = GridBoard.from_rows(["." * 9] * 9, num_bombs_left=10)
        assert get_trivial_actions(board) == [Action.uncover(Position(2, 4))]

    def test_opening_column_is_clamped_to_narrow_boards(self):
        board = GridBoard.from_rows(["..", "..", ".."], num_bombs_left=1)
        assert get_trivial_actions(board) == [Action.uncover(Position(1, 1))]

    def test_opening_column_is_configurable(self):
        board = GridBoard.from_rows(["....", "...."], num_bombs_left=1)
        config = SolverConfig(opening_column=0)
        assert get_trivial_actions(board, config) == [Action.uncover(Position(0, 1))]

    def test_no_bombs_left_uncovers_every_covered_tile(self):
        board = GridBoard.from_rows(["1F.", "11."], num_bombs_left=0)
        assert get_trivial_actions(board) == [
            Action.uncover(Position(2, 0)),
            Action.uncover(Position(2, 1)),
        ]

    def test_flags_when_every_covered_neighbour_is_needed(self):
        board = GridBoard.from_rows([".1", "11"], num_bombs_left=1)
        assert get_trivial_actions(board) == [Action.flag(Position(0, 0))]

    def test_uncovers_around_satisfied_tiles(self):
        board = GridBoard.from_rows([".F..", "11.."], num_bombs_left=3)
        actions = get_trivial_actions(board)

        assert set(actions) == {
            Action.uncover(Position(0, 0)),
            Action.uncover(Position(2, 0)),
            Action.uncover(Position(2, 1)),
        }
        assert len(actions) == len(set(actions))

    def test_nothing_certain_on_one_two_one(self, one_two_one):
        assert get_trivial_actions(one_two_one) == []


class TestSubsetBounds:
    def test_one_two_one_is_solved(self, one_two_one):
        actions = get_non_trivial_actions(one_two_one)

        assert set(actions) == {
            Action.uncover(Position(0, 0)),
            Action.uncover(Position(2, 0)),
            Action.uncover(Position(4, 0)),
            Action.flag(Position(1, 0)),
            Action.flag(Position(3, 0)),
        }
        assert len(actions) == len(set(actions))

    def test_bounds_on_one_two_one(self, one_two_one):
        bounds = SubsetBounds(one_two_one)

        assert bounds.tiles == [Position(c, 0) for c in range(5)]
        # the 2 sees exactly two bombs, the 1s at the ends one each
        assert bounds.min_in_subset(bounds.mask_of([Position(1, 0)])) == 1
        assert bounds.min_in_subset(bounds.mask_of([Position(3, 0)])) == 1
        group = bounds.mask_of([Position(0, 0), Position(1, 0)])
        assert bounds.min_in_subset(group) == bounds.max_in_subset(group) == 1
        assert (group, 1) in set(bounds.exact_groups())

    def test_bounds_are_sound(self, two_scenarios):
        bounds = SubsetBounds(two_scenarios(2))
        a, c, e = Position(0, 0), Position(2, 0), Position(4, 0)

        # (2, 0) alone, or (0, 0) and (4, 0): every tile can be either
        for pos in (a, c, e):
            mask = bounds.mask_of([pos])
            assert bounds.min_in_subset(mask) == 0
            assert bounds.max_in_subset(mask) == 1
        assert get_non_trivial_actions(two_scenarios(2), bounds=bounds) == []

    def test_reuses_given_bounds(self, one_two_one):
        bounds = SubsetBounds(one_two_one, passes=3)
        assert set(get_non_trivial_actions(one_two_one, bounds=bounds)) == set(
            get_non_trivial_actions(one_two_one)
        )

    def test_rejects_zero_passes(self, one_two_one):
        with pytest.raises(ValueError):
            SubsetBounds(one_two_one, passes=0)

    def test_over_flagged_tile_is_inconsistent(self):
        board = GridBoard.from_rows(["1F", "F."], num_bombs_left=1)
        with pytest.raises(InconsistentBoardError):
            SubsetBounds(board)

    def test_too_few_covered_neighbours_is_inconsistent(self):
        board = GridBoard.from_rows(["3.", "11"], num_bombs_left=3)
        with pytest.raises(InconsistentBoardError):
            get_non_trivial_actions(board)
