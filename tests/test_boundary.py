"""Tests for boundary extraction, ordering and constraint encoding."""

import random

import pytest

from minesweeper_agent import GridBoard, Position
from minesweeper_agent.boundary import (
    get_boundary_constraints,
    mask_to_positions,
    positions_to_mask,
    sensible_ordering,
    split_covered,
)


def test_split_covered(two_scenarios):
    covered, boundary = split_covered(two_scenarios(2))

    assert covered == [Position(c, 0) for c in (0, 2, 4, 5, 6)]
    assert boundary == [Position(0, 0), Position(2, 0), Position(4, 0)]


def test_split_covered_ignores_flags():
    board = GridBoard.from_rows(["1F", ".."], num_bombs_left=1)
    covered, boundary = split_covered(board)
    assert covered == [Position(0, 1), Position(1, 1)]
    assert boundary == covered


class TestSensibleOrdering:
    def test_line_keeps_its_order(self):
        line = [Position(c, 3) for c in range(8)]
        shuffled = line[:]
        random.Random(0).shuffle(shuffled)
        assert sensible_ordering(shuffled) == line

    def test_is_a_deterministic_permutation(self):
        tiles = [Position(c, r) for c in range(5) for r in range(4) if (c + r) % 3]
        shuffled = tiles[:]
        random.Random(1).shuffle(shuffled)

        ordered = sensible_ordering(tiles)
        assert sorted(ordered) == sorted(tiles)
        assert sensible_ordering(shuffled) == ordered

    def test_small_inputs(self):
        assert sensible_ordering([]) == []
        assert sensible_ordering([Position(1, 1)]) == [Position(1, 1)]

    def test_neighbours_stay_close(self):
        # an L-shaped boundary around a revealed corner
        tiles = [Position(3, r) for r in range(4)] + [Position(c, 3) for c in range(3)]
        ordered = sensible_ordering(tiles)
        steps = [a.squared_distance(b) for a, b in zip(ordered, ordered[1:])]
        assert max(steps) <= 2


class TestMasks:
    def test_round_trip(self):
        boundary = [Position(0, 0), Position(2, 0), Position(4, 0)]
        mask = positions_to_mask([Position(4, 0), Position(0, 0)], boundary)
        assert mask == 0b101
        assert mask_to_positions(mask, boundary) == [Position(0, 0), Position(4, 0)]

    def test_rejects_foreign_positions(self):
        with pytest.raises(ValueError):
            positions_to_mask([Position(1, 0)], [Position(0, 0)])

    def test_rejects_wide_masks(self):
        with pytest.raises(ValueError):
            mask_to_positions(0b100, [Position(0, 0), Position(1, 0)])


def test_boundary_constraints(two_scenarios):
    board = two_scenarios(2)
    boundary = [Position(0, 0), Position(2, 0), Position(4, 0)]
    assert get_boundary_constraints(board, boundary) == [(1, 0b011), (1, 0b110)]


def test_boundary_constraints_subtract_flags():
    board = GridBoard.from_rows(["F2.", "12."], num_bombs_left=1)
    _, boundary = split_covered(board)
    assert boundary == [Position(2, 0), Position(2, 1)]
    # both 2s already see the flag and need one more bomb in column 2
    assert get_boundary_constraints(board, boundary) == [(1, 0b11), (1, 0b11)]
