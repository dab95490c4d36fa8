"""Tests for the chunked scenario enumerator."""

import random
from typing import List, Tuple

import pytest

from minesweeper_agent import InconsistentBoardError, SolverConfig
from minesweeper_agent.enumeration import (
    ScenarioTally,
    chunk_layout,
    enumerate_scenarios,
    global_bomb_range,
    tally_scenarios,
    validate,
)


def brute_force(constraints: List[Tuple[int, int]], size: int) -> List[int]:
    return [
        m
        for m in range(1 << size)
        if all((m & mask).bit_count() == n for n, mask in constraints)
    ]


def random_constraints(rng: random.Random, size: int) -> List[Tuple[int, int]]:
    """Local-looking constraints over a line of `size` tiles, built from a hidden layout."""
    hidden = rng.getrandbits(size)
    constraints = []
    for start in range(size):
        width = rng.randint(1, 3)
        mask = 0
        for bit in range(start, min(start + width, size)):
            mask |= 1 << bit
        # occasionally add a far tile so some constraints straddle chunks
        if rng.random() < 0.2:
            mask |= 1 << rng.randrange(size)
        constraints.append(((hidden & mask).bit_count(), mask))
    return constraints


class TestChunkLayout:
    def test_covers_every_bit_once(self):
        for size in range(0, 40):
            for chunks in (2, 3, 8):
                layout = chunk_layout(size, chunks)
                assert len(layout) == chunks
                assert sum(s for _, s in layout) == size
                offsets = [o for o, _ in layout]
                assert offsets == sorted(offsets)

    def test_rounds_half_up(self):
        assert chunk_layout(5, 2) == [(0, 3), (3, 2)]
        assert chunk_layout(16, 8) == [(i * 2, 2) for i in range(8)]


class TestValidate:
    def test_partial_assignment(self):
        constraints = [(1, 0b011), (2, 0b110)]
        # only bit 0 decided, set: first constraint can still hold
        assert validate(0b001, constraints, assigned=0b001)
        # bits 0 and 1 both bombs: first constraint exceeded
        assert not validate(0b011, constraints, assigned=0b011)
        # bits 1 and 2 decided safe: second constraint unreachable
        assert not validate(0b000, constraints, assigned=0b110)


class TestEnumerateScenarios:
    @pytest.mark.parametrize("seed", range(12))
    def test_matches_brute_force(self, seed):
        rng = random.Random(seed)
        size = rng.randint(1, 12)
        constraints = random_constraints(rng, size)

        assert enumerate_scenarios(constraints, size) == brute_force(constraints, size)

    @pytest.mark.parametrize("seed", range(6))
    def test_matches_brute_force_with_many_chunks(self, seed):
        rng = random.Random(100 + seed)
        size = rng.randint(3, 12)
        constraints = random_constraints(rng, size)
        config = SolverConfig(small_boundary_bits=0, large_boundary_chunks=8)

        assert enumerate_scenarios(constraints, size, config) == brute_force(
            constraints, size
        )

    def test_contradiction_has_no_scenario(self):
        assert enumerate_scenarios([(1, 0b01), (0, 0b11)], 2) == []
        assert enumerate_scenarios([(1, 0)], 2) == []

    def test_bomb_range_filters_scenarios(self):
        constraints = [(1, 0b011), (1, 0b110)]
        assert enumerate_scenarios(constraints, 3) == [0b010, 0b101]
        assert enumerate_scenarios(constraints, 3, bomb_range=(2, 3)) == [0b101]


def test_global_bomb_range():
    assert global_bomb_range(5, 2) == (3, 5)
    assert global_bomb_range(2, 10) == (0, 2)


class TestTally:
    def test_counts_per_bomb_count(self):
        constraints = [(1, 0b011), (1, 0b110)]
        tally = tally_scenarios(constraints, 3, total_left=2, non_boundary=2)

        assert tally.scenario_count == 2
        assert tally.bomb_counts() == [1, 2]
        assert tally.totals == [0, 1, 1, 0]
        assert tally.per_tile == [[0, 0, 1, 0], [0, 1, 0, 0], [0, 0, 1, 0]]

    def test_global_count_excludes_scenarios(self):
        constraints = [(1, 0b011), (1, 0b110)]
        tally = tally_scenarios(constraints, 3, total_left=4, non_boundary=2)
        assert tally.bomb_counts() == [2]

    def test_no_scenario_is_inconsistent(self):
        constraints = [(1, 0b011), (1, 0b110)]
        with pytest.raises(InconsistentBoardError):
            tally_scenarios(constraints, 3, total_left=5, non_boundary=2)

    def test_add_matches_brute_force(self):
        rng = random.Random(7)
        constraints = random_constraints(rng, 10)
        tally = ScenarioTally(10)
        for m in brute_force(constraints, 10):
            tally.add(m)

        assert tally.totals == tally_scenarios(
            constraints, 10, total_left=10, non_boundary=10
        ).totals
