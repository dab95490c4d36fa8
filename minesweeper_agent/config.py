"""Tunable parameters of the solver."""

from dataclasses import dataclass, fields
from typing import Any, Mapping


@dataclass(frozen=True)
class SolverConfig:
    """
    Solver tunables.

    Attributes:
        bound_passes: Number of refinement passes of the subset-bound engine.
            Three passes are enough on every board seen in practice, but the
            fixed point is not proven complete.
        max_exact_boundary: Largest boundary (in tiles) that is enumerated
            exactly; larger boundaries use the greedy bound-density guess.
        small_boundary_bits: Boundaries up to this size are split into
            `small_boundary_chunks` chunks, larger ones into
            `large_boundary_chunks`.
        small_boundary_chunks: Chunk count for small boundaries.
        large_boundary_chunks: Chunk count for large boundaries.
        opening_column: Column of the opening move on an untouched board.
    """

    bound_passes: int = 3
    max_exact_boundary: int = 128
    small_boundary_bits: int = 32
    small_boundary_chunks: int = 2
    large_boundary_chunks: int = 8
    opening_column: int = 2

    def __post_init__(self) -> None:
        if self.bound_passes < 1:
            raise ValueError("bound_passes must be at least 1.")
        if self.max_exact_boundary < 0:
            raise ValueError("max_exact_boundary must be non-negative.")
        if self.small_boundary_bits < 0:
            raise ValueError("small_boundary_bits must be non-negative.")
        if self.small_boundary_chunks < 2 or self.large_boundary_chunks < 2:
            raise ValueError("Boundaries must be split into at least 2 chunks.")
        if self.opening_column < 0:
            raise ValueError("opening_column must be non-negative.")

    def num_chunks(self, boundary_size: int) -> int:
        """Number of enumeration chunks for a boundary of the given size."""
        if boundary_size <= self.small_boundary_bits:
            return self.small_boundary_chunks
        return self.large_boundary_chunks

    @classmethod
    def from_mapping(cls, values: Mapping[str, Any]) -> "SolverConfig":
        """
        Build a config from a plain mapping (e.g. parsed JSON).

        Raises:
            ValueError: On unknown keys or invalid values.
        """
        known = {f.name for f in fields(cls)}
        unknown = set(values) - known
        if unknown:
            raise ValueError(f"Unknown solver config keys: {sorted(unknown)}")
        return cls(**{k: int(v) for k, v in values.items()})
