# worldgen/world/tile.py

"""
================================================================================
TILES AND CONSTRAINTS
================================================================================
A Tile is a value placed in the world when all of its constraints hold.
A Constraint is a strict threshold test (< or >) against one noise field.

Both are immutable; Tile.when() returns a new tile.
================================================================================
"""

from enum import Enum
from typing import TYPE_CHECKING

import numpy as np

# Use a forward reference for the type hint to avoid circular imports.
if TYPE_CHECKING:
    from ..noisemap import NoiseField
    from .world import ChunkCache


class ConstraintType(Enum):
    LT = '<'
    GT = '>'


class Constraint:
    """
    A threshold test against one noise field. The comparison is strict:
    a value equal to the threshold satisfies neither LT nor GT.
    """

    def __init__(self, field: 'NoiseField', kind: ConstraintType, threshold: float):
        self.field = field
        self.kind = ConstraintType(kind)
        self.threshold = float(threshold)

    @classmethod
    def lt(cls, field: 'NoiseField', threshold: float) -> "Constraint":
        return cls(field, ConstraintType.LT, threshold)

    @classmethod
    def gt(cls, field: 'NoiseField', threshold: float) -> "Constraint":
        return cls(field, ConstraintType.GT, threshold)

    def satisfied_by(self, value: float) -> bool:
        if self.kind is ConstraintType.LT:
            return value < self.threshold
        return value > self.threshold

    def test(self, values: np.ndarray) -> np.ndarray:
        """Vectorized satisfied_by(): a boolean mask over an array of values."""
        if self.kind is ConstraintType.LT:
            return values < self.threshold
        return values > self.threshold

    def __repr__(self):
        return f"Constraint(field={self.field.identity}, {self.kind.value} {self.threshold})"


class Tile:
    """Objects to generate in the world based on given constraints."""

    def __init__(self, value, constraints=()):
        self.value = value
        self.constraints = tuple(constraints)

    def when(self, constraint: Constraint) -> "Tile":
        """Adds a constraint to the tile."""
        return Tile(self.value, self.constraints + (constraint,))

    def fields(self) -> list:
        return [constraint.field for constraint in self.constraints]

    def matches(self, cache: 'ChunkCache', candidates: np.ndarray) -> np.ndarray:
        """
        Returns the mask of candidate cells that satisfy every constraint.
        Constraints are checked in order, and a field is only generated once
        some cell has passed all the constraints before it.
        """
        matched = candidates.copy()
        for constraint in self.constraints:
            if not matched.any():
                break
            matched &= constraint.test(cache.values(constraint.field))
        return matched

    def __repr__(self):
        return f"Tile({self.value!r}, constraints={list(self.constraints)})"
