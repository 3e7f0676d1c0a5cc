# worldgen/world/__init__.py

# This file makes the 'world' directory a Python package.
# We can also use it to define the public API of the package.

from .tile import Constraint, ConstraintType, Tile
from .world import ChunkCache, World

__all__ = ["Constraint", "ConstraintType", "Tile", "ChunkCache", "World"]
