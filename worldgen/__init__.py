# worldgen/__init__.py

# Public API of the world generator: noise sources, composable noise maps,
# and the tile classification World.

from .errors import WorldGenError, UnclassifiableCellError, FieldIdentityError
from .noise import (
    NoiseSource, CoherentNoise, PerlinNoise,
    Octaves, Frequency, Persistence, Lacunarity,
)
from .noisemap import (
    IdentityCounter, FieldFactory, DEFAULT_FACTORY,
    NoiseField, NoiseMap, ScaledNoiseMap, NoiseMapCombination,
    combine, scale,
)
from .properties import Seed, Step, Size
from .world import Constraint, ConstraintType, Tile, ChunkCache, World

__all__ = [
    "WorldGenError", "UnclassifiableCellError", "FieldIdentityError",
    "NoiseSource", "CoherentNoise", "PerlinNoise",
    "Octaves", "Frequency", "Persistence", "Lacunarity",
    "IdentityCounter", "FieldFactory", "DEFAULT_FACTORY",
    "NoiseField", "NoiseMap", "ScaledNoiseMap", "NoiseMapCombination",
    "combine", "scale",
    "Seed", "Step", "Size",
    "Constraint", "ConstraintType", "Tile", "ChunkCache", "World",
]
