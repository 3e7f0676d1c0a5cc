# worldgen/config.py

"""
================================================================================
INTERNAL DEFAULT CONFIGURATION
================================================================================
This module contains the default, fallback internal constants for the noise
sources, noise maps and worlds. These values are used if they are not
explicitly provided by the caller.

DO NOT MODIFY THIS FILE FOR A SPECIFIC WORLD.
Instead, pass a configuration dictionary (e.g. to PerlinNoise.from_config) or
set the properties on the noise map directly.
================================================================================
"""

# --- Noise Map Properties ---
# A zero seed, step and size mirror an unconfigured noise map. A zero step
# produces a flat map and a zero size produces an empty one; both are left to
# the caller to fix.
DEFAULT_SEED = 0
DEFAULT_STEP = (0.0, 0.0)
DEFAULT_SIZE = (0, 0)

# Number of bytes taken from the blake2b digest when hashing a key into a seed.
# 8 bytes gives an unsigned 64-bit seed.
SEED_DIGEST_BYTES = 8

# --- Perlin (Octaved) Noise ---
PERLIN_OCTAVES = 8
PERLIN_FREQUENCY = 1.0
PERLIN_PERSISTENCE = 0.5
PERLIN_LACUNARITY = 2.0

# --- Coherent Noise Hash Constants ---
# Lattice hash primes. Changing any of these changes every generated world.
HASH_X_PRIME = 157
HASH_Y_PRIME = 31337
HASH_SEED_PRIME = 2633
