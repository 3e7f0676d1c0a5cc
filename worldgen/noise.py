# worldgen/noise.py

"""
================================================================================
POINT NOISE SOURCES
================================================================================
This module provides the point noise sources that noise maps sample. A source
is a pure, stateless function of a continuous coordinate and a seed.

Data Contract:
---------------
- Inputs:
    - x, y: Continuous coordinates (floats, or NumPy arrays of equal shape).
    - seed: An integer. Only its low 32 bits take part in hashing.
- Outputs:
    - A noise value (or NumPy array of values) in the range [-1, 1].
- Side Effects: None.
- Invariants: The same inputs always produce the same output, across calls
  and across processes. The output array has the shape of the input arrays.
================================================================================
"""

from dataclasses import dataclass

import numpy as np
from numba import njit

from . import config as DEFAULTS

# Copied into module globals so Numba freezes them as compile-time constants.
_X_PRIME = DEFAULTS.HASH_X_PRIME
_Y_PRIME = DEFAULTS.HASH_Y_PRIME
_SEED_PRIME = DEFAULTS.HASH_SEED_PRIME


def to_int32(value: int) -> int:
    """Truncates an arbitrary Python integer to a signed 32-bit integer."""
    value &= 0xffffffff
    if value >= 0x80000000:
        value -= 0x100000000
    return value


@njit
def _wrap32(n):
    "Two's-complement wrap to 32 bits."
    n = n & 0xffffffff
    if n >= 0x80000000:
        n -= 0x100000000
    return n

@njit
def _lattice_value(x, y, seed):
    """Hashes an integer lattice point to a value in (-1, 1]."""
    n = (x * _X_PRIME + y * _Y_PRIME + seed * _SEED_PRIME) & 0x7fffffff
    m = _wrap32((n << 13) ^ n)
    t = _wrap32(m * m)
    t = _wrap32(t * 15731 + 789221)
    t = _wrap32(m * t)
    t = (t + 1376312579) & 0x7fffffff
    return 1.0 - t / 1073741824.0

@njit
def _s_curve(a):
    "3a^2 - 2a^3"
    return a * a * (3.0 - 2.0 * a)

@njit
def _interpolate(v1, v2, a):
    "Linear interpolation."
    return (1.0 - a) * v1 + a * v2

@njit
def coherent_noise(x, y, seed):
    """
    Single-octave value noise at one point. The four surrounding lattice
    values are blended with an s-curve in each axis.
    """
    if x > 0.0:
        x0 = int(x)
    else:
        x0 = int(x - 1.0)
    if y > 0.0:
        y0 = int(y)
    else:
        y0 = int(y - 1.0)
    x1 = x0 + 1
    y1 = y0 + 1

    xd = _s_curve(x - x0)
    yd = _s_curve(y - y0)

    x0y0 = _lattice_value(x0, y0, seed)
    x1y0 = _lattice_value(x1, y0, seed)
    x0y1 = _lattice_value(x0, y1, seed)
    x1y1 = _lattice_value(x1, y1, seed)

    v1 = _interpolate(x0y0, x1y0, xd)
    v2 = _interpolate(x0y1, x1y1, xd)
    return _interpolate(v1, v2, yd)

@njit
def perlin_noise(x, y, seed, octaves=DEFAULTS.PERLIN_OCTAVES, frequency=DEFAULTS.PERLIN_FREQUENCY,
                 persistence=DEFAULTS.PERLIN_PERSISTENCE, lacunarity=DEFAULTS.PERLIN_LACUNARITY):
    """
    Octave sum of coherent noise at one point, divided by the total amplitude
    so the result stays in [-1, 1]. Octave i is seeded with seed + i.
    """
    x_sample = x * frequency
    y_sample = y * frequency
    amplitude = 1.0
    total_amplitude = 0.0
    value = 0.0

    for octave in range(octaves):
        value += coherent_noise(x_sample, y_sample, _wrap32(seed + octave)) * amplitude
        total_amplitude += amplitude
        x_sample *= lacunarity
        y_sample *= lacunarity
        amplitude *= persistence

    if total_amplitude > 0.0:
        return value / total_amplitude
    return 0.0

@njit
def coherent_noise_2d(x, y, seed):
    """Coherent noise over a grid of coordinates."""
    rows, cols = x.shape
    total_noise = np.zeros((rows, cols))
    for i in range(rows):
        for j in range(cols):
            total_noise[i, j] = coherent_noise(x[i, j], y[i, j], seed)
    return total_noise

@njit
def perlin_noise_2d(x, y, seed, octaves=DEFAULTS.PERLIN_OCTAVES, frequency=DEFAULTS.PERLIN_FREQUENCY,
                    persistence=DEFAULTS.PERLIN_PERSISTENCE, lacunarity=DEFAULTS.PERLIN_LACUNARITY):
    """
    Perlin noise over a grid of coordinates.
    This function is JIT-compiled with Numba; the explicit loops compile to
    efficient machine code.
    """
    rows, cols = x.shape
    total_noise = np.zeros((rows, cols))
    for i in range(rows):
        for j in range(cols):
            total_noise[i, j] = perlin_noise(
                x[i, j], y[i, j], seed,
                octaves, frequency, persistence, lacunarity
            )
    return total_noise


class NoiseSource:
    """
    Base class for point noise sources.

    Subclasses must implement generate(). generate_grid() falls back to
    calling generate() for every element; fast sources override it.
    Noise maps only call generate_grid(), once per generated chunk.
    """

    def generate(self, x: float, y: float, seed: int) -> float:
        """Returns the noise value at a single point."""
        raise NotImplementedError

    def generate_grid(self, x: np.ndarray, y: np.ndarray, seed: int) -> np.ndarray:
        """Returns the noise values for arrays of x and y coordinates."""
        out = np.empty(np.shape(x), dtype=np.float64)
        for index in np.ndindex(out.shape):
            out[index] = self.generate(float(x[index]), float(y[index]), seed)
        return out


class CoherentNoise(NoiseSource):
    """Single-octave value noise. Takes no parameters."""

    def generate(self, x: float, y: float, seed: int) -> float:
        return coherent_noise(float(x), float(y), to_int32(seed))

    def generate_grid(self, x: np.ndarray, y: np.ndarray, seed: int) -> np.ndarray:
        return coherent_noise_2d(
            np.asarray(x, dtype=np.float64),
            np.asarray(y, dtype=np.float64),
            to_int32(seed)
        )

    def __repr__(self):
        return "CoherentNoise()"


# --- Perlin properties ---
# Applied with PerlinNoise.set(), the same way Seed/Step/Size apply to noise maps.

@dataclass(frozen=True)
class Octaves:
    """Number of coherent noise layers summed together."""
    value: int = DEFAULTS.PERLIN_OCTAVES

    @classmethod
    def of(cls, value: int) -> "Octaves":
        return cls(int(value))

    def set_to(self, source):
        return source.with_octaves(self.value)


@dataclass(frozen=True)
class Frequency:
    """Coordinate multiplier for the first octave. Larger values give narrower features."""
    value: float = DEFAULTS.PERLIN_FREQUENCY

    @classmethod
    def of(cls, value: float) -> "Frequency":
        return cls(float(value))

    def set_to(self, source):
        return source.with_frequency(self.value)


@dataclass(frozen=True)
class Persistence:
    """Amplitude multiplier between octaves."""
    value: float = DEFAULTS.PERLIN_PERSISTENCE

    @classmethod
    def of(cls, value: float) -> "Persistence":
        return cls(float(value))

    def set_to(self, source):
        return source.with_persistence(self.value)


@dataclass(frozen=True)
class Lacunarity:
    value: float = DEFAULTS.PERLIN_LACUNARITY

    @classmethod
    def of(cls, value: float) -> "Lacunarity":
        return cls(float(value))

    def set_to(self, source):
        return source.with_lacunarity(self.value)


class PerlinNoise(NoiseSource):
    """
    Octaved coherent noise, the recommended source for noise maps.

    Args:
        octaves (int): Number of coherent noise layers summed together.
        frequency (float): Coordinate multiplier for the first octave.
        persistence (float): Amplitude multiplier between octaves.
        lacunarity (float): Frequency multiplier between octaves.
    """

    def __init__(self, octaves: int = DEFAULTS.PERLIN_OCTAVES,
                 frequency: float = DEFAULTS.PERLIN_FREQUENCY,
                 persistence: float = DEFAULTS.PERLIN_PERSISTENCE,
                 lacunarity: float = DEFAULTS.PERLIN_LACUNARITY):
        self.octaves = int(octaves)
        self.frequency = float(frequency)
        self.persistence = float(persistence)
        self.lacunarity = float(lacunarity)

    @classmethod
    def from_config(cls, config: dict) -> "PerlinNoise":
        """Builds a source from a settings dict, falling back to the defaults."""
        return cls(
            octaves=config.get('octaves', DEFAULTS.PERLIN_OCTAVES),
            frequency=config.get('frequency', DEFAULTS.PERLIN_FREQUENCY),
            persistence=config.get('persistence', DEFAULTS.PERLIN_PERSISTENCE),
            lacunarity=config.get('lacunarity', DEFAULTS.PERLIN_LACUNARITY),
        )

    # --- Builder surface ---
    # Sources are shared between noise maps, so every setter returns a new one.
    def set(self, prop) -> "PerlinNoise":
        """Applies an Octaves, Frequency, Persistence or Lacunarity property."""
        if not isinstance(prop, (Octaves, Frequency, Persistence, Lacunarity)):
            raise TypeError(f"{type(prop).__name__} is not a perlin noise property")
        return prop.set_to(self)

    def _replace(self, **changes) -> "PerlinNoise":
        params = {
            'octaves': self.octaves,
            'frequency': self.frequency,
            'persistence': self.persistence,
            'lacunarity': self.lacunarity,
        }
        params.update(changes)
        return type(self)(**params)

    def with_octaves(self, octaves: int) -> "PerlinNoise":
        return self._replace(octaves=octaves)

    def with_frequency(self, frequency: float) -> "PerlinNoise":
        return self._replace(frequency=frequency)

    def with_persistence(self, persistence: float) -> "PerlinNoise":
        return self._replace(persistence=persistence)

    def with_lacunarity(self, lacunarity: float) -> "PerlinNoise":
        return self._replace(lacunarity=lacunarity)

    def generate(self, x: float, y: float, seed: int) -> float:
        return perlin_noise(
            float(x), float(y), to_int32(seed),
            self.octaves, self.frequency, self.persistence, self.lacunarity
        )

    def generate_grid(self, x: np.ndarray, y: np.ndarray, seed: int) -> np.ndarray:
        return perlin_noise_2d(
            np.asarray(x, dtype=np.float64),
            np.asarray(y, dtype=np.float64),
            to_int32(seed),
            self.octaves, self.frequency, self.persistence, self.lacunarity
        )

    def __repr__(self):
        return (f"PerlinNoise(octaves={self.octaves}, frequency={self.frequency}, "
                f"persistence={self.persistence}, lacunarity={self.lacunarity})")
