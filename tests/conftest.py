# tests/conftest.py

import numpy as np
import pytest

from worldgen import FieldFactory, NoiseMap, NoiseSource, PerlinNoise, Size, Step


class ConstantNoise(NoiseSource):
    """Returns the same value everywhere."""

    def __init__(self, value):
        self.value = value

    def generate(self, x, y, seed):
        return self.value

    def generate_grid(self, x, y, seed):
        return np.full(np.shape(x), self.value, dtype=np.float64)


class CoordinateNoise(NoiseSource):
    """Returns the x coordinate, which makes chunk addressing visible."""

    def generate(self, x, y, seed):
        return x


class CountingNoise(NoiseSource):
    """Wraps another source and counts how many grids it was asked for."""

    def __init__(self, inner):
        self.inner = inner
        self.grid_calls = 0

    def generate(self, x, y, seed):
        return self.inner.generate(x, y, seed)

    def generate_grid(self, x, y, seed):
        self.grid_calls += 1
        return self.inner.generate_grid(x, y, seed)


@pytest.fixture
def factory():
    """A fresh identity counter per test."""
    return FieldFactory()


@pytest.fixture
def perlin():
    return PerlinNoise(octaves=4)


@pytest.fixture
def perlin_map(factory, perlin):
    """Builds seeded Perlin maps with a common step."""
    def build(seed, size=(16, 12), step=(0.05, 0.05)):
        return NoiseMap(perlin, seed=seed, step=Step.of(*step), size=Size.of(*size), factory=factory)
    return build


@pytest.fixture
def constant_map(factory):
    def build(value, size=(4, 3)):
        return NoiseMap(ConstantNoise(value), step=(1.0, 1.0), size=size, factory=factory)
    return build


@pytest.fixture
def counting_map(factory, perlin):
    """Returns (field, counter) where counter.grid_calls counts generations."""
    def build(seed=1, size=(8, 8)):
        source = CountingNoise(perlin)
        field = NoiseMap(source, seed=seed, step=(0.1, 0.1), size=size, factory=factory)
        return field, source
    return build


@pytest.fixture
def coordinate_map(factory):
    def build(size):
        return NoiseMap(CoordinateNoise(), step=(1.0, 1.0), size=size, factory=factory)
    return build
