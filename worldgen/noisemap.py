# worldgen/noisemap.py

"""
================================================================================
NOISE MAPS
================================================================================
This module contains the composable noise fields that worlds are built from.

There are three kinds of field, all sharing the NoiseField interface:
- NoiseMap: samples a point noise source over a chunk of the plane.
- ScaledNoiseMap: another field multiplied by an integer weight.
- NoiseMapCombination: the sum of two fields, normalized back into [-1, 1]
  by the total weight of every field that went into it.

Fields are built with `+` and `*` (or combine() and scale()) and configured
with with_seed/with_step/with_size or set(). Every call returns a new value;
nothing published is mutated.

Data Contract:
---------------
- Inputs: chunk coordinates (cx, cy), optionally an explicit Size.
- Outputs: float64 NumPy arrays of shape (height, width).
- Side Effects: None. Generation is a pure tree walk.
- Invariants:
    - Given the same parameters and chunk, the output is identical.
    - A combination normalizes once, at the outermost node. Nested
      combinations hand their raw sums up to it.
    - Every field carries an identity from its FieldFactory. Setters keep
      the identity; building a new field (scale/combine) allocates one.
================================================================================
"""

import copy
import itertools
import numbers
import threading

import numpy as np

from .noise import NoiseSource
from .properties import Seed, Step, Size, largest, as_seed, as_step, as_size


class IdentityCounter:
    """A thread-safe, monotonically increasing source of field identities."""

    def __init__(self, start: int = 0):
        self._counter = itertools.count(start)
        self._lock = threading.Lock()

    def next_id(self) -> int:
        with self._lock:
            return next(self._counter)


class FieldFactory:
    """
    Owns the identity counter for a family of fields. Fields built from
    different factories may share identities and cannot be combined.
    """

    def __init__(self, counter: IdentityCounter = None):
        self.counter = counter if counter is not None else IdentityCounter()

    def next_id(self) -> int:
        return self.counter.next_id()

    def noise_map(self, source: NoiseSource, seed=None, step=None, size=None) -> "NoiseMap":
        """Constructs a new noise map whose identity comes from this factory."""
        return NoiseMap(source, seed=seed, step=step, size=size, factory=self)


# Used whenever a field is built without an explicit factory.
DEFAULT_FACTORY = FieldFactory()


class NoiseField:
    """
    The interface shared by every kind of noise map.

    Subclasses implement generate_sized_chunk(), the size property, and the
    _with_* setters.
    """

    def __init__(self, factory: FieldFactory, identity: int):
        self._factory = factory
        self._identity = identity

    @property
    def identity(self) -> int:
        """Opaque handle used to memoize generated chunks. Never compared as a value."""
        return self._identity

    @property
    def factory(self) -> FieldFactory:
        return self._factory

    @property
    def size(self) -> Size:
        raise NotImplementedError

    def get_size(self) -> Size:
        return self.size

    @property
    def weight(self) -> int:
        """How much this field counts towards a combination's total scale."""
        return 1

    def generate_sized_chunk(self, size: Size, cx: int, cy: int) -> np.ndarray:
        """Generates chunk (cx, cy) using an explicit size instead of the field's own."""
        raise NotImplementedError

    def generate_chunk(self, cx: int, cy: int) -> np.ndarray:
        """
        Generates a specific chunk of the noise map. Chunk (cx, cy) covers rows
        [cy*h, (cy+1)*h) and columns [cx*w, (cx+1)*w) of the infinite plane.
        """
        return self.generate_sized_chunk(self.size, cx, cy)

    def generate(self) -> np.ndarray:
        """Generates chunk (0, 0)."""
        return self.generate_chunk(0, 0)

    # --- Builder surface ---
    def set(self, prop):
        """Applies a Seed, Step or Size to this field."""
        set_to = getattr(prop, 'set_to', None)
        if set_to is None:
            raise TypeError(f"{type(prop).__name__} is not a noise map property")
        return set_to(self)

    def with_seed(self, seed):
        """Returns this field with a new seed. Integers are used verbatim, anything else is hashed."""
        return self._with_seed(as_seed(seed))

    def with_step(self, x, y=None):
        return self._with_step(as_step(x, y))

    def with_size(self, w, h=None):
        return self._with_size(as_size(w, h))

    def _with_seed(self, seed: Seed):
        raise NotImplementedError

    def _with_step(self, step: Step):
        raise NotImplementedError

    def _with_size(self, size: Size):
        raise NotImplementedError

    def _replace(self, **changes):
        """A shallow copy with some attributes changed. The identity is kept."""
        new = copy.copy(self)
        new.__dict__.update(changes)
        return new

    def as_operand(self) -> "NoiseField":
        """The form of this field that goes into a larger combination."""
        return self

    def parameters(self) -> tuple:
        """
        Everything that determines this field's output. Two values that share
        an identity but differ here were configured apart after creation.
        """
        raise NotImplementedError

    # --- Arithmetic ---
    def __add__(self, other):
        if not isinstance(other, NoiseField):
            return NotImplemented
        return combine(self, other)

    def __mul__(self, factor):
        if not isinstance(factor, numbers.Integral) or isinstance(factor, bool):
            return NotImplemented
        return scale(self, factor)

    __rmul__ = __mul__


class NoiseMap(NoiseField):
    """
    A field sampled directly from a point noise source.

    Args:
        source (NoiseSource): The point noise function to sample.
        seed: A Seed, an integer, or any key to hash into a seed.
        step: A Step or a (dx, dy) pair. Defaults to (0, 0), a flat map.
        size: A Size or a (w, h) pair. Defaults to (0, 0), an empty map.
        factory (FieldFactory, optional): Where the identity comes from.
    """

    def __init__(self, source: NoiseSource, seed=None, step=None, size=None, factory: FieldFactory = None):
        factory = factory if factory is not None else DEFAULT_FACTORY
        super().__init__(factory, factory.next_id())
        self.source = source
        self.seed = as_seed(seed) if seed is not None else Seed()
        self.step = as_step(step) if step is not None else Step()
        self._size = as_size(size) if size is not None else Size()

    @property
    def size(self) -> Size:
        return self._size

    def generate_sized_chunk(self, size: Size, cx: int, cy: int) -> np.ndarray:
        rows = np.arange(cy * size.h, (cy + 1) * size.h) * self.step.y
        cols = np.arange(cx * size.w, (cx + 1) * size.w) * self.step.x
        x_coords, y_coords = np.meshgrid(cols, rows)
        return self.source.generate_grid(x_coords, y_coords, self.seed.value)

    def _with_seed(self, seed: Seed):
        return self._replace(seed=seed)

    def _with_step(self, step: Step):
        return self._replace(step=step)

    def _with_size(self, size: Size):
        return self._replace(_size=size)

    def parameters(self) -> tuple:
        return ('map', self.source, self.seed, self.step, self.size)

    def __repr__(self):
        return (f"NoiseMap(id={self.identity}, source={self.source!r}, seed={self.seed.value}, "
                f"step=({self.step.x}, {self.step.y}), size=({self.size.w}, {self.size.h}))")


class ScaledNoiseMap(NoiseField):
    """
    A field multiplied by an integer weight. It has its own identity, so a
    world that references both the raw field and the scaled one caches them
    separately. Property setters pass straight through to the wrapped field.
    """

    def __init__(self, inner: NoiseField, factor: int, factory: FieldFactory = None):
        factory = factory if factory is not None else inner.factory
        super().__init__(factory, factory.next_id())
        self.inner = inner
        self.factor = int(factor)

    @property
    def size(self) -> Size:
        return self.inner.size

    @property
    def weight(self) -> int:
        # A scaled scaled map contributes the product of both factors.
        if isinstance(self.inner, ScaledNoiseMap):
            return self.factor * self.inner.weight
        return self.factor

    def generate_sized_chunk(self, size: Size, cx: int, cy: int) -> np.ndarray:
        return self.inner.generate_sized_chunk(size, cx, cy) * float(self.factor)

    def _with_seed(self, seed: Seed):
        return self._replace(inner=self.inner._with_seed(seed))

    def _with_step(self, step: Step):
        return self._replace(inner=self.inner._with_step(step))

    def _with_size(self, size: Size):
        return self._replace(inner=self.inner._with_size(size))

    def parameters(self) -> tuple:
        return ('scaled', self.factor, self.inner.parameters())

    def __repr__(self):
        return f"ScaledNoiseMap(id={self.identity}, factor={self.factor}, inner={self.inner!r})"


class NoiseMapCombination(NoiseField):
    """
    The sum of two fields. The outermost combination divides the sum by
    total_scale; a combination nested inside another one returns its raw sum
    so the enclosing node can normalize everything exactly once.
    """

    def __init__(self, left: NoiseField, right: NoiseField, total_scale: int,
                 outer: bool = True, factory: FieldFactory = None):
        factory = factory if factory is not None else left.factory
        super().__init__(factory, factory.next_id())
        self.left = left
        self.right = right
        self.total_scale = int(total_scale)
        self.outer = outer

    @property
    def size(self) -> Size:
        return self.left.size

    @property
    def weight(self) -> int:
        return self.total_scale

    def generate_sized_chunk(self, size: Size, cx: int, cy: int) -> np.ndarray:
        total = self.left.generate_sized_chunk(size, cx, cy) + self.right.generate_sized_chunk(size, cx, cy)
        if self.outer:
            total /= self.total_scale
        return total

    def as_operand(self) -> "NoiseMapCombination":
        return self._replace(outer=False)

    def _with_seed(self, seed: Seed):
        return self._replace(left=self.left._with_seed(seed), right=self.right._with_seed(seed))

    def _with_step(self, step: Step):
        return self._replace(left=self.left._with_step(step), right=self.right._with_step(step))

    def _with_size(self, size: Size):
        return self._replace(left=self.left._with_size(size), right=self.right._with_size(size))

    def parameters(self) -> tuple:
        return ('combination', self.total_scale, self.outer,
                self.left.parameters(), self.right.parameters())

    def __repr__(self):
        return (f"NoiseMapCombination(id={self.identity}, total_scale={self.total_scale}, "
                f"outer={self.outer}, left={self.left!r}, right={self.right!r})")


def scale(field: NoiseField, factor: int) -> ScaledNoiseMap:
    """
    Multiplies every value of a field by a positive integer weight. Zero or
    negative weights would let a combination's total scale cancel out and
    push its output outside [-1, 1], so they are rejected.
    """
    if not isinstance(factor, numbers.Integral) or isinstance(factor, bool):
        raise TypeError(f"noise maps can only be scaled by integers, not {type(factor).__name__}")
    if factor <= 0:
        raise ValueError(f"noise maps can only be scaled by positive integers, not {factor}")
    return ScaledNoiseMap(field, factor)


def combine(left: NoiseField, right: NoiseField) -> NoiseMapCombination:
    """
    Adds two fields. The result takes the larger size (by area) of the two,
    and pushes it down to every leaf so all operands generate the same shape.
    Its total scale is the sum of both operands' weights.
    """
    if left.factory is not right.factory:
        raise ValueError("cannot combine noise maps built by different field factories")

    size = largest(left.size, right.size)
    total_scale = left.weight + right.weight

    return NoiseMapCombination(
        left.as_operand()._with_size(size),
        right.as_operand()._with_size(size),
        total_scale,
        factory=left.factory,
    )
