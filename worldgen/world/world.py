# worldgen/world/world.py

"""
================================================================================
WORLD (TILE CLASSIFICATION)
================================================================================
This module contains the World class, which turns noise fields into a grid of
tiles using ordered threshold rules.

Data Contract:
---------------
- Inputs (on initialization):
    - size (Size, optional): The chunk size to classify. If not set, the
      largest size (by area) among the constrained fields is used.
    - logger: A Python logging object for runtime messages.
- Outputs (from methods):
    - NumPy object arrays of shape (height, width) holding tile values.
- Side Effects: Logs messages using the provided logger.
- Invariants:
    - Tiles are tried in insertion order and the first tile whose constraints
      all hold wins the cell.
    - During one classify() call each distinct field (by identity) is
      generated at most once. The cache is dropped when the call returns.
    - A cell that no tile matches fails the whole call with
      UnclassifiableCellError. No partial grid is returned.
================================================================================
"""

import logging
import time

import numpy as np
from tqdm import tqdm

from ..errors import FieldIdentityError, UnclassifiableCellError
from ..properties import Size, largest, as_size
from .tile import Tile


def _wrapped_indices(chunk_extent: int, field_extent: int) -> np.ndarray:
    """Cell indices along one axis, tiled when the field is smaller than the chunk."""
    indices = np.arange(max(chunk_extent, 0))
    if 0 < field_extent < chunk_extent:
        return indices % field_extent
    return indices


class ChunkCache:
    """
    Per-classification memo of generated field chunks, keyed by field identity.
    """

    def __init__(self, size: Size, cx: int, cy: int):
        self.size = size
        self.cx = cx
        self.cy = cy
        self._fields = {}
        self._grids = {}

    @property
    def generated(self) -> int:
        """How many distinct fields have been generated so far."""
        return len(self._grids)

    def values(self, field) -> np.ndarray:
        """
        The field's values over this chunk. The field is generated at the
        chunk size; if its own size is smaller, its top-left corner is tiled
        across the chunk.

        Raises:
            FieldIdentityError: If a differently configured field with the
                same identity was generated first.
        """
        cached = self._fields.get(field.identity)
        if cached is not None:
            if cached is not field and cached.parameters() != field.parameters():
                raise FieldIdentityError(field.identity)
            return self._grids[field.identity]

        grid = field.generate_sized_chunk(self.size, self.cx, self.cy)
        rows = _wrapped_indices(self.size.h, field.size.h)
        cols = _wrapped_indices(self.size.w, field.size.w)
        grid = grid[np.ix_(rows, cols)]
        self._fields[field.identity] = field
        self._grids[field.identity] = grid
        return grid

    def sample(self, row: int, col: int) -> dict:
        """Field identity -> value at one cell, for every generated field."""
        return {identity: float(grid[row, col]) for identity, grid in self._grids.items()}


class World:
    """
    Classifies chunks of the plane into tiles.

    Args:
        size (Size, optional): Chunk size. Defaults to the largest constrained field's size.
        tiles (iterable, optional): Initial tiles, in priority order.
        logger (logging.Logger, optional): The logger instance for all output.
    """

    def __init__(self, size: Size = None, tiles=(), logger: logging.Logger = None):
        self.logger = logger if logger is not None else logging.getLogger(__name__)
        self._size = as_size(size) if size is not None else None
        self.tiles = tuple(tiles)

    def _replace(self, size: Size = None, tiles=None) -> "World":
        return World(
            size=size if size is not None else self._size,
            tiles=tiles if tiles is not None else self.tiles,
            logger=self.logger,
        )

    def add(self, tile: Tile) -> "World":
        """Add a tile definition to the world. Earlier tiles take priority."""
        return self._replace(tiles=self.tiles + (tile,))

    def set(self, prop) -> "World":
        """Set a property on the world. Only Size applies to worlds."""
        if not isinstance(prop, Size):
            raise TypeError(f"{type(prop).__name__} cannot be set on a world")
        return prop.set_to(self)

    def with_size(self, w, h=None) -> "World":
        return self._replace(size=as_size(w, h))

    def fields(self) -> list:
        """Every distinct field referenced by a constraint, in first-use order."""
        seen = {}
        for tile in self.tiles:
            for field in tile.fields():
                seen.setdefault(field.identity, field)
        return list(seen.values())

    @property
    def size(self) -> Size:
        if self._size is not None:
            return self._size
        fields = self.fields()
        if not fields:
            return Size()
        return largest(*(field.size for field in fields))

    def classify(self, cx: int, cy: int) -> np.ndarray:
        """
        Classifies chunk (cx, cy) into an object array of tile values.

        Raises:
            UnclassifiableCellError: If some cell matches no tile. The error
                names the first such cell in row-major order.
            FieldIdentityError: If two differently configured fields with one
                identity are both reached.
        """
        size = self.size
        shape = (max(size.h, 0), max(size.w, 0))
        cache = ChunkCache(size, cx, cy)

        tile_index = np.full(shape, -1, dtype=np.intp)
        remaining = np.ones(shape, dtype=bool)

        for index, tile in enumerate(self.tiles):
            if not remaining.any():
                break
            matched = tile.matches(cache, remaining)
            tile_index[matched] = index
            remaining &= ~matched

        if remaining.any():
            row, col = (int(i) for i in np.argwhere(remaining)[0])
            error = UnclassifiableCellError(
                chunk=(cx, cy),
                cell=(col, row),
                position=(cx * size.w + col, cy * size.h + row),
                values=cache.sample(row, col),
            )
            self.logger.error(str(error))
            raise error

        self.logger.debug(
            f"Classified chunk ({cx}, {cy}) of size {size.w}x{size.h} "
            f"using {cache.generated} generated field(s)."
        )

        tile_values = np.empty(len(self.tiles), dtype=object)
        for index, tile in enumerate(self.tiles):
            tile_values[index] = tile.value
        return tile_values[tile_index]

    def generate(self) -> np.ndarray:
        """Classifies chunk (0, 0)."""
        return self.classify(0, 0)

    def classify_region(self, width_chunks: int, height_chunks: int,
                        origin: tuple = (0, 0), progress: bool = False) -> dict:
        """
        Classifies a rectangle of chunks, row by row.

        Args:
            width_chunks (int): Number of chunks along x.
            height_chunks (int): Number of chunks along y.
            origin (tuple): The (cx, cy) of the top-left chunk.
            progress (bool): Show a tqdm progress bar.

        Returns:
            dict: (cx, cy) -> classified grid.
        """
        ox, oy = origin
        tasks = [(ox + i, oy + j) for j in range(height_chunks) for i in range(width_chunks)]
        self.logger.info(f"Classifying a {width_chunks}x{height_chunks} region ({len(tasks)} chunks) from {origin}...")

        start_time = time.perf_counter()
        chunks = {}
        for cx, cy in tqdm(tasks, desc="Classifying Chunks", disable=not progress):
            chunks[(cx, cy)] = self.classify(cx, cy)
        end_time = time.perf_counter()

        self.logger.info(f"Region classified in {end_time - start_time:.2f} seconds.")
        return chunks
