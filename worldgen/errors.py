# worldgen/errors.py

"""Exceptions raised by the world generator."""


class WorldGenError(Exception):
    """Base class for errors raised by worldgen."""


class UnclassifiableCellError(WorldGenError):
    """
    Raised when a cell of a chunk satisfies no tile's constraints. This means
    the world's rule set is incomplete (usually a missing catch-all tile).

    Attributes:
        chunk (tuple): The (cx, cy) chunk being classified.
        cell (tuple): The (x, y) position of the cell inside the chunk.
        position (tuple): The (x, y) position of the cell on the whole plane.
        values (dict): Field identity -> value at the cell, for every field
            generated before the failure.
    """

    def __init__(self, chunk: tuple, cell: tuple, position: tuple, values: dict = None):
        self.chunk = chunk
        self.cell = cell
        self.position = position
        self.values = values if values is not None else {}
        super().__init__(
            f"No tile matches cell {cell} of chunk {chunk} "
            f"(plane position {position}, field values {self.values})"
        )


class FieldIdentityError(WorldGenError, ValueError):
    """
    Raised when two differently configured fields with the same identity
    meet in one classification. Setters keep a field's identity, so variants
    derived from one template (template.with_seed(...)) collide in the chunk
    cache. Build each variant from its own NoiseMap instead.

    Attributes:
        identity (int): The shared identity.
    """

    def __init__(self, identity: int):
        self.identity = identity
        super().__init__(
            f"Two differently configured noise maps share identity {identity}; "
            f"construct a separate NoiseMap for each variant"
        )
