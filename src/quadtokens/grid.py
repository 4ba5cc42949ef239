"""
Quad grid coordinate system.

This module defines the cell rectangle and the immutable grid that maps
cell identifiers to regions of a bounded 2-D world.

A cell identifier is a string over ``ABCD`` where each character selects
one quadrant of the parent cell:

- A: lower left
- B: lower right
- C: upper left
- D: upper right

The empty string is the root cell covering the whole world.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Tuple, List

from .exceptions import BadInputError, ConfigurationError


# Quadrant symbols in subdivision order
CELL_SYMBOLS = "ABCD"
ROOT_CELL = ""


def owns_axis(value: float, lo: float, hi: float, origin: float) -> bool:
    """
    Half-open interval test along one axis.

    A cell owns (lo, hi], plus lo itself when lo is the world's minimum
    edge, so a value on a split line belongs to the lower/left cell.
    """
    if value == lo:
        return lo == origin
    return lo < value <= hi


@dataclass(frozen=True)
class Rectangle:
    """
    An axis-aligned rectangle in world coordinates.

    Fields follow the grid world layout (min x, max x, min y, max y).
    """
    x0: float  # min x
    x1: float  # max x
    y0: float  # min y
    y1: float  # max y

    def __post_init__(self):
        if self.x0 > self.x1 or self.y0 > self.y1:
            raise ValueError(
                f"Invalid rectangle: x0={self.x0}, x1={self.x1}, y0={self.y0}, y1={self.y1}"
            )

    @property
    def width(self) -> float:
        return self.x1 - self.x0

    @property
    def height(self) -> float:
        return self.y1 - self.y0

    @property
    def area(self) -> float:
        return self.width * self.height

    def midpoints(self) -> Tuple[float, float]:
        """
        Calculate the split point for subdivision.

        Returns:
            Tuple of (xm, ym), the exact midpoint of each axis
        """
        xm = (self.x0 + self.x1) / 2.0
        ym = (self.y0 + self.y1) / 2.0
        return xm, ym

    def subdivide(self) -> List[Rectangle]:
        """
        Subdivide rectangle into 4 children (quadrants).

        Child order (fixed, matches CELL_SYMBOLS): A, B, C, D
        - A: (x0..xm, y0..ym) lower left
        - B: (xm..x1, y0..ym) lower right
        - C: (x0..xm, ym..y1) upper left
        - D: (xm..x1, ym..y1) upper right

        Siblings share the same midpoint values, so the children tile the
        parent with no gap and no overlap.
        """
        xm, ym = self.midpoints()
        return [
            Rectangle(self.x0, xm, self.y0, ym),
            Rectangle(xm, self.x1, self.y0, ym),
            Rectangle(self.x0, xm, ym, self.y1),
            Rectangle(xm, self.x1, ym, self.y1),
        ]

    def child(self, symbol: str) -> Rectangle:
        """Return the quadrant selected by a single cell symbol."""
        index = CELL_SYMBOLS.find(symbol)
        if len(symbol) != 1 or index < 0:
            raise BadInputError(f"Invalid cell symbol {symbol!r}")
        return self.subdivide()[index]

    def owns(self, x: float, y: float, world: Rectangle) -> bool:
        """
        Check if point (x, y) belongs to this cell.

        Uses half-open intervals closed at the world's minimum edges, so
        every point of the world is owned by exactly one cell per depth.
        """
        return (
            owns_axis(x, self.x0, self.x1, world.x0)
            and owns_axis(y, self.y0, self.y1, world.y0)
        )

    def contains_rect(self, other: Rectangle) -> bool:
        """Check if other lies inside this rectangle (boundaries included)."""
        return (
            self.x0 <= other.x0 and other.x1 <= self.x1
            and self.y0 <= other.y0 and other.y1 <= self.y1
        )


@dataclass(frozen=True)
class SpatialGrid:
    """
    Immutable quad-tree coordinate system over a bounded world.

    Every cell at depth d has sides world.width / 2^d and world.height / 2^d.
    A grid is plain configuration: build it once and share it freely.
    """

    world: Rectangle
    """Bounds of the root cell."""

    max_depth: int = 16
    """Deepest level the matcher may descend to."""

    extra_depth: int = 5
    """Levels to descend past the shape's best-fit level."""

    def __post_init__(self):
        if not (self.world.x0 < self.world.x1 and self.world.y0 < self.world.y1):
            raise ConfigurationError(f"World must have positive extent: {self.world}")
        if self.max_depth < 1:
            raise ConfigurationError("max_depth must be at least 1")
        if self.extra_depth < 0:
            raise ConfigurationError("extra_depth must be non-negative")

    @classmethod
    def from_bounds(
        cls,
        min_x: float,
        max_x: float,
        min_y: float,
        max_y: float,
        max_depth: int = 16,
        extra_depth: int = 5,
    ) -> SpatialGrid:
        """Build a grid from (min x, max x, min y, max y) world bounds."""
        try:
            world = Rectangle(min_x, max_x, min_y, max_y)
        except ValueError as e:
            raise ConfigurationError(str(e)) from e
        return cls(world, max_depth=max_depth, extra_depth=extra_depth)

    @classmethod
    def default(cls) -> SpatialGrid:
        """
        The fixed grid used by schema-configured fields.

        Latitude is extended down to -270 so that the world is square and
        every cell is square in degrees.
        """
        return cls.from_bounds(-180.0, 180.0, -270.0, 90.0, max_depth=16, extra_depth=5)

    def cell_box(self, cell: str) -> Rectangle:
        """
        Compute the bounding rectangle of a cell identifier.

        Args:
            cell: String over CELL_SYMBOLS (empty for the root)

        Returns:
            Rectangle covered by the cell
        """
        box = self.world
        for symbol in cell:
            box = box.child(symbol)
        return box

    def cell_size(self, depth: int) -> Tuple[float, float]:
        """Return (width, height) of any cell at the given depth."""
        scale = 2 ** depth
        return self.world.width / scale, self.world.height / scale

    def cell_area(self, depth: int) -> float:
        """Area of any cell at the given depth."""
        return self.world.area / (4 ** depth)

    def best_fit_level(self, area: float) -> int:
        """
        Find the shallowest depth whose cell area is no larger than area.

        Zero-area shapes have no size anchor and fit at depth 0. Shapes
        smaller than the deepest cell fit at max_depth.
        """
        if area <= 0:
            return 0
        for depth in range(self.max_depth + 1):
            if self.cell_area(depth) <= area:
                return depth
        return self.max_depth

    def target_level(self, best_fit: int, extra_depth: int) -> int:
        """Level at which boundary cells become leaves, capped at max_depth."""
        return max(1, min(best_fit + extra_depth, self.max_depth))
