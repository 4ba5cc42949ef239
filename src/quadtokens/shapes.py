"""
Shapes that can be matched against the quad grid.

A shape only has to answer one question for the matcher: how does it
relate to a given cell rectangle. Points and boxes answer it directly;
everything else is delegated to shapely.

Shape literal grammar accepted by parse_shape:

- ``X Y``: a point
- ``XMin YMin XMax YMax``: a box (XMin > XMax wraps across the world seam)
- any WKT geometry, e.g. ``POLYGON((0 0, 10 0, 10 10, 0 10, 0 0))``
"""

from __future__ import annotations
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional
import math
import re

from shapely import get_parts, wkt
from shapely.errors import ShapelyError
from shapely.geometry import LineString, MultiLineString, box as shapely_box
from shapely.geometry.base import BaseGeometry
from shapely.ops import unary_union
from shapely.prepared import prep
from shapely.validation import explain_validity

from .exceptions import BadInputError
from .grid import Rectangle, owns_axis


_SEPARATORS = re.compile(r"[\s,]+")


class Relation(Enum):
    """How a shape relates to a cell."""

    DISJOINT = "disjoint"
    CONTAINS = "contains"  # cell lies inside the shape
    WITHIN = "within"  # shape lies inside the cell
    INTERSECTS = "intersects"  # boundary overlap


class Shape(ABC):
    """Abstract base class for matchable shapes."""

    @abstractmethod
    def relate(self, cell: Rectangle, world: Rectangle) -> Relation:
        """
        Relate this shape to a cell rectangle.

        Args:
            cell: The cell's bounding rectangle
            world: The grid's world rectangle (for seam and edge handling)

        Returns:
            Relation of the cell to the shape
        """
        pass

    @abstractmethod
    def bbox_area(self, world: Rectangle) -> float:
        """Area of the shape's bounding box, used to pick the best-fit level."""
        pass

    @property
    def is_empty(self) -> bool:
        return False


@dataclass(frozen=True)
class Point(Shape):
    """A single point."""
    x: float
    y: float

    def relate(self, cell: Rectangle, world: Rectangle) -> Relation:
        if cell.owns(self.x, self.y, world):
            return Relation.WITHIN
        return Relation.DISJOINT

    def bbox_area(self, world: Rectangle) -> float:
        return 0.0


def _overlap_axis(lo: float, hi: float, c0: float, c1: float, origin: float) -> bool:
    # Degenerate extents follow point ownership, others need interior overlap
    if lo == hi:
        return owns_axis(lo, c0, c1, origin)
    return lo < c1 and hi > c0


@dataclass(frozen=True)
class Box(Shape):
    """
    An axis-aligned box.

    When min_x > max_x the box crosses the world's horizontal seam and
    covers [min_x, world max x] plus [world min x, max_x].
    """
    min_x: float
    max_x: float
    min_y: float
    max_y: float

    def __post_init__(self):
        if self.min_y > self.max_y:
            raise BadInputError(
                f"Invalid box: min_y={self.min_y} is greater than max_y={self.max_y}"
            )

    @property
    def crosses_seam(self) -> bool:
        return self.min_x > self.max_x

    def parts(self, world: Rectangle) -> List[Box]:
        """Split a seam-crossing box into its two non-wrapping halves."""
        if not self.crosses_seam:
            return [self]
        return [
            Box(self.min_x, world.x1, self.min_y, self.max_y),
            Box(world.x0, self.max_x, self.min_y, self.max_y),
        ]

    def _relate_simple(self, cell: Rectangle, world: Rectangle) -> Relation:
        if not (
            _overlap_axis(self.min_x, self.max_x, cell.x0, cell.x1, world.x0)
            and _overlap_axis(self.min_y, self.max_y, cell.y0, cell.y1, world.y0)
        ):
            return Relation.DISJOINT

        if (
            self.min_x <= cell.x0 and cell.x1 <= self.max_x
            and self.min_y <= cell.y0 and cell.y1 <= self.max_y
        ):
            return Relation.CONTAINS

        if (
            cell.x0 <= self.min_x and self.max_x <= cell.x1
            and cell.y0 <= self.min_y and self.max_y <= cell.y1
        ):
            return Relation.WITHIN

        return Relation.INTERSECTS

    def relate(self, cell: Rectangle, world: Rectangle) -> Relation:
        if not self.crosses_seam:
            return self._relate_simple(cell, world)

        relations = {part._relate_simple(cell, world) for part in self.parts(world)}
        if Relation.CONTAINS in relations:
            return Relation.CONTAINS
        relations.discard(Relation.DISJOINT)
        if not relations:
            return Relation.DISJOINT
        if relations == {Relation.WITHIN}:
            return Relation.WITHIN
        return Relation.INTERSECTS

    def bbox_area(self, world: Rectangle) -> float:
        if self.crosses_seam:
            width = (world.x1 - self.min_x) + (self.max_x - world.x0)
        else:
            width = self.max_x - self.min_x
        return width * (self.max_y - self.min_y)


class GeometryShape(Shape):
    """
    Any shapely geometry (polygons, lines, multi-geometries).

    Relations are evaluated against a prepared geometry since the matcher
    asks the same shape about many cells.
    """

    def __init__(self, geometry: BaseGeometry):
        self.geometry = geometry
        self._prepared = None if geometry.is_empty else prep(geometry)
        self._areal = geometry.area > 0

    @property
    def is_empty(self) -> bool:
        return self.geometry.is_empty

    def relate(self, cell: Rectangle, world: Rectangle) -> Relation:
        if self._prepared is None:
            return Relation.DISJOINT

        cell_geom = shapely_box(cell.x0, cell.y0, cell.x1, cell.y1)
        if not self._prepared.intersects(cell_geom):
            return Relation.DISJOINT
        # Areal shapes that only share an edge with the cell do not overlap it
        if self._areal and self._prepared.touches(cell_geom):
            return Relation.DISJOINT
        if not self._areal and not self._owned_by(cell, cell_geom, world):
            return Relation.DISJOINT
        if self._prepared.covers(cell_geom):
            return Relation.CONTAINS
        if cell_geom.covers(self.geometry):
            return Relation.WITHIN
        return Relation.INTERSECTS

    def _owned_by(self, cell: Rectangle, cell_geom: BaseGeometry, world: Rectangle) -> bool:
        """
        Check if any part of a zero-area geometry inside the cell is owned by it.

        A cell does not own its lower and left edges, except where they lie
        on the world's minimum edges, matching Rectangle.owns for points.
        """
        edges = []
        if cell.y0 != world.y0:
            edges.append(LineString([(cell.x0, cell.y0), (cell.x1, cell.y0)]))
        if cell.x0 != world.x0:
            edges.append(LineString([(cell.x0, cell.y0), (cell.x0, cell.y1)]))
        if not edges:
            return True

        unowned = MultiLineString(edges)
        parts = get_parts(self.geometry.intersection(cell_geom))
        return any(not unowned.covers(part) for part in parts if not part.is_empty)

    def bbox_area(self, world: Rectangle) -> float:
        if self.geometry.is_empty:
            return 0.0
        minx, miny, maxx, maxy = self.geometry.bounds
        return (maxx - minx) * (maxy - miny)

    def __repr__(self) -> str:
        return f"GeometryShape({self.geometry.wkt})"


def shape_from_geometry(geometry: BaseGeometry) -> Shape:
    """
    Convert a shapely geometry to the most specific Shape.

    Points become Point, polygons equal to their own envelope become Box,
    and generic collections are merged so relate predicates apply to them.
    """
    if geometry.is_empty:
        return GeometryShape(geometry)

    if geometry.geom_type == "Point":
        return Point(geometry.x, geometry.y)

    if geometry.geom_type == "Polygon" and not geometry.interiors:
        if geometry.equals(geometry.envelope):
            minx, miny, maxx, maxy = geometry.bounds
            return Box(minx, maxx, miny, maxy)

    if geometry.geom_type == "GeometryCollection":
        geometry = unary_union(list(geometry.geoms))

    return GeometryShape(geometry)


def _parse_coordinates(text: str) -> Optional[List[float]]:
    try:
        values = [float(part) for part in _SEPARATORS.split(text) if part]
    except ValueError:
        return None
    for value in values:
        if not math.isfinite(value):
            raise BadInputError(f"Non-finite coordinate in shape literal {text!r}")
    return values


def parse_wkt(text: str) -> Shape:
    """
    Parse a WKT literal.

    Raises:
        BadInputError: if the text is not WKT or describes invalid geometry
    """
    try:
        geometry = wkt.loads(text)
    except (ShapelyError, ValueError, TypeError) as e:
        raise BadInputError(f"Unparseable shape literal {text!r}", cause=e) from e

    if not geometry.is_empty and not geometry.is_valid:
        reason = ValueError(explain_validity(geometry))
        raise BadInputError(f"Invalid geometry {text!r}", cause=reason) from reason

    return shape_from_geometry(geometry)


def parse_shape(value: str) -> Shape:
    """
    Parse a shape literal.

    Args:
        value: ``X Y``, ``XMin YMin XMax YMax`` or WKT

    Returns:
        Parsed Shape

    Raises:
        BadInputError: if the literal is malformed
    """
    text = value.strip()
    if not text:
        raise BadInputError("Empty shape literal")
    if text.startswith("["):
        raise BadInputError(f"Token literal is not a shape: {text!r}")

    coords = _parse_coordinates(text)
    if coords is None:
        return parse_wkt(text)

    if len(coords) == 2:
        return Point(coords[0], coords[1])
    if len(coords) == 4:
        x_min, y_min, x_max, y_max = coords
        return Box(x_min, x_max, y_min, y_max)

    raise BadInputError(
        f"Expected 2 (point) or 4 (box) coordinates, got {len(coords)}: {text!r}"
    )
