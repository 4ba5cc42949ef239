"""Tests for grid data structures."""

import pytest
from quadtokens.exceptions import BadInputError, ConfigurationError
from quadtokens.grid import (
    CELL_SYMBOLS,
    Rectangle,
    SpatialGrid,
)


class TestRectangle:
    """Tests for Rectangle class."""

    def test_basic_creation(self):
        """Test basic rectangle creation."""
        r = Rectangle(0, 10, 0, 20)
        assert r.x0 == 0
        assert r.x1 == 10
        assert r.y0 == 0
        assert r.y1 == 20

    def test_invalid_rectangle(self):
        """Test that invalid rectangles raise errors."""
        with pytest.raises(ValueError):
            Rectangle(10, 0, 0, 10)  # x0 > x1

        with pytest.raises(ValueError):
            Rectangle(0, 10, 10, 0)  # y0 > y1

    def test_width_height_area(self):
        """Test width, height and area properties."""
        r = Rectangle(0, 10, 0, 20)
        assert r.width == 10
        assert r.height == 20
        assert r.area == 200

    def test_midpoints(self):
        """Test midpoint calculation."""
        r = Rectangle(0, 10, 0, 20)
        assert r.midpoints() == (5.0, 10.0)

    def test_subdivide_order(self):
        """Test children come in A (lower left), B, C, D (upper right) order."""
        r = Rectangle(0, 10, 0, 10)
        children = r.subdivide()

        assert children == [
            Rectangle(0, 5, 0, 5),    # A: lower left
            Rectangle(5, 10, 0, 5),   # B: lower right
            Rectangle(0, 5, 5, 10),   # C: upper left
            Rectangle(5, 10, 5, 10),  # D: upper right
        ]

    def test_subdivide_tiles_parent(self):
        """Test children reconstruct the parent exactly."""
        r = Rectangle(-180, 180, -90, 90)
        children = r.subdivide()

        assert sum(c.area for c in children) == r.area
        assert min(c.x0 for c in children) == r.x0
        assert max(c.x1 for c in children) == r.x1
        assert min(c.y0 for c in children) == r.y0
        assert max(c.y1 for c in children) == r.y1
        # Siblings share the exact split value
        assert children[0].x1 == children[1].x0
        assert children[0].y1 == children[2].y0

    def test_child(self):
        """Test selecting a quadrant by symbol."""
        r = Rectangle(0, 10, 0, 10)
        assert r.child("D") == Rectangle(5, 10, 5, 10)

        with pytest.raises(BadInputError):
            r.child("E")

    def test_owns_interior_point(self):
        """Test ownership of a point strictly inside."""
        world = Rectangle(0, 10, 0, 10)
        assert world.subdivide()[0].owns(2, 2, world)
        assert not world.subdivide()[3].owns(2, 2, world)

    def test_owns_split_line_goes_lower_left(self):
        """Test a point on a split line belongs to the lower/left cell."""
        world = Rectangle(0, 10, 0, 10)
        a, b, c, d = world.subdivide()

        assert a.owns(5, 5, world)
        assert not b.owns(5, 5, world)
        assert not c.owns(5, 5, world)
        assert not d.owns(5, 5, world)

    def test_owns_world_edges(self):
        """Test points on the world's edges are owned by exactly one cell."""
        world = Rectangle(0, 10, 0, 10)
        children = world.subdivide()

        for point in [(0, 0), (10, 10), (0, 10), (10, 0), (0, 7), (7, 0)]:
            owners = [c for c in children if c.owns(point[0], point[1], world)]
            assert len(owners) == 1, point

    def test_owns_outside_world(self):
        """Test points outside the world are owned by no cell."""
        world = Rectangle(0, 10, 0, 10)
        assert not world.owns(11, 5, world)
        assert not world.owns(-1, 5, world)

    def test_contains_rect(self):
        """Test rectangle containment."""
        r = Rectangle(0, 10, 0, 10)
        assert r.contains_rect(Rectangle(2, 3, 2, 3))
        assert r.contains_rect(r)
        assert not r.contains_rect(Rectangle(5, 11, 0, 1))


class TestSpatialGrid:
    """Tests for SpatialGrid class."""

    def test_default_grid(self):
        """Test the fixed schema grid is square."""
        grid = SpatialGrid.default()
        assert grid.world == Rectangle(-180, 180, -270, 90)
        assert grid.max_depth == 16
        assert grid.extra_depth == 5
        assert grid.world.width == grid.world.height

    def test_invalid_world(self):
        """Test that a world without extent is rejected."""
        with pytest.raises(ConfigurationError):
            SpatialGrid.from_bounds(0, 0, 0, 10)

        with pytest.raises(ConfigurationError):
            SpatialGrid.from_bounds(10, 0, 0, 10)

    def test_invalid_depths(self):
        """Test depth validation."""
        with pytest.raises(ConfigurationError):
            SpatialGrid.from_bounds(0, 10, 0, 10, max_depth=0)

        with pytest.raises(ConfigurationError):
            SpatialGrid.from_bounds(0, 10, 0, 10, extra_depth=-1)

    def test_grid_is_immutable(self):
        """Test that a grid cannot be modified after creation."""
        grid = SpatialGrid.from_bounds(0, 10, 0, 10)
        with pytest.raises(AttributeError):
            grid.max_depth = 3

    def test_cell_box_root(self):
        """Test the root cell covers the world."""
        grid = SpatialGrid.from_bounds(-180, 180, -90, 90)
        assert grid.cell_box("") == grid.world

    def test_cell_box_nested(self):
        """Test each symbol narrows the box to one quadrant."""
        grid = SpatialGrid.from_bounds(0, 16, 0, 16)
        assert grid.cell_box("A") == Rectangle(0, 8, 0, 8)
        assert grid.cell_box("AD") == Rectangle(4, 8, 4, 8)
        assert grid.cell_box("ADB") == Rectangle(6, 8, 4, 6)

    def test_cell_box_size_matches_depth(self):
        """Test cell sides halve at every level."""
        grid = SpatialGrid.from_bounds(-180, 180, -90, 90)
        for cell in ["A", "BC", "DDA", "CABD"]:
            box = grid.cell_box(cell)
            width, height = grid.cell_size(len(cell))
            assert box.width == width
            assert box.height == height

    def test_cell_box_invalid_symbol(self):
        """Test malformed identifiers are rejected."""
        grid = SpatialGrid.from_bounds(0, 10, 0, 10)
        with pytest.raises(BadInputError):
            grid.cell_box("AX")

    def test_cell_area(self):
        """Test cell area divides by four per level."""
        grid = SpatialGrid.from_bounds(0, 16, 0, 16)
        assert grid.cell_area(0) == 256
        assert grid.cell_area(1) == 64
        assert grid.cell_area(2) == 16

    def test_best_fit_level(self):
        """Test best fit picks the shallowest cell no larger than the area."""
        grid = SpatialGrid.from_bounds(0, 16, 0, 16, max_depth=8)
        assert grid.best_fit_level(256) == 0
        assert grid.best_fit_level(100) == 1
        assert grid.best_fit_level(64) == 1  # tie favors the shallower level
        assert grid.best_fit_level(16) == 2

    def test_best_fit_level_zero_area(self):
        """Test zero-area shapes fit at the root."""
        grid = SpatialGrid.from_bounds(0, 16, 0, 16)
        assert grid.best_fit_level(0.0) == 0

    def test_best_fit_level_tiny_area(self):
        """Test shapes smaller than the deepest cell fit at max depth."""
        grid = SpatialGrid.from_bounds(0, 16, 0, 16, max_depth=4)
        assert grid.best_fit_level(1e-9) == 4

    def test_target_level(self):
        """Test the target level is capped and at least 1."""
        grid = SpatialGrid.from_bounds(0, 16, 0, 16, max_depth=6)
        assert grid.target_level(0, 5) == 5
        assert grid.target_level(3, 5) == 6
        assert grid.target_level(0, 0) == 1

    def test_symbols(self):
        """Test the fan-out alphabet."""
        assert CELL_SYMBOLS == "ABCD"
