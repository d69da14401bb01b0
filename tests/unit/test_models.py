"""
Tests for the models module.

Covers the value types shared by the routing stages: points, directions,
rectangles, bindings and shape snapshots.
"""

import pytest

from elbowroute.models import (
    BBox,
    Binding,
    Direction,
    Point,
    Rect,
    ShapeSnapshot,
)


class TestDirection:
    """Tests for the Direction enum."""

    def test_parse_names(self):
        """Direction names parse case-insensitively."""
        assert Direction.parse("up") is Direction.UP
        assert Direction.parse("LEFT") is Direction.LEFT

    def test_parse_passes_directions_through(self):
        assert Direction.parse(Direction.DOWN) is Direction.DOWN

    def test_parse_unknown_raises(self):
        with pytest.raises(ValueError, match="north"):
            Direction.parse("north")

    def test_vectors_use_screen_coordinates(self):
        """Up decreases y, down increases it."""
        assert Direction.UP.vector == (0, -1)
        assert Direction.DOWN.vector == (0, 1)
        assert Direction.LEFT.vector == (-1, 0)
        assert Direction.RIGHT.vector == (1, 0)

    def test_opposite(self):
        assert Direction.UP.opposite is Direction.DOWN
        assert Direction.LEFT.opposite is Direction.RIGHT

    def test_is_vertical(self):
        assert Direction.UP.is_vertical
        assert Direction.DOWN.is_vertical
        assert not Direction.LEFT.is_vertical
        assert not Direction.RIGHT.is_vertical

    def test_between(self):
        origin = Point(0, 0)
        assert Direction.between(origin, Point(5, 0)) is Direction.RIGHT
        assert Direction.between(origin, Point(-5, 0)) is Direction.LEFT
        assert Direction.between(origin, Point(0, 5)) is Direction.DOWN
        assert Direction.between(origin, Point(0, -5)) is Direction.UP

    def test_between_same_point(self):
        assert Direction.between(Point(3, 4), Point(3, 4)) is None


class TestRect:
    """Tests for Rect geometry."""

    def test_edges_and_center(self):
        rect = Rect(10, 20, 100, 50)
        assert rect.right == 110
        assert rect.bottom == 70
        assert rect.center_x == 60
        assert rect.center_y == 45

    def test_contains_is_strict(self):
        """Boundary points are not inside."""
        rect = Rect(0, 0, 10, 10)
        assert rect.contains(Point(5, 5))
        assert not rect.contains(Point(0, 5))
        assert not rect.contains(Point(10, 10))
        assert not rect.contains(Point(11, 5))

    def test_intersects(self):
        rect = Rect(0, 0, 10, 10)
        assert rect.intersects(Rect(5, 5, 10, 10))
        assert not rect.intersects(Rect(10, 0, 10, 10))
        assert not rect.intersects(Rect(20, 20, 5, 5))

    def test_inflate(self):
        assert Rect(0, 0, 10, 10).inflate(2, 3) == Rect(-2, -3, 14, 16)

    def test_union(self):
        union = Rect(0, 0, 10, 10).union(Rect(20, -5, 10, 10))
        assert union == Rect(0, -5, 30, 15)

    def test_from_bbox(self):
        assert Rect.from_bbox(BBox(1, 2, 3, 4)) == Rect(1, 2, 3, 4)

    def test_at_point(self):
        rect = Rect.at_point(Point(7, 8))
        assert (rect.left, rect.top, rect.width, rect.height) == (7, 8, 0, 0)


class TestBinding:
    """Tests for Binding."""

    def test_default_is_center(self):
        assert Binding("a").is_center

    def test_imprecise_binding_is_center(self):
        """Imprecise bindings ignore their fixed point."""
        assert Binding("a", fixed_point=(1.0, 0.5)).is_center

    def test_precise_edge_binding(self):
        assert not Binding("a", fixed_point=(1.0, 0.5), is_precise=True).is_center

    def test_precise_center_binding(self):
        assert Binding("a", fixed_point=(0.5, 0.5), is_precise=True).is_center

    def test_dict_round_trip(self):
        binding = Binding("shape-1", fixed_point=(0.0, 0.25), gap=4, is_precise=True)
        data = binding.to_dict()
        assert data["elementId"] == "shape-1"
        assert data["isPrecise"] is True
        assert Binding.from_dict(data) == binding

    def test_from_dict_defaults(self):
        binding = Binding.from_dict({"elementId": "x"})
        assert binding.fixed_point == (0.5, 0.5)
        assert binding.gap == 0.0
        assert not binding.is_precise


class TestShapeSnapshot:
    """Tests for ShapeSnapshot."""

    def test_obstacle_types(self):
        assert ShapeSnapshot("r", "rectangle", 0, 0, 1, 1).is_obstacle
        assert ShapeSnapshot("t", "text", 0, 0, 1, 1).is_obstacle
        assert not ShapeSnapshot("a", "arrow", 0, 0, 1, 1).is_obstacle
        assert not ShapeSnapshot("f", "freedraw", 0, 0, 1, 1).is_obstacle

    def test_bounding_box_unrotated(self):
        shape = ShapeSnapshot("r", "rectangle", 10, 20, 100, 50)
        assert shape.bounding_box() == BBox(10, 20, 100, 50)

    def test_bounding_box_rotated_quarter_turn(self):
        """A 90 degree rotation swaps width and height around the center."""
        shape = ShapeSnapshot("r", "rectangle", 0, 0, 100, 50, rotation=90)
        bbox = shape.bounding_box()
        assert bbox.x == pytest.approx(25)
        assert bbox.y == pytest.approx(-25)
        assert bbox.width == pytest.approx(50)
        assert bbox.height == pytest.approx(100)

    def test_bounding_box_rotated_grows(self):
        """Any non-axis rotation produces a larger enclosing box."""
        shape = ShapeSnapshot("r", "rectangle", 0, 0, 100, 100, rotation=45)
        bbox = shape.bounding_box()
        assert bbox.width > 100
        assert bbox.height > 100
        assert bbox.center.x == pytest.approx(50)
        assert bbox.center.y == pytest.approx(50)

    def test_dict_round_trip(self):
        shape = ShapeSnapshot("r", "ellipse", 1, 2, 3, 4, rotation=15, is_visible=False)
        data = shape.to_dict()
        assert data["isVisible"] is False
        assert ShapeSnapshot.from_dict(data) == shape

    def test_from_dict_missing_rotation(self):
        shape = ShapeSnapshot.from_dict(
            {"id": "r", "type": "rectangle", "x": 0, "y": 0, "width": 5, "height": 5}
        )
        assert shape.rotation == 0.0
        assert shape.is_visible
