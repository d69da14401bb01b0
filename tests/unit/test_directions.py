"""
Tests for direction resolution.

These tests pin the exit-face rules for unbound endpoints, precise
bindings and center bindings.
"""

import pytest

from elbowroute.directions import (
    direction_from_edge_point,
    direction_from_fixed_point,
    direction_from_points,
    direction_from_shape_to_point,
    preferred_elbow_direction,
    resolve_direction,
)
from elbowroute.models import BBox, Binding, Direction, Point


class TestDirectionFromPoints:
    """Dominant-axis rule."""

    @pytest.mark.parametrize(
        "to, expected",
        [
            (Point(100, 10), Direction.RIGHT),
            (Point(-100, 10), Direction.LEFT),
            (Point(10, 100), Direction.DOWN),
            (Point(10, -100), Direction.UP),
        ],
    )
    def test_dominant_axis(self, to, expected):
        assert direction_from_points(Point(0, 0), to) is expected

    def test_tie_favors_horizontal(self):
        assert direction_from_points(Point(0, 0), Point(50, 50)) is Direction.RIGHT
        assert direction_from_points(Point(0, 0), Point(-50, 50)) is Direction.LEFT

    def test_same_point(self):
        assert direction_from_points(Point(3, 3), Point(3, 3)) is Direction.RIGHT


class TestDirectionFromFixedPoint:
    """Nearest-face rule for precise bindings."""

    @pytest.mark.parametrize(
        "fixed_point, expected",
        [
            ((0.5, 0.0), Direction.UP),
            ((0.5, 1.0), Direction.DOWN),
            ((0.0, 0.5), Direction.LEFT),
            ((1.0, 0.5), Direction.RIGHT),
            ((0.9, 0.3), Direction.RIGHT),
        ],
    )
    def test_faces(self, fixed_point, expected):
        assert direction_from_fixed_point(fixed_point) is expected

    def test_corner_tie_prefers_vertical(self):
        """Ties resolve in the order up, down, left, right."""
        assert direction_from_fixed_point((0.0, 0.0)) is Direction.UP
        assert direction_from_fixed_point((1.0, 1.0)) is Direction.DOWN


class TestPreferredElbowDirection:
    """Center-binding rule."""

    def test_diagonal_exits_vertically(self):
        shape = BBox(0, 0, 100, 50)
        assert preferred_elbow_direction(shape, Point(300, 200)) is Direction.DOWN
        assert preferred_elbow_direction(shape, Point(300, -200)) is Direction.UP

    def test_strongly_horizontal_exits_sideways(self):
        shape = BBox(0, 0, 100, 50)
        assert preferred_elbow_direction(shape, Point(500, 25)) is Direction.RIGHT
        assert preferred_elbow_direction(shape, Point(-500, 30)) is Direction.LEFT

    def test_uses_normalized_offsets(self):
        """A wide shape needs a larger horizontal offset to exit sideways."""
        wide = BBox(0, 0, 400, 20)
        # dx/hw = 300/200 = 1.5, dy/hh = 40/10 = 4
        assert preferred_elbow_direction(wide, Point(500, 50)) is Direction.DOWN

    def test_zero_size_shape(self):
        assert preferred_elbow_direction(BBox(0, 0, 0, 0), Point(100, 0)) is (
            Direction.RIGHT
        )


class TestDirectionFromShapeToPoint:
    """Face that geometrically faces a target."""

    def test_faces(self):
        shape = BBox(0, 0, 100, 50)
        assert direction_from_shape_to_point(shape, Point(300, 200)) is Direction.DOWN
        assert direction_from_shape_to_point(shape, Point(300, 40)) is Direction.RIGHT
        assert direction_from_shape_to_point(shape, Point(50, -100)) is Direction.UP
        assert direction_from_shape_to_point(shape, Point(-80, 25)) is Direction.LEFT


class TestDirectionFromEdgePoint:
    """Face nearest a point on the edge."""

    def test_faces(self):
        shape = BBox(0, 0, 100, 50)
        assert direction_from_edge_point(shape, Point(50, 0)) is Direction.UP
        assert direction_from_edge_point(shape, Point(50, 50)) is Direction.DOWN
        assert direction_from_edge_point(shape, Point(0, 25)) is Direction.LEFT
        assert direction_from_edge_point(shape, Point(100, 25)) is Direction.RIGHT


class TestResolveDirection:
    """Priority rules for one endpoint."""

    def test_no_binding(self):
        assert resolve_direction(Point(0, 0), Point(0, 100)) is Direction.DOWN

    def test_precise_binding_uses_fixed_point(self):
        """A precise edge binding wins over geometry."""
        binding = Binding("a", fixed_point=(0.0, 0.5), is_precise=True)
        shape = BBox(0, 0, 100, 50)
        direction = resolve_direction(Point(0, 25), Point(500, 25), binding, shape)
        assert direction is Direction.LEFT

    def test_center_binding_uses_shape(self):
        shape = BBox(0, 0, 100, 50)
        direction = resolve_direction(
            Point(50, 25), Point(300, 200), Binding("a"), shape
        )
        assert direction is Direction.DOWN

    def test_center_binding_without_shape(self):
        """Falls back to the dominant axis when the shape is unknown."""
        direction = resolve_direction(Point(50, 25), Point(300, 200), Binding("a"))
        assert direction is Direction.RIGHT
