"""
Integration tests for compute_elbow_points.

These tests drive the full pipeline from bindings and a canvas snapshot to
flat relative points, including the route cache owned by ElbowRouter.
"""

import pytest

from elbowroute import (
    Binding,
    ElbowRouter,
    Point,
    RoutingConfig,
    ShapeSnapshot,
    compute_elbow_points,
)
from elbowroute.cache import RouteCache
from elbowroute.simplify import unflatten


class TestElbowPoints:
    """End-to-end routing from canvas snapshots."""

    def test_relative_to_start(self, router):
        points = router.compute_elbow_points(
            Point(100, 50), Point(300, 50), None, None, []
        )
        assert points == [0, 0, 200, 0]

    def test_even_length_flat_list(self, router, canvas_elements):
        points = router.compute_elbow_points(
            Point(120, 30), Point(400, 30), Binding("a"), Binding("b"), canvas_elements
        )
        assert len(points) % 2 == 0
        assert len(points) >= 4
        assert points[:2] == [0, 0]
        assert points[-2:] == [280, 0]

    def test_precise_binding_leaves_through_its_face(self, router, stacked_shapes):
        start = Binding("top", fixed_point=(1.0, 0.5), is_precise=True)
        points = router.compute_elbow_points(
            Point(100, 25), Point(50, 225), start, Binding("bottom"), stacked_shapes
        )
        first_corner = unflatten(points)[1]
        assert first_corner.y == 0
        assert first_corner.x > 0

    def test_missing_bound_shape(self, router):
        """A binding to an unknown element is routed like a free endpoint."""
        points = router.compute_elbow_points(
            Point(0, 0), Point(200, 0), Binding("ghost"), None, []
        )
        assert points == [0, 0, 200, 0]

    def test_function_without_cache(self):
        points = compute_elbow_points(Point(0, 0), Point(0, 200), None, None, [])
        assert points == [0, 0, 0, 200]

    def test_custom_config(self):
        router = ElbowRouter(config=RoutingConfig(min_stub_length=60))
        points = router.compute_elbow_points(
            Point(0, 0), Point(300, 100), None, None, []
        )
        corners = unflatten(points)
        assert corners[1].y == 0
        assert corners[1].x >= 60


class TestRouteCaching:
    """Route cache behavior through ElbowRouter."""

    def test_second_call_hits_cache(self, router):
        args = (Point(0, 0), Point(200, 80), None, None, [])
        first = router.compute_elbow_points(*args)
        second = router.compute_elbow_points(*args)
        assert first == second
        assert router.cache.hits == 1
        assert router.cache.misses == 1

    def test_jitter_hits_cache(self, router):
        """Sub-pixel moves round to the same key."""
        router.compute_elbow_points(Point(0.1, 0), Point(200, 0), None, None, [])
        router.compute_elbow_points(Point(0.2, 0), Point(200, 0), None, None, [])
        assert router.cache.hits == 1
        assert len(router.cache) == 1

    def test_moved_endpoint_misses(self, router):
        router.compute_elbow_points(Point(0, 0), Point(200, 0), None, None, [])
        router.compute_elbow_points(Point(0, 0), Point(210, 0), None, None, [])
        assert router.cache.hits == 0
        assert len(router.cache) == 2

    def test_new_obstacle_misses(self, router):
        box = ShapeSnapshot("box", "rectangle", 100, -50, 100, 100)
        clear = router.compute_elbow_points(Point(0, 0), Point(300, 0), None, None, [])
        blocked = router.compute_elbow_points(
            Point(0, 0), Point(300, 0), None, None, [box]
        )
        assert router.cache.hits == 0
        assert clear == [0, 0, 300, 0]
        assert blocked != clear

    def test_stub_length_misses(self, router):
        router.compute_elbow_points(Point(0, 0), Point(300, 90), None, None, [])
        router.compute_elbow_points(
            Point(0, 0), Point(300, 90), None, None, [], min_stub_length=80
        )
        assert router.cache.hits == 0

    def test_mutating_result_does_not_touch_cache(self, router):
        args = (Point(0, 0), Point(200, 80), None, None, [])
        first = router.compute_elbow_points(*args)
        expected = list(first)
        first.append(999)
        first[0] = 42
        assert router.compute_elbow_points(*args) == expected

    def test_clear_cache(self, router):
        args = (Point(0, 0), Point(200, 80), None, None, [])
        router.compute_elbow_points(*args)
        router.clear_cache()
        assert len(router.cache) == 0
        router.compute_elbow_points(*args)
        assert router.cache.hits == 0
        assert router.cache.misses == 1

    def test_capacity_bounds_cache(self):
        router = ElbowRouter(cache_capacity=1)
        router.compute_elbow_points(Point(0, 0), Point(200, 0), None, None, [])
        router.compute_elbow_points(Point(0, 0), Point(0, 200), None, None, [])
        assert len(router.cache) == 1

    def test_zero_capacity_rejected(self):
        with pytest.raises(ValueError):
            ElbowRouter(cache_capacity=0)

    def test_shared_cache_keeps_configs_apart(self):
        """A cache shared between configs never returns a foreign route."""
        cache = RouteCache()
        long_stub = RoutingConfig(min_stub_length=100)
        args = (Point(0, 0), Point(300, 100), None, None, [])
        compute_elbow_points(*args, cache=cache)
        shared = compute_elbow_points(*args, cache=cache, config=long_stub)
        assert shared == compute_elbow_points(*args, config=long_stub)
        assert shared[2] >= 100
        assert cache.hits == 0
        assert len(cache) == 2

    def test_shared_cache_argument(self):
        cache = RouteCache()
        args = (Point(0, 0), Point(200, 80), None, None, [])
        compute_elbow_points(*args, cache=cache)
        compute_elbow_points(*args, cache=cache)
        assert cache.hits == 1
