"""Tests for the PNG renderer module."""

import pytest
from PIL import Image

from elbowroute import BBox, Direction, Point
from elbowroute.png_renderer import RoutePNGRenderer, render_to_png
from elbowroute.tracer import RouteTrace


@pytest.fixture
def detour_trace(debug_router):
    """Trace of a route around a box between the endpoints."""
    debug_router.compute_elbow_route(
        Point(0, 0),
        Point(300, 0),
        Direction.RIGHT,
        Direction.LEFT,
        intermediate_obstacles=[BBox(100, -50, 100, 100)],
    )
    return debug_router.get_trace()


class TestRoutePNGRenderer:
    """Tests for RoutePNGRenderer class."""

    def test_render_trace(self, detour_trace, tmp_path):
        """Render a routed trace to PNG."""
        output_path = str(tmp_path / "route.png")
        result = RoutePNGRenderer().render(detour_trace, output_path)
        assert result == output_path
        with Image.open(output_path) as img:
            assert img.format == "PNG"

    def test_render_with_scale(self, detour_trace, tmp_path):
        """Image size follows the scale factor."""
        small = tmp_path / "small.png"
        large = tmp_path / "large.png"
        RoutePNGRenderer(scale=1).render(detour_trace, str(small))
        RoutePNGRenderer(scale=3).render(detour_trace, str(large))
        with Image.open(small) as a, Image.open(large) as b:
            assert b.width > a.width * 2
            assert b.height > a.height * 2

    def test_render_without_grid(self, detour_trace, tmp_path):
        output_path = tmp_path / "bare.png"
        RoutePNGRenderer(draw_grid=False, draw_label=False).render(
            detour_trace, str(output_path)
        )
        assert output_path.stat().st_size > 0

    def test_render_empty_trace(self, tmp_path):
        """An empty trace still produces a valid image."""
        output_path = tmp_path / "empty.png"
        RoutePNGRenderer().render(RouteTrace(), str(output_path))
        with Image.open(output_path) as img:
            assert img.format == "PNG"

    def test_route_drawn_in_route_color(self, tmp_path):
        trace = RouteTrace(
            start=Point(0, 0),
            end=Point(100, 0),
            route=[Point(0, 0), Point(100, 0)],
        )
        renderer = RoutePNGRenderer(
            scale=1, route_width=3, draw_grid=False, draw_label=False
        )
        output_path = tmp_path / "line.png"
        renderer.render(trace, str(output_path))
        with Image.open(output_path) as img:
            # Middle of the line, well away from the endpoint markers
            assert img.convert("RGB").getpixel((90, 40)) == renderer.route_color


class TestRenderToPNG:
    """Tests for render_to_png convenience function."""

    def test_render_to_png(self, detour_trace, tmp_path):
        output_path = str(tmp_path / "route.png")
        assert render_to_png(detour_trace, output_path, scale=1) == output_path
        with Image.open(output_path) as img:
            assert img.format == "PNG"
