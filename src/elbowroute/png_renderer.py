"""
PNG Renderer module for route debugging.

Renders a RouteTrace as a PNG image: the inflated obstacles, the waypoint
grid and its edges, the final route and the two endpoints.
"""

import math
from typing import Iterable, List, Tuple

from PIL import Image, ImageDraw, ImageFont

from .models import Point
from .tracer import RouteTrace


class RoutePNGRenderer:
    """Renders routing traces as PNG images."""

    def __init__(
        self,
        scale: int = 2,
        margin: int = 40,
        spot_radius: int = 2,
        route_width: int = 2,
        draw_grid: bool = True,
        draw_label: bool = True,
    ):
        self.scale = scale
        self.margin = margin
        self.spot_radius = spot_radius
        self.route_width = route_width
        self.draw_grid = draw_grid
        self.draw_label = draw_label

        # Colors
        self.bg_color = (255, 255, 255)
        self.obstacle_fill = (255, 235, 235)
        self.obstacle_outline = (200, 80, 80)
        self.edge_color = (215, 215, 215)
        self.spot_color = (150, 150, 150)
        self.route_color = (0, 0, 0)
        self.start_color = (40, 160, 60)
        self.end_color = (40, 90, 200)
        self.text_color = (0, 0, 0)

        self._origin = (0.0, 0.0)

    def _extent(self, trace: RouteTrace) -> Tuple[float, float, float, float]:
        """World bounding box (left, top, right, bottom) of everything drawn."""
        xs: List[float] = []
        ys: List[float] = []
        for obs in trace.obstacles:
            xs.extend((obs.left, obs.right))
            ys.extend((obs.top, obs.bottom))
        points: Iterable[Point] = [*trace.route, *trace.spots]
        for p in points:
            xs.append(p.x)
            ys.append(p.y)
        for p in (trace.start, trace.end):
            if p is not None:
                xs.append(p.x)
                ys.append(p.y)
        if not xs:
            return 0.0, 0.0, 0.0, 0.0
        return min(xs), min(ys), max(xs), max(ys)

    def _to_px(self, x: float, y: float) -> Tuple[float, float]:
        ox, oy = self._origin
        return (
            (x - ox + self.margin) * self.scale,
            (y - oy + self.margin) * self.scale,
        )

    def render(self, trace: RouteTrace, output_path: str = "route.png") -> str:
        """
        Render the trace as a PNG image.

        Args:
            trace: Trace recorded by a debug ElbowRouter
            output_path: Path to save the PNG file

        Returns:
            Path to the saved PNG file
        """
        left, top, right, bottom = self._extent(trace)
        self._origin = (left, top)

        width = int(math.ceil((right - left + self.margin * 2) * self.scale)) + 1
        height = int(math.ceil((bottom - top + self.margin * 2) * self.scale)) + 1

        img = Image.new("RGB", (width, height), self.bg_color)
        draw = ImageDraw.Draw(img)

        # Obstacles first so everything else draws on top
        line_width = max(1, self.scale)
        for obs in trace.obstacles:
            x1, y1 = self._to_px(obs.left, obs.top)
            x2, y2 = self._to_px(obs.right, obs.bottom)
            draw.rectangle(
                [x1, y1, x2, y2],
                fill=self.obstacle_fill,
                outline=self.obstacle_outline,
                width=line_width,
            )

        if self.draw_grid:
            for a, b in trace.edges:
                draw.line(
                    [self._to_px(*a), self._to_px(*b)], fill=self.edge_color, width=1
                )
            r = self.spot_radius
            for p in trace.spots:
                px, py = self._to_px(*p)
                draw.ellipse([px - r, py - r, px + r, py + r], fill=self.spot_color)

        self._draw_route(draw, trace.route)

        for p, color in ((trace.start, self.start_color), (trace.end, self.end_color)):
            if p is not None:
                self._draw_marker(draw, p, color)

        if self.draw_label and trace.outcome:
            font = ImageFont.load_default()
            label = f"{trace.outcome}: {len(trace.route)} points"
            draw.text((4, 4), label, fill=self.text_color, font=font)

        img.save(output_path, "PNG")
        return output_path

    def _draw_route(self, draw: ImageDraw.ImageDraw, route: List[Point]):
        """Draw the route polyline with an arrowhead at its end."""
        if len(route) < 2:
            return
        width = self.route_width * self.scale
        pixels = [self._to_px(*p) for p in route]
        for p1, p2 in zip(pixels, pixels[1:]):
            draw.line([p1, p2], fill=self.route_color, width=width)

        if pixels[-2] != pixels[-1]:
            self._draw_arrowhead(draw, pixels[-2], pixels[-1])

    def _draw_marker(self, draw: ImageDraw.ImageDraw, point: Point, color):
        r = 4 * self.scale
        px, py = self._to_px(*point)
        draw.ellipse([px - r, py - r, px + r, py + r], outline=color, width=2)

    def _draw_arrowhead(
        self,
        draw: ImageDraw.ImageDraw,
        from_point: Tuple[float, float],
        to_point: Tuple[float, float],
    ):
        """Draw an arrowhead at the end of a line."""
        x1, y1 = from_point
        x2, y2 = to_point

        arrow_size = 8 * self.scale

        # Calculate angle
        angle = math.atan2(y2 - y1, x2 - x1)

        # Calculate arrowhead points
        angle1 = angle + math.pi * 0.8
        angle2 = angle - math.pi * 0.8

        ax1 = x2 + arrow_size * math.cos(angle1)
        ay1 = y2 + arrow_size * math.sin(angle1)
        ax2 = x2 + arrow_size * math.cos(angle2)
        ay2 = y2 + arrow_size * math.sin(angle2)

        draw.polygon([(x2, y2), (ax1, ay1), (ax2, ay2)], fill=self.route_color)


def render_to_png(trace: RouteTrace, output_path: str = "route.png", **kwargs) -> str:
    """
    Convenience function to render a route trace to PNG.

    Args:
        trace: Trace recorded by a debug ElbowRouter
        output_path: Path to save the PNG file
        **kwargs: Additional parameters for RoutePNGRenderer

    Returns:
        Path to the saved PNG file
    """
    renderer = RoutePNGRenderer(**kwargs)
    return renderer.render(trace, output_path)
