#!/usr/bin/env python3
"""
Demo script for the elbow connector router.

Routes a handful of typical connector layouts and prints the resulting
points. Pass a directory as the first argument to also write a debug PNG
for every scenario.

    python demo.py
    python demo.py out/
"""

import os
import sys

from elbowroute import (
    BBox,
    Binding,
    Direction,
    ElbowRouter,
    Point,
    ShapeSnapshot,
    render_to_png,
)
from elbowroute.simplify import count_bends


def print_header(title):
    """Print a formatted header."""
    print("\n" + "=" * 70)
    print(f"  {title}")
    print("=" * 70 + "\n")


def show(router, title, route, png_dir):
    print_header(title)
    for p in route:
        print(f"  ({p.x:g}, {p.y:g})")
    print(f"\n  bends: {count_bends(route)}")

    trace = router.get_trace()
    if png_dir and trace is not None:
        slug = title.lower().split(":")[0].replace(" ", "_")
        path = render_to_png(trace, os.path.join(png_dir, f"{slug}.png"))
        print(f"  debug image: {path}")


def scenario_a(router, png_dir):
    """Scenario A: Unbound endpoints on one line"""
    route = router.compute_elbow_route(
        Point(0, 0), Point(200, 0), Direction.RIGHT, Direction.LEFT
    )
    show(router, "Scenario A: straight horizontal", route, png_dir)


def scenario_b(router, png_dir):
    """Scenario B: Vertical exits"""
    route = router.compute_elbow_route(
        Point(0, 0), Point(0, 200), Direction.DOWN, Direction.UP
    )
    show(router, "Scenario B: straight vertical", route, png_dir)


def scenario_c(router, png_dir):
    """Scenario C: Two bound shapes side by side"""
    route = router.compute_elbow_route(
        Point(50, 25),
        Point(200, 25),
        Direction.RIGHT,
        Direction.LEFT,
        start_bbox=BBox(0, 0, 50, 50),
        end_bbox=BBox(200, 0, 50, 50),
    )
    show(router, "Scenario C: bound shapes", route, png_dir)


def scenario_d(router, png_dir):
    """Scenario D: Obstacle across the straight path"""
    route = router.compute_elbow_route(
        Point(0, 0),
        Point(300, 0),
        Direction.RIGHT,
        Direction.LEFT,
        intermediate_obstacles=[BBox(100, -50, 100, 100)],
    )
    show(router, "Scenario D: detour around obstacle", route, png_dir)


def scenario_canvas(router, png_dir):
    """Full pipeline: bindings plus a canvas snapshot"""
    elements = [
        ShapeSnapshot("a", "rectangle", 0, 0, 120, 60),
        ShapeSnapshot("b", "rectangle", 300, 200, 120, 60),
        ShapeSnapshot("blocker", "diamond", 150, 60, 80, 80),
        ShapeSnapshot("note", "text", 600, 600, 80, 20),
    ]
    flat = router.compute_elbow_points(
        Point(60, 30),
        Point(360, 230),
        Binding("a"),
        Binding("b"),
        elements,
    )
    route = [Point(60 + flat[i], 30 + flat[i + 1]) for i in range(0, len(flat), 2)]
    show(router, "Canvas: center-bound shapes with a blocker", route, png_dir)


def main():
    png_dir = sys.argv[1] if len(sys.argv) > 1 else None
    if png_dir:
        os.makedirs(png_dir, exist_ok=True)

    router = ElbowRouter(debug=True)
    for scenario in (scenario_a, scenario_b, scenario_c, scenario_d, scenario_canvas):
        scenario(router, png_dir)
    print()


if __name__ == "__main__":
    main()
