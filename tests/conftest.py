"""Pytest configuration and shared fixtures for elbowroute tests."""

import pytest

from elbowroute import ElbowRouter, RoutingConfig, ShapeSnapshot


@pytest.fixture
def router():
    """Default ElbowRouter instance."""
    return ElbowRouter()


@pytest.fixture
def debug_router():
    """ElbowRouter recording a trace for every call."""
    return ElbowRouter(debug=True)


@pytest.fixture
def relaxed_config():
    """Config whose exit faces are tighter than the other faces."""
    return RoutingConfig(shape_margin=30, exit_face_margin=10)


@pytest.fixture
def stacked_shapes():
    """Two rectangles stacked vertically with a clear gap between them."""
    return [
        ShapeSnapshot("top", "rectangle", 0, 0, 100, 50),
        ShapeSnapshot("bottom", "rectangle", 0, 200, 100, 50),
    ]


@pytest.fixture
def canvas_elements():
    """A small canvas with obstacles, non-obstacles and a hidden shape."""
    return [
        ShapeSnapshot("a", "rectangle", 0, 0, 120, 60),
        ShapeSnapshot("b", "rectangle", 400, 0, 120, 60),
        ShapeSnapshot("blocker", "ellipse", 200, -20, 80, 100),
        ShapeSnapshot("arrow", "arrow", 150, 20, 200, 0),
        ShapeSnapshot("hidden", "rectangle", 300, 10, 40, 40, is_visible=False),
        ShapeSnapshot("far", "rectangle", 2000, 2000, 50, 50),
    ]
