"""
elbowroute - Orthogonal connector routing

A Python library for routing elbow (right-angle) connectors between shapes
on a diagramming canvas, using a non-uniform ruler grid and a
direction-aware A* search that minimizes bends first and length second.

Example:
    >>> from elbowroute import ElbowRouter, Point
    >>> router = ElbowRouter()
    >>> router.compute_elbow_points(Point(0, 0), Point(200, 0), None, None, [])
    [0, 0, 200, 0]

Debug Mode Example:
    >>> router = ElbowRouter(debug=True)
    >>> points = router.compute_elbow_points(
    ...     Point(0, 0), Point(200, 80), None, None, []
    ... )
    >>> trace = router.get_trace()
    >>> print(trace.summary())
"""

import logging

from .cache import (
    RouteCache,
    build_cache_key,
    obstacle_fingerprint,
    round_half,
    shape_fingerprint,
)
from .config import DEFAULT_CONFIG, ConfigError, RoutingConfig
from .directions import resolve_direction
from .models import BBox, Binding, Direction, Point, Rect, ShapeSnapshot
from .png_renderer import RoutePNGRenderer, render_to_png
from .router import (
    ElbowRouter,
    compute_elbow_points,
    compute_elbow_route,
    fallback_route,
    find_route_with_obstacles,
    pick_best_route,
)
from .simplify import simplify_elbow_path, simplify_point_path
from .tracer import PipelineStage, RouteTrace
from .worker import (
    ElbowWorker,
    ElbowWorkerManager,
    ProtocolError,
    RouteParams,
    WorkerDisposedError,
)

__version__ = "0.1.0"

logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [
    # Main API
    "ElbowRouter",
    "compute_elbow_points",
    "compute_elbow_route",
    "simplify_elbow_path",
    # Models
    "Point",
    "Direction",
    "BBox",
    "Rect",
    "Binding",
    "ShapeSnapshot",
    # Configuration
    "RoutingConfig",
    "DEFAULT_CONFIG",
    "ConfigError",
    # Routing stages
    "resolve_direction",
    "find_route_with_obstacles",
    "pick_best_route",
    "fallback_route",
    "simplify_point_path",
    # Cache
    "RouteCache",
    "build_cache_key",
    "obstacle_fingerprint",
    "shape_fingerprint",
    "round_half",
    # Background worker
    "ElbowWorker",
    "ElbowWorkerManager",
    "RouteParams",
    "ProtocolError",
    "WorkerDisposedError",
    # Debug/Tracing (for development and debugging)
    "RouteTrace",
    "PipelineStage",
    "RoutePNGRenderer",
    "render_to_png",
]
