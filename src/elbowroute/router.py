"""
Elbow connector router.

Ties the routing stages together:

1. Resolve exit/entry directions from the bindings (directions)
2. Collect intermediate obstacles near the connector (obstacles)
3. Look the request up in the route cache (cache)
4. Build obstacle configurations and, for each one, the ruler grid, the
   waypoint graph and a direction-aware A* search (grid, search)
5. Pick the best candidate, or degrade to an endpoint-only retry and then
   a hand-built S/L route (this module)
6. Simplify and store the result (simplify, cache)

Routing never fails for geometric input: every call returns an
orthogonal route whose first and last points are exactly start and end.
"""

import logging
from typing import Any, Dict, Iterable, List, Optional, Sequence, Union

from .cache import RouteCache, build_cache_key, obstacle_fingerprint
from .config import DEFAULT_CONFIG, SHAPE_MARGIN, RoutingConfig
from .directions import resolve_direction
from .grid import (
    build_graph,
    collect_rulers,
    deduplicate_points,
    generate_grid_spots,
    routing_bounds,
)
from .models import (
    BBox,
    Binding,
    Direction,
    Point,
    Rect,
    ShapeSnapshot,
    SupportsBoundingBox,
)
from .obstacles import (
    antenna_point,
    build_obstacle_layout,
    clear_antenna_point,
    collect_intermediate_obstacles,
)
from .search import SearchStats, astar_search
from .simplify import count_bends, flatten, path_length, simplify_point_path
from .tracer import RouteTrace

logger = logging.getLogger(__name__)

ObstacleLike = Union[BBox, SupportsBoundingBox]


def _as_bbox(obstacle: ObstacleLike) -> BBox:
    if isinstance(obstacle, BBox):
        return obstacle
    return obstacle.bounding_box()


def find_route_with_obstacles(
    start: Point,
    end: Point,
    start_dir: Direction,
    end_dir: Direction,
    obstacles: Sequence[Rect],
    antenna_length: float,
    config: RoutingConfig = DEFAULT_CONFIG,
    trace: Optional[RouteTrace] = None,
    label: str = "standard",
) -> Optional[List[Point]]:
    """
    Route once through a fixed set of obstacles.

    Args:
        start: Connector start point.
        end: Connector end point.
        start_dir: Exit direction at start.
        end_dir: Entry direction at end (pointing away from the end shape).
        obstacles: Inflated obstacle rects.
        antenna_length: Stub length at both ends.
        config: Routing parameters.
        trace: Optional trace receiving grid and search stages.
        label: Configuration name used in the trace and log messages.

    Returns:
        Simplified route from start to end, or None if the antenna points
        are not connected.
    """
    bounds = routing_bounds(start, end, obstacles, config.bounds_margin)

    origin = clear_antenna_point(
        antenna_point(start, start_dir, antenna_length), start_dir, obstacles
    )
    destination = clear_antenna_point(
        antenna_point(end, end_dir, antenna_length), end_dir, obstacles
    )

    xs, ys = collect_rulers(start, end, origin, destination, obstacles)
    grid_spots = generate_grid_spots(xs, ys, bounds, obstacles)
    spots = deduplicate_points([origin, destination, *grid_spots])
    graph = build_graph(spots, obstacles)

    stats = SearchStats()
    path = astar_search(
        graph,
        origin,
        destination,
        bend_penalty=config.bend_penalty,
        reverse_factor=config.reverse_penalty_factor,
        stats=stats,
    )

    logger.debug(
        "Config %s: %d spots, %d edges, %d states expanded, path %s",
        label,
        graph.node_count,
        graph.edge_count,
        stats.expanded,
        "found" if path else "not found",
    )

    if trace is not None:
        trace.add_stage(
            f"grid:{label}",
            {
                "bounds": bounds,
                "origin": origin,
                "destination": destination,
                "rulers_x": len(set(xs)),
                "rulers_y": len(set(ys)),
                "nodes": graph.node_count,
                "edges": graph.edge_count,
                "obstacles": list(obstacles),
                "spots": graph.points(),
                "segments": graph.segments(),
            },
        )
        trace.add_stage(
            f"search:{label}",
            {
                "pushed": stats.pushed,
                "expanded": stats.expanded,
                "stale": stats.stale,
                "found": stats.found,
                "path": path,
            },
        )

    if path is None:
        return None
    return simplify_point_path([start, *path, end])


def pick_best_route(candidates: Sequence[List[Point]]) -> List[Point]:
    """Fewest bends wins; ties go to the shortest route, then the earliest."""
    return min(candidates, key=lambda route: (count_bends(route), path_length(route)))


def fallback_route(
    start: Point,
    end: Point,
    start_dir: Direction,
    end_dir: Direction,
    antenna_length: float,
    shape_margin: float = SHAPE_MARGIN,
) -> List[Point]:
    """
    Hand-built route used when the grid search finds nothing.

    Both ends get a stub; exits on the same axis are joined by an S-bend
    through the middle, perpendicular exits by a single L corner.
    """
    stub = max(antenna_length, shape_margin)
    s1 = antenna_point(start, start_dir, stub)
    e1 = antenna_point(end, end_dir, stub)

    if start_dir.is_vertical == end_dir.is_vertical:
        if start_dir.is_vertical:
            mid_y = (s1.y + e1.y) / 2
            path = [start, s1, Point(s1.x, mid_y), Point(e1.x, mid_y), e1, end]
        else:
            mid_x = (s1.x + e1.x) / 2
            path = [start, s1, Point(mid_x, s1.y), Point(mid_x, e1.y), e1, end]
    elif start_dir.is_vertical:
        path = [start, s1, Point(s1.x, e1.y), e1, end]
    else:
        path = [start, s1, Point(e1.x, s1.y), e1, end]

    return simplify_point_path(path)


def _record_geometry(trace: RouteTrace, label: str) -> None:
    """Copy the grid geometry of the chosen configuration onto the trace."""
    stage = trace.get_stage(f"grid:{label}")
    if stage is None:
        return
    trace.obstacles = list(stage.data["obstacles"])
    trace.spots = list(stage.data["spots"])
    trace.edges = list(stage.data["segments"])


def compute_elbow_route(
    start: Point,
    end: Point,
    start_dir: Union[Direction, str],
    end_dir: Union[Direction, str],
    start_bbox: Optional[BBox] = None,
    end_bbox: Optional[BBox] = None,
    min_stub_length: Optional[float] = None,
    intermediate_obstacles: Optional[Iterable[ObstacleLike]] = None,
    config: Optional[RoutingConfig] = None,
    trace: Optional[RouteTrace] = None,
) -> List[Point]:
    """
    Compute an orthogonal route in world coordinates.

    This is the lower-level entry point, used when directions are already
    resolved. It does not consult any cache.

    Args:
        start: Connector start point.
        end: Connector end point.
        start_dir: Exit direction at start.
        end_dir: Entry direction at end, expressed as the face of the end
            shape the connector arrives through.
        start_bbox: Bounding box of the shape bound at start, if any.
        end_bbox: Bounding box of the shape bound at end, if any.
        min_stub_length: Requested stub length; never below the configured
            minimum.
        intermediate_obstacles: Other shapes to avoid, as BBox values or
            objects with a bounding_box() method.
        config: Routing parameters.
        trace: Optional trace to populate.

    Returns:
        Route points; the first is start and the last is end.
    """
    config = config or DEFAULT_CONFIG
    start = Point(*start)
    end = Point(*end)
    start_dir = Direction.parse(start_dir)
    end_dir = Direction.parse(end_dir)

    if trace is not None:
        trace.start, trace.end = start, end

    if start == end:
        logger.debug("Degenerate connector at %s", start)
        if trace is not None:
            trace.outcome = "degenerate"
            trace.route = [start, end]
        return [start, end]

    antenna_length = max(config.min_stub_length, min_stub_length or 0)
    intermediate = [_as_bbox(obs) for obs in intermediate_obstacles or ()]

    layout = build_obstacle_layout(
        start,
        end,
        start_dir,
        end_dir,
        start_bbox=start_bbox,
        end_bbox=end_bbox,
        intermediate=intermediate,
        config=config,
    )
    if trace is not None:
        trace.add_stage(
            "obstacles",
            {
                "standard": layout.standard,
                "relaxed": layout.relaxed,
                "intermediate": len(layout.intermediate),
                "antenna_length": antenna_length,
            },
        )

    candidates: Dict[str, List[Point]] = {}
    for label, obstacles in layout.configurations():
        route = find_route_with_obstacles(
            start,
            end,
            start_dir,
            end_dir,
            obstacles,
            antenna_length,
            config=config,
            trace=trace,
            label=label,
        )
        if route is not None:
            candidates[label] = route

    chosen: Optional[str] = None
    if candidates:
        best = pick_best_route(list(candidates.values()))
        chosen = next(label for label, r in candidates.items() if r is best)
        outcome = "routed"
    else:
        best = None
        if layout.intermediate:
            logger.debug(
                "No route around %d intermediate obstacles, retrying with "
                "endpoint shapes only",
                len(layout.intermediate),
            )
            best = find_route_with_obstacles(
                start,
                end,
                start_dir,
                end_dir,
                layout.endpoints_only,
                antenna_length,
                config=config,
                trace=trace,
                label="endpoints_only",
            )
            chosen = "endpoints_only"
            outcome = "endpoints_only"
        if best is None:
            logger.debug("No grid route from %s to %s, using fallback", start, end)
            best = fallback_route(
                start,
                end,
                start_dir,
                end_dir,
                antenna_length,
                shape_margin=config.shape_margin,
            )
            chosen = None
            outcome = "fallback"

    if trace is not None:
        trace.candidates = dict(candidates)
        trace.outcome = outcome
        trace.route = list(best)
        if chosen is not None:
            _record_geometry(trace, chosen)
        else:
            trace.obstacles = list(layout.standard)
        trace.add_stage(
            "selection",
            {
                "outcome": outcome,
                "config": chosen,
                "bends": count_bends(best),
                "length": path_length(best),
            },
        )

    return best


def compute_elbow_points(
    start_world: Point,
    end_world: Point,
    start_binding: Optional[Binding],
    end_binding: Optional[Binding],
    all_elements: Iterable[ShapeSnapshot],
    min_stub_length: Optional[float] = None,
    cache: Optional[RouteCache] = None,
    config: Optional[RoutingConfig] = None,
    trace: Optional[RouteTrace] = None,
) -> List[float]:
    """
    Compute elbow points for a connector from its bindings and the canvas.

    Direction selection:
    - No binding: dominant axis of the start -> end vector.
    - Precise binding off center: the face of the fixed point, so the line
      leaves where the user placed the handle.
    - Center binding: preferred elbow direction from the shape geometry.

    Args:
        start_world: Connector start in world coordinates.
        end_world: Connector end in world coordinates.
        start_binding: Binding at start, if any.
        end_binding: Binding at end, if any.
        all_elements: Snapshot of every canvas element.
        min_stub_length: Requested stub length.
        cache: Route cache to consult and fill.
        config: Routing parameters.
        trace: Optional trace to populate.

    Returns:
        Flat [x0, y0, x1, y1, ...] list relative to start_world.
    """
    config = config or DEFAULT_CONFIG
    start_world = Point(*start_world)
    end_world = Point(*end_world)
    elements = list(all_elements)
    by_id = {el.id: el for el in elements}

    def bound_bbox(binding: Optional[Binding]) -> Optional[BBox]:
        if binding is None:
            return None
        shape = by_id.get(binding.element_id)
        return shape.bounding_box() if shape is not None else None

    start_bbox = bound_bbox(start_binding)
    end_bbox = bound_bbox(end_binding)
    start_dir = resolve_direction(start_world, end_world, start_binding, start_bbox)
    end_dir = resolve_direction(end_world, start_world, end_binding, end_bbox)

    exclude_ids = {b.element_id for b in (start_binding, end_binding) if b}
    nearby = collect_intermediate_obstacles(
        start_world, end_world, elements, exclude_ids, config.obstacle_search_margin
    )

    if trace is not None:
        trace.add_stage(
            "directions",
            {
                "start_dir": start_dir.value,
                "end_dir": end_dir.value,
                "start_bbox": start_bbox,
                "end_bbox": end_bbox,
            },
        )

    key = None
    if cache is not None:
        key = build_cache_key(
            start_world,
            end_world,
            start_dir,
            end_dir,
            start_bbox,
            end_bbox,
            obstacle_fingerprint(nearby, config.cache_rounding),
            min_stub_length,
            step=config.cache_rounding,
            config=config,
        )
        cached = cache.get(key)
        if trace is not None:
            trace.add_stage(
                "cache", {"hit": cached is not None, "size": len(cache)}
            )
        if cached is not None:
            if trace is not None:
                trace.start, trace.end = start_world, end_world
                trace.outcome = "cached"
                trace.route = [
                    Point(start_world.x + x, start_world.y + y)
                    for x, y in zip(cached[::2], cached[1::2])
                ]
            return cached

    route = compute_elbow_route(
        start_world,
        end_world,
        start_dir,
        end_dir,
        start_bbox=start_bbox,
        end_bbox=end_bbox,
        min_stub_length=min_stub_length,
        intermediate_obstacles=[bbox for _, bbox in nearby],
        config=config,
        trace=trace,
    )
    flat = flatten(route, start_world)

    if cache is not None:
        cache.put(key, flat)
    return flat


class ElbowRouter:
    """
    Stateful routing service owning a route cache.

    Usage:
        >>> router = ElbowRouter()
        >>> router.compute_elbow_points(Point(0, 0), Point(200, 0),
        ...                             None, None, [])
        [0, 0, 200, 0]
        >>> router.clear_cache()
    """

    def __init__(
        self,
        config: Optional[RoutingConfig] = None,
        cache_capacity: Optional[int] = None,
        debug: bool = False,
    ):
        """
        Initialize the router.

        Args:
            config: Routing parameters (defaults to DEFAULT_CONFIG).
            cache_capacity: Maximum cached routes; defaults to the
                config's cache_capacity (256).
            debug: Record a RouteTrace for every call.
        """
        self.config = config or DEFAULT_CONFIG
        if cache_capacity is None:
            cache_capacity = self.config.cache_capacity
        self.cache = RouteCache(cache_capacity)
        self.debug = debug
        self._trace: Optional[RouteTrace] = None

    def _new_trace(self) -> Optional[RouteTrace]:
        self._trace = RouteTrace() if self.debug else None
        return self._trace

    def compute_elbow_points(
        self,
        start_world: Point,
        end_world: Point,
        start_binding: Optional[Binding],
        end_binding: Optional[Binding],
        all_elements: Iterable[ShapeSnapshot],
        min_stub_length: Optional[float] = None,
    ) -> List[float]:
        """Cached compute_elbow_points using this router's config."""
        return compute_elbow_points(
            start_world,
            end_world,
            start_binding,
            end_binding,
            all_elements,
            min_stub_length=min_stub_length,
            cache=self.cache,
            config=self.config,
            trace=self._new_trace(),
        )

    def compute_elbow_route(self, *args: Any, **kwargs: Any) -> List[Point]:
        """Uncached compute_elbow_route using this router's config."""
        kwargs.setdefault("config", self.config)
        kwargs["trace"] = self._new_trace()
        return compute_elbow_route(*args, **kwargs)

    def clear_cache(self) -> None:
        """Drop every cached route (e.g. after a bulk import or undo)."""
        self.cache.clear()

    def get_trace(self) -> Optional[RouteTrace]:
        """Trace of the last call, or None when debug is off."""
        return self._trace
