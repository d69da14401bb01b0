"""
Non-uniform routing grid and waypoint graph.

Waypoints are placed only at intersections of "rulers": coordinates taken
from obstacle edges, obstacle centers, the connection points, their antenna
points and the midpoint between the endpoints. Bends can therefore only
happen where a human would naturally put one. Waypoints strictly inside an
obstacle are dropped; waypoints on an obstacle boundary are kept so routes
can hug the clearance edge.

The graph connects every waypoint to its nearest neighbor in each cardinal
direction unless the segment between them passes through an obstacle.
"""

from typing import Dict, Iterable, Iterator, List, Optional, Sequence, Tuple

import networkx as nx

from .models import Point, Rect


def routing_bounds(
    start: Point, end: Point, obstacles: Iterable[Rect], margin: float
) -> Rect:
    """Union of the endpoints' span and all obstacles, plus a margin."""
    bounds = Rect(
        min(start.x, end.x),
        min(start.y, end.y),
        abs(end.x - start.x) or 1,
        abs(end.y - start.y) or 1,
    )
    for obs in obstacles:
        bounds = bounds.union(obs)
    return bounds.inflate(margin, margin)


def collect_rulers(
    start: Point,
    end: Point,
    origin: Point,
    destination: Point,
    obstacles: Iterable[Rect],
) -> Tuple[List[float], List[float]]:
    """
    Collect vertical (x) and horizontal (y) ruler coordinates.

    Rulers come from:
    1. Obstacle edges (already padded by inflation)
    2. Obstacle centers; the center lies inside the obstacle but the ruler
       extends outside it to useful turning positions
    3. Connection point coordinates
    4. Antenna point coordinates
    5. The midpoint between start and end
    """
    xs: List[float] = []
    ys: List[float] = []
    for obs in obstacles:
        xs.extend((obs.left, obs.right, obs.center_x))
        ys.extend((obs.top, obs.bottom, obs.center_y))

    xs.extend((start.x, end.x, origin.x, destination.x))
    ys.extend((start.y, end.y, origin.y, destination.y))

    xs.append((start.x + end.x) / 2)
    ys.append((start.y + end.y) / 2)
    return xs, ys


def generate_grid_spots(
    xs: Iterable[float],
    ys: Iterable[float],
    bounds: Rect,
    obstacles: Sequence[Rect],
) -> List[Point]:
    """
    Generate waypoints at ruler intersections inside the bounds.

    Rulers outside the bounds are dropped and the bounds' own edges are
    added, then every x/y combination outside all obstacles becomes a spot.
    """
    all_xs = sorted(
        {bounds.left, bounds.right}
        | {x for x in xs if bounds.left <= x <= bounds.right}
    )
    all_ys = sorted(
        {bounds.top, bounds.bottom}
        | {y for y in ys if bounds.top <= y <= bounds.bottom}
    )

    spots = []
    for y in all_ys:
        for x in all_xs:
            p = Point(x, y)
            if not any(obs.contains(p) for obs in obstacles):
                spots.append(p)
    return spots


def deduplicate_points(points: Iterable[Point]) -> List[Point]:
    """Remove duplicate points, keeping first occurrences in order."""
    seen = set()
    result = []
    for p in points:
        if p not in seen:
            seen.add(p)
            result.append(p)
    return result


def segment_crosses_obstacle(a: Point, b: Point, obstacles: Iterable[Rect]) -> bool:
    """
    Check whether an axis-aligned segment passes through an obstacle interior.

    Segments running along an obstacle boundary are allowed.
    """
    if a.y == b.y:
        y = a.y
        x1, x2 = min(a.x, b.x), max(a.x, b.x)
        for obs in obstacles:
            if obs.top < y < obs.bottom and obs.left < x2 and obs.right > x1:
                return True
    elif a.x == b.x:
        x = a.x
        y1, y2 = min(a.y, b.y), max(a.y, b.y)
        for obs in obstacles:
            if obs.left < x < obs.right and obs.top < y2 and obs.bottom > y1:
                return True
    return False


class WaypointGraph:
    """
    Weighted undirected graph of routing waypoints.

    Nodes are integer ids in a networkx graph; each node stores its point
    under the "pos" attribute. A coordinate lookup maps an exact (x, y) pair
    to its node id, so there is at most one node per coordinate pair.
    Edge weights are Manhattan distances.
    """

    def __init__(self):
        self.graph: nx.Graph = nx.Graph()
        self._index: Dict[Point, int] = {}

    def add(self, point: Point) -> int:
        """Add a waypoint (if new) and return its node id."""
        node = self._index.get(point)
        if node is None:
            node = len(self._index)
            self._index[point] = node
            self.graph.add_node(node, pos=point)
        return node

    def index_of(self, point: Point) -> Optional[int]:
        return self._index.get(point)

    def __contains__(self, point: Point) -> bool:
        return point in self._index

    def point(self, node: int) -> Point:
        return self.graph.nodes[node]["pos"]

    def connect(self, a: Point, b: Point) -> None:
        """Create an undirected edge between two existing waypoints."""
        na = self._index.get(a)
        nb = self._index.get(b)
        if na is None or nb is None:
            return
        weight = abs(b.x - a.x) + abs(b.y - a.y)
        self.graph.add_edge(na, nb, weight=weight)

    def neighbors(self, node: int) -> Iterator[Tuple[int, float]]:
        """Yield (neighbor id, edge weight) pairs."""
        for adj, data in self.graph.adj[node].items():
            yield adj, data["weight"]

    @property
    def node_count(self) -> int:
        return self.graph.number_of_nodes()

    @property
    def edge_count(self) -> int:
        return self.graph.number_of_edges()

    def points(self) -> List[Point]:
        return list(self._index)

    def segments(self) -> List[Tuple[Point, Point]]:
        """All edges as point pairs (for debugging and rendering)."""
        return [(self.point(u), self.point(v)) for u, v in self.graph.edges()]


def build_graph(spots: Iterable[Point], obstacles: Sequence[Rect]) -> WaypointGraph:
    """
    Connect orthogonally adjacent waypoints.

    Each waypoint is joined to the nearest other waypoint to its left in the
    same row and the nearest one above it in the same column. Spots removed
    for being inside an obstacle leave gaps that are bridged when the
    segment across the gap is clear. Segments through an obstacle interior
    are never created, forcing the search to route around.
    """
    graph = WaypointGraph()
    rows: Dict[float, List[float]] = {}
    columns: Dict[float, List[float]] = {}

    for p in spots:
        if p in graph:
            continue
        graph.add(p)
        rows.setdefault(p.y, []).append(p.x)
        columns.setdefault(p.x, []).append(p.y)

    for y in sorted(rows):
        row = sorted(rows[y])
        for left_x, x in zip(row, row[1:]):
            left, cur = Point(left_x, y), Point(x, y)
            if not segment_crosses_obstacle(left, cur, obstacles):
                graph.connect(left, cur)

    for x in sorted(columns):
        column = sorted(columns[x])
        for up_y, y in zip(column, column[1:]):
            up, cur = Point(x, up_y), Point(x, y)
            if not segment_crosses_obstacle(up, cur, obstacles):
                graph.connect(up, cur)

    return graph
