"""
Direction-aware A* search over the waypoint graph.

Each search state is (node, arrival direction): reaching the same waypoint
horizontally or vertically leads to different continuation costs, so up to
four states (plus the direction-less origin) exist per waypoint.

Cost model:
- g(n): Manhattan length + bend_penalty per change of axis, and
  reverse_factor * bend_penalty for doubling back. With the default penalty
  of 10,000 (far above typical path lengths) the search minimizes bend count
  first and length second.
- h(n): Manhattan distance to the destination, admissible on an orthogonal
  grid.
"""

import heapq
import itertools
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

from .config import BEND_PENALTY, REVERSE_PENALTY_FACTOR
from .grid import WaypointGraph
from .models import Direction, Point

State = Tuple[int, Optional[Direction]]


@dataclass
class SearchStats:
    """Counters describing one search run."""

    pushed: int = 0
    expanded: int = 0
    stale: int = 0
    found: bool = False


def turn_penalty(
    previous: Optional[Direction],
    new: Direction,
    bend_penalty: float = BEND_PENALTY,
    reverse_factor: float = REVERSE_PENALTY_FACTOR,
) -> float:
    """Extra cost of moving in direction new after arriving via previous."""
    if previous is None:
        return 0
    if new == previous.opposite:
        return bend_penalty * reverse_factor
    if new.is_vertical != previous.is_vertical:
        return bend_penalty
    return 0


def astar_search(
    graph: WaypointGraph,
    origin: Point,
    destination: Point,
    bend_penalty: float = BEND_PENALTY,
    reverse_factor: float = REVERSE_PENALTY_FACTOR,
    stats: Optional[SearchStats] = None,
) -> Optional[List[Point]]:
    """
    Find the lowest-cost path from origin to destination.

    Args:
        graph: Waypoint graph containing both points.
        origin: Start antenna point.
        destination: End antenna point.
        bend_penalty: Cost of one change of axis.
        reverse_factor: Multiple of bend_penalty for a U-turn.
        stats: Optional counters filled in during the search.

    Returns:
        Waypoints from origin to destination, or None if they are not
        connected.
    """
    if stats is None:
        stats = SearchStats()

    src = graph.index_of(origin)
    dst = graph.index_of(destination)
    if src is None or dst is None:
        return None

    def h(node: int) -> float:
        p = graph.point(node)
        return abs(p.x - destination.x) + abs(p.y - destination.y)

    start: State = (src, None)
    best_g: Dict[State, float] = {start: 0}
    parent: Dict[State, Optional[State]] = {start: None}

    # The counter keeps heap ordering stable and avoids comparing states
    counter = itertools.count()
    open_heap: List[Tuple[float, int, float, State]] = []
    heapq.heappush(open_heap, (h(src), next(counter), 0, start))
    stats.pushed += 1

    while open_heap:
        _, _, g, state = heapq.heappop(open_heap)

        if g > best_g.get(state, float("inf")):
            stats.stale += 1
            continue

        node, arrival = state
        if node == dst:
            stats.found = True
            return _reconstruct(graph, parent, state)

        stats.expanded += 1
        here = graph.point(node)
        for adj, weight in graph.neighbors(node):
            move = Direction.between(here, graph.point(adj))
            if move is None:
                continue

            penalty = turn_penalty(arrival, move, bend_penalty, reverse_factor)
            new_g = g + weight + penalty
            adj_state: State = (adj, move)
            if new_g < best_g.get(adj_state, float("inf")):
                best_g[adj_state] = new_g
                parent[adj_state] = state
                heapq.heappush(
                    open_heap, (new_g + h(adj), next(counter), new_g, adj_state)
                )
                stats.pushed += 1

    return None


def _reconstruct(
    graph: WaypointGraph,
    parent: Dict[State, Optional[State]],
    state: State,
) -> List[Point]:
    path = []
    current: Optional[State] = state
    while current is not None:
        path.append(graph.point(current[0]))
        current = parent[current]
    path.reverse()
    return path
