"""
Obstacle model for elbow routing.

Turns shape bounding boxes into inflated rectangles the route must not
cross. Endpoint shapes get a reduced inflation on the face the connector
exits/enters through so the stub can leave the shape; intermediate shapes
are inflated uniformly.

Two obstacle configurations are produced:

1. Standard: endpoint shapes inflated everywhere except their exit face.
2. Relaxed: additionally opens the face of each endpoint shape that points
   at the other endpoint. This creates an L-shaped corridor that allows a
   clean 2-bend path for diagonal configurations instead of a 4-bend detour.
"""

import logging
from dataclasses import dataclass, field
from typing import Iterable, List, Optional, Sequence, Set, Tuple

from .config import DEFAULT_CONFIG, RoutingConfig
from .directions import direction_from_shape_to_point
from .models import BBox, Direction, Point, Rect, ShapeSnapshot

logger = logging.getLogger(__name__)


@dataclass
class ObstacleLayout:
    """
    Obstacle configurations for one routing call.

    Attributes:
        standard: Endpoint rects (exit face reduced) plus intermediates.
        relaxed: Like standard with the faces toward the other endpoint also
            reduced, or None when that changes nothing.
        endpoints_only: The two standard endpoint rects, used when
            intermediate obstacles block every path.
        intermediate: Uniformly inflated intermediate obstacles.
    """

    standard: List[Rect] = field(default_factory=list)
    relaxed: Optional[List[Rect]] = None
    endpoints_only: List[Rect] = field(default_factory=list)
    intermediate: List[Rect] = field(default_factory=list)

    def configurations(self) -> List[Tuple[str, List[Rect]]]:
        """Named obstacle sets to route through, in evaluation order."""
        configs = [("standard", self.standard)]
        if self.relaxed is not None:
            configs.append(("relaxed", self.relaxed))
        return configs


def inflate_excluding_faces(
    rect: Rect,
    margin: float,
    faces: Iterable[Direction],
    exit_face_margin: float,
) -> Rect:
    """
    Inflate a rect by margin, using a reduced margin on the given faces.

    The reduced margin is min(margin, exit_face_margin), so an exit face is
    never inflated more than the other faces.
    """
    face_set = set(faces)
    exit_m = min(margin, exit_face_margin)
    left = exit_m if Direction.LEFT in face_set else margin
    right = exit_m if Direction.RIGHT in face_set else margin
    top = exit_m if Direction.UP in face_set else margin
    bottom = exit_m if Direction.DOWN in face_set else margin
    return Rect(
        rect.left - left,
        rect.top - top,
        rect.width + left + right,
        rect.height + top + bottom,
    )


def collect_intermediate_obstacles(
    start: Point,
    end: Point,
    elements: Iterable[ShapeSnapshot],
    exclude_ids: Set[str],
    search_margin: float,
) -> List[Tuple[str, BBox]]:
    """
    Pick the shapes that may block a connector between start and end.

    Only visible obstacle-type shapes count. Shapes whose bbox lies
    entirely outside the endpoints' span expanded by search_margin cannot
    affect the route and are skipped to keep the grid small.

    Returns:
        (element id, bbox) pairs in input order.
    """
    min_x = min(start.x, end.x) - search_margin
    max_x = max(start.x, end.x) + search_margin
    min_y = min(start.y, end.y) - search_margin
    max_y = max(start.y, end.y) + search_margin

    found: List[Tuple[str, BBox]] = []
    for el in elements:
        if not el.is_obstacle or not el.is_visible:
            continue
        if el.id in exclude_ids:
            continue

        bbox = el.bounding_box()
        if (
            bbox.x + bbox.width < min_x
            or bbox.x > max_x
            or bbox.y + bbox.height < min_y
            or bbox.y > max_y
        ):
            continue
        found.append((el.id, bbox))

    return found


def build_obstacle_layout(
    start: Point,
    end: Point,
    start_dir: Direction,
    end_dir: Direction,
    start_bbox: Optional[BBox] = None,
    end_bbox: Optional[BBox] = None,
    intermediate: Sequence[BBox] = (),
    config: RoutingConfig = DEFAULT_CONFIG,
) -> ObstacleLayout:
    """
    Build the standard and relaxed obstacle sets for one connector.

    Unbound endpoints are represented by zero-size rects at the endpoint,
    inflated uniformly.
    """
    margin = config.shape_margin
    exit_margin = config.exit_margin

    shape_a = Rect.at_point(start) if start_bbox is None else Rect.from_bbox(start_bbox)
    shape_b = Rect.at_point(end) if end_bbox is None else Rect.from_bbox(end_bbox)

    intermediate_rects = [
        Rect.from_bbox(bbox).inflate(margin, margin) for bbox in intermediate
    ]

    def endpoint_rect(rect: Rect, bbox: Optional[BBox], faces: List[Direction]):
        if bbox is None:
            return rect.inflate(margin, margin)
        return inflate_excluding_faces(rect, margin, faces, exit_margin)

    infl_a_std = endpoint_rect(shape_a, start_bbox, [start_dir])
    infl_b_std = endpoint_rect(shape_b, end_bbox, [end_dir])

    faces_a = [start_dir]
    faces_b = [end_dir]
    if start_bbox is not None:
        toward_end = direction_from_shape_to_point(start_bbox, end)
        if toward_end != start_dir:
            faces_a.append(toward_end)
    if end_bbox is not None:
        toward_start = direction_from_shape_to_point(end_bbox, start)
        if toward_start != end_dir:
            faces_b.append(toward_start)

    relaxed = None
    if len(faces_a) > 1 or len(faces_b) > 1:
        relaxed = [
            endpoint_rect(shape_a, start_bbox, faces_a),
            endpoint_rect(shape_b, end_bbox, faces_b),
            *intermediate_rects,
        ]
        # With exit_face_margin >= shape_margin the reduced faces are no
        # smaller, and the relaxed set collapses onto the standard one.
        if relaxed[:2] == [infl_a_std, infl_b_std]:
            relaxed = None

    return ObstacleLayout(
        standard=[infl_a_std, infl_b_std, *intermediate_rects],
        relaxed=relaxed,
        endpoints_only=[infl_a_std, infl_b_std],
        intermediate=intermediate_rects,
    )


def antenna_point(point: Point, direction: Direction, length: float) -> Point:
    """Project a point outward along its exit direction."""
    vx, vy = direction.vector
    return Point(point.x + vx * length, point.y + vy * length)


def clear_antenna_point(
    point: Point, direction: Direction, obstacles: Sequence[Rect]
) -> Point:
    """
    Push an antenna point out of any obstacle it is strictly inside.

    The point is moved 1px past the obstacle's far face along the exit
    direction. Clearing one obstacle can land the point in another, so this
    repeats up to one pass per obstacle.
    """
    x, y = point
    for _ in range(len(obstacles)):
        all_clear = True
        for obs in obstacles:
            if not obs.contains(Point(x, y)):
                continue
            all_clear = False
            if direction == Direction.LEFT:
                x = obs.left - 1
            elif direction == Direction.RIGHT:
                x = obs.right + 1
            elif direction == Direction.UP:
                y = obs.top - 1
            else:
                y = obs.bottom + 1
        if all_clear:
            break

    cleared = Point(x, y)
    if cleared != point:
        logger.debug("Antenna point moved from %s to %s", point, cleared)
    return cleared
