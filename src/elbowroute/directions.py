"""
Exit/entry direction resolution.

Picks the face a connector leaves (or enters) a shape from:

- Unbound endpoints use the dominant axis between the two endpoints.
- Precise bindings use the face nearest the binding's fixed point, so the
  connector leaves from where the user placed the handle.
- Center bindings use the shape geometry, preferring vertical exits unless
  the other endpoint is strongly side-by-side with the shape.
"""

from typing import Optional, Tuple

from .models import BBox, Binding, Direction, Point

# Horizontal faces are only used for center bindings when the normalized
# horizontal offset exceeds the vertical one by this factor
HORIZONTAL_DOMINANCE = 3


def direction_from_points(frm: Point, to: Point) -> Direction:
    """Dominant axis of the vector from frm to to (ties favor horizontal)."""
    dx = to.x - frm.x
    dy = to.y - frm.y
    if abs(dx) >= abs(dy):
        return Direction.RIGHT if dx >= 0 else Direction.LEFT
    return Direction.DOWN if dy >= 0 else Direction.UP


def direction_from_fixed_point(fixed_point: Tuple[float, float]) -> Direction:
    """
    Face of a bbox nearest a fractional point on it.

        (0.5, 0)   -> up
        (0.5, 1)   -> down
        (0, 0.5)   -> left
        (1, 0.5)   -> right
    """
    fx, fy = fixed_point
    distances = (
        (fy, Direction.UP),
        (1 - fy, Direction.DOWN),
        (fx, Direction.LEFT),
        (1 - fx, Direction.RIGHT),
    )
    # min keeps the first of equal distances: up, down, left, right
    return min(distances, key=lambda item: item[0])[1]


def preferred_elbow_direction(shape: BBox, target: Point) -> Direction:
    """
    Exit direction for a center binding.

    Offsets are normalized by half-width/half-height so the aspect ratio
    does not skew the choice. Diagonal configurations exit vertically.
    """
    center = shape.center
    dx = target.x - center.x
    dy = target.y - center.y
    hw = (shape.width or 1) / 2
    hh = (shape.height or 1) / 2
    norm_dx = abs(dx) / hw
    norm_dy = abs(dy) / hh

    if norm_dx > norm_dy * HORIZONTAL_DOMINANCE:
        return Direction.RIGHT if dx >= 0 else Direction.LEFT
    return Direction.DOWN if dy >= 0 else Direction.UP


def direction_from_shape_to_point(shape: BBox, target: Point) -> Direction:
    """Face of a shape that geometrically faces the target point."""
    center = shape.center
    dx = target.x - center.x
    dy = target.y - center.y
    hw = shape.width / 2 or 1
    hh = shape.height / 2 or 1
    if abs(dx / hw) >= abs(dy / hh):
        return Direction.RIGHT if dx >= 0 else Direction.LEFT
    return Direction.DOWN if dy >= 0 else Direction.UP


def direction_from_edge_point(shape: BBox, edge_point: Point) -> Direction:
    """Face of a shape's bbox closest to a point on (or near) its edge."""
    distances = (
        (abs(edge_point.y - shape.y), Direction.UP),
        (abs(edge_point.y - (shape.y + shape.height)), Direction.DOWN),
        (abs(edge_point.x - shape.x), Direction.LEFT),
        (abs(edge_point.x - (shape.x + shape.width)), Direction.RIGHT),
    )
    # min keeps the first of equal distances: up, down, left, right
    return min(distances, key=lambda item: item[0])[1]


def resolve_direction(
    point: Point,
    other: Point,
    binding: Optional[Binding] = None,
    shape: Optional[BBox] = None,
) -> Direction:
    """
    Resolve the exit/entry direction for one connector endpoint.

    Args:
        point: This endpoint in world coordinates.
        other: The opposite endpoint.
        binding: Binding of this endpoint, if any.
        shape: Bounding box of the bound shape, if it is known.

    Returns:
        The direction the connector leaves (or arrives at) this endpoint.
    """
    if binding is None:
        return direction_from_points(point, other)
    if not binding.is_center:
        return direction_from_fixed_point(binding.fixed_point)
    if shape is None:
        return direction_from_points(point, other)
    return preferred_elbow_direction(shape, other)
