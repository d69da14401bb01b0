"""Path simplification and scoring helpers for orthogonal routes."""

from typing import List, Sequence

from .models import Point


def simplify_point_path(points: Sequence[Point]) -> List[Point]:
    """
    Remove zero-length segments and collinear intermediate points.

    The first and last points are always kept as given.
    """
    if len(points) <= 2:
        return list(points)

    deduped = [points[0]]
    for p in points[1:]:
        if p != deduped[-1]:
            deduped.append(p)
    if len(deduped) == 1:
        return [points[0], points[-1]]

    simplified = [deduped[0]]
    for i in range(1, len(deduped) - 1):
        prev = simplified[-1]
        curr = deduped[i]
        next_pt = deduped[i + 1]

        same_x = prev.x == curr.x == next_pt.x
        same_y = prev.y == curr.y == next_pt.y

        if not (same_x or same_y):
            simplified.append(curr)

    simplified.append(deduped[-1])
    return simplified


def simplify_elbow_path(points: Sequence[float]) -> List[float]:
    """
    Simplify a flat [x0, y0, x1, y1, ...] path.

    Paths of two points or fewer are returned unchanged.
    """
    if len(points) <= 4:
        return list(points)
    return flatten(simplify_point_path(unflatten(points)))


def count_bends(path: Sequence[Point]) -> int:
    """Count direction changes along a path."""
    bends = 0
    for i in range(1, len(path) - 1):
        prev, curr, next_pt = path[i - 1], path[i], path[i + 1]
        same_x = prev.x == curr.x == next_pt.x
        same_y = prev.y == curr.y == next_pt.y
        if not same_x and not same_y:
            bends += 1
    return bends


def path_length(path: Sequence[Point]) -> float:
    """Total Manhattan length of a path."""
    length = 0.0
    for a, b in zip(path, path[1:]):
        length += abs(b.x - a.x) + abs(b.y - a.y)
    return length


def flatten(path: Sequence[Point], origin: Point = Point(0, 0)) -> List[float]:
    """Flatten points into [x0, y0, x1, y1, ...] relative to origin."""
    flat: List[float] = []
    for p in path:
        flat.extend((p.x - origin.x, p.y - origin.y))
    return flat


def unflatten(flat: Sequence[float]) -> List[Point]:
    """Inverse of flatten (with a zero origin)."""
    return [Point(flat[i], flat[i + 1]) for i in range(0, len(flat) - 1, 2)]
