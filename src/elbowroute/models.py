"""
Data models for elbow connector routing.

This module contains the value types shared by every stage of the router:
world points, travel directions, obstacle rectangles, shape bounding boxes,
binding descriptors and the shape snapshots received from the canvas.

Classes:
    Point: World-space coordinate pair.
    Direction: Exit/entry face of a shape and travel direction on the grid.
    Rect: Obstacle geometry using left/top/width/height.
    BBox: Public shape bounding box using x/y/width/height.
    Binding: Attachment of a connector endpoint to a shape.
    ShapeSnapshot: Value copy of a canvas element used for obstacle detection.
"""

import math
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Mapping, NamedTuple, Optional, Protocol, Tuple

# Shape types that act as obstacles; lines, arrows and freedraw never do
OBSTACLE_TYPES = frozenset({"rectangle", "ellipse", "diamond", "text", "image"})


class Point(NamedTuple):
    """A world-space point in canvas pixel units."""

    x: float
    y: float


class Direction(Enum):
    """A cardinal direction."""

    UP = "up"
    DOWN = "down"
    LEFT = "left"
    RIGHT = "right"

    @property
    def vector(self) -> Tuple[int, int]:
        """Unit vector in screen coordinates (y grows downward)."""
        return _VECTORS[self]

    @property
    def is_vertical(self) -> bool:
        return self in (Direction.UP, Direction.DOWN)

    @property
    def opposite(self) -> "Direction":
        return _OPPOSITES[self]

    @classmethod
    def parse(cls, value: "str | Direction") -> "Direction":
        """
        Convert a direction name to a Direction.

        Raises:
            ValueError: If the name is not one of up/down/left/right.
        """
        if isinstance(value, Direction):
            return value
        try:
            return cls(str(value).lower())
        except ValueError:
            raise ValueError(f"Unknown direction: {value!r}") from None

    @staticmethod
    def between(a: Point, b: Point) -> Optional["Direction"]:
        """Direction of travel from a to b, or None if they coincide."""
        if b.x < a.x:
            return Direction.LEFT
        if b.x > a.x:
            return Direction.RIGHT
        if b.y < a.y:
            return Direction.UP
        if b.y > a.y:
            return Direction.DOWN
        return None


_VECTORS = {
    Direction.UP: (0, -1),
    Direction.DOWN: (0, 1),
    Direction.LEFT: (-1, 0),
    Direction.RIGHT: (1, 0),
}

_OPPOSITES = {
    Direction.UP: Direction.DOWN,
    Direction.DOWN: Direction.UP,
    Direction.LEFT: Direction.RIGHT,
    Direction.RIGHT: Direction.LEFT,
}


@dataclass(frozen=True)
class BBox:
    """Shape bounding box (canvas element convention)."""

    x: float
    y: float
    width: float
    height: float

    @property
    def center(self) -> Point:
        return Point(self.x + self.width / 2, self.y + self.height / 2)


@dataclass(frozen=True)
class Rect:
    """
    Axis-aligned rectangle used for obstacle geometry.

    Containment is strict: points on the boundary are not inside, which
    keeps waypoints along inflated shape edges available for routing.
    """

    left: float
    top: float
    width: float
    height: float

    @property
    def right(self) -> float:
        return self.left + self.width

    @property
    def bottom(self) -> float:
        return self.top + self.height

    @property
    def center_x(self) -> float:
        return self.left + self.width / 2

    @property
    def center_y(self) -> float:
        return self.top + self.height / 2

    @classmethod
    def from_bbox(cls, bbox: BBox) -> "Rect":
        return cls(bbox.x, bbox.y, bbox.width, bbox.height)

    @classmethod
    def at_point(cls, point: Point) -> "Rect":
        """Zero-size rect standing in for an unbound endpoint."""
        return cls(point.x, point.y, 0, 0)

    def contains(self, point: Point) -> bool:
        return (
            self.left < point.x < self.right and self.top < point.y < self.bottom
        )

    def intersects(self, other: "Rect") -> bool:
        return (
            other.left < self.right
            and self.left < other.right
            and other.top < self.bottom
            and self.top < other.bottom
        )

    def inflate(self, h: float, v: float) -> "Rect":
        return Rect(
            self.left - h, self.top - v, self.width + h * 2, self.height + v * 2
        )

    def union(self, other: "Rect") -> "Rect":
        left = min(self.left, other.left)
        top = min(self.top, other.top)
        right = max(self.right, other.right)
        bottom = max(self.bottom, other.bottom)
        return Rect(left, top, right - left, bottom - top)


@dataclass(frozen=True)
class Binding:
    """
    Attachment of a connector endpoint to a shape.

    Attributes:
        element_id: Id of the bound shape.
        fixed_point: Fractional position [0..1, 0..1] on the shape's bbox.
        gap: Gap between the connector tip and the shape edge.
        is_precise: False for center bindings (face chosen by geometry).
    """

    element_id: str
    fixed_point: Tuple[float, float] = (0.5, 0.5)
    gap: float = 0.0
    is_precise: bool = False

    @property
    def is_center(self) -> bool:
        return not self.is_precise or tuple(self.fixed_point) == (0.5, 0.5)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "elementId": self.element_id,
            "fixedPoint": list(self.fixed_point),
            "gap": self.gap,
            "isPrecise": self.is_precise,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Binding":
        fx, fy = data.get("fixedPoint", (0.5, 0.5))
        return cls(
            element_id=str(data["elementId"]),
            fixed_point=(float(fx), float(fy)),
            gap=float(data.get("gap", 0.0)),
            is_precise=bool(data.get("isPrecise", False)),
        )


class SupportsBoundingBox(Protocol):
    """Anything the router can treat as an obstacle."""

    def bounding_box(self) -> BBox:
        """Axis-aligned bounding box in world coordinates."""
        ...


@dataclass(frozen=True)
class ShapeSnapshot:
    """
    Value copy of a canvas element, holding only what routing needs.

    Attributes:
        id: Element id.
        type: Element type (rectangle, ellipse, arrow, ...).
        x: Left edge before rotation.
        y: Top edge before rotation.
        width: Unrotated width.
        height: Unrotated height.
        rotation: Rotation around the center, in degrees.
        is_visible: Hidden elements are never obstacles.
    """

    id: str
    type: str
    x: float
    y: float
    width: float
    height: float
    rotation: float = 0.0
    is_visible: bool = True

    @property
    def is_obstacle(self) -> bool:
        return self.type in OBSTACLE_TYPES

    def bounding_box(self) -> BBox:
        """Enclosing AABB, with rotation folded in."""
        if not self.rotation:
            return BBox(self.x, self.y, self.width, self.height)

        cx = self.x + self.width / 2
        cy = self.y + self.height / 2
        hw = self.width / 2
        hh = self.height / 2
        rad = math.radians(self.rotation)
        cos = math.cos(rad)
        sin = math.sin(rad)

        xs = []
        ys = []
        for dx, dy in ((-hw, -hh), (hw, -hh), (hw, hh), (-hw, hh)):
            xs.append(cx + dx * cos - dy * sin)
            ys.append(cy + dx * sin + dy * cos)

        return BBox(min(xs), min(ys), max(xs) - min(xs), max(ys) - min(ys))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "type": self.type,
            "x": self.x,
            "y": self.y,
            "width": self.width,
            "height": self.height,
            "rotation": self.rotation,
            "isVisible": self.is_visible,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ShapeSnapshot":
        return cls(
            id=str(data["id"]),
            type=str(data["type"]),
            x=float(data["x"]),
            y=float(data["y"]),
            width=float(data["width"]),
            height=float(data["height"]),
            rotation=float(data.get("rotation") or 0.0),
            is_visible=bool(data.get("isVisible", True)),
        )
