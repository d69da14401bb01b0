"""
Memoization of computed elbow routes.

Keys are built from rounded geometry so sub-pixel jitter from repeated
drags maps to the same entry. The cache is a bounded LRU: a hit moves the
entry to the most-recent end and inserting past capacity evicts the
least-recently used entry.
"""

import logging
import threading
from collections import OrderedDict
from typing import Hashable, Iterable, List, Optional, Sequence, Tuple

from .config import CACHE_ROUNDING, ROUTE_CACHE_MAX
from .models import BBox, Direction, Point, ShapeSnapshot

logger = logging.getLogger(__name__)

CacheKey = Tuple[Hashable, ...]


def round_half(value: float, step: float = CACHE_ROUNDING) -> float:
    """Round a value to the nearest multiple of step (0.5 by default)."""
    return round(value / step) * step


def _round_bbox(bbox: Optional[BBox], step: float) -> Optional[Tuple[float, ...]]:
    if bbox is None:
        return None
    return (
        round_half(bbox.x, step),
        round_half(bbox.y, step),
        round_half(bbox.width, step),
        round_half(bbox.height, step),
    )


def obstacle_fingerprint(
    obstacles: Iterable[Tuple[str, BBox]], step: float = CACHE_ROUNDING
) -> Tuple[Tuple[str, Tuple[float, ...]], ...]:
    """Order-independent fingerprint of (id, bbox) obstacle pairs."""
    return tuple(sorted((oid, _round_bbox(bbox, step)) for oid, bbox in obstacles))


def shape_fingerprint(
    elements: Iterable[ShapeSnapshot], step: float = CACHE_ROUNDING
) -> Tuple[Tuple[str, float, float, float, float, float], ...]:
    """
    Fingerprint every visible obstacle-type shape, rotation included.

    Two canvases with equal fingerprints produce identical routes, so a
    caller can compare fingerprints to decide when cached routes are stale.
    """
    prints = []
    for el in elements:
        if not el.is_obstacle or not el.is_visible:
            continue
        prints.append(
            (
                el.id,
                round_half(el.x, step),
                round_half(el.y, step),
                round_half(el.width, step),
                round_half(el.height, step),
                round_half(el.rotation, step),
            )
        )
    return tuple(sorted(prints))


def build_cache_key(
    start: Point,
    end: Point,
    start_dir: Direction,
    end_dir: Direction,
    start_bbox: Optional[BBox],
    end_bbox: Optional[BBox],
    obstacle_fingerprint: Sequence[Hashable],
    min_stub_length: Optional[float],
    step: float = CACHE_ROUNDING,
    config: Optional[Hashable] = None,
) -> CacheKey:
    """
    Build a hashable key identifying one routing request.

    Routes computed under different routing configurations get different
    keys.
    """
    return (
        round_half(start.x, step),
        round_half(start.y, step),
        round_half(end.x, step),
        round_half(end.y, step),
        start_dir.value,
        end_dir.value,
        _round_bbox(start_bbox, step),
        _round_bbox(end_bbox, step),
        tuple(obstacle_fingerprint),
        None if min_stub_length is None else round_half(min_stub_length, step),
        config,
    )


class RouteCache:
    """
    Bounded LRU cache of flat route point lists.

    Values are stored as tuples; get() returns a new list each time so
    callers cannot mutate a cached route.

    Usage:
        >>> cache = RouteCache(capacity=2)
        >>> cache.put(("a",), [0, 0, 10, 0])
        >>> cache.get(("a",))
        [0, 0, 10, 0]
    """

    def __init__(self, capacity: int = ROUTE_CACHE_MAX):
        if capacity < 1:
            raise ValueError("capacity must be at least 1")
        self.capacity = capacity
        self.hits = 0
        self.misses = 0
        self._entries: "OrderedDict[CacheKey, Tuple[float, ...]]" = OrderedDict()
        self._lock = threading.Lock()

    def get(self, key: CacheKey) -> Optional[List[float]]:
        """Return a copy of the cached route, or None on a miss."""
        with self._lock:
            value = self._entries.get(key)
            if value is None:
                self.misses += 1
                return None
            self._entries.move_to_end(key)
            self.hits += 1
            return list(value)

    def put(self, key: CacheKey, points: Sequence[float]) -> None:
        with self._lock:
            self._entries[key] = tuple(points)
            self._entries.move_to_end(key)
            while len(self._entries) > self.capacity:
                evicted, _ = self._entries.popitem(last=False)
                logger.debug("Evicted route cache entry %s", evicted[:4])

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()
            self.hits = 0
            self.misses = 0

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: object) -> bool:
        return key in self._entries
