"""
Routing configuration for elbow connectors.

The module-level constants are the tuned defaults; RoutingConfig bundles
them so a router instance can override individual values.
"""

from dataclasses import asdict, dataclass, fields, replace
from typing import Any, Dict, Mapping

# =============================================================================
# ROUTING CONFIGURATION - Adjust these values to tune routing behavior
# =============================================================================

# --- Distance/Spacing Parameters (in canvas pixels) ---

# Clearance kept between the route and every face of a shape
SHAPE_MARGIN = 20

# Reduced clearance on the face a connector exits/enters through.
# Capped at SHAPE_MARGIN when applied; must stay below MIN_STUB_LENGTH
# so the antenna point lands outside the inflated exit face.
EXIT_FACE_MARGIN = 25

# Minimum length of the stub segment at each end of a connector
MIN_STUB_LENGTH = 36

# Extra routing space around the union of all obstacles
BOUNDS_MARGIN = 40

# Shapes further than OBSTACLE_SEARCH_FACTOR * BOUNDS_MARGIN from the
# endpoints' span are ignored as obstacles
OBSTACLE_SEARCH_FACTOR = 3

# --- Search Penalties ---

# Fixed cost per direction change; far above typical path lengths so
# bend count dominates distance
BEND_PENALTY = 10_000

# Multiplier of BEND_PENALTY for reversing direction (U-turns)
REVERSE_PENALTY_FACTOR = 3

# --- Cache ---

# Maximum number of memoized routes
ROUTE_CACHE_MAX = 256

# Coordinates are rounded to this step before building cache keys
CACHE_ROUNDING = 0.5

# --- Background worker ---

# Below this many elements routes are computed on the calling thread
WORKER_THRESHOLD = 50

# Seconds to wait for the worker before computing synchronously
WORKER_TIMEOUT = 0.1

# =============================================================================


class ConfigError(ValueError):
    """Raised when a routing configuration is invalid."""

    pass


@dataclass(frozen=True)
class RoutingConfig:
    """
    Tunable parameters of the elbow router.

    Attributes:
        shape_margin: Clearance around shapes for obstacle inflation.
        exit_face_margin: Clearance on the exit/entry face of a bound shape.
        min_stub_length: Minimum antenna (stub) length at both ends.
        bounds_margin: Margin added around the routing region.
        obstacle_search_factor: Multiple of bounds_margin used to pick
            intermediate obstacles near the connector.
        bend_penalty: Search cost of one bend.
        reverse_penalty_factor: Multiple of bend_penalty for a U-turn.
        cache_capacity: Maximum number of cached routes.
        cache_rounding: Coordinate step used for cache keys.
    """

    shape_margin: float = SHAPE_MARGIN
    exit_face_margin: float = EXIT_FACE_MARGIN
    min_stub_length: float = MIN_STUB_LENGTH
    bounds_margin: float = BOUNDS_MARGIN
    obstacle_search_factor: float = OBSTACLE_SEARCH_FACTOR
    bend_penalty: float = BEND_PENALTY
    reverse_penalty_factor: float = REVERSE_PENALTY_FACTOR
    cache_capacity: int = ROUTE_CACHE_MAX
    cache_rounding: float = CACHE_ROUNDING

    def __post_init__(self):
        for name in ("shape_margin", "exit_face_margin", "bounds_margin"):
            if getattr(self, name) < 0:
                raise ConfigError(f"{name} must be non-negative")
        for name in (
            "min_stub_length",
            "bend_penalty",
            "reverse_penalty_factor",
            "cache_rounding",
        ):
            if getattr(self, name) <= 0:
                raise ConfigError(f"{name} must be positive")
        if self.obstacle_search_factor < 0:
            raise ConfigError("obstacle_search_factor must be non-negative")
        if self.cache_capacity < 1:
            raise ConfigError("cache_capacity must be at least 1")
        if self.min_stub_length <= self.exit_face_margin:
            raise ConfigError(
                f"min_stub_length ({self.min_stub_length}) must be greater than "
                f"exit_face_margin ({self.exit_face_margin})"
            )

    @property
    def exit_margin(self) -> float:
        """Inflation actually applied to an exit/entry face."""
        return min(self.shape_margin, self.exit_face_margin)

    @property
    def obstacle_search_margin(self) -> float:
        return self.bounds_margin * self.obstacle_search_factor

    def replace(self, **overrides: Any) -> "RoutingConfig":
        """Return a copy with the given fields replaced."""
        return replace(self, **overrides)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "RoutingConfig":
        """
        Build a config from a mapping, e.g. loaded from JSON.

        Raises:
            ConfigError: If the mapping contains unknown keys or the
                resulting values are invalid.
        """
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ConfigError(f"Unknown routing config keys: {', '.join(unknown)}")
        return cls(**dict(data))


DEFAULT_CONFIG = RoutingConfig()
