"""
Debug tracing infrastructure for elbowroute.

This module provides data structures for capturing a detailed trace of one
elbow routing call. When debug mode is enabled, the router records every
stage of the pipeline together with the geometry it produced, so a bad
route can be inspected (or rendered with png_renderer) after the fact.

Usage:
    >>> router = ElbowRouter(debug=True)
    >>> router.compute_elbow_route(Point(0, 0), Point(200, 80),
    ...                            Direction.RIGHT, Direction.LEFT)
    >>> trace = router.get_trace()
    >>> print(trace.summary())
    >>> trace.dump_to_file("route_trace.txt")

The trace captures:
- Pipeline stages (directions, obstacles, cache, grid, search, selection)
- The obstacle rectangles, grid spots and graph edges of each configuration
- Every candidate route and the one finally selected
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

from .models import Point, Rect


@dataclass
class PipelineStage:
    """
    Snapshot of state at a pipeline stage.

    The routing pipeline has these stages:
    1. directions - Resolved exit/entry directions
    2. obstacles - Inflated obstacle configurations
    3. cache - Whether the request was served from the cache
    4. grid:<config> - Rulers, spots and graph size for one configuration
    5. search:<config> - A* counters and the raw path
    6. selection - The chosen candidate or the fallback used

    Attributes:
        name: Name of this pipeline stage
        data: Dictionary of relevant data at this stage
    """

    name: str
    data: Dict[str, Any]

    def __str__(self) -> str:
        lines = [f"=== Stage: {self.name} ==="]
        for key, value in self.data.items():
            # Truncate long values
            str_val = str(value)
            if len(str_val) > 100:
                str_val = str_val[:100] + "..."
            lines.append(f"  {key}: {str_val}")
        return "\n".join(lines)


@dataclass
class RouteTrace:
    """
    Complete trace of a routing call.

    Attributes:
        stages: List of pipeline stages with their data
        start: Connector start point
        end: Connector end point
        obstacles: Obstacle rectangles of the configuration that won
        spots: Grid waypoints of the configuration that won
        edges: Graph edges of the configuration that won
        candidates: Candidate routes by configuration name
        route: Final route
        outcome: "cached", "routed", "endpoints_only", "fallback" or
            "degenerate"
    """

    stages: List[PipelineStage] = field(default_factory=list)
    start: Optional[Point] = None
    end: Optional[Point] = None
    obstacles: List[Rect] = field(default_factory=list)
    spots: List[Point] = field(default_factory=list)
    edges: List[Tuple[Point, Point]] = field(default_factory=list)
    candidates: Dict[str, List[Point]] = field(default_factory=dict)
    route: List[Point] = field(default_factory=list)
    outcome: str = ""

    def add_stage(self, name: str, data: Dict[str, Any]) -> None:
        """
        Add a pipeline stage snapshot.

        Args:
            name: Name of the stage (e.g., "grid:standard")
            data: Dictionary of relevant data at this stage
        """
        self.stages.append(PipelineStage(name, data.copy()))

    def get_stage(self, name: str) -> Optional[PipelineStage]:
        """Get a specific pipeline stage by name."""
        for stage in self.stages:
            if stage.name == name:
                return stage
        return None

    def stage_names(self) -> List[str]:
        return [stage.name for stage in self.stages]

    def summary(self) -> str:
        """Generate a human-readable summary of the trace."""
        lines = [
            "=" * 60,
            "ROUTE TRACE SUMMARY",
            "=" * 60,
            "",
            f"Start: {self.start}",
            f"End: {self.end}",
            f"Outcome: {self.outcome or 'unknown'}",
            "",
            f"Pipeline stages: {len(self.stages)}",
        ]
        for stage in self.stages:
            lines.append(f"  - {stage.name}")

        lines.extend(
            [
                "",
                f"Obstacles: {len(self.obstacles)}",
                f"Grid spots: {len(self.spots)}",
                f"Graph edges: {len(self.edges)}",
                f"Candidates: {', '.join(self.candidates) or 'none'}",
                f"Route points: {len(self.route)}",
            ]
        )
        return "\n".join(lines)

    def dump(self) -> str:
        """Summary plus every stage with its full data and the final route."""
        lines = [self.summary(), "", "=" * 60, "DETAILED TRACE", "=" * 60, ""]

        lines.append("PIPELINE STAGES:")
        lines.append("-" * 40)
        for stage in self.stages:
            lines.append(str(stage))
            lines.append("")

        lines.append("ROUTE:")
        lines.append("-" * 40)
        for p in self.route:
            lines.append(f"({p.x}, {p.y})")

        return "\n".join(lines)

    def dump_to_file(self, filename: str) -> None:
        """Write the complete trace dump to a file."""
        with open(filename, "w", encoding="utf-8") as f:
            f.write(self.dump())
