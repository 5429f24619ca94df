"""Grid snapping and cleanup of routed waypoints.

First and last waypoints stay pinned to the shape boundary; only interior
bends are snapped. An interior bend that is axis-aligned with a pinned end
keeps the shared coordinate so the docking segment stays straight.
Snapped interior points are registered in a per-diagram set and a bend
landing on an already used point is moved to the nearest free one.
"""

from __future__ import annotations

__all__ = ["WaypointSnapper", "sanitize_waypoints", "snap", "snap_bounds"]

import logging
import math

from bpmn_layout.layout.constants import GRID_SIZE, SNAP_SEARCH_RADIUS
from bpmn_layout.layout.routing.geometry import Point, on_boundary, orthogonalize
from bpmn_layout.parser.model import Bounds

logger = logging.getLogger(__name__)


def snap(value: float, grid_size: float = GRID_SIZE) -> float:
    """Round *value* to the nearest multiple of *grid_size* (halves round up)."""
    return math.floor(value / grid_size + 0.5) * grid_size


def snap_bounds(bounds: Bounds, grid_size: float = GRID_SIZE) -> None:
    """Move *bounds* onto the grid, growing its size to whole grid units.

    Width and height are rounded up, never below one unit, so the right
    and bottom edges land on the grid too.
    """
    bounds.x = snap(bounds.x, grid_size)
    bounds.y = snap(bounds.y, grid_size)
    bounds.width = max(grid_size, math.ceil(bounds.width / grid_size) * grid_size)
    bounds.height = max(grid_size, math.ceil(bounds.height / grid_size) * grid_size)


def sanitize_waypoints(points: list[Point]) -> list[Point]:
    """Drop duplicate points, square diagonal segments, drop collinear bends.

    The first and last points are never moved.
    """
    if len(points) < 2:
        return list(points)

    cleaned: list[Point] = []
    for p in points:
        if not cleaned or cleaned[-1] != p:
            cleaned.append(p)
    if len(cleaned) < 2:
        return [points[0], points[-1]]

    squared = orthogonalize(cleaned)

    result = [squared[0]]
    for i in range(1, len(squared) - 1):
        a = result[-1]
        b = squared[i]
        c = squared[i + 1]
        collinear = (a[0] == b[0] == c[0]) or (a[1] == b[1] == c[1])
        if not collinear:
            result.append(b)
    result.append(squared[-1])
    return result


def _shifted(point: Point, axis: int, delta: float) -> Point:
    if axis == 0:
        return (point[0] + delta, point[1])
    return (point[0], point[1] + delta)


class WaypointSnapper:
    """Snaps interior bends to the grid, never reusing a bend on one diagram.

    A bend landing on a used point (or on the outline of a shape passed as
    *avoid*) is moved along an axis it is free on, together with the
    straight run it belongs to, so neighbouring segments stay axis-aligned.
    """

    def __init__(
        self,
        grid_size: float = GRID_SIZE,
        used: set[Point] | None = None,
        search_radius: int = SNAP_SEARCH_RADIUS,
    ) -> None:
        self.grid_size = grid_size
        self.used: set[Point] = used if used is not None else set()
        self.search_radius = search_radius

    def _blocked(self, point: Point, avoid: tuple[Bounds, ...]) -> bool:
        return point in self.used or any(on_boundary(b, point) for b in avoid)

    @staticmethod
    def _run(points: list[Point], locks: list[tuple[bool, bool]], idx: int, axis: int) -> list[int] | None:
        """Indices of the straight run through *idx* sharing its *axis* coordinate.

        None when a member of the run is locked on that axis.
        """
        value = points[idx][axis]
        run = [idx]
        for step in (-1, 1):
            j = idx + step
            while 0 <= j < len(points) and points[j][axis] == value:
                run.append(j)
                j += step
        if any(locks[j][axis] for j in run):
            return None
        return run

    def _relocate(
        self,
        points: list[Point],
        locks: list[tuple[bool, bool]],
        idx: int,
        avoid: tuple[Bounds, ...],
    ) -> None:
        g = self.grid_size
        for radius in range(1, self.search_radius):
            for axis in (0, 1):
                run = self._run(points, locks, idx, axis)
                if run is None:
                    continue
                for delta in (g * radius, -g * radius):
                    moved = {j: _shifted(points[j], axis, delta) for j in run}
                    if not any(self._blocked(p, avoid) for p in moved.values()):
                        for j, p in moved.items():
                            points[j] = p
                        return
        logger.debug(f"No free grid point near {points[idx]}, reusing it")

    def snap_waypoints(
        self, points: list[Point], lock_ends: bool = True, avoid: tuple[Bounds, ...] = ()
    ) -> list[Point]:
        """Snap interior points to the grid and claim them on this diagram."""
        if len(points) < 2:
            return list(points)

        last = len(points) - 1
        result: list[Point] = []
        locks: list[tuple[bool, bool]] = []
        for idx, (x, y) in enumerate(points):
            if lock_ends and idx in (0, last):
                result.append((x, y))
                locks.append((True, True))
                continue

            lock_x = lock_y = False
            if lock_ends:
                for end_idx in (0, last):
                    if abs(idx - end_idx) == 1:
                        ex, ey = points[end_idx]
                        lock_x = lock_x or x == ex
                        lock_y = lock_y or y == ey

            sx = x if lock_x else snap(x, self.grid_size)
            sy = y if lock_y else snap(y, self.grid_size)
            result.append((sx, sy))
            locks.append((lock_x, lock_y))

        interior = [i for i in range(len(result)) if not (lock_ends and i in (0, last))]
        for idx in interior:
            if self._blocked(result[idx], avoid):
                self._relocate(result, locks, idx, avoid)
        self.used.update(result[idx] for idx in interior)
        return result

    def finalize_waypoints(
        self, points: list[Point], avoid: tuple[Bounds, ...] = ()
    ) -> list[Point]:
        """Shared last pass for every route: square, snap, clean up.

        Interior bends are kept off the outlines in *avoid*.
        """
        return sanitize_waypoints(self.snap_waypoints(orthogonalize(points), avoid=avoid))
