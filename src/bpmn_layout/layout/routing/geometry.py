"""Geometric primitives for connection routing.

All functions work on :class:`~bpmn_layout.parser.model.Bounds` and plain
``(x, y)`` tuples. Diamond-shaped nodes (gateways) are docked on the
rhombus inscribed in their bounds.
"""

from __future__ import annotations

__all__ = [
    "Side",
    "classify_side",
    "dock",
    "dock_between",
    "elbow",
    "find_clear_vertical_x",
    "horizontal_overlap",
    "on_boundary",
    "orthogonalize",
    "separating_side",
    "side_point",
    "vertical_sides",
]

from enum import Enum

from bpmn_layout.layout.constants import (
    CORRIDOR_MAX_SHIFT,
    CORRIDOR_STEP,
    SIDE_CLEARANCE,
    VERTICAL_CENTER_RATIO,
    VERTICAL_MIN_GAP,
    VERTICAL_OVERLAP_RATIO,
)
from bpmn_layout.parser.model import Bounds

Point = tuple[float, float]


class Side(Enum):
    """Side of a shape where a connection leaves or enters."""

    RIGHT = "right"
    LEFT = "left"
    BOTTOM = "bottom"
    TOP = "top"

    @property
    def opposite(self) -> Side:
        return _OPPOSITE[self]

    @property
    def is_horizontal(self) -> bool:
        """True for LEFT/RIGHT: the connection leaves horizontally."""
        return self in (Side.LEFT, Side.RIGHT)


_OPPOSITE = {
    Side.RIGHT: Side.LEFT,
    Side.LEFT: Side.RIGHT,
    Side.BOTTOM: Side.TOP,
    Side.TOP: Side.BOTTOM,
}


# ---------------------------------------------------------------------------
# Docking
# ---------------------------------------------------------------------------


def dock(bounds: Bounds, toward: Point, diamond: bool = False) -> Point:
    """Point where the ray from the center of *bounds* toward *toward* leaves it.

    Rectangles use the min-of-axis-distances formula, diamonds the sum of
    the normalized axis distances. A zero-length ray is nudged downward.
    """
    cx, cy = bounds.center
    dx = toward[0] - cx
    dy = toward[1] - cy
    if dx == 0 and dy == 0:
        dy = 1e-4

    half_w = bounds.width / 2
    half_h = bounds.height / 2
    if diamond:
        scale = 1 / (abs(dx) / half_w + abs(dy) / half_h)
    else:
        scale = 1 / max(abs(dx) / half_w, abs(dy) / half_h)
    return (cx + dx * scale, cy + dy * scale)


def dock_between(
    a: Bounds, b: Bounds, a_diamond: bool = False, b_diamond: bool = False
) -> tuple[Point, Point]:
    """Docking points on *a* and *b* along the line joining their centers."""
    return (dock(a, b.center, a_diamond), dock(b, a.center, b_diamond))


def side_point(
    bounds: Bounds, side: Side, index: int = 0, total: int = 1, diamond: bool = False
) -> Point:
    """Anchor *index* of *total* evenly spread along *side* of *bounds*.

    Anchor ``i`` of ``n`` sits at ``(i + 1) / (n + 1)`` along the side. On a
    diamond the anchor is moved onto the rhombus edge on that side.
    """
    fraction = (index + 1) / (total + 1)
    if diamond:
        # Half of each rhombus edge belongs to each of its two sides.
        fraction = 0.5 + (fraction - 0.5) / 2
    cx, cy = bounds.center
    half_w = bounds.width / 2
    half_h = bounds.height / 2

    if side.is_horizontal:
        y = bounds.y + fraction * bounds.height
        if diamond:
            reach = half_w * (1 - abs(y - cy) / half_h)
        else:
            reach = half_w
        x = cx + reach if side is Side.RIGHT else cx - reach
        return (x, y)

    x = bounds.x + fraction * bounds.width
    if diamond:
        reach = half_h * (1 - abs(x - cx) / half_w)
    else:
        reach = half_h
    y = cy + reach if side is Side.BOTTOM else cy - reach
    return (x, y)


def on_boundary(bounds: Bounds, point: Point, diamond: bool = False, tol: float = 1e-6) -> bool:
    """True if *point* lies on the outline of *bounds* (or its diamond)."""
    x, y = point
    if diamond:
        cx, cy = bounds.center
        norm = abs(x - cx) / (bounds.width / 2) + abs(y - cy) / (bounds.height / 2)
        return abs(norm - 1) <= tol
    inside_x = bounds.x - tol <= x <= bounds.right + tol
    inside_y = bounds.y - tol <= y <= bounds.bottom + tol
    on_vertical = abs(x - bounds.x) <= tol or abs(x - bounds.right) <= tol
    on_horizontal = abs(y - bounds.y) <= tol or abs(y - bounds.bottom) <= tol
    return (on_vertical and inside_y) or (on_horizontal and inside_x)


# ---------------------------------------------------------------------------
# Side classification
# ---------------------------------------------------------------------------


def horizontal_overlap(a: Bounds, b: Bounds) -> float:
    """Width of the shared x-range of *a* and *b* (negative when apart)."""
    return min(a.right, b.right) - max(a.x, b.x)


def separating_side(
    source: Bounds, target: Bounds, clearance: float = SIDE_CLEARANCE
) -> Side | None:
    """Side of *source* facing a clear gap toward *target*, if any.

    Checked in the order right, left, bottom, top.
    """
    if target.x - source.right > clearance:
        return Side.RIGHT
    if source.x - target.right > clearance:
        return Side.LEFT
    if target.y - source.bottom > clearance:
        return Side.BOTTOM
    if source.y - target.bottom > clearance:
        return Side.TOP
    return None


def vertical_sides(source: Bounds, target: Bounds) -> tuple[Side, Side] | None:
    """Bottom/top sides for horizontally aligned shapes stacked apart, else None."""
    overlap = horizontal_overlap(source, target)
    near_center = (
        abs(source.center_x - target.center_x)
        <= max(source.width, target.width) * VERTICAL_CENTER_RATIO
    )
    aligned = overlap > min(source.width, target.width) * VERTICAL_OVERLAP_RATIO or near_center
    if not aligned:
        return None
    if target.y - source.bottom >= VERTICAL_MIN_GAP:
        return (Side.BOTTOM, Side.TOP)
    if source.y - target.bottom >= VERTICAL_MIN_GAP:
        return (Side.TOP, Side.BOTTOM)
    return None


def classify_side(source: Bounds, target: Bounds, clearance: float = SIDE_CLEARANCE) -> Side:
    """Side of *source* a connection to *target* should leave from.

    Falls back to the axis with the larger separation when no side is
    clearly separating, breaking the tie by comparing centers.
    """
    side = separating_side(source, target, clearance)
    if side is not None:
        return side

    h_clear = max(target.x - source.right, source.x - target.right)
    v_clear = max(target.y - source.bottom, source.y - target.bottom)
    if h_clear >= v_clear:
        return Side.RIGHT if source.center_x <= target.center_x else Side.LEFT
    return Side.BOTTOM if source.center_y <= target.center_y else Side.TOP


# ---------------------------------------------------------------------------
# Paths
# ---------------------------------------------------------------------------


def elbow(start: Point, end: Point, horizontal: bool) -> list[Point]:
    """Connect two anchors with one mid-corridor.

    Horizontal exits bend at the middle x, vertical ones at the middle y.
    Aligned anchors get a single straight segment.
    """
    if start[0] == end[0] or start[1] == end[1]:
        return [start, end]
    if horizontal:
        mid_x = (start[0] + end[0]) / 2
        return [start, (mid_x, start[1]), (mid_x, end[1]), end]
    mid_y = (start[1] + end[1]) / 2
    return [start, (start[0], mid_y), (end[0], mid_y), end]


def orthogonalize(points: list[Point]) -> list[Point]:
    """Split diagonal segments with a horizontal-then-vertical bend."""
    if len(points) < 2:
        return list(points)
    result = [points[0]]
    for cur in points[1:]:
        prev = result[-1]
        if prev[0] != cur[0] and prev[1] != cur[1]:
            result.append((cur[0], prev[1]))
        result.append(cur)
    return result


def find_clear_vertical_x(
    x: float,
    y_top: float,
    y_bottom: float,
    obstacles: list[Bounds],
    step: float = CORRIDOR_STEP,
    max_shift: float = CORRIDOR_MAX_SHIFT,
) -> float:
    """Nearest x whose vertical line over ``[y_top, y_bottom]`` misses every obstacle.

    Offsets ``+step, -step, +2*step, ...`` are probed up to *max_shift*; if
    all collide the original *x* is kept.
    """
    if y_top > y_bottom:
        y_top, y_bottom = y_bottom, y_top

    def collides(cx: float) -> bool:
        for b in obstacles:
            overlap_y = not (b.y > y_bottom or b.bottom < y_top)
            within_x = b.x - 1 <= cx <= b.right + 1
            if overlap_y and within_x:
                return True
        return False

    if not collides(x):
        return x

    delta = step
    while delta <= max_shift:
        if not collides(x + delta):
            return x + delta
        if not collides(x - delta):
            return x - delta
        delta += step
    return x
