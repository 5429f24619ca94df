"""Message flow routing across pools.

Three cases, tried in order:

- a pool sending to a start or catch event below (or above) it gets a
  single vertical drop, shifted sideways if the line would cross another
  shape;
- vertically dominant pairs (enough horizontal overlap, far apart in y)
  leave through bottom/top, straight when aligned, T-shaped when slightly
  offset, bent at the middle y otherwise;
- everything else leaves through the facing left/right sides, straight
  when level, otherwise with a short leg and a vertical bend.
"""

from __future__ import annotations

__all__ = ["MessageFlowRouter"]

import logging
from collections.abc import Mapping

from bpmn_layout.layout.config import LayoutConfig
from bpmn_layout.layout.constants import (
    CORRIDOR_MARGIN,
    MESSAGE_ALIGN_TOLERANCE,
    MESSAGE_APPROACH,
    MESSAGE_LEG,
    MESSAGE_LEVEL_TOLERANCE,
    MESSAGE_MIN_BEND,
    MESSAGE_SIDE_GAP,
    MESSAGE_T_SHAPE_MAX,
    MESSAGE_VERTICAL_GAP,
    MESSAGE_VERTICAL_OVERLAP,
    SIDE_CLEARANCE,
)
from bpmn_layout.layout.routing.common import RoutedPath, SideGroups, is_diamond, lookup
from bpmn_layout.layout.routing.geometry import (
    Point,
    Side,
    find_clear_vertical_x,
    horizontal_overlap,
    side_point,
)
from bpmn_layout.layout.routing.snapping import WaypointSnapper
from bpmn_layout.parser.model import MessageFlow, Shape, is_participant

logger = logging.getLogger(__name__)

_DROP_TARGETS = ("startEvent", "intermediateCatchEvent")
_CONTAINER_TYPES = ("participant", "lane")


def _is_container(shape: Shape) -> bool:
    return getattr(shape.element, "type", None) in _CONTAINER_TYPES


class MessageFlowRouter:
    """Routes the message flows of a collaboration over its pools and nodes."""

    def __init__(
        self,
        shapes: Mapping[str, Shape],
        flows: list[MessageFlow],
        snapper: WaypointSnapper | None = None,
        config: LayoutConfig | None = None,
        groups: SideGroups | None = None,
    ) -> None:
        self.config = config or LayoutConfig()
        self.shapes = shapes
        self.snapper = snapper or WaypointSnapper(self.config.grid_size)
        self.groups = groups if groups is not None else SideGroups()
        self._kinds: dict[str, str] = {}

        for flow in flows:
            ends = self._ends(flow)
            if ends is None:
                continue
            kind, src_side, tgt_side = self._classify(flow, *ends)
            self._kinds[flow.id] = kind
            if src_side is not None:
                self.groups.add(flow.source.id, src_side, f"{flow.id}:out")
            self.groups.add(flow.target.id, tgt_side, f"{flow.id}:in")

    def _ends(self, flow: MessageFlow) -> tuple[Shape, Shape] | None:
        src = lookup(self.shapes, flow.source)
        tgt = lookup(self.shapes, flow.target)
        if src is None or tgt is None:
            return None
        return (src, tgt)

    def obstacles(self, *exclude: Shape) -> list:
        """Bounds of the non-container shapes other than *exclude*."""
        return [
            s.bounds
            for s in self.shapes.values()
            if not _is_container(s) and not any(s is e for e in exclude)
        ]

    @staticmethod
    def _is_drop(flow: MessageFlow, src: Shape, tgt: Shape) -> bool:
        if not is_participant(flow.source) or flow.target.type not in _DROP_TARGETS:
            return False
        return tgt.bounds.y > src.bounds.bottom - SIDE_CLEARANCE

    def _classify(
        self, flow: MessageFlow, src: Shape, tgt: Shape
    ) -> tuple[str, Side | None, Side]:
        if self._is_drop(flow, src, tgt):
            return ("pool-drop", None, Side.TOP)

        sb, tb = src.bounds, tgt.bounds
        overlap = horizontal_overlap(sb, tb)
        if overlap > MESSAGE_VERTICAL_OVERLAP and abs(sb.center_y - tb.center_y) > MESSAGE_VERTICAL_GAP:
            if sb.center_y < tb.center_y:
                return ("vertical", Side.BOTTOM, Side.TOP)
            return ("vertical", Side.TOP, Side.BOTTOM)

        if sb.x - tb.right > MESSAGE_SIDE_GAP:
            return ("horizontal", Side.LEFT, Side.RIGHT)
        return ("horizontal", Side.RIGHT, Side.LEFT)

    def route(self, flow: MessageFlow) -> RoutedPath | None:
        ends = self._ends(flow)
        if ends is None:
            logger.debug(f"Skipping message flow {flow.id}: endpoint without shape")
            return None
        src, tgt = ends

        kind = self._kinds.get(flow.id) or self._classify(flow, src, tgt)[0]
        if kind == "pool-drop":
            points = self._pool_drop(flow, src, tgt)
        elif kind == "vertical":
            points = self._vertical(flow, src, tgt)
        else:
            points = self._horizontal(flow, src, tgt)

        # Bends on an end's outline would run along its border.
        avoid = (src.bounds, tgt.bounds)
        return RoutedPath(flow, self.snapper.finalize_waypoints(points, avoid=avoid), kind)

    # -- anchors -------------------------------------------------------------

    def _anchor(self, shape: Shape, side: Side, key: str) -> tuple[Point, bool]:
        """Anchor on *side*, and whether it may still slide along that side.

        Spread anchors and anchors on a diamond are fixed.
        """
        index, total = self.groups.position(shape.element.id, side, key)
        diamond = is_diamond(shape)
        point = side_point(shape.bounds, side, index, total, diamond=diamond)
        return point, total == 1 and not diamond

    # -- path builders -------------------------------------------------------

    def _pool_drop(self, flow: MessageFlow, src: Shape, tgt: Shape) -> list[Point]:
        sb, tb = src.bounds, tgt.bounds
        end, end_free = self._anchor(tgt, Side.TOP, f"{flow.id}:in")
        preferred = min(max(end[0], sb.x + CORRIDOR_MARGIN), sb.right - CORRIDOR_MARGIN)
        x = find_clear_vertical_x(
            preferred,
            sb.bottom,
            tb.y,
            self.obstacles(src, tgt),
            step=self.config.corridor_step,
            max_shift=self.config.corridor_max_shift,
        )
        # The drop must still leave through the pool's bottom edge.
        if not sb.x <= x <= sb.right:
            x = preferred
        if x == end[0] or (end_free and tb.x <= x <= tb.right):
            return [(x, sb.bottom), (x, end[1])]
        mid_y = (sb.bottom + end[1]) / 2
        return [(x, sb.bottom), (x, mid_y), (end[0], mid_y), end]

    def _vertical(self, flow: MessageFlow, src: Shape, tgt: Shape) -> list[Point]:
        sb, tb = src.bounds, tgt.bounds
        downwards = sb.center_y < tb.center_y
        src_side = Side.BOTTOM if downwards else Side.TOP
        tgt_side = src_side.opposite

        start, start_free = self._anchor(src, src_side, f"{flow.id}:out")
        end, end_free = self._anchor(tgt, tgt_side, f"{flow.id}:in")

        if start_free:
            x = start[0]
            inside = sb.x + CORRIDOR_MARGIN <= tb.center_x <= sb.right - CORRIDOR_MARGIN
            if is_participant(flow.source) and inside:
                x = tb.center_x
            x = find_clear_vertical_x(
                x,
                start[1],
                end[1],
                self.obstacles(src, tgt),
                step=self.config.corridor_step,
                max_shift=self.config.corridor_max_shift,
            )
            if sb.x <= x <= sb.right:
                start = (x, start[1])

        if abs(start[0] - end[0]) <= MESSAGE_ALIGN_TOLERANCE:
            if end_free and tb.x <= start[0] <= tb.right:
                end = (start[0], end[1])
                return [start, end]
            if start_free and sb.x <= end[0] <= sb.right:
                start = (end[0], start[1])
                return [start, end]

        if abs(start[0] - end[0]) <= MESSAGE_T_SHAPE_MAX:
            approach_y = end[1] - MESSAGE_APPROACH if downwards else end[1] + MESSAGE_APPROACH
            return [start, (start[0], approach_y), (end[0], approach_y), end]

        mid_y = (start[1] + end[1]) / 2
        return [start, (start[0], mid_y), (end[0], mid_y), end]

    def _horizontal(self, flow: MessageFlow, src: Shape, tgt: Shape) -> list[Point]:
        sb, tb = src.bounds, tgt.bounds
        left_to_right = not (sb.x - tb.right > MESSAGE_SIDE_GAP)
        src_side = Side.RIGHT if left_to_right else Side.LEFT
        tgt_side = src_side.opposite

        start, start_free = self._anchor(src, src_side, f"{flow.id}:out")
        end, end_free = self._anchor(tgt, tgt_side, f"{flow.id}:in")

        gap = tb.x - sb.right if left_to_right else sb.x - tb.right
        level = abs(sb.center_y - tb.center_y) < MESSAGE_LEVEL_TOLERANCE
        if gap > MESSAGE_SIDE_GAP and level:
            if start[1] == end[1]:
                return [start, end]
            if start_free and sb.y <= end[1] <= sb.bottom:
                return [(start[0], end[1]), end]
            if end_free and tb.y <= start[1] <= tb.bottom:
                return [start, (end[0], start[1])]

        sign = 1 if left_to_right else -1
        leg = (start[0] + sign * MESSAGE_LEG, start[1])
        bend_x = (start[0] + end[0]) / 2
        if left_to_right and bend_x - leg[0] < MESSAGE_MIN_BEND:
            bend_x = leg[0] + MESSAGE_MIN_BEND
        if not left_to_right and leg[0] - bend_x < MESSAGE_MIN_BEND:
            bend_x = leg[0] - MESSAGE_MIN_BEND
        return [start, leg, (bend_x, start[1]), (bend_x, end[1]), end]
