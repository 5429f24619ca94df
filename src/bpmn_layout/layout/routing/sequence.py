"""Sequence flow routing.

Every flow is routed by the first strategy, in priority order, whose
predicate accepts it:

1. ``under-route`` - right-to-left flow into a merge node: leave the
   source's bottom, pass below both shapes, enter the target's bottom.
2. ``vertical-dominance`` - stacked shapes: bottom/top centers, bend at
   the middle y.
3. ``branch-fanout`` - a branching gateway with several outgoing flows:
   leave the diamond, run a short stub outward, spread perpendicular.
4. ``side-anchor`` - a clear gap on one side: spread anchors on the
   facing sides, bend at the middle x (or y).
5. ``default-midpoint`` - overlapping shapes: dock on the center line.

Sides are decided for all flows of a surface up front, so anchors of
flows sharing a side can be spread evenly before any path is built.
"""

from __future__ import annotations

__all__ = ["SequenceFlowRouter", "STRATEGY_NAMES"]

import logging
from collections.abc import Callable, Mapping
from dataclasses import dataclass

from bpmn_layout.layout.config import LayoutConfig
from bpmn_layout.layout.constants import (
    FANOUT_SPREAD,
    FANOUT_STUB,
    UNDER_ROUTE_MIN_GAP,
)
from bpmn_layout.layout.routing.common import RoutedPath, SideGroups, is_diamond, lookup
from bpmn_layout.layout.routing.geometry import (
    Point,
    Side,
    classify_side,
    dock_between,
    elbow,
    separating_side,
    side_point,
    vertical_sides,
)
from bpmn_layout.layout.routing.snapping import WaypointSnapper
from bpmn_layout.parser.model import SequenceFlow, Shape, is_branch_gateway

logger = logging.getLogger(__name__)

Sides = tuple[Side | None, Side | None]


# ---------------------------------------------------------------------------
# Strategy predicates: return (source side, target side) or None
# ---------------------------------------------------------------------------


def _under_route_sides(flow: SequenceFlow, src: Shape, tgt: Shape) -> Sides | None:
    if src.bounds.x > tgt.bounds.right + UNDER_ROUTE_MIN_GAP and len(flow.target.incoming) > 1:
        return (Side.BOTTOM, Side.BOTTOM)
    return None


def _vertical_sides(flow: SequenceFlow, src: Shape, tgt: Shape) -> Sides | None:
    return vertical_sides(src.bounds, tgt.bounds)


def _fanout_sides(flow: SequenceFlow, src: Shape, tgt: Shape) -> Sides | None:
    if is_branch_gateway(flow.source) and len(flow.source.outgoing) > 1:
        side = classify_side(src.bounds, tgt.bounds)
        return (side, side.opposite)
    return None


def _side_anchor_sides(flow: SequenceFlow, src: Shape, tgt: Shape) -> Sides | None:
    side = separating_side(src.bounds, tgt.bounds)
    if side is None:
        return None
    return (side, side.opposite)


def _default_sides(flow: SequenceFlow, src: Shape, tgt: Shape) -> Sides | None:
    return (None, None)


@dataclass(frozen=True)
class _Strategy:
    name: str
    sides: Callable[[SequenceFlow, Shape, Shape], Sides | None]


STRATEGIES: tuple[_Strategy, ...] = (
    _Strategy("under-route", _under_route_sides),
    _Strategy("vertical-dominance", _vertical_sides),
    _Strategy("branch-fanout", _fanout_sides),
    _Strategy("side-anchor", _side_anchor_sides),
    _Strategy("default-midpoint", _default_sides),
)

STRATEGY_NAMES = tuple(s.name for s in STRATEGIES)


@dataclass
class _Plan:
    strategy: str
    source_side: Side | None
    target_side: Side | None


# ---------------------------------------------------------------------------
# Router
# ---------------------------------------------------------------------------


class SequenceFlowRouter:
    """Routes the sequence flows of one surface over already placed shapes."""

    def __init__(
        self,
        shapes: Mapping[str, Shape],
        flows: list[SequenceFlow],
        snapper: WaypointSnapper | None = None,
        config: LayoutConfig | None = None,
        groups: SideGroups | None = None,
    ) -> None:
        self.config = config or LayoutConfig()
        self.shapes = shapes
        self.snapper = snapper or WaypointSnapper(self.config.grid_size)
        self.groups = groups if groups is not None else SideGroups()
        self._plans: dict[str, _Plan] = {}

        for flow in flows:
            ends = self._ends(flow)
            if ends is None:
                continue
            plan = self._plan(flow, *ends)
            self._plans[flow.id] = plan
            if plan.source_side is not None:
                self.groups.add(flow.source.id, plan.source_side, f"{flow.id}:out")
            if plan.target_side is not None:
                self.groups.add(flow.target.id, plan.target_side, f"{flow.id}:in")

    def _ends(self, flow: SequenceFlow) -> tuple[Shape, Shape] | None:
        src = lookup(self.shapes, flow.source)
        tgt = lookup(self.shapes, flow.target)
        if src is None or tgt is None:
            return None
        return (src, tgt)

    @staticmethod
    def _plan(flow: SequenceFlow, src: Shape, tgt: Shape) -> _Plan:
        if flow.source is flow.target:
            return _Plan("default-midpoint", None, None)
        for strategy in STRATEGIES:
            sides = strategy.sides(flow, src, tgt)
            if sides is not None:
                return _Plan(strategy.name, *sides)
        raise AssertionError("default-midpoint always applies")

    def strategy_for(self, flow: SequenceFlow) -> str | None:
        """Name of the strategy chosen for *flow*, if it can be routed."""
        plan = self._plans.get(flow.id)
        return plan.strategy if plan else None

    def _anchor(self, shape: Shape, side: Side, key: str) -> Point:
        index, total = self.groups.position(shape.element.id, side, key)
        return side_point(shape.bounds, side, index, total, diamond=is_diamond(shape))

    def route(self, flow: SequenceFlow) -> RoutedPath | None:
        """Compute the waypoints of *flow*, or None if an end has no shape."""
        ends = self._ends(flow)
        if ends is None:
            logger.debug(f"Skipping sequence flow {flow.id}: endpoint without shape")
            return None
        src, tgt = ends

        plan = self._plans.get(flow.id) or self._plan(flow, src, tgt)

        if plan.strategy == "default-midpoint":
            points = self._default_midpoint(flow, src, tgt)
        else:
            start = self._anchor(src, plan.source_side, f"{flow.id}:out")
            end = self._anchor(tgt, plan.target_side, f"{flow.id}:in")
            if plan.strategy == "under-route":
                points = self._under_route(start, end, src, tgt)
            elif plan.strategy == "vertical-dominance":
                points = elbow(start, end, horizontal=False)
            elif plan.strategy == "branch-fanout":
                points = self._branch_fanout(flow, start, end, plan.source_side)
            else:
                points = elbow(start, end, horizontal=plan.source_side.is_horizontal)

        return RoutedPath(flow, self.snapper.finalize_waypoints(points), plan.strategy)

    # -- path builders -------------------------------------------------------

    def _under_route(self, start: Point, end: Point, src: Shape, tgt: Shape) -> list[Point]:
        under_y = max(src.bounds.bottom, tgt.bounds.bottom) + self.config.under_route_clearance
        return [start, (start[0], under_y), (end[0], under_y), end]

    def _branch_fanout(
        self, flow: SequenceFlow, start: Point, end: Point, side: Side
    ) -> list[Point]:
        index, total = self.groups.position(flow.source.id, side, f"{flow.id}:out")
        offset = (index - (total - 1) / 2) * FANOUT_SPREAD
        sign = 1 if side in (Side.RIGHT, Side.BOTTOM) else -1

        if side.is_horizontal:
            outward = (start[0] + sign * FANOUT_STUB, start[1])
            spread = (outward[0], outward[1] + offset)
        else:
            outward = (start[0], start[1] + sign * FANOUT_STUB)
            spread = (outward[0] + offset, outward[1])

        points = [start, outward]
        if spread != outward:
            points.append(spread)
        return points + elbow(spread, end, horizontal=side.is_horizontal)[1:]

    def _default_midpoint(self, flow: SequenceFlow, src: Shape, tgt: Shape) -> list[Point]:
        if flow.source is flow.target:
            # Self loop: out of the right side, over the top, back in from above.
            b = src.bounds
            start = side_point(b, Side.RIGHT, diamond=is_diamond(src))
            end = side_point(b, Side.TOP, diamond=is_diamond(src))
            out_x = b.right + self.config.grid_size
            over_y = b.y - self.config.grid_size
            return [start, (out_x, start[1]), (out_x, over_y), (end[0], over_y), end]

        start, end = dock_between(src.bounds, tgt.bounds, is_diamond(src), is_diamond(tgt))
        horizontal = abs(end[0] - start[0]) >= abs(end[1] - start[1])
        return elbow(start, end, horizontal=horizontal)
