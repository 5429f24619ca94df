"""Routing of data associations and generic (annotation) associations.

Association anchors share the per-diagram side groups with sequence and
message flows, so every connection on one side of a node gets its own
spread anchor. Register all associations of a diagram before routing any
connection on it.
"""

from __future__ import annotations

__all__ = ["AssociationRouter"]

import logging
from collections.abc import Iterable, Iterator, Mapping

from bpmn_layout.layout.config import LayoutConfig
from bpmn_layout.layout.constants import DATA_DETOUR
from bpmn_layout.layout.routing.common import RoutedPath, SideGroups, is_diamond, lookup
from bpmn_layout.layout.routing.geometry import (
    Point,
    Side,
    classify_side,
    elbow,
    side_point,
    vertical_sides,
)
from bpmn_layout.layout.routing.snapping import WaypointSnapper
from bpmn_layout.parser.model import (
    Association,
    Bounds,
    DataAssociation,
    FlowNode,
    Shape,
)

logger = logging.getLogger(__name__)

_CONTAINER_TYPES = ("participant", "lane")

Plan = tuple[str, Side, Side]


class AssociationRouter:
    """Connects data objects/stores and annotations to the nodes they belong to."""

    def __init__(
        self,
        shapes: Mapping[str, Shape],
        snapper: WaypointSnapper | None = None,
        config: LayoutConfig | None = None,
        groups: SideGroups | None = None,
    ) -> None:
        self.config = config or LayoutConfig()
        self.shapes = shapes
        self.snapper = snapper or WaypointSnapper(self.config.grid_size)
        self.groups = groups if groups is not None else SideGroups()
        self._plans: dict[str, Plan] = {}

    # -- planning ------------------------------------------------------------

    def _crosses_shape(self, points: list[Point], *exclude: Shape) -> bool:
        """True if the box spanned by *points* cuts through an unrelated shape."""
        xs = [p[0] for p in points]
        ys = [p[1] for p in points]
        span = Bounds(
            x=min(xs),
            y=min(ys),
            width=max(max(xs) - min(xs), 1),
            height=max(max(ys) - min(ys), 1),
        )
        for shape in self.shapes.values():
            if any(shape is e for e in exclude):
                continue
            if getattr(shape.element, "type", None) in _CONTAINER_TYPES:
                continue
            if shape.bounds.overlaps(span):
                return True
        return False

    @staticmethod
    def _sides(src: Shape, tgt: Shape) -> tuple[Side, Side]:
        sides = vertical_sides(src.bounds, tgt.bounds)
        if sides is not None:
            return sides
        side = classify_side(src.bounds, tgt.bounds)
        return (side, side.opposite)

    def _plan(self, src: Shape, tgt: Shape, data: bool) -> Plan:
        src_side, tgt_side = self._sides(src, tgt)
        if not data:
            return ("association", src_side, tgt_side)
        direct = elbow(
            side_point(src.bounds, src_side, diamond=is_diamond(src)),
            side_point(tgt.bounds, tgt_side, diamond=is_diamond(tgt)),
            horizontal=src_side.is_horizontal,
        )
        # Sent below both ends when the direct route would cut through a shape.
        if self._crosses_shape(direct, src, tgt):
            return ("data-detour", Side.BOTTOM, Side.BOTTOM)
        return ("data-direct", src_side, tgt_side)

    def _register(self, key: str, source: object, target: object, data: bool) -> Plan | None:
        plan = self._plans.get(key)
        if plan is not None:
            return plan
        src = lookup(self.shapes, source)
        tgt = lookup(self.shapes, target)
        if src is None or tgt is None:
            return None
        plan = self._plan(src, tgt, data)
        self._plans[key] = plan
        self.groups.add(source.id, plan[1], f"{key}:out")
        self.groups.add(target.id, plan[2], f"{key}:in")
        return plan

    def register_node_data(self, nodes: Iterable[FlowNode]) -> None:
        """Reserve side anchors for the data associations owned by *nodes*."""
        for node in nodes:
            for _, source, target, edge_id in _data_links(node):
                self._register(edge_id, source, target, data=True)

    def register_associations(self, associations: Iterable[Association]) -> None:
        """Reserve side anchors for generic associations."""
        for assoc in associations:
            self._register(f"{assoc.id}_di", assoc.source, assoc.target, data=False)

    # -- routing -------------------------------------------------------------

    def _anchor(self, shape: Shape, side: Side, key: str) -> Point:
        index, total = self.groups.position(shape.element.id, side, key)
        return side_point(shape.bounds, side, index, total, diamond=is_diamond(shape))

    def _points(self, key: str, plan: Plan, src: Shape, tgt: Shape) -> list[Point]:
        strategy, src_side, tgt_side = plan
        start = self._anchor(src, src_side, f"{key}:out")
        end = self._anchor(tgt, tgt_side, f"{key}:in")
        if strategy == "data-detour":
            below = max(src.bounds.bottom, tgt.bounds.bottom) + DATA_DETOUR
            return [start, (start[0], below), (end[0], below), end]
        return elbow(start, end, horizontal=src_side.is_horizontal)

    def _route(
        self, element: object, key: str, source: object, target: object, data: bool
    ) -> RoutedPath | None:
        src = lookup(self.shapes, source)
        tgt = lookup(self.shapes, target)
        if src is None or tgt is None:
            logger.debug(f"Skipping association {element.id}: endpoint without shape")
            return None
        plan = self._register(key, source, target, data)
        points = self._points(key, plan, src, tgt)
        return RoutedPath(element, self.snapper.finalize_waypoints(points), plan[0], edge_id=key)

    def route_data(
        self, association: DataAssociation, source: FlowNode, target: FlowNode, edge_id: str
    ) -> RoutedPath | None:
        """Route one data association from *source* to *target*."""
        return self._route(association, edge_id, source, target, data=True)

    def route_association(self, association: Association) -> RoutedPath | None:
        """Route a generic association between the facing sides of its ends."""
        return self._route(
            association, f"{association.id}_di", association.source, association.target, data=False
        )

    def route_node_data(self, node: FlowNode) -> list[RoutedPath]:
        """Route the data input and output associations owned by *node*."""
        paths = []
        for assoc, source, target, edge_id in _data_links(node):
            path = self.route_data(assoc, source, target, edge_id)
            if path is not None:
                paths.append(path)
        return paths


def _data_links(node: FlowNode) -> Iterator[tuple[DataAssociation, FlowNode, FlowNode, str]]:
    """``(association, source, target, edge id)`` for each data link of *node*."""
    for assoc in node.data_input_associations:
        for source in assoc.sources:
            yield assoc, source, node, _data_edge_id(assoc, source, len(assoc.sources))
    for assoc in node.data_output_associations:
        for target in assoc.targets:
            yield assoc, node, target, _data_edge_id(assoc, target, len(assoc.targets))


def _data_edge_id(association: DataAssociation, endpoint: FlowNode, count: int) -> str:
    if count > 1:
        return f"{association.id}_{endpoint.id}_di"
    return f"{association.id}_di"
