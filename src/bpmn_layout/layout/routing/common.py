"""Shared types and helper functions for connection routing."""

from __future__ import annotations

from collections import defaultdict
from collections.abc import Mapping
from dataclasses import dataclass

from bpmn_layout.layout.routing.geometry import Point, Side
from bpmn_layout.parser.model import Edge, Shape, is_gateway


@dataclass
class RoutedPath:
    """A routed connection: its waypoints and the strategy that produced them."""

    element: object
    points: list[Point]
    strategy: str
    edge_id: str | None = None

    def to_edge(self) -> Edge:
        edge_id = self.edge_id or f"{self.element.id}_di"
        return Edge(id=edge_id, element=self.element, waypoints=list(self.points))


class SideGroups:
    """Connections sharing one side of one shape, for anchor spreading.

    Members are kept in identifier order so the spread is stable across
    runs regardless of the order connections were registered in.
    """

    def __init__(self) -> None:
        self._groups: dict[tuple[str, Side], list[str]] = defaultdict(list)

    def add(self, node_id: str, side: Side, key: str) -> None:
        members = self._groups[(node_id, side)]
        if key not in members:
            members.append(key)
            members.sort()

    def position(self, node_id: str, side: Side, key: str) -> tuple[int, int]:
        """Return ``(index, total)`` of *key* on that side, ``(0, 1)`` if unknown."""
        members = self._groups.get((node_id, side), [])
        if key not in members:
            return (0, 1)
        return (members.index(key), len(members))

    def __len__(self) -> int:
        return len(self._groups)


def shape_index(shapes: list[Shape]) -> dict[str, Shape]:
    """Map element id to its shape."""
    return {shape.element.id: shape for shape in shapes}


def is_diamond(shape: Shape) -> bool:
    return is_gateway(shape.element)


def lookup(shapes: Mapping[str, Shape], element: object) -> Shape | None:
    element_id = getattr(element, "id", None)
    if element_id is None:
        return None
    return shapes.get(element_id)
