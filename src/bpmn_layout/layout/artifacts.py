"""Placement of artifacts that take no part in the flow: annotations and data.

Artifacts are put next to the node they relate to, then pushed down one
grid unit at a time until they overlap nothing already on the plane.
"""

from __future__ import annotations

__all__ = [
    "anchor_position",
    "annotation_targets",
    "data_anchor",
    "free_slot",
    "place_artifact",
]

from collections.abc import Iterable

from bpmn_layout.layout.constants import ARTIFACT_GAP
from bpmn_layout.layout.handlers.element import element_size
from bpmn_layout.layout.routing.snapping import snap_bounds
from bpmn_layout.parser.model import Association, Bounds, FlowNode, Plane, Shape


def free_slot(bounds: Bounds, occupied: Iterable[Bounds], step: float) -> Bounds:
    """First position at or below *bounds* that overlaps none of *occupied*."""
    occupied = list(occupied)
    candidate = Bounds(bounds.x, bounds.y, bounds.width, bounds.height)
    while True:
        blocker = next((b for b in occupied if candidate.overlaps(b)), None)
        if blocker is None:
            return candidate
        # Jump past the blocker, staying on the step lattice.
        while candidate.y < blocker.bottom:
            candidate.y += step


def place_artifact(
    element: FlowNode,
    x: float,
    y: float,
    plane: Plane,
    grid_size: float,
    ignore: tuple = (),
) -> Shape:
    """Create the shape of *element* at the first free slot from ``(x, y)``.

    Shapes whose element type is in *ignore* (containers) do not block.
    """
    width, height = element_size(element)
    bounds = Bounds(x, y, width, height)
    snap_bounds(bounds, grid_size)
    occupied = [
        s.bounds for s in plane.shapes() if getattr(s.element, "type", None) not in ignore
    ]
    shape = Shape(id=f"{element.id}_di", element=element, bounds=free_slot(bounds, occupied, grid_size))
    element.di = shape
    plane.plane_elements.append(shape)
    return shape


def annotation_targets(note: FlowNode, associations: Iterable[Association]) -> list:
    """Elements linked to *note* by an association, in association order."""
    targets = []
    for assoc in associations:
        if assoc.source is note and assoc.target is not None:
            targets.append(assoc.target)
        elif assoc.target is note and assoc.source is not None:
            targets.append(assoc.source)
    return targets


def data_anchor(data: FlowNode, nodes: Iterable[FlowNode]) -> FlowNode | None:
    """First node reading or writing *data*, in document order."""
    for node in nodes:
        for assoc in node.data_input_associations:
            if data in assoc.sources:
                return node
        for assoc in node.data_output_associations:
            if data in assoc.targets:
                return node
    return None


def anchor_position(anchor: Bounds | None, fallback: tuple[float, float]) -> tuple[float, float]:
    """Slot to the right of *anchor*, top-aligned, or *fallback*."""
    if anchor is None:
        return fallback
    return (anchor.right + ARTIFACT_GAP, anchor.y)
