"""Layout validator: programmatic checks for layout defects.

Runs a suite of checks against the diagrams of a laid-out Definitions
tree and returns a list of Violation objects describing any problems found.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from bpmn_layout.layout.routing.geometry import on_boundary
from bpmn_layout.parser.model import (
    DataAssociation,
    Definitions,
    Diagram,
    Edge,
    Shape,
    is_boundary_event,
    is_gateway,
)

CONTAINER_TYPES = ("participant", "lane")


class Severity(Enum):
    ERROR = "error"
    WARNING = "warning"


@dataclass
class Violation:
    check: str
    severity: Severity
    message: str
    context: dict = field(default_factory=dict)


def validate_layout(definitions: Definitions, grid_size: int = 20) -> list[Violation]:
    """Run all layout checks and return violations."""
    violations: list[Violation] = []
    violations.extend(check_shape_overlap(definitions))
    violations.extend(check_grid_alignment(definitions, grid_size))
    violations.extend(check_orthogonal_edges(definitions))
    violations.extend(check_docking(definitions))
    violations.extend(check_shared_anchors(definitions))
    return violations


def _is_container(shape: Shape) -> bool:
    return getattr(shape.element, "type", None) in CONTAINER_TYPES


def check_shape_overlap(definitions: Definitions) -> list[Violation]:
    """Check that no two node shapes on one diagram overlap.

    Pools and lanes contain other shapes and boundary events sit on their
    host's border by construction, so both are left out.
    """
    violations: list[Violation] = []
    for diagram in definitions.diagrams:
        shapes = [
            s
            for s in diagram.plane.shapes()
            if not _is_container(s) and not is_boundary_event(s.element)
        ]
        for i in range(len(shapes)):
            a = shapes[i]
            for j in range(i + 1, len(shapes)):
                b = shapes[j]
                if a.bounds.overlaps(b.bounds):
                    violations.append(
                        Violation(
                            check="shape_overlap",
                            severity=Severity.ERROR,
                            message=(
                                f"Shapes '{a.id}' and '{b.id}' overlap on {diagram.id}: "
                                f"A={a.bounds} B={b.bounds}"
                            ),
                            context={"a": a.id, "b": b.id, "diagram": diagram.id},
                        )
                    )
    return violations


def check_grid_alignment(definitions: Definitions, grid_size: int = 20) -> list[Violation]:
    """Check that every shape's edges lie on the grid."""
    violations: list[Violation] = []
    for diagram in definitions.diagrams:
        for shape in diagram.plane.shapes():
            b = shape.bounds
            off_grid = [v for v in (b.x, b.y, b.right, b.bottom) if v % grid_size != 0]
            if off_grid:
                violations.append(
                    Violation(
                        check="grid_alignment",
                        severity=Severity.ERROR,
                        message=f"Shape '{shape.id}' is off the {grid_size}px grid: {b}",
                        context={"shape": shape.id},
                    )
                )
    return violations


def check_orthogonal_edges(definitions: Definitions) -> list[Violation]:
    """Check that every edge has two or more waypoints and no diagonal segment."""
    violations: list[Violation] = []
    for diagram in definitions.diagrams:
        for edge in diagram.plane.edges():
            points = edge.waypoints
            if len(points) < 2:
                violations.append(
                    Violation(
                        check="orthogonal_edges",
                        severity=Severity.ERROR,
                        message=f"Edge '{edge.id}' has {len(points)} waypoint(s)",
                        context={"edge": edge.id},
                    )
                )
                continue
            for (x1, y1), (x2, y2) in zip(points, points[1:]):
                if x1 != x2 and y1 != y2:
                    violations.append(
                        Violation(
                            check="orthogonal_edges",
                            severity=Severity.ERROR,
                            message=(
                                f"Edge '{edge.id}' has a diagonal segment "
                                f"({x1:.1f},{y1:.1f}) -> ({x2:.1f},{y2:.1f})"
                            ),
                            context={"edge": edge.id},
                        )
                    )
    return violations


def _edge_ends(edge: Edge) -> tuple[object, object] | None:
    element = edge.element
    if isinstance(element, DataAssociation):
        return _data_ends(edge, element)
    source = getattr(element, "source", None)
    target = getattr(element, "target", None)
    if source is None or target is None:
        return None
    return source, target


def _data_ends(edge: Edge, association: DataAssociation) -> tuple[object, object] | None:
    """Ends of one data association edge; several endpoints get one edge each."""

    def pick(nodes: list) -> object | None:
        if len(nodes) == 1:
            return nodes[0]
        return next((n for n in nodes if edge.id == f"{association.id}_{n.id}_di"), None)

    source, target = pick(association.sources), pick(association.targets)
    if source is None or target is None:
        return None
    return source, target


def _shape_of(diagram: Diagram, element: object) -> Shape | None:
    return diagram.plane.shape_for(element)


def check_docking(definitions: Definitions, tolerance: float = 1e-6) -> list[Violation]:
    """Check that edges start on their source's outline and end on their target's."""
    violations: list[Violation] = []
    for diagram in definitions.diagrams:
        for edge in diagram.plane.edges():
            ends = _edge_ends(edge)
            if ends is None or len(edge.waypoints) < 2:
                continue
            for label, element, point in (
                ("source", ends[0], edge.waypoints[0]),
                ("target", ends[1], edge.waypoints[-1]),
            ):
                shape = _shape_of(diagram, element)
                if shape is None:
                    continue
                if not on_boundary(shape.bounds, point, is_gateway(element), tolerance):
                    violations.append(
                        Violation(
                            check="docking",
                            severity=Severity.ERROR,
                            message=(
                                f"Edge '{edge.id}' {label} point {point} is not on "
                                f"the outline of '{shape.id}' {shape.bounds}"
                            ),
                            context={"edge": edge.id, "shape": shape.id},
                        )
                    )
    return violations


def check_shared_anchors(definitions: Definitions) -> list[Violation]:
    """Check that no two edges touch a shape at the same point."""
    violations: list[Violation] = []
    for diagram in definitions.diagrams:
        seen: dict[tuple[int, tuple[float, float]], str] = {}
        for edge in diagram.plane.edges():
            ends = _edge_ends(edge)
            if ends is None or len(edge.waypoints) < 2:
                continue
            if ends[0] is ends[1]:
                continue
            for element, point in ((ends[0], edge.waypoints[0]), (ends[1], edge.waypoints[-1])):
                key = (id(element), point)
                other = seen.get(key)
                if other is not None and other != edge.id:
                    violations.append(
                        Violation(
                            check="shared_anchors",
                            severity=Severity.ERROR,
                            message=(
                                f"Edges '{other}' and '{edge.id}' share anchor "
                                f"{point} on '{getattr(element, 'id', element)}'"
                            ),
                            context={"edges": (other, edge.id)},
                        )
                    )
                seen[key] = edge.id
    return violations
