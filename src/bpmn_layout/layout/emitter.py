"""Diagram emitter: turns a populated grid into one diagram of shapes and edges."""

from __future__ import annotations

__all__ = ["DiagramEmitter", "snap_bounds", "snap_shapes"]

from bpmn_layout.layout.artifacts import anchor_position, annotation_targets, place_artifact
from bpmn_layout.layout.constants import ARTIFACT_GAP
from bpmn_layout.layout.grid import Grid
from bpmn_layout.layout.handlers.base import (
    CREATE_CONNECTION_DI,
    CREATE_ELEMENT_DI,
    HandlerContext,
    HandlerRegistry,
)
from bpmn_layout.layout.routing import (
    AssociationRouter,
    SequenceFlowRouter,
    shape_index,
)
from bpmn_layout.layout.routing.snapping import snap_bounds
from bpmn_layout.parser.model import (
    Association,
    Diagram,
    Plane,
    Shape,
    flow_nodes,
    is_text_annotation,
    sequence_flows,
)


def snap_shapes(plane_elements: list, grid_size: float) -> None:
    """Snap the bounds of every shape in *plane_elements* in place."""
    for pe in plane_elements:
        if isinstance(pe, Shape):
            snap_bounds(pe.bounds, grid_size)


class DiagramEmitter:
    """Emits the diagram of one surface laid out on a grid.

    Shapes come first, in row-major grid order, and are snapped to the
    grid before any connection is routed so routes dock on final bounds.
    """

    def __init__(self, registry: HandlerRegistry, context) -> None:
        self.registry = registry
        self.context = context

    def generate_di(self, root, grid: Grid) -> Diagram:
        config = self.context.config
        plane = Plane(id=f"BPMNPlane_{root.id}", element=root)
        diagram = Diagram(id=f"BPMNDiagram_{root.id}", plane=plane)

        for cell in grid.elements_by_position():
            ctx = HandlerContext(
                element=cell.element,
                grid=grid,
                row=cell.row,
                col=cell.col,
                plane=plane,
                config=config,
            )
            plane.plane_elements.extend(self.registry.invoke(CREATE_ELEMENT_DI, ctx))

        snap_shapes(plane.plane_elements, config.grid_size)
        self._place_annotations(root, plane)

        shapes = shape_index(plane.shapes())
        snapper = self.context.snapper_for(plane.id)
        groups = self.context.side_groups_for(plane.id)
        router = SequenceFlowRouter(
            shapes, sequence_flows(root.flow_elements), snapper, config, groups
        )
        associations = AssociationRouter(shapes, snapper, config, groups)
        associations.register_node_data(flow_nodes(root.flow_elements))
        associations.register_associations(
            a for a in getattr(root, "artifacts", []) if isinstance(a, Association)
        )

        # Connections in document order of their source node.
        placed = {id(cell.element): cell for cell in grid.elements_by_position()}
        for node in flow_nodes(root.flow_elements):
            cell = placed.get(id(node))
            if cell is None:
                continue
            ctx = HandlerContext(
                element=node,
                grid=grid,
                row=cell.row,
                col=cell.col,
                plane=plane,
                router=router,
                config=config,
            )
            plane.plane_elements.extend(self.registry.invoke(CREATE_CONNECTION_DI, ctx))

        self._emit_artifacts(root, plane, associations)
        return diagram

    def _place_annotations(self, root, plane: Plane) -> None:
        """Put the text annotations of *root* next to the element they describe."""
        artifacts = getattr(root, "artifacts", [])
        associations = [a for a in artifacts if isinstance(a, Association)]
        shapes = plane.shapes()
        bottom = max((s.bounds.bottom for s in shapes), default=0)

        for note in artifacts:
            if not is_text_annotation(note):
                continue
            anchor = next(
                (
                    t.di.bounds
                    for t in annotation_targets(note, associations)
                    if isinstance(getattr(t, "di", None), Shape)
                ),
                None,
            )
            x, y = anchor_position(anchor, (0, bottom + ARTIFACT_GAP))
            place_artifact(note, x, y, plane, self.context.config.grid_size)

    def _emit_artifacts(self, root, plane: Plane, router: AssociationRouter) -> None:
        """Route data associations and annotation links between placed shapes."""
        for node in flow_nodes(root.flow_elements):
            for path in router.route_node_data(node):
                plane.plane_elements.append(path.to_edge())
        for artifact in getattr(root, "artifacts", []):
            if isinstance(artifact, Association):
                path = router.route_association(artifact)
                if path is not None:
                    edge = path.to_edge()
                    artifact.di = edge
                    plane.plane_elements.append(edge)
