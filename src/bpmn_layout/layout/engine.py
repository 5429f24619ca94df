"""Layout coordinator: picks the layout path and owns per-run state.

A collaboration is laid out as stacked pools on one plane; a plain process
goes through the grid path (placer, then emitter). Every sub-process gets a
plane of its own through the grid path, exactly once per run.
"""

from __future__ import annotations

__all__ = ["LayoutContext", "Layouter", "layout_document"]

import logging
from dataclasses import dataclass, field

from bpmn_layout.errors import DocumentError, LayoutError
from bpmn_layout.layout.config import LayoutConfig
from bpmn_layout.layout.emitter import DiagramEmitter
from bpmn_layout.layout.handlers import HandlerRegistry, default_registry
from bpmn_layout.layout.placer import GraphPlacer
from bpmn_layout.layout.pools import PoolLayoutEngine
from bpmn_layout.layout.routing import SideGroups, WaypointSnapper
from bpmn_layout.parser.model import (
    Collaboration,
    Definitions,
    Diagram,
    FlowNode,
    Process,
    flow_nodes,
    is_sub_process,
)

logger = logging.getLogger(__name__)


@dataclass
class LayoutContext:
    """State of one layout run, shared by the placer, emitter and pool engine."""

    config: LayoutConfig
    registry: HandlerRegistry
    created_planes: set[str] = field(default_factory=set)
    used_points: dict[str, set] = field(default_factory=dict)
    side_groups: dict[str, SideGroups] = field(default_factory=dict)
    diagrams: list[Diagram] = field(default_factory=list)

    def snapper_for(self, plane_id: str) -> WaypointSnapper:
        """Snapper sharing the used-bend set of *plane_id*."""
        used = self.used_points.setdefault(plane_id, set())
        return WaypointSnapper(self.config.grid_size, used, self.config.snap_search_radius)

    def side_groups_for(self, plane_id: str) -> SideGroups:
        """Anchor groups shared by every connection drawn on *plane_id*."""
        return self.side_groups.setdefault(plane_id, SideGroups())


# ---------------------------------------------------------------------------
# Cleaning previous layout results
# ---------------------------------------------------------------------------


def _clean_scope(scope) -> None:
    for el in scope.flow_elements:
        el.di = None
        if isinstance(el, FlowNode):
            el.attachers.clear()
            if is_sub_process(el):
                _clean_scope(el)
    for lane in scope.lanes:
        lane.di = None
    for artifact in scope.artifacts:
        artifact.di = None


def clean_di(definitions: Definitions) -> None:
    """Drop diagrams and every ``di`` reference left by an earlier run."""
    definitions.diagrams.clear()
    for root in definitions.root_elements:
        if isinstance(root, Process):
            _clean_scope(root)
        elif isinstance(root, Collaboration):
            for participant in root.participants:
                participant.di = None
            for flow in root.message_flows:
                flow.di = None
            for artifact in root.artifacts:
                artifact.di = None


# ---------------------------------------------------------------------------
# Coordinator
# ---------------------------------------------------------------------------


class Layouter:
    def __init__(
        self,
        config: LayoutConfig | None = None,
        registry: HandlerRegistry | None = None,
    ) -> None:
        self.config = config or LayoutConfig()
        self.registry = registry or default_registry()
        self.context = LayoutContext(self.config, self.registry)

    def layout(self, definitions: Definitions) -> Definitions:
        """Lay out *definitions* in place and return it.

        The diagram of the top-level element comes first, followed by one
        diagram per sub-process in the order they were laid out.
        """
        self.context = LayoutContext(self.config, self.registry)
        clean_di(definitions)

        collaboration = definitions.get_collaboration()
        process = definitions.get_process()
        if collaboration is None and process is None:
            raise DocumentError(
                f"Nothing to lay out in '{definitions.id}': no process or collaboration"
            )

        if collaboration is not None:
            root_id = collaboration.id
            self._layout_collaboration(collaboration)
        else:
            root_id = process.id
            self.handle_plane(process, root=True)

        root_diagram = f"BPMNDiagram_{root_id}"
        diagrams = sorted(self.context.diagrams, key=lambda d: d.id != root_diagram)
        definitions.diagrams.extend(diagrams)
        return definitions

    def _layout_collaboration(self, collaboration: Collaboration) -> None:
        self.context.created_planes.add(collaboration.id)
        engine = PoolLayoutEngine(self.context)
        try:
            diagram = engine.layout_collaboration(collaboration)
        except LayoutError:
            raise
        except Exception as exc:
            raise LayoutError(f"Failed to lay out '{collaboration.id}': {exc}") from exc
        self.context.diagrams.append(diagram)

        for sub in engine.sub_processes(collaboration):
            self.handle_plane(sub)

    def handle_plane(self, element, root: bool = False) -> Diagram | None:
        """Lay out *element* (a process or sub-process) on its own plane.

        Does nothing when the plane already exists in this run. A failing
        sub-process plane is logged and dropped; a failing root plane
        raises :class:`LayoutError`.
        """
        if element.id in self.context.created_planes:
            return None
        self.context.created_planes.add(element.id)

        try:
            placer = GraphPlacer(self.registry, on_sub_process=self.handle_plane)
            grid = placer.create_grid_layout(element)
            diagram = DiagramEmitter(self.registry, self.context).generate_di(element, grid)
        except Exception as exc:
            if root:
                if isinstance(exc, LayoutError):
                    raise
                raise LayoutError(f"Failed to lay out '{element.id}': {exc}") from exc
            logger.warning(f"Dropping diagram of sub-process '{element.id}': {exc}")
            return None

        self.context.diagrams.append(diagram)

        # Sub-processes the traversal never popped still get their plane.
        for node in flow_nodes(element.flow_elements):
            if is_sub_process(node):
                self.handle_plane(node)
        return diagram


def layout_document(
    definitions: Definitions, config: LayoutConfig | None = None
) -> Definitions:
    """Lay out *definitions* with the stock handlers."""
    return Layouter(config).layout(definitions)
