"""Pool layout for collaborations: stacked pools, lanes and depth columns.

Each participant's pool is laid out in turn, top to bottom. Inside a pool
every flow node gets a column from breadth-first depth layering (per lane
when the process has lanes) and the next free row in that column. Pools
and lanes then grow to fit their content. Connections are routed only
once every shape on the collaboration plane is final and snapped.
"""

from __future__ import annotations

__all__ = ["Extent", "PoolLayoutEngine"]

import logging
import math
from typing import NamedTuple

from bpmn_layout.layout.artifacts import (
    anchor_position,
    annotation_targets,
    data_anchor,
    place_artifact,
)
from bpmn_layout.layout.constants import (
    ANNOTATION_INSET,
    ARTIFACT_GAP,
    EVENT_SIZE,
    EVENT_Y_SHIFT,
    GATEWAY_SIZE,
    GATEWAY_Y_SHIFT,
    LANE_BOTTOM_PADDING,
    LANE_HEADER,
    LANE_MIN_HEIGHT,
    POOL_BOTTOM_PADDING,
    POOL_CONTENT_X,
    POOL_CONTENT_Y,
    POOL_HEADER,
    POOL_RIGHT_PADDING,
    TASK_HEIGHT,
    TASK_WIDTH,
)
from bpmn_layout.layout.handlers.element import element_size
from bpmn_layout.layout.layers import compute_depths
from bpmn_layout.layout.routing import (
    AssociationRouter,
    MessageFlowRouter,
    SequenceFlowRouter,
    shape_index,
)
from bpmn_layout.layout.routing.snapping import snap_bounds
from bpmn_layout.parser.model import (
    Association,
    Bounds,
    Collaboration,
    Diagram,
    FlowNode,
    Participant,
    Plane,
    Process,
    Shape,
    flow_nodes,
    is_boundary_event,
    is_branch_gateway,
    is_data,
    is_event,
    is_gateway,
    is_sub_process,
    is_text_annotation,
    sequence_flows,
)

logger = logging.getLogger(__name__)

_CONTAINERS = ("participant", "lane")


class Extent(NamedTuple):
    """Right and bottom edge of a pool's content."""

    max_x: float
    max_y: float


def _layered_nodes(process: Process) -> list[FlowNode]:
    """Flow nodes that take part in depth layering."""
    return [
        el
        for el in flow_nodes(process.flow_elements)
        if not is_boundary_event(el) and not is_data(el) and not is_text_annotation(el)
    ]


def _start_ids(nodes: list[FlowNode]) -> list[str]:
    return [el.id for el in nodes if el.type == "startEvent"]


def _associations(artifacts: list) -> list[Association]:
    return [a for a in artifacts if isinstance(a, Association)]


class PoolLayoutEngine:
    def __init__(self, context) -> None:
        self.context = context
        self.config = context.config

    # ------------------------------------------------------------------
    # Collaboration
    # ------------------------------------------------------------------

    def layout_collaboration(self, collaboration: Collaboration) -> Diagram:
        """Lay out all pools of *collaboration* on one plane and route it."""
        config = self.config
        plane = Plane(id=f"BPMNPlane_{collaboration.id}", element=collaboration)
        diagram = Diagram(id=f"BPMNDiagram_{collaboration.id}", plane=plane)

        current_y = config.pool_top
        for participant in collaboration.participants:
            pool = self._layout_pool(participant, current_y, plane)
            current_y = pool.bounds.bottom + config.pool_spacing

        self._place_collaboration_annotations(collaboration, plane, current_y)

        for pe in plane.shapes():
            snap_bounds(pe.bounds, config.grid_size)

        self._route(collaboration, plane)
        return diagram

    def _layout_pool(self, participant: Participant, y: float, plane: Plane) -> Shape:
        config = self.config
        bounds = Bounds(config.pool_left, y, config.pool_min_width, config.pool_min_height)
        pool = Shape(id=f"{participant.id}_di", element=participant, bounds=bounds, is_horizontal=True)
        participant.di = pool
        plane.plane_elements.append(pool)

        process = participant.process
        if process is None:
            snap_bounds(bounds, config.grid_size)
            return pool

        extent = self.layout_process_in_pool(process, bounds, plane)
        if extent is not None:
            bounds.width = max(extent.max_x + POOL_RIGHT_PADDING - bounds.x, bounds.width)
            bounds.height = max(extent.max_y + POOL_BOTTOM_PADDING - bounds.y, bounds.height)
        snap_bounds(bounds, config.grid_size)
        self._fit_lanes(process, bounds)
        return pool

    def _fit_lanes(self, process: Process, pool: Bounds) -> None:
        """Lanes span the pool right of its header; the last one reaches its bottom."""
        shapes = [lane.di for lane in process.lanes if lane.di is not None]
        for shape in shapes:
            shape.bounds.x = pool.x + POOL_HEADER
            shape.bounds.width = pool.width - POOL_HEADER
        if shapes:
            last = shapes[-1].bounds
            last.height = max(last.height, pool.bottom - last.y)

    # ------------------------------------------------------------------
    # Processes
    # ------------------------------------------------------------------

    def layout_process_in_pool(
        self, process: Process, pool: Bounds, plane: Plane
    ) -> Extent | None:
        """Place the nodes of *process* inside *pool*; return the content extent."""
        if not process.flow_elements and not process.artifacts:
            return None

        if process.lanes:
            extent = self.layout_process_with_lanes(process, pool, plane)
        else:
            extent = self.layout_process_without_lanes(process, pool, plane)

        self._place_boundary_events(process, plane)
        self._place_data(process, plane, pool)
        self._place_process_annotations(process, plane, pool)

        for shape in plane.shapes():
            if shape.element in process.flow_elements or shape.element in process.artifacts:
                extent = Extent(
                    max(extent.max_x, shape.bounds.right),
                    max(extent.max_y, shape.bounds.bottom),
                )
        return extent

    def layout_process_with_lanes(self, process: Process, pool: Bounds, plane: Plane) -> Extent:
        """One band per lane; columns by lane-local depth, shared column pitch."""
        config = self.config
        nodes = _layered_nodes(process)
        flows = sequence_flows(process.flow_elements)
        pitch_x = TASK_WIDTH + config.lane_column_gap
        pitch_y = TASK_HEIGHT + config.lane_row_gap

        members: list[list[FlowNode]] = []
        assigned: set[FlowNode] = set()
        for lane in process.lanes:
            lane_nodes = [el for el in lane.flow_node_refs if el in nodes and el not in assigned]
            assigned.update(lane_nodes)
            members.append(lane_nodes)
        unassigned = [el for el in nodes if el not in assigned]
        if unassigned:
            logger.debug(
                f"{len(unassigned)} node(s) of '{process.id}' have no lane, "
                f"laying them out in '{process.lanes[-1].id}'"
            )
            members[-1].extend(unassigned)

        max_x = pool.x + POOL_CONTENT_X
        max_y = pool.y
        cursor_y = pool.y
        for lane, lane_nodes in zip(process.lanes, members):
            lane_shape = Shape(
                id=f"{lane.id}_di",
                element=lane,
                bounds=Bounds(pool.x + POOL_HEADER, cursor_y, pool.width - POOL_HEADER, 0),
                is_horizontal=True,
            )
            lane.di = lane_shape
            plane.plane_elements.append(lane_shape)

            depths = compute_depths(flows, [el.id for el in lane_nodes], _start_ids(lane_nodes))
            content_top = cursor_y + LANE_HEADER
            content_bottom = content_top
            for shape in self._place_columns(lane_nodes, depths, pool.x + POOL_CONTENT_X, content_top, pitch_x, pitch_y):
                plane.plane_elements.append(shape)
                max_x = max(max_x, shape.bounds.right)
                content_bottom = max(content_bottom, shape.bounds.bottom)

            height = max(LANE_MIN_HEIGHT, content_bottom - cursor_y + LANE_BOTTOM_PADDING)
            height = math.ceil(height / config.grid_size) * config.grid_size
            lane_shape.bounds.height = height
            cursor_y += height
            max_y = max(max_y, cursor_y)

        return Extent(max_x, max_y)

    def layout_process_without_lanes(self, process: Process, pool: Bounds, plane: Plane) -> Extent:
        """Whole-process depth layering in one flat band."""
        config = self.config
        nodes = _layered_nodes(process)
        depths = compute_depths(
            sequence_flows(process.flow_elements), [el.id for el in nodes], _start_ids(nodes)
        )
        max_x = pool.x + POOL_CONTENT_X
        max_y = pool.y + POOL_CONTENT_Y
        for shape in self._place_columns(
            nodes,
            depths,
            pool.x + POOL_CONTENT_X,
            pool.y + POOL_CONTENT_Y,
            config.flat_column_width,
            config.flat_row_height,
        ):
            plane.plane_elements.append(shape)
            max_x = max(max_x, shape.bounds.right)
            max_y = max(max_y, shape.bounds.bottom)
        return Extent(max_x, max_y)

    def _place_columns(
        self,
        nodes: list[FlowNode],
        depths: dict[str, int],
        left: float,
        top: float,
        pitch_x: float,
        pitch_y: float,
    ) -> list[Shape]:
        """Column = depth, row = next free row of that column (ties by id)."""
        ordered = sorted(nodes, key=lambda el: (depths[el.id], el.id))
        next_row: dict[int, int] = {}
        shapes = []
        for el in ordered:
            depth = depths[el.id]
            row = next_row.get(depth, 0)
            next_row[depth] = row + 1

            bounds = Bounds(left + depth * pitch_x, top + row * pitch_y, TASK_WIDTH, TASK_HEIGHT)
            self.adjust_element_bounds(el, bounds)
            snap_bounds(bounds, self.config.grid_size)
            shape = Shape(
                id=f"{el.id}_di",
                element=el,
                bounds=bounds,
                is_marker_visible=True if is_branch_gateway(el) else None,
            )
            el.di = shape
            shapes.append(shape)
        return shapes

    @staticmethod
    def adjust_element_bounds(element: FlowNode, bounds: Bounds) -> None:
        """Shrink events and gateways to their size, centered on the task row."""
        if is_event(element):
            bounds.width = EVENT_SIZE
            bounds.height = EVENT_SIZE
            bounds.y += EVENT_Y_SHIFT
        elif is_gateway(element):
            bounds.width = GATEWAY_SIZE
            bounds.height = GATEWAY_SIZE
            bounds.y += GATEWAY_Y_SHIFT

    # ------------------------------------------------------------------
    # Attached and free-standing artifacts
    # ------------------------------------------------------------------

    def _place_boundary_events(self, process: Process, plane: Plane) -> None:
        """Boundary events sit on their host's bottom edge, evenly spread."""
        hosts: dict[int, list[FlowNode]] = {}
        order: list[FlowNode] = []
        for el in flow_nodes(process.flow_elements):
            host = el.attached_to
            if host is None or host.di is None:
                continue
            if id(host) not in hosts:
                hosts[id(host)] = []
                order.append(host)
            hosts[id(host)].append(el)

        for host in order:
            attached = hosts[id(host)]
            hb = host.di.bounds
            for i, event in enumerate(attached):
                width, height = element_size(event)
                bounds = Bounds(
                    hb.x + (i + 1) * hb.width / (len(attached) + 1) - width / 2,
                    hb.bottom - height / 2,
                    width,
                    height,
                )
                snap_bounds(bounds, self.config.grid_size)
                shape = Shape(id=f"{event.id}_di", element=event, bounds=bounds)
                event.di = shape
                plane.plane_elements.append(shape)

    def _place_data(self, process: Process, plane: Plane, pool: Bounds) -> None:
        """Data objects/stores go right of the first activity using them."""
        nodes = flow_nodes(process.flow_elements)
        for data in nodes:
            if not is_data(data):
                continue
            anchor = data_anchor(data, nodes)
            anchor_bounds = anchor.di.bounds if anchor is not None and anchor.di else None
            x, y = anchor_position(anchor_bounds, (pool.x + POOL_CONTENT_X, pool.y + POOL_CONTENT_Y))
            place_artifact(data, x, y, plane, self.config.grid_size, ignore=_CONTAINERS)

    def _place_process_annotations(self, process: Process, plane: Plane, pool: Bounds) -> None:
        associations = _associations(process.artifacts)
        for note in process.artifacts:
            if not is_text_annotation(note) or note.di is not None:
                continue
            targets = annotation_targets(note, associations)
            region = self._lane_region(targets, [process]) or pool
            self._place_in_region(note, region, plane)

    def _place_collaboration_annotations(
        self, collaboration: Collaboration, plane: Plane, below_y: float
    ) -> None:
        """Annotations go to the lane or pool of their targets, else below the pools."""
        associations = _associations(collaboration.artifacts)
        processes = [p.process for p in collaboration.participants if p.process is not None]
        for note in collaboration.artifacts:
            if not is_text_annotation(note) or note.di is not None:
                continue
            targets = annotation_targets(note, associations)
            region = self._lane_region(targets, processes) or self._pool_region(
                targets, collaboration.participants
            )
            if region is None:
                # below_y already includes one pool spacing past the last pool
                region = Bounds(
                    self.config.pool_left,
                    below_y - self.config.pool_spacing + ARTIFACT_GAP,
                    0,
                    0,
                )
            self._place_in_region(note, region, plane)

    @staticmethod
    def _lane_region(targets: list, processes: list[Process]) -> Bounds | None:
        """Bounds of the single lane holding all *targets*, if there is one."""
        lanes = []
        for process in processes:
            for lane in process.lanes:
                if any(t in lane.flow_node_refs for t in targets) and lane not in lanes:
                    lanes.append(lane)
        if len(lanes) == 1 and lanes[0].di is not None:
            return lanes[0].di.bounds
        return None

    @staticmethod
    def _pool_region(targets: list, participants: list[Participant]) -> Bounds | None:
        """Bounds of the pool of the first target that belongs to a pool."""
        for target in targets:
            for participant in participants:
                if participant.di is None:
                    continue
                if target is participant:
                    return participant.di.bounds
                process = participant.process
                if process is not None and target in process.flow_elements:
                    return participant.di.bounds
        return None

    def _place_in_region(self, note: FlowNode, region: Bounds, plane: Plane) -> None:
        place_artifact(
            note,
            region.x + ANNOTATION_INSET,
            region.y + ANNOTATION_INSET,
            plane,
            self.config.grid_size,
            ignore=_CONTAINERS,
        )

    # ------------------------------------------------------------------
    # Routing
    # ------------------------------------------------------------------

    def _route(self, collaboration: Collaboration, plane: Plane) -> None:
        config = self.config
        shapes = shape_index(plane.shapes())
        snapper = self.context.snapper_for(plane.id)
        groups = self.context.side_groups_for(plane.id)
        processes = [p.process for p in collaboration.participants if p.process is not None]

        # Every anchor on the plane is reserved before the first route is drawn.
        routers = [
            SequenceFlowRouter(shapes, sequence_flows(p.flow_elements), snapper, config, groups)
            for p in processes
        ]
        associations = AssociationRouter(shapes, snapper, config, groups)
        for process in processes:
            associations.register_node_data(flow_nodes(process.flow_elements))
            associations.register_associations(_associations(process.artifacts))
        associations.register_associations(_associations(collaboration.artifacts))
        messages = MessageFlowRouter(shapes, collaboration.message_flows, snapper, config, groups)

        for process, router in zip(processes, routers):
            for flow in sequence_flows(process.flow_elements):
                path = router.route(flow)
                if path is not None:
                    flow.di = path.to_edge()
                    plane.plane_elements.append(flow.di)

            for node in flow_nodes(process.flow_elements):
                for path in associations.route_node_data(node):
                    plane.plane_elements.append(path.to_edge())
            self._route_associations(process.artifacts, associations, plane)

        for flow in collaboration.message_flows:
            path = messages.route(flow)
            if path is not None:
                flow.di = path.to_edge()
                plane.plane_elements.append(flow.di)

        self._route_associations(collaboration.artifacts, associations, plane)

    @staticmethod
    def _route_associations(artifacts: list, router: AssociationRouter, plane: Plane) -> None:
        for artifact in _associations(artifacts):
            if plane.find(f"{artifact.id}_di") is not None:
                continue
            path = router.route_association(artifact)
            if path is not None:
                artifact.di = path.to_edge()
                plane.plane_elements.append(artifact.di)

    def sub_processes(self, collaboration: Collaboration) -> list[FlowNode]:
        """Sub-processes of every participant's process, in pool order."""
        return [
            el
            for p in collaboration.participants
            if p.process is not None
            for el in flow_nodes(p.process.flow_elements)
            if is_sub_process(el)
        ]
