"""Build a document tree from a plain dict and dump laid-out diagrams.

The dict form mirrors the structure of a process-model file closely enough
for tests and the command line, without tying the layout core to any
particular text format::

    {
        "id": "defs",
        "processes": [{
            "id": "p1",
            "elements": [{"id": "s", "type": "startEvent"}, ...],
            "flows": [{"id": "f1", "source": "s", "target": "t"}],
            "lanes": [{"id": "l1", "nodes": ["s", "t"]}],
            "subProcesses": {"sp": {"elements": [...], "flows": [...]}},
        }],
        "collaboration": {
            "id": "c",
            "participants": [{"id": "pa", "process": "p1"}],
            "messageFlows": [{"id": "m1", "source": "pa", "target": "s"}],
        },
    }
"""

from __future__ import annotations

from typing import Any

from bpmn_layout.errors import DocumentError
from bpmn_layout.parser.model import (
    Association,
    Collaboration,
    DataAssociation,
    Definitions,
    FlowNode,
    Lane,
    MessageFlow,
    Participant,
    Process,
    SequenceFlow,
    Shape,
    is_sub_process,
)


class _Loader:
    """Two-pass loader: create every node first, then resolve references."""

    def __init__(self) -> None:
        self.index: dict[str, Any] = {}

    def register(self, obj: Any) -> None:
        if not obj.id:
            raise DocumentError(f"Element without id: {obj!r}")
        if obj.id in self.index:
            raise DocumentError(f"Duplicate id '{obj.id}'")
        self.index[obj.id] = obj

    def resolve(self, ref: str | None, context: str) -> Any:
        if ref is None:
            return None
        try:
            return self.index[ref]
        except KeyError:
            raise DocumentError(f"{context} references unknown element '{ref}'") from None

    def resolve_node(self, ref: str, context: str) -> FlowNode:
        obj = self.resolve(ref, context)
        if not isinstance(obj, FlowNode):
            raise DocumentError(f"{context}: '{ref}' is not a flow node")
        return obj

    # -- pass 1 --------------------------------------------------------------

    def create_nodes(self, body: dict, container: Process | FlowNode) -> None:
        for entry in body.get("elements", []):
            if "id" not in entry or "type" not in entry:
                raise DocumentError(f"Element entry needs 'id' and 'type': {entry!r}")
            node = FlowNode(id=entry["id"], type=entry["type"], name=entry.get("name", ""))
            self.register(node)
            container.flow_elements.append(node)
            if is_sub_process(node):
                sub_body = body.get("subProcesses", {}).get(node.id, {})
                self.create_nodes(sub_body, node)

        for entry in body.get("annotations", []):
            note = FlowNode(id=entry["id"], type="textAnnotation", name=entry.get("text", ""))
            self.register(note)
            container.artifacts.append(note)

    # -- pass 2 --------------------------------------------------------------

    def wire(self, body: dict, container: Process | FlowNode) -> None:
        for entry in body.get("elements", []):
            node = self.index[entry["id"]]
            if entry.get("attachedTo"):
                node.attached_to = self.resolve_node(
                    entry["attachedTo"], f"Boundary event '{node.id}'"
                )
            if is_sub_process(node):
                self.wire(body.get("subProcesses", {}).get(node.id, {}), node)

        for entry in body.get("flows", []):
            ctx = f"Sequence flow '{entry.get('id')}'"
            flow = SequenceFlow(
                id=entry["id"],
                source=self.resolve_node(entry["source"], ctx),
                target=self.resolve_node(entry["target"], ctx),
            )
            self.register(flow)
            flow.source.outgoing.append(flow)
            flow.target.incoming.append(flow)
            container.flow_elements.append(flow)

        lanes: dict[str, Lane] = {}
        for entry in body.get("lanes", []):
            lane = Lane(id=entry["id"], name=entry.get("name", ""))
            self.register(lane)
            for ref in entry.get("nodes", []):
                lane.flow_node_refs.append(self.resolve_node(ref, f"Lane '{lane.id}'"))
            lanes[lane.id] = lane
            container.lanes.append(lane)
        for entry in body.get("elements", []):
            if entry.get("lane"):
                lane = lanes.get(entry["lane"])
                if lane is None:
                    raise DocumentError(
                        f"Element '{entry['id']}' references unknown lane '{entry['lane']}'"
                    )
                node = self.index[entry["id"]]
                if node not in lane.flow_node_refs:
                    lane.flow_node_refs.append(node)

        for entry in body.get("dataAssociations", []):
            self._wire_data_association(entry)

        for entry in body.get("associations", []):
            container.artifacts.append(self.association(entry))

    def _wire_data_association(self, entry: dict) -> None:
        ctx = f"Data association '{entry.get('id')}'"
        owner = self.resolve_node(entry["owner"], ctx)
        kind = entry.get("kind", "input")
        if kind == "input":
            assoc = DataAssociation(
                id=entry["id"],
                sources=[self.resolve_node(r, ctx) for r in entry.get("sources", [])],
                targets=[owner],
            )
            owner.data_input_associations.append(assoc)
        elif kind == "output":
            assoc = DataAssociation(
                id=entry["id"],
                sources=[owner],
                targets=[self.resolve_node(r, ctx) for r in entry.get("targets", [])],
            )
            owner.data_output_associations.append(assoc)
        else:
            raise DocumentError(f"{ctx}: unknown kind '{kind}'")
        self.register(assoc)

    def association(self, entry: dict) -> Association:
        ctx = f"Association '{entry.get('id')}'"
        assoc = Association(
            id=entry["id"],
            source=self.resolve(entry.get("source"), ctx),
            target=self.resolve(entry.get("target"), ctx),
        )
        self.register(assoc)
        return assoc


def load_document(data: dict) -> Definitions:
    """Build a :class:`Definitions` tree from its plain-dict form."""
    if not isinstance(data, dict):
        raise DocumentError("Document must be a mapping")

    loader = _Loader()
    definitions = Definitions(id=data.get("id", "definitions"))

    bodies: list[tuple[dict, Process]] = []
    for body in data.get("processes", []):
        process = Process(id=body["id"])
        loader.register(process)
        loader.create_nodes(body, process)
        bodies.append((body, process))
        definitions.root_elements.append(process)

    collab_body = data.get("collaboration")
    if collab_body:
        for entry in collab_body.get("annotations", []):
            note = FlowNode(id=entry["id"], type="textAnnotation", name=entry.get("text", ""))
            loader.register(note)

    for body, process in bodies:
        loader.wire(body, process)

    if collab_body:
        definitions.root_elements.insert(0, _load_collaboration(collab_body, loader))

    return definitions


def _load_collaboration(body: dict, loader: _Loader) -> Collaboration:
    collaboration = Collaboration(id=body.get("id", "collaboration"))
    loader.register(collaboration)

    for entry in body.get("participants", []):
        process = loader.resolve(entry.get("process"), f"Participant '{entry.get('id')}'")
        if process is not None and not isinstance(process, Process):
            raise DocumentError(f"Participant '{entry['id']}': '{process.id}' is not a process")
        participant = Participant(id=entry["id"], name=entry.get("name", ""), process=process)
        loader.register(participant)
        collaboration.participants.append(participant)

    for entry in body.get("messageFlows", []):
        ctx = f"Message flow '{entry.get('id')}'"
        source = loader.resolve(entry["source"], ctx)
        target = loader.resolve(entry["target"], ctx)
        for end in (source, target):
            if not isinstance(end, (Participant, FlowNode)):
                raise DocumentError(f"{ctx}: '{end.id}' is neither a participant nor a node")
        flow = MessageFlow(id=entry["id"], source=source, target=target)
        loader.register(flow)
        collaboration.message_flows.append(flow)

    for entry in body.get("annotations", []):
        collaboration.artifacts.append(loader.index[entry["id"]])
    for entry in body.get("associations", []):
        collaboration.artifacts.append(loader.association(entry))

    return collaboration


def _element_id(element: object) -> str | None:
    return getattr(element, "id", None)


def dump_layout(definitions: Definitions) -> dict:
    """Serialize the diagrams of a laid-out document to plain data."""
    diagrams = []
    for diagram in definitions.diagrams:
        plane = diagram.plane
        shapes = []
        edges = []
        for pe in plane.plane_elements:
            if isinstance(pe, Shape):
                b = pe.bounds
                entry = {
                    "id": pe.id,
                    "element": _element_id(pe.element),
                    "x": b.x,
                    "y": b.y,
                    "width": b.width,
                    "height": b.height,
                }
                if pe.is_horizontal is not None:
                    entry["isHorizontal"] = pe.is_horizontal
                if pe.is_marker_visible is not None:
                    entry["isMarkerVisible"] = pe.is_marker_visible
                shapes.append(entry)
            else:
                edges.append(
                    {
                        "id": pe.id,
                        "element": _element_id(pe.element),
                        "waypoints": [[x, y] for x, y in pe.waypoints],
                    }
                )
        diagrams.append(
            {
                "id": diagram.id,
                "plane": plane.id,
                "element": _element_id(plane.element),
                "shapes": shapes,
                "edges": edges,
            }
        )
    return {"id": definitions.id, "diagrams": diagrams}
