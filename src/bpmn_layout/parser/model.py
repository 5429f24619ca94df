"""Data model for process-graph documents and their diagram records."""

from __future__ import annotations

from dataclasses import dataclass, field

# ---------------------------------------------------------------------------
# Type tags
# ---------------------------------------------------------------------------
EVENT_TYPES = frozenset(
    {
        "startEvent",
        "endEvent",
        "intermediateCatchEvent",
        "intermediateThrowEvent",
        "boundaryEvent",
    }
)

GATEWAY_TYPES = frozenset(
    {
        "exclusiveGateway",
        "parallelGateway",
        "inclusiveGateway",
        "eventBasedGateway",
        "complexGateway",
    }
)

BRANCH_GATEWAY_TYPES = frozenset({"exclusiveGateway", "parallelGateway"})

TASK_TYPES = frozenset(
    {
        "task",
        "userTask",
        "serviceTask",
        "scriptTask",
        "sendTask",
        "receiveTask",
        "manualTask",
        "businessRuleTask",
    }
)

DATA_TYPES = frozenset({"dataObjectReference", "dataObject", "dataStoreReference"})


@dataclass
class Bounds:
    """An axis-aligned rectangle in diagram coordinates."""

    x: float
    y: float
    width: float
    height: float

    @property
    def right(self) -> float:
        return self.x + self.width

    @property
    def bottom(self) -> float:
        return self.y + self.height

    @property
    def center_x(self) -> float:
        return self.x + self.width / 2

    @property
    def center_y(self) -> float:
        return self.y + self.height / 2

    @property
    def center(self) -> tuple[float, float]:
        return (self.center_x, self.center_y)

    def overlaps(self, other: Bounds) -> bool:
        """True when the two rectangles share a positive area."""
        return (
            self.x < other.right
            and other.x < self.right
            and self.y < other.bottom
            and other.y < self.bottom
        )


# ---------------------------------------------------------------------------
# Semantic elements
# ---------------------------------------------------------------------------


@dataclass(eq=False)
class FlowNode:
    """A node of the flow graph (activity, event, gateway, data, annotation).

    Sub-processes carry their own ``flow_elements`` and ``lanes`` and get a
    separate drawing surface.
    """

    id: str
    type: str
    name: str = ""
    incoming: list[SequenceFlow] = field(default_factory=list)
    outgoing: list[SequenceFlow] = field(default_factory=list)
    attached_to: FlowNode | None = None
    attachers: list[FlowNode] = field(default_factory=list)
    flow_elements: list[FlowElement] = field(default_factory=list)
    lanes: list[Lane] = field(default_factory=list)
    artifacts: list[FlowNode | Association] = field(default_factory=list)
    data_input_associations: list[DataAssociation] = field(default_factory=list)
    data_output_associations: list[DataAssociation] = field(default_factory=list)
    # Populated by layout
    di: Shape | None = None

    def __repr__(self) -> str:
        return f"FlowNode({self.type}:{self.id})"


@dataclass(eq=False)
class SequenceFlow:
    """A directed control-flow edge between two flow nodes."""

    id: str
    source: FlowNode
    target: FlowNode
    type: str = "sequenceFlow"
    di: Edge | None = None

    def __repr__(self) -> str:
        return f"SequenceFlow({self.id}: {self.source.id} -> {self.target.id})"


FlowElement = FlowNode | SequenceFlow


@dataclass(eq=False)
class DataAssociation:
    """Data input (data -> activity) or output (activity -> data) association."""

    id: str
    sources: list[FlowNode] = field(default_factory=list)
    targets: list[FlowNode] = field(default_factory=list)
    type: str = "dataAssociation"


@dataclass(eq=False)
class Association:
    """An undirected link, usually from a text annotation to an element."""

    id: str
    source: FlowNode | None
    target: FlowNode | None
    type: str = "association"
    di: Edge | None = None


@dataclass(eq=False)
class Lane:
    """A horizontal band of a pool holding an explicit member list."""

    id: str
    name: str = ""
    flow_node_refs: list[FlowNode] = field(default_factory=list)
    type: str = "lane"
    di: Shape | None = None


@dataclass(eq=False)
class Process:
    """A process: the flow graph plus its lanes and artifacts."""

    id: str
    flow_elements: list[FlowElement] = field(default_factory=list)
    lanes: list[Lane] = field(default_factory=list)
    artifacts: list[FlowNode | Association] = field(default_factory=list)
    type: str = "process"


@dataclass(eq=False)
class Participant:
    """A pool: one party of a collaboration, optionally owning a process."""

    id: str
    name: str = ""
    process: Process | None = None
    type: str = "participant"
    di: Shape | None = None


@dataclass(eq=False)
class MessageFlow:
    """A cross-pool message between participants and/or flow nodes."""

    id: str
    source: Participant | FlowNode
    target: Participant | FlowNode
    type: str = "messageFlow"
    di: Edge | None = None


@dataclass(eq=False)
class Collaboration:
    """Multi-participant root: pools, message flows and shared artifacts."""

    id: str
    participants: list[Participant] = field(default_factory=list)
    message_flows: list[MessageFlow] = field(default_factory=list)
    artifacts: list[FlowNode | Association] = field(default_factory=list)
    type: str = "collaboration"


# ---------------------------------------------------------------------------
# Diagram records (populated by layout)
# ---------------------------------------------------------------------------


@dataclass(eq=False)
class Shape:
    """Visual bounds of one element on one plane."""

    id: str
    element: object
    bounds: Bounds
    is_horizontal: bool | None = None
    is_marker_visible: bool | None = None


@dataclass(eq=False)
class Edge:
    """Visual polyline of one connection on one plane."""

    id: str
    element: object
    waypoints: list[tuple[float, float]] = field(default_factory=list)


@dataclass(eq=False)
class Plane:
    """A drawing surface, keyed by the element that owns it."""

    id: str
    element: object
    plane_elements: list[Shape | Edge] = field(default_factory=list)

    def shapes(self) -> list[Shape]:
        return [pe for pe in self.plane_elements if isinstance(pe, Shape)]

    def edges(self) -> list[Edge]:
        return [pe for pe in self.plane_elements if isinstance(pe, Edge)]

    def find(self, element_id: str) -> Shape | Edge | None:
        """Return the record with the given id, if any."""
        for pe in self.plane_elements:
            if pe.id == element_id:
                return pe
        return None

    def shape_for(self, element: object) -> Shape | None:
        """Return the shape drawn for *element* on this plane."""
        for pe in self.plane_elements:
            if isinstance(pe, Shape) and pe.element is element:
                return pe
        return None


@dataclass(eq=False)
class Diagram:
    """A diagram wrapping exactly one plane."""

    id: str
    plane: Plane


@dataclass(eq=False)
class Definitions:
    """Document root: processes / collaboration plus the emitted diagrams."""

    id: str = "definitions"
    root_elements: list[Process | Collaboration] = field(default_factory=list)
    diagrams: list[Diagram] = field(default_factory=list)

    def get_process(self) -> Process | None:
        return next((el for el in self.root_elements if isinstance(el, Process)), None)

    def get_collaboration(self) -> Collaboration | None:
        return next(
            (el for el in self.root_elements if isinstance(el, Collaboration)), None
        )


# ---------------------------------------------------------------------------
# Type predicates
# ---------------------------------------------------------------------------


def is_event(element: object) -> bool:
    return getattr(element, "type", None) in EVENT_TYPES


def is_boundary_event(element: object) -> bool:
    return getattr(element, "type", None) == "boundaryEvent"


def is_gateway(element: object) -> bool:
    return getattr(element, "type", None) in GATEWAY_TYPES


def is_branch_gateway(element: object) -> bool:
    """Exclusive/parallel gateways: drawn as diamonds with a marker."""
    return getattr(element, "type", None) in BRANCH_GATEWAY_TYPES


def is_task(element: object) -> bool:
    return getattr(element, "type", None) in TASK_TYPES


def is_sub_process(element: object) -> bool:
    return getattr(element, "type", None) in ("subProcess", "transaction")


def is_data(element: object) -> bool:
    return getattr(element, "type", None) in DATA_TYPES


def is_text_annotation(element: object) -> bool:
    return getattr(element, "type", None) == "textAnnotation"


def is_participant(element: object) -> bool:
    return isinstance(element, Participant)


def flow_nodes(elements: list[FlowElement]) -> list[FlowNode]:
    """Return the non-connection elements of a scope, in document order."""
    return [el for el in elements if isinstance(el, FlowNode)]


def sequence_flows(elements: list[FlowElement]) -> list[SequenceFlow]:
    return [el for el in elements if isinstance(el, SequenceFlow)]
