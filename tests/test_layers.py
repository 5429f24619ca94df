"""Tests for breadth-first depth layering."""

from conftest import chain, flow, node, process_doc

from bpmn_layout.layout.layers import compute_depths
from bpmn_layout.parser import load_document
from bpmn_layout.parser.model import flow_nodes, sequence_flows


def _depths(elements, flows, node_ids=None, start_ids=()):
    process = load_document(process_doc(elements, flows)).get_process()
    ids = node_ids or [el.id for el in flow_nodes(process.flow_elements)]
    return compute_depths(sequence_flows(process.flow_elements), ids, start_ids)


def test_linear_chain():
    depths = _depths(
        [node("s", "startEvent"), node("a"), node("b")],
        chain("s", "a", "b"),
    )
    assert depths == {"s": 0, "a": 1, "b": 2}


def test_shortest_path_wins():
    """A node reachable by a short and a long path takes the short depth."""
    depths = _depths(
        [node("s", "startEvent"), node("a"), node("b"), node("c")],
        [flow("f1", "s", "a"), flow("f2", "a", "b"), flow("f3", "b", "c"), flow("f4", "s", "c")],
    )
    assert depths["c"] == 1


def test_back_edge_does_not_push_right():
    depths = _depths(
        [node("s", "startEvent"), node("a"), node("b")],
        [flow("f1", "s", "a"), flow("f2", "a", "b"), flow("f3", "b", "a")],
    )
    assert depths == {"s": 0, "a": 1, "b": 2}


def test_unreached_cycle_goes_past_deepest():
    depths = _depths(
        [node("s", "startEvent"), node("a"), node("x"), node("y")],
        [flow("f1", "s", "a"), flow("f2", "x", "y"), flow("f3", "y", "x")],
    )
    assert depths["x"] == 2
    assert depths["y"] == 2


def test_subgraph_ignores_outside_edges():
    """Layering a subset treats nodes whose predecessor is outside as roots."""
    depths = _depths(
        [node("s", "startEvent"), node("a"), node("b")],
        chain("s", "a", "b"),
        node_ids=["a", "b"],
    )
    assert depths == {"a": 0, "b": 1}


def test_boundary_flows_leave_the_host():
    depths = _depths(
        [
            node("s", "startEvent"),
            node("a"),
            node("timer", "boundaryEvent", attachedTo="a"),
            node("late"),
        ],
        [flow("f1", "s", "a"), flow("f2", "timer", "late")],
        node_ids=["s", "a", "late"],
    )
    assert depths["late"] == 2


def test_self_loop_keeps_root():
    depths = _depths([node("a"), node("b")], [flow("f1", "a", "a"), flow("f2", "a", "b")])
    assert depths == {"a": 0, "b": 1}


def test_empty():
    assert compute_depths([], []) == {}
