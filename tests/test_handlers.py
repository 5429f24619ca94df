"""Tests for the handler registry and the stock handlers."""

import pytest
from conftest import chain, flow, node, process_doc

from bpmn_layout.layout.grid import Grid
from bpmn_layout.layout.handlers import (
    ADD_TO_GRID,
    CREATE_ELEMENT_DI,
    AttachersHandler,
    ElementHandler,
    HandlerContext,
    HandlerRegistry,
    IncomingHandler,
    OutgoingHandler,
    default_registry,
    element_size,
)
from bpmn_layout.layout.placer import fold_attachers
from bpmn_layout.parser import load_document
from bpmn_layout.parser.model import Bounds, Shape, flow_nodes


def _nodes(elements, flows):
    process = load_document(process_doc(elements, flows)).get_process()
    nodes = flow_nodes(process.flow_elements)
    fold_attachers(nodes)
    return {el.id: el for el in nodes}


class _Answer:
    def __init__(self, *values):
        self.values = list(values)

    def add_to_grid(self, ctx):
        return list(self.values)


class _Silent:
    def add_to_grid(self, ctx):
        return None


class TestRegistry:
    def test_flattens_all_answers(self):
        registry = HandlerRegistry([_Answer(1, 2), _Silent(), _Answer(3)])
        assert registry.invoke(ADD_TO_GRID, HandlerContext(element=None)) == [1, 2, 3]

    def test_no_handler_answers(self):
        registry = HandlerRegistry([ElementHandler()])
        assert registry.invoke(ADD_TO_GRID, HandlerContext(element=None)) == []

    def test_unknown_capability(self):
        with pytest.raises(ValueError):
            HandlerRegistry().invoke("render", HandlerContext(element=None))

    def test_supporting_filters_by_capability(self):
        registry = default_registry()
        supporting = registry.supporting(CREATE_ELEMENT_DI)
        assert [type(h) for h in supporting] == [ElementHandler, AttachersHandler]

    def test_register_appends(self):
        registry = HandlerRegistry()
        registry.register(_Answer("x"))
        assert registry.invoke(ADD_TO_GRID, HandlerContext(element=None)) == ["x"]


class TestOutgoingHandler:
    def _expand(self, nodes, current, placed=(), stack=None):
        grid = Grid()
        for el in placed:
            grid.add(el)
        visited = set(placed)
        ctx = HandlerContext(element=current, grid=grid, visited=visited, stack=stack or [])
        return grid, OutgoingHandler().add_to_grid(ctx)

    def test_first_successor_goes_right(self):
        nodes = _nodes([node("a"), node("b")], chain("a", "b"))
        grid, result = self._expand(nodes, nodes["a"], placed=[nodes["a"]])
        assert result == [nodes["b"]]
        assert grid.find(nodes["b"]) == (0, 1)

    def test_siblings_stack_below(self):
        nodes = _nodes(
            [node("g", "parallelGateway"), node("a"), node("b"), node("c")],
            [flow("f1", "g", "a"), flow("f2", "g", "b"), flow("f3", "g", "c")],
        )
        grid, result = self._expand(nodes, nodes["g"], placed=[nodes["g"]])
        assert grid.find(nodes["a"]) == (0, 1)
        assert grid.find(nodes["b"]) == (1, 1)
        assert grid.find(nodes["c"]) == (2, 1)
        assert result == [nodes["c"], nodes["b"], nodes["a"]]

    def test_exclusive_chain_stays_on_row(self):
        nodes = _nodes(
            [node("g1", "exclusiveGateway"), node("a"), node("g2", "exclusiveGateway")],
            [flow("f1", "g1", "a"), flow("f2", "g1", "g2")],
        )
        grid, result = self._expand(nodes, nodes["g1"], placed=[nodes["g1"]])
        assert grid.find(nodes["g2"]) == (0, 2)
        # Gateways go last so the placer expands them first.
        assert result[-1] is nodes["g2"]

    def test_merge_waits_for_predecessors(self):
        nodes = _nodes(
            [node("g", "parallelGateway"), node("a"), node("b"), node("m")],
            [
                flow("f1", "g", "a"),
                flow("f2", "g", "m"),
                flow("f3", "b", "m"),
            ],
        )
        grid, result = self._expand(nodes, nodes["g"], placed=[nodes["g"]])
        assert nodes["m"] not in result
        assert grid.find(nodes["m"]) == (-1, -1)

    def test_loop_does_not_block_merge(self):
        nodes = _nodes(
            [node("s", "startEvent"), node("a"), node("g", "exclusiveGateway")],
            [flow("f1", "s", "a"), flow("f2", "a", "g"), flow("f3", "g", "a")],
        )
        grid, result = self._expand(
            nodes, nodes["s"], placed=[nodes["s"]], stack=[object()]
        )
        assert result == [nodes["a"]]

    def test_all_task_fanout_moves_to_last_column(self):
        nodes = _nodes(
            [node("x"), node("y"), node("a"), node("b")],
            [flow("f1", "x", "a"), flow("f2", "x", "b")],
        )
        grid = Grid()
        grid.add(nodes["x"], (0, 0))
        grid.add(nodes["y"], (1, 2))
        ctx = HandlerContext(element=nodes["x"], grid=grid, visited={nodes["x"], nodes["y"]}, stack=[])
        OutgoingHandler().add_to_grid(ctx)
        assert grid.find(nodes["x"]) == (0, 2)
        assert grid.find(nodes["a"]) == (0, 3)


class TestIncomingHandler:
    def test_merge_aligned_to_first_row(self):
        nodes = _nodes(
            [node("a"), node("b"), node("m")],
            [flow("f1", "a", "m"), flow("f2", "b", "m")],
        )
        grid = Grid()
        grid.add(nodes["a"], (0, 0))
        grid.add(nodes["b"], (1, 1))
        grid.add(nodes["m"], (2, 0))
        result = IncomingHandler().add_to_grid(HandlerContext(element=nodes["m"], grid=grid))
        assert result == []
        assert grid.find(nodes["m"]) == (0, 2)

    def test_single_incoming_untouched(self):
        nodes = _nodes([node("a"), node("b")], chain("a", "b"))
        grid = Grid()
        grid.add(nodes["a"], (0, 0))
        grid.add(nodes["b"], (3, 0))
        IncomingHandler().add_to_grid(HandlerContext(element=nodes["b"], grid=grid))
        assert grid.find(nodes["b"]) == (3, 0)


class TestAttachersHandler:
    @pytest.fixture
    def hosted(self):
        return _nodes(
            [
                node("host"),
                node("next"),
                node("err", "boundaryEvent", attachedTo="host"),
                node("handle"),
            ],
            [flow("f1", "host", "next"), flow("f2", "err", "handle")],
        )

    def test_target_goes_below_right(self, hosted):
        grid = Grid()
        grid.add(hosted["host"])
        ctx = HandlerContext(element=hosted["host"], grid=grid, visited={hosted["host"]})
        result = AttachersHandler().add_to_grid(ctx)
        assert result == [hosted["handle"]]
        assert grid.find(hosted["handle"]) == (1, 1)

    def test_opens_column_when_right_is_taken(self, hosted):
        grid = Grid()
        grid.add(hosted["host"])
        grid.add_after(hosted["host"], hosted["next"])
        ctx = HandlerContext(element=hosted["host"], grid=grid, visited={hosted["host"], hosted["next"]})
        AttachersHandler().add_to_grid(ctx)
        assert grid.find(hosted["next"]) == (0, 2)
        assert grid.find(hosted["handle"]) == (1, 1)

    def test_opens_row_when_below_is_taken(self, hosted):
        grid = Grid()
        grid.add(hosted["host"], (0, 0))
        grid.add(hosted["next"], (1, 1))
        ctx = HandlerContext(element=hosted["host"], grid=grid, visited={hosted["host"], hosted["next"]})
        AttachersHandler().add_to_grid(ctx)
        assert grid.find(hosted["handle"]) == (1, 1)
        assert grid.find(hosted["next"]) == (2, 1)

    def test_shapes_on_host_bottom_edge(self, hosted):
        host = hosted["host"]
        host.di = Shape(id="host_di", element=host, bounds=Bounds(100, 100, 100, 80))
        shapes = AttachersHandler().create_element_di(HandlerContext(element=host))
        assert len(shapes) == 1
        b = shapes[0].bounds
        assert b.center_x == 150
        assert b.center_y == 180
        assert hosted["err"].di is shapes[0]

    def test_no_shapes_without_host_shape(self, hosted):
        assert AttachersHandler().create_element_di(HandlerContext(element=hosted["host"])) == []


class TestElementHandler:
    def test_shape_centered_in_cell(self):
        nodes = _nodes([node("t")], [])
        ctx = HandlerContext(element=nodes["t"], row=1, col=2)
        (shape,) = ElementHandler().create_element_di(ctx)
        assert shape.id == "t_di"
        assert shape.bounds.center == (2 * 150 + 75, 140 + 70)
        assert nodes["t"].di is shape

    def test_gateway_marker(self):
        nodes = _nodes([node("g", "exclusiveGateway"), node("i", "inclusiveGateway")], [])
        (xor,) = ElementHandler().create_element_di(HandlerContext(element=nodes["g"], row=0, col=0))
        (inc,) = ElementHandler().create_element_di(HandlerContext(element=nodes["i"], row=0, col=1))
        assert xor.is_marker_visible is True
        assert inc.is_marker_visible is None

    @pytest.mark.parametrize(
        "node_type,size",
        [
            ("startEvent", (36, 36)),
            ("exclusiveGateway", (50, 50)),
            ("userTask", (100, 80)),
            ("subProcess", (100, 80)),
            ("dataStoreReference", (50, 50)),
            ("dataObjectReference", (36, 50)),
        ],
    )
    def test_element_size(self, node_type, size):
        nodes = _nodes([node("n", node_type)], [])
        assert element_size(nodes["n"]) == size
