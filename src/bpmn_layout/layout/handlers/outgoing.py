"""Traversal along outgoing sequence flows, and their connection records."""

from __future__ import annotations

from bpmn_layout.layout.handlers.base import HandlerContext
from bpmn_layout.parser.model import Edge, FlowNode, SequenceFlow, is_task


def _is_future_incoming(element: FlowNode, visited: set) -> bool:
    """True if a merge node still waits for an unvisited predecessor."""
    if len(element.incoming) > 1:
        return any(flow.source not in visited for flow in element.incoming)
    return False


def _reaches(start: FlowNode, goal: FlowNode) -> bool:
    """True if *goal* is reachable from *start* along outgoing flows."""
    seen: set[int] = set()
    stack = [start]
    while stack:
        node = stack.pop()
        if node is goal:
            return True
        if id(node) in seen:
            continue
        seen.add(id(node))
        stack.extend(flow.target for flow in node.outgoing if flow.target is not None)
    return False


def _check_for_loop(element: FlowNode, visited: set) -> bool:
    """True if an unvisited predecessor of *element* is reachable from it."""
    for flow in element.incoming:
        if flow.source not in visited:
            return _reaches(element, flow.source)
    return False


def _gateways_last(elements: list[FlowNode]) -> list[FlowNode]:
    # The placer pops from the end of its stack: gateways get expanded first.
    others = [el for el in elements if el.type != "exclusiveGateway"]
    gateways = [el for el in elements if el.type == "exclusiveGateway"]
    return others + gateways


def route_flows(ctx: HandlerContext, flows: list[SequenceFlow]) -> list[Edge]:
    """Turn routed sequence flows into edge records, skipping unroutable ones."""
    edges = []
    if ctx.router is None:
        return edges
    for flow in flows:
        path = ctx.router.route(flow)
        if path is None:
            continue
        edge = path.to_edge()
        flow.di = edge
        edges.append(edge)
    return edges


class OutgoingHandler:
    def add_to_grid(self, ctx: HandlerContext) -> list[FlowNode]:
        element, grid, visited, stack = ctx.element, ctx.grid, ctx.visited, ctx.stack
        next_elements: list[FlowNode] = []

        outgoing = [flow.target for flow in element.outgoing if flow.target is not None]

        if len(outgoing) > 1 and all(is_task(el) for el in outgoing):
            grid.adjust_grid_position(element)

        previous = None
        for next_element in outgoing:
            if next_element in visited:
                continue

            # Merge nodes wait until their last predecessor is placed, unless
            # the missing predecessor is only reachable through a loop.
            if (
                (previous is not None or stack)
                and _is_future_incoming(next_element, visited)
                and not _check_for_loop(next_element, visited)
            ):
                continue

            if previous is None:
                grid.add_after(element, next_element)
            elif element.type == "exclusiveGateway" and next_element.type == "exclusiveGateway":
                grid.add_after(previous, next_element)
            else:
                grid.add_below(previous, next_element)

            if next_element is not element:
                previous = next_element

            next_elements.insert(0, next_element)
            visited.add(next_element)

        return _gateways_last(next_elements)

    def create_connection_di(self, ctx: HandlerContext) -> list[Edge]:
        return route_flows(ctx, ctx.element.outgoing)
