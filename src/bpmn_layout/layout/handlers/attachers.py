"""Boundary events: placement of their targets and shapes on the host border."""

from __future__ import annotations

from bpmn_layout.layout.handlers.base import HandlerContext
from bpmn_layout.layout.handlers.element import element_size
from bpmn_layout.layout.handlers.outgoing import route_flows
from bpmn_layout.parser.model import Bounds, Edge, FlowNode, Shape


def _insert_into_grid(grid, host: FlowNode, new_element: FlowNode) -> None:
    """Put *new_element* one row below and one column right of *host*."""
    row, col = grid.find(host)

    # Open a row below the host unless both cells we need are free.
    if grid.get(row + 1, col) is not None or grid.get(row + 1, col + 1) is not None:
        grid.create_row(row)

    # Open a column after the host if its right neighbour is taken.
    if grid.get(row, col + 1) is not None:
        grid.add_after(host, None)

    grid.add(new_element, (row + 1, col + 1))


class AttachersHandler:
    def add_to_grid(self, ctx: HandlerContext) -> list[FlowNode]:
        element, grid, visited = ctx.element, ctx.grid, ctx.visited
        next_elements: list[FlowNode] = []

        for attacher in element.attachers:
            targets = [flow.target for flow in attacher.outgoing if flow.target is not None]
            for target in reversed(targets):
                if target in visited:
                    continue
                _insert_into_grid(grid, element, target)
                next_elements.append(target)
                visited.add(target)

        return next_elements

    def create_element_di(self, ctx: HandlerContext) -> list[Shape]:
        host = ctx.element
        if not host.attachers or host.di is None:
            return []

        hb = host.di.bounds
        total = len(host.attachers)
        shapes = []
        for i, attacher in enumerate(host.attachers):
            width, height = element_size(attacher)
            bounds = Bounds(
                x=hb.x + (i + 1) * hb.width / (total + 1) - width / 2,
                y=hb.bottom - height / 2,
                width=width,
                height=height,
            )
            shape = Shape(id=f"{attacher.id}_di", element=attacher, bounds=bounds)
            attacher.di = shape
            shapes.append(shape)
        return shapes

    def create_connection_di(self, ctx: HandlerContext) -> list[Edge]:
        edges = []
        for attacher in ctx.element.attachers:
            edges.extend(route_flows(ctx, attacher.outgoing))
        return edges
