"""Merge-point alignment for nodes with several incoming flows."""

from __future__ import annotations

from bpmn_layout.layout.handlers.base import HandlerContext


class IncomingHandler:
    def add_to_grid(self, ctx: HandlerContext) -> list:
        element, grid = ctx.element, ctx.grid
        incoming = [flow.source for flow in element.incoming if flow.source is not None]

        if len(incoming) > 1:
            grid.adjust_column_for_multiple_incoming(incoming, element)
            grid.adjust_row_for_multiple_incoming(incoming, element)

        return []
