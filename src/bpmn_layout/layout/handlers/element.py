"""Default shape emission: one shape per node, centered in its grid cell."""

from __future__ import annotations

from bpmn_layout.layout.constants import (
    ANNOTATION_HEIGHT,
    ANNOTATION_WIDTH,
    DATA_OBJECT_HEIGHT,
    DATA_OBJECT_WIDTH,
    DATA_STORE_SIZE,
    EVENT_SIZE,
    GATEWAY_SIZE,
    TASK_HEIGHT,
    TASK_WIDTH,
)
from bpmn_layout.layout.handlers.base import HandlerContext
from bpmn_layout.parser.model import (
    Bounds,
    Shape,
    is_branch_gateway,
    is_event,
    is_gateway,
    is_text_annotation,
)


def element_size(element) -> tuple[float, float]:
    """Default ``(width, height)`` for a node type."""
    if is_event(element):
        return (EVENT_SIZE, EVENT_SIZE)
    if is_gateway(element):
        return (GATEWAY_SIZE, GATEWAY_SIZE)
    if element.type == "dataStoreReference":
        return (DATA_STORE_SIZE, DATA_STORE_SIZE)
    if element.type in ("dataObjectReference", "dataObject"):
        return (DATA_OBJECT_WIDTH, DATA_OBJECT_HEIGHT)
    if is_text_annotation(element):
        return (ANNOTATION_WIDTH, ANNOTATION_HEIGHT)
    return (TASK_WIDTH, TASK_HEIGHT)


def cell_bounds(element, row: int, col: int, cell_width: float, cell_height: float) -> Bounds:
    """Bounds of *element* centered in grid cell (row, col)."""
    width, height = element_size(element)
    return Bounds(
        x=col * cell_width + (cell_width - width) / 2,
        y=row * cell_height + (cell_height - height) / 2,
        width=width,
        height=height,
    )


class ElementHandler:
    def create_element_di(self, ctx: HandlerContext) -> list[Shape]:
        element = ctx.element
        bounds = cell_bounds(
            element, ctx.row, ctx.col, ctx.config.cell_width, ctx.config.cell_height
        )
        shape = Shape(
            id=f"{element.id}_di",
            element=element,
            bounds=bounds,
            is_marker_visible=True if is_branch_gateway(element) else None,
        )
        element.di = shape
        return [shape]
