"""Per-node-type layout strategies and the registry that dispatches to them."""

from bpmn_layout.layout.handlers.attachers import AttachersHandler
from bpmn_layout.layout.handlers.base import (
    ADD_TO_GRID,
    CREATE_CONNECTION_DI,
    CREATE_ELEMENT_DI,
    HandlerContext,
    HandlerRegistry,
)
from bpmn_layout.layout.handlers.element import ElementHandler, element_size
from bpmn_layout.layout.handlers.incoming import IncomingHandler
from bpmn_layout.layout.handlers.outgoing import OutgoingHandler

__all__ = [
    "ADD_TO_GRID",
    "CREATE_CONNECTION_DI",
    "CREATE_ELEMENT_DI",
    "AttachersHandler",
    "ElementHandler",
    "HandlerContext",
    "HandlerRegistry",
    "IncomingHandler",
    "OutgoingHandler",
    "default_registry",
    "element_size",
]


def default_registry() -> HandlerRegistry:
    """The stock handlers, in dispatch order."""
    return HandlerRegistry(
        [ElementHandler(), OutgoingHandler(), IncomingHandler(), AttachersHandler()]
    )
