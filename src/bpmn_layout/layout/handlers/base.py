"""Capability-based handler registry.

A handler is any object exposing one or more capability methods
(``add_to_grid``, ``create_element_di``, ``create_connection_di``). Each
capability takes a :class:`HandlerContext` and returns a list. The registry
calls every handler that implements the requested capability, in
registration order, and flattens the results.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from bpmn_layout.layout.config import LayoutConfig
from bpmn_layout.layout.grid import Grid
from bpmn_layout.parser.model import Plane

ADD_TO_GRID = "add_to_grid"
CREATE_ELEMENT_DI = "create_element_di"
CREATE_CONNECTION_DI = "create_connection_di"

CAPABILITIES = (ADD_TO_GRID, CREATE_ELEMENT_DI, CREATE_CONNECTION_DI)


@dataclass
class HandlerContext:
    """Everything a handler may need for one node."""

    element: Any
    grid: Grid | None = None
    visited: set | None = None
    stack: list | None = None
    row: int = -1
    col: int = -1
    plane: Plane | None = None
    router: Any = None
    config: LayoutConfig = field(default_factory=LayoutConfig)


class HandlerRegistry:
    def __init__(self, handlers: list[Any] | None = None) -> None:
        self.handlers: list[Any] = list(handlers or [])

    def register(self, handler: Any) -> None:
        self.handlers.append(handler)

    def supporting(self, capability: str) -> list[Any]:
        """Handlers that implement *capability*."""
        return [h for h in self.handlers if callable(getattr(h, capability, None))]

    def invoke(self, capability: str, context: HandlerContext) -> list[Any]:
        """Run *capability* on all supporting handlers and flatten the results."""
        if capability not in CAPABILITIES:
            raise ValueError(f"Unknown handler capability '{capability}'")
        results: list[Any] = []
        for handler in self.supporting(capability):
            result = getattr(handler, capability)(context)
            if result:
                results.extend(result)
        return results
