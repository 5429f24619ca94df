"""Graph placer: discovers a placement order and writes nodes into the grid.

Roots are the unvisited nodes without incoming flows. Each pass seeds one
new grid row per root and expands depth-first through the registry's
``add_to_grid`` capability. Nodes no root reaches (isolated cycles) are
recovered one per outer iteration by seeding the first missing node.
"""

from __future__ import annotations

__all__ = ["GraphPlacer"]

import logging
from collections.abc import Callable

from bpmn_layout.errors import TraversalError
from bpmn_layout.layout.grid import Grid
from bpmn_layout.layout.handlers.base import ADD_TO_GRID, HandlerContext, HandlerRegistry
from bpmn_layout.parser.model import FlowNode, flow_nodes, is_sub_process

logger = logging.getLogger(__name__)


def fold_attachers(elements: list[FlowNode]) -> list[FlowNode]:
    """Register boundary events with their hosts; return the other nodes."""
    primary = []
    for element in elements:
        host = element.attached_to
        if host is None:
            primary.append(element)
            continue
        if element not in host.attachers:
            host.attachers.append(element)
    return primary


class GraphPlacer:
    def __init__(
        self,
        registry: HandlerRegistry,
        on_sub_process: Callable[[FlowNode], None] | None = None,
    ) -> None:
        self.registry = registry
        self.on_sub_process = on_sub_process

    def create_grid_layout(self, root) -> Grid:
        """Place every node of *root* (a process or sub-process) into a new grid."""
        grid = Grid()
        elements = flow_nodes(root.flow_elements)
        if not elements:
            return grid

        primary = fold_attachers(elements)
        visited: set[FlowNode] = set()

        # Every iteration either visits a root or seeds one missing node, so
        # len(primary) + 1 iterations are always enough for a sane graph.
        max_iterations = len(primary) + 1
        iterations = 0
        while len([el for el in primary if el in visited]) < len(primary):
            iterations += 1
            if iterations > max_iterations:
                missing = [el.id for el in primary if el not in visited]
                raise TraversalError(
                    f"Could not place {len(missing)} element(s) of '{root.id}' "
                    f"after {max_iterations} passes: {missing}"
                )

            roots = [el for el in primary if not el.incoming and el not in visited]
            stack: list[FlowNode] = []
            for el in roots:
                grid.add(el)
                visited.add(el)
                stack.append(el)

            self.handle_grid(grid, visited, stack)

            placed = {id(el) for el in grid.get_all_elements()}
            missing = [el for el in primary if id(el) not in placed]
            if missing:
                seed = missing[0]
                logger.debug(f"Seeding unreached element {seed.id} in '{root.id}'")
                grid.add(seed)
                visited.add(seed)
                stack.append(seed)
                self.handle_grid(grid, visited, stack)

        return grid

    def handle_grid(self, grid: Grid, visited: set, stack: list) -> None:
        """Depth-first expansion: pop, place successors, push them."""
        while stack:
            current = stack.pop()

            if is_sub_process(current) and self.on_sub_process is not None:
                self.on_sub_process(current)

            ctx = HandlerContext(element=current, grid=grid, visited=visited, stack=stack)
            for el in self.registry.invoke(ADD_TO_GRID, ctx):
                stack.append(el)
                visited.add(el)
