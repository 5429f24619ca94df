"""Sparse row/column grid used to place flow nodes in traversal order.

Rows are plain lists; a cell is either a node or ``None``. Rows may have
different lengths and there is no fixed size: dimensions are computed on
demand. Explicit inserts into occupied cells are errors, while the
``adjust_*`` relocations are total functions that silently do nothing when
their input is missing or the target cell is taken.
"""

from __future__ import annotations

__all__ = ["Grid", "GridCell"]

from typing import Any, NamedTuple

from bpmn_layout.errors import GridOccupiedError


class GridCell(NamedTuple):
    """A placed node together with its position."""

    element: Any
    row: int
    col: int


class Grid:
    def __init__(self) -> None:
        self.grid: list[list[Any]] = []

    # ------------------------------------------------------------------
    # Insertion
    # ------------------------------------------------------------------

    def add(self, element: Any, position: tuple[int, int] | None = None) -> None:
        """Insert at an explicit cell, or append a new row holding only *element*."""
        if position is None:
            self._add_start(element)
            return

        row, col = position
        if row < 0 or col < 0:
            raise ValueError(f"Grid position must be non-negative, got {position}")

        self._ensure_cell(row, col)
        if self.grid[row][col] is not None:
            raise GridOccupiedError(
                f"Grid cell ({row}, {col}) is occupied by {self.grid[row][col]!r}"
            )
        self.grid[row][col] = element

    def create_row(self, after_index: int | None = None) -> None:
        """Insert an empty row, appended or directly after *after_index*."""
        if after_index is None:
            self.grid.append([])
        else:
            self.grid.insert(after_index + 1, [])

    def _add_start(self, element: Any) -> None:
        self.grid.append([element])

    def _ensure_cell(self, row: int, col: int) -> None:
        while len(self.grid) <= row:
            self.grid.append([])
        cells = self.grid[row]
        if len(cells) <= col:
            cells.extend([None] * (col + 1 - len(cells)))

    def add_after(self, element: Any, new_element: Any) -> None:
        """Place *new_element* right after *element* in its row.

        Cells to the right shift by one column. If *element* is not placed
        yet, *new_element* starts a new row. ``new_element=None`` opens an
        empty column after *element*.
        """
        row, col = self.find(element) if element is not None else (-1, -1)
        if row < 0:
            self.grid.append([new_element])
            return
        self.grid[row].insert(col + 1, new_element)

    def add_below(self, element: Any, new_element: Any) -> None:
        """Place *new_element* one row below *element*, same column.

        If that cell is taken a fresh row is inserted below *element*
        instead, so nothing is ever overwritten.
        """
        row, col = self.find(element) if element is not None else (-1, -1)
        if row < 0:
            self._add_start(new_element)
            return

        if row + 1 >= len(self.grid):
            self.grid.append([])

        if self.get(row + 1, col) is not None:
            self.grid.insert(row + 1, [])

        self._ensure_cell(row + 1, col)
        self.grid[row + 1][col] = new_element

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def find(self, element: Any) -> tuple[int, int]:
        """Return ``(row, col)`` of *element*, or ``(-1, -1)``."""
        if element is None:
            return (-1, -1)
        for row_idx, cells in enumerate(self.grid):
            for col_idx, cell in enumerate(cells):
                if cell is element:
                    return (row_idx, col_idx)
        return (-1, -1)

    def get(self, row: int, col: int) -> Any:
        if row < 0 or col < 0 or row >= len(self.grid):
            return None
        cells = self.grid[row]
        return cells[col] if col < len(cells) else None

    def get_elements_in_range(
        self, top_left: tuple[int, int], bottom_right: tuple[int, int]
    ) -> list[Any]:
        """Return placed nodes inside the inclusive rectangle (corners may be swapped)."""
        start_row, start_col = top_left
        end_row, end_col = bottom_right
        if start_row > end_row:
            start_row, end_row = end_row, start_row
        if start_col > end_col:
            start_col, end_col = end_col, start_col

        elements = []
        for row in range(start_row, end_row + 1):
            for col in range(start_col, end_col + 1):
                element = self.get(row, col)
                if element is not None:
                    elements.append(element)
        return elements

    def get_all_elements(self) -> list[Any]:
        return [cell.element for cell in self.elements_by_position()]

    def get_grid_dimensions(self) -> tuple[int, int]:
        """Return ``(row_count, max_column_count)``."""
        max_cols = max((len(cells) for cells in self.grid), default=0)
        return (len(self.grid), max_cols)

    def elements_by_position(self) -> list[GridCell]:
        """All placed nodes in row-major, then column order."""
        return [
            GridCell(cell, row_idx, col_idx)
            for row_idx, cells in enumerate(self.grid)
            for col_idx, cell in enumerate(cells)
            if cell is not None
        ]

    def get_elements_total(self) -> int:
        """Number of distinct placed nodes (by identity)."""
        return len({id(cell.element) for cell in self.elements_by_position()})

    # ------------------------------------------------------------------
    # Speculative relocation
    # ------------------------------------------------------------------

    def adjust_grid_position(self, element: Any) -> None:
        """Move *element* to the last column of the grid if it is left of it."""
        row, col = self.find(element)
        if row < 0:
            return
        _, max_col = self.get_grid_dimensions()
        target = max_col - 1
        if col >= target or self.get(row, target) is not None:
            return
        self._ensure_cell(row, target)
        self.grid[row][target] = element
        self.grid[row][col] = None

    def adjust_row_for_multiple_incoming(
        self, elements: list[Any], current_element: Any
    ) -> None:
        """Lift a merge node up to the highest row among its placed predecessors."""
        rows = [r for r, _ in (self.find(el) for el in elements) if r >= 0]
        if not rows:
            return
        lowest_row = min(rows)

        row, col = self.find(current_element)
        if row < 0:
            return

        if lowest_row < row and self.get(lowest_row, col) is None:
            self._ensure_cell(lowest_row, col)
            self.grid[lowest_row][col] = current_element
            self.grid[row][col] = None

    def adjust_column_for_multiple_incoming(
        self, elements: list[Any], current_element: Any
    ) -> None:
        """Push a merge node to the column after its rightmost placed predecessor."""
        cols = [c for _, c in (self.find(el) for el in elements) if c >= 0]
        if not cols:
            return
        target = max(cols) + 1

        row, col = self.find(current_element)
        if row < 0:
            return

        if target > col and self.get(row, target) is None:
            self._ensure_cell(row, target)
            self.grid[row][target] = current_element
            self.grid[row][col] = None

    def __repr__(self) -> str:
        rows, cols = self.get_grid_dimensions()
        return f"Grid({rows}x{cols}, {self.get_elements_total()} elements)"
