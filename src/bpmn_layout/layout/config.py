"""Overridable layout settings."""

from __future__ import annotations

from dataclasses import dataclass, replace

from bpmn_layout.layout.constants import (
    CELL_HEIGHT,
    CELL_WIDTH,
    CORRIDOR_MAX_SHIFT,
    CORRIDOR_STEP,
    FLAT_COLUMN_WIDTH,
    FLAT_ROW_HEIGHT,
    GRID_SIZE,
    LANE_COLUMN_GAP,
    LANE_ROW_GAP,
    POOL_LEFT,
    POOL_MIN_HEIGHT,
    POOL_MIN_WIDTH,
    POOL_SPACING,
    POOL_TOP,
    SNAP_SEARCH_RADIUS,
    UNDER_ROUTE_CLEARANCE,
)


@dataclass(frozen=True)
class LayoutConfig:
    """Tunable spacing for one layout run.

    None of these affect correctness: they only move shapes and bends.
    """

    grid_size: int = GRID_SIZE
    cell_width: float = CELL_WIDTH
    cell_height: float = CELL_HEIGHT
    snap_search_radius: int = SNAP_SEARCH_RADIUS
    pool_left: float = POOL_LEFT
    pool_top: float = POOL_TOP
    pool_min_width: float = POOL_MIN_WIDTH
    pool_min_height: float = POOL_MIN_HEIGHT
    pool_spacing: float = POOL_SPACING
    flat_column_width: float = FLAT_COLUMN_WIDTH
    flat_row_height: float = FLAT_ROW_HEIGHT
    lane_column_gap: float = LANE_COLUMN_GAP
    lane_row_gap: float = LANE_ROW_GAP
    under_route_clearance: float = UNDER_ROUTE_CLEARANCE
    corridor_step: float = CORRIDOR_STEP
    corridor_max_shift: float = CORRIDOR_MAX_SHIFT

    def __post_init__(self) -> None:
        if self.grid_size <= 0:
            raise ValueError(f"grid_size must be positive, got {self.grid_size}")

    def with_overrides(self, **overrides) -> LayoutConfig:
        """Return a copy with the given fields replaced."""
        return replace(self, **overrides)
