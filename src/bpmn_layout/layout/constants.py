"""Layout constants used across layout modules.

Centralizes the magic numbers of the grid placer, the pool engine and the
routing engine. Values that callers may want to tune are mirrored in
:class:`bpmn_layout.layout.config.LayoutConfig`.
"""

# ---------------------------------------------------------------------------
# Grid
# ---------------------------------------------------------------------------
GRID_SIZE: int = 20
"""Pixel grid unit that shape bounds and interior waypoints snap to."""

CELL_WIDTH: float = 150.0
"""Width of one SpatialGrid column in diagram coordinates."""

CELL_HEIGHT: float = 140.0
"""Height of one SpatialGrid row in diagram coordinates."""

SNAP_SEARCH_RADIUS: int = 6
"""Max ring (in grid units) probed when a snapped waypoint is already used."""

# ---------------------------------------------------------------------------
# Element sizes
# ---------------------------------------------------------------------------
TASK_WIDTH: float = 100.0
TASK_HEIGHT: float = 80.0

EVENT_SIZE: float = 36.0
"""Start/end/intermediate/boundary events are drawn as squares of this size."""

GATEWAY_SIZE: float = 50.0
"""Gateways are drawn as diamonds inscribed in a square of this size."""

DATA_OBJECT_WIDTH: float = 36.0
DATA_OBJECT_HEIGHT: float = 50.0
DATA_STORE_SIZE: float = 50.0

ANNOTATION_WIDTH: float = 100.0
ANNOTATION_HEIGHT: float = 40.0

EVENT_Y_SHIFT: float = 22.0
"""Vertical offset that centers an event on a task-height row."""

GATEWAY_Y_SHIFT: float = 15.0
"""Vertical offset that centers a gateway on a task-height row."""

# ---------------------------------------------------------------------------
# Pools and lanes
# ---------------------------------------------------------------------------
POOL_LEFT: float = 40.0
"""X of every pool's left edge."""

POOL_TOP: float = 40.0
"""Y of the first pool."""

POOL_MIN_WIDTH: float = 800.0
POOL_MIN_HEIGHT: float = 180.0

POOL_SPACING: float = 60.0
"""Vertical gap between stacked pools."""

POOL_HEADER: float = 40.0
"""Width of the vertical label band on the pool's left edge."""

POOL_RIGHT_PADDING: float = 80.0
POOL_BOTTOM_PADDING: float = 40.0

POOL_CONTENT_X: float = 160.0
"""Offset from the pool's left edge to the first content column."""

POOL_CONTENT_Y: float = 40.0
"""Offset from the pool's top to the first content row (lane-less pools)."""

FLAT_COLUMN_WIDTH: float = 160.0
"""Column pitch for lane-less pools."""

FLAT_ROW_HEIGHT: float = 110.0
"""Row pitch for lane-less pools."""

LANE_COLUMN_GAP: float = 120.0
"""Horizontal gap between lane columns (added to the task width)."""

LANE_ROW_GAP: float = 30.0
"""Vertical gap between rows inside a lane (added to the task height)."""

LANE_HEADER: float = 40.0
"""Top band of a lane kept free of flow nodes."""

LANE_MIN_HEIGHT: float = 140.0
LANE_BOTTOM_PADDING: float = 40.0
LANE_RIGHT_PADDING: float = 60.0

ARTIFACT_GAP: float = 30.0
"""Gap between an activity and the data object/store placed next to it."""

ANNOTATION_INSET: float = 10.0
"""Offset of a text annotation from the lane/pool corner it is placed in."""

# ---------------------------------------------------------------------------
# Routing
# ---------------------------------------------------------------------------
SIDE_CLEARANCE: float = 5.0
"""Minimum gap for a side (R/L/B/T) to count as clearly separating."""

VERTICAL_MIN_GAP: float = 10.0
"""Minimum vertical gap for the vertical-dominance heuristic."""

VERTICAL_OVERLAP_RATIO: float = 0.4
"""Horizontal overlap (fraction of the narrower width) for vertical docking."""

VERTICAL_CENTER_RATIO: float = 0.6
"""Center distance (fraction of the wider width) for vertical docking."""

UNDER_ROUTE_CLEARANCE: float = 30.0
"""Distance below the lower shape for right-to-left detours."""

UNDER_ROUTE_MIN_GAP: float = 10.0
"""Source must start this far right of the target for an under-route."""

STRAIGHT_TOLERANCE: float = 10.0
"""Anchor misalignment still routed as one straight segment (then squared)."""

FANOUT_STUB: float = 10.0
"""Length of the outward stub before gateway branches separate."""

FANOUT_SPREAD: float = 14.0
"""Perpendicular spacing between fanned-out gateway branches."""

CORRIDOR_STEP: float = 12.0
"""Probe step for clear vertical corridor search."""

CORRIDOR_MAX_SHIFT: float = 80.0
"""Largest offset tried by the clear vertical corridor search."""

CORRIDOR_MARGIN: float = 10.0
"""Inset from a pool's side when a message flow exits its bottom."""

MESSAGE_VERTICAL_OVERLAP: float = 40.0
"""Horizontal overlap above which a message flow is routed vertically."""

MESSAGE_VERTICAL_GAP: float = 60.0
"""Center distance above which a message flow is routed vertically."""

MESSAGE_ALIGN_TOLERANCE: float = 10.0
"""X difference still drawn as a single vertical message segment."""

MESSAGE_SIDE_GAP: float = 40.0
"""Horizontal gap needed to route a message flow straight or right-to-left."""

MESSAGE_LEVEL_TOLERANCE: float = 30.0
"""Center y difference still drawn as a single horizontal message segment."""

MESSAGE_T_SHAPE_MAX: float = 120.0
"""X difference up to which a vertical message flow uses a T-shaped approach."""

MESSAGE_APPROACH: float = 30.0
"""Distance from the target at which a T-shaped approach turns."""

MESSAGE_LEG: float = 20.0
"""First horizontal leg of a side-exiting message flow."""

MESSAGE_MIN_BEND: float = 40.0
"""Minimum distance between the first leg and the bend of a message flow."""

DATA_DETOUR: float = 40.0
"""Distance below the lower shape for data associations that would cross shapes."""
