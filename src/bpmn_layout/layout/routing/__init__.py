"""Connection routing subpackage.

Public API:
- SequenceFlowRouter: strategy-based sequence flow routing
- MessageFlowRouter: cross-pool message flow routing
- AssociationRouter: data and annotation associations
- WaypointSnapper: grid snapping with per-diagram bend deduplication
- RoutedPath: routed path dataclass
"""

from bpmn_layout.layout.routing.associations import AssociationRouter
from bpmn_layout.layout.routing.common import RoutedPath, SideGroups, shape_index
from bpmn_layout.layout.routing.geometry import Side
from bpmn_layout.layout.routing.message import MessageFlowRouter
from bpmn_layout.layout.routing.sequence import STRATEGY_NAMES, SequenceFlowRouter
from bpmn_layout.layout.routing.snapping import WaypointSnapper, sanitize_waypoints, snap

__all__ = [
    "STRATEGY_NAMES",
    "AssociationRouter",
    "MessageFlowRouter",
    "RoutedPath",
    "SequenceFlowRouter",
    "Side",
    "SideGroups",
    "WaypointSnapper",
    "sanitize_waypoints",
    "shape_index",
    "snap",
]
