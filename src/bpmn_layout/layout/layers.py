"""Depth layering for pool layouts (X-column assignment).

Uses shortest-path (breadth-first) layering: each node's depth is its
distance in edge hops from the nearest root, where roots are start events
and nodes without incoming edges. The first depth a node receives is kept,
so back edges and long detours never push a node further right. Flows
leaving a boundary event count as leaving the event's host.
"""

from __future__ import annotations

__all__ = ["compute_depths"]

from collections.abc import Iterable

import networkx as nx

from bpmn_layout.parser.model import SequenceFlow


def compute_depths(
    flows: Iterable[SequenceFlow],
    node_ids: Iterable[str],
    start_ids: Iterable[str] = (),
) -> dict[str, int]:
    """Assign each node of *node_ids* a depth column (0-based).

    Only flows whose both ends are in *node_ids* are considered, so the
    layering of a lane ignores edges leaving or entering it. Nodes that no
    root reaches (pure cycles) are placed one column past the deepest node.
    """
    ids = list(dict.fromkeys(node_ids))
    G = nx.DiGraph()
    G.add_nodes_from(ids)
    for flow in flows:
        source = flow.source.attached_to or flow.source
        if source.id in G and flow.target.id in G and source.id != flow.target.id:
            G.add_edge(source.id, flow.target.id)

    starts = set(start_ids)
    roots = [nid for nid in ids if nid in starts or G.in_degree(nid) == 0]

    depth: dict[str, int] = {}
    if roots:
        for layer_idx, layer in enumerate(nx.bfs_layers(G, roots)):
            for nid in layer:
                depth[nid] = layer_idx

    max_depth = max(depth.values(), default=0)
    for nid in ids:
        if nid not in depth:
            depth[nid] = max_depth + 1

    return depth
