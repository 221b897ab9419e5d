"""Bounded-hop neighborhood of a node, used to dim everything outside focus."""

from __future__ import annotations

from collections import defaultdict, deque
from typing import Dict, Iterable, List, Set

from ..models.graph import GraphEdge
from .graph_errors import InvalidHopsError


def validate_hops(hops: int) -> int:
    if isinstance(hops, bool) or not isinstance(hops, int):
        raise InvalidHopsError(f"hops must be an integer, got {hops!r}", details={"hops": hops})
    if hops < 0:
        raise InvalidHopsError(f"hops must be >= 0, got {hops}", details={"hops": hops})
    return hops


def adjacency(edges: Iterable[GraphEdge]) -> Dict[str, Set[str]]:
    """Undirected adjacency; edge kind and direction are ignored."""
    neighbors: Dict[str, Set[str]] = defaultdict(set)
    for edge in edges:
        neighbors[edge.source].add(edge.target)
        neighbors[edge.target].add(edge.source)
    return neighbors


def neighborhood(node_id: str, edges: Iterable[GraphEdge], hops: int) -> Set[str]:
    """Nodes reachable from ``node_id`` within ``hops`` edges, start node included."""
    validate_hops(hops)
    reached: Set[str] = {node_id}
    if hops == 0:
        return reached

    neighbors = adjacency(edges)
    frontier = deque([(node_id, 0)])
    while frontier:
        current, depth = frontier.popleft()
        if depth == hops:
            continue
        for neighbor in neighbors.get(current, ()):
            if neighbor not in reached:
                reached.add(neighbor)
                frontier.append((neighbor, depth + 1))
    return reached


def focus_edges(edges: Iterable[GraphEdge], focus_set: Set[str]) -> List[GraphEdge]:
    """Edges drawn at full opacity: both endpoints inside the focus set."""
    return [edge for edge in edges if edge.source in focus_set and edge.target in focus_set]


__all__ = ["validate_hops", "adjacency", "neighborhood", "focus_edges"]
