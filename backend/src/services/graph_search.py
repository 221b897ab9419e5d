"""Quick-navigation substring search over graph nodes."""

from __future__ import annotations

from typing import List, Sequence, Tuple

from ..models.graph import GraphNode

DEFAULT_RESULT_LIMIT = 8


def _haystack(node: GraphNode) -> str:
    parts = [node.title, node.id, node.asset_path or "", node.asset_ref or ""]
    return " ".join(part for part in parts if part).lower()


class GraphSearchIndex:
    """
    Case-insensitive substring index over node title, id and asset path fields.

    Matches in the title rank first (prefix before infix); ties keep node order.
    """

    def __init__(self, nodes: Sequence[GraphNode]) -> None:
        self._entries: List[Tuple[GraphNode, str, str]] = [
            (node, node.title.lower(), _haystack(node)) for node in nodes
        ]

    def __len__(self) -> int:
        return len(self._entries)

    def search(self, query: str, limit: int = DEFAULT_RESULT_LIMIT) -> List[GraphNode]:
        if not query or not query.strip() or limit <= 0:
            return []
        needle = query.strip().lower()

        ranked: List[Tuple[int, int, GraphNode]] = []
        for position, (node, title, haystack) in enumerate(self._entries):
            if needle not in haystack:
                continue
            if title.startswith(needle):
                rank = 0
            elif needle in title:
                rank = 1
            else:
                rank = 2
            ranked.append((rank, position, node))

        ranked.sort(key=lambda item: (item[0], item[1]))
        return [node for _, _, node in ranked[:limit]]


def search_nodes(
    query: str, nodes: Sequence[GraphNode], limit: int = DEFAULT_RESULT_LIMIT
) -> List[GraphNode]:
    return GraphSearchIndex(nodes).search(query, limit=limit)


__all__ = ["DEFAULT_RESULT_LIMIT", "GraphSearchIndex", "search_nodes"]
