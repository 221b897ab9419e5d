"""Group keys and collapse of same-key nodes into synthetic group nodes."""

from __future__ import annotations

from typing import Dict, Iterable, List, Sequence, Tuple

from ..models.graph import EdgeKind, GraphEdge, GraphNode, GroupMode, NodeKind
from .graph_builder import DEFAULT_CATEGORY, ROOT_FOLDER
from .graph_errors import UnknownGroupModeError

ALL_KEY = "all"
UNTAGGED = "Untagged"
ASSET_TYPE_FALLBACK = "Asset"


def coerce_group_mode(mode: GroupMode | str) -> GroupMode:
    """Accept a GroupMode or its string value; anything else is a caller bug."""
    if isinstance(mode, GroupMode):
        return mode
    try:
        return GroupMode(mode)
    except ValueError as exc:
        raise UnknownGroupModeError(
            f"Unknown group mode: {mode!r}",
            details={"mode": mode, "allowed": [item.value for item in GroupMode]},
        ) from exc


def key_of(node: GraphNode, mode: GroupMode | str) -> str:
    """Group key of ``node`` under ``mode``."""
    mode = coerce_group_mode(mode)
    if mode is GroupMode.NONE:
        return ALL_KEY
    if node.kind is NodeKind.GROUP:
        return node.group_key or node.title
    if node.kind is NodeKind.ASSET:
        if mode is GroupMode.FOLDER:
            return node.category or ROOT_FOLDER
        return node.asset_type or ASSET_TYPE_FALLBACK
    if mode is GroupMode.TAG:
        return node.tags[0] if node.tags else UNTAGGED
    return node.category or DEFAULT_CATEGORY


def group_node_id(mode: GroupMode | str, key: str) -> str:
    return f"group:{coerce_group_mode(mode).value}:{key}"


def group_keys(nodes: Iterable[GraphNode], mode: GroupMode | str) -> List[str]:
    """Distinct group keys in first-seen order."""
    keys: Dict[str, None] = {}
    for node in nodes:
        keys.setdefault(key_of(node, mode), None)
    return list(keys)


def group_graph(
    nodes: Sequence[GraphNode],
    edges: Sequence[GraphEdge],
    mode: GroupMode | str,
    collapsed_keys: Iterable[str] = (),
) -> Tuple[List[GraphNode], List[GraphEdge]]:
    """
    Assign group keys and fold collapsed groups into single group nodes.

    Must be fed the raw node/edge set. A group node appears in the output
    where its first member would have been. Edges touching a
    collapsed member are re-pointed at the group node; self-loops are
    dropped and parallel edges of the same kind are merged by summing
    weights.
    """
    mode = coerce_group_mode(mode)
    collapsed = set(collapsed_keys) if mode is not GroupMode.NONE else set()

    member_counts: Dict[str, int] = {}
    keyed: List[Tuple[GraphNode, str]] = []
    for node in nodes:
        key = key_of(node, mode)
        keyed.append((node, key))
        if key in collapsed:
            # An already-collapsed group node carries its members along.
            weight = (node.member_count or 1) if node.kind is NodeKind.GROUP else 1
            member_counts[key] = member_counts.get(key, 0) + weight

    rendered: List[GraphNode] = []
    remap: Dict[str, str] = {}
    emitted_groups: set[str] = set()
    for node, key in keyed:
        if key not in member_counts:
            rendered.append(node.model_copy(update={"group_key": key}))
            remap[node.id] = node.id
            continue
        group_id = group_node_id(mode, key)
        remap[node.id] = group_id
        if group_id in emitted_groups:
            continue
        emitted_groups.add(group_id)
        rendered.append(
            GraphNode(
                id=group_id,
                title=key,
                kind=NodeKind.GROUP,
                category=key,
                group_key=key,
                member_count=member_counts[key],
            )
        )

    merged: Dict[Tuple[str, str, EdgeKind], int] = {}
    for edge in edges:
        source = remap.get(edge.source)
        target = remap.get(edge.target)
        if source is None or target is None or source == target:
            continue
        edge_key = (source, target, edge.kind)
        merged[edge_key] = merged.get(edge_key, 0) + edge.weight

    rendered_edges = [
        GraphEdge(source=source, target=target, kind=kind, weight=weight)
        for (source, target, kind), weight in merged.items()
    ]
    return rendered, rendered_edges


__all__ = [
    "ALL_KEY",
    "UNTAGGED",
    "coerce_group_mode",
    "key_of",
    "group_node_id",
    "group_keys",
    "group_graph",
]
