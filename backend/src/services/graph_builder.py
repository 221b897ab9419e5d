"""Build the raw page/asset graph from a project's page corpus."""

from __future__ import annotations

import logging
import time
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from ..models.graph import EdgeKind, GraphEdge, GraphModel, GraphNode, NodeKind
from ..models.project import DocPage
from .reference_parser import (
    AssetRef,
    Reference,
    ReferenceTarget,
    build_title_index,
    parse_asset_ref,
    parse_page_references,
)

logger = logging.getLogger(__name__)

DEFAULT_CATEGORY = "General"
DEFAULT_MOUNT_ROOT = "/Game"
ROOT_FOLDER = "Root"
ASSET_TAG = "Asset"


def normalize_scope_root(scope_root: str | None) -> Optional[str]:
    """
    Normalize an asset-root filter to a bare slash-rooted path.

    A canonical reference is accepted and reduced to its package path.
    Blank filters mean "no filter".
    """
    if scope_root is None:
        return None
    cleaned = scope_root.strip()
    if not cleaned:
        return None
    asset = parse_asset_ref(cleaned)
    if asset is not None:
        return asset.path
    cleaned = cleaned.rstrip("/")
    if not cleaned:
        return None
    if not cleaned.startswith("/"):
        cleaned = "/" + cleaned
    return cleaned


def is_in_scope(asset_path: str, scope_root: str | None) -> bool:
    """True when the path equals the scope root or is nested under it."""
    if scope_root is None:
        return True
    return asset_path == scope_root or asset_path.startswith(scope_root + "/")


def folder_bucket(asset_path: str, root_prefix: str) -> str:
    """First path segment of the asset's folder below ``root_prefix``."""
    prefix = root_prefix.rstrip("/")
    remainder = asset_path
    if prefix and (asset_path == prefix or asset_path.startswith(prefix + "/")):
        remainder = asset_path[len(prefix):]
    segments = [segment for segment in remainder.split("/") if segment]
    # The last segment is the asset package itself, not a folder.
    folders = segments[:-1]
    return folders[0] if folders else ROOT_FOLDER


def page_node(page: DocPage) -> GraphNode:
    return GraphNode(
        id=page.id,
        title=page.title or page.id,
        kind=NodeKind.PAGE,
        tags=list(page.tags),
        category=(page.category or "").strip() or DEFAULT_CATEGORY,
    )


def asset_node(asset: AssetRef, root_prefix: str) -> GraphNode:
    return GraphNode(
        id=asset.node_id,
        title=asset.name,
        kind=NodeKind.ASSET,
        tags=[ASSET_TAG],
        category=folder_bucket(asset.path, root_prefix),
        asset_ref=asset.canonical,
        asset_type=asset.type_name,
        asset_path=asset.path,
        asset_name=asset.name,
    )


def collect_references(pages: Sequence[DocPage]) -> Dict[str, List[Reference]]:
    """Parse every page once; keyed by page id in corpus order."""
    title_index = build_title_index(pages)
    page_ids = {page.id for page in pages}
    return {page.id: parse_page_references(page, title_index, page_ids) for page in pages}


def build_graph(
    pages: Iterable[DocPage],
    asset_root_filter: str | None = None,
    mount_root: str = DEFAULT_MOUNT_ROOT,
) -> GraphModel:
    """
    Combine the page corpus and its references into raw nodes and edges.

    Asset existence is inferred purely from references. Asset nodes are keyed
    by (path, name) and the first occurrence supplies display fields. With an
    ``asset_root_filter`` only in-scope assets are kept, along with the pages
    that reference at least one of them.
    """
    start_time = time.time()
    corpus: List[DocPage] = []
    seen_pages: set[str] = set()
    for page in pages:
        if page.id in seen_pages:
            continue
        seen_pages.add(page.id)
        corpus.append(page)

    scope_root = normalize_scope_root(asset_root_filter)
    root_prefix = scope_root or mount_root
    references = collect_references(corpus)

    assets: Dict[Tuple[str, str], AssetRef] = {}
    retained_pages: List[DocPage] = []
    for page in corpus:
        page_assets = [
            ref.asset
            for ref in references[page.id]
            if ref.target_kind is ReferenceTarget.ASSET
            and ref.asset is not None
            and is_in_scope(ref.asset.path, scope_root)
        ]
        if scope_root is not None and not page_assets:
            continue
        retained_pages.append(page)
        for asset in page_assets:
            assets.setdefault(asset.identity, asset)

    nodes: List[GraphNode] = [page_node(page) for page in retained_pages]
    nodes.extend(asset_node(asset, root_prefix) for asset in assets.values())
    node_ids = {node.id for node in nodes}

    edges: List[GraphEdge] = []
    edge_keys: set[Tuple[str, str, EdgeKind]] = set()
    for page in retained_pages:
        for ref in references[page.id]:
            if ref.target_id == page.id or ref.target_id not in node_ids:
                continue
            key = (page.id, ref.target_id, ref.edge_kind)
            if key in edge_keys:
                continue
            edge_keys.add(key)
            edges.append(GraphEdge(source=page.id, target=ref.target_id, kind=ref.edge_kind))

    duration_ms = (time.time() - start_time) * 1000
    logger.info(
        "Graph built",
        extra={
            "pages": len(corpus),
            "page_nodes": len(retained_pages),
            "asset_nodes": len(assets),
            "edges": len(edges),
            "scope_root": scope_root or "(all)",
            "duration_ms": f"{duration_ms:.2f}",
        },
    )
    return GraphModel(nodes=nodes, edges=edges)


__all__ = [
    "DEFAULT_CATEGORY",
    "DEFAULT_MOUNT_ROOT",
    "ROOT_FOLDER",
    "normalize_scope_root",
    "is_in_scope",
    "folder_bucket",
    "page_node",
    "asset_node",
    "collect_references",
    "build_graph",
]
