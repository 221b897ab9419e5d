"""Documentation coverage classification for asset nodes."""

from __future__ import annotations

import logging
from typing import Dict, Iterable, List, Optional

from ..models.graph import CoverageStats, DocStatus, GraphNode, NodeKind
from ..models.project import DocPage
from .asset_inventory import AssetInventory
from .reference_parser import parse_asset_ref

logger = logging.getLogger(__name__)


def documented_assets(pages: Iterable[DocPage]) -> Dict[str, str]:
    """Map asset node ids to the first page whose metadata declares it documents them."""
    documented: Dict[str, str] = {}
    for page in pages:
        asset = parse_asset_ref(page.metadata.documents_asset)
        if asset is None:
            if page.metadata.documents_asset:
                logger.debug(
                    "Ignoring unparsable documentsAsset",
                    extra={"page_id": page.id, "reference": page.metadata.documents_asset},
                )
            continue
        documented.setdefault(asset.node_id, page.id)
    return documented


def broken_asset_ids(broken_refs: Iterable[str]) -> set[str]:
    """Normalise a broken-reference report to asset node ids; unparsable entries are dropped."""
    ids: set[str] = set()
    for ref in broken_refs:
        asset = parse_asset_ref(ref)
        if asset is not None:
            ids.add(asset.node_id)
    return ids


def classify_nodes(
    nodes: Iterable[GraphNode],
    documented: Dict[str, str],
    broken_ids: set[str],
) -> List[GraphNode]:
    """
    Return copies of ``nodes`` with ``doc_status`` set on every asset node.

    documented wins over broken, broken wins over missing. Non-asset nodes
    pass through unchanged.
    """
    classified: List[GraphNode] = []
    for node in nodes:
        if node.kind is not NodeKind.ASSET:
            classified.append(node)
            continue
        linked_page_id = documented.get(node.id)
        if linked_page_id is not None:
            status = DocStatus.DOCUMENTED
        elif node.id in broken_ids:
            status = DocStatus.BROKEN
        else:
            status = DocStatus.MISSING
        classified.append(
            node.model_copy(update={"doc_status": status, "linked_page_id": linked_page_id})
        )
    return classified


class CoverageClassifier:
    """Tag asset nodes as documented, broken or missing."""

    def __init__(
        self,
        inventory: Optional[AssetInventory] = None,
        broken_refs: Iterable[str] = (),
    ) -> None:
        self.inventory = inventory
        self.broken_refs = frozenset(broken_refs)

    def classify(self, nodes: Iterable[GraphNode], pages: Iterable[DocPage]) -> List[GraphNode]:
        return classify_nodes(nodes, documented_assets(pages), broken_asset_ids(self.broken_refs))

    def stats(self, nodes: Iterable[GraphNode]) -> CoverageStats:
        """Count statuses over classified asset nodes."""
        counts = {status: 0 for status in DocStatus}
        referenced = 0
        for node in nodes:
            if node.kind is not NodeKind.ASSET:
                continue
            referenced += 1
            counts[node.doc_status or DocStatus.MISSING] += 1

        inventory_total: Optional[int] = None
        if self.inventory is not None:
            inventory_total = len(self.inventory.list_assets())

        return CoverageStats(
            inventory_total=inventory_total,
            referenced=referenced,
            documented=counts[DocStatus.DOCUMENTED],
            missing=counts[DocStatus.MISSING],
            broken=counts[DocStatus.BROKEN],
            coverage_ratio=(counts[DocStatus.DOCUMENTED] / referenced) if referenced else 0.0,
        )


__all__ = ["documented_assets", "broken_asset_ids", "classify_nodes", "CoverageClassifier"]
