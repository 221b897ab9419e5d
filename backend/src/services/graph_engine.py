"""Knowledge graph engine: dirty + rebuild cycle over the page corpus."""

from __future__ import annotations

from collections import defaultdict
import logging
import time
from typing import Dict, Iterable, List, Mapping, Optional, Set

from ..models.graph import CoverageStats, GraphModel, GraphNode, GroupMode, RenderedGraph
from ..models.layout import LayoutKey, LayoutSnapshot, Position
from ..models.project import DocPage
from .asset_inventory import AssetInventory
from .config import AppConfig, get_config
from .coverage import CoverageClassifier
from .graph_builder import build_graph, normalize_scope_root
from .graph_errors import UnknownGroupKeyError, UnknownNodeError
from .graph_search import GraphSearchIndex
from .grouping import coerce_group_mode, group_graph, group_keys
from .layout_cache import LayoutCache
from .layout_session import LayoutOracle, LayoutSession, LayoutState
from .neighborhood import neighborhood, validate_hops

logger = logging.getLogger(__name__)


class KnowledgeGraphEngine:
    """
    Derive the rendered graph of one project and keep its view state.

    The raw graph is rebuilt from the page corpus whenever it is marked
    dirty or the asset scope changes; grouping, seeding and the layout
    session are redone on every rebuild. Positions live in per-namespace
    ``LayoutState`` maps and are merged into nodes only at render time.
    """

    def __init__(
        self,
        project_id: str,
        pages: Iterable[DocPage] = (),
        *,
        layout_cache: Optional[LayoutCache] = None,
        oracle: Optional[LayoutOracle] = None,
        inventory: Optional[AssetInventory] = None,
        broken_refs: Iterable[str] = (),
        config: Optional[AppConfig] = None,
    ) -> None:
        self.project_id = project_id
        self.config = config or get_config()
        self.layout_cache = layout_cache or LayoutCache()
        self.oracle = oracle
        self.inventory = inventory
        self.group_mode = GroupMode.NONE
        self.scope_root: Optional[str] = None

        self._pages: List[DocPage] = list(pages)
        self._broken_refs = frozenset(broken_refs)
        self._collapsed: Dict[GroupMode, Set[str]] = defaultdict(set)
        self._dirty = True
        self._raw: Optional[GraphModel] = None
        self._raw_scope: Optional[str] = None
        self._coverage = CoverageStats()
        self._rendered: Optional[RenderedGraph] = None
        self._layouts: Dict[str, LayoutState] = {}
        self._session: Optional[LayoutSession] = None
        self._search_index = GraphSearchIndex([])

    # ------------------------------------------------------------------
    # Inputs
    # ------------------------------------------------------------------

    @property
    def pages(self) -> List[DocPage]:
        return list(self._pages)

    def set_pages(self, pages: Iterable[DocPage]) -> None:
        self._pages = list(pages)
        self.mark_dirty()

    def set_broken_references(self, broken_refs: Iterable[str]) -> None:
        self._broken_refs = frozenset(broken_refs)
        self.mark_dirty()

    def set_inventory(self, inventory: Optional[AssetInventory]) -> None:
        self.inventory = inventory
        self.mark_dirty()

    def mark_dirty(self) -> None:
        self._dirty = True

    # ------------------------------------------------------------------
    # Rebuild
    # ------------------------------------------------------------------

    @property
    def layout_key(self) -> LayoutKey:
        return LayoutKey(self.project_id, self.scope_root, self.group_mode)

    @property
    def rendered(self) -> RenderedGraph:
        if self._rendered is None or self._dirty:
            return self.rebuild(start_layout=False)
        return self._rendered

    @property
    def raw(self) -> GraphModel:
        return self._ensure_raw()

    @property
    def collapsed_keys(self) -> List[str]:
        return sorted(self._collapsed[self.group_mode])

    @property
    def session(self) -> Optional[LayoutSession]:
        return self._session

    def build_graph(self, scope_root: Optional[str] = None) -> RenderedGraph:
        """Rebuild for ``scope_root`` (None means the whole project)."""
        self.scope_root = normalize_scope_root(scope_root)
        return self.rebuild()

    def rebuild(self, start_layout: bool = True) -> RenderedGraph:
        """
        Recompute the rendered graph.

        Query paths pass ``start_layout=False`` so that reading a dirty engine
        refreshes the model without restarting the layout oracle.
        """
        start_time = time.time()
        raw = self._ensure_raw()
        nodes, edges = group_graph(
            raw.nodes, raw.edges, self.group_mode, self._collapsed[self.group_mode]
        )

        key = self.layout_key
        state = self._layout_state(key)
        # Positions from the current run take precedence over the cached ones.
        state.positions = {**self.layout_cache.load(key), **state.positions}

        rendered = RenderedGraph(
            project_id=self.project_id,
            scope_root=self.scope_root,
            group_mode=self.group_mode,
            nodes=state.apply(nodes),
            edges=edges,
            coverage=self._coverage,
        )
        self._rendered = rendered
        self._search_index = GraphSearchIndex(rendered.nodes)
        if start_layout:
            self._start_session(key, state, rendered)

        duration_ms = (time.time() - start_time) * 1000
        logger.info(
            "Graph rendered",
            extra={
                "project_id": self.project_id,
                "namespace": key.namespace,
                "node_count": len(rendered.nodes),
                "edge_count": len(rendered.edges),
                "seeded": sum(1 for node in rendered.nodes if node.x is not None),
                "duration_ms": f"{duration_ms:.2f}",
            },
        )
        return rendered

    def _ensure_raw(self) -> GraphModel:
        if self._raw is not None and not self._dirty and self._raw_scope == self.scope_root:
            return self._raw

        model = build_graph(
            self._pages,
            asset_root_filter=self.scope_root,
            mount_root=self.config.content_mount_root,
        )
        classifier = CoverageClassifier(self.inventory, self._broken_refs)
        nodes = classifier.classify(model.nodes, self._pages)
        self._raw = GraphModel(nodes=nodes, edges=model.edges)
        self._raw_scope = self.scope_root
        self._coverage = classifier.stats(nodes)
        self._dirty = False
        return self._raw

    def _layout_state(self, key: LayoutKey) -> LayoutState:
        state = self._layouts.get(key.namespace)
        if state is None:
            state = LayoutState()
            self._layouts[key.namespace] = state
        return state

    def _start_session(self, key: LayoutKey, state: LayoutState, rendered: RenderedGraph) -> None:
        # Two simulations must never write to the same node set.
        self.stop_layout()
        session = LayoutSession(
            key=key,
            state=state,
            cache=self.layout_cache,
            node_ids=[node.id for node in rendered.nodes],
            alpha_threshold=self.config.layout_alpha_threshold,
            oracle=self.oracle,
        )
        self._session = session
        if self.oracle is not None:
            self.oracle.start(rendered.nodes, rendered.edges, session.on_tick)

    def stop_layout(self) -> None:
        if self._session is not None:
            self._session.cancel()
            self._session = None

    # ------------------------------------------------------------------
    # View state
    # ------------------------------------------------------------------

    def set_group_mode(self, mode: GroupMode | str) -> RenderedGraph:
        mode = coerce_group_mode(mode)
        if mode is self.group_mode and self._rendered is not None and not self._dirty:
            return self._rendered
        self.group_mode = mode
        return self.rebuild()

    def set_collapsed(self, key: str, collapsed: bool = True) -> RenderedGraph:
        known = group_keys(self._ensure_raw().nodes, self.group_mode)
        if key not in known:
            raise UnknownGroupKeyError(
                f"Unknown group key {key!r} for mode {self.group_mode.value!r}",
                details={"key": key, "mode": self.group_mode.value, "known": known},
            )
        if collapsed:
            self._collapsed[self.group_mode].add(key)
        else:
            self._collapsed[self.group_mode].discard(key)
        return self.rebuild()

    def focus(self, node_id: str, hops: Optional[int] = None) -> Set[str]:
        hops = validate_hops(self.config.default_focus_hops if hops is None else hops)
        rendered = self.rendered
        if not any(node.id == node_id for node in rendered.nodes):
            raise UnknownNodeError(
                f"Unknown node id: {node_id!r}",
                details={"node_id": node_id, "project_id": self.project_id},
            )
        return neighborhood(node_id, rendered.edges, hops)

    def search(self, query: str, limit: Optional[int] = None) -> List[GraphNode]:
        if self._rendered is None or self._dirty:
            self.rebuild(start_layout=False)
        return self._search_index.search(query, limit=limit or self.config.search_result_limit)

    # ------------------------------------------------------------------
    # Layout
    # ------------------------------------------------------------------

    def record_layout_tick(self, alpha: float, positions: Mapping[str, Position]) -> bool:
        """Feed a tick from an oracle that runs outside this process."""
        if self._session is None:
            self.rebuild()
        session = self._session
        if session is None:
            raise RuntimeError("Layout session was not started")
        return session.on_tick(alpha, positions)

    def layout_snapshot(self) -> LayoutSnapshot:
        """Known positions of the rendered nodes under the current namespace."""
        rendered = self.rendered
        key = self.layout_key
        state = self._layout_state(key)
        positions = {
            node.id: state.positions[node.id] for node in rendered.nodes if node.id in state.positions
        }
        saved = self._session is not None and self._session.saved
        return LayoutSnapshot(namespace=key.namespace, positions=positions, saved=saved)

    def persist_layout(self) -> int:
        """Save the current positions of rendered nodes now; returns the count saved."""
        rendered = self.rendered
        key = self.layout_key
        state = self._layout_state(key)
        ids = {node.id for node in rendered.nodes}
        return self.layout_cache.save(
            key, {node_id: pos for node_id, pos in state.positions.items() if node_id in ids}
        )

    def restore_layout(self) -> Dict[str, Position]:
        """Reload cached positions for the current namespace and re-seed rendered nodes."""
        rendered = self.rendered
        key = self.layout_key
        loaded = self.layout_cache.load(key)
        state = self._layout_state(key)
        state.update(loaded)
        self._rendered = rendered.model_copy(update={"nodes": state.apply(rendered.nodes)})
        self._search_index = GraphSearchIndex(self._rendered.nodes)
        return loaded


__all__ = ["KnowledgeGraphEngine"]
