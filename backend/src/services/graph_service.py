"""Process-wide registry of graph engines, one per project."""

from __future__ import annotations

import logging
from typing import Dict, Optional

from ..models.project import DocPage, PageUpdate, Project
from .asset_inventory import AssetInventory, ContentFolderInventory, scan_broken_references
from .config import AppConfig, get_config
from .database import DatabaseService
from .graph_engine import KnowledgeGraphEngine
from .layout_cache import LayoutCache, SQLiteKeyValueStore
from .layout_session import LayoutOracle
from .project_store import ProjectStore

logger = logging.getLogger(__name__)


class GraphService:
    """Create engines lazily from the project store and keep them in sync with page edits."""

    def __init__(
        self,
        config: AppConfig | None = None,
        store: ProjectStore | None = None,
        layout_cache: LayoutCache | None = None,
        oracle: LayoutOracle | None = None,
    ) -> None:
        self.config = config or get_config()
        self.store = store or ProjectStore(self.config)
        self.layout_cache = layout_cache or LayoutCache(
            SQLiteKeyValueStore(DatabaseService(self.config.layout_db_path))
        )
        self.oracle = oracle
        self._engines: Dict[str, KnowledgeGraphEngine] = {}

    def _inventory_for(self, project: Project) -> Optional[AssetInventory]:
        if not project.unreal_project_path:
            return None
        return ContentFolderInventory(
            project.unreal_project_path, mount_root=self.config.content_mount_root
        )

    def engine_for(self, project_id: str) -> KnowledgeGraphEngine:
        """Return the engine for ``project_id``; raises ProjectNotFoundError for unknown ids."""
        engine = self._engines.get(project_id)
        if engine is not None:
            return engine

        project = self.store.get_project(project_id)
        pages = project.page_corpus()
        inventory = self._inventory_for(project)
        broken = scan_broken_references(pages, inventory) if inventory is not None else []
        engine = KnowledgeGraphEngine(
            project.id,
            pages,
            layout_cache=self.layout_cache,
            oracle=self.oracle,
            inventory=inventory,
            broken_refs=broken,
            config=self.config,
        )
        self._engines[project_id] = engine
        logger.info(
            "Graph engine created",
            extra={
                "project_id": project_id,
                "page_count": len(pages),
                "broken_refs": len(broken),
            },
        )
        return engine

    def update_page(self, project_id: str, page_id: str, update: PageUpdate) -> DocPage:
        """Persist a page edit and mark the project's engine dirty."""
        page = self.store.update_page(project_id, page_id, update)
        engine = self._engines.get(project_id)
        if engine is not None:
            project = self.store.get_project(project_id)
            pages = project.page_corpus()
            engine.set_pages(pages)
            if engine.inventory is not None:
                engine.set_broken_references(scan_broken_references(pages, engine.inventory))
        return page

    def reset(self) -> None:
        for engine in self._engines.values():
            engine.stop_layout()
        self._engines.clear()


# Singleton instance for dependency injection
_graph_service: GraphService | None = None


def get_graph_service() -> GraphService:
    """Get or create the graph service singleton."""
    global _graph_service
    if _graph_service is None:
        _graph_service = GraphService()
    return _graph_service


__all__ = ["GraphService", "get_graph_service"]
