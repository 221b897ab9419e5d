"""Service layer for the knowledge graph and its host integrations."""

from .asset_inventory import (
    AssetInventory,
    ContentFolderInventory,
    StaticAssetInventory,
    scan_broken_references,
    search_assets,
)
from .config import AppConfig, get_config, reload_config
from .coverage import CoverageClassifier
from .database import DatabaseService, init_database
from .exporter import export_page_markdown
from .graph_builder import build_graph
from .graph_engine import KnowledgeGraphEngine
from .graph_errors import (
    GraphEngineError,
    InvalidHopsError,
    PageNotFoundError,
    ProjectNotFoundError,
    UnknownGroupKeyError,
    UnknownGroupModeError,
    UnknownNodeError,
)
from .graph_search import GraphSearchIndex, search_nodes
from .graph_service import GraphService, get_graph_service
from .grouping import group_graph, group_keys
from .layout_cache import (
    FileKeyValueStore,
    InMemoryKeyValueStore,
    LayoutCache,
    SQLiteKeyValueStore,
)
from .layout_session import LayoutOracle, LayoutSession, LayoutState
from .neighborhood import neighborhood
from .project_store import ProjectStore
from .reference_parser import AssetRef, parse_asset_ref, parse_references

__all__ = [
    "AppConfig",
    "get_config",
    "reload_config",
    "DatabaseService",
    "init_database",
    "AssetInventory",
    "ContentFolderInventory",
    "StaticAssetInventory",
    "scan_broken_references",
    "search_assets",
    "CoverageClassifier",
    "export_page_markdown",
    "build_graph",
    "KnowledgeGraphEngine",
    "GraphEngineError",
    "InvalidHopsError",
    "PageNotFoundError",
    "ProjectNotFoundError",
    "UnknownGroupKeyError",
    "UnknownGroupModeError",
    "UnknownNodeError",
    "GraphSearchIndex",
    "search_nodes",
    "GraphService",
    "get_graph_service",
    "group_graph",
    "group_keys",
    "FileKeyValueStore",
    "InMemoryKeyValueStore",
    "LayoutCache",
    "SQLiteKeyValueStore",
    "LayoutOracle",
    "LayoutSession",
    "LayoutState",
    "neighborhood",
    "ProjectStore",
    "AssetRef",
    "parse_asset_ref",
    "parse_references",
]
