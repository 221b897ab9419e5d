"""Pydantic models for data validation and serialization."""

from .graph import (
    CollapseRequest,
    CoverageStats,
    DocStatus,
    EdgeKind,
    FocusResult,
    GraphEdge,
    GraphModel,
    GraphNode,
    GroupMode,
    GroupModeRequest,
    NodeKind,
    RenderedGraph,
)
from .layout import LayoutKey, LayoutSnapshot, LayoutTick, Position
from .project import DocPage, FileSystemNode, PageMetadata, PageUpdate, Project, parse_block

__all__ = [
    "NodeKind",
    "EdgeKind",
    "DocStatus",
    "GroupMode",
    "GraphNode",
    "GraphEdge",
    "GraphModel",
    "CoverageStats",
    "RenderedGraph",
    "CollapseRequest",
    "GroupModeRequest",
    "FocusResult",
    "Position",
    "LayoutKey",
    "LayoutTick",
    "LayoutSnapshot",
    "DocPage",
    "FileSystemNode",
    "PageMetadata",
    "PageUpdate",
    "Project",
    "parse_block",
]
