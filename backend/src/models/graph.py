"""Graph data models."""

from __future__ import annotations

from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class NodeKind(str, Enum):
    PAGE = "page"
    ASSET = "asset"
    GROUP = "group"


class EdgeKind(str, Enum):
    DOC = "doc"
    ASSET_REF = "assetRef"
    BLUEPRINT_REF = "blueprintRef"


class DocStatus(str, Enum):
    DOCUMENTED = "documented"
    MISSING = "missing"
    BROKEN = "broken"


class GroupMode(str, Enum):
    NONE = "none"
    CATEGORY = "category"
    TAG = "tag"
    FOLDER = "folder"


class GraphNode(BaseModel):
    """A page, referenced asset, or collapsed group in the graph."""

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "id": "asset:/Game/NPC/BP_Guard.BP_Guard",
                "title": "BP_Guard",
                "kind": "asset",
                "tags": ["Asset"],
                "category": "NPC",
                "asset_ref": "Blueprint'/Game/NPC/BP_Guard.BP_Guard'",
                "asset_type": "Blueprint",
                "asset_path": "/Game/NPC/BP_Guard",
                "asset_name": "BP_Guard",
                "doc_status": "missing",
            }
        }
    )

    id: str = Field(..., min_length=1, description="Page id, asset:<path>.<name>, or group:<mode>:<key>")
    title: str = Field(..., description="Display label")
    kind: NodeKind
    tags: List[str] = Field(default_factory=list)
    category: Optional[str] = Field(None, description="Page category or asset folder bucket")
    asset_ref: Optional[str] = Field(None, description="Canonical Type'/Path.Name' reference")
    asset_type: Optional[str] = None
    asset_path: Optional[str] = None
    asset_name: Optional[str] = None
    doc_status: Optional[DocStatus] = None
    linked_page_id: Optional[str] = Field(None, description="Page documenting this asset")
    group_key: Optional[str] = Field(None, description="Group membership key for the current render")
    member_count: Optional[int] = Field(None, ge=1, description="Collapsed member count (group nodes)")
    x: Optional[float] = None
    y: Optional[float] = None


class GraphEdge(BaseModel):
    """A directed, typed, weighted connection between two nodes."""

    source: str = Field(..., description="ID of the source node")
    target: str = Field(..., description="ID of the target node")
    kind: EdgeKind
    weight: int = Field(default=1, ge=1, description="Number of raw edges folded into this one")


class GraphModel(BaseModel):
    """Raw node/edge set derived from a page corpus."""

    nodes: List[GraphNode] = Field(default_factory=list)
    edges: List[GraphEdge] = Field(default_factory=list)


class CoverageStats(BaseModel):
    """Documentation coverage counts for the asset nodes of a graph."""

    inventory_total: Optional[int] = Field(None, ge=0, description="Assets known to the inventory")
    referenced: int = Field(0, ge=0)
    documented: int = Field(0, ge=0)
    missing: int = Field(0, ge=0)
    broken: int = Field(0, ge=0)
    coverage_ratio: float = Field(0.0, ge=0.0, le=1.0)


class RenderedGraph(BaseModel):
    """The top-level payload handed to the renderer and layout oracle."""

    project_id: str
    scope_root: Optional[str] = None
    group_mode: GroupMode = GroupMode.NONE
    nodes: List[GraphNode]
    edges: List[GraphEdge]
    coverage: CoverageStats = Field(default_factory=CoverageStats)


class CollapseRequest(BaseModel):
    key: str = Field(..., min_length=1)
    collapsed: bool = True


class GroupModeRequest(BaseModel):
    mode: GroupMode


class FocusResult(BaseModel):
    node_id: str
    hops: int = Field(..., ge=0)
    node_ids: List[str]
    edges: List[GraphEdge] = Field(default_factory=list, description="Edges inside the focus set")


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
]
