"""HTTP API routes for the project knowledge graph."""

from __future__ import annotations

from typing import Annotated, List, Optional

from fastapi import APIRouter, Depends, Query

from ...models.graph import (
    CollapseRequest,
    FocusResult,
    GraphNode,
    GroupModeRequest,
    RenderedGraph,
)
from ...models.layout import LayoutSnapshot, LayoutTick
from ...services.graph_service import GraphService, get_graph_service
from ...services.neighborhood import focus_edges

router = APIRouter()

GraphServiceDep = Annotated[GraphService, Depends(get_graph_service)]


@router.get("/api/projects/{project_id}/graph", response_model=RenderedGraph)
async def get_graph(
    project_id: str,
    graph_service: GraphServiceDep,
    scope_root: Optional[str] = Query(
        None, description="Asset folder (or canonical reference) restricting the graph"
    ),
) -> RenderedGraph:
    """Rebuild and return the rendered graph of a project."""
    engine = graph_service.engine_for(project_id)
    return engine.build_graph(scope_root)


@router.put("/api/projects/{project_id}/graph/mode", response_model=RenderedGraph)
async def set_group_mode(
    project_id: str, request: GroupModeRequest, graph_service: GraphServiceDep
) -> RenderedGraph:
    engine = graph_service.engine_for(project_id)
    return engine.set_group_mode(request.mode)


@router.put("/api/projects/{project_id}/graph/collapsed", response_model=RenderedGraph)
async def set_collapsed(
    project_id: str, request: CollapseRequest, graph_service: GraphServiceDep
) -> RenderedGraph:
    """Collapse or expand one group of the current grouping mode."""
    engine = graph_service.engine_for(project_id)
    return engine.set_collapsed(request.key, request.collapsed)


@router.get("/api/projects/{project_id}/graph/focus", response_model=FocusResult)
async def focus_graph(
    project_id: str,
    graph_service: GraphServiceDep,
    node_id: str = Query(..., min_length=1),
    hops: Optional[int] = Query(None, description="Defaults to DEFAULT_FOCUS_HOPS"),
) -> FocusResult:
    """Node ids within ``hops`` undirected steps of ``node_id``."""
    engine = graph_service.engine_for(project_id)
    hop_count = engine.config.default_focus_hops if hops is None else hops
    focus_set = engine.focus(node_id, hop_count)
    ordered = [node.id for node in engine.rendered.nodes if node.id in focus_set]
    return FocusResult(
        node_id=node_id,
        hops=hop_count,
        node_ids=ordered,
        edges=focus_edges(engine.rendered.edges, focus_set),
    )


@router.get("/api/projects/{project_id}/graph/search", response_model=List[GraphNode])
async def search_graph(
    project_id: str,
    graph_service: GraphServiceDep,
    q: str = Query("", description="Case-insensitive substring"),
    limit: Optional[int] = Query(None, ge=1, le=100),
) -> List[GraphNode]:
    engine = graph_service.engine_for(project_id)
    return engine.search(q, limit=limit)


@router.post("/api/projects/{project_id}/graph/layout/tick")
async def record_layout_tick(
    project_id: str, tick: LayoutTick, graph_service: GraphServiceDep
) -> dict:
    """Report positions from a layout oracle running in the client."""
    engine = graph_service.engine_for(project_id)
    saved = engine.record_layout_tick(tick.alpha, tick.positions)
    return {"saved": saved, "namespace": engine.layout_key.namespace}


@router.post("/api/projects/{project_id}/graph/layout/persist")
async def persist_layout(project_id: str, graph_service: GraphServiceDep) -> dict:
    engine = graph_service.engine_for(project_id)
    count = engine.persist_layout()
    return {"saved": count, "namespace": engine.layout_key.namespace}


@router.get("/api/projects/{project_id}/graph/layout", response_model=LayoutSnapshot)
async def get_layout(project_id: str, graph_service: GraphServiceDep) -> LayoutSnapshot:
    engine = graph_service.engine_for(project_id)
    return engine.layout_snapshot()


__all__ = ["router"]
