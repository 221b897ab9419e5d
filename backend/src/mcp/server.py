"""FastMCP server exposing knowledge graph tools."""

from __future__ import annotations

import logging
import os
import time
from typing import Any, Dict, List, Optional

from dotenv import load_dotenv
from fastmcp import FastMCP
from pydantic import Field

# Load environment variables from .env file
load_dotenv()

from ..services.exporter import export_page_markdown
from ..services.graph_errors import PageNotFoundError
from ..services.graph_service import GraphService, get_graph_service
from ..services.grouping import coerce_group_mode
from ..services.neighborhood import focus_edges

logger = logging.getLogger(__name__)

mcp = FastMCP(
    "blueprint-codex-graph",
    instructions=(
        "Knowledge graph over Unreal Engine documentation pages. Nodes are pages (id = page id), "
        "assets (id = 'asset:<path>.<name>') and collapsed groups (id = 'group:<mode>:<key>'). "
        "Asset references use the editor's copy format Type'/Game/Path/Name.Name'. Edges are "
        "doc (page to page), assetRef and blueprintRef (page to asset). Asset nodes carry a "
        "doc_status of documented, missing or broken. scope_root restricts the graph to pages "
        "that reference assets under a folder such as /Game/NPC. Group modes: none, category, "
        "tag, folder."
    ),
)


def _log_tool(tool_name: str, start_time: float, **extra: Any) -> None:
    duration_ms = (time.time() - start_time) * 1000
    logger.info(
        "MCP tool called",
        extra={"tool_name": tool_name, **extra, "duration_ms": f"{duration_ms:.2f}"},
    )


def graph_payload(
    service: GraphService,
    project_id: str,
    scope_root: Optional[str] = None,
    group_mode: Optional[str] = None,
) -> Dict[str, Any]:
    """Render the project graph once, in ``group_mode`` when given."""
    start_time = time.time()
    engine = service.engine_for(project_id)

    if group_mode is not None:
        engine.group_mode = coerce_group_mode(group_mode)
    rendered = engine.build_graph(scope_root)

    _log_tool(
        "build_graph",
        start_time,
        project_id=project_id,
        scope_root=scope_root or "(all)",
        node_count=len(rendered.nodes),
        edge_count=len(rendered.edges),
    )
    return rendered.model_dump(mode="json")


def focus_payload(
    service: GraphService, project_id: str, node_id: str, hops: Optional[int] = None
) -> Dict[str, Any]:
    start_time = time.time()
    engine = service.engine_for(project_id)

    focus_set = engine.focus(node_id, hops)
    rendered = engine.rendered
    nodes = [node.model_dump(mode="json") for node in rendered.nodes if node.id in focus_set]
    edges = [edge.model_dump(mode="json") for edge in focus_edges(rendered.edges, focus_set)]

    _log_tool(
        "focus_graph",
        start_time,
        project_id=project_id,
        node_id=node_id,
        result_count=len(nodes),
    )
    return {"node_id": node_id, "nodes": nodes, "edges": edges}


def search_payload(
    service: GraphService, project_id: str, query: str, limit: int = 8
) -> List[Dict[str, Any]]:
    start_time = time.time()
    results = service.engine_for(project_id).search(query, limit=limit)

    _log_tool(
        "search_graph",
        start_time,
        project_id=project_id,
        query=query,
        result_count=len(results),
    )
    return [node.model_dump(mode="json") for node in results]


def coverage_payload(
    service: GraphService, project_id: str, scope_root: Optional[str] = None
) -> Dict[str, Any]:
    """Coverage totals plus the asset references in each documentation status."""
    start_time = time.time()
    engine = service.engine_for(project_id)

    rendered = engine.build_graph(scope_root)
    by_status: Dict[str, List[str]] = {"documented": [], "missing": [], "broken": []}
    for node in engine.raw.nodes:
        if node.doc_status is not None and node.asset_ref:
            by_status[node.doc_status.value].append(node.asset_ref)

    _log_tool(
        "coverage_report",
        start_time,
        project_id=project_id,
        missing=len(by_status["missing"]),
        broken=len(by_status["broken"]),
    )
    return {
        "coverage": rendered.coverage.model_dump(mode="json"),
        **by_status,
    }


def export_payload(service: GraphService, project_id: str, page_id: str) -> str:
    start_time = time.time()
    project = service.store.get_project(project_id)
    page = project.pages.get(page_id)
    if page is None:
        raise PageNotFoundError(
            f"Page not found: {page_id}",
            details={"project_id": project_id, "page_id": page_id},
        )

    markdown = export_page_markdown(page)
    _log_tool("export_page", start_time, project_id=project_id, page_id=page_id)
    return markdown


@mcp.tool(
    name="build_graph",
    description="Build the knowledge graph of a project, optionally scoped and grouped.",
)
def build_graph(
    project_id: str = Field(..., description="Project id from the project store."),
    scope_root: Optional[str] = Field(
        default=None,
        description="Asset folder or canonical reference limiting the graph (e.g. /Game/NPC).",
    ),
    group_mode: Optional[str] = Field(
        default=None, description="One of none, category, tag, folder."
    ),
) -> Dict[str, Any]:
    return graph_payload(get_graph_service(), project_id, scope_root, group_mode)


@mcp.tool(
    name="focus_graph",
    description="Return the nodes and edges within N undirected hops of a node.",
)
def focus_graph(
    project_id: str = Field(..., description="Project id from the project store."),
    node_id: str = Field(..., description="Rendered node id (page id, asset:..., group:...)."),
    hops: Optional[int] = Field(default=None, description="Hop count >= 0; defaults to 1."),
) -> Dict[str, Any]:
    return focus_payload(get_graph_service(), project_id, node_id, hops)


@mcp.tool(
    name="search_graph",
    description="Case-insensitive substring search over node titles, ids and asset paths.",
)
def search_graph(
    project_id: str = Field(..., description="Project id from the project store."),
    query: str = Field(..., description="Substring to look for; empty returns nothing."),
    limit: int = Field(default=8, ge=1, le=100, description="Maximum results."),
) -> List[Dict[str, Any]]:
    return search_payload(get_graph_service(), project_id, query, limit)


@mcp.tool(
    name="coverage_report",
    description="List undocumented and broken asset references with coverage totals.",
)
def coverage_report(
    project_id: str = Field(..., description="Project id from the project store."),
    scope_root: Optional[str] = Field(
        default=None, description="Optional asset folder limiting the report."
    ),
) -> Dict[str, Any]:
    return coverage_payload(get_graph_service(), project_id, scope_root)


@mcp.tool(name="export_page", description="Export one documentation page as Markdown.")
def export_page(
    project_id: str = Field(..., description="Project id from the project store."),
    page_id: str = Field(..., description="Page id inside the project."),
) -> str:
    return export_payload(get_graph_service(), project_id, page_id)


if __name__ == "__main__":
    transport = os.getenv("MCP_TRANSPORT", "stdio").strip().lower() or "stdio"

    # Configure HTTP transport with custom port if specified
    if transport == "http":
        port = int(os.getenv("MCP_PORT", "8001"))
        host = os.getenv("MCP_HOST", "127.0.0.1")
        logger.info(
            "Starting MCP server",
            extra={"transport": transport, "host": host, "port": port},
        )
        mcp.run(transport=transport, host=host, port=port)
    else:
        logger.info("Starting MCP server", extra={"transport": transport})
        mcp.run(transport=transport)
