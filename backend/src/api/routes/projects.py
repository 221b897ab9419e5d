"""HTTP API routes for project and page operations."""

from __future__ import annotations

from typing import Annotated, List

from fastapi import APIRouter, Depends
from fastapi.responses import PlainTextResponse

from ...models.project import DocPage, PageUpdate, Project
from ...services.exporter import export_page_markdown
from ...services.graph_errors import PageNotFoundError
from ...services.graph_service import GraphService, get_graph_service

router = APIRouter()

GraphServiceDep = Annotated[GraphService, Depends(get_graph_service)]


@router.get("/api/projects", response_model=List[Project])
async def list_projects(graph_service: GraphServiceDep) -> List[Project]:
    """List all stored projects."""
    return graph_service.store.list_projects()


@router.get("/api/projects/{project_id}", response_model=Project)
async def get_project(project_id: str, graph_service: GraphServiceDep) -> Project:
    return graph_service.store.get_project(project_id)


@router.put("/api/projects/{project_id}/pages/{page_id}", response_model=DocPage)
async def update_page(
    project_id: str, page_id: str, update: PageUpdate, graph_service: GraphServiceDep
) -> DocPage:
    """Apply a partial page update; the project graph is rebuilt on next read."""
    return graph_service.update_page(project_id, page_id, update)


@router.get(
    "/api/projects/{project_id}/pages/{page_id}/export",
    response_class=PlainTextResponse,
)
async def export_page(project_id: str, page_id: str, graph_service: GraphServiceDep) -> str:
    """Export one page as Markdown."""
    project = graph_service.store.get_project(project_id)
    page = project.pages.get(page_id)
    if page is None:
        raise PageNotFoundError(
            f"Page not found: {page_id}",
            details={"project_id": project_id, "page_id": page_id},
        )
    return export_page_markdown(page)


__all__ = ["router"]
