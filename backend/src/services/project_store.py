"""JSON-file persistence for documentation projects."""

from __future__ import annotations

from datetime import datetime, timezone
import json
import logging
from pathlib import Path
from typing import Any, Dict, List
import uuid

from pydantic import ValidationError

from ..models.project import DocPage, PageUpdate, Project
from .config import AppConfig, get_config
from .graph_errors import PageNotFoundError, ProjectNotFoundError

logger = logging.getLogger(__name__)


def _utcnow_iso() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="seconds")


def migrate_project(raw: Dict[str, Any]) -> Dict[str, Any]:
    """
    Upgrade a stored project to the id-keyed page layout.

    Older files kept ``pages`` as a list; those pages are re-keyed by id and a
    flat folder structure with one entry per page is generated.
    """
    pages = raw.get("pages")
    if not isinstance(pages, list):
        return raw

    keyed: Dict[str, Any] = {}
    structure: List[Dict[str, Any]] = []
    for page in pages:
        if not isinstance(page, dict) or not page.get("id"):
            continue
        keyed[page["id"]] = page
        structure.append(
            {
                "id": str(uuid.uuid4()),
                "name": page.get("title", ""),
                "type": "page",
                "pageId": page["id"],
            }
        )
    return {**raw, "pages": keyed, "structure": structure}


class ProjectStore:
    """Read and write ``projects.json`` under the data directory."""

    def __init__(self, config: AppConfig | None = None, path: str | Path | None = None) -> None:
        self.config = config or get_config()
        self.path = Path(path) if path else self.config.projects_file

    def _read_raw(self) -> List[Dict[str, Any]]:
        if not self.path.exists():
            return []
        data = json.loads(self.path.read_text(encoding="utf-8"))
        if isinstance(data, dict):
            data = data.get("projects", [])
        if not isinstance(data, list):
            raise ValueError(f"{self.path} must hold a list of projects")
        return [item for item in data if isinstance(item, dict)]

    def list_projects(self) -> List[Project]:
        projects: List[Project] = []
        for raw in self._read_raw():
            try:
                projects.append(Project.model_validate(migrate_project(raw)))
            except ValidationError as exc:
                logger.warning(
                    "Skipping invalid project entry",
                    extra={"project_id": raw.get("id"), "errors": exc.error_count()},
                )
        return projects

    def get_project(self, project_id: str) -> Project:
        for project in self.list_projects():
            if project.id == project_id:
                return project
        raise ProjectNotFoundError(
            f"Project not found: {project_id}", details={"project_id": project_id}
        )

    def save_projects(self, projects: List[Project]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        payload = [project.model_dump(mode="json", by_alias=True) for project in projects]
        tmp_path = self.path.with_suffix(".tmp")
        tmp_path.write_text(json.dumps(payload, indent=2), encoding="utf-8")
        tmp_path.replace(self.path)
        logger.info(
            "Projects saved",
            extra={"path": str(self.path), "project_count": len(projects)},
        )

    def upsert_project(self, project: Project) -> Project:
        projects = self.list_projects()
        for index, existing in enumerate(projects):
            if existing.id == project.id:
                projects[index] = project
                break
        else:
            projects.append(project)
        self.save_projects(projects)
        return project

    def update_page(self, project_id: str, page_id: str, update: PageUpdate) -> DocPage:
        """Apply a partial update to one page and persist the project."""
        project = self.get_project(project_id)
        page = project.pages.get(page_id)
        if page is None:
            raise PageNotFoundError(
                f"Page not found: {page_id}",
                details={"project_id": project_id, "page_id": page_id},
            )

        changes = update.model_dump(exclude_unset=True, by_alias=True)
        merged = page.model_dump(by_alias=True)
        merged.update(changes)
        metadata = dict(merged.get("metadata") or {})
        metadata["updatedAt"] = _utcnow_iso()
        merged["metadata"] = metadata

        updated = DocPage.model_validate(merged)
        project.pages[page_id] = updated
        self.upsert_project(project)
        return updated


__all__ = ["ProjectStore", "migrate_project"]
