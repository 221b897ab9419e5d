import json
from pathlib import Path

import pytest

from backend.src.models.project import PageUpdate
from backend.src.services.config import AppConfig
from backend.src.services.graph_errors import PageNotFoundError, ProjectNotFoundError
from backend.src.services.project_store import ProjectStore
from backend.src.services.seed import DEMO_PROJECT_ID, seed_demo_project


@pytest.fixture
def store(tmp_path: Path) -> ProjectStore:
    return ProjectStore(AppConfig(data_dir=tmp_path))


def _write(store: ProjectStore, payload) -> None:
    store.path.write_text(json.dumps(payload), encoding="utf-8")


def test_missing_file_lists_nothing(store: ProjectStore) -> None:
    assert store.list_projects() == []


def test_reads_wrapped_project_list(store: ProjectStore) -> None:
    _write(store, {"projects": [{"id": "p1", "name": "One", "pages": {}}]})

    assert [project.id for project in store.list_projects()] == ["p1"]


def test_migrates_legacy_page_arrays(store: ProjectStore) -> None:
    _write(
        store,
        [
            {
                "id": "p1",
                "name": "Legacy",
                "pages": [
                    {"id": "a", "title": "Alpha", "markdownBody": "[[Beta]]"},
                    {"id": "b", "title": "Beta"},
                ],
            }
        ],
    )

    project = store.get_project("p1")

    assert list(project.pages) == ["a", "b"]
    assert [node.page_id for node in project.structure] == ["a", "b"]
    assert [node.name for node in project.structure] == ["Alpha", "Beta"]
    assert all(node.type == "page" for node in project.structure)


def test_invalid_entries_are_skipped(store: ProjectStore) -> None:
    _write(store, [{"id": "p1", "name": "Ok"}, {"name": "no id"}, "junk"])

    assert [project.id for project in store.list_projects()] == ["p1"]


def test_bad_page_fields_do_not_drop_the_project(store: ProjectStore) -> None:
    _write(
        store,
        [
            {
                "id": "p1",
                "name": "Messy",
                "pages": {
                    "a": {"id": "a", "title": "Alpha"},
                    "b": {
                        "id": "b",
                        "title": "Beta",
                        "category": None,
                        "metadata": {"documentsAsset": 42},
                    },
                    "c": {"title": "no id"},
                },
            }
        ],
    )

    project = store.get_project("p1")

    assert list(project.pages) == ["a", "b"]
    assert project.pages["b"].category == "General"
    assert project.pages["b"].metadata.documents_asset is None


def test_get_project_unknown_id(store: ProjectStore) -> None:
    with pytest.raises(ProjectNotFoundError):
        store.get_project("missing")


def test_update_page_round_trip(store: ProjectStore) -> None:
    seed_demo_project(store)

    updated = store.update_page(
        DEMO_PROJECT_ID,
        "getting-started",
        PageUpdate(markdownBody="Now see [[Patrol Routes]]", tags=["Guide", "Guide", " New "]),
    )

    assert updated.markdown_body == "Now see [[Patrol Routes]]"
    assert updated.tags == ["Guide", "New"]
    assert updated.metadata.updated_at is not None

    reloaded = store.get_project(DEMO_PROJECT_ID).pages["getting-started"]
    assert reloaded.markdown_body == "Now see [[Patrol Routes]]"
    assert reloaded.title == "Getting Started"


def test_update_page_unknown_page(store: ProjectStore) -> None:
    seed_demo_project(store)

    with pytest.raises(PageNotFoundError):
        store.update_page(DEMO_PROJECT_ID, "nope", PageUpdate(title="x"))


def test_seed_only_runs_on_empty_store(store: ProjectStore) -> None:
    assert seed_demo_project(store) is True
    assert seed_demo_project(store) is False

    project = store.get_project(DEMO_PROJECT_ID)
    combat = project.pages["combat-system"]
    assert [block.type for block in combat.blocks] == ["text", "asset", "link", "steps"]


def test_upsert_replaces_existing(store: ProjectStore) -> None:
    seed_demo_project(store)
    project = store.get_project(DEMO_PROJECT_ID)

    store.upsert_project(project.model_copy(update={"name": "Renamed"}))

    assert [p.name for p in store.list_projects()] == ["Renamed"]
