from pathlib import Path

import pytest

from backend.src.services import config as config_module


@pytest.fixture(autouse=True)
def restore_config_cache():
    """
    Ensure configuration cache is cleared between tests.
    """
    config_module.reload_config()
    yield
    config_module.reload_config()


def test_get_config_defaults(monkeypatch, tmp_path: Path) -> None:
    monkeypatch.setenv("CODEX_DATA_DIR", str(tmp_path / "data"))
    for key in (
        "CODEX_DB_PATH",
        "CONTENT_MOUNT_ROOT",
        "GRAPH_SEARCH_LIMIT",
        "LAYOUT_ALPHA_THRESHOLD",
        "DEFAULT_FOCUS_HOPS",
    ):
        monkeypatch.delenv(key, raising=False)

    cfg = config_module.reload_config()

    assert cfg.data_dir == (tmp_path / "data").resolve()
    assert cfg.data_dir.is_dir()
    assert cfg.layout_db_path == cfg.data_dir / "graph.db"
    assert cfg.projects_file == cfg.data_dir / "projects.json"
    assert cfg.content_mount_root == "/Game"
    assert cfg.search_result_limit == 8
    assert cfg.layout_alpha_threshold == 0.01
    assert cfg.default_focus_hops == 1


def test_get_config_reads_overrides(monkeypatch, tmp_path: Path) -> None:
    monkeypatch.setenv("CODEX_DATA_DIR", str(tmp_path))
    monkeypatch.setenv("CODEX_DB_PATH", str(tmp_path / "cache" / "layouts.db"))
    monkeypatch.setenv("CONTENT_MOUNT_ROOT", "/Content/")
    monkeypatch.setenv("GRAPH_SEARCH_LIMIT", "12")
    monkeypatch.setenv("CORS_ORIGINS", "http://a.test, http://b.test,")

    cfg = config_module.reload_config()

    assert cfg.layout_db_path == (tmp_path / "cache" / "layouts.db").resolve()
    assert cfg.content_mount_root == "/Content"
    assert cfg.search_result_limit == 12
    assert cfg.cors_origins == ["http://a.test", "http://b.test"]


def test_get_config_rejects_unrooted_mount(monkeypatch, tmp_path: Path) -> None:
    monkeypatch.setenv("CODEX_DATA_DIR", str(tmp_path))
    monkeypatch.setenv("CONTENT_MOUNT_ROOT", "Game")

    with pytest.raises(ValueError):
        config_module.reload_config()


def test_get_config_rejects_out_of_range_threshold(monkeypatch, tmp_path: Path) -> None:
    monkeypatch.setenv("CODEX_DATA_DIR", str(tmp_path))
    monkeypatch.setenv("LAYOUT_ALPHA_THRESHOLD", "1.5")

    with pytest.raises(ValueError):
        config_module.reload_config()
