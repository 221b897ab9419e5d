import math
from pathlib import Path

import pytest

from backend.src.models.graph import GraphNode, GroupMode, NodeKind
from backend.src.models.layout import LayoutKey, Position
from backend.src.services.database import DatabaseService
from backend.src.services.layout_cache import (
    FileKeyValueStore,
    InMemoryKeyValueStore,
    LayoutCache,
    SQLiteKeyValueStore,
    decode_positions,
)

KEY = LayoutKey("proj", None, GroupMode.NONE)


@pytest.fixture(params=["memory", "sqlite", "file"])
def cache(request, tmp_path: Path) -> LayoutCache:
    if request.param == "memory":
        return LayoutCache(InMemoryKeyValueStore())
    if request.param == "sqlite":
        return LayoutCache(SQLiteKeyValueStore(DatabaseService(tmp_path / "graph.db")))
    return LayoutCache(FileKeyValueStore(tmp_path / "layouts"))


def test_namespace_format() -> None:
    assert KEY.namespace == "layout:proj:all:none"
    assert LayoutKey("proj", "/Game/NPC", GroupMode.FOLDER).namespace == (
        "layout:proj:/Game/NPC:folder"
    )


def test_round_trip_within_tolerance(cache: LayoutCache) -> None:
    positions = {"A": Position(1.25, -3.5), "asset:/Game/NPC/BP_Guard.BP_Guard": Position(0.1, 2e6)}

    assert cache.save(KEY, positions) == 2
    loaded = cache.load(KEY)

    assert loaded.keys() == positions.keys()
    for node_id, pos in positions.items():
        assert math.isclose(loaded[node_id].x, pos.x, rel_tol=1e-9)
        assert math.isclose(loaded[node_id].y, pos.y, rel_tol=1e-9)


def test_save_skips_unpositioned_nodes(cache: LayoutCache) -> None:
    nodes = [
        GraphNode(id="A", title="A", kind=NodeKind.PAGE, x=1.0, y=2.0),
        GraphNode(id="B", title="B", kind=NodeKind.PAGE),
        GraphNode(id="C", title="C", kind=NodeKind.PAGE, x=3.0),
    ]

    assert cache.save(KEY, nodes) == 1
    assert cache.load(KEY) == {"A": Position(1.0, 2.0)}


def test_save_skips_non_finite_values(cache: LayoutCache) -> None:
    cache.save(KEY, {"A": Position(float("nan"), 1.0), "B": Position(2.0, 3.0)})

    assert cache.load(KEY) == {"B": Position(2.0, 3.0)}


def test_namespaces_are_isolated(cache: LayoutCache) -> None:
    other = LayoutKey("proj", None, GroupMode.CATEGORY)
    cache.save(KEY, {"A": Position(1.0, 1.0)})

    assert cache.load(other) == {}


def test_missing_entry_loads_empty(cache: LayoutCache) -> None:
    assert cache.load(KEY) == {}


def test_corrupt_payload_loads_empty() -> None:
    store = InMemoryKeyValueStore()
    cache = LayoutCache(store)

    store.set(KEY.namespace, b"{not json")
    assert cache.load(KEY) == {}

    store.set(KEY.namespace, b'{"version": 1, "positions": []}')
    assert cache.load(KEY) == {}

    store.set(KEY.namespace, b"\xff\xfe")
    assert cache.load(KEY) == {}


def test_decode_skips_bad_entries() -> None:
    payload = b'{"version": 1, "positions": {"A": [1, 2], "B": [1], "C": ["x", 2], "D": 5}}'

    assert decode_positions(payload) == {"A": Position(1.0, 2.0)}


def test_similar_scopes_do_not_share_entries(cache: LayoutCache) -> None:
    underscored = LayoutKey("proj", "/Game/A_B", GroupMode.NONE)
    nested = LayoutKey("proj", "/Game/A/B", GroupMode.NONE)

    cache.save(underscored, {"n": Position(1.0, 2.0)})

    assert cache.load(nested) == {}
    assert cache.load(underscored) == {"n": Position(1.0, 2.0)}


def test_file_store_encodes_namespace(tmp_path: Path) -> None:
    store = FileKeyValueStore(tmp_path)
    store.set("layout:proj:/Game/NPC:folder", b"{}")
    store.set("layout:proj:/Game/NPC_folder", b"[]")

    files = sorted(path.name for path in tmp_path.iterdir())
    assert files == [
        "layout%3Aproj%3A%2FGame%2FNPC%3Afolder.json",
        "layout%3Aproj%3A%2FGame%2FNPC_folder.json",
    ]
    assert store.get("layout:proj:/Game/NPC:folder") == b"{}"
