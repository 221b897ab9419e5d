import pytest

from backend.src.models.graph import EdgeKind, GraphEdge, GraphNode, GroupMode, NodeKind
from backend.src.models.project import DocPage
from backend.src.services.graph_builder import build_graph
from backend.src.services.graph_errors import UnknownGroupModeError
from backend.src.services.grouping import group_graph, group_keys, key_of


def _page_node(node_id: str, category: str = "General", tags=None) -> GraphNode:
    return GraphNode(
        id=node_id, title=node_id, kind=NodeKind.PAGE, category=category, tags=tags or []
    )


def _edge(source: str, target: str, kind: EdgeKind = EdgeKind.DOC) -> GraphEdge:
    return GraphEdge(source=source, target=target, kind=kind)


@pytest.fixture
def raw_graph():
    pages = [
        DocPage(
            id="A",
            title="A",
            category="NPC",
            tags=["AI"],
            markdownBody="[[B]] [[C]] [[Blueprint'/Game/NPC/BP_Guard.BP_Guard']]",
        ),
        DocPage(id="B", title="B", category="NPC", markdownBody="[[C]]"),
        DocPage(
            id="C",
            title="C",
            category="Combat",
            tags=["Weapons", "AI"],
            markdownBody="[[StaticMesh'/Game/Props/SM_Crate.SM_Crate']]",
        ),
    ]
    model = build_graph(pages)
    return model.nodes, model.edges


def test_collapse_npc_scenario() -> None:
    nodes = [_page_node("A", "NPC"), _page_node("B", "NPC")]
    edges = [_edge("A", "B")]

    rendered, rendered_edges = group_graph(nodes, edges, GroupMode.CATEGORY, {"NPC"})

    assert len(rendered) == 1
    group = rendered[0]
    assert group.id == "group:category:NPC"
    assert group.kind is NodeKind.GROUP
    assert group.member_count == 2
    assert group.title == "NPC"
    assert rendered_edges == []


def test_key_of_by_mode() -> None:
    page = _page_node("A", "NPC", ["AI", "Actor"])
    untagged = _page_node("B", "")
    asset = GraphNode(
        id="asset:/Game/NPC/BP_Guard.BP_Guard",
        title="BP_Guard",
        kind=NodeKind.ASSET,
        category="NPC",
        asset_type="Blueprint",
    )

    assert key_of(page, GroupMode.NONE) == "all"
    assert key_of(page, GroupMode.CATEGORY) == "NPC"
    assert key_of(page, GroupMode.TAG) == "AI"
    assert key_of(untagged, GroupMode.TAG) == "Untagged"
    assert key_of(untagged, GroupMode.CATEGORY) == "General"
    assert key_of(asset, GroupMode.CATEGORY) == "Blueprint"
    assert key_of(asset, GroupMode.TAG) == "Blueprint"
    assert key_of(asset, GroupMode.FOLDER) == "NPC"
    assert key_of(page, "folder") == "NPC"


def test_unknown_group_mode_raises() -> None:
    with pytest.raises(UnknownGroupModeError):
        key_of(_page_node("A"), "galaxy")
    with pytest.raises(UnknownGroupModeError):
        group_graph([], [], "galaxy")


def test_no_collapse_in_none_mode(raw_graph) -> None:
    nodes, edges = raw_graph

    rendered, rendered_edges = group_graph(nodes, edges, GroupMode.NONE, {"all"})

    assert [node.id for node in rendered] == [node.id for node in nodes]
    assert all(node.group_key == "all" for node in rendered)
    assert len(rendered_edges) == len(edges)


@pytest.mark.parametrize("mode", [GroupMode.CATEGORY, GroupMode.TAG, GroupMode.FOLDER])
def test_collapse_conserves_members_and_integrity(raw_graph, mode) -> None:
    nodes, edges = raw_graph
    for key in group_keys(nodes, mode):
        rendered, rendered_edges = group_graph(nodes, edges, mode, {key})

        groups = [node for node in rendered if node.kind is NodeKind.GROUP]
        members = sum(group.member_count for group in groups)
        assert len(rendered) - len(groups) + members == len(nodes)

        ids = {node.id for node in rendered}
        assert len(ids) == len(rendered)
        assert all(edge.source in ids and edge.target in ids for edge in rendered_edges)
        assert all(edge.source != edge.target for edge in rendered_edges)


def test_collapse_conserves_edge_weight(raw_graph) -> None:
    nodes, edges = raw_graph
    collapsed = {"NPC"}

    rendered, rendered_edges = group_graph(nodes, edges, GroupMode.CATEGORY, collapsed)

    member_ids = {
        node.id for node in nodes if key_of(node, GroupMode.CATEGORY) in collapsed
    }
    internal = sum(
        edge.weight for edge in edges if edge.source in member_ids and edge.target in member_ids
    )
    assert sum(edge.weight for edge in rendered_edges) == sum(
        edge.weight for edge in edges
    ) - internal


def test_parallel_edges_merge_by_kind() -> None:
    nodes = [_page_node("A", "NPC"), _page_node("B", "NPC"), _page_node("C", "Combat")]
    edges = [_edge("A", "C"), _edge("B", "C"), _edge("A", "C", EdgeKind.ASSET_REF)]

    _, rendered_edges = group_graph(nodes, edges, GroupMode.CATEGORY, {"NPC"})

    merged = {(edge.source, edge.target, edge.kind): edge.weight for edge in rendered_edges}
    assert merged == {
        ("group:category:NPC", "C", EdgeKind.DOC): 2,
        ("group:category:NPC", "C", EdgeKind.ASSET_REF): 1,
    }


def test_group_node_takes_first_member_position(raw_graph) -> None:
    nodes, edges = raw_graph

    rendered, _ = group_graph(nodes, edges, GroupMode.CATEGORY, {"Combat"})

    assert [node.id for node in rendered][:3] == ["A", "B", "group:category:Combat"]


def test_grouping_is_idempotent(raw_graph) -> None:
    nodes, edges = raw_graph

    first = group_graph(nodes, edges, GroupMode.TAG, {"AI"})
    second = group_graph(nodes, edges, GroupMode.TAG, {"AI"})

    assert first == second


def test_group_keys_first_seen_order(raw_graph) -> None:
    nodes, _ = raw_graph

    assert group_keys(nodes, GroupMode.CATEGORY) == ["NPC", "Combat", "Blueprint", "StaticMesh"]
    assert group_keys(nodes, GroupMode.FOLDER) == ["NPC", "Combat", "Props"]
    assert group_keys(nodes, GroupMode.NONE) == ["all"]
