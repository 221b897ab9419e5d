from backend.src.models.graph import GraphNode, NodeKind
from backend.src.services.graph_search import GraphSearchIndex, search_nodes


def _nodes():
    return [
        GraphNode(id="combat-system", title="Combat System", kind=NodeKind.PAGE),
        GraphNode(
            id="asset:/Game/NPC/BP_Guard.BP_Guard",
            title="BP_Guard",
            kind=NodeKind.ASSET,
            asset_path="/Game/NPC/BP_Guard",
        ),
        GraphNode(id="guard-ai", title="Guard AI", kind=NodeKind.PAGE),
        GraphNode(id="patrol", title="Patrol Routes", kind=NodeKind.PAGE),
    ]


def test_title_prefix_ranks_before_infix_and_other_fields() -> None:
    results = search_nodes("guard", _nodes())

    assert [node.id for node in results] == ["guard-ai", "asset:/Game/NPC/BP_Guard.BP_Guard"]


def test_matches_asset_path_and_id() -> None:
    assert [node.title for node in search_nodes("/game/npc", _nodes())] == ["BP_Guard"]
    assert [node.title for node in search_nodes("PATROL", _nodes())] == ["Patrol Routes"]


def test_empty_query_returns_nothing() -> None:
    assert search_nodes("", _nodes()) == []
    assert search_nodes("   ", _nodes()) == []


def test_results_are_capped() -> None:
    nodes = [GraphNode(id=f"page-{i}", title=f"Page {i}", kind=NodeKind.PAGE) for i in range(20)]
    index = GraphSearchIndex(nodes)

    assert len(index.search("page")) == 8
    assert len(index.search("page", limit=3)) == 3
    assert index.search("page", limit=0) == []
