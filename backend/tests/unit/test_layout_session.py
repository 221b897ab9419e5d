from backend.src.models.graph import GraphNode, GroupMode, NodeKind
from backend.src.models.layout import LayoutKey, Position
from backend.src.services.layout_cache import InMemoryKeyValueStore, LayoutCache
from backend.src.services.layout_session import LayoutSession, LayoutState

KEY = LayoutKey("proj", None, GroupMode.NONE)


class RecordingStore(InMemoryKeyValueStore):
    def __init__(self) -> None:
        super().__init__()
        self.writes = 0

    def set(self, namespace: str, payload: bytes) -> None:
        self.writes += 1
        super().set(namespace, payload)


class StubOracle:
    def __init__(self) -> None:
        self.stops = 0

    def start(self, nodes, edges, on_tick) -> None:
        pass

    def stop(self) -> None:
        self.stops += 1


def _session(store: RecordingStore, oracle=None, state=None) -> LayoutSession:
    return LayoutSession(
        key=KEY,
        state=state if state is not None else LayoutState(),
        cache=LayoutCache(store),
        node_ids=["A", "B"],
        alpha_threshold=0.01,
        oracle=oracle,
    )


def test_saves_once_when_alpha_drops_below_threshold() -> None:
    store = RecordingStore()
    oracle = StubOracle()
    session = _session(store, oracle)

    assert session.on_tick(0.5, {"A": Position(1.0, 1.0)}) is False
    assert store.writes == 0

    assert session.on_tick(0.005, {"A": Position(2.0, 2.0), "B": Position(3.0, 3.0)}) is True
    assert session.on_tick(0.001, {"A": Position(9.0, 9.0)}) is False

    assert store.writes == 1
    assert oracle.stops == 1
    assert LayoutCache(store).load(KEY) == {"A": Position(2.0, 2.0), "B": Position(3.0, 3.0)}


def test_alpha_equal_to_threshold_does_not_save() -> None:
    store = RecordingStore()
    session = _session(store)

    assert session.on_tick(0.01, {"A": Position(1.0, 1.0)}) is False
    assert store.writes == 0


def test_ticks_ignore_nodes_outside_render() -> None:
    store = RecordingStore()
    state = LayoutState()
    session = _session(store, state=state)

    session.on_tick(0.5, {"A": Position(1.0, 1.0), "ghost": Position(5.0, 5.0)})

    assert state.get("A") == Position(1.0, 1.0)
    assert state.get("ghost") is None


def test_cancelled_session_ignores_ticks() -> None:
    store = RecordingStore()
    oracle = StubOracle()
    session = _session(store, oracle)

    session.cancel()
    session.cancel()

    assert session.on_tick(0.0, {"A": Position(1.0, 1.0)}) is False
    assert store.writes == 0
    assert oracle.stops == 1


def test_layout_state_apply_seeds_known_nodes() -> None:
    state = LayoutState({"A": Position(4.0, 5.0)})
    nodes = [
        GraphNode(id="A", title="A", kind=NodeKind.PAGE),
        GraphNode(id="B", title="B", kind=NodeKind.PAGE, x=7.0, y=7.0),
    ]

    seeded = state.apply(nodes)

    assert (seeded[0].x, seeded[0].y) == (4.0, 5.0)
    assert (seeded[1].x, seeded[1].y) == (None, None)
    assert nodes[0].x is None
