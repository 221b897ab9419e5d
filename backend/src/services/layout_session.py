"""Layout oracle contract and the one-shot checkpoint of a layout run."""

from __future__ import annotations

import logging
from typing import Callable, Dict, Mapping, Optional, Protocol, Sequence

from ..models.graph import GraphEdge, GraphNode
from ..models.layout import LayoutKey, Position
from .layout_cache import LayoutCache, positions_from

logger = logging.getLogger(__name__)

TickCallback = Callable[[float, Mapping[str, Position]], None]


class LayoutOracle(Protocol):
    """
    External force-directed positioning process.

    ``start`` hands over the rendered nodes (seeded ones carry ``x``/``y``)
    and reports progress through ``on_tick(alpha, positions)`` until
    ``stop`` is called.
    """

    def start(
        self,
        nodes: Sequence[GraphNode],
        edges: Sequence[GraphEdge],
        on_tick: TickCallback,
    ) -> None: ...

    def stop(self) -> None: ...


class LayoutState:
    """Positions by node id, kept apart from the graph model."""

    def __init__(self, positions: Optional[Mapping[str, Position]] = None) -> None:
        self.positions: Dict[str, Position] = dict(positions or {})

    def update(self, positions: Mapping[str, Position]) -> None:
        self.positions.update(positions_from(positions))

    def get(self, node_id: str) -> Optional[Position]:
        return self.positions.get(node_id)

    def apply(self, nodes: Sequence[GraphNode]) -> list[GraphNode]:
        """Copies of ``nodes`` seeded with known positions; unknown nodes stay unseeded."""
        seeded = []
        for node in nodes:
            position = self.positions.get(node.id)
            if position is None:
                seeded.append(node.model_copy(update={"x": None, "y": None}))
            else:
                seeded.append(node.model_copy(update={"x": position.x, "y": position.y}))
        return seeded

    def __len__(self) -> int:
        return len(self.positions)


class LayoutSession:
    """
    One build cycle's layout run.

    The first tick whose alpha drops below the threshold saves the layout
    and stops the oracle. Later ticks still update the in-memory state but
    never save again. A cancelled session ignores ticks.
    """

    def __init__(
        self,
        key: LayoutKey,
        state: LayoutState,
        cache: LayoutCache,
        node_ids: Sequence[str],
        alpha_threshold: float,
        oracle: Optional[LayoutOracle] = None,
    ) -> None:
        self.key = key
        self.state = state
        self.cache = cache
        self.node_ids = frozenset(node_ids)
        self.alpha_threshold = alpha_threshold
        self.oracle = oracle
        self.saved = False
        self.active = True

    def on_tick(self, alpha: float, positions: Mapping[str, Position]) -> bool:
        """Record a tick; returns True if this tick triggered the checkpoint save."""
        if not self.active:
            return False
        self.state.update({node_id: pos for node_id, pos in positions.items() if node_id in self.node_ids})
        if self.saved or alpha >= self.alpha_threshold:
            return False

        snapshot = {node_id: pos for node_id, pos in self.state.positions.items() if node_id in self.node_ids}
        self.cache.save(self.key, snapshot)
        self.saved = True
        logger.info(
            "Layout converged",
            extra={"namespace": self.key.namespace, "alpha": alpha, "node_count": len(snapshot)},
        )
        self._stop_oracle()
        return True

    def cancel(self) -> None:
        """Stop the oracle run without saving."""
        if not self.active:
            return
        self.active = False
        self._stop_oracle()

    def _stop_oracle(self) -> None:
        if self.oracle is not None:
            self.oracle.stop()


__all__ = ["TickCallback", "LayoutOracle", "LayoutState", "LayoutSession"]
