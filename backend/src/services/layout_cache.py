"""Persist and restore per-node graph positions across sessions."""

from __future__ import annotations

from datetime import datetime, timezone
import json
import logging
import math
from pathlib import Path
import sqlite3
from typing import Dict, Iterable, Mapping, Optional, Protocol, Union
from urllib.parse import quote

from ..models.graph import GraphNode
from ..models.layout import LayoutKey, Position
from .database import DatabaseService

logger = logging.getLogger(__name__)

PAYLOAD_VERSION = 1

LayoutSource = Union[Mapping[str, Position], Iterable[GraphNode]]


class KeyValueStore(Protocol):
    """Byte-addressable blob store backing the layout cache."""

    def get(self, namespace: str) -> Optional[bytes]: ...

    def set(self, namespace: str, payload: bytes) -> None: ...


def _utcnow_iso() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="seconds")


class InMemoryKeyValueStore:
    def __init__(self) -> None:
        self._data: Dict[str, bytes] = {}

    def get(self, namespace: str) -> Optional[bytes]:
        return self._data.get(namespace)

    def set(self, namespace: str, payload: bytes) -> None:
        self._data[namespace] = payload


class SQLiteKeyValueStore:
    """Blob store in the ``kv_store`` table of the layout database."""

    def __init__(self, db_service: DatabaseService | None = None) -> None:
        self.db_service = db_service or DatabaseService()
        self.db_service.initialize()

    def get(self, namespace: str) -> Optional[bytes]:
        conn = self.db_service.connect()
        try:
            row = conn.execute(
                "SELECT payload FROM kv_store WHERE namespace = ?",
                (namespace,),
            ).fetchone()
        finally:
            conn.close()
        if row is None:
            return None
        payload = row["payload"]
        return payload.encode("utf-8") if isinstance(payload, str) else bytes(payload)

    def set(self, namespace: str, payload: bytes) -> None:
        conn = self.db_service.connect()
        try:
            with conn:
                conn.execute(
                    """
                    INSERT INTO kv_store (namespace, payload, updated)
                    VALUES (?, ?, ?)
                    ON CONFLICT(namespace) DO UPDATE SET
                        payload = excluded.payload,
                        updated = excluded.updated
                    """,
                    (namespace, payload, _utcnow_iso()),
                )
        finally:
            conn.close()


class FileKeyValueStore:
    """One JSON file per namespace under ``root``.

    File names percent-encode the namespace so distinct namespaces never
    share a file.
    """

    def __init__(self, root: str | Path) -> None:
        self.root = Path(root)

    def _path(self, namespace: str) -> Path:
        return self.root / f"{quote(namespace, safe='')}.json"

    def get(self, namespace: str) -> Optional[bytes]:
        path = self._path(namespace)
        if not path.exists():
            return None
        return path.read_bytes()

    def set(self, namespace: str, payload: bytes) -> None:
        self.root.mkdir(parents=True, exist_ok=True)
        path = self._path(namespace)
        tmp_path = path.with_suffix(".tmp")
        tmp_path.write_bytes(payload)
        tmp_path.replace(path)


def _finite(value: object) -> Optional[float]:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    number = float(value)
    return number if math.isfinite(number) else None


def positions_from(source: LayoutSource) -> Dict[str, Position]:
    """Collect defined, finite positions from a mapping or from positioned nodes."""
    positions: Dict[str, Position] = {}
    if isinstance(source, Mapping):
        items = (
            (node_id, pos.get("x"), pos.get("y")) if isinstance(pos, Mapping) else (node_id, pos[0], pos[1])
            for node_id, pos in source.items()
        )
    else:
        items = ((node.id, node.x, node.y) for node in source)
    for node_id, raw_x, raw_y in items:
        x, y = _finite(raw_x), _finite(raw_y)
        if x is None or y is None:
            continue
        positions[node_id] = Position(x, y)
    return positions


def encode_positions(positions: Mapping[str, Position]) -> bytes:
    payload = {
        "version": PAYLOAD_VERSION,
        "positions": {node_id: [pos.x, pos.y] for node_id, pos in positions.items()},
    }
    return json.dumps(payload, sort_keys=True).encode("utf-8")


def decode_positions(payload: bytes) -> Dict[str, Position]:
    """Decode a cache payload; raises ValueError when it is not a layout payload."""
    data = json.loads(payload.decode("utf-8"))
    if not isinstance(data, dict) or not isinstance(data.get("positions"), dict):
        raise ValueError("Layout payload must be an object with a 'positions' object")
    positions: Dict[str, Position] = {}
    for node_id, coords in data["positions"].items():
        if not isinstance(coords, (list, tuple)) or len(coords) != 2:
            continue
        x, y = _finite(coords[0]), _finite(coords[1])
        if x is None or y is None:
            continue
        positions[str(node_id)] = Position(x, y)
    return positions


class LayoutCache:
    """Load/save node positions under a (project, scope, group mode) namespace."""

    def __init__(self, store: KeyValueStore | None = None) -> None:
        self.store: KeyValueStore = store or InMemoryKeyValueStore()

    def load(self, key: LayoutKey) -> Dict[str, Position]:
        """Cached positions for ``key``; a missing or unreadable entry yields ``{}``."""
        namespace = key.namespace
        try:
            payload = self.store.get(namespace)
        except (OSError, sqlite3.Error) as exc:
            logger.warning("Layout cache read failed for %s: %s", namespace, exc)
            return {}
        if payload is None:
            return {}
        try:
            return decode_positions(payload)
        except (ValueError, UnicodeDecodeError) as exc:
            logger.warning("Discarding unparsable layout cache for %s: %s", namespace, exc)
            return {}

    def save(self, key: LayoutKey, source: LayoutSource) -> int:
        """Persist every defined position in ``source``; returns how many were written."""
        positions = positions_from(source)
        self.store.set(key.namespace, encode_positions(positions))
        logger.info(
            "Layout saved",
            extra={"namespace": key.namespace, "node_count": len(positions)},
        )
        return len(positions)


__all__ = [
    "KeyValueStore",
    "InMemoryKeyValueStore",
    "SQLiteKeyValueStore",
    "FileKeyValueStore",
    "positions_from",
    "encode_positions",
    "decode_positions",
    "LayoutCache",
]
