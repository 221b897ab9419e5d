"""Asset inventory collaborators: what assets a linked content project holds."""

from __future__ import annotations

import logging
from pathlib import Path
import time
from typing import Iterable, List, Optional, Protocol, Sequence

from ..models.project import DocPage
from .reference_parser import AssetRef, build_title_index, parse_page_references

logger = logging.getLogger(__name__)

ASSET_SUFFIXES = {".uasset": "Asset", ".umap": "Level"}
DEFAULT_SEARCH_LIMIT = 20


class AssetInventory(Protocol):
    def list_assets(self) -> List[AssetRef]: ...


class StaticAssetInventory:
    """Inventory over a fixed list of references."""

    def __init__(self, assets: Iterable[AssetRef] = ()) -> None:
        self._assets = list(assets)

    def list_assets(self) -> List[AssetRef]:
        return list(self._assets)


def search_assets(
    inventory: AssetInventory, query: str, limit: int = DEFAULT_SEARCH_LIMIT
) -> List[AssetRef]:
    """Case-insensitive substring match on asset name or path."""
    if not query or not query.strip():
        return []
    needle = query.strip().lower()
    matches = [
        asset
        for asset in inventory.list_assets()
        if needle in asset.name.lower() or needle in asset.path.lower()
    ]
    return matches[:limit]


class ContentFolderInventory:
    """
    Scan a linked project's ``Content`` folder for ``.uasset``/``.umap`` files.

    Paths are reported under the ``/Game`` mount, e.g. ``Content/NPC/BP_Guard.uasset``
    becomes ``Asset'/Game/NPC/BP_Guard.BP_Guard'``. The scan runs once, lazily,
    and can be refreshed with ``rescan``.
    """

    def __init__(self, project_root: str | Path, mount_root: str = "/Game") -> None:
        self.project_root = Path(project_root).expanduser()
        self.mount_root = mount_root.rstrip("/")
        self._assets: Optional[List[AssetRef]] = None

    @property
    def content_dir(self) -> Path:
        return self.project_root / "Content"

    def list_assets(self) -> List[AssetRef]:
        if self._assets is None:
            self._assets = self.rescan()
        return list(self._assets)

    def rescan(self) -> List[AssetRef]:
        start_time = time.time()
        assets: List[AssetRef] = []
        self._scan_directory(self.content_dir, self.mount_root, assets)
        self._assets = assets

        duration_ms = (time.time() - start_time) * 1000
        logger.info(
            "Content folder scanned",
            extra={
                "content_dir": str(self.content_dir),
                "asset_count": len(assets),
                "duration_ms": f"{duration_ms:.2f}",
            },
        )
        return list(assets)

    def _scan_directory(self, fs_path: Path, game_path: str, assets: List[AssetRef]) -> None:
        try:
            entries = sorted(fs_path.iterdir(), key=lambda entry: entry.name)
        except OSError as exc:
            # Missing or unreadable directories are skipped, not fatal.
            logger.warning("Skipping directory %s: %s", fs_path, exc)
            return

        for entry in entries:
            if entry.is_dir():
                self._scan_directory(entry, f"{game_path}/{entry.name}", assets)
                continue
            type_name = ASSET_SUFFIXES.get(entry.suffix.lower())
            if type_name is None:
                continue
            name = entry.stem
            assets.append(AssetRef(type_name=type_name, path=f"{game_path}/{name}", name=name))


def scan_broken_references(
    pages: Sequence[DocPage], inventory: AssetInventory
) -> List[str]:
    """
    Return canonical references used by ``pages`` whose (path, name) the
    inventory does not contain, in first-seen order.
    """
    known = {asset.identity for asset in inventory.list_assets()}
    title_index = build_title_index(pages)
    page_ids = {page.id for page in pages}

    broken: List[str] = []
    seen: set[str] = set()
    for page in pages:
        for ref in parse_page_references(page, title_index, page_ids):
            if ref.asset is None or ref.asset.identity in known:
                continue
            canonical = ref.asset.canonical
            if canonical not in seen:
                seen.add(canonical)
                broken.append(canonical)
    return broken


__all__ = [
    "AssetInventory",
    "StaticAssetInventory",
    "ContentFolderInventory",
    "search_assets",
    "scan_broken_references",
]
