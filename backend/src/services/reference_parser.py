"""Extract page and asset references from page Markdown and canvas blocks."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
import logging
import re
from typing import Dict, Iterable, List, Mapping, Optional, Sequence

from pydantic import BaseModel

from ..models.graph import EdgeKind
from ..models.project import AssetBlock, DocPage, LinkBlock, parse_block

logger = logging.getLogger(__name__)

WIKILINK_PATTERN = re.compile(r"\[\[([^\[\]]+)\]\]")
# TypeName'/Some/Path.AssetName'
ASSET_REF_PATTERN = re.compile(r"([A-Za-z_][A-Za-z0-9_]*)'(/[^'.]*)\.([^'./]+)'")


class ReferenceTarget(str, Enum):
    PAGE = "page"
    ASSET = "asset"


@dataclass(frozen=True)
class AssetRef:
    """A parsed canonical asset reference."""

    type_name: str
    path: str
    name: str

    @property
    def canonical(self) -> str:
        return f"{self.type_name}'{self.path}.{self.name}'"

    @property
    def node_id(self) -> str:
        return f"asset:{self.path}.{self.name}"

    @property
    def identity(self) -> tuple[str, str]:
        return (self.path, self.name)

    @property
    def is_blueprint(self) -> bool:
        return self.type_name.lower() == "blueprint"

    @property
    def edge_kind(self) -> EdgeKind:
        return EdgeKind.BLUEPRINT_REF if self.is_blueprint else EdgeKind.ASSET_REF


@dataclass(frozen=True)
class Reference:
    """One outgoing reference found on a page."""

    target_kind: ReferenceTarget
    raw_ref: str
    edge_kind: EdgeKind
    target_id: str
    asset: Optional[AssetRef] = None


def parse_asset_ref(text: str | None) -> Optional[AssetRef]:
    """Parse ``Type'/Path.Name'``; anything else (including partial matches) gives None."""
    if not isinstance(text, str):
        return None
    match = ASSET_REF_PATTERN.fullmatch(text.strip())
    if match is None:
        return None
    type_name, path, name = match.groups()
    if path == "/" or "//" in path or path.endswith("/"):
        return None
    return AssetRef(type_name=type_name, path=path, name=name)


def normalize_title(title: str | None) -> str:
    if not isinstance(title, str):
        return ""
    return title.strip().lower()


def build_title_index(pages: Iterable[DocPage]) -> Dict[str, str]:
    """Map lower-cased page titles to page ids; the first page with a title wins."""
    index: Dict[str, str] = {}
    for page in pages:
        key = normalize_title(page.title)
        if key and key not in index:
            index[key] = page.id
    return index


def extract_wikilinks(body: str | None) -> List[str]:
    """Return wikilink targets (text before any ``|``) in order of appearance."""
    targets: List[str] = []
    for match in WIKILINK_PATTERN.finditer(body or ""):
        target = match.group(1).split("|", 1)[0].strip()
        if target:
            targets.append(target)
    return targets


def _asset_reference(asset: AssetRef, raw_ref: str) -> Reference:
    return Reference(
        target_kind=ReferenceTarget.ASSET,
        raw_ref=raw_ref,
        edge_kind=asset.edge_kind,
        target_id=asset.node_id,
        asset=asset,
    )


def _page_reference(page_id: str, raw_ref: str) -> Reference:
    return Reference(
        target_kind=ReferenceTarget.PAGE,
        raw_ref=raw_ref,
        edge_kind=EdgeKind.DOC,
        target_id=page_id,
    )


def parse_references(
    markdown: str | None,
    blocks: Sequence[object],
    title_index: Mapping[str, str],
    page_ids: Iterable[str] | Mapping[str, object],
) -> List[Reference]:
    """
    Extract typed references from one page.

    Markdown wikilinks come first in order of appearance, followed by canvas
    block references in block order. Asset references are recognised before
    the page-title fallback; unresolvable or malformed references are skipped.
    """
    known_pages = page_ids if isinstance(page_ids, (set, frozenset, dict)) else set(page_ids)
    references: List[Reference] = []

    for target in extract_wikilinks(markdown):
        asset = parse_asset_ref(target)
        if asset is not None:
            references.append(_asset_reference(asset, target))
            continue
        page_id = title_index.get(normalize_title(target))
        if page_id is None:
            logger.debug("Unresolved wikilink skipped", extra={"link_text": target})
            continue
        references.append(_page_reference(page_id, target))

    for raw_block in blocks or ():
        block = raw_block if isinstance(raw_block, BaseModel) else parse_block(raw_block)
        if isinstance(block, AssetBlock):
            asset = parse_asset_ref(block.content.reference)
            if asset is not None:
                references.append(_asset_reference(asset, block.content.reference))
        elif isinstance(block, LinkBlock):
            if block.content.page_id in known_pages:
                references.append(_page_reference(block.content.page_id, block.content.page_id))

    return references


def parse_page_references(
    page: DocPage, title_index: Mapping[str, str], page_ids: Iterable[str] | Mapping[str, object]
) -> List[Reference]:
    return parse_references(page.markdown_body, page.blocks, title_index, page_ids)


__all__ = [
    "WIKILINK_PATTERN",
    "ASSET_REF_PATTERN",
    "ReferenceTarget",
    "AssetRef",
    "Reference",
    "parse_asset_ref",
    "normalize_title",
    "build_title_index",
    "extract_wikilinks",
    "parse_references",
    "parse_page_references",
]
