"""Project, page and canvas block models."""

from __future__ import annotations

import logging
from enum import Enum
from typing import Annotated, Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, ValidationError, field_validator

logger = logging.getLogger(__name__)


class Pin(BaseModel):
    """Connection handle on a canvas block."""

    id: str
    type: Literal["source", "target"]
    label: Optional[str] = None


class _Content(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class _BlockBase(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str
    x: float = 0.0
    y: float = 0.0
    width: float = 0.0
    height: float = 0.0
    pins: Optional[List[Pin]] = None


class TextContent(_Content):
    text: str
    font_size: Optional[float] = Field(None, alias="fontSize")


class TextBlock(_BlockBase):
    type: Literal["text"]
    content: Union[str, TextContent]

    @property
    def text(self) -> str:
        return self.content if isinstance(self.content, str) else self.content.text


class StepsBlock(_BlockBase):
    type: Literal["steps"]
    content: List[str]


class MediaContent(_Content):
    label: str
    file_path: str = Field(..., alias="filePath")
    kind: Literal["image", "video"]


class MediaBlock(_BlockBase):
    type: Literal["media"]
    content: MediaContent


class BlueprintContent(_Content):
    blueprint_string: str = Field(..., alias="blueprintString")


class BlueprintBlock(_BlockBase):
    type: Literal["blueprint"]
    content: BlueprintContent


class BlueprintModalBlock(_BlockBase):
    type: Literal["blueprint-modal"]
    content: BlueprintContent


class LinkContent(_Content):
    page_id: str = Field(..., alias="pageId")
    title: str = ""


class LinkBlock(_BlockBase):
    type: Literal["link"]
    content: LinkContent


class CodeContent(_Content):
    code: str
    language: str = ""


class CodeBlock(_BlockBase):
    type: Literal["code"]
    content: CodeContent


class AssetContent(_Content):
    reference: str


class AssetBlock(_BlockBase):
    type: Literal["asset"]
    content: AssetContent


class UrlContent(_Content):
    url: str
    title: Optional[str] = None
    description: Optional[str] = None
    image_url: Optional[str] = Field(None, alias="imageUrl")


class YoutubeBlock(_BlockBase):
    type: Literal["youtube"]
    content: UrlContent


class WebsiteBlock(_BlockBase):
    type: Literal["website"]
    content: UrlContent


Block = Annotated[
    Union[
        TextBlock,
        StepsBlock,
        MediaBlock,
        BlueprintBlock,
        BlueprintModalBlock,
        LinkBlock,
        CodeBlock,
        AssetBlock,
        YoutubeBlock,
        WebsiteBlock,
    ],
    Field(discriminator="type"),
]

_BLOCK_ADAPTER: TypeAdapter[Block] = TypeAdapter(Block)


def parse_block(raw: Any) -> Optional[Block]:
    """
    Convert a raw canvas block into its typed variant.

    Returns None for unknown block kinds or content that does not fit the
    declared kind.
    """
    if isinstance(raw, BaseModel):
        raw = raw.model_dump(by_alias=True)
    if not isinstance(raw, dict):
        return None
    try:
        return _BLOCK_ADAPTER.validate_python(raw)
    except ValidationError as exc:
        logger.debug(
            "Skipping unrecognised canvas block",
            extra={"block_id": raw.get("id"), "block_type": raw.get("type"), "errors": exc.error_count()},
        )
        return None


class CanvasEdge(BaseModel):
    """Wire between two canvas blocks."""

    model_config = ConfigDict(populate_by_name=True)

    id: str
    source: str
    target: str
    source_handle: Optional[str] = Field(None, alias="sourceHandle")
    target_handle: Optional[str] = Field(None, alias="targetHandle")


class PageStatus(str, Enum):
    DRAFT = "draft"
    REVIEW = "review"
    VERIFIED = "verified"
    DEPRECATED = "deprecated"


class PageMetadata(BaseModel):
    """Page metadata (allows arbitrary keys)."""

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    engine_version: Optional[str] = Field(None, alias="engineVersion")
    status: Optional[PageStatus] = None
    owner: Optional[str] = None
    created_at: Optional[str] = Field(None, alias="createdAt")
    updated_at: Optional[str] = Field(None, alias="updatedAt")
    documents_asset: Optional[str] = Field(
        None,
        alias="documentsAsset",
        description="Canonical reference of the asset this page documents",
    )

    @field_validator("status", mode="before")
    @classmethod
    def _drop_unknown_status(cls, value: Any) -> Any:
        if value is None or value in {item.value for item in PageStatus}:
            return value
        return None

    @field_validator("documents_asset", mode="before")
    @classmethod
    def _drop_non_string_asset(cls, value: Any) -> Optional[str]:
        return value if isinstance(value, str) else None


class DocPage(BaseModel):
    """A documentation page with Markdown body and canvas blocks."""

    model_config = ConfigDict(
        populate_by_name=True,
        json_schema_extra={
            "example": {
                "id": "9b2f0c1e",
                "title": "Guard AI",
                "slug": "guard-ai",
                "category": "NPC",
                "tags": ["Actor", "Blueprint"],
                "blocks": [],
                "edges": [],
                "markdownBody": "Patrols via [[Blueprint'/Game/NPC/BP_Guard.BP_Guard']]",
                "viewMode": "document",
                "metadata": {"documentsAsset": "Blueprint'/Game/NPC/BP_Guard.BP_Guard'"},
            }
        },
    )

    id: str = Field(..., min_length=1)
    title: str
    slug: str = ""
    category: str = "General"
    tags: List[str] = Field(default_factory=list)
    blocks: List[Block] = Field(default_factory=list)
    edges: List[CanvasEdge] = Field(default_factory=list)
    markdown_body: str = Field("", alias="markdownBody")
    view_mode: Literal["document", "canvas"] = Field("document", alias="viewMode")
    metadata: PageMetadata = Field(default_factory=PageMetadata)

    @field_validator("blocks", mode="before")
    @classmethod
    def _skip_unknown_blocks(cls, value: Any) -> List[Any]:
        if not isinstance(value, list):
            return []
        parsed = (parse_block(raw) for raw in value)
        return [block.model_dump(by_alias=True) for block in parsed if block is not None]

    @field_validator("category", mode="before")
    @classmethod
    def _default_category(cls, value: Any) -> str:
        if isinstance(value, str) and value.strip():
            return value
        return "General"

    @field_validator("tags", mode="before")
    @classmethod
    def _clean_tags(cls, value: Any) -> List[str]:
        if not isinstance(value, list):
            return []
        cleaned: List[str] = []
        for tag in value:
            if isinstance(tag, str) and tag.strip() and tag.strip() not in cleaned:
                cleaned.append(tag.strip())
        return cleaned

    @field_validator("metadata", mode="before")
    @classmethod
    def _default_metadata(cls, value: Any) -> Any:
        return value if value is not None else {}


class FileSystemNode(BaseModel):
    """Entry in the project's folder tree."""

    model_config = ConfigDict(populate_by_name=True)

    id: str
    name: str
    type: Literal["folder", "page"]
    children: Optional[List["FileSystemNode"]] = None
    page_id: Optional[str] = Field(None, alias="pageId")
    is_open: Optional[bool] = Field(None, alias="isOpen")


class Project(BaseModel):
    """A documentation project: folder tree plus flat page storage."""

    model_config = ConfigDict(populate_by_name=True)

    id: str
    name: str
    structure: List[FileSystemNode] = Field(default_factory=list)
    pages: Dict[str, DocPage] = Field(default_factory=dict)
    media: List[str] = Field(default_factory=list)
    unreal_project_path: Optional[str] = Field(None, alias="unrealProjectPath")

    @field_validator("pages", mode="before")
    @classmethod
    def _skip_invalid_pages(cls, value: Any) -> Dict[str, Any]:
        if not isinstance(value, dict):
            return {}
        pages: Dict[str, Any] = {}
        for page_id, raw in value.items():
            if isinstance(raw, DocPage):
                pages[page_id] = raw
                continue
            try:
                pages[page_id] = DocPage.model_validate(raw)
            except ValidationError as exc:
                logger.warning(
                    "Skipping invalid page",
                    extra={"page_id": page_id, "errors": exc.error_count()},
                )
        return pages

    def page_corpus(self) -> List[DocPage]:
        """Pages in storage order."""
        return list(self.pages.values())


class PageUpdate(BaseModel):
    """Partial page update payload."""

    model_config = ConfigDict(populate_by_name=True)

    title: Optional[str] = None
    category: Optional[str] = None
    tags: Optional[List[str]] = None
    blocks: Optional[List[Dict[str, Any]]] = None
    markdown_body: Optional[str] = Field(None, alias="markdownBody")
    view_mode: Optional[Literal["document", "canvas"]] = Field(None, alias="viewMode")
    metadata: Optional[Dict[str, Any]] = None


__all__ = [
    "Pin",
    "Block",
    "TextBlock",
    "StepsBlock",
    "MediaBlock",
    "BlueprintBlock",
    "BlueprintModalBlock",
    "LinkBlock",
    "CodeBlock",
    "AssetBlock",
    "YoutubeBlock",
    "WebsiteBlock",
    "parse_block",
    "CanvasEdge",
    "PageStatus",
    "PageMetadata",
    "DocPage",
    "FileSystemNode",
    "Project",
    "PageUpdate",
]
