"""Markdown export of documentation pages."""

from __future__ import annotations

from typing import List

import frontmatter

from ..models.project import (
    AssetBlock,
    BlueprintBlock,
    DocPage,
    MediaBlock,
    StepsBlock,
    TextBlock,
)


def _render_block(block: object) -> str:
    if isinstance(block, TextBlock):
        return block.text
    if isinstance(block, StepsBlock):
        steps = "\n".join(f"{index}. {step}" for index, step in enumerate(block.content, start=1))
        return f"## Steps\n\n{steps}"
    if isinstance(block, MediaBlock):
        media = block.content
        if media.kind == "image":
            return f"![{media.label}]({media.file_path})"
        return f'<video src="{media.file_path}" controls></video>'
    if isinstance(block, BlueprintBlock):
        return f"```blueprint\n{block.content.blueprint_string}\n```"
    if isinstance(block, AssetBlock):
        return f"[[{block.content.reference}]]"
    return ""


def export_page_markdown(page: DocPage) -> str:
    """
    Render a page as Markdown.

    Document pages export their body verbatim. Canvas pages get a front
    matter header (title, category) followed by their exportable blocks in
    storage order; other block kinds are left out.
    """
    if page.view_mode == "document":
        return page.markdown_body

    sections: List[str] = []
    for block in page.blocks:
        rendered = _render_block(block)
        if rendered:
            sections.append(rendered)

    post = frontmatter.Post("\n\n".join(sections), title=page.title, category=page.category)
    return frontmatter.dumps(post) + "\n"


__all__ = ["export_page_markdown"]
