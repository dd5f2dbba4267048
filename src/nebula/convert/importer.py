"""Render tree to canonical document tree.

Walks a sanitized render tree (lxml elements, as produced by
``nebula.render.markdown.parse_render_tree``) and builds canonical
``Block``/``Inline`` nodes by tag-name dispatch. Nothing is raised: tags
outside the vocabulary degrade to a plainer node (a ``Paragraph`` at block
level, a ``Span`` inline).

lxml keeps text in ``.text``/``.tail`` rather than in text nodes, so the
walkers go through ``_child_nodes`` which yields text runs and elements in
document order.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable, Iterator
from typing import TYPE_CHECKING

from nebula.models import (
    Block,
    Blockquote,
    Bold,
    Break,
    Cell,
    Code,
    CodeBlock,
    Divider,
    Document,
    Heading,
    Image,
    Inline,
    Italic,
    Item,
    Link,
    ListBlock,
    Paragraph,
    Row,
    Span,
    Strike,
    Table,
    Text,
    now_iso,
)

if TYPE_CHECKING:
    from lxml.html import HtmlElement

logger = logging.getLogger(__name__)

_HEADING_TAG = re.compile(r"h([1-6])")
_LANGUAGE_CLASS = re.compile(r"language-([a-z0-9_+-]+)", re.IGNORECASE)

# Children that make a list item "block-structured" instead of inline text.
_ITEM_BLOCK_TAGS = frozenset(("p", "ul", "ol", "pre", "blockquote", "table"))

type _Node = str | HtmlElement


def import_document(
    root: HtmlElement, title: str, updated_at: str | None = None
) -> Document:
    """Import a render tree as a whole ``Document``.

    Args:
        root: Render-tree container element.
        title: Document title.
        updated_at: ISO-8601 timestamp; defaults to now.
    """
    return Document(
        title=title,
        updated_at=updated_at or now_iso(),
        body=import_blocks(root),
    )


def import_blocks(root: HtmlElement) -> tuple[Block, ...]:
    """Import the children of *root* as top-level blocks."""
    blocks = tuple(
        block
        for block in (_import_block(node) for node in _child_nodes(root))
        if block is not None
    )
    logger.debug("[IMPORT] %d top-level blocks", len(blocks))
    return blocks


def _child_nodes(element: HtmlElement) -> Iterator[_Node]:
    """Yield text runs and child elements of *element* in document order.

    Comments and processing instructions are skipped; their tails are not.
    """
    if element.text:
        yield element.text
    for child in element:
        if isinstance(child.tag, str):
            yield child
        if child.tail:
            yield child.tail


def _import_block(node: _Node) -> Block | None:
    if isinstance(node, str):
        text = node.strip()
        return Paragraph((Text(text),)) if text else None

    tag = node.tag.lower()

    if heading := _HEADING_TAG.fullmatch(tag):
        return Heading(level=int(heading.group(1)), inline=_import_inlines(node))

    match tag:
        case "p":
            image = _sole_image(node)
            if image is not None:
                return image
            return Paragraph(_import_inlines(node))
        case "ul" | "ol":
            items = tuple(
                _import_item(li)
                for li in node
                if isinstance(li.tag, str) and li.tag.lower() == "li"
            )
            return ListBlock(ordered=tag == "ol", items=items)
        case "pre":
            return _import_code_block(node)
        case "blockquote":
            return Blockquote(_import_block_children(node))
        case "hr":
            return Divider()
        case "table":
            return _import_table(node)
        case "img":
            return Image(src=node.get("src") or "", alt=node.get("alt") or "")
        case _:
            return Paragraph(_import_inlines(node))


def _import_block_children(element: HtmlElement) -> tuple[Block, ...]:
    return tuple(
        block
        for block in (_import_block(node) for node in _child_nodes(element))
        if block is not None
    )


def _import_item(li: HtmlElement) -> Item:
    """Import a list item.

    Items containing block-level children are imported block by block;
    otherwise the whole item becomes a single synthetic paragraph.
    """
    has_block = any(
        isinstance(child.tag, str) and child.tag.lower() in _ITEM_BLOCK_TAGS
        for child in li
    )
    if has_block:
        return Item(_import_block_children(li))
    return Item((Paragraph(_import_inlines(li)),))


def _import_code_block(pre: HtmlElement) -> CodeBlock:
    code = pre.find(".//code")
    source = code if code is not None else pre
    text = source.text_content()
    if text.endswith("\n"):
        text = text[:-1]
    return CodeBlock(lang=_code_language(code, pre), text=text)


def _code_language(*elements: HtmlElement | None) -> str:
    for element in elements:
        if element is None:
            continue
        match = _LANGUAGE_CLASS.search(element.get("class") or "")
        if match:
            return match.group(1)
    return ""


def _import_table(table: HtmlElement) -> Table:
    rows = []
    for tr in table.iter("tr"):
        cells = tuple(
            Cell(_import_inlines(cell))
            for cell in tr
            if isinstance(cell.tag, str) and cell.tag.lower() in ("th", "td")
        )
        rows.append(Row(cells))
    return Table(tuple(rows))


def _sole_image(p: HtmlElement) -> Image | None:
    """Return an ``Image`` when a paragraph holds nothing but one ``<img>``."""
    children = [child for child in p if isinstance(child.tag, str)]
    if len(children) != 1 or children[0].tag.lower() != "img":
        return None
    img = children[0]
    if (p.text or "").strip() or (img.tail or "").strip():
        return None
    return Image(src=img.get("src") or "", alt=img.get("alt") or "")


# ---------------------------------------------------------------------------
# Inline content
# ---------------------------------------------------------------------------


def _import_inlines(element: HtmlElement) -> tuple[Inline, ...]:
    return merge_text(
        inline
        for inline in (_import_inline(node) for node in _child_nodes(element))
        if inline is not None
    )


def _import_inline(node: _Node) -> Inline | None:
    if isinstance(node, str):
        return Text(node) if node else None

    match node.tag.lower():
        case "strong" | "b":
            return Bold(_import_inlines(node))
        case "em" | "i":
            return Italic(_import_inlines(node))
        case "del" | "s":
            return Strike(_import_inlines(node))
        case "code":
            return Code(_import_inlines(node))
        case "a":
            return Link(href=node.get("href") or "", children=_import_inlines(node))
        case "br":
            return Break()
        case "img":
            # No inline image in the vocabulary: keep the alt text.
            alt = node.get("alt") or ""
            return Span((Text(alt),) if alt else ())
        case _:
            return Span(_import_inlines(node))


def merge_text(inlines: Iterable[Inline]) -> tuple[Inline, ...]:
    """Merge adjacent ``Text`` runs so equal content has one representation."""
    merged: list[Inline] = []
    for inline in inlines:
        if isinstance(inline, Text) and merged and isinstance(merged[-1], Text):
            merged[-1] = Text(merged[-1].text + inline.text)
        else:
            merged.append(inline)
    return tuple(merged)
